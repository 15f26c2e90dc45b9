import math

import pytest

from kubestatemetrics.metric import (
    Family,
    FamilyGenerator,
    Metric,
    MetricType,
    ResourceUnit,
    compose_metric_gen_funcs,
    escape_label_value,
    extract_metric_family_headers,
    filter_metric_families,
    format_float,
)

LABEL_KEYS = ["container", "container_id", "image", "image_id", "namespace", "pod"]
LABEL_VALUES = [
    "container2",
    "docker://cd456",
    "k8s.gcr.io/hyperkube2",
    "docker://sha256:bbb",
    "ns2",
    "pod2",
]


def test_family_string():
    m = Metric(label_keys=["namespace"], label_values=["default"], value=1)
    f = Family(name="kube_pod_info", metrics=[m])
    assert f.to_bytes().decode().strip() == 'kube_pod_info{namespace="default"} 1'


@pytest.mark.parametrize("value,expected_length", [(1.0, 145), (35.7, 148)])
def test_metric_render_length(value, expected_length):
    m = Metric(label_keys=LABEL_KEYS, label_values=LABEL_VALUES, value=value)
    assert len(m.render()) == expected_length


@pytest.mark.parametrize(
    "value,expected",
    [
        (1.0, "1"),
        (0.0, "0"),
        (-0.0, "0"),
        (-1.0, "-1"),
        (math.nan, "NaN"),
        (math.inf, "+Inf"),
        (-math.inf, "-Inf"),
        (35.7, "35.7"),
        (-35.7, "-35.7"),
        (100.0, "100"),
        (0.5, "0.5"),
        (123456.0, "123456"),
        (1e6, "1e+06"),
        (1234567.0, "1.234567e+06"),
        (0.0001, "0.0001"),
        (1e-5, "1e-05"),
        (1.5e-7, "1.5e-07"),
        (1e21, "1e+21"),
    ],
)
def test_format_float(value, expected):
    assert format_float(value) == expected


def test_escape_label_value():
    assert escape_label_value('a\\b\n"c"') == 'a\\\\b\\n\\"c\\"'
    assert escape_label_value("plain") == "plain"


def test_render_escapes_values():
    m = Metric(label_keys=["k"], label_values=['x"y'], value=2)
    assert m.render() == '{k="x\\"y"} 2\n'


def test_render_without_labels():
    assert Metric(value=2.5).render() == " 2.5\n"


def test_render_mismatched_labels_raises():
    m = Metric(label_keys=["a", "b"], label_values=["x"], value=1)
    with pytest.raises(ValueError):
        m.render()


def test_family_multiple_metrics_and_empty():
    f = Family(
        name="m",
        metrics=[
            Metric(["a"], ["1"], 1),
            Metric(["a"], ["2"], 0),
        ],
    )
    assert f.to_bytes() == b'm{a="1"} 1\nm{a="2"} 0\n'
    assert Family(name="empty").to_bytes() == b""


def test_enum_values():
    assert ResourceUnit.BYTE.value == "byte"
    assert ResourceUnit("core") is ResourceUnit.CORE
    assert MetricType("counter") is MetricType.COUNTER


def _gen(name, help_text="help text", mtype=MetricType.GAUGE):
    return FamilyGenerator(
        name=name,
        help=help_text,
        type=mtype,
        generate_func=lambda obj: Family(metrics=[Metric(["obj"], [obj], 1)]),
    )


def test_generator_sets_name():
    family = _gen("kube_thing_info").generate("x")
    assert family.name == "kube_thing_info"
    assert family.to_bytes() == b'kube_thing_info{obj="x"} 1\n'


def test_header():
    assert _gen("kube_a", "Info about a.", MetricType.COUNTER).header() == (
        "# HELP kube_a Info about a.\n# TYPE kube_a counter"
    )


def test_extract_headers():
    headers = extract_metric_family_headers([_gen("a", "ha"), _gen("b", "hb")])
    assert headers == [
        "# HELP a ha\n# TYPE a gauge",
        "# HELP b hb\n# TYPE b gauge",
    ]


def test_compose():
    composed = compose_metric_gen_funcs([_gen("a"), _gen("b")])
    families = composed("o")
    assert [f.name for f in families] == ["a", "b"]
    assert families[1].to_bytes() == b'b{obj="o"} 1\n'


class _Lister:
    def __init__(self, allowed):
        self.allowed = allowed

    def is_included(self, item):
        return item in self.allowed

    def is_excluded(self, item):
        return item not in self.allowed


def test_filter_metric_families():
    gens = [_gen("a"), _gen("b"), _gen("c")]
    filtered = filter_metric_families(_Lister({"a", "c"}), gens)
    assert [g.name for g in filtered] == ["a", "c"]