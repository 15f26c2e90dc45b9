import pytest

from kubestatemetrics.options import (
    DEFAULT_COLLECTORS,
    DEFAULT_NAMESPACES,
    CollectorSet,
    MetricSet,
    NamespaceList,
    Options,
    OptionsError,
)


@pytest.mark.parametrize(
    "value, wanted",
    [
        ("", set()),
        (
            "configmaps,cronjobs,daemonsets,deployments",
            {"configmaps", "cronjobs", "daemonsets", "deployments"},
        ),
    ],
)
def test_collector_set_update_from_csv(value, wanted):
    cs = CollectorSet()
    cs.update_from_csv(value)
    assert cs == wanted


@pytest.mark.parametrize(
    "value, wanted",
    [
        ("", []),
        ("default, kube-system", ["default", "kube-system"]),
    ],
)
def test_namespace_list_update_from_csv(value, wanted):
    ns = NamespaceList()
    ns.update_from_csv(value)
    assert ns == wanted


@pytest.mark.parametrize(
    "value, wanted",
    [
        ("", set()),
        (
            "kube_cronjob_info, kube_cronjob_labels, kube_daemonset_labels",
            {"kube_cronjob_info", "kube_cronjob_labels", "kube_daemonset_labels"},
        ),
    ],
)
def test_metric_set_update_from_csv(value, wanted):
    ms = MetricSet()
    ms.update_from_csv(value)
    assert ms == wanted


def test_metric_set_is_empty():
    ms = MetricSet()
    assert ms.is_empty() is True
    ms.update_from_csv(" , ,")
    assert ms.is_empty() is True
    ms.update_from_csv("a")
    assert ms.is_empty() is False


def test_sets_render_sorted():
    ms = MetricSet()
    ms.update_from_csv("b,a,c")
    assert str(ms) == "a,b,c"
    cs = CollectorSet()
    cs.update_from_csv("pods,configmaps")
    assert str(cs) == "configmaps,pods"
    assert cs.as_list() == ["configmaps", "pods"]


def test_namespace_list_keeps_order_and_duplicates():
    ns = NamespaceList()
    ns.update_from_csv("b,a")
    ns.update_from_csv("b")
    assert ns == ["b", "a", "b"]
    assert str(ns) == "b,a,b"


def test_is_all_namespaces():
    assert DEFAULT_NAMESPACES.is_all_namespaces() is True
    assert NamespaceList(["default"]).is_all_namespaces() is False
    assert NamespaceList().is_all_namespaces() is False
    assert NamespaceList(["", "default"]).is_all_namespaces() is False


def test_default_collectors():
    collectors = DEFAULT_COLLECTORS.as_list()
    assert len(collectors) == 23
    assert "pods" in collectors
    assert collectors[:3] == ["certificatesigningrequests", "configmaps", "cronjobs"]
    assert str(DEFAULT_COLLECTORS).startswith("certificatesigningrequests,configmaps,cronjobs")


@pytest.mark.parametrize(
    "args, attribute, wanted",
    [
        (["./kube-state-metrics", "--collectors=configmaps,pods"], "collectors", {"configmaps", "pods"}),
        (
            ["./kube-state-metrics", "--namespace=default,kube-system"],
            "namespaces",
            ["default", "kube-system"],
        ),
    ],
)
def test_options_parse(args, attribute, wanted):
    opts = Options()
    opts.parse(args)
    assert getattr(opts, attribute) == wanted
    assert opts.args == ["./kube-state-metrics"]


def test_options_defaults():
    opts = Options()
    opts.parse([])
    assert opts.port == 80
    assert opts.host == "0.0.0.0"
    assert opts.telemetry_port == 81
    assert opts.telemetry_host == "0.0.0.0"
    assert opts.shard == 0
    assert opts.total_shards == 1
    assert opts.help is False
    assert opts.enable_gzip_encoding is False
    assert opts.logtostderr is True
    assert opts.collectors == set()
    assert opts.namespaces == []


def test_options_parse_values():
    opts = Options()
    opts.parse(
        [
            "--port", "8080",
            "--telemetry-port=8081",
            "--shard=2",
            "--total-shards", "5",
            "--pod", "ksm-2",
            "--pod-namespace", "monitoring",
            "--metric-whitelist", "kube_pod_info",
            "--metric-whitelist=kube_node_.*",
        ]
    )
    assert opts.port == 8080
    assert opts.telemetry_port == 8081
    assert opts.shard == 2
    assert opts.total_shards == 5
    assert opts.pod == "ksm-2"
    assert opts.namespace == "monitoring"
    assert opts.metric_whitelist == {"kube_pod_info", "kube_node_.*"}
    assert opts.metric_blacklist.is_empty()


@pytest.mark.parametrize(
    "args, wanted",
    [
        (["--enable-gzip-encoding"], True),
        (["--enable-gzip-encoding=true"], True),
        (["--enable-gzip-encoding=T"], True),
        (["--enable-gzip-encoding=false"], False),
        (["--enable-gzip-encoding", "--enable-gzip-encoding=0"], False),
        (["--enable-gzip-encoding=0", "--enable-gzip-encoding"], True),
    ],
)
def test_bool_flag_forms(args, wanted):
    opts = Options()
    opts.parse(args)
    assert opts.enable_gzip_encoding is wanted


def test_logtostderr_can_be_disabled():
    opts = Options()
    opts.parse(["--logtostderr=false"])
    assert opts.logtostderr is False


def test_short_help_flag():
    opts = Options()
    opts.parse(["-h"])
    assert opts.help is True


def test_invalid_bool_value():
    with pytest.raises(OptionsError, match="enable-gzip-encoding"):
        Options().parse(["--enable-gzip-encoding=maybe"])


def test_invalid_int_value():
    with pytest.raises(OptionsError):
        Options().parse(["--port=eighty"])


def test_unknown_flag():
    with pytest.raises(OptionsError):
        Options().parse(["--no-such-flag"])


def test_no_abbreviations():
    with pytest.raises(OptionsError):
        Options().parse(["--collect=pods"])


def test_usage_prints_flags(capsys):
    Options().usage()
    err = capsys.readouterr().err
    assert err.startswith("Usage of ")
    assert "--collectors" in err
    assert "--pod-namespace" in err
    assert "=false" not in err