import platform
import sys

from kubestatemetrics.version import Version, get_version


def test_get_version_defaults():
    v = get_version()
    assert v.release == "UNKNOWN"
    assert v.git_commit == "UNKNOWN"
    assert v.build_date == ""


def test_get_version_runtime_details():
    v = get_version()
    assert v.python_version == platform.python_version()
    assert v.platform.startswith(sys.platform + "/")


def test_str_format(monkeypatch):
    monkeypatch.setattr(sys, "argv", ["/usr/bin/ksm"])
    v = Version(
        git_commit="abc",
        build_date="",
        release="v1",
        python_version="3",
        compiler="c",
        platform="linux/amd64",
    )
    assert str(v) == "ksm/v1 (linux/amd64) kube-state-metrics/abc"


def test_str_of_default_version_ends_with_commit():
    assert str(get_version()).endswith(" kube-state-metrics/UNKNOWN")