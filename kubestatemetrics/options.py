"""Command-line options and the set and list types their flags fill."""

from __future__ import annotations

import argparse
import os
import sys
from dataclasses import dataclass, field
from typing import Iterable, Sequence

NAMESPACE_ALL = ""

_TRUE_LITERALS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_LITERALS = frozenset({"0", "f", "F", "FALSE", "false", "False"})


def _split_csv(value: str) -> Iterable[str]:
    """Yield the non-empty, stripped items of a comma-separated string."""
    return (item for item in (part.strip() for part in value.split(",")) if item)


class MetricSet(set):
    """A set of metric names or patterns."""

    def update_from_csv(self, value: str) -> None:
        """Add every non-empty item of a comma-separated string."""
        self.update(_split_csv(value))

    def is_empty(self) -> bool:
        """Return whether the set holds no metrics."""
        return not self

    def __str__(self) -> str:
        return ",".join(sorted(self))


class CollectorSet(set):
    """A set of collector names."""

    def update_from_csv(self, value: str) -> None:
        """Add every non-empty item of a comma-separated string."""
        self.update(_split_csv(value))

    def as_list(self) -> list[str]:
        """Return the collectors as a sorted list."""
        return sorted(self)

    def __str__(self) -> str:
        return ",".join(sorted(self))


class NamespaceList(list):
    """An ordered list of namespaces to query."""

    def update_from_csv(self, value: str) -> None:
        """Append every non-empty item of a comma-separated string."""
        self.extend(_split_csv(value))

    def is_all_namespaces(self) -> bool:
        """Return whether the list selects all namespaces."""
        return len(self) == 1 and self[0] == NAMESPACE_ALL

    def __str__(self) -> str:
        return ",".join(self)


DEFAULT_NAMESPACES = NamespaceList([NAMESPACE_ALL])

DEFAULT_COLLECTORS = CollectorSet(
    {
        "certificatesigningrequests",
        "configmaps",
        "cronjobs",
        "daemonsets",
        "deployments",
        "endpoints",
        "horizontalpodautoscalers",
        "ingresses",
        "jobs",
        "limitranges",
        "namespaces",
        "nodes",
        "persistentvolumes",
        "persistentvolumeclaims",
        "poddisruptionbudgets",
        "pods",
        "replicasets",
        "replicationcontrollers",
        "resourcequotas",
        "secrets",
        "services",
        "statefulsets",
        "storageclasses",
    }
)


class OptionsError(ValueError):
    """Raised when the command line cannot be parsed."""


class _Parser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        raise OptionsError(message)


class _CsvAction(argparse.Action):
    """Feeds a comma-separated value into the collection already on the target."""

    def __call__(self, parser, namespace, values, option_string=None):
        getattr(namespace, self.dest).update_from_csv(values)


_AUTOSHARDING_NOTICE = (
    "When set, it is expected that --pod and --pod-namespace are both set. "
    "Most likely this should be passed via the downward API. This is used for "
    "auto-detecting sharding. If set, this has preference over statically "
    "configured sharding. This is experimental, it may be removed without notice."
)

# (flag name, short flag, destination, help)
_BOOL_FLAGS: tuple[tuple[str, str | None, str, str], ...] = (
    ("help", "-h", "help", "Print Help text"),
    ("version", None, "version", "kube-state-metrics build version information"),
    (
        "disable-pod-non-generic-resource-metrics",
        None,
        "disable_pod_non_generic_resource_metrics",
        "Disable pod non generic resource request and limit metrics",
    ),
    (
        "disable-node-non-generic-resource-metrics",
        None,
        "disable_node_non_generic_resource_metrics",
        "Disable node non generic resource request and limit metrics",
    ),
    (
        "enable-gzip-encoding",
        None,
        "enable_gzip_encoding",
        "Gzip responses when requested by clients via 'Accept-Encoding: gzip' header.",
    ),
    ("logtostderr", None, "logtostderr", "log to standard error instead of files (default true)"),
)

_BOOL_FLAG_NAMES = frozenset(name for name, _, _, _ in _BOOL_FLAGS)


def _normalize_bool_flags(argv: Sequence[str]) -> list[str]:
    """Rewrite ``--flag=value`` for boolean flags into the forms the parser knows."""
    result: list[str] = []
    args = iter(argv)
    for token in args:
        if token == "--":
            result.append(token)
            result.extend(args)
            break
        if token.startswith("--") and "=" in token:
            name, value = token[2:].split("=", 1)
            if name in _BOOL_FLAG_NAMES:
                if value in _TRUE_LITERALS:
                    token = f"--{name}"
                elif value in _FALSE_LITERALS:
                    token = f"--{name}=false"
                else:
                    raise OptionsError(
                        f'invalid argument "{value}" for "--{name}" flag: '
                        f"invalid syntax"
                    )
        result.append(token)
    return result


@dataclass
class Options:
    """The configurable parameters of the exporter."""

    apiserver: str = ""
    kubeconfig: str = ""
    help: bool = False
    port: int = 80
    host: str = "0.0.0.0"
    telemetry_port: int = 81
    telemetry_host: str = "0.0.0.0"
    collectors: CollectorSet = field(default_factory=CollectorSet)
    namespaces: NamespaceList = field(default_factory=NamespaceList)
    shard: int = 0
    total_shards: int = 1
    pod: str = ""
    namespace: str = ""
    metric_blacklist: MetricSet = field(default_factory=MetricSet)
    metric_whitelist: MetricSet = field(default_factory=MetricSet)
    version: bool = False
    disable_pod_non_generic_resource_metrics: bool = False
    disable_node_non_generic_resource_metrics: bool = False
    enable_gzip_encoding: bool = False
    logtostderr: bool = True
    verbosity: int = 0
    args: list[str] = field(default_factory=list)

    @staticmethod
    def _build_parser() -> argparse.ArgumentParser:
        parser = _Parser(prog=os.path.basename(sys.argv[0]) if sys.argv else "", add_help=False, allow_abbrev=False)

        for name, short, dest, help_text in _BOOL_FLAGS:
            strings = [short, f"--{name}"] if short else [f"--{name}"]
            parser.add_argument(*strings, dest=dest, action="store_const", const=True, help=help_text)
            parser.add_argument(
                f"--{name}=false",
                dest=dest,
                action="store_const",
                const=False,
                help=argparse.SUPPRESS,
            )

        parser.add_argument("--apiserver", help="The URL of the apiserver to use as a master")
        parser.add_argument("--kubeconfig", help="Absolute path to the kubeconfig file")
        parser.add_argument("--port", type=int, help="Port to expose metrics on. (default 80)")
        parser.add_argument("--host", help='Host to expose metrics on. (default "0.0.0.0")')
        parser.add_argument(
            "--telemetry-port",
            dest="telemetry_port",
            type=int,
            help="Port to expose kube-state-metrics self metrics on. (default 81)",
        )
        parser.add_argument(
            "--telemetry-host",
            dest="telemetry_host",
            help='Host to expose kube-state-metrics self metrics on. (default "0.0.0.0")',
        )
        parser.add_argument(
            "--collectors",
            action=_CsvAction,
            help=f'Comma-separated list of collectors to be enabled. Defaults to "{DEFAULT_COLLECTORS}"',
        )
        parser.add_argument(
            "--namespace",
            dest="namespaces",
            action=_CsvAction,
            help=f'Comma-separated list of namespaces to be enabled. Defaults to "{DEFAULT_NAMESPACES}"',
        )
        parser.add_argument(
            "--metric-whitelist",
            dest="metric_whitelist",
            action=_CsvAction,
            help="Comma-separated list of metrics to be exposed. This list comprises of exact "
            "metric names and/or regex patterns. The whitelist and blacklist are mutually exclusive.",
        )
        parser.add_argument(
            "--metric-blacklist",
            dest="metric_blacklist",
            action=_CsvAction,
            help="Comma-separated list of metrics not to be enabled. This list comprises of exact "
            "metric names and/or regex patterns. The whitelist and blacklist are mutually exclusive.",
        )
        parser.add_argument(
            "--shard",
            type=int,
            help="The instances shard nominal (zero indexed) within the total number of shards. (default 0)",
        )
        parser.add_argument(
            "--total-shards",
            dest="total_shards",
            type=int,
            help="The total number of shards. Sharding is disabled when total shards is set to 1. (default 1)",
        )
        parser.add_argument(
            "--pod",
            help="Name of the pod that contains the kube-state-metrics container. " + _AUTOSHARDING_NOTICE,
        )
        parser.add_argument(
            "--pod-namespace",
            dest="namespace",
            help="Name of the namespace of the pod specified by --pod. " + _AUTOSHARDING_NOTICE,
        )
        parser.add_argument(
            "-v", "--v", dest="verbosity", type=int, help="number for the log level verbosity"
        )
        parser.add_argument("args", nargs="*", help=argparse.SUPPRESS)
        return parser

    def parse(self, argv: Sequence[str] | None = None) -> None:
        """Fill the options from ``argv`` (default: the process arguments).

        Collection flags add to what is already set. Raises OptionsError
        on an unknown flag or an invalid value.
        """
        if argv is None:
            argv = sys.argv[1:]
        tokens = _normalize_bool_flags(list(argv))
        self._build_parser().parse_intermixed_args(tokens, namespace=self)

    def usage(self) -> None:
        """Print the usage text to standard error."""
        parser = self._build_parser()
        sys.stderr.write(f"Usage of {parser.prog}:\n")
        sys.stderr.write(parser.format_help())