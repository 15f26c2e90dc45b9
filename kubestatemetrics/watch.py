"""Counters of list and watch calls made to the API."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any, Sequence


class CounterVec:
    """A family of counters, one per combination of label values."""

    def __init__(self, name: str, help: str, label_names: Sequence[str]) -> None:
        self.name = name
        self.help = help
        self.label_names = tuple(label_names)
        self._lock = threading.Lock()
        self._counts: dict[tuple[str, ...], float] = {}

    def _key(self, label_values: tuple[str, ...]) -> tuple[str, ...]:
        if len(label_values) != len(self.label_names):
            raise ValueError(
                f"{self.name}: expected {len(self.label_names)} label values, "
                f"got {len(label_values)}"
            )
        return tuple(label_values)

    def inc(self, *args: str) -> None:
        """Increment the counter with the given label values by one."""
        key = self._key(args)
        with self._lock:
            self._counts[key] = self._counts.get(key, 0.0) + 1

    def value(self, *args: str) -> float:
        """Return the current count for the given label values."""
        key = self._key(args)
        with self._lock:
            return self._counts.get(key, 0.0)


class Registry:
    """Holds counters by name; a name may be registered once."""

    def __init__(self) -> None:
        self._collectors: dict[str, CounterVec] = {}

    def register(self, *args: CounterVec) -> None:
        """Register the given counters; raises ValueError on a duplicate name."""
        for collector in args:
            if collector.name in self._collectors:
                raise ValueError(f"duplicate metrics collector registration: {collector.name}")
            self._collectors[collector.name] = collector

    def __contains__(self, name: object) -> bool:
        return name in self._collectors

    def __getitem__(self, name: str) -> CounterVec:
        return self._collectors[name]


@dataclass
class ListWatchMetrics:
    """Counters of watch and list calls by result and resource."""

    watch_total: CounterVec
    list_total: CounterVec


def new_list_watch_metrics(registry: Registry | None) -> ListWatchMetrics:
    """Create the list and watch counters, registering them if a registry is given."""
    metrics = ListWatchMetrics(
        watch_total=CounterVec(
            "kube_state_metrics_watch_total",
            "Number of total resource watches in kube-state-metrics",
            ["result", "resource"],
        ),
        list_total=CounterVec(
            "kube_state_metrics_list_total",
            "Number of total resource list in kube-state-metrics",
            ["result", "resource"],
        ),
    )
    if registry is not None:
        registry.register(metrics.list_total, metrics.watch_total)
    return metrics


class InstrumentedListerWatcher:
    """Wraps a lister-watcher and counts successful and failed calls."""

    def __init__(self, lw: Any, metrics: ListWatchMetrics, resource: str) -> None:
        self.lw = lw
        self.metrics = metrics
        self.resource = resource

    def list(self, options: Any = None) -> Any:
        """List through the wrapped source, counting the outcome."""
        try:
            result = self.lw.list(options)
        except Exception:
            self.metrics.list_total.inc("error", self.resource)
            raise
        self.metrics.list_total.inc("success", self.resource)
        return result

    def watch(self, options: Any = None) -> Any:
        """Watch through the wrapped source, counting the outcome."""
        try:
            result = self.lw.watch(options)
        except Exception:
            self.metrics.watch_total.inc("error", self.resource)
            raise
        self.metrics.watch_total.inc("success", self.resource)
        return result