"""The main /metrics endpoint, with runtime reconfiguration of sharding."""

from __future__ import annotations

import gzip
import io
import logging
import re
import threading
from typing import Any, BinaryIO, Callable, Iterable, Protocol

from kubestatemetrics.options import Options

logger = logging.getLogger(__name__)

CONTENT_TYPE = "text/plain; version=0.0.4"

_ATOI = re.compile(r"[+-]?[0-9]+")


class _Writable(Protocol):
    def write_all(self, stream: BinaryIO) -> None: ...


StoreBuilder = Callable[[int, int, threading.Event], Iterable[_Writable]]


def _to_int32(value: int) -> int:
    return ((value + 2**31) % 2**32) - 2**31


def detect_nominal_from_pod(stateful_set_name: str, pod_name: str) -> int:
    """Return the ordinal of ``pod_name`` within its StatefulSet.

    Raises ValueError if the pod name carries no integer ordinal.
    """
    prefix = stateful_set_name + "-"
    nominal = pod_name[len(prefix):] if pod_name.startswith(prefix) else pod_name
    if not _ATOI.fullmatch(nominal):
        raise ValueError(
            f"failed to detect shard index for Pod {pod_name} of StatefulSet "
            f"{stateful_set_name}, parsed {nominal}"
        )
    return _to_int32(int(nominal))


def sharding_settings_from_stateful_set(
    stateful_set_name: str, replicas: int | None, pod_name: str
) -> tuple[int, int]:
    """Return ``(shard, total_shards)`` for a pod of the given StatefulSet.

    Without a replica count the StatefulSet counts as one replica.
    """
    try:
        nominal = detect_nominal_from_pod(stateful_set_name, pod_name)
    except ValueError as err:
        raise ValueError(f"detecting Pod nominal: {err}") from err
    total = 1 if replicas is None else int(replicas)
    return nominal, total


def accepts_gzip(accept_encoding: str | None) -> bool:
    """Return whether an Accept-Encoding header value asks for gzip."""
    for part in (accept_encoding or "").split(","):
        part = part.strip()
        if part == "gzip" or part.startswith("gzip;"):
            return True
    return False


class MetricsHandler:
    """Serves the metrics of its stores; sharding can be changed at runtime.

    ``store_builder`` is called with the shard, the total number of shards
    and an event that is set once the stores it built are superseded.
    """

    def __init__(
        self,
        store_builder: StoreBuilder,
        opts: Options | None = None,
        enable_gzip_encoding: bool = False,
        stateful_set_name: str | None = None,
    ) -> None:
        self.opts = opts if opts is not None else Options()
        self.store_builder = store_builder
        self.enable_gzip_encoding = enable_gzip_encoding
        self.stateful_set_name = stateful_set_name
        self._lock = threading.Lock()
        self._stop: threading.Event | None = None
        self.stores: list[_Writable] = []
        self.shard = 0
        self.total_shards = 0

    def configure_sharding(self, shard: int, total_shards: int) -> None:
        """Rebuild the stores for the given shard, stopping the previous ones."""
        with self._lock:
            if self._stop is not None:
                self._stop.set()
            if total_shards != 1:
                logger.info(
                    "configuring sharding of this instance to be shard index %d "
                    "(zero-indexed) out of %d total shards",
                    shard,
                    total_shards,
                )
            self._stop = threading.Event()
            self.stores = list(self.store_builder(shard, total_shards, self._stop))
            self.shard = shard
            self.total_shards = total_shards

    def on_stateful_set_event(self, stateful_set_name: str, replicas: int | None) -> bool:
        """React to an added or changed StatefulSet.

        Returns True if sharding was reconfigured.
        """
        if self.stateful_set_name is not None and stateful_set_name != self.stateful_set_name:
            return False
        try:
            shard, total = sharding_settings_from_stateful_set(
                stateful_set_name, replicas, self.opts.pod
            )
        except ValueError as err:
            logger.error("detect sharding settings from StatefulSet: %s", err)
            return False
        with self._lock:
            unchanged = self.shard == shard and self.total_shards == total
        if unchanged:
            return False
        self.configure_sharding(shard, total)
        return True

    def render(self, accept_encoding: str | None = None) -> tuple[dict[str, str], bytes]:
        """Return the response headers and body for a metrics request."""
        headers = {"Content-Type": CONTENT_TYPE}
        buffer = io.BytesIO()
        with self._lock:
            for store in self.stores:
                store.write_all(buffer)
        body = buffer.getvalue()
        if self.enable_gzip_encoding and accepts_gzip(accept_encoding):
            headers["Content-Encoding"] = "gzip"
            body = gzip.compress(body)
        return headers, body

    def __call__(self, environ: dict[str, Any], start_response: Callable[..., Any]) -> list[bytes]:
        headers, body = self.render(environ.get("HTTP_ACCEPT_ENCODING"))
        header_list = list(headers.items()) + [("Content-Length", str(len(body)))]
        start_response("200 OK", header_list)
        return [body]