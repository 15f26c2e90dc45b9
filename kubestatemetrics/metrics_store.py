"""A store that keeps rendered metrics per object instead of the objects."""

from __future__ import annotations

import threading
from collections.abc import Mapping
from typing import Any, BinaryIO, Callable, Iterable, Protocol, Sequence


class FamilyBytes(Protocol):
    """A metric family that can be rendered to bytes."""

    def to_bytes(self) -> bytes: ...


def object_uid(obj: Any) -> str:
    """Return the UID from an object's metadata.

    Accepts mappings with a ``metadata`` mapping as well as objects with a
    ``metadata`` attribute. Raises TypeError if there is no metadata.
    """
    if isinstance(obj, Mapping):
        metadata = obj.get("metadata")
    else:
        metadata = getattr(obj, "metadata", None)
    if metadata is None:
        raise TypeError(f"object {obj!r} has no metadata")
    if isinstance(metadata, Mapping):
        uid = metadata.get("uid", "")
    else:
        uid = getattr(metadata, "uid", "")
    return str(uid or "")


class MetricsStore:
    """Keeps the metrics generated from each object, keyed by object UID."""

    def __init__(
        self,
        headers: Sequence[str],
        generate_func: Callable[[Any], Iterable[FamilyBytes]],
    ) -> None:
        self._lock = threading.Lock()
        self._metrics: dict[str, list[bytes]] = {}
        self.headers = list(headers)
        self.generate_func = generate_func

    def add(self, obj: Any) -> None:
        """Generate metrics for ``obj`` and store them under its UID."""
        uid = object_uid(obj)
        with self._lock:
            families = self.generate_func(obj)
            self._metrics[uid] = [f.to_bytes() for f in families]

    def update(self, obj: Any) -> None:
        """Regenerate the metrics of an existing object."""
        self.add(obj)

    def delete(self, obj: Any) -> None:
        """Remove the metrics of ``obj``."""
        uid = object_uid(obj)
        with self._lock:
            self._metrics.pop(uid, None)

    def list(self) -> list[Any]:
        """Objects are not kept, so the list is always empty."""
        return []

    def list_keys(self) -> list[str]:
        """Objects are not kept, so there are no keys."""
        return []

    def get(self, obj: Any) -> tuple[Any, bool]:
        """Return the rendered families stored for ``obj`` and whether any exist."""
        return self.get_by_key(object_uid(obj))

    def get_by_key(self, key: str) -> tuple[Any, bool]:
        """Return the rendered families stored under a UID and whether any exist."""
        with self._lock:
            families = self._metrics.get(key)
        if families is None:
            return None, False
        return list(families), True

    def replace(self, items: Iterable[Any], resource_version: str = "") -> None:
        """Drop all stored metrics and add the given objects."""
        with self._lock:
            self._metrics = {}
        for obj in items:
            self.add(obj)

    def resync(self) -> None:
        """Check that every stored object has one rendered family per header.

        Objects themselves are not kept, so there is nothing to regenerate.
        Raises ValueError if an entry does not line up with the headers.
        """
        with self._lock:
            expected = len(self.headers)
            for uid, families in self._metrics.items():
                if len(families) != expected:
                    raise ValueError(
                        f"object {uid!r} has {len(families)} metric families, "
                        f"expected {expected}"
                    )

    def write_all(self, stream: BinaryIO) -> None:
        """Write every family's header followed by its metrics for all objects."""
        with self._lock:
            for i, header in enumerate(self.headers):
                stream.write(header.encode("utf-8"))
                stream.write(b"\n")
                for families in self._metrics.values():
                    stream.write(families[i])