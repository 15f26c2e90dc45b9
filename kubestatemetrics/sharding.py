"""Sharding of objects across instances by a hash of their UID."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, Protocol

from kubestatemetrics.metrics_store import object_uid

_FNV64_OFFSET = 0xCBF29CE484222325
_FNV64_PRIME = 0x100000001B3
_MASK64 = (1 << 64) - 1


def fnv1a_64(data: bytes) -> int:
    """Return the 64-bit FNV-1a hash of ``data``."""
    h = _FNV64_OFFSET
    for byte in data:
        h ^= byte
        h = (h * _FNV64_PRIME) & _MASK64
    return h


def jump_hash(key: int, num_buckets: int) -> int:
    """Map ``key`` to a bucket in ``range(num_buckets)`` by jump consistent hashing.

    Returns -1 if ``num_buckets`` is less than one.
    """
    key &= _MASK64
    b, j = -1, 0
    while j < num_buckets:
        b = j
        key = (key * 2862933555777941757 + 1) & _MASK64
        j = int(float(b + 1) * (float(1 << 31) / float((key >> 33) + 1)))
    return b


class ListerWatcher(Protocol):
    """Source of objects and of events about them."""

    def list(self, options: Any) -> Iterable[Any]: ...

    def watch(self, options: Any) -> Iterable[Any]: ...


@dataclass(frozen=True)
class Sharding:
    """One shard out of a total number of shards."""

    shard: int
    total_shards: int

    def keep(self, obj: Any) -> bool:
        """Return whether ``obj`` belongs to this shard."""
        key = fnv1a_64(object_uid(obj).encode("utf-8"))
        return jump_hash(key, self.total_shards) == self.shard


def _event_object(event: Any) -> Any:
    if isinstance(event, Mapping):
        return event.get("object")
    return getattr(event, "object", None)


class ShardedListWatch:
    """Wraps a lister-watcher, passing on only the objects of one shard."""

    def __init__(self, sharding: Sharding, lw: ListerWatcher) -> None:
        self.sharding = sharding
        self.lw = lw

    def list(self, options: Any = None) -> list[Any]:
        """List the wrapped source's objects that belong to this shard."""
        return [item for item in self.lw.list(options) if self.sharding.keep(item)]

    def watch(self, options: Any = None) -> Iterator[Any]:
        """Yield the wrapped source's events whose object belongs to this shard.

        Events whose object carries no metadata are passed on unfiltered.
        """
        for event in self.lw.watch(options):
            try:
                keep = self.sharding.keep(_event_object(event))
            except TypeError:
                keep = True
            if keep:
                yield event


def new_sharded_list_watch(shard: int, total_shards: int, lw: ListerWatcher) -> Any:
    """Wrap ``lw`` for sharding, or return it as is when there is one shard."""
    if shard == 0 and total_shards == 1:
        return lw
    return ShardedListWatch(Sharding(shard, total_shards), lw)