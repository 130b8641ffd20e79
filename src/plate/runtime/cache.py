"""Compiled-unit cache

Units are keyed by the identity of the file they were generated from. A
changed file gets a new identity and therefore a new unit; old units are
never invalidated and, unless a size bound is set, never dropped.
"""

from __future__ import annotations

import itertools
import logging
import os
from collections import OrderedDict
from typing import NamedTuple

from plate.runtime.host import CodeHost, CompiledUnit, PythonHost

log = logging.getLogger(__name__)

CACHED_PREFIX = "plate.cached"
UNCACHED_PREFIX = "plate.uncached"

# Process-wide, so uncached namespaces never collide across caches.
_uncached_counter = itertools.count()


class IdentityKey(NamedTuple):
    """Device, inode and modification time of a template file."""

    device: int
    inode: int
    mtime_ns: int

    @classmethod
    def from_stat(cls, st: os.stat_result) -> "IdentityKey":
        return cls(st.st_dev, st.st_ino, st.st_mtime_ns)

    @property
    def namespace_id(self) -> str:
        return f"{CACHED_PREFIX}.{self.device}_{self.inode}_{self.mtime_ns}"


def uncached_namespace_id() -> str:
    """A fresh namespace id for a source without identity."""
    return f"{UNCACHED_PREFIX}.{next(_uncached_counter)}"


class CompiledUnitCache:
    """Maps identity keys to compiled units.

    Not thread-safe: lookups and installs are expected to come from a single
    thread of control.

    Args:
        host: Code host used to load programs. Defaults to PythonHost.
        max_size: If set, least recently used units beyond this count are
            dropped.
    """

    def __init__(self, host: CodeHost | None = None, max_size: int | None = None):
        if max_size is not None and max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.host = host or PythonHost()
        self.max_size = max_size
        self._units: OrderedDict[IdentityKey, CompiledUnit] = OrderedDict()

    def __len__(self) -> int:
        return len(self._units)

    def __contains__(self, key: object) -> bool:
        return key in self._units

    def lookup(self, key: IdentityKey | None) -> CompiledUnit | None:
        """Return the compiled unit for `key`, or None if it must be compiled."""
        if key is None:
            return None
        unit = self._units.get(key)
        if unit is None or not unit.compiled:
            log.debug(f"Cache miss for {key.namespace_id}")
            return None
        self._units.move_to_end(key)
        log.debug(f"Cache hit for {key.namespace_id}")
        return unit

    def install(
        self,
        key: IdentityKey | None,
        program: str,
        filename: str,
        line_offset: int = 0,
    ) -> CompiledUnit:
        """Load `program` into the namespace of `key` and remember it.

        Installing a key that already holds a compiled unit returns that
        unit without loading the program again. A None key always loads into
        a fresh namespace and is not remembered.
        """
        existing = self.lookup(key)
        if existing is not None:
            return existing

        namespace_id = key.namespace_id if key else uncached_namespace_id()
        log.debug(f"Using namespace {namespace_id}")
        unit = self.host.load(namespace_id, program, filename, line_offset)
        if key is not None:
            self._units[key] = unit
            self._units.move_to_end(key)
            self._evict()
        return unit

    def clear(self) -> None:
        self._units.clear()

    def _evict(self) -> None:
        if self.max_size is None:
            return
        while len(self._units) > self.max_size:
            key, _ = self._units.popitem(last=False)
            log.debug(f"Evicted {key.namespace_id}")
