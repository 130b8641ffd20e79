"""Plate runtime - compile, cache and execute generated programs."""

from plate.runtime.cache import CompiledUnitCache, IdentityKey
from plate.runtime.executor import Executor
from plate.runtime.host import CodeHost, CompiledUnit, PythonHost

__all__ = [
    "CodeHost",
    "CompiledUnit",
    "CompiledUnitCache",
    "Executor",
    "IdentityKey",
    "PythonHost",
]
