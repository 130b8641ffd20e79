"""Executor - invokes compiled units.

State is handed to the entry point as arguments and the output accumulator
is created inside each call, so a unit may be invoked again while one of its
calls is still running (templates rendering themselves).
"""

from __future__ import annotations

import logging
from typing import Any

from plate.exceptions import PlateError, TemplateRuntimeError
from plate.runtime.host import CodeHost, CompiledUnit

log = logging.getLogger(__name__)


class Executor:
    """Calls compiled units through a code host."""

    def __init__(self, host: CodeHost):
        self.host = host
        self.depth = 0

    def invoke(self, unit: CompiledUnit, options: Any) -> str:
        """Run `unit` with `options` and return its joined output.

        Errors raised by nested renders are already plate errors and pass
        through untouched; anything else is wrapped in TemplateRuntimeError.
        """
        params = getattr(options, "params", None) or {}
        self.depth += 1
        log.debug(f"Invoking {unit.namespace_id} (depth {self.depth})")
        try:
            return self.host.invoke(unit, options, params)
        except PlateError:
            raise
        except Exception as exc:
            line = unit.failing_line(exc)
            where = f" on line {line}" if line is not None else ""
            raise TemplateRuntimeError(
                f"{type(exc).__name__}{where}: {exc}", line=line, original=exc
            ) from exc
        finally:
            self.depth -= 1
