"""Code hosts

A CodeHost loads generated program text into an isolated namespace and calls
its entry point. The engine depends only on this interface.
"""

from __future__ import annotations

import logging
import traceback
import types
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from plate.compiler.spec import COMPILED_FLAG, ENTRY_POINT
from plate.exceptions import TemplateCompileError

log = logging.getLogger(__name__)


@dataclass
class CompiledUnit:
    """A generated program loaded into its own namespace."""

    namespace_id: str
    filename: str
    module: types.ModuleType
    line_offset: int = 0  # program lines preceding template line 1

    @property
    def namespace(self) -> dict[str, Any]:
        return self.module.__dict__

    @property
    def compiled(self) -> bool:
        """True once the program ran to the end and set its marker."""
        return bool(self.namespace.get(COMPILED_FLAG))

    def template_line(self, program_line: int | None) -> int | None:
        """Map a program line number back to the template source."""
        if program_line is None:
            return None
        return max(program_line - self.line_offset, 1)

    def failing_line(self, exc: BaseException) -> int | None:
        """Template line of the innermost traceback frame running in this unit."""
        line = None
        for frame, lineno in traceback.walk_tb(exc.__traceback__):
            if frame.f_globals is self.namespace:
                line = lineno
        return self.template_line(line)


class CodeHost(ABC):
    """Abstract base class for code hosts."""

    @abstractmethod
    def load(
        self, namespace_id: str, program: str, filename: str, line_offset: int = 0
    ) -> CompiledUnit:
        """Load program text into a fresh namespace.

        Args:
            namespace_id: Unique name of the namespace.
            program: Generated program text.
            filename: Name reported in tracebacks.
            line_offset: Program lines preceding template line 1.

        Returns:
            The loaded CompiledUnit.

        Raises:
            TemplateCompileError: If the program cannot be loaded.
        """
        pass

    @abstractmethod
    def invoke(self, unit: CompiledUnit, options: Any, params: dict[str, Any]) -> str:
        """Call the unit's entry point and return its output."""
        pass


class PythonHost(CodeHost):
    """Hosts generated programs as Python modules.

    Each unit gets its own ModuleType; nothing is registered in sys.modules,
    so the module lives exactly as long as the unit does.
    """

    def load(
        self, namespace_id: str, program: str, filename: str, line_offset: int = 0
    ) -> CompiledUnit:
        module = types.ModuleType(namespace_id)
        module.__file__ = filename
        unit = CompiledUnit(namespace_id, filename, module, line_offset)

        try:
            code = compile(program, filename, "exec")
        except SyntaxError as exc:
            line = unit.template_line(exc.lineno)
            raise TemplateCompileError(
                f"{exc.msg} on line {line}", line=line
            ) from exc

        log.debug(f"Loading {filename} into namespace {namespace_id}")
        try:
            exec(code, module.__dict__)
        except Exception as exc:
            raise TemplateCompileError(
                f"{type(exc).__name__}: {exc}",
                line=unit.failing_line(exc),
            ) from exc
        return unit

    def invoke(self, unit: CompiledUnit, options: Any, params: dict[str, Any]) -> str:
        entry = unit.namespace.get(ENTRY_POINT)
        if not callable(entry):
            raise TemplateCompileError(
                f"{unit.filename} does not define {ENTRY_POINT}()"
            )
        return entry(options, params)

