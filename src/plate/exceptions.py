"""Plate Exceptions

Every failure raised by the engine derives from PlateError so callers can
catch one type around `render`.
"""

from __future__ import annotations


class PlateError(Exception):
    """Base exception for all plate errors."""

    def __init__(self, message: str, line: int | None = None):
        self.message = message
        self.line = line
        super().__init__(message)

    def add_prefix(self, prefix: str) -> "PlateError":
        """Prefix the message in place and return self.

        Used to attach the template file name on the way out of `render`,
        keeping the traceback and chained cause intact.
        """
        self.message = f"{prefix}: {self.message}"
        self.args = (self.message,)
        return self

    def __str__(self) -> str:
        return self.message


class TemplateSyntaxError(PlateError):
    """Raised when the tag grammar is violated."""

    pass


class TemplateCompileError(PlateError):
    """Raised when the generated program cannot be loaded."""

    pass


class TemplateRuntimeError(PlateError):
    """Raised when template code fails while the entry point runs."""

    def __init__(
        self,
        message: str,
        line: int | None = None,
        original: BaseException | None = None,
    ):
        self.original = original
        super().__init__(message, line)


class TemplateResourceError(PlateError):
    """Raised when a named template cannot be read."""

    pass


class TemplateNotFoundError(TemplateResourceError):
    """Raised when a named template is not found in the search path."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"{name}: not found in search path")


class UndefinedValueWarning(UserWarning):
    """Issued when template code emits an undefined (None) value."""

    pass
