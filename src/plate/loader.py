"""Template loader - locates template files and reports their identity."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import BinaryIO, Sequence

from plate.exceptions import TemplateNotFoundError, TemplateResourceError
from plate.runtime.cache import IdentityKey

log = logging.getLogger(__name__)


class TemplateFile:
    """An opened template file.

    The identity is taken from the open handle, so it describes exactly the
    bytes that `read` returns. Use as a context manager.
    """

    def __init__(self, name: str, path: Path, handle: BinaryIO):
        self.name = name
        self.path = path
        self._handle = handle
        try:
            self.identity: IdentityKey | None = IdentityKey.from_stat(
                os.fstat(handle.fileno())
            )
        except OSError as exc:
            log.debug(f"No identity for {path}: {exc}")
            self.identity = None

    def read(self, encoding: str = "utf-8") -> str:
        try:
            return self._handle.read().decode(encoding)
        except (OSError, UnicodeDecodeError) as exc:
            raise TemplateResourceError(f"{self.path}: {exc}") from exc

    def close(self) -> None:
        self._handle.close()

    def __enter__(self) -> "TemplateFile":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class TemplateLoader:
    """Resolves template names against a search path."""

    def resolve(self, name: str, search_path: Sequence[str]) -> Path:
        """Find the file for `name`.

        Absolute names are used as given. Relative names are tried against
        each directory of `search_path` in order.

        Raises:
            TemplateNotFoundError: If no directory holds the file.
        """
        candidate = Path(name)
        if candidate.is_absolute():
            log.debug(f"Using absolute path: {candidate}")
            return candidate

        log.debug("Search path is:\n\t" + "\n\t".join(search_path))
        for directory in search_path:
            candidate = Path(directory) / name
            if candidate.exists():
                log.debug(f"Searching path: {candidate}...found")
                return candidate
            log.debug(f"Searching path: {candidate}...not found")

        raise TemplateNotFoundError(name)

    def open(self, name: str, search_path: Sequence[str]) -> TemplateFile:
        """Resolve `name` and open it for reading."""
        path = self.resolve(name, search_path)
        try:
            handle = open(path, "rb")
        except OSError as exc:
            raise TemplateResourceError(f"{path}: {exc.strerror or exc}") from exc
        return TemplateFile(name, path, handle)
