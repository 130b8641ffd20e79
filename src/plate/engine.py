"""Engine - resolves input, compiles when needed and runs templates."""

from __future__ import annotations

import logging
from typing import Any, Callable

from plate.compiler import preprocess
from plate.compiler.spec import PREAMBLE_LINES
from plate.config import RenderOptions, coerce_options, merge_options
from plate.exceptions import PlateError, TemplateResourceError
from plate.loader import TemplateLoader
from plate.runtime.cache import CompiledUnitCache, IdentityKey
from plate.runtime.executor import Executor
from plate.runtime.host import CompiledUnit

log = logging.getLogger(__name__)

STRING_FILENAME = "<string>"


class Engine:
    """Renders templates.

    An engine owns its defaults and its compiled-unit cache. The module-level
    `render` uses a process-wide engine.

    Args:
        defaults: Options merged under every render call.
        cache: Compiled-unit cache; its host also runs the units.
        loader: Resolves template file names.
        preprocessor: Turns template source into program text.
    """

    def __init__(
        self,
        defaults: RenderOptions | None = None,
        cache: CompiledUnitCache | None = None,
        loader: TemplateLoader | None = None,
        preprocessor: Callable[[str], str] = preprocess,
    ):
        self.defaults = defaults or RenderOptions()
        self.cache = cache or CompiledUnitCache()
        self.loader = loader or TemplateLoader()
        self.preprocessor = preprocessor
        self.executor = Executor(self.cache.host)

    def render(
        self, options: RenderOptions | dict[str, Any] | None = None, **overrides: Any
    ) -> str:
        """Render a template.

        Args:
            options: RenderOptions or a mapping of option names.
            **overrides: Individual options, applied over `options`.

        Returns:
            The template output, or the generated program text when
            preprocess_only is set.

        Raises:
            PlateError: For any failure. When the template came from a file,
                the message is prefixed with its name.
        """
        opts = merge_options(coerce_options(options, overrides), self.defaults)
        log.debug(f"Rendering {opts.input_file or STRING_FILENAME}")

        if opts.input_string is not None:
            return self._run(opts, opts.input_string, None, None, STRING_FILENAME)

        if opts.input_file is not None:
            with self.loader.open(opts.input_file, opts.path) as template:
                key = template.identity
                unit = self.cache.lookup(key)
                text = None
                if unit is None or opts.preprocess_only:
                    text = template.read(opts.encoding)
                return self._run(opts, text, key, unit, str(template.path))

        raise TemplateResourceError("No input specified")

    def _run(
        self,
        opts: RenderOptions,
        text: str | None,
        key: IdentityKey | None,
        unit: CompiledUnit | None,
        filename: str,
    ) -> str:
        try:
            if opts.preprocess_only:
                return self.preprocessor(text)

            if unit is None:
                log.info(f"Compiling {filename}")
                if opts.raw:
                    program, offset = text, 0
                else:
                    program, offset = self.preprocessor(text), PREAMBLE_LINES
                unit = self.cache.install(key, program, filename, offset)

            return self.executor.invoke(unit, opts)
        except PlateError as exc:
            if opts.input_file is not None and opts.input_string is None:
                raise exc.add_prefix(opts.input_file)
            raise


_engine = Engine()


def get_engine() -> Engine:
    """Return the process-wide engine."""
    return _engine


def set_defaults(defaults: RenderOptions | dict[str, Any]) -> None:
    """Replace the defaults of the process-wide engine."""
    _engine.defaults = coerce_options(defaults, {})


def render(options: RenderOptions | dict[str, Any] | None = None, **overrides: Any) -> str:
    """Render a template with the process-wide engine."""
    return _engine.render(options, **overrides)
