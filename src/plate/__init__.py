"""plate - templates with Python as the template language.

Text outside [[ ]] tags is emitted as-is; the code inside tags is Python and
runs in order with the text, so a tag can open a loop or conditional that a
later tag closes:

    <ul>
    [[- for item in _params["items"]: ]]
      <li>[[ _echo(item) ]]</li>
    [[- end ]]
    </ul>
"""

from plate._version import __version__
from plate.config import RenderOptions, load_defaults
from plate.engine import Engine, get_engine, render, set_defaults
from plate.exceptions import (
    PlateError,
    TemplateCompileError,
    TemplateNotFoundError,
    TemplateResourceError,
    TemplateRuntimeError,
    TemplateSyntaxError,
    UndefinedValueWarning,
)

__all__ = [
    "__version__",
    # Rendering
    "Engine",
    "RenderOptions",
    "get_engine",
    "load_defaults",
    "render",
    "set_defaults",
    # Errors
    "PlateError",
    "TemplateCompileError",
    "TemplateNotFoundError",
    "TemplateResourceError",
    "TemplateRuntimeError",
    "TemplateSyntaxError",
    "UndefinedValueWarning",
]
