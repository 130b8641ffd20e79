"""Render options and process-wide defaults.

Options tell the engine what to render and how. Defaults have the same
shape and are merged under the caller's options:

- params: default params are overridden by the caller's params
- path: the caller's path is searched before the default path, and the
  current directory before both
- input_file / input_string: the defaults apply only when the caller gave
  neither
- anything else: the default applies when the caller did not set it
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

CURRENT_DIR = "."

_MERGED_SEPARATELY = {"params", "path", "input_file", "input_string"}


class RenderOptions(BaseModel):
    """Options for a single render call.

    Unknown keys are kept and stay visible to template code through
    `_options`.
    """

    model_config = {"extra": "allow"}

    input_file: str | None = Field(
        default=None, description="Template file name, searched in path"
    )
    input_string: str | None = Field(
        default=None, description="Template source given inline"
    )
    params: dict[str, Any] = Field(
        default_factory=dict, description="Parameters visible to the template"
    )
    path: list[str] = Field(
        default_factory=list, description="Directories searched for input_file"
    )
    raw: bool = Field(
        default=False, description="Input is already a program, skip tag parsing"
    )
    preprocess_only: bool = Field(
        default=False, description="Return the generated program text"
    )
    encoding: str = Field(default="utf-8", description="Encoding of template files")


def merge_options(options: RenderOptions, defaults: RenderOptions) -> RenderOptions:
    """Combine caller options with defaults into a fresh RenderOptions."""
    given = options.model_fields_set | set(options.model_extra or {})
    data = options.model_dump()

    data["params"] = {**defaults.params, **options.params}
    data["path"] = [CURRENT_DIR, *options.path, *defaults.path]

    if "input_file" not in given and "input_string" not in given:
        data["input_file"] = defaults.input_file
        data["input_string"] = defaults.input_string

    defaulted = defaults.model_fields_set | set(defaults.model_extra or {})
    for name in defaulted - _MERGED_SEPARATELY:
        if name not in given:
            data[name] = getattr(defaults, name)

    return RenderOptions.model_validate(data)


def coerce_options(
    options: RenderOptions | dict[str, Any] | None, overrides: dict[str, Any]
) -> RenderOptions:
    """Build RenderOptions from a model or mapping plus keyword overrides."""
    if options is None:
        data: dict[str, Any] = {}
    elif isinstance(options, RenderOptions):
        data = options.model_dump(exclude_unset=True)
    else:
        data = dict(options)
    data.update(overrides)
    return RenderOptions.model_validate(data)


def load_defaults(path: Path) -> RenderOptions:
    """Load defaults from a YAML file."""
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping")

    return RenderOptions.model_validate(data)
