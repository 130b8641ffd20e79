"""Compiler IR spec - tags, code chunks and the generated program layout."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List


ENTRY_POINT = "_main"
COMPILED_FLAG = "_compiled"

# Indentation of statements at the top level of the entry point.
BASE_INDENT = "    "

PREAMBLE = f"""\
import warnings as _warnings

from plate.exceptions import UndefinedValueWarning as _UndefinedValueWarning


def {ENTRY_POINT}(_options, _params):
    _out = []

    def _echo(*values):
        for value in values:
            if value is None:
                _warnings.warn(
                    "use of undefined value in template output",
                    _UndefinedValueWarning,
                    stacklevel=2,
                )
            else:
                _out.append(str(value))

    def _echoifdef(*values):
        _echo(*[value for value in values if value is not None])

    def _get(*names):
        _echo(*[_params.get(name) for name in names])

    def _getifdef(*names):
        _echoifdef(*[_params.get(name) for name in names if name is not None])

"""

EPILOGUE = f"""\
{BASE_INDENT}return "".join(_out)


{COMPILED_FLAG} = True
"""

# Template line N lands on program line N + PREAMBLE_LINES.
PREAMBLE_LINES = PREAMBLE.count("\n")


class ChunkKind(str, Enum):
    """What a code chunk contributes to the generated program."""

    LITERAL = "literal"  # text to emit verbatim
    CODE = "code"  # statement fragment embedded as-is
    FILLER = "filler"  # newlines only, keeps line positions aligned


@dataclass
class Tag:
    """A single [[ ... ]] tag as matched in the source."""

    strip_pre: str  # "", a run of "-", or "+"
    is_comment: bool
    body: str  # text between the delimiting whitespace characters
    strip_post: str
    line: int  # 1-based line of the opening marker
    lead: str = " "  # whitespace character that opened the body
    trail: str = " "  # whitespace character that closed the body


@dataclass
class Segment:
    """One tokenizer step: literal text, the whitespace stripped around the
    following tag, and the tag itself (None for the trailing text)."""

    text: str
    line: int
    tag: Tag | None = None
    stripped_pre: str = ""
    stripped_post: str = ""


@dataclass
class Chunk:
    """A single element of the generated program body."""

    kind: ChunkKind
    text: str
    line: int

    @classmethod
    def literal(cls, text: str, line: int) -> "Chunk":
        return cls(ChunkKind.LITERAL, text, line)

    @classmethod
    def code(cls, text: str, line: int) -> "Chunk":
        return cls(ChunkKind.CODE, text, line)

    @classmethod
    def filler(cls, text: str, line: int) -> "Chunk":
        """Keep only the newlines of `text`."""
        return cls(ChunkKind.FILLER, "\n" * text.count("\n"), line)


@dataclass
class Program:
    """Generated program IR: preamble, ordered chunks, epilogue."""

    chunks: List[Chunk] = field(default_factory=list)
    preamble: str = PREAMBLE
    epilogue: str = EPILOGUE
