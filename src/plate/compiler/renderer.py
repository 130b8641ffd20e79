"""Renderer - converts Program IR to Python source text."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List

from plate.compiler.spec import BASE_INDENT, Chunk, ChunkKind, Program
from plate.exceptions import TemplateSyntaxError

INDENT_UNIT = "    "
BLOCK_END = "end"

# Headers that cannot follow another statement on the same line.
COMPOUND = re.compile(
    r"(?:async\s+)?(?:if|elif|else|for|while|with|try|except|finally|def|class"
    r"|match|case)\b|@"
)
# Headers that close the current block and open a sibling.
CONTINUATION = re.compile(r"(?:elif|else|except|finally)\b")

_ESCAPES = str.maketrans(
    {
        "\\": "\\\\",
        "'": "\\'",
        "\n": "\\n",
        "\r": "\\r",
        "\0": "\\x00",
    }
)


def escape_literal(text: str) -> str:
    """Quote `text` as a Python string literal on a single line."""
    return "'" + text.translate(_ESCAPES) + "'"


def realign(body: str) -> tuple[int, List[str], int]:
    """Strip the common indentation margin of a tag body.

    Returns (blank lines before, code lines, blank lines after). Blank lines
    around the code are reported as counts so they can be laid out as
    newlines instead of statements.
    """
    lines = body.split("\n")
    content = [i for i, line in enumerate(lines) if line.strip()]
    if not content:
        return len(lines) - 1, [], 0

    first, last = content[0], content[-1]
    margin = min(len(lines[i]) - len(lines[i].lstrip()) for i in content)
    code = [line[margin:] if line.strip() else "" for line in lines[first : last + 1]]
    return first, code, len(lines) - 1 - last


@dataclass
class _Block:
    """An open indentation block."""

    indent: str
    line: int
    empty: bool = True


class _Layout:
    """Physical layout of the entry point body.

    Simple statements from one source line share a physical line, joined
    with "; ". Newlines of the source (literal text, filler) are held as
    pending and written before the next statement. When Python needs a line
    break the source does not have, the extra line is recorded as debt and
    paid back from the next pending newlines.
    """

    def __init__(self) -> None:
        self.parts: List[str] = []
        self.blocks: List[_Block] = []
        self.line_open = False
        self.joinable = False
        self.pending = 0
        self.debt = 0

    @property
    def indent(self) -> str:
        if self.blocks:
            return self.blocks[-1].indent
        return BASE_INDENT

    def add(self, chunk: Chunk) -> None:
        if chunk.kind is ChunkKind.FILLER:
            self.pending += chunk.text.count("\n")
        elif chunk.kind is ChunkKind.LITERAL:
            self.emit([f"_echo({escape_literal(chunk.text)})"], fresh=False)
            self.joinable = True
            self.pending += chunk.text.count("\n")
        else:
            self.code(chunk)

    def code(self, chunk: Chunk) -> None:
        before, lines, after = realign(chunk.text)
        self.pending += before
        if lines and lines[-1].rstrip().endswith(";"):
            # the "; " joiner supplies the separator
            lines[-1] = lines[-1].rstrip()[:-1].rstrip()
            if not lines[-1]:
                lines.pop()
                if lines:
                    after += 1
        if not lines:
            self.pending += after
            return

        head = lines[0].strip()
        single = len(lines) == 1
        if single and head == BLOCK_END:
            self.close(chunk.line, head)
        elif single and CONTINUATION.match(head) and head.endswith(":"):
            self.close(chunk.line, head)
            self.emit(lines, fresh=True)
            self.open(chunk.line, lines[-1])
        else:
            opens = lines[-1].rstrip().endswith(":")
            compound = not single or opens or bool(COMPOUND.match(head))
            self.emit(lines, fresh=compound)
            if opens:
                self.open(chunk.line, lines[-1])
            self.joinable = not compound
        self.pending += after

    def emit(self, lines: List[str], fresh: bool) -> None:
        self.flush(fresh or (self.line_open and not self.joinable))
        if self.line_open:
            self.parts.append("; ")
        else:
            self.parts.append(self.indent)
        self.parts.append(lines[0])
        for line in lines[1:]:
            self.parts.append("\n")
            if line:
                self.parts.append(self.indent + line)
        self.line_open = True
        if self.blocks:
            self.blocks[-1].empty = False

    def open(self, line: int, header: str) -> None:
        relative = header[: len(header) - len(header.lstrip())]
        self.blocks.append(_Block(self.indent + relative + INDENT_UNIT, line))
        self.joinable = False

    def close(self, line: int, keyword: str) -> None:
        if not self.blocks:
            raise TemplateSyntaxError(
                f"'{keyword}' on line {line} without an open block", line=line
            )
        if self.blocks[-1].empty:
            self.emit(["pass"], fresh=True)
        self.blocks.pop()
        self.joinable = False

    def flush(self, fresh: bool) -> None:
        """Write pending newlines; force one when `fresh` needs a new line."""
        need = 1 if fresh and self.line_open else 0
        count, self.pending = self.pending, 0
        if count < need:
            self.debt += need - count
            count = need
        else:
            repaid = min(count - need, self.debt)
            count -= repaid
            self.debt -= repaid
        if count:
            self.parts.append("\n" * count)
            self.line_open = False

    def finish(self) -> str:
        if self.blocks:
            block = self.blocks[-1]
            raise TemplateSyntaxError(
                f"Block opened on line {block.line} is never closed with "
                f"'{BLOCK_END}'",
                line=block.line,
            )
        self.flush(fresh=False)
        if self.line_open:
            self.parts.append("\n")
        return "".join(self.parts)


class Renderer:
    """Renders Program IR to Python source text."""

    def render(self, program: Program) -> str:
        """Render a Program to loadable Python source.

        Args:
            program: The Program IR to render.

        Returns:
            Complete program text: preamble, entry point body, epilogue.

        Raises:
            TemplateSyntaxError: If block tags are unbalanced.
        """
        layout = _Layout()
        for chunk in program.chunks:
            layout.add(chunk)
        return program.preamble + layout.finish() + program.epilogue
