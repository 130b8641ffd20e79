"""Tokenizer - splits template source into literal text and tags.

Tag syntax (note the position of the required whitespace):

    [[(-*|+)#?\\s BODY \\s(-*|+)]]

A leading run of N hyphens removes up to N blank-line groups from the text
before the tag, a plus removes all of them. Trailing markers do the same for
the text after the tag. `#` right after the markers makes the whole tag a
comment.
"""

from __future__ import annotations

import logging
import re
from typing import Iterator

from plate.compiler.spec import Segment, Tag
from plate.exceptions import TemplateSyntaxError

log = logging.getLogger(__name__)

START = "[["
END = "]]"

TAG = re.compile(r"\[\[(-*|\+)(#?)(\s)(.*?)(\s)(-*|\+)\]\]", re.DOTALL)
TAG_HEAD = re.compile(r"\[\[(-*|\+)#?\s")

# Blank-line groups at the end of the preceding text. The groups may end
# just before a final newline, which then stays with the kept text.
STRIP_GROUP = r"(?:\r?\n[ \t]*)"
STRIP_TAIL_END = r"(?=\n?\Z)"
STRIP_HEAD = re.compile(r"[ \t]*\r?\n")


def _excerpt(text: str, limit: int = 40) -> str:
    """Short, single-line view of `text` for error messages."""
    first = text.split("\n", 1)[0]
    if len(first) > limit or len(first) < len(text):
        first = first[:limit] + "..."
    return repr(first)


def _strip_count(marker: str) -> int | None:
    """Number of groups a strip marker removes; None means unbounded."""
    if marker == "+":
        return None
    return len(marker)


def strip_trailing(text: str, marker: str) -> tuple[str, str]:
    """Strip blank-line groups from the end of `text`.

    The leftmost run of at most N groups that reaches the end of `text`, or
    the position right before its final newline, is removed:
    "A\\n  \\n" with "-" keeps "A\\n", with "+" keeps "A".

    Returns (kept, stripped).
    """
    count = _strip_count(marker)
    if count == 0:
        return text, ""
    quantifier = "*" if count is None else f"{{0,{count}}}"
    match = re.search(STRIP_GROUP + quantifier + STRIP_TAIL_END, text)
    return text[: match.start()] + text[match.end() :], match.group()


def strip_leading(source: str, pos: int, marker: str) -> int:
    """Strip blank-line groups from `source` starting at `pos`.

    Returns the new position.
    """
    remaining = _strip_count(marker)
    while remaining is None or remaining > 0:
        match = STRIP_HEAD.match(source, pos)
        if match is None:
            break
        pos = match.end()
        if remaining is not None:
            remaining -= 1
    return pos


class Tokenizer:
    """Scans a template source once, left to right.

    Iterating yields one Segment per tag plus a final Segment for the trailing
    text. Whitespace stripping is applied inline so that the stripped text is
    reported on the Segment instead of being lost.
    """

    def __init__(self, source: str):
        self.source = source
        self._index = 0
        self._line = 1

    def _line_at(self, index: int) -> int:
        """1-based line number of `index`; lookups are mostly increasing."""
        if index < self._index:
            self._index, self._line = 0, 1
        self._line += self.source.count("\n", self._index, index)
        self._index = index
        return self._line

    def __iter__(self) -> Iterator[Segment]:
        source = self.source
        pos = 0
        while pos < len(source):
            match = TAG.search(source, pos)
            text_end = match.start() if match else len(source)
            text = source[pos:text_end]
            line = self._line_at(pos)

            self._check_text(text, pos)

            if match is None:
                yield Segment(text=text, line=line)
                break

            strip_pre, comment, lead, body, trail, strip_post = match.groups()
            tag = Tag(
                strip_pre=strip_pre,
                is_comment=bool(comment),
                body=body,
                strip_post=strip_post,
                line=self._line_at(match.start()),
                lead=lead,
                trail=trail,
            )
            self._check_body(tag, match.start())

            text, stripped_pre = strip_trailing(text, strip_pre)
            end = strip_leading(source, match.end(), strip_post)

            yield Segment(
                text=text,
                line=line,
                tag=tag,
                stripped_pre=stripped_pre,
                stripped_post=source[match.end() : end],
            )
            pos = end

    def _check_text(self, text: str, offset: int) -> None:
        """Reject stray markers left in literal text."""
        start = text.find(START)
        if start >= 0:
            near = text[start:]
            line = self._line_at(offset + start)
            if not TAG_HEAD.match(near):
                # a well-formed head would have matched TAG
                reason = "missing space after start marker [["
            elif END in near:
                reason = "missing space before end marker ]]"
            else:
                reason = "missing ending marker ]]"
            raise TemplateSyntaxError(
                f"Invalid tag on line {line}, {reason} near {_excerpt(near)}",
                line=line,
            )

        end = text.find(END)
        if end >= 0:
            line = self._line_at(offset + end)
            near = text[text.rfind("\n", 0, end) + 1 : end + len(END)]
            raise TemplateSyntaxError(
                f"Invalid tag on line {line}, extraneous end marker ]] near "
                f"{_excerpt(near)}",
                line=line,
            )

    def _check_body(self, tag: Tag, offset: int) -> None:
        """Reject markers swallowed by a tag body.

        The lazy body match only swallows a marker when the tag it belongs to
        is malformed.
        """
        code = tag.lead + tag.body + tag.trail
        head = len(START) + len(tag.strip_pre) + int(tag.is_comment)

        end = code.find(END)
        if end >= 0:
            near = self.source[offset : offset + head + end + len(END)]
            line = self._line_at(offset + head + end)
            raise TemplateSyntaxError(
                f"Invalid tag on line {line}, missing space before end marker ]] near "
                f"{_excerpt(near)}",
                line=line,
            )

        if START in code:
            line = tag.line
            raise TemplateSyntaxError(
                f"Invalid tag on line {line}, missing ending marker ]] near "
                f"{_excerpt(self.source[offset:])}",
                line=line,
            )


def tokenize(source: str) -> Iterator[Segment]:
    """Convenience wrapper around Tokenizer."""
    log.debug(f"Tokenizing {len(source)} characters")
    return iter(Tokenizer(source))
