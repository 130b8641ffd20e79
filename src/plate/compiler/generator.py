"""Generator - turns tokenized template source into Program IR."""

from __future__ import annotations

import logging

from plate.compiler.spec import Chunk, Program, Segment
from plate.compiler.tokenizer import Tokenizer

log = logging.getLogger(__name__)


class Generator:
    """Builds the ordered chunk list of a template.

    Literal text becomes a literal chunk, code tags become code chunks and
    everything that disappears from the output (stripped whitespace, comment
    bodies, the whitespace delimiting a tag body) becomes filler so that line
    positions survive into the generated program.
    """

    def generate(self, source: str) -> Program:
        """Generate Program IR for a template.

        Args:
            source: Template source text.

        Returns:
            Program with the chunks in source order.

        Raises:
            TemplateSyntaxError: If a tag is malformed.
        """
        program = Program()
        for segment in Tokenizer(source):
            program.chunks.extend(self._segment_chunks(segment))
        log.debug(f"Generated {len(program.chunks)} chunks")
        return program

    def _segment_chunks(self, segment: Segment) -> list[Chunk]:
        chunks: list[Chunk] = []

        def filler(text: str, line: int) -> None:
            if "\n" in text:
                chunks.append(Chunk.filler(text, line))

        if segment.text:
            chunks.append(Chunk.literal(segment.text, segment.line))

        tag = segment.tag
        if tag is None:
            return chunks

        filler(segment.stripped_pre, tag.line)

        if tag.is_comment:
            filler(tag.lead + tag.body + tag.trail, tag.line)
        else:
            line = tag.line + tag.lead.count("\n")
            filler(tag.lead, tag.line)
            if tag.body:
                chunks.append(Chunk.code(tag.body, line))
            filler(tag.trail, line + tag.body.count("\n"))

        filler(segment.stripped_post, tag.line)
        return chunks
