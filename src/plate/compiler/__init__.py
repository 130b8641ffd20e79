"""Plate Compiler - transforms tagged template text into Python source."""

from plate.compiler.generator import Generator
from plate.compiler.renderer import Renderer
from plate.compiler.spec import Chunk, ChunkKind, Program, Tag
from plate.compiler.tokenizer import Tokenizer, tokenize


def preprocess(source: str) -> str:
    """Translate template source into the text of its generated program."""
    return Renderer().render(Generator().generate(source))


__all__ = [
    "Generator",
    "Renderer",
    "Tokenizer",
    "Chunk",
    "ChunkKind",
    "Program",
    "Tag",
    "preprocess",
    "tokenize",
]
