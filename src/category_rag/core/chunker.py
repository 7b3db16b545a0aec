"""
Chunker - Character-window chunking for retrieval

Splits cleaned text into overlapping fixed-size windows. Output is fully
determined by the input text and the (chunk_size, overlap) pair.

License: MIT
"""

from dataclasses import dataclass
from typing import List
import logging

from ..exceptions import InvalidConfiguration

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 1500
DEFAULT_CHUNK_OVERLAP = 200


@dataclass(frozen=True)
class Chunk:
    """A contiguous slice of source text starting at ``start``."""

    text: str
    start: int

    @property
    def end(self) -> int:
        return self.start + len(self.text)

    def __len__(self) -> int:
        return len(self.text)


class TextChunker:
    """
    Sliding-window chunker.

    The window is ``chunk_size`` characters wide and advances by
    ``chunk_size - overlap`` characters, starting at offset 0, until the
    window start reaches the end of the text. The last chunk may be shorter.
    """

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE, overlap: int = DEFAULT_CHUNK_OVERLAP):
        """
        Initialize the chunker.

        Args:
            chunk_size: Window width in characters
            overlap: Characters shared by consecutive chunks

        Raises:
            InvalidConfiguration: If the window would not advance or would skip text
        """
        if chunk_size < 1:
            raise InvalidConfiguration(f"Chunk size must be at least 1, got {chunk_size}")
        if overlap < 0:
            raise InvalidConfiguration(f"Chunk overlap cannot be negative, got {overlap}")
        if overlap >= chunk_size:
            raise InvalidConfiguration(
                f"Chunk overlap ({overlap}) must be smaller than chunk size ({chunk_size})"
            )

        self.chunk_size = chunk_size
        self.overlap = overlap

    @property
    def step(self) -> int:
        return self.chunk_size - self.overlap

    def create_chunks(self, text: str) -> List[Chunk]:
        """
        Split text into overlapping chunks with their start offsets.

        Args:
            text: Cleaned source text

        Returns:
            Ordered list of chunks; empty for empty text
        """
        if not text:
            return []

        chunks = [
            Chunk(text=text[start : start + self.chunk_size], start=start)
            for start in range(0, len(text), self.step)
        ]

        logger.debug(
            f"Created {len(chunks)} chunks from {len(text)} characters",
            extra={"chunk_size": self.chunk_size, "overlap": self.overlap},
        )
        return chunks

    def split(self, text: str) -> List[str]:
        """Split text and return only the chunk texts."""
        return [chunk.text for chunk in self.create_chunks(text)]


def chunk_text(
    text: str, chunk_size: int = DEFAULT_CHUNK_SIZE, overlap: int = DEFAULT_CHUNK_OVERLAP
) -> List[str]:
    """
    Split text into overlapping fixed-size chunks.

    Args:
        text: Cleaned source text
        chunk_size: Window width in characters
        overlap: Characters shared by consecutive chunks

    Returns:
        Ordered list of chunk texts

    Raises:
        InvalidConfiguration: If overlap >= chunk_size
    """
    return TextChunker(chunk_size=chunk_size, overlap=overlap).split(text)
