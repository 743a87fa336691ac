"""
Fixed-size overlapping text chunking.

Collapses all whitespace runs to single spaces, then slices the text at
character offsets 0, step, 2*step, ... where step = chunk_size - overlap.
No tokenization awareness: a chunk may split a word or sentence.

Dependencies: re
System role: Third stage of material ingestion pipeline
"""

import re

_WHITESPACE_RUN = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    """Collapse every whitespace run (line breaks included) to one space and trim."""
    return _WHITESPACE_RUN.sub(" ", text).strip()


def chunk_text(text: str, chunk_size: int = 1000, overlap: int = 100) -> list[str]:
    """
    Split text into fixed-size, overlapping chunks.

    Args:
        text: Raw extracted text
        chunk_size: Chunk length in characters
        overlap: Characters shared by consecutive chunks

    Returns:
        list[str]: Chunks in document order; empty for empty/whitespace-only text.
            The last chunk may be shorter than chunk_size.

    Raises:
        ValueError: chunk_size <= 0, overlap < 0, or overlap >= chunk_size
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    if overlap < 0 or overlap >= chunk_size:
        raise ValueError("overlap must satisfy 0 <= overlap < chunk_size")

    cleaned = normalize_text(text)
    step = chunk_size - overlap
    return [cleaned[start:start + chunk_size] for start in range(0, len(cleaned), step)]


class ChunkingTask:
    """Split extracted text into chunks with configured size and overlap."""

    def __init__(self, chunk_size: int = 1000, chunk_overlap: int = 100) -> None:
        """
        Initialize chunking task.

        Args:
            chunk_size: Chunk length in characters
            chunk_overlap: Overlap between consecutive chunks

        Raises:
            ValueError: Invalid size/overlap combination
        """
        if chunk_size <= 0 or chunk_overlap < 0 or chunk_overlap >= chunk_size:
            raise ValueError(
                f"Invalid chunking config: chunk_size={chunk_size}, chunk_overlap={chunk_overlap}"
            )
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap

    def chunk(self, text: str) -> list[str]:
        """
        Split text into chunks.

        Args:
            text: Extracted document text

        Returns:
            list[str]: Chunks (empty when the text has no content)
        """
        return chunk_text(text, self.chunk_size, self.chunk_overlap)
