"""
Block-aware chunking of shielded markup.

Text is cut only right after block-level closing tags, so every chunk holds
whole paragraphs. Chunks concatenate back to exactly the input.
"""
import re
from typing import List

from epub_scribe.config import MAX_CHUNK_SIZE


class BlockChunker:
    """Splits markup into size-bounded chunks at block boundaries."""

    BLOCK_TAGS = ('p', 'div', 'h1', 'h2', 'h3', 'h4', 'h5', 'h6', 'li', 'blockquote', 'section')

    BOUNDARY_PATTERN = re.compile(
        r'</(?:' + '|'.join(BLOCK_TAGS) + r')\s*>',
        re.IGNORECASE,
    )

    def __init__(self, max_chunk_size: int = MAX_CHUNK_SIZE):
        if max_chunk_size <= 0:
            raise ValueError(f"max_chunk_size must be positive, got {max_chunk_size}")
        self.max_chunk_size = max_chunk_size

    def segments(self, text: str) -> List[str]:
        """Cut text after every block closing tag (trailing text is its own segment)."""
        result = []
        start = 0
        for match in self.BOUNDARY_PATTERN.finditer(text):
            result.append(text[start:match.end()])
            start = match.end()
        if start < len(text):
            result.append(text[start:])
        return result

    def split(self, text: str) -> List[str]:
        """
        Group segments into chunks of at most ``max_chunk_size`` characters.

        A single segment longer than the limit becomes its own chunk.

        Args:
            text: Shielded markup

        Returns:
            Chunks in order; ``"".join(chunks) == text``
        """
        if not text:
            return []

        chunks = []
        buffer = ""
        for segment in self.segments(text):
            if buffer and len(buffer) + len(segment) > self.max_chunk_size:
                chunks.append(buffer)
                buffer = ""
            buffer += segment
        if buffer:
            chunks.append(buffer)
        return chunks


def split_into_chunks(text: str, max_chunk_size: int = MAX_CHUNK_SIZE) -> List[str]:
    """Split text into block-aligned chunks (see ``BlockChunker.split``)."""
    return BlockChunker(max_chunk_size).split(text)
