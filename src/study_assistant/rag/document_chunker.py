"""Sentence-based text chunking for RAG indexing.

Text is split at sentence boundaries and sentences are packed greedily into
chunks no longer than a character budget. Sentences are never split, so a
single sentence longer than the budget becomes its own oversized chunk.
"""

import logging
import re
from typing import List


logger = logging.getLogger(__name__)

# Whitespace that follows sentence-ending punctuation
SENTENCE_BOUNDARY = re.compile(r'(?<=[.?!])\s+')

DEFAULT_MAX_SIZE = 1000


def split_sentences(text: str) -> List[str]:
    """Split text into sentences, dropping empty pieces."""
    return [s for s in SENTENCE_BOUNDARY.split(text.strip()) if s]


def chunk_text(text: str, max_size: int = DEFAULT_MAX_SIZE) -> List[str]:
    """Split text into ordered chunks of whole sentences.

    Sentences are joined by single spaces. A chunk is closed when appending
    the next sentence and its joining space would exceed ``max_size``.

    Args:
        text: Raw text to chunk
        max_size: Maximum characters per chunk (default: 1000)

    Returns:
        List of non-empty chunks in source order; empty for blank input

    Raises:
        ValueError: If max_size is not positive
    """
    if max_size <= 0:
        raise ValueError("max_size must be positive")

    if not text or not text.strip():
        return []

    chunks: List[str] = []
    current = ""

    for sentence in split_sentences(text):
        if not current:
            current = sentence
        elif len(current) + 1 + len(sentence) <= max_size:
            current = f"{current} {sentence}"
        else:
            chunks.append(current)
            current = sentence

    if current:
        chunks.append(current)

    oversized = sum(1 for chunk in chunks if len(chunk) > max_size)
    if oversized:
        logger.debug(f"{oversized} chunk(s) exceed {max_size} chars (single long sentence)")

    return chunks


class DocumentChunker:
    """Chunks extracted source text for embedding.

    Attributes:
        max_size: Maximum characters per chunk
    """

    def __init__(self, max_size: int = DEFAULT_MAX_SIZE):
        if max_size <= 0:
            raise ValueError("max_size must be positive")
        self.max_size = max_size

    def chunk(self, text: str, prefix: str = "") -> List[str]:
        """Chunk text, optionally prefixing every chunk.

        The prefix is applied after chunking, so it does not count towards
        ``max_size``.

        Args:
            text: Raw text to chunk
            prefix: String prepended to every chunk (e.g. a video label)

        Returns:
            List of chunks
        """
        chunks = chunk_text(text, self.max_size)
        if prefix:
            chunks = [f"{prefix}{chunk}" for chunk in chunks]
        logger.debug(f"Created {len(chunks)} chunks from {len(text or '')} chars")
        return chunks
