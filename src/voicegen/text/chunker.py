"""Text chunking for engines with per-request size limits.

Sentences are packed greedily; overlong sentences fall back to word packing.
A single word longer than the limit is emitted on its own rather than cut.
"""

from dataclasses import dataclass

from .normalizer import SENTENCE_END


@dataclass(frozen=True)
class TextChunk:
    """A bounded-length slice of input text.

    Attributes:
        sequence_index: Position of the chunk in the original text
        content: Chunk text
        total_chunks: Number of chunks the text was split into
    """

    sequence_index: int
    content: str
    total_chunks: int = 1


def _sentences(text: str) -> list[str]:
    return [s.strip() for s in SENTENCE_END.split(text) if s.strip()]


def _pack_words(sentence: str, max_length: int) -> tuple[list[str], str]:
    """Pack the words of one sentence.

    Returns:
        Tuple of (completed pieces, trailing partial piece)
    """
    pieces: list[str] = []
    current = ""
    for word in sentence.split():
        candidate = f"{current} {word}" if current else word
        if len(candidate) <= max_length:
            current = candidate
            continue
        if current:
            pieces.append(current)
        if len(word) > max_length:
            pieces.append(word)
            current = ""
        else:
            current = word
    return pieces, current


def split_text(text: str, max_chunk_length: int) -> list[TextChunk]:
    """Split text into ordered chunks no longer than max_chunk_length.

    Args:
        text: Normalized text
        max_chunk_length: Maximum characters per chunk

    Returns:
        Ordered chunks; empty only for blank input.

    Raises:
        ValueError: If max_chunk_length is less than 1
    """
    if max_chunk_length < 1:
        raise ValueError(f"max_chunk_length must be positive, got {max_chunk_length}")

    pieces: list[str] = []
    current = ""

    for sentence in _sentences(text):
        candidate = f"{current} {sentence}" if current else sentence
        if len(candidate) <= max_chunk_length:
            current = candidate
            continue

        if current:
            pieces.append(current)
            current = ""

        if len(sentence) <= max_chunk_length:
            current = sentence
        else:
            packed, current = _pack_words(sentence, max_chunk_length)
            pieces.extend(packed)

    if current:
        pieces.append(current)

    return [
        TextChunk(sequence_index=i, content=piece, total_chunks=len(pieces)) for i, piece in enumerate(pieces)
    ]


class Chunker:
    """Splits text for a fixed maximum chunk length."""

    def __init__(self, max_chunk_length: int = 280) -> None:
        if max_chunk_length < 1:
            raise ValueError(f"max_chunk_length must be positive, got {max_chunk_length}")
        self._max_chunk_length = max_chunk_length

    @property
    def max_chunk_length(self) -> int:
        """Maximum characters per chunk."""
        return self._max_chunk_length

    def split(self, text: str) -> list[TextChunk]:
        """Split text into ordered chunks."""
        return split_text(text, self._max_chunk_length)


__all__ = ["Chunker", "TextChunk", "split_text"]
