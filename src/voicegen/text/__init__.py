"""Text preparation for speech synthesis.

- normalize: strip markup and junk, cap length at a sentence boundary
- split_text / Chunker: bounded-length chunks for per-request engine limits
"""

from .chunker import Chunker, TextChunk, split_text
from .normalizer import (
    DEVANAGARI_LANGUAGES,
    is_devanagari_language,
    normalize,
    split_sentences,
    truncate_at_sentence,
)

__all__ = [
    "Chunker",
    "DEVANAGARI_LANGUAGES",
    "TextChunk",
    "is_devanagari_language",
    "normalize",
    "split_sentences",
    "split_text",
    "truncate_at_sentence",
]
