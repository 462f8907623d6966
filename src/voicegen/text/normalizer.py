"""Text normalization for speech synthesis.

Turns raw LLM output into speakable prose: markup, links, counts and list
markers are removed, punctuation spacing is normalized, and the result is
capped at a sentence boundary.
"""

import re

# Languages written in Devanagari script
DEVANAGARI_LANGUAGES = frozenset({"ne", "hi", "mr", "sa"})

DEFAULT_MAX_CHARS = 2000

_MAX_PASSES = 5

_TYPOGRAPHIC = str.maketrans(
    {
        "–": "-",
        "—": "-",
        "‘": "'",
        "’": "'",
        "“": '"',
        "”": '"',
        "\u00a0": " ",
    }
)

_HTML_TAG = re.compile(r"<[^>]*>")
_URL = re.compile(r"(?:https?://|www\.)\S+", re.IGNORECASE)
_EMAIL = re.compile(r"\S+@\S+\.\S+")
_HEADER = re.compile(r"^[ \t]*#{1,6}[ \t]+", re.MULTILINE)
_HASHTAG = re.compile(r"#\w+")
_EMPHASIS = re.compile(r"[*_`~#]")
_BRACKET_REF = re.compile(r"\[\d+\]")
_COUNT_PAREN = re.compile(
    r"\([^)]*(?:\d+[^)]*(?:words?|characters?)|(?:words?|characters?)[^)]*\d+)[^)]*\)",
    re.IGNORECASE,
)
_COUNT_RANGE = re.compile(r"\b\d{1,4}\s*-\s*\d{1,4}\s*(?:words?|characters?)\b", re.IGNORECASE)
_COUNT_SINGLE = re.compile(r"\b\d{1,4}\s*(?:words?|characters?)\b", re.IGNORECASE)
_LINE_MARKER = re.compile(r"^[ \t]*(?:(?:\d+[.)]|[-•*])[ \t]+)+", re.MULTILINE)
_EMPTY_PARENS = re.compile(r"\(\s*\)")

_NON_ASCII = re.compile(r"[^\x00-\x7F]")
_CONTROL = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_NON_DEVANAGARI = re.compile(r"[^\u0900-\u097fA-Za-z0-9_\s.,!?;:()'\"-]")

_WHITESPACE = re.compile(r"\s+")
_SPACE_BEFORE_PUNCT = re.compile(r"\s+([.,!?;:।])")
_REPEATED_TERMINATOR = re.compile(r"([.!?।])[.!?।]+")
_MISSING_SPACE = re.compile(r"([.,!?;:।])(?=[A-Za-z\u0900-\u097f])")
_LEADING_PUNCT = re.compile(r"^[\s.,!?;:।]+")

SENTENCE_END = re.compile(r"(?<=[.!?।])\s+")
_TERMINATORS = (".", "!", "?", "।")


def is_devanagari_language(language: str) -> bool:
    """Return True if the language uses Devanagari script."""
    return language in DEVANAGARI_LANGUAGES


def _strip_markup(text: str) -> str:
    text = _HTML_TAG.sub(" ", text)
    text = _URL.sub("", text)
    text = _EMAIL.sub("", text)
    text = _HEADER.sub("", text)
    text = _HASHTAG.sub("", text)
    text = _EMPHASIS.sub("", text)
    text = _BRACKET_REF.sub("", text)
    text = _COUNT_PAREN.sub("", text)
    text = _COUNT_RANGE.sub("", text)
    text = _COUNT_SINGLE.sub("", text)
    text = _LINE_MARKER.sub("", text)
    return text


def _filter_script(text: str, language: str) -> str:
    text = _CONTROL.sub("", text)
    if is_devanagari_language(language):
        return _NON_DEVANAGARI.sub("", text)
    return _NON_ASCII.sub("", text)


def _normalize_punctuation(text: str) -> str:
    text = _EMPTY_PARENS.sub("", text)
    text = _WHITESPACE.sub(" ", text)
    text = _SPACE_BEFORE_PUNCT.sub(r"\1", text)
    text = _REPEATED_TERMINATOR.sub(r"\1", text)
    text = _MISSING_SPACE.sub(r"\1 ", text)
    text = _LEADING_PUNCT.sub("", text)
    text = text.strip()
    if text and not text.endswith(_TERMINATORS):
        text = text.rstrip(",;:-") + "."
        if text == ".":
            return ""
    return text


def _clean_pass(text: str, language: str) -> str:
    text = _strip_markup(text)
    text = _filter_script(text, language)
    return _normalize_punctuation(text)


def _stabilize(text: str, language: str) -> str:
    # Removals can expose new matches, so repeat until stable.
    for _ in range(_MAX_PASSES):
        cleaned = _clean_pass(text, language)
        if cleaned == text:
            break
        text = cleaned
    return text


def split_sentences(text: str) -> list[str]:
    """Split normalized text into sentences, keeping terminators."""
    return [s for s in SENTENCE_END.split(text) if s]


def truncate_at_sentence(text: str, max_chars: int) -> str:
    """Cap text at the last whole sentence that fits within max_chars.

    If even the first sentence is too long, it is cut at the last word
    boundary that fits and closed with a period.
    """
    if len(text) <= max_chars:
        return text

    result = ""
    for sentence in split_sentences(text):
        candidate = f"{result} {sentence}" if result else sentence
        if len(candidate) > max_chars:
            break
        result = candidate

    if result:
        return result

    cut = text[: max_chars - 1]
    if " " in cut:
        cut = cut[: cut.rindex(" ")]
    return cut.rstrip(" ,;:-") + "."


def normalize(text: object, language: str = "en", max_chars: int = DEFAULT_MAX_CHARS) -> str:
    """Clean raw generated text into speakable prose.

    Args:
        text: Raw text, typically LLM output.
        language: Language code; Devanagari languages keep U+0900-U+097F.
        max_chars: Length cap applied at a sentence boundary.

    Returns:
        Normalized text, or "" for non-string or empty input.
    """
    if not isinstance(text, str) or not text:
        return ""

    cleaned = _stabilize(text.translate(_TYPOGRAPHIC), language)
    if not cleaned:
        return ""

    return _stabilize(truncate_at_sentence(cleaned, max_chars), language)


__all__ = [
    "DEFAULT_MAX_CHARS",
    "DEVANAGARI_LANGUAGES",
    "is_devanagari_language",
    "normalize",
    "split_sentences",
    "truncate_at_sentence",
]
