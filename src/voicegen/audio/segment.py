"""Audio segment data classes."""

from dataclasses import dataclass
from enum import Enum


class AudioFormat(Enum):
    """Container format of an audio segment."""

    MP3 = "mp3"
    WAV = "wav"
    AIFF = "aiff"

    @property
    def suffix(self) -> str:
        """File suffix for this format, including the dot."""
        return f".{self.value}"

    @classmethod
    def from_suffix(cls, suffix: str) -> "AudioFormat":
        """Map a file suffix such as '.mp3' to a format.

        Raises:
            ValueError: If the suffix is not a supported audio format
        """
        value = suffix.lower().lstrip(".")
        if value == "aif":
            value = "aiff"
        return cls(value)


@dataclass
class AudioSegment:
    """Audio produced by one synthesis strategy for one chunk.

    Attributes:
        data: Encoded audio bytes
        format: Container format of data
        source_strategy: Name of the strategy that produced it
    """

    data: bytes
    format: AudioFormat
    source_strategy: str

    @property
    def size_bytes(self) -> int:
        """Size of the encoded audio."""
        return len(self.data)


__all__ = ["AudioFormat", "AudioSegment"]
