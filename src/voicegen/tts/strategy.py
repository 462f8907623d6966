"""Synthesis strategy protocol.

Defines the interface every text-to-speech fallback strategy implements.
"""

from typing import Protocol

from ..audio.segment import AudioSegment
from ..cancel import CancelToken
from ..text.chunker import TextChunk

# Strategy names, in default priority order
CLOUD_TTS = "cloud_tts"
SYSTEM_TTS = "system_tts"
WEB_API = "web_api"
PRERECORDED = "prerecorded"
PLACEHOLDER_TONE = "placeholder_tone"
SILENT_WAV = "silent_wav"

PRIORITY = (CLOUD_TTS, SYSTEM_TTS, WEB_API, PRERECORDED, PLACEHOLDER_TONE, SILENT_WAV)


class SynthesisStrategy(Protocol):
    """Interface for one way of turning a chunk of text into audio.

    Implementations are stateless between calls and safe to share across
    requests.
    """

    @property
    def name(self) -> str:
        """Stable identifier recorded as the method used."""
        ...

    @property
    def network_bound(self) -> bool:
        """True if failures may be transient remote errors worth a backoff."""
        ...

    def synthesize(
        self,
        chunk: TextChunk,
        voice_id: str,
        speed_factor: float,
        language: str,
        cancel: CancelToken | None = None,
    ) -> AudioSegment:
        """Synthesize one chunk.

        Args:
            chunk: Text to speak
            voice_id: Public voice identifier
            speed_factor: Speaking rate multiplier (1.0 = normal)
            language: Language code
            cancel: Optional cancellation token

        Returns:
            AudioSegment with non-empty data

        Raises:
            SynthesisError: If this strategy cannot produce audio
            SynthesisCancelled: If the token is cancelled mid-attempt
        """
        ...


__all__ = [
    "CLOUD_TTS",
    "PLACEHOLDER_TONE",
    "PRERECORDED",
    "PRIORITY",
    "SILENT_WAV",
    "SYSTEM_TTS",
    "SynthesisStrategy",
    "WEB_API",
]
