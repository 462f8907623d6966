"""Silent WAV strategy, the unconditional backstop.

Builds the file in memory, so it needs no binaries, network or disk.
"""

import logging

from ..audio.segment import AudioFormat, AudioSegment
from ..audio.wav import build_silent_wav, estimate_reading_seconds
from ..cancel import CancelToken
from ..config import SilenceConfig
from ..errors import SynthesisError
from ..text.chunker import TextChunk
from .strategy import SILENT_WAV

logger = logging.getLogger(__name__)


def clamp_silence(seconds: float, config: SilenceConfig, total_chunks: int = 1) -> float:
    """Clamp a chunk's silence to the configured bounds.

    The minimum is shared by all chunks of a request, so a request split
    into n chunks gets at least min_seconds in total rather than per chunk.
    """
    floor = config.min_seconds / max(1, total_chunks)
    return max(floor, min(config.max_seconds, seconds))


class SilentWavStrategy:
    """Silence lasting about as long as reading the chunk aloud."""

    def __init__(self, config: SilenceConfig | None = None) -> None:
        self._config = config or SilenceConfig()

    @property
    def name(self) -> str:
        return SILENT_WAV

    @property
    def network_bound(self) -> bool:
        return False

    def duration_for(self, text: str, speed_factor: float = 1.0, total_chunks: int = 1) -> float:
        """Estimated reading time, clamped to the configured bounds."""
        seconds = estimate_reading_seconds(text, self._config.chars_per_second, speed_factor)
        return clamp_silence(seconds, self._config, total_chunks)

    def synthesize(
        self,
        chunk: TextChunk,
        voice_id: str,
        speed_factor: float,
        language: str,
        cancel: CancelToken | None = None,
    ) -> AudioSegment:
        try:
            duration = self.duration_for(chunk.content, speed_factor, chunk.total_chunks)
        except ValueError as e:
            raise SynthesisError(self.name, str(e), retryable=False) from e

        data = build_silent_wav(duration)
        logger.warning(f"Chunk {chunk.sequence_index} rendered as {duration:.1f}s of silence")
        return AudioSegment(data=data, format=AudioFormat.WAV, source_strategy=self.name)


__all__ = ["SilentWavStrategy", "clamp_silence"]
