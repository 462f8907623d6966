"""Pre-recorded narration strategy: a random clip from an asset directory."""

import logging
import random
from pathlib import Path

from ..audio.segment import AudioFormat, AudioSegment
from ..cancel import CancelToken
from ..config import PreRecordedConfig
from ..errors import SynthesisError
from ..text.chunker import TextChunk
from .strategy import PRERECORDED

logger = logging.getLogger(__name__)

_SUFFIXES = {".mp3", ".wav"}


class PreRecordedStrategy:
    """Returns a stock narration clip in place of synthesized speech."""

    def __init__(self, config: PreRecordedConfig | None = None, rng: random.Random | None = None) -> None:
        self._config = config or PreRecordedConfig()
        self._assets_dir = Path(self._config.assets_dir)
        self._rng = rng or random.Random()

    @property
    def name(self) -> str:
        return PRERECORDED

    @property
    def network_bound(self) -> bool:
        return False

    def available_clips(self) -> list[Path]:
        """Audio files in the asset directory, sorted by name."""
        if not self._assets_dir.is_dir():
            return []
        return sorted(
            p for p in self._assets_dir.iterdir() if p.is_file() and p.suffix.lower() in _SUFFIXES
        )

    def synthesize(
        self,
        chunk: TextChunk,
        voice_id: str,
        speed_factor: float,
        language: str,
        cancel: CancelToken | None = None,
    ) -> AudioSegment:
        clips = self.available_clips()
        if not clips:
            raise SynthesisError(self.name, f"No narration clips in {self._assets_dir}", retryable=False)

        clip = self._rng.choice(clips)
        try:
            data = clip.read_bytes()
        except OSError as e:
            raise SynthesisError(self.name, f"Cannot read {clip.name}: {e}") from e

        if not data:
            raise SynthesisError(self.name, f"{clip.name} is empty")

        logger.info(f"Using pre-recorded clip {clip.name} for chunk {chunk.sequence_index}")
        return AudioSegment(data=data, format=AudioFormat.from_suffix(clip.suffix), source_strategy=self.name)


__all__ = ["PreRecordedStrategy"]
