"""Placeholder tone strategy.

Renders one short sine tone per word, separated by silent gaps, so the
listener hears the rhythm of the text when no real voice is available.
"""

import logging
from pathlib import Path

from ..audio.commands import ffmpeg_available, run_command
from ..audio.segment import AudioFormat, AudioSegment
from ..audio.tempfiles import TempWorkspace
from ..cancel import CancelToken
from ..config import ToneConfig
from ..errors import CommandError, SynthesisError
from ..text.chunker import TextChunk
from .strategy import PLACEHOLDER_TONE

logger = logging.getLogger(__name__)

SAMPLE_RATE = 44100
MIN_TONE_SECONDS = 0.1


def tone_pattern(text: str, seconds_per_char: float, speed_factor: float = 1.0, max_words: int = 60) -> list[tuple[int, float]]:
    """Compute (frequency Hz, duration s) for each word.

    Duration is proportional to word length; pitch varies with it so
    neighbouring words are distinguishable.
    """
    pattern = []
    for word in text.split()[:max_words]:
        duration = max(MIN_TONE_SECONDS, len(word) * seconds_per_char) / speed_factor
        frequency = 330 + (len(word) * 37) % 330
        pattern.append((frequency, round(duration, 3)))
    return pattern


def build_filter_graph(pattern: list[tuple[int, float]], gap_seconds: float) -> str:
    """Build an ffmpeg filter_complex that renders the pattern to [out]."""
    nodes: list[str] = []
    labels: list[str] = []
    for idx, (frequency, duration) in enumerate(pattern):
        nodes.append(f"sine=frequency={frequency}:duration={duration}:sample_rate={SAMPLE_RATE}[t{idx}]")
        labels.append(f"[t{idx}]")
        if idx < len(pattern) - 1 and gap_seconds > 0:
            nodes.append(
                f"anullsrc=channel_layout=mono:sample_rate={SAMPLE_RATE},atrim=duration={gap_seconds}[g{idx}]"
            )
            labels.append(f"[g{idx}]")
    nodes.append(f"{''.join(labels)}concat=n={len(labels)}:v=0:a=1[out]")
    return ";".join(nodes)


class PlaceholderToneStrategy:
    """Synthetic tone pattern rendered with ffmpeg lavfi sources."""

    def __init__(self, config: ToneConfig | None = None, temp_dir: Path | str = "temp") -> None:
        self._config = config or ToneConfig()
        self._temp_dir = Path(temp_dir)

    @property
    def name(self) -> str:
        return PLACEHOLDER_TONE

    @property
    def network_bound(self) -> bool:
        return False

    def synthesize(
        self,
        chunk: TextChunk,
        voice_id: str,
        speed_factor: float,
        language: str,
        cancel: CancelToken | None = None,
    ) -> AudioSegment:
        if not ffmpeg_available():
            raise SynthesisError(self.name, "ffmpeg not available", retryable=False)

        pattern = tone_pattern(
            chunk.content,
            self._config.seconds_per_char,
            speed_factor,
            self._config.max_words,
        )
        if not pattern:
            pattern = [(440, 1.0)]

        graph = build_filter_graph(pattern, self._config.gap_seconds)

        with TempWorkspace(self._temp_dir, "tone") as ws:
            output = ws.path(".mp3")
            try:
                run_command(
                    [
                        "ffmpeg",
                        "-hide_banner",
                        "-loglevel",
                        "error",
                        "-y",
                        "-filter_complex",
                        graph,
                        "-map",
                        "[out]",
                        "-codec:a",
                        "libmp3lame",
                        "-b:a",
                        "64k",
                        str(output),
                    ],
                    timeout=self._config.timeout,
                    cancel=cancel,
                )
                data = output.read_bytes()
            except CommandError as e:
                raise SynthesisError(self.name, str(e)) from e
            except OSError as e:
                raise SynthesisError(self.name, f"Cannot read tone output: {e}") from e

        if not data:
            raise SynthesisError(self.name, "ffmpeg produced an empty file")

        logger.warning(f"Chunk {chunk.sequence_index} rendered as placeholder tones ({len(pattern)} words)")
        return AudioSegment(data=data, format=AudioFormat.MP3, source_strategy=self.name)


__all__ = ["PlaceholderToneStrategy", "build_filter_graph", "tone_pattern"]
