"""Fallback orchestration.

Drives the ordered strategy list for every chunk: the first strategy that
returns audio wins, failures are logged and never abort the request. A
silent WAV backstop guarantees that every chunk ends up with audio.
"""

import logging
from dataclasses import dataclass, field

from ..audio.combiner import AudioCombiner
from ..audio.segment import AudioFormat, AudioSegment
from ..audio.wav import estimate_reading_seconds
from ..cancel import CancelToken, interruptible_sleep
from ..config import OrchestratorConfig, SilenceConfig
from ..errors import FatalError, SynthesisCancelled, SynthesisError
from ..text.chunker import TextChunk
from ..tts.silent import SilentWavStrategy, clamp_silence
from ..tts.strategy import PLACEHOLDER_TONE, SILENT_WAV, SynthesisStrategy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SynthesisOutcome:
    """Final audio for one request.

    Attributes:
        audio_bytes: Combined audio
        format: Container format of audio_bytes
        duration_estimate_seconds: Estimated playback length
        method_used: Lowest-priority strategy used by any chunk
        size_bytes: len(audio_bytes)
        chunk_methods: Strategy used for each chunk, in chunk order
    """

    audio_bytes: bytes
    format: AudioFormat
    duration_estimate_seconds: float
    method_used: str
    size_bytes: int
    chunk_methods: tuple[str, ...] = field(default_factory=tuple)


class FallbackOrchestrator:
    """Runs chunks through the strategy chain and combines the results."""

    def __init__(
        self,
        strategies: list[SynthesisStrategy],
        combiner: AudioCombiner | None = None,
        config: OrchestratorConfig | None = None,
        silence: SilenceConfig | None = None,
    ) -> None:
        """Initialize orchestrator.

        Args:
            strategies: Strategies in priority order
            combiner: Combiner for multi-chunk output
            config: Backoff and inter-chunk delays
            silence: Configuration for the appended backstop, if one is needed
        """
        self._strategies = list(strategies)
        if not self._strategies or self._strategies[-1].name != SILENT_WAV:
            self._strategies.append(SilentWavStrategy(silence))
        self._combiner = combiner or AudioCombiner()
        self._config = config or OrchestratorConfig()
        self._silence = silence or SilenceConfig()

    @property
    def strategy_names(self) -> list[str]:
        """Names of the strategies in the order they are tried."""
        return [s.name for s in self._strategies]

    def run(
        self,
        chunks: list[TextChunk],
        voice_id: str,
        speed_factor: float,
        language: str,
        cancel: CancelToken | None = None,
    ) -> SynthesisOutcome:
        """Synthesize all chunks and combine them.

        Raises:
            FatalError: If the backstop strategy fails
            SynthesisCancelled: If the token is cancelled
            CombinerError: If chunks is empty
        """
        segments: list[AudioSegment] = []
        ranks: list[int] = []

        for position, chunk in enumerate(sorted(chunks, key=lambda c: c.sequence_index)):
            if position > 0:
                interruptible_sleep(self._config.inter_chunk_delay, cancel)
            if cancel is not None:
                cancel.raise_if_cancelled()

            rank, segment = self._synthesize_chunk(chunk, voice_id, speed_factor, language, cancel)
            logger.info(
                f"Chunk {chunk.sequence_index + 1}/{len(chunks)}: "
                f"{segment.source_strategy} ({segment.size_bytes} bytes)"
            )
            segments.append(segment)
            ranks.append(rank)

        combined = self._combiner.combine(segments, cancel)
        chunk_methods = tuple(seg.source_strategy for seg in segments)
        method_used = self._strategies[max(ranks)].name

        outcome = SynthesisOutcome(
            audio_bytes=combined.data,
            format=combined.format,
            duration_estimate_seconds=self._estimate_duration(chunks, speed_factor, chunk_methods),
            method_used=method_used,
            size_bytes=combined.size_bytes,
            chunk_methods=chunk_methods,
        )

        if method_used in (PLACEHOLDER_TONE, SILENT_WAV):
            logger.warning(f"Audio generated with degraded method {method_used}")
        return outcome

    def _synthesize_chunk(
        self,
        chunk: TextChunk,
        voice_id: str,
        speed_factor: float,
        language: str,
        cancel: CancelToken | None,
    ) -> tuple[int, AudioSegment]:
        failures = 0
        last = len(self._strategies) - 1

        for rank, strategy in enumerate(self._strategies):
            if cancel is not None:
                cancel.raise_if_cancelled()
            try:
                segment = strategy.synthesize(chunk, voice_id, speed_factor, language, cancel)
                if not segment.data:
                    raise SynthesisError(strategy.name, "returned empty audio")
                return rank, segment
            except SynthesisCancelled:
                raise
            except Exception as e:
                error = e if isinstance(e, SynthesisError) else SynthesisError(strategy.name, f"{type(e).__name__}: {e}")
                if rank == last:
                    raise FatalError(f"Backstop strategy {strategy.name} failed: {error}") from e
                logger.warning(f"Chunk {chunk.sequence_index}: {error}")
                if strategy.network_bound and error.retryable:
                    delay = min(self._config.retry_delay * 2**failures, self._config.max_retry_delay)
                    failures += 1
                    interruptible_sleep(delay, cancel)

        raise FatalError("No strategies configured")

    def _estimate_duration(
        self,
        chunks: list[TextChunk],
        speed_factor: float,
        chunk_methods: tuple[str, ...],
    ) -> float:
        total = 0.0
        for chunk, method in zip(sorted(chunks, key=lambda c: c.sequence_index), chunk_methods):
            seconds = estimate_reading_seconds(chunk.content, self._silence.chars_per_second, speed_factor)
            if method == SILENT_WAV:
                seconds = clamp_silence(seconds, self._silence, chunk.total_chunks)
            total += seconds
        return round(total, 2)


__all__ = ["FallbackOrchestrator", "SynthesisOutcome"]
