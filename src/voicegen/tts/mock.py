"""Mock strategy for testing.

Provides a controllable strategy for unit and integration testing of the
fallback chain.
"""

import math
import struct
from collections.abc import Callable

from ..audio.segment import AudioFormat, AudioSegment
from ..audio.wav import build_wav_header
from ..cancel import CancelToken
from ..errors import SynthesisError
from ..text.chunker import TextChunk


class MockStrategy:
    """Mock strategy for testing.

    Generates a short tone WAV by default, or custom bytes from `payload`.
    Can be told to fail so fallback order can be exercised.
    """

    def __init__(
        self,
        name: str = "mock",
        fail: bool = False,
        network_bound: bool = False,
        payload: bytes | Callable[[TextChunk], bytes] | None = None,
        audio_format: AudioFormat = AudioFormat.WAV,
        sample_rate: int = 22050,
    ) -> None:
        """Initialize mock strategy.

        Args:
            name: Strategy name reported as the method used
            fail: If True, every call raises SynthesisError
            network_bound: Reported network_bound flag
            payload: Fixed bytes, or a function of the chunk, to return
            audio_format: Format of the returned segment
            sample_rate: Sample rate for generated tones
        """
        self._name = name
        self._fail = fail
        self._network_bound = network_bound
        self._payload = payload
        self._format = audio_format
        self._sample_rate = sample_rate
        self._call_count: int = 0
        self._synthesized_texts: list[str] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def network_bound(self) -> bool:
        return self._network_bound

    def synthesize(
        self,
        chunk: TextChunk,
        voice_id: str,
        speed_factor: float,
        language: str,
        cancel: CancelToken | None = None,
    ) -> AudioSegment:
        """Return canned audio, or fail if told to."""
        self._call_count += 1
        self._synthesized_texts.append(chunk.content)

        if cancel is not None:
            cancel.raise_if_cancelled()

        if self._fail:
            raise SynthesisError(self._name, "forced failure")

        if callable(self._payload):
            data = self._payload(chunk)
        elif self._payload is not None:
            data = self._payload
        else:
            # Roughly 100ms per word at normal speed
            duration_ms = int(max(100, len(chunk.content.split()) * 100) / speed_factor)
            data = self._generate_tone(440, duration_ms)

        return AudioSegment(data=data, format=self._format, source_strategy=self._name)

    def _generate_tone(self, frequency: int, duration_ms: int) -> bytes:
        """Generate a sine tone as a complete WAV file."""
        num_samples = int(self._sample_rate * duration_ms / 1000)
        samples = (
            struct.pack("<h", int(32767 * 0.3 * math.sin(2 * math.pi * frequency * i / self._sample_rate)))
            for i in range(num_samples)
        )
        pcm = b"".join(samples)
        return build_wav_header(len(pcm), self._sample_rate) + pcm

    def set_fail(self, fail: bool) -> None:
        """Force subsequent calls to fail or succeed."""
        self._fail = fail

    @property
    def call_count(self) -> int:
        """Get number of synthesize calls."""
        return self._call_count

    @property
    def synthesized_texts(self) -> list[str]:
        """Get list of synthesized texts."""
        return self._synthesized_texts.copy()

    def clear(self) -> None:
        """Reset mock state."""
        self._call_count = 0
        self._synthesized_texts.clear()


__all__ = ["MockStrategy"]
