"""WAV construction helpers.

Builds canonical 44-byte RIFF/WAVE headers for uncompressed PCM and joins
PCM segments that share the same parameters.
"""

import io
import struct
import wave

SAMPLE_RATE = 44100
CHANNELS = 1
BITS_PER_SAMPLE = 16
HEADER_SIZE = 44


def build_wav_header(
    data_size: int,
    sample_rate: int = SAMPLE_RATE,
    channels: int = CHANNELS,
    bits_per_sample: int = BITS_PER_SAMPLE,
) -> bytes:
    """Build a canonical 44-byte PCM WAV header.

    Args:
        data_size: Size of the PCM data chunk in bytes
        sample_rate: Samples per second
        channels: Number of channels
        bits_per_sample: Bits per sample

    Returns:
        Header bytes: RIFF descriptor, 'fmt ' sub-chunk, 'data' sub-chunk header
    """
    block_align = channels * bits_per_sample // 8
    byte_rate = sample_rate * block_align
    return struct.pack(
        "<4sI4s4sIHHIIHH4sI",
        b"RIFF",
        36 + data_size,
        b"WAVE",
        b"fmt ",
        16,  # PCM fmt chunk size
        1,  # PCM
        channels,
        sample_rate,
        byte_rate,
        block_align,
        bits_per_sample,
        b"data",
        data_size,
    )


def build_silent_wav(duration_seconds: float, sample_rate: int = SAMPLE_RATE) -> bytes:
    """Build a mono 16-bit WAV file filled with silence.

    Args:
        duration_seconds: Length of the silence
        sample_rate: Samples per second

    Returns:
        Complete WAV file bytes (header + zero samples)
    """
    num_samples = int(sample_rate * duration_seconds)
    data_size = num_samples * CHANNELS * BITS_PER_SAMPLE // 8
    return build_wav_header(data_size, sample_rate) + bytes(data_size)


def wav_duration_seconds(data: bytes) -> float:
    """Return the duration of a WAV file held in memory."""
    with wave.open(io.BytesIO(data), "rb") as wav_file:
        return wav_file.getnframes() / float(wav_file.getframerate())


def join_wav(segments: list[bytes]) -> bytes:
    """Join WAV files with identical PCM parameters into one file.

    Raises:
        ValueError: If the segments do not share channels, width and rate
        wave.Error: If a segment is not a readable WAV file
    """
    params = None
    frames: list[bytes] = []

    for data in segments:
        with wave.open(io.BytesIO(data), "rb") as wav_file:
            current = (
                wav_file.getnchannels(),
                wav_file.getsampwidth(),
                wav_file.getframerate(),
            )
            if params is None:
                params = current
            elif current != params:
                raise ValueError(f"WAV parameters differ: {current} != {params}")
            frames.append(wav_file.readframes(wav_file.getnframes()))

    if params is None:
        raise ValueError("No WAV segments to join")

    channels, sample_width, sample_rate = params
    pcm = b"".join(frames)
    return build_wav_header(len(pcm), sample_rate, channels, sample_width * 8) + pcm


def estimate_reading_seconds(text: str, chars_per_second: float = 15.0, speed: float = 1.0) -> float:
    """Estimate narration time from character count.

    15 characters per second corresponds to about 180 words per minute
    at five characters per word.
    """
    if chars_per_second <= 0 or speed <= 0:
        raise ValueError("chars_per_second and speed must be positive")
    return len(text) / chars_per_second / speed


__all__ = [
    "BITS_PER_SAMPLE",
    "CHANNELS",
    "HEADER_SIZE",
    "SAMPLE_RATE",
    "build_silent_wav",
    "build_wav_header",
    "estimate_reading_seconds",
    "join_wav",
    "wav_duration_seconds",
]
