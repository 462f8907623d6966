"""Audio containers, WAV construction, temp files and segment combining."""

from .combiner import AudioCombiner
from .commands import ffmpeg_available, run_command
from .segment import AudioFormat, AudioSegment
from .tempfiles import TempWorkspace, unique_name
from .wav import build_silent_wav, build_wav_header, estimate_reading_seconds, join_wav

__all__ = [
    "AudioCombiner",
    "AudioFormat",
    "AudioSegment",
    "TempWorkspace",
    "build_silent_wav",
    "build_wav_header",
    "estimate_reading_seconds",
    "ffmpeg_available",
    "join_wav",
    "run_command",
    "unique_name",
]
