"""voicegen - narrated marketing audio that never comes back empty.

voicegen turns business text into audio through a cascade of
text-to-speech backends:
- Hosted speech APIs (ElevenLabs, Google translate TTS)
- System speech commands (say, espeak, festival)
- Web TTS endpoints
- Pre-recorded narration, placeholder tones, and finally silence

Usage:
    python -m voicegen generate "Hello world. This is a test."
    python -m voicegen --profile prod generate --language ne "..."
"""

__version__ = "0.1.0"

from .config import VoicegenConfig
from .config.loader import load_config
from .pipeline.service import AudioGenerationService, GenerationOptions, build_service

__all__ = [
    "AudioGenerationService",
    "GenerationOptions",
    "VoicegenConfig",
    "__version__",
    "build_service",
    "load_config",
]
