"""Configuration module for voicegen.

This module provides configuration dataclasses; loading lives in
`voicegen.config.loader` and profile detection in `voicegen.config.profiles`.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol


@dataclass
class TextConfig:
    """Input validation and normalization limits."""

    min_text_length: int = 10
    max_text_length: int = 10000
    default_max_chars: int = 2000
    max_chars_by_language: dict[str, int] = field(
        default_factory=lambda: {"ne": 1500, "hi": 1500}
    )
    supported_languages: list[str] = field(default_factory=lambda: ["en", "ne", "hi"])

    def max_chars_for(self, language: str) -> int:
        """Return the normalized-text cap for a language."""
        return self.max_chars_by_language.get(language, self.default_max_chars)


@dataclass
class ChunkingConfig:
    """Text chunking configuration."""

    max_chunk_length: int = 280


@dataclass
class OrchestratorConfig:
    """Fallback orchestration timing."""

    retry_delay: float = 0.1
    max_retry_delay: float = 1.0
    inter_chunk_delay: float = 0.1


@dataclass
class CloudTTSConfig:
    """Hosted speech API configuration."""

    enabled: bool = True
    translate_url: str = "https://translate.google.com/translate_tts"
    max_request_chars: int = 200
    min_audio_bytes: int = 1000
    timeout: float = 15.0
    elevenlabs_model: str = "eleven_multilingual_v2"


@dataclass
class SystemTTSConfig:
    """Platform speech command configuration."""

    enabled: bool = True
    timeout: float = 30.0
    words_per_minute: int = 160


@dataclass
class WebTTSConfig:
    """Third-party web TTS endpoint configuration."""

    enabled: bool = True
    endpoints: list[str] = field(
        default_factory=lambda: [
            "https://api16-normal-c-useast1a.tiktokv.com/media/api/text/speech/invoke/",
            "https://api16-normal-v6.tiktokv.com/media/api/text/speech/invoke/",
            "https://api22-normal-c-alisg.tiktokv.com/media/api/text/speech/invoke/",
        ]
    )
    attempts: int = 3
    backoff: float = 1.0
    timeout: float = 15.0


@dataclass
class PreRecordedConfig:
    """Pre-recorded narration fallback configuration."""

    enabled: bool = True
    assets_dir: str = "assets/narration"


@dataclass
class ToneConfig:
    """Placeholder tone pattern configuration."""

    enabled: bool = True
    seconds_per_char: float = 0.06
    gap_seconds: float = 0.08
    max_words: int = 60
    timeout: float = 30.0


@dataclass
class SilenceConfig:
    """Silent WAV backstop configuration."""

    chars_per_second: float = 15.0
    min_seconds: float = 10.0
    max_seconds: float = 300.0


@dataclass
class StorageConfig:
    """Artifact storage configuration."""

    backend: str = "cloudinary"
    folder: str = "voice-ai-audio"
    temp_dir: str = "temp"
    uploads_dir: str = "uploads/audio"
    upload_timeout: float = 60.0


@dataclass
class DatabaseConfig:
    """Generation history store configuration."""

    enabled: bool = False
    uri: str = "mongodb://localhost:27017"
    database_name: str = "voicegen"


@dataclass
class ContentConfig:
    """Marketing content generation configuration."""

    model: str = "claude-3-haiku-20240307"
    max_tokens: int = 800
    temperature: float = 0.7


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"


@dataclass
class VoicegenConfig:
    """Main voicegen configuration."""

    text: TextConfig = field(default_factory=TextConfig)
    chunking: ChunkingConfig = field(default_factory=ChunkingConfig)
    orchestrator: OrchestratorConfig = field(default_factory=OrchestratorConfig)
    cloud: CloudTTSConfig = field(default_factory=CloudTTSConfig)
    system: SystemTTSConfig = field(default_factory=SystemTTSConfig)
    web: WebTTSConfig = field(default_factory=WebTTSConfig)
    prerecorded: PreRecordedConfig = field(default_factory=PreRecordedConfig)
    tone: ToneConfig = field(default_factory=ToneConfig)
    silence: SilenceConfig = field(default_factory=SilenceConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    content: ContentConfig = field(default_factory=ContentConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


class ConfigLoader(Protocol):
    """Protocol for configuration loading."""

    def load(self, path: Path) -> VoicegenConfig:
        """Load configuration from file path."""
        ...

    def load_profile(self, profile: str) -> VoicegenConfig:
        """Load configuration by profile name (dev, prod, test)."""
        ...

    def get_config_dir(self) -> Path:
        """Get the configuration directory path."""
        ...


__all__ = [
    "ChunkingConfig",
    "CloudTTSConfig",
    "ConfigLoader",
    "ContentConfig",
    "DatabaseConfig",
    "LoggingConfig",
    "OrchestratorConfig",
    "PreRecordedConfig",
    "SilenceConfig",
    "StorageConfig",
    "SystemTTSConfig",
    "TextConfig",
    "ToneConfig",
    "VoicegenConfig",
    "WebTTSConfig",
]
