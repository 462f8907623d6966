"""Error types for the audio generation pipeline.

Only ValidationError and StorageError are meant to reach callers in normal
operation. SynthesisError and CombinerError are recovered inside the pipeline.
"""

from pathlib import Path


class VoicegenError(Exception):
    """Base exception for voicegen errors."""

    pass


class ValidationError(VoicegenError):
    """Raised when input text or options are rejected before synthesis."""

    pass


class SynthesisError(VoicegenError):
    """Raised when a single synthesis strategy fails."""

    def __init__(self, strategy: str, message: str, retryable: bool = True) -> None:
        """Initialize synthesis error.

        Args:
            strategy: Name of the strategy that failed.
            message: Error message.
            retryable: False for expected, fast failures such as a missing
                binary, which are not worth a backoff delay.
        """
        super().__init__(f"{strategy}: {message}")
        self.strategy = strategy
        self.retryable = retryable


class CommandError(VoicegenError):
    """Raised when an external command exits non-zero or cannot be started."""

    def __init__(self, message: str, returncode: int | None = None) -> None:
        super().__init__(message)
        self.returncode = returncode


class CommandTimeoutError(CommandError):
    """Raised when an external command exceeds its timeout."""

    pass


class CombinerError(VoicegenError):
    """Raised when audio segments cannot be muxed into one stream."""

    pass


class StorageError(VoicegenError):
    """Raised when the final artifact cannot be stored or deleted."""

    def __init__(self, message: str, local_path: Path | None = None) -> None:
        """Initialize storage error.

        Args:
            message: Error message.
            local_path: Locally retained copy of the audio, if one exists.
        """
        super().__init__(message)
        self.local_path = local_path


class FatalError(VoicegenError):
    """Raised when even the terminal fallback strategy fails."""

    pass


class SynthesisCancelled(VoicegenError):
    """Raised when the caller cancels a request in flight."""

    pass


class ContentGenerationError(VoicegenError):
    """Raised when the LLM content service fails."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


__all__ = [
    "CombinerError",
    "CommandError",
    "CommandTimeoutError",
    "ContentGenerationError",
    "FatalError",
    "StorageError",
    "SynthesisCancelled",
    "SynthesisError",
    "ValidationError",
    "VoicegenError",
]
