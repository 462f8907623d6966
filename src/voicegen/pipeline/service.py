"""Audio generation service.

The entry point for callers: validates a request, prepares the text, runs
the fallback orchestrator, stores the result and optionally records it in
the generation history.
"""

import logging
import os
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from pymongo.errors import PyMongoError

from ..audio.combiner import AudioCombiner
from ..audio.segment import AudioSegment
from ..cancel import CancelToken
from ..config import VoicegenConfig
from ..errors import ValidationError
from ..storage.client import AudioGenerationRepository, MongoStorageClient
from ..storage.cloudinary import CloudinaryArtifactSink, CloudinaryClient
from ..storage.models import AudioGenerationRecord
from ..storage.sink import ArtifactReference, ArtifactSink, LocalArtifactSink
from ..text.chunker import Chunker
from ..text.normalizer import normalize
from ..tts import create_strategies
from .orchestrator import FallbackOrchestrator, SynthesisOutcome

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SynthesisRequest:
    """A validated, normalized request ready for synthesis."""

    text: str
    language: str = "en"
    voice_id: str = "default"
    speed_factor: float = 1.0


@dataclass
class GenerationOptions:
    """Caller-supplied options for one generation."""

    voice_id: str = "default"
    speed_factor: float = 1.0
    language: str = "en"
    user_id: str | None = None
    content_type: str = "general"
    business_name: str | None = None


@dataclass
class GenerationResult:
    """What the caller gets back.

    Attributes:
        artifact: Where the audio is stored
        method: Lowest-quality method used (e.g. "web_api", "silent_wav")
        text_length: Length of the normalized text
        estimated_words: text_length / 5
        file_size: Size of the audio in bytes
        voice: Voice id requested
        speed: Speed factor requested
        language: Language code
        generated_at: Completion time (UTC)
        chunk_methods: Method per chunk
        record_id: History record id, if one was saved
    """

    artifact: ArtifactReference
    method: str
    text_length: int
    estimated_words: int
    file_size: int
    voice: str
    speed: float
    language: str
    generated_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    chunk_methods: list[str] = field(default_factory=list)
    record_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        return {
            "audio_url": self.artifact.url,
            "public_id": self.artifact.public_id,
            "duration": self.artifact.duration_seconds,
            "format": self.artifact.format,
            "method": self.method,
            "text_length": self.text_length,
            "estimated_words": self.estimated_words,
            "file_size": self.file_size,
            "voice": self.voice,
            "speed": self.speed,
            "language": self.language,
            "generated_at": self.generated_at.isoformat(),
            "chunk_methods": self.chunk_methods,
            "record_id": self.record_id,
        }


class AudioGenerationService:
    """Turns text into a stored audio artifact, whatever it takes."""

    def __init__(
        self,
        orchestrator: FallbackOrchestrator,
        sink: ArtifactSink,
        config: VoicegenConfig | None = None,
        repository: AudioGenerationRepository | None = None,
    ) -> None:
        """Initialize service.

        Args:
            orchestrator: Fallback orchestrator with its strategies
            sink: Where finished audio is stored
            config: Validation, normalization and chunking settings
            repository: Optional generation history store
        """
        self._orchestrator = orchestrator
        self._sink = sink
        self._config = config or VoicegenConfig()
        self._repository = repository
        self._chunker = Chunker(self._config.chunking.max_chunk_length)

    def prepare(self, text: str, options: GenerationOptions) -> SynthesisRequest:
        """Validate input and normalize the text.

        Raises:
            ValidationError: If the text, speed or language is unacceptable
        """
        limits = self._config.text

        if not isinstance(text, str):
            raise ValidationError("Text must be a string")

        length = len(text.strip())
        if length < limits.min_text_length:
            raise ValidationError(f"Text must be at least {limits.min_text_length} characters")
        if length > limits.max_text_length:
            raise ValidationError(f"Text must be at most {limits.max_text_length} characters")

        if not options.speed_factor > 0:
            raise ValidationError("Speed factor must be positive")

        if options.language not in limits.supported_languages:
            raise ValidationError(
                f"Unsupported language '{options.language}', "
                f"expected one of {', '.join(limits.supported_languages)}"
            )

        cleaned = normalize(text, options.language, limits.max_chars_for(options.language))
        if not cleaned:
            raise ValidationError("Text is empty after removing markup and unsupported characters")

        return SynthesisRequest(
            text=cleaned,
            language=options.language,
            voice_id=options.voice_id,
            speed_factor=options.speed_factor,
        )

    def synthesize(self, request: SynthesisRequest, cancel: CancelToken | None = None) -> SynthesisOutcome:
        """Run a prepared request through the fallback chain."""
        chunks = self._chunker.split(request.text)
        logger.info(f"Synthesizing {len(request.text)} chars in {len(chunks)} chunk(s), language={request.language}")
        return self._orchestrator.run(
            chunks,
            request.voice_id,
            request.speed_factor,
            request.language,
            cancel,
        )

    def generate_audio(
        self,
        text: str,
        options: GenerationOptions | None = None,
        cancel: CancelToken | None = None,
    ) -> GenerationResult:
        """Generate, store and (optionally) record narrated audio for text.

        Raises:
            ValidationError: If the input is rejected
            StorageError: If the audio cannot be stored
            FatalError: If even the silent backstop fails
            SynthesisCancelled: If the token is cancelled
        """
        options = options or GenerationOptions()
        request = self.prepare(text, options)
        outcome = self.synthesize(request, cancel)

        artifact = self._sink.store(
            AudioSegment(data=outcome.audio_bytes, format=outcome.format, source_strategy=outcome.method_used),
            outcome.duration_estimate_seconds,
        )

        result = GenerationResult(
            artifact=artifact,
            method=outcome.method_used,
            text_length=len(request.text),
            estimated_words=len(request.text) // 5,
            file_size=outcome.size_bytes,
            voice=request.voice_id,
            speed=request.speed_factor,
            language=request.language,
            chunk_methods=list(outcome.chunk_methods),
        )

        if self._repository is not None and options.user_id:
            result.record_id = self._record(request, options, result)

        logger.info(f"Generated {result.file_size} bytes via {result.method}: {artifact.url}")
        return result

    def _record(self, request: SynthesisRequest, options: GenerationOptions, result: GenerationResult) -> str | None:
        record = AudioGenerationRecord(
            user_id=options.user_id or "",
            content=request.text,
            language=request.language,
            audio_url=result.artifact.url,
            public_id=result.artifact.public_id,
            duration=result.artifact.duration_seconds,
            voice=request.voice_id,
            business_name=options.business_name,
            content_type=options.content_type,
            file_size=result.file_size,
            metadata={
                "method": result.method,
                "chunk_methods": result.chunk_methods,
                "text_length": result.text_length,
                "estimated_words": result.estimated_words,
                "speed": request.speed_factor,
            },
            created_at=result.generated_at,
        )
        try:
            return self._repository.save(record)
        except PyMongoError as e:
            logger.error(f"Audio stored but history record failed: {e}")
            return None

    def delete_audio(self, user_id: str, record_id: str) -> bool:
        """Delete a user's generated audio and its history record.

        Returns:
            False if no such record exists for the user.

        Raises:
            RuntimeError: If no history store is configured
            StorageError: If the artifact cannot be deleted
        """
        if self._repository is None:
            raise RuntimeError("Generation history is not enabled")

        record = self._repository.get_by_id(record_id, user_id=user_id)
        if record is None:
            return False

        if not self._sink.delete(record.public_id):
            logger.warning(f"Artifact {record.public_id} was not found in storage")
        return self._repository.delete(record_id, user_id=user_id)


def build_sink(config: VoicegenConfig) -> ArtifactSink:
    """Create the artifact sink named by the configuration.

    Cloudinary without credentials falls back to local storage.
    """
    storage = config.storage
    if storage.backend == "cloudinary":
        client = CloudinaryClient(timeout=storage.upload_timeout)
        if client.is_configured:
            return CloudinaryArtifactSink(client, folder=storage.folder, temp_dir=storage.temp_dir)
        logger.warning("Cloudinary credentials missing, storing audio locally")
    elif storage.backend != "local":
        raise ValueError(f"Unknown storage backend: {storage.backend}")
    return LocalArtifactSink(storage.uploads_dir)


def build_service(config: VoicegenConfig | None = None, use_mock: bool = False) -> AudioGenerationService:
    """Wire up a service from configuration.

    Args:
        config: Full configuration (defaults if omitted)
        use_mock: Use the mock strategy instead of real backends

    Raises:
        ConnectionFailure: If the history database is enabled but unreachable
    """
    config = config or VoicegenConfig()

    orchestrator = FallbackOrchestrator(
        create_strategies(config, use_mock=use_mock),
        combiner=AudioCombiner(config.storage.temp_dir),
        config=config.orchestrator,
        silence=config.silence,
    )

    repository = None
    if config.database.enabled:
        storage_client = MongoStorageClient(
            uri=os.getenv("MONGODB_URI", config.database.uri),
            database_name=config.database.database_name,
        )
        storage_client.connect()
        repository = storage_client.generations

    return AudioGenerationService(orchestrator, build_sink(config), config, repository)


__all__ = [
    "AudioGenerationService",
    "GenerationOptions",
    "GenerationResult",
    "SynthesisRequest",
    "build_service",
    "build_sink",
]
