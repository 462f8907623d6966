"""Artifact sinks: where finished audio goes.

Defines the sink interface and a local-directory implementation. The
Cloudinary implementation lives in `voicegen.storage.cloudinary`.
"""

import logging
import wave
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from ..audio.segment import AudioSegment
from ..audio.tempfiles import unique_name
from ..audio.wav import wav_duration_seconds
from ..errors import StorageError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ArtifactReference:
    """Where a stored audio file can be fetched from.

    Attributes:
        url: Public URL (or path) of the file
        public_id: Identifier used to delete the file
        size_bytes: Stored size
        duration_seconds: Playback length reported by the store, or estimated
        format: File format ("mp3", "wav", ...)
    """

    url: str
    public_id: str
    size_bytes: int
    duration_seconds: float
    format: str


class ArtifactSink(Protocol):
    """Interface for storing finished audio."""

    def store(self, segment: AudioSegment, duration_seconds: float = 0.0) -> ArtifactReference:
        """Persist audio and return a reference to it.

        Raises:
            StorageError: If the audio cannot be stored
        """
        ...

    def delete(self, public_id: str) -> bool:
        """Delete stored audio. Returns True if something was deleted."""
        ...

    def get(self, public_id: str) -> ArtifactReference | None:
        """Look up stored audio, or None if there is none under public_id."""
        ...

    def list_artifacts(self, max_results: int = 100) -> list[ArtifactReference]:
        """List stored audio, at most max_results entries."""
        ...


class LocalArtifactSink:
    """Stores audio files in a local uploads directory."""

    def __init__(self, uploads_dir: Path | str = "uploads/audio", url_prefix: str = "/uploads/audio") -> None:
        self._uploads_dir = Path(uploads_dir)
        self._url_prefix = url_prefix.rstrip("/")

    def store(self, segment: AudioSegment, duration_seconds: float = 0.0) -> ArtifactReference:
        filename = unique_name("audio", segment.format.suffix)
        path = self._uploads_dir / filename
        try:
            self._uploads_dir.mkdir(parents=True, exist_ok=True)
            path.write_bytes(segment.data)
        except OSError as e:
            raise StorageError(f"Failed to write {path}: {e}") from e

        logger.info(f"Stored audio locally at {path} ({segment.size_bytes} bytes)")
        return ArtifactReference(
            url=f"{self._url_prefix}/{filename}",
            public_id=path.stem,
            size_bytes=segment.size_bytes,
            duration_seconds=duration_seconds,
            format=segment.format.value,
        )

    def delete(self, public_id: str) -> bool:
        deleted = False
        for path in self._uploads_dir.glob(f"{Path(public_id).name}.*"):
            try:
                path.unlink()
                deleted = True
            except OSError as e:
                raise StorageError(f"Failed to delete {path}: {e}") from e
        return deleted

    def path_for(self, public_id: str) -> Path | None:
        """Local file for a public id, if it exists."""
        matches = sorted(self._uploads_dir.glob(f"{Path(public_id).name}.*"))
        return matches[0] if matches else None

    def get(self, public_id: str) -> ArtifactReference | None:
        path = self.path_for(public_id)
        return self._reference(path) if path else None

    def list_artifacts(self, max_results: int = 100) -> list[ArtifactReference]:
        if not self._uploads_dir.is_dir():
            return []
        files = sorted((p for p in self._uploads_dir.iterdir() if p.is_file()), key=lambda p: p.name, reverse=True)
        return [self._reference(p) for p in files[:max_results]]

    def _reference(self, path: Path) -> ArtifactReference:
        duration = 0.0
        if path.suffix == ".wav":
            try:
                duration = wav_duration_seconds(path.read_bytes())
            except (wave.Error, EOFError) as e:
                logger.warning(f"Cannot read WAV duration of {path}: {e}")
        return ArtifactReference(
            url=f"{self._url_prefix}/{path.name}",
            public_id=path.stem,
            size_bytes=path.stat().st_size,
            duration_seconds=duration,
            format=path.suffix.lstrip("."),
        )


__all__ = ["ArtifactReference", "ArtifactSink", "LocalArtifactSink"]
