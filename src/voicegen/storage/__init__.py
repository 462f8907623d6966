"""Storage for generated audio.

- Artifact sinks (Cloudinary, local directory) for the audio files
- MongoDB generation history
"""

from .client import AudioGenerationRepository, MongoStorageClient
from .cloudinary import CloudinaryArtifactSink, CloudinaryClient
from .models import AudioGenerationRecord
from .sink import ArtifactReference, ArtifactSink, LocalArtifactSink

__all__ = [
    "ArtifactReference",
    "ArtifactSink",
    "AudioGenerationRecord",
    "AudioGenerationRepository",
    "CloudinaryArtifactSink",
    "CloudinaryClient",
    "LocalArtifactSink",
    "MongoStorageClient",
]
