"""Data models for generation history storage."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any


@dataclass
class AudioGenerationRecord:
    """One generated audio file, as recorded in the history store."""

    user_id: str
    content: str
    language: str
    audio_url: str
    public_id: str
    duration: float
    voice: str = "default"
    business_name: str | None = None
    content_type: str = "general"
    file_size: int = 0
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for MongoDB storage."""
        return {
            "user_id": self.user_id,
            "content": self.content,
            "language": self.language,
            "audio_url": self.audio_url,
            "public_id": self.public_id,
            "duration": self.duration,
            "voice": self.voice,
            "business_name": self.business_name,
            "content_type": self.content_type,
            "file_size": self.file_size,
            "metadata": self.metadata,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AudioGenerationRecord":
        """Create from MongoDB document."""
        return cls(
            id=str(data["_id"]) if "_id" in data else None,
            user_id=data["user_id"],
            content=data.get("content", ""),
            language=data.get("language", "en"),
            audio_url=data.get("audio_url", ""),
            public_id=data.get("public_id", ""),
            duration=data.get("duration", 0.0),
            voice=data.get("voice", "default"),
            business_name=data.get("business_name"),
            content_type=data.get("content_type", "general"),
            file_size=data.get("file_size", 0),
            metadata=data.get("metadata", {}),
            created_at=data.get("created_at", datetime.now(UTC)),
        )


__all__ = ["AudioGenerationRecord"]
