"""Unit tests for artifact sinks and the generation history store."""

import base64
import hashlib
from datetime import UTC, datetime, timedelta
from pathlib import Path
from unittest.mock import patch

import httpx
import mongomock
import pytest
from pymongo.errors import ConnectionFailure

from voicegen.audio.segment import AudioFormat, AudioSegment
from voicegen.audio.wav import build_silent_wav
from voicegen.errors import StorageError
from voicegen.storage.client import (
    AudioGenerationRepository,
    MongoStorageClient,
    retry_on_connection_failure,
)
from voicegen.storage.cloudinary import CloudinaryArtifactSink, CloudinaryClient, sign_params
from voicegen.storage.models import AudioGenerationRecord
from voicegen.storage.sink import ArtifactReference, LocalArtifactSink


def _segment(data: bytes = b"mp3-bytes") -> AudioSegment:
    return AudioSegment(data=data, format=AudioFormat.MP3, source_strategy="web_api")


def _record(user_id: str = "user-1", minutes_ago: int = 0, **kwargs) -> AudioGenerationRecord:
    return AudioGenerationRecord(
        user_id=user_id,
        content="Hello world.",
        language=kwargs.pop("language", "en"),
        audio_url="/uploads/audio/a.mp3",
        public_id="a",
        duration=10.0,
        created_at=datetime(2024, 6, 1, 12, 0, tzinfo=UTC) - timedelta(minutes=minutes_ago),
        **kwargs,
    )


class TestLocalArtifactSink:
    """Tests for local file storage."""

    def test_store_and_delete(self, tmp_path: Path) -> None:
        sink = LocalArtifactSink(tmp_path / "audio", url_prefix="/uploads/audio/")

        ref = sink.store(_segment(), duration_seconds=3.5)

        stored = sink.path_for(ref.public_id)
        assert stored is not None
        assert stored.read_bytes() == b"mp3-bytes"
        assert ref.url == f"/uploads/audio/{stored.name}"
        assert ref.size_bytes == 9
        assert ref.duration_seconds == 3.5
        assert ref.format == "mp3"

        assert sink.delete(ref.public_id)
        assert sink.path_for(ref.public_id) is None
        assert not sink.delete(ref.public_id)

    def test_delete_ignores_path_components(self, tmp_path: Path) -> None:
        outside = tmp_path / "secret.mp3"
        outside.write_bytes(b"keep")
        sink = LocalArtifactSink(tmp_path / "audio")

        assert not sink.delete("../secret")
        assert outside.exists()

    def test_write_failure_is_storage_error(self, tmp_path: Path) -> None:
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")

        with pytest.raises(StorageError):
            LocalArtifactSink(blocker / "audio").store(_segment())

    def test_get_and_list(self, tmp_path: Path) -> None:
        sink = LocalArtifactSink(tmp_path / "audio")
        mp3 = sink.store(_segment())
        wav = sink.store(AudioSegment(data=build_silent_wav(1.5), format=AudioFormat.WAV, source_strategy="silent_wav"))

        found = sink.get(wav.public_id)
        assert found is not None
        assert found.url == wav.url
        assert found.format == "wav"
        assert found.size_bytes == wav.size_bytes
        assert found.duration_seconds == pytest.approx(1.5)

        assert {ref.public_id for ref in sink.list_artifacts()} == {mp3.public_id, wav.public_id}
        assert len(sink.list_artifacts(max_results=1)) == 1

    def test_get_missing_and_list_empty(self, tmp_path: Path) -> None:
        sink = LocalArtifactSink(tmp_path / "never-created")
        assert sink.get("audio_1_abc") is None
        assert sink.list_artifacts() == []


class TestSignParams:
    """Tests for request signing."""

    def test_signature(self) -> None:
        params = {"timestamp": 1700000000, "public_id": "audio_1", "folder": "voice-ai-audio"}
        expected = hashlib.sha1(
            b"folder=voice-ai-audio&public_id=audio_1&timestamp=1700000000secret"
        ).hexdigest()

        assert sign_params(params, "secret") == expected

    def test_empty_values_skipped(self) -> None:
        assert sign_params({"a": 1, "b": "", "c": None}, "s") == hashlib.sha1(b"a=1s").hexdigest()


def _cloudinary(handler) -> CloudinaryClient:
    return CloudinaryClient(
        cloud_name="demo",
        api_key="key",
        api_secret="secret",
        client=httpx.Client(transport=httpx.MockTransport(handler)),
    )


RESOURCE = {
    "public_id": "voice-ai-audio/x",
    "secure_url": "https://res.cloudinary.com/demo/video/upload/voice-ai-audio/x.mp3",
    "bytes": 2048,
    "duration": 6.5,
    "format": "mp3",
}


class TestCloudinaryArtifactSink:
    """Tests for Cloudinary uploads, with the API faked."""

    def test_upload(self, tmp_path: Path) -> None:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(
                200,
                json={
                    "secure_url": "https://res.cloudinary.com/demo/video/upload/voice-ai-audio/x.mp3",
                    "public_id": "voice-ai-audio/x",
                    "bytes": 9,
                    "duration": 4.2,
                    "format": "mp3",
                },
            )

        sink = CloudinaryArtifactSink(_cloudinary(handler), temp_dir=tmp_path)
        ref = sink.store(_segment(), duration_seconds=3.0)

        assert ref.url.startswith("https://res.cloudinary.com/")
        assert ref.public_id == "voice-ai-audio/x"
        assert ref.duration_seconds == 4.2
        assert str(requests[0].url) == "https://api.cloudinary.com/v1_1/demo/video/upload"
        body = requests[0].content
        assert b'name="signature"' in body
        assert b'name="api_key"' in body
        assert b"mp3-bytes" in body
        assert list(tmp_path.iterdir()) == []

    def test_failed_upload_keeps_local_copy(self, tmp_path: Path) -> None:
        sink = CloudinaryArtifactSink(_cloudinary(lambda r: httpx.Response(500, text="boom")), temp_dir=tmp_path)

        with pytest.raises(StorageError) as exc_info:
            sink.store(_segment())

        kept = exc_info.value.local_path
        assert kept is not None
        assert kept.read_bytes() == b"mp3-bytes"
        assert "HTTP 500" in str(exc_info.value)

    def test_incomplete_response_is_error(self, tmp_path: Path) -> None:
        sink = CloudinaryArtifactSink(_cloudinary(lambda r: httpx.Response(200, json={"bytes": 9})), temp_dir=tmp_path)
        with pytest.raises(StorageError):
            sink.store(_segment())

    def test_delete(self, tmp_path: Path) -> None:
        paths: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            paths.append(request.url.path)
            return httpx.Response(200, json={"result": "ok"})

        assert CloudinaryArtifactSink(_cloudinary(handler), temp_dir=tmp_path).delete("voice-ai-audio/x")
        assert paths == ["/v1_1/demo/video/destroy"]

    def test_delete_not_found(self, tmp_path: Path) -> None:
        sink = CloudinaryArtifactSink(
            _cloudinary(lambda r: httpx.Response(200, json={"result": "not found"})), temp_dir=tmp_path
        )
        assert not sink.delete("missing")

    def test_get(self, tmp_path: Path) -> None:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={**RESOURCE, "created_at": "2024-06-01T12:00:00Z"})

        ref = CloudinaryArtifactSink(_cloudinary(handler), temp_dir=tmp_path).get("voice-ai-audio/x")

        assert ref == ArtifactReference(
            url=RESOURCE["secure_url"],
            public_id="voice-ai-audio/x",
            size_bytes=2048,
            duration_seconds=6.5,
            format="mp3",
        )
        assert requests[0].method == "GET"
        assert requests[0].url.path == "/v1_1/demo/resources/video/upload/voice-ai-audio/x"
        assert requests[0].headers["authorization"] == "Basic " + base64.b64encode(b"key:secret").decode()

    def test_get_missing(self, tmp_path: Path) -> None:
        sink = CloudinaryArtifactSink(_cloudinary(lambda r: httpx.Response(404, json={})), temp_dir=tmp_path)
        assert sink.get("voice-ai-audio/gone") is None

    def test_lookup_error_is_storage_error(self, tmp_path: Path) -> None:
        sink = CloudinaryArtifactSink(_cloudinary(lambda r: httpx.Response(401, text="denied")), temp_dir=tmp_path)
        with pytest.raises(StorageError, match="HTTP 401"):
            sink.get("voice-ai-audio/x")

    def test_list_artifacts(self, tmp_path: Path) -> None:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"resources": [RESOURCE, {"bytes": 1}]})

        refs = CloudinaryArtifactSink(_cloudinary(handler), temp_dir=tmp_path).list_artifacts(max_results=5)

        assert [ref.public_id for ref in refs] == ["voice-ai-audio/x"]
        assert requests[0].url.path == "/v1_1/demo/resources/video/upload"
        assert requests[0].url.params["prefix"] == "voice-ai-audio/"
        assert requests[0].url.params["max_results"] == "5"

    def test_unconfigured_client_raises(self, monkeypatch) -> None:
        for name in ("CLOUDINARY_CLOUD_NAME", "CLOUDINARY_API_KEY", "CLOUDINARY_API_SECRET"):
            monkeypatch.delenv(name, raising=False)
        client = CloudinaryClient()

        assert not client.is_configured
        with pytest.raises(StorageError, match="not configured"):
            client.delete("x")


class TestAudioGenerationRecord:
    """Tests for the history document model."""

    def test_round_trip(self) -> None:
        record = _record(voice="en_us_002", business_name="Tea House", metadata={"method": "web_api"})
        doc = {"_id": "abc123", **record.to_dict()}

        restored = AudioGenerationRecord.from_dict(doc)

        assert restored.id == "abc123"
        assert restored.voice == "en_us_002"
        assert restored.business_name == "Tea House"
        assert restored.metadata == {"method": "web_api"}

    def test_from_sparse_document(self) -> None:
        restored = AudioGenerationRecord.from_dict({"user_id": "u"})
        assert restored.language == "en"
        assert restored.content_type == "general"
        assert restored.id is None


class TestAudioGenerationRepository:
    """Tests for the repository against mongomock."""

    @pytest.fixture
    def repository(self) -> AudioGenerationRepository:
        return AudioGenerationRepository(mongomock.MongoClient().voicegen.audio_generations)

    def test_save_and_get(self, repository) -> None:
        record_id = repository.save(_record())

        found = repository.get_by_id(record_id)
        assert found is not None
        assert found.id == record_id
        assert found.content == "Hello world."

    def test_get_scoped_to_owner(self, repository) -> None:
        record_id = repository.save(_record())
        assert repository.get_by_id(record_id, user_id="user-2") is None

    def test_malformed_id(self, repository) -> None:
        assert repository.get_by_id("not-an-object-id") is None
        assert not repository.delete("not-an-object-id")

    def test_list_newest_first_with_paging(self, repository) -> None:
        for minutes_ago in range(5):
            repository.save(_record(minutes_ago=minutes_ago, voice=f"v{minutes_ago}"))
        repository.save(_record(user_id="user-2"))

        first = repository.list_for_user("user-1", page=1, limit=2)
        third = repository.list_for_user("user-1", page=3, limit=2)

        assert [r.voice for r in first] == ["v0", "v1"]
        assert [r.voice for r in third] == ["v4"]
        assert repository.count_for_user("user-1") == 5

    def test_filters(self, repository) -> None:
        repository.save(_record(language="en", content_type="business"))
        repository.save(_record(language="ne", content_type="business"))
        repository.save(_record(language="ne", content_type="story"))

        assert len(repository.list_for_user("user-1", language="ne")) == 2
        assert repository.count_for_user("user-1", language="ne", content_type="story") == 1

    def test_delete(self, repository) -> None:
        record_id = repository.save(_record())

        assert not repository.delete(record_id, user_id="user-2")
        assert repository.delete(record_id, user_id="user-1")
        assert repository.get_by_id(record_id) is None


class TestRetryDecorator:
    """Tests for connection retry."""

    def test_retries_then_succeeds(self) -> None:
        calls = {"n": 0}

        @retry_on_connection_failure(max_retries=3, base_delay=0.5)
        def flaky() -> str:
            calls["n"] += 1
            if calls["n"] < 3:
                raise ConnectionFailure("down")
            return "ok"

        with patch("voicegen.storage.client.time.sleep") as mock_sleep:
            assert flaky() == "ok"
        assert [c.args[0] for c in mock_sleep.call_args_list] == [0.5, 1.0]

    def test_gives_up(self) -> None:
        @retry_on_connection_failure(max_retries=2, base_delay=0.1)
        def always_down() -> None:
            raise ConnectionFailure("down")

        with patch("voicegen.storage.client.time.sleep"), pytest.raises(ConnectionFailure):
            always_down()


class TestMongoStorageClient:
    """Tests for connection management."""

    def test_requires_connect(self) -> None:
        with pytest.raises(RuntimeError):
            MongoStorageClient().generations

    def test_context_manager(self) -> None:
        with patch("voicegen.storage.client.MongoClient", mongomock.MongoClient):
            with MongoStorageClient(database_name="test_db") as client:
                record_id = client.generations.save(_record())
                assert client.generations.get_by_id(record_id) is not None
            with pytest.raises(RuntimeError):
                client.generations
