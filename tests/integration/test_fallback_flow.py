"""Integration tests for the full generation flow.

Real strategies, combiner, service and local sink are wired together. Only
the network (httpx.MockTransport), the speech binaries and ffmpeg are faked.
"""

import base64
from pathlib import Path
from unittest.mock import patch

import httpx
import mongomock
import pytest

from voicegen.audio.combiner import AudioCombiner
from voicegen.config import (
    OrchestratorConfig,
    PreRecordedConfig,
    WebTTSConfig,
)
from voicegen.pipeline.orchestrator import FallbackOrchestrator
from voicegen.pipeline.service import AudioGenerationService, GenerationOptions
from voicegen.storage.client import AudioGenerationRepository
from voicegen.storage.sink import LocalArtifactSink
from voicegen.tts.cloud import CloudTTSStrategy
from voicegen.tts.platform import Platform
from voicegen.tts.prerecorded import PreRecordedStrategy
from voicegen.tts.silent import SilentWavStrategy
from voicegen.tts.system import SystemCommandStrategy
from voicegen.tts.tone import PlaceholderToneStrategy
from voicegen.tts.web import WebAPIStrategy

WEB_ENDPOINT = "https://tts.example.test/media/api/text/speech/invoke/"
WEB_AUDIO = b"\xff\xfb" + bytes(4998)


class FakeNetwork:
    """Routes requests by host: translate TTS and the web TTS endpoint."""

    def __init__(self, translate_status: int = 503, web_ok: bool = True) -> None:
        self.translate_status = translate_status
        self.web_ok = web_ok
        self.hosts: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.hosts.append(request.url.host)
        if request.url.host == "translate.google.com":
            return httpx.Response(self.translate_status, content=bytes(2000))
        if self.web_ok:
            return httpx.Response(
                200, json={"status_code": 0, "data": {"v_str": base64.b64encode(WEB_AUDIO).decode()}}
            )
        return httpx.Response(200, json={"status_code": 1, "message": "Couldn't load speech. Try again."})


def _no_elevenlabs():
    class Unavailable:
        is_available = False

    return Unavailable()


def build_pipeline(
    tmp_path: Path,
    network: FakeNetwork,
    repository: AudioGenerationRepository | None = None,
) -> tuple[AudioGenerationService, LocalArtifactSink]:
    client = httpx.Client(transport=httpx.MockTransport(network))
    strategies = [
        CloudTTSStrategy(client=client, elevenlabs=_no_elevenlabs()),
        SystemCommandStrategy(temp_dir=tmp_path / "temp", platform=Platform.OTHER),
        WebAPIStrategy(WebTTSConfig(endpoints=[WEB_ENDPOINT], attempts=2, backoff=0.0), client=client),
        PreRecordedStrategy(PreRecordedConfig(assets_dir=str(tmp_path / "no-clips"))),
        PlaceholderToneStrategy(temp_dir=tmp_path / "temp"),
        SilentWavStrategy(),
    ]
    orchestrator = FallbackOrchestrator(
        strategies,
        combiner=AudioCombiner(tmp_path / "temp"),
        config=OrchestratorConfig(retry_delay=0.0, max_retry_delay=0.0, inter_chunk_delay=0.0),
    )
    sink = LocalArtifactSink(tmp_path / "uploads")
    return AudioGenerationService(orchestrator, sink, repository=repository), sink


@pytest.fixture(autouse=True)
def no_ffmpeg():
    with (
        patch("voicegen.audio.combiner.ffmpeg_available", return_value=False),
        patch("voicegen.tts.tone.ffmpeg_available", return_value=False),
    ):
        yield


@pytest.mark.integration
class TestFallbackFlow:
    """Degradation through the real strategy chain."""

    def test_cloud_down_falls_back_to_web(self, tmp_path: Path) -> None:
        network = FakeNetwork(translate_status=503)
        service, sink = build_pipeline(tmp_path, network)

        result = service.generate_audio("Hello world. This is a test.", GenerationOptions(voice_id="en_us_001"))

        assert result.method == "web_api"
        assert result.file_size == 5000
        assert sink.path_for(result.artifact.public_id).read_bytes() == WEB_AUDIO
        assert network.hosts == ["translate.google.com", "tts.example.test"]

    def test_cloud_up(self, tmp_path: Path) -> None:
        network = FakeNetwork(translate_status=200)
        service, _ = build_pipeline(tmp_path, network)

        result = service.generate_audio("Hello world. This is a test.")

        assert result.method == "cloud_tts"
        assert result.file_size == 2000

    def test_everything_down_yields_silence(self, tmp_path: Path) -> None:
        network = FakeNetwork(translate_status=500, web_ok=False)
        service, sink = build_pipeline(tmp_path, network)

        result = service.generate_audio("Hello world. This is a test.")

        assert result.method == "silent_wav"
        assert result.artifact.format == "wav"
        assert result.file_size == 44 + 44100 * 2 * 10
        assert network.hosts.count("tts.example.test") == 2

    def test_long_text_is_chunked_and_combined(self, tmp_path: Path) -> None:
        network = FakeNetwork(translate_status=503)
        service, _ = build_pipeline(tmp_path, network)
        text = " ".join(f"This is sentence number {i} of a longer narration." for i in range(12))

        result = service.generate_audio(text)

        assert len(result.chunk_methods) > 1
        assert set(result.chunk_methods) == {"web_api"}
        assert result.file_size == 5000 * len(result.chunk_methods)

    def test_prerecorded_clip_used_when_web_down(self, tmp_path: Path) -> None:
        clips = tmp_path / "no-clips"
        clips.mkdir()
        (clips / "narration.mp3").write_bytes(b"stock narration")
        network = FakeNetwork(translate_status=503, web_ok=False)
        service, _ = build_pipeline(tmp_path, network)

        result = service.generate_audio("Hello world. This is a test.")

        assert result.method == "prerecorded"
        assert result.file_size == len(b"stock narration")

    def test_temp_directory_left_clean(self, tmp_path: Path) -> None:
        service, _ = build_pipeline(tmp_path, FakeNetwork(translate_status=500, web_ok=False))
        service.generate_audio("Hello world. This is a test. " * 20)

        temp = tmp_path / "temp"
        assert not temp.exists() or list(temp.iterdir()) == []


@pytest.mark.integration
class TestGenerationHistoryFlow:
    """Generation, history and deletion together."""

    def test_generate_list_delete(self, tmp_path: Path) -> None:
        repository = AudioGenerationRepository(mongomock.MongoClient().voicegen.audio_generations)
        service, sink = build_pipeline(tmp_path, FakeNetwork(translate_status=503), repository)

        first = service.generate_audio("Hello world. This is a test.", GenerationOptions(user_id="u1"))
        service.generate_audio(
            "नमस्ते। हाम्रो पसलमा स्वागत छ।", GenerationOptions(user_id="u1", language="ne")
        )

        assert repository.count_for_user("u1") == 2
        assert [r.language for r in repository.list_for_user("u1", language="ne")] == ["ne"]

        assert service.delete_audio("u1", first.record_id)
        assert repository.count_for_user("u1") == 1
        assert sink.path_for(first.artifact.public_id) is None
