"""Hosted speech API strategy.

Tries ElevenLabs when an API key is configured, then the Google translate
TTS endpoint. The translate endpoint only accepts short requests, so chunks
are sub-split and the returned MP3 parts are joined frame-wise.
"""

import logging
import os

import httpx

from ..audio.segment import AudioFormat, AudioSegment
from ..cancel import CancelToken
from ..config import CloudTTSConfig
from ..errors import SynthesisError
from ..text.chunker import TextChunk, split_text
from .strategy import CLOUD_TTS
from .voices import elevenlabs_voice_for

logger = logging.getLogger(__name__)

# Check for elevenlabs availability
ELEVENLABS_AVAILABLE = False
VoiceSettings = None
try:
    from elevenlabs import ElevenLabs
    from elevenlabs.types import VoiceSettings

    ELEVENLABS_AVAILABLE = True
except ImportError:
    pass

BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
    ),
    "Accept": "audio/mpeg, audio/*, */*",
    "Accept-Language": "en-US,en;q=0.9",
    "Referer": "https://translate.google.com/",
}


class ElevenLabsBackend:
    """ElevenLabs text-to-speech, returning MP3."""

    OUTPUT_FORMAT = "mp3_44100_128"

    def __init__(self, api_key: str | None = None, model: str = "eleven_multilingual_v2") -> None:
        """Initialize ElevenLabs backend.

        Args:
            api_key: ElevenLabs API key (defaults to ELEVENLABS_API_KEY env var)
            model: Model ID
        """
        self._api_key = api_key or os.getenv("ELEVENLABS_API_KEY")
        self._model = model
        self._client = None

        if self._api_key and ELEVENLABS_AVAILABLE:
            try:
                self._client = ElevenLabs(api_key=self._api_key)
                logger.info("ElevenLabs client initialized")
            except Exception as e:
                logger.warning(f"Failed to initialize ElevenLabs client: {e}")
                self._client = None

    @property
    def is_available(self) -> bool:
        """Check if ElevenLabs is available and configured."""
        return (
            ELEVENLABS_AVAILABLE
            and self._client is not None
            and self._api_key is not None
            and self._api_key != "your-elevenlabs-api-key"
        )

    def synthesize(self, text: str, voice_id: str, speed_factor: float) -> bytes:
        """Convert text to MP3 bytes.

        Raises:
            RuntimeError: If the API call fails
        """
        if not self.is_available:
            raise RuntimeError("ElevenLabs TTS not available")

        try:
            voice_settings = VoiceSettings(
                stability=0.4,
                similarity_boost=0.75,
                style=0.3,
                use_speaker_boost=True,
                speed=max(0.7, min(1.2, speed_factor)),
            )
            audio = self._client.text_to_speech.convert(
                text=text,
                voice_id=elevenlabs_voice_for(voice_id),
                model_id=self._model,
                output_format=self.OUTPUT_FORMAT,
                voice_settings=voice_settings,
            )
            return b"".join(audio)
        except Exception as e:
            raise RuntimeError(f"ElevenLabs synthesis failed: {e}") from e


class CloudTTSStrategy:
    """Speech from hosted HTTP APIs."""

    def __init__(
        self,
        config: CloudTTSConfig | None = None,
        client: httpx.Client | None = None,
        elevenlabs: ElevenLabsBackend | None = None,
    ) -> None:
        """Initialize cloud strategy.

        Args:
            config: Cloud TTS configuration
            client: HTTP client (a new one is created if omitted)
            elevenlabs: ElevenLabs backend; built from the environment if omitted
        """
        self._config = config or CloudTTSConfig()
        self._client = client or httpx.Client(timeout=self._config.timeout, follow_redirects=True)
        self._elevenlabs = elevenlabs or ElevenLabsBackend(model=self._config.elevenlabs_model)

    @property
    def name(self) -> str:
        return CLOUD_TTS

    @property
    def network_bound(self) -> bool:
        return True

    def synthesize(
        self,
        chunk: TextChunk,
        voice_id: str,
        speed_factor: float,
        language: str,
        cancel: CancelToken | None = None,
    ) -> AudioSegment:
        if self._elevenlabs.is_available:
            try:
                data = self._elevenlabs.synthesize(chunk.content, voice_id, speed_factor)
                self._check_size(data, "ElevenLabs")
                return AudioSegment(data=data, format=AudioFormat.MP3, source_strategy=self.name)
            except (RuntimeError, SynthesisError) as e:
                logger.warning(f"ElevenLabs failed, trying translate TTS: {e}")

        if cancel is not None:
            cancel.raise_if_cancelled()

        data = self._translate_tts(chunk.content, speed_factor, language, cancel)
        return AudioSegment(data=data, format=AudioFormat.MP3, source_strategy=self.name)

    def _translate_tts(
        self,
        text: str,
        speed_factor: float,
        language: str,
        cancel: CancelToken | None,
    ) -> bytes:
        parts = split_text(text, self._config.max_request_chars)
        if not parts:
            raise SynthesisError(self.name, "Nothing to synthesize", retryable=False)

        audio_parts: list[bytes] = []
        for part in parts:
            if cancel is not None:
                cancel.raise_if_cancelled()

            params = {
                "ie": "UTF-8",
                "q": part.content,
                "tl": language,
                "client": "tw-ob",
                "ttsspeed": f"{min(speed_factor, 1.0):g}",
                "total": str(len(parts)),
                "idx": str(part.sequence_index),
                "textlen": str(len(part.content)),
            }
            try:
                response = self._client.get(
                    self._config.translate_url,
                    params=params,
                    headers=BROWSER_HEADERS,
                    timeout=self._config.timeout,
                )
                response.raise_for_status()
            except httpx.HTTPError as e:
                raise SynthesisError(self.name, f"Translate TTS request failed: {e}") from e

            self._check_size(response.content, "Translate TTS")
            audio_parts.append(response.content)

        logger.debug(f"Translate TTS returned {len(audio_parts)} part(s)")
        return b"".join(audio_parts)

    def _check_size(self, data: bytes, backend: str) -> None:
        if len(data) < self._config.min_audio_bytes:
            raise SynthesisError(
                self.name,
                f"{backend} response too small ({len(data)} bytes), likely an error",
            )


__all__ = ["CloudTTSStrategy", "ElevenLabsBackend", "ELEVENLABS_AVAILABLE"]
