"""Web TTS endpoint strategy.

Posts the chunk to TikTok-style speech endpoints. Each endpoint gets a few
attempts with linear backoff before moving on to the next host.
"""

import base64
import binascii
import logging

import httpx

from ..audio.segment import AudioFormat, AudioSegment
from ..cancel import CancelToken, interruptible_sleep
from ..config import WebTTSConfig
from ..errors import SynthesisError
from ..text.chunker import TextChunk
from .strategy import WEB_API
from .voices import web_speaker_for

logger = logging.getLogger(__name__)

USER_AGENT = (
    "com.zhiliaoapp.musically/2022600030 (Linux; U; Android 7.1.2; es_ES; "
    "SM-G988N; Build/NRD90M;tt-ok/3.12.13.1)"
)


class WebResponseError(Exception):
    """A single endpoint attempt returned an unusable response."""

    pass


class WebAPIStrategy:
    """Speech from public web TTS endpoints."""

    def __init__(self, config: WebTTSConfig | None = None, client: httpx.Client | None = None) -> None:
        """Initialize web strategy.

        Args:
            config: Web TTS configuration (endpoints, attempts, backoff)
            client: HTTP client (a new one is created if omitted)
        """
        self._config = config or WebTTSConfig()
        self._client = client or httpx.Client(timeout=self._config.timeout)

    @property
    def name(self) -> str:
        return WEB_API

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
        if not self._config.endpoints:
            raise SynthesisError(self.name, "No endpoints configured", retryable=False)

        speaker = web_speaker_for(voice_id, language)
        last_error = "no attempts made"

        for endpoint in self._config.endpoints:
            for attempt in range(1, self._config.attempts + 1):
                if cancel is not None:
                    cancel.raise_if_cancelled()
                try:
                    data = self._request(endpoint, speaker, chunk.content)
                    logger.debug(f"Web TTS succeeded on {endpoint} (attempt {attempt})")
                    return AudioSegment(data=data, format=AudioFormat.MP3, source_strategy=self.name)
                except (httpx.HTTPError, WebResponseError) as e:
                    last_error = f"{endpoint}: {e}"
                    logger.warning(f"Web TTS attempt {attempt}/{self._config.attempts} failed: {last_error}")
                    if attempt < self._config.attempts:
                        interruptible_sleep(self._config.backoff * attempt, cancel)

        raise SynthesisError(self.name, f"All endpoints failed, last error: {last_error}")

    def _request(self, endpoint: str, speaker: str, text: str) -> bytes:
        response = self._client.post(
            endpoint,
            data={
                "text_speaker": speaker,
                "req_text": text,
                "speaker_map_type": "0",
                "aid": "1233",
            },
            headers={"User-Agent": USER_AGENT},
            timeout=self._config.timeout,
        )
        response.raise_for_status()

        try:
            payload = response.json()
        except ValueError as e:
            raise WebResponseError(f"malformed JSON: {e}") from e

        if not isinstance(payload, dict) or payload.get("status_code") != 0:
            message = payload.get("message", "unknown error") if isinstance(payload, dict) else "unknown error"
            raise WebResponseError(f"status_code != 0: {message}")

        encoded = (payload.get("data") or {}).get("v_str")
        if not encoded:
            raise WebResponseError("no audio data in response")

        try:
            audio = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as e:
            raise WebResponseError(f"invalid base64 audio: {e}") from e

        if not audio:
            raise WebResponseError("empty audio payload")
        return audio


__all__ = ["WebAPIStrategy"]
