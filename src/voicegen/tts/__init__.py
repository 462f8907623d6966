"""Text-to-speech strategies for voicegen.

Strategies in default priority order:
- cloud_tts: ElevenLabs (if API key configured), then Google translate TTS
- system_tts: macOS `say`, or espeak / festival on Linux
- web_api: TikTok-style TTS endpoints
- prerecorded: stock narration clips
- placeholder_tone: ffmpeg tone pattern
- silent_wav: in-memory silence, always succeeds
"""

import logging
from typing import TYPE_CHECKING

import httpx

from .cloud import CloudTTSStrategy
from .mock import MockStrategy
from .platform import Platform, detect_platform
from .prerecorded import PreRecordedStrategy
from .silent import SilentWavStrategy
from .strategy import PRIORITY, SynthesisStrategy
from .system import SystemCommandStrategy
from .tone import PlaceholderToneStrategy
from .web import WebAPIStrategy

if TYPE_CHECKING:
    from ..config import VoicegenConfig

logger = logging.getLogger(__name__)


def create_strategies(
    config: "VoicegenConfig | None" = None,
    use_mock: bool = False,
    client: httpx.Client | None = None,
) -> list[SynthesisStrategy]:
    """Create the ordered strategy list.

    Disabled strategies are left out. The silent WAV backstop is always
    last and cannot be disabled.

    Args:
        config: Full configuration (defaults if omitted)
        use_mock: If True, return a single MockStrategy ahead of the backstop
        client: Shared HTTP client for network strategies

    Returns:
        Strategies in priority order, never empty.
    """
    from ..config import VoicegenConfig

    config = config or VoicegenConfig()
    silence = SilentWavStrategy(config.silence)

    if use_mock:
        logger.info("TTS: Using MockStrategy (requested)")
        return [MockStrategy(), silence]

    temp_dir = config.storage.temp_dir
    strategies: list[SynthesisStrategy] = []

    if config.cloud.enabled:
        strategies.append(CloudTTSStrategy(config.cloud, client=client))

    if config.system.enabled:
        system = SystemCommandStrategy(config.system, temp_dir=temp_dir)
        if not system.is_available:
            logger.info(f"TTS: no system speech command on {detect_platform().name}")
        strategies.append(system)

    if config.web.enabled:
        strategies.append(WebAPIStrategy(config.web, client=client))

    if config.prerecorded.enabled:
        strategies.append(PreRecordedStrategy(config.prerecorded))

    if config.tone.enabled:
        strategies.append(PlaceholderToneStrategy(config.tone, temp_dir=temp_dir))

    strategies.append(silence)

    logger.debug(f"TTS: strategy order {[s.name for s in strategies]}")
    return strategies


__all__ = [
    "CloudTTSStrategy",
    "MockStrategy",
    "PRIORITY",
    "Platform",
    "PlaceholderToneStrategy",
    "PreRecordedStrategy",
    "SilentWavStrategy",
    "SynthesisStrategy",
    "SystemCommandStrategy",
    "WebAPIStrategy",
    "create_strategies",
    "detect_platform",
]
