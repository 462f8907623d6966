"""Voice catalogue.

Public voice ids (``en_us_001`` and friends) are mapped onto whatever each
backend understands: a macOS ``say`` voice, an espeak voice, a TikTok speaker
or an ElevenLabs voice id.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Voice:
    """A selectable narration voice.

    Attributes:
        id: Public voice identifier
        name: Human readable name
        language: Language code, or "multi"
        say_voice: macOS `say` voice name
        espeak_voice: espeak voice/variant
        web_speaker: TikTok TTS speaker id
    """

    id: str
    name: str
    language: str
    say_voice: str
    espeak_voice: str
    web_speaker: str


DEFAULT_VOICE_ID = "en_us_001"

VOICES: dict[str, Voice] = {
    v.id: v
    for v in (
        Voice("en_us_001", "US English Female", "en", "Samantha", "en-us+f3", "en_us_001"),
        Voice("en_us_002", "US English Male", "en", "Alex", "en-us+m3", "en_us_006"),
        Voice("en_uk_001", "UK English Female", "en", "Kate", "en+f3", "en_uk_001"),
        Voice("en_uk_003", "UK English Male", "en", "Daniel", "en+m3", "en_uk_003"),
        Voice("en_au_001", "Australian English Female", "en", "Karen", "en+f4", "en_au_001"),
        Voice("en_au_002", "Australian English Male", "en", "Lee", "en+m4", "en_au_002"),
        Voice("ne_np_001", "Nepali Female", "ne", "Samantha", "hi+f3", "en_us_007"),
        Voice("ne_np_002", "Nepali Male", "ne", "Alex", "hi+m3", "en_us_006"),
        Voice("multilingual_001", "Multilingual Female", "multi", "Victoria", "en+f3", "en_us_009"),
        Voice("multilingual_002", "Multilingual Male", "multi", "Alex", "en+m3", "en_us_010"),
    )
}

# ElevenLabs voice ids used when a public voice id is requested
ELEVENLABS_VOICES = {
    "en_us_001": "EXAVITQu4vr4xnSDxMaL",  # Bella
    "en_us_002": "pNInz6obpgDQGcFmaJgB",  # Adam
    "en_uk_001": "21m00Tcm4TlvDq8ikWAM",  # Rachel
    "en_uk_003": "TxGEqnHWrfWFTfGW9XjX",  # Josh
}
DEFAULT_ELEVENLABS_VOICE = "EXAVITQu4vr4xnSDxMaL"

# Speaker per language when the caller asks for "default"
_LANGUAGE_SPEAKERS = {
    "en": "en_us_006",
    "ne": "en_us_007",
    "hi": "en_us_006",
}

_RECOMMENDATIONS = {
    "en": {
        "story": "en_us_001",
        "business": "en_us_002",
        "social": "en_uk_001",
        "educational": "en_au_001",
        "entertainment": "en_uk_003",
    },
    "ne": {
        "story": "ne_np_001",
        "business": "ne_np_002",
        "social": "ne_np_001",
        "educational": "ne_np_002",
        "entertainment": "ne_np_001",
    },
}


def get_voice(voice_id: str | None) -> Voice:
    """Look up a voice, falling back to the default voice for unknown ids."""
    if voice_id and voice_id in VOICES:
        return VOICES[voice_id]
    return VOICES[DEFAULT_VOICE_ID]


def list_voices(language: str | None = None) -> list[Voice]:
    """List voices, optionally restricted to a language (multilingual voices always match)."""
    if language is None:
        return list(VOICES.values())
    return [v for v in VOICES.values() if v.language in (language, "multi")]


def say_voice_for(voice_id: str | None) -> str:
    return get_voice(voice_id).say_voice


def espeak_voice_for(voice_id: str | None, language: str = "en") -> str:
    if voice_id in VOICES:
        return VOICES[voice_id].espeak_voice
    return "hi+f3" if language in ("ne", "hi") else "en+f3"


def web_speaker_for(voice_id: str | None, language: str = "en") -> str:
    """Map a voice id to a TikTok speaker.

    Raw speaker ids such as ``en_male_funny`` pass through unchanged.
    """
    if voice_id in VOICES:
        return VOICES[voice_id].web_speaker
    if voice_id and voice_id != "default":
        return voice_id
    return _LANGUAGE_SPEAKERS.get(language, _LANGUAGE_SPEAKERS["en"])


def elevenlabs_voice_for(voice_id: str | None) -> str:
    if voice_id in ELEVENLABS_VOICES:
        return ELEVENLABS_VOICES[voice_id]
    return DEFAULT_ELEVENLABS_VOICE


def recommend_voice(content_type: str, language: str = "en") -> str:
    """Recommend a voice id for a kind of content.

    Args:
        content_type: story, business, social, educational or entertainment
        language: Language code

    Returns:
        Voice id; the language's story voice for unknown content types,
        and the default voice for unknown languages.
    """
    by_type = _RECOMMENDATIONS.get(language)
    if by_type is None:
        return DEFAULT_VOICE_ID
    return by_type.get(content_type, by_type["story"])


__all__ = [
    "DEFAULT_VOICE_ID",
    "VOICES",
    "Voice",
    "elevenlabs_voice_for",
    "espeak_voice_for",
    "get_voice",
    "list_voices",
    "recommend_voice",
    "say_voice_for",
    "web_speaker_for",
]
