"""System speech command strategy.

Uses `say` on macOS, and `espeak` or festival's `text2wave` on Linux. Output
is transcoded to MP3 when ffmpeg is installed; otherwise the native
container is returned.
"""

import logging
from pathlib import Path

from ..audio.commands import ffmpeg_available, run_command, which
from ..audio.segment import AudioFormat, AudioSegment
from ..audio.tempfiles import TempWorkspace
from ..cancel import CancelToken
from ..config import SystemTTSConfig
from ..errors import CommandError, SynthesisError
from ..text.chunker import TextChunk
from .platform import Platform, detect_platform
from .strategy import SYSTEM_TTS
from .voices import espeak_voice_for, say_voice_for

logger = logging.getLogger(__name__)


class SystemCommandStrategy:
    """Text-to-speech through the host's speech commands."""

    def __init__(
        self,
        config: SystemTTSConfig | None = None,
        temp_dir: Path | str = "temp",
        platform: Platform | None = None,
    ) -> None:
        """Initialize system strategy.

        Args:
            config: System TTS configuration
            temp_dir: Directory for intermediate audio files
            platform: Override platform detection (tests)
        """
        self._config = config or SystemTTSConfig()
        self._temp_dir = Path(temp_dir)
        self._platform = platform or detect_platform()

    @property
    def name(self) -> str:
        return SYSTEM_TTS

    @property
    def network_bound(self) -> bool:
        return False

    @property
    def is_available(self) -> bool:
        """True if a usable speech command exists on this platform."""
        return bool(self._engines())

    def _engines(self) -> list[str]:
        if self._platform == Platform.MACOS:
            candidates = ["say"]
        elif self._platform == Platform.LINUX:
            candidates = ["espeak", "text2wave"]
        else:
            candidates = []
        return [c for c in candidates if which(c) is not None]

    def synthesize(
        self,
        chunk: TextChunk,
        voice_id: str,
        speed_factor: float,
        language: str,
        cancel: CancelToken | None = None,
    ) -> AudioSegment:
        engines = self._engines()
        if not engines:
            raise SynthesisError(
                self.name,
                f"No speech command available on {self._platform.name}",
                retryable=False,
            )

        errors: list[str] = []
        for engine in engines:
            try:
                with TempWorkspace(self._temp_dir, engine) as ws:
                    native, fmt = self._render(engine, ws, chunk.content, voice_id, speed_factor, language, cancel)
                    return self._finish(ws, native, fmt, cancel)
            except CommandError as e:
                logger.warning(f"{engine} failed: {e}")
                errors.append(f"{engine}: {e}")
            except OSError as e:
                errors.append(f"{engine}: {e}")

        raise SynthesisError(self.name, "; ".join(errors))

    def _render(
        self,
        engine: str,
        ws: TempWorkspace,
        text: str,
        voice_id: str,
        speed_factor: float,
        language: str,
        cancel: CancelToken | None,
    ) -> tuple[Path, AudioFormat]:
        """Run one speech command and return its output file."""
        rate = str(int(self._config.words_per_minute * speed_factor))

        if engine == "say":
            output = ws.path(".aiff")
            cmd = ["say", "-v", say_voice_for(voice_id), "-r", rate, "-o", str(output), text]
            fmt = AudioFormat.AIFF
        elif engine == "espeak":
            output = ws.path(".wav")
            cmd = ["espeak", "-v", espeak_voice_for(voice_id, language), "-s", rate, "-w", str(output), text]
            fmt = AudioFormat.WAV
        else:
            text_file = ws.write(text.encode("utf-8"), ".txt")
            output = ws.path(".wav")
            cmd = ["text2wave", str(text_file), "-o", str(output)]
            fmt = AudioFormat.WAV

        run_command(cmd, timeout=self._config.timeout, cancel=cancel)
        return output, fmt

    def _finish(
        self,
        ws: TempWorkspace,
        native: Path,
        fmt: AudioFormat,
        cancel: CancelToken | None,
    ) -> AudioSegment:
        if not native.exists() or native.stat().st_size == 0:
            raise CommandError(f"no audio written to {native.name}")

        if ffmpeg_available():
            mp3 = ws.path(".mp3")
            try:
                run_command(
                    [
                        "ffmpeg",
                        "-hide_banner",
                        "-loglevel",
                        "error",
                        "-y",
                        "-i",
                        str(native),
                        "-codec:a",
                        "libmp3lame",
                        "-b:a",
                        "128k",
                        str(mp3),
                    ],
                    timeout=self._config.timeout,
                    cancel=cancel,
                )
                return AudioSegment(data=mp3.read_bytes(), format=AudioFormat.MP3, source_strategy=self.name)
            except CommandError as e:
                logger.warning(f"MP3 transcode failed, keeping {fmt.value}: {e}")

        return AudioSegment(data=native.read_bytes(), format=fmt, source_strategy=self.name)


__all__ = ["SystemCommandStrategy"]
