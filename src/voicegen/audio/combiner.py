"""Combine per-chunk audio segments into one stream.

Uses the ffmpeg concat demuxer when ffmpeg is installed, re-encoding segments
to a common MP3 format if a stream copy is not possible. Without ffmpeg,
segments are concatenated in memory.
"""

import logging
import wave
from pathlib import Path

from ..cancel import CancelToken
from ..errors import CombinerError, CommandError
from .commands import DEFAULT_TIMEOUT, ffmpeg_available, run_command
from .segment import AudioFormat, AudioSegment
from .tempfiles import TempWorkspace
from .wav import join_wav

logger = logging.getLogger(__name__)


def _ffconcat_line(path: Path) -> str:
    """Build one safe ffconcat input line for a file path."""
    escaped = str(path).replace("\\", "\\\\").replace("'", "'\\''")
    return f"file '{escaped}'\n"


def _combined_source(segments: list[AudioSegment]) -> str:
    return "+".join(dict.fromkeys(seg.source_strategy for seg in segments))


class AudioCombiner:
    """Concatenates ordered audio segments."""

    def __init__(self, temp_dir: Path | str = "temp", timeout: float = DEFAULT_TIMEOUT) -> None:
        """Initialize combiner.

        Args:
            temp_dir: Shared directory for segment files and the concat manifest
            timeout: Timeout for each ffmpeg invocation
        """
        self._temp_dir = Path(temp_dir)
        self._timeout = timeout

    def combine(
        self,
        segments: list[AudioSegment],
        cancel: CancelToken | None = None,
    ) -> AudioSegment:
        """Combine segments, in the given order, into a single segment.

        Raises:
            CombinerError: If segments is empty
        """
        if not segments:
            raise CombinerError("No audio segments to combine")

        if len(segments) == 1:
            return segments[0]

        if ffmpeg_available():
            try:
                return self._mux(segments, cancel)
            except CombinerError as e:
                logger.warning(f"ffmpeg concat failed, falling back to raw concatenation: {e}")
        else:
            logger.info("ffmpeg not available, using raw concatenation")

        return self._concatenate(segments)

    def _mux(self, segments: list[AudioSegment], cancel: CancelToken | None) -> AudioSegment:
        formats = {seg.format for seg in segments}

        with TempWorkspace(self._temp_dir, "combine") as ws:
            inputs = [
                ws.write(seg.data, seg.format.suffix, prefix=f"chunk{idx:03d}")
                for idx, seg in enumerate(segments)
            ]

            try:
                if len(formats) == 1:
                    out_format = segments[0].format
                    try:
                        output = self._concat_copy(ws, inputs, out_format, cancel)
                    except CommandError as e:
                        logger.warning(f"concat stream copy failed, re-encoding: {e}")
                        out_format = AudioFormat.MP3
                        output = self._concat_reencoded(ws, inputs, cancel)
                else:
                    out_format = AudioFormat.MP3
                    output = self._concat_reencoded(ws, inputs, cancel)
            except CommandError as e:
                raise CombinerError(str(e)) from e

            data = output.read_bytes()

        if not data:
            raise CombinerError("ffmpeg produced an empty file")

        logger.debug(f"Combined {len(segments)} segments into {len(data)} bytes ({out_format.value})")
        return AudioSegment(data=data, format=out_format, source_strategy=_combined_source(segments))

    def _concat_copy(
        self,
        ws: TempWorkspace,
        inputs: list[Path],
        out_format: AudioFormat,
        cancel: CancelToken | None,
    ) -> Path:
        """Lossless concatenation using the ffmpeg concat demuxer."""
        manifest = ws.path(".txt", prefix="concat")
        manifest.write_text("".join(_ffconcat_line(p) for p in inputs), encoding="utf-8")
        output = ws.path(out_format.suffix, prefix="combined")
        run_command(
            [
                "ffmpeg",
                "-hide_banner",
                "-loglevel",
                "error",
                "-y",
                "-f",
                "concat",
                "-safe",
                "0",
                "-i",
                str(manifest),
                "-c",
                "copy",
                str(output),
            ],
            timeout=self._timeout,
            cancel=cancel,
        )
        return output

    def _concat_reencoded(
        self,
        ws: TempWorkspace,
        inputs: list[Path],
        cancel: CancelToken | None,
    ) -> Path:
        """Re-encode every input to one MP3 format, then stream-copy concat."""
        normalized: list[Path] = []
        for idx, in_path in enumerate(inputs):
            norm_path = ws.path(".mp3", prefix=f"norm{idx:03d}")
            run_command(
                [
                    "ffmpeg",
                    "-hide_banner",
                    "-loglevel",
                    "error",
                    "-y",
                    "-i",
                    str(in_path),
                    "-ar",
                    "44100",
                    "-ac",
                    "1",
                    "-codec:a",
                    "libmp3lame",
                    "-b:a",
                    "128k",
                    str(norm_path),
                ],
                timeout=self._timeout,
                cancel=cancel,
            )
            normalized.append(norm_path)
        return self._concat_copy(ws, normalized, AudioFormat.MP3, cancel)

    def _concatenate(self, segments: list[AudioSegment]) -> AudioSegment:
        """In-memory fallback.

        WAV segments with matching parameters are joined under one header.
        Anything else is concatenated byte for byte, which MP3 decoders
        generally tolerate but which is not guaranteed to be seamless.
        """
        source = _combined_source(segments)

        if all(seg.format is AudioFormat.WAV for seg in segments):
            try:
                data = join_wav([seg.data for seg in segments])
                return AudioSegment(data=data, format=AudioFormat.WAV, source_strategy=source)
            except (ValueError, wave.Error, EOFError) as e:
                logger.warning(f"WAV join failed, concatenating raw bytes: {e}")

        formats = {seg.format for seg in segments}
        out_format = segments[0].format if len(formats) == 1 else AudioFormat.MP3
        data = b"".join(seg.data for seg in segments)
        return AudioSegment(data=data, format=out_format, source_strategy=source)


__all__ = ["AudioCombiner"]
