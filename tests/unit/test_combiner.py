"""Unit tests for AudioCombiner."""

from pathlib import Path
from unittest.mock import patch

import pytest

from voicegen.audio.combiner import AudioCombiner, _ffconcat_line
from voicegen.audio.segment import AudioFormat, AudioSegment
from voicegen.audio.wav import build_silent_wav, wav_duration_seconds
from voicegen.errors import CombinerError, CommandError


def _mp3(marker: str, strategy: str = "web_api") -> AudioSegment:
    return AudioSegment(data=marker.encode(), format=AudioFormat.MP3, source_strategy=strategy)


def fake_ffmpeg(cmd: list[str], timeout: float = 30.0, cancel=None) -> bytes:
    """Stand-in for ffmpeg: concat joins manifest files, re-encode prefixes 'N'."""
    output = Path(cmd[-1])
    source = Path(cmd[cmd.index("-i") + 1])
    if "concat" in cmd:
        files = [line[len("file '") : -1] for line in source.read_text().splitlines()]
        output.write_bytes(b"".join(Path(f).read_bytes() for f in files))
    else:
        output.write_bytes(b"N" + source.read_bytes())
    return b""


class TestCombinerBasics:
    """Edge cases that never touch ffmpeg."""

    def test_empty_input_raises(self, tmp_path: Path) -> None:
        with pytest.raises(CombinerError):
            AudioCombiner(tmp_path).combine([])

    def test_single_segment_returned_unchanged(self, tmp_path: Path) -> None:
        segment = _mp3("only")
        assert AudioCombiner(tmp_path).combine([segment]) is segment

    def test_ffconcat_line_escapes_quotes(self) -> None:
        assert _ffconcat_line(Path("/tmp/it's.mp3")) == "file '/tmp/it'\\''s.mp3'\n"


class TestCombinerFallback:
    """In-memory concatenation when ffmpeg is missing or fails."""

    def test_raw_concat_preserves_order(self, tmp_path: Path) -> None:
        segments = [_mp3("<0>", "cloud_tts"), _mp3("<1>", "web_api"), _mp3("<2>", "cloud_tts")]

        with patch("voicegen.audio.combiner.ffmpeg_available", return_value=False):
            combined = AudioCombiner(tmp_path).combine(segments)

        assert combined.data == b"<0><1><2>"
        assert combined.format is AudioFormat.MP3
        assert combined.source_strategy == "cloud_tts+web_api"

    def test_wav_segments_joined_under_one_header(self, tmp_path: Path) -> None:
        segments = [
            AudioSegment(build_silent_wav(1), AudioFormat.WAV, "silent_wav"),
            AudioSegment(build_silent_wav(2), AudioFormat.WAV, "silent_wav"),
        ]

        with patch("voicegen.audio.combiner.ffmpeg_available", return_value=False):
            combined = AudioCombiner(tmp_path).combine(segments)

        assert combined.format is AudioFormat.WAV
        assert wav_duration_seconds(combined.data) == pytest.approx(3.0)

    def test_ffmpeg_failure_falls_back(self, tmp_path: Path) -> None:
        with (
            patch("voicegen.audio.combiner.ffmpeg_available", return_value=True),
            patch("voicegen.audio.combiner.run_command", side_effect=CommandError("boom")),
        ):
            combined = AudioCombiner(tmp_path).combine([_mp3("a"), _mp3("b")])

        assert combined.data == b"ab"
        assert list(tmp_path.iterdir()) == []


class TestCombinerFfmpeg:
    """ffmpeg concat path, with ffmpeg itself faked."""

    def test_same_format_uses_stream_copy(self, tmp_path: Path) -> None:
        with (
            patch("voicegen.audio.combiner.ffmpeg_available", return_value=True),
            patch("voicegen.audio.combiner.run_command", side_effect=fake_ffmpeg) as mock_run,
        ):
            combined = AudioCombiner(tmp_path).combine([_mp3("<0>"), _mp3("<1>"), _mp3("<2>")])

        assert combined.data == b"<0><1><2>"
        assert combined.format is AudioFormat.MP3
        assert mock_run.call_count == 1
        assert "copy" in mock_run.call_args.args[0]

    def test_mixed_formats_reencode(self, tmp_path: Path) -> None:
        segments = [_mp3("<0>"), AudioSegment(b"<1>", AudioFormat.WAV, "silent_wav")]

        with (
            patch("voicegen.audio.combiner.ffmpeg_available", return_value=True),
            patch("voicegen.audio.combiner.run_command", side_effect=fake_ffmpeg) as mock_run,
        ):
            combined = AudioCombiner(tmp_path).combine(segments)

        assert combined.data == b"N<0>N<1>"
        assert combined.format is AudioFormat.MP3
        assert combined.source_strategy == "web_api+silent_wav"
        assert mock_run.call_count == 3

    def test_copy_failure_reencodes(self, tmp_path: Path) -> None:
        calls = {"n": 0}

        def copy_fails_once(cmd: list[str], timeout: float = 30.0, cancel=None) -> bytes:
            calls["n"] += 1
            if calls["n"] == 1:
                raise CommandError("incompatible streams")
            return fake_ffmpeg(cmd, timeout, cancel)

        with (
            patch("voicegen.audio.combiner.ffmpeg_available", return_value=True),
            patch("voicegen.audio.combiner.run_command", side_effect=copy_fails_once),
        ):
            combined = AudioCombiner(tmp_path).combine([_mp3("a"), _mp3("b")])

        assert combined.data == b"NaNb"
        assert combined.format is AudioFormat.MP3

    def test_temp_files_removed(self, tmp_path: Path) -> None:
        with (
            patch("voicegen.audio.combiner.ffmpeg_available", return_value=True),
            patch("voicegen.audio.combiner.run_command", side_effect=fake_ffmpeg),
        ):
            AudioCombiner(tmp_path).combine([_mp3("a"), _mp3("b")])

        assert list(tmp_path.iterdir()) == []
