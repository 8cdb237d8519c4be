from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from crunchy_cli import merger
from crunchy_cli.errors import CommandError
from crunchy_cli.merger import FFmpegPreset


class RecordingRun:
    def __init__(self, returncode: int = 0, stderr: bytes = b"") -> None:
        self.returncode = returncode
        self.stderr = stderr
        self.commands: list[list[str]] = []

    def __call__(self, command, check, capture_output):
        self.commands.append(command)
        if self.returncode:
            raise subprocess.CalledProcessError(self.returncode, command, stderr=self.stderr)
        return subprocess.CompletedProcess(command, 0)


@pytest.fixture
def ffmpeg_run(monkeypatch: pytest.MonkeyPatch) -> RecordingRun:
    run = RecordingRun()
    monkeypatch.setattr(merger.subprocess, "run", run)
    return run


@pytest.mark.parametrize(
    "value, expected",
    [
        ("h264", FFmpegPreset("h264", "normal")),
        ("H265-low", FFmpegPreset("h265", "low")),
        ("av1-lossless", FFmpegPreset("av1", "lossless")),
    ],
)
def test_parse_preset(value: str, expected: FFmpegPreset) -> None:
    assert FFmpegPreset.parse(value) == expected


@pytest.mark.parametrize("value", ["vp9", "h264-ultra", ""])
def test_parse_invalid_preset(value: str) -> None:
    with pytest.raises(ValueError):
        FFmpegPreset.parse(value)


def test_preset_args() -> None:
    input_args, output_args = FFmpegPreset("h265", "low").to_input_output_args()

    assert input_args == []
    assert output_args == ["-c:v", "libx265", "-crf", "35", "-tag:v", "hvc1", "-c:a", "copy"]


def test_available_matches_parse() -> None:
    for match in FFmpegPreset.available_matches():
        FFmpegPreset.parse(match)


def test_remux_copies_streams(ffmpeg_run: RecordingRun, tmp_path: Path) -> None:
    merger.remux("ffmpeg", tmp_path / "in.ts", tmp_path / "out.mp4")

    command = ffmpeg_run.commands[0]
    assert command[0] == "ffmpeg"
    assert command[command.index("-i") + 1] == str(tmp_path / "in.ts")
    assert command[-4:] == ["copy", "-movflags", "+faststart", str((tmp_path / "out.mp4").resolve())]
    assert "-c:v" in command and "libx264" not in command


def test_remux_with_preset(ffmpeg_run: RecordingRun, tmp_path: Path) -> None:
    merger.remux("ffmpeg", tmp_path / "in.ts", tmp_path / "out.mkv", FFmpegPreset("h264", "lossless"))

    command = ffmpeg_run.commands[0]
    assert command[command.index("-c:v") + 1] == "libx264"
    assert command[command.index("-crf") + 1] == "0"
    assert "-movflags" not in command


def test_remux_failure_carries_stderr(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setattr(merger.subprocess, "run", RecordingRun(returncode=1, stderr=b"Invalid data found"))

    with pytest.raises(CommandError, match="Invalid data found"):
        merger.remux("ffmpeg", tmp_path / "in.ts", tmp_path / "out.mp4")


def test_mux_archive_maps_every_input(ffmpeg_run: RecordingRun, tmp_path: Path) -> None:
    sources = [tmp_path / "video.tmp", tmp_path / "audio_ja.tmp", tmp_path / "audio_en.tmp"]

    merger.mux_archive("ffmpeg", sources, tmp_path / "out.mkv", ["jpn", "eng"])

    command = ffmpeg_run.commands[0]
    assert [command[i + 1] for i, arg in enumerate(command) if arg == "-map"] == ["0", "1", "2"]
    assert command[command.index("-metadata:s:a:1") + 1] == "language=eng"
    assert command[-1] == str((tmp_path / "out.mkv").resolve())


def test_mux_archive_needs_sources(tmp_path: Path) -> None:
    with pytest.raises(CommandError):
        merger.mux_archive("ffmpeg", [], tmp_path / "out.mkv")
