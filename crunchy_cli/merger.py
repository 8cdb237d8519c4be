import subprocess
from dataclasses import dataclass
from pathlib import Path

from . import log
from .errors import CommandError

CODECS = {
    "h264": ("libx264", {"lossless": 0, "normal": 23, "low": 35}),
    "h265": ("libx265", {"lossless": 0, "normal": 28, "low": 35}),
    "av1": ("libaom-av1", {"lossless": 0, "normal": 30, "low": 45}),
}
QUALITIES = ("lossless", "normal", "low")
COPY_ARGS = ["-c:v", "copy", "-c:a", "copy"]


@dataclass(frozen=True)
class FFmpegPreset:
    codec: str
    quality: str = "normal"

    @classmethod
    def parse(cls, value: str) -> "FFmpegPreset":
        codec, _, quality = value.lower().partition("-")
        if codec not in CODECS:
            raise ValueError(f"unknown codec '{codec}', choose from {', '.join(CODECS)}")
        if quality and quality not in QUALITIES:
            raise ValueError(f"unknown quality '{quality}', choose from {', '.join(QUALITIES)}")
        return cls(codec=codec, quality=quality or "normal")

    @staticmethod
    def available_matches() -> list[str]:
        return [codec for codec in CODECS] + [f"{codec}-{quality}" for codec in CODECS for quality in QUALITIES]

    def to_input_output_args(self) -> tuple[list[str], list[str]]:
        encoder, crf_by_quality = CODECS[self.codec]
        output_args = ["-c:v", encoder, "-crf", str(crf_by_quality[self.quality])]
        if self.codec == "h265":
            output_args.extend(["-tag:v", "hvc1"])
        elif self.codec == "av1":
            output_args.extend(["-b:v", "0"])
        output_args.extend(["-c:a", "copy"])
        return [], output_args


def _run_ffmpeg(command: list[str]) -> None:
    log.MERGE.debug(f"Executing FFmpeg: {' '.join(command)}")
    try:
        subprocess.run(command, check=True, capture_output=True)  # noqa: S603
    except subprocess.CalledProcessError as e:
        stderr = e.stderr.decode(errors="replace").strip() if e.stderr else ""
        raise CommandError(f"FFmpeg failed with exit code {e.returncode}: {stderr}") from e
    except FileNotFoundError as e:
        raise CommandError(f"FFmpeg executable not found: {command[0]}") from e


def remux(ffmpeg_path: str, source: Path, target: Path, preset: FFmpegPreset | None = None) -> None:
    input_args, output_args = preset.to_input_output_args() if preset else ([], list(COPY_ARGS))

    command = [ffmpeg_path, "-hide_banner", "-loglevel", "error", "-y", *input_args, "-i", str(source), *output_args]
    if target.suffix.lower() == ".mp4":
        log.MERGE.debug("Output is .mp4, adding '-movflags +faststart' for web compatibility.")
        command.extend(["-movflags", "+faststart"])
    command.append(str(target.resolve()))

    _run_ffmpeg(command)
    log.MERGE.info(f"Successfully generated {target}")


def mux_archive(ffmpeg_path: str, sources: list[Path], target: Path, languages: list[str] | None = None) -> None:
    """Muxes every stream of every source into one matroska file."""
    if not sources:
        raise CommandError("Nothing to archive")

    command = [ffmpeg_path, "-hide_banner", "-loglevel", "error", "-y"]
    for source in sources:
        command.extend(["-i", str(source)])
    for i in range(len(sources)):
        command.extend(["-map", str(i)])
    command.extend(["-c", "copy"])
    for i, language in enumerate(languages or []):
        command.extend([f"-metadata:s:a:{i}", f"language={language}"])
    command.append(str(target.resolve()))

    _run_ffmpeg(command)
    log.MERGE.info(f"Successfully archived {len(sources)} stream file(s) to {target}")
