import argparse
import shutil
import sys
import tempfile
from pathlib import Path, PurePosixPath
from urllib.parse import urlparse

from .. import io, log, merger
from ..errors import CommandError
from ..merger import FFmpegPreset
from ..utils import STDOUT, format_output_path, free_file, has_ffmpeg, is_special_file, title_from_url
from .base import Command


def ffmpeg_preset_type(value: str) -> FFmpegPreset:
    try:
        return FFmpegPreset.parse(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def output_fields(url: str, index: int) -> dict[str, str | int]:
    parsed = urlparse(url)
    return {
        "title": title_from_url(url),
        "index": index,
        "host": parsed.netloc,
        "ext": PurePosixPath(parsed.path).suffix.lstrip(".") or "ts",
    }


class DownloadCommand(Command):
    name = "download"
    help = "Download a video"

    def add_arguments(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument("urls", nargs="+", metavar="URL", help="Url(s) of the video file(s) to download.")
        parser.add_argument(
            "-o",
            "--output",
            default="{title}.mp4",
            help="Name of the output file. {title}, {index}, {host} and {ext} get replaced. Use '-' for stdout.",
        )
        parser.add_argument(
            "--ffmpeg-preset",
            type=ffmpeg_preset_type,
            help=f"Preset for video converting. Available presets: {', '.join(FFmpegPreset.available_matches())}",
        )
        parser.add_argument("--skip-existing", action="store_true", help="Skip files which are already existing.")
        parser.add_argument("--ffmpeg-path", default="ffmpeg", help="Path to the ffmpeg executable.")

    def pre_check(self, args: argparse.Namespace) -> None:
        if not has_ffmpeg(args.ffmpeg_path):
            raise CommandError("FFmpeg is needed to run this command")
        if args.output != STDOUT and not Path(args.output).suffix:
            raise CommandError(
                "No file extension found. Please specify a file extension (via `-o`) for the output file"
            )
        if args.output == STDOUT and len(args.urls) > 1:
            raise CommandError("Only one url can be written to stdout")

    async def run(self, ctx, args: argparse.Namespace) -> None:
        session = ctx.client.session

        for i, url in enumerate(args.urls, start=1):
            formatted_path = format_output_path(args.output, **output_fields(url, i))
            path, changed = free_file(formatted_path)

            if changed and args.skip_existing:
                log.DOWNLOAD.debug(f"Skipping already existing file '{formatted_path}'")
                continue

            display_name = str(path) if is_special_file(path) else path.name
            log.DOWNLOAD.info(f"Downloading url {i} of {len(args.urls)} to '{display_name}'")
            if args.ffmpeg_preset:
                log.DOWNLOAD.info(f"\tPreset: {args.ffmpeg_preset.codec}-{args.ffmpeg_preset.quality}")

            with tempfile.TemporaryDirectory(prefix="crunchy-cli-") as tmp_dir:
                video_file = Path(tmp_dir) / "video.ts"
                await io.download_to_file(session, url, video_file, log.DOWNLOAD)

                if is_special_file(path):
                    stdout_file = Path(tmp_dir) / "output.mp4"
                    merger.remux(args.ffmpeg_path, video_file, stdout_file, args.ffmpeg_preset)
                    with stdout_file.open("rb") as f:
                        shutil.copyfileobj(f, sys.stdout.buffer)
                    sys.stdout.buffer.flush()
                else:
                    path.parent.mkdir(parents=True, exist_ok=True)
                    merger.remux(args.ffmpeg_path, video_file, path, args.ffmpeg_preset)
