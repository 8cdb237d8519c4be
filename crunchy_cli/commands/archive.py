import argparse
import tempfile
from pathlib import Path

from .. import io, log, merger
from ..errors import CommandError
from ..utils import format_output_path, free_file, has_ffmpeg
from .base import Command
from .download import output_fields


class ArchiveCommand(Command):
    name = "archive"
    help = "Archive one or more video and audio files into a single matroska file"

    def add_arguments(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument(
            "urls", nargs="+", metavar="URL", help="Url(s) of the stream files, muxed in the given order."
        )
        parser.add_argument(
            "-o",
            "--output",
            default="{title}.mkv",
            help="Name of the output file. Placeholders are filled from the first url. Must end with .mkv.",
        )
        parser.add_argument(
            "-l",
            "--language",
            action="append",
            default=[],
            help="Language tag of the audio streams, in order. Can be used multiple times.",
        )
        parser.add_argument("--skip-existing", action="store_true", help="Skip if the output file already exists.")
        parser.add_argument("--ffmpeg-path", default="ffmpeg", help="Path to the ffmpeg executable.")

    def pre_check(self, args: argparse.Namespace) -> None:
        if not has_ffmpeg(args.ffmpeg_path):
            raise CommandError("FFmpeg is needed to run this command")
        if Path(args.output).suffix.lower() != ".mkv":
            raise CommandError("Archives are always matroska files. Please use '.mkv' as output extension")

    async def run(self, ctx, args: argparse.Namespace) -> None:
        formatted_path = format_output_path(args.output, **output_fields(args.urls[0], 1))
        path, changed = free_file(formatted_path)
        if changed and args.skip_existing:
            log.ARCHIVE.info(f"Skipping already existing file '{formatted_path}'")
            return

        log.ARCHIVE.info(f"Archiving {len(args.urls)} stream file(s) to '{path.name}'")
        with tempfile.TemporaryDirectory(prefix="crunchy-cli-") as tmp_dir:
            sources = []
            for i, url in enumerate(args.urls):
                source = Path(tmp_dir) / f"stream_{i}.tmp"
                await io.download_to_file(ctx.client.session, url, source, log.ARCHIVE)
                sources.append(source)

            path.parent.mkdir(parents=True, exist_ok=True)
            merger.mux_archive(args.ffmpeg_path, sources, path, args.language)
