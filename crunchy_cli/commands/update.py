import argparse
import re

from .. import __version__, io, log
from ..errors import CommandError
from .base import Command

RELEASES_URL = "https://api.github.com/repos/crunchy-labs/crunchy-cli/releases/latest"


def parse_version(version: str) -> tuple[int, ...]:
    """'v3.0.1' -> (3, 0, 1). Anything after the numeric part, e.g. '-rc1', is ignored."""
    match = re.match(r"v?(\d+(?:\.\d+)*)", version.strip())
    if not match:
        raise ValueError(f"Not a version: '{version}'")
    return tuple(int(part) for part in match.group(1).split("."))


def is_newer(latest: str, current: str) -> bool:
    latest_parts, current_parts = parse_version(latest), parse_version(current)
    width = max(len(latest_parts), len(current_parts))
    return latest_parts + (0,) * (width - len(latest_parts)) > current_parts + (0,) * (width - len(current_parts))


class UpdateCommand(Command):
    name = "update"
    help = "Check if updates are available"

    async def run(self, ctx, args: argparse.Namespace) -> None:
        log.UPDATE.debug(f"Fetching latest release from {RELEASES_URL}")
        release = await io.fetch_json(ctx.client.session, RELEASES_URL, log.UPDATE)

        tag = release.get("tag_name") if isinstance(release, dict) else None
        if not tag:
            raise CommandError("Could not find a version in the latest release")

        try:
            newer = is_newer(tag, __version__)
        except ValueError as e:
            raise CommandError(f"Could not compare versions: {e}") from e

        if not newer:
            log.UPDATE.info(f"Installed version {__version__} is up to date")
            return

        log.UPDATE.info(f"A new version is available: {__version__} -> {tag}")
        if release.get("html_url"):
            log.UPDATE.info(f"Release notes: {release['html_url']}")
        log.UPDATE.info("Update with: pip install --upgrade crunchy-cli")
