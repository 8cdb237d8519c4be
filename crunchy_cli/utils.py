import re
import shutil
from pathlib import Path, PurePosixPath
from urllib.parse import unquote, urlparse

STDOUT = "-"
_PLACEHOLDER = re.compile(r"\{(\w+)\}")


def format_size(size: int | None) -> str:
    """Formats a byte count into a human-readable string."""
    if size is None:
        return "N/A"
    value = float(size)
    for unit in ("B", "KiB", "MiB", "GiB"):
        if value < 1024:
            return f"{value:.1f} {unit}" if unit != "B" else f"{int(value)} B"
        value /= 1024
    return f"{value:.2f} TiB"


def has_ffmpeg(ffmpeg_path: str = "ffmpeg") -> bool:
    return shutil.which(ffmpeg_path) is not None


def is_special_file(path: Path | str) -> bool:
    return str(path) == STDOUT


def title_from_url(url: str) -> str:
    """Last path component of ``url`` without its extension, e.g. 'episode-1' for .../episode-1.mp4."""
    parsed = urlparse(url)
    name = PurePosixPath(unquote(parsed.path)).stem
    return name or parsed.netloc or "video"


def _sanitize(value: str) -> str:
    return value.replace("/", "_").replace("\\", "_")


def format_output_path(template: str, **fields) -> Path:
    """
    Replaces the ``{name}`` placeholders of an output template with ``fields``.
    Placeholders without a value are kept as they are.
    """

    def replace(match: re.Match) -> str:
        key = match.group(1)
        if key not in fields:
            return match.group(0)
        return _sanitize(str(fields[key]))

    return Path(_PLACEHOLDER.sub(replace, template))


def free_file(path: Path) -> tuple[Path, bool]:
    """
    Returns a path that does not exist yet, appending ' (1)', ' (2)', ... to the
    stem if needed, and whether the name had to be changed.
    """
    if is_special_file(path) or not path.exists():
        return path, False

    i = 1
    while True:
        candidate = path.with_name(f"{path.stem} ({i}){path.suffix}")
        if not candidate.exists():
            return candidate, True
        i += 1
