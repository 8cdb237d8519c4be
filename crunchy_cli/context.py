from dataclasses import dataclass

from . import __version__
from .client import HttpClient
from .log import Logger

DEFAULT_USER_AGENT = f"crunchy-cli/{__version__}"


@dataclass(frozen=True)
class GlobalOptions:
    quiet: bool = False
    verbose: bool = False
    proxy: str | None = None
    user_agent: str = DEFAULT_USER_AGENT


@dataclass(frozen=True)
class Context:
    options: GlobalOptions
    log: Logger
    client: HttpClient
