from .archive import ArchiveCommand
from .base import Command
from .completion import CompletionCommand
from .download import DownloadCommand
from .info import InfoCommand
from .login import LoginCommand
from .update import UpdateCommand

__all__ = ["Command", "default_commands"]


def default_commands() -> list[Command]:
    return [
        ArchiveCommand(),
        DownloadCommand(),
        InfoCommand(),
        LoginCommand(),
        UpdateCommand(),
        CompletionCommand(),
    ]
