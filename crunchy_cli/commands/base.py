import argparse
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..context import Context


class Command:
    """A subcommand of the root parser.

    ``pre_check`` runs synchronously after the global setup and may reject the
    arguments before anything touches the network; ``run`` is the command body.
    """

    name: str = ""
    help: str = ""
    hidden: bool = False

    def add_arguments(self, parser: argparse.ArgumentParser) -> None:
        pass

    def pre_check(self, args: argparse.Namespace) -> None:
        pass

    async def run(self, ctx: "Context", args: argparse.Namespace) -> None:
        raise NotImplementedError
