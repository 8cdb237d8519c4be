import argparse

from .. import __version__, log
from ..credentials import CredentialStore
from .base import Command


class InfoCommand(Command):
    name = "info"
    help = "Shows information about the current configuration and login"

    async def run(self, ctx, args: argparse.Namespace) -> None:
        store = CredentialStore()
        credentials = store.load()

        log.INFO.info(f"Version:     {__version__}")
        log.INFO.info(f"User agent:  {ctx.options.user_agent}")
        log.INFO.info(f"Proxy:       {ctx.options.proxy or 'none'}")
        log.INFO.info(f"Credentials: {store.credentials_file_path}")
        if credentials:
            log.INFO.info(f"Account:     {credentials.username}")
        else:
            log.INFO.info("Account:     not logged in")
