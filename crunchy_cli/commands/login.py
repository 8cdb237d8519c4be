import argparse

from .. import log
from ..credentials import Credentials, CredentialStore
from ..errors import CommandError
from .base import Command


class LoginCommand(Command):
    name = "login"
    help = "Save your login credentials persistent on disk"

    def add_arguments(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument("username", nargs="?", help="Username of the account.")
        parser.add_argument("password", nargs="?", help="Password of the account.")
        parser.add_argument("--remove", action="store_true", help="Remove the stored credentials.")

    def pre_check(self, args: argparse.Namespace) -> None:
        if args.remove:
            return
        if not args.username:
            raise CommandError("A username is required to log in")
        if not args.password:
            raise CommandError("A password is required to log in")

    async def run(self, ctx, args: argparse.Namespace) -> None:
        store = CredentialStore()

        if args.remove:
            if store.remove():
                log.LOGIN.info("Removed stored credentials")
            else:
                log.LOGIN.info("No stored credentials found")
            return

        path = store.save(Credentials(username=args.username, password=args.password))
        log.LOGIN.info(f"Stored credentials for '{args.username}' in {path}")
