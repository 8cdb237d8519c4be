import argparse
import asyncio
import enum
import sys
import traceback

from . import __version__, log
from .client import create_or_default_client
from .commands import Command, default_commands
from .context import DEFAULT_USER_AGENT, Context, GlobalOptions
from .errors import CancelledError, CommandError, ConfigurationError

GLOBAL_FLAGS = ["-q", "--quiet", "-v", "--verbose", "-p", "--proxy", "--useragent", "--version", "-h", "--help"]


class ExitOutcome(enum.Enum):
    SUCCESS = "success"
    STARTUP_ERROR = "startup_error"
    COMMAND_ERROR = "command_error"
    CANCELLED = "cancelled"
    RECOVERED_PANIC = "recovered_panic"

    @property
    def exit_code(self) -> int:
        return 0 if self is ExitOutcome.SUCCESS else 1


def _add_global_flags(parser: argparse.ArgumentParser, suppress_defaults: bool = False):
    # Subparsers get the same flags with suppressed defaults, so a flag given after
    # the subcommand sets the value and an absent one keeps the root parser's.
    def default(value):
        return argparse.SUPPRESS if suppress_defaults else value

    group = parser.add_argument_group("Global Options")
    group.add_argument("-q", "--quiet", action="store_true", default=default(False), help="Disable all output.")
    group.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=default(False),
        help="Adds debug messages to the normal output.",
    )
    group.add_argument("-p", "--proxy", default=default(""), help="Proxy to use.")
    group.add_argument(
        "--useragent", default=default(DEFAULT_USER_AGENT), help="Useragent to do all request with."
    )


class CommandParser(argparse.ArgumentParser):
    """Subcommand parser that remembers the dests of its positional arguments."""

    def __init__(self, *args, **kwargs):
        self.positional_dests: list[str] = []
        super().__init__(*args, **kwargs)

    def add_argument(self, *args, **kwargs):
        action = super().add_argument(*args, **kwargs)
        if not action.option_strings:
            self.positional_dests.append(action.dest)
        return action


def get_argument_parser(commands: list[Command] | None = None) -> argparse.ArgumentParser:
    commands = default_commands() if commands is None else commands

    parser = argparse.ArgumentParser(
        prog="crunchy-cli",
        description="Download crunchyroll videos with ease.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    _add_global_flags(parser)

    visible = [command.name for command in commands if not command.hidden]
    subparsers = parser.add_subparsers(
        title="Commands", dest="command_name", metavar="{" + ",".join(visible) + "}",
        required=True,
        parser_class=CommandParser,
    )
    for command in commands:
        # without a help entry argparse leaves the command out of the help output
        kwargs = {} if command.hidden else {"help": command.help}
        sub = subparsers.add_parser(
            command.name,
            description=command.help,
            formatter_class=argparse.ArgumentDefaultsHelpFormatter,
            **kwargs,
        )
        command.add_arguments(sub)
        _add_global_flags(sub, suppress_defaults=True)
        sub.set_defaults(command=command, command_positionals=sub.positional_dests)

    parser.set_defaults(command_names=visible, global_flags=GLOBAL_FLAGS)
    return parser


def options_from_args(args: argparse.Namespace) -> GlobalOptions:
    return GlobalOptions(
        quiet=args.quiet,
        verbose=args.verbose,
        proxy=args.proxy or None,
        user_agent=args.useragent,
    )


def configure_globals(
    options: GlobalOptions,
    logger: log.Logger | None = None,
    command_name: str | None = None,
    arg_count: int = 0,
) -> Context:
    """
    Pre-run hook. Picks the logger (verbose wins over quiet, neither keeps
    ``logger``) and builds the one HTTP client of this invocation.
    Raises ConfigurationError for an unusable proxy.
    """
    if options.verbose:
        logger = log.Logger(True, True, True).apply()
    elif options.quiet:
        logger = log.Logger(False, False, False).apply()
    elif logger is None:
        logger = log.default_logger().apply()

    if command_name:
        logger.debug(f"Executing `{command_name}` command with {arg_count} arg(s)")

    client = create_or_default_client(options.proxy, options.user_agent)
    return Context(options=options, log=logger, client=client)


def _count_command_args(args: argparse.Namespace) -> int:
    count = 0
    for dest in getattr(args, "command_positionals", []):
        value = getattr(args, dest, None)
        if isinstance(value, list):
            count += len(value)
        elif value is not None:
            count += 1
    return count


async def _run_command(command: Command, ctx: Context, args: argparse.Namespace) -> None:
    async with ctx.client:
        await command.run(ctx, args)


def execute(argv: list[str] | None = None, commands: list[Command] | None = None) -> ExitOutcome:
    argv = sys.argv[1:] if argv is None else list(argv)
    logger = log.default_logger().apply()

    args = get_argument_parser(commands).parse_args(argv)
    command: Command = args.command

    try:
        try:
            ctx = configure_globals(
                options_from_args(args), logger, command_name=command.name, arg_count=_count_command_args(args)
            )
        except ConfigurationError as e:
            logger.err(f"An error occurred: {e}")
            return ExitOutcome.STARTUP_ERROR

        logger = ctx.log

        command.pre_check(args)
        asyncio.run(_run_command(command, ctx, args))

    except (CancelledError, KeyboardInterrupt, asyncio.CancelledError):
        logger.debug("Operation was cancelled")
        return ExitOutcome.CANCELLED
    except CommandError as e:
        logger.err(f"An error occurred: {e}")
        return ExitOutcome.COMMAND_ERROR
    except Exception as e:
        if logger.is_dev():
            logger.err(f"{e}: {''.join(traceback.format_exception(e))}")
        else:
            logger.err(f"Unexpected error: {e}")
        return ExitOutcome.RECOVERED_PANIC

    return ExitOutcome.SUCCESS


def main(argv: list[str] | None = None):
    sys.exit(execute(argv).exit_code)
