import argparse
import sys

from .base import Command

BASH_TEMPLATE = """_crunchy_cli() {{
    local cur="${{COMP_WORDS[COMP_CWORD]}}"
    if [[ "$cur" == -* ]]; then
        COMPREPLY=($(compgen -W "{flags}" -- "$cur"))
    elif [[ $COMP_CWORD -eq 1 ]]; then
        COMPREPLY=($(compgen -W "{commands}" -- "$cur"))
    else
        COMPREPLY=($(compgen -f -- "$cur"))
    fi
}}
complete -F _crunchy_cli crunchy-cli
"""


def bash_script(commands: list[str], flags: list[str]) -> str:
    return BASH_TEMPLATE.format(commands=" ".join(commands), flags=" ".join(flags))


def fish_script(commands: list[str], flags: list[str]) -> str:
    lines = [f"complete -c crunchy-cli -n __fish_use_subcommand -f -a {command}" for command in commands]
    for flag in flags:
        if flag.startswith("--"):
            lines.append(f"complete -c crunchy-cli -l {flag[2:]}")
        else:
            lines.append(f"complete -c crunchy-cli -s {flag[1:]}")
    return "\n".join(lines) + "\n"


class CompletionCommand(Command):
    name = "completion"
    help = "Generate the autocompletion script for the specified shell"
    hidden = True

    def add_arguments(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument("shell", choices=["bash", "fish"])

    async def run(self, ctx, args: argparse.Namespace) -> None:
        generate = bash_script if args.shell == "bash" else fish_script
        sys.stdout.write(generate(args.command_names, args.global_flags))
