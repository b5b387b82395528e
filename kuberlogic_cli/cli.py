"""Command-line entry point: the root parser, configuration and shell completion."""

from __future__ import annotations

import argparse
import re
import sys
from pathlib import Path
from typing import Any, Iterator, Sequence, TextIO

import yaml

from .backup_commands import add_backup_commands, add_restore_commands
from .client import DEFAULT_HOST, DEFAULT_SCHEMES, ApiError, CommandContext
from .diagnostics import add_diag_command
from .output import API_HOST_FLAG, FORMAT_FLAG, SCHEME_FLAG, TOKEN_FLAG, parse_format
from .service_commands import add_service_commands
from .service_tools import CredentialsError, add_service_tool_commands
from .version import add_version_command

CLI_VERSION = "0.0.16"
SHELLS = ("bash", "zsh", "fish", "powershell")
DEFAULT_CONFIG = Path.home() / ".config" / "kuberlogic" / "config.yaml"

_COMPLETION_HELP = """To load completions:

Bash:
  $ source <({prog} completion bash)

Zsh:
  $ {prog} completion zsh > "${{fpath[1]}}/_{prog}"

fish:
  $ {prog} completion fish | source

PowerShell:
  PS> {prog} completion powershell | Out-String | Invoke-Expression
"""


class _UsageError(ValueError):
    """The command line could not be parsed."""


class _Parser(argparse.ArgumentParser):
    def error(self, message: str):  # type: ignore[override]
        raise _UsageError(message)


def _default_prog() -> str:
    return Path(sys.argv[0]).name or "kuberlogic"


def _subcommands(parser: argparse.ArgumentParser) -> dict[str, argparse.ArgumentParser]:
    for action in parser._actions:
        if isinstance(action, argparse._SubParsersAction):
            return dict(action.choices)
    return {}


def _walk(parser: argparse.ArgumentParser) -> Iterator[argparse.ArgumentParser]:
    seen: set[int] = set()
    stack = list(_subcommands(parser).values())
    while stack:
        current = stack.pop()
        if id(current) in seen:
            continue
        seen.add(id(current))
        yield current
        stack.extend(_subcommands(current).values())


def _add_global_options(parser: argparse.ArgumentParser, root: bool) -> None:
    """Add the options every command accepts, wherever they appear on the line."""
    default = (lambda value: value) if root else (lambda value: argparse.SUPPRESS)
    specs: list[tuple[tuple[str, ...], dict[str, Any]]] = [
        ((f"--{API_HOST_FLAG}",), dict(dest="hostname", default=default(None),
                                       help="KuberLogic API server address")),
        ((f"--{SCHEME_FLAG}",), dict(dest="scheme", default=default(None),
                                     help=f"KuberLogic API server scheme: {list(DEFAULT_SCHEMES)}")),
        ((f"--{TOKEN_FLAG}",), dict(dest="token", default=default(None),
                                    help="Specify KuberLogic API server authentication token.")),
        (("--debug",), dict(dest="debug", action="store_true", default=default(False),
                            help="output debug logs")),
        (("--dry-run",), dict(dest="dry_run", action="store_true", default=default(False),
                              help="do not send the request to server")),
        (("--config",), dict(dest="config", default=default(str(DEFAULT_CONFIG)),
                             help="config file")),
        ((f"--{FORMAT_FLAG}",), dict(dest="format", type=parse_format, default=default(None),
                                     help="Format response value: json, yaml or string. "
                                          "(default: string)")),
    ]
    for flags, kwargs in specs:
        try:
            parser.add_argument(*flags, **kwargs)
        except argparse.ArgumentError:
            pass


def _completion_entries(parser, path=()) -> Iterator[tuple[tuple[str, ...], list[str], list[str]]]:
    subs = _subcommands(parser)
    options = sorted(
        {opt for action in parser._actions for opt in action.option_strings if opt.startswith("--")}
    )
    yield path, list(subs), options
    for name, sub in subs.items():
        yield from _completion_entries(sub, path + (name,))


def _bash_script(prog: str, entries) -> str:
    func = "__" + re.sub(r"\W", "_", prog) + "_complete"
    cases = [
        f'        "{" ".join(path)}") opts="{" ".join(commands + options)}" ;;'
        for path, commands, options in entries
    ]
    lines = [
        f"# bash completion for {prog}",
        f"{func}() {{",
        '    local cur="${COMP_WORDS[COMP_CWORD]}"',
        '    local path="" opts="" i',
        "    for ((i = 1; i < COMP_CWORD; i++)); do",
        '        case "${COMP_WORDS[i]}" in',
        "            -*) ;;",
        '            *) path="${path:+$path }${COMP_WORDS[i]}" ;;',
        "        esac",
        "    done",
        '    case "$path" in',
        *cases,
        "    esac",
        '    COMPREPLY=( $(compgen -W "$opts" -- "$cur") )',
        "}",
        f"complete -F {func} {prog}",
    ]
    return "\n".join(lines) + "\n"


def _zsh_script(prog: str, entries) -> str:
    return f"#compdef {prog}\nautoload -U +X bashcompinit && bashcompinit\n" + _bash_script(
        prog, entries
    )


def _fish_script(prog: str, entries) -> str:
    lines = [f"# fish completion for {prog}"]
    for path, commands, options in entries:
        if path:
            condition = "; and ".join(f"__fish_seen_subcommand_from {word}" for word in path)
        else:
            condition = "__fish_use_subcommand"
        if commands:
            lines.append(f"complete -c {prog} -f -n '{condition}' -a '{' '.join(commands)}'")
        for option in options:
            lines.append(f"complete -c {prog} -n '{condition}' -l {option[2:]}")
    return "\n".join(lines) + "\n"


def _powershell_script(prog: str, entries) -> str:
    table = [
        f"        '{' '.join(path)}' = @({', '.join(repr(w) for w in commands + options)})"
        for path, commands, options in entries
    ]
    lines = [
        f"# powershell completion for {prog}",
        f"Register-ArgumentCompleter -Native -CommandName '{prog}' -ScriptBlock {{",
        "    param($wordToComplete, $commandAst, $cursorPosition)",
        "    $commands = @{",
        *table,
        "    }",
        "    $words = @($commandAst.CommandElements | Select-Object -Skip 1 |"
        " ForEach-Object { $_.ToString() } |"
        " Where-Object { $_ -notlike '-*' -and $_ -ne $wordToComplete })",
        "    $key = $words -join ' '",
        "    if ($commands.ContainsKey($key)) {",
        "        $commands[$key] | Where-Object { $_ -like \"$wordToComplete*\" } | ForEach-Object {",
        "            [System.Management.Automation.CompletionResult]::new("
        "$_, $_, 'ParameterValue', $_)",
        "        }",
        "    }",
        "}",
    ]
    return "\n".join(lines) + "\n"


_GENERATORS = {
    "bash": _bash_script,
    "zsh": _zsh_script,
    "fish": _fish_script,
    "powershell": _powershell_script,
}


def _completion_script(parser: argparse.ArgumentParser, shell: str) -> str:
    if shell not in _GENERATORS:
        raise ValueError(f"invalid argument {shell!r}, must be one of {list(SHELLS)}")
    return _GENERATORS[shell](parser.prog, list(_completion_entries(parser)))


def make_parser(prog: str | None = None) -> argparse.ArgumentParser:
    """Build the root parser with every command group registered."""
    prog = prog or _default_prog()
    parser = _Parser(prog=prog)
    _add_global_options(parser, root=True)

    commands = parser.add_subparsers(dest="command", metavar="COMMAND")
    service_commands = add_service_commands(commands)
    add_service_tool_commands(service_commands)
    add_backup_commands(commands)
    add_restore_commands(commands)
    add_diag_command(commands)
    add_version_command(commands)

    completion = commands.add_parser(
        "completion",
        help="Generate completion script",
        description=_COMPLETION_HELP.format(prog=prog),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    completion.add_argument("shell", choices=SHELLS)

    def _completion_handler(ctx: CommandContext, options: argparse.Namespace) -> None:
        ctx.out.write(_completion_script(parser, options.shell))

    completion.set_defaults(handler=_completion_handler)

    for sub in _walk(parser):
        _add_global_options(sub, root=False)
    return parser


def load_config_file(path: str | Path) -> dict[str, Any]:
    """Read a YAML or JSON config file holding hostname, scheme and token."""
    with open(path, encoding="utf-8") as handle:
        data = yaml.safe_load(handle)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"config file {path} does not hold a mapping")
    return data


def run(
    argv: Sequence[str] | None = None,
    transport=None,
    k8s=None,
    out: TextIO | None = None,
) -> Any:
    """Parse ``argv`` and run the chosen command; errors are raised."""
    parser = make_parser()
    options = parser.parse_args(list(sys.argv[1:] if argv is None else argv))
    ctx = CommandContext(
        transport=transport,
        debug=bool(options.debug),
        dry_run=bool(options.dry_run),
        out=out if out is not None else sys.stdout,
    )

    config: dict[str, Any] = {}
    try:
        config = load_config_file(options.config)
        ctx.debug_log(f"Using config file: {options.config}")
    except (OSError, yaml.YAMLError, ValueError) as exc:
        ctx.debug_log(f"Error: loading config file: {exc}")

    def setting(name: str, default: str) -> str:
        value = getattr(options, name, None)
        if value is not None:
            return value
        value = config.get(name)
        return str(value) if value is not None else default

    ctx.hostname = setting("hostname", DEFAULT_HOST)
    ctx.scheme = setting("scheme", DEFAULT_SCHEMES[0])
    ctx.token = setting("token", "")

    handler = getattr(options, "handler", None)
    if handler is None:
        ctx.out.write(parser.format_help())
        return None
    options.k8s = k8s
    options.cli_version = CLI_VERSION
    return handler(ctx, options)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line and return the exit status."""
    try:
        run(argv)
    except _UsageError as exc:
        sys.stderr.write(f"Error: {exc}\n")
        sys.stderr.write(f"Run '{_default_prog()} --help' for usage.\n")
        return 1
    except (ApiError, CredentialsError, ValueError, RuntimeError, OSError) as exc:
        sys.stderr.write(f"Error: {exc}\n")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())