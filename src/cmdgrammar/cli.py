"""Command-line interface for cmdgrammar."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
import tomllib
from collections.abc import Awaitable, Callable, Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from cmdgrammar.ast import CommandDef, Param, Typename
from cmdgrammar.errors import GrammarError, LexError, ParseError

logger = logging.getLogger(__name__)

MODES = ("compiled", "interpreted")

Matcher = Callable[[str, Any], Awaitable[dict[str, Any]]]


@dataclass(frozen=True, slots=True)
class CliOptions:
    """Parsed CLI options."""

    grammar_file: Path
    commands: list[str]
    mode: str
    type_aliases: dict[str, str]
    render: bool
    debug: bool


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (separate function for testability)."""
    p = argparse.ArgumentParser(
        prog="cmdgrammar",
        description="Match command strings against command grammars",
    )
    p.add_argument("grammars", help="Grammar file, one grammar per line")
    p.add_argument(
        "commands",
        nargs="*",
        help="Command strings to match (default: read lines from stdin)",
    )
    p.add_argument(
        "--mode",
        choices=MODES,
        default=None,
        help="Matcher implementation (default: compiled)",
    )
    p.add_argument(
        "-t",
        "--type",
        action="append",
        default=[],
        metavar="NAME=BUILTIN",
        help="Register a type name as an alias of a builtin resolver (repeatable)",
    )
    p.add_argument(
        "--config",
        metavar="FILE",
        help="Config file (default: auto-discover cmdgrammar.toml)",
    )
    p.add_argument("--render", action="store_true", help="Print canonical grammars and exit")
    p.add_argument("--debug", action="store_true", help="Dump ASTs and debug logs to stderr")
    return p


def parse_type_arg(s: str) -> tuple[str, str]:
    """Parse a NAME=BUILTIN string into (name, builtin)."""
    if "=" not in s:
        raise argparse.ArgumentTypeError(f"invalid type format (expected NAME=BUILTIN): {s}")
    name, _, target = s.partition("=")
    if not name or not target:
        raise argparse.ArgumentTypeError(f"invalid type format (expected NAME=BUILTIN): {s}")
    return name, target


def load_config(config_path: Path | None, grammar_dir: Path) -> dict[str, Any]:
    """Load a TOML config file, returning an empty dict on missing/absent file."""
    path = config_path if config_path is not None else grammar_dir / "cmdgrammar.toml"

    if not path.is_file():
        return {}

    with open(path, "rb") as f:
        return tomllib.load(f)


def resolve_options(args: argparse.Namespace) -> CliOptions:
    """Merge config file and CLI args into CliOptions.

    Precedence: config file < CLI flags.
    """
    grammar_file = Path(args.grammars)
    grammar_dir = grammar_file.parent
    if not grammar_dir.parts:
        grammar_dir = Path(".")

    config_path = Path(args.config) if args.config else None
    config = load_config(config_path, grammar_dir)

    # Matcher mode: config < CLI
    mode = "compiled"
    cfg_matcher = config.get("matcher")
    if isinstance(cfg_matcher, dict):
        cfg_mode = cfg_matcher.get("mode")
        if cfg_mode is not None:
            if cfg_mode not in MODES:
                raise argparse.ArgumentTypeError(
                    f"invalid matcher mode in config: {cfg_mode!r} (expected one of {', '.join(MODES)})"
                )
            mode = cfg_mode
    if args.mode is not None:
        mode = args.mode

    # Type aliases: config < CLI
    type_aliases: dict[str, str] = {}
    cfg_types = config.get("types")
    if isinstance(cfg_types, dict):
        for k, v in cfg_types.items():
            type_aliases[str(k)] = str(v)
    for raw in args.type:
        name, target = parse_type_arg(raw)
        type_aliases[name] = target

    return CliOptions(
        grammar_file=grammar_file,
        commands=list(args.commands),
        mode=mode,
        type_aliases=type_aliases,
        render=args.render,
        debug=args.debug,
    )


def load_grammars(path: Path) -> list[CommandDef]:
    """Read and parse a grammar file."""
    from cmdgrammar.parser import parse_grammar_file

    return parse_grammar_file(path.read_text(encoding="utf-8"))


def unknown_types(grammars: Iterable[CommandDef], resolvers: Mapping[str, Any]) -> list[str]:
    """Type names used by ``grammars`` with no entry in ``resolvers``, in first-use order."""
    missing: list[str] = []
    for ast in grammars:
        for node in ast:
            if isinstance(node, Param) and isinstance(node.ptype, Typename):
                name = node.ptype.name
                if name not in resolvers and name not in missing:
                    missing.append(name)
    return missing


def build_matchers(
    grammars: list[CommandDef], resolvers: Mapping[str, Any], mode: str
) -> list[Matcher]:
    """One matcher per grammar, compiled or interpreting depending on ``mode``."""
    from cmdgrammar.compiler import compile_matcher
    from cmdgrammar.interp import match_command

    if mode == "compiled":
        return [compile_matcher(ast, resolvers) for ast in grammars]

    def interpreter(ast: CommandDef) -> Matcher:
        async def run(command: str, context: Any = None) -> dict[str, Any]:
            return await match_command(ast, command, resolvers, context)

        return run

    return [interpreter(ast) for ast in grammars]


async def match_input(matchers: list[Matcher], command: str) -> tuple[int, dict[str, Any]]:
    """Try each matcher in order; return (index, params) of the first success.

    When all fail, re-raise the ParseError that got furthest into its grammar.
    """
    best: ParseError | None = None
    for idx, matcher in enumerate(matchers):
        try:
            return idx, await matcher(command, None)
        except ParseError as exc:
            if best is None or exc.token_level > best.token_level:
                best = exc
    if best is None:
        raise ParseError(0, "No grammars to match against")
    raise best


async def _match_all(
    matchers: list[Matcher], grammars: list[CommandDef], commands: Iterable[str]
) -> int:
    from cmdgrammar.render import render_grammar

    status = 0
    for command in commands:
        try:
            idx, params = await match_input(matchers, command)
        except ParseError as exc:
            print(f"error: {command}: {exc.message} (token {exc.token_level})", file=sys.stderr)
            status = 2
            continue
        record = {"input": command, "grammar": render_grammar(grammars[idx]), "params": params}
        print(json.dumps(record, default=str))
    return status


def _stdin_commands() -> Iterable[str]:
    for line in sys.stdin:
        line = line.rstrip("\r\n")
        if line:
            yield line


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns exit code (0/1/2). Does not call sys.exit()."""
    from cmdgrammar.builtins import resolve_type_aliases
    from cmdgrammar.debug import dump_ast
    from cmdgrammar.render import render_grammar

    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        options = resolve_options(args)
    except argparse.ArgumentTypeError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    logging.basicConfig(
        level=logging.DEBUG if options.debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        resolvers = resolve_type_aliases(options.type_aliases)
    except KeyError as exc:
        print(f"error: unknown builtin type {exc.args[0]!r}", file=sys.stderr)
        return 2

    try:
        grammars = load_grammars(options.grammar_file)
    except OSError as exc:
        print(f"error: cannot read {options.grammar_file}: {exc.strerror}", file=sys.stderr)
        return 1
    except (LexError, GrammarError) as exc:
        print(exc.format(str(options.grammar_file)), file=sys.stderr)
        return 1

    if not grammars:
        print(f"error: no grammars in {options.grammar_file}", file=sys.stderr)
        return 1

    missing = unknown_types(grammars, resolvers)
    if missing:
        print(f"error: unknown type(s): {', '.join(missing)}", file=sys.stderr)
        return 1

    if options.debug:
        for ast in grammars:
            dump_ast(ast, file=sys.stderr)

    if options.render:
        for ast in grammars:
            print(render_grammar(ast))
        return 0

    logger.debug("matching with %d %s grammar(s)", len(grammars), options.mode)
    matchers = build_matchers(grammars, resolvers, options.mode)
    commands = options.commands if options.commands else _stdin_commands()
    return asyncio.run(_match_all(matchers, grammars, commands))


def run() -> None:
    """Console-script wrapper around main()."""
    sys.exit(main())
