"""Shared test fixtures and helpers."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from typing import Any

import pytest

from cmdgrammar.ast import CommandDef
from cmdgrammar.builtins import BUILTIN_RESOLVERS
from cmdgrammar.compiler import compile_matcher
from cmdgrammar.errors import ParseError
from cmdgrammar.interp import ResolverTable, match_command
from cmdgrammar.lexer import tokenize
from cmdgrammar.tokens import Token, TokenType

REMINDER = 'reminder/rm add [emote: "uwu" | "owo"] <duration: word> <text: string>'


@pytest.fixture
def lex():
    """Return a helper that tokenizes grammar text and returns tokens (excluding EOF)."""

    def _lex(source: str, comments: bool = False) -> list[Token]:
        tokens = tokenize(source, comments=comments)
        # Strip trailing EOF for convenience
        return [t for t in tokens if t.type != TokenType.EOF]

    return _lex


@pytest.fixture
def resolvers() -> dict[str, Any]:
    """A mutable copy of the builtin resolver table."""
    return dict(BUILTIN_RESOLVERS)


@pytest.fixture(params=["interpreted", "compiled"])
def run(request, resolvers):
    """Return a helper that matches with the interpreter or a compiled matcher.

    Every test using this fixture runs once per matcher implementation.
    """

    def _run(
        ast: CommandDef,
        command: str,
        context: Any = None,
        table: ResolverTable | None = None,
    ) -> dict[str, Any]:
        table = resolvers if table is None else table
        if request.param == "compiled":
            return asyncio.run(compile_matcher(ast, table)(command, context))
        return asyncio.run(match_command(ast, command, table, context))

    return _run


async def outcome(pending: Awaitable[dict[str, Any]]) -> tuple[Any, ...]:
    """Reduce a match attempt to a comparable tuple: result or error details."""
    try:
        return ("ok", await pending)
    except ParseError as exc:
        return ("ParseError", exc.token_level, exc.message)
    except Exception as exc:
        return (type(exc).__name__, str(exc))


def assert_types(tokens: list[Token], expected: list[TokenType]) -> None:
    """Assert that the token types match the expected list."""
    actual = [t.type for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"
