"""Builtin type resolvers and alias resolution for resolver tables."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from cmdgrammar.cursor import Cursor
from cmdgrammar.errors import ParseError
from cmdgrammar.interp import Resolver


def word(cursor: Cursor, context: Any = None) -> tuple[Cursor, str]:
    """Consume a run of non-space characters."""
    size = 0
    while cursor.peek(size) not in (None, " "):
        size += 1
    if size == 0:
        raise ParseError(cursor.count, "Expected word, found end of command")
    return cursor, cursor.consume_n(size)


def string(cursor: Cursor, context: Any = None) -> tuple[Cursor, str]:
    """Consume everything up to the end of the command."""
    text = cursor.consume_n(len(cursor))
    if not text:
        raise ParseError(cursor.count, "Expected string, found end of command")
    return cursor, text


def integer(cursor: Cursor, context: Any = None) -> tuple[Cursor, int]:
    """Consume a word and convert it to an int.

    Only an optional sign followed by ASCII digits is accepted.
    """
    level = cursor.count
    cursor, text = word(cursor, context)
    digits = text[1:] if text[0] in "+-" else text
    if not (digits.isascii() and digits.isdigit()):
        raise ParseError(level, f"Expected integer, found {text}")
    return cursor, int(text, 10)


BUILTIN_RESOLVERS: Mapping[str, Resolver] = MappingProxyType(
    {
        "word": word,
        "string": string,
        "int": integer,
    }
)


def resolve_type_aliases(aliases: Mapping[str, str]) -> dict[str, Resolver]:
    """Build a resolver table: the builtins plus ``alias -> builtin name`` entries.

    Raises KeyError naming the target when an alias points at an unknown builtin.
    """
    table: dict[str, Resolver] = dict(BUILTIN_RESOLVERS)
    for alias, target in aliases.items():
        if target not in BUILTIN_RESOLVERS:
            raise KeyError(target)
        table[alias] = BUILTIN_RESOLVERS[target]
    return table
