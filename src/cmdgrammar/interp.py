"""AST-walking matcher: matches a command string against a grammar node by node."""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import Any, TypeAlias

from cmdgrammar.ast import Node, Param, StringLiteral, StringOr, Typename, is_mandatory
from cmdgrammar.cursor import Cursor
from cmdgrammar.errors import (
    UNEXPECTED_END,
    InternalError,
    ParseError,
    UnknownTypeError,
    expected_delimiter,
    expected_end,
    expected_one_of,
    unknown_node,
    unknown_ptype,
)

Resolved: TypeAlias = tuple[Cursor, Any]

# A type resolver parses one parameter value off the front of a cursor. It may
# be a plain function or a coroutine function.
Resolver: TypeAlias = Callable[[Cursor, Any], Resolved | Awaitable[Resolved]]
ResolverTable: TypeAlias = Mapping[str, Resolver]


def check_resolved(result: Any) -> Resolved:
    """Unpack a resolver result, rejecting anything that is not a (Cursor, value) pair."""
    new_cursor, value = result
    if not isinstance(new_cursor, Cursor):
        raise TypeError(f"resolver returned {type(new_cursor).__name__} instead of a Cursor")
    return new_cursor, value


async def call_resolver(resolver: Resolver, cursor: Cursor, context: Any) -> Resolved:
    """Invoke a resolver and await its result if it returned an awaitable."""
    result = resolver(cursor, context)
    if inspect.isawaitable(result):
        result = await result
    return check_resolved(result)


def longest_match(cursor: Cursor, values: Sequence[str]) -> str | None:
    """Longest of ``values`` found case-insensitively at the cursor; first wins ties."""
    best: str | None = None
    for value in values:
        if best is not None and len(value) <= len(best):
            continue
        if cursor.next_n(len(value)).lower() == value.lower():
            best = value
    return best


async def match_command(
    ast: Sequence[Node],
    command: str,
    resolvers: ResolverTable,
    context: Any = None,
) -> dict[str, Any]:
    """Match ``command`` against ``ast`` and return the captured parameters.

    Nodes after the first must be preceded by exactly one space. Optional
    parameters that fail to match are left out of the result and the cursor
    is rewound to before their delimiter. Raises ParseError on mismatch.
    """
    cursor = Cursor(command)
    params: dict[str, Any] = {}

    for i, node in enumerate(ast):
        backup = cursor.clone()

        if cursor.at_end():
            if any(is_mandatory(n) for n in ast[i:]):
                raise ParseError(i, UNEXPECTED_END)
            break

        if i != 0:
            ch = cursor.peek()
            if ch != " ":
                raise ParseError(i, expected_delimiter(ch))
            cursor.consume()

        if isinstance(node, StringLiteral):
            matched = longest_match(cursor, node.values)
            if matched is None:
                raise ParseError(i, expected_one_of(node.values, cursor.next_n(5)))
            cursor.consume_n(len(matched))

        elif isinstance(node, Param):
            ptype = node.ptype
            if isinstance(ptype, StringOr):
                matched = longest_match(cursor, ptype.values)
                if matched is not None:
                    params[node.name] = matched
                    cursor.consume_n(len(matched))
                elif node.optional:
                    cursor = backup
                else:
                    raise ParseError(i, expected_one_of(ptype.values, cursor.next_n(5)))

            elif isinstance(ptype, Typename):
                resolver = resolvers.get(ptype.name)
                if resolver is None:
                    raise UnknownTypeError(ptype.name, node.name)
                attempt = cursor.clone()
                attempt.count = i
                try:
                    cursor, params[node.name] = await call_resolver(resolver, attempt, context)
                except InternalError:
                    raise
                except Exception:
                    if not node.optional:
                        raise
                    cursor = backup

            else:
                raise InternalError(unknown_ptype(ptype))

        else:
            raise InternalError(unknown_node(node))

    if not cursor.at_end():
        raise ParseError(len(ast), expected_end(cursor.remaining))
    return params
