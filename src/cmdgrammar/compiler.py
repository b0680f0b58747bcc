"""Specializing compiler: turns a command AST into a reusable matcher.

``compile_matcher`` does the AST work once: it sorts alternatives, decides
which nodes need a delimiter, a backup or an end-of-input error, and binds
each resolver function. The result is a chain of per-node step closures that
``CommandMatcher`` runs in order. Its results and errors are the same as
``match_command`` for every input.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Any, TypeAlias

from cmdgrammar.ast import CommandDef, Node, Param, StringLiteral, StringOr, Typename, is_mandatory
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
from cmdgrammar.interp import Resolved, Resolver, ResolverTable, check_resolved

logger = logging.getLogger(__name__)

# A step matches one node. It returns the cursor to continue with, or _STOP
# when input ran out and only optional nodes are left.
Step: TypeAlias = Callable[[Cursor, dict[str, Any], Any], Awaitable[Any]]
Enter: TypeAlias = Callable[[Cursor], bool]
Invoke: TypeAlias = Callable[[Cursor, Any], Awaitable[Resolved]]

_STOP = object()

# (value as declared, its length, lower-cased value)
_Choice: TypeAlias = tuple[str, int, str]


class CommandMatcher:
    """A grammar compiled for repeated matching.

    ``await matcher(command, context)`` behaves like
    ``match_command(matcher.ast, command, resolvers, context)``.
    """

    __slots__ = ("ast", "_steps")

    def __init__(self, ast: CommandDef, steps: tuple[Step, ...]) -> None:
        self.ast = ast
        self._steps = steps

    def __repr__(self) -> str:
        from cmdgrammar.render import render_grammar

        return f"CommandMatcher({render_grammar(self.ast)!r})"

    async def __call__(self, command: str, context: Any = None) -> dict[str, Any]:
        cursor = Cursor(command)
        params: dict[str, Any] = {}
        for step in self._steps:
            nxt = await step(cursor, params, context)
            if nxt is _STOP:
                return params
            cursor = nxt
        if not cursor.at_end():
            raise ParseError(len(self._steps), expected_end(cursor.remaining))
        return params


def compile_matcher(ast: Sequence[Node], resolvers: ResolverTable) -> CommandMatcher:
    """Build a CommandMatcher for ``ast``, binding resolvers from ``resolvers``.

    Neither argument is modified or retained; later changes to ``resolvers``
    do not affect the returned matcher.
    """
    nodes: CommandDef = tuple(ast)

    # end_fatal[i]: running out of input before node i is an error
    end_fatal = [False] * len(nodes)
    tail_mandatory = False
    for i in range(len(nodes) - 1, -1, -1):
        tail_mandatory = tail_mandatory or is_mandatory(nodes[i])
        end_fatal[i] = tail_mandatory

    steps = tuple(
        _compile_node(i, node, _make_enter(i, end_fatal[i]), resolvers)
        for i, node in enumerate(nodes)
    )
    logger.debug("compiled command matcher with %d steps", len(steps))
    return CommandMatcher(nodes, steps)


# ---------------------------------------------------------------------------
# Node prologue: end-of-input check and delimiter
# ---------------------------------------------------------------------------


def _make_enter(i: int, end_fatal: bool) -> Enter:
    """Return the pre-node check: True to match the node, False to stop."""

    if i == 0:

        def enter_first(cursor: Cursor) -> bool:
            if cursor.at_end():
                if end_fatal:
                    raise ParseError(i, UNEXPECTED_END)
                return False
            return True

        return enter_first

    def enter(cursor: Cursor) -> bool:
        if cursor.at_end():
            if end_fatal:
                raise ParseError(i, UNEXPECTED_END)
            return False
        ch = cursor.peek()
        if ch != " ":
            raise ParseError(i, expected_delimiter(ch))
        cursor.consume()
        return True

    return enter


# ---------------------------------------------------------------------------
# Per-node steps
# ---------------------------------------------------------------------------


def _compile_node(i: int, node: Node, enter: Enter, resolvers: ResolverTable) -> Step:
    if isinstance(node, StringLiteral):
        return _literal_step(i, node.values, enter)
    if isinstance(node, Param):
        ptype = node.ptype
        if isinstance(ptype, StringOr):
            if node.optional:
                return _optional_choice_step(node.name, ptype.values, enter)
            return _choice_step(i, node.name, ptype.values, enter)
        if isinstance(ptype, Typename):
            resolver = resolvers.get(ptype.name)
            if resolver is None:
                logger.warning(
                    "no resolver for type %r (parameter %r); matching will fail at that node",
                    ptype.name,
                    node.name,
                )
                return _failing_step(enter, lambda: UnknownTypeError(ptype.name, node.name))
            invoke = _make_invoke(resolver)
            if node.optional:
                return _optional_typed_step(i, node.name, invoke, enter)
            return _typed_step(i, node.name, invoke, enter)
        return _failing_step(enter, lambda: InternalError(unknown_ptype(ptype)))
    return _failing_step(enter, lambda: InternalError(unknown_node(node)))


def _choices(values: tuple[str, ...]) -> tuple[_Choice, ...]:
    """Longest first; equal lengths keep declaration order (sort is stable)."""
    ordered = sorted(values, key=len, reverse=True)
    return tuple((value, len(value), value.lower()) for value in ordered)


def _literal_step(i: int, values: tuple[str, ...], enter: Enter) -> Step:
    choices = _choices(values)

    async def literal(cursor: Cursor, params: dict[str, Any], context: Any) -> Any:
        if not enter(cursor):
            return _STOP
        for _, size, folded in choices:
            if cursor.next_n(size).lower() == folded:
                cursor.consume_n(size)
                return cursor
        raise ParseError(i, expected_one_of(values, cursor.next_n(5)))

    return literal


def _choice_step(i: int, name: str, values: tuple[str, ...], enter: Enter) -> Step:
    choices = _choices(values)

    async def choice(cursor: Cursor, params: dict[str, Any], context: Any) -> Any:
        if not enter(cursor):
            return _STOP
        for value, size, folded in choices:
            if cursor.next_n(size).lower() == folded:
                params[name] = value
                cursor.consume_n(size)
                return cursor
        raise ParseError(i, expected_one_of(values, cursor.next_n(5)))

    return choice


def _optional_choice_step(name: str, values: tuple[str, ...], enter: Enter) -> Step:
    choices = _choices(values)

    async def optional_choice(
        cursor: Cursor, params: dict[str, Any], context: Any
    ) -> Any:
        backup = cursor.clone()
        if not enter(cursor):
            return _STOP
        for value, size, folded in choices:
            if cursor.next_n(size).lower() == folded:
                params[name] = value
                cursor.consume_n(size)
                return cursor
        return backup

    return optional_choice


def _make_invoke(resolver: Resolver) -> Invoke:
    if inspect.iscoroutinefunction(resolver):

        async def invoke_async(cursor: Cursor, context: Any) -> Resolved:
            return check_resolved(await resolver(cursor, context))

        return invoke_async

    async def invoke(cursor: Cursor, context: Any) -> Resolved:
        result = resolver(cursor, context)
        if inspect.isawaitable(result):
            result = await result
        return check_resolved(result)

    return invoke


def _typed_step(i: int, name: str, invoke: Invoke, enter: Enter) -> Step:
    async def typed(cursor: Cursor, params: dict[str, Any], context: Any) -> Any:
        if not enter(cursor):
            return _STOP
        attempt = cursor.clone()
        attempt.count = i
        cursor, params[name] = await invoke(attempt, context)
        return cursor

    return typed


def _optional_typed_step(i: int, name: str, invoke: Invoke, enter: Enter) -> Step:
    async def optional_typed(
        cursor: Cursor, params: dict[str, Any], context: Any
    ) -> Any:
        backup = cursor.clone()
        if not enter(cursor):
            return _STOP
        attempt = cursor.clone()
        attempt.count = i
        try:
            cursor, params[name] = await invoke(attempt, context)
        except InternalError:
            raise
        except Exception:
            return backup
        return cursor

    return optional_typed


def _failing_step(enter: Enter, make_error: Callable[[], InternalError]) -> Step:
    """Step for a node no matcher can handle; raises once the node is reached."""

    async def failing(cursor: Cursor, params: dict[str, Any], context: Any) -> Any:
        if not enter(cursor):
            return _STOP
        raise make_error()

    return failing
