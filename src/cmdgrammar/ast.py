"""AST node types for parsed command grammars."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TypeAlias

from cmdgrammar.tokens import Span


@dataclass(frozen=True, slots=True)
class StringLiteral:
    """Mandatory path segment: one of ``values``, case-insensitive."""

    values: tuple[str, ...]
    span: Span | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True, slots=True)
class Typename:
    """Parameter type delegated to the resolver registered under ``name``."""

    name: str
    span: Span | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True, slots=True)
class StringOr:
    """Parameter type choosing one of ``values``; the choice is the captured value."""

    values: tuple[str, ...]
    span: Span | None = field(default=None, compare=False, repr=False)


ParamType: TypeAlias = Typename | StringOr


@dataclass(frozen=True, slots=True)
class Param:
    """Named capture: ``<name: type>`` when required, ``[name: type]`` when optional."""

    name: str
    optional: bool
    ptype: ParamType
    span: Span | None = field(default=None, compare=False, repr=False)


Node: TypeAlias = StringLiteral | Param

# One parsed command grammar: nodes in left-to-right match order
CommandDef: TypeAlias = tuple[Node, ...]


def is_mandatory(node: Node) -> bool:
    """True if the input must reach this node for a match to succeed."""
    return isinstance(node, StringLiteral) or not getattr(node, "optional", False)
