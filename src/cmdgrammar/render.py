"""Canonical text renderer: converts a command AST back to grammar-like usage text."""

from __future__ import annotations

from cmdgrammar.ast import CommandDef, Node, Param, StringLiteral, StringOr, Typename
from cmdgrammar.errors import InternalError, unknown_node, unknown_ptype


def render_grammar(ast: CommandDef) -> str:
    """Render an AST as ``a/b <NAME> [x/y]`` usage text.

    The output is informational: typed parameters lose their type names and
    choices lose their parameter names, so it does not parse back to ``ast``.
    """
    return " ".join(_render_node(node) for node in ast)


def _render_node(node: Node) -> str:
    if isinstance(node, StringLiteral):
        return "/".join(node.values)
    if isinstance(node, Param):
        open_, close = ("[", "]") if node.optional else ("<", ">")
        return f"{open_}{_render_ptype(node)}{close}"
    raise InternalError(unknown_node(node))


def _render_ptype(param: Param) -> str:
    ptype = param.ptype
    if isinstance(ptype, Typename):
        return param.name.upper()
    if isinstance(ptype, StringOr):
        return "/".join(ptype.values)
    raise InternalError(unknown_ptype(ptype))
