"""--debug AST dump to stderr."""

from __future__ import annotations

import sys
from typing import TextIO

from cmdgrammar.ast import CommandDef, Param, StringLiteral, StringOr, Typename


def dump_ast(ast: CommandDef, *, file: TextIO = sys.stderr) -> None:
    """Print a human-readable AST tree to *file*."""
    file.write("CommandDef\n")
    for i, node in enumerate(ast):
        file.write(f"  [{i}] ")
        if isinstance(node, StringLiteral):
            file.write(f"StringLiteral {' | '.join(repr(v) for v in node.values)}\n")
        elif isinstance(node, Param):
            flag = "optional" if node.optional else "required"
            file.write(f"Param {node.name} ({flag})\n")
            _dump_ptype(node, file)
        else:
            file.write(f"<unknown {type(node).__name__}>\n")


def _dump_ptype(param: Param, f: TextIO) -> None:
    ptype = param.ptype
    if isinstance(ptype, Typename):
        f.write(f"        Typename {ptype.name}\n")
    elif isinstance(ptype, StringOr):
        f.write(f"        StringOr {' | '.join(repr(v) for v in ptype.values)}\n")
    else:
        f.write(f"        <unknown {type(ptype).__name__}>\n")
