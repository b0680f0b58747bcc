"""Command grammar parsing and command-string matching."""

from __future__ import annotations

from cmdgrammar.ast import CommandDef, Param, StringLiteral, StringOr, Typename
from cmdgrammar.compiler import CommandMatcher, compile_matcher
from cmdgrammar.cursor import Cursor
from cmdgrammar.errors import GrammarError, InternalError, LexError, ParseError, UnknownTypeError
from cmdgrammar.interp import match_command
from cmdgrammar.parser import parse_grammar, parse_grammar_file
from cmdgrammar.render import render_grammar

__version__ = "0.1.0"

# Short aliases for the two matching entry points
match = match_command
compile = compile_matcher

__all__ = [
    "CommandDef",
    "CommandMatcher",
    "Cursor",
    "GrammarError",
    "InternalError",
    "LexError",
    "Param",
    "ParseError",
    "StringLiteral",
    "StringOr",
    "Typename",
    "UnknownTypeError",
    "compile",
    "compile_matcher",
    "match",
    "match_command",
    "parse_grammar",
    "parse_grammar_file",
    "render_grammar",
]
