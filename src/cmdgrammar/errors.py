"""Error types: grammar-text errors with source context, and command match errors."""

from __future__ import annotations

from cmdgrammar.tokens import Position, Span


def _snippet(
    message: str,
    source: str,
    start: Position,
    underline_len: int,
    filename: str,
) -> str:
    lines = source.splitlines(keepends=True)
    line_idx = start.line - 1
    col = start.column

    if 0 <= line_idx < len(lines):
        source_line = lines[line_idx].rstrip("\n").rstrip("\r")
    else:
        source_line = ""

    pad = " " * (col - 1)
    carets = "^" * underline_len

    line_num = str(start.line)
    gutter_width = len(line_num) + 1

    blank_gutter = " " * gutter_width + "|"
    line_gutter = f"{line_num:>{gutter_width - 1}} |"

    return (
        f"error: {message}\n"
        f"{' ' * gutter_width}--> {filename}:{start.line}:{col}\n"
        f"{blank_gutter}\n"
        f"{line_gutter} {source_line}\n"
        f"{blank_gutter} {pad}{carets}"
    )


class LexError(Exception):
    """Raised on the first grammar lexing error, with position and source context."""

    def __init__(self, message: str, position: Position, source: str) -> None:
        self.message = message
        self.position = position
        self.source = source
        super().__init__(self.format())

    def format(self, filename: str = "<grammar>") -> str:
        return _snippet(self.message, self.source, self.position, 1, filename)


class GrammarError(Exception):
    """Raised on the first grammar syntax error, with span and source context."""

    def __init__(self, message: str, span: Span, source: str) -> None:
        self.message = message
        self.span = span
        self.source = source
        super().__init__(self.format())

    def format(self, filename: str = "<grammar>") -> str:
        start = self.span.start
        if self.span.end.line == start.line:
            underline_len = max(1, self.span.end.column - start.column)
        else:
            # Multi-line span: underline to end of the first line
            lines = self.source.splitlines()
            line = lines[start.line - 1] if 0 < start.line <= len(lines) else ""
            underline_len = max(1, len(line) - start.column + 1)
        return _snippet(self.message, self.source, start, underline_len, filename)


class ParseError(Exception):
    """A command string did not match a grammar.

    ``token_level`` is the index of the grammar node being matched when the
    failure happened, or the grammar length for trailing input.
    """

    def __init__(self, token_level: int, message: str) -> None:
        self.token_level = token_level
        self.message = message
        super().__init__(message)

    def __repr__(self) -> str:
        return f"ParseError({self.token_level!r}, {self.message!r})"


class InternalError(Exception):
    """A malformed AST reached a matcher. Never a user input error."""


class UnknownTypeError(InternalError):
    """A typed parameter names a type with no registered resolver."""

    def __init__(self, type_name: str, param_name: str) -> None:
        self.type_name = type_name
        self.param_name = param_name
        super().__init__(f"no resolver registered for type '{type_name}' (parameter '{param_name}')")


# Match failure messages shared by the interpreter and compiled matchers

UNEXPECTED_END = "Unexpected end of command"


def expected_delimiter(found: str | None) -> str:
    return f'Expected " ", found {found}'


def expected_one_of(values: tuple[str, ...], found: str) -> str:
    return f"Expected one of {' or '.join(values)}, found {found}"


def expected_end(rest: str) -> str:
    return f"Expected end of command, found {rest}"


def unknown_node(node: object) -> str:
    return f"unknown grammar node {type(node).__name__}"


def unknown_ptype(ptype: object) -> str:
    return f"unknown parameter type {type(ptype).__name__}"
