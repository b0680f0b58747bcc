"""Grammar token types, source positions, and character classification helpers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class TokenType(Enum):
    # Structural (single-character)
    SLASH = auto()  # /
    LANGLE = auto()  # <
    RANGLE = auto()  # >
    LBRACKET = auto()  # [
    RBRACKET = auto()  # ]
    COLON = auto()  # :
    PIPE = auto()  # |

    # Content
    WORD = auto()  # run of non-special, non-whitespace characters
    STRING = auto()  # "quoted" literal, value has escapes resolved

    # Whitespace
    WS = auto()  # horizontal whitespace (spaces/tabs)
    NEWLINE = auto()  # \n or \r\n

    EOF = auto()


@dataclass(frozen=True, slots=True)
class Position:
    """Source position, 1-based line and column, 0-based offset."""

    line: int
    column: int
    offset: int


@dataclass(frozen=True, slots=True)
class Span:
    """Source range from start to end position."""

    start: Position
    end: Position


@dataclass(frozen=True, slots=True)
class Token:
    """A single lexer token with resolved value and original source text."""

    type: TokenType
    value: str
    raw: str
    span: Span


# Characters with structural meaning; everything else non-blank is WORD content
SPECIAL_CHARS = frozenset('/<>[]:|"')


def is_word_char(ch: str) -> bool:
    """Return True if ch can appear inside a bare WORD token."""
    return ch not in SPECIAL_CHARS and not ch.isspace()


def is_name(text: str) -> bool:
    """Return True if text is a valid parameter or type name."""
    if not text or not (text[0].isalpha() or text[0] == "_"):
        return False
    return all(ch.isalnum() or ch in "_-" for ch in text[1:])
