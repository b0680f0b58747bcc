"""Grammar lexer: converts grammar text into a flat token stream."""

from __future__ import annotations

from cmdgrammar.errors import LexError
from cmdgrammar.tokens import Position, Span, Token, TokenType, is_word_char

_SINGLE_CHAR: dict[str, TokenType] = {
    "/": TokenType.SLASH,
    "<": TokenType.LANGLE,
    ">": TokenType.RANGLE,
    "[": TokenType.LBRACKET,
    "]": TokenType.RBRACKET,
    ":": TokenType.COLON,
    "|": TokenType.PIPE,
}

_STRING_ESCAPES = '"\\'


class Lexer:
    """Tokenize grammar text into a stream of Token objects.

    With ``comments=True`` (grammar files), a line whose first non-blank
    character is ``#`` is skipped up to its newline.
    """

    def __init__(self, source: str, *, comments: bool = False) -> None:
        self._source = source
        self._comments = comments
        self._pos = 0
        self._line = 1
        self._col = 1
        self._at_line_start = True
        self._tokens: list[Token] = []

    def tokenize(self) -> list[Token]:
        """Tokenize the full source and return the token list."""
        while self._pos < len(self._source):
            self._lex_one()
        self._emit(TokenType.EOF, "", "")
        return self._tokens

    # ------------------------------------------------------------------
    # Position helpers
    # ------------------------------------------------------------------

    def _current_pos(self) -> Position:
        return Position(self._line, self._col, self._pos)

    def _peek(self, offset: int = 0) -> str:
        idx = self._pos + offset
        if idx < len(self._source):
            return self._source[idx]
        return ""

    def _advance(self) -> str:
        ch = self._source[self._pos]
        self._pos += 1
        if ch == "\n":
            self._line += 1
            self._col = 1
        else:
            self._col += 1
        return ch

    def _emit(self, tt: TokenType, value: str, raw: str, start: Position | None = None) -> Token:
        end = self._current_pos()
        if start is None:
            start = end
        tok = Token(tt, value, raw, Span(start, end))
        self._tokens.append(tok)
        return tok

    def _error(self, message: str, pos: Position | None = None) -> LexError:
        if pos is None:
            pos = self._current_pos()
        return LexError(message, pos, self._source)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def _lex_one(self) -> None:
        ch = self._peek()

        if ch == "\0":
            raise self._error("NUL character in grammar")

        if ch == "\n" or (ch == "\r" and self._peek(1) == "\n"):
            start = self._current_pos()
            raw = self._advance()
            if raw == "\r":
                raw += self._advance()
            self._emit(TokenType.NEWLINE, "\n", raw, start)
            self._at_line_start = True
            return

        if ch in " \t":
            self._lex_ws()
            return

        if self._comments and self._at_line_start and ch == "#":
            self._skip_comment()
            return

        self._at_line_start = False

        if ch in _SINGLE_CHAR:
            start = self._current_pos()
            self._advance()
            self._emit(_SINGLE_CHAR[ch], ch, ch, start)
            return

        if ch == '"':
            self._lex_string()
            return

        if is_word_char(ch):
            self._lex_word()
            return

        raise self._error(f"unexpected character {ch!r}")

    def _lex_ws(self) -> None:
        start = self._current_pos()
        raw = []
        while self._pos < len(self._source) and self._peek() in " \t":
            raw.append(self._advance())
        text = "".join(raw)
        self._emit(TokenType.WS, text, text, start)

    def _skip_comment(self) -> None:
        while self._pos < len(self._source) and self._peek() not in "\r\n":
            self._advance()

    def _lex_word(self) -> None:
        start = self._current_pos()
        chars = []
        while self._pos < len(self._source) and is_word_char(self._peek()):
            chars.append(self._advance())
        text = "".join(chars)
        self._emit(TokenType.WORD, text, text, start)

    # ------------------------------------------------------------------
    # Quoted strings
    # ------------------------------------------------------------------

    def _lex_string(self) -> None:
        start = self._current_pos()
        self._advance()  # consume opening quote
        value: list[str] = []

        while True:
            if self._pos >= len(self._source) or self._peek() in "\r\n":
                raise self._error("unterminated string", start)
            ch = self._peek()
            if ch == '"':
                self._advance()
                break
            if ch == "\\":
                esc_start = self._current_pos()
                self._advance()
                nxt = self._peek()
                if nxt in ("", "\r", "\n"):
                    raise self._error("unterminated string", start)
                if nxt not in _STRING_ESCAPES:
                    raise self._error(f"invalid escape sequence '\\{nxt}'", esc_start)
                value.append(self._advance())
                continue
            value.append(self._advance())

        raw = self._source[start.offset : self._pos]
        self._emit(TokenType.STRING, "".join(value), raw, start)


def tokenize(source: str, *, comments: bool = False) -> list[Token]:
    """Convenience function: tokenize grammar text and return token list."""
    return Lexer(source, comments=comments).tokenize()
