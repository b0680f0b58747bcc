"""Grammar lexer tests: structural tokens, strings, comments, and errors."""

from __future__ import annotations

import pytest

from cmdgrammar.errors import LexError
from cmdgrammar.lexer import tokenize
from cmdgrammar.tokens import TokenType

from conftest import assert_types


class TestStructural:
    def test_literal_alternatives(self, lex):
        tokens = lex("reminder/rm add")
        assert_types(
            tokens,
            [TokenType.WORD, TokenType.SLASH, TokenType.WORD, TokenType.WS, TokenType.WORD],
        )
        assert [t.value for t in tokens if t.type == TokenType.WORD] == ["reminder", "rm", "add"]

    def test_required_param(self, lex):
        tokens = lex("<a: word>")
        assert_types(
            tokens,
            [
                TokenType.LANGLE,
                TokenType.WORD,
                TokenType.COLON,
                TokenType.WS,
                TokenType.WORD,
                TokenType.RANGLE,
            ],
        )

    def test_optional_param_with_choices(self, lex):
        tokens = lex('[e: "uwu" | "owo"]')
        assert_types(
            tokens,
            [
                TokenType.LBRACKET,
                TokenType.WORD,
                TokenType.COLON,
                TokenType.WS,
                TokenType.STRING,
                TokenType.WS,
                TokenType.PIPE,
                TokenType.WS,
                TokenType.STRING,
                TokenType.RBRACKET,
            ],
        )
        assert [t.value for t in tokens if t.type == TokenType.STRING] == ["uwu", "owo"]

    def test_colon_splits_words(self, lex):
        tokens = lex("x:word")
        assert_types(tokens, [TokenType.WORD, TokenType.COLON, TokenType.WORD])

    def test_eof_always_last(self):
        tokens = tokenize("")
        assert [t.type for t in tokens] == [TokenType.EOF]


class TestStrings:
    def test_escaped_quote_and_backslash(self, lex):
        tokens = lex(r'"a\"b\\c"')
        assert_types(tokens, [TokenType.STRING])
        assert tokens[0].value == 'a"b\\c'
        assert tokens[0].raw == r'"a\"b\\c"'

    def test_special_chars_inside_string(self, lex):
        tokens = lex('"a/b <c>"')
        assert tokens[0].value == "a/b <c>"

    def test_empty_string(self, lex):
        tokens = lex('""')
        assert tokens[0].value == ""


class TestPositions:
    def test_column(self, lex):
        tokens = lex("ab cd")
        assert tokens[2].span.start.column == 4
        assert tokens[2].span.end.column == 6

    def test_newline_advances_line(self, lex):
        tokens = lex("a\nb")
        assert_types(tokens, [TokenType.WORD, TokenType.NEWLINE, TokenType.WORD])
        assert tokens[2].span.start.line == 2
        assert tokens[2].span.start.column == 1

    def test_crlf_newline(self, lex):
        tokens = lex("a\r\nb")
        assert tokens[1].type == TokenType.NEWLINE
        assert tokens[1].raw == "\r\n"


class TestComments:
    def test_comment_line_skipped(self, lex):
        tokens = lex("# heading\nadd", comments=True)
        assert_types(tokens, [TokenType.NEWLINE, TokenType.WORD])

    def test_indented_comment(self, lex):
        tokens = lex("  # note\nadd", comments=True)
        assert_types(tokens, [TokenType.WS, TokenType.NEWLINE, TokenType.WORD])

    def test_hash_mid_line_is_text(self, lex):
        tokens = lex("add #x", comments=True)
        assert tokens[-1].value == "#x"

    def test_hash_is_text_without_comment_mode(self, lex):
        tokens = lex("#help")
        assert_types(tokens, [TokenType.WORD])
        assert tokens[0].value == "#help"


class TestErrors:
    def test_unterminated_string(self):
        with pytest.raises(LexError, match="unterminated string") as exc_info:
            tokenize('<x: "abc>')
        assert exc_info.value.position.column == 5

    def test_newline_in_string(self):
        with pytest.raises(LexError, match="unterminated string"):
            tokenize('"ab\n"')

    def test_backslash_at_end(self):
        with pytest.raises(LexError, match="unterminated string"):
            tokenize('"ab\\')

    def test_invalid_escape(self):
        with pytest.raises(LexError, match="invalid escape sequence") as exc_info:
            tokenize(r'"a\q"')
        assert exc_info.value.position.column == 3

    def test_nul_character(self):
        with pytest.raises(LexError, match="NUL"):
            tokenize("add\0x")

    def test_unexpected_whitespace_character(self):
        with pytest.raises(LexError, match="unexpected character"):
            tokenize("add\x0bx")
