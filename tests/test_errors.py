"""Test error classes: attributes, formatting, and hierarchy."""

from __future__ import annotations

import pytest

from cmdgrammar.errors import (
    GrammarError,
    InternalError,
    LexError,
    ParseError,
    UnknownTypeError,
    expected_delimiter,
    expected_end,
    expected_one_of,
)
from cmdgrammar.lexer import tokenize
from cmdgrammar.tokens import Position, Span


class TestParseError:
    def test_attributes(self):
        err = ParseError(2, 'Expected " ", found o')
        assert err.token_level == 2
        assert err.message == 'Expected " ", found o'

    def test_str_is_message(self):
        assert str(ParseError(0, "Unexpected end of command")) == "Unexpected end of command"

    def test_repr(self):
        assert repr(ParseError(1, "x")) == "ParseError(1, 'x')"

    def test_is_not_internal(self):
        assert not issubclass(ParseError, InternalError)


class TestMessages:
    def test_delimiter(self):
        assert expected_delimiter("o") == 'Expected " ", found o'

    def test_one_of(self):
        assert expected_one_of(("reminder", "rm"), "remov") == (
            "Expected one of reminder or rm, found remov"
        )

    def test_end(self):
        assert expected_end(" extra") == "Expected end of command, found  extra"


class TestInternalErrors:
    def test_unknown_type_is_internal(self):
        err = UnknownTypeError("user", "who")
        assert isinstance(err, InternalError)
        assert not isinstance(err, ParseError)
        assert err.type_name == "user"
        assert err.param_name == "who"
        assert "user" in str(err)


class TestLexErrorFormatting:
    def test_format_contains_line(self):
        with pytest.raises(LexError) as exc_info:
            tokenize('say <x: "oops>')
        formatted = exc_info.value.format()
        assert 'say <x: "oops>' in formatted

    def test_format_contains_error_prefix(self):
        with pytest.raises(LexError) as exc_info:
            tokenize('"')
        assert exc_info.value.format().startswith("error:")

    def test_format_contains_position(self):
        with pytest.raises(LexError) as exc_info:
            tokenize('"')
        assert "<grammar>:1:1" in exc_info.value.format()

    def test_format_with_custom_filename(self):
        with pytest.raises(LexError) as exc_info:
            tokenize('"')
        assert "cmds.txt" in exc_info.value.format("cmds.txt")

    def test_multiline_position(self):
        with pytest.raises(LexError) as exc_info:
            tokenize('a\nb\n"', comments=True)
        assert "3:1" in exc_info.value.format()


class TestGrammarErrorFormat:
    def test_underline_covers_span(self):
        err = GrammarError(
            "bad",
            Span(Position(1, 3, 2), Position(1, 6, 5)),
            "ab<x y>",
        )
        last_line = err.format().splitlines()[-1]
        assert last_line.endswith("  ^^^")

    def test_multiline_span(self):
        err = GrammarError(
            "test error",
            Span(Position(1, 1, 0), Position(2, 5, 10)),
            "first line\nsecond line",
        )
        formatted = err.format("cmds.txt")
        assert "error: test error" in formatted
        assert "^" * len("first line") in formatted
