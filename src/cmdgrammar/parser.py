"""Grammar parser: converts a token stream into command ASTs."""

from __future__ import annotations

from cmdgrammar.ast import CommandDef, Node, Param, ParamType, StringLiteral, StringOr, Typename
from cmdgrammar.errors import GrammarError
from cmdgrammar.lexer import tokenize
from cmdgrammar.tokens import Span, Token, TokenType, is_name


class Parser:
    """Recursive descent parser for grammar token streams."""

    def __init__(self, tokens: list[Token], source: str) -> None:
        self._tokens = tokens
        self._source = source
        self._pos = 0

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def _peek(self, offset: int = 0) -> Token:
        idx = self._pos + offset
        if idx < len(self._tokens):
            return self._tokens[idx]
        return self._tokens[-1]  # EOF

    def _at(self, *types: TokenType) -> bool:
        return self._peek().type in types

    def _at_line_end(self) -> bool:
        return self._at(TokenType.NEWLINE, TokenType.EOF)

    def _advance(self) -> Token:
        tok = self._tokens[self._pos]
        if tok.type != TokenType.EOF:
            self._pos += 1
        return tok

    def _expect(self, tt: TokenType, message: str) -> Token:
        tok = self._peek()
        if tok.type != tt:
            raise self._error(f"{message}, found {_describe(tok)}", tok.span)
        return self._advance()

    def _skip_ws(self) -> None:
        if self._at(TokenType.WS):
            self._advance()

    def _skip_blank(self) -> None:
        while self._at(TokenType.WS, TokenType.NEWLINE):
            self._advance()

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def parse_single(self) -> CommandDef:
        self._skip_blank()
        ast = self.parse_command()
        self._skip_blank()
        if not self._at(TokenType.EOF):
            raise self._error("expected a single grammar, found another line")
        return ast

    def parse_file(self) -> list[CommandDef]:
        grammars: list[CommandDef] = []
        while True:
            self._skip_blank()
            if self._at(TokenType.EOF):
                return grammars
            grammars.append(self.parse_command())

    def parse_command(self) -> CommandDef:
        """Parse one grammar, stopping at the end of the current line."""
        self._skip_ws()
        if self._at_line_end():
            raise self._error("empty command grammar")

        nodes: list[Node] = []
        seen: dict[str, Param] = {}
        while True:
            node = self._parse_node()
            if isinstance(node, Param):
                if node.name in seen:
                    raise self._error(f"duplicate parameter name '{node.name}'", node.span)
                seen[node.name] = node
            nodes.append(node)

            if self._at(TokenType.WS):
                self._advance()
                if self._at_line_end():
                    break
            elif self._at_line_end():
                break
            else:
                raise self._error(
                    f"expected whitespace between grammar elements, found {_describe(self._peek())}"
                )
        return tuple(nodes)

    # ------------------------------------------------------------------
    # Nodes
    # ------------------------------------------------------------------

    def _parse_node(self) -> Node:
        tok = self._peek()
        if tok.type == TokenType.LANGLE:
            return self._parse_param(TokenType.RANGLE, optional=False)
        if tok.type == TokenType.LBRACKET:
            return self._parse_param(TokenType.RBRACKET, optional=True)
        if tok.type == TokenType.WORD:
            return self._parse_literal()
        if tok.type == TokenType.SLASH:
            raise self._error("empty alternative in literal")
        raise self._error(f"unexpected {_describe(tok)}")

    def _parse_literal(self) -> StringLiteral:
        first = self._advance()
        values = [first.value]
        end = first.span.end
        while self._at(TokenType.SLASH):
            slash = self._advance()
            if not self._at(TokenType.WORD):
                raise self._error("empty alternative in literal", slash.span)
            tok = self._advance()
            values.append(tok.value)
            end = tok.span.end
        return StringLiteral(tuple(values), Span(first.span.start, end))

    def _parse_param(self, close: TokenType, *, optional: bool) -> Param:
        start = self._advance().span.start  # consume '<' or '['
        closer = ">" if close == TokenType.RANGLE else "]"

        self._skip_ws()
        name_tok = self._expect(TokenType.WORD, "expected parameter name")
        if not is_name(name_tok.value):
            raise self._error(f"invalid parameter name '{name_tok.value}'", name_tok.span)

        self._skip_ws()
        self._expect(TokenType.COLON, "expected ':' after parameter name")
        self._skip_ws()
        ptype = self._parse_ptype()
        self._skip_ws()

        end_tok = self._expect(close, f"expected closing '{closer}'")
        return Param(name_tok.value, optional, ptype, Span(start, end_tok.span.end))

    def _parse_ptype(self) -> ParamType:
        tok = self._peek()
        if tok.type == TokenType.WORD:
            self._advance()
            if not is_name(tok.value):
                raise self._error(f"invalid type name '{tok.value}'", tok.span)
            return Typename(tok.value, tok.span)
        if tok.type == TokenType.STRING:
            return self._parse_string_or()
        raise self._error(f"expected type name or quoted alternatives, found {_describe(tok)}")

    def _parse_string_or(self) -> StringOr:
        first = self._take_alternative()
        values = [first.value]
        end = first.span.end
        while True:
            saved_pos = self._pos
            self._skip_ws()
            if not self._at(TokenType.PIPE):
                # Not another alternative, restore position
                self._pos = saved_pos
                break
            self._advance()  # consume PIPE
            self._skip_ws()
            if not self._at(TokenType.STRING):
                raise self._error(
                    f"expected quoted alternative after '|', found {_describe(self._peek())}"
                )
            tok = self._take_alternative()
            values.append(tok.value)
            end = tok.span.end
        return StringOr(tuple(values), Span(first.span.start, end))

    def _take_alternative(self) -> Token:
        tok = self._advance()
        if tok.value == "":
            raise self._error("empty alternative in quoted choice", tok.span)
        return tok

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _error(self, message: str, span: Span | None = None) -> GrammarError:
        if span is None:
            span = self._peek().span
        return GrammarError(message, span, self._source)


def _describe(tok: Token) -> str:
    if tok.type == TokenType.EOF:
        return "end of grammar"
    if tok.type == TokenType.NEWLINE:
        return "end of line"
    if tok.type == TokenType.WS:
        return "whitespace"
    return repr(tok.raw)


def parse_grammar(text: str) -> CommandDef:
    """Parse a single command grammar such as ``"reminder/rm add <text: string>"``."""
    tokens = tokenize(text)
    return Parser(tokens, text).parse_single()


def parse_grammar_file(source: str) -> list[CommandDef]:
    """Parse one grammar per line, skipping blank lines and ``#`` comment lines."""
    tokens = tokenize(source, comments=True)
    return Parser(tokens, source).parse_file()
