"""Minimal LSP server for grammar files: diagnostics only."""

from __future__ import annotations

from lsprotocol.types import (
    TEXT_DOCUMENT_DID_CHANGE,
    TEXT_DOCUMENT_DID_OPEN,
    Diagnostic,
    DiagnosticSeverity,
    DidChangeTextDocumentParams,
    DidOpenTextDocumentParams,
    Position,
    PublishDiagnosticsParams,
    Range,
    TextDocumentSyncKind,
)
from pygls.lsp.server import LanguageServer

from cmdgrammar import __version__
from cmdgrammar.ast import Param, Typename
from cmdgrammar.builtins import BUILTIN_RESOLVERS
from cmdgrammar.errors import GrammarError, LexError
from cmdgrammar.parser import parse_grammar_file
from cmdgrammar.tokens import Span

server = LanguageServer(
    "cmdgrammar-lsp", __version__, text_document_sync_kind=TextDocumentSyncKind.Full
)


def _range(span: Span) -> Range:
    return Range(
        start=Position(line=span.start.line - 1, character=span.start.column - 1),
        end=Position(line=span.end.line - 1, character=span.end.column - 1),
    )


def _validate(ls: LanguageServer, uri: str) -> None:
    """Parse the grammar file and publish diagnostics."""
    doc = ls.workspace.get_text_document(uri)
    diagnostics: list[Diagnostic] = []

    try:
        grammars = parse_grammar_file(doc.source)
    except LexError as exc:
        line = exc.position.line - 1
        col = exc.position.column - 1
        diagnostics.append(
            Diagnostic(
                range=Range(
                    start=Position(line=line, character=col),
                    end=Position(line=line, character=col + 1),
                ),
                message=exc.message,
                severity=DiagnosticSeverity.Error,
                source="cmdgrammar",
            )
        )
    except GrammarError as exc:
        diagnostics.append(
            Diagnostic(
                range=_range(exc.span),
                message=exc.message,
                severity=DiagnosticSeverity.Error,
                source="cmdgrammar",
            )
        )
    else:
        for ast in grammars:
            for node in ast:
                if not isinstance(node, Param) or not isinstance(node.ptype, Typename):
                    continue
                ptype = node.ptype
                if ptype.name in BUILTIN_RESOLVERS or ptype.span is None:
                    continue
                diagnostics.append(
                    Diagnostic(
                        range=_range(ptype.span),
                        message=f"type '{ptype.name}' is not a builtin resolver",
                        severity=DiagnosticSeverity.Warning,
                        source="cmdgrammar",
                    )
                )

    ls.text_document_publish_diagnostics(
        PublishDiagnosticsParams(uri=uri, diagnostics=diagnostics)
    )


@server.feature(TEXT_DOCUMENT_DID_OPEN)
def did_open(ls: LanguageServer, params: DidOpenTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


@server.feature(TEXT_DOCUMENT_DID_CHANGE)
def did_change(ls: LanguageServer, params: DidChangeTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


def main() -> None:
    server.start_io()
