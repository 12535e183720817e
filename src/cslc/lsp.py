"""Minimal LSP server for CSL styles — diagnostics only."""

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

from cslc import __version__
from cslc.errors import StyleError, StyleInputError, StyleParseError
from cslc.parser import parse
from cslc.style import build_style

server = LanguageServer("cslc-lsp", __version__, text_document_sync_kind=TextDocumentSyncKind.Full)


def _diagnostic(exc: StyleError, source: str, severity: DiagnosticSeverity) -> Diagnostic:
    if exc.position is None:
        start = Position(line=0, character=0)
        end = Position(line=0, character=0)
    else:
        line = exc.position.line - 1
        lines = source.splitlines()
        text = lines[line] if 0 <= line < len(lines) else ""
        if exc.position.column is not None:
            col = exc.position.column - 1
            start = Position(line=line, character=col)
            end = Position(line=line, character=col + 1)
        else:
            # Element errors cover the element's line
            col = len(text) - len(text.lstrip())
            start = Position(line=line, character=col)
            end = Position(line=line, character=len(text.rstrip()))
    return Diagnostic(
        range=Range(start=start, end=end),
        message=exc.message,
        severity=severity,
        source="cslc",
    )


def _validate(ls: LanguageServer, uri: str) -> None:
    """Compile the style document and publish diagnostics."""
    doc = ls.workspace.get_text_document(uri)
    source = doc.source
    diagnostics: list[Diagnostic] = []

    try:
        uses_year_suffix, root = parse(source)
    except (StyleInputError, StyleParseError) as exc:
        diagnostics.append(_diagnostic(exc, source, DiagnosticSeverity.Error))
    else:
        try:
            build_style(root, uses_year_suffix)
        except StyleError as exc:
            diagnostics.append(_diagnostic(exc, source, DiagnosticSeverity.Warning))

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
