"""Style ingestion: locate the style text, scan flags, build the node tree."""

from __future__ import annotations

import re
from pathlib import Path

from lxml import etree

from cslc.errors import StyleInputError, StyleParseError
from cslc.nodes import Position, StyleNode

_INLINE_XML = re.compile(r"\A\s*<")
_XML_DECLARATION = re.compile(r"\A\s*<\?xml\b[^>]*\?>")
_YEAR_SUFFIX_VAR = re.compile(r'variable="year-suffix"', re.IGNORECASE)


def read_style(style: str | Path) -> str | bytes:
    """Return inline XML as given, or the raw bytes of a style file.

    File contents stay undecoded so the parser can honour the document's
    own encoding declaration.
    """
    if isinstance(style, str) and _INLINE_XML.match(style):
        return style
    path = Path(style)
    try:
        return path.read_bytes()
    except OSError as exc:
        raise StyleInputError(f"cannot read style {str(style)!r}: {exc}") from exc


def source_text(data: str | bytes) -> str:
    """Text of *data* for flag scans and error reports."""
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace")
    return data


def uses_year_suffix_var(text: str) -> bool:
    """Raw-text scan for a reference to the year-suffix variable."""
    return _YEAR_SUFFIX_VAR.search(text) is not None


def _blank_declaration(match: re.Match[str]) -> str:
    # Keeps line and column numbers of the rest of the document intact
    return re.sub(r"\S", " ", match.group())


def parse_xml(data: str | bytes) -> StyleNode:
    """Parse XML text or bytes into a StyleNode tree with comments stripped."""
    text = source_text(data)
    if not text.strip():
        raise StyleInputError("empty style document")
    if isinstance(data, str):
        # lxml rejects str input that still carries an encoding declaration
        data = _XML_DECLARATION.sub(_blank_declaration, data, count=1)
    parser = etree.XMLParser(resolve_entities=False, no_network=True)
    try:
        root = etree.fromstring(data, parser)
    except etree.XMLSyntaxError as exc:
        line, column = exc.position
        raise StyleParseError(exc.msg, Position(line, max(1, column)), text) from exc
    return _to_node(root)


def parse(data: str | bytes) -> tuple[bool, StyleNode]:
    """Scan *data* for the year-suffix flag and parse it into a tree."""
    return uses_year_suffix_var(source_text(data)), parse_xml(data)


def _local_name(name: str) -> str:
    return etree.QName(name).localname


def _to_node(element: etree._Element) -> StyleNode:
    children: list[StyleNode | str] = []
    if element.text and element.text.strip():
        children.append(element.text)
    for child in element:
        # Comments and processing instructions have a non-string tag
        if isinstance(child.tag, str):
            children.append(_to_node(child))
        if child.tail and child.tail.strip():
            children.append(child.tail)
    attrs = {_local_name(k): v for k, v in element.attrib.items()}
    return StyleNode(
        _local_name(element.tag),
        attrs,
        tuple(children),
        element.sourceline or 0,
    )
