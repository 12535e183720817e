"""Known CSL element tags and the tag -> rendering primitive table."""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from typing import TYPE_CHECKING

from cslc.errors import StyleStructureError
from cslc.nodes import StyleNode

if TYPE_CHECKING:
    from cslc.runtime import Primitive, Runtime


class Tag(Enum):
    # Top level
    STYLE = "style"
    INFO = "info"
    LOCALE = "locale"
    CITATION = "citation"
    BIBLIOGRAPHY = "bibliography"
    MACRO = "macro"

    # Layout and sorting
    LAYOUT = "layout"
    SORT = "sort"
    KEY = "key"

    # Rendering elements
    TEXT = "text"
    DATE = "date"
    DATE_PART = "date-part"
    NUMBER = "number"
    LABEL = "label"
    GROUP = "group"
    CHOOSE = "choose"
    IF = "if"
    ELSE_IF = "else-if"
    ELSE = "else"

    # Names and its sub-elements
    NAMES = "names"
    NAME = "name"
    NAME_PART = "name-part"
    ET_AL = "et-al"
    SUBSTITUTE = "substitute"

    # Locale contents
    STYLE_OPTIONS = "style-options"
    TERMS = "terms"
    TERM = "term"
    SINGLE = "single"
    MULTIPLE = "multiple"


def tag_of(node: StyleNode) -> Tag:
    """Resolve a node's tag, rejecting elements outside the CSL vocabulary."""
    try:
        return Tag(node.tag)
    except ValueError:
        raise StyleStructureError(f"unknown element <{node.tag}>", node.position) from None


def _make_primitives() -> dict[Tag, Callable[[Runtime], Primitive]]:
    return {
        Tag.LAYOUT: lambda rt: rt.render_layout,
        Tag.MACRO: lambda rt: rt.render_macro,
        Tag.SORT: lambda rt: rt.render_sort,
        Tag.KEY: lambda rt: rt.render_key,
        Tag.TEXT: lambda rt: rt.render_text,
        Tag.DATE: lambda rt: rt.render_date,
        Tag.DATE_PART: lambda rt: rt.render_date_part,
        Tag.NUMBER: lambda rt: rt.render_number,
        Tag.LABEL: lambda rt: rt.render_label,
        Tag.GROUP: lambda rt: rt.render_group,
        Tag.CHOOSE: lambda rt: rt.render_choose,
        Tag.IF: lambda rt: rt.render_if,
        Tag.ELSE_IF: lambda rt: rt.render_else_if,
        Tag.ELSE: lambda rt: rt.render_else,
    }


# Tags compiled generically; `names` is compiled by the names compiler
PRIMITIVES: dict[Tag, Callable[[Runtime], Primitive]] = _make_primitives()

# Elements that only make sense as direct or nested children of <names>
NAMES_ONLY: frozenset[Tag] = frozenset(
    {Tag.NAME, Tag.NAME_PART, Tag.ET_AL, Tag.SUBSTITUTE}
)
