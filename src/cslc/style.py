"""Style assembly — builds a CompiledStyle from a parsed style document."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from types import MappingProxyType

from cslc.compiler import compile_node, parse_fragment
from cslc.errors import StyleError, StyleStructureError
from cslc.locale import DateFormat, Locale, append_options, locale_compatible, merge_locale
from cslc.nodes import StyleNode
from cslc.options import set_option_defaults
from cslc.parser import parse, read_style, source_text
from cslc.runtime import RenderFn
from cslc.tags import Tag, tag_of
from cslc.terms import Term, merge_terms

logger = logging.getLogger(__name__)

DEFAULT_LOCALE = "en-US"


@dataclass
class CompiledStyle:
    """A style compiled into option tables and rendering functions.

    Built field by field during assembly and finalized by the option
    defaulting pass. ``build_style`` returns a copy whose tables are
    read-only mappings and whose terms are a tuple, so one compiled style
    can be shared between concurrent renders.
    """

    info: StyleNode | None = None
    options: dict[str, str] = field(default_factory=dict)
    bib_options: dict[str, str] = field(default_factory=dict)
    cite_options: dict[str, str] = field(default_factory=dict)
    locale_options: dict[str, str] = field(default_factory=dict)
    bib_layout: RenderFn | None = None
    bib_layout_attrs: dict[str, str] = field(default_factory=dict)
    cite_layout: RenderFn | None = None
    cite_layout_attrs: dict[str, str] = field(default_factory=dict)
    bib_sort: RenderFn | None = None
    bib_sort_orders: tuple[bool, ...] | None = None
    cite_sort: RenderFn | None = None
    cite_sort_orders: tuple[bool, ...] | None = None
    cite_note: bool = False
    uses_year_suffix_var: bool = False
    date_text: DateFormat | None = None
    date_numeric: DateFormat | None = None
    macros: dict[str, RenderFn] = field(default_factory=dict)
    terms: list[Term] | None = None
    locale: str = DEFAULT_LOCALE

    def info_text(self, tag: str) -> str | None:
        """Text of the first <info> child with *tag* (title, id, ...)."""
        if self.info is None:
            return None
        node = self.info.find(tag)
        return node.text() if node is not None else None


def assemble(root: StyleNode, uses_year_suffix: bool, locale: str) -> CompiledStyle:
    """Walk the children of a <style> element and compile each fragment."""
    if root.tag != Tag.STYLE.value:
        raise StyleStructureError(f"expected a <style> document, found <{root.tag}>", root.position)

    style = CompiledStyle(
        options=dict(root.attrs),
        uses_year_suffix_var=uses_year_suffix,
        locale=locale,
    )
    locale_loaded = False

    for child in root.elements():
        tag = tag_of(child)
        if tag is Tag.INFO:
            style.info = child
            style.cite_note = _is_note_style(child)
        elif tag is Tag.LOCALE:
            lang = child.attrs.get("lang")
            if not locale_loaded and locale_compatible(lang, locale):
                merge_locale(style, child)
                locale_loaded = True
                logger.debug("merged in-style locale %s (line %d)", lang or "<any>", child.line)
            else:
                logger.debug("skipped in-style locale %s (line %d)", lang or "<any>", child.line)
        elif tag is Tag.CITATION:
            fragment = parse_fragment(child)
            style.cite_options = fragment.options
            style.cite_layout = fragment.layout
            style.cite_layout_attrs = fragment.layout_attrs
            style.cite_sort = fragment.sort
            style.cite_sort_orders = fragment.sort_orders
        elif tag is Tag.BIBLIOGRAPHY:
            fragment = parse_fragment(child)
            style.bib_options = fragment.options
            style.bib_layout = fragment.layout
            style.bib_layout_attrs = fragment.layout_attrs
            style.bib_sort = fragment.sort
            style.bib_sort_orders = fragment.sort_orders
        elif tag is Tag.MACRO:
            name = child.attrs.get("name")
            if not name:
                raise StyleStructureError("<macro> requires a name attribute", child.position)
            # Macros have no renderable attributes of their own
            style.macros[name] = compile_node(replace(child, attrs={}))
            logger.debug("registered macro %s", name)
        else:
            raise StyleStructureError(f"<{child.tag}> is not allowed inside <style>", child.position)

    return style


def _is_note_style(info: StyleNode) -> bool:
    return any(
        c.tag == "category" and c.attrs.get("citation-format") == "note"
        for c in info.elements()
    )


def apply_locale(style: CompiledStyle, locale: Locale) -> None:
    """Fill in what the style's own locale block left unset from *locale*."""
    append_options(style.locale_options, locale.locale_options)
    if style.date_text is None:
        style.date_text = locale.date_text
    if style.date_numeric is None:
        style.date_numeric = locale.date_numeric
    if locale.terms is not None:
        if style.terms is None:
            style.terms = list(locale.terms)
        else:
            style.terms = merge_terms(style.terms, locale.terms)


def build_style(
    root: StyleNode,
    uses_year_suffix: bool,
    locale: str | None = None,
    locale_data: Locale | None = None,
) -> CompiledStyle:
    """Assemble, localize and finalize a parsed style."""
    requested = locale or root.attrs.get("default-locale") or DEFAULT_LOCALE
    style = assemble(root, uses_year_suffix, requested)
    if locale_data is not None:
        apply_locale(style, locale_data)
    set_option_defaults(style)
    if style.cite_layout is None:
        raise StyleStructureError("style has no <citation> layout", root.position)
    if style.bib_layout is None:
        raise StyleStructureError("style has no <bibliography> layout", root.position)
    return _freeze(style)


def _freeze(style: CompiledStyle) -> CompiledStyle:
    """Copy of *style* with read-only option tables, macros and terms."""
    return replace(
        style,
        options=MappingProxyType(dict(style.options)),
        bib_options=MappingProxyType(dict(style.bib_options)),
        cite_options=MappingProxyType(dict(style.cite_options)),
        locale_options=MappingProxyType(dict(style.locale_options)),
        bib_layout_attrs=MappingProxyType(dict(style.bib_layout_attrs)),
        cite_layout_attrs=MappingProxyType(dict(style.cite_layout_attrs)),
        macros=MappingProxyType(dict(style.macros)),
        terms=tuple(style.terms) if style.terms is not None else None,
    )


def create_style(
    style: str | Path,
    locale: str | None = None,
    locale_data: Locale | None = None,
) -> CompiledStyle:
    """Compile a style given as inline XML or as a path to a .csl file."""
    data = read_style(style)
    try:
        uses_year_suffix, root = parse(data)
        return build_style(root, uses_year_suffix, locale, locale_data)
    except StyleError as exc:
        if not exc.source:
            exc.source = source_text(data)
        raise
