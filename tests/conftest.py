"""Shared test fixtures: a stub rendering runtime and render contexts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pytest

from cslc.nodes import StyleNode
from cslc.parser import parse_xml
from cslc.runtime import NamesSpec, Rendered, RenderKind
from cslc.style import CompiledStyle


def _text(value: Any) -> str:
    if isinstance(value, Rendered):
        return "" if value.content is None else str(value.content)
    return str(value)


def _kind(children: tuple[Any, ...]) -> RenderKind:
    kinds = {c.kind for c in children if isinstance(c, Rendered)}
    if RenderKind.PRESENT_VAR in kinds:
        return RenderKind.PRESENT_VAR
    if RenderKind.EMPTY_VARS in kinds:
        return RenderKind.EMPTY_VARS
    return RenderKind.TEXT_ONLY


def _affix(attrs: dict[str, str], text: str) -> str:
    if not text:
        return ""
    return attrs.get("prefix", "") + text + attrs.get("suffix", "")


class StubRuntime:
    """Tiny runtime: joins children, looks up variables and macros in the context.

    Every primitive call is recorded in ``calls`` as ``(primitive, attrs)``.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, dict[str, str]]] = []
        self.name_var_calls: list[tuple[str, ...]] = []

    def _join(self, name: str, attrs: dict[str, str], children: tuple[Any, ...]) -> Rendered:
        self.calls.append((name, attrs))
        texts = [_text(c) for c in children]
        text = attrs.get("delimiter", "").join(t for t in texts if t)
        return Rendered(_affix(attrs, text), _kind(children))

    def render_layout(self, attrs, ctx, *children):
        return self._join("layout", attrs, children)

    def render_macro(self, attrs, ctx, *children):
        return self._join("macro", attrs, children)

    def render_sort(self, attrs, ctx, *children):
        return self._join("sort", attrs, children)

    def render_key(self, attrs, ctx, *children):
        self.calls.append(("key", attrs))
        if "macro" in attrs:
            return ctx.style.macros[attrs["macro"]](ctx)
        value = ctx.item.get(attrs.get("variable", ""))
        return Rendered(value, RenderKind.PRESENT_VAR if value else RenderKind.EMPTY_VARS)

    def render_text(self, attrs, ctx, *children):
        self.calls.append(("text", attrs))
        if "macro" in attrs:
            result = ctx.style.macros[attrs["macro"]](ctx)
            return Rendered(_affix(attrs, _text(result)), result.kind)
        if "value" in attrs:
            return Rendered(_affix(attrs, attrs["value"]), RenderKind.TEXT_ONLY)
        if "variable" in attrs:
            value = ctx.item.get(attrs["variable"])
            if not value:
                return Rendered.empty()
            return Rendered(_affix(attrs, str(value)), RenderKind.PRESENT_VAR)
        return Rendered(_affix(attrs, attrs.get("term", "")), RenderKind.TEXT_ONLY)

    def render_date(self, attrs, ctx, *children):
        return self._join("date", attrs, children)

    def render_date_part(self, attrs, ctx, *children):
        return self._join("date-part", attrs, children)

    def render_number(self, attrs, ctx, *children):
        self.calls.append(("number", attrs))
        value = ctx.item.get(attrs.get("variable", ""))
        if not value:
            return Rendered.empty()
        return Rendered(_affix(attrs, str(value)), RenderKind.PRESENT_VAR)

    def render_label(self, attrs, ctx, *children):
        return self._join("label", attrs, children)

    def render_group(self, attrs, ctx, *children):
        return self._join("group", attrs, children)

    def render_choose(self, attrs, ctx, *children):
        return self._join("choose", attrs, children)

    def render_if(self, attrs, ctx, *children):
        return self._join("if", attrs, children)

    def render_else_if(self, attrs, ctx, *children):
        return self._join("else-if", attrs, children)

    def render_else(self, attrs, ctx, *children):
        return self._join("else", attrs, children)

    def render_name_vars(self, variables: tuple[str, ...], spec: NamesSpec, ctx) -> Rendered:
        self.name_var_calls.append(variables)
        names: list[str] = []
        for var in variables:
            names.extend(ctx.item.get(var) or [])
        if not names:
            return Rendered.empty()
        delimiter = spec.name_attrs.get("delimiter", ", ")
        return Rendered(delimiter.join(names), RenderKind.PRESENT_VAR)

    def count_names(self, rendered: Rendered) -> int:
        if rendered.is_empty:
            return 0
        return len(str(rendered.content).split(", "))


@dataclass
class StubContext:
    """Render context: the item being rendered plus runtime and style."""

    runtime: StubRuntime
    item: dict[str, Any] = field(default_factory=dict)
    style: CompiledStyle | None = None
    suppress_author: bool = False


@pytest.fixture
def runtime() -> StubRuntime:
    return StubRuntime()


@pytest.fixture
def make_ctx(runtime):
    """Return a helper building a StubContext around the shared runtime."""

    def _make(item: dict[str, Any] | None = None, **kwargs: Any) -> StubContext:
        return StubContext(runtime, item or {}, **kwargs)

    return _make


@pytest.fixture
def node():
    """Return a helper that parses an XML fragment into a StyleNode."""

    def _node(xml: str) -> StyleNode:
        return parse_xml(xml)

    return _node


def minimal_style(body: str = "", *, citation: str | None = None, bibliography: str | None = None) -> str:
    """A complete style document with default citation and bibliography."""
    if citation is None:
        citation = '<citation><layout delimiter="; "><text variable="title"/></layout></citation>'
    if bibliography is None:
        bibliography = '<bibliography><layout><text variable="title"/></layout></bibliography>'
    return (
        '<?xml version="1.0" encoding="utf-8"?>\n'
        '<style xmlns="http://purl.org/net/xbiblio/csl" class="in-text" version="1.0">\n'
        f"{body}\n{citation}\n{bibliography}\n"
        "</style>\n"
    )


@pytest.fixture
def style_source():
    """Return the minimal_style builder."""
    return minimal_style
