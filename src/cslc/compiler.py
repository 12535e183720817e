"""Style element compiler — turns StyleNode trees into rendering functions."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any

from cslc.errors import StyleStructureError
from cslc.nodes import StyleNode
from cslc.runtime import NamesSpec, RenderContext, Rendered, RenderFn, RenderKind
from cslc.tags import NAMES_ONLY, PRIMITIVES, Tag, tag_of

logger = logging.getLogger(__name__)


def compile_node(node: StyleNode | str) -> RenderFn:
    """Compile a style element (or text leaf) into a rendering function.

    Attributes are fixed at compile time; the context is supplied on every
    call and threaded unchanged into children.
    """
    if isinstance(node, str):
        return lambda ctx: node

    tag = tag_of(node)
    if tag is Tag.NAMES:
        return compile_names(node)
    if tag in NAMES_ONLY:
        raise StyleStructureError(
            f"<{node.tag}> must appear inside <names>",
            node.position,
        )
    if tag not in PRIMITIVES:
        raise StyleStructureError(f"<{node.tag}> is not a rendering element", node.position)

    primitive = PRIMITIVES[tag]
    attrs = dict(node.attrs)
    children = tuple(compile_node(c) for c in node.children)

    def render(ctx: RenderContext) -> Any:
        return primitive(ctx.runtime)(attrs, ctx, *[child(ctx) for child in children])

    return render


# ---------------------------------------------------------------------------
# Names
# ---------------------------------------------------------------------------

# A substitution is either a shorthand <names variable="..."/> reference,
# rendered with the enclosing element's name settings, or a compiled element.
Substitution = tuple[str, ...] | RenderFn


def compile_names(node: StyleNode) -> RenderFn:
    """Compile a <names> element.

    The primary variables are rendered first; when they come out empty the
    substitutions are tried in order and the first non-empty one wins.
    Later substitutions are never evaluated.
    """
    variables = _names_variables(node)
    spec, substitutions = _gather_names(node)
    count_only = spec.name_attrs.get("form") == "count"

    def render(ctx: RenderContext) -> Rendered:
        if ctx.suppress_author:
            return Rendered.empty()
        result = _render_names(variables, spec, substitutions, ctx)
        if not count_only:
            return result
        count = ctx.runtime.count_names(result)
        if count == 0:
            return Rendered("", RenderKind.EMPTY_VARS, result.substituted)
        return Rendered(str(count), result.kind, result.substituted)

    return render


def _render_names(
    variables: tuple[str, ...],
    spec: NamesSpec,
    substitutions: tuple[Substitution, ...],
    ctx: RenderContext,
) -> Rendered:
    primary = ctx.runtime.render_name_vars(variables, spec, ctx)
    if not primary.is_empty:
        return primary
    for subst in substitutions:
        if isinstance(subst, tuple):
            result = ctx.runtime.render_name_vars(subst, spec, ctx)
        else:
            result = subst(ctx)
        if isinstance(result, Rendered) and not result.is_empty:
            return replace(result, substituted=True)
    return Rendered.empty()


def _names_variables(node: StyleNode) -> tuple[str, ...]:
    variables = tuple(node.attrs.get("variable", "").split())
    if not variables:
        raise StyleStructureError("<names> requires a variable attribute", node.position)
    return variables


def _gather_names(node: StyleNode) -> tuple[NamesSpec, tuple[Substitution, ...]]:
    name: StyleNode | None = None
    label: StyleNode | None = None
    et_al: dict[str, str] = {}
    substitutions: list[Substitution] = []

    for child in node.elements():
        tag = tag_of(child)
        if tag is Tag.NAME:
            name = child
        elif tag is Tag.LABEL:
            label = child
        elif tag is Tag.ET_AL:
            et_al = dict(child.attrs)
        elif tag is Tag.SUBSTITUTE:
            substitutions.extend(_compile_substitute(child))
        else:
            raise StyleStructureError(f"<{child.tag}> is not allowed inside <names>", child.position)

    if name is None and label is None:
        raise StyleStructureError("<names> needs a <name> or <label> child", node.position)

    name_parts: dict[str, dict[str, str]] = {}
    if name is not None:
        for part in name.elements():
            if tag_of(part) is not Tag.NAME_PART:
                raise StyleStructureError(
                    f"<{part.tag}> is not allowed inside <name>",
                    part.position,
                )
            name_parts[part.attrs.get("name", "")] = dict(part.attrs)

    spec = NamesSpec(
        names_attrs=dict(node.attrs),
        name_attrs=dict(name.attrs) if name is not None else {},
        name_parts=name_parts,
        et_al_attrs=et_al,
        label_attrs=dict(label.attrs) if label is not None else None,
        # An explicit <label> child is rendered after the names
        label_before_names=label is None,
    )
    return spec, tuple(substitutions)


def _compile_substitute(node: StyleNode) -> list[Substitution]:
    result: list[Substitution] = []
    for child in node.elements():
        if tag_of(child) is Tag.NAMES and not child.elements():
            result.append(_names_variables(child))
        else:
            result.append(compile_node(child))
    return result


# ---------------------------------------------------------------------------
# Citation / bibliography fragments
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Fragment:
    """A compiled <citation> or <bibliography> element."""

    options: dict[str, str]
    layout: RenderFn
    layout_attrs: dict[str, str]
    sort: RenderFn | None
    sort_orders: tuple[bool, ...] | None


def parse_fragment(node: StyleNode) -> Fragment:
    """Split a citation/bibliography element into options, sort and layout."""
    elements = node.elements()
    sort_node: StyleNode | None = None
    if elements and elements[0].tag == Tag.SORT.value:
        sort_node, elements = elements[0], elements[1:]

    if not elements or elements[0].tag != Tag.LAYOUT.value:
        raise StyleStructureError(f"<{node.tag}> is missing its <layout>", node.position)
    layout_node = elements[0]
    for extra in elements[1:]:
        logger.warning("ignoring <%s> after the <%s> layout (line %d)", extra.tag, node.tag, extra.line)

    sort: RenderFn | None = None
    sort_orders: tuple[bool, ...] | None = None
    if sort_node is not None:
        sort = compile_node(sort_node)
        sort_orders = tuple(key.attrs.get("sort") != "descending" for key in sort_node.elements())

    return Fragment(
        options=dict(node.attrs),
        layout=compile_node(layout_node),
        layout_attrs=dict(layout_node.attrs),
        sort=sort,
        sort_orders=sort_orders,
    )
