"""Contract between compiled styles and the rendering runtime.

Compiled rendering functions take a render context and return a
:class:`Rendered` value. They reach the rendering primitives through
``ctx.runtime`` at call time, so a compiled style never captures a runtime
and can be shared by any number of renders.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol


class RenderKind(Enum):
    PRESENT_VAR = "present-var"  # at least one variable rendered
    EMPTY_VARS = "empty-vars"  # variables were referenced, none had a value
    TEXT_ONLY = "text-only"  # no variables involved


@dataclass(frozen=True, slots=True)
class Rendered:
    """Output of a primitive: runtime-defined content plus its kind."""

    content: Any
    kind: RenderKind = RenderKind.TEXT_ONLY
    substituted: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.content

    @classmethod
    def empty(cls) -> Rendered:
        return cls(None, RenderKind.EMPTY_VARS)


@dataclass(frozen=True, slots=True)
class NamesSpec:
    """Attribute sets gathered from a <names> element and its children."""

    names_attrs: dict[str, str] = field(default_factory=dict)
    name_attrs: dict[str, str] = field(default_factory=dict)
    name_parts: dict[str, dict[str, str]] = field(default_factory=dict)
    et_al_attrs: dict[str, str] = field(default_factory=dict)
    label_attrs: dict[str, str] | None = None
    label_before_names: bool = False


class Runtime(Protocol):
    """Rendering primitives, one per renderable element tag.

    Each ``render_<tag>`` primitive is called as
    ``(attrs, ctx, *children)`` where ``children`` are the already
    rendered children of the element (``Rendered`` values or plain
    strings for literal text).
    """

    def render_layout(self, attrs: dict[str, str], ctx: RenderContext, *children: Any) -> Rendered: ...
    def render_macro(self, attrs: dict[str, str], ctx: RenderContext, *children: Any) -> Rendered: ...
    def render_sort(self, attrs: dict[str, str], ctx: RenderContext, *children: Any) -> Rendered: ...
    def render_key(self, attrs: dict[str, str], ctx: RenderContext, *children: Any) -> Rendered: ...
    def render_text(self, attrs: dict[str, str], ctx: RenderContext, *children: Any) -> Rendered: ...
    def render_date(self, attrs: dict[str, str], ctx: RenderContext, *children: Any) -> Rendered: ...
    def render_date_part(self, attrs: dict[str, str], ctx: RenderContext, *children: Any) -> Rendered: ...
    def render_number(self, attrs: dict[str, str], ctx: RenderContext, *children: Any) -> Rendered: ...
    def render_label(self, attrs: dict[str, str], ctx: RenderContext, *children: Any) -> Rendered: ...
    def render_group(self, attrs: dict[str, str], ctx: RenderContext, *children: Any) -> Rendered: ...
    def render_choose(self, attrs: dict[str, str], ctx: RenderContext, *children: Any) -> Rendered: ...
    def render_if(self, attrs: dict[str, str], ctx: RenderContext, *children: Any) -> Rendered: ...
    def render_else_if(self, attrs: dict[str, str], ctx: RenderContext, *children: Any) -> Rendered: ...
    def render_else(self, attrs: dict[str, str], ctx: RenderContext, *children: Any) -> Rendered: ...

    def render_name_vars(
        self, variables: tuple[str, ...], spec: NamesSpec, ctx: RenderContext
    ) -> Rendered:
        """Render the name variables in *variables* using *spec*."""
        ...

    def count_names(self, rendered: Rendered) -> int:
        """Number of names actually present in a names rendering."""
        ...


class RenderContext(Protocol):
    """Per-render state supplied fresh to every compiled function call."""

    runtime: Runtime
    suppress_author: bool


Primitive = Callable[..., Rendered]
RenderFn = Callable[[RenderContext], Any]
