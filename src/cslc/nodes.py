"""Parsed style tree: positions and generic element nodes."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class Position:
    """Source position, 1-based line and column. Column is None when unknown."""

    line: int
    column: int | None = None


@dataclass(frozen=True, slots=True)
class StyleNode:
    """A CSL element: tag, attributes and ordered children (nodes or text)."""

    tag: str
    attrs: dict[str, str] = field(default_factory=dict)
    children: tuple[StyleNode | str, ...] = ()
    line: int = 0

    @property
    def position(self) -> Position | None:
        return Position(self.line) if self.line else None

    def elements(self) -> list[StyleNode]:
        """Child elements, skipping text leaves."""
        return [c for c in self.children if isinstance(c, StyleNode)]

    def find(self, tag: str) -> StyleNode | None:
        for child in self.children:
            if isinstance(child, StyleNode) and child.tag == tag:
                return child
        return None

    def text(self) -> str:
        """Concatenated direct text content."""
        return "".join(c for c in self.children if isinstance(c, str))
