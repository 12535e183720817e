"""--debug dump of a parsed style tree to stderr."""

from __future__ import annotations

import sys
from typing import TextIO

from cslc.nodes import StyleNode


def dump_tree(node: StyleNode, *, file: TextIO | None = None) -> None:
    """Print a human-readable StyleNode tree to *file* (default: stderr)."""
    _dump_node(node, 0, file if file is not None else sys.stderr)


def _indent(depth: int) -> str:
    return "  " * depth


def _dump_node(node: StyleNode, depth: int, f: TextIO) -> None:
    attrs = "".join(f" {k}={v!r}" for k, v in node.attrs.items())
    f.write(f"{_indent(depth)}<{node.tag}>{attrs}  @{node.line}\n")
    for child in node.children:
        if isinstance(child, StyleNode):
            _dump_node(child, depth + 1, f)
        else:
            f.write(f"{_indent(depth + 1)}Text({child!r})\n")
