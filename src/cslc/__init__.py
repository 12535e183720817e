"""CSL style compiler."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

    from cslc.locale import Locale
    from cslc.style import CompiledStyle

__version__ = "0.1.0"


def compile(
    style: str | Path,
    locale: str | None = None,
    locale_data: Locale | None = None,
) -> CompiledStyle:
    """Parse and compile a CSL style (inline XML or a file path)."""
    from cslc.style import create_style

    return create_style(style, locale, locale_data)
