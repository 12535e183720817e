"""Option defaults, dependent option resolution and formatting parameters."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from cslc.errors import StyleOptionError

if TYPE_CHECKING:
    from cslc.style import CompiledStyle


class Scope(Enum):
    STYLE = "options"
    CITATION = "cite_options"
    BIBLIOGRAPHY = "bib_options"
    LOCALE = "locale_options"


OPTION_DEFAULTS: tuple[tuple[Scope, str, str], ...] = (
    (Scope.CITATION, "near-note-distance", "5"),
    (Scope.CITATION, "disambiguate-add-names", "false"),
    (Scope.CITATION, "disambiguate-add-givenname", "false"),
    (Scope.CITATION, "disambiguate-add-year-suffix", "false"),
    (Scope.CITATION, "givenname-disambiguation-rule", "by-cite"),
    (Scope.LOCALE, "punctuation-in-quote", "false"),
    (Scope.LOCALE, "limit-day-ordinals-to-day-1", "false"),
    (Scope.BIBLIOGRAPHY, "hanging-indent", "false"),
    (Scope.BIBLIOGRAPHY, "line-spacing", "1"),
    (Scope.BIBLIOGRAPHY, "entry-spacing", "1"),
    (Scope.STYLE, "initialize-with-hyphen", "true"),
    (Scope.STYLE, "demote-non-dropping-particle", "display-and-sort"),
)


def scope_options(style: CompiledStyle, scope: Scope) -> dict[str, str]:
    return getattr(style, scope.value)


def set_option_defaults(style: CompiledStyle) -> None:
    """Fill unset options from the default table, then resolve dependents.

    Runs after assembly so explicit settings always take precedence. Running
    it again on the same style changes nothing.
    """
    for scope, name, value in OPTION_DEFAULTS:
        scope_options(style, scope).setdefault(name, value)

    cite = style.cite_options
    collapse = cite.get("collapse")
    if not collapse or collapse == "citation-number":
        return
    cite.setdefault("cite-group-delimiter", ", ")
    layout_delimiter = style.cite_layout_attrs.get("delimiter")
    if layout_delimiter is None:
        return
    cite.setdefault("after-collapse-delimiter", layout_delimiter)
    if collapse in ("year-suffix", "year-suffix-ranged"):
        cite.setdefault("year-suffix-delimiter", layout_delimiter)


# ---------------------------------------------------------------------------
# Bibliography formatting parameters
# ---------------------------------------------------------------------------


class SecondFieldAlign(Enum):
    FLUSH = "flush"
    MARGIN = "margin"


FORMATTING_KEYS: tuple[str, ...] = (
    "hanging-indent",
    "line-spacing",
    "entry-spacing",
    "second-field-align",
)

FormattingValue = bool | int | float | SecondFieldAlign


def bib_formatting_params(bib_options: dict[str, str]) -> dict[str, FormattingValue]:
    """Convert bibliography options to typed output-formatting parameters."""
    params: dict[str, FormattingValue] = {}
    for key in FORMATTING_KEYS:
        if key in bib_options:
            params[key] = _convert(key, bib_options[key])
    if not params.get("second-field-align"):
        params["second-field-align"] = False
    return params


def _convert(key: str, value: str) -> FormattingValue:
    if value == "true":
        if key == "second-field-align":
            raise StyleOptionError(f"invalid value for {key}: {value!r}")
        return True
    if value == "false":
        return False
    if value in ("flush", "margin"):
        if key != "second-field-align":
            raise StyleOptionError(f"invalid value for {key}: {value!r}")
        return SecondFieldAlign(value)
    if key == "second-field-align":
        raise StyleOptionError(f"invalid value for {key}: {value!r} (expected flush or margin)")
    try:
        number = float(value)
    except ValueError:
        raise StyleOptionError(f"invalid value for {key}: {value!r} (expected a number)") from None
    return int(number) if number.is_integer() else number
