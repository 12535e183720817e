"""Locale handling: compatibility, in-style locale merging, external locales."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from cslc.errors import StyleStructureError
from cslc.nodes import StyleNode
from cslc.parser import parse_xml, read_style, source_text
from cslc.tags import Tag, tag_of
from cslc.terms import Term, merge_terms, parse_terms

logger = logging.getLogger(__name__)

# language -> primary dialect, used to extend bare language tags
PRIMARY_DIALECTS: dict[str, str] = {
    "af": "af-ZA",
    "ar": "ar",
    "bg": "bg-BG",
    "ca": "ca-AD",
    "cs": "cs-CZ",
    "cy": "cy-GB",
    "da": "da-DK",
    "de": "de-DE",
    "el": "el-GR",
    "en": "en-US",
    "es": "es-ES",
    "et": "et-EE",
    "eu": "eu",
    "fa": "fa-IR",
    "fi": "fi-FI",
    "fr": "fr-FR",
    "he": "he-IL",
    "hr": "hr-HR",
    "hu": "hu-HU",
    "id": "id-ID",
    "is": "is-IS",
    "it": "it-IT",
    "ja": "ja-JP",
    "km": "km-KH",
    "ko": "ko-KR",
    "la": "la",
    "lt": "lt-LT",
    "lv": "lv-LV",
    "mn": "mn-MN",
    "nb": "nb-NO",
    "nl": "nl-NL",
    "nn": "nn-NO",
    "pl": "pl-PL",
    "pt": "pt-PT",
    "ro": "ro-RO",
    "ru": "ru-RU",
    "sk": "sk-SK",
    "sl": "sl-SI",
    "sr": "sr-RS",
    "sv": "sv-SE",
    "th": "th-TH",
    "tr": "tr-TR",
    "uk": "uk-UA",
    "vi": "vi-VN",
    "zh": "zh-CN",
}


def normalize_lang(lang: str) -> str:
    """Canonical form of a language tag: ``en_us`` -> ``en-US``."""
    parts = lang.replace("_", "-").split("-")
    return "-".join([parts[0].lower(), *(p.upper() if len(p) == 2 else p for p in parts[1:])])


def extend_lang(lang: str) -> str:
    """Extend a bare language to its primary dialect: ``de`` -> ``de-DE``."""
    lang = normalize_lang(lang)
    if "-" in lang:
        return lang
    return PRIMARY_DIALECTS.get(lang, lang)


def locale_compatible(candidate: str | None, requested: str) -> bool:
    """Whether a locale declared as *candidate* applies to *requested*."""
    if not candidate:
        return True
    candidate = normalize_lang(candidate)
    requested = extend_lang(requested)
    if "-" not in candidate:
        return requested.split("-")[0] == candidate
    return candidate == requested


@dataclass(frozen=True, slots=True)
class DateFormat:
    """A localized date format: <date> attributes and its ordered date parts."""

    attrs: dict[str, str]
    parts: dict[str, dict[str, str]]


class LocaleTarget(Protocol):
    """Anything a <locale> element can be merged into."""

    locale_options: dict[str, str]
    date_text: DateFormat | None
    date_numeric: DateFormat | None
    terms: list[Term] | None


@dataclass
class Locale:
    """A standalone locale loaded from a locales-xx-XX.xml document."""

    lang: str | None = None
    locale_options: dict[str, str] = field(default_factory=dict)
    date_text: DateFormat | None = None
    date_numeric: DateFormat | None = None
    terms: list[Term] | None = None


def merge_locale(target: LocaleTarget, node: StyleNode) -> None:
    """Merge the contents of a <locale> element into *target*."""
    for child in node.elements():
        tag = tag_of(child)
        if tag is Tag.STYLE_OPTIONS:
            append_options(target.locale_options, child.attrs)
        elif tag is Tag.DATE:
            _merge_date(target, child)
        elif tag is Tag.TERMS:
            terms = parse_terms(child.children)
            if target.terms is None:
                target.terms = terms
            else:
                target.terms = merge_terms(terms, target.terms)
        elif tag is Tag.INFO:
            continue
        else:
            raise StyleStructureError(f"<{child.tag}> is not allowed inside <locale>", child.position)


def append_options(options: dict[str, str], new: Iterable[tuple[str, str]] | dict[str, str]) -> None:
    """Add options after the existing ones; entries already set are kept."""
    items = new.items() if isinstance(new, dict) else new
    for key, value in items:
        options.setdefault(key, value)


def _merge_date(target: LocaleTarget, node: StyleNode) -> None:
    date = DateFormat(
        dict(node.attrs),
        {p.attrs.get("name", ""): dict(p.attrs) for p in node.elements() if p.tag == Tag.DATE_PART.value},
    )
    if node.attrs.get("form") == "text":
        if target.date_text is None:
            target.date_text = date
    elif target.date_numeric is None:
        target.date_numeric = date


def load_locale(source: str | Path) -> Locale:
    """Load a standalone locale from inline XML or a file path."""
    data = read_style(source)
    root = parse_xml(data)
    if root.tag != Tag.LOCALE.value:
        raise StyleStructureError(f"expected a <locale> document, found <{root.tag}>", root.position, source_text(data))
    locale = Locale(lang=root.attrs.get("lang"))
    merge_locale(locale, root)
    logger.debug("loaded locale %s with %d terms", locale.lang, len(locale.terms or ()))
    return locale


def find_locale_file(lang: str, dirs: Iterable[Path]) -> Path | None:
    """Search *dirs* for locales-<lang>.xml, then for the primary dialect."""
    names = [f"locales-{normalize_lang(lang)}.xml"]
    extended = f"locales-{extend_lang(lang.split('-')[0].split('_')[0])}.xml"
    if extended not in names:
        names.append(extended)
    for d in dirs:
        for name in names:
            candidate = d / name
            if candidate.is_file():
                return candidate
    return None
