"""Locale term lists: parsing, merging and lookup."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from cslc.errors import StyleStructureError
from cslc.nodes import StyleNode
from cslc.tags import Tag, tag_of


@dataclass(frozen=True, slots=True)
class Term:
    """One localized form of a term."""

    name: str
    value: str
    form: str = "long"
    number: str | None = None  # "single", "multiple" or None when invariant
    gender: str | None = None
    gender_form: str | None = None
    match: str | None = None

    @property
    def key(self) -> tuple[str, str, str | None, str | None]:
        """Identity used when a newer term list overrides an older one."""
        return (self.name, self.form, self.gender_form, self.match)


# form -> form tried next when a term has no entry for it
_FORM_FALLBACK: dict[str, str] = {
    "verb-short": "verb",
    "verb": "long",
    "symbol": "short",
    "short": "long",
}


def parse_terms(nodes: Iterable[StyleNode | str]) -> list[Term]:
    """Parse the children of a <terms> element."""
    terms: list[Term] = []
    for node in nodes:
        if not isinstance(node, StyleNode):
            continue
        if tag_of(node) is not Tag.TERM:
            raise StyleStructureError(f"<{node.tag}> is not allowed inside <terms>", node.position)
        name = node.attrs.get("name")
        if not name:
            raise StyleStructureError("<term> requires a name attribute", node.position)
        common = {
            "form": node.attrs.get("form", "long"),
            "gender": node.attrs.get("gender"),
            "gender_form": node.attrs.get("gender-form"),
            "match": node.attrs.get("match"),
        }
        numbered = [c for c in node.elements() if c.tag in (Tag.SINGLE.value, Tag.MULTIPLE.value)]
        if numbered:
            for child in numbered:
                terms.append(Term(name, child.text(), number=child.tag, **common))
        else:
            terms.append(Term(name, node.text(), **common))
    return terms


def merge_terms(new: list[Term], existing: list[Term]) -> list[Term]:
    """Override *existing* with *new*; untouched existing terms keep their order."""
    overridden = {t.key for t in new}
    return [t for t in existing if t.key not in overridden] + list(new)


def find_term(
    terms: list[Term],
    name: str,
    form: str = "long",
    number: str = "single",
    gender_form: str | None = None,
) -> Term | None:
    """Look up a term, falling back through shorter forms to ``long``."""
    current: str | None = form
    while current is not None:
        candidates = [
            t for t in terms
            if t.name == name and t.form == current and t.number in (None, number)
        ]
        preferred = [t for t in candidates if t.gender_form == gender_form]
        if preferred:
            candidates = preferred
        if candidates:
            # Prefer the most recently defined entry
            return candidates[-1]
        current = _FORM_FALLBACK.get(current)
    return None
