"""Title composition and date interpretation rules."""

from __future__ import annotations

import re

_FULL_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_YEAR = re.compile(r"^\d{4}$")

# (English, German) note text per (inferred, uncertain) combination.
_DATE_NOTES: dict[tuple[bool, bool], tuple[str, str]] = {
    (True, True): ("Date is inferred and uncertain.", "Datum abgeleitet und unsicher."),
    (True, False): ("Date is inferred.", "Datum abgeleitet."),
    (False, True): ("Date is uncertain.", "Datum unsicher."),
}


def normalize_title(title: str) -> str:
    """Strip the ``<<``/``>>`` non-sorting article markers, keeping the inner text."""
    return title.replace("<<", "").replace(">>", "").strip()


def compose_titles(
    main_title: str,
    sort_title: str | None = None,
    order_number: str | None = None,
    subtitle: str | None = None,
) -> tuple[str, str]:
    """Return ``(title, alternative_title)``.

    title = (sort title or main title) + order number
    alternative title = main title + " : " + subtitle
    """
    title = sort_title if sort_title and sort_title.strip() else main_title
    if order_number and order_number.strip():
        title = title + order_number
    alternative = main_title
    if subtitle and subtitle.strip():
        alternative = f"{main_title} : {subtitle}"
    return normalize_title(title), normalize_title(alternative)


def date_notes(date: str | None) -> list[tuple[str, str]]:
    """Notes qualifying a date: ``[`` marks it inferred, ``?`` uncertain.

    Returns ``(text, language)`` pairs, English first; empty when the date
    carries neither marker.
    """
    if not date:
        return []
    key = ("[" in date, "?" in date)
    if key not in _DATE_NOTES:
        return []
    english, german = _DATE_NOTES[key]
    return [(english, "en"), (german, "de")]


def date_literal(date: str) -> tuple[str, str | None]:
    """Clean a date string and pick its XSD datatype (None for a plain string)."""
    cleaned = date.replace("[", "").replace("]", "").replace("?", "").strip()
    if _FULL_DATE.match(cleaned):
        return cleaned, "date"
    if _YEAR.match(cleaned):
        return cleaned, "gYear"
    return cleaned, None
