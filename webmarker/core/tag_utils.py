"""Helpers for comparing and ordering tag names.

Tag names are compared case-insensitively for de-duplication and sorted with
locale collation at base sensitivity (case and accents do not distinguish).
"""

from __future__ import annotations

import locale
import unicodedata
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable


def tag_key(name: str) -> str:
    """Return the identity key used for case-insensitive tag comparison."""
    return name.strip().casefold()


def _base_form(name: str) -> str:
    decomposed = unicodedata.normalize("NFKD", name.casefold())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def collation_key(name: str) -> tuple[str, str]:
    """Sort key approximating a base-sensitivity locale comparison.

    Ties between names that differ only by case or accents are broken by the
    raw name so that sorting stays deterministic.
    """
    return locale.strxfrm(_base_form(name)), name


def dedupe_names(names: Iterable[str]) -> list[str]:
    """Drop case-insensitive duplicates, keeping first occurrences in order.

    Blank names are skipped.
    """
    seen: set[str] = set()
    result: list[str] = []
    for raw in names:
        name = raw.strip()
        key = tag_key(name)
        if not key or key in seen:
            continue
        seen.add(key)
        result.append(name)
    return result


def sort_names(names: Iterable[str]) -> list[str]:
    """De-duplicate and sort names by locale collation."""
    return sorted(dedupe_names(names), key=collation_key)


def contains_name(names: Iterable[str], candidate: str) -> bool:
    key = tag_key(candidate)
    return any(tag_key(name) == key for name in names)
