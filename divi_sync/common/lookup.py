"""Ordered fallback resolution over optional sources."""

from __future__ import annotations

from typing import Mapping, Sequence, TypeVar

T = TypeVar("T")


def is_blank(value: object) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


def first_present(*candidates: T | None) -> T | None:
    """Return the first candidate that is neither ``None`` nor a blank string."""
    for candidate in candidates:
        if not is_blank(candidate):
            return candidate
    return None


def lookup_first(mapping: Mapping[str, object], keys: Sequence[str]) -> object | None:
    return first_present(*(mapping.get(key) for key in keys))
