"""Tolerant lookups over loosely-typed provider records.

Upstream producers disagree on field names and nesting; these helpers
resolve a value by ordered fallback instead of chaining lookups at every
call site.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any

from mimmoza.domain.calculator.normalizer import to_number

_MISSING = object()


def get_path(record: Any, path: str | tuple[str, ...], default: Any = None) -> Any:
    """Read a dotted path (``"market.core.dvf"``) from nested mappings."""
    keys = path.split(".") if isinstance(path, str) else path
    current = record
    for key in keys:
        if not isinstance(current, Mapping):
            return default
        current = current.get(key, _MISSING)
        if current is _MISSING:
            return default
    return current


def coalesce(*values: Any) -> Any:
    """First value that is not None; falsy values such as 0 or "" are kept."""
    return next((v for v in values if v is not None), None)


def first_present(record: Any, *paths: str | tuple[str, ...], default: Any = None) -> Any:
    """Return the value at the first path that is present and not None."""
    for path in paths:
        value = get_path(record, path)
        if value is not None:
            return value
    return default


def pick(*candidates: Any) -> float:
    """First candidate that is a finite, non-zero number; 0.0 otherwise.

    Mirrors the bank forms, where an empty field and a 0 are the same.
    """
    for candidate in candidates:
        if candidate is None or isinstance(candidate, bool):
            continue
        try:
            x = float(candidate)
        except (TypeError, ValueError):
            continue
        if math.isfinite(x) and x != 0:
            return x
    return 0.0


def first_number(*candidates: Any) -> float | None:
    """First candidate that is a finite number, zero included."""
    for candidate in candidates:
        if candidate is None or isinstance(candidate, bool):
            continue
        try:
            x = float(candidate)
        except (TypeError, ValueError):
            continue
        if math.isfinite(x):
            return x
    return None


def is_number(value: Any) -> bool:
    """True for real numbers (bool excluded), finite or not."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_finite_number(value: Any) -> bool:
    """True for real, finite numbers (bool excluded)."""
    return is_number(value) and math.isfinite(value)


def number_at(record: Any, *paths: str | tuple[str, ...]) -> float | None:
    """Finite number at the first present path, or None."""
    return to_number(first_present(record, *paths))
