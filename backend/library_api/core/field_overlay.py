"""Field Overlay — partial-update semantics for primary fields.

Invariants:
    - Only non-empty values overlay; None, "" and 0 leave the stored value untouched
    - Fields not listed in `allowed` are dropped, never written
    - Output never contains keys whose value would not change the row

Design Decisions:
    - Zero values are treated as "not supplied": a field cannot be reset to 0/""
      through an update (ADR: keeps existing client behaviour, overlay not replace)
"""

from typing import Any, Iterable, Mapping


def is_empty_value(value: Any) -> bool:
    """True for the values an overlay update skips."""
    if value is None:
        return True
    if isinstance(value, bool):
        return False
    if isinstance(value, (str, int, float)):
        return not value
    return False


def select_overlay(
    partial: Mapping[str, Any], allowed: Iterable[str],
) -> dict[str, Any]:
    """Pick the non-empty, allowed fields of a partial payload."""
    allowed_set = set(allowed)
    return {
        key: value
        for key, value in partial.items()
        if key in allowed_set and not is_empty_value(value)
    }


def changed_fields(
    stored: Mapping[str, Any], overlay: Mapping[str, Any],
) -> dict[str, Any]:
    """Subset of the overlay that actually differs from the stored row."""
    return {k: v for k, v in overlay.items() if stored.get(k) != v}
