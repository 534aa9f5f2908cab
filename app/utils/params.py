"""Explicit parsing for numeric query-string parameters."""

from __future__ import annotations


def parse_int_param(
    raw: str | None,
    default: int,
    *,
    minimum: int | None = None,
) -> int:
    """Parse ``raw`` as a base-10 integer, falling back to ``default``.

    Absent, blank and non-numeric values fall back, as do values below
    ``minimum``. Surrounding whitespace and a leading sign are accepted;
    ``"12abc"`` and ``"1.5"`` are rejected rather than truncated.
    """

    if raw is None:
        return default
    text = raw.strip()
    if not text:
        return default
    try:
        value = int(text, 10)
    except ValueError:
        return default
    if minimum is not None and value < minimum:
        return default
    return value


__all__ = ["parse_int_param"]
