"""
Timestamp conversion.

Callers send epoch milliseconds (JavaScript `Date` values); the upstream API wants
epoch seconds.
"""

from __future__ import annotations


def epoch_ms_to_seconds(value: float | int | None) -> int | None:
    """Floor-divide an epoch-millisecond value into epoch seconds (None passes through)."""
    if value is None:
        return None
    return int(value // 1000)
