"""
Result ranking.

A stable multi-key ascending sort: keys are applied in order as primary, secondary,
and so on, and records that tie on every key keep their input order.
"""

from __future__ import annotations

from typing import Sequence, get_args

from photoscope.domain.models import EnrichedRecord, SortKey

SORT_KEYS: frozenset[str] = frozenset(get_args(SortKey))


def rank(records: Sequence[EnrichedRecord], sort_keys: Sequence[str]) -> list[EnrichedRecord]:
    """Return a new list of `records` sorted ascending by `sort_keys` (input untouched)."""
    unknown = [k for k in sort_keys if k not in SORT_KEYS]
    if unknown:
        raise ValueError(f"Unknown sort key(s): {', '.join(unknown)}")
    keys = tuple(sort_keys)
    # `sorted` is stable, which keeps tied records in upstream order.
    return sorted(records, key=lambda r: tuple(getattr(r, k) for k in keys))
