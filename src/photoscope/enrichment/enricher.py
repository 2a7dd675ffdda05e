"""
Record enricher.

Composes the enrichment steps into one ordered pipeline and validates the final
draft into an `EnrichedRecord`. Order matters only in that both computed steps read
the already-normalized `SearchParameters` and the trimmed draft.
"""

from __future__ import annotations

from typing import Any, Iterable, Sequence

from photoscope.config.settings import Settings
from photoscope.domain.models import EnrichedRecord, SearchParameters
from photoscope.enrichment.steps import (
    SENTINEL_DISTANCE_KM,
    EnrichmentStep,
    apply_tag_match,
    make_distance_step,
    trim_record,
)


def default_steps(sentinel_km: float = SENTINEL_DISTANCE_KM) -> tuple[EnrichmentStep, ...]:
    return (trim_record, apply_tag_match, make_distance_step(sentinel_km))


class RecordEnricher:
    """Applies an ordered sequence of pure steps to each raw record."""

    def __init__(self, steps: Sequence[EnrichmentStep] | None = None):
        self._steps: tuple[EnrichmentStep, ...] = tuple(steps) if steps is not None else default_steps()

    @classmethod
    def from_settings(cls, settings: Settings) -> "RecordEnricher":
        return cls(default_steps(settings.enrichment.sentinel_distance_km))

    @property
    def steps(self) -> tuple[EnrichmentStep, ...]:
        return self._steps

    def enrich(self, record: Any, params: SearchParameters) -> EnrichedRecord:
        draft: Any = record
        for step in self._steps:
            draft = step(draft, params)
        return EnrichedRecord.model_validate(draft)

    def enrich_all(self, records: Iterable[Any], params: SearchParameters) -> list[EnrichedRecord]:
        return [self.enrich(r, params) for r in records]


def enrich_record(record: Any, params: SearchParameters) -> EnrichedRecord:
    """Enrich one record with the default step sequence."""
    return RecordEnricher().enrich(record, params)
