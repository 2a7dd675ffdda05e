from photoscope.enrichment.enricher import RecordEnricher, default_steps, enrich_record
from photoscope.enrichment.steps import (
    SENTINEL_DISTANCE_KM,
    apply_distance,
    apply_tag_match,
    make_distance_step,
    tag_match_rank,
    trim_record,
)

__all__ = [
    "SENTINEL_DISTANCE_KM",
    "RecordEnricher",
    "apply_distance",
    "apply_tag_match",
    "default_steps",
    "enrich_record",
    "make_distance_step",
    "tag_match_rank",
    "trim_record",
]
