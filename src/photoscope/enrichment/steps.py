"""
Record enrichment steps.

Each step is a pure function `step(draft, params) -> new_draft` over plain dicts:
- `trim_record`: allowlist copy of the fields the UI needs (no computation)
- `apply_tag_match`: 0/1 tag-match rank against the query keyword
- `make_distance_step(...)`: great-circle distance to the search origin

Upstream records are loosely shaped, so every step degrades instead of raising:
a missing tag list counts as no tags, a missing or unreadable location gets the
sentinel distance.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Callable, Mapping

from photoscope.core.geo import GeoPoint, haversine_km
from photoscope.domain.models import SearchParameters

logger = logging.getLogger(__name__)

SENTINEL_DISTANCE_KM = 10_000_000.0

EnrichmentStep = Callable[[dict[str, Any], SearchParameters], dict[str, Any]]

_SCALAR_FIELDS = ("id", "type", "link", "created_time")
_MAPPING_FIELDS = ("images", "videos", "user")
_LOCATION_FIELDS = ("latitude", "longitude", "name", "id")


def _as_text(value: Any) -> str | None:
    if value is None or isinstance(value, (dict, list)):
        return None
    return str(value)


def _as_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        out = float(value)
    except (TypeError, ValueError):
        return None
    return out if math.isfinite(out) else None


def _trim_location(location: Any) -> dict[str, Any] | None:
    if not isinstance(location, Mapping):
        return None
    return {
        "latitude": _as_float(location.get("latitude")),
        "longitude": _as_float(location.get("longitude")),
        "name": _as_text(location.get("name")),
        "id": _as_text(location.get("id")),
    }


def _trim_likes(likes: Any) -> dict[str, Any] | None:
    if not isinstance(likes, Mapping):
        return None
    count = _as_float(likes.get("count"))
    return {"count": int(count) if count is not None and count >= 0 else 0}


def _trim_caption(caption: Any) -> dict[str, Any] | None:
    if not isinstance(caption, Mapping):
        return None
    return {"text": _as_text(caption.get("text"))}


def trim_record(record: Mapping[str, Any] | Any, params: SearchParameters | None = None) -> dict[str, Any]:
    """Build a reduced copy of an upstream record from an explicit field allowlist.

    Attribution, comments, filter data, like/user sub-fields and caption provenance are
    never copied. The input is not modified.
    """
    if not isinstance(record, Mapping):
        logger.debug("Skipping non-mapping record of type %s", type(record).__name__)
        return {}

    out: dict[str, Any] = {}
    for key in _SCALAR_FIELDS:
        out[key] = _as_text(record.get(key))
    for key in _MAPPING_FIELDS:
        value = record.get(key)
        out[key] = dict(value) if isinstance(value, Mapping) else None

    tags = record.get("tags")
    out["tags"] = [t for t in tags if isinstance(t, str)] if isinstance(tags, list) else []
    out["location"] = _trim_location(record.get("location"))
    out["likes"] = _trim_likes(record.get("likes"))
    out["caption"] = _trim_caption(record.get("caption"))
    return out


def tag_match_rank(tags: list[str], keyword: str | None) -> int:
    """Return 0 if any tag contains `keyword` (case-insensitive), else 1."""
    if not keyword:
        return 1
    needle = keyword.lower()
    return 0 if any(needle in tag.lower() for tag in tags) else 1


def apply_tag_match(draft: dict[str, Any], params: SearchParameters) -> dict[str, Any]:
    tags = draft.get("tags")
    if not isinstance(tags, list):
        tags = []
    return {**draft, "tag_match_rank": tag_match_rank(tags, params.keyword)}


def record_point(draft: Mapping[str, Any]) -> GeoPoint | None:
    """Return the record's coordinates, or None if they are missing or unusable."""
    location = draft.get("location")
    if not isinstance(location, Mapping):
        return None
    lat = _as_float(location.get("latitude"))
    lon = _as_float(location.get("longitude"))
    if lat is None or lon is None or not (-90 <= lat <= 90) or not (-180 <= lon <= 180):
        return None
    return GeoPoint(lat=lat, lon=lon)


def make_distance_step(sentinel_km: float = SENTINEL_DISTANCE_KM) -> EnrichmentStep:
    """Create the distance step; records without a usable position get `sentinel_km`."""

    def apply_distance(draft: dict[str, Any], params: SearchParameters) -> dict[str, Any]:
        origin = params.origin
        point = record_point(draft)
        if origin is None or point is None:
            if origin is not None:
                logger.debug("Record %s has no usable location; using sentinel distance", draft.get("id"))
            return {**draft, "distance_km": float(sentinel_km)}
        return {**draft, "distance_km": haversine_km(origin, point)}

    return apply_distance


apply_distance = make_distance_step()
