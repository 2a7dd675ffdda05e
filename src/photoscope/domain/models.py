"""
Domain models (Pydantic).

These types represent the stable "contract" between layers:
- caller inputs (`SearchRequest`, the flat parameter object sent by the UI/API/CLI)
- the immutable per-query context (`SearchParameters`)
- ranked output (`EnrichedRecord`)

Raw upstream records are plain dicts; they only become typed once the enrichment
steps have reduced them to an allowlisted shape.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from photoscope.core.geo import GeoPoint
from photoscope.core.time import epoch_ms_to_seconds

SortKey = Literal["tag_match_rank", "distance_km"]

KEYWORD_SORT_KEYS: tuple[SortKey, ...] = ("distance_km",)
COORDINATE_SORT_KEYS: tuple[SortKey, ...] = ("tag_match_rank", "distance_km")


def normalize_keyword(text: str | None) -> str | None:
    """Lower-case `text` and drop every whitespace character (None if nothing remains)."""
    if text is None:
        return None
    compact = "".join(str(text).split()).lower()
    return compact or None


def _in_range(lat: float, lng: float) -> bool:
    return -90 <= lat <= 90 and -180 <= lng <= 180


class QueryMode(str, Enum):
    KEYWORD = "keyword"
    COORDINATE = "coordinate"


class SearchParameters(BaseModel):
    """Immutable context for one query; passed explicitly to every pipeline step."""

    model_config = ConfigDict(frozen=True)

    mode: QueryMode
    keyword: str | None = None
    latitude: float | None = Field(default=None, allow_inf_nan=False)
    longitude: float | None = Field(default=None, allow_inf_nan=False)
    min_timestamp: int | None = None
    max_timestamp: int | None = None
    search_radius_m: int = Field(default=1000, gt=0)

    @field_validator("keyword")
    @classmethod
    def _normalize_keyword(cls, value: str | None) -> str | None:
        return normalize_keyword(value)

    @model_validator(mode="after")
    def _validate_active_fields(self) -> "SearchParameters":
        if self.mode is QueryMode.KEYWORD and not self.keyword:
            raise ValueError("keyword search requires a non-empty query")
        if self.mode is QueryMode.COORDINATE and (self.latitude is None or self.longitude is None):
            raise ValueError("coordinate search requires both lat and lng")
        # Coordinates are inactive in keyword mode; there an out-of-range pair just has no origin.
        if self.mode is QueryMode.COORDINATE and not _in_range(self.latitude, self.longitude):
            raise ValueError("lat must be within [-90, 90] and lng within [-180, 180]")
        return self

    @property
    def origin(self) -> GeoPoint | None:
        if self.latitude is None or self.longitude is None:
            return None
        if not _in_range(self.latitude, self.longitude):
            return None
        return GeoPoint(lat=self.latitude, lon=self.longitude)

    @property
    def sort_keys(self) -> tuple[SortKey, ...]:
        # Keyword results already matched the tag upstream, so tag rank cannot differentiate them.
        if self.mode is QueryMode.KEYWORD:
            return KEYWORD_SORT_KEYS
        return COORDINATE_SORT_KEYS


class SearchRequest(BaseModel):
    """The flat caller-facing parameter object.

    `city`, `state`, `date` and `street` are accepted for compatibility with the UI
    payload but are not used by the search core.
    """

    model_config = ConfigDict(populate_by_name=True)

    city: str | None = None
    state: str | None = None
    query: str | None = None
    date: str | None = None
    street: str | None = None
    lat: float | None = Field(default=None, allow_inf_nan=False)
    lng: float | None = Field(default=None, allow_inf_nan=False)
    min_date: float | None = Field(default=None, alias="minDate", allow_inf_nan=False)
    max_date: float | None = Field(default=None, alias="maxDate", allow_inf_nan=False)
    distance: int | None = None
    call_type: str | None = Field(default=None, alias="callType")

    @property
    def mode(self) -> QueryMode:
        if (self.call_type or "").strip().lower() == "query":
            return QueryMode.KEYWORD
        return QueryMode.COORDINATE

    def to_parameters(self, *, default_distance_m: int = 1000) -> SearchParameters:
        """Build the immutable query context (raises `ValueError` on invalid input)."""
        return SearchParameters(
            mode=self.mode,
            keyword=self.query,
            latitude=self.lat,
            longitude=self.lng,
            min_timestamp=epoch_ms_to_seconds(self.min_date),
            max_timestamp=epoch_ms_to_seconds(self.max_date),
            search_radius_m=self.distance if self.distance is not None else default_distance_m,
        )


class RecordLocation(BaseModel):
    latitude: float | None = None
    longitude: float | None = None
    name: str | None = None
    id: str | None = None


class LikesSummary(BaseModel):
    count: int = 0


class CaptionSummary(BaseModel):
    text: str | None = None


class EnrichedRecord(BaseModel):
    """A trimmed upstream media record plus the computed ranking attributes."""

    id: str | None = None
    type: str | None = None
    link: str | None = None
    created_time: str | None = None
    tags: list[str] = Field(default_factory=list)
    location: RecordLocation | None = None
    images: dict[str, Any] | None = None
    videos: dict[str, Any] | None = None
    user: dict[str, Any] | None = None
    likes: LikesSummary | None = None
    caption: CaptionSummary | None = None

    tag_match_rank: int = Field(..., ge=0, le=1)
    distance_km: float = Field(..., ge=0)


class SearchResponse(BaseModel):
    """Ranked records plus request metadata (API output)."""

    results: list[EnrichedRecord]
    meta: dict[str, Any] = Field(default_factory=dict)
