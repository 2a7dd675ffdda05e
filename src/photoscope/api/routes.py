"""
API routes.

Endpoints:
- GET `/api/photos`: the flat-parameter photo search (keyword or coordinate mode).
"""

from __future__ import annotations

import time
import uuid
from functools import lru_cache

from fastapi import APIRouter, HTTPException, Query
from pydantic import ValidationError

from photoscope.config.settings import get_settings
from photoscope.core.errors import ParseError, PhotoscopeError, TransportError
from photoscope.core.upstream_meta import capture_upstream_meta
from photoscope.domain.models import EnrichedRecord, SearchRequest, SearchResponse
from photoscope.search.dispatcher import QueryDispatcher

router = APIRouter()


@lru_cache
def _dispatcher() -> QueryDispatcher:
    return QueryDispatcher.from_settings(get_settings())


def _validation_message(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return str(exc)
    return "; ".join(str(e.get("msg", "")) for e in errors)


@router.get("/api/photos", response_model=SearchResponse)
def get_photos(
    city: str | None = None,
    state: str | None = None,
    query: str | None = None,
    date: str | None = None,
    street: str | None = None,
    lat: float | None = None,
    lng: float | None = None,
    min_date: float | None = Query(default=None, alias="minDate"),
    max_date: float | None = Query(default=None, alias="maxDate"),
    distance: int | None = None,
    call_type: str | None = Query(default=None, alias="callType"),
) -> SearchResponse:
    """Search photos by keyword (`callType=query`) or by coordinate and time window."""
    t0 = time.monotonic()
    request_id = uuid.uuid4().hex
    settings = get_settings()

    try:
        params = SearchRequest(
            city=city,
            state=state,
            query=query,
            date=date,
            street=street,
            lat=lat,
            lng=lng,
            min_date=min_date,
            max_date=max_date,
            distance=distance,
            call_type=call_type,
        ).to_parameters(default_distance_m=settings.instagram.default_distance_m)
    except ValidationError as e:
        raise HTTPException(
            status_code=400,
            detail={"code": "VALIDATION_ERROR", "message": _validation_message(e)},
        ) from e

    outcome: dict[str, object] = {}

    def _done(error: Exception | None, records: list[EnrichedRecord] | None) -> None:
        outcome["error"] = error
        outcome["records"] = records

    try:
        with capture_upstream_meta() as upstream:
            _dispatcher().run(params, _done)
    except PhotoscopeError as e:
        raise HTTPException(
            status_code=500,
            detail={"code": "CONFIG_ERROR", "message": str(e)},
        ) from e

    error = outcome.get("error")
    if isinstance(error, ParseError):
        raise HTTPException(
            status_code=502,
            detail={"code": "UPSTREAM_PARSE_ERROR", "message": str(error)},
        ) from error
    if isinstance(error, TransportError):
        raise HTTPException(
            status_code=502,
            detail={"code": "UPSTREAM_ERROR", "message": str(error)},
        ) from error

    records = outcome.get("records") or []
    meta = {
        "debug": {
            "request_id": request_id,
            "api_ms": int((time.monotonic() - t0) * 1000),
        },
        "mode": params.mode.value,
        "sort_keys": list(params.sort_keys),
        "count": len(records),
        "upstream": upstream.calls,
    }
    return SearchResponse(results=records, meta=meta)
