"""
Instagram media ingestion client (v1-style endpoints).

This module is responsible only for:
- building the two upstream request shapes (tag search, location + time-window search),
- issuing exactly one GET per query with the pre-issued access token,
- returning the raw `data` record array, or raising `TransportError` / `ParseError`.

It intentionally does not trim, enrich or sort records; see `photoscope.enrichment`
and `photoscope.ranking` for that.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Literal
from urllib.parse import quote

import httpx

from photoscope.config.settings import Settings
from photoscope.core.errors import MissingCredentialsError, ParseError, TransportError, UpstreamStatusError
from photoscope.core.http import get_json
from photoscope.core.upstream_meta import record_upstream_call

logger = logging.getLogger(__name__)

EndpointName = Literal["tag_media_recent", "media_search"]


@dataclass(frozen=True)
class UpstreamRequest:
    """One upstream GET, minus the access token (safe to log)."""

    endpoint: EndpointName
    url: str
    params: dict[str, Any] = field(default_factory=dict)


class InstagramClient:
    """Single-attempt client for the media endpoints."""

    def __init__(self, settings: Settings):
        self._settings = settings

    @property
    def base_url(self) -> str:
        return self._settings.instagram.base_url.rstrip("/")

    def tag_media_request(self, keyword: str) -> UpstreamRequest:
        """`GET /tags/{keyword}/media/recent`."""
        return UpstreamRequest(
            endpoint="tag_media_recent",
            url=f"{self.base_url}/tags/{quote(keyword, safe='')}/media/recent",
        )

    def media_search_request(
        self,
        *,
        lat: float,
        lng: float,
        min_timestamp: int | None,
        max_timestamp: int | None,
        distance_m: int,
    ) -> UpstreamRequest:
        """`GET /media/search` around a coordinate; absent timestamps are left out."""
        params: dict[str, Any] = {"lat": lat, "lng": lng}
        if max_timestamp is not None:
            params["max_timestamp"] = max_timestamp
        if min_timestamp is not None:
            params["min_timestamp"] = min_timestamp
        params["distance"] = distance_m
        return UpstreamRequest(endpoint="media_search", url=f"{self.base_url}/media/search", params=params)

    def _require_token(self) -> str:
        token = self._settings.instagram.access_token
        if not token:
            raise MissingCredentialsError(
                "Instagram access token is not configured. Set INSTAGRAM_ACCESS_TOKEN."
            )
        return token

    def fetch(self, request: UpstreamRequest) -> list[Any]:
        """Issue `request` once and return the raw `data` array.

        Raises:
            MissingCredentialsError: No access token configured (nothing is sent).
            TransportError: Network failure or non-2xx status (`UpstreamStatusError`).
            ParseError: Body is not JSON or has no `data` array.
        """
        params = {"access_token": self._require_token(), **request.params}
        t0 = time.monotonic()

        # Messages are built here because httpx messages embed the URL (and so the token).
        try:
            payload = get_json(
                request.url,
                params=params,
                timeout_seconds=self._settings.app.http_timeout_seconds,
            )
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            logger.warning("Upstream %s returned status=%s", request.endpoint, status)
            record_upstream_call({"endpoint": request.endpoint, "status": status, "error": "status"})
            raise UpstreamStatusError(
                f"{request.endpoint} request returned HTTP {status}", status_code=status
            ) from exc
        except httpx.HTTPError as exc:
            logger.warning("Upstream %s transport error: %s", request.endpoint, type(exc).__name__)
            record_upstream_call({"endpoint": request.endpoint, "status": None, "error": "transport"})
            raise TransportError(f"{request.endpoint} request failed: {type(exc).__name__}") from exc
        except ValueError as exc:
            logger.warning("Upstream %s returned a non-JSON body", request.endpoint)
            record_upstream_call({"endpoint": request.endpoint, "error": "parse"})
            raise ParseError(f"{request.endpoint} response is not valid JSON") from exc

        records = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(records, list):
            record_upstream_call({"endpoint": request.endpoint, "error": "parse"})
            raise ParseError(f"{request.endpoint} response has no 'data' array")

        elapsed_ms = int((time.monotonic() - t0) * 1000)
        logger.info("Upstream %s returned %d records in %dms", request.endpoint, len(records), elapsed_ms)
        record_upstream_call(
            {
                "endpoint": request.endpoint,
                "record_count": len(records),
                "elapsed_ms": elapsed_ms,
            }
        )
        return records
