from __future__ import annotations

# This module is the "orchestrator" for one photo search.
# It wires together:
# - the immutable query context (SearchParameters)
# - ingestion (one upstream call through InstagramClient)
# - enrichment (trim, tag match, distance per record)
# - ranking (stable multi-key sort)
#
# Every call gets its own SearchParameters value; nothing about a query is stored on
# the dispatcher, so concurrent runs cannot see each other's context.

import logging
import threading
from typing import Callable

from photoscope.config.settings import Settings, get_settings
from photoscope.core.errors import ParseError, TransportError
from photoscope.domain.models import EnrichedRecord, QueryMode, SearchParameters
from photoscope.enrichment.enricher import RecordEnricher
from photoscope.ingestion.instagram_client import InstagramClient, UpstreamRequest
from photoscope.ranking.ranker import rank

logger = logging.getLogger(__name__)

SearchCallback = Callable[[Exception | None, list[EnrichedRecord] | None], None]


class QueryDispatcher:
    """Builds the upstream request for a query and turns the response into ranked records."""

    def __init__(self, client: InstagramClient, enricher: RecordEnricher | None = None):
        self._client = client
        self._enricher = enricher or RecordEnricher()

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "QueryDispatcher":
        settings = settings or get_settings()
        return cls(InstagramClient(settings), RecordEnricher.from_settings(settings))

    def build_request(self, params: SearchParameters) -> UpstreamRequest:
        """Pick the upstream query shape for `params.mode`."""
        if params.mode is QueryMode.KEYWORD:
            # The model validator guarantees a keyword in this mode.
            return self._client.tag_media_request(params.keyword or "")
        return self._client.media_search_request(
            lat=float(params.latitude),
            lng=float(params.longitude),
            min_timestamp=params.min_timestamp,
            max_timestamp=params.max_timestamp,
            distance_m=params.search_radius_m,
        )

    def search(self, params: SearchParameters) -> list[EnrichedRecord]:
        """Run the pipeline and return ranked records.

        Raises:
            TransportError: The single upstream call failed.
            ParseError: The upstream body could not be read as a record collection.
        """
        request = self.build_request(params)
        logger.info("Searching %s (mode=%s)", request.endpoint, params.mode.value)

        raw_records = self._client.fetch(request)

        enriched = self._enricher.enrich_all(raw_records, params)
        return rank(enriched, params.sort_keys)

    def run(self, params: SearchParameters, callback: SearchCallback) -> None:
        """Run the pipeline and deliver `(error, records)` to `callback` exactly once.

        Transport and parse failures arrive as `(error, None)`; success as `(None, records)`.
        Anything else (bad configuration, programming errors) propagates to the caller.
        """
        try:
            records = self.search(params)
        except (TransportError, ParseError) as exc:
            logger.warning("Search failed: %s", exc)
            callback(exc, None)
            return
        callback(None, records)

    def start(self, params: SearchParameters, callback: SearchCallback) -> threading.Thread:
        """Run `run(params, callback)` on a daemon thread and return the started thread."""
        t = threading.Thread(target=self.run, args=(params, callback), daemon=True)
        t.start()
        return t
