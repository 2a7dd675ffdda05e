import copy
import math

from photoscope.domain.models import QueryMode, SearchParameters
from photoscope.enrichment import (
    SENTINEL_DISTANCE_KM,
    RecordEnricher,
    apply_tag_match,
    make_distance_step,
    trim_record,
)


def _raw(record_id: str, *, tags=None, location=None, **extra):
    raw = {"id": record_id, "tags": tags if tags is not None else [], "location": location}
    raw.update(extra)
    return raw


def test_tag_match_rank_scenario_pizza_night():
    params = SearchParameters(mode=QueryMode.KEYWORD, keyword="pizza night")
    enricher = RecordEnricher()

    first = enricher.enrich(_raw("1", tags=["PizzaNight", "food"]), params)
    second = enricher.enrich(_raw("2", tags=["food"]), params)

    assert first.tag_match_rank == 0
    assert second.tag_match_rank == 1


def test_tag_match_is_a_substring_match():
    params = SearchParameters(mode=QueryMode.KEYWORD, keyword="pizza")
    draft = apply_tag_match({"tags": ["bestpizzaever"]}, params)
    assert draft["tag_match_rank"] == 0


def test_missing_or_malformed_tags_rank_as_no_match():
    params = SearchParameters(mode=QueryMode.KEYWORD, keyword="pizza")
    enricher = RecordEnricher()

    assert enricher.enrich({"id": "a"}, params).tag_match_rank == 1
    assert enricher.enrich({"id": "b", "tags": None}, params).tag_match_rank == 1
    assert enricher.enrich({"id": "c", "tags": "pizza"}, params).tag_match_rank == 1
    assert enricher.enrich({"id": "d", "tags": [None, 3, "pizza"]}, params).tag_match_rank == 0


def test_coordinate_mode_without_keyword_ranks_everything_as_no_match():
    params = SearchParameters(mode=QueryMode.COORDINATE, latitude=40.0, longitude=-73.0)
    record = RecordEnricher().enrich(_raw("1", tags=["null", "pizza"]), params)
    assert record.tag_match_rank == 1


def test_null_location_gets_sentinel_distance():
    params = SearchParameters(mode=QueryMode.COORDINATE, latitude=40.0, longitude=-73.0)
    record = RecordEnricher().enrich(_raw("1", location=None), params)
    assert record.distance_km == SENTINEL_DISTANCE_KM == 10_000_000


def test_unusable_locations_get_sentinel_distance():
    params = SearchParameters(mode=QueryMode.COORDINATE, latitude=40.0, longitude=-73.0)
    enricher = RecordEnricher()
    for location in ["somewhere", {"latitude": "abc", "longitude": 1}, {"latitude": 95.0, "longitude": 0.0}, {}]:
        assert enricher.enrich(_raw("x", location=location), params).distance_km == SENTINEL_DISTANCE_KM


def test_no_search_origin_gets_sentinel_distance():
    params = SearchParameters(mode=QueryMode.KEYWORD, keyword="pizza")
    record = RecordEnricher().enrich(_raw("1", location={"latitude": 40.0, "longitude": -73.0}), params)
    assert record.distance_km == SENTINEL_DISTANCE_KM


def test_coordinate_mode_distances_are_finite_or_sentinel():
    params = SearchParameters(mode=QueryMode.COORDINATE, latitude=40.0, longitude=-73.0)
    raws = [
        _raw("same", location={"latitude": 40.0, "longitude": -73.0}),
        _raw("near", location={"latitude": "40.01", "longitude": "-73.01"}),
        _raw("far", location={"latitude": -33.86, "longitude": 151.2}),
        _raw("none", location=None),
    ]
    records = RecordEnricher().enrich_all(raws, params)

    assert records[0].distance_km == 0
    for r in records[1:3]:
        assert math.isfinite(r.distance_km) and 0 < r.distance_km < SENTINEL_DISTANCE_KM
    assert records[3].distance_km == SENTINEL_DISTANCE_KM


def test_distance_step_uses_configured_sentinel():
    params = SearchParameters(mode=QueryMode.COORDINATE, latitude=1.0, longitude=1.0)
    step = make_distance_step(123.0)
    assert step({"location": None}, params)["distance_km"] == 123.0


def test_trim_record_builds_allowlisted_copy():
    raw = {
        "id": 987654321,
        "type": "image",
        "link": "https://example.test/p/1",
        "created_time": "1420070400",
        "attribution": None,
        "comments": {"count": 2, "data": [{"text": "nice"}]},
        "filter": "Valencia",
        "tags": ["sf", "food"],
        "location": {"latitude": 37.78, "longitude": -122.41, "name": "Market St", "id": 42},
        "likes": {"count": 5, "data": [{"username": "a"}], "user_has_liked": False},
        "users_in_photo": [{"user": {"username": "b"}}],
        "user_has_liked": False,
        "caption": {"text": "dinner", "created_time": "1", "from": {"username": "c"}, "id": "9"},
        "images": {"thumbnail": {"url": "https://example.test/t.jpg"}},
        "user": {"username": "owner"},
        "unknown_field": "dropped",
    }
    original = copy.deepcopy(raw)

    trimmed = trim_record(raw)

    assert raw == original
    assert set(trimmed) == {
        "id",
        "type",
        "link",
        "created_time",
        "images",
        "videos",
        "user",
        "tags",
        "location",
        "likes",
        "caption",
    }
    assert trimmed["id"] == "987654321"
    assert trimmed["likes"] == {"count": 5}
    assert trimmed["caption"] == {"text": "dinner"}
    assert trimmed["location"]["id"] == "42"
    assert trimmed["videos"] is None


def test_enriched_record_omits_extraneous_fields():
    params = SearchParameters(mode=QueryMode.COORDINATE, latitude=37.78, longitude=-122.41)
    raw = _raw(
        "1",
        tags=["sf"],
        location={"latitude": 37.78, "longitude": -122.41},
        attribution={"x": 1},
        comments={"count": 0},
        filter="Normal",
        likes={"count": 3, "data": []},
    )
    dumped = RecordEnricher().enrich(raw, params).model_dump()

    for key in ["attribution", "comments", "filter", "users_in_photo", "user_has_liked"]:
        assert key not in dumped
    assert dumped["likes"] == {"count": 3}
    assert dumped["distance_km"] == 0


def test_non_mapping_record_degrades_to_empty_record():
    params = SearchParameters(mode=QueryMode.COORDINATE, latitude=1.0, longitude=1.0)
    record = RecordEnricher().enrich(None, params)
    assert record.id is None
    assert record.tag_match_rank == 1
    assert record.distance_km == SENTINEL_DISTANCE_KM


def test_custom_step_sequence_runs_in_order():
    params = SearchParameters(mode=QueryMode.KEYWORD, keyword="pizza")
    seen: list[str] = []

    def marker(name):
        def step(draft, _params):
            seen.append(name)
            return draft

        return step

    enricher = RecordEnricher(
        [trim_record, marker("after_trim"), apply_tag_match, make_distance_step(), marker("last")]
    )
    enricher.enrich(_raw("1"), params)
    assert seen == ["after_trim", "last"]
