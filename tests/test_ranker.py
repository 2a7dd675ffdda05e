import pytest

from photoscope.domain.models import EnrichedRecord
from photoscope.ranking import rank


def _rec(record_id: str, tag_match_rank: int, distance_km: float) -> EnrichedRecord:
    return EnrichedRecord(id=record_id, tag_match_rank=tag_match_rank, distance_km=distance_km)


def test_rank_is_stable_for_full_ties():
    records = [_rec("C", 1, 5.0), _rec("A", 1, 5.0), _rec("B", 1, 5.0)]
    out = rank(records, ["tag_match_rank", "distance_km"])
    assert [r.id for r in out] == ["C", "A", "B"]


def test_rank_applies_keys_in_priority_order():
    records = [
        _rec("far-match", 0, 50.0),
        _rec("near-miss", 1, 1.0),
        _rec("near-match", 0, 2.0),
        _rec("unknown-match", 0, 10_000_000),
    ]
    out = rank(records, ["tag_match_rank", "distance_km"])
    assert [r.id for r in out] == ["near-match", "far-match", "unknown-match", "near-miss"]


def test_rank_distance_only_ignores_tag_match():
    records = [_rec("a", 0, 9.0), _rec("b", 1, 1.0), _rec("c", 1, 9.0)]
    out = rank(records, ["distance_km"])
    assert [r.id for r in out] == ["b", "a", "c"]


def test_rank_does_not_mutate_input():
    records = [_rec("b", 1, 2.0), _rec("a", 0, 1.0)]
    out = rank(records, ["tag_match_rank"])
    assert [r.id for r in records] == ["b", "a"]
    assert [r.id for r in out] == ["a", "b"]


def test_rank_rejects_unknown_keys():
    with pytest.raises(ValueError, match="likes"):
        rank([_rec("a", 0, 1.0)], ["likes"])
