from photoscope.ranking.ranker import SORT_KEYS, rank

__all__ = ["SORT_KEYS", "rank"]
