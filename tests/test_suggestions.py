from datetime import datetime, timedelta

import pytest

from label_calc.suggestions import SuggestionCache

START = datetime(2024, 1, 1, 8, 0, 0)


def values(entries):
    return [entry.value for entry in entries]


def test_prefix_matches_rank_before_frequency():
    cache = SuggestionCache()
    for _ in range(3):
        cache.record("part_code", "X-ABC", now=START)
    cache.record("part_code", "ABC-1", now=START)
    assert values(cache.suggest("part_code", "abc")) == ["ABC-1", "X-ABC"]


def test_frequency_then_recency():
    cache = SuggestionCache()
    cache.record("notes", "rework", now=START)
    cache.record("notes", "rush", now=START + timedelta(minutes=1))
    cache.record("notes", "review", now=START)
    cache.record("notes", "review", now=START)
    assert values(cache.suggest("notes", "r")) == ["review", "rush", "rework"]


def test_blank_values_are_ignored_and_limit_applies():
    cache = SuggestionCache()
    cache.record("batch_number", "   ")
    assert cache.suggest("batch_number", "") == []
    for index in range(15):
        cache.record("batch_number", f"L{index:03d}", now=START)
    assert len(cache.suggest("batch_number", "l")) == 10
    assert len(cache.suggest("batch_number", "l", limit=3)) == 3


def test_capacity_evicts_least_used_entry():
    cache = SuggestionCache(capacity=2)
    cache.record("notes", "a", now=START)
    cache.record("notes", "a", now=START)
    cache.record("notes", "b", now=START)
    cache.record("notes", "c", now=START + timedelta(seconds=1))
    assert sorted(values(cache.suggest("notes", ""))) == ["a", "c"]


def test_unknown_field():
    cache = SuggestionCache()
    with pytest.raises(KeyError):
        cache.record("colour", "red")
    with pytest.raises(KeyError):
        cache.suggest("colour", "r")
