"""Tests for page slicing and the continuation flag."""

import pytest

from errors import StoreUnavailable
from services.filters import MatchAll, MatchNone
from services.pagination import fetch_page
from services.query_planner import SearchQuery, plan


def _fill(store, count, **attrs):
    for i in range(1, count + 1):
        store.add_product(i, title=f"Product {i:04d}", attributes=dict(attrs))


@pytest.mark.parametrize("page_size", [1, 3, 7, 10, 25])
def test_pages_partition_the_result_set(memory_store, page_size):
    _fill(memory_store, 23)
    seen, page = [], 1
    while True:
        result = fetch_page(memory_store, MatchAll(), page, page_size)
        seen.extend(result.ids)
        if not result.has_more:
            break
        page += 1
    assert len(seen) == len(set(seen)) == 23
    assert sorted(seen) == list(range(1, 24))


def test_full_page_of_501_matches(memory_store):
    _fill(memory_store, 501)
    result = fetch_page(memory_store, MatchAll(), 1, 500)
    assert len(result.ids) == 500
    assert result.has_more is True
    assert result.total == 501


def test_full_page_of_exactly_500_matches(memory_store):
    _fill(memory_store, 500)
    result = fetch_page(memory_store, MatchAll(), 1, 500)
    assert len(result.ids) == 500
    assert result.has_more is False


def test_page_past_the_end_is_empty(memory_store):
    _fill(memory_store, 5)
    result = fetch_page(memory_store, MatchAll(), 4, 2)
    assert result.ids == []
    assert result.has_more is False
    assert result.total == 5


def test_bad_page_size_is_clamped(memory_store):
    _fill(memory_store, 3)
    result = fetch_page(memory_store, MatchAll(), 1, 0)
    assert result.page_size == 1
    assert result.ids == [1]
    assert result.has_more is True


def test_match_none_skips_the_store():
    class _Exploding:
        def query(self, *args):
            raise AssertionError("store should not be called")

    result = fetch_page(_Exploding(), MatchNone(), 1, 10)
    assert result.ids == [] and result.has_more is False


def test_duplicate_ids_from_store_are_dropped():
    class _DupStore:
        def query(self, expr, offset, limit):
            return [3, 3, 1, 2, 1], 3

    result = fetch_page(_DupStore(), MatchAll(), 1, 10)
    assert result.ids == [3, 1, 2]


def test_store_failure_propagates():
    class _DownStore:
        def query(self, expr, offset, limit):
            raise StoreUnavailable("connection refused")

    with pytest.raises(StoreUnavailable) as exc:
        fetch_page(_DownStore(), MatchAll(), 1, 10)
    assert exc.value.retryable


def test_same_request_same_page(memory_store):
    _fill(memory_store, 40, vendor_name="Acme")
    query = SearchQuery(q="acme", page=2, page_size=15)
    first = fetch_page(memory_store, plan(query), query.page, query.page_size)
    second = fetch_page(memory_store, plan(query), query.page, query.page_size)
    assert first == second
    assert first.ids == list(range(16, 31))
