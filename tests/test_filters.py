"""Tests for the text matcher and in-memory filter evaluation."""

import pytest

from services.filters import (
    And,
    AttributeContains,
    InCategory,
    MatchAll,
    MatchNone,
    Or,
    ProductRecord,
    TitleContains,
    all_of,
    any_of,
    build_matcher,
    parse_id,
)


def _record(**kwargs):
    defaults = {"id": 1, "title": "Widget", "status": "published"}
    defaults.update(kwargs)
    return ProductRecord(**defaults)


def test_empty_query_matches_everything():
    matcher = build_matcher("   ")
    assert matcher.matches_everything
    assert matcher.matches(None)
    assert matcher.matches("anything")


def test_matcher_trims_and_ignores_case():
    matcher = build_matcher("  AbC ")
    assert matcher.term == "AbC"
    assert matcher.matches("xxabcxx")
    assert matcher.matches("ABC")
    assert not matcher.matches("ab c")
    assert not matcher.matches(None)


def test_matcher_is_literal_substring():
    matcher = build_matcher("50%_off")
    assert matcher.matches("get 50%_off today")
    assert not matcher.matches("get 50 percent off")


def test_attribute_and_category_nodes():
    record = _record(
        attributes={"vendor_name": "Vendor-A Corp"},
        category_ids=(5,),
        category_slugs=("cables",),
    )
    assert AttributeContains("vendor_name", build_matcher("vendor-a")).evaluate(record)
    assert not AttributeContains("vendor_sku", build_matcher("vendor-a")).evaluate(record)
    assert InCategory(5).evaluate(record)
    assert InCategory("cables").evaluate(record)
    assert not InCategory(6).evaluate(record)


def test_combinators():
    record = _record()
    yes, no = TitleContains(build_matcher("widg")), TitleContains(build_matcher("gadget"))
    assert Or((no, yes)).evaluate(record)
    assert not And((no, yes)).evaluate(record)


def test_all_of_simplifies():
    title = TitleContains(build_matcher("x"))
    assert all_of() == MatchAll()
    assert all_of(MatchAll(), title) == title
    assert isinstance(all_of(title, MatchNone("nope")), MatchNone)


def test_any_of_empty_matches_nothing():
    assert isinstance(any_of(), MatchNone)


@pytest.mark.parametrize("raw, expected", [
    ("42", 42),
    (" 7 ", 7),
    (0, 0),
    ("²", None),
    ("٣", None),
    ("-1", None),
    ("", None),
    (None, None),
    (True, None),
    ("9" * 30, None),
    (2 ** 63 - 1, 2 ** 63 - 1),
    (2 ** 63, None),
])
def test_parse_id(raw, expected):
    assert parse_id(raw) == expected
