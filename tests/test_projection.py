"""Tests for list rows and the details view."""

from services.projection import project, project_detail


def test_numeric_owner_resolves_to_display_name(memory_store):
    memory_store.add_user(42, "Jane Doe")
    memory_store.add_product(1, title="Widget", attributes={"product_owner": "42"})
    assert project(memory_store, 1).attributes["product_owner"] == "Jane Doe"


def test_text_owner_passes_through(memory_store):
    memory_store.add_product(1, title="Widget", attributes={"product_owner": "Acme Corp"})
    assert project(memory_store, 1).attributes["product_owner"] == "Acme Corp"


def test_unknown_user_id_keeps_raw_value(memory_store):
    memory_store.add_product(1, title="Widget", attributes={"product_owner": "77"})
    assert project(memory_store, 1).attributes["product_owner"] == "77"


def test_absent_and_empty_values_are_distinct(memory_store):
    memory_store.add_product(1, title="Widget", attributes={"vendor_name": ""})
    row = project(memory_store, 1)
    assert row.attributes["vendor_name"] == ""
    assert row.attributes["vendor_sku"] is None
    assert row.categories is None


def test_row_carries_locator_and_categories(memory_store):
    memory_store.add_category(2, "Cables")
    memory_store.add_category(1, "Adapters")
    memory_store.add_product(1, title="Widget", categories=[2, 1], slug="widget")
    row = project(memory_store, 1)
    assert row.categories == "Cables, Adapters"
    assert row.locator == "/products/widget/"
    assert row.slug == "widget"


def test_missing_title_does_not_raise(memory_store):
    memory_store.add_product(1, title=None, attributes={"internal_sku": "X-1"})
    row = project(memory_store, 1)
    assert row.title is None
    assert row.attributes["internal_sku"] == "X-1"


def test_vanished_product_projects_empty_row(memory_store):
    row = project(memory_store, 999)
    assert row.id == 999
    assert row.title is None
    assert all(value is None for value in row.attributes.values())


def test_detail_formats_by_kind(memory_store):
    memory_store.add_user(7, "Sam Smith")
    memory_store.add_product(1, title="Widget", attributes={
        "launch_date": "2024-01-15",
        "product_url": "https://example.com/widget",
        "product_owner": "7",
        "detail": "",
    })
    detail = project_detail(memory_store, 1)
    fields = {f.name: f for f in detail.fields}

    assert fields["launch_date"].display == "January 15, 2024"
    assert fields["launch_date"].raw == "2024-01-15"
    assert fields["product_url"].is_link is True
    assert fields["product_owner"].display == "Sam Smith"
    assert fields["detail"].present is True
    assert fields["detail"].display == ""
    assert fields["vendor_name"].present is False
    assert fields["vendor_name"].display is None
    assert len(detail.fields) == 13


def test_detail_keeps_unparseable_date(memory_store):
    memory_store.add_product(1, title="Widget", attributes={"launch_date": "Q3 2025"})
    fields = {f.name: f for f in project_detail(memory_store, 1).fields}
    assert fields["launch_date"].display == "Q3 2025"


def test_non_decimal_digit_owner_passes_through(memory_store):
    memory_store.add_product(1, title="Widget", attributes={"product_owner": "²"})
    assert project(memory_store, 1).attributes["product_owner"] == "²"


def test_oversized_owner_id_passes_through(memory_store):
    owner = "9" * 30
    memory_store.add_product(1, title="Widget", attributes={"product_owner": owner})
    assert project(memory_store, 1).attributes["product_owner"] == owner
    fields = {f.name: f for f in project_detail(memory_store, 1).fields}
    assert fields["product_owner"].display == owner
