"""Tests for the spreadsheet import job."""

import pandas as pd

from crud import product as crud_product
from jobs.import_catalog import import_catalog, read_sheet


def _attrs(product):
    return {a.name: a.value for a in product.attributes}


def test_import_creates_then_updates(db, make_category):
    make_category("Cables", slug="cables")
    df = pd.DataFrame([
        {"title": "Widget", "slug": "widget", "status": "", "categories": "cables", "internal_sku": "W-1", "vendor_name": "Acme"},
        {"title": "Gadget", "slug": "", "status": "draft", "categories": "", "internal_sku": "G-1", "vendor_name": ""},
    ])
    results = import_catalog(db, df)
    assert results == {"created": 2, "updated": 0, "errors": []}

    widget = crud_product.get_product_by_slug(db, "widget")
    assert _attrs(widget) == {"internal_sku": "W-1", "vendor_name": "Acme"}
    assert [link.category.name for link in widget.category_links] == ["Cables"]
    assert crud_product.get_product_by_slug(db, "gadget").status == "draft"

    update = pd.DataFrame([{"title": "", "slug": "widget", "vendor_name": "Globex", "categories": ""}])
    results = import_catalog(db, update)
    assert results["updated"] == 1

    db.expire_all()
    widget = crud_product.get_product_by_slug(db, "widget")
    assert widget.title == "Widget"
    assert _attrs(widget) == {"internal_sku": "W-1", "vendor_name": "Globex"}
    assert len(widget.category_links) == 1


def test_import_reports_bad_rows(db):
    df = pd.DataFrame([
        {"title": "", "slug": "", "internal_sku": "NO-TITLE"},
        {"title": "Widget", "slug": "", "categories": "missing-cat", "status": "bogus"},
        {"title": "Fine", "slug": "", "colour": "red"},
    ])
    results = import_catalog(db, df)
    assert results["created"] == 1
    assert len(results["errors"]) == 3
    assert results["errors"][0].startswith("Row 2:")
    assert any("missing-cat" in e for e in results["errors"])


def test_read_sheet_lowercases_columns(tmp_path):
    path = tmp_path / "catalog.csv"
    path.write_text("Title,Internal_SKU\nWidget,W-1\n")
    df = read_sheet(str(path))
    assert list(df.columns) == ["title", "internal_sku"]
    assert df.iloc[0]["internal_sku"] == "W-1"


def test_unusable_category_reference_does_not_abort_import(db, make_category):
    make_category("Cables", slug="cables")
    df = pd.DataFrame([
        {"title": "Widget", "slug": "", "categories": "², cables"},
        {"title": "Gadget", "slug": "", "categories": "9" * 30},
    ])
    results = import_catalog(db, df)
    assert results["created"] == 2
    assert len(results["errors"]) == 2

    widget = crud_product.get_product_by_slug(db, "widget")
    assert [link.category.slug for link in widget.category_links] == ["cables"]
