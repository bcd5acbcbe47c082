# jobs/import_catalog.py

import logging
import sys
from typing import Dict, List, Optional

import pandas as pd
from sqlalchemy.orm import Session

import schemas
from attributes import is_known
from crud import category as crud_category
from crud import product as crud_product
from errors import CatalogError

logger = logging.getLogger(__name__)

PRODUCT_COLUMNS = {"title", "slug", "status", "categories"}


def read_sheet(path: str) -> pd.DataFrame:
    if str(path).lower().endswith(".xlsx"):
        df = pd.read_excel(path, dtype=str)
    else:
        df = pd.read_csv(path, dtype=str, keep_default_na=False)
    df.columns = df.columns.str.strip().str.lower()
    return df


def _cell(row: pd.Series, column: str) -> Optional[str]:
    if column not in row:
        return None
    value = row[column]
    if pd.isna(value):
        return None
    return str(value)


def _resolve_categories(db: Session, cell: Optional[str], errors: List[str], line: int) -> Optional[List[int]]:
    if cell is None or not cell.strip():
        return None
    ids = []
    for ref in (part.strip() for part in cell.split(",")):
        if not ref:
            continue
        category = crud_category.find_category(db, ref)
        if category is None:
            # categories are managed elsewhere; unknown ones are skipped
            errors.append(f"Row {line}: unknown category {ref!r} skipped")
            continue
        ids.append(category.id)
    return ids


def import_catalog(db: Session, df: pd.DataFrame) -> Dict:
    """
    Creates or updates products from a sheet. Rows are matched to existing
    products by slug; everything else creates a new product.
    """
    logger.info("[catalog-import] Starting import of %d rows", len(df))
    attribute_columns = [c for c in df.columns if c not in PRODUCT_COLUMNS and is_known(c)]
    ignored = [c for c in df.columns if c not in PRODUCT_COLUMNS and not is_known(c)]
    if ignored:
        logger.warning("[catalog-import] Ignoring unknown columns: %s", ", ".join(ignored))

    results = {"created": 0, "updated": 0, "errors": []}

    for index, row in df.iterrows():
        line = int(index) + 2  # header is line 1
        slug = _cell(row, "slug")
        existing = crud_product.get_product_by_slug(db, slug) if slug else None

        attributes = {}
        for column in attribute_columns:
            value = _cell(row, column)
            # blank cells leave the stored value alone
            if value is not None and value != "":
                attributes[column] = value

        payload = schemas.ProductWrite(
            title=_cell(row, "title") or None,
            slug=slug or None,
            status=_cell(row, "status") or None,
            attributes=attributes,
            categories=_resolve_categories(db, _cell(row, "categories"), results["errors"], line),
        )
        try:
            crud_product.save_product(db, payload, product_id=existing.id if existing else None)
        except CatalogError as e:
            results["errors"].append(f"Row {line}: {e}")
            logger.warning("[catalog-import] Row %d failed: %s", line, e)
            continue

        if existing:
            results["updated"] += 1
        else:
            results["created"] += 1

    logger.info(
        "[catalog-import] Done: %d created, %d updated, %d errors",
        results["created"], results["updated"], len(results["errors"]),
    )
    return results


def main(argv: List[str]) -> int:
    from database import SessionLocal, Base, engine
    import models  # noqa: F401

    if len(argv) != 1:
        print("usage: python -m jobs.import_catalog <file.csv|file.xlsx>")
        return 2

    logging.basicConfig(level=logging.INFO)
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        results = import_catalog(db, read_sheet(argv[0]))
    finally:
        db.close()
    for error in results["errors"]:
        print(error)
    return 1 if results["errors"] else 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
