# routes/products.py

import io
import logging
from typing import Optional

import pandas as pd
from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

import schemas
from attributes import ATTRIBUTE_SCHEMA, LIST_ATTRIBUTES, get_spec
from config import settings
from crud.product import SqlCatalogStore
from database import get_db
from errors import MalformedRecord, StoreUnavailable
from services.catalog_service import iter_all_rows, search_products
from services.projection import project_detail
from services.query_planner import FIELD_ALL, FIELD_TITLE, SearchQuery
from services.store import CatalogStore

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/products",
    tags=["Products"],
)


def get_store(db: Session = Depends(get_db)) -> CatalogStore:
    return SqlCatalogStore(db)


def _store_error(e: StoreUnavailable) -> HTTPException:
    return HTTPException(
        status_code=503,
        detail=schemas.StoreError(message=str(e)).model_dump(),
    )


def _build_query(q, field, category, cat, page, page_size, pageSize) -> SearchQuery:
    # accept both the snake_case and the legacy/JS parameter names
    return SearchQuery(
        q=q or "",
        field=field,
        category=category if category is not None else cat,
        page=page,
        page_size=page_size if page_size is not None else pageSize,
    )


@router.get("/", response_model=schemas.ProductPage)
def get_products(
    store: CatalogStore = Depends(get_store),
    q: Optional[str] = Query(None, description="Free-text term"),
    field: Optional[str] = Query(FIELD_ALL, description="'all', 'title' or an attribute name"),
    category: Optional[str] = Query(None, description="Category id or slug"),
    cat: Optional[str] = Query(None, include_in_schema=False),
    # page numbers arrive as text so that junk values fall back to defaults
    page: Optional[str] = Query(None),
    page_size: Optional[str] = Query(None),
    pageSize: Optional[str] = Query(None, include_in_schema=False),
):
    """
    Get one page of products for incremental list loading.
    """
    query = _build_query(q, field, category, cat, page, page_size, pageSize)
    try:
        rows, result = search_products(store, query)
    except StoreUnavailable as e:
        raise _store_error(e)
    return {
        "rows": rows,
        "has_more": result.has_more,
        "total": result.total,
        "page": result.page,
        "page_size": result.page_size,
    }


@router.get("/fields", response_model=schemas.FieldOptions)
def get_search_fields():
    """
    Field options for the search field selector.
    """
    fields = [
        schemas.AttributeField(name=FIELD_ALL, label="All Fields"),
        schemas.AttributeField(name=FIELD_TITLE, label="Product Name"),
    ]
    fields.extend(
        schemas.AttributeField(name=spec.name.value, label=spec.label, kind=spec.kind.value)
        for spec in ATTRIBUTE_SCHEMA
    )
    return {"fields": fields}


@router.get("/export")
def export_products(
    store: CatalogStore = Depends(get_store),
    q: Optional[str] = Query(None),
    field: Optional[str] = Query(FIELD_ALL),
    category: Optional[str] = Query(None),
    cat: Optional[str] = Query(None, include_in_schema=False),
):
    """
    Export every product matching the filters as an Excel sheet.
    """
    query = _build_query(q, field, category, cat, 1, settings.max_page_size, None)
    try:
        rows = list(iter_all_rows(store, query))
    except StoreUnavailable as e:
        raise _store_error(e)

    if not rows:
        return Response(content="No data to export for the selected filters.", media_type="text/plain")

    data = []
    for row in rows:
        item = {"Title": row.title, "Category": row.categories, "URL": row.locator}
        for name in LIST_ATTRIBUTES:
            item[get_spec(name).label] = row.attributes.get(name.value)
        data.append(item)

    df = pd.DataFrame(data)
    output = io.BytesIO()
    with pd.ExcelWriter(output, engine='openpyxl') as writer:
        df.to_excel(writer, index=False, sheet_name='Products')

    output.seek(0)
    logger.info("Exported %d products", len(rows))

    return Response(
        content=output.getvalue(),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": "attachment; filename=products.xlsx"}
    )


@router.get("/{product_id}", response_model=schemas.ProductDetail)
def get_product_details(product_id: int, store: CatalogStore = Depends(get_store)):
    """
    Get the details view of a single product, every attribute included.
    """
    try:
        return project_detail(store, product_id)
    except MalformedRecord:
        raise HTTPException(status_code=404, detail="Product not found")
    except StoreUnavailable as e:
        raise _store_error(e)
