# services/catalog_service.py

import logging
from typing import Iterator, List, Tuple

from services.pagination import SearchResult, fetch_page
from services.projection import Row, project_page
from services.query_planner import SearchQuery, plan
from services.store import CatalogStore

logger = logging.getLogger(__name__)


def search_products(store: CatalogStore, query: SearchQuery) -> Tuple[List[Row], SearchResult]:
    """
    Runs one retrieval request end to end: plan, page, project.

    The query object is the only search state; nothing is stashed between
    the planner and the store call.
    """
    expr = plan(query)
    result = fetch_page(store, expr, query.page, query.page_size)
    logger.debug(
        "Search q=%r field=%r category=%r page=%d size=%d -> %d/%d more=%s",
        query.q, query.field, query.category, result.page, result.page_size,
        len(result.ids), result.total, result.has_more,
    )
    return project_page(store, result.ids), result


def iter_all_rows(store: CatalogStore, query: SearchQuery) -> Iterator[Row]:
    """Walks every page of a query, for exports."""
    page = 1
    while True:
        rows, result = search_products(store, query.model_copy(update={"page": page}))
        yield from rows
        if not result.has_more:
            return
        page += 1
