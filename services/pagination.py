# services/pagination.py

import logging
from typing import List

from pydantic import BaseModel, Field

from services.filters import FilterExpression, MatchNone
from services.query_planner import clamp_page, clamp_page_size
from services.store import AttributeStore

logger = logging.getLogger(__name__)


class SearchResult(BaseModel):
    ids: List[int] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int = 50
    has_more: bool = False


def _distinct(ids: List[int]) -> List[int]:
    seen = set()
    out = []
    for pid in ids:
        if pid in seen:
            continue
        seen.add(pid)
        out.append(pid)
    return out


def fetch_page(store: AttributeStore, expr: FilterExpression, page, page_size) -> SearchResult:
    """
    Returns the slice [(page-1)*page_size, page*page_size) of the stably
    ordered matches of `expr`.

    has_more is count-based: true iff total > page * page_size. Pages past the
    end come back empty with has_more False. Store errors propagate.
    """
    page = clamp_page(page)
    page_size = clamp_page_size(page_size)

    if isinstance(expr, MatchNone):
        return SearchResult(page=page, page_size=page_size)

    offset = (page - 1) * page_size
    ids, total = store.query(expr, offset, page_size)

    unique_ids = _distinct(list(ids))
    if len(unique_ids) != len(ids):
        logger.warning("Store returned %d duplicate ids on page %d", len(ids) - len(unique_ids), page)

    return SearchResult(
        ids=unique_ids[:page_size],
        total=total,
        page=page,
        page_size=page_size,
        has_more=total > page * page_size,
    )
