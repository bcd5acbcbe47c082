# services/query_planner.py

import logging
from typing import Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, field_validator

from attributes import ATTRIBUTE_SCHEMA, AttributeSpec, get_spec
from config import settings
from errors import UnknownAttribute
from services.filters import (
    AttributeContains,
    FilterExpression,
    InCategory,
    MatchAll,
    MatchNone,
    StatusIs,
    TitleContains,
    all_of,
    any_of,
    MAX_ID,
    build_matcher,
    parse_id,
)

logger = logging.getLogger(__name__)

FIELD_ALL = "all"
FIELD_TITLE = "title"
MIN_PAGE_SIZE = 1


def _to_int(value, default: int) -> int:
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return default


def clamp_page(value) -> int:
    # the row offset of the last page must fit a signed 64-bit integer
    last_page = MAX_ID // settings.max_page_size
    return min(last_page, max(1, _to_int(value, 1)))


def clamp_page_size(value) -> int:
    size = _to_int(value, settings.default_page_size)
    return min(settings.max_page_size, max(MIN_PAGE_SIZE, size))


class SearchQuery(BaseModel):
    """
    Immutable retrieval request. Carries everything needed to reproduce a page:
    no part of a search lives outside this object.
    """
    model_config = ConfigDict(frozen=True, validate_default=True)

    q: str = ""
    field: Optional[str] = None
    category: Optional[Union[int, str]] = None
    status: Optional[str] = "published"
    page: int = 1
    page_size: int = 50

    @field_validator("q", mode="before")
    @classmethod
    def _trim_q(cls, v):
        return (v or "").strip()

    @field_validator("field", mode="before")
    @classmethod
    def _normalize_field(cls, v):
        if v is None:
            return None
        v = str(v).strip()
        if not v or v.lower() == FIELD_ALL:
            return None
        return v

    @field_validator("category", mode="before")
    @classmethod
    def _normalize_category(cls, v):
        if v is None:
            return None
        ref = parse_id(v)
        if ref is not None:
            return ref or None
        # anything that is not a usable id is looked up as a slug
        v = str(v).strip()
        return v or None

    @field_validator("page", mode="before")
    @classmethod
    def _clamp_page(cls, v):
        return clamp_page(v)

    @field_validator("page_size", mode="before")
    @classmethod
    def _clamp_page_size(cls, v):
        return clamp_page_size(v)


def text_condition(
    q: str, field: Optional[str], schema: Sequence[AttributeSpec] = ATTRIBUTE_SCHEMA
) -> FilterExpression:
    matcher = build_matcher(q)
    if matcher.matches_everything:
        return MatchAll()

    if field == FIELD_TITLE:
        return TitleContains(matcher)

    if field is not None:
        try:
            spec = get_spec(field)
        except UnknownAttribute as e:
            logger.warning("Search on unknown attribute %r, returning no matches", e.name)
            return MatchNone(str(e))
        return AttributeContains(spec.name.value, matcher)

    conditions = [TitleContains(matcher)]
    conditions.extend(AttributeContains(spec.name.value, matcher) for spec in schema)
    return any_of(*conditions)


def plan(query: SearchQuery, schema: Sequence[AttributeSpec] = ATTRIBUTE_SCHEMA) -> FilterExpression:
    """
    Builds the filter for a retrieval request: the text condition for the
    selected mode, AND-ed with the category and status restrictions.
    """
    parts = [text_condition(query.q, query.field, schema)]
    if query.category is not None:
        parts.append(InCategory(query.category))
    if query.status:
        parts.append(StatusIs(query.status))
    return all_of(*parts)
