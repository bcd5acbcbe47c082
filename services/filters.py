# services/filters.py
"""
Text matcher and the FilterExpression tree produced by the query planner.

A FilterExpression is a small immutable predicate tree. Store adapters lower
it into their own query language (see crud.product for SQLAlchemy); every node
can also evaluate itself against an in-memory ProductRecord.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple, Union

CategoryRef = Union[int, str]

# ids are stored as signed 64-bit integers
MAX_ID = 2 ** 63 - 1


def parse_id(value) -> Optional[int]:
    """
    Reads a stored or requested id. Only plain ASCII digits that fit an id
    column count; anything else (superscripts, signs, huge numbers) is None.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if 0 <= value <= MAX_ID else None
    if value is None:
        return None
    text = str(value).strip()
    if not text or not (text.isascii() and text.isdecimal()):
        return None
    number = int(text)
    return number if number <= MAX_ID else None


@dataclass(frozen=True)
class ProductRecord:
    """Flat read model of one product as a store sees it."""
    id: int
    title: Optional[str] = None
    slug: Optional[str] = None
    status: Optional[str] = None
    attributes: Dict[str, str] = field(default_factory=dict)
    category_ids: Tuple[int, ...] = ()
    category_slugs: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Matcher:
    """Case-insensitive literal substring test. An empty term matches everything."""
    term: str = ""

    @property
    def matches_everything(self) -> bool:
        return not self.term

    @property
    def needle(self) -> str:
        return self.term.lower()

    def matches(self, value: Optional[str]) -> bool:
        if self.matches_everything:
            return True
        if value is None:
            return False
        return self.needle in value.lower()


def build_matcher(raw_query: Optional[str]) -> Matcher:
    return Matcher((raw_query or "").strip())


# ---------------------------------------------------------------------------
# Expression nodes
# ---------------------------------------------------------------------------

class FilterExpression:
    def evaluate(self, record: ProductRecord) -> bool:
        raise NotImplementedError


@dataclass(frozen=True)
class MatchAll(FilterExpression):
    def evaluate(self, record: ProductRecord) -> bool:
        return True


@dataclass(frozen=True)
class MatchNone(FilterExpression):
    reason: str = ""

    def evaluate(self, record: ProductRecord) -> bool:
        return False


@dataclass(frozen=True)
class TitleContains(FilterExpression):
    matcher: Matcher

    def evaluate(self, record: ProductRecord) -> bool:
        return self.matcher.matches(record.title)


@dataclass(frozen=True)
class AttributeContains(FilterExpression):
    name: str
    matcher: Matcher

    def evaluate(self, record: ProductRecord) -> bool:
        return self.matcher.matches(record.attributes.get(self.name))


@dataclass(frozen=True)
class InCategory(FilterExpression):
    """Category restriction by numeric ID or by slug."""
    ref: CategoryRef

    def evaluate(self, record: ProductRecord) -> bool:
        if isinstance(self.ref, int):
            return self.ref in record.category_ids
        return self.ref in record.category_slugs


@dataclass(frozen=True)
class StatusIs(FilterExpression):
    status: str

    def evaluate(self, record: ProductRecord) -> bool:
        return record.status == self.status


@dataclass(frozen=True)
class And(FilterExpression):
    children: Tuple[FilterExpression, ...]

    def evaluate(self, record: ProductRecord) -> bool:
        return all(child.evaluate(record) for child in self.children)


@dataclass(frozen=True)
class Or(FilterExpression):
    children: Tuple[FilterExpression, ...]

    def evaluate(self, record: ProductRecord) -> bool:
        return any(child.evaluate(record) for child in self.children)


def all_of(*children: FilterExpression) -> FilterExpression:
    """AND-combine, dropping MatchAll and collapsing single children."""
    kept = tuple(c for c in children if not isinstance(c, MatchAll))
    if any(isinstance(c, MatchNone) for c in kept):
        return next(c for c in kept if isinstance(c, MatchNone))
    if not kept:
        return MatchAll()
    if len(kept) == 1:
        return kept[0]
    return And(kept)


def any_of(*children: FilterExpression) -> FilterExpression:
    """OR-combine, collapsing single children. An empty OR matches nothing."""
    if not children:
        return MatchNone("empty disjunction")
    if len(children) == 1:
        return children[0]
    return Or(tuple(children))
