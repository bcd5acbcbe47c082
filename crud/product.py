# crud/product.py

import logging
import re
from contextlib import contextmanager
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy import and_, false, func, or_, text, true
from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm import Session, joinedload
from unidecode import unidecode

import models
import schemas
from attributes import get_spec, sanitize_value
from config import settings
from errors import InvalidRequest, MalformedRecord, StoreUnavailable
from services.filters import (
    And,
    AttributeContains,
    FilterExpression,
    InCategory,
    MatchAll,
    MatchNone,
    Or,
    ProductRecord,
    StatusIs,
    TitleContains,
    parse_id,
)
from services.store import CatalogStore, CategoryInfo

logger = logging.getLogger(__name__)

LIKE_ESCAPE = "\\"


# --- Filter lowering ---
def escape_like(term: str, escape: str = LIKE_ESCAPE) -> str:
    """Escapes LIKE wildcards so the term matches literally."""
    return (
        term.replace(escape, escape + escape)
        .replace("%", escape + "%")
        .replace("_", escape + "_")
    )


def _contains(column, term: str):
    return column.ilike(f"%{escape_like(term)}%", escape=LIKE_ESCAPE)


def lower_expression(expr: FilterExpression):
    """
    Turns a FilterExpression into a SQLAlchemy clause over models.Product.

    Attribute and category conditions become EXISTS subqueries, so a product
    matching through several attributes is still a single row.
    """
    if isinstance(expr, MatchAll):
        return true()
    if isinstance(expr, MatchNone):
        return false()
    if isinstance(expr, TitleContains):
        if expr.matcher.matches_everything:
            return true()
        return _contains(models.Product.title, expr.matcher.term)
    if isinstance(expr, AttributeContains):
        if expr.matcher.matches_everything:
            return true()
        return models.Product.attributes.any(and_(
            models.ProductAttribute.name == expr.name,
            _contains(models.ProductAttribute.value, expr.matcher.term),
        ))
    if isinstance(expr, InCategory):
        if isinstance(expr.ref, int):
            return models.Product.category_links.any(models.ProductCategory.category_id == expr.ref)
        return models.Product.category_links.any(
            models.ProductCategory.category.has(models.Category.slug == expr.ref)
        )
    if isinstance(expr, StatusIs):
        return models.Product.status == expr.status
    if isinstance(expr, And):
        return and_(*[lower_expression(c) for c in expr.children])
    if isinstance(expr, Or):
        return or_(*[lower_expression(c) for c in expr.children])
    raise TypeError(f"Unsupported filter node: {type(expr).__name__}")


# --- Store adapter ---
@contextmanager
def _store_call(db: Session, what: str):
    try:
        yield
    except DBAPIError as e:
        db.rollback()
        logger.error("[catalog-store] %s failed: %s", what, e)
        raise StoreUnavailable(f"{what} failed: {e.orig}") from e


class SqlCatalogStore(CatalogStore):
    """Catalog store backed by the SQLAlchemy session of the current request."""

    def __init__(self, db: Session, timeout_ms: Optional[int] = None):
        self.db = db
        self.timeout_ms = settings.store_timeout_ms if timeout_ms is None else timeout_ms

    def _apply_deadline(self):
        # Request-scoped deadline; only PostgreSQL supports it per transaction.
        if self.timeout_ms and self.db.get_bind().dialect.name == "postgresql":
            self.db.execute(text(f"SET LOCAL statement_timeout = {int(self.timeout_ms)}"))

    def query(self, expr: FilterExpression, offset: int, limit: int) -> Tuple[List[int], int]:
        with _store_call(self.db, "product query"):
            self._apply_deadline()
            base = self.db.query(models.Product.id).filter(lower_expression(expr))
            total = base.count()
            if total <= offset:
                return [], total
            rows = (
                base.order_by(func.lower(func.coalesce(models.Product.title, "")), models.Product.id)
                .offset(offset)
                .limit(limit)
                .all()
            )
        return [row[0] for row in rows], total

    def get(self, product_id: int, name: str) -> Optional[str]:
        with _store_call(self.db, "attribute read"):
            row = self.db.get(models.ProductAttribute, (product_id, name))
        return row.value if row else None

    def attributes_of(self, product_id: int, names: Sequence[str]) -> Dict[str, str]:
        with _store_call(self.db, "attribute read"):
            rows = (
                self.db.query(models.ProductAttribute.name, models.ProductAttribute.value)
                .filter(
                    models.ProductAttribute.product_id == product_id,
                    models.ProductAttribute.name.in_(list(names)),
                )
                .all()
            )
        return {name: value for name, value in rows}

    def record(self, product_id: int) -> ProductRecord:
        if parse_id(product_id) is None:
            raise MalformedRecord(product_id, "id out of range")
        with _store_call(self.db, "product read"):
            product = self.db.get(models.Product, product_id)
        if product is None:
            raise MalformedRecord(product_id)
        return ProductRecord(
            id=product.id,
            title=product.title,
            slug=product.slug,
            status=product.status,
        )

    def locator(self, record: ProductRecord) -> Optional[str]:
        if not record.slug:
            return None
        return settings.permalink_template.format(slug=record.slug, id=record.id)

    def resolve_user(self, user_id: int) -> Optional[str]:
        if parse_id(user_id) is None:
            return None
        with _store_call(self.db, "user lookup"):
            user = self.db.get(models.User, user_id)
        if not user:
            return None
        return user.display_name or user.username

    def list_categories(self) -> List[CategoryInfo]:
        with _store_call(self.db, "category list"):
            rows = self.db.query(models.Category).order_by(models.Category.name.asc()).all()
        return [CategoryInfo(id=c.id, name=c.name, slug=c.slug) for c in rows]

    def categories_of(self, product_id: int) -> List[str]:
        with _store_call(self.db, "category read"):
            rows = (
                self.db.query(models.Category.name)
                .join(models.ProductCategory, models.ProductCategory.category_id == models.Category.id)
                .filter(models.ProductCategory.product_id == product_id)
                .order_by(models.ProductCategory.position.asc())
                .all()
            )
        return [r[0] for r in rows]


# --- Single product reads ---
def get_product(db: Session, product_id: int) -> Optional[models.Product]:
    """
    Get a single product by ID, with its attributes and categories.
    """
    return db.query(models.Product).options(
        joinedload(models.Product.attributes),
        joinedload(models.Product.category_links).joinedload(models.ProductCategory.category),
    ).filter(models.Product.id == product_id).first()


def get_product_by_slug(db: Session, slug: str) -> Optional[models.Product]:
    return db.query(models.Product).filter(models.Product.slug == slug).first()


# --- Write path (backs the create/edit form) ---
_SLUG_RE = re.compile(r"[^a-z0-9]+")


def slugify(value: str) -> str:
    return _SLUG_RE.sub("-", unidecode(value or "").lower()).strip("-") or "product"


def _unique_slug(db: Session, wanted: str, product_id: Optional[int]) -> str:
    slug, n = wanted, 2
    while True:
        clash = db.query(models.Product.id).filter(models.Product.slug == slug).first()
        if clash is None or clash[0] == product_id:
            return slug
        slug = f"{wanted}-{n}"
        n += 1


def _apply_attributes(product: models.Product, values: Dict[str, Optional[str]]):
    existing = {attr.name: attr for attr in product.attributes}
    for name, raw in values.items():
        spec = get_spec(name)  # raises UnknownAttribute
        key = spec.name.value
        value = sanitize_value(key, raw)
        if value is None:
            if key in existing:
                product.attributes.remove(existing.pop(key))
            continue
        if key in existing:
            existing[key].value = value
        else:
            attr = models.ProductAttribute(name=key, value=value)
            product.attributes.append(attr)
            existing[key] = attr


def _apply_categories(db: Session, product: models.Product, category_ids: List[int]):
    ordered = list(dict.fromkeys(category_ids))
    valid = [cid for cid in ordered if parse_id(cid) is not None]
    if ordered:
        found = {c.id for c in db.query(models.Category.id).filter(models.Category.id.in_(valid)).all()}
        missing = [cid for cid in ordered if cid not in found]
        if missing:
            raise InvalidRequest(f"Unknown category ids: {missing}")

    existing = {link.category_id: link for link in product.category_links}
    links = []
    for position, cid in enumerate(ordered):
        link = existing.pop(cid, None) or models.ProductCategory(category_id=cid)
        link.position = position
        links.append(link)
    product.category_links = links


def save_product(db: Session, payload: schemas.ProductWrite, product_id: Optional[int] = None) -> models.Product:
    """
    Creates a product, or updates it when product_id is given.

    Attribute values are sanitized by kind; None removes an attribute. The
    product owner is stored as given (user ID or free text).
    """
    if product_id is not None:
        product = get_product(db, product_id)
        if product is None:
            raise InvalidRequest(f"Product {product_id} not found")
    else:
        if payload.title is None:
            raise InvalidRequest("Title is required")
        product = models.Product(status="published")

    try:
        if payload.title is not None:
            title = payload.title.strip()
            if not title:
                raise InvalidRequest("Title must not be empty")
            product.title = title

        if payload.status is not None:
            if payload.status not in models.PRODUCT_STATUSES:
                raise InvalidRequest(f"Invalid status: {payload.status!r}")
            product.status = payload.status

        if payload.slug or product_id is None:
            product.slug = _unique_slug(db, slugify(payload.slug or product.title), product_id)

        _apply_attributes(product, payload.attributes)
        if payload.categories is not None:
            _apply_categories(db, product, payload.categories)
        if product_id is None:
            db.add(product)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(product)
    logger.info("[DB-UPDATE] Saved product %s (%s)", product.id, product.slug)
    return product
