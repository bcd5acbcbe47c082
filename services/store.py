# services/store.py
"""
Collaborator interfaces consumed by the search core.

The search core never talks to a database directly. It is handed objects
implementing these interfaces; crud.product.SqlCatalogStore is the
SQLAlchemy-backed implementation and services.memory_store.MemoryCatalogStore
is an in-process one.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Sequence, Tuple

from pydantic import BaseModel

from services.filters import FilterExpression, ProductRecord


class CategoryInfo(BaseModel):
    id: int
    name: str
    slug: str


class AttributeStore(ABC):

    @abstractmethod
    def get(self, product_id: int, name: str) -> Optional[str]:
        """Returns the stored value, or None when the attribute is absent."""

    @abstractmethod
    def attributes_of(self, product_id: int, names: Sequence[str]) -> Dict[str, str]:
        """Returns the present attributes among `names`; absent ones are omitted."""

    @abstractmethod
    def record(self, product_id: int) -> ProductRecord:
        """Loads the product's core fields. Raises MalformedRecord if it is gone."""

    @abstractmethod
    def locator(self, record: ProductRecord) -> Optional[str]:
        """Opaque link target for a product (permalink)."""

    @abstractmethod
    def query(self, expr: FilterExpression, offset: int, limit: int) -> Tuple[List[int], int]:
        """
        Executes a filter with stable ordering.

        Returns the IDs in [offset, offset + limit) and the total match count.
        Raises StoreUnavailable when the store cannot answer.
        """


class IdentityResolver(ABC):

    @abstractmethod
    def resolve_user(self, user_id: int) -> Optional[str]:
        """Display name for a user ID, or None when unknown."""


class CategoryLookup(ABC):

    @abstractmethod
    def list_categories(self) -> List[CategoryInfo]:
        ...

    @abstractmethod
    def categories_of(self, product_id: int) -> List[str]:
        """Category names of a product, in the order they were attached."""


class CatalogStore(AttributeStore, IdentityResolver, CategoryLookup, ABC):
    """Convenience union for adapters that provide every capability."""
