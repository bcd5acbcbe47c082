# schemas.py
from __future__ import annotations

from typing import Optional, List, Dict

from pydantic import BaseModel, Field, ConfigDict

from services.projection import Row, ProductDetail, FieldValue  # noqa: F401  (re-exported response models)

# =========================
# Base model configurations
# =========================

class ORMBase(BaseModel):
    """Base for models mapped to SQLAlchemy objects."""
    model_config = ConfigDict(from_attributes=True)

# ======================================================
# App-specific schemas (for API responses)
# ======================================================

class Category(ORMBase):
    id: int
    name: str
    slug: str

class AttributeField(BaseModel):
    name: str
    label: str
    kind: Optional[str] = None

class FieldOptions(BaseModel):
    fields: List[AttributeField]

class ProductPage(BaseModel):
    rows: List[Row]
    has_more: bool
    total: int
    page: int
    page_size: int

class StoreError(BaseModel):
    error: str = "store_unavailable"
    retryable: bool = True
    message: str

# --- Write payload used by the create/edit form collaborator and the import job ---

class ProductWrite(BaseModel):
    title: Optional[str] = None
    slug: Optional[str] = None
    status: Optional[str] = None
    attributes: Dict[str, Optional[str]] = Field(default_factory=dict)
    categories: Optional[List[int]] = None
