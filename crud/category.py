from typing import Optional, Union
from sqlalchemy import func
from sqlalchemy.orm import Session
import models
from services.filters import parse_id


def get_category(db: Session, category_id: int) -> Optional[models.Category]:
    return db.query(models.Category).filter(models.Category.id == category_id).first()


def find_category(db: Session, ref: Union[int, str]) -> Optional[models.Category]:
    """Finds a category by ID, slug, or (case-insensitive) name."""
    category_id = parse_id(ref)
    if category_id is not None:
        return get_category(db, category_id)
    if isinstance(ref, int):
        return None
    ref = str(ref).strip()
    category = db.query(models.Category).filter(models.Category.slug == ref).first()
    if category:
        return category
    return db.query(models.Category).filter(func.lower(models.Category.name) == ref.lower()).first()
