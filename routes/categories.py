# routes/categories.py

from fastapi import APIRouter, Depends, HTTPException
from typing import List

import schemas
from errors import StoreUnavailable
from routes.products import get_store
from services.store import CatalogStore

router = APIRouter(
    prefix="/api/categories",
    tags=["Categories"],
)

@router.get("/", response_model=List[schemas.Category])
def get_all_categories(store: CatalogStore = Depends(get_store)):
    """Categories for the list filter dropdown."""
    try:
        return store.list_categories()
    except StoreUnavailable as e:
        raise HTTPException(status_code=503, detail=schemas.StoreError(message=str(e)).model_dump())
