# main.py
import logging
import sys
from pathlib import Path
from fastapi import FastAPI

ROOT_DIR = Path(__file__).resolve().parent
sys.path.append(str(ROOT_DIR))

from config import settings
from database import engine, Base
from routes import products, categories
import models  # noqa: F401  (registers tables on Base.metadata)

logging.basicConfig(
    level=settings.log_level,
    format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Product Catalog")

Base.metadata.create_all(bind=engine)

# Routers
app.include_router(products.router)
app.include_router(categories.router)
