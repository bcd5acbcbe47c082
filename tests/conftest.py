"""Pytest configuration and fixtures for the catalog service."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import models
import schemas
from crud import product as crud_product
from database import Base, get_db, register_sqlite_functions
from services.memory_store import MemoryCatalogStore


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "unit: marks tests as unit tests")


@pytest.fixture()
def engine():
    """A private in-memory SQLite database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    register_sqlite_functions(engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(session_factory):
    """FastAPI test client wired to the per-test database."""
    from main import app

    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.pop(get_db, None)


@pytest.fixture()
def make_category(db):
    def _make(name, slug=None):
        category = models.Category(name=name, slug=slug or name.lower().replace(" ", "-"))
        db.add(category)
        db.commit()
        db.refresh(category)
        return category
    return _make


@pytest.fixture()
def make_user(db):
    def _make(user_id, display_name, username=None):
        user = models.User(id=user_id, username=username or f"user{user_id}", display_name=display_name)
        db.add(user)
        db.commit()
        return user
    return _make


@pytest.fixture()
def make_product(db):
    def _make(title, attributes=None, categories=None, status=None, slug=None):
        payload = schemas.ProductWrite(
            title=title,
            slug=slug,
            status=status,
            attributes=attributes or {},
            categories=categories,
        )
        return crud_product.save_product(db, payload)
    return _make


@pytest.fixture()
def memory_store():
    return MemoryCatalogStore()
