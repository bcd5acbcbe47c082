from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from config import settings


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


def register_sqlite_functions(engine: Engine) -> Engine:
    """
    SQLite's built-in lower() only folds ASCII, which would make ilike
    searches case-sensitive for letters such as "É". Replace it on every new
    connection with Python's str.lower.
    """
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_conn, connection_record):
        dbapi_conn.create_function("lower", 1, _unicode_lower)

    return engine


def _engine_options(url: str) -> dict:
    # SQLite connections are per-thread by default; FastAPI runs sync
    # endpoints in a worker pool.
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_size": 10,  # The number of connections to keep open in the pool.
        "max_overflow": 20,  # The maximum number of connections to allow in addition to pool_size.
        "pool_recycle": 3600,  # Recycle connections after 1 hour to prevent timeout issues.
        "pool_pre_ping": True,  # Check if the connection is alive before using it.
    }


engine = create_engine(settings.database_url, **_engine_options(settings.database_url))
if engine.dialect.name == "sqlite":
    register_sqlite_functions(engine)

# Create a SessionLocal class for creating new Session objects
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Create a Base class for declarative models
Base = declarative_base()


# --- Dependency for FastAPI ---
def get_db():
    """
    FastAPI dependency that provides a database session per request.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
