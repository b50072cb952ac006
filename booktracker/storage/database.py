"""
Engine and session setup shared by the repositories.
"""

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from .models import Base


def create_database_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Create a SQLAlchemy engine.

    SQLite connections are shared across FastAPI's worker threads, and an
    in-memory database must live on a single connection.
    """
    kwargs = {"echo": echo}

    if database_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in database_url or database_url in ("sqlite://", "sqlite:///"):
            kwargs["poolclass"] = StaticPool
    else:
        kwargs["pool_pre_ping"] = True

    engine = create_engine(database_url, **kwargs)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _register_casefold)
    return engine


def _casefold(value):
    return value.casefold() if isinstance(value, str) else value


def _register_casefold(dbapi_connection, connection_record) -> None:
    # SQLite's lower() only folds ASCII
    dbapi_connection.create_function("casefold", 1, _casefold, deterministic=True)


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, expire_on_commit=False)


def create_tables(engine: Engine) -> None:
    """Create all tables (and their unique constraints) if missing."""
    Base.metadata.create_all(engine)
