"""SQLAlchemy tables and engine construction shared by the repositories."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, MetaData, Table, Text, create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.pool import NullPool, StaticPool

metadata = MetaData()

surveys_table = Table(
    "surveys",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("firstname", Text, nullable=False),
    Column("surname", Text, nullable=False),
    Column("email", Text, nullable=False, unique=True),
    Column("address", Text, nullable=False),
    Column("suburb", Text, nullable=False),
    Column("postcode", Text, nullable=False),
    Column("phone", Text, nullable=False),
    Column("q1radio", Text, nullable=False),
    Column("q2radio", Text, nullable=False),
    Column("q3radio", Text, nullable=False),
    Column("comments", Text),
    Column("created_at", DateTime, nullable=False),
    Column("updated_at", DateTime, nullable=False),
    sqlite_autoincrement=True,
)

# Legacy form-submission table; rows are never updated or deleted.
responses_table = Table(
    "survey",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("fname", Text),
    Column("sname", Text),
    Column("email", Text),
    Column("date", DateTime, nullable=False),
    Column("q1", Integer),
    Column("q2", Integer),
    Column("q3", Integer),
    Column("colour", Text),
    Column("comment", Text),
    sqlite_autoincrement=True,
)


def utcnow() -> datetime:
    """Naive UTC timestamp, the format stored in DATETIME columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def build_engine(database_url: str, per_call: bool = False) -> Engine:
    """Create an engine for ``database_url``.

    SQLite engines hold a single connection for the engine's lifetime, or
    open and close one per checkout when ``per_call`` is set.
    """
    if not database_url.startswith("sqlite"):
        if per_call:
            return create_engine(database_url, poolclass=NullPool)
        return create_engine(database_url, pool_size=1, max_overflow=0)

    connect_args = {"check_same_thread": False}
    if per_call and not _is_memory_url(database_url):
        return create_engine(database_url, poolclass=NullPool, connect_args=connect_args)
    return create_engine(database_url, poolclass=StaticPool, connect_args=connect_args)


def _is_memory_url(database_url: str) -> bool:
    return database_url in ("sqlite://", "sqlite:///:memory:") or "mode=memory" in database_url


def is_unique_violation(exc: IntegrityError) -> bool:
    """True when the driver reports a UNIQUE constraint failure."""
    original = exc.orig
    if getattr(original, "sqlite_errorname", None) == "SQLITE_CONSTRAINT_UNIQUE":
        return True
    message = str(original).lower()
    return "unique constraint" in message or "duplicate key" in message
