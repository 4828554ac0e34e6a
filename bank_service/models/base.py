"""
Database engine, session management, and base model.

This module is the foundation for all database operations.
Every model inherits from Base. Every request gets a session
from get_db().
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from bank_service.config import get_settings

settings = get_settings()


def build_engine(database_url: str):
    """
    Create an engine for the given URL.

    SQLite connections are shared between the request threads
    FastAPI runs sync endpoints on, so the same-thread check
    has to be disabled there.
    """
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(
        database_url,
        pool_pre_ping=True,
        connect_args=connect_args,
    )


# --- Engine ---
# pool_pre_ping=True tests connections before using them,
# which handles cases where the database restarted or a
# connection went stale.
engine = build_engine(settings.DATABASE_URL)

# --- Session Factory ---
# autocommit=False means the services decide when changes
# are saved. A transfer commits both balances at once.
# expire_on_commit=False keeps the values an operation committed,
# so the view returned to the caller is the post-mutation state.
SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
)


# --- Base Model Class ---
class Base(DeclarativeBase):
    pass


# --- Dependency for FastAPI ---
def get_db():
    """
    Provide a database session for a single request.

    The try/finally pattern ensures the session is always
    closed, preventing connection leaks.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
