# crawl_queue/infrastructure/postgres/database.py

"""SQLAlchemy database setup and session management."""

from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from crawl_queue.config import ControllerSettings


# ============================================
# Base for ORM models
# ============================================
Base = declarative_base()


# ============================================
# Engine configuration
# ============================================
def create_db_engine(
    database_url: str,
    settings: Optional[ControllerSettings] = None,
) -> Engine:
    """
    Create SQLAlchemy engine.

    No engine exists at import time: the store that owns it creates one
    on controller start and disposes it on shutdown. Pool sizing comes
    from settings when given.
    """
    if database_url.startswith("sqlite"):
        # Single shared connection so in-memory databases survive across sessions
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    if settings is None:
        return create_engine(database_url, pool_pre_ping=True)

    return create_engine(
        database_url,
        echo=settings.echo_sql,
        pool_pre_ping=True,  # Verify connections before using
        pool_size=settings.pool_size,
        max_overflow=settings.max_overflow,
        pool_timeout=settings.pool_timeout,
        pool_recycle=settings.pool_recycle,
    )


# ============================================
# Session factory function
# ============================================
def get_session_factory(engine_instance: Engine) -> sessionmaker:
    """Get a session factory bound to the given engine."""
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine_instance,
        expire_on_commit=False
    )


# ============================================
# Database initialization
# ============================================
def init_db(engine_instance: Engine) -> None:
    """Create all tables."""
    # Models must be imported so they register on Base.metadata
    from crawl_queue.infrastructure.postgres import models  # noqa: F401

    Base.metadata.create_all(bind=engine_instance)
