#crawl_queue\infrastructure\postgres\repository.py

"""SQL repository implementation using SQLAlchemy."""

import logging
from datetime import timezone
from typing import List, Optional
from uuid import UUID, uuid4

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from crawl_queue.core.errors import RequestStoreError
from crawl_queue.core.models import CrawlRequest, RequestState
from crawl_queue.core.repository import RequestStore
from crawl_queue.config import ControllerSettings
from crawl_queue.infrastructure.postgres.database import (
    create_db_engine,
    get_session_factory,
    init_db,
)
from crawl_queue.infrastructure.postgres.models import CrawlRequestORM

logger = logging.getLogger(__name__)

# request_id breaks created_at ties the same way in every store
OLDEST_FIRST = (CrawlRequestORM.created_at.asc(), CrawlRequestORM.request_id.asc())


# ============================================
# Mapping Functions
# ============================================

def _aware(value):
    # SQLite drops tzinfo on the way back
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def orm_to_domain(orm: CrawlRequestORM) -> CrawlRequest:
    """Convert ORM model to domain model."""
    return CrawlRequest(
        request_id=orm.request_id,
        crawl_data_path=orm.crawl_data_path,
        collection_name=orm.collection_name,
        state=orm.state,
        slot=orm.slot,
        created_at=_aware(orm.created_at),
        last_state_change_at=_aware(orm.last_state_change_at),
    )


def domain_to_orm(request: CrawlRequest) -> CrawlRequestORM:
    """Convert domain model to ORM model."""
    return CrawlRequestORM(
        request_id=request.request_id,
        crawl_data_path=request.crawl_data_path,
        collection_name=request.collection_name,
        state=request.state,
        slot=request.slot,
        created_at=request.created_at,
        last_state_change_at=request.last_state_change_at,
    )


# ============================================
# Repository Implementation
# ============================================

class SqlRequestStore(RequestStore):
    """SQL implementation (PostgreSQL in production) with an owned engine."""

    def __init__(
        self,
        database_url: Optional[str] = None,
        *,
        settings: Optional[ControllerSettings] = None,
        engine: Optional[Engine] = None,
        create_tables: bool = True,
    ):
        """
        Open the store.

        Args:
            database_url: SQLAlchemy URL. If None, settings.store_url.
            settings: Controller settings (connection, pool sizing, echo).
            engine: Pre-built engine. The store does not dispose engines it did not create.
            create_tables: Create missing tables on open.
        """
        self._owns_engine = engine is None
        try:
            if engine is None:
                if database_url is None:
                    settings = settings or ControllerSettings()
                    database_url = settings.store_url
                engine = create_db_engine(database_url, settings)
            self._engine = engine
            if create_tables:
                init_db(self._engine)
        except SQLAlchemyError as e:
            raise RequestStoreError(f"Failed to open request store: {e}") from e
        self._session_factory: sessionmaker = get_session_factory(self._engine)

    def _get_session(self) -> Session:
        """Get new session from the factory."""
        return self._session_factory()

    # -------------------------
    # UPSERT
    # -------------------------

    def save(self, request: CrawlRequest) -> CrawlRequest:
        """Insert or update a request."""
        request_id = request.request_id or uuid4()
        session = self._get_session()
        try:
            orm = domain_to_orm(request)
            orm.request_id = request_id
            session.merge(orm)
            session.commit()
            logger.debug(f"[store] save {request_id} state={request.state.value}")
        except SQLAlchemyError as e:
            session.rollback()
            raise RequestStoreError(f"Failed to save request {request_id}: {e}") from e
        finally:
            session.close()

        request.request_id = request_id
        return request

    # -------------------------
    # READ
    # -------------------------

    def get(self, request_id: UUID) -> Optional[CrawlRequest]:
        """Get request by ID."""
        session = self._get_session()
        try:
            orm = session.get(CrawlRequestORM, request_id)
            return orm_to_domain(orm) if orm is not None else None
        except SQLAlchemyError as e:
            raise RequestStoreError(f"Failed to load request {request_id}: {e}") from e
        finally:
            session.close()

    def find_by_state(
        self,
        state: RequestState,
        limit: Optional[int] = None,
    ) -> List[CrawlRequest]:
        """List requests by state, oldest first."""
        session = self._get_session()
        try:
            query = session.query(CrawlRequestORM).filter(
                CrawlRequestORM.state == state
            ).order_by(*OLDEST_FIRST)

            if limit is not None:
                query = query.limit(limit)

            results = query.all()
            logger.debug(f"[store] find_by_state state={state.value} -> {len(results)} rows")

            return [orm_to_domain(orm) for orm in results]
        except SQLAlchemyError as e:
            raise RequestStoreError(f"Failed to query {state.value} requests: {e}") from e
        finally:
            session.close()

    def list_all(self, limit: Optional[int] = None) -> List[CrawlRequest]:
        session = self._get_session()
        try:
            query = session.query(CrawlRequestORM).order_by(*OLDEST_FIRST)
            if limit is not None:
                query = query.limit(limit)
            return [orm_to_domain(orm) for orm in query.all()]
        except SQLAlchemyError as e:
            raise RequestStoreError(f"Failed to list requests: {e}") from e
        finally:
            session.close()

    # -------------------------
    # LIFECYCLE
    # -------------------------

    def close(self) -> None:
        """Dispose the engine and its connection pool."""
        if self._owns_engine:
            self._engine.dispose()
