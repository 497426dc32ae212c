#crawl_queue\infrastructure\postgres\models.py
"""SQLAlchemy ORM models for database tables."""

from uuid import uuid4

from sqlalchemy import Column, String, Integer, DateTime, Enum as SQLEnum, Index, Uuid

from crawl_queue.core.models import RequestState, utcnow
from crawl_queue.infrastructure.postgres.database import Base


class CrawlRequestORM(Base):
    """
    Crawl request table - stores queue state.

    Indexes:
    - Primary key on request_id
    - Composite index on (state, created_at) for the FIFO lookup
    - Index on slot for finding the RUNNING claimant of a port
    """

    __tablename__ = "crawl_requests"

    # Primary key
    request_id = Column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid4,
        nullable=False
    )

    # Payload
    crawl_data_path = Column(String(1024), nullable=False)
    collection_name = Column(String(255), nullable=False)

    # State
    state = Column(
        SQLEnum(RequestState, name="crawl_request_state"),
        nullable=False,
        default=RequestState.WAITING,
        index=True
    )
    slot = Column(Integer, nullable=True, index=True)

    # Lifecycle timestamps
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    last_state_change_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        Index('ix_crawl_requests_state_created', 'state', 'created_at'),
    )

    def __repr__(self) -> str:
        return (
            f"<CrawlRequestORM(request_id={self.request_id}, "
            f"state={self.state.value}, "
            f"slot={self.slot})>"
        )
