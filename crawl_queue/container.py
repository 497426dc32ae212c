#crawl_queue\container.py

"""Wiring - builds stores and controllers from settings. Holds no instances."""

from typing import Optional

from crawl_queue.config import ControllerSettings
from crawl_queue.core.repository import RequestStore
from crawl_queue.infrastructure.memory.repository import InMemoryRequestStore


# ============================================
# STORES
# ============================================

def build_store(settings: ControllerSettings) -> RequestStore:
    """Open the configured request store."""
    if settings.store_backend == "memory":
        return InMemoryRequestStore()

    from crawl_queue.infrastructure.postgres.repository import SqlRequestStore

    return SqlRequestStore(settings.store_url, settings=settings)


# ============================================
# CONTROLLER
# ============================================

def build_controller(settings: Optional[ControllerSettings] = None):
    """Controller for the given (or environment) settings. Not started."""
    from crawl_queue.controller import CrawlQueueController

    return CrawlQueueController(settings or ControllerSettings())
