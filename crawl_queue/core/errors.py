# crawl_queue/core/errors.py

# -----------------------------
# Base Errors
# -----------------------------

class CrawlQueueError(Exception):
    """Base class for all crawl queue errors."""
    pass


# -----------------------------
# Lifecycle Errors
# -----------------------------

class InvalidStateTransition(CrawlQueueError):
    """Illegal request state transition attempted."""
    pass


class ControllerNotStarted(CrawlQueueError):
    """Controller used before start() or after shutdown()."""
    pass


# -----------------------------
# Persistence Errors
# -----------------------------

class RequestStoreError(CrawlQueueError):
    """Store unreachable or write failed."""
    pass


class RequestNotFound(RequestStoreError):
    """No request with the given id."""
    pass


# -----------------------------
# Slot / Worker Errors
# -----------------------------

class ProbeError(CrawlQueueError):
    """A slot could not be bound locally. Never escapes the probe."""
    pass


class SpawnError(CrawlQueueError):
    """The worker command for a slot could not be started."""
    pass


class RemoteStopError(CrawlQueueError):
    """The stop command could not be delivered to a worker."""
    pass
