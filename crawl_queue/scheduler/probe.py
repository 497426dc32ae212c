# crawl_queue/scheduler/probe.py
"""Local port probe - is a slot held by a live process?"""

import logging
import socket

from crawl_queue.core.errors import ProbeError

logger = logging.getLogger(__name__)


class SlotProbe:
    """
    Checks a slot by binding its port for TCP and UDP and releasing both.

    A worker holding either protocol on the port makes the bind fail,
    so the slot is reported busy.
    """

    def __init__(self, host: str = ""):
        """
        Args:
            host: Address to bind. "" binds all interfaces, which conflicts
                  with a worker bound to any single interface.
        """
        self.host = host

    def is_free(self, slot: int) -> bool:
        """True only if both binds succeed. Any failure counts as busy."""
        try:
            self._try_bind(slot, socket.SOCK_STREAM)
            self._try_bind(slot, socket.SOCK_DGRAM)
        except ProbeError as e:
            logger.debug(f"[probe] slot {slot} busy: {e}")
            return False
        return True

    def _try_bind(self, slot: int, kind: int) -> None:
        sock = None
        try:
            sock = socket.socket(socket.AF_INET, kind)
            sock.bind((self.host, slot))
        except (OSError, OverflowError, TypeError) as e:
            proto = "tcp" if kind == socket.SOCK_STREAM else "udp"
            raise ProbeError(f"{proto} bind on {self.host or '*'}:{slot} failed: {e}") from e
        finally:
            if sock is not None:
                sock.close()
