# crawl_queue/scheduler/poller.py

import logging
import threading
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class Poller:
    """
    Fixed-rate timer that calls `tick` on a dedicated thread.

    The first tick runs after `initial_delay` seconds, then every
    `interval` seconds measured from the schedule, not from the end of the
    previous tick. A tick that overruns delays the next one; missed ticks
    are not replayed.
    """

    def __init__(
        self,
        tick: Callable[[], object],
        *,
        interval: float,
        initial_delay: float = 0.0,
        name: str = "crawl-queue-poller",
    ):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._tick = tick
        self.interval = interval
        self.initial_delay = max(0.0, initial_delay)
        self.name = name

        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        """Start polling. Calling start() on a running or stopped poller is an error."""
        if self._thread is not None:
            raise RuntimeError("Poller already started")

        logger.info(
            f"[poller] starting: first poll in {self.initial_delay}s, then every {self.interval}s"
        )
        self._thread = threading.Thread(target=self._run_loop, name=self.name, daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        """
        Cancel pending and future ticks. A tick in progress is allowed to
        finish; this waits for it unless called from the tick itself.
        """
        self._stop_event.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        logger.info("[poller] stopped")

    def is_running(self) -> bool:
        return (
            self._thread is not None
            and self._thread.is_alive()
            and not self._stop_event.is_set()
        )

    def _run_loop(self) -> None:
        """Main polling loop."""
        next_run = time.monotonic() + self.initial_delay

        while not self._stop_event.wait(max(0.0, next_run - time.monotonic())):
            logger.debug("[poller] polling event")
            try:
                self._tick()
            except Exception as e:
                logger.error(f"[poller] Error in poll cycle: {e}", exc_info=True)

            next_run += self.interval
            now = time.monotonic()
            if next_run < now:
                next_run = now
