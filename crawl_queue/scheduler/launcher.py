# crawl_queue/scheduler/launcher.py
"""Starts the per-slot worker command."""

import logging
import subprocess
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence

from crawl_queue.core.errors import SpawnError
from crawl_queue.core.models import utcnow

logger = logging.getLogger(__name__)


@dataclass
class WorkerHandle:
    """A spawned worker. Kept for later checks; the scheduler never waits on it."""
    slot: int
    pid: int
    command: List[str]
    process: Optional[subprocess.Popen] = field(default=None, repr=False)
    started_at: datetime = field(default_factory=utcnow)

    def poll(self) -> Optional[int]:
        """Exit code if the process has ended (reaps it), else None."""
        if self.process is None:
            return None
        return self.process.poll()


class WorkerLauncher:
    """
    Fire-and-forget spawn of the worker configured for a slot.

    Returns once the OS has started the process, not once the worker is
    ready; readiness is only visible later when the port is bound.
    """

    def __init__(self, command_template: Sequence[str], cwd: Optional[str] = None):
        """
        Args:
            command_template: argv with "{slot}" placeholders, e.g. ["/bin/bash", "crawl{slot}.sh"]
            cwd: Working directory for the worker
        """
        if not command_template:
            raise ValueError("command_template must not be empty")
        self.command_template = list(command_template)
        self.cwd = cwd

    def command_for(self, slot: int) -> List[str]:
        return [part.replace("{slot}", str(slot)) for part in self.command_template]

    def launch(self, slot: int) -> WorkerHandle:
        """
        Start the worker for a slot.

        Raises:
            SpawnError: If the process could not be started
        """
        command = self.command_for(slot)
        try:
            process = subprocess.Popen(
                command,
                cwd=self.cwd,
                stdin=subprocess.DEVNULL,
                start_new_session=True,  # survives controller shutdown
            )
        except (OSError, ValueError) as e:
            raise SpawnError(f"Problem starting {' '.join(command)} for slot {slot}: {e}") from e

        logger.info(f"[launcher] started {' '.join(command)} for slot {slot} (pid {process.pid})")
        return WorkerHandle(slot=slot, pid=process.pid, command=command, process=process)
