# crawl_queue/agent/client.py
"""Best-effort remote stop of the worker running on a slot."""

import logging

import requests

from crawl_queue.core.errors import RemoteStopError

logger = logging.getLogger(__name__)


class AgentController:
    """
    Sends "stop" to a worker's control endpoint.

    Cancellation is advisory. The slot only counts as free once the
    reconciler's probe sees the port released, whatever this call returns.
    """

    def __init__(self, url_template: str = "http://127.0.0.1:{slot}", timeout: float = 10.0):
        """
        Args:
            url_template: Control endpoint base URL with a "{slot}" placeholder
            timeout: Request timeout in seconds
        """
        self.url_template = url_template
        self.timeout = timeout

    def endpoint_for(self, slot: int) -> str:
        return self.url_template.replace("{slot}", str(slot)).rstrip("/")

    def cancel(self, slot: int) -> bool:
        """
        Ask the worker on a slot to stop.

        Returns:
            True if the worker acknowledged, False otherwise. Never raises.
        """
        try:
            self._stop(slot)
        except RemoteStopError as e:
            logger.warning(f"[agent] cancel slot {slot} failed: {e}")
            return False

        logger.info(f"[agent] stop sent to worker on slot {slot}")
        return True

    def _stop(self, slot: int) -> None:
        url = f"{self.endpoint_for(slot)}/stop"
        try:
            with requests.Session() as session:
                response = session.post(url, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            raise RemoteStopError(f"Stop timeout after {self.timeout}s ({url})") from e
        except requests.exceptions.ConnectionError as e:
            raise RemoteStopError(f"Cannot connect to worker control endpoint at {url}") from e
        except requests.exceptions.RequestException as e:
            raise RemoteStopError(f"Stop request to {url} failed: {e}") from e

        if not 200 <= response.status_code < 300:
            raise RemoteStopError(
                f"Worker rejected stop [{response.status_code}]: {response.text}"
            )
