# crawl_queue/run_controller.py
"""Run the crawl queue controller with its HTTP API."""

import argparse
import logging

import uvicorn

from crawl_queue.api.main import create_app
from crawl_queue.config import ControllerSettings
from crawl_queue.container import build_controller

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Crawl queue controller")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    args = parser.parse_args()

    settings = ControllerSettings()

    logger.info("=" * 80)
    logger.info("🚀 CRAWL QUEUE CONTROLLER")
    logger.info("=" * 80)
    logger.info(f"Slots: {settings.slots}")
    logger.info(f"Poll Interval: {settings.poll_interval_seconds}s")
    logger.info(f"Initial Delay: {settings.initial_delay_seconds}s")
    logger.info(f"Store: {settings.store_backend}")
    logger.info(f"API: http://{args.host}:{args.port}")
    logger.info("=" * 80)

    # uvicorn handles SIGINT/SIGTERM; the app lifespan shuts the controller down
    app = create_app(build_controller(settings))
    uvicorn.run(app, host=args.host, port=args.port, log_level="info")


if __name__ == "__main__":
    main()
