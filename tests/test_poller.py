"""Test the fixed-rate poller."""

import threading
import time

import pytest

from crawl_queue.scheduler.poller import Poller
from tests.fakes import wait_for


class TestPoller:
    """Test timer behaviour."""

    def test_ticks_repeatedly(self):
        calls = []
        poller = Poller(lambda: calls.append(time.monotonic()), interval=0.02)

        poller.start()
        try:
            assert wait_for(lambda: len(calls) >= 3)
        finally:
            poller.stop()

    def test_initial_delay(self):
        calls = []
        poller = Poller(lambda: calls.append(1), interval=0.01, initial_delay=60)

        poller.start()
        time.sleep(0.1)
        poller.stop()

        assert calls == []

    def test_stop_cancels_future_ticks(self):
        calls = []
        poller = Poller(lambda: calls.append(1), interval=0.02)
        poller.start()
        assert wait_for(lambda: len(calls) >= 1)

        poller.stop()
        count = len(calls)
        time.sleep(0.1)

        assert len(calls) == count
        assert not poller.is_running()

    def test_stop_lets_running_tick_finish(self):
        started = threading.Event()
        finished = threading.Event()

        def slow_tick():
            started.set()
            time.sleep(0.2)
            finished.set()

        poller = Poller(slow_tick, interval=10)
        poller.start()
        assert started.wait(5)

        poller.stop()

        assert finished.is_set()

    def test_errors_do_not_stop_polling(self):
        calls = []

        def failing_tick():
            calls.append(1)
            raise RuntimeError("store unreachable")

        poller = Poller(failing_tick, interval=0.02)
        poller.start()
        try:
            assert wait_for(lambda: len(calls) >= 3)
        finally:
            poller.stop()

    def test_cannot_start_twice(self):
        poller = Poller(lambda: None, interval=1, initial_delay=60)
        poller.start()
        try:
            with pytest.raises(RuntimeError):
                poller.start()
        finally:
            poller.stop()

    def test_interval_must_be_positive(self):
        with pytest.raises(ValueError):
            Poller(lambda: None, interval=0)
