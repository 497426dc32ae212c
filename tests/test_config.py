"""Test controller settings."""

import pytest
from pydantic import ValidationError

from crawl_queue.config import ControllerSettings
from crawl_queue.container import build_store
from crawl_queue.infrastructure.memory.repository import InMemoryRequestStore
from crawl_queue.infrastructure.postgres.repository import SqlRequestStore


class TestControllerSettings:
    """Test defaults, environment and validation."""

    def test_defaults(self, monkeypatch):
        for key in ("SLOTS", "POLL_INTERVAL_SECONDS", "INITIAL_DELAY_SECONDS"):
            monkeypatch.delenv(f"CRAWL_QUEUE_{key}", raising=False)

        settings = ControllerSettings(_env_file=None)

        assert settings.slots == [9995]
        assert settings.poll_interval_seconds == 20.0
        assert settings.initial_delay_seconds == 10.0
        assert settings.launch_command == ["/bin/bash", "crawl{slot}.sh"]

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("CRAWL_QUEUE_SLOTS", "[9995, 9996]")
        monkeypatch.setenv("CRAWL_QUEUE_POLL_INTERVAL_SECONDS", "5")

        settings = ControllerSettings(_env_file=None)

        assert settings.slots == [9995, 9996]
        assert settings.poll_interval_seconds == 5.0

    @pytest.mark.parametrize("slots", [[], [9995, 9995], [0], [70000]])
    def test_invalid_slots(self, slots):
        with pytest.raises(ValidationError):
            ControllerSettings(slots=slots, _env_file=None)

    def test_interval_must_be_positive(self):
        with pytest.raises(ValidationError):
            ControllerSettings(poll_interval_seconds=0, _env_file=None)


class TestBuildStore:
    """Test store selection."""

    def test_memory_backend(self):
        store = build_store(ControllerSettings(store_backend="memory", _env_file=None))

        assert isinstance(store, InMemoryRequestStore)

    def test_sql_backend_with_url(self):
        store = build_store(
            ControllerSettings(store_backend="postgres", database_url="sqlite://", _env_file=None)
        )
        try:
            assert isinstance(store, SqlRequestStore)
        finally:
            store.close()


class TestStoreUrl:
    """Test the SQL store URL."""

    def test_built_from_postgres_fields(self):
        settings = ControllerSettings(
            postgres_user="crawler",
            postgres_password="secret",
            postgres_host="db",
            postgres_port=5433,
            postgres_db="queue",
            _env_file=None,
        )

        assert settings.store_url == "postgresql://crawler:secret@db:5433/queue"

    def test_database_url_overrides_fields(self):
        settings = ControllerSettings(
            database_url="sqlite://", postgres_host="db", _env_file=None
        )

        assert settings.store_url == "sqlite://"

    def test_startup_grace_defaults_to_zero(self):
        assert ControllerSettings(_env_file=None).startup_grace_seconds == 0
