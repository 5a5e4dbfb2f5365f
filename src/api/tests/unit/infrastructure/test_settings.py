"""Unit tests for infrastructure settings."""

import pytest
from pydantic import ValidationError

from infrastructure.settings import (
    BrokerSettings,
    DatabaseSettings,
    ProjectorSettings,
    ReadDatabaseSettings,
    RelaySettings,
)


class TestDatabaseSettingsPoolConfiguration:
    """Tests for connection pool configuration."""

    def test_default_pool_settings(self):
        """Should have sensible pool defaults."""
        settings = DatabaseSettings()
        assert settings.pool_min_connections >= 1
        assert settings.pool_max_connections >= settings.pool_min_connections
        assert settings.pool_max_connections <= 20

    def test_pool_settings_from_fields(self):
        """Should accept pool settings via constructor."""
        settings = DatabaseSettings(pool_min_connections=5, pool_max_connections=15)
        assert settings.pool_min_connections == 5
        assert settings.pool_max_connections == 15

    def test_pool_max_must_be_greater_than_or_equal_to_min(self):
        """Should validate max >= min."""
        with pytest.raises(ValidationError) as exc_info:
            DatabaseSettings(pool_min_connections=10, pool_max_connections=5)

        error_str = str(exc_info.value)
        assert "pool_max_connections" in error_str or "greater" in error_str.lower()

    def test_pool_max_equal_to_min_is_valid(self):
        """Should allow max == min."""
        settings = DatabaseSettings(pool_min_connections=5, pool_max_connections=5)
        assert settings.pool_min_connections == 5
        assert settings.pool_max_connections == 5

    def test_pool_min_must_be_positive(self):
        """Pool min connections must be >= 1."""
        with pytest.raises(ValidationError):
            DatabaseSettings(pool_min_connections=0)

    def test_pool_max_respects_upper_limit(self):
        """Pool max should not exceed reasonable limit."""
        with pytest.raises(ValidationError):
            DatabaseSettings(pool_max_connections=101)


class TestDatabaseSettingsEnvironment:
    """Tests for the write and read database environment prefixes."""

    def test_write_database_reads_its_prefix(self, monkeypatch):
        monkeypatch.setenv("ORDERVIEW_DB_HOST", "write-db")
        assert DatabaseSettings().host == "write-db"

    def test_read_database_uses_separate_prefix(self, monkeypatch):
        """The read model can live on another server than the outbox."""
        monkeypatch.setenv("ORDERVIEW_DB_HOST", "write-db")
        monkeypatch.setenv("ORDERVIEW_READ_DB_HOST", "read-db")

        assert ReadDatabaseSettings().host == "read-db"

    def test_connection_string_omits_password(self):
        settings = DatabaseSettings(password="secret")
        assert "secret" not in settings.connection_string


class TestPipelineSettings:
    """Tests for relay, broker and projector defaults."""

    def test_relay_defaults(self):
        """Poll every five seconds, ten records at a time."""
        settings = RelaySettings()
        assert settings.poll_interval_seconds == 5.0
        assert settings.batch_size == 10

    def test_relay_poll_interval_must_be_positive(self):
        with pytest.raises(ValidationError):
            RelaySettings(poll_interval_seconds=0)

    def test_broker_defaults(self):
        """One unacknowledged message per consumer, fixed five second backoff."""
        settings = BrokerSettings()
        assert settings.prefetch_count == 1
        assert settings.reconnect_delay_seconds == 5.0

    def test_projector_defaults(self):
        settings = ProjectorSettings()
        assert settings.queues == ["order-events", "product-events"]
        assert settings.monotonic_sync_status is False

    def test_projector_queues_from_environment(self, monkeypatch):
        monkeypatch.setenv("ORDERVIEW_PROJECTOR_QUEUES", '["order-events"]')
        assert ProjectorSettings().queues == ["order-events"]

    def test_projector_needs_at_least_one_queue(self):
        with pytest.raises(ValidationError):
            ProjectorSettings(queues=[])
