"""Tests for RelayConfig."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from chatrelay import Relay, RelayConfig


class TestRelayConfig:
    def test_defaults(self):
        cfg = RelayConfig()
        assert cfg.port == 4000
        assert cfg.heartbeat_interval == 30.0
        assert cfg.session_ttl == 90.0
        assert cfg.login_ttl_days == 7

    def test_derived_paths(self, tmp_path: Path):
        cfg = RelayConfig(data_dir=tmp_path)
        assert cfg.login_db_path == tmp_path / "logins.db"
        assert cfg.uploads_path == tmp_path / "uploads"
        custom = RelayConfig(data_dir=tmp_path, upload_dir=tmp_path / "x")
        assert custom.uploads_path == tmp_path / "x"

    def test_ttl_shorter_than_interval_rejected(self):
        with pytest.raises(ValidationError):
            RelayConfig(heartbeat_interval=60, session_ttl=30)

    def test_bad_port_rejected(self):
        with pytest.raises(ValidationError):
            RelayConfig(port=0)


class TestRelay:
    def test_relay_wires_components(self):
        relay = Relay(RelayConfig(heartbeat_interval=5, session_ttl=15), clock=lambda: 0)
        assert relay.config.session_ttl == 15
        assert relay.roster() == []

    def test_start_and_stop(self):
        import asyncio

        relay = Relay(RelayConfig(heartbeat_interval=5, session_ttl=15))

        async def scenario():
            await relay.start()
            assert relay.monitor.running
            await relay.stop()

        asyncio.run(scenario())
        assert relay.monitor.running is False
