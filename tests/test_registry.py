"""Tests for the presence registry."""

from chatrelay.registry import PresenceRegistry


class TestRegister:
    def test_register_creates_session(self, registry: PresenceRegistry, clock):
        s = registry.register("c1", "alice", "NZ")
        assert s.username == "alice"
        assert s.country == "NZ"
        assert s.last_seen_at == clock.now
        assert "c1" in registry
        assert len(registry) == 1

    def test_missing_country_stored_empty(self, registry: PresenceRegistry):
        assert registry.register("c1", "alice", None).country == ""

    def test_rejoin_replaces_in_place(self, registry: PresenceRegistry):
        registry.register("c1", "alice")
        registry.register("c2", "bob")
        registry.register("c1", "alicia")
        assert registry.snapshot() == [
            {"username": "alicia", "country": "", "connectionId": "c1"},
            {"username": "bob", "country": "", "connectionId": "c2"},
        ]

    def test_duplicate_usernames_allowed(self, registry: PresenceRegistry):
        registry.register("c1", "sam")
        registry.register("c2", "sam")
        assert [e["connectionId"] for e in registry.snapshot()] == ["c1", "c2"]


class TestTouch:
    def test_touch_updates_last_seen(self, registry: PresenceRegistry, clock):
        registry.register("c1", "alice")
        clock.advance(40)
        assert registry.touch("c1") is True
        assert registry.get("c1").last_seen_at == clock.now

    def test_touch_unknown_is_false(self, registry: PresenceRegistry):
        assert registry.touch("nope") is False


class TestRemove:
    def test_remove_returns_session(self, registry: PresenceRegistry):
        registry.register("c1", "alice")
        removed = registry.remove("c1")
        assert removed is not None
        assert removed.username == "alice"
        assert registry.snapshot() == []

    def test_remove_is_idempotent(self, registry: PresenceRegistry):
        registry.register("c1", "alice")
        registry.register("c2", "bob")
        registry.remove("c1")
        after_once = registry.snapshot()
        assert registry.remove("c1") is None
        assert registry.snapshot() == after_once


class TestSnapshot:
    def test_snapshot_hides_last_seen(self, registry: PresenceRegistry):
        registry.register("c1", "alice", "FR")
        (entry,) = registry.snapshot()
        assert set(entry) == {"username", "country", "connectionId"}

    def test_sessions_is_a_copy(self, registry: PresenceRegistry):
        registry.register("c1", "alice")
        for s in registry.sessions():
            registry.remove(s.connection_id)
        assert len(registry) == 0
