"""
Unit tests for ClientCache.
"""

from ts_observer.query.models import EnterEvent
from ts_observer.relay.cache import CacheEntry, ClientCache
from tests.fixtures.query_fakes import client_record


class TestClientCache:
    """Test class for ClientCache functionality."""

    def setup_method(self):
        self.cache = ClientCache()

    def test_seed_skips_query_clients(self):
        added = self.cache.seed(
            [client_record(1, "serveradmin", client_type=1), client_record(5, "Foo")]
        )
        assert added == 1
        assert 1 not in self.cache
        assert self.cache.get(5) == CacheEntry("Foo", False)

    def test_seed_first_duplicate_wins(self):
        self.cache.seed([client_record(5, "Foo"), client_record(5, "Bar")])
        assert len(self.cache) == 1
        assert self.cache.get(5).nickname == "Foo"

    def test_seed_marks_ignored(self):
        self.cache.seed(
            [client_record(5, "Foo"), client_record(6, "Bot")],
            is_ignored=lambda record: record.nickname == "Bot",
        )
        assert self.cache.get(6).ignored
        assert not self.cache.get(5).ignored

    def test_enter_overwrites_and_returns_previous(self):
        self.cache.seed([client_record(5, "Old")])
        event = EnterEvent(client_id=5, nickname="New", unique_identifier="abc")
        previous = self.cache.on_enter(event, ignored=False)
        assert previous == CacheEntry("Old", False)
        assert self.cache.get(5).nickname == "New"

    def test_left_removes_entry(self):
        self.cache.seed([client_record(5, "Foo")])
        assert self.cache.on_left(5) == CacheEntry("Foo", False)
        assert 5 not in self.cache
        assert self.cache.on_left(5) is None

    def test_snapshot_is_a_copy(self):
        self.cache.seed([client_record(5, "Foo")])
        snap = self.cache.snapshot()
        snap.clear()
        assert len(self.cache) == 1

    def test_enter_then_left_restores_empty_cache(self):
        event = EnterEvent(client_id=9, nickname="Foo", unique_identifier="abc")
        assert self.cache.on_enter(event, ignored=False) is None
        self.cache.on_left(9)
        assert len(self.cache) == 0

    def test_left_for_unknown_id_does_not_mutate(self):
        self.cache.seed([client_record(5, "Foo")])
        before = self.cache.snapshot()
        assert self.cache.on_left(77) is None
        assert self.cache.snapshot() == before
