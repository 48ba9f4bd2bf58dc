"""
Unit tests for InMemoryCodeStore adapter.

Tests verify:
- set/get/delete semantics and last-writer-wins
- TTL expiry without explicit deletion
- delete reports whether a live entry was removed
- Atomic counters and thread safety
"""

from concurrent.futures import ThreadPoolExecutor

from src.adapters.cache.memory import InMemoryCodeStore


class TestSetGetDelete:
    """Tests for basic key/value operations."""

    def test_get_returns_stored_value(self, code_store: InMemoryCodeStore) -> None:
        code_store.set("a@x.com", "7G3K9Q", 300)
        assert code_store.get("a@x.com") == "7G3K9Q"

    def test_get_missing_key_returns_none(self, code_store: InMemoryCodeStore) -> None:
        assert code_store.get("missing@x.com") is None

    def test_last_set_wins(self, code_store: InMemoryCodeStore) -> None:
        """A second set overwrites; codes are not accumulated."""
        code_store.set("a@x.com", "AAAAAA", 300)
        code_store.set("a@x.com", "BBBBBB", 300)
        assert code_store.get("a@x.com") == "BBBBBB"
        assert len(code_store) == 1

    def test_delete_live_entry_returns_true(self, code_store: InMemoryCodeStore) -> None:
        code_store.set("a@x.com", "7G3K9Q", 300)
        assert code_store.delete("a@x.com") is True
        assert code_store.get("a@x.com") is None

    def test_delete_missing_key_is_noop(self, code_store: InMemoryCodeStore) -> None:
        assert code_store.delete("missing@x.com") is False

    def test_second_delete_returns_false(self, code_store: InMemoryCodeStore) -> None:
        code_store.set("a@x.com", "7G3K9Q", 300)
        assert code_store.delete("a@x.com") is True
        assert code_store.delete("a@x.com") is False

    def test_keys_are_independent(self, code_store: InMemoryCodeStore) -> None:
        code_store.set("a@x.com", "AAAAAA", 300)
        code_store.set("b@x.com", "BBBBBB", 300)
        code_store.delete("a@x.com")
        assert code_store.get("b@x.com") == "BBBBBB"


class TestExpiry:
    """Tests for TTL eviction."""

    def test_entry_readable_before_ttl(self, code_store: InMemoryCodeStore, fake_clock) -> None:
        code_store.set("a@x.com", "7G3K9Q", 300)
        fake_clock.advance(299)
        assert code_store.get("a@x.com") == "7G3K9Q"

    def test_entry_unreadable_after_ttl(self, code_store: InMemoryCodeStore, fake_clock) -> None:
        """Entries vanish once the TTL elapses, even without delete."""
        code_store.set("a@x.com", "7G3K9Q", 300)
        fake_clock.advance(300)
        assert code_store.get("a@x.com") is None

    def test_delete_expired_entry_is_noop(self, code_store: InMemoryCodeStore, fake_clock) -> None:
        code_store.set("a@x.com", "7G3K9Q", 300)
        fake_clock.advance(301)
        assert code_store.delete("a@x.com") is False

    def test_set_after_expiry_starts_fresh_window(
        self, code_store: InMemoryCodeStore, fake_clock
    ) -> None:
        code_store.set("a@x.com", "AAAAAA", 300)
        fake_clock.advance(301)
        code_store.set("a@x.com", "BBBBBB", 300)
        fake_clock.advance(200)
        assert code_store.get("a@x.com") == "BBBBBB"

    def test_set_sweeps_expired_entries_at_threshold(self, fake_clock) -> None:
        store = InMemoryCodeStore(clock=fake_clock, sweep_threshold=2)
        store.set("a@x.com", "AAAAAA", 10)
        store.set("b@x.com", "BBBBBB", 10)
        fake_clock.advance(60)

        store.set("c@x.com", "CCCCCC", 10)

        assert len(store._entries) == 1
        assert store.get("c@x.com") == "CCCCCC"


class TestIncrement:
    """Tests for atomic counters."""

    def test_increment_starts_at_one(self, code_store: InMemoryCodeStore) -> None:
        assert code_store.increment("attempts:a@x.com", 300) == 1
        assert code_store.increment("attempts:a@x.com", 300) == 2

    def test_increment_keeps_original_expiry(
        self, code_store: InMemoryCodeStore, fake_clock
    ) -> None:
        code_store.increment("attempts:a@x.com", 300)
        fake_clock.advance(200)
        code_store.increment("attempts:a@x.com", 300)
        fake_clock.advance(101)
        assert code_store.get("attempts:a@x.com") is None

    def test_increment_restarts_after_expiry(
        self, code_store: InMemoryCodeStore, fake_clock
    ) -> None:
        code_store.increment("attempts:a@x.com", 300)
        fake_clock.advance(301)
        assert code_store.increment("attempts:a@x.com", 300) == 1


class TestConcurrency:
    """Tests for concurrent callers."""

    def test_concurrent_increments_are_not_lost(self) -> None:
        store = InMemoryCodeStore()

        with ThreadPoolExecutor(max_workers=8) as executor:
            list(executor.map(lambda _: store.increment("counter", 60), range(200)))

        assert store.get("counter") == 200

    def test_concurrent_delete_removes_once(self) -> None:
        """Exactly one concurrent delete observes the live entry."""
        store = InMemoryCodeStore()
        store.set("a@x.com", "7G3K9Q", 60)

        with ThreadPoolExecutor(max_workers=8) as executor:
            results = list(executor.map(lambda _: store.delete("a@x.com"), range(8)))

        assert results.count(True) == 1
