"""Tests for the memoization cache."""

from gql_typegen.core.cache import MemoizationCache
from gql_typegen.core.dependencies import DependencyTracker


def compute_with_dependency(tracker: DependencyTracker, calls: list):
    def compute():
        calls.append(1)
        tracker.add("enum", "Role")
        return "value"

    return compute


class TestMemoizationCache:
    """Tests for MemoizationCache."""

    def test_computes_once(self):
        tracker = DependencyTracker()
        cache = MemoizationCache(tracker)
        calls = []

        with tracker.scope("a.graphql"):
            assert cache.with_cache("selection_set", "User_id", compute_with_dependency(tracker, calls)) == "value"
            assert cache.with_cache("selection_set", "User_id", compute_with_dependency(tracker, calls)) == "value"

        assert len(calls) == 1
        assert cache.hits == 1
        assert cache.misses == 1
        assert len(cache) == 1

    def test_hit_replays_dependencies(self):
        tracker = DependencyTracker()
        cache = MemoizationCache(tracker)

        with tracker.scope("a.graphql"):
            cache.with_cache("selection_set", "User_id", compute_with_dependency(tracker, []))

        with tracker.scope("b.graphql") as keys:
            cache.with_cache("selection_set", "User_id", compute_with_dependency(tracker, []))

        assert "enum:Role" in keys
        assert "file:a.graphql" in keys

    def test_prefixes_are_separate(self):
        tracker = DependencyTracker()
        cache = MemoizationCache(tracker)

        with tracker.scope():
            cache.with_cache("selection_set", "x", lambda: 1)
            assert cache.with_cache("input_type", "x", lambda: 2) == 2

    def test_disabled(self):
        tracker = DependencyTracker()
        cache = MemoizationCache(tracker, enabled=False)
        calls = []

        with tracker.scope():
            cache.with_cache("selection_set", "User_id", compute_with_dependency(tracker, calls))
            cache.with_cache("selection_set", "User_id", compute_with_dependency(tracker, calls))

        assert len(calls) == 2
        assert len(cache) == 0

    def test_purge(self):
        tracker = DependencyTracker()
        cache = MemoizationCache(tracker)

        with tracker.scope("a.graphql"):
            cache.with_cache("selection_set", "one", lambda: 1)
        with tracker.scope("b.graphql"):
            cache.with_cache("selection_set", "two", lambda: 2)

        assert cache.purge("a.graphql") == 1
        assert len(cache) == 1

    def test_clear(self):
        tracker = DependencyTracker()
        cache = MemoizationCache(tracker)
        with tracker.scope():
            cache.with_cache("selection_set", "one", lambda: 1)
        cache.clear()
        assert len(cache) == 0
        assert cache.misses == 0
