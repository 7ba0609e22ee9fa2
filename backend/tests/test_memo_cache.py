"""
Tests for the process-wide memoization table
"""
import threading
import traceback
from concurrent.futures import ThreadPoolExecutor

import pytest

from service_client.core.memo_cache import MemoCache


def test_value_is_built_once():
    cache = MemoCache("test")
    calls = []

    def factory(key):
        calls.append(key)
        return [key]

    first = cache.get_or_create("a", factory)
    second = cache.get_or_create("a", factory)

    assert first is second
    assert calls == ["a"]
    assert "a" in cache
    assert len(cache) == 1


def test_failure_is_kept_and_reraised():
    cache = MemoCache("test")
    calls = []

    def factory(key):
        calls.append(key)
        raise LookupError(key)

    with pytest.raises(LookupError) as first:
        cache.get_or_create("a", factory)
    with pytest.raises(LookupError) as second:
        cache.get_or_create("a", lambda key: "never built")

    assert first.value is second.value
    assert calls == ["a"]


def test_clear_forgets_entries():
    cache = MemoCache("test")
    cache.get_or_create("a", lambda key: object())

    cache.clear()

    assert "a" not in cache
    assert len(cache) == 0


def test_slow_build_does_not_block_other_keys():
    cache = MemoCache("test")
    release = threading.Event()
    started = threading.Event()

    def slow_factory(key):
        started.set()
        assert release.wait(timeout=5)
        return "slow"

    with ThreadPoolExecutor(max_workers=1) as pool:
        pending = pool.submit(cache.get_or_create, "slow", slow_factory)
        assert started.wait(timeout=5)

        # Built while "slow" is still in progress
        assert cache.get_or_create("fast", lambda key: "fast") == "fast"
        assert not pending.done()

        release.set()
        assert pending.result(timeout=5) == "slow"


def test_concurrent_callers_share_one_build():
    cache = MemoCache("test")
    calls = []
    calls_lock = threading.Lock()
    barrier = threading.Barrier(32)

    def factory(key):
        with calls_lock:
            calls.append(key)
        return object()

    def worker(_):
        barrier.wait()
        return cache.get_or_create("shared", factory)

    with ThreadPoolExecutor(max_workers=32) as pool:
        results = list(pool.map(worker, range(32)))

    assert len(calls) == 1
    assert all(r is results[0] for r in results)


class _Interrupted(BaseException):
    """Stands in for KeyboardInterrupt / SystemExit raised inside a build"""


def test_base_exception_leaves_entry_unbuilt():
    cache = MemoCache("test")
    calls = []

    def factory(key):
        calls.append(key)
        if len(calls) == 1:
            raise _Interrupted()
        return "built"

    with pytest.raises(_Interrupted):
        cache.get_or_create("k", factory)

    assert cache.get_or_create("k", factory) == "built"
    assert cache.get_or_create("k", factory) == "built"
    assert calls == ["k", "k"]


def test_cached_failure_traceback_does_not_grow():
    cache = MemoCache("test")

    def factory(key):
        raise LookupError(key)

    depths = []
    for _ in range(5):
        with pytest.raises(LookupError) as exc_info:
            cache.get_or_create("k", factory)
        depths.append(len(traceback.extract_tb(exc_info.value.__traceback__)))

    assert len(set(depths)) == 1
