"""
Process-wide memoization tables with an atomic get-or-create primitive
"""
import threading
from types import TracebackType
from typing import Callable, Dict, Generic, Hashable, Optional, TypeVar

from service_client.core import metrics
from service_client.core.logging_config import LoggingConfig

logger = LoggingConfig.get_logger(__name__)

K = TypeVar('K', bound=Hashable)
V = TypeVar('V')


class _LazyEntry(Generic[V]):
    """One cache slot: built at most once, result or failure kept forever"""

    __slots__ = ("_factory", "_lock", "_done", "_value", "_error", "_traceback")

    def __init__(self, factory: Callable[[], V]):
        self._factory: Optional[Callable[[], V]] = factory
        self._lock = threading.Lock()
        self._done = False
        self._value: Optional[V] = None
        self._error: Optional[Exception] = None
        self._traceback: Optional[TracebackType] = None

    def get(self) -> V:
        if not self._done:
            with self._lock:
                if not self._done:
                    # A BaseException (KeyboardInterrupt, SystemExit) escapes
                    # and leaves the entry unbuilt for the next caller
                    try:
                        self._value = self._factory()
                    except Exception as e:
                        self._error = e
                        self._traceback = e.__traceback__
                    self._factory = None
                    self._done = True
        if self._error is not None:
            # every raise starts again from the build traceback
            raise self._error.with_traceback(self._traceback)
        return self._value


class MemoCache(Generic[K, V]):
    """
    Memoization table shared by the whole process.

    The table lock is held only long enough to install a per-key entry;
    the (possibly slow) build then runs under that entry's own lock, so
    concurrent callers for the same key wait for the first one while other
    keys proceed. Every caller observes the same value, or the same
    exception if the build failed. Entries are never evicted.
    """

    def __init__(self, name: str):
        self.name = name
        self._entries: Dict[K, _LazyEntry[V]] = {}
        self._lock = threading.Lock()

    def get_or_create(self, key: K, factory: Callable[[K], V]) -> V:
        entry = self._entries.get(key)
        hit = entry is not None
        if entry is None:
            with self._lock:
                entry = self._entries.get(key)
                if entry is None:
                    entry = _LazyEntry(lambda: factory(key))
                    self._entries[key] = entry
                else:
                    hit = True
        metrics.record_cache_lookup(self.name, hit)
        return entry.get()

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        """Drop every entry (test isolation only)"""
        with self._lock:
            self._entries.clear()
            logger.debug(f"Cleared memo cache '{self.name}'")
