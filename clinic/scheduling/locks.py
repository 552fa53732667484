from contextlib import contextmanager
from threading import Lock
from typing import Hashable, Iterator


class KeyedLockRegistry:
    """One process-wide lock per key, created on first use.

    ``hold`` acquires several keys in sorted order so two callers asking for
    the same pair cannot deadlock. A key's lock is dropped once no caller
    holds it or waits on it.
    """

    def __init__(self):
        self._guard = Lock()
        self._locks: dict[Hashable, Lock] = {}
        self._holders: dict[Hashable, int] = {}

    def _checkout(self, key: Hashable) -> Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = Lock()
                self._locks[key] = lock
            self._holders[key] = self._holders.get(key, 0) + 1
            return lock

    def _checkin(self, key: Hashable) -> None:
        with self._guard:
            remaining = self._holders[key] - 1
            if remaining:
                self._holders[key] = remaining
            else:
                del self._holders[key]
                del self._locks[key]

    @contextmanager
    def hold(self, *keys: Hashable) -> Iterator[None]:
        ordered = sorted(set(keys), key=repr)
        checked_out: list[Hashable] = []
        acquired: list[Lock] = []
        try:
            for key in ordered:
                lock = self._checkout(key)
                checked_out.append(key)
                lock.acquire()
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()
            for key in checked_out:
                self._checkin(key)


booking_locks = KeyedLockRegistry()
