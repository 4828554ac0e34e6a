"""
Per-account mutual exclusion.

Every operation that changes an account runs while holding
that account's lock, from the moment the row is read until the
commit. Two operations on the same account therefore never
interleave their read-modify-write.

A transfer needs two locks. They are always taken in ascending
id order, so two transfers running in opposite directions
cannot deadlock.

A lock lives in the registry only while some thread holds it or
waits for it; the last one out removes the entry.
"""

import threading
from contextlib import contextmanager
from typing import Iterator


class _Entry:
    __slots__ = ("lock", "users")

    def __init__(self):
        self.lock = threading.Lock()
        self.users = 0


class AccountLockRegistry:

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[int, _Entry] = {}

    def _checkout(self, account_id: int) -> _Entry:
        with self._guard:
            entry = self._locks.get(account_id)
            if entry is None:
                entry = _Entry()
                self._locks[account_id] = entry
            entry.users += 1
            return entry

    def _checkin(self, account_id: int) -> None:
        with self._guard:
            entry = self._locks[account_id]
            entry.users -= 1
            if entry.users == 0:
                del self._locks[account_id]

    @contextmanager
    def hold(self, *account_ids: int) -> Iterator[None]:
        """Hold the locks of all given accounts, acquired in id order."""
        ids = sorted(set(account_ids))
        checked_out = []
        acquired = []
        try:
            for account_id in ids:
                checked_out.append((account_id, self._checkout(account_id)))
            for _, entry in checked_out:
                entry.lock.acquire()
                acquired.append(entry)
            yield
        finally:
            for entry in reversed(acquired):
                entry.lock.release()
            for account_id, _ in reversed(checked_out):
                self._checkin(account_id)


# Shared by every service instance in the process; services are
# created per request, the locks must outlive them.
account_locks = AccountLockRegistry()
