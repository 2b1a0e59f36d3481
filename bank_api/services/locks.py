"""
In-process keyed locks serializing operations per account.

Row locks (SELECT ... FOR UPDATE) protect balances on databases that
honour them; SQLite ignores FOR UPDATE, so operations touching the same
account ids are also serialized here. Locks are always taken in ascending id
order so opposite transfers between two accounts cannot deadlock.
"""

import threading
from contextlib import contextmanager
from typing import Dict, Iterator, List, Tuple


class AccountLockRegistry:
    """
    One lock per account id, alive only while some caller holds or waits
    for it. Ids that are never used again do not accumulate.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[int, threading.Lock] = {}
        self._users: Dict[int, int] = {}

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    def is_locked(self, account_id: int) -> bool:
        with self._guard:
            lock = self._locks.get(account_id)
            return lock is not None and lock.locked()

    def _checkout(self, account_id: int) -> threading.Lock:
        with self._guard:
            self._users[account_id] = self._users.get(account_id, 0) + 1
            return self._locks.setdefault(account_id, threading.Lock())

    def _checkin(self, account_id: int) -> None:
        with self._guard:
            self._users[account_id] -= 1
            if not self._users[account_id]:
                del self._users[account_id]
                del self._locks[account_id]

    @contextmanager
    def hold(self, *account_ids: int) -> Iterator[None]:
        """Hold the locks of every given account for the duration of the block."""
        acquired: List[Tuple[int, threading.Lock]] = []
        try:
            for account_id in sorted(set(account_ids)):
                lock = self._checkout(account_id)
                try:
                    lock.acquire()
                except BaseException:
                    self._checkin(account_id)
                    raise
                acquired.append((account_id, lock))
            yield
        finally:
            for account_id, lock in reversed(acquired):
                lock.release()
                self._checkin(account_id)


# Shared by every request handled by this process
account_locks = AccountLockRegistry()
