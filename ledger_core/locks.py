"""
Per-Account Locking

Every balance mutation runs while holding the lock of the account it
touches, which makes read-check-write sequences on one account linearizable
without serializing unrelated accounts.

A lock only lives in the registry while some command holds or waits for it,
so the registry never grows past the number of in-flight commands.
"""

from contextlib import asynccontextmanager
from typing import Dict, List
import asyncio
import threading


class AccountLocks:
    """Registry of one asyncio.Lock per account id with a command in flight"""

    def __init__(self):
        self._locks: Dict[str, asyncio.Lock] = {}
        self._users: Dict[str, int] = {}
        self._guard = threading.Lock()

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    def _checkout(self, account_id: str) -> asyncio.Lock:
        with self._guard:
            lock = self._locks.get(account_id)
            if lock is None:
                lock = asyncio.Lock()
                self._locks[account_id] = lock
                self._users[account_id] = 0
            self._users[account_id] += 1
            return lock

    def _checkin(self, account_id: str) -> None:
        with self._guard:
            self._users[account_id] -= 1
            if self._users[account_id] == 0:
                del self._users[account_id]
                del self._locks[account_id]

    @asynccontextmanager
    async def hold(self, *account_ids: str):
        """
        Hold the locks of all given accounts.

        Locks are acquired in sorted id order so that two callers holding
        overlapping sets can never deadlock. Duplicate ids are taken once.
        """
        checked_out: List[str] = []
        acquired: List[asyncio.Lock] = []
        try:
            for account_id in sorted(set(account_ids)):
                lock = self._checkout(account_id)
                checked_out.append(account_id)
                await lock.acquire()
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()
            for account_id in checked_out:
                self._checkin(account_id)
