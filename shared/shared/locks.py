import asyncio
from contextlib import asynccontextmanager

from .errors import LockTimeoutError


class KeyedLocks:
    """
    One asyncio.Lock per key, waited on for at most timeout_seconds.

    A key's lock is dropped once nobody holds or waits for it.
    """

    def __init__(self, timeout_seconds: float = 5.0):
        self.timeout_seconds = timeout_seconds
        self._locks: dict = {}
        self._users: dict = {}

    def __len__(self) -> int:
        return len(self._locks)

    @asynccontextmanager
    async def hold(self, key, description: str | None = None):
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._users[key] = self._users.get(key, 0) + 1
        try:
            try:
                await asyncio.wait_for(lock.acquire(), timeout=self.timeout_seconds)
            except asyncio.TimeoutError:
                raise LockTimeoutError(f"timed out waiting for {description or key}")
            try:
                yield
            finally:
                lock.release()
        finally:
            self._users[key] -= 1
            if self._users[key] == 0:
                del self._users[key]
                del self._locks[key]
