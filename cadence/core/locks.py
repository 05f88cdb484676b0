"""Per-schedule write serialization.

Every operation that sets a ``scheduled_date`` on a schedule's ledger runs
while holding that schedule's lock. The database unique constraint on
``(schedule_id, scheduled_date)`` backs this up across processes.
"""
import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator


class ScheduleLockRegistry:
    """Hands out one ``asyncio.Lock`` per schedule id.

    A lock lives only while some task holds it or waits for it, so the
    registry stays as small as the number of schedules being written.
    """

    def __init__(self):
        self._locks: dict[int, asyncio.Lock] = {}
        self._users: dict[int, int] = {}

    @asynccontextmanager
    async def hold(self, schedule_id: int) -> AsyncIterator[None]:
        lock = self._locks.setdefault(schedule_id, asyncio.Lock())
        self._users[schedule_id] = self._users.get(schedule_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[schedule_id] -= 1
            if not self._users[schedule_id]:
                del self._users[schedule_id]
                del self._locks[schedule_id]

    def is_locked(self, schedule_id: int) -> bool:
        lock = self._locks.get(schedule_id)
        return lock is not None and lock.locked()

    def __len__(self) -> int:
        return len(self._locks)

    def clear(self) -> None:
        self._locks.clear()
        self._users.clear()


schedule_locks = ScheduleLockRegistry()
