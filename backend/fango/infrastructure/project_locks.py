"""Project Locks — per-project asyncio.Lock registry serializing round mutations.

Invariants:
    - At most one round-mutating unit of work (start, submit, delete) runs per project
      at a time
    - While any task holds or waits on a project's lock, every hold() for that
      project uses that same Lock
    - A lock is dropped once its last holder/waiter leaves: the registry only holds
      projects with work in flight

Design Decisions:
    - In-process locks: single-process uvicorn deployment; a multi-worker deployment
      would need a DB advisory lock instead
    - Registry owned by RecommendationRuntime, not module state
    - Lifetime by reference count; there is no explicit discard
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator
from uuid import UUID


class ProjectLockRegistry:
    """Hands out one lock per project id."""

    def __init__(self) -> None:
        self._locks: dict[UUID, asyncio.Lock] = {}
        self._users: dict[UUID, int] = {}

    @asynccontextmanager
    async def hold(self, project_id: UUID) -> AsyncIterator[None]:
        lock = self._locks.setdefault(project_id, asyncio.Lock())
        self._users[project_id] = self._users.get(project_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[project_id] -= 1
            if not self._users[project_id]:
                del self._users[project_id]
                del self._locks[project_id]

    def is_held(self, project_id: UUID) -> bool:
        lock = self._locks.get(project_id)
        return lock is not None and lock.locked()

    def __len__(self) -> int:
        return len(self._locks)
