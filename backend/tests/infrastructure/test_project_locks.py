"""Project Locks — mutual exclusion per project, lock lifetime tied to its users."""

import asyncio
from uuid import uuid4

from fango.infrastructure.project_locks import ProjectLockRegistry


async def test_hold_serializes_same_project():
    registry = ProjectLockRegistry()
    pid = uuid4()
    order = []

    async def worker(name):
        async with registry.hold(pid):
            order.append(f"{name}-in")
            await asyncio.sleep(0.01)
            order.append(f"{name}-out")

    await asyncio.gather(worker("a"), worker("b"))
    assert order in (
        ["a-in", "a-out", "b-in", "b-out"],
        ["b-in", "b-out", "a-in", "a-out"],
    )


async def test_different_projects_do_not_block():
    registry = ProjectLockRegistry()
    first, second = uuid4(), uuid4()
    async with registry.hold(first):
        assert registry.is_held(first)
        assert not registry.is_held(second)


async def test_lock_released_and_dropped_after_last_user():
    registry = ProjectLockRegistry()
    pid = uuid4()
    async with registry.hold(pid):
        assert len(registry) == 1
    assert len(registry) == 0
    assert not registry.is_held(pid)


async def test_lock_survives_while_waiters_queued():
    registry = ProjectLockRegistry()
    pid = uuid4()
    release = asyncio.Event()
    inside = 0
    max_inside = 0

    async def worker(wait: bool):
        nonlocal inside, max_inside
        async with registry.hold(pid):
            inside += 1
            max_inside = max(max_inside, inside)
            if wait:
                await release.wait()
            await asyncio.sleep(0)
            inside -= 1

    first = asyncio.create_task(worker(True))
    await asyncio.sleep(0)
    queued = asyncio.create_task(worker(False))
    await asyncio.sleep(0)
    # The holder finishing must not let a newcomer bypass the queued waiter
    release.set()
    late = asyncio.create_task(worker(False))
    await asyncio.gather(first, queued, late)

    assert max_inside == 1
    assert len(registry) == 0


async def test_lock_released_when_body_raises():
    registry = ProjectLockRegistry()
    pid = uuid4()
    try:
        async with registry.hold(pid):
            raise ValueError("boom")
    except ValueError:
        pass
    assert len(registry) == 0
    async with registry.hold(pid):
        assert registry.is_held(pid)
