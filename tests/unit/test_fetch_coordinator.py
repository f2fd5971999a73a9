"""Unit tests for FetchCoordinator (coalescing, failure delivery, cleanup)."""

import asyncio
import threading

import pytest

from assetcache.infrastructure.cache.fetch_coordinator import FetchCoordinator


@pytest.mark.asyncio
async def test_concurrent_callers_share_one_fetch() -> None:
    coordinator: FetchCoordinator[bytes] = FetchCoordinator()
    calls = 0

    async def fetch() -> bytes:
        nonlocal calls
        calls += 1
        await asyncio.sleep(0.05)
        return b"x" * 1024

    results = await asyncio.gather(
        *(coordinator.resolve("assets/sample.jpg", fetch) for _ in range(10))
    )
    assert calls == 1
    assert all(r is results[0] for r in results)
    assert coordinator.in_flight_count == 0


@pytest.mark.asyncio
async def test_different_keys_fetch_independently() -> None:
    coordinator: FetchCoordinator[str] = FetchCoordinator()
    calls: list[str] = []

    def make(key: str):
        async def fetch() -> str:
            calls.append(key)
            await asyncio.sleep(0.01)
            return key

        return fetch

    a, b = await asyncio.gather(
        coordinator.resolve("a", make("a")), coordinator.resolve("b", make("b"))
    )
    assert (a, b) == ("a", "b")
    assert sorted(calls) == ["a", "b"]


@pytest.mark.asyncio
async def test_failure_delivered_to_all_waiters_as_none() -> None:
    coordinator: FetchCoordinator[bytes] = FetchCoordinator()
    calls = 0

    async def fetch() -> bytes:
        nonlocal calls
        calls += 1
        await asyncio.sleep(0.01)
        raise RuntimeError("network down")

    results = await asyncio.gather(*(coordinator.resolve("k", fetch) for _ in range(5)))
    assert results == [None] * 5
    assert calls == 1
    assert not coordinator.is_in_flight("k")


@pytest.mark.asyncio
async def test_failure_does_not_poison_key() -> None:
    coordinator: FetchCoordinator[bytes] = FetchCoordinator()

    async def failing() -> bytes:
        raise RuntimeError("boom")

    async def working() -> bytes:
        return b"ok"

    assert await coordinator.resolve("k", failing) is None
    assert await coordinator.resolve("k", working) == b"ok"


@pytest.mark.asyncio
async def test_entry_registered_while_running_and_removed_after() -> None:
    coordinator: FetchCoordinator[bytes] = FetchCoordinator()
    release = asyncio.Event()

    async def fetch() -> bytes:
        await release.wait()
        return b"done"

    task = asyncio.create_task(coordinator.resolve("k", fetch))
    await asyncio.sleep(0)
    assert coordinator.is_in_flight("k")
    assert coordinator.in_flight_count == 1
    release.set()
    assert await task == b"done"
    assert not coordinator.is_in_flight("k")


@pytest.mark.asyncio
async def test_caller_after_completion_starts_fresh_fetch() -> None:
    coordinator: FetchCoordinator[int] = FetchCoordinator()
    calls = 0

    async def fetch() -> int:
        nonlocal calls
        calls += 1
        return calls

    assert await coordinator.resolve("k", fetch) == 1
    assert await coordinator.resolve("k", fetch) == 2


@pytest.mark.asyncio
async def test_cancelled_waiter_does_not_cancel_fetch() -> None:
    coordinator: FetchCoordinator[bytes] = FetchCoordinator()
    release = asyncio.Event()
    finished = asyncio.Event()

    async def fetch() -> bytes:
        await release.wait()
        finished.set()
        return b"late"

    abandoned = asyncio.create_task(coordinator.resolve("k", fetch))
    await asyncio.sleep(0)
    abandoned.cancel()
    with pytest.raises(asyncio.CancelledError):
        await abandoned

    joined = asyncio.create_task(coordinator.resolve("k", fetch))
    await asyncio.sleep(0)
    release.set()
    assert await joined == b"late"
    assert finished.is_set()


def test_each_event_loop_gets_its_own_fetch() -> None:
    coordinator: FetchCoordinator[str] = FetchCoordinator()
    both_started = threading.Barrier(2)
    calls: list[str] = []
    results: dict[str, list] = {}
    errors: list[BaseException] = []

    async def fetch() -> str:
        calls.append(threading.current_thread().name)
        await asyncio.sleep(0.05)
        return "shared-key"

    async def resolve_many() -> list:
        return await asyncio.gather(*(coordinator.resolve("k", fetch) for _ in range(3)))

    def worker() -> None:
        try:
            both_started.wait(timeout=5)
            results[threading.current_thread().name] = asyncio.run(resolve_many())
        except BaseException as e:
            errors.append(e)

    threads = [threading.Thread(target=worker, name=f"loop-{i}") for i in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=5)

    assert errors == []
    assert results == {"loop-0": ["shared-key"] * 3, "loop-1": ["shared-key"] * 3}
    assert sorted(calls) == ["loop-0", "loop-1"]
    assert coordinator.in_flight_count == 0
