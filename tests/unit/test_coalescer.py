"""Tests for request coalescing."""

import asyncio

import pytest

from docshelf.engine.cache import RequestCoalescer


class GatedFactory:
    def __init__(self, result="value", error: Exception | None = None):
        self.calls = 0
        self.gate = asyncio.Event()
        self.result = result
        self.error = error

    async def __call__(self):
        self.calls += 1
        await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.result


async def test_concurrent_callers_share_one_request():
    coalescer = RequestCoalescer()
    factory = GatedFactory()

    tasks = [asyncio.create_task(coalescer.run("k", factory)) for _ in range(5)]
    await asyncio.sleep(0)
    assert coalescer.is_pending("k")

    factory.gate.set()
    results = await asyncio.gather(*tasks)

    assert results == ["value"] * 5
    assert factory.calls == 1
    assert not coalescer.is_pending("k")


async def test_all_waiters_receive_the_same_exception():
    coalescer = RequestCoalescer()
    factory = GatedFactory(error=RuntimeError("boom"))

    tasks = [asyncio.create_task(coalescer.run("k", factory)) for _ in range(3)]
    await asyncio.sleep(0)
    factory.gate.set()
    results = await asyncio.gather(*tasks, return_exceptions=True)

    assert factory.calls == 1
    assert all(isinstance(r, RuntimeError) for r in results)
    assert results[0] is results[1] is results[2]
    assert coalescer.pending_keys == []


async def test_settled_request_is_not_reused():
    coalescer = RequestCoalescer()
    calls = 0

    async def factory():
        nonlocal calls
        calls += 1
        return calls

    assert await coalescer.run("k", factory) == 1
    assert await coalescer.run("k", factory) == 2


async def test_different_keys_run_independently():
    coalescer = RequestCoalescer()
    first = GatedFactory("a")
    second = GatedFactory("b")

    tasks = [
        asyncio.create_task(coalescer.run("a", first)),
        asyncio.create_task(coalescer.run("b", second)),
    ]
    await asyncio.sleep(0)
    assert sorted(coalescer.pending_keys) == ["a", "b"]

    first.gate.set()
    second.gate.set()
    assert await asyncio.gather(*tasks) == ["a", "b"]


async def test_cancelled_waiter_does_not_cancel_shared_request():
    coalescer = RequestCoalescer()
    factory = GatedFactory()

    cancelled = asyncio.create_task(coalescer.run("k", factory))
    survivor = asyncio.create_task(coalescer.run("k", factory))
    await asyncio.sleep(0)

    cancelled.cancel()
    with pytest.raises(asyncio.CancelledError):
        await cancelled

    factory.gate.set()
    assert await survivor == "value"
    assert factory.calls == 1


async def test_waiter_resuming_after_failure_starts_fresh_request():
    coalescer = RequestCoalescer()
    attempts = 0

    async def flaky():
        nonlocal attempts
        attempts += 1
        if attempts == 1:
            raise ConnectionError("first attempt fails")
        return "ok"

    with pytest.raises(ConnectionError):
        await coalescer.run("k", flaky)
    assert await coalescer.run("k", flaky) == "ok"


async def test_aclose_cancels_pending_requests():
    coalescer = RequestCoalescer()
    factory = GatedFactory()

    waiter = asyncio.create_task(coalescer.run("k", factory))
    await asyncio.sleep(0)
    await coalescer.aclose()

    with pytest.raises(asyncio.CancelledError):
        await waiter
    assert coalescer.pending_keys == []
