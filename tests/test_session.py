import asyncio
import gc
import logging

import pytest

from alephb.session import EngineSession

from conftest import FakeLoader


def test_sequential_calls_load_once(loader, engine):
    session = EngineSession(loader)

    async def run():
        return [await session.ensure_loaded() for _ in range(5)]

    handles = asyncio.run(run())

    assert loader.calls == 1
    assert all(handle is engine for handle in handles)
    assert session.is_loaded


def test_concurrent_callers_share_one_load(engine):
    loader = FakeLoader(engine=engine, delay=0.05)
    session = EngineSession(loader)

    async def run():
        return await asyncio.gather(*(session.ensure_loaded() for _ in range(4)))

    handles = asyncio.run(run())

    assert loader.calls == 1
    assert all(handle is engine for handle in handles)


def test_failed_load_keeps_slot_empty_and_retries(engine):
    loader = FakeLoader(engine=engine, fail_times=1)
    session = EngineSession(loader)

    with pytest.raises(RuntimeError, match="device not supported"):
        asyncio.run(session.ensure_loaded())
    assert not session.is_loaded
    assert session.engine is None

    assert asyncio.run(session.ensure_loaded()) is engine
    assert loader.calls == 2


def test_concurrent_waiters_all_see_failure():
    loader = FakeLoader(fail_times=1, delay=0.05)
    session = EngineSession(loader)

    async def run():
        return await asyncio.gather(
            session.ensure_loaded(), session.ensure_loaded(), return_exceptions=True
        )

    results = asyncio.run(run())

    assert loader.calls == 1
    assert all(isinstance(result, RuntimeError) for result in results)
    assert not session.is_loaded


def test_cancelled_waiter_does_not_abort_shared_load(engine):
    loader = FakeLoader(engine=engine, delay=0.1)
    session = EngineSession(loader)

    async def run():
        first = asyncio.ensure_future(session.ensure_loaded())
        second = asyncio.ensure_future(session.ensure_loaded())
        await asyncio.sleep(0.01)
        first.cancel()
        return await second

    assert asyncio.run(run()) is engine
    assert loader.calls == 1
    assert session.is_loaded


def test_failed_load_after_caller_cancelled_is_logged_once(caplog):
    loader = FakeLoader(fail_times=1, delay=0.05)
    session = EngineSession(loader)

    async def run():
        waiter = asyncio.ensure_future(session.ensure_loaded())
        await asyncio.sleep(0.01)
        waiter.cancel()
        await asyncio.sleep(0.3)

    with caplog.at_level(logging.WARNING):
        asyncio.run(run())
        gc.collect()

    assert loader.calls == 1
    assert not session.is_loaded
    assert [record.name for record in caplog.records] == ["alephb.session"]
    assert caplog.records[0].exc_info is not None
