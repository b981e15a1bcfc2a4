"""Tests for the UIDispatcher single-consumer queue."""

from __future__ import annotations

import asyncio
import threading

from hms.core.ui.dispatch import UIDispatcher
from hms.core.ui.state import ObservableState


def _run(coro):
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


class TestDrain:
    def test_fifo_order(self):
        dispatcher = UIDispatcher()
        seen = []
        for i in range(5):
            dispatcher.post(lambda i=i: seen.append(i))
        assert dispatcher.pending() == 5
        assert dispatcher.drain() == 5
        assert seen == [0, 1, 2, 3, 4]
        assert dispatcher.pending() == 0

    def test_drain_runs_on_calling_thread(self):
        dispatcher = UIDispatcher()
        state = ObservableState(value=0)
        ident = []

        def _worker():
            dispatcher.post(lambda: ident.append(threading.get_ident()))
            dispatcher.post(lambda: state.apply("value", 42))

        thread = threading.Thread(target=_worker)
        thread.start()
        thread.join()
        dispatcher.drain()
        assert ident == [threading.get_ident()]
        assert state.get("value") == 42

    def test_closed_dispatcher_drops_posts(self):
        dispatcher = UIDispatcher()
        dispatcher.close()
        assert dispatcher.post(lambda: None) is False
        assert dispatcher.pending() == 0


class TestRun:
    def test_run_applies_posts_from_threads(self):
        async def _check():
            dispatcher = UIDispatcher()
            state = ObservableState(value=0)
            runner = asyncio.create_task(dispatcher.run())
            await asyncio.sleep(0)

            done = threading.Event()

            def _worker():
                for i in range(1, 11):
                    dispatcher.post(lambda i=i: state.apply("value", i))
                done.set()

            threading.Thread(target=_worker).start()
            await asyncio.to_thread(done.wait)
            await asyncio.sleep(0.01)
            dispatcher.close()
            await runner
            return state

        state = _run(_check())
        assert state.get("value") == 10
        assert state.version == 10

    def test_close_finishes_run(self):
        async def _check():
            dispatcher = UIDispatcher()
            runner = asyncio.create_task(dispatcher.run())
            await asyncio.sleep(0)
            dispatcher.close()
            await asyncio.wait_for(runner, timeout=1)
            return dispatcher.closed

        assert _run(_check())
