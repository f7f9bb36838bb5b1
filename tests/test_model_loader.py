"""
Tests for assistant/model_loader.py — single load, progress, dispose.
"""

import asyncio

from assistant.errors import ModelLoadError
from assistant.model_loader import ModelLoader, ModelState


def _transcriber(path):
    return {"text": "hello"}


def _loader_with_progress(steps, result=_transcriber):
    calls = []

    def load_fn(progress):
        calls.append(1)
        for loaded, total in steps:
            progress(loaded, total)
        return result

    return ModelLoader(load_fn, model_id="tiny"), calls


class TestLoad:
    def test_success_sets_transcriber(self):
        loader, _ = _loader_with_progress([(1, 1)])
        state = asyncio.run(loader.load())
        assert state is ModelState.READY
        assert loader.transcriber is _transcriber
        assert loader.error is None
        assert loader.progress == 100

    def test_failure_sets_error_state(self):
        def load_fn(progress):
            raise RuntimeError("unsupported environment")

        loader = ModelLoader(load_fn)
        state = asyncio.run(loader.load())
        assert state is ModelState.ERROR
        assert isinstance(loader.error, ModelLoadError)
        assert loader.error.message == "unsupported environment"
        assert loader.transcriber is None

    def test_loads_only_once(self):
        async def scenario():
            loader, calls = _loader_with_progress([])
            first, second = await asyncio.gather(loader.load(), loader.load())
            third = await loader.load()
            return calls, (first, second, third)

        calls, states = asyncio.run(scenario())
        assert calls == [1]
        assert states == (ModelState.READY,) * 3

    def test_no_retry_after_error(self):
        attempts = []

        def load_fn(progress):
            attempts.append(1)
            raise OSError("network down")

        async def scenario():
            loader = ModelLoader(load_fn)
            await loader.load()
            return await loader.load()

        assert asyncio.run(scenario()) is ModelState.ERROR
        assert attempts == [1]


class TestProgress:
    def test_observers_see_monotonic_percentages(self):
        loader, _ = _loader_with_progress([(10, 100), (5, 100), (50, 100), (50, 100), (100, 100)])
        seen = []
        loader.subscribe(seen.append)
        asyncio.run(loader.load())
        assert seen == [10, 50, 100]

    def test_progress_clamped(self):
        loader, _ = _loader_with_progress([(300, 100)])
        seen = []
        loader.subscribe(seen.append)
        asyncio.run(loader.load())
        assert seen == [100]

    def test_zero_total_ignored(self):
        loader, _ = _loader_with_progress([(5, 0)])
        seen = []
        loader.subscribe(seen.append)
        asyncio.run(loader.load())
        assert seen == []

    def test_unsubscribe(self):
        loader, _ = _loader_with_progress([(1, 2), (2, 2)])
        seen = []
        unsubscribe = loader.subscribe(seen.append)
        unsubscribe()
        unsubscribe()
        asyncio.run(loader.load())
        assert seen == []

    def test_observer_error_is_contained(self):
        loader, _ = _loader_with_progress([(1, 2), (2, 2)])
        seen = []

        def broken(percent):
            raise ValueError("observer gone")

        loader.subscribe(broken)
        loader.subscribe(seen.append)
        assert asyncio.run(loader.load()) is ModelState.READY
        assert seen == [50, 100]


class TestDispose:
    def test_no_progress_after_dispose(self):
        loader, _ = _loader_with_progress([(1, 2), (2, 2)])
        seen = []
        loader.subscribe(seen.append)
        loader.dispose()
        state = asyncio.run(loader.load())
        assert seen == []
        assert not loader.alive
        assert state is ModelState.LOADING
        assert loader.transcriber is None

    def test_dispose_during_load_discards_result(self):
        async def scenario():
            loader, _ = _loader_with_progress([])
            task = asyncio.ensure_future(loader.load())
            await asyncio.sleep(0)
            loader.dispose()
            return loader, await task

        loader, state = asyncio.run(scenario())
        assert state is ModelState.LOADING
        assert loader.transcriber is None
