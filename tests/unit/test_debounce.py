"""Unit tests for the debouncer."""

import asyncio

import pytest

from knowledge_search.session.debounce import Debouncer


def evaluation(calls, value):
    def evaluate():
        calls.append(value)
        return value
    return evaluate


class TestDebouncer:
    """Test cases for the Debouncer class."""

    @pytest.fixture
    def debouncer(self):
        """Create a debouncer with a short quiet window."""
        return Debouncer(wait_ms=20)

    async def test_burst_runs_last_only(self, debouncer):
        """Test that a burst of keystrokes evaluates only the final text."""
        calls, results = [], []

        for text in ("a", "ab", "abc"):
            debouncer.schedule(text, evaluation(calls, text), results.append)
        await debouncer.wait()

        assert calls == ["abc"]
        assert results == ["abc"]

    async def test_waits_for_quiet_window(self, debouncer):
        """Test that nothing runs before the window elapses."""
        calls = []

        debouncer.schedule("abc", evaluation(calls, "abc"))
        assert calls == []
        assert debouncer.pending is True

        await debouncer.wait()
        assert calls == ["abc"]
        assert debouncer.pending is False

    async def test_running_evaluation_result_is_discarded(self, debouncer):
        """Test that a superseded evaluation never delivers its result."""
        results = []
        started = asyncio.Event()
        release = asyncio.Event()

        async def slow():
            started.set()
            await release.wait()
            return "abc"

        debouncer.schedule("abc", slow, results.append)
        await started.wait()

        debouncer.schedule("xyz", lambda: "xyz", results.append)
        release.set()
        await debouncer.wait()

        assert results == ["xyz"]

    async def test_blank_query_skips_window(self, debouncer):
        """Test that blank text is evaluated synchronously and cancels pending work."""
        calls, results = [], []

        debouncer.schedule("abc", evaluation(calls, "abc"), results.append)
        debouncer.schedule("   ", evaluation(calls, []), results.append)

        assert results == [[]]

        await debouncer.wait()
        assert calls == [[]]

    async def test_run_now(self, debouncer):
        """Test immediate evaluation superseding pending work."""
        calls, results = [], []

        debouncer.schedule("ab", evaluation(calls, "ab"), results.append)
        value = await debouncer.run_now("abc", evaluation(calls, "abc"), results.append)
        await debouncer.wait()

        assert value == "abc"
        assert calls == ["abc"]
        assert results == ["abc"]

    async def test_cancel(self, debouncer):
        """Test dropping pending work."""
        calls = []

        debouncer.schedule("abc", evaluation(calls, "abc"))
        debouncer.cancel()
        await debouncer.wait()

        assert calls == []

    async def test_close_cancels_running_work(self, debouncer):
        """Test that close stops evaluations already in flight."""
        started = asyncio.Event()
        finished = []

        async def slow():
            started.set()
            await asyncio.sleep(10)
            finished.append(True)

        debouncer.schedule("abc", slow)
        await started.wait()

        debouncer.close()
        await debouncer.wait()

        assert finished == []

    async def test_generations(self, debouncer):
        """Test generation tokens."""
        first = debouncer.schedule("a", lambda: "a")
        second = debouncer.schedule("ab", lambda: "ab")

        assert second > first
        assert debouncer.is_current(second)
        assert not debouncer.is_current(first)

        debouncer.close()

    async def test_evaluation_errors_are_contained(self, debouncer):
        """Test that a failing evaluation does not break the debouncer."""
        results = []

        def boom():
            raise RuntimeError("boom")

        debouncer.schedule("abc", boom, results.append)
        await debouncer.wait()

        debouncer.schedule("abcd", lambda: "abcd", results.append)
        await debouncer.wait()

        assert results == ["abcd"]

    def test_negative_wait(self):
        """Test that the quiet window cannot be negative."""
        with pytest.raises(ValueError):
            Debouncer(wait_ms=-1)
