"""Debouncing and superseding of query evaluations."""

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Optional, Set, Union

import structlog

logger = structlog.get_logger(__name__)

DEFAULT_DEBOUNCE_MS = 300

Evaluate = Callable[[], Union[Any, Awaitable[Any]]]
ResultCallback = Callable[[Any], None]


class Debouncer:
    """
    Runs only the last of a burst of evaluations, and drops superseded results.

    Every call to schedule(), run_now() or cancel() starts a new generation.
    An evaluation still in its quiet window is cancelled outright; one that
    is already running is allowed to finish, but its result is only handed to
    ``on_result`` if no newer generation has started meanwhile.
    """

    def __init__(self, wait_ms: int = DEFAULT_DEBOUNCE_MS) -> None:
        """
        Initialize the debouncer.

        Args:
            wait_ms: Quiet window in milliseconds
        """
        if wait_ms < 0:
            raise ValueError(f"wait_ms must not be negative, got {wait_ms}")
        self.wait_ms = wait_ms
        self._generation = 0
        self._waiting: Optional[asyncio.Task] = None
        self._tasks: Set[asyncio.Task] = set()

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def pending(self) -> bool:
        """Whether any evaluation is waiting or running."""
        return any(not task.done() for task in self._tasks)

    def is_current(self, generation: int) -> bool:
        """Whether ``generation`` has not been superseded."""
        return generation == self._generation

    def schedule(
        self,
        query_text: str,
        evaluate: Evaluate,
        on_result: Optional[ResultCallback] = None
    ) -> int:
        """
        Evaluate after the quiet window unless superseded first.

        Blank queries skip the window: pending work is cancelled and
        ``evaluate`` is invoked right away.

        Args:
            query_text: Query the evaluation is for
            evaluate: Callable returning the result or an awaitable of it
            on_result: Receives the result if it is still current

        Returns:
            Generation token of this evaluation
        """
        generation = self._advance()

        if not (query_text or "").strip():
            self._invoke(generation, evaluate, on_result)
            return generation

        task = asyncio.get_running_loop().create_task(
            self._run_after_quiet_window(generation, evaluate, on_result)
        )
        self._track(task)
        self._waiting = task
        return generation

    async def run_now(
        self,
        query_text: str,
        evaluate: Evaluate,
        on_result: Optional[ResultCallback] = None
    ) -> Any:
        """
        Evaluate immediately, superseding anything pending.

        Returns:
            The result, or None if it was superseded while running
        """
        generation = self._advance()
        logger.debug("Evaluating without debounce", query=query_text, generation=generation)
        return await self._evaluate(generation, evaluate, on_result)

    def cancel(self) -> None:
        """Drop pending work and mark running evaluations stale."""
        self._advance()

    def close(self) -> None:
        """Cancel every waiting and running evaluation."""
        self._advance()
        for task in list(self._tasks):
            task.cancel()

    async def wait(self) -> None:
        """Wait until no evaluation is waiting or running."""
        while True:
            pending = [task for task in self._tasks if not task.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    def _advance(self) -> int:
        self._generation += 1
        if self._waiting is not None and not self._waiting.done():
            self._waiting.cancel()
        self._waiting = None
        return self._generation

    def _track(self, task: asyncio.Task) -> None:
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run_after_quiet_window(
        self,
        generation: int,
        evaluate: Evaluate,
        on_result: Optional[ResultCallback]
    ) -> None:
        await asyncio.sleep(self.wait_ms / 1000.0)

        if self._waiting is asyncio.current_task():
            self._waiting = None

        if not self.is_current(generation):
            return

        await self._evaluate(generation, evaluate, on_result)

    def _invoke(
        self,
        generation: int,
        evaluate: Evaluate,
        on_result: Optional[ResultCallback]
    ) -> None:
        try:
            result = evaluate()
        except Exception:
            logger.exception("Query evaluation failed", generation=generation)
            return

        if inspect.isawaitable(result):
            task = asyncio.get_running_loop().create_task(
                self._finish(generation, result, on_result)
            )
            self._track(task)
        else:
            self._deliver(generation, result, on_result)

    async def _evaluate(
        self,
        generation: int,
        evaluate: Evaluate,
        on_result: Optional[ResultCallback]
    ) -> Any:
        try:
            result = evaluate()
        except Exception:
            logger.exception("Query evaluation failed", generation=generation)
            return None

        if inspect.isawaitable(result):
            return await self._finish(generation, result, on_result)
        return self._deliver(generation, result, on_result)

    async def _finish(
        self,
        generation: int,
        pending_result: Awaitable[Any],
        on_result: Optional[ResultCallback]
    ) -> Any:
        try:
            result = await pending_result
        except Exception:
            logger.exception("Query evaluation failed", generation=generation)
            return None
        return self._deliver(generation, result, on_result)

    def _deliver(self, generation: int, result: Any, on_result: Optional[ResultCallback]) -> Any:
        if not self.is_current(generation):
            logger.debug("Discarding stale result", generation=generation, current=self._generation)
            return None

        if on_result is not None:
            on_result(result)
        return result
