"""
Debounced re-encoding of the diagram buffer.

Every edit schedules a run a fixed quiet period in the future. A newer edit
cancels a run that is still waiting, so only the latest snapshot is encoded.
Runs that already started are left to finish, but each run carries a
generation number and results from superseded generations are dropped.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

from umlstudio.logging import get_logger

logger = get_logger("debounce")

T = TypeVar("T")

ResultCallback = Callable[[T, int], None]
ErrorCallback = Callable[[Exception, int], None]


class Debouncer(Generic[T]):
    """
    Run an async function a quiet period after the most recent call.

    Example:
        debouncer = Debouncer(
            encode_diagram,
            delay=0.6,
            on_result=lambda url, gen: print(url),
        )
        debouncer.schedule("@startuml\\nA -> B\\n@enduml")
        debouncer.schedule("@startuml\\nA -> C\\n@enduml")  # cancels the first
        await debouncer.flush()
    """

    def __init__(
        self,
        func: Callable[[str], Awaitable[T]],
        delay: float,
        on_result: ResultCallback[T] | None = None,
        on_error: ErrorCallback | None = None,
    ) -> None:
        self._func = func
        self.delay = delay
        self._on_result = on_result
        self._on_error = on_error

        self._generation = 0
        self._scheduled: asyncio.Task[None] | None = None
        self._inflight: set[asyncio.Task[None]] = set()

    @property
    def generation(self) -> int:
        """Generation number of the most recent schedule() call."""
        return self._generation

    @property
    def pending(self) -> bool:
        """True while a run is waiting or in flight."""
        return (self._scheduled is not None and not self._scheduled.done()) or bool(
            self._inflight
        )

    def schedule(self, text: str) -> int:
        """
        Schedule a run on ``text`` after the quiet period.

        A run that is still waiting is cancelled before it starts.

        Returns:
            Generation number assigned to this run
        """
        if self._scheduled is not None and not self._scheduled.done():
            self._scheduled.cancel()
            logger.debug("Cancelled scheduled run (generation %d)", self._generation)

        self._generation += 1
        generation = self._generation
        self._scheduled = asyncio.create_task(self._run(text, generation))
        return generation

    def cancel(self) -> None:
        """Cancel the waiting run and discard results of runs in flight."""
        if self._scheduled is not None and not self._scheduled.done():
            self._scheduled.cancel()
        self._scheduled = None
        # Bumping the generation makes any in-flight result stale
        self._generation += 1

    async def flush(self) -> None:
        """Wait until the waiting run and all runs in flight have finished."""
        while True:
            tasks = list(self._inflight)
            if self._scheduled is not None and not self._scheduled.done():
                tasks.append(self._scheduled)
            if not tasks:
                return
            await asyncio.gather(*tasks, return_exceptions=True)

    async def close(self) -> None:
        """Cancel everything and wait for tasks to unwind."""
        self.cancel()
        tasks = list(self._inflight)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    async def _run(self, text: str, generation: int) -> None:
        await asyncio.sleep(self.delay)

        task = asyncio.current_task()
        assert task is not None
        if self._scheduled is task:
            self._scheduled = None
        self._inflight.add(task)

        try:
            result = await self._func(text)
        except Exception as exc:
            if generation != self._generation:
                logger.debug("Dropping error from stale generation %d: %s", generation, exc)
                return
            logger.warning("Debounced run failed (generation %d): %s", generation, exc)
            if self._on_error is not None:
                self._notify(self._on_error, exc, generation)
            return
        finally:
            self._inflight.discard(task)

        if generation != self._generation:
            logger.debug(
                "Dropping stale result (generation %d, latest %d)",
                generation,
                self._generation,
            )
            return

        if self._on_result is not None:
            self._notify(self._on_result, result, generation)

    @staticmethod
    def _notify(callback: Callable[..., None], value: object, generation: int) -> None:
        # Runs inside a background task, so nothing would retrieve the error
        try:
            callback(value, generation)
        except Exception:
            logger.exception("Debounce callback failed (generation %d)", generation)
