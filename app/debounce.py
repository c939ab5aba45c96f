"""
Debounced scheduling of async actions.

Each call to `Debouncer.schedule` supersedes the previous one. Superseded
tasks are never cancelled: a pending one wakes after its delay, finds its
generation stale and resolves to None without running its action, and one
whose action was already running has its result discarded when it finishes.
Only the action scheduled last, after a quiet period of `delay` seconds,
delivers a result.
"""
import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Debouncer:
    """Run the most recently scheduled action after a quiet period."""

    def __init__(self, delay: float):
        self.delay = delay
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    def is_current(self, generation: int) -> bool:
        return generation == self._generation

    def schedule(self, action: Callable[[], Awaitable[T]]) -> "asyncio.Task[Optional[T]]":
        """
        Schedule an action, superseding anything scheduled before.

        Must be called from a running event loop.

        Args:
            action: Zero-argument coroutine function to run after the delay

        Returns:
            Task resolving to the action's result, or None if superseded
        """
        self._generation += 1
        return asyncio.create_task(self._run(self._generation, action))

    def cancel(self) -> None:
        """Invalidate every pending or running action; their tasks resolve to None."""
        self._generation += 1

    async def _run(self, generation: int, action: Callable[[], Awaitable[T]]) -> Optional[T]:
        await asyncio.sleep(self.delay)
        if not self.is_current(generation):
            return None

        result = await action()

        if not self.is_current(generation):
            logger.debug(f"Discarding result of superseded action (generation {generation})")
            return None
        return result
