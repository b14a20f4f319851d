from __future__ import annotations

"""
Dispatch-and-continue work.

``BackgroundTasks`` owns work the caller must not wait for: notification
coroutines scheduled on the running loop, and detached OS processes such as
custom notification or restart commands. Failures are logged and never
retried or re-raised into the caller.
"""

import asyncio
import logging
import subprocess
from typing import Any, Coroutine, Sequence, Set

logger = logging.getLogger(__name__)


class BackgroundTasks:
    """Tracks fire-and-forget tasks so an invocation can flush them before exiting."""

    def __init__(self) -> None:
        self._tasks: Set[asyncio.Task[Any]] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def schedule(self, coro: Coroutine[Any, Any, Any], *, description: str) -> asyncio.Task[Any]:
        """Start ``coro`` on the running loop without awaiting it."""

        task = asyncio.get_running_loop().create_task(coro, name=description)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            logger.warning("Background task %s was cancelled", task.get_name())
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Background task %s failed: %s", task.get_name(), exc, exc_info=exc)

    def spawn_detached(self, argv: Sequence[str], *, description: str) -> bool:
        """
        Launch ``argv`` in its own session and return immediately.

        The process outcome is never observed; only a failure to launch is
        reported (logged, and False returned).
        """
        if not argv:
            logger.error("Refusing to spawn %s: empty command", description)
            return False
        try:
            subprocess.Popen(
                list(argv),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        except OSError as exc:  # policy_guard: allow-silent-handler
            logger.error("Failed to launch %s (%s): %s", description, argv[0], exc)
            return False
        logger.debug("Launched %s: %s", description, " ".join(argv))
        return True

    async def drain(self, timeout: float) -> None:
        """Give pending tasks up to ``timeout`` seconds, then cancel the stragglers."""

        if not self._tasks:
            return
        pending_tasks = set(self._tasks)
        _done, still_pending = await asyncio.wait(pending_tasks, timeout=timeout)
        for task in still_pending:
            logger.warning("Background task %s did not finish within %.1fs", task.get_name(), timeout)
            task.cancel()
        if still_pending:
            await asyncio.gather(*still_pending, return_exceptions=True)


__all__ = ["BackgroundTasks"]
