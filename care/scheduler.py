import asyncio
import inspect
from typing import Awaitable, Callable, Dict, Optional

from loguru import logger


class TaskRegistry:
    """Long-lived widget work (follow-ups, timers) keyed by conversation.

    Cancelling drops the tasks from the registry immediately, so ``pending``
    reads zero right after teardown even before the event loop has unwound them.
    """

    def __init__(self) -> None:
        self._tasks: Dict[str, Dict[asyncio.Task, str]] = {}

    def spawn(self, key: str, coro: Awaitable, kind: str = "task") -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.setdefault(key, {})[task] = kind
        task.add_done_callback(lambda t: self._finished(key, t))
        return task

    def call_later(self, key: str, delay: float, callback: Callable, kind: str = "follow_up") -> asyncio.Task:
        async def _later():
            await asyncio.sleep(delay)
            result = callback()
            if inspect.isawaitable(result):
                await result
        return self.spawn(key, _later(), kind)

    def _finished(self, key: str, task: asyncio.Task) -> None:
        tasks = self._tasks.get(key)
        if tasks is not None:
            tasks.pop(task, None)
            if not tasks:
                self._tasks.pop(key, None)
        if not task.cancelled() and task.exception() is not None:
            logger.opt(exception=task.exception()).error(f"scheduled {key} task failed")

    def cancel(self, key: str, kind: Optional[str] = None) -> int:
        tasks = self._tasks.get(key, {})
        doomed = [t for t, k in tasks.items() if kind is None or k == kind]
        for t in doomed:
            tasks.pop(t, None)
            t.cancel()
        if not tasks:
            self._tasks.pop(key, None)
        return len(doomed)

    def cancel_all(self) -> int:
        return sum(self.cancel(key) for key in list(self._tasks))

    def pending(self, key: Optional[str] = None, kind: Optional[str] = None) -> int:
        groups = [self._tasks.get(key, {})] if key is not None else list(self._tasks.values())
        return sum(1 for tasks in groups for k in tasks.values() if kind is None or k == kind)
