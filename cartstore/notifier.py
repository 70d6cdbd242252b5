"""User-facing error notifiers."""
import asyncio
from typing import Any, Callable, Protocol, Set

from .logging import get_logger

logger = get_logger(__name__)


class Notifier(Protocol):
    """Fire-and-forget display of an error message to the user."""

    def notify(self, message: str) -> None:
        ...


class LoggingNotifier:
    """Writes notifications to the log at WARNING level."""

    def __init__(self, name: str = "cartstore.notifications"):
        self._logger = get_logger(name)

    def notify(self, message: str) -> None:
        self._logger.warning(message)


class CallbackNotifier:
    """
    Forwards notifications to a UI callback (toast, status bar, bot message).

    Coroutine callbacks are scheduled on the running loop and not awaited;
    the returned value is never inspected.
    """

    def __init__(self, callback: Callable[[str], Any]):
        self.callback = callback
        self._pending: Set[asyncio.Task] = set()

    def notify(self, message: str) -> None:
        result = self.callback(message)
        if asyncio.iscoroutine(result):
            task = asyncio.get_running_loop().create_task(result)
            # Keep a reference until done, the loop only holds weak ones
            self._pending.add(task)
            task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Async notifier callback failed", exc_info=task.exception())
