"""Cancellable timers built on Flask-SocketIO background tasks."""

from __future__ import annotations

import logging
from typing import Callable

from flask_socketio import SocketIO

logger = logging.getLogger(__name__)


class TaskHandle:
    """Owned handle for a scheduled callback; cancelling is idempotent."""

    def __init__(self, name: str = "") -> None:
        self.name = name
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True

    def __repr__(self) -> str:
        state = "cancelled" if self.cancelled else "pending"
        return f"<TaskHandle {self.name or '?'} {state}>"


class BackgroundScheduler:
    def __init__(self, socketio: SocketIO) -> None:
        self._socketio = socketio

    def every(self, interval: float, callback: Callable[[], None], name: str = "") -> TaskHandle:
        handle = TaskHandle(name)

        def _runner() -> None:
            while True:
                self._socketio.sleep(interval)
                if handle.cancelled:
                    break
                if not self._run(handle, callback):
                    break

        self._socketio.start_background_task(_runner)
        return handle

    def later(self, delay: float, callback: Callable[[], None], name: str = "") -> TaskHandle:
        handle = TaskHandle(name)

        def _runner() -> None:
            self._socketio.sleep(delay)
            if handle.cancelled:
                return
            handle.cancel()
            self._run(handle, callback)

        self._socketio.start_background_task(_runner)
        return handle

    @staticmethod
    def _run(handle: TaskHandle, callback: Callable[[], None]) -> bool:
        try:
            callback()
        except Exception:
            # A failing room must not take other rooms' timers down with it.
            logger.exception("timer %r failed; stopping it", handle)
            handle.cancel()
            return False
        return True
