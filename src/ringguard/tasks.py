"""Cancellable repeating background tasks."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger("ringguard")


class RepeatingTask:
    """Run ``cycle(stop_event)`` on a daemon thread until cancelled.

    A cycle should wait with ``stop_event.wait(seconds)`` so that cancel
    takes effect within one cycle. An exception ends the task; ``on_exit``
    runs once when the loop ends for any reason other than cancel().
    """

    def __init__(
        self,
        name: str,
        cycle: Callable[[threading.Event], Optional[bool]],
        on_exit: Optional[Callable[[], None]] = None,
        join_timeout: float = 2.0,
    ) -> None:
        self.name = name
        self._cycle = cycle
        self._on_exit = on_exit
        self._join_timeout = join_timeout
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def cancelled(self) -> bool:
        return self._stop.is_set()

    def start(self) -> None:
        if self._thread is not None:
            raise RuntimeError(f"Task {self.name} already started.")
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()

    def cancel(self) -> None:
        self._stop.set()
        thread = self._thread
        if thread is None or thread is threading.current_thread():
            return
        thread.join(self._join_timeout)
        if thread.is_alive():
            logger.warning("Task %s did not stop within %.1fs", self.name, self._join_timeout)

    def _run(self) -> None:
        try:
            while not self._stop.is_set():
                # A cycle returns False when its work is finished.
                if self._cycle(self._stop) is False:
                    break
        except Exception:
            logger.exception("Task %s failed", self.name)
        if not self._stop.is_set() and self._on_exit is not None:
            try:
                self._on_exit()
            except Exception:
                logger.exception("Task %s exit callback failed", self.name)
