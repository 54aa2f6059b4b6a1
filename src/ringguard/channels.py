"""Vibration and strobe side-channels."""

from __future__ import annotations

import logging
import threading
from typing import Optional

from .device import Torch, Vibrator
from .tasks import RepeatingTask

logger = logging.getLogger("ringguard")

VIBRATE_ON_MS = 1000
VIBRATE_OFF_MS = 500
STROBE_ON_SECONDS = 0.3
STROBE_OFF_SECONDS = 0.3


class SideChannel:
    name = "side-channel"

    def __init__(self) -> None:
        self._task: Optional[RepeatingTask] = None

    @property
    def alive(self) -> bool:
        return self._task is not None and self._task.alive

    def _cycle(self, stop: threading.Event) -> None:
        raise NotImplementedError

    def _off(self) -> None:
        pass

    def start(self) -> None:
        self._task = RepeatingTask(f"ringguard-{self.name}", self._cycle)
        self._task.start()

    def stop(self) -> None:
        task, self._task = self._task, None
        if task is not None:
            task.cancel()
        self._off()


class VibrationChannel(SideChannel):
    name = "vibration"

    def __init__(self, vibrator: Vibrator) -> None:
        super().__init__()
        self.vibrator = vibrator

    def _cycle(self, stop: threading.Event) -> None:
        self.vibrator.vibrate(VIBRATE_ON_MS)
        stop.wait((VIBRATE_ON_MS + VIBRATE_OFF_MS) / 1000.0)

    def _off(self) -> None:
        self.vibrator.cancel()


class StrobeChannel(SideChannel):
    name = "strobe"

    def __init__(self, torch: Torch) -> None:
        super().__init__()
        self.torch = torch

    def _cycle(self, stop: threading.Event) -> None:
        self.torch.set_torch(True)
        stop.wait(STROBE_ON_SECONDS)
        self.torch.set_torch(False)
        stop.wait(STROBE_OFF_SECONDS)

    def _off(self) -> None:
        self.torch.set_torch(False)
