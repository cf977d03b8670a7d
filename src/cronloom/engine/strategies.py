"""Timer strategies used by CronJob to wait for the next occurrence."""

from __future__ import annotations

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

logger = logging.getLogger(__name__)


def seconds_until(target: datetime) -> float:
    """Seconds from now until ``target`` (negative once it has passed).

    Naive datetimes are read as local time, aware ones by their offset.
    """
    return target.timestamp() - time.time()


class TimerStrategy(ABC):
    """Something that calls ``on_fire(target)`` once ``target`` is reached."""

    def __init__(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop
        self._handle: asyncio.TimerHandle | None = None

    @property
    def armed(self) -> bool:
        """True while a timer is pending."""
        return self._handle is not None

    @abstractmethod
    def arm(self, target: datetime, on_fire: Callable[[datetime], None]) -> None:
        """Wait for ``target`` and then call ``on_fire`` with it."""

    def disarm(self) -> None:
        """Cancel the pending timer, if any."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None


class CalculatedTimeoutStrategy(TimerStrategy):
    """One single-shot timer per occurrence.

    Fires exactly once per ``arm`` call; the owner re-arms for the next
    occurrence after the execution it triggered has finished.
    """

    def arm(self, target: datetime, on_fire: Callable[[datetime], None]) -> None:
        self.disarm()
        delay = max(0.0, seconds_until(target))
        logger.debug(f"Arming single-shot timer for {target.isoformat()} ({delay:.3f}s)")
        self._handle = self._loop.call_later(delay, self._fire, target, on_fire)

    def _fire(self, target: datetime, on_fire: Callable[[datetime], None]) -> None:
        self._handle = None
        on_fire(target)


class PollingStrategy(TimerStrategy):
    """Fixed-interval check of the current time against the target.

    Re-arming while already polling only moves the target; the tick keeps
    its cadence. Ticks do not wait for an execution they started, so a
    callback slower than the interval can overlap the next due tick.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop, interval: float = 1.0) -> None:
        super().__init__(loop)
        if interval <= 0:
            raise ValueError(f"Polling interval must be positive, got {interval}")
        self.interval = interval
        self._target: datetime | None = None
        self._on_fire: Callable[[datetime], None] | None = None

    @property
    def target(self) -> datetime | None:
        return self._target

    def arm(self, target: datetime, on_fire: Callable[[datetime], None]) -> None:
        self._target = target
        self._on_fire = on_fire
        if self._handle is None:
            logger.debug(f"Polling every {self.interval}s for {target.isoformat()}")
            self._handle = self._loop.call_later(self.interval, self._tick)

    def disarm(self) -> None:
        super().disarm()
        self._target = None
        self._on_fire = None

    def _tick(self) -> None:
        self._handle = self._loop.call_later(self.interval, self._tick)
        if self._target is not None and self._on_fire is not None:
            if seconds_until(self._target) <= 0:
                self._on_fire(self._target)
