"""Cancelable delayed callbacks on the event loop."""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol


class TimerHandle(Protocol):
    """A scheduled callback that can be cancelled before it fires."""

    def cancel(self) -> None:
        """Prevent the callback from running."""


class Scheduler(Protocol):
    """Interface for scheduling delayed callbacks."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """Run ``callback`` after ``delay`` seconds."""


@dataclass
class AsyncioScheduler(Scheduler):
    """Scheduler backed by the running asyncio loop."""

    loop: asyncio.AbstractEventLoop | None = None

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """Schedule on the configured loop, or the running one."""
        loop = self.loop or asyncio.get_running_loop()
        return loop.call_later(delay, callback)
