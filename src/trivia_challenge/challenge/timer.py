"""Cancellable repeating callbacks used to drive round countdowns.

The round engine only needs two things from a scheduler: arm a callback
that fires every ``interval`` seconds, and cancel it through the returned
handle. :class:`PolledScheduler` delivers due callbacks whenever its owner
calls :meth:`PolledScheduler.pump` (the console front end pumps between
prompts); :class:`TextualScheduler` hands the work to a running Textual app.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, List, Protocol

if TYPE_CHECKING:  # pragma: no cover - typing only
    from textual.app import App
    from textual.timer import Timer

__all__ = [
    "Clock",
    "PolledScheduler",
    "Scheduler",
    "TextualScheduler",
    "TimerHandle",
]

Clock = Callable[[], float]
Callback = Callable[[], None]


class TimerHandle(Protocol):
    """Handle for a scheduled repeating callback."""

    @property
    def cancelled(self) -> bool: ...

    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Anything able to arm a repeating callback."""

    def call_every(
        self, interval: float, callback: Callback
    ) -> TimerHandle: ...


@dataclass(eq=False)
class _PolledJob:
    interval: float
    callback: Callback
    due: float
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


@dataclass
class PolledScheduler:
    """Scheduler that fires callbacks when :meth:`pump` is called.

    Every elapsed interval is delivered, so a pump after 3.5 seconds fires a
    one-second callback three times. Callbacks may cancel their own handle
    (or arm new jobs) while being delivered.
    """

    clock: Clock = time.monotonic
    _jobs: List[_PolledJob] = field(default_factory=list, repr=False)

    def call_every(self, interval: float, callback: Callback) -> TimerHandle:
        if interval <= 0:
            raise ValueError("interval must be positive")
        job = _PolledJob(interval, callback, due=self.clock() + interval)
        self._jobs.append(job)
        return job

    def pump(self) -> int:
        """Fire every callback that is due; return how many fired."""

        now = self.clock()
        fired = 0
        for job in list(self._jobs):
            while not job.cancelled and job.due <= now:
                job.due += job.interval
                job.callback()
                fired += 1
        self._jobs = [job for job in self._jobs if not job.cancelled]
        return fired

    @property
    def active_jobs(self) -> int:
        return sum(1 for job in self._jobs if not job.cancelled)


@dataclass(eq=False)
class _TextualHandle:
    timer: "Timer"
    cancelled: bool = False

    def cancel(self) -> None:
        if self.cancelled:
            return
        self.cancelled = True
        self.timer.stop()


class TextualScheduler:
    """Arm callbacks on a Textual app's event loop via ``set_interval``."""

    def __init__(self, app: "App") -> None:
        self._app = app

    def call_every(self, interval: float, callback: Callback) -> TimerHandle:
        return _TextualHandle(self._app.set_interval(interval, callback))
