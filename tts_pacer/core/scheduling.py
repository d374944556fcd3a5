"""Frame schedulers the pacer runs on.

WHY: In a browser the pacer would ride requestAnimationFrame. Here the
host decides: an asyncio event loop for live previews, a manual frame
clock for tests and offline rendering. The pacer only needs "call me
back next frame" plus a way to cancel that.

HOW: Scheduler and TickHandle are structural protocols. Each schedule()
call registers exactly one callback and returns a handle whose cancel()
guarantees the callback will not run.

RULES:
- One callback per schedule() call; schedulers never repeat callbacks
- cancel() is idempotent and safe after the callback has run
- ManualScheduler's clock starts at 0 ms and only moves on advance()
- Frame intervals must be positive (ValueError otherwise)
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from typing import List, Optional, Protocol


class TickHandle(Protocol):
    """Cancellation handle returned by Scheduler.schedule()."""

    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Anything that can run a callback on the next display frame."""

    def schedule(self, callback: Callable[[], None]) -> TickHandle: ...


def monotonic_ms() -> float:
    """Default pacer clock: monotonic time in milliseconds."""
    return time.monotonic() * 1000.0


def _check_interval(frame_interval_ms: float) -> float:
    if frame_interval_ms <= 0:
        raise ValueError(
            "frame_interval_ms must be positive, got {}".format(frame_interval_ms)
        )
    return frame_interval_ms


class _ManualHandle:
    def __init__(self, callback: Callable[[], None], due_ms: float) -> None:
        self.callback = callback
        self.due_ms = due_ms
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Deterministic frame clock.

    WHY: Tests and offline tools need to step through playback frame by
    frame without sleeping.

    HOW: schedule() queues the callback for the next frame boundary.
    advance() moves the clock forward one frame at a time and runs
    every callback that has come due. now() doubles as the pacer clock.
    """

    def __init__(self, frame_interval_ms: float = 16.0, start_ms: float = 0.0) -> None:
        self.frame_interval_ms = _check_interval(frame_interval_ms)
        self._now_ms = start_ms
        self._queue: List[_ManualHandle] = []

    def now(self) -> float:
        return self._now_ms

    def schedule(self, callback: Callable[[], None]) -> TickHandle:
        handle = _ManualHandle(callback, self._now_ms + self.frame_interval_ms)
        self._queue.append(handle)
        return handle

    @property
    def pending(self) -> int:
        """Number of scheduled callbacks that are neither run nor cancelled."""
        return sum(1 for h in self._queue if not h.cancelled)

    def run_frame(self) -> int:
        """Advance exactly one frame and run due callbacks. Returns how many ran."""
        self._now_ms += self.frame_interval_ms
        return self._run_due()

    def advance(self, ms: float) -> int:
        """Advance the clock by ms, frame by frame. Returns callbacks run."""
        ran = 0
        target = self._now_ms + ms
        while self._now_ms + self.frame_interval_ms <= target:
            ran += self.run_frame()
        if self._now_ms < target:
            self._now_ms = target
            ran += self._run_due()
        return ran

    def _run_due(self) -> int:
        due = [h for h in self._queue if h.due_ms <= self._now_ms]
        self._queue = [h for h in self._queue if h.due_ms > self._now_ms]
        ran = 0
        for handle in due:
            if handle.cancelled:
                continue
            handle.cancelled = True
            handle.callback()
            ran += 1
        return ran


class AsyncioScheduler:
    """Frame scheduler backed by an asyncio event loop.

    Uses loop.call_later(); the returned asyncio.TimerHandle already
    satisfies the TickHandle protocol.
    """

    def __init__(
        self,
        frame_interval_ms: float = 16.0,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> None:
        self.frame_interval_ms = _check_interval(frame_interval_ms)
        self._loop = loop

    def schedule(self, callback: Callable[[], None]) -> TickHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(self.frame_interval_ms / 1000.0, callback)

    def now(self) -> float:
        """Loop clock in milliseconds."""
        loop = self._loop or asyncio.get_running_loop()
        return loop.time() * 1000.0
