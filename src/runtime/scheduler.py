"""Deadline bookkeeping for the engine's tick, progress, and one-shot jobs."""

from __future__ import annotations

import heapq
import itertools
from dataclasses import dataclass, field
from typing import Callable, Optional

DEFAULT_TICK_INTERVAL_SECONDS = 1.0
DEFAULT_PROGRESS_INTERVAL_SECONDS = 0.1


@dataclass(order=True)
class _DeferredCall:
    due_at: float
    sequence: int
    callback: Callable[[], None] = field(compare=False)


@dataclass(frozen=True)
class DueJobs:
    """Work that became due at a given instant."""
    ticks: int = 0
    progress: bool = False
    deferred: tuple[Callable[[], None], ...] = ()


class TickScheduler:
    """Tracks deadlines without owning a thread.

    The engine loop asks for due jobs and for how long it may sleep. Tick
    deadlines advance by whole intervals from the arm instant so a late loop
    iteration does not drift the one-second cadence.
    """

    def __init__(
        self,
        *,
        tick_interval_seconds: float = DEFAULT_TICK_INTERVAL_SECONDS,
        progress_interval_seconds: Optional[float] = DEFAULT_PROGRESS_INTERVAL_SECONDS,
    ):
        if tick_interval_seconds <= 0:
            raise ValueError("tick_interval_seconds must be greater than zero")
        if progress_interval_seconds is not None and progress_interval_seconds <= 0:
            raise ValueError("progress_interval_seconds must be greater than zero")
        self._tick_interval = tick_interval_seconds
        self._progress_interval = progress_interval_seconds
        self._next_tick: Optional[float] = None
        self._next_progress: Optional[float] = None
        self._deferred: list[_DeferredCall] = []
        self._sequence = itertools.count()

    @property
    def armed(self) -> bool:
        return self._next_tick is not None

    @property
    def pending_deferred(self) -> int:
        return len(self._deferred)

    def arm(self, now: float) -> None:
        self._next_tick = now + self._tick_interval
        self._next_progress = (
            now + self._progress_interval if self._progress_interval is not None else None
        )

    def disarm(self) -> None:
        """Stop periodic jobs; one-shot calls already deferred still fire."""
        self._next_tick = None
        self._next_progress = None

    def defer(self, delay_seconds: float, callback: Callable[[], None], *, now: float) -> None:
        due_at = now + max(0.0, delay_seconds)
        heapq.heappush(
            self._deferred,
            _DeferredCall(due_at=due_at, sequence=next(self._sequence), callback=callback),
        )

    def cancel_all(self) -> None:
        self.disarm()
        self._deferred.clear()

    def collect_due(self, now: float) -> DueJobs:
        ticks = 0
        if self._next_tick is not None:
            while self._next_tick <= now:
                ticks += 1
                self._next_tick += self._tick_interval

        progress = False
        if self._next_progress is not None and self._next_progress <= now:
            progress = True
            # Progress redraws are idempotent; skip missed frames instead of replaying them.
            while self._next_progress <= now:
                self._next_progress += self._progress_interval

        deferred = []
        while self._deferred and self._deferred[0].due_at <= now:
            deferred.append(heapq.heappop(self._deferred).callback)

        return DueJobs(ticks=ticks, progress=progress, deferred=tuple(deferred))

    def seconds_until_next(self, now: float) -> Optional[float]:
        deadlines = [
            deadline
            for deadline in (self._next_tick, self._next_progress)
            if deadline is not None
        ]
        if self._deferred:
            deadlines.append(self._deferred[0].due_at)
        if not deadlines:
            return None
        return max(0.0, min(deadlines) - now)
