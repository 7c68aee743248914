"""Deferred work on a logical millisecond clock.

Bomb and wildcard activations are queued as tasks that carry only what they
need to find their target again (kind and cell); they read the board when
they run, not when they were queued. Purging dying blocks is a single
debounced deadline: every new request pushes it back to now + delay.
"""

import heapq
import itertools
from dataclasses import dataclass, field
from typing import Callable, Optional
from shared.constants import TaskKind, PURGE_DELAY_MS


@dataclass(order=True)
class ScheduledTask:
    due: int
    seq: int
    kind: TaskKind = field(compare=False)
    q: int = field(default=0, compare=False)
    r: int = field(default=0, compare=False)


# Sentinel kind handed to the runner when the purge deadline passes
PURGE = "purge"


class Scheduler:
    """Time only moves when advance() is called, so tests need no sleeps."""

    def __init__(self, purge_delay_ms: int = PURGE_DELAY_MS):
        self.now: int = 0
        self.purge_delay_ms = purge_delay_ms
        self.purge_due: Optional[int] = None
        self._queue: list[ScheduledTask] = []
        self._seq = itertools.count()

    def schedule(self, delay_ms: int, kind: TaskKind, q: int = 0, r: int = 0) -> ScheduledTask:
        task = ScheduledTask(self.now + max(0, delay_ms), next(self._seq), kind, q, r)
        heapq.heappush(self._queue, task)
        return task

    def request_purge(self):
        """(Re)start the purge window from the current time."""
        self.purge_due = self.now + self.purge_delay_ms

    def pending(self) -> list[ScheduledTask]:
        return sorted(self._queue)

    def has_pending(self) -> bool:
        return bool(self._queue) or self.purge_due is not None

    def _next_due(self) -> Optional[int]:
        candidates = []
        if self._queue:
            candidates.append(self._queue[0].due)
        if self.purge_due is not None:
            candidates.append(self.purge_due)
        return min(candidates) if candidates else None

    def advance(self, elapsed_ms: int, run: Callable) -> int:
        """Move the clock forward, calling run(task) for everything that falls due.

        Tasks run in due order (ties in scheduling order) with `now` set to
        their due time, so work they schedule can still fire inside the same
        window. A purge due at the same instant as a task runs after it.
        Returns the number of callbacks made.
        """
        target = self.now + max(0, elapsed_ms)
        fired = 0
        while True:
            due = self._next_due()
            if due is None or due > target:
                break
            self.now = max(self.now, due)
            if self._queue and self._queue[0].due == due:
                run(heapq.heappop(self._queue))
            else:
                self.purge_due = None
                run(PURGE)
            fired += 1
        self.now = target
        return fired
