"""Debounced callbacks driven by a Tk-style scheduler.

The scheduler is anything with Tk's after()/after_cancel() pair, normally the
grid window itself. Each trigger() cancels the pending tick, so at most one
callback is ever outstanding.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol


class Scheduler(Protocol):
    def after(self, ms: int, func: Callable[[], None]) -> str: ...

    def after_cancel(self, id: str) -> None: ...


class Debouncer:
    """Defers a callback until triggers stop arriving for delay_ms."""

    def __init__(self, scheduler: Scheduler, delay_ms: int, callback: Callable[[], None]):
        self._scheduler = scheduler
        self._delay_ms = delay_ms
        self._callback = callback
        self._after_id: str | None = None

    @property
    def pending(self) -> bool:
        return self._after_id is not None

    def trigger(self) -> None:
        """Restart the timer."""
        self.cancel()
        self._after_id = self._scheduler.after(self._delay_ms, self._fire)

    def cancel(self) -> None:
        if self._after_id is not None:
            self._scheduler.after_cancel(self._after_id)
            self._after_id = None

    def flush(self) -> None:
        """Run the pending callback now, if any."""
        if self._after_id is not None:
            self.cancel()
            self._callback()

    def _fire(self) -> None:
        self._after_id = None
        self._callback()
