"""Scheduler helper that owns the background refresh timers of a session.

Callers pass ``schedule`` and ``cancel`` callables into this class so timer
state is tracked in one place and cancelled safely when the account changes or
the session ends. :class:`ThreadTimerBackend` provides those callables on top
of :class:`threading.Timer` for headless use.
"""

from __future__ import annotations

import itertools
import logging
import threading
from dataclasses import dataclass
from typing import Callable, Dict, Optional

log = logging.getLogger(__name__)

ScheduleFn = Callable[[int, Callable[[], None]], str]
CancelFn = Callable[[str], None]


@dataclass
class PollHandle:
    """Timer token associated with a single poll channel.

    Attributes:
        channel: Channel key such as ``balances``, ``coupon`` or ``countdown``.
        token: Token returned by the schedule implementation.
    """
    channel: str
    token: str


class PollingScheduler:
    """Manage one pending timer per channel."""

    def __init__(self, schedule: ScheduleFn, cancel: CancelFn) -> None:
        """Store schedule/cancel functions and initialize handle registry.

        Args:
            schedule: ``(delay_ms, callback) -> token`` timer factory.
            cancel: ``(token) -> None`` cancellation for that factory.
        """
        self._schedule = schedule
        self._cancel = cancel
        self._handles: Dict[str, PollHandle] = {}

    def schedule(self, channel: str, delay_ms: int, callback: Callable[[], None]) -> None:
        """Schedule or reschedule the next tick for a channel."""
        delay = max(1, int(delay_ms))
        self.cancel(channel)
        token = self._schedule(delay, callback)
        self._handles[channel] = PollHandle(channel=channel, token=token)

    def cancel(self, channel: str) -> None:
        """Cancel a pending tick for a channel, if any."""
        handle = self._handles.pop(channel, None)
        if not handle:
            return
        try:
            self._cancel(handle.token)
        except Exception:
            log.debug("Cancel failed for channel %s", channel, exc_info=True)

    def cancel_all(self) -> None:
        """Cancel all pending ticks across all channels."""
        for channel in list(self._handles.keys()):
            self.cancel(channel)

    def handle_for(self, channel: str) -> Optional[PollHandle]:
        """Return the current handle for a channel, if scheduled."""
        return self._handles.get(channel)

    def channels(self) -> list[str]:
        return sorted(self._handles)


class ThreadTimerBackend:
    """``schedule``/``cancel`` pair backed by daemon :class:`threading.Timer` objects."""

    def __init__(self) -> None:
        self._timers: Dict[str, threading.Timer] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> str:
        token = f"timer-{next(self._ids)}"

        def _fire() -> None:
            with self._lock:
                self._timers.pop(token, None)
            try:
                callback()
            except Exception:
                log.exception("Scheduled callback %s failed", token)

        timer = threading.Timer(delay_ms / 1000.0, _fire)
        timer.daemon = True
        with self._lock:
            self._timers[token] = timer
        timer.start()
        return token

    def cancel(self, token: str) -> None:
        with self._lock:
            timer = self._timers.pop(token, None)
        if timer is not None:
            timer.cancel()

    def pending(self) -> int:
        with self._lock:
            return len(self._timers)


__all__ = ["PollHandle", "PollingScheduler", "ThreadTimerBackend"]
