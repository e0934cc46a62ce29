from __future__ import annotations

import logging
from typing import Callable, List, Optional

from ..domain.entities import StatusEvent

log = logging.getLogger(__name__)

StatusListener = Callable[[Optional[StatusEvent]], None]


class StatusChannel:
    """Single-slot status sink shared by every flow.

    ``publish`` replaces the current event and notifies listeners; the channel
    never accumulates history. ``clear`` empties the slot and notifies with
    ``None``. A failing listener is logged and does not stop the others.
    """

    def __init__(self) -> None:
        self._latest: Optional[StatusEvent] = None
        self._listeners: List[StatusListener] = []

    @property
    def latest(self) -> Optional[StatusEvent]:
        return self._latest

    def publish(self, event: StatusEvent) -> None:
        if not isinstance(event, StatusEvent):
            raise TypeError("StatusChannel.publish requires a StatusEvent.")
        self._latest = event
        log.debug("status %s: %s", event.kind, event.message)
        self._notify(event)

    def clear(self) -> None:
        self._latest = None
        self._notify(None)

    def subscribe(self, listener: StatusListener) -> Callable[[], None]:
        """Register ``listener`` and return a callable that removes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # Convenience publishers
    def loading(self, message: str) -> None:
        self.publish(StatusEvent("loading", message))

    def info(self, message: str) -> None:
        self.publish(StatusEvent("info", message))

    def success(self, message: str, tx_hash: Optional[str] = None) -> None:
        self.publish(StatusEvent("success", message, tx_hash))

    def error(self, message: str) -> None:
        self.publish(StatusEvent("error", message))

    def _notify(self, event: Optional[StatusEvent]) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                log.exception("Status listener failed")


__all__ = ["StatusChannel", "StatusListener"]
