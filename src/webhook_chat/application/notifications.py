"""Transient notification channel (toasts) for the presentation layer."""

from __future__ import annotations

from collections import deque
from collections.abc import Callable

from loguru import logger

from webhook_chat.domain.models import Toast


class NotificationQueue:
    """FIFO of toasts waiting to be shown.

    Pollers call ``drain``; push-style UIs register a callback with
    ``subscribe``. Toasts are queued either way.
    """

    def __init__(self, maxlen: int = 50) -> None:
        self._pending: deque[Toast] = deque(maxlen=maxlen)
        self._subscribers: list[Callable[[Toast], None]] = []

    def subscribe(self, callback: Callable[[Toast], None]) -> None:
        self._subscribers.append(callback)

    def publish(self, toast: Toast) -> None:
        self._pending.append(toast)
        for callback in self._subscribers:
            try:
                callback(toast)
            except Exception:
                logger.exception("Toast subscriber failed")

    def drain(self) -> list[Toast]:
        toasts = list(self._pending)
        self._pending.clear()
        return toasts
