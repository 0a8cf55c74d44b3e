"""Append-only transcript of chat turns."""

from __future__ import annotations

import time
from collections.abc import Callable
from datetime import UTC, datetime

from webhook_chat.domain.models import ChatTurn, Sender


class TurnIdGenerator:
    """Clock-plus-sequence identifiers: ``<13-digit ms>-<4-digit seq>``.

    The millisecond part never moves backwards and the sequence breaks ties
    inside one millisecond, so ids compare lexically in creation order.
    """

    def __init__(self, clock_ms: Callable[[], int] | None = None) -> None:
        self._clock_ms = clock_ms or (lambda: time.time_ns() // 1_000_000)
        self._last_ms = -1
        self._seq = 0

    def __call__(self) -> str:
        now = max(self._clock_ms(), self._last_ms)
        if now == self._last_ms:
            self._seq += 1
        else:
            self._last_ms = now
            self._seq = 0
        return f"{now:013d}-{self._seq:04d}"


class MessageLog:
    """Ordered store of ``ChatTurn``; insertion order is display order.

    Turns are never updated or removed individually. ``clear`` exists only
    for the session gate, which discards the whole transcript on release.
    """

    def __init__(self, id_factory: Callable[[], str] | None = None) -> None:
        self._turns: list[ChatTurn] = []
        self._next_id = id_factory or TurnIdGenerator()

    def __len__(self) -> int:
        return len(self._turns)

    def append(self, turn: ChatTurn) -> None:
        if not turn.content:
            raise ValueError("finalized turns must have content")
        self._turns.append(turn)

    def record(self, content: str, sender: Sender) -> ChatTurn:
        """Create a turn with a fresh id and timestamp, append it and return it."""
        turn = ChatTurn(
            id=self._next_id(),
            content=content,
            sender=sender,
            created_at=datetime.now(UTC),
        )
        self.append(turn)
        return turn

    def snapshot(self) -> tuple[ChatTurn, ...]:
        return tuple(self._turns)

    def clear(self) -> None:
        self._turns.clear()
