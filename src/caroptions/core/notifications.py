"""Transient user-facing messages.

:class:`NotificationCenter` subscribes to ledger events and turns them into
:class:`Notification` objects (success / error / info, with a display
duration).  Front ends drain the queue with :meth:`NotificationCenter.drain`
and render the messages however they like; they can also push their own
messages with :meth:`NotificationCenter.notify`.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum

from caroptions.core.constants import DEFAULT_NOTIFICATION_SECONDS
from caroptions.core.events import (
    CloseRejected,
    EventBus,
    LedgerReseeded,
    PositionClosed,
    TradePlaced,
    TradeRejected,
)
from caroptions.core.formatting import fmt_money, fmt_profit_loss

logger = logging.getLogger(__name__)


class NotificationLevel(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


@dataclass(frozen=True)
class Notification:
    message: str
    level: NotificationLevel = NotificationLevel.INFO
    duration_seconds: float = DEFAULT_NOTIFICATION_SECONDS


class NotificationCenter:
    """Queue of pending notifications fed by ledger events.

    Parameters
    ----------
    duration_seconds:
        Display duration attached to every generated notification.
    max_pending:
        Oldest messages are dropped beyond this many undrained ones.
    """

    def __init__(
        self,
        duration_seconds: float = DEFAULT_NOTIFICATION_SECONDS,
        max_pending: int = 50,
    ) -> None:
        self._duration = duration_seconds
        self._pending: deque[Notification] = deque(maxlen=max_pending)

    def attach(self, bus: EventBus) -> None:
        """Subscribe to every ledger event this centre knows how to phrase."""
        bus.subscribe(TradePlaced, self._on_trade_placed)
        bus.subscribe(TradeRejected, self._on_trade_rejected)
        bus.subscribe(PositionClosed, self._on_position_closed)
        bus.subscribe(CloseRejected, self._on_close_rejected)
        bus.subscribe(LedgerReseeded, self._on_reseeded)

    def notify(
        self,
        message: str,
        level: NotificationLevel = NotificationLevel.INFO,
        duration_seconds: float | None = None,
    ) -> Notification:
        note = Notification(
            message=message,
            level=level,
            duration_seconds=self._duration if duration_seconds is None else duration_seconds,
        )
        self._pending.append(note)
        logger.debug("notify[%s]: %s", note.level.value, note.message)
        return note

    def drain(self) -> list[Notification]:
        """Return and clear all pending notifications, oldest first."""
        out = list(self._pending)
        self._pending.clear()
        return out

    def __len__(self) -> int:
        return len(self._pending)

    # -- event handlers ---------------------------------------------------

    def _on_trade_placed(self, event: TradePlaced) -> None:
        qty = event.position.quantity
        contracts = f"{qty} contracts" if qty > 1 else "a contract"
        self.notify(
            f"Successfully purchased {contracts} of {event.position.option_type.value} "
            f"options on {event.car_name}!",
            NotificationLevel.SUCCESS,
        )

    def _on_trade_rejected(self, event: TradeRejected) -> None:
        self.notify(
            f"Insufficient funds. You need {fmt_money(event.required)} to place this trade.",
            NotificationLevel.ERROR,
        )

    def _on_position_closed(self, event: PositionClosed) -> None:
        pos = event.position
        self.notify(
            f"Closed {pos.option_type.value} position on {event.car_name}: "
            f"{fmt_profit_loss(pos.profit_loss, pos.profit_loss_pct)}. "
            f"{fmt_money(pos.current_value)} returned to cash.",
            NotificationLevel.SUCCESS,
        )

    def _on_close_rejected(self, event: CloseRejected) -> None:
        self.notify(
            f"Position {event.position_id} is not open.",
            NotificationLevel.ERROR,
        )

    def _on_reseeded(self, event: LedgerReseeded) -> None:
        self.notify(f"Portfolio restored from defaults: {event.reason}.", NotificationLevel.INFO)
