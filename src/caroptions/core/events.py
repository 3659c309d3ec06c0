"""In-process events published by the portfolio ledger.

The ledger publishes an event after each committed transition (and on
rejected trades) so that the notification centre, the CLI, or a test can
react without the ledger knowing about any of them.

Usage::

    bus = EventBus()
    bus.subscribe(TradePlaced, on_trade)
    ledger = PortfolioLedger.load(store, config, bus=bus)
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable

from caroptions.models.position import Position

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Event types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TradePlaced:
    """Emitted after an opened position has been committed."""

    position: Position
    car_name: str
    cash_balance: float


@dataclass(frozen=True)
class TradeRejected:
    """Emitted when a trade is refused for lack of cash."""

    car_id: str
    car_name: str
    required: float
    available: float


@dataclass(frozen=True)
class PositionClosed:
    """Emitted after a closed position has been committed."""

    position: Position
    car_name: str
    cash_balance: float


@dataclass(frozen=True)
class CloseRejected:
    """Emitted when a close targets an id that is not open."""

    position_id: str


@dataclass(frozen=True)
class LedgerReseeded:
    """Emitted when the ledger falls back to (or is reset to) seed data."""

    reason: str


# Type alias for event handlers
EventHandler = Callable[[Any], None]


# ---------------------------------------------------------------------------
# EventBus
# ---------------------------------------------------------------------------


class EventBus:
    """In-process pub/sub event bus.

    Handlers run synchronously on the publishing thread, in registration
    order.  A failing handler is logged and does not stop the others, so a
    broken subscriber can never undo a committed ledger transition.
    """

    def __init__(self) -> None:
        self._handlers: dict[type, list[EventHandler]] = {}
        self._lock = threading.Lock()

    def subscribe(self, event_type: type, handler: EventHandler) -> None:
        """Register *handler* to be called when *event_type* is published."""
        with self._lock:
            self._handlers.setdefault(event_type, []).append(handler)

    def unsubscribe(self, event_type: type, handler: EventHandler) -> None:
        """Remove *handler* from *event_type* subscribers; unknown handlers are ignored."""
        with self._lock:
            handlers = self._handlers.get(event_type, [])
            if handler in handlers:
                handlers.remove(handler)

    def publish(self, event: object) -> None:
        """Dispatch *event* to all registered handlers for its type."""
        with self._lock:
            handlers = list(self._handlers.get(type(event), []))

        for handler in handlers:
            try:
                handler(event)
            except Exception:
                logger.exception(
                    "Event handler %s failed for %s",
                    getattr(handler, "__name__", repr(handler)),
                    type(event).__name__,
                )

    def has_subscribers(self, event_type: type) -> bool:
        with self._lock:
            return bool(self._handlers.get(event_type))
