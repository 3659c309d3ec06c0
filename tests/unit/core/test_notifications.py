"""Tests for caroptions.core.notifications."""

from __future__ import annotations

import dataclasses

from caroptions.core.events import (
    CloseRejected,
    EventBus,
    LedgerReseeded,
    PositionClosed,
    TradePlaced,
    TradeRejected,
)
from caroptions.core.notifications import Notification, NotificationCenter, NotificationLevel
from caroptions.models.position import Position
from caroptions.models.types import OptionType


def _center(bus: EventBus, **kwargs: float) -> NotificationCenter:
    center = NotificationCenter(**kwargs)
    center.attach(bus)
    return center


class TestMessages:
    def test_single_contract_purchase(self, bus: EventBus, sample_position: Position) -> None:
        center = _center(bus)
        pos = dataclasses.replace(sample_position, quantity=1)
        bus.publish(TradePlaced(position=pos, car_name="Porsche 911 GT3", cash_balance=0))
        (note,) = center.drain()
        assert note.message == "Successfully purchased a contract of CALL options on Porsche 911 GT3!"
        assert note.level is NotificationLevel.SUCCESS
        assert note.duration_seconds == 3.0

    def test_multi_contract_purchase(self, bus: EventBus, sample_position: Position) -> None:
        center = _center(bus)
        pos = dataclasses.replace(sample_position, option_type=OptionType.PUT, quantity=3)
        bus.publish(TradePlaced(position=pos, car_name="Ferrari 296 GTB", cash_balance=0))
        assert center.drain()[0].message == (
            "Successfully purchased 3 contracts of PUT options on Ferrari 296 GTB!"
        )

    def test_insufficient_funds(self, bus: EventBus) -> None:
        center = _center(bus)
        bus.publish(TradeRejected(car_id="1", car_name="x", required=10_000, available=5_000))
        (note,) = center.drain()
        assert note.message == "Insufficient funds. You need $10,000 to place this trade."
        assert note.level is NotificationLevel.ERROR

    def test_position_closed(self, bus: EventBus, sample_position: Position) -> None:
        center = _center(bus)
        bus.publish(PositionClosed(position=sample_position, car_name="Test Roadster", cash_balance=0))
        note = center.drain()[0]
        assert "+$50,000 (27.78%)" in note.message
        assert "$230,000 returned to cash" in note.message

    def test_close_rejected_and_reseed(self, bus: EventBus) -> None:
        center = _center(bus)
        bus.publish(CloseRejected(position_id="zz"))
        bus.publish(LedgerReseeded(reason="stored data was unreadable"))
        levels = [n.level for n in center.drain()]
        assert levels == [NotificationLevel.ERROR, NotificationLevel.INFO]


class TestQueue:
    def test_drain_clears(self) -> None:
        center = NotificationCenter()
        center.notify("hello")
        assert len(center) == 1
        assert center.drain() == [Notification("hello")]
        assert len(center) == 0

    def test_duration_from_center(self) -> None:
        center = NotificationCenter(duration_seconds=5.0)
        assert center.notify("x").duration_seconds == 5.0
        assert center.notify("y", duration_seconds=1.0).duration_seconds == 1.0

    def test_oldest_dropped(self) -> None:
        center = NotificationCenter(max_pending=2)
        for text in ("a", "b", "c"):
            center.notify(text)
        assert [n.message for n in center.drain()] == ["b", "c"]
