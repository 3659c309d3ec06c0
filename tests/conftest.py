"""Shared pytest fixtures for the car options desk tests."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pytest

from caroptions.core.config import DeskConfig
from caroptions.core.events import EventBus
from caroptions.core.storage import MemoryStore
from caroptions.ledger.portfolio import LedgerState, PortfolioLedger
from caroptions.models.car import Car, PricePoint
from caroptions.models.position import Position
from caroptions.models.stats import AccountStats
from caroptions.models.trade_params import TradeParameters
from caroptions.models.types import OptionType

FIXED_NOW = datetime(2024, 1, 31, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    """A fixed clock: 2024-01-31 12:00 UTC (month-end, leap year)."""
    return FIXED_NOW


@pytest.fixture
def rising_car() -> Car:
    """Two-point history 90k -> 100k, current 100k."""
    return Car(
        id="c1",
        name="Test Roadster",
        brand="TestBrand",
        model="Roadster",
        year=2023,
        current_price=100_000,
        price_history=(
            PricePoint("2023-01-01", 90_000),
            PricePoint("2023-06-01", 100_000),
        ),
    )


@pytest.fixture
def falling_car() -> Car:
    """Two-point history 42k -> 40k, current 40k."""
    return Car(
        id="c2",
        name="Test Coupe",
        brand="AnotherBrand",
        model="Coupe",
        year=2022,
        current_price=40_000,
        price_history=(
            PricePoint("2023-01-01", 42_000),
            PricePoint("2023-07-01", 40_000),
        ),
    )


@pytest.fixture
def single_point_car() -> Car:
    return Car(
        id="c3",
        name="Test Hypercar",
        brand="Hyper",
        model="One",
        year=2024,
        current_price=400_000,
        price_history=(PricePoint("2023-07-01", 400_000),),
    )


@pytest.fixture
def call_params() -> TradeParameters:
    return TradeParameters.create(OptionType.CALL, 3, 5, 1)


@pytest.fixture
def config(tmp_path: Path) -> DeskConfig:
    """Fast config: no retry delay, logs and data under tmp_path."""
    return DeskConfig(
        data_dir=tmp_path / "data",
        log_dir=tmp_path / "logs",
        starting_cash=100_000.0,
        write_retries=1,
        retry_delay_seconds=0.0,
    )


@pytest.fixture
def empty_state() -> LedgerState:
    return LedgerState(positions=(), stats=AccountStats(cash_balance=100_000.0))


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def ledger(
    empty_state: LedgerState, memory_store: MemoryStore, bus: EventBus, config: DeskConfig
) -> PortfolioLedger:
    """An empty ledger with 100k cash persisting to a MemoryStore."""
    return PortfolioLedger(empty_state, store=memory_store, bus=bus, config=config)


@pytest.fixture
def sample_position() -> Position:
    return Position(
        id="p1",
        car_id="c1",
        option_type=OptionType.CALL,
        entry_price=100_000,
        current_value=230_000,
        expiry=datetime(2024, 4, 30, 12, 0, tzinfo=timezone.utc),
        target_percentage=5,
        premium_paid=180_000,
        quantity=2,
    )


@pytest.fixture
def settings_dict(tmp_path: Path) -> dict[str, Any]:
    return {
        "data_dir": "desk_data",
        "log_dir": "logs",
        "starting_cash": 75000,
        "write_retries": 4,
        "retry_delay_seconds": 0.5,
        "notification_seconds": 5,
    }


@pytest.fixture
def settings_file(tmp_path: Path, settings_dict: dict[str, Any]) -> Path:
    p = tmp_path / "desk_settings.json"
    p.write_text(json.dumps(settings_dict, indent=2), encoding="utf-8")
    return p
