"""Tests for the caroptions exception hierarchy."""

from __future__ import annotations

import pytest

from caroptions.core.exceptions import (
    CarNotFoundError,
    CarOptionsError,
    ConfigError,
    InsufficientFundsError,
    InvalidTradeError,
    LedgerError,
    MalformedStateError,
    PersistenceError,
    PositionNotFoundError,
    StorageError,
)


class TestHierarchy:
    @pytest.mark.parametrize(
        "exc_type",
        [
            ConfigError,
            InvalidTradeError,
            CarNotFoundError,
            LedgerError,
            MalformedStateError,
            StorageError,
        ],
    )
    def test_all_derive_from_base(self, exc_type: type) -> None:
        assert issubclass(exc_type, CarOptionsError)

    def test_ledger_errors(self) -> None:
        assert issubclass(InsufficientFundsError, LedgerError)
        assert issubclass(PositionNotFoundError, LedgerError)

    def test_persistence_is_storage(self) -> None:
        assert issubclass(PersistenceError, StorageError)
        assert not issubclass(PersistenceError, LedgerError)


class TestPayloads:
    def test_insufficient_funds(self) -> None:
        exc = InsufficientFundsError(required=10_000, available=5_000)
        assert exc.required == 10_000
        assert exc.available == 5_000
        assert "10,000.00" in str(exc)

    def test_position_not_found(self) -> None:
        exc = PositionNotFoundError("abc")
        assert exc.position_id == "abc"
        assert str(exc) == "No open position with id 'abc'"

    def test_catchable_as_base(self) -> None:
        with pytest.raises(CarOptionsError):
            raise InsufficientFundsError(1, 0)
