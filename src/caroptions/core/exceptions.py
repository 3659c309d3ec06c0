"""Car options desk exception hierarchy.

All application-specific exceptions inherit from :class:`CarOptionsError`.
Using typed exceptions allows callers to handle specific failure modes
rather than catching bare ``Exception``.
"""

from __future__ import annotations


class CarOptionsError(Exception):
    """Base exception for all desk errors."""


# -- Configuration ----------------------------------------------------------


class ConfigError(CarOptionsError):
    """Invalid or missing configuration."""


# -- Trade tickets ----------------------------------------------------------


class InvalidTradeError(CarOptionsError):
    """Trade parameters outside the offered choices."""


class CarNotFoundError(CarOptionsError):
    """No car with the requested id in the catalog."""


# -- Ledger -----------------------------------------------------------------


class LedgerError(CarOptionsError):
    """A ledger transition was rejected; the ledger state is unchanged."""


class InsufficientFundsError(LedgerError):
    """Cash balance does not cover the total premium of a trade."""

    def __init__(self, required: float, available: float) -> None:
        super().__init__(
            f"Insufficient funds: need {required:,.2f}, have {available:,.2f}"
        )
        self.required = required
        self.available = available


class PositionNotFoundError(LedgerError):
    """Close requested for a position id that is not open."""

    def __init__(self, position_id: str) -> None:
        super().__init__(f"No open position with id {position_id!r}")
        self.position_id = position_id


# -- Data integrity ---------------------------------------------------------


class MalformedStateError(CarOptionsError):
    """Persisted record is corrupted or in an unexpected shape."""


# -- Storage ----------------------------------------------------------------


class StorageError(CarOptionsError):
    """Key-value store read or write failure."""


class PersistenceError(StorageError):
    """Ledger commit could not be persisted and was rolled back."""
