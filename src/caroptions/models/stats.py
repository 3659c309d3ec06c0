"""Account statistics and the derived portfolio summary.

:class:`AccountStats` holds the three figures the ledger maintains
incrementally.  :class:`PortfolioSummary` holds the report-only totals;
it is always recomputed from the live positions and never stored on its
own, so it cannot drift.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Any

from caroptions.core.exceptions import MalformedStateError


@dataclass(frozen=True, slots=True)
class AccountStats:
    """Ledger-maintained account figures.

    Parameters
    ----------
    cash_balance:
        Spendable cash.
    active_positions:
        Number of open contracts (sum of quantities, not positions).
    total_trades:
        Number of trades ever placed; closing does not decrement it.
    """

    cash_balance: float
    active_positions: int = 0
    total_trades: int = 0

    def with_changes(self, **changes: Any) -> AccountStats:
        return replace(self, **changes)

    # -- serialisation --------------------------------------------------------

    def to_record(self, summary: PortfolioSummary) -> dict[str, object]:
        """Persisted ``"portfolioStats"`` shape, derived fields from *summary*."""
        return {
            "cashBalance": self.cash_balance,
            "activePositions": self.active_positions,
            "totalTrades": self.total_trades,
            "totalInvested": summary.total_invested,
            "totalValue": summary.total_current_value,
            "totalProfitLoss": summary.total_profit_loss,
            "percentageReturn": summary.percentage_return,
        }

    @classmethod
    def from_record(cls, data: Any) -> AccountStats:
        """Read the maintained fields; derived report fields are ignored.

        ``totalTrades`` is optional because older records never had it.
        """
        if not isinstance(data, dict):
            raise MalformedStateError(
                f"portfolioStats must be an object, got {type(data).__name__}"
            )
        cash = data.get("cashBalance")
        if isinstance(cash, bool) or not isinstance(cash, (int, float)) or not math.isfinite(cash):
            raise MalformedStateError(f"cashBalance must be a finite number, got {cash!r}")
        stats = cls(
            cash_balance=cash,
            active_positions=_count(data, "activePositions", required=True),
            total_trades=_count(data, "totalTrades", required=False),
        )
        errors = stats.validate()
        if errors:
            raise MalformedStateError("portfolioStats: " + "; ".join(errors))
        return stats

    # -- validation -----------------------------------------------------------

    def validate(self) -> list[str]:
        """Return a list of validation errors (empty means valid)."""
        errors: list[str] = []
        if self.active_positions < 0:
            errors.append(f"active_positions={self.active_positions} must be >= 0.")
        if self.total_trades < 0:
            errors.append(f"total_trades={self.total_trades} must be >= 0.")
        return errors


@dataclass(frozen=True, slots=True)
class PortfolioSummary:
    """Aggregate figures over a set of positions.

    ``percentage_return`` is a string with two decimals, the way it is
    displayed and persisted.
    """

    total_invested: float
    total_current_value: float
    total_profit_loss: float
    percentage_return: str

    @property
    def is_profitable(self) -> bool:
        return self.total_profit_loss >= 0


def _count(data: dict[str, Any], key: str, *, required: bool) -> int:
    val = data.get(key)
    if val is None and not required:
        return 0
    # JSON writers sometimes emit 3.0 for integer fields
    if isinstance(val, float) and val.is_integer():
        val = int(val)
    if isinstance(val, bool) or not isinstance(val, int):
        raise MalformedStateError(f"{key} must be an integer, got {val!r}")
    return val
