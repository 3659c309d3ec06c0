"""Pure ledger transitions.

Each function takes the current positions / stats and returns new values;
nothing is mutated in place and nothing is persisted here.  A rejected
transition raises a :class:`~caroptions.core.exceptions.LedgerError`
subclass before any new value is built, so callers never see a half
applied change.
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from datetime import datetime

from caroptions.core.constants import OPENING_SPREAD
from caroptions.core.exceptions import InsufficientFundsError, PositionNotFoundError
from caroptions.models.car import Car
from caroptions.models.position import Position
from caroptions.models.stats import AccountStats, PortfolioSummary
from caroptions.models.trade_params import TradeParameters
from caroptions.pricing.engine import (
    compute_expiry,
    compute_premium_per_contract,
    round_half_up,
)


def new_position_id() -> str:
    return uuid.uuid4().hex


def open_position(
    car: Car,
    params: TradeParameters,
    stats: AccountStats,
    *,
    now: datetime | None = None,
    position_id: str | None = None,
) -> tuple[Position, AccountStats]:
    """Buy ``params.quantity`` contracts on *car*.

    Returns the new position and the updated stats.  Raises
    :class:`InsufficientFundsError` when the cash balance does not cover
    the total premium.

    The position opens marked at ``OPENING_SPREAD`` of the premium paid,
    which models the bid/ask cost of entering the trade.
    """
    premium = compute_premium_per_contract(
        car.price_history,
        car.current_price,
        params.option_type,
        params.expiry_months,
        params.target_percentage,
    )
    total_premium = premium * params.quantity
    if stats.cash_balance < total_premium:
        raise InsufficientFundsError(required=total_premium, available=stats.cash_balance)

    position = Position(
        id=position_id or new_position_id(),
        car_id=car.id,
        option_type=params.option_type,
        entry_price=car.current_price,
        current_value=round_half_up(total_premium * OPENING_SPREAD),
        expiry=compute_expiry(params.expiry_months, now),
        target_percentage=params.target_percentage,
        premium_paid=total_premium,
        quantity=params.quantity,
    )
    updated = stats.with_changes(
        cash_balance=stats.cash_balance - total_premium,
        active_positions=stats.active_positions + params.quantity,
        total_trades=stats.total_trades + 1,
    )
    return position, updated


def close_position(
    position_id: str,
    positions: Sequence[Position],
    stats: AccountStats,
) -> tuple[list[Position], AccountStats, Position]:
    """Close *position_id* at its current mark.

    Returns the remaining positions, the updated stats and the closed
    position.  Cash is credited with ``current_value``, not the premium,
    which is what realises the profit or loss.
    """
    closed = next((p for p in positions if p.id == position_id), None)
    if closed is None:
        raise PositionNotFoundError(position_id)

    remaining = [p for p in positions if p.id != position_id]
    updated = stats.with_changes(
        cash_balance=stats.cash_balance + closed.current_value,
        active_positions=stats.active_positions - closed.quantity,
    )
    return remaining, updated, closed


def compute_aggregate_stats(positions: Sequence[Position]) -> PortfolioSummary:
    """Totals over *positions*; call again whenever the set changes."""
    total_invested = sum(p.premium_paid for p in positions)
    total_current_value = sum(p.current_value for p in positions)
    total_profit_loss = total_current_value - total_invested
    if total_invested > 0:
        percentage_return = f"{total_profit_loss / total_invested * 100:.2f}"
    else:
        percentage_return = "0.00"
    return PortfolioSummary(
        total_invested=total_invested,
        total_current_value=total_current_value,
        total_profit_loss=total_profit_loss,
        percentage_return=percentage_return,
    )
