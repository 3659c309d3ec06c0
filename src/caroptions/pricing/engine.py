"""Option premium and profit projection for car price options.

Pure functions only; nothing here touches the ledger or the store, so
the CLI can call them freely while the user is still filling in a ticket.

The premium model is a heuristic, not Black-Scholes.  Premium grows with
the car's value, the square root of time to expiry, the distance of the
target move, historical volatility, and a directional skew from the
recent trend: an uptrend makes CALLs dearer, a downtrend makes PUTs
dearer.  PUTs carry an extra flat ``PUT_SKEW`` on top of the trend.

All rounding is half-up (``floor(x + 0.5)``) so quotes match the figures
the desk has always shown.
"""

from __future__ import annotations

import calendar
import math
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timezone

from caroptions.core.constants import (
    BASE_PREMIUM_RATE,
    FALLBACK_TREND,
    FALLBACK_VOLATILITY,
    MIN_PREMIUM,
    PERCENTAGE_DIVISOR,
    PUT_SKEW,
    STRETCH_FACTOR,
    VOLATILITY_FLOOR,
    VOLATILITY_SCALE,
)
from caroptions.models.car import Car, PricePoint
from caroptions.models.trade_params import TradeParameters
from caroptions.models.types import OptionType


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves towards +infinity."""
    return int(math.floor(value + 0.5))


# ---------------------------------------------------------------------------
# Model inputs
# ---------------------------------------------------------------------------


def compute_volatility(series: Sequence[PricePoint]) -> float:
    """Scaled absolute mean of period-over-period returns.

    Returns ``FALLBACK_VOLATILITY`` when there are fewer than two points,
    otherwise at least ``VOLATILITY_FLOOR``.
    """
    if len(series) < 2:
        return FALLBACK_VOLATILITY
    returns = [
        (curr.price - prev.price) / prev.price
        for prev, curr in zip(series, series[1:])
    ]
    mean = sum(returns) / len(returns)
    return max(VOLATILITY_FLOOR, abs(mean) * VOLATILITY_SCALE)


def compute_trend(series: Sequence[PricePoint], current_price: float) -> float | None:
    """Fractional change from the first history point to *current_price*.

    ``None`` when the history is too short to have a trend.
    """
    if len(series) < 2:
        return None
    first = series[0].price
    return (current_price - first) / first


def _type_multiplier(
    series: Sequence[PricePoint], current_price: float, option_type: OptionType
) -> float:
    trend = compute_trend(series, current_price)
    if trend is None:
        return 1 + FALLBACK_TREND
    if option_type is OptionType.CALL:
        return 1 + trend
    return 1 + (-trend) + PUT_SKEW


# ---------------------------------------------------------------------------
# Premium, strike, profit
# ---------------------------------------------------------------------------


def compute_premium_per_contract(
    series: Sequence[PricePoint],
    current_price: float,
    option_type: OptionType,
    expiry_months: int,
    target_percentage: float,
) -> int:
    """Premium for a single contract; always an integer >= ``MIN_PREMIUM``.

    Callers must validate the ticket first (see
    :class:`~caroptions.models.TradeParameters`); this function does not
    raise.
    """
    base_premium = current_price * BASE_PREMIUM_RATE
    type_multiplier = _type_multiplier(series, current_price, option_type)
    expiry_multiplier = math.sqrt(expiry_months)
    percentage_multiplier = target_percentage / PERCENTAGE_DIVISOR
    volatility_multiplier = 1 + compute_volatility(series)

    premium = round_half_up(
        base_premium
        * type_multiplier
        * expiry_multiplier
        * percentage_multiplier
        * volatility_multiplier
    )
    return max(MIN_PREMIUM, premium)


def compute_strike_price(
    current_price: float, option_type: OptionType, target_percentage: float
) -> int:
    """Strike is *target_percentage* above (CALL) or below (PUT) the price."""
    if option_type is OptionType.CALL:
        return round_half_up(current_price * (1 + target_percentage / 100))
    return round_half_up(current_price * (1 - target_percentage / 100))


def compute_potential_profit(
    series: Sequence[PricePoint],
    current_price: float,
    option_type: OptionType,
    expiry_months: int,
    target_percentage: float,
    quantity: int,
) -> int:
    """Projected profit if the car moves 1.5x the target in our favour.

    This is an illustration for the ticket, not a guaranteed payout.  The
    excess over the (unrounded) strike is rounded per contract after the
    premium is taken off, then multiplied by *quantity*; the result is
    negative when the stretch move does not cover the premium.
    """
    premium = compute_premium_per_contract(
        series, current_price, option_type, expiry_months, target_percentage
    )
    stretch = target_percentage * STRETCH_FACTOR / 100
    if option_type is OptionType.CALL:
        strike = current_price * (1 + target_percentage / 100)
        potential_price = current_price * (1 + stretch)
        excess = potential_price - strike
    else:
        strike = current_price * (1 - target_percentage / 100)
        potential_price = current_price * (1 - stretch)
        excess = strike - potential_price
    return round_half_up(max(0.0, excess) - premium) * quantity


# ---------------------------------------------------------------------------
# Expiry
# ---------------------------------------------------------------------------


def add_months(start: datetime, months: int) -> datetime:
    """Calendar-month arithmetic; the day is clamped to the target month's end.

    ``2024-01-31 + 1 month`` is ``2024-02-29``, not a fixed 30 days.
    """
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return start.replace(year=year, month=month, day=day)


def compute_expiry(expiry_months: int, now: datetime | None = None) -> datetime:
    """Expiry instant *expiry_months* calendar months after *now* (UTC).

    Sub-millisecond precision is dropped so the value survives the
    persisted ISO-8601 form unchanged.
    """
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    now = now.replace(microsecond=now.microsecond // 1000 * 1000)
    return add_months(now.astimezone(timezone.utc), expiry_months)


# ---------------------------------------------------------------------------
# Ticket quotes
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class TradeQuote:
    """Everything the ticket shows before the user confirms.

    An incomplete ticket is quoted as :meth:`empty` (all zeros), which the
    CLI shows as "not yet computable".
    """

    premium_per_contract: int
    total_premium: int
    strike_price: int
    potential_profit: int
    expiry: datetime | None = None

    @classmethod
    def empty(cls) -> TradeQuote:
        return cls(premium_per_contract=0, total_premium=0, strike_price=0, potential_profit=0)

    @property
    def is_complete(self) -> bool:
        return self.premium_per_contract > 0


def quote(car: Car, params: TradeParameters, now: datetime | None = None) -> TradeQuote:
    """Price a complete ticket against *car*."""
    premium = compute_premium_per_contract(
        car.price_history,
        car.current_price,
        params.option_type,
        params.expiry_months,
        params.target_percentage,
    )
    return TradeQuote(
        premium_per_contract=premium,
        total_premium=premium * params.quantity,
        strike_price=compute_strike_price(
            car.current_price, params.option_type, params.target_percentage
        ),
        potential_profit=compute_potential_profit(
            car.price_history,
            car.current_price,
            params.option_type,
            params.expiry_months,
            params.target_percentage,
            params.quantity,
        ),
        expiry=compute_expiry(params.expiry_months, now),
    )


def preview(
    car: Car,
    option_type: OptionType | None = None,
    expiry_months: int | None = None,
    target_percentage: int | None = None,
    quantity: int = 1,
    now: datetime | None = None,
) -> TradeQuote:
    """Quote a possibly incomplete ticket; zeros until every choice is made."""
    if option_type is None or not expiry_months or not target_percentage:
        return TradeQuote.empty()
    params = TradeParameters.create(option_type, expiry_months, target_percentage, quantity)
    return quote(car, params, now)
