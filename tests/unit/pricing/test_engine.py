"""Tests for caroptions.pricing.engine."""

from __future__ import annotations

import itertools
from datetime import datetime, timezone

import pytest

from caroptions.core.constants import EXPIRY_OPTIONS, MIN_PREMIUM, PERCENTAGE_OPTIONS
from caroptions.core.exceptions import InvalidTradeError
from caroptions.models.car import Car, PricePoint
from caroptions.models.trade_params import TradeParameters
from caroptions.models.types import OptionType
from caroptions.pricing.engine import (
    TradeQuote,
    add_months,
    compute_expiry,
    compute_potential_profit,
    compute_premium_per_contract,
    compute_strike_price,
    compute_trend,
    compute_volatility,
    preview,
    quote,
    round_half_up,
)


def _series(*prices: float) -> tuple[PricePoint, ...]:
    return tuple(PricePoint(f"2023-{i + 1:02d}-01", p) for i, p in enumerate(prices))


# ---------------------------------------------------------------------------
# Rounding
# ---------------------------------------------------------------------------


class TestRoundHalfUp:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [(2.5, 3), (3.5, 4), (2.49, 2), (-2.5, -2), (-2.51, -3), (0.0, 0)],
    )
    def test_halves_round_up(self, value: float, expected: int) -> None:
        assert round_half_up(value) == expected


# ---------------------------------------------------------------------------
# Volatility and trend
# ---------------------------------------------------------------------------


class TestVolatility:
    def test_single_point_uses_fallback(self) -> None:
        assert compute_volatility(_series(100_000)) == pytest.approx(0.10)

    def test_empty_series_uses_fallback(self) -> None:
        assert compute_volatility(()) == pytest.approx(0.10)

    def test_flat_series_hits_floor(self) -> None:
        assert compute_volatility(_series(100, 100, 100)) == pytest.approx(0.05)

    def test_scaled_mean_return(self) -> None:
        # one return of +1/9 -> 10/9
        assert compute_volatility(_series(90_000, 100_000)) == pytest.approx(10 / 9)

    def test_absolute_value_of_negative_mean(self) -> None:
        vol = compute_volatility(_series(42_000, 40_000))
        assert vol == pytest.approx(2_000 / 42_000 * 10)

    def test_mean_over_several_returns(self) -> None:
        # returns +10%, -10% -> mean 0 -> floor
        assert compute_volatility(_series(100, 110, 99)) == pytest.approx(0.05)


class TestTrend:
    def test_none_for_single_point(self) -> None:
        assert compute_trend(_series(100), 120) is None

    def test_relative_to_first_point(self) -> None:
        assert compute_trend(_series(80, 90, 95), 100) == pytest.approx(0.25)


# ---------------------------------------------------------------------------
# Premium
# ---------------------------------------------------------------------------


class TestPremium:
    def test_reference_call(self, rising_car: Car) -> None:
        premium = compute_premium_per_contract(
            rising_car.price_history, rising_car.current_price, OptionType.CALL, 3, 5
        )
        # 500 * (10/9) * sqrt(3) * 1 * (19/9) = 2031.42
        assert premium == 2031

    def test_reference_put_keeps_skew(self, rising_car: Car) -> None:
        premium = compute_premium_per_contract(
            rising_car.price_history, rising_car.current_price, OptionType.PUT, 3, 5
        )
        # 500 * (1 - 1/9 + 0.1) * sqrt(3) * (19/9) = 1807.96
        assert premium == 1808

    def test_uptrend_makes_calls_dearer(self, rising_car: Car) -> None:
        args = (rising_car.price_history, rising_car.current_price)
        call = compute_premium_per_contract(*args, OptionType.CALL, 6, 30)
        put = compute_premium_per_contract(*args, OptionType.PUT, 6, 30)
        assert call > put

    def test_single_point_same_for_both_types(self, single_point_car: Car) -> None:
        args = (single_point_car.price_history, single_point_car.current_price)
        call = compute_premium_per_contract(*args, OptionType.CALL, 6, 30)
        put = compute_premium_per_contract(*args, OptionType.PUT, 6, 30)
        # 2000 * 1.1 * sqrt(6) * 6 * 1.1 = 35566.6
        assert call == put == 35567

    def test_floor_applies_to_cheap_tickets(self, falling_car: Car) -> None:
        premium = compute_premium_per_contract(
            falling_car.price_history, falling_car.current_price, OptionType.CALL, 1, 1
        )
        assert premium == MIN_PREMIUM

    def test_longer_expiry_costs_more(self, rising_car: Car) -> None:
        args = (rising_car.price_history, rising_car.current_price, OptionType.CALL)
        premiums = [compute_premium_per_contract(*args, m, 30) for m in EXPIRY_OPTIONS]
        assert premiums == sorted(premiums)
        assert premiums[0] < premiums[-1]

    @pytest.mark.parametrize(
        "prices",
        [(90_000, 100_000), (120_000, 100_000), (100_000, 100_000), (5_000, 6_000, 5_500)],
    )
    def test_always_integer_at_least_floor(self, prices: tuple[float, ...]) -> None:
        series = _series(*prices)
        current = prices[-1]
        for kind, months, pct in itertools.product(
            OptionType, EXPIRY_OPTIONS, PERCENTAGE_OPTIONS
        ):
            premium = compute_premium_per_contract(series, current, kind, months, pct)
            assert isinstance(premium, int)
            assert premium >= MIN_PREMIUM


# ---------------------------------------------------------------------------
# Strike and profit
# ---------------------------------------------------------------------------


class TestStrike:
    def test_call_above(self) -> None:
        assert compute_strike_price(100_000, OptionType.CALL, 5) == 105_000

    def test_put_below(self) -> None:
        assert compute_strike_price(100_000, OptionType.PUT, 5) == 95_000

    def test_call_monotonic_increasing(self) -> None:
        strikes = [compute_strike_price(123_457, OptionType.CALL, p) for p in PERCENTAGE_OPTIONS]
        assert all(a < b for a, b in zip(strikes, strikes[1:]))

    def test_put_monotonic_decreasing(self) -> None:
        strikes = [compute_strike_price(123_457, OptionType.PUT, p) for p in PERCENTAGE_OPTIONS]
        assert all(a > b for a, b in zip(strikes, strikes[1:]))


class TestPotentialProfit:
    def test_call_reference(self, rising_car: Car) -> None:
        profit = compute_potential_profit(
            rising_car.price_history, rising_car.current_price, OptionType.CALL, 3, 5, 1
        )
        # stretch 107,500 - strike 105,000 = 2,500; less premium 2,031
        assert profit == 469

    def test_put_reference(self, rising_car: Car) -> None:
        profit = compute_potential_profit(
            rising_car.price_history, rising_car.current_price, OptionType.PUT, 3, 5, 1
        )
        # strike 95,000 - stretch 92,500 = 2,500; less premium 1,808
        assert profit == 692

    def test_scales_with_quantity(self, rising_car: Car) -> None:
        args = (rising_car.price_history, rising_car.current_price, OptionType.CALL, 3, 5)
        assert compute_potential_profit(*args, 3) == 3 * compute_potential_profit(*args, 1)

    def test_can_be_negative(self, falling_car: Car) -> None:
        profit = compute_potential_profit(
            falling_car.price_history, falling_car.current_price, OptionType.CALL, 1, 1, 2
        )
        # excess 200 on a 1,000 floor premium
        assert profit == (200 - 1000) * 2


# ---------------------------------------------------------------------------
# Expiry arithmetic
# ---------------------------------------------------------------------------


class TestAddMonths:
    @pytest.mark.parametrize(
        ("start", "months", "expected"),
        [
            (datetime(2024, 1, 31), 1, datetime(2024, 2, 29)),
            (datetime(2023, 1, 31), 1, datetime(2023, 2, 28)),
            (datetime(2024, 1, 31), 3, datetime(2024, 4, 30)),
            (datetime(2024, 1, 31), 6, datetime(2024, 7, 31)),
            (datetime(2023, 11, 15), 3, datetime(2024, 2, 15)),
            (datetime(2023, 12, 1), 1, datetime(2024, 1, 1)),
        ],
    )
    def test_calendar_months(self, start: datetime, months: int, expected: datetime) -> None:
        assert add_months(start, months) == expected

    def test_compute_expiry_is_utc_with_millisecond_precision(self) -> None:
        now = datetime(2024, 3, 10, 8, 30, 15, 123456, tzinfo=timezone.utc)
        expiry = compute_expiry(3, now)
        assert expiry == datetime(2024, 6, 10, 8, 30, 15, 123000, tzinfo=timezone.utc)

    def test_compute_expiry_treats_naive_as_utc(self) -> None:
        expiry = compute_expiry(1, datetime(2024, 3, 10, 8, 0))
        assert expiry.tzinfo is not None
        assert expiry == datetime(2024, 4, 10, 8, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Quotes
# ---------------------------------------------------------------------------


class TestQuote:
    def test_reference_scenario(self, rising_car: Car, now: datetime) -> None:
        q = quote(rising_car, TradeParameters.create("CALL", 3, 5, 2), now)
        assert q.strike_price == 105_000
        assert q.premium_per_contract == 2031
        assert q.total_premium == 4062
        assert q.potential_profit == 938
        assert q.expiry == datetime(2024, 4, 30, 12, 0, tzinfo=timezone.utc)
        assert q.is_complete

    def test_preview_incomplete_is_zero(self, rising_car: Car) -> None:
        assert preview(rising_car) == TradeQuote.empty()
        assert preview(rising_car, OptionType.CALL, 3) == TradeQuote.empty()
        assert preview(rising_car, None, 3, 5) == TradeQuote.empty()
        assert not TradeQuote.empty().is_complete

    def test_preview_complete_matches_quote(self, rising_car: Car, now: datetime) -> None:
        params = TradeParameters.create(OptionType.PUT, 6, 10, 1)
        assert preview(rising_car, OptionType.PUT, 6, 10, 1, now=now) == quote(
            rising_car, params, now
        )

    def test_preview_rejects_unoffered_choice(self, rising_car: Car) -> None:
        with pytest.raises(InvalidTradeError):
            preview(rising_car, OptionType.CALL, 4, 5)
