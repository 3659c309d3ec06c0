"""Domain data models for the car options desk.

Re-exports all model classes for convenient imports::

    from caroptions.models import Car, Position, TradeParameters, OptionType
"""

from caroptions.models.car import Car, PricePoint
from caroptions.models.position import Position, format_expiry, parse_expiry
from caroptions.models.stats import AccountStats, PortfolioSummary
from caroptions.models.trade_params import TradeParameters
from caroptions.models.types import CarId, Money, OptionType, PositionId

__all__ = [
    "AccountStats",
    "Car",
    "CarId",
    "Money",
    "OptionType",
    "PortfolioSummary",
    "Position",
    "PositionId",
    "PricePoint",
    "TradeParameters",
    "format_expiry",
    "parse_expiry",
]
