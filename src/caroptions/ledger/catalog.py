"""Car catalog: the price-series provider for pricing and the ledger.

Loads cars from the built-in seed list or from a JSON file holding a list
of car records, and answers lookups by id.  Also produces the market
overview rows (trend per car) and the simple bullish / bearish sentiment
label shown next to a car.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

from caroptions.core.exceptions import CarNotFoundError, MalformedStateError
from caroptions.ledger.seed import SEED_CARS
from caroptions.models.car import Car

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MarketTrend:
    """One row of the market overview."""

    car_id: str
    name: str
    change_pct: float
    price: float


class CarCatalog:
    """Immutable lookup of cars by id, in catalog order."""

    def __init__(self, cars: Iterable[Car]) -> None:
        self._cars: dict[str, Car] = {}
        for car in cars:
            if car.id in self._cars:
                logger.warning("Duplicate car id %s in catalog; keeping the first", car.id)
                continue
            self._cars[car.id] = car

    # -- factories --------------------------------------------------------

    @classmethod
    def from_seed(cls) -> CarCatalog:
        return cls(Car.from_dict(record) for record in SEED_CARS)

    @classmethod
    def from_file(cls, path: Path) -> CarCatalog:
        """Load a JSON list of car records; falls back to the seed on failure."""
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            if not isinstance(data, list) or not data:
                raise MalformedStateError(f"{path} must hold a non-empty list of cars")
            return cls(Car.from_dict(record) for record in data)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError, MalformedStateError) as exc:
            logger.warning("Could not load cars from %s (%s); using built-in catalog", path, exc)
            return cls.from_seed()

    # -- lookups ----------------------------------------------------------

    def get(self, car_id: str) -> Car:
        try:
            return self._cars[str(car_id)]
        except KeyError:
            raise CarNotFoundError(f"No car with id {car_id!r}") from None

    def find(self, car_id: str) -> Car | None:
        return self._cars.get(str(car_id))

    def __contains__(self, car_id: object) -> bool:
        return str(car_id) in self._cars

    def __iter__(self) -> Iterator[Car]:
        return iter(self._cars.values())

    def __len__(self) -> int:
        return len(self._cars)

    # -- market overview --------------------------------------------------

    def market_trends(self) -> list[MarketTrend]:
        """Per-car change from first history point to current price."""
        return [
            MarketTrend(
                car_id=car.id,
                name=car.name,
                change_pct=round(car.change_pct, 2),
                price=car.current_price,
            )
            for car in self
        ]


def sentiment(car: Car) -> str:
    """``"Bullish"`` when the history rose to the current price, else ``"Bearish"``."""
    if len(car.price_history) > 1 and car.price_history[0].price < car.current_price:
        return "Bullish"
    return "Bearish"
