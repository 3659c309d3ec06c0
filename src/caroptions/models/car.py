"""Car and price-history data models.

A :class:`Car` owns a chronological price series; ``current_price`` is
tracked separately from the last history point because the catalog can
quote a live value between history snapshots.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

from caroptions.core.exceptions import MalformedStateError


@dataclass(frozen=True, slots=True)
class PricePoint:
    """One dated observation of a car's price.

    Parameters
    ----------
    date:
        ISO date string, e.g. ``"2023-07-01"``.
    price:
        Observed price; always positive.
    """

    date: str
    price: float

    def to_dict(self) -> dict[str, object]:
        return {"date": self.date, "price": self.price}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PricePoint:
        if not isinstance(data, dict):
            raise MalformedStateError(f"price point must be an object, got {data!r}")
        return cls(date=str(data.get("date", "")), price=_positive(data.get("price"), "price"))


@dataclass(frozen=True, slots=True)
class Car:
    """A tradable car and its price history.

    Parameters
    ----------
    id:
        Catalog identifier, referenced by ``Position.car_id``.
    name:
        Display name, e.g. ``"Porsche 911 GT3"``.
    brand, model, year:
        Descriptive attributes shown by the CLI.
    current_price:
        Latest quoted value; snapshotted as a position's entry price.
    price_history:
        Chronological price points, at least one.
    image_url:
        Optional picture reference carried over from catalog files.
    """

    id: str
    name: str
    brand: str
    model: str
    year: int
    current_price: float
    price_history: tuple[PricePoint, ...] = field(default_factory=tuple)
    image_url: str = ""

    # -- derived properties ---------------------------------------------------

    @property
    def first_price(self) -> float:
        """Oldest price in the history (``current_price`` if history is empty)."""
        return self.price_history[0].price if self.price_history else self.current_price

    @property
    def change_pct(self) -> float:
        """Percent change from the first history point to ``current_price``."""
        first = self.first_price
        if first == 0:
            return 0.0
        return (self.current_price - first) / first * 100.0

    @property
    def display_name(self) -> str:
        return f"{self.brand} {self.model} ({self.year})"

    # -- serialisation --------------------------------------------------------

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "brand": self.brand,
            "model": self.model,
            "year": self.year,
            "imageUrl": self.image_url,
            "currentPrice": self.current_price,
            "priceHistory": [p.to_dict() for p in self.price_history],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Car:
        """Build a car from a catalog record (camelCase keys)."""
        if not isinstance(data, dict):
            raise MalformedStateError(f"car record must be an object, got {data!r}")
        car_id = str(data.get("id") or "").strip()
        if not car_id:
            raise MalformedStateError("car record has no id")
        history_raw = data.get("priceHistory") or []
        if not isinstance(history_raw, list):
            raise MalformedStateError(f"car {car_id}: priceHistory must be a list")
        try:
            year = int(data.get("year") or 0)
        except (TypeError, ValueError):
            raise MalformedStateError(f"car {car_id}: bad year {data.get('year')!r}") from None
        car = cls(
            id=car_id,
            name=str(data.get("name") or car_id),
            brand=str(data.get("brand") or ""),
            model=str(data.get("model") or ""),
            year=year,
            current_price=_positive(data.get("currentPrice"), "currentPrice"),
            price_history=tuple(PricePoint.from_dict(p) for p in history_raw),
            image_url=str(data.get("imageUrl") or ""),
        )
        errors = car.validate()
        if errors:
            raise MalformedStateError(f"car {car_id}: " + "; ".join(errors))
        return car

    # -- validation -----------------------------------------------------------

    def validate(self) -> list[str]:
        """Return a list of validation errors (empty means valid)."""
        errors: list[str] = []
        if not self.id:
            errors.append("id must not be empty.")
        if self.current_price <= 0:
            errors.append(f"current_price={self.current_price} must be > 0.")
        if not self.price_history:
            errors.append("price_history must have at least one point.")
        for point in self.price_history:
            if point.price <= 0:
                errors.append(f"price on {point.date} must be > 0.")
        return errors


def _positive(value: Any, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedStateError(f"{name} must be a number, got {value!r}")
    if not math.isfinite(value) or value <= 0:
        raise MalformedStateError(f"{name} must be a positive number, got {value!r}")
    return value
