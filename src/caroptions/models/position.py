"""Open option position data model.

A :class:`Position` is created by the ledger when a trade is placed and
removed when it is closed.  It is immutable: ``current_value`` is the
mark-to-model value fixed at opening (premium less the opening spread)
and nothing in the desk reprices it.

The persisted record uses the camelCase keys of the ``"trades"`` store
entry; :meth:`to_record` / :meth:`from_record` convert both ways and
:meth:`from_record` rejects anything it cannot trust with
:class:`~caroptions.core.exceptions.MalformedStateError`.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from caroptions.core.exceptions import MalformedStateError
from caroptions.models.types import OptionType


@dataclass(frozen=True, slots=True)
class Position:
    """A single open option position.

    Parameters
    ----------
    id:
        Unique position id.
    car_id:
        Catalog id of the underlying car.
    option_type:
        ``CALL`` or ``PUT``.
    entry_price:
        Car's ``current_price`` when the position was opened.
    current_value:
        Mark-to-model value of the whole position (all contracts).
    expiry:
        Timezone-aware UTC expiry instant, truncated to milliseconds.
    target_percentage:
        Target move in percent that sets the strike.
    premium_paid:
        Total premium paid across ``quantity`` contracts.
    quantity:
        Number of contracts.
    """

    id: str
    car_id: str
    option_type: OptionType
    entry_price: float
    current_value: float
    expiry: datetime
    target_percentage: float
    premium_paid: float
    quantity: int = 1

    def __post_init__(self) -> None:
        # the stored form keeps milliseconds only
        if isinstance(self.expiry, datetime) and self.expiry.microsecond % 1000:
            millis = self.expiry.microsecond // 1000 * 1000
            object.__setattr__(self, "expiry", self.expiry.replace(microsecond=millis))

    # -- derived properties ---------------------------------------------------

    @property
    def profit_loss(self) -> float:
        """``current_value - premium_paid``; computed, never stored."""
        return self.current_value - self.premium_paid

    @property
    def profit_loss_pct(self) -> float:
        """Profit/loss as a percentage of premium paid (``0.0`` if nothing paid)."""
        if self.premium_paid == 0:
            return 0.0
        return self.profit_loss / self.premium_paid * 100.0

    def is_expired(self, now: datetime | None = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return now >= self.expiry

    # -- serialisation --------------------------------------------------------

    def to_record(self) -> dict[str, object]:
        """Convert to the persisted ``"trades"`` record shape."""
        return {
            "id": self.id,
            "carId": self.car_id,
            "type": self.option_type.value,
            "entryPrice": self.entry_price,
            "currentValue": self.current_value,
            "expiryDate": format_expiry(self.expiry),
            "percentageChange": self.target_percentage,
            "premium": self.premium_paid,
            "quantity": self.quantity,
        }

    @classmethod
    def from_record(cls, data: Any) -> Position:
        """Reconstruct a position from a persisted record.

        ``quantity`` defaults to 1 when absent, which is how the seed trades
        are stored.  Every other field is required.
        """
        if not isinstance(data, dict):
            raise MalformedStateError(f"trade record must be an object, got {type(data).__name__}")

        pos_id = _required_str(data, "id")
        try:
            option_type = OptionType.parse(data.get("type"))
        except ValueError as exc:
            raise MalformedStateError(f"trade {pos_id}: {exc}") from None

        quantity_raw = data.get("quantity", 1)
        if quantity_raw is None:
            quantity_raw = 1
        if isinstance(quantity_raw, bool) or not isinstance(quantity_raw, int) or quantity_raw < 1:
            raise MalformedStateError(f"trade {pos_id}: quantity must be an integer >= 1")

        position = cls(
            id=pos_id,
            car_id=_required_str(data, "carId"),
            option_type=option_type,
            entry_price=_number(data, "entryPrice", pos_id),
            current_value=_number(data, "currentValue", pos_id),
            expiry=parse_expiry(data.get("expiryDate"), pos_id),
            target_percentage=_number(data, "percentageChange", pos_id),
            premium_paid=_number(data, "premium", pos_id),
            quantity=quantity_raw,
        )
        errors = position.validate()
        if errors:
            raise MalformedStateError(f"trade {pos_id}: " + "; ".join(errors))
        return position

    # -- validation -----------------------------------------------------------

    def validate(self) -> list[str]:
        """Return a list of validation errors (empty means valid)."""
        errors: list[str] = []
        if not self.id:
            errors.append("id must not be empty.")
        if not self.car_id:
            errors.append("car_id must not be empty.")
        if self.entry_price <= 0:
            errors.append(f"entry_price={self.entry_price} must be > 0.")
        if self.current_value < 0:
            errors.append(f"current_value={self.current_value} must be >= 0.")
        if self.premium_paid < 0:
            errors.append(f"premium_paid={self.premium_paid} must be >= 0.")
        if self.target_percentage < 0:
            errors.append(f"target_percentage={self.target_percentage} must be >= 0.")
        if self.quantity < 1:
            errors.append(f"quantity={self.quantity} must be >= 1.")
        if self.expiry.tzinfo is None:
            errors.append("expiry must be timezone-aware.")
        return errors


# ---------------------------------------------------------------------------
# Expiry timestamps
# ---------------------------------------------------------------------------


def format_expiry(value: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a ``Z`` suffix."""
    utc = value.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_expiry(value: Any, pos_id: str = "?") -> datetime:
    """Parse a stored expiry; date-only and naive values are taken as UTC."""
    if not isinstance(value, str) or not value.strip():
        raise MalformedStateError(f"trade {pos_id}: expiryDate must be an ISO-8601 string")
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise MalformedStateError(f"trade {pos_id}: bad expiryDate {value!r}") from None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _required_str(data: dict[str, Any], key: str) -> str:
    val = data.get(key)
    if val is None or isinstance(val, (dict, list)) or not str(val).strip():
        raise MalformedStateError(f"trade record missing {key!r}")
    return str(val)


def _number(data: dict[str, Any], key: str, pos_id: str) -> float:
    val = data.get(key)
    if isinstance(val, bool) or not isinstance(val, (int, float)) or not math.isfinite(val):
        raise MalformedStateError(f"trade {pos_id}: {key} must be a finite number, got {val!r}")
    return val
