"""Trade ticket parameters chosen by the user before pricing."""

from __future__ import annotations

from dataclasses import dataclass

from caroptions.core.constants import EXPIRY_OPTIONS, MIN_QUANTITY, PERCENTAGE_OPTIONS
from caroptions.core.exceptions import InvalidTradeError
from caroptions.models.types import OptionType


@dataclass(frozen=True, slots=True)
class TradeParameters:
    """A complete, validated trade ticket.

    Parameters
    ----------
    option_type:
        ``CALL`` or ``PUT``.
    expiry_months:
        One of :data:`~caroptions.core.constants.EXPIRY_OPTIONS`.
    target_percentage:
        One of :data:`~caroptions.core.constants.PERCENTAGE_OPTIONS`.
    quantity:
        Number of contracts, at least one.
    """

    option_type: OptionType
    expiry_months: int
    target_percentage: int
    quantity: int = 1

    @classmethod
    def create(
        cls,
        option_type: OptionType | str,
        expiry_months: int,
        target_percentage: int,
        quantity: int = 1,
    ) -> TradeParameters:
        """Build and validate; raises :class:`InvalidTradeError` on bad input."""
        try:
            kind = OptionType.parse(option_type)
        except ValueError as exc:
            raise InvalidTradeError(str(exc)) from None
        params = cls(
            option_type=kind,
            expiry_months=expiry_months,
            target_percentage=target_percentage,
            quantity=quantity,
        )
        errors = params.validate()
        if errors:
            raise InvalidTradeError("; ".join(errors))
        return params

    def validate(self) -> list[str]:
        """Return a list of validation errors (empty means valid)."""
        errors: list[str] = []
        if not isinstance(self.option_type, OptionType):
            errors.append(f"option_type={self.option_type!r} must be CALL or PUT.")
        if self.expiry_months not in EXPIRY_OPTIONS:
            errors.append(
                f"expiry_months={self.expiry_months} must be one of {list(EXPIRY_OPTIONS)}."
            )
        if self.target_percentage not in PERCENTAGE_OPTIONS:
            errors.append(
                f"target_percentage={self.target_percentage} must be one of "
                f"{list(PERCENTAGE_OPTIONS)}."
            )
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int):
            errors.append(f"quantity={self.quantity!r} must be an integer.")
        elif self.quantity < MIN_QUANTITY:
            errors.append(f"quantity={self.quantity} must be >= {MIN_QUANTITY}.")
        return errors
