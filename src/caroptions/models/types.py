"""Domain-specific types for the car options desk.

The aliases document intent at call sites without introducing runtime cost.
:class:`OptionType` is the one real type here: a two-member ``str`` enum so
it serialises to ``"CALL"`` / ``"PUT"`` unchanged.
"""

from __future__ import annotations

from enum import Enum
from typing import TypeAlias

# A car identifier as used by the catalog and the persisted trades.
CarId: TypeAlias = str

# A position identifier (uuid4 hex for new trades, ``"t1"``-style in seed data).
PositionId: TypeAlias = str

# A currency amount in whole dollars or fractional dollars.
Money: TypeAlias = float


class OptionType(str, Enum):
    """Direction of an option contract."""

    CALL = "CALL"
    PUT = "PUT"

    @classmethod
    def parse(cls, value: object) -> OptionType:
        """Case-insensitive lookup; raises :class:`ValueError` for anything else."""
        if isinstance(value, cls):
            return value
        text = str(value).strip().upper()
        try:
            return cls(text)
        except ValueError:
            raise ValueError(f"option type must be CALL or PUT, got {value!r}") from None

    @property
    def is_call(self) -> bool:
        return self is OptionType.CALL

    def __str__(self) -> str:
        return self.value
