"""Display formatting shared by the CLI and notifications."""

from __future__ import annotations

import math
from datetime import datetime


def fmt_money(x: float) -> str:
    """Format a dollar amount: ``$50,000`` for whole values, ``$1,234.56`` otherwise."""
    try:
        v = float(x)
    except (TypeError, ValueError):
        return "N/A"
    if not math.isfinite(v):
        return "N/A"
    sign = "-" if v < 0 else ""
    v = abs(v)
    body = f"{v:,.0f}" if v.is_integer() else f"{v:,.2f}"
    return f"{sign}${body}"


def fmt_signed_money(x: float) -> str:
    """Like :func:`fmt_money` with an explicit ``+`` on zero and gains."""
    text = fmt_money(x)
    if text == "N/A" or text.startswith("-"):
        return text
    return f"+{text}"


def fmt_pct(pct: float | str) -> str:
    """``27.78%``; pre-formatted strings (``"0.00"``) pass through."""
    if isinstance(pct, str):
        return f"{pct}%"
    return f"{pct:.2f}%"


def fmt_profit_loss(amount: float, pct: float | str) -> str:
    """``+$50,000 (27.78%)``."""
    return f"{fmt_signed_money(amount)} ({fmt_pct(pct)})"


def fmt_date(value: datetime) -> str:
    return value.strftime("%Y-%m-%d")
