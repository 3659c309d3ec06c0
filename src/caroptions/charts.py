"""Price-history chart with strike lines of open positions.

Renders off-screen with matplotlib's Agg canvas and saves a PNG, so it
works from the CLI and in headless test runs.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure
from matplotlib.ticker import FuncFormatter

from caroptions.core.formatting import fmt_money
from caroptions.ledger.catalog import sentiment
from caroptions.models.car import Car
from caroptions.models.position import Position
from caroptions.models.types import OptionType
from caroptions.pricing.engine import compute_strike_price

logger = logging.getLogger(__name__)

DARK_BG = "#0E1117"
DARK_PANEL = "#161B22"
DARK_FG = "#C9D1D9"
DARK_BORDER = "#30363D"
CALL_COLOR = "#2EA043"
PUT_COLOR = "#F85149"
PRICE_COLOR = "#58A6FF"


def _apply_dark_style(fig: Figure, ax) -> None:
    fig.patch.set_facecolor(DARK_BG)
    ax.set_facecolor(DARK_PANEL)
    ax.tick_params(colors=DARK_FG)
    for spine in ax.spines.values():
        spine.set_color(DARK_BORDER)
    ax.grid(True, color=DARK_BORDER, linewidth=0.6, alpha=0.35)


def build_price_figure(car: Car, positions: Iterable[Position] = ()) -> Figure:
    """Build the figure: history line, current price point, one strike line per position."""
    fig = Figure(figsize=(7.5, 4.0), dpi=100)
    fig.subplots_adjust(bottom=0.2, right=0.95, top=0.88)
    ax = fig.add_subplot(111)
    _apply_dark_style(fig, ax)

    labels = [p.date for p in car.price_history]
    prices = [p.price for p in car.price_history]
    if not labels or labels[-1] != "now":
        labels.append("now")
        prices.append(car.current_price)
    xs = list(range(len(prices)))

    ax.plot(xs, prices, color=PRICE_COLOR, linewidth=1.8, marker="o", markersize=4)
    ax.set_xticks(xs)
    ax.set_xticklabels(labels, rotation=30, ha="right", color=DARK_FG, fontsize=8)
    ax.yaxis.set_major_formatter(FuncFormatter(lambda y, _pos: fmt_money(round(y))))
    ax.set_title(f"{car.name} ({sentiment(car)})", color=DARK_FG)

    for position in positions:
        if position.car_id != car.id:
            continue
        strike = compute_strike_price(
            position.entry_price, position.option_type, position.target_percentage
        )
        color = CALL_COLOR if position.option_type is OptionType.CALL else PUT_COLOR
        ax.axhline(y=strike, color=color, linewidth=1, linestyle="--", alpha=0.85)
        ax.text(
            xs[0],
            strike,
            f" {position.option_type.value} strike {fmt_money(strike)}",
            color=color,
            fontsize=7,
            va="bottom",
        )

    return fig


def render_price_chart(car: Car, out_path: Path, positions: Iterable[Position] = ()) -> Path:
    """Save the chart for *car* to *out_path* (PNG) and return the path."""
    fig = build_price_figure(car, positions)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    FigureCanvasAgg(fig)
    fig.savefig(out_path, facecolor=fig.get_facecolor())
    logger.info("Wrote price chart for %s to %s", car.id, out_path)
    return out_path
