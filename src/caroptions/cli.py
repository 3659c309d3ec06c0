"""Command-line trading desk.

Usage::

    caroptions cars
    caroptions quote 1 --type CALL --expiry 3 --target 5 --qty 2
    caroptions buy 1 --type CALL --expiry 3 --target 5 --qty 2
    caroptions portfolio
    caroptions close <position-id>
    caroptions chart 1 --out charts/car-1.png
    caroptions reset

Domain errors (insufficient funds, unknown ids, invalid tickets, failed
writes) are reported as notifications with exit code 1; they never end
the session with a traceback.
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

from caroptions.core.config import DeskConfig
from caroptions.core.constants import EXPIRY_OPTIONS, PERCENTAGE_OPTIONS, SETTINGS_FILENAME
from caroptions.core.events import EventBus
from caroptions.core.exceptions import (
    CarNotFoundError,
    CarOptionsError,
    InvalidTradeError,
    LedgerError,
    PersistenceError,
)
from caroptions.core.formatting import fmt_date, fmt_money, fmt_pct, fmt_profit_loss
from caroptions.core.logging_setup import setup_logger
from caroptions.core.notifications import NotificationCenter, NotificationLevel
from caroptions.core.storage import JsonFileStore, KeyValueStore
from caroptions.ledger.catalog import CarCatalog, sentiment
from caroptions.ledger.portfolio import PortfolioLedger
from caroptions.models.trade_params import TradeParameters
from caroptions.pricing.engine import compute_strike_price, quote

logger = logging.getLogger(__name__)


@dataclass
class Desk:
    """Everything a command needs, wired once per invocation."""

    config: DeskConfig
    catalog: CarCatalog
    ledger: PortfolioLedger
    notifications: NotificationCenter
    out: TextIO

    def print(self, text: str = "") -> None:
        print(text, file=self.out)


def build_desk(
    config: DeskConfig,
    store: KeyValueStore | None = None,
    out: TextIO | None = None,
) -> Desk:
    """Wire catalog, store, bus, notifications and ledger from *config*."""
    catalog = (
        CarCatalog.from_file(config.cars_file) if config.cars_file else CarCatalog.from_seed()
    )
    bus = EventBus()
    notifications = NotificationCenter(duration_seconds=config.notification_seconds)
    notifications.attach(bus)
    ledger = PortfolioLedger.load(
        store if store is not None else JsonFileStore(config.data_dir),
        config,
        bus=bus,
        car_names={car.id: car.name for car in catalog},
    )
    return Desk(
        config=config,
        catalog=catalog,
        ledger=ledger,
        notifications=notifications,
        out=out or sys.stdout,
    )


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def cmd_cars(desk: Desk, args: argparse.Namespace) -> int:
    desk.print(f"{'ID':<4}{'CAR':<32}{'PRICE':>12}{'CHANGE':>10}  SENTIMENT")
    for car in desk.catalog:
        desk.print(
            f"{car.id:<4}{car.name:<32}{fmt_money(car.current_price):>12}"
            f"{car.change_pct:>+9.2f}%  {sentiment(car)}"
        )
    return 0


def _ticket(args: argparse.Namespace) -> TradeParameters:
    return TradeParameters.create(args.type, args.expiry, args.target, args.qty)


def cmd_quote(desk: Desk, args: argparse.Namespace) -> int:
    car = desk.catalog.get(args.car_id)
    q = quote(car, _ticket(args))
    desk.print(f"{car.name}  current {fmt_money(car.current_price)}")
    desk.print(f"  {args.type.upper()} {args.target}% / {args.expiry} month(s) x{args.qty}")
    desk.print(f"  Strike price:        {fmt_money(q.strike_price)}")
    desk.print(f"  Premium / contract:  {fmt_money(q.premium_per_contract)}")
    desk.print(f"  Total premium:       {fmt_money(q.total_premium)}")
    desk.print(f"  Potential profit:    {fmt_money(q.potential_profit)}  (projection)")
    if q.expiry is not None:
        desk.print(f"  Expires:             {fmt_date(q.expiry)}")
    desk.print(f"  Cash balance:        {fmt_money(desk.ledger.stats.cash_balance)}")
    return 0


def cmd_buy(desk: Desk, args: argparse.Namespace) -> int:
    car = desk.catalog.get(args.car_id)
    position = desk.ledger.open_position(car, _ticket(args))
    desk.print(f"Position {position.id} opened; premium {fmt_money(position.premium_paid)}")
    return 0


def cmd_close(desk: Desk, args: argparse.Namespace) -> int:
    desk.ledger.close_position(args.position_id)
    return 0


def cmd_portfolio(desk: Desk, args: argparse.Namespace) -> int:
    stats = desk.ledger.stats
    summary = desk.ledger.summary()
    desk.print(f"Cash balance:      {fmt_money(stats.cash_balance)}")
    desk.print(f"Total invested:    {fmt_money(summary.total_invested)}")
    desk.print(f"Current value:     {fmt_money(summary.total_current_value)}")
    desk.print(
        f"Total P/L:         "
        f"{fmt_profit_loss(summary.total_profit_loss, summary.percentage_return)}"
    )
    desk.print(f"Open contracts:    {stats.active_positions}")
    desk.print(f"Trades placed:     {stats.total_trades}")
    if not desk.ledger.positions:
        desk.print("\nNo open positions.")
        return 0
    desk.print("")
    for p in desk.ledger.positions:
        car = desk.catalog.find(p.car_id)
        name = car.name if car else p.car_id
        strike = compute_strike_price(p.entry_price, p.option_type, p.target_percentage)
        qty = f" x{p.quantity}" if p.quantity > 1 else ""
        desk.print(f"[{p.id}] {p.option_type.value}{qty} {name}")
        desk.print(
            f"    strike {fmt_money(strike)} ({fmt_pct(p.target_percentage)} "
            f"{'above' if p.option_type.is_call else 'below'} entry "
            f"{fmt_money(p.entry_price)}), expires {fmt_date(p.expiry)}"
        )
        desk.print(
            f"    value {fmt_money(p.current_value)}, "
            f"P/L {fmt_profit_loss(p.profit_loss, p.profit_loss_pct)}"
        )
    return 0


def cmd_reset(desk: Desk, args: argparse.Namespace) -> int:
    desk.ledger.reset("reset from the command line")
    return 0


def cmd_chart(desk: Desk, args: argparse.Namespace) -> int:
    from caroptions.charts import render_price_chart

    car = desk.catalog.get(args.car_id)
    out = Path(args.out) if args.out else desk.config.data_dir / f"car-{car.id}.png"
    try:
        render_price_chart(car, out, desk.ledger.positions)
    except OSError as exc:
        logger.error("Chart for %s could not be written to %s: %s", car.id, out, exc)
        desk.notifications.notify(f"Could not write chart to {out}: {exc}", NotificationLevel.ERROR)
        return 1
    desk.print(f"Chart written to {out}")
    return 0


# ---------------------------------------------------------------------------
# Parser / entry point
# ---------------------------------------------------------------------------


def _add_ticket_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("car_id", help="Car id (see `cars`)")
    p.add_argument("--type", required=True, choices=["CALL", "PUT", "call", "put"])
    p.add_argument("--expiry", type=int, required=True, choices=EXPIRY_OPTIONS, help="Months")
    p.add_argument(
        "--target", type=int, required=True, choices=PERCENTAGE_OPTIONS, help="Target move in %%"
    )
    p.add_argument("--qty", type=int, default=1, help="Number of contracts (default 1)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="caroptions", description="Paper trading desk for car price options."
    )
    parser.add_argument(
        "--settings",
        default=SETTINGS_FILENAME,
        help=f"Settings file (default ./{SETTINGS_FILENAME})",
    )
    parser.add_argument("--verbose", action="store_true", help="Log to stderr as well")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("cars", help="List tradable cars").set_defaults(func=cmd_cars)

    p = sub.add_parser("quote", help="Price a trade without placing it")
    _add_ticket_args(p)
    p.set_defaults(func=cmd_quote)

    p = sub.add_parser("buy", help="Place a trade")
    _add_ticket_args(p)
    p.set_defaults(func=cmd_buy)

    p = sub.add_parser("close", help="Close an open position")
    p.add_argument("position_id")
    p.set_defaults(func=cmd_close)

    sub.add_parser("portfolio", help="Show cash, totals and open positions").set_defaults(
        func=cmd_portfolio
    )
    sub.add_parser("reset", help="Restore the seed portfolio").set_defaults(func=cmd_reset)

    p = sub.add_parser("chart", help="Save a price-history chart as PNG")
    p.add_argument("car_id")
    p.add_argument("--out", default=None)
    p.set_defaults(func=cmd_chart)

    return parser


def _flush_notifications(desk: Desk) -> None:
    for note in desk.notifications.drain():
        stream = sys.stderr if note.level is NotificationLevel.ERROR else desk.out
        print(f"[{note.level.value}] {note.message}", file=stream)


def run(args: argparse.Namespace, desk: Desk) -> int:
    """Execute a parsed command against *desk*, surfacing domain errors as notifications."""
    try:
        code = args.func(desk, args)
    except (InvalidTradeError, CarNotFoundError) as exc:
        desk.notifications.notify(str(exc), NotificationLevel.ERROR)
        code = 1
    except LedgerError:
        # already published by the ledger as a rejection event
        code = 1
    except PersistenceError as exc:
        desk.notifications.notify(
            f"Could not save your portfolio; nothing was changed. ({exc})",
            NotificationLevel.ERROR,
        )
        code = 1
    except CarOptionsError as exc:
        logger.error("Command %s failed: %s", args.command, exc)
        desk.notifications.notify(str(exc), NotificationLevel.ERROR)
        code = 1
    _flush_notifications(desk)
    return code


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    config = DeskConfig.from_file(Path(args.settings).resolve())
    setup_logger(
        "caroptions",
        config.log_dir,
        level=logging.DEBUG if args.verbose else logging.INFO,
        console=args.verbose,
    )
    desk = build_desk(config)
    return run(args, desk)


if __name__ == "__main__":
    sys.exit(main())
