"""The portfolio ledger: owner of open positions and account stats.

:class:`PortfolioLedger` wraps the pure functions in
:mod:`caroptions.ledger.transitions` with three things they lack:

* **State.**  One immutable :class:`LedgerState` snapshot, swapped as a
  whole, so no reader ever sees cash debited without the position added.
* **Persistence.**  Every committed transition writes the ``"trades"`` and
  ``"portfolioStats"`` records.  Writes are retried; if they still fail the
  in-memory swap is undone and :class:`PersistenceError` is raised.
* **Events.**  :class:`TradePlaced` / :class:`PositionClosed` are published
  after a successful commit; rejections publish :class:`TradeRejected` /
  :class:`CloseRejected` and then raise.

Loading never fails: missing or malformed records fall back to the seed
dataset.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from caroptions.core.config import DeskConfig
from caroptions.core.constants import STATS_KEY, TRADES_KEY
from caroptions.core.events import (
    CloseRejected,
    EventBus,
    LedgerReseeded,
    PositionClosed,
    TradePlaced,
    TradeRejected,
)
from caroptions.core.exceptions import (
    InsufficientFundsError,
    MalformedStateError,
    PersistenceError,
    PositionNotFoundError,
    StorageError,
)
from caroptions.core.retry import retry
from caroptions.core.storage import KeyValueStore
from caroptions.ledger import transitions
from caroptions.ledger.seed import SEED_STATS, SEED_TRADES
from caroptions.models.car import Car
from caroptions.models.position import Position
from caroptions.models.stats import AccountStats, PortfolioSummary
from caroptions.models.trade_params import TradeParameters

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LedgerState:
    """Everything the ledger owns, as one value."""

    positions: tuple[Position, ...]
    stats: AccountStats

    def summary(self) -> PortfolioSummary:
        return transitions.compute_aggregate_stats(self.positions)

    def to_records(self) -> tuple[list[dict[str, object]], dict[str, object]]:
        """``(trades, portfolioStats)`` in their persisted shapes."""
        trades = [p.to_record() for p in self.positions]
        return trades, self.stats.to_record(self.summary())


def seed_state(starting_cash: float) -> LedgerState:
    positions = tuple(Position.from_record(r) for r in SEED_TRADES)
    stats = AccountStats.from_record({**SEED_STATS, "cashBalance": starting_cash})
    return LedgerState(positions=positions, stats=stats)


class PortfolioLedger:
    """Stateful ledger with transactional commits.

    Parameters
    ----------
    state:
        Initial state (see :meth:`load` to build it from a store).
    store:
        Where commits are written.  ``None`` keeps the ledger in memory only.
    bus:
        Event bus for trade / close notifications.
    config:
        Supplies the retry policy and the cash used when reseeding.
    car_names:
        Optional ``{car_id: name}`` used to label close events.
    """

    def __init__(
        self,
        state: LedgerState,
        store: KeyValueStore | None = None,
        bus: EventBus | None = None,
        config: DeskConfig | None = None,
        car_names: dict[str, str] | None = None,
    ) -> None:
        self._config = config or DeskConfig()
        self._state = state
        self._store = store
        self._bus = bus or EventBus()
        self._car_names = dict(car_names or {})
        self._write_records = retry(
            max_retries=self._config.write_retries,
            base_delay=self._config.retry_delay_seconds,
            exceptions=(StorageError,),
        )(self._write_records_once)

    # -- factories --------------------------------------------------------

    @classmethod
    def load(
        cls,
        store: KeyValueStore,
        config: DeskConfig | None = None,
        bus: EventBus | None = None,
        car_names: dict[str, str] | None = None,
    ) -> PortfolioLedger:
        """Read both records from *store*, falling back to seed data."""
        config = config or DeskConfig()
        bus = bus or EventBus()
        state, reason = _read_state(store, config.starting_cash)
        ledger = cls(state, store=store, bus=bus, config=config, car_names=car_names)
        if reason is not None:
            bus.publish(LedgerReseeded(reason=reason))
        logger.info(
            "Ledger loaded: %d positions, cash %.2f",
            len(state.positions),
            state.stats.cash_balance,
        )
        return ledger

    # -- read access ------------------------------------------------------

    @property
    def state(self) -> LedgerState:
        return self._state

    @property
    def positions(self) -> tuple[Position, ...]:
        return self._state.positions

    @property
    def stats(self) -> AccountStats:
        return self._state.stats

    @property
    def bus(self) -> EventBus:
        return self._bus

    def get_position(self, position_id: str) -> Position:
        for p in self._state.positions:
            if p.id == position_id:
                return p
        raise PositionNotFoundError(position_id)

    def summary(self) -> PortfolioSummary:
        """Aggregates recomputed from the live positions."""
        return self._state.summary()

    def stats_record(self) -> dict[str, object]:
        return self._state.to_records()[1]

    # -- transitions ------------------------------------------------------

    def open_position(
        self,
        car: Car,
        params: TradeParameters,
        now: datetime | None = None,
    ) -> Position:
        """Place a trade; raises :class:`InsufficientFundsError` or :class:`PersistenceError`."""
        current = self._state
        try:
            position, stats = transitions.open_position(car, params, current.stats, now=now)
        except InsufficientFundsError as exc:
            logger.warning(
                "Trade on %s rejected: need %.2f, have %.2f",
                car.id,
                exc.required,
                exc.available,
            )
            self._bus.publish(
                TradeRejected(
                    car_id=car.id,
                    car_name=car.name,
                    required=exc.required,
                    available=exc.available,
                )
            )
            raise

        self._commit(LedgerState(positions=current.positions + (position,), stats=stats))
        self._car_names.setdefault(car.id, car.name)
        logger.info(
            "Opened %s x%d on %s (premium %.2f, id %s)",
            position.option_type.value,
            position.quantity,
            car.id,
            position.premium_paid,
            position.id,
        )
        self._bus.publish(
            TradePlaced(position=position, car_name=car.name, cash_balance=stats.cash_balance)
        )
        return position

    def close_position(self, position_id: str) -> Position:
        """Close at the current mark; raises :class:`PositionNotFoundError` or :class:`PersistenceError`."""
        current = self._state
        try:
            remaining, stats, closed = transitions.close_position(
                position_id, current.positions, current.stats
            )
        except PositionNotFoundError:
            logger.warning("Close rejected: no open position %s", position_id)
            self._bus.publish(CloseRejected(position_id=position_id))
            raise

        self._commit(LedgerState(positions=tuple(remaining), stats=stats))
        logger.info(
            "Closed %s (value %.2f, P/L %.2f)",
            closed.id,
            closed.current_value,
            closed.profit_loss,
        )
        self._bus.publish(
            PositionClosed(
                position=closed,
                car_name=self._car_names.get(closed.car_id, closed.car_id),
                cash_balance=stats.cash_balance,
            )
        )
        return closed

    def reset(self, reason: str = "reset requested") -> None:
        """Replace everything with the seed dataset and persist it."""
        self._commit(seed_state(self._config.starting_cash))
        logger.info("Ledger reset to seed data: %s", reason)
        self._bus.publish(LedgerReseeded(reason=reason))

    def save(self) -> None:
        """Persist the current state without changing it."""
        self._commit(self._state)

    # -- commit -----------------------------------------------------------

    def _commit(self, new_state: LedgerState) -> None:
        previous = self._state
        self._state = new_state
        if self._store is None:
            return
        try:
            self._write_records(new_state)
        except StorageError as exc:
            self._state = previous
            logger.error("Commit failed, in-memory ledger rolled back: %s", exc)
            self._restore_records(previous)
            raise PersistenceError(f"Could not persist ledger: {exc}") from exc

    def _write_records_once(self, state: LedgerState) -> None:
        store = self._store
        if store is None:
            return
        trades, stats = state.to_records()
        store.set(TRADES_KEY, trades)
        store.set(STATS_KEY, stats)

    def _restore_records(self, state: LedgerState) -> None:
        # trades may already hold the new value if only the stats write failed
        try:
            self._write_records_once(state)
        except StorageError as exc:
            logger.error("Could not restore persisted records after rollback: %s", exc)


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def _read_state(store: KeyValueStore, starting_cash: float) -> tuple[LedgerState, str | None]:
    """Return the stored state, or seed state plus the reason it was used.

    The reason is ``None`` for a first run (nothing stored yet).
    """
    try:
        trades_raw = store.get(TRADES_KEY)
        stats_raw = store.get(STATS_KEY)
    except MalformedStateError as exc:
        logger.warning("Stored ledger unreadable, reseeding: %s", exc)
        return seed_state(starting_cash), "stored data was unreadable"

    if trades_raw is None and stats_raw is None:
        logger.info("No stored ledger; starting from seed data")
        return seed_state(starting_cash), None
    if trades_raw is None:
        logger.warning("Stored stats have no trades record; reseeding")
        return seed_state(starting_cash), "trades record was missing"

    try:
        positions = _parse_positions(trades_raw)
        if stats_raw is None:
            logger.warning("No stored stats; deriving them from %d trades", len(positions))
            stats = AccountStats(
                cash_balance=starting_cash,
                active_positions=sum(p.quantity for p in positions),
                total_trades=len(positions),
            )
        else:
            stats = AccountStats.from_record(stats_raw)
    except MalformedStateError as exc:
        logger.warning("Stored ledger failed validation, reseeding: %s", exc)
        return seed_state(starting_cash), "stored data failed validation"

    open_contracts = sum(p.quantity for p in positions)
    if stats.active_positions != open_contracts:
        logger.warning(
            "Stored activePositions=%d disagrees with %d open contracts; using the latter",
            stats.active_positions,
            open_contracts,
        )
        stats = stats.with_changes(active_positions=open_contracts)

    return LedgerState(positions=tuple(positions), stats=stats), None


def _parse_positions(raw: object) -> list[Position]:
    if not isinstance(raw, list):
        raise MalformedStateError(f"trades must be a list, got {type(raw).__name__}")
    positions = [Position.from_record(r) for r in raw]
    seen: set[str] = set()
    for p in positions:
        if p.id in seen:
            raise MalformedStateError(f"duplicate trade id {p.id!r}")
        seen.add(p.id)
    return positions
