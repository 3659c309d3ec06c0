"""Shared constants for the car options desk.

Every pricing coefficient and ledger default lives here so there is a
single source of truth for the engine, the ledger and the CLI.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Trade ticket choices offered by the desk.
# ---------------------------------------------------------------------------
EXPIRY_OPTIONS: tuple[int, ...] = (1, 3, 6)  # months
PERCENTAGE_OPTIONS: tuple[int, ...] = (1, 2, 5, 10, 15, 30)
MIN_QUANTITY: int = 1

# ---------------------------------------------------------------------------
# Pricing model coefficients.
# ---------------------------------------------------------------------------
BASE_PREMIUM_RATE: float = 0.005  # 0.5% of the car's current value
MIN_PREMIUM: int = 1_000  # floor per contract
PERCENTAGE_DIVISOR: float = 5.0  # a 5% target is the neutral multiplier
FALLBACK_TREND: float = 0.1  # used when the history has a single point
PUT_SKEW: float = 0.1  # extra PUT offset, kept as-is pending product review
VOLATILITY_SCALE: float = 10.0
VOLATILITY_FLOOR: float = 0.05
FALLBACK_VOLATILITY: float = 0.10
STRETCH_FACTOR: float = 1.5  # potential-profit projection: 1.5x the target

# ---------------------------------------------------------------------------
# Ledger accounting.
# ---------------------------------------------------------------------------
OPENING_SPREAD: float = 0.9  # positions open marked at 90% of premium paid
DEFAULT_STARTING_CASH: float = 250_000.0

# ---------------------------------------------------------------------------
# Persistence keys (one JSON record each).
# ---------------------------------------------------------------------------
TRADES_KEY: str = "trades"
STATS_KEY: str = "portfolioStats"

# ---------------------------------------------------------------------------
# Runtime defaults.
# ---------------------------------------------------------------------------
SETTINGS_FILENAME: str = "desk_settings.json"
DEFAULT_DATA_DIR: str = "desk_data"
DEFAULT_LOG_DIR: str = "logs"
DEFAULT_WRITE_RETRIES: int = 2
DEFAULT_RETRY_DELAY_SECONDS: float = 0.1
DEFAULT_NOTIFICATION_SECONDS: float = 3.0
