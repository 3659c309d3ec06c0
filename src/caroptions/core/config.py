"""Validated desk configuration loaded from ``desk_settings.json``."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from caroptions.core.constants import (
    DEFAULT_DATA_DIR,
    DEFAULT_LOG_DIR,
    DEFAULT_NOTIFICATION_SECONDS,
    DEFAULT_RETRY_DELAY_SECONDS,
    DEFAULT_STARTING_CASH,
    DEFAULT_WRITE_RETRIES,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeskConfig:
    """Immutable snapshot of the desk configuration.

    Build from a ``desk_settings.json`` file via :meth:`from_file`, or
    construct directly for testing.

    Relative ``data_dir`` / ``log_dir`` / ``cars_file`` values are resolved
    against the settings file's directory by :meth:`from_file`.
    """

    data_dir: Path = Path(DEFAULT_DATA_DIR)
    log_dir: Path = Path(DEFAULT_LOG_DIR)
    starting_cash: float = DEFAULT_STARTING_CASH
    write_retries: int = DEFAULT_WRITE_RETRIES
    retry_delay_seconds: float = DEFAULT_RETRY_DELAY_SECONDS
    notification_seconds: float = DEFAULT_NOTIFICATION_SECONDS
    cars_file: Path | None = None

    # -- factory ----------------------------------------------------------

    @classmethod
    def from_file(cls, path: Path) -> DeskConfig:
        """Load from a settings file with validation.

        Missing or unparseable values fall back to defaults.  Validation
        warnings are logged but never raise.
        """
        try:
            raw = path.read_text(encoding="utf-8")
            data: dict[str, Any] = json.loads(raw) or {}
            if not isinstance(data, dict):
                data = {}
        except FileNotFoundError:
            logger.debug("No settings file at %s; using defaults", path)
            data = {}
        except (OSError, UnicodeDecodeError, json.JSONDecodeError, TypeError) as exc:
            logger.warning("Could not read config from %s: %s", path, exc)
            data = {}

        root = path.parent
        cars_raw = data.get("cars_file")

        cfg = cls(
            data_dir=_resolve(root, data.get("data_dir"), DEFAULT_DATA_DIR),
            log_dir=_resolve(root, data.get("log_dir"), DEFAULT_LOG_DIR),
            starting_cash=_safe_float(data.get("starting_cash"), DEFAULT_STARTING_CASH),
            write_retries=max(
                0, _safe_int(data.get("write_retries"), DEFAULT_WRITE_RETRIES)
            ),
            retry_delay_seconds=max(
                0.0,
                _safe_float(data.get("retry_delay_seconds"), DEFAULT_RETRY_DELAY_SECONDS),
            ),
            notification_seconds=_safe_float(
                data.get("notification_seconds"), DEFAULT_NOTIFICATION_SECONDS
            ),
            cars_file=_resolve(root, cars_raw, "") if cars_raw else None,
        )

        for err in cfg.validate():
            logger.warning("Config validation: %s", err)

        return cfg

    # -- validation -------------------------------------------------------

    def validate(self) -> list[str]:
        """Return a list of human-readable validation warnings (empty = OK)."""
        errors: list[str] = []
        if self.starting_cash < 0:
            errors.append(f"starting_cash={self.starting_cash} must be >= 0.")
        if self.write_retries < 0:
            errors.append(f"write_retries={self.write_retries} must be >= 0.")
        if self.retry_delay_seconds < 0:
            errors.append(
                f"retry_delay_seconds={self.retry_delay_seconds} must be >= 0."
            )
        if self.notification_seconds <= 0:
            errors.append(
                f"notification_seconds={self.notification_seconds} must be > 0."
            )
        if self.cars_file is not None and not self.cars_file.is_file():
            errors.append(f"cars_file={self.cars_file} does not exist.")
        return errors


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _resolve(root: Path, value: Any, default: str) -> Path:
    text = str(value).strip() if value is not None else ""
    p = Path(text or default)
    return p if p.is_absolute() else root / p


def _safe_int(value: Any, default: int) -> int:
    try:
        return int(float(str(value).replace(",", "").strip()))
    except (TypeError, ValueError):
        return default


def _safe_float(value: Any, default: float) -> float:
    try:
        return float(str(value).replace(",", "").replace("$", "").strip())
    except (TypeError, ValueError):
        return default
