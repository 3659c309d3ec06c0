"""Tests for caroptions.core.logging_setup."""

from __future__ import annotations

import logging
from pathlib import Path

from caroptions.core.logging_setup import _configured, log_file_path, setup_logger

_NAMES = ("test_desk_logger", "test_desk_quiet", "test_desk_idempotent")


class TestSetupLogger:
    def setup_method(self) -> None:
        for name in _NAMES:
            _configured.discard(name)
            logging.getLogger(name).handlers.clear()

    def test_creates_log_file(self, tmp_path: Path) -> None:
        lg = setup_logger("test_desk_logger", log_dir=tmp_path)
        lg.info("trade placed")
        content = (tmp_path / "test_desk_logger.log").read_text(encoding="utf-8")
        assert "trade placed" in content
        assert "[INFO]" in content

    def test_console_handler_present(self, tmp_path: Path) -> None:
        lg = setup_logger("test_desk_logger", log_dir=tmp_path)
        assert any(type(h) is logging.StreamHandler for h in lg.handlers)

    def test_console_off(self, tmp_path: Path) -> None:
        lg = setup_logger("test_desk_quiet", log_dir=tmp_path, console=False)
        assert not any(type(h) is logging.StreamHandler for h in lg.handlers)
        assert len(lg.handlers) == 1

    def test_idempotent(self, tmp_path: Path) -> None:
        lg1 = setup_logger("test_desk_idempotent", log_dir=tmp_path)
        n = len(lg1.handlers)
        lg2 = setup_logger("test_desk_idempotent", log_dir=tmp_path)
        assert lg1 is lg2
        assert len(lg2.handlers) == n

    def test_log_level(self, tmp_path: Path) -> None:
        lg = setup_logger("test_desk_logger", log_dir=tmp_path, level=logging.DEBUG)
        assert lg.level == logging.DEBUG

    def test_unwritable_log_dir_falls_back_to_console(self, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        lg = setup_logger("test_desk_logger", log_dir=blocker / "logs")
        assert [type(h) for h in lg.handlers] == [logging.StreamHandler]


def test_log_file_path(tmp_path: Path) -> None:
    assert log_file_path("caroptions", tmp_path) == tmp_path / "caroptions.log"
    assert log_file_path("caroptions") == Path("logs") / "caroptions.log"
