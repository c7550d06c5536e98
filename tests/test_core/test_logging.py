"""Tests for plantguard/core/logging.py — cycle-record file and cycle context."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from pathlib import Path

import pytest
import structlog

from plantguard.core.config import reset_settings
from plantguard.core.logging import CYCLE_LOGGER, cycle_context, setup_logging
from plantguard.core.types import Domain


@pytest.fixture(autouse=True)
def _restore_logging() -> Iterator[None]:
    """Undo setup_logging so other tests see pytest's own handlers."""
    reset_settings()
    root = logging.getLogger()
    saved_handlers = list(root.handlers)
    saved_level = root.level
    yield
    cycle = logging.getLogger(CYCLE_LOGGER)
    for handler in list(cycle.handlers):
        cycle.removeHandler(handler)
        handler.close()
    cycle.setLevel(logging.NOTSET)
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()
    reset_settings()


def _lines(path: Path) -> list[dict[str, object]]:
    return [json.loads(line) for line in path.read_text().splitlines() if line.strip()]


class TestCycleFile:
    def test_cycle_records_written_as_json(self, tmp_path: Path) -> None:
        path = tmp_path / "cycles.jsonl"
        setup_logging(level="INFO", fmt="json", cycle_log_file=str(path))

        structlog.get_logger(CYCLE_LOGGER).info(
            "cycle_completed", domain="emission", snapshot_id="em-1", attempted=2,
        )

        records = _lines(path)
        assert len(records) == 1
        assert records[0]["event"] == "cycle_completed"
        assert records[0]["snapshot_id"] == "em-1"
        assert records[0]["level"] == "info"
        assert records[0]["logger"] == CYCLE_LOGGER

    def test_file_ignores_console_level(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str],
    ) -> None:
        path = tmp_path / "cycles.jsonl"
        setup_logging(level="ERROR", fmt="json", cycle_log_file=str(path))

        structlog.get_logger(CYCLE_LOGGER).info("cycle_completed", domain="load")

        assert [r["event"] for r in _lines(path)] == ["cycle_completed"]
        assert "cycle_completed" not in capsys.readouterr().err

    def test_other_loggers_stay_out(self, tmp_path: Path) -> None:
        path = tmp_path / "cycles.jsonl"
        setup_logging(level="INFO", fmt="json", cycle_log_file=str(path))

        structlog.get_logger("plantguard.engine.scheduler").warning("tick_skipped")

        assert _lines(path) == []

    def test_empty_path_detaches_file(self, tmp_path: Path) -> None:
        setup_logging(fmt="json", cycle_log_file=str(tmp_path / "a.jsonl"))
        setup_logging(fmt="json", cycle_log_file="")
        assert logging.getLogger(CYCLE_LOGGER).handlers == []

    def test_reconfigure_replaces_file(self, tmp_path: Path) -> None:
        setup_logging(fmt="json", cycle_log_file=str(tmp_path / "a.jsonl"))
        setup_logging(fmt="json", cycle_log_file=str(tmp_path / "b.jsonl"))
        handlers = logging.getLogger(CYCLE_LOGGER).handlers
        assert len(handlers) == 1
        assert Path(handlers[0].baseFilename).name == "b.jsonl"  # type: ignore[attr-defined]


class TestCycleContext:
    def test_binds_and_unbinds(self) -> None:
        with cycle_context(Domain.ASH, 3):
            bound = structlog.contextvars.get_contextvars()
            assert bound["cycle_domain"] == "ash"
            assert bound["cycle_run"] == 3
        assert "cycle_domain" not in structlog.contextvars.get_contextvars()

    def test_context_lands_in_cycle_file(self, tmp_path: Path) -> None:
        path = tmp_path / "cycles.jsonl"
        setup_logging(fmt="json", cycle_log_file=str(path))

        with cycle_context(Domain.EMISSION, 7):
            structlog.get_logger(CYCLE_LOGGER).error("cycle_failed", error="boom")

        record = _lines(path)[0]
        assert record["cycle_domain"] == "emission"
        assert record["cycle_run"] == 7
