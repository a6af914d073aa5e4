"""Tests for the logger wrapper and phase timer."""

import pytest

from common.config import is_configured
from common.logger import AppLogger, PhaseTimer, get_app_logger


class TestAppLogger:
    def test_bind_returns_new_logger(self):
        base = get_app_logger("tests")

        bound = base.bind(table="accounts").bind(source="accounts.csv")

        assert isinstance(bound, AppLogger)
        assert bound is not base
        assert bound.name == "tests"
        assert bound._context == {"table": "accounts", "source": "accounts.csv"}
        assert base._context == {}

    def test_logs_once_configured(self):
        assert is_configured()

        get_app_logger("tests").bind(table="accounts").info("Seeded", rows=2)


class TestPhaseTimer:
    def test_phases_accumulate(self):
        timer = PhaseTimer()

        with timer.capture("insert"):
            pass
        with timer.capture("insert"):
            pass
        with timer.capture("total"):
            pass

        timings = timer.as_dict()
        assert set(timings) == {"insert", "total"}
        assert all(value >= 0 for value in timings.values())

    def test_failed_phase_is_still_timed(self):
        timer = PhaseTimer()

        with pytest.raises(ValueError):
            with timer.capture("read"):
                raise ValueError("boom")

        assert "read" in timer.timings
