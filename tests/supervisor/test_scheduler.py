"""Tests for the scheduler loop."""

from __future__ import annotations

import logging
from unittest.mock import MagicMock

import pytest

from ncsync.core.types import RetryOutcome
from ncsync.supervisor.maintenance import MaintenanceTask
from ncsync.supervisor.retry import RetryController
from ncsync.supervisor.scheduler import run_continuous, run_once
from ncsync.supervisor.shutdown import ShutdownToken


@pytest.fixture
def controller() -> MagicMock:
    """Create a mock RetryController."""
    return MagicMock(spec=RetryController)


class TestRunOnce:
    """Tests for run_once."""

    def test_success_exit_code(self, controller: MagicMock) -> None:
        controller.run.return_value = RetryOutcome.SUCCEEDED
        assert run_once(controller) == 0
        controller.run.assert_called_once()

    def test_failure_exit_code(self, controller: MagicMock) -> None:
        controller.run.return_value = RetryOutcome.EXHAUSTED
        assert run_once(controller) == 1

    def test_aborted_not_reported_as_failure(
        self, controller: MagicMock, caplog: pytest.LogCaptureFixture
    ) -> None:
        controller.run.return_value = RetryOutcome.ABORTED
        with caplog.at_level(logging.INFO):
            assert run_once(controller) == 1
        assert "aborted" in caplog.text
        assert "One-time sync failed" not in caplog.text

    def test_runs_maintenance_first(self, controller: MagicMock) -> None:
        controller.run.return_value = RetryOutcome.SUCCEEDED
        maintenance = MagicMock(spec=MaintenanceTask)
        run_once(controller, maintenance)
        maintenance.maybe_run.assert_called_once()


class TestRunContinuous:
    """Tests for run_continuous."""

    def test_stops_when_shutdown_requested_during_sleep(self, controller: MagicMock) -> None:
        token = ShutdownToken()
        controller.run.return_value = RetryOutcome.SUCCEEDED
        sleeps: list[float] = []

        def fake_sleep(seconds: float, tok: ShutdownToken) -> bool:
            sleeps.append(seconds)
            if len(sleeps) == 3:
                tok.request()
            return tok.requested

        assert run_continuous(controller, token, 300, sleep=fake_sleep) == 0
        assert controller.run.call_count == 3
        assert sleeps == [300, 300, 300]

    def test_failed_cycle_keeps_looping(
        self, controller: MagicMock, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Should sleep and try again after an exhausted cycle."""
        token = ShutdownToken()
        controller.run.side_effect = [RetryOutcome.EXHAUSTED, RetryOutcome.SUCCEEDED]
        calls = {"n": 0}

        def fake_sleep(seconds: float, tok: ShutdownToken) -> bool:
            calls["n"] += 1
            if calls["n"] == 2:
                tok.request()
            return tok.requested

        with caplog.at_level(logging.INFO):
            assert run_continuous(controller, token, 60, sleep=fake_sleep) == 0

        assert controller.run.call_count == 2
        assert "will retry at the next interval" in caplog.text

    def test_no_cycle_after_shutdown(self, controller: MagicMock) -> None:
        token = ShutdownToken()
        token.request()
        assert run_continuous(controller, token, 60, sleep=MagicMock()) == 0
        controller.run.assert_not_called()

    def test_skips_sleep_when_cycle_aborted(self, controller: MagicMock) -> None:
        token = ShutdownToken()

        def abort() -> RetryOutcome:
            token.request()
            return RetryOutcome.ABORTED

        controller.run.side_effect = abort
        sleep = MagicMock()

        assert run_continuous(controller, token, 60, sleep=sleep) == 0
        sleep.assert_not_called()

    def test_maintenance_before_each_cycle(self, controller: MagicMock) -> None:
        token = ShutdownToken()
        controller.run.return_value = RetryOutcome.SUCCEEDED
        maintenance = MagicMock(spec=MaintenanceTask)
        sleep = MagicMock(side_effect=lambda s, tok: tok.request())

        run_continuous(controller, token, 60, maintenance=maintenance, sleep=sleep)

        maintenance.maybe_run.assert_called_once()
