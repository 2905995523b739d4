"""Tests for logging helpers."""

import structlog
from structlog.testing import capture_logs

from pcacredit.utils.logging import log_context, log_stage


class TestLogHelpers:
    """Tests for log_context and log_stage."""

    def test_log_context_binds_and_unbinds(self) -> None:
        """Context values exist only inside the block."""
        with log_context(project="german-credit"):
            assert structlog.contextvars.get_contextvars()["project"] == "german-credit"
        assert "project" not in structlog.contextvars.get_contextvars()

    def test_log_stage_reports_duration(self) -> None:
        """A finished stage logs its duration and extra fields."""
        with capture_logs() as logs:
            with log_stage("pca", n_components=3):
                assert structlog.contextvars.get_contextvars()["stage"] == "pca"

        events = [e for e in logs if e["event"] == "Stage finished"]
        assert len(events) == 1
        assert events[0]["n_components"] == 3
        assert events[0]["seconds"] >= 0.0
        assert "stage" not in structlog.contextvars.get_contextvars()
