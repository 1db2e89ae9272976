"""Tests for step logging and token accounting."""

import pytest
from structlog.testing import capture_logs

from coachflow.application.workflow.metrics import TokenUsageTally, log_step_execution, token_count
from coachflow.domain.entities.workflow import StepStatus, WorkflowStep


@pytest.fixture
def step():
    return WorkflowStep(id="s1", name="Analyze JD", type="llm-call", model_tier="cost-optimized")


class TestLogStepExecution:
    def test_success_record(self, step):
        with capture_logs() as logs:
            record = log_step_execution(step, 12.5, 40, StepStatus.SUCCESS)

        assert record == {
            "stepId": "s1",
            "stepName": "Analyze JD",
            "stepType": "llm-call",
            "modelTier": "cost-optimized",
            "duration": 12.5,
            "tokenUsage": 40,
            "status": "success",
            "error": None,
            "cached": False,
        }
        assert logs[0]["event"] == "workflow_step_completed"
        assert logs[0]["log_level"] == "debug"

    def test_failure_record(self, step):
        with capture_logs() as logs:
            record = log_step_execution(step, 0, 0, StepStatus.FAILED, "timeout")

        assert record["status"] == "failed"
        assert record["error"] == "timeout"
        assert logs[0]["event"] == "workflow_step_failed"
        assert logs[0]["log_level"] == "error"
        assert logs[0]["stepId"] == "s1"


class TestTokenCount:
    @pytest.mark.parametrize(
        ("outcome", "expected"),
        [
            ({"tokenUsage": 12}, 12),
            ({"tokenUsage": 3.0}, 3),
            ({"tokenUsage": None}, 0),
            ({"tokenUsage": "many"}, 0),
            ({"tokenUsage": True}, 0),
            ({"error": "x"}, 0),
        ],
    )
    def test_values(self, outcome, expected):
        assert token_count(outcome) == expected


class TestTokenUsageTally:
    def test_total_is_sum_of_steps(self):
        tally = TokenUsageTally()
        tally.record("a", 10)
        tally.record("b", 5)

        usage = tally.to_usage()

        assert usage.total == 15
        assert usage.by_step == {"a": 10, "b": 5}
        assert usage.to_dict() == {"total": 15, "byStep": {"a": 10, "b": 5}}

    def test_repeated_id_keeps_total_consistent(self):
        tally = TokenUsageTally()
        tally.record("a", 10)
        tally.record("a", 4)

        assert tally.total == 4
        assert tally.to_usage().by_step == {"a": 4}
