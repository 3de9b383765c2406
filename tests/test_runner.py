"""Tests for Step and the sequential Runner"""
from unittest.mock import MagicMock

import pytest

from wpstack.errors import StepExecutionError
from wpstack.hook import Hook
from wpstack.runner import Runner
from wpstack.step import Step


class RecordingStep(Step):
    def __init__(self, id, log, done=False, fail=False, best_effort=False):
        super().__init__(id, context=MagicMock(), best_effort=best_effort)
        self.log = log
        self.done = done
        self.fail = fail

    def is_done(self):
        return self.done

    def run(self):
        self.log.append(self.id)
        if self.fail:
            raise StepExecutionError(["wp", self.id], 1, "", f"{self.id} broke")
        return {"status": "success", "message": f"{self.id} ok"}


class RecordingHook(Hook):
    def __init__(self):
        self.events = []

    def on_step_start(self, step):
        self.events.append(("start", step.id))

    def on_step_end(self, step, result):
        self.events.append(("end", step.id, result["status"]))


class TestRunner:
    """Test Runner ordering, skipping and failure handling"""

    def test_runs_in_order(self):
        """Test that steps run strictly in declared order"""
        log = []
        runner = Runner("r", [RecordingStep("a", log), RecordingStep("b", log), RecordingStep("c", log)])
        results = runner.execute()
        assert log == ["a", "b", "c"]
        assert list(results) == ["a", "b", "c"]
        assert all(r["status"] == "success" for r in results.values())

    def test_done_step_is_skipped(self):
        """Test that a satisfied precondition skips run()"""
        log = []
        runner = Runner("r", [RecordingStep("a", log, done=True), RecordingStep("b", log)])
        results = runner.execute()
        assert log == ["b"]
        assert results["a"] == {"status": "skipped", "reason": "already done"}

    def test_failure_aborts_remaining_steps(self):
        """Test fail-fast on a non-best-effort step"""
        log = []
        runner = Runner("r", [RecordingStep("a", log, fail=True), RecordingStep("b", log)])
        with pytest.raises(StepExecutionError) as exc:
            runner.execute()
        assert log == ["a"]
        assert exc.value.step == "a"
        assert runner.results["a"]["status"] == "error"
        assert "b" not in runner.results

    def test_best_effort_failure_continues(self):
        """Test that a best-effort failure is recorded and the next step runs"""
        log = []
        runner = Runner(
            "r",
            [RecordingStep("a", log, fail=True, best_effort=True), RecordingStep("b", log)],
        )
        results = runner.execute()
        assert log == ["a", "b"]
        assert results["a"]["status"] == "error"
        assert results["a"]["best_effort"] is True
        assert results["b"]["status"] == "success"

    def test_hook_events(self):
        """Test that the hook sees every step start and end"""
        hook = RecordingHook()
        log = []
        runner = Runner("r", [RecordingStep("a", log, done=True), RecordingStep("b", log)], hook=hook)
        runner.execute()
        assert hook.events == [("start", "a"), ("end", "a", "skipped"), ("start", "b"), ("end", "b", "success")]

    def test_failing_hook_is_ignored(self):
        """Test that hook errors never break a run"""
        hook = MagicMock(spec=Hook)
        hook.on_step_start.side_effect = RuntimeError("hook bug")
        log = []
        Runner("r", [RecordingStep("a", log)], hook=hook).execute()
        assert log == ["a"]

    def test_step_describe_defaults_to_id(self):
        """Test the default description"""
        assert RecordingStep("x", []).describe() == "x"
