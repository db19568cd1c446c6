"""Tests for StepRunner: critical vs best-effort failure handling."""

import pytest

from glacier.core.errors import CommandError, InvalidPrivateKey, StepError, StepWarning
from glacier.core.steps import StepRunner

from conftest import ScriptedConsole


def _fail_command():
    raise CommandError(["docker", "rmi", "img"], 1, "No such image")


class TestStepRunner:

    def test_returns_result_on_success(self):
        steps = StepRunner(ScriptedConsole())
        assert steps.run("Add", lambda a, b: a + b, 2, 3) == 5
        assert steps.warnings == []

    def test_critical_failure_raises_step_error(self):
        steps = StepRunner(ScriptedConsole())
        with pytest.raises(StepError) as exc_info:
            steps.run("Remove image", _fail_command)
        assert exc_info.value.step == "Remove image"
        assert isinstance(exc_info.value.cause, CommandError)
        assert isinstance(exc_info.value.__cause__, CommandError)

    def test_invalid_key_is_critical(self):
        steps = StepRunner(ScriptedConsole())

        def _bad_key():
            raise InvalidPrivateKey()

        with pytest.raises(StepError, match="Private key"):
            steps.run("Private key", _bad_key)

    def test_best_effort_failure_is_recorded_and_reported(self):
        console = ScriptedConsole()
        steps = StepRunner(console)
        assert steps.best_effort("Remove image", _fail_command) is None
        assert len(steps.warnings) == 1
        assert isinstance(steps.warnings[0], StepWarning)
        assert steps.warnings[0].step == "Remove image"
        assert "Remove image failed, continuing" in console.output

    def test_best_effort_forwards_keyword_arguments(self):
        steps = StepRunner(ScriptedConsole())
        seen = {}

        def _remove(name, force=False):
            seen[name] = force

        steps.best_effort("Remove", _remove, "glacier-verifier", force=True)
        assert seen == {"glacier-verifier": True}

    def test_unexpected_exceptions_propagate(self):
        steps = StepRunner(ScriptedConsole())

        def _boom():
            raise RuntimeError("bug")

        with pytest.raises(RuntimeError):
            steps.best_effort("Buggy", _boom)
