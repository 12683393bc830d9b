"""Tests for per-step error policy."""

from unittest.mock import MagicMock

import pytest

from multiarch_manifests.manifest_store import ManifestCommandError
from multiarch_manifests.registry import RegistryError
from multiarch_manifests.steps import FatalStepError, StepPolicy, run_step


class TestRunStep:
    def test_success_returns_value(self):
        outcome = run_step("push", StepPolicy.FATAL, lambda: "sha256:abc")

        assert outcome.ok is True
        assert outcome.value == "sha256:abc"
        assert outcome.error is None

    def test_best_effort_command_failure_is_swallowed(self):
        error = ManifestCommandError(["docker", "pull", "x"], 1)
        action = MagicMock(side_effect=error)

        outcome = run_step("pull", StepPolicy.BEST_EFFORT, action)

        assert outcome.ok is False
        assert outcome.error is error
        action.assert_called_once()

    def test_best_effort_registry_failure_is_swallowed(self):
        outcome = run_step("delete", StepPolicy.BEST_EFFORT, MagicMock(side_effect=RegistryError("405")))

        assert outcome.ok is False
        assert isinstance(outcome.error, RegistryError)

    def test_fatal_failure_raises(self):
        error = ManifestCommandError(["docker", "manifest", "create"], 3)

        with pytest.raises(FatalStepError) as exc_info:
            run_step("manifest create", StepPolicy.FATAL, MagicMock(side_effect=error))

        assert exc_info.value.step == "manifest create"
        assert exc_info.value.cause is error
        assert exc_info.value.returncode == 3

    def test_fatal_registry_failure_exit_code_defaults_to_one(self):
        with pytest.raises(FatalStepError) as exc_info:
            run_step("fetch", StepPolicy.FATAL, MagicMock(side_effect=RegistryError("boom")))

        assert exc_info.value.returncode == 1

    def test_unrelated_exceptions_propagate(self):
        with pytest.raises(KeyError):
            run_step("pull", StepPolicy.BEST_EFFORT, MagicMock(side_effect=KeyError("bug")))
