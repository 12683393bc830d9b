"""Per-step error policy for the publishing pipeline.

Each orchestration step declares whether a failure stops the whole run
(`FATAL`) or is reported and skipped (`BEST_EFFORT`).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

import structlog

from .manifest_store import ManifestCommandError
from .registry import RegistryError

logger = structlog.get_logger(__name__)

STEP_ERRORS = (ManifestCommandError, RegistryError)


class StepPolicy(str, Enum):
    """How a failing step affects the run"""

    FATAL = "fatal"
    BEST_EFFORT = "best_effort"


class FatalStepError(Exception):
    """Raised when a FATAL step fails; the run stops immediately."""

    def __init__(self, step: str, cause: Exception):
        self.step = step
        self.cause = cause
        super().__init__(f"Step '{step}' failed: {cause}")

    @property
    def returncode(self) -> int:
        """Exit status to propagate (the failing command's, or 1)."""
        code = getattr(self.cause, "returncode", None)
        return code if isinstance(code, int) and code != 0 else 1


@dataclass
class StepOutcome:
    """Result of running one step."""

    step: str
    ok: bool
    value: Any = None
    error: Optional[Exception] = None


def run_step(step: str, policy: StepPolicy, action: Callable[[], Any]) -> StepOutcome:
    """Run a step under its error policy.

    Only command and registry failures are governed by the policy; any other
    exception propagates unchanged.

    Raises:
        FatalStepError: If a FATAL step fails
    """
    try:
        value = action()
    except STEP_ERRORS as exc:
        if policy is StepPolicy.FATAL:
            logger.error("Fatal step failed", step=step, error=str(exc))
            raise FatalStepError(step, exc) from exc
        logger.debug("Best-effort step failed, continuing", step=step, error=str(exc))
        return StepOutcome(step=step, ok=False, error=exc)
    return StepOutcome(step=step, ok=True, value=value)
