"""Provisioning steps and the two policies for running them.

Install and teardown share the same step structure and differ only in how a
failure affects the remaining steps:

- ``run_halting`` stops at the first failed, non-optional step
- ``run_continuing`` records the failure and moves on
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from enum import Enum

from loguru import logger

from src.infra.aws import AwsServiceError
from src.infra.k8s.errors import KubernetesApiError

from .errors import DeploymentError, ReadinessTimeout


class StepStatus(Enum):
    APPLIED = "applied"
    SKIPPED = "skipped"
    WARNING = "warning"
    FAILED = "failed"


@dataclass(frozen=True)
class StepResult:
    """Outcome of one step against one external system."""

    step: str
    status: StepStatus
    system: str
    detail: str = ""

    @classmethod
    def applied(cls, step: str, system: str, detail: str = "") -> StepResult:
        return cls(step, StepStatus.APPLIED, system, detail)

    @classmethod
    def skipped(cls, step: str, system: str, detail: str = "") -> StepResult:
        return cls(step, StepStatus.SKIPPED, system, detail)

    @classmethod
    def warning(cls, step: str, system: str, detail: str) -> StepResult:
        return cls(step, StepStatus.WARNING, system, detail)

    @classmethod
    def failed(cls, step: str, system: str, detail: str) -> StepResult:
        return cls(step, StepStatus.FAILED, system, detail)

    @property
    def ok(self) -> bool:
        return self.status is not StepStatus.FAILED


class StepSkipped(Exception):
    """Raised from an apply action when there turned out to be nothing to do."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(detail)


# (step name, message, permanent) -> proceed?
ConfirmFn = Callable[[str, str, bool], bool]


@dataclass
class ProvisioningStep:
    """A single idempotent action against an external system.

    Attributes:
        name: Step identifier shown to operators (e.g. "namespace")
        system: External system touched (e.g. "kubernetes", "helm")
        apply: Performs the action and returns a short detail string. May
            raise StepSkipped when the target state already holds.
        is_satisfied: Optional precondition; when it returns True the step
            is Skipped without calling apply
        optional: Failure does not halt a halting run
        confirm_message: Prompt shown before apply when a confirm callback
            is in use; None means the step never asks
        permanent: The action cannot be undone
    """

    name: str
    system: str
    apply: Callable[[], str]
    is_satisfied: Callable[[], bool] | None = None
    satisfied_detail: str = "already in desired state"
    optional: bool = False
    confirm_message: str | None = None
    permanent: bool = False

    def run(self) -> StepResult:
        """Execute the step, converting expected errors into a StepResult.

        KeyboardInterrupt is not caught.
        """
        logger.info("Step {} ({}) starting", self.name, self.system)
        try:
            if self.is_satisfied is not None and self.is_satisfied():
                result = StepResult.skipped(
                    self.name, self.system, self.satisfied_detail
                )
            else:
                detail = self.apply()
                result = StepResult.applied(self.name, self.system, detail)
        except StepSkipped as e:
            result = StepResult.skipped(self.name, self.system, e.detail)
        except ReadinessTimeout as e:
            result = StepResult.warning(self.name, self.system, describe_error(e))
        except (DeploymentError, AwsServiceError, KubernetesApiError) as e:
            result = StepResult.failed(self.name, self.system, describe_error(e))

        log = logger.warning if result.status is StepStatus.FAILED else logger.info
        log("Step {} finished: {} {}", self.name, result.status.value, result.detail)
        return result


def describe_error(error: Exception) -> str:
    """One-line description of an error, including details when present."""
    if isinstance(error, DeploymentError) and error.details:
        return f"{error.message}: {error.details}"
    return str(error)


def run_halting(steps: Iterable[ProvisioningStep]) -> Iterator[StepResult]:
    """Run steps in order, stopping after the first failed required step."""
    for step in steps:
        result = step.run()
        yield result
        if result.status is StepStatus.FAILED and not step.optional:
            logger.error("Halting after failed step {}", step.name)
            return


def run_continuing(
    steps: Iterable[ProvisioningStep],
    confirm: ConfirmFn | None = None,
) -> Iterator[StepResult]:
    """Run every step regardless of earlier failures.

    Args:
        steps: Steps to run in order
        confirm: Asked before each step that has a confirm_message. A False
            answer records the step as Skipped.
    """
    for step in steps:
        if (
            confirm is not None
            and step.confirm_message is not None
            and not confirm(step.name, step.confirm_message, step.permanent)
        ):
            logger.info("Step {} declined by operator", step.name)
            yield StepResult.skipped(step.name, step.system, "declined by operator")
            continue
        yield step.run()
