"""Tests for provisioning steps and run policies."""

from unittest.mock import MagicMock

import pytest

from src.cli.deployment.helm_deployer.errors import (
    ControlPlaneError,
    ReadinessTimeout,
)
from src.cli.deployment.helm_deployer.steps import (
    ProvisioningStep,
    StepResult,
    StepSkipped,
    StepStatus,
    describe_error,
    run_continuing,
    run_halting,
)
from src.infra.aws import AwsServiceError
from src.infra.k8s.errors import KubernetesApiError


def _step(name: str, apply=None, **kwargs) -> ProvisioningStep:
    return ProvisioningStep(
        name=name,
        system="kubernetes",
        apply=apply or (lambda: f"{name} done"),
        **kwargs,
    )


def _fail() -> str:
    raise ControlPlaneError("boom", "details here")


class TestProvisioningStep:
    def test_applied(self) -> None:
        result = _step("namespace").run()

        assert result == StepResult.applied("namespace", "kubernetes", "namespace done")
        assert result.ok

    def test_satisfied_precondition_skips_apply(self) -> None:
        apply = MagicMock()

        result = _step(
            "namespace",
            apply=apply,
            is_satisfied=lambda: True,
            satisfied_detail="namespace flyte exists",
        ).run()

        assert result.status is StepStatus.SKIPPED
        assert result.detail == "namespace flyte exists"
        apply.assert_not_called()

    def test_step_skipped_exception(self) -> None:
        def apply() -> str:
            raise StepSkipped("unchanged")

        result = _step("secret", apply=apply).run()

        assert result.status is StepStatus.SKIPPED
        assert result.detail == "unchanged"

    def test_readiness_timeout_is_warning(self) -> None:
        def apply() -> str:
            raise ReadinessTimeout("not ready")

        result = _step("readiness", apply=apply).run()

        assert result.status is StepStatus.WARNING
        assert result.ok

    def test_deployment_error_is_failed(self) -> None:
        result = _step("release", apply=_fail).run()

        assert result.status is StepStatus.FAILED
        assert result.detail == "boom: details here"
        assert not result.ok

    def test_aws_error_is_failed(self) -> None:
        def apply() -> str:
            raise AwsServiceError("s3", "DeleteBucket", "denied")

        result = _step("bucket:metadata", apply=apply).run()

        assert result.status is StepStatus.FAILED
        assert result.detail == "s3:DeleteBucket failed: denied"

    def test_kubernetes_api_error_is_failed(self) -> None:
        def apply() -> str:
            raise KubernetesApiError("get", "secret/flyte/flyte-db-pass", "forbidden")

        result = _step("secret", apply=apply).run()

        assert result.status is StepStatus.FAILED
        assert result.detail == "get secret/flyte/flyte-db-pass failed: forbidden"

    def test_precondition_error_is_failed(self) -> None:
        def unreachable() -> bool:
            raise KubernetesApiError("get", "namespace/flyte", "connection refused")

        apply = MagicMock()
        result = _step("namespace", apply=apply, is_satisfied=unreachable).run()

        assert result.status is StepStatus.FAILED
        assert "connection refused" in result.detail
        apply.assert_not_called()

    def test_programming_errors_propagate(self) -> None:
        def apply() -> str:
            raise ValueError("bug")

        with pytest.raises(ValueError):
            _step("release", apply=apply).run()

    def test_keyboard_interrupt_propagates(self) -> None:
        def apply() -> str:
            raise KeyboardInterrupt

        with pytest.raises(KeyboardInterrupt):
            _step("readiness", apply=apply).run()


class TestDescribeError:
    def test_without_details(self) -> None:
        assert describe_error(ControlPlaneError("boom")) == "boom"

    def test_plain_exception(self) -> None:
        assert describe_error(RuntimeError("oops")) == "oops"


class TestRunHalting:
    def test_stops_after_required_failure(self) -> None:
        third = MagicMock(return_value="never")
        steps = [_step("a"), _step("b", apply=_fail), _step("c", apply=third)]

        results = list(run_halting(steps))

        assert [r.status for r in results] == [StepStatus.APPLIED, StepStatus.FAILED]
        third.assert_not_called()

    def test_optional_failure_continues(self) -> None:
        steps = [_step("a", apply=_fail, optional=True), _step("b")]

        results = list(run_halting(steps))

        assert [r.status for r in results] == [StepStatus.FAILED, StepStatus.APPLIED]


class TestRunContinuing:
    def test_runs_every_step_after_failures(self) -> None:
        steps = [_step("a", apply=_fail), _step("b", apply=_fail), _step("c")]

        results = list(run_continuing(steps))

        assert [r.status for r in results] == [
            StepStatus.FAILED,
            StepStatus.FAILED,
            StepStatus.APPLIED,
        ]

    def test_declined_confirmation_skips(self) -> None:
        apply = MagicMock(return_value="done")
        confirm = MagicMock(return_value=False)
        steps = [_step("a", apply=apply, confirm_message="Do a?", permanent=True)]

        results = list(run_continuing(steps, confirm))

        assert results == [StepResult.skipped("a", "kubernetes", "declined by operator")]
        confirm.assert_called_once_with("a", "Do a?", True)
        apply.assert_not_called()

    def test_steps_without_message_are_not_confirmed(self) -> None:
        confirm = MagicMock(return_value=False)

        results = list(run_continuing([_step("a")], confirm))

        assert results[0].status is StepStatus.APPLIED
        confirm.assert_not_called()
