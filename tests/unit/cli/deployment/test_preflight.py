"""Tests for preflight checks."""

from unittest.mock import MagicMock

import pytest
from botocore.exceptions import NoCredentialsError

from src.cli.deployment.helm_deployer.errors import DeploymentError
from src.cli.deployment.helm_deployer.preflight import (
    PreflightChecker,
    PreflightSeverity,
)


@pytest.fixture
def session() -> MagicMock:
    session = MagicMock()
    session.client.return_value.get_caller_identity.return_value = {
        "Account": "123456789012",
        "Arn": "arn:aws:iam::123456789012:user/ops",
        "UserId": "AIDA",
    }
    return session


@pytest.fixture
def controller() -> MagicMock:
    controller = MagicMock()
    controller.get_current_context.return_value = "flyte-cluster"
    return controller


class TestPreflightChecker:
    def test_clean_environment(self, controller: MagicMock, session: MagicMock) -> None:
        result = PreflightChecker(
            controller, session, binary_available=lambda _: True
        ).check()

        assert result.is_clean
        assert result.aws_identity == "arn:aws:iam::123456789012:user/ops"
        assert result.kube_context == "flyte-cluster"
        session.client.assert_called_once_with("sts")
        result.raise_for_errors()

    def test_every_problem_reported(self, controller: MagicMock) -> None:
        session = MagicMock()
        session.client.return_value.get_caller_identity.side_effect = NoCredentialsError()
        controller.get_current_context.return_value = "unknown"

        result = PreflightChecker(
            controller, session, binary_available=lambda name: name != "helm"
        ).check()

        assert result.has_errors
        titles = [issue.title for issue in result.issues]
        assert titles[0] == "helm not found on PATH"
        assert titles[1].startswith("AWS credentials not usable")
        assert titles[2] == "No active Kubernetes context"
        assert all(i.severity is PreflightSeverity.ERROR for i in result.issues)

    def test_raise_for_errors_lists_issues(
        self, controller: MagicMock, session: MagicMock
    ) -> None:
        result = PreflightChecker(
            controller, session, binary_available=lambda _: False
        ).check()

        with pytest.raises(DeploymentError) as excinfo:
            result.raise_for_errors()

        assert excinfo.value.message == "2 preflight check(s) failed"
        assert "kubectl not found on PATH" in (excinfo.value.details or "")
        assert "helm not found on PATH" in (excinfo.value.details or "")
