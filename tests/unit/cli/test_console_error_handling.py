import pytest
import typer

from src.cli.deployment.helm_deployer.errors import ConfigError, DeploymentError
from src.cli.shared.console import with_error_handling
from src.infra.aws import AwsServiceError
from src.infra.k8s.errors import KubernetesApiError


def test_with_error_handling_handles_deployment_error():
    @with_error_handling
    def _command() -> None:
        raise DeploymentError("Boom", details="extra")

    with pytest.raises(typer.Exit) as excinfo:
        _command()

    assert excinfo.value.exit_code == 1


def test_with_error_handling_handles_config_error(capsys):
    @with_error_handling
    def _command() -> None:
        raise ConfigError(missing=["CLUSTER_NAME", "DB_HOST"])

    with pytest.raises(typer.Exit) as excinfo:
        _command()

    assert excinfo.value.exit_code == 1
    out = capsys.readouterr().out
    assert "CLUSTER_NAME" in out
    assert "DB_HOST" in out


def test_with_error_handling_handles_aws_error():
    @with_error_handling
    def _command() -> None:
        raise AwsServiceError("sts", "GetCallerIdentity", "expired token")

    with pytest.raises(typer.Exit) as excinfo:
        _command()

    assert excinfo.value.exit_code == 1


def test_with_error_handling_handles_kubernetes_error(capsys):
    @with_error_handling
    def _command() -> None:
        raise KubernetesApiError("get", "namespace/flyte", "connection refused")

    with pytest.raises(typer.Exit) as excinfo:
        _command()

    assert excinfo.value.exit_code == 1
    assert "connection refused" in capsys.readouterr().out


def test_with_error_handling_handles_keyboard_interrupt():
    @with_error_handling
    def _command() -> None:
        raise KeyboardInterrupt

    with pytest.raises(typer.Exit) as excinfo:
        _command()

    assert excinfo.value.exit_code == 130
