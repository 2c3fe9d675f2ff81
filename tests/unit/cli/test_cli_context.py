"""Tests for the CLI dependency container."""

from pathlib import Path
from unittest.mock import Mock, patch

import pytest
import typer

from src.cli.context import CLIContext, build_cli_context, get_cli_context
from src.cli.deployment.helm_deployer import FlyteDeployer
from src.infra.constants import DeploymentConstants, DeploymentPaths
from tests.fakes import FakeController


def _context(**overrides) -> CLIContext:
    fields = {
        "console": Mock(),
        "project_root": Path("/srv/flyte-deploy"),
        "commands": Mock(),
        "k8s_controller": FakeController(),
        "constants": DeploymentConstants(),
        "paths": DeploymentPaths(Path("/srv/flyte-deploy")),
    }
    fields.update(overrides)
    return CLIContext(**fields)


class TestBuildCliContext:
    @pytest.fixture
    def built(self) -> CLIContext:
        with (
            patch("src.cli.context.get_project_root", return_value=Path("/srv/flyte-deploy")),
            patch("src.cli.context.get_k8s_controller_sync") as get_controller,
            patch("src.cli.context.ShellCommands") as shell_commands,
        ):
            get_controller.return_value = FakeController()
            ctx = build_cli_context()
        shell_commands.assert_called_once_with(Path("/srv/flyte-deploy"))
        return ctx

    def test_config_files_live_under_project_config_dir(self, built: CLIContext) -> None:
        assert built.paths.env_file == Path("/srv/flyte-deploy/config/environment.env")
        assert built.paths.config_yaml == Path("/srv/flyte-deploy/config/deploy.yaml")

    def test_uses_flyte_defaults(self, built: CLIContext) -> None:
        assert built.constants.HELM_RELEASE_NAME == "flyte-binary"
        assert built.constants.DEFAULT_NAMESPACE == "flyte"
        assert isinstance(built.k8s_controller, FakeController)

    def test_context_is_frozen(self, built: CLIContext) -> None:
        with pytest.raises(AttributeError):
            built.constants = DeploymentConstants()  # type: ignore[misc]


class TestGetCliContext:
    def test_returns_object_stored_on_typer_context(self) -> None:
        stored = _context()
        typer_ctx = Mock(spec=typer.Context)
        typer_ctx.obj = stored

        assert get_cli_context(typer_ctx) is stored

    def test_uses_active_click_context(self) -> None:
        stored = _context()
        click_ctx = Mock()
        click_ctx.obj = stored

        with patch("click.get_current_context", return_value=click_ctx) as current:
            assert get_cli_context(None) is stored

        current.assert_called_once_with(silent=True)

    @pytest.mark.parametrize("obj", [None, "not-a-context", {"namespace": "flyte"}])
    def test_builds_fresh_context_otherwise(self, obj) -> None:
        typer_ctx = Mock(spec=typer.Context)
        typer_ctx.obj = obj

        with patch("src.cli.context.build_cli_context") as build:
            result = get_cli_context(typer_ctx)

        build.assert_called_once_with()
        assert result is build.return_value


class TestDeployerFactory:
    def test_shares_controller_and_commands(self) -> None:
        ctx = _context()

        deployer = ctx.deployer()

        assert isinstance(deployer, FlyteDeployer)
        assert deployer.controller is ctx.k8s_controller
        assert deployer.commands is ctx.commands
        assert deployer.console is ctx.console.console
        assert deployer.constants is ctx.constants

    def test_teardown_confirmations_go_to_console(self) -> None:
        ctx = _context()

        deployer = ctx.deployer()

        assert deployer._confirm == ctx.console.confirm_step

    def test_status_reports_release_presence(self) -> None:
        ctx = _context()
        ctx.commands.helm.list_releases.return_value = []
        ctx.k8s_controller.namespaces.add("flyte")

        snapshot = ctx.deployer().status_reporter.snapshot("flyte")

        assert snapshot.release_installed is False
        ctx.commands.helm.list_releases.assert_called_once_with("flyte")
