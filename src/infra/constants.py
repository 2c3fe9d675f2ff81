"""Deployment constants and configuration.

This module centralizes all magic strings, paths, and configuration values
used throughout the provisioning and teardown process.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class DeploymentConstants:
    """Constants for the Flyte Kubernetes/Helm deployment.

    This class provides a centralized location for all deployment-related
    constants, making them easy to find, update, and test.

    All attributes are class-level and immutable.
    """

    # Kubernetes/Helm identifiers
    DEFAULT_NAMESPACE: str = "flyte"
    HELM_RELEASE_NAME: str = "flyte-binary"
    HELM_REPO_NAME: str = "flyteorg"
    HELM_REPO_URL: str = "https://flyteorg.github.io/flyte"
    HELM_CHART: str = "flyteorg/flyte-binary"
    DEFAULT_RELEASE_VERSION: str = "v1.10.6"

    # Database credential as materialized in the cluster
    DB_SECRET_NAME: str = "flyte-db-pass"
    DB_SECRET_KEY: str = "postgres-password"
    DB_SECRET_MOUNT_DIR: str = "/etc/flyte/db-pass"
    DB_SSL_OPTIONS: str = "sslmode=require"

    # Secrets Manager entry used when generating a new password
    DEFAULT_STORE_SECRET_NAME: str = "flyte-db-password"
    GENERATED_PASSWORD_LENGTH: int = 16

    # Readiness
    READINESS_LABEL: str = "app.kubernetes.io/name=flyte-binary"
    READINESS_TIMEOUT_SECONDS: int = 300
    READINESS_POLL_SECONDS: float = 5.0

    # Timeouts
    HELM_TIMEOUT: str = "10m"

    # Console access
    HTTP_SERVICE_NAME: str = "flyte-binary-http"
    HTTP_SERVICE_PORT: int = 8088
    LOCAL_CONSOLE_PORT: int = 8080
    CONSOLE_PATH: str = "/console"

    # Status reporting
    RECENT_EVENTS_LIMIT: int = 10

    # Binaries the install path shells out to
    REQUIRED_BINARIES: tuple[str, ...] = ("kubectl", "helm")

    # IRSA annotation on the backend service account
    ROLE_ARN_ANNOTATION: str = "eks.amazonaws.com/role-arn"

    # Relative path fragments for project structure
    CONFIG_DIR: str = "config"
    ENV_FILE_NAME: str = "environment.env"
    CONFIG_FILE_NAME: str = "deploy.yaml"


class DeploymentPaths:
    """Path resolver for deployment-related directories and files.

    This class constructs and provides access to all paths needed during
    deployment, derived from the project root.
    """

    def __init__(self, project_root: Path) -> None:
        """Initialize deployment paths.

        Args:
            project_root: Path to the project root directory
        """
        self._project_root = project_root
        self._constants = DEFAULT_CONSTANTS

        self.config_dir = project_root / self._constants.CONFIG_DIR

    @property
    def project_root(self) -> Path:
        """Get path to project root."""
        return self._project_root

    @property
    def env_file(self) -> Path:
        """Get path to config/environment.env."""
        return self.config_dir / self._constants.ENV_FILE_NAME

    @property
    def config_yaml(self) -> Path:
        """Get path to the optional config/deploy.yaml."""
        return self.config_dir / self._constants.CONFIG_FILE_NAME


DEFAULT_CONSTANTS = DeploymentConstants()
