"""Flyte deployer package for EKS.

This package provides a modular approach to installing Flyte via Helm, with
each concern separated into its own module:

- config_resolver: Merge and validate deployment configuration
- credential_broker: Resolve the database password
- steps: Provisioning steps and their halting/continuing run policies
- values: In-memory Helm values for the flyte-binary chart
- helm_release: Helm repository and release management
- orchestrator: Install state machine
- status_reporter: Read-only status snapshots
- teardown: Reverse-order teardown with confirmations
- preflight: Environment checks ahead of an install

The FlyteDeployer class in deployer.py wires these components together for
the CLI.

Usage:
    from src.cli.deployment.helm_deployer import FlyteDeployer

    deployer = FlyteDeployer(console, project_root)
    deployer.deploy(config)
"""

from .config_resolver import (
    INSTALL_REQUIRED,
    STATUS_REQUIRED,
    TEARDOWN_REQUIRED,
    ConfigSources,
    DeploymentConfig,
    resolve,
)
from .credential_broker import CredentialBroker, SecretHandle
from .deployer import FlyteDeployer
from .errors import (
    BrokerError,
    BrokerErrorKind,
    ConfigError,
    ControlPlaneError,
    DeploymentError,
    ReadinessTimeout,
    ReleaseManagerError,
)
from .helm_release import HelmReleaseManager, ReleaseManager, UninstallOutcome
from .orchestrator import InstallOrchestrator, InstallOutcome, InstallState
from .preflight import PreflightChecker, PreflightResult
from .status_reporter import StatusReporter, StatusSnapshot
from .steps import ProvisioningStep, StepResult, StepStatus
from .teardown import TeardownCoordinator, TeardownOptions, TeardownReport

__all__ = [
    "FlyteDeployer",
    # Configuration
    "ConfigSources",
    "DeploymentConfig",
    "resolve",
    "INSTALL_REQUIRED",
    "TEARDOWN_REQUIRED",
    "STATUS_REQUIRED",
    # Errors
    "DeploymentError",
    "ConfigError",
    "BrokerError",
    "BrokerErrorKind",
    "ControlPlaneError",
    "ReleaseManagerError",
    "ReadinessTimeout",
    # Component classes for testing/extension
    "CredentialBroker",
    "SecretHandle",
    "HelmReleaseManager",
    "ReleaseManager",
    "UninstallOutcome",
    "InstallOrchestrator",
    "InstallOutcome",
    "InstallState",
    "PreflightChecker",
    "PreflightResult",
    "StatusReporter",
    "StatusSnapshot",
    "ProvisioningStep",
    "StepResult",
    "StepStatus",
    "TeardownCoordinator",
    "TeardownOptions",
    "TeardownReport",
]
