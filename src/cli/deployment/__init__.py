"""Deployment module for Flyte on EKS.

The package is organized into subpackages for modularity:
- shell_commands: Abstractions for helm and kubectl invocations
- helm_deployer: Configuration, credentials, install and teardown
"""

from .helm_deployer import DeploymentError, FlyteDeployer

__all__ = ["FlyteDeployer", "DeploymentError"]
