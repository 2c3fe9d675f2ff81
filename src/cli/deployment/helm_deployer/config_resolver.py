"""Configuration resolution for the Flyte deployment.

Merges compiled-in defaults, an optional env file and YAML file, the process
environment and CLI overrides into a single immutable ``DeploymentConfig``.
Resolution never mutates ``os.environ`` and never touches the network.
"""

from __future__ import annotations

import os
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import dotenv_values
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError

from src.infra.constants import DEFAULT_CONSTANTS

from .errors import ConfigError

# Field name -> environment variable name
ENV_VARS: dict[str, str] = {
    "cluster_name": "CLUSTER_NAME",
    "region": "AWS_REGION",
    "namespace": "FLYTE_NAMESPACE",
    "db_host": "DB_HOST",
    "db_port": "DB_PORT",
    "db_name": "DB_NAME",
    "db_username": "DB_USERNAME",
    "db_password_secret": "DB_PASSWORD_SECRET",
    "db_password": "DB_PASSWORD",
    "metadata_bucket": "METADATA_BUCKET",
    "userdata_bucket": "USERDATA_BUCKET",
    "backend_role_arn": "FLYTE_BACKEND_ROLE_ARN",
    "user_role_arn": "FLYTE_USER_ROLE_ARN",
    "release_version": "FLYTE_VERSION",
    "backend_cpu_request": "FLYTE_BACKEND_CPU_REQUEST",
    "backend_memory_request": "FLYTE_BACKEND_MEMORY_REQUEST",
    "backend_cpu_limit": "FLYTE_BACKEND_CPU_LIMIT",
    "backend_memory_limit": "FLYTE_BACKEND_MEMORY_LIMIT",
    "aws_profile": "AWS_PROFILE",
    "readiness_timeout_seconds": "FLYTE_READY_TIMEOUT",
}

DEFAULTS: dict[str, str] = {
    "namespace": DEFAULT_CONSTANTS.DEFAULT_NAMESPACE,
    "db_port": "5432",
    "db_name": "flyteadmin",
    "db_username": "postgres",
    "release_version": DEFAULT_CONSTANTS.DEFAULT_RELEASE_VERSION,
    "backend_cpu_request": "500m",
    "backend_memory_request": "1Gi",
    "backend_cpu_limit": "2",
    "backend_memory_limit": "4Gi",
    "readiness_timeout_seconds": str(DEFAULT_CONSTANTS.READINESS_TIMEOUT_SECONDS),
}

INSTALL_REQUIRED: tuple[str, ...] = (
    "cluster_name",
    "region",
    "namespace",
    "db_host",
    "db_port",
    "db_name",
    "db_username",
    "metadata_bucket",
    "userdata_bucket",
    "release_version",
    "backend_cpu_request",
    "backend_memory_request",
    "backend_cpu_limit",
    "backend_memory_limit",
    "readiness_timeout_seconds",
)
TEARDOWN_REQUIRED: tuple[str, ...] = ("region", "namespace")
STATUS_REQUIRED: tuple[str, ...] = ("namespace",)

_ENV_PATTERN = re.compile(r"\$\{([^}:]+)(?::([-?])([^}]*))?\}")


class DeploymentConfig(BaseModel):
    """Immutable, validated deployment configuration.

    Optional-typed fields are only optional for actions that do not need
    them; `resolve` enforces the per-action required set before building
    the model.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    cluster_name: str | None = None
    region: str | None = None
    namespace: str = DEFAULT_CONSTANTS.DEFAULT_NAMESPACE
    db_host: str | None = None
    db_port: int = Field(default=5432, ge=1, le=65535)
    db_name: str = "flyteadmin"
    db_username: str = "postgres"
    db_password_secret: str | None = None
    db_password: SecretStr | None = None
    metadata_bucket: str | None = None
    userdata_bucket: str | None = None
    backend_role_arn: str | None = None
    user_role_arn: str | None = None
    release_version: str = DEFAULT_CONSTANTS.DEFAULT_RELEASE_VERSION
    backend_cpu_request: str = "500m"
    backend_memory_request: str = "1Gi"
    backend_cpu_limit: str = "2"
    backend_memory_limit: str = "4Gi"
    aws_profile: str | None = None
    readiness_timeout_seconds: int = Field(
        default=DEFAULT_CONSTANTS.READINESS_TIMEOUT_SECONDS, gt=0
    )

    @property
    def uses_literal_secret(self) -> bool:
        return self.db_password is not None

    @property
    def buckets(self) -> tuple[str, str] | None:
        """Both bucket names, or None unless both are configured."""
        if self.metadata_bucket and self.userdata_bucket:
            return (self.metadata_bucket, self.userdata_bucket)
        return None


def substitute_env_vars(value: Any, environ: Mapping[str, str]) -> Any:
    """Recursively expand ``${VAR}``, ``${VAR:-default}`` and ``${VAR:?msg}``.

    Args:
        value: A scalar, list or dict loaded from YAML
        environ: Variables available for substitution

    Raises:
        ConfigError: Listing every unset ``${VAR:?msg}`` reference
    """
    missing: list[str] = []
    invalid: list[str] = []
    result = _substitute(value, environ, missing, invalid)
    if missing:
        raise ConfigError(missing=missing, invalid=invalid)
    return result


def _substitute(
    value: Any, environ: Mapping[str, str], missing: list[str], invalid: list[str]
) -> Any:
    if isinstance(value, dict):
        return {k: _substitute(v, environ, missing, invalid) for k, v in value.items()}
    if isinstance(value, list):
        return [_substitute(v, environ, missing, invalid) for v in value]
    if not isinstance(value, str):
        return value

    def _replace(match: re.Match[str]) -> str:
        name, op, arg = match.group(1), match.group(2), match.group(3)
        current = environ.get(name)
        if current:
            return current
        if op == "?":
            if name not in missing:
                missing.append(name)
                if arg:
                    invalid.append(arg)
            return ""
        if op == "-":
            return arg
        return ""

    return _ENV_PATTERN.sub(_replace, value)


def _clean(values: Mapping[str, Any]) -> dict[str, str]:
    """Drop unknown keys and empty values; stringify the rest."""
    cleaned: dict[str, str] = {}
    for key, value in values.items():
        if key not in ENV_VARS or value is None:
            continue
        text = str(value).strip()
        if text:
            cleaned[key] = text
    return cleaned


@dataclass
class ConfigSources:
    """Layers of configuration, lowest precedence first.

    Every layer maps field names (not env var names) to raw string values.
    """

    defaults: dict[str, str] = field(default_factory=lambda: dict(DEFAULTS))
    file_values: dict[str, str] = field(default_factory=dict)
    environ: dict[str, str] = field(default_factory=dict)
    overrides: dict[str, str] = field(default_factory=dict)

    @classmethod
    def load(
        cls,
        *,
        env_file: Path | None = None,
        config_file: Path | None = None,
        environ: Mapping[str, str] | None = None,
        overrides: Mapping[str, Any] | None = None,
    ) -> ConfigSources:
        """Gather every layer from disk, the environment and CLI flags.

        Args:
            env_file: dotenv-style file keyed by environment variable names
            config_file: YAML file with a top-level ``config:`` mapping keyed
                by field names
            environ: Process environment (defaults to ``os.environ``)
            overrides: CLI flag values keyed by field names
        """
        env = dict(os.environ if environ is None else environ)
        file_values: dict[str, str] = {}

        if config_file is not None:
            if not config_file.exists():
                raise ConfigError(missing=[], invalid=[f"config file not found: {config_file}"])
            with open(config_file) as f:
                raw = yaml.safe_load(f) or {}
            section = raw.get("config", {}) if isinstance(raw, dict) else {}
            if not isinstance(section, dict):
                raise ConfigError(
                    missing=[], invalid=[f"{config_file}: 'config' must be a mapping"]
                )
            file_values.update(_clean(substitute_env_vars(section, env)))
            logger.debug("Loaded {} value(s) from {}", len(file_values), config_file)

        if env_file is not None and env_file.exists():
            by_var = {var: name for name, var in ENV_VARS.items()}
            dotenv = {
                by_var[key]: value
                for key, value in dotenv_values(env_file).items()
                if key in by_var
            }
            file_values.update(_clean(dotenv))
            logger.debug("Loaded env file {}", env_file)

        return cls(
            file_values=file_values,
            environ=_clean({name: env.get(var) for name, var in ENV_VARS.items()}),
            overrides=_clean(dict(overrides or {})),
        )

    def merged(self) -> dict[str, str]:
        merged: dict[str, str] = {}
        for layer in (self.defaults, self.file_values, self.environ, self.overrides):
            merged.update(_clean(layer))
        return merged


def resolve(
    sources: ConfigSources,
    required: Iterable[str] = INSTALL_REQUIRED,
    *,
    require_secret: bool = True,
) -> DeploymentConfig:
    """Merge configuration layers and validate the result.

    Every missing required field and every invalid value is collected before
    raising, so a single error lists all problems.

    Args:
        sources: Configuration layers
        required: Field names that must be non-empty for this action
        require_secret: Enforce exactly one of DB_PASSWORD_SECRET / DB_PASSWORD

    Returns:
        The validated DeploymentConfig

    Raises:
        ConfigError: Listing every missing and invalid field
    """
    merged = sources.merged()
    missing = [ENV_VARS[name] for name in required if name not in merged]
    invalid: list[str] = []

    if require_secret:
        has_ref = "db_password_secret" in merged
        has_literal = "db_password" in merged
        if not has_ref and not has_literal:
            missing.append("DB_PASSWORD_SECRET or DB_PASSWORD")
        elif has_ref and has_literal:
            invalid.append("set only one of DB_PASSWORD_SECRET and DB_PASSWORD")

    try:
        config = DeploymentConfig(**merged)
    except ValidationError as exc:
        for err in exc.errors():
            name = str(err["loc"][0]) if err["loc"] else ""
            invalid.append(f"{ENV_VARS.get(name, name)}: {err['msg']}")
        raise ConfigError(missing=missing, invalid=invalid) from exc

    if missing or invalid:
        raise ConfigError(missing=missing, invalid=invalid)

    logger.debug(
        "Resolved configuration for cluster={} namespace={}",
        config.cluster_name,
        config.namespace,
    )
    return config
