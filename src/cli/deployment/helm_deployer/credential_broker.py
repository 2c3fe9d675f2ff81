"""Resolve the database credential from a literal or the secret store."""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger
from pydantic import SecretStr

from src.infra.aws import AwsServiceError, SecretStore

from .config_resolver import DeploymentConfig
from .errors import BrokerError, BrokerErrorKind


@dataclass(frozen=True)
class SecretHandle:
    """A resolved credential and where it came from.

    The value stays wrapped in ``SecretStr`` so it prints as ``**********``.
    """

    value: SecretStr
    provenance: str

    def reveal(self) -> str:
        return self.value.get_secret_value()


class CredentialBroker:
    """Fetches the database password for a single run.

    Nothing is cached: each call to ``resolve_secret`` performs at most one
    secret store lookup.
    """

    def __init__(self, store: SecretStore | None) -> None:
        self._store = store

    def resolve_secret(self, config: DeploymentConfig) -> SecretHandle:
        """Return the credential for ``config``.

        Raises:
            BrokerError: NOT_FOUND if the secret is missing or empty,
                UNAVAILABLE if the store could not be queried
        """
        if config.db_password is not None:
            logger.debug("Using literal database password")
            return SecretHandle(value=config.db_password, provenance="literal")

        name = config.db_password_secret or ""
        if self._store is None:
            raise BrokerError(BrokerErrorKind.UNAVAILABLE, name, "no secret store configured")

        try:
            value = self._store.get(name)
        except AwsServiceError as e:
            raise BrokerError(BrokerErrorKind.UNAVAILABLE, name, str(e)) from e

        if not value:
            raise BrokerError(BrokerErrorKind.NOT_FOUND, name)

        logger.info("Resolved database password from secret store entry {}", name)
        return SecretHandle(value=SecretStr(value), provenance=f"store:{name}")
