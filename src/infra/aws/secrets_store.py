"""AWS Secrets Manager adapter.

Values read here are handed straight back to the caller and never logged.
"""

from __future__ import annotations

from typing import Any, Protocol

from botocore.exceptions import BotoCoreError, ClientError
from loguru import logger

from .errors import error_code, wrap

_NOT_FOUND = "ResourceNotFoundException"
_EXISTS = "ResourceExistsException"


class SecretStore(Protocol):
    """Minimal secret store contract used by the credential broker and teardown."""

    def get(self, name: str) -> str | None: ...

    def put(self, name: str, value: str, *, description: str = "") -> bool: ...

    def delete(self, name: str, *, recoverable: bool = False) -> bool: ...


class SecretsManagerStore:
    """SecretStore backed by AWS Secrets Manager."""

    def __init__(self, client: Any) -> None:
        """Initialize the store.

        Args:
            client: A boto3 ``secretsmanager`` client
        """
        self._client = client

    @classmethod
    def from_session(cls, session: Any) -> SecretsManagerStore:
        return cls(session.client("secretsmanager"))

    def get(self, name: str) -> str | None:
        """Fetch a secret's string value.

        Returns:
            The secret value, or None when the secret does not exist

        Raises:
            AwsServiceError: If the store could not be reached or refused access
        """
        try:
            response = self._client.get_secret_value(SecretId=name)
        except ClientError as exc:
            if error_code(exc) == _NOT_FOUND:
                return None
            raise wrap("secretsmanager", "GetSecretValue", exc) from exc
        except BotoCoreError as exc:
            raise wrap("secretsmanager", "GetSecretValue", exc) from exc

        value = response.get("SecretString")
        if value is None and response.get("SecretBinary") is not None:
            value = response["SecretBinary"].decode("utf-8")
        return value

    def put(self, name: str, value: str, *, description: str = "") -> bool:
        """Create the secret, or store a new version if it already exists.

        Returns:
            True if the secret was created, False if an existing one was updated
        """
        try:
            self._client.create_secret(
                Name=name, Description=description, SecretString=value
            )
            logger.info("Created secret {}", name)
            return True
        except ClientError as exc:
            if error_code(exc) != _EXISTS:
                raise wrap("secretsmanager", "CreateSecret", exc) from exc
        except BotoCoreError as exc:
            raise wrap("secretsmanager", "CreateSecret", exc) from exc

        try:
            self._client.put_secret_value(SecretId=name, SecretString=value)
        except (BotoCoreError, ClientError) as exc:
            raise wrap("secretsmanager", "PutSecretValue", exc) from exc
        logger.info("Stored new version of secret {}", name)
        return False

    def delete(self, name: str, *, recoverable: bool = False) -> bool:
        """Delete a secret.

        Args:
            name: Secret name or ARN
            recoverable: Keep the default recovery window instead of deleting
                permanently

        Returns:
            True if a deletion was issued, False if the secret did not exist
        """
        kwargs: dict[str, Any] = {"SecretId": name}
        if not recoverable:
            kwargs["ForceDeleteWithoutRecovery"] = True
        try:
            self._client.delete_secret(**kwargs)
        except ClientError as exc:
            if error_code(exc) == _NOT_FOUND:
                return False
            raise wrap("secretsmanager", "DeleteSecret", exc) from exc
        except BotoCoreError as exc:
            raise wrap("secretsmanager", "DeleteSecret", exc) from exc
        logger.info("Deleted secret {} (recoverable={})", name, recoverable)
        return True
