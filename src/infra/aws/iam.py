"""IAM role teardown operations."""

from __future__ import annotations

from typing import Any

from botocore.exceptions import BotoCoreError, ClientError
from loguru import logger

from .errors import error_code, wrap


def role_name_from_arn(arn: str) -> str:
    """Return the role name from a role ARN.

    The name is the final path segment, so
    ``arn:aws:iam::123456789012:role/flyte/backend`` yields ``backend``.
    """
    return arn.rstrip("/").rsplit("/", 1)[-1]


class IdentityAdmin:
    """Deletes IAM roles referenced by the deployment."""

    def __init__(self, client: Any) -> None:
        self._client = client

    @classmethod
    def from_session(cls, session: Any) -> IdentityAdmin:
        return cls(session.client("iam"))

    def delete_role(self, role_arn: str) -> bool:
        """Delete the role named by an ARN.

        Returns:
            True if the role was deleted, False if it did not exist

        Raises:
            AwsServiceError: On any other failure, including attached policies
                (DeleteConflict)
        """
        name = role_name_from_arn(role_arn)
        try:
            self._client.delete_role(RoleName=name)
        except ClientError as exc:
            if error_code(exc) == "NoSuchEntity":
                return False
            raise wrap("iam", "DeleteRole", exc) from exc
        except BotoCoreError as exc:
            raise wrap("iam", "DeleteRole", exc) from exc
        logger.info("Deleted IAM role {}", name)
        return True
