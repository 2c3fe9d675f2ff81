"""Errors raised by the AWS adapters."""

from __future__ import annotations

from botocore.exceptions import BotoCoreError, ClientError


class AwsServiceError(Exception):
    """An AWS call failed for a reason other than "not found".

    Attributes:
        service: Short service name (secretsmanager, s3, iam, sts)
        operation: API operation that failed
        code: AWS error code when available
    """

    def __init__(self, service: str, operation: str, message: str, code: str = ""):
        self.service = service
        self.operation = operation
        self.code = code
        super().__init__(f"{service}:{operation} failed: {message}")


def error_code(exc: ClientError) -> str:
    """Extract the AWS error code from a ClientError."""
    return str(exc.response.get("Error", {}).get("Code", ""))


def wrap(service: str, operation: str, exc: BotoCoreError | ClientError) -> AwsServiceError:
    """Convert a botocore exception into an AwsServiceError."""
    code = error_code(exc) if isinstance(exc, ClientError) else ""
    return AwsServiceError(service, operation, str(exc), code)
