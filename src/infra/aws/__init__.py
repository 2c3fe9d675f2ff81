"""AWS adapters: Secrets Manager, S3 and IAM, built on boto3."""

from .errors import AwsServiceError
from .iam import IdentityAdmin, role_name_from_arn
from .object_storage import ObjectStorage
from .secrets_store import SecretsManagerStore, SecretStore
from .session import caller_identity, make_session

__all__ = [
    "AwsServiceError",
    "IdentityAdmin",
    "ObjectStorage",
    "SecretStore",
    "SecretsManagerStore",
    "caller_identity",
    "make_session",
    "role_name_from_arn",
]
