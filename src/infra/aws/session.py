"""boto3 session construction and identity checks."""

from __future__ import annotations

from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .errors import wrap


def make_session(region: str | None, profile: str | None = None) -> boto3.session.Session:
    """Build a boto3 session for the given region and optional named profile.

    Raises:
        AwsServiceError: If the named profile does not exist
    """
    try:
        return boto3.session.Session(region_name=region, profile_name=profile)
    except BotoCoreError as exc:
        raise wrap("session", "CreateSession", exc) from exc


def caller_identity(session: boto3.session.Session) -> dict[str, Any]:
    """Return the STS caller identity for the session's credentials.

    Raises:
        AwsServiceError: If credentials are missing or rejected
    """
    try:
        response = session.client("sts").get_caller_identity()
    except (BotoCoreError, ClientError) as exc:
        raise wrap("sts", "GetCallerIdentity", exc) from exc
    return {
        "account": response.get("Account", ""),
        "arn": response.get("Arn", ""),
        "user_id": response.get("UserId", ""),
    }
