"""boto3 client construction for reposync."""

from __future__ import annotations

from typing import Any, Optional

from reposync.errors import ApiError

CONNECT_TIMEOUT_SEC: int = 10
READ_TIMEOUT_SEC: int = 60


def build_s3_client(
    region_name: Optional[str] = None,
    *,
    profile_name: Optional[str] = None,
) -> Any:
    """
    Build an S3 client.

    Retries are handled by S3Controller, so botocore makes a single attempt
    per call.

    Returns:
        botocore.client.S3

    Raises:
        ApiError: if boto3 is unavailable or the session cannot be created.
    """
    try:
        import boto3
        from botocore.config import Config
    except Exception as exc:  # pragma: no cover
        raise ApiError(
            "boto3 is not available",
            details={"hint": "Install boto3"},
            cause=exc,
        ) from exc

    config = Config(
        connect_timeout=CONNECT_TIMEOUT_SEC,
        read_timeout=READ_TIMEOUT_SEC,
        retries={"max_attempts": 1, "mode": "standard"},
    )
    try:
        session = boto3.Session(profile_name=profile_name, region_name=region_name)
        return session.client("s3", config=config)
    except Exception as exc:
        raise ApiError(
            "Failed to create S3 client",
            details={"region": region_name, "profile": profile_name},
            cause=exc,
        ) from exc
