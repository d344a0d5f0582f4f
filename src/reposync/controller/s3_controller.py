"""S3 object controller (internal use only)."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional, TypeVar

from reposync.config.session import build_s3_client
from reposync.errors import (
    AccessDeniedError,
    ApiError,
    NetworkError,
    RateLimitError,
    RepoSyncError,
    S3ErrorInfo,
    map_s3_error,
)
from reposync.models import StoredObject

from .fields import DELIMITER, PAGE_SIZE

T = TypeVar("T")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _RetryPolicy:
    max_retries: int = 3
    initial_delay_sec: float = 1.0


class S3Controller:
    """
    S3 controller (internal only).

    Every method takes bucket and prefix explicitly; keys are relative to the
    prefix. One controller talks to one region endpoint.

    Notes:
        - The boto3 client object is NOT exposed.
        - Throttling, 5xx and network errors are retried with backoff; all
          errors surface as reposync exceptions.
    """

    def __init__(
        self,
        region_name: Optional[str] = None,
        *,
        profile_name: Optional[str] = None,
    ) -> None:
        self._retry_policy = _RetryPolicy()
        self._client = build_s3_client(region_name, profile_name=profile_name)

    @classmethod
    def from_client(
        cls,
        client: Any,
        *,
        retry_policy: Optional[_RetryPolicy] = None,
    ) -> "S3Controller":
        """Create controller from a pre-built S3 client (useful for tests)."""
        obj = cls.__new__(cls)
        obj._retry_policy = retry_policy or _RetryPolicy()
        obj._client = client
        return obj

    # ----------------------------
    # Public API
    # ----------------------------
    def list_keys(self, bucket: str, prefix: str, suffix: str = "") -> list[str]:
        """
        List object names directly under prefix that end with suffix.

        Returns:
            Names relative to prefix, sorted. Objects in deeper "directories"
            are not included.
        """

        def _list() -> list[str]:
            names: list[str] = []
            paginator = self._client.get_paginator("list_objects_v2")
            pages = paginator.paginate(
                Bucket=bucket,
                Prefix=prefix,
                Delimiter=DELIMITER,
                PaginationConfig={"PageSize": PAGE_SIZE},
            )
            for page in pages:
                for obj in page.get("Contents", []) or []:
                    name = obj["Key"][len(prefix):]
                    if name and name.endswith(suffix):
                        names.append(name)
            return names

        return sorted(self._execute(_list, bucket=bucket, key=prefix))

    def get(self, bucket: str, prefix: str, key: str) -> StoredObject:
        """
        Fetch one object.

        Raises:
            NotFoundError: if the object does not exist.
        """
        full_key = prefix + key

        def _get() -> StoredObject:
            resp = self._client.get_object(Bucket=bucket, Key=full_key)
            body = resp["Body"].read()
            return StoredObject(
                key=key,
                body=body,
                last_modified=resp.get("LastModified"),
                content_type=resp.get("ContentType"),
            )

        return self._execute(_get, bucket=bucket, key=full_key)

    def put(
        self,
        bucket: str,
        prefix: str,
        key: str,
        data: bytes,
        content_type: Optional[str] = None,
    ) -> None:
        full_key = prefix + key
        extra: dict[str, Any] = {}
        if content_type:
            extra["ContentType"] = content_type

        self._execute(
            lambda: self._client.put_object(Bucket=bucket, Key=full_key, Body=data, **extra),
            bucket=bucket,
            key=full_key,
        )

    def remove(self, bucket: str, prefix: str, key: str) -> None:
        full_key = prefix + key
        self._execute(
            lambda: self._client.delete_object(Bucket=bucket, Key=full_key),
            bucket=bucket,
            key=full_key,
        )

    def copy(
        self,
        src_bucket: str,
        src_prefix: str,
        key: str,
        dst_bucket: str,
        dst_prefix: str,
    ) -> None:
        """Server-side copy of key from one bucket/prefix to another (same key)."""
        source = {"Bucket": src_bucket, "Key": src_prefix + key}
        dst_key = dst_prefix + key
        self._execute(
            lambda: self._client.copy_object(CopySource=source, Bucket=dst_bucket, Key=dst_key),
            bucket=dst_bucket,
            key=dst_key,
        )

    # ----------------------------
    # Internals
    # ----------------------------
    def _execute(self, func: Callable[[], T], *, bucket: str, key: str) -> T:
        delay = self._retry_policy.initial_delay_sec
        for attempt in range(self._retry_policy.max_retries + 1):
            try:
                return func()
            except Exception as exc:
                mapped = self._map_exception(exc, bucket=bucket, key=key)
                if self._should_retry(mapped) and attempt < self._retry_policy.max_retries:
                    logger.debug(
                        "Retrying s3://%s/%s after %s (attempt %d)",
                        bucket, key, mapped.__class__.__name__, attempt + 1,
                    )
                    time.sleep(delay)
                    delay *= 2
                    continue
                if mapped is exc:
                    raise
                raise mapped from exc

        raise ApiError("Unexpected retry loop termination")

    def _should_retry(self, exc: Exception) -> bool:
        if isinstance(exc, RateLimitError):
            return True
        if isinstance(exc, NetworkError):
            return True
        if isinstance(exc, ApiError):
            status_code = getattr(exc, "details", {}).get("status_code")
            return isinstance(status_code, int) and 500 <= status_code <= 599
        return False

    def _map_exception(self, exc: Exception, *, bucket: str, key: str) -> Exception:
        if isinstance(exc, RepoSyncError):
            return exc

        location = {"bucket": bucket, "key": key}

        try:
            from botocore.exceptions import (
                BotoCoreError,
                ClientError,
                ConnectionError as BotoConnectionError,
                HTTPClientError,
                NoCredentialsError,
            )
        except Exception:  # pragma: no cover
            BotoCoreError = ClientError = BotoConnectionError = None  # type: ignore[assignment,misc]
            HTTPClientError = NoCredentialsError = None  # type: ignore[assignment,misc]

        if ClientError is not None and isinstance(exc, ClientError):
            info = _client_error_to_info(exc, location)
            return map_s3_error(info, cause=exc)

        if NoCredentialsError is not None and isinstance(exc, NoCredentialsError):
            return AccessDeniedError("No AWS credentials found", details=location, cause=exc)

        if BotoConnectionError is not None and isinstance(exc, (BotoConnectionError, HTTPClientError)):
            return NetworkError("Network error", details=location, cause=exc)

        if isinstance(exc, (OSError, TimeoutError)):
            return NetworkError("Network error", details=location, cause=exc)

        if BotoCoreError is not None and isinstance(exc, BotoCoreError):
            return ApiError(str(exc) or "S3 client error", details=location, cause=exc)

        return ApiError("S3 API error", details=location, cause=exc)


def _client_error_to_info(exc: Any, location: dict[str, Any]) -> S3ErrorInfo:
    response = getattr(exc, "response", None) or {}
    error = response.get("Error", {}) or {}
    meta = response.get("ResponseMetadata", {}) or {}

    status_code = meta.get("HTTPStatusCode")
    if not isinstance(status_code, int):
        status_code = 0

    code = error.get("Code")
    message = error.get("Message")
    return S3ErrorInfo(
        status_code=status_code,
        code=str(code) if code is not None else None,
        message=message if isinstance(message, str) and message else None,
        details=dict(location),
    )
