"""Exception hierarchy and S3 error mapping for reposync."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


class RepoSyncError(Exception):
    """
    Base exception for reposync.

    Attributes:
        details: Optional structured information (e.g., bucket, key, package).
        cause: Optional original exception that triggered this error.
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.details = details or {}
        self.cause = cause


class InvalidStateError(RepoSyncError):
    """Raised when the library is used in an invalid state (e.g., plan from another run)."""


class InvalidArgumentError(RepoSyncError):
    """Raised when arguments are invalid (bad location, HTTP 400, etc.)."""


class FetchError(RepoSyncError):
    """Raised when a repository or one of its objects cannot be fetched."""


class NotFoundError(FetchError):
    """Raised when an S3 object or bucket does not exist (HTTP 404)."""


class AccessDeniedError(RepoSyncError):
    """Raised when access is denied (HTTP 403)."""


class RateLimitError(RepoSyncError):
    """Raised when S3 throttles requests (SlowDown, HTTP 429/503)."""


class NetworkError(RepoSyncError):
    """Raised when network/timeout issues prevent the request."""


class ApiError(RepoSyncError):
    """Raised for unclassified S3 errors (5xx, unknown codes, etc.)."""


class ParseError(RepoSyncError):
    """Raised when a manifest or an index is not a valid JSON object."""


class ConsistencyMismatch(RepoSyncError):
    """Raised when a repository index does not match its manifests."""


class TransferError(RepoSyncError):
    """Raised when copying an artifact or writing/removing a manifest fails."""


class RemovalError(RepoSyncError):
    """Raised when a deferred artifact removal fails."""


@dataclass(frozen=True)
class S3ErrorInfo:
    """Lightweight S3 error information for mapping to reposync exceptions."""

    status_code: int
    code: str | None = None
    message: str | None = None
    details: dict[str, Any] | None = None


_NOT_FOUND_CODES: tuple[str, ...] = ("NoSuchKey", "NoSuchBucket", "NotFound", "404")
_THROTTLE_CODES: tuple[str, ...] = (
    "SlowDown",
    "Throttling",
    "ThrottlingException",
    "RequestLimitExceeded",
    "TooManyRequestsException",
)


def map_s3_error(
    info: S3ErrorInfo,
    *,
    cause: Optional[BaseException] = None,
) -> RepoSyncError:
    """
    Map an S3 error to a reposync exception.

    Policy:
        - NoSuchKey/NoSuchBucket/404 -> NotFoundError
        - throttling codes, 429 -> RateLimitError
        - 403 -> AccessDeniedError
        - 400 -> InvalidArgumentError
        - 503 -> RateLimitError (S3 uses it for SlowDown)
        - 5xx / otherwise -> ApiError
    """
    details: dict[str, Any] = {
        "status_code": info.status_code,
        "code": info.code,
    }
    if info.details:
        details.update(info.details)

    message = info.message or f"S3 error {info.code or info.status_code}"

    if info.code in _NOT_FOUND_CODES or info.status_code == 404:
        return NotFoundError(message, details=details, cause=cause)
    if info.code in _THROTTLE_CODES or info.status_code in (429, 503):
        return RateLimitError(message, details=details, cause=cause)
    if info.status_code == 403:
        return AccessDeniedError(message, details=details, cause=cause)
    if info.status_code == 400:
        return InvalidArgumentError(message, details=details, cause=cause)

    return ApiError(message, details=details, cause=cause)
