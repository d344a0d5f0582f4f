"""Run settings for a sync, resolved from arguments and environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from reposync.errors import InvalidArgumentError

from .location import GENERIC_REGION, RepoLocation

DEFAULT_MAX_WORKERS: int = 8


@dataclass(slots=True, frozen=True)
class SyncSettings:
    """Everything a single sync run needs to know."""

    source: RepoLocation
    destination: RepoLocation
    remove: bool = True
    assume_yes: bool = False
    max_workers: int = DEFAULT_MAX_WORKERS
    log_level: str = "INFO"
    log_file: Optional[str] = None

    def __post_init__(self) -> None:
        if self.max_workers < 1:
            raise ValueError("SyncSettings.max_workers must be >= 1")

    @property
    def regions_differ(self) -> bool:
        return self.source.region != self.destination.region

    @classmethod
    def from_args(
        cls,
        dest_bucket: str,
        dest_prefix: str,
        dest_region: Optional[str] = None,
        src_bucket: Optional[str] = None,
        src_prefix: Optional[str] = None,
        src_region: Optional[str] = None,
        *,
        environ: Optional[Mapping[str, str]] = None,
        remove: bool = True,
        assume_yes: bool = False,
        max_workers: int = DEFAULT_MAX_WORKERS,
        log_level: str = "INFO",
        log_file: Optional[str] = None,
    ) -> SyncSettings:
        """
        Resolve settings the way the command line defines them.

        Defaults:
            - dest_region: $S3_REGION, else 's3'
            - src_bucket / src_prefix: $S3_BUCKET / $S3_PREFIX (required)
            - src_region: dest_region

        Raises:
            InvalidArgumentError: if a required value is missing or invalid.
        """
        env = os.environ if environ is None else environ

        if dest_region is None:
            dest_region = env.get("S3_REGION") or GENERIC_REGION
        if src_bucket is None:
            src_bucket = env.get("S3_BUCKET")
        if src_prefix is None:
            src_prefix = env.get("S3_PREFIX")
        if src_region is None:
            src_region = dest_region

        if not src_bucket:
            raise InvalidArgumentError(
                "Source bucket not given and $S3_BUCKET is not set",
                details={"env": "S3_BUCKET"},
            )
        if src_prefix is None:
            raise InvalidArgumentError(
                "Source prefix not given and $S3_PREFIX is not set",
                details={"env": "S3_PREFIX"},
            )

        try:
            destination = RepoLocation(dest_bucket, dest_prefix, dest_region)
            source = RepoLocation(src_bucket, src_prefix, src_region)
        except (TypeError, ValueError) as exc:
            raise InvalidArgumentError(str(exc), cause=exc) from exc

        # region is only the endpoint label; bucket+prefix identify a repository
        if (source.bucket, source.prefix) == (destination.bucket, destination.prefix):
            raise InvalidArgumentError(
                f"Source and destination are the same repository: {source.describe()}",
                details={"location": source.describe()},
            )

        try:
            return cls(
                source=source,
                destination=destination,
                remove=remove,
                assume_yes=assume_yes,
                max_workers=max_workers,
                log_level=log_level,
                log_file=log_file,
            )
        except (TypeError, ValueError) as exc:
            raise InvalidArgumentError(str(exc), cause=exc) from exc
