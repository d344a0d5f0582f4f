"""Repository location (bucket + prefix + S3 endpoint region)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

STORAGE_DOMAIN: str = "amazonaws.com"
GENERIC_REGION: str = "s3"


@dataclass(slots=True, frozen=True)
class RepoLocation:
    """
    A repository: a bucket+prefix pair in S3.

    region is the endpoint label used in virtual-host URLs, e.g. 's3' or
    's3.us-west-1', so that 'https://{bucket}.{region}.amazonaws.com/' is the
    bucket's base URL.
    """

    bucket: str
    prefix: str = ""
    region: str = GENERIC_REGION

    def __post_init__(self) -> None:
        if not isinstance(self.bucket, str) or not self.bucket.strip():
            raise ValueError("RepoLocation.bucket must be a non-empty string")
        if "/" in self.bucket:
            raise ValueError(f"RepoLocation.bucket must not contain '/': {self.bucket!r}")

        if not isinstance(self.prefix, str):
            raise TypeError("RepoLocation.prefix must be a string")
        if self.prefix.startswith("/"):
            raise ValueError(f"RepoLocation.prefix must not start with '/': {self.prefix!r}")
        if self.prefix and not self.prefix.endswith("/"):
            raise ValueError(f"RepoLocation.prefix must be empty or end with '/': {self.prefix!r}")

        if not isinstance(self.region, str) or not self.region.strip():
            raise ValueError("RepoLocation.region must be a non-empty string")

    @property
    def host(self) -> str:
        return f"{self.bucket}.{self.region}.{STORAGE_DOMAIN}"

    @property
    def url(self) -> str:
        """Public base URL of the repository (ends where object keys start)."""
        return f"https://{self.host}/{self.prefix}"

    @property
    def aws_region(self) -> Optional[str]:
        """
        AWS region name for boto3, derived from the endpoint label.

        's3' -> None (client default), 's3.us-west-1' / 's3-us-west-1' -> 'us-west-1'.
        """
        if self.region == GENERIC_REGION:
            return None
        for sep in (".", "-"):
            head = GENERIC_REGION + sep
            if self.region.startswith(head):
                return self.region[len(head):] or None
        return self.region

    def describe(self) -> str:
        return f"s3://{self.bucket}/{self.prefix}"
