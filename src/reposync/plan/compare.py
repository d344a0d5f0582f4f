"""Comparison of a source and a destination manifest for the same package."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from reposync.models import ManifestRecord
from reposync.util.time import normalize_dt

Newer = Literal["source", "destination", "equal"]


@dataclass(slots=True, frozen=True)
class Comparison:
    newer: Newer
    content_equal: bool


def compare(src: ManifestRecord, dst: ManifestRecord) -> Comparison:
    """
    Compare two manifests of the same package.

    Content equality ignores dist.url (it differs per bucket) and time.
    """
    src_time = normalize_dt(src.time)
    dst_time = normalize_dt(dst.time)

    newer: Newer
    if src_time > dst_time:
        newer = "source"
    elif src_time < dst_time:
        newer = "destination"
    else:
        newer = "equal"

    return Comparison(newer=newer, content_equal=src.body == dst.body)
