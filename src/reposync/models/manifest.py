"""Data model for package manifests."""

from __future__ import annotations

import copy
import json
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional


@dataclass(slots=True, frozen=True)
class ManifestRecord:
    """
    One package version's manifest, as stored in a repository.

    Notes:
        - name is the object name without '.composer.json'; it is the key
          within a ManifestSet.
        - time is the parsed 'time' field, or the object's storage
          modification time when that field is missing or malformed
          (time_substituted is then True).
        - raw keeps the bytes as fetched so a manifest can be copied verbatim.
    """

    name: str
    key: str
    data: dict[str, Any]
    raw: bytes
    time: datetime
    time_substituted: bool = False
    last_modified: Optional[datetime] = None

    @property
    def dist_url(self) -> str:
        dist = self.data.get("dist")
        if isinstance(dist, dict) and isinstance(dist.get("url"), str):
            return dist["url"]
        return ""

    @property
    def body(self) -> dict[str, Any]:
        """Manifest content used for equality: no dist.url, no time."""
        body = copy.deepcopy(self.data)
        dist = body.get("dist")
        if isinstance(dist, dict):
            dist.pop("url", None)
        body.pop("time", None)
        return body

    def with_dist_url(self, url: str) -> dict[str, Any]:
        """Return a copy of the manifest data pointing at url."""
        data = copy.deepcopy(self.data)
        dist = data.get("dist")
        if not isinstance(dist, dict):
            dist = {}
            data["dist"] = dist
        dist["url"] = url
        return data


def dump_manifest(data: dict[str, Any]) -> bytes:
    """Serialise manifest data the way repositories store it (sorted keys)."""
    return json.dumps(data, sort_keys=True).encode("utf-8")
