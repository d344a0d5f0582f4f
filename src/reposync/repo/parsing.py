"""Strict parsing of fetched manifests and indexes."""

from __future__ import annotations

import json
import logging
from datetime import timezone
from typing import Any

from reposync.errors import ParseError
from reposync.models import ManifestRecord, StoredObject
from reposync.util.names import package_name_from_key
from reposync.util.time import parse_manifest_time

logger = logging.getLogger(__name__)


def load_json_object(data: bytes, what: str, key: str) -> dict[str, Any]:
    """Decode bytes as a JSON object. Raises ParseError otherwise."""
    try:
        parsed = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as exc:
        raise ParseError(
            f"{what} '{key}' is not valid JSON: {exc}",
            details={"key": key},
            cause=exc,
        ) from exc

    if not isinstance(parsed, dict):
        raise ParseError(
            f"{what} '{key}' must be a JSON object, got {type(parsed).__name__}",
            details={"key": key},
        )
    return parsed


def parse_manifest(obj: StoredObject, *, origin: str = "") -> ManifestRecord:
    """
    Build a ManifestRecord from a fetched manifest object.

    When the 'time' field is missing or malformed, the object's storage
    modification time is used instead and a warning is logged.

    Raises:
        ParseError: if the object is not a JSON object, or it has no usable
            time at all.
    """
    try:
        name = package_name_from_key(obj.key)
    except ValueError as exc:
        raise ParseError(str(exc), details={"key": obj.key}, cause=exc) from exc

    data = load_json_object(obj.body, "Manifest", obj.key)

    substituted = False
    try:
        published = parse_manifest_time(data.get("time"))  # type: ignore[arg-type]
    except ValueError:
        if obj.last_modified is None:
            raise ParseError(
                f"Manifest '{obj.key}' has no valid time entry and no modification time",
                details={"key": obj.key},
            )
        published = obj.last_modified
        if published.tzinfo is None:
            published = published.replace(tzinfo=timezone.utc)
        published = published.astimezone(timezone.utc)
        substituted = True
        logger.warning(
            "%smanifest %s has invalid time entry, using mtime: %s",
            f"{origin} " if origin else "",
            obj.key,
            published.isoformat(),
        )

    return ManifestRecord(
        name=name,
        key=obj.key,
        data=data,
        raw=obj.body,
        time=published,
        time_substituted=substituted,
        last_modified=obj.last_modified,
    )
