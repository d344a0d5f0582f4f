"""Aggregate index (packages.json) generation and publishing."""

from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable

from reposync.config.location import RepoLocation
from reposync.controller import S3Controller
from reposync.errors import ParseError, RepoSyncError, TransferError
from reposync.models import ManifestRecord, StoredObject
from reposync.repo.parsing import parse_manifest
from reposync.util.names import INDEX_NAME, JSON_CONTENT_TYPE, MANIFEST_SUFFIX

logger = logging.getLogger(__name__)


def build_index(manifests: Iterable[ManifestRecord]) -> dict[str, Any]:
    """
    Build the index document for a set of manifests.

    Manifests are listed in object key order, so the same set always yields
    the same document.
    """
    ordered = sorted(manifests, key=lambda r: r.key)
    return {"packages": [record.data for record in ordered]}


def render_index(index: dict[str, Any]) -> bytes:
    return json.dumps(index, sort_keys=True).encode("utf-8")


def build_index_from_directory(path: str | os.PathLike[str]) -> dict[str, Any]:
    """
    Build the index from a directory of '*.composer.json' files.

    Raises:
        ParseError: if the directory does not exist or a manifest is invalid.
    """
    directory = Path(path)
    if not directory.is_dir():
        raise ParseError(f"Not a directory: {directory}", details={"path": str(directory)})

    records: list[ManifestRecord] = []
    for file in sorted(directory.glob(f"*{MANIFEST_SUFFIX}")):
        mtime = datetime.fromtimestamp(file.stat().st_mtime, tz=timezone.utc)
        obj = StoredObject(key=file.name, body=file.read_bytes(), last_modified=mtime)
        records.append(parse_manifest(obj, origin="local"))
    return build_index(records)


def publish_index(
    controller: S3Controller,
    location: RepoLocation,
    index: dict[str, Any],
) -> str:
    """
    Upload the index to the repository.

    Returns:
        Public URL of the uploaded index.

    Raises:
        TransferError: if the upload fails.
    """
    try:
        controller.put(
            location.bucket,
            location.prefix,
            INDEX_NAME,
            render_index(index),
            JSON_CONTENT_TYPE,
        )
    except RepoSyncError as exc:
        raise TransferError(
            f"Failed to upload {INDEX_NAME} to {location.describe()}: {exc}",
            details={"key": location.prefix + INDEX_NAME, "bucket": location.bucket},
            cause=exc,
        ) from exc

    url = location.url + INDEX_NAME
    logger.info("Published %s (%d packages): %s", INDEX_NAME, len(index.get("packages", [])), url)
    return url
