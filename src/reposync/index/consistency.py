"""Self-check: does a repository's index match its manifests?"""

from __future__ import annotations

from typing import Any

from reposync.errors import ConsistencyMismatch, ParseError
from reposync.models import StoredObject
from reposync.repo.manifest_set import ManifestSet
from reposync.repo.parsing import load_json_object
from reposync.util.names import INDEX_NAME

from .builder import build_index


def check_index_consistency(index_obj: StoredObject, manifests: ManifestSet) -> None:
    """
    Compare a fetched index with the index its manifests would produce.

    The comparison is on parsed JSON, so formatting differences do not count.

    Raises:
        ParseError: if the index is not a JSON object with a 'packages' list.
        ConsistencyMismatch: if the documents differ.
    """
    published = load_json_object(index_obj.body, "Index", index_obj.key or INDEX_NAME)
    if not isinstance(published.get("packages"), list):
        raise ParseError(
            f"Index '{index_obj.key}' has no 'packages' list",
            details={"key": index_obj.key},
        )

    expected = build_index(manifests)
    if published == expected:
        return

    raise ConsistencyMismatch(
        f"{INDEX_NAME} in {manifests.location.describe()} does not match its list of manifests",
        details={
            "location": manifests.location.describe(),
            "index_packages": len(published["packages"]),
            "manifests": len(manifests),
            **_package_name_diff(published["packages"], expected["packages"]),
        },
    )


def _package_name_diff(published: list[Any], expected: list[Any]) -> dict[str, list[str]]:
    def _names(entries: list[Any]) -> set[str]:
        names: set[str] = set()
        for entry in entries:
            if isinstance(entry, dict) and isinstance(entry.get("name"), str):
                version = entry.get("version")
                names.add(f"{entry['name']} {version}" if isinstance(version, str) else entry["name"])
        return names

    pub = _names(published)
    exp = _names(expected)
    return {
        "missing_from_index": sorted(exp - pub),
        "unknown_in_index": sorted(pub - exp),
    }
