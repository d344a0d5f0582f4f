from __future__ import annotations

MANIFEST_SUFFIX: str = ".composer.json"
INDEX_NAME: str = "packages.json"
JSON_CONTENT_TYPE: str = "application/json"


def is_manifest_key(key: str) -> bool:
    """Return True for object names like 'php-8.3.0.composer.json'."""
    return key.endswith(MANIFEST_SUFFIX) and len(key) > len(MANIFEST_SUFFIX)


def package_name_from_key(key: str) -> str:
    """Strip the manifest suffix from an object name. Raises ValueError otherwise."""
    if not is_manifest_key(key):
        raise ValueError(f"not a manifest object name: {key!r}")
    return key[: -len(MANIFEST_SUFFIX)]
