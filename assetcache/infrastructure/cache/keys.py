"""Asset key codec. Single place for key validation and disk names.

Keys are opaque storage paths: 'a//b.jpg', '/a.jpg' and 'a/b.jpg' are distinct
objects in every backend, so cache_key() only rejects blank keys and
disk_file_name() is the one transform applied to them. Upload namespaces,
which this package generates, are built and normalized here.
"""

import hashlib

from assetcache.core.constants import (
    ASSET_KEY_SEP,
    DISK_FILENAME_DIGEST_PREFIX,
    DISK_FILENAME_MAX_LEN,
    UPLOAD_PREFIX_REPORTS,
    UPLOAD_PREFIX_USERS,
)
from assetcache.domain.exceptions import InvalidAssetKeyError


def cache_key(path: str) -> str:
    """Return path unchanged as the cache key.

    Raises:
        InvalidAssetKeyError: If path is empty or only whitespace.
    """
    if not path or not path.strip():
        raise InvalidAssetKeyError(path)
    return path


def normalize_namespace(namespace: str) -> str:
    """Trim an upload namespace: ' /users//u1/ ' becomes 'users/u1'.

    Raises:
        InvalidAssetKeyError: If no path segment is left.
    """
    segments = [s.strip() for s in namespace.split(ASSET_KEY_SEP)]
    normalized = ASSET_KEY_SEP.join(s for s in segments if s)
    if not normalized:
        raise InvalidAssetKeyError(namespace)
    return normalized


def disk_file_name(key: str) -> str:
    """Return a filesystem-safe filename for key.

    Every UTF-8 byte that is not an ASCII letter or digit becomes %XX, so
    distinct keys give distinct names. Long results are replaced by
    'sha256-<hex>'; '-' is always escaped by the first form so the two
    cannot collide.
    """
    encoded = "".join(
        chr(b) if chr(b).isascii() and chr(b).isalnum() else f"%{b:02X}"
        for b in key.encode("utf-8")
    )
    if len(encoded) <= DISK_FILENAME_MAX_LEN:
        return encoded
    digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
    return f"{DISK_FILENAME_DIGEST_PREFIX}{digest}"


def _validate_key_component(value: str, name: str) -> None:
    """Raise ValueError if value is empty or contains the path separator.

    Args:
        value: String component used in an upload namespace.
        name: Name of the component (for error message).

    Raises:
        ValueError: If value is blank or contains ASSET_KEY_SEP.
    """
    if not value or not value.strip():
        raise ValueError(f"Upload path component {name!r} must not be empty")
    if ASSET_KEY_SEP in value:
        raise ValueError(
            f"Upload path component {name!r} must not contain separator {ASSET_KEY_SEP!r}"
        )


def _validate_key_components(components: list[tuple[str, str]]) -> None:
    """Validate multiple components; raise on first invalid one."""
    for value, name in components:
        _validate_key_component(value, name)


def upload_namespace(*components: str) -> str:
    """Join validated components into an upload namespace ('a/b/c')."""
    _validate_key_components(
        [(c, f"component[{i}]") for i, c in enumerate(components)]
    )
    return ASSET_KEY_SEP.join(c.strip() for c in components)


def user_upload_namespace(owner_id: str, folder: str) -> str:
    """Namespace for user images: users/{owner_id}/{folder}."""
    _validate_key_components([(owner_id, "owner_id"), (folder, "folder")])
    return upload_namespace(UPLOAD_PREFIX_USERS, owner_id, folder)


def report_upload_namespace(owner_id: str, report_id: str) -> str:
    """Namespace for report media: reports/{owner_id}/{report_id}."""
    _validate_key_components([(owner_id, "owner_id"), (report_id, "report_id")])
    return upload_namespace(UPLOAD_PREFIX_REPORTS, owner_id, report_id)


def asset_path(namespace: str, filename: str) -> str:
    """Join a namespace and a generated filename into the key of a new upload."""
    return f"{normalize_namespace(namespace)}{ASSET_KEY_SEP}{filename}"
