"""Service account loading for Firebase Storage.

Uses either FIREBASE_SERVICE_ACCOUNT_KEY (JSON string) or
FIREBASE_SERVICE_ACCOUNT_PATH (file path). google-auth issues the OAuth
tokens; firebase-admin is not needed for plain object reads and writes.
"""

import json
import logging
from pathlib import Path

from assetcache.core.config import Settings, get_settings

logger = logging.getLogger(__name__)

_STORAGE_SCOPE = "https://www.googleapis.com/auth/devstorage.read_write"


def _load_key_dict(settings: Settings) -> dict | None:
    """Return service account dict from env key or file path."""
    key_json = (
        settings.firebase_service_account_key.get_secret_value()
        if settings.firebase_service_account_key
        else None
    )
    if key_json:
        try:
            return json.loads(key_json)
        except json.JSONDecodeError as e:
            raise ValueError("FIREBASE_SERVICE_ACCOUNT_KEY is not valid JSON") from e
    path = settings.firebase_service_account_path
    if path:
        resolved = Path(path).expanduser().resolve()
        if not resolved.is_file():
            logger.warning(
                "FIREBASE_SERVICE_ACCOUNT_PATH set but file not found: %s (resolved: %s)",
                path,
                resolved,
            )
            return None
        with open(resolved, encoding="utf-8") as f:
            return json.load(f)
    return None


def load_storage_credentials(settings: Settings | None = None):
    """Return google service account Credentials scoped for Storage, or None.

    None means no service account is configured; the Storage backend then
    sends anonymous requests, which works for buckets whose rules allow it.
    """
    key_dict = _load_key_dict(settings or get_settings())
    if not key_dict:
        return None
    from google.oauth2 import service_account

    return service_account.Credentials.from_service_account_info(
        key_dict, scopes=[_STORAGE_SCOPE]
    )


def get_access_token(credentials) -> str:
    """Return a valid bearer token, refreshing if needed (blocking)."""
    from google.auth.transport.requests import Request

    if not credentials.valid:
        credentials.refresh(Request())
    return credentials.token
