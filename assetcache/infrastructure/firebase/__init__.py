"""Firebase service-account credentials (google-auth, no firebase-admin)."""

from assetcache.infrastructure.firebase.credentials import (
    get_access_token,
    load_storage_credentials,
)

__all__ = ["get_access_token", "load_storage_credentials"]
