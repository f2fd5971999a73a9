"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Backend-specific requirements (bucket, root) are
validated at load time.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from assetcache.core.constants import (
    DEFAULT_JPEG_QUALITY,
    DEFAULT_MAX_FETCH_BYTES,
    DISK_CACHE_DIRNAME,
)

_STORAGE_BACKENDS = ("firebase", "s3", "local", "http")
_ASSET_CODECS = ("image", "raw")


class Settings(BaseSettings):
    """Application settings loaded from environment and .env.

    All settings have defaults; validate_backend checks that the selected
    storage backend has what it needs.
    """

    # App
    app_name: str = "assetcache"
    app_version: str = "1.0.0"
    debug: bool = False

    # Cache tiers
    asset_cache_dir: str = str(
        Path("~/.cache/assetcache").expanduser() / DISK_CACHE_DIRNAME
    )
    asset_max_fetch_bytes: int = DEFAULT_MAX_FETCH_BYTES
    # "image" decodes with Pillow and re-encodes uploads as JPEG; "raw" keeps bytes as-is.
    asset_codec: str = "image"
    jpeg_quality: int = DEFAULT_JPEG_QUALITY

    # Storage
    storage_backend: str = "firebase"
    storage_root: str | None = None
    firebase_storage_bucket: str | None = None
    # Use key (env) or path (file); neither means anonymous access.
    firebase_service_account_key: SecretStr | None = None
    firebase_service_account_path: str | None = None
    s3_bucket: str | None = None
    s3_region: str = "us-east-1"
    s3_endpoint_url: str | None = None
    s3_access_key: str | None = None
    s3_secret_key: SecretStr | None = None
    http_base_url: str | None = None
    # Transport timeout for httpx-based backends; the cache adds none of its own.
    http_timeout_seconds: float = 30.0

    # OpenTelemetry
    telemetry_enabled: bool = False
    telemetry_exporter: str = "console"
    telemetry_otlp_endpoint: str | None = None
    telemetry_sample_rate: float = 1.0
    telemetry_environment: str = "development"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_backend(self) -> "Settings":
        """Validate storage backend, codec and numeric bounds."""
        backend = self.storage_backend.lower()
        if backend not in _STORAGE_BACKENDS:
            raise ValueError(
                f"Invalid storage_backend '{self.storage_backend}'. "
                f"Must be one of: {', '.join(repr(b) for b in _STORAGE_BACKENDS)}"
            )
        if backend == "firebase" and not self.firebase_storage_bucket:
            raise ValueError(
                "firebase_storage_bucket is required when storage_backend is 'firebase'. "
                "Set FIREBASE_STORAGE_BUCKET environment variable or update .env file."
            )
        if backend == "s3" and not self.s3_bucket:
            raise ValueError(
                "s3_bucket is required when storage_backend is 's3'. "
                "Set S3_BUCKET environment variable or update .env file."
            )
        if backend == "local" and not self.storage_root:
            raise ValueError(
                "storage_root is required when storage_backend is 'local'. "
                "Set STORAGE_ROOT environment variable or update .env file."
            )
        if self.asset_codec.lower() not in _ASSET_CODECS:
            raise ValueError(
                f"asset_codec must be 'image' or 'raw', got: {self.asset_codec!r}"
            )
        if self.asset_max_fetch_bytes < 1:
            raise ValueError("asset_max_fetch_bytes must be positive")
        if not 1 <= self.jpeg_quality <= 95:
            raise ValueError(
                f"jpeg_quality must be between 1 and 95, got: {self.jpeg_quality}"
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()
