"""Core constants: cache layout, size bounds and upload conventions.

Single source of truth for literal values shared by the cache tiers,
storage backends and the asset service.
"""

# Default bound on a single fetched asset (5 MiB)
DEFAULT_MAX_FETCH_BYTES = 5 * 1024 * 1024

# Disk tier directory name under the platform cache area
DISK_CACHE_DIRNAME = "StorageImages"

# Disk filenames longer than this are replaced by a digest
DISK_FILENAME_MAX_LEN = 200
DISK_FILENAME_DIGEST_PREFIX = "sha256-"

# Asset path separator inside the blob namespace
ASSET_KEY_SEP = "/"

# Upload namespaces
UPLOAD_PREFIX_USERS = "users"
UPLOAD_PREFIX_REPORTS = "reports"

# Upload encoding
JPEG_CONTENT_TYPE = "image/jpeg"
JPEG_EXTENSION = ".jpg"
DEFAULT_JPEG_QUALITY = 90
OCTET_STREAM_CONTENT_TYPE = "application/octet-stream"

# Streaming read chunk size for storage backends
STORAGE_CHUNK_SIZE = 64 * 1024  # 64KB
