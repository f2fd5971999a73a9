"""Upload a local file into the blob store and print its asset key.

Usage:
    uv run python -m scripts.upload_asset FILE NAMESPACE
e.g. NAMESPACE=users/<uid>/avatars. The file is encoded with the
configured codec (JPEG for the image codec) and cached locally.
"""

import asyncio
import sys
from pathlib import Path

from assetcache.core.container import asset_cache_lifespan
from assetcache.domain.exceptions import AssetCacheException
from assetcache.shared.telemetry.logging import setup_logging


async def main() -> None:
    """Upload FILE under NAMESPACE."""
    if len(sys.argv) != 3:
        print("Usage: python -m scripts.upload_asset FILE NAMESPACE", file=sys.stderr)
        sys.exit(2)
    file_path, namespace = Path(sys.argv[1]), sys.argv[2]
    if not file_path.is_file():
        print(f"File not found: {file_path}", file=sys.stderr)
        sys.exit(1)
    setup_logging()

    async with asset_cache_lifespan() as service:
        try:
            key = await service.upload(file_path.read_bytes(), namespace)
        except AssetCacheException as e:
            print(f"Upload failed [{e.error_code}]: {e.message}", file=sys.stderr)
            sys.exit(1)
    print(key)


if __name__ == "__main__":
    asyncio.run(main())
