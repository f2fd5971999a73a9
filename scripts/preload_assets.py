"""Warm the asset cache for a set of storage paths.

Usage:
    uv run python -m scripts.preload_assets PATH [PATH ...]
Fetches every path not already on disk (one request per path) so later
runs resolve them without the network. Uses the configured backend.
"""

import asyncio
import sys

from assetcache.core.container import asset_cache_lifespan
from assetcache.shared.telemetry.logging import setup_logging


async def main() -> None:
    """Preload the paths given on the command line."""
    paths = sys.argv[1:]
    if not paths:
        print("Usage: python -m scripts.preload_assets PATH [PATH ...]", file=sys.stderr)
        sys.exit(2)
    setup_logging()

    async with asset_cache_lifespan() as service:
        await service.preload(paths)
        missing = [p for p in paths if service.peek_memory(p) is None]

    for path in missing:
        print(f"Unavailable: {path}", file=sys.stderr)
    print(f"Done. {len(paths) - len(missing)}/{len(paths)} asset(s) cached")
    if missing:
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
