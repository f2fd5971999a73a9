"""Cache tier protocols (DIP). Implementations: MemoryCache, DiskCache."""

from typing import Protocol, TypeVar

T = TypeVar("T")


class MemoryTierProtocol(Protocol[T]):
    """Synchronous in-process tier holding decoded entries."""

    def get(self, key: str) -> T | None:
        """Return the entry or None. Never blocks on I/O."""
        ...

    def set(self, key: str, value: T) -> None:
        """Insert or replace the entry for key."""
        ...


class DiskTierProtocol(Protocol):
    """Best-effort persistent tier holding raw bytes."""

    async def read(self, key: str) -> bytes | None:
        """Return stored bytes or None; never raises."""
        ...

    async def write(self, key: str, data: bytes) -> bool:
        """Store bytes; returns False on failure instead of raising."""
        ...
