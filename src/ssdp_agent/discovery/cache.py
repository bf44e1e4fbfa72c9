"""
Thread-safe cache of discovered devices, keyed by unique service name (USN).
"""
import threading
from collections.abc import Callable, Iterator

import structlog

from ..models.entry import CacheEntry

logger = structlog.get_logger(__name__)


class DeviceCache:
    """
    Mapping of USN -> most recently received CacheEntry.

    Every access goes through one exclusive lock. Entries are immutable, so a
    reader either sees the old entry or the new one, never a mix. Nothing is
    ever expired; a later response for the same USN simply replaces the earlier
    one.
    """

    def __init__(self):
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def insert(self, key: str, entry: CacheEntry) -> None:
        with self._lock:
            replaced = key in self._entries
            self._entries[key] = entry
        logger.debug("Cache entry stored", usn=key, replaced=replaced)

    def get(self, key: str) -> CacheEntry | None:
        with self._lock:
            return self._entries.get(key)

    def snapshot(self) -> dict[str, CacheEntry]:
        """Consistent point-in-time copy of all entries."""
        with self._lock:
            return dict(self._entries)

    def values(self) -> list[CacheEntry]:
        with self._lock:
            return list(self._entries.values())

    def find(self, predicate: Callable[[CacheEntry], bool]) -> list[CacheEntry]:
        """Entries matching `predicate`. The predicate runs outside the lock."""
        return [entry for entry in self.values() if predicate(entry)]

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self.snapshot())
