"""In-memory cache of resolved secrets."""
import logging
import threading
from typing import Dict, Optional

from .models import CacheEntry, CacheKey

logger = logging.getLogger(__name__)


class SecretCache:
    """
    Mapping of CacheKey -> CacheEntry for the lifetime of the handle.

    Staleness is not tracked here: readers decide whether an entry is still
    fresh. Entries are only ever overwritten, never expired or evicted.
    """

    def __init__(self):
        self._entries: Dict[CacheKey, CacheEntry] = {}
        self._key_locks: Dict[CacheKey, threading.Lock] = {}
        self._lock = threading.Lock()

    def get(self, key: CacheKey) -> Optional[CacheEntry]:
        with self._lock:
            return self._entries.get(key)

    def put(self, key: CacheKey, entry: CacheEntry, force: bool = False) -> bool:
        """
        Store an entry, replacing any previous one for the key.

        An entry older than the cached one is dropped, so fetched_at never
        moves backwards for a key. With force, the entry replaces whatever
        is cached regardless of age.

        Returns:
            True if the entry was stored
        """
        with self._lock:
            current = self._entries.get(key)
            if not force and current is not None and entry.fetched_at < current.fetched_at:
                logger.debug(f"Keeping newer cache entry for {key.id}")
                return False
            self._entries[key] = entry
        logger.debug(f"Cached {key.id} (version={key.version}, region={key.region})")
        return True

    def lock_for(self, key: CacheKey) -> threading.Lock:
        """Per-key lock used to serialize fetches of the same secret."""
        with self._lock:
            lock = self._key_locks.get(key)
            if lock is None:
                lock = self._key_locks[key] = threading.Lock()
            return lock

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._key_locks.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries
