"""
Tile caches for decoded raster tiles.

A cache is any object with try_get_tile/set_tile. NullTileCache stands in when
the caller supplies none; MemoryTileCache is a byte-bounded LRU.
"""

import logging
import threading
from collections import OrderedDict
from typing import Protocol

from ..constants import TILE_CACHE_MAX_BYTES, ErrorMessages
from ..models import TileKey

logger = logging.getLogger(__name__)


class TileCache(Protocol):
    def try_get_tile(self, file_id: str, x: int, y: int) -> bytes | None: ...

    def set_tile(self, file_id: str, x: int, y: int, data: bytes) -> None: ...


class NullTileCache:
    """Cache that never stores anything."""

    def try_get_tile(self, file_id: str, x: int, y: int) -> bytes | None:
        return None

    def set_tile(self, file_id: str, x: int, y: int, data: bytes) -> None:
        return None


NULL_TILE_CACHE = NullTileCache()


class MemoryTileCache:
    """Thread-safe in-memory tile cache with LRU eviction under a byte budget."""

    def __init__(self, max_bytes: int = TILE_CACHE_MAX_BYTES) -> None:
        if max_bytes <= 0:
            raise ValueError(ErrorMessages.INVALID_CACHE_SIZE.format(max_bytes))
        self.max_bytes = max_bytes
        self._tiles: OrderedDict[TileKey, bytes] = OrderedDict()
        self._total = 0
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def try_get_tile(self, file_id: str, x: int, y: int) -> bytes | None:
        """Get a cached tile, moving it to the end of the LRU."""
        key = TileKey(file_id=file_id, origin_x=x, origin_y=y)
        with self._lock:
            data = self._tiles.get(key)
            if data is None:
                self.misses += 1
                return None
            self._tiles.move_to_end(key)
            self.hits += 1
            return data

    def set_tile(self, file_id: str, x: int, y: int, data: bytes) -> None:
        """Cache a tile, evicting least recently used tiles to stay within max_bytes."""
        size = len(data)
        if size > self.max_bytes:
            return

        key = TileKey(file_id=file_id, origin_x=x, origin_y=y)
        with self._lock:
            previous = self._tiles.pop(key, None)
            if previous is not None:
                self._total -= len(previous)

            while self._total + size > self.max_bytes and self._tiles:
                evicted_key, evicted = self._tiles.popitem(last=False)
                self._total -= len(evicted)
                logger.debug(f"Evicted tile {evicted_key.file_id}@({evicted_key.origin_x}, {evicted_key.origin_y})")

            self._tiles[key] = bytes(data)
            self._total += size

    def clear(self) -> None:
        with self._lock:
            self._tiles.clear()
            self._total = 0

    @property
    def total_bytes(self) -> int:
        return self._total

    def __len__(self) -> int:
        return len(self._tiles)

    def __contains__(self, key: TileKey) -> bool:
        return key in self._tiles
