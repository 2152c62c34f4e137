"""
Land Cover Manager: orchestrates point queries across several rasters.

Keeps one LandUseTiff per path and a shared tile cache. All public async
methods wrap the synchronous raster reads via asyncio.to_thread().
"""

import asyncio
import logging
import os
import threading
from dataclasses import dataclass
from pathlib import Path

from ..constants import TILE_CACHE_MAX_BYTES, EnvVar, ErrorMessages, get_land_cover_name
from .land_use_tiff import LandUseTiff
from .srid import CRSRegistry, default_registry
from .tile_cache import MemoryTileCache, TileCache

logger = logging.getLogger(__name__)


@dataclass
class PixelResult:
    """Result of a single-point land cover query."""

    longitude: float
    latitude: float
    value: int | None
    class_name: str | None


def _cache_size_from_env() -> int:
    raw = os.environ.get(EnvVar.TILE_CACHE_MAX_BYTES)
    if not raw:
        return TILE_CACHE_MAX_BYTES
    try:
        return int(raw)
    except ValueError as e:
        raise ValueError(ErrorMessages.INVALID_ENV_INT.format(EnvVar.TILE_CACHE_MAX_BYTES, raw)) from e


class LandCoverManager:
    """Central manager for land cover point queries."""

    def __init__(
        self,
        cache: TileCache | None = None,
        registry: CRSRegistry | None = None,
    ) -> None:
        self.cache = cache if cache is not None else MemoryTileCache(_cache_size_from_env())
        self.registry = registry or default_registry()
        self._rasters: dict[str, LandUseTiff] = {}
        self._lock = threading.Lock()

    def get_raster(self, path: str | Path) -> LandUseTiff:
        """Get the handle for a path, creating it on first use."""
        key = str(path)
        with self._lock:
            raster = self._rasters.get(key)
            if raster is None:
                raster = LandUseTiff(key, registry=self.registry)
                self._rasters[key] = raster
            return raster

    def read_pixel(self, path: str | Path, lon: float, lat: float) -> PixelResult:
        """Synchronous single-point query."""
        value = self.get_raster(path).try_read_pixel(lon, lat, self.cache)
        return PixelResult(
            longitude=lon,
            latitude=lat,
            value=value,
            class_name=get_land_cover_name(value) if value is not None else None,
        )

    async def fetch_pixel(self, path: str | Path, lon: float, lat: float) -> PixelResult:
        """Get the land cover value at a single point."""
        return await asyncio.to_thread(self.read_pixel, path, lon, lat)

    async def fetch_pixels(self, path: str | Path, points: list[list[float]]) -> list[PixelResult]:
        """Get land cover values at multiple points of one raster."""
        return await asyncio.gather(*(self.fetch_pixel(path, lon, lat) for lon, lat in points))

    def close(self) -> None:
        """Close every open raster."""
        with self._lock:
            rasters = list(self._rasters.values())
            self._rasters.clear()
        for raster in rasters:
            raster.close()
        logger.info(f"Closed {len(rasters)} land cover rasters")
