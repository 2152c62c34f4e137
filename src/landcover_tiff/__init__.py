"""
landcover-tiff: point queries against tiled land-cover GeoTIFFs

Resolves the class byte at a longitude/latitude in multi-gigabyte rasters by
decoding only the tile that contains it, with an optional tile cache.
"""

from .constants import LAND_COVER_NAMES, LandCoverClass
from .core import (
    CRSRegistry,
    LandCoverManager,
    LandUseTiff,
    MemoryTileCache,
    NullTileCache,
    TileCache,
    try_read_pixel,
)
from .errors import (
    CRSNotFoundError,
    LandCoverError,
    RasterFormatError,
    RasterNotReadyError,
    TileReadError,
)
from .models import GeoReference, PixelCoordinate, TileKey

__all__ = [
    "CRSNotFoundError",
    "CRSRegistry",
    "GeoReference",
    "LAND_COVER_NAMES",
    "LandCoverClass",
    "LandCoverError",
    "LandCoverManager",
    "LandUseTiff",
    "MemoryTileCache",
    "NullTileCache",
    "PixelCoordinate",
    "RasterFormatError",
    "RasterNotReadyError",
    "TileCache",
    "TileKey",
    "TileReadError",
    "try_read_pixel",
]
