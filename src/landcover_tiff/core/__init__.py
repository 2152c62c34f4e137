"""Core raster access for landcover-tiff."""

from .container import RasterContainer, TiffContainer, open_container
from .land_use_tiff import LandUseTiff, round_half_away_from_zero, try_read_pixel
from .manager import LandCoverManager, PixelResult
from .metadata import extract_georeference
from .srid import CRSRegistry, default_registry
from .tile_cache import NULL_TILE_CACHE, MemoryTileCache, NullTileCache, TileCache

__all__ = [
    "CRSRegistry",
    "LandCoverManager",
    "LandUseTiff",
    "MemoryTileCache",
    "NULL_TILE_CACHE",
    "NullTileCache",
    "PixelResult",
    "RasterContainer",
    "TileCache",
    "TiffContainer",
    "default_registry",
    "extract_georeference",
    "open_container",
    "round_half_away_from_zero",
    "try_read_pixel",
]
