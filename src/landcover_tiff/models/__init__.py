"""Data models for landcover-tiff."""

from .georeference import GeoReference, PixelCoordinate, TileKey

__all__ = [
    "GeoReference",
    "PixelCoordinate",
    "TileKey",
]
