"""
Georeferencing models for landcover-tiff.

All models are frozen Pydantic models: once a raster is initialized its
georeference never changes.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PixelCoordinate(BaseModel):
    """Integer pixel position inside a raster."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    x: int = Field(..., description="Column index")
    y: int = Field(..., description="Row index")


class TileKey(BaseModel):
    """Cache address of a tile: file identity plus the tile's top-left pixel."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    file_id: str = Field(..., description="File identity (path)")
    origin_x: int = Field(..., ge=0, description="Column of the tile's top-left pixel")
    origin_y: int = Field(..., ge=0, description="Row of the tile's top-left pixel")


class GeoReference(BaseModel):
    """
    Georeferencing of a tiled, north-up raster.

    pixel_size_y is stored already negated: rows grow downward while the
    native y-axis grows upward. Rasters with any other axis convention are
    not supported and would resolve to wrong pixels.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    width: int = Field(..., gt=0, description="Raster width in pixels")
    height: int = Field(..., gt=0, description="Raster height in pixels")
    tile_size: int = Field(..., gt=0, description="Square tile edge length in pixels")
    origin_x: float = Field(..., allow_inf_nan=False, description="Native CRS x of the top-left corner")
    origin_y: float = Field(..., allow_inf_nan=False, description="Native CRS y of the top-left corner")
    pixel_size_x: float = Field(..., allow_inf_nan=False, description="Native CRS units per column")
    pixel_size_y: float = Field(..., allow_inf_nan=False, description="Native CRS units per row (negative)")
    crs_id: int = Field(..., ge=0, description="Projected CRS identifier (EPSG code)")

    @field_validator("pixel_size_x", "pixel_size_y")
    @classmethod
    def _nonzero_pixel_size(cls, value: float) -> float:
        if value == 0:
            raise ValueError("pixel size must be non-zero")
        return value

    @property
    def resolution(self) -> tuple[int, int]:
        return (self.width, self.height)

    @property
    def origin(self) -> tuple[float, float]:
        return (self.origin_x, self.origin_y)

    @property
    def pixel_size(self) -> tuple[float, float]:
        return (self.pixel_size_x, self.pixel_size_y)

    def contains(self, x: int, y: int) -> bool:
        """True if (x, y) lies inside [0, width) x [0, height)."""
        return 0 <= x < self.width and 0 <= y < self.height

    def tile_origin(self, x: int, y: int) -> tuple[int, int]:
        """Top-left pixel of the tile containing (x, y)."""
        return ((x // self.tile_size) * self.tile_size, (y // self.tile_size) * self.tile_size)

    def tile_offset(self, x: int, y: int) -> int:
        """Row-major byte offset of (x, y) inside its tile buffer."""
        tile_x, tile_y = self.tile_origin(x, y)
        return (y - tile_y) * self.tile_size + (x - tile_x)

    @property
    def tile_bytes(self) -> int:
        return self.tile_size * self.tile_size
