"""
Point queries against a tiled land-cover GeoTIFF.

A LandUseTiff resolves (longitude, latitude) to the class byte of the pixel
covering it. The container is opened, its georeference decoded and the
WGS84 -> raster CRS transform built exactly once, on the first query.
Pixels are read one tile at a time, optionally through a tile cache.
"""

import logging
import math
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ..constants import RESIDENTIAL_VALUE, ErrorMessages, RasterState
from ..errors import RasterNotReadyError, TileReadError
from ..models import GeoReference, PixelCoordinate
from .container import RasterContainer, open_container
from .metadata import extract_georeference
from .srid import CRSRegistry, default_registry
from .tile_cache import NULL_TILE_CACHE, TileCache

logger = logging.getLogger(__name__)


def round_half_away_from_zero(value: float) -> int:
    """Nearest integer; .5 ties round away from zero (2.5 -> 3, -2.5 -> -3)."""
    if value >= 0:
        return int(math.floor(value + 0.5))
    return -int(math.floor(-value + 0.5))


@dataclass(frozen=True)
class _Ready:
    """Everything an initialized raster needs, published in a single assignment."""

    container: RasterContainer
    georeference: GeoReference
    transformer: Any


class LandUseTiff:
    """A tiled, geocoded land-cover raster answering point queries."""

    def __init__(
        self,
        path: str | Path,
        registry: CRSRegistry | None = None,
        opener: Callable[[str], RasterContainer] = open_container,
    ) -> None:
        self.file_id = str(path)
        self._registry = registry
        self._opener = opener

        self._lock = threading.Lock()
        self._ready: _Ready | None = None
        self._error: Exception | None = None
        self._attempts = 0

    # ------------------------------------------------------------------
    # Initialization
    # ------------------------------------------------------------------

    @property
    def state(self) -> str:
        if self._ready is not None:
            return RasterState.READY
        if self._error is not None:
            return RasterState.FAILED
        return RasterState.UNOPENED

    @property
    def georeference(self) -> GeoReference | None:
        ready = self._ready
        return ready.georeference if ready is not None else None

    def read_tiff(self) -> GeoReference:
        """
        Open the raster and decode its georeference if not done already.

        Safe to call from several threads: the work runs at most once per
        successful initialization. Callers that waited on a failing attempt
        receive that attempt's exception; a later call starts a fresh attempt.

        Returns:
            The raster's GeoReference

        Raises:
            RasterFormatError: Missing or malformed GeoTIFF fields
            CRSNotFoundError: CRS id not in the SRID table
        """
        return self._initialize().georeference

    def _initialize(self) -> _Ready:
        ready = self._ready
        if ready is not None:
            return ready

        attempt = self._attempts
        with self._lock:
            if self._ready is not None:
                return self._ready
            if self._attempts != attempt and self._error is not None:
                raise self._error

            try:
                ready = self._load()
            except Exception as e:
                self._error = e
                self._attempts += 1
                logger.error(f"Failed to initialize raster {self.file_id}: {e}")
                raise

            self._error = None
            self._ready = ready
            self._attempts += 1
            return ready

    def _load(self) -> _Ready:
        container = self._opener(self.file_id)
        try:
            georeference = extract_georeference(container)
            registry = self._registry or default_registry()
            transformer = registry.transformer_to(georeference.crs_id)
        except Exception:
            container.close()
            raise

        logger.info(
            f"Initialized raster {self.file_id} ({georeference.width}x{georeference.height}, "
            f"CRS {georeference.crs_id})"
        )
        return _Ready(container=container, georeference=georeference, transformer=transformer)

    # ------------------------------------------------------------------
    # Coordinate resolution
    # ------------------------------------------------------------------

    def to_pixel(self, longitude: float, latitude: float) -> PixelCoordinate | None:
        """
        Map a WGS84 coordinate to the pixel covering it.

        Returns:
            The pixel, or None if the coordinate falls outside the raster
        """
        return self._to_pixel(self._initialize(), longitude, latitude)

    def _to_pixel(self, ready: _Ready, longitude: float, latitude: float) -> PixelCoordinate | None:
        geo = ready.georeference
        x, y = ready.transformer.transform(longitude, latitude)
        if not (math.isfinite(x) and math.isfinite(y)):
            return None

        pixel_x = round_half_away_from_zero((x - geo.origin_x) / geo.pixel_size_x)
        pixel_y = round_half_away_from_zero((y - geo.origin_y) / geo.pixel_size_y)

        if not geo.contains(pixel_x, pixel_y):
            return None
        return PixelCoordinate(x=pixel_x, y=pixel_y)

    # ------------------------------------------------------------------
    # Pixel reading
    # ------------------------------------------------------------------

    def read_pixel(self, x: int, y: int, cache: TileCache | None = None) -> int:
        """
        Read the byte at pixel (x, y) through its tile.

        Args:
            x: Pixel column, inside the raster
            y: Pixel row, inside the raster
            cache: Optional tile cache consulted before decoding

        Returns:
            Pixel value (0-255)

        Raises:
            RasterNotReadyError: If read_tiff() has not succeeded yet
            TileReadError: If the tile cannot be decoded
        """
        ready = self._ready
        if ready is None:
            raise RasterNotReadyError(ErrorMessages.NOT_READY.format(self.file_id))
        return self._read_pixel(ready, x, y, cache)

    def _read_pixel(self, ready: _Ready, x: int, y: int, cache: TileCache | None) -> int:
        geo = ready.georeference
        if not geo.contains(x, y):
            raise ValueError(
                ErrorMessages.PIXEL_OUT_OF_BOUNDS.format(x, y, self.file_id, geo.width, geo.height)
            )

        cache = cache if cache is not None else NULL_TILE_CACHE
        tile_x, tile_y = geo.tile_origin(x, y)

        buffer = cache.try_get_tile(self.file_id, tile_x, tile_y)
        if buffer is None:
            buffer = ready.container.read_tile(x, y, geo.tile_size)
            if len(buffer) != geo.tile_bytes:
                raise TileReadError(
                    ErrorMessages.TILE_SIZE_MISMATCH.format(self.file_id, len(buffer), geo.tile_bytes)
                )
            cache.set_tile(self.file_id, tile_x, tile_y, buffer)
        else:
            logger.debug(f"Tile cache hit {self.file_id}@({tile_x}, {tile_y})")

        return buffer[geo.tile_offset(x, y)]

    def try_read_pixel(
        self,
        longitude: float,
        latitude: float,
        cache: TileCache | None = None,
    ) -> int | None:
        """Pixel value covering (longitude, latitude), or None if the raster does not cover it."""
        ready = self._initialize()
        pixel = self._to_pixel(ready, longitude, latitude)
        if pixel is None:
            return None
        return self._read_pixel(ready, pixel.x, pixel.y, cache)

    def try_read_pixels(
        self,
        points: Iterable[tuple[float, float]],
        cache: TileCache | None = None,
    ) -> list[int | None]:
        """Pixel values for several (longitude, latitude) points."""
        return [self.try_read_pixel(lon, lat, cache) for lon, lat in points]

    def is_residential(
        self,
        longitude: float,
        latitude: float,
        cache: TileCache | None = None,
    ) -> bool:
        """True if the coordinate is covered and classified as built area."""
        return self.try_read_pixel(longitude, latitude, cache) == RESIDENTIAL_VALUE

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Release the container. The next query opens it again."""
        with self._lock:
            ready = self._ready
            self._ready = None
            if ready is not None:
                ready.container.close()

    def __enter__(self) -> "LandUseTiff":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"LandUseTiff({self.file_id!r}, state={self.state!r})"


def try_read_pixel(
    handle: LandUseTiff,
    longitude: float,
    latitude: float,
    cache: TileCache | None = None,
) -> int | None:
    """Pixel value of handle covering (longitude, latitude), or None if outside the raster."""
    return handle.try_read_pixel(longitude, latitude, cache)
