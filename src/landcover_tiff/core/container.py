"""
Raster container access for tiled GeoTIFFs.

Raw TIFF fields (including the private GeoTIFF tags) are read with tifffile;
tile payloads are decoded with rasterio. All functions are synchronous.
"""

import logging
import threading
from pathlib import Path
from typing import Protocol

import numpy as np
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..constants import RETRY_ATTEMPTS, RETRY_WAIT_MAX, RETRY_WAIT_MIN, ErrorMessages
from ..errors import RasterFormatError, TileReadError

logger = logging.getLogger(__name__)


class RasterContainer(Protocol):
    """What the metadata extractor and pixel reader need from an opened raster."""

    file_id: str
    byteorder: str

    def get_field(self, tag_id: int) -> int | None: ...

    def get_private_field(self, tag_id: int) -> bytes | None: ...

    def read_tile(self, x: int, y: int, tile_size: int) -> bytes: ...

    def close(self) -> None: ...


# ---------------------------------------------------------------------------
# Retry decorator for opening (possibly remote) containers
# ---------------------------------------------------------------------------

_retry_open = retry(
    stop=stop_after_attempt(RETRY_ATTEMPTS),
    wait=wait_exponential(multiplier=1, min=RETRY_WAIT_MIN, max=RETRY_WAIT_MAX),
    retry=retry_if_exception_type((ConnectionError, TimeoutError)),
    reraise=True,
)


class TiffContainer:
    """
    A tiled GeoTIFF opened for tag access and tile decoding.

    Both the tifffile handle and the rasterio dataset share one lock; neither
    is safe for concurrent use from several threads.
    """

    def __init__(self, path: str | Path) -> None:
        import rasterio
        import tifffile

        self.file_id = str(path)
        self._lock = threading.Lock()
        self._tiff = tifffile.TiffFile(self.file_id)
        try:
            self._page = self._tiff.pages[0]
            self._dataset = rasterio.open(self.file_id)
        except Exception:
            self._tiff.close()
            raise
        self.byteorder: str = self._tiff.byteorder

    def get_field(self, tag_id: int) -> int | None:
        """First value of a numeric TIFF field, or None if absent."""
        tag = self._page.tags.get(tag_id)
        if tag is None:
            return None
        value = tag.value
        if isinstance(value, (tuple, list, np.ndarray)):
            if len(value) == 0:
                return None
            value = value[0]
        return int(value)

    def get_private_field(self, tag_id: int) -> bytes | None:
        """Raw, undecoded bytes of a TIFF field in file byte order, or None if absent."""
        tag = self._page.tags.get(tag_id)
        if tag is None:
            return None
        fh = self._tiff.filehandle
        with self._lock:
            fh.seek(tag.valueoffset)
            return bytes(fh.read(tag.valuebytecount))

    def read_tile(self, x: int, y: int, tile_size: int) -> bytes:
        """
        Decode the tile containing pixel (x, y).

        Args:
            x: Pixel column
            y: Pixel row
            tile_size: Tile edge length in pixels

        Returns:
            tile_size * tile_size bytes, row-major, zero-padded past the raster edge
        """
        from rasterio.errors import RasterioError
        from rasterio.windows import Window

        tile_x = (x // tile_size) * tile_size
        tile_y = (y // tile_size) * tile_size

        try:
            with self._lock:
                width = min(tile_size, self._dataset.width - tile_x)
                height = min(tile_size, self._dataset.height - tile_y)
                window = Window(tile_x, tile_y, width, height)
                data = self._dataset.read(1, window=window, out_dtype="uint8")
        except (RasterioError, OSError) as e:
            raise TileReadError(ErrorMessages.TILE_READ_FAILED.format(x, y, self.file_id, e)) from e

        tile = np.zeros((tile_size, tile_size), dtype=np.uint8)
        tile[:height, :width] = data
        return tile.tobytes()

    def close(self) -> None:
        with self._lock:
            self._dataset.close()
            self._tiff.close()
        logger.info(f"Closed raster container {self.file_id}")


@_retry_open
def open_container(path: str | Path) -> TiffContainer:
    """
    Open a tiled GeoTIFF.

    Args:
        path: Path to a local or network-mounted file

    Returns:
        An opened TiffContainer

    Raises:
        RasterFormatError: If the file is not a TIFF
    """
    import tifffile

    try:
        container = TiffContainer(path)
    except tifffile.TiffFileError as e:
        raise RasterFormatError(str(e)) from e

    logger.info(f"Opened raster container {container.file_id} (byte order {container.byteorder!r})")
    return container
