"""Shared test fixtures for landcover-tiff."""

import struct
from unittest.mock import MagicMock

import numpy as np
import pytest

from landcover_tiff.constants import GeoKey, TiffTag


def pack_pixel_scale(x: float, y: float, byteorder: str = "<") -> bytes:
    return struct.pack(f"{byteorder}3d", x, y, 0.0)


def pack_tiepoint(x: float, y: float, byteorder: str = "<") -> bytes:
    return struct.pack(f"{byteorder}6d", 0.0, 0.0, 0.0, x, y, 0.0)


def geo_key_values(crs_id: int) -> list[int]:
    """Header plus GTModelType, GTRasterType and ProjectedCRS records."""
    return [1, 1, 0, 3, 1024, 0, 1, 1, 1025, 0, 1, 1, GeoKey.PROJECTED_CRS, 0, 1, crs_id]


def pack_geo_keys(values: list[int], byteorder: str = "<") -> bytes:
    return struct.pack(f"{byteorder}{len(values)}H", *values)


def sample_pixels(width: int = 512, height: int = 512) -> np.ndarray:
    """uint8 raster whose values differ between neighbouring pixels and tiles."""
    ys, xs = np.mgrid[0:height, 0:width]
    return ((xs + 3 * ys) % 251).astype(np.uint8)


class FakeContainer:
    """In-memory raster container recording every tile decode."""

    def __init__(
        self,
        pixels: np.ndarray,
        tile_size: int = 256,
        origin: tuple[float, float] = (10.0, 50.0),
        pixel_size: tuple[float, float] = (0.01, 0.01),
        crs_id: int = 4326,
        byteorder: str = "<",
        file_id: str = "landcover.tif",
    ) -> None:
        self.file_id = file_id
        self.byteorder = byteorder
        self.pixels = pixels
        height, width = pixels.shape
        self.fields = {
            TiffTag.IMAGE_WIDTH: width,
            TiffTag.IMAGE_LENGTH: height,
            TiffTag.TILE_WIDTH: tile_size,
        }
        self.private = {
            TiffTag.MODEL_PIXEL_SCALE: pack_pixel_scale(*pixel_size, byteorder=byteorder),
            TiffTag.MODEL_TIEPOINT: pack_tiepoint(*origin, byteorder=byteorder),
            TiffTag.GEO_KEY_DIRECTORY: pack_geo_keys(geo_key_values(crs_id), byteorder=byteorder),
        }
        self.tile_reads: list[tuple[int, int]] = []
        self.closed = False

    def get_field(self, tag_id):
        return self.fields.get(tag_id)

    def get_private_field(self, tag_id):
        return self.private.get(tag_id)

    def read_tile(self, x, y, tile_size):
        self.tile_reads.append((x, y))
        tile_x = (x // tile_size) * tile_size
        tile_y = (y // tile_size) * tile_size
        part = self.pixels[tile_y : tile_y + tile_size, tile_x : tile_x + tile_size]
        tile = np.zeros((tile_size, tile_size), dtype=np.uint8)
        tile[: part.shape[0], : part.shape[1]] = part
        return tile.tobytes()

    def close(self):
        self.closed = True


class IdentityTransformer:
    """Stands in for a pyproj Transformer between identical CRSs."""

    def transform(self, x, y):
        return x, y


@pytest.fixture
def pixels():
    """512x512 uint8 land cover raster."""
    return sample_pixels()


@pytest.fixture
def fake_container(pixels):
    """Container for a 512x512 raster, 256px tiles, origin (10, 50), 0.01 deg pixels."""
    return FakeContainer(pixels)


@pytest.fixture
def identity_registry():
    """CRS registry whose transforms return their input unchanged."""
    from landcover_tiff.core.srid import CRSRegistry

    registry = MagicMock(spec=CRSRegistry)
    registry.transformer_to.return_value = IdentityTransformer()
    return registry


@pytest.fixture
def raster(fake_container, identity_registry):
    """LandUseTiff backed by the fake container and an identity transform."""
    from landcover_tiff.core.land_use_tiff import LandUseTiff

    opener = MagicMock(return_value=fake_container)
    return LandUseTiff("landcover.tif", registry=identity_registry, opener=opener)


UTM_ORIGIN = (399960.0, 5800020.0)
UTM_PIXEL_SIZE = 10.0


def write_geotiff(path, pixels, crs_id=32632, origin=UTM_ORIGIN, pixel_size=UTM_PIXEL_SIZE, tile=256):
    """Write a tiled GeoTIFF with tifffile, georeferenced through the private GeoTIFF tags."""
    import tifffile

    keys = geo_key_values(crs_id)
    tifffile.imwrite(
        path,
        pixels,
        tile=(tile, tile),
        photometric="minisblack",
        metadata=None,
        extratags=[
            (TiffTag.MODEL_PIXEL_SCALE, "d", 3, (pixel_size, pixel_size, 0.0), True),
            (TiffTag.MODEL_TIEPOINT, "d", 6, (0.0, 0.0, 0.0, origin[0], origin[1], 0.0), True),
            (TiffTag.GEO_KEY_DIRECTORY, "H", len(keys), tuple(keys), True),
        ],
    )
    return path


@pytest.fixture
def geotiff_path(tmp_path, pixels):
    """512x512 tiled GeoTIFF in UTM zone 32N with 10m pixels."""
    return write_geotiff(tmp_path / "landcover.tif", pixels)
