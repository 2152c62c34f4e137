"""
GeoTIFF georeferencing extraction.

Decodes the private GeoTIFF tags of a tiled raster into a GeoReference.
The tags are read as raw bytes and decoded with fixed record layouts in the
container's byte order.
"""

import logging
import struct
from typing import NamedTuple

from ..constants import (
    GEO_KEY_ID_OFFSET,
    GEO_KEY_RECORD_SIZE,
    GEO_KEY_VALUE_OFFSET,
    PIXEL_SCALE_X_OFFSET,
    PIXEL_SCALE_Y_OFFSET,
    TIEPOINT_X_OFFSET,
    TIEPOINT_Y_OFFSET,
    ErrorMessages,
    GeoKey,
    TiffTag,
)
from ..errors import RasterFormatError
from ..models import GeoReference
from .container import RasterContainer

logger = logging.getLogger(__name__)

_DOUBLE_SIZE = 8
_UINT16_SIZE = 2


def _read_double(raw: bytes, offset: int, byteorder: str) -> float:
    return float(struct.unpack_from(f"{byteorder}d", raw, offset)[0])


def _read_uint16(raw: bytes, offset: int, byteorder: str) -> int:
    return int(struct.unpack_from(f"{byteorder}H", raw, offset)[0])


def _require_length(raw: bytes, needed: int, tag_id: int, file_id: str) -> None:
    if len(raw) < needed:
        raise RasterFormatError(ErrorMessages.MALFORMED_FIELD.format(tag_id, file_id, len(raw), needed))


# ---------------------------------------------------------------------------
# Record layouts
# ---------------------------------------------------------------------------


class PixelScale(NamedTuple):
    """ModelPixelScaleTag: pixel size along x and y in native CRS units."""

    x: float
    y: float

    @classmethod
    def decode(cls, raw: bytes, byteorder: str, file_id: str = "") -> "PixelScale":
        _require_length(raw, PIXEL_SCALE_Y_OFFSET + _DOUBLE_SIZE, TiffTag.MODEL_PIXEL_SCALE, file_id)
        return cls(
            x=_read_double(raw, PIXEL_SCALE_X_OFFSET, byteorder),
            y=_read_double(raw, PIXEL_SCALE_Y_OFFSET, byteorder),
        )


class TiePoint(NamedTuple):
    """Model-space (X, Y) of the first ModelTiepointTag record."""

    x: float
    y: float

    @classmethod
    def decode(cls, raw: bytes, byteorder: str, file_id: str = "") -> "TiePoint":
        _require_length(raw, TIEPOINT_Y_OFFSET + _DOUBLE_SIZE, TiffTag.MODEL_TIEPOINT, file_id)
        return cls(
            x=_read_double(raw, TIEPOINT_X_OFFSET, byteorder),
            y=_read_double(raw, TIEPOINT_Y_OFFSET, byteorder),
        )


class GeoKeyRecord(NamedTuple):
    """One (KeyID, TIFFTagLocation, Count, Value_Offset) entry of the geo key directory."""

    key_id: int
    value: int


def iter_geo_keys(raw: bytes, byteorder: str):
    """
    Yield every 8-byte record of a GeoKeyDirectoryTag.

    The header (version, revision, minor revision, key count) has the same
    width as a key record and is yielded too; its first value never collides
    with a registered key id.
    """
    for start in range(0, len(raw) - GEO_KEY_RECORD_SIZE + 1, GEO_KEY_RECORD_SIZE):
        yield GeoKeyRecord(
            key_id=_read_uint16(raw, start + GEO_KEY_ID_OFFSET, byteorder),
            value=_read_uint16(raw, start + GEO_KEY_VALUE_OFFSET, byteorder),
        )


def find_projected_crs_id(raw: bytes, byteorder: str) -> int | None:
    """CRS id from the last ProjectedCRSGeoKey record, or None."""
    crs_id = None
    for record in iter_geo_keys(raw, byteorder):
        if record.key_id == GeoKey.PROJECTED_CRS:
            crs_id = record.value
    return crs_id


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------


def _required_field(container: RasterContainer, tag_id: int, name: str) -> int:
    value = container.get_field(tag_id)
    if value is None:
        raise RasterFormatError(ErrorMessages.MISSING_FIELD.format(name, tag_id, container.file_id))
    return value


def _required_private_field(container: RasterContainer, tag_id: int, name: str) -> bytes:
    raw = container.get_private_field(tag_id)
    if raw is None:
        raise RasterFormatError(ErrorMessages.MISSING_FIELD.format(name, tag_id, container.file_id))
    return raw


def extract_georeference(container: RasterContainer) -> GeoReference:
    """
    Read resolution, tiling, origin, pixel size and CRS id from a raster container.

    Args:
        container: Opened raster container

    Returns:
        Frozen GeoReference

    Raises:
        RasterFormatError: If a required field is missing or malformed, or the
            geo key directory has no projected CRS key
    """
    file_id = container.file_id
    byteorder = container.byteorder

    width = _required_field(container, TiffTag.IMAGE_WIDTH, "ImageWidth")
    height = _required_field(container, TiffTag.IMAGE_LENGTH, "ImageLength")

    tile_size = container.get_field(TiffTag.TILE_WIDTH)
    if tile_size is None:
        raise RasterFormatError(ErrorMessages.NOT_TILED.format(file_id))
    if tile_size <= 0:
        raise RasterFormatError(ErrorMessages.INVALID_TILE_SIZE.format(file_id, tile_size))

    scale = PixelScale.decode(
        _required_private_field(container, TiffTag.MODEL_PIXEL_SCALE, "ModelPixelScaleTag"),
        byteorder,
        file_id,
    )
    tie_point = TiePoint.decode(
        _required_private_field(container, TiffTag.MODEL_TIEPOINT, "ModelTiepointTag"),
        byteorder,
        file_id,
    )

    geo_keys = _required_private_field(container, TiffTag.GEO_KEY_DIRECTORY, "GeoKeyDirectoryTag")
    crs_id = find_projected_crs_id(geo_keys, byteorder)
    if crs_id is None:
        raise RasterFormatError(ErrorMessages.NO_PROJECTED_CRS.format(file_id))

    try:
        georeference = GeoReference(
            width=width,
            height=height,
            tile_size=tile_size,
            origin_x=tie_point.x,
            origin_y=tie_point.y,
            pixel_size_x=scale.x,
            # rows grow downward, the native y-axis grows upward
            pixel_size_y=-scale.y,
            crs_id=crs_id,
        )
    except ValueError as e:
        raise RasterFormatError(str(e)) from e

    logger.debug(
        f"{file_id}: {width}x{height} px, tile {tile_size}, origin {georeference.origin}, "
        f"pixel size {georeference.pixel_size}, CRS {crs_id}"
    )
    return georeference
