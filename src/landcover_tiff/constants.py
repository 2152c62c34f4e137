"""
Constants for landcover-tiff.

All magic numbers, TIFF tag ids, record layouts and configuration values live here.
"""


class PackageConfig:
    NAME = "landcover-tiff"
    VERSION = "0.1.0"
    DESCRIPTION = "Point queries against tiled, geocoded land-cover GeoTIFF rasters"


class EnvVar:
    SRID_TABLE = "LANDCOVER_SRID_TABLE"
    TILE_CACHE_MAX_BYTES = "LANDCOVER_TILE_CACHE_MAX_BYTES"


# ---------------------------------------------------------------------------
# TIFF / GeoTIFF tags
# ---------------------------------------------------------------------------


class TiffTag:
    IMAGE_WIDTH = 256
    IMAGE_LENGTH = 257
    TILE_WIDTH = 322
    TILE_LENGTH = 323
    MODEL_PIXEL_SCALE = 33550
    MODEL_TIEPOINT = 33922
    GEO_KEY_DIRECTORY = 34735


class GeoKey:
    # https://docs.ogc.org/is/19-008r4/19-008r4.html#_requirements_class_projectedcrsgeokey
    PROJECTED_CRS = 3072


# ModelPixelScaleTag: (ScaleX, ScaleY, ScaleZ) as doubles
PIXEL_SCALE_X_OFFSET = 0
PIXEL_SCALE_Y_OFFSET = 8

# ModelTiepointTag: (I, J, K, X, Y, Z) as doubles
TIEPOINT_RECORD_SIZE = 48
TIEPOINT_X_OFFSET = 24
TIEPOINT_Y_OFFSET = 32

# GeoKeyDirectoryTag: records of (KeyID, TIFFTagLocation, Count, Value_Offset) as uint16
GEO_KEY_RECORD_SIZE = 8
GEO_KEY_ID_OFFSET = 0
GEO_KEY_VALUE_OFFSET = 6

BIG_ENDIAN = ">"
LITTLE_ENDIAN = "<"


# ---------------------------------------------------------------------------
# Coordinate reference systems
# ---------------------------------------------------------------------------

SRID_TABLE_RESOURCE = "srid.csv"
SRID_SEPARATOR = ";"

WGS84_WKT = (
    'GEOGCS["GCS_WGS_1984",'
    'DATUM["D_WGS_1984",SPHEROID["WGS_1984",6378137,298.257223563]],'
    'PRIMEM["Greenwich",0],'
    'UNIT["Degree",0.0174532925199433]]'
)


# ---------------------------------------------------------------------------
# Land cover classes (10m annual land use / land cover)
# ---------------------------------------------------------------------------


class LandCoverClass:
    NO_DATA = 0
    WATER = 1
    TREES = 2
    FLOODED_VEGETATION = 4
    CROPS = 5
    BUILT_AREA = 7
    BARE_GROUND = 8
    SNOW_ICE = 9
    CLOUDS = 10
    RANGELAND = 11


LAND_COVER_NAMES: dict[int, str] = {
    LandCoverClass.NO_DATA: "No Data",
    LandCoverClass.WATER: "Water",
    LandCoverClass.TREES: "Trees",
    LandCoverClass.FLOODED_VEGETATION: "Flooded Vegetation",
    LandCoverClass.CROPS: "Crops",
    LandCoverClass.BUILT_AREA: "Built Area",
    LandCoverClass.BARE_GROUND: "Bare Ground",
    LandCoverClass.SNOW_ICE: "Snow/Ice",
    LandCoverClass.CLOUDS: "Clouds",
    LandCoverClass.RANGELAND: "Rangeland",
}

RESIDENTIAL_VALUE = LandCoverClass.BUILT_AREA


def get_land_cover_name(value: int) -> str | None:
    """Return the class name for a land cover byte, or None if unknown."""
    return LAND_COVER_NAMES.get(value)


# Cache & retry
TILE_CACHE_MAX_BYTES = 256 * 1024 * 1024  # 256 MB total
RETRY_ATTEMPTS = 3
RETRY_WAIT_MIN = 1
RETRY_WAIT_MAX = 10


class RasterState:
    UNOPENED = "unopened"
    READY = "ready"
    FAILED = "failed"


class ErrorMessages:
    MISSING_FIELD = "Required TIFF field {} ({}) missing in '{}'"
    MALFORMED_FIELD = "TIFF field {} in '{}' is too short: {} bytes, need at least {}"
    NOT_TILED = "Raster '{}' is not tiled"
    INVALID_TILE_SIZE = "Raster '{}' has invalid tile size {}"
    NO_PROJECTED_CRS = "Could not read projected CRS from geo key directory of '{}'"
    CRS_NOT_FOUND = "SRID with id {} not found"
    SRID_TABLE_UNREADABLE = "Cannot read SRID table '{}'"
    INVALID_SRID_LINE = "Invalid SRID table line {}: '{}'"
    TILE_READ_FAILED = "Failed to read tile at pixel ({}, {}) from '{}': {}"
    TILE_SIZE_MISMATCH = "Tile buffer from '{}' has {} bytes, expected {}"
    NOT_READY = "Raster '{}' has not been initialized"
    INVALID_CACHE_SIZE = "max_bytes must be > 0, got {}"
    INVALID_ENV_INT = "Environment variable {} must be an integer, got '{}'"
    PIXEL_OUT_OF_BOUNDS = "Pixel ({}, {}) is outside raster {} of size {}x{}"
