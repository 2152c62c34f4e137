"""Exception types raised by landcover-tiff."""


class LandCoverError(Exception):
    """Base class for all landcover-tiff errors."""


class RasterFormatError(LandCoverError, ValueError):
    """A required GeoTIFF field is missing or malformed."""


class CRSNotFoundError(LandCoverError, LookupError):
    """A CRS identifier has no entry in the SRID table."""


class TileReadError(LandCoverError, RuntimeError):
    """The container could not decode a tile."""


class RasterNotReadyError(LandCoverError, RuntimeError):
    """A pixel read was attempted before the raster was initialized."""
