"""
CRS registry backed by a bundled SRID table.

Each table line is ``<srid>;<WKT definition>``. CRS objects are built with
pyproj on first use and memoized for the life of the registry.
"""

import logging
import os
import threading
from collections.abc import Iterator
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any

from ..constants import SRID_SEPARATOR, SRID_TABLE_RESOURCE, WGS84_WKT, EnvVar, ErrorMessages
from ..errors import CRSNotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SridDefinition:
    """One line of the SRID table."""

    srid: int
    wkt: str


def parse_srid_line(line: str, line_number: int = 0) -> SridDefinition | None:
    """
    Parse a single ``id;definition`` line.

    Returns:
        The definition, or None for blank lines and lines without a separator
    """
    if not line or line.isspace():
        return None

    split = line.find(SRID_SEPARATOR)
    if split < 0:
        return None

    try:
        srid = int(line[:split])
    except ValueError as e:
        raise ValueError(ErrorMessages.INVALID_SRID_LINE.format(line_number, line[:40])) from e

    return SridDefinition(srid=srid, wkt=line[split + 1 :].rstrip("\r\n"))


class CRSRegistry:
    """Memoized lookup of pyproj CRS objects by numeric identifier."""

    def __init__(self, table_path: str | Path | None = None) -> None:
        self.table_path = Path(table_path) if table_path is not None else None
        self._crs: dict[int, Any] = {}
        self._wgs84: Any = None
        self._lock = threading.Lock()

    def _read_lines(self) -> Iterator[str]:
        try:
            if self.table_path is not None:
                with self.table_path.open("r", encoding="utf-8") as f:
                    yield from f
            else:
                resource = resources.files("landcover_tiff") / "data" / SRID_TABLE_RESOURCE
                with resource.open("r", encoding="utf-8") as f:
                    yield from f
        except OSError as e:
            source = self.table_path or SRID_TABLE_RESOURCE
            raise CRSNotFoundError(ErrorMessages.SRID_TABLE_UNREADABLE.format(source)) from e

    def iter_definitions(self) -> Iterator[SridDefinition]:
        """Yield every definition in the table, in file order."""
        for line_number, line in enumerate(self._read_lines(), start=1):
            definition = parse_srid_line(line, line_number)
            if definition is not None:
                yield definition

    def get(self, srid: int) -> Any:
        """
        Get the CRS for an identifier.

        Args:
            srid: Numeric CRS identifier (EPSG code)

        Returns:
            pyproj.CRS

        Raises:
            CRSNotFoundError: If the table has no line for srid
        """
        crs = self._crs.get(srid)
        if crs is not None:
            return crs

        with self._lock:
            crs = self._crs.get(srid)
            if crs is not None:
                return crs

            from pyproj import CRS

            for definition in self.iter_definitions():
                if definition.srid != srid:
                    continue
                crs = CRS.from_wkt(definition.wkt)
                self._crs[srid] = crs
                logger.debug(f"Loaded CRS {srid} from SRID table")
                return crs

        raise CRSNotFoundError(ErrorMessages.CRS_NOT_FOUND.format(srid))

    def wgs84(self) -> Any:
        """Geographic WGS84 CRS used as the source of every transform."""
        if self._wgs84 is None:
            with self._lock:
                if self._wgs84 is None:
                    from pyproj import CRS

                    self._wgs84 = CRS.from_wkt(WGS84_WKT)
        return self._wgs84

    def transformer_to(self, srid: int) -> Any:
        """Transformer from (longitude, latitude) in WGS84 to the CRS with id srid."""
        from pyproj import Transformer

        return Transformer.from_crs(self.wgs84(), self.get(srid), always_xy=True)

    def __contains__(self, srid: int) -> bool:
        return srid in self._crs


_default_registry: CRSRegistry | None = None
_default_lock = threading.Lock()


def default_registry() -> CRSRegistry:
    """Process-wide registry, honouring the LANDCOVER_SRID_TABLE environment variable."""
    global _default_registry
    if _default_registry is None:
        with _default_lock:
            if _default_registry is None:
                _default_registry = CRSRegistry(os.environ.get(EnvVar.SRID_TABLE) or None)
    return _default_registry
