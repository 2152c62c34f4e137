#!/usr/bin/env python3
"""
Point Query Demo -- landcover-tiff

Looks up the land cover class at a few locations in a tiled land cover
GeoTIFF, first through a single handle with a tile cache, then through the
async manager.

Usage:
    python examples/point_query_demo.py path/to/landcover.tif

Requirements:
    pip install landcover-tiff
"""

import asyncio
import logging
import sys

from landcover_tiff import LandCoverManager, LandUseTiff, MemoryTileCache
from landcover_tiff.constants import get_land_cover_name

# -- Configuration -----------------------------------------------------------

PLACES = [
    {"name": "Frankfurt", "lon": 8.6821, "lat": 50.1109},
    {"name": "Rhine at Mainz", "lon": 8.2711, "lat": 50.0031},
    {"name": "Taunus forest", "lon": 8.4500, "lat": 50.2300},
    {"name": "Null Island", "lon": 0.0, "lat": 0.0},
]


# -- Main pipeline -----------------------------------------------------------


async def main(path: str) -> None:
    print("=" * 60)
    print("Land Cover -- Point Queries")
    print("=" * 60)

    # Step 1: Direct handle with a tile cache
    print("\nStep 1: LandUseTiff with MemoryTileCache")
    cache = MemoryTileCache(max_bytes=64 * 1024 * 1024)
    with LandUseTiff(path) as raster:
        geo = raster.read_tiff()
        print(f"  Raster: {geo.width}x{geo.height} px, tiles {geo.tile_size} px, CRS {geo.crs_id}")
        for place in PLACES:
            value = raster.try_read_pixel(place["lon"], place["lat"], cache)
            label = get_land_cover_name(value) if value is not None else "outside raster"
            print(f"  {place['name']:<16} -> {value} ({label})")
    print(f"  Cache: {len(cache)} tiles, {cache.hits} hits, {cache.misses} misses")

    # Step 2: Async manager
    print("\nStep 2: LandCoverManager.fetch_pixels")
    manager = LandCoverManager()
    try:
        points = [[p["lon"], p["lat"]] for p in PLACES]
        results = await manager.fetch_pixels(path, points)
        for place, result in zip(PLACES, results):
            print(f"  {place['name']:<16} -> {result.class_name or 'n/a'}")
    finally:
        manager.close()

    print("\nDone.")


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print(__doc__)
        sys.exit(1)
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main(sys.argv[1]))
