from .elevation_grid import (
    ElevationGrid,
    check_byte_order,
    read_elevation,
    read_elevation_file,
    read_elevation_raster,
)

__all__ = [
    "ElevationGrid",
    "check_byte_order",
    "read_elevation",
    "read_elevation_file",
    "read_elevation_raster",
]
