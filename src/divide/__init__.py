"""
Divide - continental divide classification of global elevation rasters.

- coastline: Find coastal land cells and give each a basin id
- basins: Label every land cell with the basin of its nearest coast
- render: Draw the labeled grid as a color-coded image
- classify: Run load, coastline, basins and render as one batch
"""

from divide._util.constants import DEFAULT_CHUNK_SIZE, NUM_COLUMNS, SEA_LEVEL
from divide._util.progress import ProgressCallback, ProgressTracker
from divide.basins import (
    BasinLabels,
    BasinSummary,
    label_basins,
    summarize_basins,
    write_labels,
)
from divide.codes import BasinPolicy, CellState
from divide.coastline import SeedSet, detect_coastline
from divide.errors import (
    DivideError,
    EmptySeedSetError,
    MalformedInputError,
    PlatformUnsupportedError,
    UnreachableLandError,
)
from divide.grid import ElevationGrid, read_elevation
from divide.render import render_basins, render_coastline, write_image

__version__ = "0.1.0"


def coastline(
    input_path: str,
    output_path: str,
    columns: int = NUM_COLUMNS,
    sea_level: int = SEA_LEVEL,
    nodata: int | None = None,
    policy: BasinPolicy | str = BasinPolicy.OCEAN,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    progress_callback: ProgressCallback | None = None,
) -> SeedSet:
    """
    Detect the coastline of an elevation raster and draw it.

    The image shows land as grey levels of elevation, ocean in black and
    coastal seed cells in green (contested seeds in red).

    Args:
        input_path: Raw 16-bit elevation file or GDAL supported DEM.
        output_path: Image to write (PNG for ``.png``, GeoTIFF otherwise).
        columns: Samples per row of a raw elevation file. Default is 10800.
        sea_level: Samples below this value are ocean. Default is 0.
        nodata: Sample value marking void cells, if any.
        policy: Basin id policy for the seeds (``ocean``, ``coast`` or ``single``).
        chunk_size: Rows per block for the scans. Default is 2048.
        progress_callback: Optional callback function for progress reporting.

    Returns:
        The detected seed set.
    """
    tracker = ProgressTracker(progress_callback, "Coastline", total_steps=3)
    tracker.update(1, step_name="Load elevation")
    grid = read_elevation(input_path, columns, sea_level, nodata)
    tracker.update(2, step_name="Detect coastline")
    seeds = detect_coastline(grid, policy, chunk_size, tracker.callback)
    tracker.update(3, step_name="Render image")
    bgra = render_coastline(grid, seeds, chunk_size, tracker.callback)
    write_image(output_path, bgra)
    return seeds


def classify(
    input_path: str,
    output_path: str,
    columns: int = NUM_COLUMNS,
    sea_level: int = SEA_LEVEL,
    nodata: int | None = None,
    policy: BasinPolicy | str = BasinPolicy.OCEAN,
    palette: bool = True,
    labels_path: str | None = None,
    strict: bool = False,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    progress_callback: ProgressCallback | None = None,
) -> BasinSummary:
    """
    Classify every land cell of an elevation raster by drainage basin.

    Loads the grid, seeds the coastline, expands basins inland breadth-first
    and writes the color-coded image (and optionally the basin id raster).

    Args:
        input_path: Raw 16-bit elevation file or GDAL supported DEM.
        output_path: Image to write (PNG for ``.png``, GeoTIFF otherwise).
        columns: Samples per row of a raw elevation file. Default is 10800.
        sea_level: Samples below this value are ocean. Default is 0.
        nodata: Sample value marking void cells, if any.
        policy: Basin id policy for the seeds (``ocean``, ``coast`` or ``single``).
        palette: Color land by basin. If False, land is drawn as grey levels.
        labels_path: Optional GeoTIFF path for the basin id raster.
        strict: Raise ``UnreachableLandError`` if land is left unvisited.
        chunk_size: Rows per block for the scans. Default is 2048.
        progress_callback: Optional callback function for progress reporting.

    Returns:
        Cell counts per basin and per state.
    """
    tracker = ProgressTracker(progress_callback, "Classify basins", total_steps=4)
    tracker.update(1, step_name="Load elevation")
    grid = read_elevation(input_path, columns, sea_level, nodata)

    tracker.update(2, step_name="Detect coastline")
    seeds = detect_coastline(grid, policy, chunk_size, tracker.callback)

    tracker.update(3, step_name="Label basins")
    result = label_basins(grid, seeds, strict)
    if labels_path is not None:
        write_labels(labels_path, result)

    tracker.update(4, step_name="Render image")
    bgra = render_basins(grid, result, palette, chunk_size, tracker.callback)
    write_image(output_path, bgra)
    return summarize_basins(grid, result)


__all__ = [
    # Core functions
    "coastline",
    "classify",
    "detect_coastline",
    "label_basins",
    "render_basins",
    "render_coastline",
    "summarize_basins",
    "write_image",
    "write_labels",
    "read_elevation",
    # Types
    "BasinLabels",
    "BasinPolicy",
    "BasinSummary",
    "CellState",
    "ElevationGrid",
    "ProgressCallback",
    "SeedSet",
    # Errors
    "DivideError",
    "EmptySeedSetError",
    "MalformedInputError",
    "PlatformUnsupportedError",
    "UnreachableLandError",
]
