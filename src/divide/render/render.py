import numpy as np
from numba import njit, prange  # type: ignore[attr-defined]

from divide._util.constants import (
    BASIN_PALETTE,
    CELL_COAST,
    CELL_CONTESTED,
    CELL_LABELED,
    CELL_NODATA,
    CELL_OCEAN,
    COAST_COLOR,
    CONTESTED_COLOR,
    DEFAULT_CHUNK_SIZE,
    MID_GREY,
    NODATA_COLOR,
    OCEAN_COLOR,
)
from divide._util.progress import ProgressCallback, chunk_message, silent_callback
from divide._util.raster import row_chunks, write_bgra_image
from divide.basins import BasinLabels, initial_state
from divide.coastline import SeedSet
from divide.grid import ElevationGrid


def basin_color(basin_id: int) -> tuple[int, int, int, int]:
    """BGRA palette color for a basin id (ids start at 1)."""
    color = BASIN_PALETTE[(basin_id - 1) % len(BASIN_PALETTE)]
    return int(color[0]), int(color[1]), int(color[2]), int(color[3])


@njit
def _put(out: np.ndarray, row: int, col: int, color) -> None:
    out[row, col, 0] = color[0]
    out[row, col, 1] = color[1]
    out[row, col, 2] = color[2]
    out[row, col, 3] = color[3]


@njit(parallel=True)
def render_rows(
    elevation: np.ndarray,
    state: np.ndarray,
    labels: np.ndarray,
    max_elevation: int,
    palette: np.ndarray,
    use_palette: bool,
    row_start: int,
    row_end: int,
    out: np.ndarray,
) -> None:
    """
    Fill the BGRA pixels of rows ``[row_start, row_end)``.

    Ocean is black, coast green and contested cells red. Labeled land takes
    its basin's palette color when ``use_palette`` is set; any other land is
    a grey level of ``elevation / max_elevation``, or mid-grey when
    ``max_elevation`` is not positive. Nodata is transparent.
    """
    cols = state.shape[1]
    n_colors = palette.shape[0]
    for row in prange(row_start, row_end):
        for col in range(cols):
            cell = state[row, col]
            if cell == CELL_OCEAN:
                _put(out, row, col, OCEAN_COLOR)
            elif cell == CELL_NODATA:
                _put(out, row, col, NODATA_COLOR)
            elif cell == CELL_COAST:
                _put(out, row, col, COAST_COLOR)
            elif cell == CELL_CONTESTED:
                _put(out, row, col, CONTESTED_COLOR)
            elif cell == CELL_LABELED and use_palette and labels[row, col] > 0:
                k = (labels[row, col] - 1) % n_colors
                for channel in range(4):
                    out[row, col, channel] = palette[k, channel]
            else:
                if max_elevation > 0:
                    grey = int(np.floor(elevation[row, col] / max_elevation * 255.0))
                    grey = min(max(grey, 0), 255)
                else:
                    grey = MID_GREY
                out[row, col, 0] = grey
                out[row, col, 1] = grey
                out[row, col, 2] = grey
                out[row, col, 3] = 255


def render_state(
    grid: ElevationGrid,
    state: np.ndarray,
    labels: np.ndarray | None = None,
    palette: bool = True,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    progress_callback: ProgressCallback | None = None,
) -> np.ndarray:
    """
    Render a state array (and optional basin ids) as a BGRA image buffer.

    Parameters
    ----------
    grid : ElevationGrid
        Grid supplying elevation for the grey levels.
    state : np.ndarray
        ``uint8`` CellState codes.
    labels : np.ndarray | None
        ``int32`` basin ids, required for palette colors.
    palette : bool
        Color labeled land by basin; otherwise use grey levels.
    chunk_size : int
        Rows per render block.
    progress_callback : ProgressCallback | None
        Receives ``Chunk i/n`` messages.

    Returns
    -------
    np.ndarray
        ``(rows, cols, 4)`` uint8 buffer in blue, green, red, alpha order.
    """
    if progress_callback is None:
        progress_callback = silent_callback
    if labels is None:
        labels = np.zeros(grid.shape, dtype=np.int32)
        palette = False

    out = np.zeros((grid.rows, grid.cols, 4), dtype=np.uint8)
    max_elevation = grid.max_elevation()

    chunks = list(row_chunks(grid.rows, chunk_size))
    for i, (row_start, row_end) in enumerate(chunks, start=1):
        render_rows(
            grid.elevation,
            state,
            labels,
            max_elevation,
            BASIN_PALETTE,
            palette,
            row_start,
            row_end,
            out,
        )
        progress_callback(
            message=chunk_message(i, len(chunks)), progress=i / len(chunks)
        )
    return out


def render_basins(
    grid: ElevationGrid,
    result: BasinLabels | None = None,
    palette: bool = True,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    progress_callback: ProgressCallback | None = None,
) -> np.ndarray:
    """Render a labeling result, or the bare elevation map when ``result`` is None."""
    if result is None:
        return render_state(
            grid, initial_state(grid), None, False, chunk_size, progress_callback
        )
    return render_state(
        grid, result.state, result.labels, palette, chunk_size, progress_callback
    )


def render_coastline(
    grid: ElevationGrid,
    seeds: SeedSet,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    progress_callback: ProgressCallback | None = None,
) -> np.ndarray:
    """Grey elevation map with the coastal seed cells highlighted."""
    return render_state(
        grid, initial_state(grid, seeds), None, False, chunk_size, progress_callback
    )


def write_image(path: str, bgra: np.ndarray) -> None:
    """Write the rendered buffer once to ``path`` (PNG or GeoTIFF)."""
    write_bgra_image(path, bgra)
