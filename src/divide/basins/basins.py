from dataclasses import dataclass

import numpy as np
from numba import njit  # type: ignore[attr-defined]
from osgeo import gdal

from divide._util.constants import (
    CELL_COAST,
    CELL_CONTESTED,
    CELL_LABELED,
    CELL_NODATA,
    CELL_OCEAN,
    CELL_UNVISITED,
    NEIGHBOR_OFFSETS,
    NO_BASIN,
    UNREACHED_DISTANCE,
)
from divide._util.progress import ProgressCallback, ProgressTracker
from divide._util.raster import create_dataset
from divide.coastline import SeedSet, frontier_dtype
from divide.errors import EmptySeedSetError, UnreachableLandError
from divide.grid import ElevationGrid


@dataclass
class BasinLabels:
    """
    Result of a labeling run.

    Attributes
    ----------
    state : np.ndarray
        ``uint8`` CellState code per cell.
    labels : np.ndarray
        ``int32`` basin id per cell, 0 for ocean, nodata and unreached land.
    distance : np.ndarray
        ``int32`` grid steps to the nearest coast, -1 where unreached.
    basin_count : int
        Number of distinct basin ids handed out by the seed set.
    enqueued : int
        Number of cells pushed onto the frontier.
    unreachable : np.ndarray
        ``(n, 2)`` array of land cells no coast reaches.
    """

    state: np.ndarray
    labels: np.ndarray
    distance: np.ndarray
    basin_count: int
    enqueued: int
    unreachable: np.ndarray


def initial_state(grid: ElevationGrid, seeds: SeedSet | None = None) -> np.ndarray:
    """State array before expansion, with the seeds marked if given."""
    state = np.full(grid.shape, CELL_UNVISITED, dtype=np.uint8)
    state[grid.ocean_mask()] = CELL_OCEAN
    state[grid.nodata_mask()] = CELL_NODATA
    if seeds is not None and not seeds.is_empty:
        state[seeds.rows, seeds.cols] = np.where(
            seeds.contested, CELL_CONTESTED, CELL_COAST
        ).astype(np.uint8)
    return state


@njit
def expand_frontier(
    state: np.ndarray,
    labels: np.ndarray,
    distance: np.ndarray,
    seed_indices: np.ndarray,
    queue: np.ndarray,
) -> int:
    """
    Multi-source breadth-first expansion from the seed cells.

    ``state``, ``labels`` and ``distance`` must already hold the seeds
    (state COAST or CONTESTED, their basin id, distance 0). The frontier is a
    FIFO over ``queue`` with head and tail pointers; a cell is pushed only
    when it leaves UNVISITED, so every cell is pushed at most once.

    When a popped cell at distance ``d`` reaches a neighbor already claimed
    at ``d + 1`` by another basin, or the popped cell is itself contested,
    the neighbor becomes CONTESTED and keeps the lower basin id. Since FIFO
    pops all cells at ``d`` before any cell at ``d + 1``, this settles before
    the neighbor expands, and contested cells pass the flag on to cells that
    only they reach at the next distance.

    Parameters
    ----------
    state : np.ndarray
        ``uint8`` CellState codes, updated in place.
    labels : np.ndarray
        ``int32`` basin ids, updated in place.
    distance : np.ndarray
        ``int32`` grid-step distances, updated in place.
    seed_indices : np.ndarray
        Flat indices of the seed cells.
    queue : np.ndarray
        Frontier buffer with room for every land cell.

    Returns
    -------
    int
        Number of cells pushed onto the frontier.
    """
    rows, cols = state.shape
    head = 0
    tail = 0
    for i in range(seed_indices.size):
        queue[tail] = seed_indices[i]
        tail += 1

    while head < tail:
        index = queue[head]
        head += 1
        row = index // cols
        col = index - row * cols

        basin = labels[row, col]
        contested = state[row, col] == CELL_CONTESTED
        next_distance = distance[row, col] + 1

        for k in range(4):
            d_row, d_col = NEIGHBOR_OFFSETS[k]
            n_row = row + d_row
            n_col = col + d_col
            if not (0 <= n_row < rows and 0 <= n_col < cols):
                continue
            neighbor_state = state[n_row, n_col]
            if neighbor_state == CELL_UNVISITED:
                state[n_row, n_col] = CELL_CONTESTED if contested else CELL_LABELED
                labels[n_row, n_col] = basin
                distance[n_row, n_col] = next_distance
                queue[tail] = n_row * cols + n_col
                tail += 1
            elif (
                neighbor_state == CELL_LABELED or neighbor_state == CELL_CONTESTED
            ) and distance[n_row, n_col] == next_distance:
                if contested or labels[n_row, n_col] != basin:
                    state[n_row, n_col] = CELL_CONTESTED
                    if basin < labels[n_row, n_col]:
                        labels[n_row, n_col] = basin

    return tail


def label_basins(
    grid: ElevationGrid,
    seeds: SeedSet,
    strict: bool = False,
    progress_callback: ProgressCallback | None = None,
) -> BasinLabels:
    """
    Label every land cell with the basin of its nearest coast.

    Closeness is the number of 4-adjacent grid steps over land; elevation only
    decides what is land. Cells equidistant from two or more basins are
    CONTESTED and carry the lowest of those basin ids. The result does not
    depend on the order of the seeds.

    Parameters
    ----------
    grid : ElevationGrid
        The elevation grid.
    seeds : SeedSet
        Coastal seeds, usually from ``detect_coastline``.
    strict : bool
        Raise ``UnreachableLandError`` when land is left unvisited instead of
        returning it in ``BasinLabels.unreachable``.
    progress_callback : ProgressCallback | None
        Optional callback for progress reporting.

    Returns
    -------
    BasinLabels

    Raises
    ------
    EmptySeedSetError
        If the seed set is empty.
    UnreachableLandError
        If ``strict`` is set and some land cell is not reachable.
    """
    if seeds.is_empty:
        raise EmptySeedSetError(
            "No coastal cells found; the grid is entirely ocean, entirely land "
            "or has no land next to ocean"
        )

    tracker = ProgressTracker(progress_callback, "Label basins", total_steps=2)
    tracker.update(1, step_name="Seed frontier")

    state = initial_state(grid, seeds)
    labels = np.full(grid.shape, NO_BASIN, dtype=np.int32)
    distance = np.full(grid.shape, UNREACHED_DISTANCE, dtype=np.int32)
    labels[seeds.rows, seeds.cols] = seeds.basin_ids
    distance[seeds.rows, seeds.cols] = 0

    seed_indices = seeds.flat_indices(grid.cols)
    land_count = int(np.count_nonzero((state != CELL_OCEAN) & (state != CELL_NODATA)))
    queue = np.empty(max(land_count, 1), dtype=frontier_dtype(grid.size))

    tracker.update(2, step_name="Expand frontier")
    enqueued = int(expand_frontier(state, labels, distance, seed_indices, queue))
    tracker.update(2, step_name="Expand frontier", progress=1.0)

    unreachable = np.argwhere(state == CELL_UNVISITED)
    if strict and unreachable.size:
        raise UnreachableLandError(unreachable)

    return BasinLabels(
        state=state,
        labels=labels,
        distance=distance,
        basin_count=seeds.basin_count,
        enqueued=enqueued,
        unreachable=unreachable,
    )


def write_labels(path: str, result: BasinLabels) -> None:
    """Write basin ids to an Int32 GeoTIFF, 0 marking cells without a basin."""
    rows, cols = result.labels.shape
    out_ds = create_dataset(path, NO_BASIN, gdal.GDT_Int32, cols, rows)
    out_band = out_ds.GetRasterBand(1)
    out_band.WriteArray(result.labels)
    out_band.FlushCache()
    out_ds.FlushCache()
    out_band = None
    out_ds = None
