from collections.abc import Iterator
from dataclasses import dataclass

import numpy as np
from numba import njit, prange  # type: ignore[attr-defined]

from divide._util.constants import DEFAULT_CHUNK_SIZE, NEIGHBOR_OFFSETS
from divide._util.progress import ProgressCallback, chunk_message, silent_callback
from divide._util.raster import row_chunks
from divide.codes import BasinPolicy
from divide.grid import ElevationGrid


def frontier_dtype(size: int) -> type:
    """Smallest integer type able to hold every flat index of ``size`` cells."""
    return np.int32 if size < np.iinfo(np.int32).max else np.int64


@dataclass(frozen=True)
class SeedSet:
    """
    Coastal seed cells and the basin id each one starts with.

    The arrays are parallel and in row-major scan order. ``contested`` marks
    coast cells that touch more than one basin; those keep the lowest id.
    """

    rows: np.ndarray
    cols: np.ndarray
    basin_ids: np.ndarray
    contested: np.ndarray
    basin_count: int
    policy: BasinPolicy

    def __len__(self) -> int:
        return int(self.rows.size)

    @property
    def is_empty(self) -> bool:
        return self.rows.size == 0

    def flat_indices(self, cols: int) -> np.ndarray:
        return self.rows.astype(np.int64) * cols + self.cols

    def __iter__(self) -> Iterator[tuple[tuple[int, int], int]]:
        for row, col, basin_id in zip(self.rows, self.cols, self.basin_ids):
            yield (int(row), int(col)), int(basin_id)


@njit(parallel=True)
def coast_mask_rows(
    land: np.ndarray,
    ocean: np.ndarray,
    row_start: int,
    row_end: int,
    coast: np.ndarray,
) -> None:
    """
    Mark coastal cells for the rows ``[row_start, row_end)``.

    A land cell is coastal when at least one of its in-bounds 4-neighbors is
    ocean. Neighbors are read from the full arrays, so blocks need no halo and
    only write to their own rows of ``coast``.

    Parameters
    ----------
    land : np.ndarray
        Boolean land mask of the whole grid.
    ocean : np.ndarray
        Boolean ocean mask of the whole grid.
    row_start, row_end : int
        Row range of the block.
    coast : np.ndarray
        Boolean output mask, updated in place.
    """
    rows, cols = land.shape
    for row in prange(row_start, row_end):
        for col in range(cols):
            if not land[row, col]:
                continue
            for k in range(4):
                d_row, d_col = NEIGHBOR_OFFSETS[k]
                n_row = row + d_row
                n_col = col + d_col
                if 0 <= n_row < rows and 0 <= n_col < cols and ocean[n_row, n_col]:
                    coast[row, col] = True
                    break


def coast_mask(
    grid: ElevationGrid,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    progress_callback: ProgressCallback | None = None,
) -> np.ndarray:
    """Boolean mask of the coastal land cells, computed in row blocks."""
    if progress_callback is None:
        progress_callback = silent_callback

    land = grid.land_mask()
    ocean = grid.ocean_mask()
    coast = np.zeros(grid.shape, dtype=np.bool_)

    chunks = list(row_chunks(grid.rows, chunk_size))
    for i, (row_start, row_end) in enumerate(chunks, start=1):
        coast_mask_rows(land, ocean, row_start, row_end, coast)
        progress_callback(
            message=chunk_message(i, len(chunks)), progress=i / len(chunks)
        )
    return coast


@njit
def _label_components(mask: np.ndarray, labels: np.ndarray, queue: np.ndarray) -> int:
    rows, cols = mask.shape
    count = 0
    for row in range(rows):
        for col in range(cols):
            if not mask[row, col] or labels[row, col] != 0:
                continue
            count += 1
            labels[row, col] = count
            head = 0
            tail = 0
            queue[tail] = row * cols + col
            tail += 1
            while head < tail:
                index = queue[head]
                head += 1
                r = index // cols
                c = index - r * cols
                for k in range(4):
                    d_row, d_col = NEIGHBOR_OFFSETS[k]
                    n_row = r + d_row
                    n_col = c + d_col
                    if (
                        0 <= n_row < rows
                        and 0 <= n_col < cols
                        and mask[n_row, n_col]
                        and labels[n_row, n_col] == 0
                    ):
                        labels[n_row, n_col] = count
                        queue[tail] = n_row * cols + n_col
                        tail += 1
    return count


def label_components(mask: np.ndarray) -> tuple[np.ndarray, int]:
    """
    Label the 4-connected components of a boolean mask.

    Components are numbered ``1..count`` in row-major order of their first
    cell; cells outside the mask are 0. Each component is flooded with a FIFO
    over a pre-allocated index buffer.

    Returns
    -------
    tuple[np.ndarray, int]
        ``int32`` label array and the number of components.
    """
    labels = np.zeros(mask.shape, dtype=np.int32)
    queue = np.empty(mask.size, dtype=frontier_dtype(mask.size))
    count = _label_components(np.ascontiguousarray(mask), labels, queue)
    return labels, int(count)


@njit
def _assign_ocean_basins(
    seed_rows: np.ndarray,
    seed_cols: np.ndarray,
    ocean_labels: np.ndarray,
    ocean_count: int,
    basin_ids: np.ndarray,
    contested: np.ndarray,
) -> int:
    rows, cols = ocean_labels.shape
    # ocean component -> basin id, in order of first contact
    basin_of = np.zeros(ocean_count + 1, dtype=np.int32)
    basin_count = 0
    for i in range(seed_rows.size):
        row = seed_rows[i]
        col = seed_cols[i]
        best = 0
        for k in range(4):
            d_row, d_col = NEIGHBOR_OFFSETS[k]
            n_row = row + d_row
            n_col = col + d_col
            if not (0 <= n_row < rows and 0 <= n_col < cols):
                continue
            component = ocean_labels[n_row, n_col]
            if component == 0:
                continue
            if basin_of[component] == 0:
                basin_count += 1
                basin_of[component] = basin_count
            basin = basin_of[component]
            if best == 0:
                best = basin
            elif basin != best:
                contested[i] = True
                if basin < best:
                    best = basin
        basin_ids[i] = best
    return basin_count


def detect_coastline(
    grid: ElevationGrid,
    policy: BasinPolicy | str = BasinPolicy.OCEAN,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    progress_callback: ProgressCallback | None = None,
) -> SeedSet:
    """
    Find every coastal land cell and assign it a basin id.

    Parameters
    ----------
    grid : ElevationGrid
        The elevation grid.
    policy : BasinPolicy | str
        ``ocean`` numbers connected ocean components in the order the
        row-major coast scan first touches them; a coast cell touching several
        components takes the lowest id and is flagged contested. ``coast``
        numbers connected runs of coast cells. ``single`` gives every seed id 1.
    chunk_size : int
        Rows per block for the coast scan.
    progress_callback : ProgressCallback | None
        Receives ``Chunk i/n`` messages during the scan.

    Returns
    -------
    SeedSet
        Seeds in row-major order. Empty when the grid has no coastline.
    """
    policy = BasinPolicy(policy)
    coast = coast_mask(grid, chunk_size, progress_callback)
    seed_rows, seed_cols = np.nonzero(coast)
    seed_rows = seed_rows.astype(np.int64)
    seed_cols = seed_cols.astype(np.int64)
    basin_ids = np.zeros(seed_rows.size, dtype=np.int32)
    contested = np.zeros(seed_rows.size, dtype=np.bool_)

    if seed_rows.size == 0:
        basin_count = 0
    elif policy is BasinPolicy.OCEAN:
        ocean_labels, ocean_count = label_components(grid.ocean_mask())
        basin_count = int(
            _assign_ocean_basins(
                seed_rows, seed_cols, ocean_labels, ocean_count, basin_ids, contested
            )
        )
    elif policy is BasinPolicy.COAST:
        coast_labels, basin_count = label_components(coast)
        basin_ids[:] = coast_labels[seed_rows, seed_cols]
    else:
        basin_ids[:] = 1
        basin_count = 1

    return SeedSet(
        rows=seed_rows,
        cols=seed_cols,
        basin_ids=basin_ids,
        contested=contested,
        basin_count=basin_count,
        policy=policy,
    )
