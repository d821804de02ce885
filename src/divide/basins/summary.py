"""Cell counts per basin and per classification state."""

from dataclasses import dataclass

import numpy as np

from divide._util.constants import (
    CELL_COAST,
    CELL_CONTESTED,
    CELL_LABELED,
    CELL_NODATA,
    CELL_OCEAN,
)
from divide.basins.basins import BasinLabels
from divide.grid import ElevationGrid


@dataclass(frozen=True)
class BasinSummary:
    rows: int
    cols: int
    basin_count: int
    basin_cells: np.ndarray
    ocean_cells: int
    open_ocean_cells: int
    coast_cells: int
    labeled_cells: int
    contested_cells: int
    unreachable_cells: int
    nodata_cells: int

    @property
    def land_cells(self) -> int:
        return (
            self.coast_cells
            + self.labeled_cells
            + self.contested_cells
            + self.unreachable_cells
        )

    def largest(self, limit: int | None = None) -> list[tuple[int, int]]:
        """``(basin_id, cell_count)`` pairs, largest basin first, ties by id."""
        ids = np.nonzero(self.basin_cells)[0]
        order = sorted(ids, key=lambda basin_id: (-self.basin_cells[basin_id], basin_id))
        pairs = [(int(basin_id), int(self.basin_cells[basin_id])) for basin_id in order]
        return pairs if limit is None else pairs[:limit]

    def counts(self) -> dict[str, int]:
        return {
            "Ocean": self.ocean_cells,
            "Open ocean (-500)": self.open_ocean_cells,
            "Coast": self.coast_cells,
            "Labeled": self.labeled_cells,
            "Contested": self.contested_cells,
            "Unreachable": self.unreachable_cells,
            "Nodata": self.nodata_cells,
        }


def summarize_basins(grid: ElevationGrid, result: BasinLabels) -> BasinSummary:
    """Count cells per basin id (index 0 unused) and per state.

    Contested cells are counted on their own, not in any basin.
    """
    state = result.state
    reached = result.labels[(state == CELL_COAST) | (state == CELL_LABELED)]
    basin_cells = np.bincount(reached, minlength=result.basin_count + 1)
    basin_cells[0] = 0
    return BasinSummary(
        rows=grid.rows,
        cols=grid.cols,
        basin_count=result.basin_count,
        basin_cells=basin_cells,
        ocean_cells=int(np.count_nonzero(state == CELL_OCEAN)),
        open_ocean_cells=grid.open_ocean_count(),
        coast_cells=int(np.count_nonzero(state == CELL_COAST)),
        labeled_cells=int(np.count_nonzero(state == CELL_LABELED)),
        contested_cells=int(np.count_nonzero(state == CELL_CONTESTED)),
        unreachable_cells=int(len(result.unreachable)),
        nodata_cells=int(np.count_nonzero(state == CELL_NODATA)),
    )
