import os
import sys
from pathlib import Path

import numpy as np
from divide._util.constants import (
    BYTES_PER_SAMPLE,
    ELEVATION_DTYPE,
    NEIGHBOR_OFFSETS,
    NUM_COLUMNS,
    OPEN_OCEAN_ELEVATION,
    RAW_SUFFIXES,
    SEA_LEVEL,
)
from divide._util.raster import open_dataset
from divide.errors import MalformedInputError, PlatformUnsupportedError

INT16_INFO = np.iinfo(np.int16)


def check_byte_order() -> None:
    """Fail fast on hosts that are not little-endian."""
    if sys.byteorder != "little":
        raise PlatformUnsupportedError(
            "Running on big-endian architectures is not supported."
        )


class ElevationGrid:
    """
    A fixed-size 2D grid of signed elevation samples.

    The grid owns a C-contiguous ``int16`` array that is made read-only on
    construction, so cell ``(row, col)`` lives at flat index
    ``row * cols + col`` for the whole run. Samples below ``sea_level`` are
    ocean, the rest are land, except samples equal to ``nodata`` which are
    neither.

    Parameters
    ----------
    elevation : np.ndarray
        2D array of elevation samples.
    sea_level : int
        Threshold separating ocean (below) from land (at or above).
    nodata : int | None
        Sample value marking void cells, ``None`` if the raster has none.
    copy : bool
        Copy ``elevation`` so later writes by the caller are not seen.
    """

    def __init__(
        self,
        elevation: np.ndarray,
        sea_level: int = SEA_LEVEL,
        nodata: int | None = None,
        copy: bool = True,
    ) -> None:
        if elevation.ndim != 2:
            raise MalformedInputError(
                f"Expected a 2D elevation array, got {elevation.ndim} dimensions"
            )
        if elevation.size == 0:
            raise MalformedInputError("Elevation grid has no samples")
        if copy:
            elevation = np.array(elevation, dtype=np.int16, order="C")
        else:
            elevation = np.ascontiguousarray(elevation, dtype=np.int16)
        elevation.setflags(write=False)
        self.elevation = elevation
        self.sea_level = int(sea_level)
        self.nodata = None if nodata is None else int(nodata)

    @property
    def rows(self) -> int:
        return int(self.elevation.shape[0])

    @property
    def cols(self) -> int:
        return int(self.elevation.shape[1])

    @property
    def shape(self) -> tuple[int, int]:
        return self.rows, self.cols

    @property
    def size(self) -> int:
        return int(self.elevation.size)

    def __repr__(self) -> str:
        return (
            f"ElevationGrid(rows={self.rows}, cols={self.cols}, "
            f"sea_level={self.sea_level}, nodata={self.nodata})"
        )

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    def get(self, row: int, col: int) -> int:
        """Elevation at ``(row, col)``, raising ``IndexError`` outside the grid."""
        if not self.in_bounds(row, col):
            raise IndexError(
                f"Cell ({row}, {col}) is outside the {self.rows}x{self.cols} grid"
            )
        return int(self.elevation[row, col])

    def neighbors(self, row: int, col: int) -> list[tuple[int, int]]:
        """The up to 4 in-bounds neighbors in left, up, right, down order."""
        if not self.in_bounds(row, col):
            raise IndexError(
                f"Cell ({row}, {col}) is outside the {self.rows}x{self.cols} grid"
            )
        return [
            (row + d_row, col + d_col)
            for d_row, d_col in NEIGHBOR_OFFSETS
            if self.in_bounds(row + d_row, col + d_col)
        ]

    def is_nodata(self, elevation: int) -> bool:
        return self.nodata is not None and elevation == self.nodata

    def is_ocean(self, elevation: int) -> bool:
        return elevation < self.sea_level and not self.is_nodata(elevation)

    def is_land(self, elevation: int) -> bool:
        return elevation >= self.sea_level and not self.is_nodata(elevation)

    def nodata_mask(self) -> np.ndarray:
        if self.nodata is None:
            return np.zeros(self.shape, dtype=np.bool_)
        return self.elevation == self.nodata

    def ocean_mask(self) -> np.ndarray:
        return (self.elevation < self.sea_level) & ~self.nodata_mask()

    def land_mask(self) -> np.ndarray:
        return (self.elevation >= self.sea_level) & ~self.nodata_mask()

    def max_elevation(self) -> int:
        """Highest land sample, 0 when the grid has no land."""
        land = self.land_mask()
        if not land.any():
            return 0
        return int(self.elevation[land].max())

    def open_ocean_count(self) -> int:
        """Number of cells at the open ocean sentinel depth."""
        return int(np.count_nonzero(self.elevation == OPEN_OCEAN_ELEVATION))

    @classmethod
    def from_bytes(
        cls,
        data: bytes | bytearray | memoryview,
        columns: int = NUM_COLUMNS,
        sea_level: int = SEA_LEVEL,
        nodata: int | None = None,
    ) -> "ElevationGrid":
        """Build a grid from little-endian 16-bit samples, ``columns`` per row."""
        check_byte_order()
        rows = _row_count(len(data), columns)
        samples = np.frombuffer(data, dtype=ELEVATION_DTYPE).reshape(rows, columns)
        return cls(samples, sea_level, nodata)


def _row_count(byte_count: int, columns: int) -> int:
    """Validate the fixed-width layout and return the number of rows."""
    if columns <= 0:
        raise MalformedInputError(f"Column count must be positive, got {columns}")
    if byte_count == 0:
        raise MalformedInputError("Input contains no elevation samples")
    if byte_count % BYTES_PER_SAMPLE != 0:
        raise MalformedInputError(
            f"Expected an even number of bytes for 16-bit input, got {byte_count}"
        )
    samples = byte_count // BYTES_PER_SAMPLE
    if samples % columns != 0:
        raise MalformedInputError(
            f"Expected the number of 16-bit samples ({samples}) to be evenly "
            f"divisible by the number of columns ({columns})"
        )
    return samples // columns


def read_elevation_file(
    path: str,
    columns: int = NUM_COLUMNS,
    sea_level: int = SEA_LEVEL,
    nodata: int | None = None,
) -> ElevationGrid:
    """
    Read a flat binary raster of little-endian signed 16-bit samples.

    The file size is validated before any sample is read, so a malformed file
    never produces a partial grid.

    Parameters
    ----------
    path : str
        Path to the raw elevation file (e.g. a GLOBE tile).
    columns : int
        Samples per row, by default NUM_COLUMNS.
    sea_level : int
        Ocean/land threshold.
    nodata : int | None
        Void sample value, if any.

    Returns
    -------
    ElevationGrid
    """
    check_byte_order()
    rows = _row_count(os.path.getsize(path), columns)
    samples = np.fromfile(path, dtype=ELEVATION_DTYPE).reshape(rows, columns)
    return ElevationGrid(samples, sea_level, nodata, copy=False)


def read_elevation_raster(
    path: str,
    band: int = 1,
    sea_level: int = SEA_LEVEL,
) -> ElevationGrid:
    """
    Read a GDAL supported DEM into an ElevationGrid.

    Samples are rounded to ``int16``. The band's nodata value (and NaN) become
    the grid's nodata; when that value does not fit in ``int16`` the lowest
    ``int16`` is used instead.
    """
    check_byte_order()
    dataset = open_dataset(path)
    raster_band = dataset.GetRasterBand(band)
    nodata_value = raster_band.GetNoDataValue()
    data = raster_band.ReadAsArray()
    raster_band = None
    dataset = None

    void = np.zeros(data.shape, dtype=np.bool_)
    if np.issubdtype(data.dtype, np.floating):
        void |= np.isnan(data)
    if nodata_value is not None:
        void |= data == nodata_value

    nodata = None
    if void.any():
        if (
            nodata_value is not None
            and float(nodata_value).is_integer()
            and INT16_INFO.min <= nodata_value <= INT16_INFO.max
        ):
            nodata = int(nodata_value)
        else:
            nodata = int(INT16_INFO.min)

    filled = np.where(void, 0, data)
    elevation = np.clip(np.rint(filled), INT16_INFO.min, INT16_INFO.max).astype(
        np.int16
    )
    if nodata is not None:
        elevation[void] = nodata
    return ElevationGrid(elevation, sea_level, nodata, copy=False)


def read_elevation(
    path: str,
    columns: int = NUM_COLUMNS,
    sea_level: int = SEA_LEVEL,
    nodata: int | None = None,
) -> ElevationGrid:
    """Read raw binary files by extension, anything else through GDAL."""
    if Path(path).suffix.lower() in RAW_SUFFIXES:
        return read_elevation_file(path, columns, sea_level, nodata)
    grid = read_elevation_raster(path, sea_level=sea_level)
    if nodata is not None and grid.nodata is None:
        grid = ElevationGrid(grid.elevation, sea_level, nodata, copy=False)
    return grid

