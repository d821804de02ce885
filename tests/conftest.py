import numpy as np
import pytest

from divide.grid import ElevationGrid

OPEN_OCEAN = -500
NODATA = -9999


@pytest.fixture(name="single_ocean_grid")
def fixture_single_ocean_grid():
    """5x5 grid, open ocean in column 0 and flat land elsewhere."""
    elevation = np.full((5, 5), 100, dtype=np.int16)
    elevation[:, 0] = OPEN_OCEAN
    return ElevationGrid(elevation)


@pytest.fixture(name="two_ocean_grid")
def fixture_two_ocean_grid():
    """5x9 grid, ocean in columns 0 and 8 and land in columns 1 to 7."""
    elevation = np.full((5, 9), 50, dtype=np.int16)
    elevation[:, 0] = OPEN_OCEAN
    elevation[:, 8] = OPEN_OCEAN
    return ElevationGrid(elevation)


@pytest.fixture(name="all_ocean_grid")
def fixture_all_ocean_grid():
    return ElevationGrid(np.full((4, 4), OPEN_OCEAN, dtype=np.int16))


@pytest.fixture(name="enclosed_land_grid")
def fixture_enclosed_land_grid():
    """5x5 grid where land cell (2, 3) is walled in by nodata cells."""
    elevation = np.full((5, 5), 100, dtype=np.int16)
    elevation[:, 0] = OPEN_OCEAN
    for row, col in [(1, 3), (3, 3), (2, 2), (2, 4)]:
        elevation[row, col] = NODATA
    return ElevationGrid(elevation, nodata=NODATA)


@pytest.fixture(name="corridor_grid")
def fixture_corridor_grid():
    """
    Land corridor between two oceans with a dead end hanging off its middle.

        O L L L L L O
        X X X L X X X
        X X X L X X X
    """
    elevation = np.array(
        [
            [OPEN_OCEAN, 10, 10, 10, 10, 10, OPEN_OCEAN],
            [NODATA, NODATA, NODATA, 10, NODATA, NODATA, NODATA],
            [NODATA, NODATA, NODATA, 10, NODATA, NODATA, NODATA],
        ],
        dtype=np.int16,
    )
    return ElevationGrid(elevation, nodata=NODATA)


def raw_bytes(elevation: np.ndarray) -> bytes:
    """Little-endian 16-bit bytes of an elevation array."""
    return np.asarray(elevation, dtype="<i2").tobytes()
