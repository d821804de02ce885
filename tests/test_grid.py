import sys

import numpy as np
import pytest
from osgeo import gdal

from divide.errors import MalformedInputError, PlatformUnsupportedError
from divide.grid import (
    ElevationGrid,
    check_byte_order,
    read_elevation,
    read_elevation_file,
    read_elevation_raster,
)

from .conftest import NODATA, OPEN_OCEAN, raw_bytes


@pytest.fixture(name="small_elevation")
def fixture_small_elevation():
    return np.array(
        [
            [-500, -12, 0],
            [5, 300, -500],
        ],
        dtype=np.int16,
    )


@pytest.fixture(name="nodata_raster_path")
def fixture_nodata_raster_path():
    """Int16 GeoTIFF in memory with a nodata value of -9999."""
    filepath = "/vsimem/test_dem.tif"
    data = np.array(
        [
            [-500, 10, 20],
            [NODATA, 30, -3],
        ],
        dtype=np.int16,
    )
    driver = gdal.GetDriverByName("GTiff")
    dataset = driver.Create(filepath, 3, 2, 1, gdal.GDT_Int16)
    band = dataset.GetRasterBand(1)
    band.SetNoDataValue(NODATA)
    band.WriteArray(data)
    band.FlushCache()
    dataset.FlushCache()
    dataset = None
    yield filepath
    gdal.Unlink(filepath)


@pytest.fixture(name="float_raster_path")
def fixture_float_raster_path():
    """Float32 GeoTIFF in memory with NaN voids and an out of range nodata."""
    filepath = "/vsimem/test_dem_float.tif"
    data = np.array(
        [
            [-500.2, 10.6, np.nan],
            [-100000.0, 40000.0, 0.4],
        ],
        dtype=np.float32,
    )
    driver = gdal.GetDriverByName("GTiff")
    dataset = driver.Create(filepath, 3, 2, 1, gdal.GDT_Float32)
    band = dataset.GetRasterBand(1)
    band.SetNoDataValue(-100000.0)
    band.WriteArray(data)
    band.FlushCache()
    dataset.FlushCache()
    dataset = None
    yield filepath
    gdal.Unlink(filepath)


def test_from_bytes(small_elevation):
    grid = ElevationGrid.from_bytes(raw_bytes(small_elevation), columns=3)
    assert grid.shape == (2, 3)
    assert grid.size == 6
    assert np.array_equal(grid.elevation, small_elevation)
    assert grid.elevation.flags.c_contiguous


def test_from_bytes_odd_length():
    with pytest.raises(MalformedInputError):
        ElevationGrid.from_bytes(b"\x01\x00\x02", columns=1)


def test_from_bytes_not_divisible(small_elevation):
    data = raw_bytes(small_elevation)
    with pytest.raises(MalformedInputError):
        ElevationGrid.from_bytes(data, columns=4)


def test_from_bytes_empty_and_bad_columns(small_elevation):
    with pytest.raises(MalformedInputError):
        ElevationGrid.from_bytes(b"", columns=3)
    with pytest.raises(MalformedInputError):
        ElevationGrid.from_bytes(raw_bytes(small_elevation), columns=0)


def test_malformed_input_is_a_value_error():
    assert issubclass(MalformedInputError, ValueError)


def test_elevation_is_immutable(small_elevation):
    grid = ElevationGrid(small_elevation)
    with pytest.raises(ValueError):
        grid.elevation[0, 0] = 1
    # the grid keeps its own copy
    small_elevation[0, 0] = 1
    assert grid.get(0, 0) == -500


def test_get(small_elevation):
    grid = ElevationGrid(small_elevation)
    assert grid.get(1, 1) == 300
    assert isinstance(grid.get(1, 1), int)
    for row, col in [(-1, 0), (0, -1), (2, 0), (0, 3)]:
        with pytest.raises(IndexError):
            grid.get(row, col)


def test_neighbors():
    grid = ElevationGrid(np.zeros((3, 3), dtype=np.int16))
    # left, up, right, down
    assert grid.neighbors(1, 1) == [(1, 0), (0, 1), (1, 2), (2, 1)]
    assert grid.neighbors(0, 0) == [(0, 1), (1, 0)]
    assert grid.neighbors(2, 2) == [(2, 1), (1, 2)]
    assert grid.neighbors(2, 1) == [(2, 0), (1, 1), (2, 2)]
    with pytest.raises(IndexError):
        grid.neighbors(3, 0)


def test_neighbors_never_wrap():
    grid = ElevationGrid(np.zeros((1, 4), dtype=np.int16))
    assert grid.neighbors(0, 0) == [(0, 1)]
    assert grid.neighbors(0, 3) == [(0, 2)]


def test_sea_level(small_elevation):
    grid = ElevationGrid(small_elevation)
    assert grid.is_ocean(OPEN_OCEAN)
    assert grid.is_ocean(-1)
    assert not grid.is_ocean(0)
    assert grid.is_land(0)
    expected_ocean = np.array([[True, True, False], [False, False, True]])
    assert np.array_equal(grid.ocean_mask(), expected_ocean)
    assert np.array_equal(grid.land_mask(), ~expected_ocean)

    raised = ElevationGrid(small_elevation, sea_level=10)
    assert raised.is_ocean(5)
    assert raised.land_mask().sum() == 1


def test_nodata(small_elevation):
    grid = ElevationGrid(small_elevation, nodata=-12)
    assert not grid.is_ocean(-12)
    assert not grid.is_land(-12)
    assert grid.nodata_mask()[0, 1]
    assert not grid.ocean_mask()[0, 1]
    assert not grid.land_mask()[0, 1]


def test_max_elevation(small_elevation):
    assert ElevationGrid(small_elevation).max_elevation() == 300
    ocean = ElevationGrid(np.full((2, 2), OPEN_OCEAN, dtype=np.int16))
    assert ocean.max_elevation() == 0
    assert ocean.open_ocean_count() == 4


def test_read_elevation_file(tmp_path, small_elevation):
    path = tmp_path / "e10g"
    path.write_bytes(raw_bytes(small_elevation))
    grid = read_elevation_file(str(path), columns=3)
    assert np.array_equal(grid.elevation, small_elevation)

    same = read_elevation(str(path), columns=3)
    assert np.array_equal(same.elevation, small_elevation)


def test_read_elevation_file_odd_length(tmp_path):
    path = tmp_path / "odd.bin"
    path.write_bytes(b"\x00\x01\x02")
    with pytest.raises(MalformedInputError):
        read_elevation_file(str(path), columns=1)


def test_read_elevation_raster(nodata_raster_path):
    grid = read_elevation_raster(nodata_raster_path)
    assert grid.shape == (2, 3)
    assert grid.nodata == NODATA
    assert grid.nodata_mask()[1, 0]
    assert grid.nodata_mask().sum() == 1
    assert grid.get(1, 2) == -3
    assert read_elevation(nodata_raster_path).nodata == NODATA


def test_read_elevation_raster_float(float_raster_path):
    grid = read_elevation_raster(float_raster_path)
    assert grid.nodata == np.iinfo(np.int16).min
    assert np.array_equal(
        grid.nodata_mask(), np.array([[False, False, True], [True, False, False]])
    )
    assert grid.get(0, 0) == -500
    assert grid.get(0, 1) == 11
    assert grid.get(1, 1) == np.iinfo(np.int16).max
    assert grid.get(1, 2) == 0


def test_big_endian_host(monkeypatch, small_elevation):
    monkeypatch.setattr(sys, "byteorder", "big")
    with pytest.raises(PlatformUnsupportedError):
        check_byte_order()
    with pytest.raises(PlatformUnsupportedError):
        ElevationGrid.from_bytes(raw_bytes(small_elevation), columns=3)
