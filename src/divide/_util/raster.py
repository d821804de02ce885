from collections.abc import Iterator
from pathlib import Path

import numpy as np
from osgeo import gdal

gdal.UseExceptions()

IMAGE_DRIVERS = {".png": "PNG", ".tif": "GTiff", ".tiff": "GTiff"}


def row_chunks(rows: int, chunk_size: int) -> Iterator[tuple[int, int]]:
    """Yield ``(row_start, row_end)`` blocks covering ``range(rows)``.

    A ``chunk_size`` of 1 or less yields the whole grid as one block.
    """
    if chunk_size <= 1:
        chunk_size = max(rows, 1)
    for row_start in range(0, rows, chunk_size):
        yield row_start, min(row_start + chunk_size, rows)


def open_dataset(path: str, access=gdal.GA_ReadOnly) -> gdal.Dataset:
    dataset = gdal.Open(path, access)
    if dataset is None:
        raise ValueError(f"Could not open raster file {path}")
    return dataset


def create_dataset(
    path: str,
    nodata_value: float | None,
    data_type: int,
    x_size: int,
    y_size: int,
    geotransform: tuple | None = None,
    projection: str | None = None,
    band_count: int = 1,
) -> gdal.Dataset:
    """Create a tiled, compressed GeoTIFF."""
    driver = gdal.GetDriverByName("GTiff")
    dataset = driver.Create(
        path,
        x_size,
        y_size,
        band_count,
        data_type,
        options=["TILED=YES", "COMPRESS=DEFLATE", "BIGTIFF=IF_SAFER"],
    )
    if geotransform is not None:
        dataset.SetGeoTransform(geotransform)
    if projection:
        dataset.SetProjection(projection)
    if nodata_value is not None:
        for i in range(1, band_count + 1):
            dataset.GetRasterBand(i).SetNoDataValue(nodata_value)
    return dataset


def image_driver_name(path: str) -> str:
    return IMAGE_DRIVERS.get(Path(path).suffix.lower(), "GTiff")


def write_bgra_image(path: str, bgra: np.ndarray) -> None:
    """
    Write a ``(rows, cols, 4)`` BGRA buffer as an RGBA image.

    The driver is picked from the file extension (PNG for ``.png``, GeoTIFF
    otherwise). The image is assembled in a MEM dataset and copied once to
    the destination.

    Parameters
    ----------
    path : str
        Output file path, ``/vsimem/`` paths are accepted.
    bgra : np.ndarray
        uint8 array with the channels in blue, green, red, alpha order.
    """
    if bgra.ndim != 3 or bgra.shape[2] != 4:
        raise ValueError(f"Expected a (rows, cols, 4) buffer, got {bgra.shape}")
    rows, cols, _ = bgra.shape

    mem_ds = gdal.GetDriverByName("MEM").Create("", cols, rows, 4, gdal.GDT_Byte)
    interpretations = (
        gdal.GCI_RedBand,
        gdal.GCI_GreenBand,
        gdal.GCI_BlueBand,
        gdal.GCI_AlphaBand,
    )
    # BGRA channel index for each RGBA band
    for band_index, (channel, interpretation) in enumerate(
        zip((2, 1, 0, 3), interpretations), start=1
    ):
        band = mem_ds.GetRasterBand(band_index)
        band.WriteArray(np.ascontiguousarray(bgra[:, :, channel]))
        band.SetColorInterpretation(interpretation)

    driver = gdal.GetDriverByName(image_driver_name(path))
    out_ds = driver.CreateCopy(path, mem_ds, strict=0)
    out_ds.FlushCache()
    out_ds = None
    mem_ds = None


def read_rgba_image(path: str) -> np.ndarray:
    """Read a 4 band image back as a ``(rows, cols, 4)`` BGRA buffer."""
    dataset = open_dataset(path)
    rgba = [dataset.GetRasterBand(i).ReadAsArray() for i in range(1, 5)]
    dataset = None
    return np.dstack((rgba[2], rgba[1], rgba[0], rgba[3])).astype(np.uint8)
