import numpy as np
import pytest
from click.testing import CliRunner
from osgeo import gdal

import divide
from divide._util.raster import read_rgba_image
from divide._util.constants import CONTESTED_COLOR
from divide.cli import main

from .conftest import OPEN_OCEAN, raw_bytes


@pytest.fixture(name="two_ocean_file")
def fixture_two_ocean_file(tmp_path):
    """Raw 16-bit file for a 5x9 grid with oceans at both ends."""
    elevation = np.full((5, 9), 50, dtype=np.int16)
    elevation[:, 0] = OPEN_OCEAN
    elevation[:, 8] = OPEN_OCEAN
    path = tmp_path / "e10g"
    path.write_bytes(raw_bytes(elevation))
    return str(path)


@pytest.fixture(name="odd_file")
def fixture_odd_file(tmp_path):
    path = tmp_path / "odd.bin"
    path.write_bytes(b"\x00\x01\x02")
    return str(path)


def test_classify(tmp_path, two_ocean_file):
    output_path = str(tmp_path / "basins.png")
    labels_path = str(tmp_path / "basins.tif")
    steps = []

    def callback(phase=None, step_name=None, **kwargs):
        if step_name:
            steps.append(step_name)

    summary = divide.classify(
        two_ocean_file,
        output_path,
        columns=9,
        labels_path=labels_path,
        progress_callback=callback,
    )

    assert summary.basin_count == 2
    assert summary.contested_cells == 5
    assert steps == ["Load elevation", "Detect coastline", "Label basins", "Render image"]
    image = read_rgba_image(output_path)
    assert image.shape == (5, 9, 4)
    assert (image[:, 4] == CONTESTED_COLOR).all()

    dataset = gdal.Open(labels_path)
    labels = dataset.GetRasterBand(1).ReadAsArray()
    dataset = None
    assert (labels[:, 1:5] == 1).all()
    assert (labels[:, 5:8] == 2).all()


def test_classify_all_ocean(tmp_path):
    path = tmp_path / "ocean.bin"
    path.write_bytes(raw_bytes(np.full((2, 3), OPEN_OCEAN, dtype=np.int16)))
    with pytest.raises(divide.EmptySeedSetError):
        divide.classify(str(path), str(tmp_path / "out.png"), columns=3)


def test_coastline(tmp_path, two_ocean_file):
    output_path = str(tmp_path / "coast.png")
    seeds = divide.coastline(two_ocean_file, output_path, columns=9)
    assert len(seeds) == 10
    assert seeds.basin_count == 2
    assert read_rgba_image(output_path).shape == (5, 9, 4)


def test_cli_basins(tmp_path, two_ocean_file):
    output_path = tmp_path / "basins.png"
    labels_path = tmp_path / "basins.tif"
    runner = CliRunner()
    result = runner.invoke(
        main,
        [
            "basins",
            "--input_file",
            two_ocean_file,
            "--output_file",
            str(output_path),
            "--labels_file",
            str(labels_path),
            "--columns",
            "9",
        ],
    )
    assert result.exit_code == 0, result.output
    assert output_path.exists()
    assert labels_path.exists()
    assert "Contested" in result.output


def test_cli_coastline_greyscale_policy(tmp_path, two_ocean_file):
    output_path = tmp_path / "coast.tif"
    runner = CliRunner()
    result = runner.invoke(
        main,
        [
            "coastline",
            "--input_file",
            two_ocean_file,
            "--output_file",
            str(output_path),
            "--columns",
            "9",
            "--policy",
            "single",
        ],
    )
    assert result.exit_code == 0, result.output
    assert output_path.exists()


def test_cli_info(two_ocean_file):
    runner = CliRunner()
    result = runner.invoke(main, ["info", "--input_file", two_ocean_file, "--columns", "9"])
    assert result.exit_code == 0, result.output
    assert "Rows" in result.output


def test_cli_malformed_input(tmp_path, odd_file):
    runner = CliRunner()
    result = runner.invoke(
        main,
        [
            "basins",
            "--input_file",
            odd_file,
            "--output_file",
            str(tmp_path / "out.png"),
            "--columns",
            "1",
        ],
    )
    assert result.exit_code != 0
    assert "Error" in result.output
    assert not (tmp_path / "out.png").exists()


def test_cli_strict_unreachable(tmp_path):
    elevation = np.full((5, 5), 100, dtype=np.int16)
    elevation[:, 0] = OPEN_OCEAN
    for row, col in [(1, 3), (3, 3), (2, 2), (2, 4)]:
        elevation[row, col] = -9999
    path = tmp_path / "enclosed.bin"
    path.write_bytes(raw_bytes(elevation))

    runner = CliRunner()
    args = [
        "basins",
        "--input_file",
        str(path),
        "--output_file",
        str(tmp_path / "out.png"),
        "--columns",
        "5",
        "--nodata",
        "-9999",
    ]
    lenient = runner.invoke(main, args)
    assert lenient.exit_code == 0, lenient.output
    assert "not reachable" in lenient.output

    strict = runner.invoke(main, args + ["--strict"])
    assert strict.exit_code != 0
