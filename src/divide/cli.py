import sys

import click
from rich.table import Table

from divide import (
    BasinPolicy,
    __version__,
    classify,
    coastline,
)
from divide._util.cli_progress import RichProgressDisplay
from divide._util.constants import DEFAULT_CHUNK_SIZE, NUM_COLUMNS, SEA_LEVEL
from divide._util.timer import console, resource_stats, timer
from divide.errors import PlatformUnsupportedError
from divide.grid import check_byte_order, read_elevation

POLICY_CHOICE = click.Choice([policy.value for policy in BasinPolicy])


def print_banner():
    """Display the Divide banner and version."""
    if sys.stdout.isatty():
        console.print(
            f"[bold cyan]/\\/\\  DIVIDE[/bold cyan]  [dim]Version {__version__}[/dim]\n"
        )
    else:
        print(f"DIVIDE v{__version__}\n")


def input_options(func):
    """Options shared by every command that reads an elevation raster."""
    func = click.option(
        "--nodata",
        help="sample value marking void cells (neither land nor ocean)",
        type=int,
        default=None,
    )(func)
    func = click.option(
        "--sea_level",
        help="samples below this elevation are ocean",
        type=int,
        default=SEA_LEVEL,
    )(func)
    func = click.option(
        "--columns",
        help="samples per row of a raw 16-bit elevation file",
        type=int,
        default=NUM_COLUMNS,
    )(func)
    func = click.option(
        "--input_file",
        help="path to the raw 16-bit elevation file or GDAL supported DEM",
        required=True,
    )(func)
    return func


@click.group(invoke_without_command=True)
@click.pass_context
def main(ctx):
    """The main entry point for the command line interface."""
    print_banner()
    resource_stats.reset()
    try:
        check_byte_order()
    except PlatformUnsupportedError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        raise click.Abort()

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@main.command(name="coastline")
@input_options
@click.option(
    "--output_file",
    help="path to the output image (PNG for .png, GeoTiff otherwise)",
    required=True,
)
@click.option(
    "--policy",
    help="basin id policy for coastal seeds",
    type=POLICY_CHOICE,
    default=BasinPolicy.OCEAN.value,
)
@click.option("--chunk_size", help="rows per processing block", default=DEFAULT_CHUNK_SIZE)
def coastline_cli(
    input_file: str,
    columns: int,
    sea_level: int,
    nodata: int | None,
    output_file: str,
    policy: str,
    chunk_size: int,
):
    """
    Detect coastal cells and draw them over the elevation map.

    Land is drawn as grey levels of elevation, ocean in black and coastal
    cells in green.
    """
    success = False
    try:
        progress_display = RichProgressDisplay()
        with timer("Coastline", spinner=False):
            with progress_display.progress_context("Detecting coastline"):
                seeds = coastline(
                    input_file,
                    output_file,
                    columns,
                    sea_level,
                    nodata,
                    policy,
                    chunk_size,
                    progress_display.callback,
                )
                resource_stats.add_counts(
                    {"Coast": len(seeds), "Contested coast": int(seeds.contested.sum())}
                )
                resource_stats.add_output_file("Coastline image", output_file)
                success = True

        console.print(resource_stats.get_summary_panel(success=success))
    except Exception as exc:
        console.print(
            f"[bold red]Error:[/bold red] coastline failed with the following exception: {str(exc)}"
        )
        if not success:
            console.print(resource_stats.get_summary_panel(success=False))
        raise click.Abort()


@main.command(name="basins")
@input_options
@click.option(
    "--output_file",
    help="path to the output image (PNG for .png, GeoTiff otherwise)",
    required=True,
)
@click.option(
    "--labels_file",
    help="path to an optional GeoTiff of basin ids",
    required=False,
    default=None,
)
@click.option(
    "--policy",
    help="basin id policy for coastal seeds",
    type=POLICY_CHOICE,
    default=BasinPolicy.OCEAN.value,
)
@click.option(
    "--greyscale",
    help="If set, draw land as grey levels instead of basin colors",
    is_flag=True,
)
@click.option(
    "--strict",
    help="If set, fail when land is not reachable from any coast",
    is_flag=True,
)
@click.option("--chunk_size", help="rows per processing block", default=DEFAULT_CHUNK_SIZE)
def basins_cli(
    input_file: str,
    columns: int,
    sea_level: int,
    nodata: int | None,
    output_file: str,
    labels_file: str | None,
    policy: str,
    greyscale: bool,
    strict: bool,
    chunk_size: int,
):
    """
    Label every land cell with the drainage basin of its nearest coast.

    Basins grow inland from the coastline one grid step at a time. Cells
    equally close to two basins are marked contested and drawn in red.
    """
    success = False
    try:
        progress_display = RichProgressDisplay()
        with timer("Basin classification", spinner=False):
            with progress_display.progress_context("Classifying basins"):
                summary = classify(
                    input_file,
                    output_file,
                    columns,
                    sea_level,
                    nodata,
                    policy,
                    palette=not greyscale,
                    labels_path=labels_file,
                    strict=strict,
                    chunk_size=chunk_size,
                    progress_callback=progress_display.callback,
                )
                resource_stats.add_counts(summary.counts())
                resource_stats.add_basin_sizes(summary.largest())
                resource_stats.add_output_file("Basin image", output_file)
                if labels_file is not None:
                    resource_stats.add_output_file("Basin ids", labels_file)
                success = True

        if summary.unreachable_cells:
            console.print(
                f"[bold yellow]Warning:[/bold yellow] {summary.unreachable_cells:,} "
                "land cell(s) are not reachable from any coast"
            )
        console.print(resource_stats.get_summary_panel(success=success))
    except Exception as exc:
        console.print(
            f"[bold red]Error:[/bold red] basins failed with the following exception: {str(exc)}"
        )
        if not success:
            console.print(resource_stats.get_summary_panel(success=False))
        raise click.Abort()


@main.command(name="info")
@input_options
def info_cli(
    input_file: str,
    columns: int,
    sea_level: int,
    nodata: int | None,
):
    """Print the dimensions and land / ocean cell counts of an elevation raster."""
    try:
        grid = read_elevation(input_file, columns, sea_level, nodata)
    except Exception as exc:
        console.print(
            f"[bold red]Error:[/bold red] info failed with the following exception: {str(exc)}"
        )
        raise click.Abort()

    table = Table(title="Elevation Grid", show_header=True, header_style="bold cyan")
    table.add_column("Property", style="blue")
    table.add_column("Value", style="green", justify="right")
    table.add_row("Rows", f"{grid.rows:,}")
    table.add_row("Columns", f"{grid.cols:,}")
    table.add_row("Sea level", str(grid.sea_level))
    table.add_row("Land cells", f"{int(grid.land_mask().sum()):,}")
    table.add_row("Ocean cells", f"{int(grid.ocean_mask().sum()):,}")
    table.add_row("Open ocean cells", f"{grid.open_ocean_count():,}")
    table.add_row("Nodata cells", f"{int(grid.nodata_mask().sum()):,}")
    table.add_row("Max elevation", str(grid.max_elevation()))
    console.print(table)


if __name__ == "__main__":
    main()
