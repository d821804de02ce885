"""Timing, output file and basin tracking for divide commands."""

import os
import time
from contextlib import contextmanager
from pathlib import Path

from rich.console import Console, Group
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table
from rich.text import Text

console = Console(force_terminal=True)

TOTAL = "Total processing"


class ResourceStats:
    """Collects step timings, written files and basin counts for the summary."""

    def __init__(self) -> None:
        self.stats: dict[str, float] = {}
        self.operation_order: list[str] = []
        self.output_files: list[tuple[str, Path]] = []
        self.counts: dict[str, int] = {}
        self.basin_sizes: list[tuple[int, int]] = []

    def reset(self) -> None:
        self.__init__()  # type: ignore[misc]

    def add_stats(self, description: str, duration: float) -> None:
        if description not in self.stats and description != TOTAL:
            self.operation_order.append(description)
        self.stats[description] = duration

    def add_output_file(self, description: str, file_path: Path | str) -> None:
        self.output_files.append((description, Path(file_path)))

    def add_counts(self, counts: dict[str, int]) -> None:
        self.counts.update(counts)

    def add_basin_sizes(self, basin_sizes: list[tuple[int, int]]) -> None:
        """Record ``(basin_id, cell_count)`` pairs, largest first."""
        self.basin_sizes = list(basin_sizes)

    @staticmethod
    def format_compact_duration(seconds: float) -> str:
        hours, remainder = divmod(int(seconds), 3600)
        minutes, secs = divmod(remainder, 60)
        parts = []

        if hours > 0:
            parts.append(f"{hours}h")
        if minutes > 0 or hours > 0:
            parts.append(f"{minutes}m")
        parts.append(f"{secs}s")

        return "".join(parts)

    @staticmethod
    def format_file_size(size_bytes: int) -> str:
        size: float = float(size_bytes)
        for unit in ["B", "KB", "MB", "GB", "TB"]:
            if size < 1024:
                return f"{size:.1f} {unit}"
            size /= 1024
        return f"{size:.1f} PB"

    def get_timing_table(self) -> Table:
        table = Table(
            title="Operation Timing", show_header=True, header_style="bold cyan"
        )
        table.add_column("Operation", style="blue", no_wrap=False)
        table.add_column("Duration", style="cyan", justify="right")
        table.add_column("Timeline", style="bright_blue")

        chart_data = {k: v for k, v in self.stats.items() if k != TOTAL}
        if not chart_data:
            return table

        max_duration = max(chart_data.values())
        chart_width = 30
        for label in self.operation_order:
            if label not in chart_data:
                continue
            duration = chart_data[label]
            bar_length = (
                int((duration / max_duration) * chart_width) if max_duration > 0 else 0
            )
            table.add_row(
                label, self.format_compact_duration(duration), "█" * bar_length
            )

        return table

    def get_basin_table(self, limit: int = 10) -> Table | None:
        """Cell counts per state and the largest basins."""
        if not self.counts and not self.basin_sizes:
            return None

        table = Table(title="Basins", show_header=True, header_style="bold cyan")
        table.add_column("Item", style="blue")
        table.add_column("Cells", style="green", justify="right")

        for name, count in self.counts.items():
            table.add_row(name, f"{count:,}")
        for basin_id, count in self.basin_sizes[:limit]:
            table.add_row(f"Basin {basin_id}", f"{count:,}")
        if len(self.basin_sizes) > limit:
            table.add_row(f"... {len(self.basin_sizes) - limit} more", "")

        return table

    def get_output_files_table(self) -> Table | None:
        if not self.output_files:
            return None

        table = Table(title="Output Files", show_header=True, header_style="bold cyan")
        table.add_column("Type", style="blue")
        table.add_column("Path", style="cyan", no_wrap=False)
        table.add_column("Size", style="green", justify="right")

        for description, file_path in self.output_files:
            if file_path.exists():
                size = os.path.getsize(file_path)
                table.add_row(description, str(file_path), self.format_file_size(size))
            else:
                table.add_row(description, str(file_path), "[red]Not found[/red]")

        return table

    def get_summary_panel(self, success: bool = True) -> Panel:
        renderables: list = []

        if success:
            renderables.append(
                Text("✓ Operation completed successfully", style="bold green")
            )
        else:
            renderables.append(Text("✗ Operation failed", style="bold red"))
        renderables.append(Text())

        if TOTAL in self.stats:
            renderables.append(
                Text.assemble(
                    ("Total time: ", "bold yellow"),
                    (self.format_compact_duration(self.stats[TOTAL]), "cyan"),
                )
            )
            renderables.append(Text())

        if self.stats:
            renderables.append(self.get_timing_table())
            renderables.append(Text())

        basin_table = self.get_basin_table()
        if basin_table:
            renderables.append(basin_table)
            renderables.append(Text())

        output_table = self.get_output_files_table()
        if output_table:
            renderables.append(output_table)

        return Panel(
            Group(*renderables),
            title="[bold blue]Summary[/bold blue]",
            border_style="blue",
            padding=(1, 2),
        )


resource_stats = ResourceStats()


def format_duration(seconds: float) -> str:
    """Long form duration, e.g. "2 minutes and 5 seconds"."""
    hours, remainder = divmod(int(seconds), 3600)
    minutes, secs = divmod(remainder, 60)
    parts = []

    if hours > 0:
        parts.append(f"{hours} hour{'s' if hours != 1 else ''}")
    if minutes > 0:
        parts.append(f"{minutes} minute{'s' if minutes != 1 else ''}")
    if secs > 0 or not parts:
        parts.append(f"{secs} second{'s' if secs != 1 else ''}")

    if len(parts) > 1:
        return f"{', '.join(parts[:-1])} and {parts[-1]}"
    return parts[0]


@contextmanager
def timer(
    description: str,
    silent: bool = False,
    spinner: bool = False,
):
    """Time a block, record it in ``resource_stats`` and print the duration.

    Example:
        >>> with timer("Label basins"):
        ...     label_basins(grid, seeds)
        ✓ Label basins completed in 12 seconds
    """
    start_time = time.time()

    if spinner and not silent:
        with Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            TimeElapsedColumn(),
            console=console,
            transient=True,
        ) as progress:
            progress.add_task(description, total=None)
            try:
                yield
            finally:
                duration = time.time() - start_time
                resource_stats.add_stats(description, duration)
                progress.stop()
                console.print(
                    f"[green]✓[/green] {description} completed in "
                    f"[bold cyan]{format_duration(duration)}[/bold cyan]"
                )
    else:
        if not silent:
            console.print(f"[bold blue]{description}...[/bold blue]")
        try:
            yield
        finally:
            duration = time.time() - start_time
            resource_stats.add_stats(description, duration)
            if not silent:
                console.print(
                    f"[green]✓[/green] {description} completed in "
                    f"[bold cyan]{format_duration(duration)}[/bold cyan]"
                )
