import re
import sys
import time
from contextlib import contextmanager

from rich.console import Console
from rich.progress import BarColumn, Progress, TaskID, TextColumn, TimeElapsedColumn

CHUNK_PATTERN = re.compile(r"Chunk\s+(\d+)/(\d+)")


def format_duration(seconds: float) -> str:
    """Convert seconds into compact string like 1h2m32s.

    Durations under a minute keep one decimal place.
    """
    hours, remainder = divmod(int(seconds), 3600)
    minutes, secs_int = divmod(remainder, 60)
    parts = []

    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0 or hours > 0:
        parts.append(f"{minutes}m")

    if hours == 0 and minutes == 0:
        parts.append(f"{seconds:.1f}s")
    else:
        parts.append(f"{secs_int}s")

    return "".join(parts)


class RichProgressDisplay:
    """Renders ``ProgressCallback`` updates on the terminal.

    On a TTY each step gets a rich progress bar that fills from ``Chunk i/n``
    messages and is replaced by a timing line when the step ends. Without a TTY
    plain lines are printed so logs stay readable.
    """

    MAX_STEP_WIDTH = 34

    def __init__(
        self,
        console: Console | None = None,
        show_progress: bool = True,
    ) -> None:
        self.console = console if console is not None else Console(force_terminal=True)
        self.show_progress = show_progress
        self.is_tty = sys.stdout.isatty()
        self.current_phase: str = ""
        self.current_step: str = ""
        self.step_start_time: float = 0.0
        self._progress: Progress | None = None
        self._task: TaskID | None = None

    def _finish_step(self) -> None:
        if not self.current_step:
            return
        elapsed = time.time() - self.step_start_time
        if self._progress is not None:
            self._progress.stop()
            self._progress = None
            self._task = None
        if self.is_tty:
            padded_step = self.current_step.ljust(self.MAX_STEP_WIDTH)
            self.console.print(f"  {padded_step} ({format_duration(elapsed)})")
        else:
            print(f"  {self.current_step} - {format_duration(elapsed)}", flush=True)
        self.current_step = ""

    def _start_step(self, name: str) -> None:
        self.current_step = name
        self.step_start_time = time.time()
        if self.is_tty:
            self._progress = Progress(
                TextColumn("  [bold cyan]{task.description}"),
                BarColumn(bar_width=20),
                TextColumn("{task.percentage:>3.0f}%"),
                TimeElapsedColumn(),
                console=self.console,
                transient=True,
            )
            self._task = self._progress.add_task(name, total=1.0)
            self._progress.start()

    def callback(
        self,
        phase: str | None = None,
        step_name: str | None = None,
        step_number: int = 0,
        total_steps: int = 0,
        message: str = "",
        progress: float = 0.0,
    ) -> None:
        """Progress callback."""
        if not self.show_progress:
            return

        if phase is not None and phase != self.current_phase:
            self._finish_step()
            self.current_phase = phase
            if self.is_tty:
                self.console.print(f"\n[bold cyan]{phase}[/bold cyan]")
            else:
                print(f"\n{phase}", flush=True)

        if step_name is not None:
            if total_steps > 1:
                new_step = f"{step_number}/{total_steps} {step_name}"
            else:
                new_step = step_name
            if new_step != self.current_step:
                self._finish_step()
                self._start_step(new_step)

        match = CHUNK_PATTERN.match(message) if message else None
        if match:
            current = int(match.group(1))
            total = int(match.group(2))
            if self._progress is not None and self._task is not None:
                self._progress.update(self._task, completed=current / max(1, total))
            elif not self.is_tty:
                percentage = int(current / max(1, total) * 100)
                print(
                    f"  {self.current_step}: {percentage}% ({current}/{total})",
                    flush=True,
                )

    @contextmanager
    def progress_context(self, initial_message: str = ""):
        """Context manager that closes the last open step on exit."""
        if not self.show_progress:
            yield self
            return

        try:
            if initial_message:
                self.current_phase = initial_message
                if self.is_tty:
                    self.console.print(f"\n[bold cyan]{initial_message}[/bold cyan]")
                else:
                    print(f"\n{initial_message}", flush=True)
            yield self
        finally:
            self._finish_step()
            self.current_phase = ""
