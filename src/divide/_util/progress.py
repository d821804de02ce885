from typing import Protocol, runtime_checkable


@runtime_checkable
class ProgressCallback(Protocol):
    """Protocol for progress reporting callbacks.

    A classification run is reported as a small hierarchy:

    * **Phase**: the whole operation (e.g., 'Classifying basins').
    * **Step**: a stage of the pipeline (e.g., 'Detect coastline').
    * **Message**: detail within a step (e.g., 'Chunk 3/12').
    * **Progress**: float in [0.0, 1.0] for the current step.

    Args:
        phase (str | None): Name of the phase. ``None`` keeps the current one.
        step_name (str | None): Name of the step. ``None`` keeps the current one.
        step_number (int): 1-indexed step number. Defaults to 0.
        total_steps (int): Number of steps in the phase. Defaults to 0.
        message (str): Status detail for the current step.
        progress (float): Completion of the current step, 0.0 to 1.0.
    """

    def __call__(
        self,
        phase: str | None = None,
        step_name: str | None = None,
        step_number: int = 0,
        total_steps: int = 0,
        message: str = "",
        progress: float = 0.0,
    ) -> None:
        """Report progress for an operation."""
        ...


def silent_callback(
    phase: str | None = None,
    step_name: str | None = None,
    step_number: int = 0,
    total_steps: int = 0,
    message: str = "",
    progress: float = 0.0,
) -> None:
    """Default callback, reports nothing."""


class ProgressTracker:
    """Keeps step state for a phase and forwards updates to a callback.

    Args:
        callback: Callback receiving the updates, ``None`` for silent.
        phase: Name of the phase, emitted once on construction.
        total_steps: Number of steps the phase will report.
    """

    def __init__(
        self,
        callback: ProgressCallback | None,
        phase: str,
        total_steps: int = 1,
    ) -> None:
        self.callback = callback if callback is not None else silent_callback
        self.phase = phase
        self.total_steps = max(1, total_steps)
        self.current_step = 0
        self.callback(phase=phase)

    def update(
        self,
        step: int | None = None,
        step_name: str = "",
        message: str = "",
        progress: float | None = None,
    ) -> None:
        """Start (or advance) a step.

        Args:
            step: Step number to jump to, ``None`` advances by one.
            step_name: Name of the step.
            message: Optional status detail.
            progress: Completion of the step, clamped to [0.0, 1.0].
        """
        if step is not None:
            self.current_step = step
        else:
            self.current_step += 1

        progress = 0.0 if progress is None else max(0.0, min(1.0, progress))

        self.callback(
            step_name=step_name if step_name else None,
            step_number=self.current_step,
            total_steps=self.total_steps,
            progress=progress,
            message=message,
        )


def chunk_message(index: int, total: int) -> str:
    """Message format the progress displays parse for block progress."""
    return f"Chunk {index}/{total}"
