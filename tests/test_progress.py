from divide._util.cli_progress import RichProgressDisplay, format_duration
from divide._util.progress import ProgressTracker, chunk_message
from divide._util.timer import ResourceStats
from divide._util.timer import format_duration as format_long_duration


class RecordingCallback:
    def __init__(self):
        self.calls = []

    def __call__(self, **kwargs):
        self.calls.append(kwargs)


def test_tracker_emits_phase_then_steps():
    callback = RecordingCallback()
    tracker = ProgressTracker(callback, "Classify basins", total_steps=2)
    tracker.update(1, step_name="Load elevation")
    tracker.update(step_name="Render image", progress=3.0)

    assert callback.calls[0] == {"phase": "Classify basins"}
    assert callback.calls[1]["step_name"] == "Load elevation"
    assert callback.calls[1]["step_number"] == 1
    assert callback.calls[2]["step_number"] == 2
    assert callback.calls[2]["total_steps"] == 2
    assert callback.calls[2]["progress"] == 1.0


def test_tracker_without_callback():
    tracker = ProgressTracker(None, "Label basins")
    tracker.update(1, step_name="Seed frontier")
    assert tracker.current_step == 1


def test_chunk_message():
    assert chunk_message(3, 12) == "Chunk 3/12"


def test_format_duration():
    assert format_duration(5.3) == "5.3s"
    assert format_duration(125) == "2m5s"
    assert format_duration(3725) == "1h2m5s"
    assert format_long_duration(125) == "2 minutes and 5 seconds"
    assert format_long_duration(0) == "0 seconds"


def test_plain_progress_output(capsys):
    display = RichProgressDisplay()
    display.is_tty = False
    with display.progress_context("Classifying basins"):
        display.callback(phase="Classify basins")
        display.callback(step_name="Detect coastline", step_number=2, total_steps=4)
        display.callback(message=chunk_message(1, 2), progress=0.5)
        display.callback(step_name="Render image", step_number=4, total_steps=4)

    output = capsys.readouterr().out
    assert "Classify basins" in output
    assert "2/4 Detect coastline: 50% (1/2)" in output
    assert "4/4 Render image - " in output


def test_silent_display(capsys):
    display = RichProgressDisplay(show_progress=False)
    with display.progress_context("Classifying basins"):
        display.callback(phase="Classify basins", step_name="Load elevation")
    assert capsys.readouterr().out == ""


def test_resource_stats_reset():
    stats = ResourceStats()
    stats.add_counts({"Coast": 3})
    stats.add_output_file("Basin image", "/vsimem/out.png")
    stats.add_basin_sizes([(1, 10), (2, 4)])
    assert stats.get_basin_table() is not None

    stats.reset()
    assert stats.counts == {}
    assert stats.get_basin_table() is None
