from .basins import (
    BasinLabels,
    expand_frontier,
    initial_state,
    label_basins,
    write_labels,
)
from .summary import BasinSummary, summarize_basins

__all__ = [
    "BasinLabels",
    "BasinSummary",
    "expand_frontier",
    "initial_state",
    "label_basins",
    "summarize_basins",
    "write_labels",
]
