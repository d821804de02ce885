"""Exception types raised while loading and classifying elevation grids."""

import numpy as np


class DivideError(Exception):
    """Base class for all errors raised by divide."""


class MalformedInputError(DivideError, ValueError):
    """The input does not match the fixed-width 16-bit raster layout."""


class PlatformUnsupportedError(DivideError, RuntimeError):
    """The host byte order is not little-endian."""


class EmptySeedSetError(DivideError, ValueError):
    """No coastal cells were found, so there is nothing to expand from."""


class UnreachableLandError(DivideError):
    """Land cells were left unvisited after labeling.

    Args:
        cells: ``(n, 2)`` array of ``(row, col)`` pairs that no coast reaches.
    """

    def __init__(self, cells: np.ndarray) -> None:
        self.cells = cells
        super().__init__(
            f"{len(cells)} land cell(s) are not reachable from any coast"
        )
