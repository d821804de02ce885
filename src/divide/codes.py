from enum import Enum, IntEnum, unique

from divide._util.constants import (
    CELL_COAST,
    CELL_CONTESTED,
    CELL_LABELED,
    CELL_NODATA,
    CELL_OCEAN,
    CELL_UNVISITED,
)


@unique
class CellState(IntEnum):
    """Classification state of a grid cell.

    Every cell starts as ``OCEAN``, ``NODATA`` or ``UNVISITED`` and a land cell
    moves out of ``UNVISITED`` at most once during labeling.

    | Code | State |
    | :-: | :-- |
    | 0 | UNVISITED |
    | 1 | OCEAN |
    | 2 | COAST |
    | 3 | LABELED |
    | 4 | CONTESTED |
    | 5 | NODATA |

    """

    UNVISITED = CELL_UNVISITED
    OCEAN = CELL_OCEAN
    COAST = CELL_COAST
    LABELED = CELL_LABELED
    CONTESTED = CELL_CONTESTED
    NODATA = CELL_NODATA


@unique
class BasinPolicy(str, Enum):
    """How basin ids are assigned to coastal seed cells.

    * ``OCEAN``: one id per connected ocean component a coast cell touches.
    * ``COAST``: one id per connected run of coast cells.
    * ``SINGLE``: all ocean is a single sea, every seed gets id 1.
    """

    OCEAN = "ocean"
    COAST = "coast"
    SINGLE = "single"
