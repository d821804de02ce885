import numpy as np

# GLOBE tiles are 10800 samples wide
NUM_COLUMNS = 10800
BYTES_PER_SAMPLE = 2
ELEVATION_DTYPE = np.dtype("<i2")

SEA_LEVEL = 0
OPEN_OCEAN_ELEVATION = -500

# rows per block for the row-parallel scans
DEFAULT_CHUNK_SIZE = 2048

# left, up, right, down
NEIGHBOR_OFFSETS = ((0, -1), (-1, 0), (0, 1), (1, 0))

CELL_UNVISITED = 0
CELL_OCEAN = 1
CELL_COAST = 2
CELL_LABELED = 3
CELL_CONTESTED = 4
CELL_NODATA = 5

NO_BASIN = 0
UNREACHED_DISTANCE = -1

# BGRA
OCEAN_COLOR = (0, 0, 0, 255)
COAST_COLOR = (0, 255, 0, 255)
CONTESTED_COLOR = (0, 0, 255, 255)
NODATA_COLOR = (0, 0, 0, 0)
MID_GREY = 128

# BGRA, chosen to stay distinct from the coast and contested colors
BASIN_PALETTE = np.array(
    [
        [180, 119, 31, 255],
        [14, 127, 255, 255],
        [189, 103, 148, 255],
        [75, 86, 140, 255],
        [194, 119, 227, 255],
        [34, 189, 188, 255],
        [207, 190, 23, 255],
        [232, 199, 174, 255],
        [120, 187, 255, 255],
        [213, 176, 197, 255],
        [148, 156, 196, 255],
        [141, 219, 219, 255],
    ],
    dtype=np.uint8,
)

RAW_SUFFIXES = ("", ".bin", ".raw", ".dem")
