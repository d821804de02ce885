from .coastline import (
    SeedSet,
    coast_mask,
    coast_mask_rows,
    detect_coastline,
    frontier_dtype,
    label_components,
)

__all__ = [
    "SeedSet",
    "coast_mask",
    "coast_mask_rows",
    "detect_coastline",
    "frontier_dtype",
    "label_components",
]
