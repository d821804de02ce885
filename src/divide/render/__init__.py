from .render import (
    basin_color,
    render_basins,
    render_coastline,
    render_rows,
    render_state,
    write_image,
)

__all__ = [
    "basin_color",
    "render_basins",
    "render_coastline",
    "render_rows",
    "render_state",
    "write_image",
]
