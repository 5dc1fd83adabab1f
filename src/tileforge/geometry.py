"""Atlas geometry helpers.

Maps tile and frame indices to pixel rectangles inside an atlas image.
The grid is described entirely by cell size, margin, spacing and column
count, so no lookup ever needs to inspect pixel data.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Rect:
    """Axis-aligned pixel rectangle."""

    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    def as_box(self) -> tuple[int, int, int, int]:
        """Return (left, upper, right, lower), the box form Pillow expects."""
        return (self.x, self.y, self.right, self.bottom)


def cell_rect(
    col: int, row: int, cell_width: int, cell_height: int, margin: int = 0, spacing: int = 0
) -> Rect:
    """Rectangle of the cell at (col, row) in a margin/spacing grid."""
    return Rect(
        x=margin + col * (cell_width + spacing),
        y=margin + row * (cell_height + spacing),
        width=cell_width,
        height=cell_height,
    )


def index_rect(
    index: int,
    columns: int,
    cell_width: int,
    cell_height: int,
    margin: int = 0,
    spacing: int = 0,
) -> Rect:
    """Rectangle of the ``index``-th cell, counting row-major.

    Example: columns=16, spacing=1, 32x32 cells; index 16 is col 0, row 1
    and yields Rect(0, 33, 32, 32).
    """
    if columns <= 0:
        raise ValueError(f"columns must be positive, got {columns}")
    if index < 0:
        raise ValueError(f"index must not be negative, got {index}")
    col = index % columns
    row = index // columns
    return cell_rect(col, row, cell_width, cell_height, margin, spacing)


def grid_capacity(image_size: int, cell_size: int, margin: int = 0, spacing: int = 0) -> int:
    """Number of whole cells that fit along one image axis."""
    if cell_size <= 0:
        return 0
    usable = image_size - margin * 2 + spacing
    if usable <= 0:
        return 0
    return usable // (cell_size + spacing)
