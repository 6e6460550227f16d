"""Grid engine for the playfield.

The playfield is made of two aligned numpy arrays: a boolean occupancy grid
and a colour layer holding the display colour of every locked cell (``None``
for empty cells).  All functions here are pure.  Arrays they return are fresh
allocations flagged read-only so that a snapshot can never be edited in place.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np
from numpy.typing import NDArray

from .tetromino import Mask, Piece


# Dimensions of the standard board.
WIDTH = 10
HEIGHT = 20

# Points awarded per cleared row.
LINE_CLEAR_SCORE = 100

Grid = NDArray[np.bool_]
ColorLayer = NDArray[np.object_]
Position = Tuple[int, int]  # (row, col)


def _freeze(array: NDArray) -> NDArray:
    array.flags.writeable = False
    return array


def _mask_cells(anchor: Position, mask: Mask) -> Tuple[NDArray, NDArray]:
    """Return the grid rows and columns covered by ``mask`` placed at ``anchor``."""

    rows, cols = np.nonzero(mask)
    return rows + anchor[0], cols + anchor[1]


def _cells_on_grid(anchor: Position, mask: Mask, shape: Tuple[int, int]) -> Tuple[NDArray, NDArray]:
    height, width = shape
    rows, cols = _mask_cells(anchor, mask)
    inside = (rows >= 0) & (rows < height) & (cols >= 0) & (cols < width)
    return rows[inside], cols[inside]


def empty_grid(height: int = HEIGHT, width: int = WIDTH) -> Grid:
    """Return a new grid with every cell free."""

    return _freeze(np.zeros((height, width), dtype=bool))


def empty_color_layer(height: int = HEIGHT, width: int = WIDTH) -> ColorLayer:
    """Return a new colour layer with every cell unset."""

    return _freeze(np.full((height, width), None, dtype=object))


def is_position_valid(
    anchor: Position, mask: Mask, height: int = HEIGHT, width: int = WIDTH
) -> bool:
    """Return ``True`` if ``mask`` at ``anchor`` passes the boundary checks.

    The anchor row must be strictly below the top row, so row ``0`` is
    rejected even though pieces spawn there.  The lowest occupied row may reach
    ``height`` (one past the floor); that case is left to
    :func:`check_collision`, which turns it into a landing.  Every occupied
    column must lie in ``[0, width)``.  Occupancy is not consulted.
    """

    rows, cols = _mask_cells(anchor, mask)
    if anchor[0] <= 0:
        return False
    if rows.size and rows.max() > height:
        return False
    return not (cols.size and (cols.min() < 0 or cols.max() >= width))


def check_collision(anchor: Position, mask: Mask, grid: Grid) -> bool:
    """Return ``True`` if ``mask`` at ``anchor`` hits the floor or the stack."""

    height, width = grid.shape
    rows, cols = _mask_cells(anchor, mask)
    if np.any(rows >= height):
        return True
    # Cells outside the columns are never indexed; negative indices would wrap.
    inside = (rows >= 0) & (cols >= 0) & (cols < width)
    return bool(np.any(grid[rows[inside], cols[inside]]))


def can_place(anchor: Position, mask: Mask, grid: Grid) -> bool:
    """Return ``True`` if every cell of ``mask`` at ``anchor`` is on a free grid cell."""

    height, width = grid.shape
    rows, cols = _mask_cells(anchor, mask)
    if np.any((rows < 0) | (rows >= height) | (cols < 0) | (cols >= width)):
        return False
    return not bool(np.any(grid[rows, cols]))


def place_shape(anchor: Position, mask: Mask, grid: Grid) -> Grid:
    """Return a copy of ``grid`` with the cells covered by ``mask`` set.

    Existing cells are kept, so the result is the union of the grid and the
    translated mask.  Cells falling outside the grid are dropped.
    """

    placed = grid.copy()
    rows, cols = _cells_on_grid(anchor, mask, grid.shape)
    placed[rows, cols] = True
    return _freeze(placed)


def place_colors(anchor: Position, piece: Piece, colors: ColorLayer) -> ColorLayer:
    """Return a copy of ``colors`` painted with ``piece.color`` under its mask.

    Only unset cells are painted; a cell that already has a colour keeps it.
    """

    layer = colors.copy()
    rows, cols = _cells_on_grid(anchor, piece.mask, colors.shape)
    for row, col in zip(rows, cols):
        if layer[row, col] is None:
            layer[row, col] = piece.color
    return _freeze(layer)


def row_is_filled(row: NDArray[np.bool_]) -> bool:
    """Return ``True`` if every cell in ``row`` is occupied."""

    return bool(np.all(row))


def count_filled_rows(grid: Grid) -> int:
    """Return how many rows of ``grid`` are completely filled."""

    return int(np.count_nonzero(np.all(grid, axis=1)))


def is_terminal(grid: Grid) -> bool:
    """Return ``True`` if any cell of the top row is occupied."""

    return bool(np.any(grid[0]))


def clear_filled_rows(
    grid: Grid, colors: ColorLayer, score: int
) -> Tuple[Grid, ColorLayer, int]:
    """Remove every filled row at once and return the new grid, colours and score.

    Rows that are not filled keep their relative order and are pushed down; as
    many empty rows as were cleared are added on top so the height does not
    change.  ``LINE_CLEAR_SCORE`` points are added per cleared row.
    """

    filled = np.all(grid, axis=1)
    cleared = int(np.count_nonzero(filled))
    if not cleared:
        return grid, colors, score

    width = grid.shape[1]
    new_grid = np.vstack((np.zeros((cleared, width), dtype=bool), grid[~filled]))
    new_colors = np.vstack(
        (np.full((cleared, width), None, dtype=object), colors[~filled])
    )
    return _freeze(new_grid), _freeze(new_colors), score + cleared * LINE_CLEAR_SCORE
