from __future__ import annotations

import numpy as np
import pytest

from blockfall.board import (
    HEIGHT,
    WIDTH,
    can_place,
    check_collision,
    clear_filled_rows,
    count_filled_rows,
    empty_color_layer,
    empty_grid,
    is_position_valid,
    is_terminal,
    place_colors,
    place_shape,
    row_is_filled,
)
from blockfall.tetromino import TetrominoType, create_piece, piece_mask

O_MASK = piece_mask(TetrominoType.O)
I_MASK = piece_mask(TetrominoType.I)


def _grid_with(cells) -> np.ndarray:
    grid = np.zeros((HEIGHT, WIDTH), dtype=bool)
    for row, col in cells:
        grid[row, col] = True
    return grid


def test_empty_grid_and_colour_layer_are_fresh_and_unaliased() -> None:
    grid = empty_grid()
    colors = empty_color_layer()
    assert grid.shape == colors.shape == (HEIGHT, WIDTH)
    assert not grid.any()
    assert all(cell is None for cell in colors.flat)

    writable = grid.copy()
    writable[0, 0] = True
    assert writable[1:, 0].sum() == 0
    assert empty_grid() is not grid


def test_empty_grid_is_read_only() -> None:
    with pytest.raises(ValueError):
        empty_grid()[3, 3] = True


def test_position_valid_rejects_top_row_anchor() -> None:
    assert not is_position_valid((0, 4), O_MASK)
    assert is_position_valid((1, 4), O_MASK)


def test_position_valid_allows_one_row_past_floor() -> None:
    # Lowest cell on row ``HEIGHT`` is left to the collision check.
    assert is_position_valid((HEIGHT - 1, 4), O_MASK)
    assert not is_position_valid((HEIGHT, 4), O_MASK)


def test_position_valid_checks_columns() -> None:
    assert is_position_valid((5, 0), I_MASK)
    assert is_position_valid((5, WIDTH - 4), I_MASK)
    assert not is_position_valid((5, -1), I_MASK)
    assert not is_position_valid((5, WIDTH - 3), I_MASK)


def test_collision_with_floor() -> None:
    grid = empty_grid()
    assert not check_collision((HEIGHT - 2, 4), O_MASK, grid)
    assert check_collision((HEIGHT - 1, 4), O_MASK, grid)
    assert check_collision((HEIGHT + 3, 4), O_MASK, grid)


def test_collision_with_stack() -> None:
    grid = _grid_with([(10, 5)])
    assert check_collision((9, 4), O_MASK, grid)
    assert not check_collision((9, 6), O_MASK, grid)


def test_collision_ignores_cells_outside_columns() -> None:
    grid = _grid_with([(5, WIDTH - 1)])
    # Column -1 would wrap to the last column if it were indexed.
    assert not check_collision((5, -1), O_MASK, grid)


def test_can_place_requires_cells_inside_and_free() -> None:
    grid = _grid_with([(10, 5)])
    assert can_place((0, 0), O_MASK, grid)
    assert not can_place((9, 4), O_MASK, grid)
    assert not can_place((HEIGHT - 1, 0), O_MASK, grid)
    assert not can_place((0, WIDTH - 1), O_MASK, grid)


def test_place_shape_is_a_union() -> None:
    grid = _grid_with([(19, 0)])
    placed = place_shape((18, 0), O_MASK, grid)
    assert placed[18, 0] and placed[18, 1] and placed[19, 0] and placed[19, 1]
    assert int(placed.sum()) == 4
    assert int(grid.sum()) == 1
    assert placed is not grid


def test_place_colors_first_write_wins() -> None:
    colors = empty_color_layer().copy()
    colors[19, 0] = "#123456"
    piece = create_piece(TetrominoType.O)
    painted = place_colors((18, 0), piece, colors)
    assert painted[19, 0] == "#123456"
    assert painted[18, 0] == painted[18, 1] == painted[19, 1] == piece.color
    assert painted[17, 0] is None


def test_row_is_filled() -> None:
    assert row_is_filled(np.ones(WIDTH, dtype=bool))
    row = np.ones(WIDTH, dtype=bool)
    row[3] = False
    assert not row_is_filled(row)


def test_is_terminal_looks_at_top_row_only() -> None:
    assert not is_terminal(_grid_with([(1, 0), (19, 9)]))
    assert is_terminal(_grid_with([(0, 7)]))


def test_clear_filled_rows_keeps_order_and_height() -> None:
    grid = np.zeros((HEIGHT, WIDTH), dtype=bool)
    colors = np.full((HEIGHT, WIDTH), None, dtype=object)
    grid[19] = True
    colors[19] = "#ff0000"
    grid[17] = True
    colors[17] = "#00ff00"
    grid[18, 2] = True
    colors[18, 2] = "#0000ff"
    grid[16, 7] = True
    colors[16, 7] = "#ffffff"

    assert count_filled_rows(grid) == 2
    new_grid, new_colors, score = clear_filled_rows(grid, colors, 40)

    assert new_grid.shape == (HEIGHT, WIDTH)
    assert new_colors.shape == (HEIGHT, WIDTH)
    assert score == 240
    assert not new_grid[:2].any()
    assert all(cell is None for cell in new_colors[:2].flat)
    # The two leftover rows keep their order: row 16 above row 18.
    assert new_grid[18, 7] and new_colors[18, 7] == "#ffffff"
    assert new_grid[19, 2] and new_colors[19, 2] == "#0000ff"
    assert int(new_grid.sum()) == 2


def test_clear_filled_rows_without_full_rows_is_identity() -> None:
    grid = _grid_with([(19, 0)])
    colors = empty_color_layer()
    new_grid, new_colors, score = clear_filled_rows(grid, colors, 7)
    assert new_grid is grid
    assert new_colors is colors
    assert score == 7
