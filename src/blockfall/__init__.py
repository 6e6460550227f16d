"""Rules engine for a falling-block puzzle game."""

from .actions import Action
from .board import (
    HEIGHT,
    WIDTH,
    check_collision,
    clear_filled_rows,
    empty_color_layer,
    empty_grid,
    is_position_valid,
    is_terminal,
    place_colors,
    place_shape,
    row_is_filled,
)
from .game_state import GameState, Status, initial_state, step
from .session import KEY_BINDINGS, Session, action_for_key
from .tetromino import (
    Piece,
    TetrominoType,
    color_of,
    create_piece,
    piece_mask,
    random_kind,
    rotate_clockwise,
)
from .utils import format_grid, render_grid

__all__ = [
    "Action",
    "GameState",
    "Status",
    "Session",
    "Piece",
    "TetrominoType",
    "HEIGHT",
    "WIDTH",
    "KEY_BINDINGS",
    "action_for_key",
    "check_collision",
    "clear_filled_rows",
    "color_of",
    "create_piece",
    "empty_color_layer",
    "empty_grid",
    "format_grid",
    "initial_state",
    "is_position_valid",
    "is_terminal",
    "piece_mask",
    "place_colors",
    "place_shape",
    "random_kind",
    "render_grid",
    "rotate_clockwise",
    "row_is_filled",
    "step",
]
