"""Helpers for renderers reading a game state."""

from __future__ import annotations

from typing import List, Optional

from .game_state import GameState


def render_grid(state: GameState) -> List[List[Optional[str]]]:
    """Return the colour layer with the active piece overlaid.

    This is a convenience for renderers that want a single 2D array to draw
    without locking the piece.  Locked cells carry their stored colour, cells
    under the active piece carry the piece colour and free cells are ``None``.
    """

    grid = state.colors.tolist()
    row, col = state.position
    for dr, dc in zip(*state.active.mask.nonzero()):
        r, c = row + int(dr), col + int(dc)
        if 0 <= r < state.height and 0 <= c < state.width:
            grid[r][c] = state.active.color
    return grid


def format_grid(state: GameState) -> str:
    """Return an ASCII frame: ``#`` locked, ``@`` active piece, ``.`` free."""

    overlay = render_grid(state)
    lines = []
    for r, cells in enumerate(overlay):
        line = []
        for c, color in enumerate(cells):
            if state.grid[r, c]:
                line.append("#")
            elif color is not None:
                line.append("@")
            else:
                line.append(".")
        lines.append("".join(line))
    return "\n".join(lines)
