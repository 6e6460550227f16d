from __future__ import annotations

import random
import sys

from blockfall import __main__ as demo
from blockfall.board import HEIGHT, WIDTH
from blockfall.game_state import initial_state, step
from blockfall.actions import Action
from blockfall.tetromino import TetrominoType, color_of
from blockfall.utils import format_grid, render_grid


def test_render_grid_overlays_active_piece_without_locking() -> None:
    state = initial_state(rng=random.Random(0))
    grid = render_grid(state)
    o_color = color_of(TetrominoType.O)
    assert len(grid) == HEIGHT and len(grid[0]) == WIDTH
    assert grid[0][4] == grid[0][5] == grid[1][4] == grid[1][5] == o_color
    assert sum(cell is not None for row in grid for cell in row) == 4
    assert not state.grid.any()


def test_format_grid_marks_locked_and_active_cells() -> None:
    state = initial_state(rng=random.Random(0))
    for _ in range(HEIGHT - 1):
        state = step(state, Action.MOVE_DOWN)
    lines = format_grid(state).splitlines()
    assert len(lines) == HEIGHT
    assert lines[-1] == "....##...."
    assert lines[0].count("@") >= 1
    assert set("".join(lines)) <= {".", "#", "@"}


def test_demo_prints_final_frame(monkeypatch, capsys) -> None:
    monkeypatch.setattr(sys, "argv", ["blockfall", "--steps", "60", "--seed", "4"])
    demo.main()
    out = capsys.readouterr().out.splitlines()
    assert len(out) == HEIGHT + 1
    assert out[-1].startswith("Score: ")
