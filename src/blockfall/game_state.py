"""Game state snapshot and the transition functions that advance it.

A :class:`GameState` is an immutable snapshot.  Every function in this module
takes a snapshot and returns the next one; rejected actions return the very
same object so callers can detect a no-op with ``is``.

Lateral moves, soft drops and timer ticks all go through :func:`move`, which
shifts the anchor by a ``(row, col)`` delta.  When a downward step collides
with the floor or the stack the piece is locked at its previous anchor, full
rows are cleared and the next piece is promoted.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, Dict, Optional, Tuple, Union

import numpy as np

from .actions import Action
from .board import (
    HEIGHT,
    WIDTH,
    ColorLayer,
    Grid,
    Position,
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
)
from .tetromino import Piece, TetrominoType, create_piece, random_kind


LOGGER = logging.getLogger(__name__)

INITIAL_TICK_INTERVAL_MS = 500
MIN_TICK_INTERVAL_MS = 100
TICK_INTERVAL_STEP_MS = 250
# More than this many rows cleared by one lock speeds the game up.
SPEEDUP_ROWS = 3
SOFT_DROP_SCORE = 1

STARTING_PIECE = TetrominoType.O

LEFT: Position = (0, -1)
RIGHT: Position = (0, 1)
DOWN: Position = (1, 0)


class Status(str, Enum):
    RUNNING = "running"
    PAUSED = "paused"
    ENDED = "ended"


def spawn_position(width: int = WIDTH) -> Position:
    """Return the anchor given to a newly activated piece."""

    return (0, width // 2 - 1)


def score_threshold(level: int) -> int:
    """Return the score needed to leave ``level``."""

    return 100 + 100 * (level - 1)


@dataclass(frozen=True, eq=False)
class GameState:
    """Immutable snapshot of a game session."""

    active: Piece
    next_piece: Piece
    grid: Grid = field(default_factory=empty_grid)
    colors: ColorLayer = field(default_factory=empty_color_layer)
    position: Position = field(default_factory=spawn_position)
    score: int = 0
    level: int = 0
    high_score: int = 0
    tick_interval: int = INITIAL_TICK_INTERVAL_MS
    initial_tick_interval: int = INITIAL_TICK_INTERVAL_MS
    ended: bool = False
    paused: bool = False

    def __post_init__(self) -> None:
        # Writable arrays are copied so the caller cannot edit the snapshot later.
        for name in ("grid", "colors"):
            array = getattr(self, name)
            if array.flags.writeable:
                array = array.copy()
                array.flags.writeable = False
                object.__setattr__(self, name, array)

    @property
    def status(self) -> Status:
        if self.ended:
            return Status.ENDED
        if self.paused:
            return Status.PAUSED
        return Status.RUNNING

    @property
    def height(self) -> int:
        return self.grid.shape[0]

    @property
    def width(self) -> int:
        return self.grid.shape[1]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GameState):
            return NotImplemented
        return (
            self.active == other.active
            and self.next_piece == other.next_piece
            and tuple(self.position) == tuple(other.position)
            and self.score == other.score
            and self.level == other.level
            and self.high_score == other.high_score
            and self.tick_interval == other.tick_interval
            and self.initial_tick_interval == other.initial_tick_interval
            and self.ended == other.ended
            and self.paused == other.paused
            and np.array_equal(self.grid, other.grid)
            and np.array_equal(self.colors, other.colors)
        )


def initial_state(
    *,
    high_score: int = 0,
    initial_tick_interval: int = INITIAL_TICK_INTERVAL_MS,
    height: int = HEIGHT,
    width: int = WIDTH,
    rng: Optional[random.Random] = None,
) -> GameState:
    """Return the snapshot a new session starts from.

    The grid is empty, the O piece is active at the spawn position and the
    next piece is drawn at random.
    """

    return GameState(
        active=create_piece(STARTING_PIECE),
        next_piece=create_piece(random_kind(rng)),
        grid=empty_grid(height, width),
        colors=empty_color_layer(height, width),
        position=spawn_position(width),
        high_score=high_score,
        tick_interval=initial_tick_interval,
        initial_tick_interval=initial_tick_interval,
    )


def _update_level(state: GameState) -> GameState:
    # At most one level per transition, however far the score has run ahead.
    if state.score >= score_threshold(state.level):
        LOGGER.debug("Level up: %d -> %d", state.level, state.level + 1)
        return replace(state, level=state.level + 1)
    return state


def _update_speed(state: GameState, cleared: int) -> GameState:
    if cleared <= SPEEDUP_ROWS:
        return state
    interval = max(MIN_TICK_INTERVAL_MS, state.tick_interval - TICK_INTERVAL_STEP_MS)
    if interval != state.tick_interval:
        LOGGER.debug("Tick interval: %d ms -> %d ms", state.tick_interval, interval)
    return replace(state, tick_interval=interval)


def _lock(state: GameState, rng: Optional[random.Random]) -> Tuple[GameState, int]:
    """Lock the active piece at its current anchor and promote the next piece.

    Returns the new snapshot and the number of rows cleared by the lock.
    """

    grid = place_shape(state.position, state.active.mask, state.grid)
    colors = place_colors(state.position, state.active, state.colors)
    cleared = count_filled_rows(grid)
    grid, colors, score = clear_filled_rows(grid, colors, state.score)
    ended = is_terminal(grid)
    LOGGER.debug(
        "Locked %s at %s, cleared %d row(s), score %d",
        state.active.kind.value,
        state.position,
        cleared,
        score,
    )
    if ended:
        LOGGER.debug("Stack reached the top row; game over with score %d", score)
    locked = replace(
        state,
        grid=grid,
        colors=colors,
        score=score,
        active=state.next_piece,
        next_piece=create_piece(random_kind(rng)),
        position=spawn_position(state.width),
        ended=ended,
    )
    return locked, cleared


def _shift(
    state: GameState, delta: Position, rng: Optional[random.Random]
) -> Tuple[GameState, bool]:
    """Shift the active piece by ``delta``.

    Returns the next snapshot and whether the step was taken (moved or locked).
    """

    if state.ended or state.paused:
        return state, False

    row, col = state.position
    candidate = (row + delta[0], col + delta[1])
    mask = state.active.mask
    if not is_position_valid(candidate, mask, state.height, state.width):
        return state, False

    if not check_collision(candidate, mask, state.grid):
        moved = replace(state, position=candidate)
        return _update_speed(_update_level(moved), 0), True

    if delta[0] <= 0:
        # Sideways contact with the stack is a rejected move, not a landing.
        return state, False

    locked, cleared = _lock(state, rng)
    return _update_speed(_update_level(locked), cleared), True


def move(
    state: GameState, delta: Position, rng: Optional[random.Random] = None
) -> GameState:
    """Return ``state`` with the active piece shifted by ``delta``.

    The shift is dropped if the target anchor fails the boundary checks or, for
    sideways moves, runs into the stack.  A downward shift that collides locks
    the piece instead.
    """

    return _shift(state, delta, rng)[0]


def move_left(state: GameState, rng: Optional[random.Random] = None) -> GameState:
    return move(state, LEFT, rng)


def move_right(state: GameState, rng: Optional[random.Random] = None) -> GameState:
    return move(state, RIGHT, rng)


def tick(state: GameState, rng: Optional[random.Random] = None) -> GameState:
    """Advance the active piece by one row, as the periodic timer does."""

    return move(state, DOWN, rng)


def move_down(state: GameState, rng: Optional[random.Random] = None) -> GameState:
    """Soft drop: like :func:`tick` but each step taken scores a point."""

    moved, taken = _shift(state, DOWN, rng)
    if not taken:
        return moved
    return replace(moved, score=moved.score + SOFT_DROP_SCORE)


def rotate(state: GameState, rng: Optional[random.Random] = None) -> GameState:
    """Rotate the active piece clockwise about its anchor.

    The rotation is dropped if the rotated mask would leave the grid or overlap
    the stack.
    """

    if state.ended or state.paused:
        return state
    rotated = state.active.rotated()
    if not can_place(state.position, rotated.mask, state.grid):
        LOGGER.debug("Rotation of %s at %s rejected", rotated.kind.value, state.position)
        return state
    return replace(state, active=rotated)


def pause(state: GameState) -> GameState:
    if state.ended or state.paused:
        return state
    return replace(state, paused=True)


def resume(state: GameState) -> GameState:
    if state.ended or not state.paused:
        return state
    return replace(state, paused=False)


def restart(state: GameState, rng: Optional[random.Random] = None) -> GameState:
    """Start a fresh game, keeping the best score seen so far."""

    return initial_state(
        high_score=max(state.score, state.high_score),
        initial_tick_interval=state.initial_tick_interval,
        height=state.height,
        width=state.width,
        rng=rng,
    )


Handler = Callable[[GameState, Optional[random.Random]], GameState]

_HANDLERS: Dict[Action, Handler] = {
    Action.MOVE_LEFT: move_left,
    Action.MOVE_RIGHT: move_right,
    Action.MOVE_DOWN: move_down,
    Action.ROTATE: rotate,
    Action.TICK: tick,
    Action.STOP: lambda state, _rng: pause(state),
    Action.RESUME: lambda state, _rng: resume(state),
    Action.RESTART: restart,
}


def step(
    state: GameState,
    action: Union[Action, str, None],
    rng: Optional[random.Random] = None,
) -> GameState:
    """Fold one action into ``state`` and return the next snapshot.

    Anything outside the action vocabulary is ignored.  An ended game only
    reacts to :attr:`Action.RESTART`.
    """

    parsed = Action.parse(action)
    if parsed is None:
        LOGGER.debug("Ignoring unknown action %r", action)
        return state
    if state.ended and parsed is not Action.RESTART:
        return state
    return _HANDLERS[parsed](state, rng)
