"""Piece catalogue and rotation.

Each of the seven piece kinds has one canonical mask (a small boolean matrix
anchored at its top-left corner) and one display colour.  Pieces are immutable:
rotating a piece produces a new :class:`Piece` carrying a new mask.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

import numpy as np
from numpy.typing import NDArray

Mask = NDArray[np.bool_]


class TetrominoType(str, Enum):
    """Enumeration of the seven standard tetromino shapes."""

    I = "I"
    O = "O"
    T = "T"
    S = "S"
    Z = "Z"
    J = "J"
    L = "L"


def _freeze(array: NDArray) -> NDArray:
    array.flags.writeable = False
    return array


def _mask(rows: list[list[int]]) -> Mask:
    return _freeze(np.array(rows, dtype=bool))


# Spawn orientation of every piece.  Rotated orientations are never stored;
# they are derived on demand by ``rotate_clockwise``.
_BASE_SHAPES: Dict[TetrominoType, Mask] = {
    TetrominoType.I: _mask([[1, 1, 1, 1]]),
    TetrominoType.O: _mask([[1, 1], [1, 1]]),
    TetrominoType.T: _mask([[1, 1, 1], [0, 1, 0]]),
    TetrominoType.S: _mask([[0, 1, 1], [1, 1, 0]]),
    TetrominoType.Z: _mask([[1, 1, 0], [0, 1, 1]]),
    TetrominoType.J: _mask([[1, 1, 1], [0, 0, 1]]),
    TetrominoType.L: _mask([[1, 1, 1], [1, 0, 0]]),
}

SHAPE_COLORS: Dict[TetrominoType, str] = {
    TetrominoType.I: "#00ffff",
    TetrominoType.O: "#ffff00",
    TetrominoType.T: "#800080",
    TetrominoType.S: "#00ff00",
    TetrominoType.Z: "#ff0000",
    TetrominoType.J: "#0000ff",
    TetrominoType.L: "#ffa500",
}


def piece_mask(kind: TetrominoType) -> Mask:
    """Return the canonical (spawn orientation) mask for ``kind``."""

    return _BASE_SHAPES[kind]


def color_of(kind: TetrominoType) -> str:
    """Return the display colour associated with ``kind``."""

    return SHAPE_COLORS[kind]


def random_kind(rng: Optional[random.Random] = None) -> TetrominoType:
    """Draw a piece kind uniformly at random.

    Draws are independent; there is no bag or shuffle guarantee.  ``rng`` may
    be a seeded :class:`random.Random` to make the sequence reproducible.
    """

    return (rng or random).choice(list(TetrominoType))


def rotate_clockwise(mask: Mask) -> Mask:
    """Return ``mask`` rotated 90 degrees clockwise.

    An ``R x C`` mask becomes ``C x R`` and the source cell ``(r, c)`` ends up
    at ``(c, R - 1 - r)``.  No bounds or collision checking is done here;
    validating the result against a grid is up to the caller.
    """

    return _freeze(np.rot90(mask, k=-1).copy())


@dataclass(frozen=True, eq=False)
class Piece:
    """A piece kind together with its current mask and colour."""

    kind: TetrominoType
    mask: Mask
    color: str

    def rotated(self) -> "Piece":
        """Return a new piece with the mask rotated clockwise."""

        return Piece(self.kind, rotate_clockwise(self.mask), self.color)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Piece):
            return NotImplemented
        return (
            self.kind == other.kind
            and self.color == other.color
            and np.array_equal(self.mask, other.mask)
        )


def create_piece(kind: TetrominoType) -> Piece:
    """Return a new piece of ``kind`` in its spawn orientation."""

    return Piece(kind, piece_mask(kind), color_of(kind))
