"""Action vocabulary understood by the game state machine."""

from __future__ import annotations

from enum import Enum
from typing import Optional, Union


class Action(str, Enum):
    """Discrete inputs folded into the game state one at a time."""

    MOVE_LEFT = "MOVE_LEFT"
    MOVE_RIGHT = "MOVE_RIGHT"
    MOVE_DOWN = "MOVE_DOWN"
    ROTATE = "ROTATE"
    TICK = "TICK"
    STOP = "STOP"
    RESUME = "RESUME"
    RESTART = "RESTART"

    @classmethod
    def parse(cls, value: Union["Action", str, None]) -> Optional["Action"]:
        """Return the action named by ``value`` or ``None`` if there is none.

        Matching is case-insensitive, so ``"tick"`` and ``"TICK"`` both give
        :attr:`Action.TICK`.
        """

        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.upper())
        except ValueError:
            return None
