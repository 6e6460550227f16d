"""Headless ASCII demo for the blockfall engine.

Run with: `python -m blockfall`

Folds a stream of random actions into a fresh game and prints the final frame
together with the score readout, a minimal smoke test that the engine moves,
locks and clears pieces.
"""

from __future__ import annotations

import argparse
import logging
import random

from . import Action, format_grid, initial_state, step


LOGGER = logging.getLogger(__name__)

# Player moves drawn by the demo; ticks are interleaved between them.
_DEMO_MOVES = (Action.MOVE_LEFT, Action.MOVE_RIGHT, Action.MOVE_DOWN, Action.ROTATE)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--steps", type=int, default=400, help="Number of actions to fold.")
    parser.add_argument("--seed", type=int, default=None, help="Seed for piece and move draws.")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Logging level (e.g. DEBUG, INFO, WARNING).",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.WARNING), format="%(message)s")

    rng = random.Random(args.seed)
    state = initial_state(rng=rng)
    for index in range(args.steps):
        action = Action.TICK if index % 2 else rng.choice(_DEMO_MOVES)
        state = step(state, action, rng)
        if state.ended:
            LOGGER.info("Game ended after %d actions", index + 1)
            break

    print(format_grid(state))
    print(f"Score: {state.score}  Level: {state.level}  Status: {state.status.value}")


if __name__ == "__main__":
    main()
