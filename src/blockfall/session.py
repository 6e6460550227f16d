"""Session controller driving the game state machine.

The session owns the current :class:`~blockfall.game_state.GameState`, turns
key codes into actions and folds actions into the state one at a time.  A
periodic timer feeds :attr:`Action.TICK` into the same queue as player input.
Its period follows the state's tick interval: when the interval changes the
pending tick is cancelled and a new one is scheduled.  No ticks are scheduled
while the game is paused, ended or the session is stopped.
"""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Callable, Dict, List, Optional, Union

from .actions import Action
from .game_state import GameState, initial_state, step


LOGGER = logging.getLogger(__name__)

# ``KeyboardEvent.code`` names bound to each action.
KEY_BINDINGS: Dict[str, Action] = {
    "KeyA": Action.MOVE_LEFT,
    "KeyD": Action.MOVE_RIGHT,
    "KeyS": Action.MOVE_DOWN,
    "ArrowLeft": Action.ROTATE,
    "KeyZ": Action.STOP,
    "KeyY": Action.RESUME,
    "Enter": Action.RESTART,
}

Listener = Callable[[GameState], None]


def action_for_key(code: str) -> Optional[Action]:
    """Return the action bound to ``code`` or ``None`` if the key is unbound."""

    return KEY_BINDINGS.get(code)


class Session:
    """Fold actions into a game state and keep the tick timer in step."""

    def __init__(
        self,
        *,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        rng: Optional[random.Random] = None,
        state: Optional[GameState] = None,
    ) -> None:
        self._loop = loop
        self._rng = rng
        self.state: GameState = state or initial_state(rng=rng)
        self._listeners: List[Listener] = []
        self._queue: Optional[asyncio.Queue] = None
        self._tick_handle: Optional[asyncio.TimerHandle] = None
        self._scheduled_interval: Optional[int] = None
        self._running = False
        self._consuming = False

    @property
    def running(self) -> bool:
        return self._running

    @property
    def tick_scheduled(self) -> bool:
        return self._tick_handle is not None

    @property
    def scheduled_interval(self) -> Optional[int]:
        """Interval in milliseconds of the pending tick, if any."""

        return self._scheduled_interval if self._tick_handle is not None else None

    def subscribe(self, listener: Listener) -> None:
        """Register ``listener`` to receive every new snapshot."""

        self._listeners.append(listener)

    # Timer ------------------------------------------------------------
    def _event_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def _cancel_tick(self) -> None:
        if self._tick_handle is not None:
            self._tick_handle.cancel()
            self._tick_handle = None

    def _schedule_tick(self) -> None:
        self._cancel_tick()
        interval = self.state.tick_interval
        self._tick_handle = self._event_loop().call_later(interval / 1000.0, self._on_tick)
        self._scheduled_interval = interval
        LOGGER.debug("Next tick in %d ms", interval)

    def _on_tick(self) -> None:
        self._tick_handle = None
        if self._consuming:
            self.submit(Action.TICK)
        else:
            self.dispatch(Action.TICK)

    def _sync_timer(self, restarted: bool = False) -> None:
        if not self._running or self.state.paused or self.state.ended:
            self._cancel_tick()
            return
        if (
            restarted
            or self._tick_handle is None
            or self._scheduled_interval != self.state.tick_interval
        ):
            self._schedule_tick()

    # Folding ----------------------------------------------------------
    def dispatch(self, action: Union[Action, str]) -> GameState:
        """Fold ``action`` into the current state and return the result."""

        previous = self.state
        new_state = step(previous, action, self._rng)
        if new_state is not previous:
            self.state = new_state
            if new_state.ended and not previous.ended:
                LOGGER.info(
                    "Game over. Score: %d, high score: %d",
                    new_state.score,
                    max(new_state.score, new_state.high_score),
                )
            for listener in self._listeners:
                listener(new_state)
        self._sync_timer(restarted=Action.parse(action) is Action.RESTART)
        return self.state

    def dispatch_key(self, code: str) -> GameState:
        """Fold the action bound to ``code``; unbound keys are ignored."""

        action = action_for_key(code)
        if action is None:
            LOGGER.debug("Ignoring unbound key %r", code)
            return self.state
        return self.dispatch(action)

    def submit(self, action: Union[Action, str, None]) -> None:
        """Queue ``action`` for :meth:`run`.  ``None`` ends the run loop."""

        if self._queue is None:
            self._queue = asyncio.Queue()
        self._queue.put_nowait(action)

    def submit_key(self, code: str) -> None:
        action = action_for_key(code)
        if action is None:
            LOGGER.debug("Ignoring unbound key %r", code)
            return
        self.submit(action)

    def _drop_stop_markers(self) -> None:
        # A stop left behind by an earlier run must not end the next one.
        if self._queue is None:
            return
        pending = []
        while not self._queue.empty():
            action = self._queue.get_nowait()
            if action is not None:
                pending.append(action)
        for action in pending:
            self._queue.put_nowait(action)

    async def run(self) -> GameState:
        """Consume queued actions in arrival order until :meth:`stop` is called."""

        if self._queue is None:
            self._queue = asyncio.Queue()
        self._consuming = True
        try:
            while True:
                action = await self._queue.get()
                if action is None:
                    break
                self.dispatch(action)
        finally:
            self._consuming = False
        return self.state

    # Lifecycle --------------------------------------------------------
    def start(self) -> None:
        if self._running:
            LOGGER.info("Session already running")
            return
        self._running = True
        self._drop_stop_markers()
        LOGGER.info("Session started")
        for listener in self._listeners:
            listener(self.state)
        self._sync_timer(restarted=True)

    def pause(self) -> None:
        if not self._running:
            LOGGER.info("Pause ignored: session not running")
            return
        previous = self.state
        if self.dispatch(Action.STOP) is not previous:
            LOGGER.info("Paused")

    def resume(self) -> None:
        if not self._running:
            LOGGER.info("Resume ignored: session not running")
            return
        previous = self.state
        if self.dispatch(Action.RESUME) is not previous:
            LOGGER.info("Resumed")

    def restart(self) -> None:
        self.dispatch(Action.RESTART)
        LOGGER.info("Restarted; high score %d", self.state.high_score)

    def stop(self) -> None:
        """Stop producing ticks and end :meth:`run` once the queue drains."""

        if not self._running:
            LOGGER.info("Stop ignored: session not running")
            return
        self._running = False
        self._cancel_tick()
        self.submit(None)
        LOGGER.info("Session stopped")
