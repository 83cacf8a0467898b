"""
Single-writer wrapper around the season reducer.

Dispatches are serialized with a lock so two requests can never advance the
same day twice; readers get whatever snapshot was current when they asked.
"""
from __future__ import annotations

import threading

from models.game_state import GameState
from simulation.intents import Intent
from simulation.season import reduce


class GameSession:
    def __init__(self, state: GameState):
        self._state = state
        self._lock = threading.Lock()

    def get_state(self) -> GameState:
        return self._state

    def dispatch(self, intent: Intent) -> GameState:
        """Reduce *intent* against the current snapshot and publish the result."""
        with self._lock:
            self._state = reduce(self._state, intent)
            return self._state
