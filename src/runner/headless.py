# src/runner/headless.py
"""Collaborators for running the simulator without a window (env, tests, tools)."""
from __future__ import annotations
from typing import Any, Dict, List, Tuple
from .config import PLAYER_W, PLAYER_H

ACTOR_STATES = ("idle", "walk", "run", "jump", "dead")


class HeadlessActorView:
    """Keeps the last position/state it was given."""
    def __init__(self, size: Tuple[float, float] = (PLAYER_W, PLAYER_H)):
        self.size = size
        self.x = 0.0
        self.y = 0.0
        self.state = "idle"
        self.history: List[str] = []

    def set_state(self, name: str) -> None:
        if name not in ACTOR_STATES:
            raise KeyError(name)
        self.state = name
        self.history.append(name)

    def get_position(self) -> Tuple[float, float]:
        return self.x, self.y

    def set_position(self, x: float, y: float) -> None:
        self.x, self.y = x, y

    def get_size(self) -> Tuple[float, float]:
        return self.size


class CountingVisualFactory:
    """Hands out integer handles and tracks which ones are alive."""
    def __init__(self):
        self._next = 0
        self.live: Dict[int, Any] = {}
        self.destroyed = 0

    def _create(self, entity) -> int:
        handle = self._next
        self._next += 1
        self.live[handle] = entity
        return handle

    def _destroy(self, handle: int) -> None:
        if self.live.pop(handle, None) is not None:
            self.destroyed += 1

    create_tile_visual = _create
    create_obstacle_visual = _create
    create_gem_visual = _create
    destroy_tile_visual = _destroy
    destroy_obstacle_visual = _destroy
    destroy_gem_visual = _destroy


class StillBackground:
    def __init__(self):
        self.speed = 0.0

    def set_scroll_speed(self, speed: float) -> None:
        self.speed = speed
