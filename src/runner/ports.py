# src/runner/ports.py
"""
Interfaces of the simulator's collaborators.

The simulator only talks to these: it never loads assets, draws, or plays
sounds. Visual handles returned by the factory are opaque to it.
"""
from __future__ import annotations
from typing import Any, Protocol, Tuple
from .config import AVATAR_PROFILES, OBSTACLE_SIZES, GEM_SIZES
from .entities import ObstacleTier, GemKind, Tile, Obstacle, Gem


class GeometryProvider(Protocol):
    fall_threshold: float
    collision_threshold: float

    def obstacle_size(self, tier: ObstacleTier) -> Tuple[float, float]: ...

    def gem_size(self, kind: GemKind) -> Tuple[float, float]: ...


class ActorView(Protocol):
    def set_state(self, name: str) -> None: ...

    def get_position(self) -> Tuple[float, float]: ...

    def set_position(self, x: float, y: float) -> None: ...

    def get_size(self) -> Tuple[float, float]: ...


class ScoreLifeSink(Protocol):
    def add_score(self, amount: int) -> None: ...

    def apply_life_cost(self, amount: int) -> bool: ...

    def add_life(self, amount: int) -> None: ...


class EntityVisualFactory(Protocol):
    def create_tile_visual(self, tile: Tile) -> Any: ...

    def create_obstacle_visual(self, obstacle: Obstacle) -> Any: ...

    def create_gem_visual(self, gem: Gem) -> Any: ...

    def destroy_tile_visual(self, handle: Any) -> None: ...

    def destroy_obstacle_visual(self, handle: Any) -> None: ...

    def destroy_gem_visual(self, handle: Any) -> None: ...


class BackgroundScroller(Protocol):
    def set_scroll_speed(self, speed: float) -> None: ...


class StaticGeometry:
    """Geometry from config: thresholds of the chosen avatar, fixed entity sizes."""
    def __init__(self, avatar_index: int = 0):
        if not 0 <= avatar_index < len(AVATAR_PROFILES):
            raise ValueError(f"unknown avatar index {avatar_index!r}")
        profile = AVATAR_PROFILES[avatar_index]
        self.avatar_name = profile["name"]
        self.fall_threshold = float(profile["fall_threshold"])
        self.collision_threshold = float(profile["collision_threshold"])

    def obstacle_size(self, tier: ObstacleTier) -> Tuple[float, float]:
        return OBSTACLE_SIZES[ObstacleTier(tier)]

    def gem_size(self, kind: GemKind) -> Tuple[float, float]:
        return GEM_SIZES[kind.value]
