# src/runner/entities.py
from __future__ import annotations
import random
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, List
from .config import (
    OBSTACLE_WALK_SPEED, OBSTACLE_HOP_FRAMES, LIFE_COSTS
)


class ObstacleTier(IntEnum):
    """Severity of an obstacle. Index into (low, mid, high) count tuples."""
    LOW = 0
    MID = 1
    HIGH = 2

    @property
    def life_cost(self) -> int:
        return LIFE_COSTS[self]


class GemKind(Enum):
    HEART = "heart"       # low value: +1 life
    DIAMOND = "diamond"   # high value: auto-run power-up


@dataclass
class Obstacle:
    """
    Hazard standing on a tile. (x, y) is the bottom-centre anchor:
    x is the horizontal centre, y the ground line it rests on.
    """
    tier: ObstacleTier
    x: float
    y: float
    width: float
    height: float
    is_moving: bool = False
    level: int = 1
    jumped_over: bool = False   # credited for a jump (once)
    hit: bool = False           # charged against lives (once)
    direction: int = 1          # mid tier walking direction
    base_y: float = 0.0         # high tier rest line
    hop_phase: int = 0          # frames left in the current hop
    hop_height: float = 0.0
    visual: Any = None

    def __post_init__(self):
        self.base_y = self.y

    @property
    def left(self) -> float:
        return self.x - self.width / 2

    @property
    def right(self) -> float:
        return self.x + self.width / 2

    @property
    def top(self) -> float:
        return self.y - self.height

    @property
    def mid_y(self) -> float:
        return self.y - self.height * 0.5

    @property
    def resolved(self) -> bool:
        return self.jumped_over or self.hit

    def update_movement(self, dx: float, min_x: float, max_x: float,
                        max_hop: float, rng: random.Random):
        """Scroll with the world, then apply the tier's own motion inside [min_x, max_x]."""
        self.x += dx
        if not self.is_moving:
            return
        if self.tier == ObstacleTier.MID:
            self._walk(min_x, max_x, rng)
        elif self.tier == ObstacleTier.HIGH:
            self._hop(max_hop, rng)

    def _walk(self, min_x: float, max_x: float, rng: random.Random):
        skip = 0.5 if self.level <= 6 else 0.7
        if rng.random() < skip:
            return
        self.x += self.direction * OBSTACLE_WALK_SPEED
        if self.x <= min_x:
            self.x = min_x
            self.direction = 1
        elif self.x >= max_x:
            self.x = max_x
            self.direction = -1

    def _hop(self, max_hop: float, rng: random.Random):
        chance = 0.1 if self.level <= 8 else 0.6
        if self.hop_phase <= 0 and rng.random() < chance:
            self.hop_height = max_hop * (0.5 + 0.5 * rng.random())
            self.hop_phase = OBSTACLE_HOP_FRAMES

        if self.hop_phase > 0:
            self.hop_phase -= 1
            p = self.hop_phase / OBSTACLE_HOP_FRAMES
            self.y = self.base_y - self.hop_height * 4 * p * (1 - p)
        else:
            self.y = self.base_y


@dataclass
class Gem:
    """Collectible hovering over a gap. (x, y) is the bottom-centre anchor."""
    kind: GemKind
    x: float
    y: float
    width: float = 0.0
    height: float = 0.0
    visual: Any = None


@dataclass
class Tile:
    id: int
    x: float
    width: float
    y: float
    height: float
    gap_to_next: float = 0.0
    obstacles: List[Obstacle] = field(default_factory=list)
    gems: List[Gem] = field(default_factory=list)
    visual: Any = None

    @property
    def right(self) -> float:
        return self.x + self.width

    def contains_x(self, x: float) -> bool:
        return self.x <= x < self.right

    def shift(self, dx: float, max_hop: float, rng: random.Random):
        """Scroll this tile and everything it owns by dx."""
        self.x += dx
        for ob in self.obstacles:
            half = ob.width * 0.5
            ob.update_movement(dx, self.x + half, self.right - half, max_hop, rng)
        for gem in self.gems:
            gem.x += dx

