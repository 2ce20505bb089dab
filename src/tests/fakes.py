# src/tests/fakes.py
"""Hand-made collaborators so simulator tests control the road exactly."""
from __future__ import annotations
from typing import List, Optional, Sequence

from src.runner.config import WIDTH, HEIGHT
from src.runner.entities import ObstacleTier
from src.runner.headless import HeadlessActorView, CountingVisualFactory, StillBackground
from src.runner.level import TileDescriptor
from src.runner.scoreboard import Scoreboard
from src.runner.simulator import RunnerSimulator


def flat_tile(width: float = WIDTH, gap: float = 0.0, counts=(0, 0, 0), gem=None) -> TileDescriptor:
    return TileDescriptor(width=width, obstacle_counts=tuple(counts), gem_kind=gem,
                          gap_to_next=gap, is_last_in_batch=False)


class StubRoad:
    """Serves a fixed list of tiles, then repeats the last one forever."""
    def __init__(self, tiles: Optional[Sequence[TileDescriptor]] = None, level: int = 1):
        self.tiles: List[TileDescriptor] = list(tiles or [flat_tile()])
        self.current_level = level
        self.seed = 0
        self.served = 0
        self.level_ups = 0

    def get_next_tile(self) -> TileDescriptor:
        i = min(self.served, len(self.tiles) - 1)
        self.served += 1
        return self.tiles[i]

    def is_obstacle_moving(self, tier: ObstacleTier, level=None) -> bool:
        return False

    def level_up(self) -> int:
        self.current_level += 1
        self.level_ups += 1
        return self.current_level


class PickyActorView(HeadlessActorView):
    """Rejects some state names the way a view with missing animations would."""
    def __init__(self, rejected=("jump",)):
        super().__init__()
        self.rejected = set(rejected)
        self.rejections = 0

    def set_state(self, name: str) -> None:
        if name in self.rejected:
            self.rejections += 1
            raise ValueError(f"no animation for {name}")
        super().set_state(name)


class SizelessActorView(HeadlessActorView):
    def get_size(self):
        return (0, 0)


def make_sim(road=None, view=None, board=None, **kw):
    """(sim, board, factory) on a 960x540 screen with headless collaborators."""
    road = road if road is not None else StubRoad()
    view = view if view is not None else HeadlessActorView()
    board = board if board is not None else Scoreboard()
    factory = CountingVisualFactory()
    sim = RunnerSimulator(road, view, board, factory, StillBackground(),
                          screen_width=WIDTH, screen_height=HEIGHT, seed=7, **kw)
    return sim, board, factory
