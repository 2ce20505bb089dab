# src/runner/level.py
from __future__ import annotations
import logging
import math
import random
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple
from .config import (
    WIDTH, MAX_LEVEL, BATCH_SCREENS_BASE,
    ROAD_TILE_MIN_FRAC, ROAD_TILE_MAX_FRAC,
    WALK_JUMP_DISTANCE, MIN_TILE_SPACE, MAX_TILE_SPACE,
    DIAMONDS_PER_TIER, MAX_DIAMONDS_PER_LEVEL,
)
from .entities import ObstacleTier, GemKind

logger = logging.getLogger(__name__)

ObstacleCounts = Tuple[int, int, int]   # (low, mid, high)

TILES_PER_TIER = (8, 12, 16, 20)
BONUS_EMPTY_SLOTS = 4


@dataclass(frozen=True)
class PercentileGroup:
    """Weighted sub-range of [min_w, max_w], as fractions of that range."""
    weight: float
    lo: float
    hi: float


@dataclass(frozen=True)
class TileDescriptor:
    width: float
    obstacle_counts: ObstacleCounts
    gem_kind: Optional[GemKind]
    gap_to_next: float
    is_last_in_batch: bool


def check_level(level) -> int:
    if isinstance(level, bool) or not isinstance(level, int) or level < 1:
        raise ValueError(f"level must be an int >= 1, got {level!r}")
    return level


def level_tier(level: int) -> int:
    """0 for levels 1-3, 1 for 4-6, 2 for 7-9, 3 for 10 and above."""
    check_level(level)
    return min((level - 1) // 3, 3)


def tile_count_for_level(level: int) -> int:
    return TILES_PER_TIER[level_tier(level)]


def percentile_groups(level: int) -> List[PercentileGroup]:
    """Width distribution of one batch. Lower bounds shrink as the level rises inside a tier."""
    tier = level_tier(level)
    if tier == 0:
        return [PercentileGroup(1.0, 0.7 - 0.1 * level, 1.0)]
    if tier == 1:
        lo = 0.49 - 0.07 * (level - 3)
        mid = lo + (1 - lo) / 2
        return [PercentileGroup(0.5, lo, mid), PercentileGroup(0.5, mid, 1.0)]
    if tier == 2:
        lo = 0.49 - 0.08 * (level - 6)
        r = 1 - lo
        return [
            PercentileGroup(0.3, lo, lo + r * 0.3),
            PercentileGroup(0.45, lo + r * 0.3, lo + r * 0.65),
            PercentileGroup(0.25, lo + r * 0.65, 1.0),
        ]
    lo = 0.25 - 0.083 * (min(level, MAX_LEVEL) - 9)
    r = 1 - lo
    return [
        PercentileGroup(0.2, lo, lo + r * 0.2),
        PercentileGroup(0.6, lo + r * 0.2, lo + r * 0.6),
        PercentileGroup(0.2, lo + r * 0.6, 1.0),
    ]


def tile_gap_bounds(level: int) -> Tuple[float, float]:
    """[lo, hi) for the space after a tile: walk jumps early, run jumps from level 7."""
    tier = level_tier(level)
    if tier == 0:
        return MIN_TILE_SPACE, WALK_JUMP_DISTANCE
    if tier == 1:
        return MIN_TILE_SPACE, MAX_TILE_SPACE * 0.5
    return WALK_JUMP_DISTANCE, MAX_TILE_SPACE


def batch_target_width(level: int, screen_width: float) -> float:
    return screen_width * (BATCH_SCREENS_BASE + level)


def width_percentiles(widths: Sequence[float]) -> List[float]:
    """Position of each width inside [min, max] of the batch, in [0, 1]."""
    lo, hi = min(widths), max(widths)
    span = hi - lo
    if span <= 0:
        return [0.0] * len(widths)
    return [(w - lo) / span for w in widths]


class LevelGenerator:
    """
    Batch generator for the endless road.
    One batch = tile widths + obstacle counts per tile + gems between tiles,
    served one tile at a time by get_next_tile(). A new batch is generated
    from the current level once the cursor reaches the last tile.
    """
    def __init__(self, screen_width: float = WIDTH, seed: int | None = None,
                 rng: random.Random | None = None, start_level: int = 1):
        if screen_width <= 0:
            raise ValueError(f"screen_width must be > 0, got {screen_width!r}")
        if rng is None:
            if seed is None:
                seed = random.randrange(0, 2**32 - 1)
            rng = random.Random(seed)
        self.seed = seed
        self.rng = rng
        self.screen_width = float(screen_width)
        self.min_tile_w = self.screen_width * ROAD_TILE_MIN_FRAC
        self.max_tile_w = self.screen_width * ROAD_TILE_MAX_FRAC

        self.current_level = check_level(start_level)
        self.sequence_pointer = 0
        self.last_gap = 0.0
        self._widths: List[float] = []
        self._obstacles: List[ObstacleCounts] = []
        self._gems: List[Optional[GemKind]] = []

        self.diamond_allocation = self._generate_diamond_allocation()
        self._regenerate()

    # -------------------- Read-only views --------------------

    @property
    def tile_widths(self) -> Tuple[float, ...]:
        return tuple(self._widths)

    @property
    def obstacle_placements(self) -> Tuple[ObstacleCounts, ...]:
        return tuple(self._obstacles)

    @property
    def gem_placements(self) -> Tuple[Optional[GemKind], ...]:
        return tuple(self._gems)

    # -------------------- Tiles --------------------

    def generate_tile_sequence(self, level: int, screen_width: float) -> List[float]:
        check_level(level)
        min_w = screen_width * ROAD_TILE_MIN_FRAC
        max_w = screen_width * ROAD_TILE_MAX_FRAC
        groups = percentile_groups(level)

        widths = []
        for _ in range(tile_count_for_level(level)):
            g = self._select_weighted_group(groups)
            frac = g.lo + self.rng.random() * (g.hi - g.lo)
            widths.append(min_w + frac * (max_w - min_w))

        # Fix the batch's total distance, keep the proportions
        ratio = batch_target_width(level, screen_width) / sum(widths)
        return [max(1, math.floor(w * ratio)) for w in widths]

    def _select_weighted_group(self, groups: Sequence[PercentileGroup]) -> PercentileGroup:
        total = sum(g.weight for g in groups)
        r = self.rng.random() * total
        for g in groups:
            if r < g.weight:
                return g
            r -= g.weight
        return groups[0]

    # -------------------- Obstacles --------------------

    def generate_obstacle_placement(self, level: int, tile_sequence: Sequence[float]) -> List[ObstacleCounts]:
        check_level(level)
        n = len(tile_sequence)
        counts = [[0, 0, 0] for _ in range(n)]
        if n == 0:
            return []
        pct = width_percentiles(tile_sequence)
        by_width = sorted(range(n), key=lambda i: tile_sequence[i])
        low, mid, high = ObstacleTier.LOW, ObstacleTier.MID, ObstacleTier.HIGH
        tier = level_tier(level)

        if tier == 0:
            for c in counts:
                c[low] = 1
                if self.rng.random() < 0.1 * level:
                    c[low] += 1

        elif tier == 1:
            self._spread(counts, low, 12)
            for c in counts:
                if self.rng.random() < 0.2 * (level - 3):
                    c[mid] += 1

        elif tier == 2:
            self._spread(counts, low, max(n, 12 + (level - 6) * 2))
            for i in by_width:
                c = counts[i]
                if pct[i] > 0.3:
                    c[mid] += 1
                    if self.rng.random() < 0.2 * (level - 6):
                        c[low] += 1
                if pct[i] > 0.65:
                    if self.rng.random() < 0.6:
                        c[mid] += 1
                    if self.rng.random() < 0.4 * (level - 6):
                        c[high] += 1

        else:
            k = level - 9
            for i in by_width:
                c = counts[i]
                p = pct[i]
                if p < 0.1:
                    continue
                elif p < 0.2:
                    c[self.rng.randrange(3)] = 1
                elif p < 0.7:
                    c[low] = 1
                    c[mid] = self.rng.randint(1, 2)
                    c[high] = 1
                else:
                    c[low] = self.rng.randint(2, 2 * k + 1)
                    c[mid] = self.rng.randint(1, k)
                    c[high] = self.rng.randint(1, k)

        return [tuple(c) for c in counts]

    def _spread(self, counts: List[List[int]], tier: int, total: int):
        """One per tile until the total runs out, the rest on random tiles."""
        remaining = total
        for c in counts:
            if remaining <= 0:
                break
            c[tier] += 1
            remaining -= 1
        while remaining > 0:
            counts[self.rng.randrange(len(counts))][tier] += 1
            remaining -= 1

    def is_obstacle_moving(self, tier: ObstacleTier, level: int | None = None) -> bool:
        """
        Levels 1-3 static, 4-6 half of them move, 7-9 40%, 10+ all.
        Low tier obstacles never move.
        """
        level = self.current_level if level is None else check_level(level)
        if tier == ObstacleTier.LOW:
            return False
        t = level_tier(level)
        if t == 0:
            return False
        if t == 1:
            return self.rng.random() < 0.5
        if t == 2:
            return self.rng.random() < 0.4
        return True

    # -------------------- Gems --------------------

    def _random_allocation(self, count: int) -> List[int]:
        alloc = [0, 0, 0]
        remaining = count
        while remaining > 0:
            i = self.rng.randrange(3)
            if alloc[i] < MAX_DIAMONDS_PER_LEVEL:
                alloc[i] += 1
                remaining -= 1
        return alloc

    def _generate_diamond_allocation(self) -> List[int]:
        """Diamonds per level 1..MAX_LEVEL; none before level 4."""
        alloc = [0, 0, 0]
        for n in DIAMONDS_PER_TIER:
            alloc.extend(self._random_allocation(n))
        return alloc

    def generate_gem_placement(self, level: int, tile_count: int) -> List[Optional[GemKind]]:
        check_level(level)
        if tile_count < 1:
            raise ValueError(f"tile_count must be >= 1, got {tile_count!r}")
        slots = tile_count - 1
        diamonds = self.diamond_allocation[min(level, MAX_LEVEL) - 1]
        hearts = max(0, level - 2)
        gems: List[Optional[GemKind]] = [GemKind.DIAMOND] * diamonds + [GemKind.HEART] * hearts

        # Bonus round at the top levels: the road is paved with diamonds,
        # except for a few empty gaps at the very end.
        bonus = level >= MAX_LEVEL - 1
        fill_to = max(0, slots - BONUS_EMPTY_SLOTS) if bonus else slots
        gems = gems[:fill_to]
        filler = GemKind.DIAMOND if bonus else None
        gems.extend([filler] * (fill_to - len(gems)))
        self.rng.shuffle(gems)
        gems.extend([None] * (slots - len(gems)))
        return gems

    # -------------------- Cursor --------------------

    def get_tile_gap(self, level: int | None = None) -> float:
        level = self.current_level if level is None else level
        lo, hi = tile_gap_bounds(level)
        return math.floor(self.rng.random() * (hi - lo)) + lo

    def get_next_tile(self) -> TileDescriptor:
        i = self.sequence_pointer
        width = self._widths[i]
        counts = self._obstacles[i]
        gem = self._gems[i] if i < len(self._gems) else None
        gap = self.get_tile_gap(self.current_level)
        self.last_gap = gap

        is_last = False
        self.sequence_pointer += 1
        if self.sequence_pointer >= len(self._widths) - 1:
            is_last = True
            self.sequence_pointer = 0
            self._regenerate()

        return TileDescriptor(
            width=width,
            obstacle_counts=counts,
            gem_kind=gem,
            gap_to_next=gap,
            is_last_in_batch=is_last,
        )

    def _regenerate(self):
        level = self.current_level
        self._widths = self.generate_tile_sequence(level, self.screen_width)
        self._obstacles = self.generate_obstacle_placement(level, self._widths)
        self._gems = self.generate_gem_placement(level, len(self._widths))
        logger.debug("New batch for level %d: %d tiles, %d gems",
                     level, len(self._widths), sum(g is not None for g in self._gems))

    def level_up(self) -> int:
        """Next level. Applies from the next batch, not to tiles already served."""
        self.current_level += 1
        logger.info("Level up -> %d", self.current_level)
        return self.current_level
