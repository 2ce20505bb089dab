# src/runner/simulator.py
from __future__ import annotations
import logging
import random
from collections import deque
from typing import Callable, Deque, List, Optional, Tuple
from .config import (
    WIDTH, HEIGHT, FPS, ACTOR_X_FRAC, PLAYER_W, PLAYER_H,
    ROAD_AHEAD_SCREENS, FALL_SPEED, LEVEL_DISTANCE_SCREENS,
    AUTO_RUN_SPEED, AUTO_RUN_DURATION_S, AUTO_RUN_EXIT_FRAC, OBSTACLE_HOP_FRAC,
    TILE_SCORE, JUMP_OVER_SCORE, LEVEL_UP_SCORE, LEVEL_UP_LIVES, HEART_LIVES,
)
from .entities import Tile, Obstacle, Gem, ObstacleTier, GemKind
from .level import LevelGenerator, TileDescriptor
from .player import ActorKinematics, Gait, JumpPhase, jump_offset
from .ports import (
    ActorView, ScoreLifeSink, EntityVisualFactory, BackgroundScroller,
    GeometryProvider, StaticGeometry,
)

logger = logging.getLogger(__name__)


class RunnerSimulator:
    """
    Per-frame simulation of the runner against a scrolling road.

    The actor stays at a fixed x while the road scrolls left by the current
    speed. tick() runs one frame in a fixed order:
      input -> progress/level -> falling -> speed -> jump arc -> scroll
      -> gap check -> obstacles -> gems -> score -> retire -> extend -> background
    Input handlers only record intentions; jumps are applied at the next tick.
    """
    def __init__(self,
                 level_gen: LevelGenerator,
                 view: ActorView,
                 sink: ScoreLifeSink,
                 factory: EntityVisualFactory,
                 background: BackgroundScroller,
                 geometry: Optional[GeometryProvider] = None,
                 *,
                 screen_width: float = WIDTH,
                 screen_height: float = HEIGHT,
                 fps: int = FPS,
                 rng: Optional[random.Random] = None,
                 seed: Optional[int] = None,
                 on_game_over: Optional[Callable[[str], None]] = None,
                 on_level_up: Optional[Callable[[int], None]] = None):
        if screen_width <= 0 or screen_height <= 0:
            raise ValueError(f"bad screen size {screen_width!r}x{screen_height!r}")
        self.level_gen = level_gen
        self.view = view
        self.sink = sink
        self.factory = factory
        self.background = background
        self.geometry = geometry if geometry is not None else StaticGeometry()
        self.rng = rng if rng is not None else random.Random(seed)
        self.on_game_over = on_game_over
        self.on_level_up = on_level_up

        self.screen_width = float(screen_width)
        self.screen_height = float(screen_height)
        self.fps = fps
        self.road_h = self.screen_height / 10
        self.road_y = self.screen_height - self.road_h
        self.actor_w, self.actor_h = self._read_actor_size()
        self.base_y = self.road_y - self.actor_h
        self.jump_peak_height = (self.screen_height - 2 * self.road_h - self.actor_h) / 2
        self.level_distance = LEVEL_DISTANCE_SCREENS * self.screen_width

        self.kin = ActorKinematics(x=self.screen_width * ACTOR_X_FRAC, y=self.base_y)
        self.clock = 0.0
        self.tiles: Deque[Tile] = deque()
        self.next_tile_id = 0
        self.last_credited_id = 0
        self.alive = True
        self.death_cause: Optional[str] = None
        self.auto_run = False
        self.auto_run_until = 0.0
        self._pending_jumps = 0
        self._next_level_at = self.level_distance
        self._shown_state: Optional[str] = None

        self._create_environment()
        self._show_state(self.kin.visual_state())
        self._push_actor()

    # -------------------- Setup --------------------

    def _read_actor_size(self) -> Tuple[float, float]:
        try:
            w, h = self.view.get_size()
            w, h = float(w), float(h)
            if w <= 0 or h <= 0:
                raise ValueError(f"non-positive size {w}x{h}")
            return w, h
        except (TypeError, ValueError, AttributeError) as e:
            logger.warning("Actor view gave no usable size (%s), using %dx%d", e, PLAYER_W, PLAYER_H)
            return float(PLAYER_W), float(PLAYER_H)

    def _create_environment(self):
        # Starting tile: one full screen, nothing on it, no gap after it
        self._add_tile(0.0, self.screen_width, (0, 0, 0), gap=0.0, gem_kind=None)
        self._extend_road()

    def _add_tile(self, x: float, width: float, counts, gap: float,
                  gem_kind: Optional[GemKind]) -> Tile:
        tile = Tile(id=self.next_tile_id, x=x, width=width, y=self.road_y,
                    height=self.road_h, gap_to_next=gap)
        self.next_tile_id += 1
        tile.visual = self.factory.create_tile_visual(tile)

        level = self.level_gen.current_level
        for tier in ObstacleTier:
            for _ in range(counts[tier]):
                ow, oh = self.geometry.obstacle_size(tier)
                ox = x + ow * 0.5 + self.rng.random() * max(0.0, width - ow)
                ob = Obstacle(tier=tier, x=ox, y=self.road_y, width=ow, height=oh,
                              is_moving=self.level_gen.is_obstacle_moving(tier), level=level)
                ob.visual = self.factory.create_obstacle_visual(ob)
                tile.obstacles.append(ob)

        if gem_kind is not None and gap > 0:
            gw, gh = self.geometry.gem_size(gem_kind)
            gem = Gem(kind=gem_kind, x=tile.right + gap * 0.5, y=self.road_y - self.road_h,
                      width=gw, height=gh)
            gem.visual = self.factory.create_gem_visual(gem)
            tile.gems.append(gem)

        self.tiles.append(tile)
        return tile

    def _add_tile_from(self, desc: TileDescriptor, x: float) -> Tile:
        return self._add_tile(x, desc.width, desc.obstacle_counts, desc.gap_to_next,
                              desc.gem_kind)

    # -------------------- Input (intentions only) --------------------

    def _input_locked(self) -> bool:
        return (not self.alive) or self.kin.falling or self.auto_run

    def press_move(self):
        if self._input_locked():
            return
        self.kin.press_move(self.clock)
        if not self.kin.airborne:
            self._show_state(self.kin.visual_state())

    def release_move(self):
        if self._input_locked():
            return
        self.kin.release_move()
        if not self.kin.airborne:
            self._show_state(Gait.IDLE.value)

    def press_jump(self):
        if self._input_locked():
            return
        self._pending_jumps += 1

    def _apply_pending_jumps(self):
        n, self._pending_jumps = self._pending_jumps, 0
        for _ in range(n):
            if self.kin.try_jump(self.clock):
                self._show_state("jump")

    # -------------------- Frame --------------------

    @property
    def current_level(self) -> int:
        return self.level_gen.current_level

    def tick(self, dt: float = 1.0 / FPS):
        """Advance one frame. Does nothing once the run is over."""
        if not self.alive:
            return
        self.clock += dt
        if self.auto_run:
            self._pending_jumps = 0
        self._apply_pending_jumps()

        self.kin.distance_traveled += self.kin.speed
        if self.kin.distance_traveled >= self._next_level_at:
            self._next_level_at += self.level_distance
            self._level_up()

        if self.kin.falling:
            self._handle_fall()
            return

        if self.auto_run:
            self.kin.speed = self.kin.target_speed
            self._drive_auto_run()
        else:
            self.kin.smooth_speed()

        if self.kin.airborne:
            self._advance_jump()

        self._shift_world(-self.kin.speed)

        if not self.kin.airborne and not self.auto_run:
            self._check_fell_down()

        if not self.kin.falling:
            self._check_obstacles()
            if not self.alive:
                self._push_actor()
                return
            self._collect_gems()

        self._credit_progress()
        self._retire_tiles()
        self._extend_road()
        self.background.set_scroll_speed(self.kin.speed)
        self._push_actor()

    def _level_up(self):
        level = self.level_gen.level_up()
        self.sink.add_score(LEVEL_UP_SCORE)
        self.sink.add_life(LEVEL_UP_LIVES)
        if self.on_level_up is not None:
            self.on_level_up(level)

    def _handle_fall(self):
        self.kin.y += FALL_SPEED
        self._push_actor()
        if self.kin.y > self.screen_height:
            self._game_over("fall")

    def _advance_jump(self):
        p = self.kin.jump_progress(self.clock)
        double = self.kin.jump_phase == JumpPhase.DOUBLE_JUMP
        self.kin.y = self.base_y + jump_offset(p, self.jump_peak_height, double)
        if p >= 1.0:
            self.kin.y = self.base_y
            self.kin.fire("land")
            self._show_state(Gait.RUN.value if self.auto_run else self.kin.visual_state())

    def _shift_world(self, dx: float):
        max_hop = self.jump_peak_height * OBSTACLE_HOP_FRAC
        for tile in self.tiles:
            tile.shift(dx, max_hop, self.rng)

    # -------------------- Checks --------------------

    def gaps(self) -> List[Tuple[float, float]]:
        """(start, end) of every gap between consecutive active tiles, left to right."""
        tiles = list(self.tiles)
        return [(a.right, b.x) for a, b in zip(tiles, tiles[1:]) if b.x > a.right]

    def next_gap(self) -> Optional[Tuple[float, float]]:
        """First gap the actor has not yet fully cleared."""
        for start, end in self.gaps():
            if end > self.kin.x:
                return start, end
        return None

    def next_obstacle(self) -> Optional[Obstacle]:
        """Nearest unresolved obstacle whose right edge is still ahead of the actor."""
        best = None
        for tile in self.tiles:
            for ob in tile.obstacles:
                if ob.resolved or ob.right < self.kin.x:
                    continue
                if best is None or ob.left < best.left:
                    best = ob
        return best

    def tile_under_actor(self) -> Optional[Tile]:
        cx = self.kin.x + self.actor_w * 0.5
        for tile in self.tiles:
            if tile.contains_x(cx):
                return tile
        return None

    def _check_fell_down(self):
        # Up to fall_threshold of the body, from the front, may hang over a gap
        px = self.kin.x + self.actor_w * (1 - self.geometry.fall_threshold)
        for start, end in self.gaps():
            if start < px < end:
                self.kin.x = start - self.actor_w / 2
                if self.kin.fire("fall"):
                    logger.info("Fell into the gap at x=%.0f", start)
                return

    def _check_obstacles(self):
        ct = self.geometry.collision_threshold
        inset = self.actor_w * (1 - ct) * 0.5
        a_left = self.kin.x + inset
        a_right = self.kin.x + self.actor_w - inset
        a_top = self.kin.y
        a_bottom = self.kin.y + self.actor_h
        in_air = self.kin.airborne or self.auto_run

        for tile in self.tiles:
            for ob in tile.obstacles:
                if ob.resolved:
                    continue
                x_hit = a_right > ob.left and a_left < ob.right
                if in_air:
                    cleared = x_hit and a_bottom < ob.mid_y
                    if cleared or (self.auto_run and ob.right < a_left):
                        ob.jumped_over = True
                        self.sink.add_score(JUMP_OVER_SCORE)
                elif x_hit and a_bottom > ob.mid_y and a_top < ob.y:
                    ob.hit = True
                    if not self.sink.apply_life_cost(ob.tier.life_cost):
                        self._game_over("obstacle")
                        return

    def _collect_gems(self):
        if not (self.kin.airborne or self.auto_run):
            return
        cx = self.kin.x + self.actor_w * 0.5
        for tile in self.tiles:
            for gem in list(tile.gems):
                if gem.x <= cx and gem.x + gem.width * 0.5 >= self.kin.x:
                    tile.gems.remove(gem)
                    self.factory.destroy_gem_visual(gem.visual)
                    self._apply_gem(gem.kind)

    def _apply_gem(self, kind: GemKind):
        if kind == GemKind.HEART:
            self.sink.add_life(HEART_LIVES)
        elif kind == GemKind.DIAMOND:
            self.start_auto_run()

    def _credit_progress(self):
        tile = self.tile_under_actor()
        if tile is not None and tile.id > self.last_credited_id:
            self.sink.add_score(TILE_SCORE * (tile.id - self.last_credited_id))
            self.last_credited_id = tile.id

    # -------------------- Road window --------------------

    def _retire_tiles(self):
        while self.tiles and self.tiles[0].right <= 0:
            tile = self.tiles.popleft()
            for ob in tile.obstacles:
                self.factory.destroy_obstacle_visual(ob.visual)
            for gem in tile.gems:
                self.factory.destroy_gem_visual(gem.visual)
            self.factory.destroy_tile_visual(tile.visual)

    def _extend_road(self):
        limit = ROAD_AHEAD_SCREENS * self.screen_width
        while self.tiles[-1].right < limit:
            last = self.tiles[-1]
            desc = self.level_gen.get_next_tile()
            self._add_tile_from(desc, last.right + last.gap_to_next)

    # -------------------- Auto-run --------------------

    def start_auto_run(self):
        """Diamond power-up: fixed high speed with automatic jumps over every gap."""
        self.auto_run_until = self.clock + AUTO_RUN_DURATION_S
        if self.auto_run:
            return
        self.auto_run = True
        self.kin.target_speed = AUTO_RUN_SPEED
        self.kin.gait = Gait.RUN
        self.kin.move_key_held = False
        self.kin.last_move_key_time = None
        self._pending_jumps = 0
        if not self.kin.airborne:
            self._show_state(Gait.RUN.value)
        logger.info("Auto-run until t=%.2fs", self.auto_run_until)

    def _drive_auto_run(self):
        if self.kin.airborne:
            return
        tile = self.tile_under_actor()
        if (self.clock >= self.auto_run_until and tile is not None
                and self.kin.x + self.actor_w < tile.x + tile.width * AUTO_RUN_EXIT_FRAC):
            self._end_auto_run()
            return

        gap = self.next_gap()
        speed = self.kin.speed
        if gap is None or speed <= 0:
            return
        start, end = gap
        if start - (self.kin.x + self.actor_w) <= speed:
            frames = (end - self.kin.x) / speed + 1
            if self.kin.try_jump(self.clock, duration=frames / self.fps):
                self._show_state("jump")

    def _end_auto_run(self):
        self.auto_run = False
        self.kin.target_speed = 0.0
        self.kin.speed = 0.0
        self.kin.gait = Gait.IDLE
        self._show_state(Gait.IDLE.value)
        logger.info("Auto-run over")

    # -------------------- Collaborators --------------------

    def _game_over(self, cause: str):
        if not self.alive:
            return
        self.alive = False
        self.death_cause = cause
        self._show_state("dead")
        logger.info("Game over (%s) at level %d", cause, self.level_gen.current_level)
        if self.on_game_over is not None:
            self.on_game_over(cause)

    def _show_state(self, name: str):
        if name == self._shown_state:
            return
        self._shown_state = name
        try:
            self.view.set_state(name)
        except (KeyError, ValueError) as e:
            logger.warning("Actor view rejected state %r: %s", name, e)

    def _push_actor(self):
        self.view.set_position(self.kin.x, self.kin.y)
