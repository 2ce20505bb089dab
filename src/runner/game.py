# src/runner/game.py
import sys, argparse, logging
from pathlib import Path
from typing import Dict, Tuple
import pygame
from pygame import K_ESCAPE, K_RIGHT, K_d, K_UP, K_w, K_SPACE, K_r
from .config import (
    WIDTH, HEIGHT, FPS, SEED_DEFAULT, CITY_COUNT,
    COLOR_BG, COLOR_FG, COLOR_ACCENT, COLOR_ROAD, COLOR_DANGER,
    COLOR_OBSTACLES, COLOR_GEMS, COLOR_PARALLAX, PLAYER_W, PLAYER_H,
)
from .entities import Tile, Obstacle, Gem
from .headless import ACTOR_STATES
from .level import LevelGenerator
from .ports import StaticGeometry
from .scoreboard import Scoreboard
from .settings import JsonSettingsStore, RunSettings
from .simulator import RunnerSimulator

logger = logging.getLogger(__name__)

MOVE_KEYS = (K_RIGHT, K_d)
JUMP_KEYS = (K_UP, K_w, K_SPACE)
STATE_COLORS = {
    "idle": COLOR_ACCENT, "walk": COLOR_ACCENT, "run": (255, 210, 120),
    "jump": (200, 240, 255), "dead": COLOR_DANGER,
}


class PygameActorView:
    """Actor as a coloured rect; color follows the state name."""
    def __init__(self, size: Tuple[int, int] = (PLAYER_W, PLAYER_H)):
        self.rect = pygame.Rect(0, 0, *size)
        self.state = "idle"

    def set_state(self, name: str) -> None:
        if name not in ACTOR_STATES:
            raise KeyError(name)
        self.state = name

    def get_position(self) -> Tuple[float, float]:
        return float(self.rect.x), float(self.rect.y)

    def set_position(self, x: float, y: float) -> None:
        self.rect.topleft = (int(x), int(y))

    def get_size(self) -> Tuple[int, int]:
        return self.rect.size

    def draw(self, surf: pygame.Surface):
        pygame.draw.rect(surf, STATE_COLORS.get(self.state, COLOR_ACCENT), self.rect, border_radius=6)


class RectVisualFactory:
    """
    Keeps every live entity keyed by handle and draws them as rects.
    Handles are plain ints; the simulator never looks inside.
    """
    def __init__(self):
        self._next = 0
        self.tiles: Dict[int, Tile] = {}
        self.obstacles: Dict[int, Obstacle] = {}
        self.gems: Dict[int, Gem] = {}

    def _register(self, table: dict, entity) -> int:
        handle = self._next
        self._next += 1
        table[handle] = entity
        return handle

    def create_tile_visual(self, tile: Tile) -> int:
        return self._register(self.tiles, tile)

    def create_obstacle_visual(self, obstacle: Obstacle) -> int:
        return self._register(self.obstacles, obstacle)

    def create_gem_visual(self, gem: Gem) -> int:
        return self._register(self.gems, gem)

    def destroy_tile_visual(self, handle: int) -> None:
        self.tiles.pop(handle, None)

    def destroy_obstacle_visual(self, handle: int) -> None:
        self.obstacles.pop(handle, None)

    def destroy_gem_visual(self, handle: int) -> None:
        self.gems.pop(handle, None)

    def draw(self, surf: pygame.Surface):
        for t in self.tiles.values():
            pygame.draw.rect(surf, COLOR_ROAD, pygame.Rect(int(t.x), int(t.y), int(t.width), int(t.height)))
        for ob in self.obstacles.values():
            r = pygame.Rect(int(ob.left), int(ob.top), int(ob.width), int(ob.height))
            pygame.draw.ellipse(surf, COLOR_OBSTACLES[ob.tier], r)
        for g in self.gems.values():
            r = pygame.Rect(int(g.x - g.width / 2), int(g.y - g.height), int(g.width), int(g.height))
            pygame.draw.rect(surf, COLOR_GEMS[g.kind.value], r, border_radius=8)


class ParallaxBackground:
    """Three skyline layers scrolling at fractions of the road speed."""
    FACTORS = (0.1, 0.25, 0.5)

    def __init__(self, city_index: int = 0, width: int = WIDTH, height: int = HEIGHT):
        self.width = width
        self.height = height
        self.offsets = [0.0 for _ in self.FACTORS]
        self.speed = 0.0
        tint = (city_index % CITY_COUNT) * 6
        self.colors = [tuple(min(255, c + tint) for c in col) for col in COLOR_PARALLAX]

    def set_scroll_speed(self, speed: float) -> None:
        self.speed = speed
        for i, f in enumerate(self.FACTORS):
            self.offsets[i] = (self.offsets[i] + speed * f) % self.width

    def draw(self, surf: pygame.Surface):
        for i, (off, col) in enumerate(zip(self.offsets, self.colors)):
            block_w = 80 + 40 * i
            h_base = self.height * (0.25 + 0.12 * i)
            x = -off
            n = 0
            while x < self.width:
                h = h_base * (0.7 + 0.3 * ((n * 7 + i * 3) % 5) / 4)
                pygame.draw.rect(surf, col, pygame.Rect(int(x), int(self.height - h), block_w - 6, int(h)))
                x += block_w
                n += 1


def draw_frame(surf: pygame.Surface, background: ParallaxBackground, factory: RectVisualFactory,
               view: PygameActorView):
    surf.fill(COLOR_BG)
    background.draw(surf)
    factory.draw(surf)
    view.draw(surf)


def parse_args():
    p = argparse.ArgumentParser()
    p.add_argument("--seed", type=int, default=None,
                   help="Level seed. Omit for SEED_DEFAULT, use -1 for random each launch.")
    p.add_argument("--level", type=int, default=None, help="Starting level (overrides saved settings).")
    p.add_argument("--avatar", type=int, default=None, help="Avatar index (0 girl, 1 boy).")
    p.add_argument("--settings", type=Path, default=Path.home() / ".slime-runner.json",
                   help="Where to keep settings and the best score.")
    return p.parse_args()


def run():
    args = parse_args()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    # Resolve seed: None -> use SEED_DEFAULT; -1 -> random
    if args.seed is None:
        launch_seed = SEED_DEFAULT
    elif args.seed == -1:
        launch_seed = None
    else:
        launch_seed = args.seed

    store = JsonSettingsStore(args.settings)
    settings = store.load()
    if args.level is not None:
        settings.start_level = args.level
    if args.avatar is not None:
        settings.avatar_index = args.avatar
    try:
        settings.validate()
    except ValueError as e:
        print(f"Bad option: {e}", file=sys.stderr)
        sys.exit(2)

    pygame.init()
    pygame.display.set_caption("Slime Runner")
    screen = pygame.display.set_mode((WIDTH, HEIGHT))
    clock = pygame.time.Clock()
    font = pygame.font.SysFont("jetbrainsmono", 18)

    def reset_world(seed_spec, s: RunSettings):
        level = LevelGenerator(WIDTH, seed=seed_spec, start_level=s.start_level)
        view = PygameActorView()
        factory = RectVisualFactory()
        background = ParallaxBackground(s.city_index)
        board = Scoreboard(best_score=s.best_score)
        sim = RunnerSimulator(level, view, board, factory, background,
                              StaticGeometry(s.avatar_index), seed=level.seed)
        return sim, view, factory, background, board

    sim, view, factory, background, board = reset_world(launch_seed, settings)
    move_held = set()

    def save_best():
        if board.best_score > settings.best_score:
            settings.best_score = board.best_score
            store.save(settings)
            logger.info("New best score %d saved to %s", board.best_score, store.path)

    while True:
        clock.tick(FPS)

        for event in pygame.event.get():
            if event.type == pygame.QUIT or (event.type == pygame.KEYDOWN and event.key == K_ESCAPE):
                save_best()
                pygame.quit(); sys.exit()
            if event.type == pygame.KEYDOWN:
                if event.key in MOVE_KEYS:
                    move_held.add(event.key)
                    sim.press_move()
                elif event.key in JUMP_KEYS:
                    sim.press_jump()
                elif event.key == K_r and not sim.alive:
                    save_best()
                    sim, view, factory, background, board = reset_world(sim.level_gen.seed, settings)
                    move_held.clear()
            if event.type == pygame.KEYUP and event.key in MOVE_KEYS:
                move_held.discard(event.key)
                if not move_held:
                    sim.release_move()

        sim.tick(1.0 / FPS)

        # --- Render ---
        draw_frame(screen, background, factory, view)
        hud = f"Score: {board.score}   Best: {board.best_score}   Lives: {board.lives}   Level: {sim.current_level}"
        if sim.auto_run:
            hud += f"   AUTO-RUN {max(0.0, sim.auto_run_until - sim.clock):.1f}s"
        screen.blit(font.render(hud, True, COLOR_FG), (12, 10))
        screen.blit(font.render("RIGHT walk (double tap run) | UP jump | ESC quit", True, (200, 205, 230)), (12, 32))

        if not sim.alive:
            msg = font.render(f"GAME OVER ({sim.death_cause}) - press R to restart", True, COLOR_DANGER)
            screen.blit(msg, ((WIDTH - msg.get_width()) // 2, HEIGHT // 2 - msg.get_height()))

        pygame.display.flip()


if __name__ == "__main__":
    run()
