# src/env/runner_env.py
from __future__ import annotations
from typing import Optional, Dict, Any
import numpy as np
import gymnasium as gym
import pygame

from src.runner.config import (
    WIDTH, HEIGHT, FPS, COLOR_BG, COLOR_ROAD, COLOR_OBSTACLES, COLOR_GEMS, COLOR_ACCENT, COLOR_DANGER,
)
from src.runner.headless import HeadlessActorView, CountingVisualFactory, StillBackground
from src.runner.level import LevelGenerator
from src.runner.ports import StaticGeometry
from src.runner.scoreboard import Scoreboard
from src.runner.simulator import RunnerSimulator
from src.env.observations import build_observation, OBS_SIZE


class RunnerEnv(gym.Env):
    """
    Slime Runner Gymnasium environment (vector observations).
    - Simulation at 60 Hz (internal).
    - Agent acts every `frame_skip` frames (default 4) -> 15 decisions/sec.
    - Actions: 0 = release move key, 1 = walk, 2 = run (double tap), 3 = jump.
    - Observation: shape (10,), float32 in [0, 1].
    """
    metadata = {"render_modes": ["human", "rgb_array"], "render_fps": 60}

    NOOP, WALK, RUN, JUMP = 0, 1, 2, 3

    def __init__(self,
                 render_mode: Optional[str] = None,
                 frame_skip: int = 4,
                 time_limit_seconds: Optional[float] = 60.0,
                 avatar_index: int = 0):
        super().__init__()
        assert frame_skip >= 1, "frame_skip must be >= 1"
        self.render_mode = render_mode
        self.frame_skip = int(frame_skip)
        self.avatar_index = avatar_index

        self.sim_fps = FPS
        self.dt = 1.0 / self.sim_fps

        self.time_limit_decisions = None
        if time_limit_seconds is not None:
            self.time_limit_decisions = int(self.sim_fps * time_limit_seconds / self.frame_skip)

        self.action_space = gym.spaces.Discrete(4)
        self.observation_space = gym.spaces.Box(
            low=np.zeros(OBS_SIZE, dtype=np.float32),
            high=np.ones(OBS_SIZE, dtype=np.float32),
            dtype=np.float32,
        )

        # --- Runtime state ---
        self.sim: Optional[RunnerSimulator] = None
        self.board: Optional[Scoreboard] = None
        self.timestep: int = 0
        self.current_seed: Optional[int] = None

        # Rendering
        self.screen = None
        self.clock = None

    # -------------------- Core API --------------------

    def reset(self, *, seed: Optional[int] = None, options: Optional[Dict[str, Any]] = None):
        super().reset(seed=seed)

        # Seeded episodes are fully reproducible; unseeded ones randomize the road.
        level_seed = int(seed) if seed is not None else None
        start_level = int((options or {}).get("start_level", 1))

        level = LevelGenerator(WIDTH, seed=level_seed, start_level=start_level)
        self.board = Scoreboard()
        self.sim = RunnerSimulator(
            level, HeadlessActorView(), self.board, CountingVisualFactory(), StillBackground(),
            StaticGeometry(self.avatar_index),
            screen_width=WIDTH, screen_height=HEIGHT, fps=self.sim_fps, seed=level.seed,
        )
        self.timestep = 0
        self.current_seed = level.seed

        return self._get_obs(), self._info()

    def step(self, action: int):
        assert self.action_space.contains(action), f"Invalid action {action}"
        assert self.sim is not None and self.board is not None

        action = int(action)
        if action == self.NOOP:
            self.sim.release_move()
        elif action == self.WALK:
            if not self.sim.kin.move_key_held:
                self.sim.press_move()
        elif action == self.RUN:
            if self.sim.kin.move_key_held:
                self.sim.release_move()
            # Two taps inside the double-press window
            self.sim.press_move()
            self.sim.release_move()
            self.sim.press_move()
        elif action == self.JUMP:
            self.sim.press_jump()

        score_before = self.board.score
        for _ in range(self.frame_skip):
            self.sim.tick(self.dt)
            if not self.sim.alive:
                break

        terminated = not self.sim.alive
        reward = (self.board.score - score_before) / 100.0
        if terminated:
            reward -= 1.0

        self.timestep += 1
        truncated = False
        if (self.time_limit_decisions is not None) and (self.timestep >= self.time_limit_decisions):
            truncated = True

        if self.render_mode == "human":
            self.render()

        return self._get_obs(), float(reward), terminated, truncated, self._info()

    # -------------------- Helpers --------------------

    def _get_obs(self) -> np.ndarray:
        assert self.sim is not None and self.board is not None
        return build_observation(self.sim, self.board.lives)

    def _info(self) -> Dict[str, Any]:
        assert self.sim is not None and self.board is not None
        return {
            "seed": self.current_seed,
            "timestep": self.timestep,
            "score": self.board.score,
            "lives": self.board.lives,
            "level": self.sim.current_level,
            "distance_px": self.sim.kin.distance_traveled,
            "death_cause": self.sim.death_cause,
        }

    # -------------------- Rendering --------------------

    def render(self):
        if self.render_mode is None or self.sim is None:
            return

        if self.screen is None:
            pygame.init()
            if self.render_mode == "human":
                self.screen = pygame.display.set_mode((WIDTH, HEIGHT))
                pygame.display.set_caption("Slime Runner - Gym Env")
            else:
                self.screen = pygame.Surface((WIDTH, HEIGHT))
            self.clock = pygame.time.Clock()

        if self.render_mode == "human":
            pygame.event.pump()

        self._draw(self.screen)

        if self.render_mode == "human":
            pygame.display.flip()
            if self.clock is not None:
                self.clock.tick(self.metadata.get("render_fps", 60))
            return None

        # (H, W, 3) uint8
        arr = pygame.surfarray.array3d(self.screen)
        return np.transpose(arr, (1, 0, 2))

    def _draw(self, surf: pygame.Surface):
        sim = self.sim
        surf.fill(COLOR_BG)
        for t in sim.tiles:
            pygame.draw.rect(surf, COLOR_ROAD, pygame.Rect(int(t.x), int(t.y), int(t.width), int(t.height)))
            for ob in t.obstacles:
                r = pygame.Rect(int(ob.left), int(ob.top), int(ob.width), int(ob.height))
                pygame.draw.ellipse(surf, COLOR_OBSTACLES[ob.tier], r)
            for g in t.gems:
                r = pygame.Rect(int(g.x - g.width / 2), int(g.y - g.height), int(g.width), int(g.height))
                pygame.draw.rect(surf, COLOR_GEMS[g.kind.value], r)
        color = COLOR_ACCENT if sim.alive else COLOR_DANGER
        pygame.draw.rect(surf, color, pygame.Rect(int(sim.kin.x), int(sim.kin.y), int(sim.actor_w), int(sim.actor_h)))

    def close(self):
        if self.screen is not None:
            if self.render_mode == "human":
                pygame.display.quit()
            pygame.quit()
            self.screen = None
            self.clock = None
