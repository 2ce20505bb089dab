# src/env/observations.py
from __future__ import annotations
import numpy as np

from src.runner.config import AUTO_RUN_SPEED, MAX_TILE_SPACE, MAX_LEVEL
from src.runner.player import JumpPhase

OBS_SIZE = 10
MAX_LIVES_OBS = 10.0

PHASE_CODE = {
    JumpPhase.GROUNDED: 0.0,
    JumpPhase.SINGLE_JUMP: 1 / 3,
    JumpPhase.DOUBLE_JUMP: 2 / 3,
    JumpPhase.FALLING: 1.0,
}


def _clamp01(x: float) -> float:
    return 0.0 if x < 0.0 else (1.0 if x > 1.0 else x)


def build_observation(sim, lives: int) -> np.ndarray:
    """
    Returns a fixed (10,) float32 vector, every entry in [0, 1]:
      [ y_top, speed, jump_phase, auto_run, lives,
        gap_dist, gap_width, obstacle_dist, obstacle_tier, level ]
    - distances are measured from the actor's front edge, in screen widths
    - sentinels: no gap ahead -> dist 1 / width 0; no obstacle -> dist 1 / tier 0
    """
    kin = sim.kin
    front = kin.x + sim.actor_w

    feats = [
        _clamp01(kin.y / sim.screen_height),
        _clamp01(kin.speed / AUTO_RUN_SPEED),
        PHASE_CODE[kin.jump_phase],
        1.0 if sim.auto_run else 0.0,
        _clamp01(lives / MAX_LIVES_OBS),
    ]

    gap = sim.next_gap()
    if gap is None:
        feats.extend([1.0, 0.0])
    else:
        start, end = gap
        feats.extend([
            _clamp01((start - front) / sim.screen_width),
            _clamp01((end - start) / MAX_TILE_SPACE),
        ])

    ob = sim.next_obstacle()
    if ob is None:
        feats.extend([1.0, 0.0])
    else:
        feats.extend([
            _clamp01((ob.left - front) / sim.screen_width),
            (int(ob.tier) + 1) / 3,
        ])

    feats.append(_clamp01(sim.current_level / MAX_LEVEL))
    return np.asarray(feats, dtype=np.float32)
