# src/tests/runner_env_tests.py
"""
Quick tests for RunnerEnv (Gymnasium environment).

Usage (from repo root):
  python -m src.tests.runner_env_tests
"""
from __future__ import annotations
from typing import List, Tuple

import numpy as np
from gymnasium.utils.env_checker import check_env

from src.env.runner_env import RunnerEnv


def test_api_check():
    """Verify Gym API contract (spaces, step/reset signatures, types)."""
    env = RunnerEnv(frame_skip=4)
    try:
        check_env(env, skip_render_check=True)
    finally:
        env.close()


def test_smoke_rollout():
    """Short random rollout: no crashes, obs in space, reward type, proper terminations."""
    env = RunnerEnv(frame_skip=4, time_limit_seconds=10.0)
    env.action_space.seed(3)
    try:
        obs, info = env.reset(seed=3)
        assert env.observation_space.contains(obs), "Initial observation not in space"
        assert info["lives"] == 2 and info["level"] == 1
        for t in range(400):
            obs, r, term, trunc, info = env.step(env.action_space.sample())
            assert isinstance(r, float), "Reward must be a float"
            assert env.observation_space.contains(obs), f"Step {t}: observation out of bounds"
            if term:
                assert info["death_cause"] in ("fall", "obstacle")
                break
            if trunc:
                assert info["timestep"] == env.time_limit_decisions
                break
    finally:
        env.close()


def test_standing_still_never_ends():
    env = RunnerEnv(frame_skip=4, time_limit_seconds=None)
    try:
        env.reset(seed=1)
        for _ in range(100):
            _, r, term, trunc, info = env.step(RunnerEnv.NOOP)
            assert r == 0.0 and not term and not trunc
        assert info["distance_px"] == 0.0
    finally:
        env.close()


def _rollout(seed: int, actions: List[int]) -> Tuple[np.ndarray, List[float]]:
    env = RunnerEnv(frame_skip=4)
    try:
        obs, _ = env.reset(seed=seed)
        trace, rewards = [obs], []
        for a in actions:
            obs, r, term, trunc, _ = env.step(a)
            trace.append(obs)
            rewards.append(r)
            if term or trunc:
                break
        return np.stack(trace), rewards
    finally:
        env.close()


def test_determinism():
    """Same seed + same actions -> identical observations and rewards."""
    rng = np.random.default_rng(0)
    actions = [int(a) for a in rng.integers(0, 4, size=300)]
    o1, r1 = _rollout(42, actions)
    o2, r2 = _rollout(42, actions)
    assert o1.shape == o2.shape and np.array_equal(o1, o2)
    assert r1 == r2


def main():
    test_api_check()
    print("✓ API check ok")
    test_smoke_rollout()
    print("✓ Smoke test ok")
    test_standing_still_never_ends()
    print("✓ Idle test ok")
    test_determinism()
    print("✓ Determinism ok")


if __name__ == "__main__":
    main()
