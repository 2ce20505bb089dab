# /experiments/sanity_rollout.py
"""
Sanity rollouts for RunnerEnv:
- Runs RANDOM and/or JUMPER policies over fixed seeds
- Writes an episodes CSV for notebook analysis
- Optionally saves per-episode action sequences for exact replay

Usage examples (from repo root):
  python -m experiments.sanity_rollout --policies both --save-traces
  python -m experiments.sanity_rollout --policies jumper --seeds 111,222,333 --level 7
"""

from __future__ import annotations
import argparse
import csv
import logging
from pathlib import Path
from typing import List, Tuple, Optional

import numpy as np

from src.env.runner_env import RunnerEnv

logger = logging.getLogger(__name__)


# ------------------------ Policies ------------------------

def random_policy_init(action_seed: int):
    rng = np.random.RandomState(action_seed)
    def act(_obs: np.ndarray) -> int:
        return int(rng.randint(0, 4))
    return act

def jumper_policy_init(jump_at: float = 0.04):
    """
    Walks forward and jumps when the next gap or obstacle is close.
    Distances in the observation are in screen widths (index 5 gap, 7 obstacle).
    """
    def act(obs: np.ndarray) -> int:
        grounded = obs[2] == 0.0
        gap_near = obs[6] > 0.0 and obs[5] <= jump_at
        obstacle_near = obs[8] > 0.0 and obs[7] <= jump_at
        if grounded and (gap_near or obstacle_near):
            return RunnerEnv.JUMP
        return RunnerEnv.WALK
    return act


# ------------------------ Rollout core ------------------------

def write_episode_row(csv_path: Path, header: List[str], row: List):
    exists = csv_path.exists()
    with csv_path.open("a", newline="") as f:
        w = csv.writer(f)
        if not exists:
            w.writerow(header)
        w.writerow(row)

def run_one_episode(policy_name: str, seed: int, frame_skip: int, start_level: int,
                    steps_limit: int, save_traces: bool,
                    out_dir: Path) -> Tuple[int, float, int, int, bool, bool, Optional[str]]:
    """Returns: (ep_len, ret_sum, score, level, terminated, truncated, death_cause)"""
    env = RunnerEnv(frame_skip=frame_skip)
    if policy_name == "random":
        policy = random_policy_init(10_000 + seed)
    elif policy_name == "jumper":
        policy = jumper_policy_init()
    else:
        raise ValueError(f"Unknown policy {policy_name!r}")

    actions: List[int] = []
    ret_sum = 0.0
    term = trunc = False
    try:
        obs, info = env.reset(seed=seed, options={"start_level": start_level})
        for _ in range(steps_limit):
            a = policy(obs)
            actions.append(int(a))
            obs, r, term, trunc, info = env.step(a)
            ret_sum += float(r)
            if term or trunc:
                break
    finally:
        env.close()

    if save_traces:
        trace_dir = out_dir / "traces" / policy_name
        trace_dir.mkdir(parents=True, exist_ok=True)
        np.save(trace_dir / f"{seed}_actions.npy", np.asarray(actions, dtype=np.int8))

    return len(actions), ret_sum, info["score"], info["level"], bool(term), bool(trunc), info["death_cause"]


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--policies", type=str, default="both", choices=["random", "jumper", "both"])
    ap.add_argument("--seeds", type=str, default="",
                    help="Comma-separated seeds. If empty, uses 20 defaults: 101..120")
    ap.add_argument("--frame-skip", type=int, default=4)
    ap.add_argument("--level", type=int, default=1, help="Starting level")
    ap.add_argument("--steps", type=int, default=10_000,
                    help="Hard cap on decision steps (env may truncate earlier)")
    ap.add_argument("--out-dir", type=str, default="experiments/runs")
    ap.add_argument("--save-traces", action="store_true")
    args = ap.parse_args()
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    out_dir = Path(args.out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    if args.seeds.strip():
        seeds = [int(s) for s in args.seeds.split(",") if s.strip()]
    else:
        seeds = list(range(101, 121))

    episodes_csv = out_dir / "episodes.csv"
    header = ["policy_name", "seed", "start_level", "frame_skip", "episode_len_decisions",
              "return_sum", "score", "level", "terminated", "truncated", "death_cause"]
    to_run = ["random", "jumper"] if args.policies == "both" else [args.policies]

    print(f"Running policies={to_run} on {len(seeds)} seeds (frame_skip={args.frame_skip})")
    for policy_name in to_run:
        for seed in seeds:
            ep_len, ret_sum, score, level, terminated, truncated, cause = run_one_episode(
                policy_name, seed, args.frame_skip, args.level, args.steps, args.save_traces, out_dir)
            write_episode_row(episodes_csv, header, [
                policy_name, seed, args.level, args.frame_skip, ep_len, f"{ret_sum:.2f}",
                score, level, int(terminated), int(truncated), cause or "",
            ])
            print(f"[{policy_name}] seed={seed}  len={ep_len}  score={score}  level={level}  "
                  f"term={terminated} trunc={truncated}  cause={cause}")

    print("✓ Sanity rollouts complete")


if __name__ == "__main__":
    main()
