#!/usr/bin/env python3
"""Roll out the crawler agent on the MuJoCo backend.

Runs a few episodes with a fixed (zero) or uniform-random policy and prints
per-episode returns. Useful to check the observation / action / reward wiring
end to end before handing the environment to a trainer.

Usage:
    python scripts/run_crawler.py
    python scripts/run_crawler.py --config configs/crawler_static_variable_speed.yaml
    python scripts/run_crawler.py --policy random --episodes 3 --max-decisions 200
"""

import argparse
import sys
from dataclasses import replace
from pathlib import Path

import numpy as np
from rich.console import Console
from rich.table import Table

sys.path.insert(0, str(Path(__file__).parent.parent))

from crawler.action import ACTION_DIM
from crawler.config import load_config
from crawler.env import CrawlerEnv
from sim_adapter.mujoco_crawler import MujocoCrawlerPhysics

PROJECT_ROOT = Path(__file__).parent.parent

console = Console()


def _resolve_model_path(model_path: str) -> Path:
    path = Path(model_path)
    if not path.is_absolute() and not path.exists():
        path = PROJECT_ROOT / path
    return path


def main():
    parser = argparse.ArgumentParser(description="Roll out the crawler agent on MuJoCo")
    parser.add_argument("--config", type=str, default=None, help="Path to crawler YAML config")
    parser.add_argument("--episodes", type=int, default=2, help="Number of episodes")
    parser.add_argument(
        "--max-decisions", type=int, default=100, help="Decisions per episode (0 = until max_step)"
    )
    parser.add_argument(
        "--policy", choices=("zero", "random"), default="zero", help="Action source"
    )
    parser.add_argument("--seed", type=int, default=None, help="Override config seed")
    args = parser.parse_args()

    config = load_config(args.config)
    if args.seed is not None:
        config = replace(config, seed=args.seed)

    physics = MujocoCrawlerPhysics.from_xml_path(
        _resolve_model_path(config.sim.model_path), n_substeps=config.sim.n_substeps
    )
    env = CrawlerEnv(physics, config)
    rng = np.random.default_rng(config.seed)

    table = Table(title=f"Crawler rollouts ({config.agent.behavior.value}, {args.policy} policy)")
    table.add_column("Episode", justify="right")
    table.add_column("Speed", justify="right")
    table.add_column("Steps", justify="right")
    table.add_column("Return", justify="right")
    table.add_column("Mean step reward", justify="right")
    table.add_column("Interrupted", justify="center")

    for episode in range(args.episodes):
        env.reset()
        decisions = 0
        info = {"cumulative_reward": 0.0, "step_count": 0, "interrupted": False}
        while True:
            if args.policy == "random":
                action = rng.uniform(-1.0, 1.0, size=ACTION_DIM).astype(np.float32)
            else:
                action = np.zeros((ACTION_DIM,), dtype=np.float32)
            _, _, done, info = env.step(action)
            decisions += 1
            if done or (args.max_decisions and decisions >= args.max_decisions):
                break

        steps = max(int(info["step_count"]), 1)
        table.add_row(
            str(episode),
            f"{env.agent.target_walking_speed:.2f}",
            str(info["step_count"]),
            f"{info['cumulative_reward']:.3f}",
            f"{info['cumulative_reward'] / steps:.4f}",
            "yes" if info["interrupted"] else "no",
        )

    console.print(table)


if __name__ == "__main__":
    main()
