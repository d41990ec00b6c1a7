"""Synchronous step loop tying a CrawlerAgent to a physics backend.

Per decision:
    action -> joint commands
    repeat decision_period times:
        physics step -> contacts -> reward -> step count
    observation
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import numpy as np

from crawler.agent import AgentPhase
from crawler.config import CrawlerConfig
from crawler.crawler_agent import CrawlerAgent
from crawler.physics import CrawlerPhysics


class CrawlerEnv:
    def __init__(
        self,
        physics: CrawlerPhysics,
        config: Optional[CrawlerConfig] = None,
        *,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        self.config = config if config is not None else CrawlerConfig()
        self.physics = physics
        self.agent = CrawlerAgent(physics, self.config, rng=rng)
        self.decision_period = self.config.agent.decision_period

    def reset(self) -> np.ndarray:
        self.agent.begin_episode()
        return self.agent.collect_observations()

    def step(self, action) -> Tuple[np.ndarray, float, bool, Dict[str, Any]]:
        if self.agent.phase is not AgentPhase.RUNNING:
            raise RuntimeError("Episode is not running; call reset() first")

        self.agent.on_action_received(action)

        done = False
        for _ in range(self.decision_period):
            report = self.physics.step()
            self.agent.observe_contacts(report)
            self.agent.fixed_update()
            if self.agent.increment_step():
                done = True
                break

        obs = self.agent.collect_observations()
        reward = self.agent.consume_reward()
        info = {
            "cumulative_reward": self.agent.cumulative_reward,
            "step_count": self.agent.step_count,
            "target_walking_speed": self.agent.target_walking_speed,
            "interrupted": self.agent.interrupted,
        }
        return obs, reward, done, info
