"""Episode and reward bookkeeping shared by crawler agents."""

from __future__ import annotations

import enum

from absl import logging


class AgentPhase(enum.Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    RUNNING = "running"


class Agent:
    """Base class for a single learning agent driven by a fixed-rate step loop.

    Subclasses implement initialize(), on_episode_begin(),
    collect_observations() and on_action_received(). Rewards added between
    two decisions accumulate in `reward`; `cumulative_reward` covers the whole
    episode.
    """

    def __init__(self, *, max_step: int = 0) -> None:
        if max_step < 0:
            raise ValueError(f"max_step must be >= 0, got {max_step}")
        self.max_step = int(max_step)
        self.phase = AgentPhase.UNINITIALIZED
        self.step_count = 0
        self.completed_episodes = 0
        self.interrupted = False
        self._reward = 0.0
        self._cumulative_reward = 0.0

    def initialize(self) -> None:
        raise NotImplementedError

    def on_episode_begin(self) -> None:
        raise NotImplementedError

    @property
    def reward(self) -> float:
        return self._reward

    @property
    def cumulative_reward(self) -> float:
        return self._cumulative_reward

    def add_reward(self, increment: float) -> None:
        self._reward += float(increment)
        self._cumulative_reward += float(increment)

    def set_reward(self, reward: float) -> None:
        self._cumulative_reward += float(reward) - self._reward
        self._reward = float(reward)

    def consume_reward(self) -> float:
        """Return the reward gathered since the last decision and clear it."""
        reward = self._reward
        self._reward = 0.0
        return reward

    def lazy_initialize(self) -> None:
        if self.phase is not AgentPhase.UNINITIALIZED:
            return
        self.initialize()
        self.phase = AgentPhase.READY

    def begin_episode(self) -> None:
        self.lazy_initialize()
        if self.phase is AgentPhase.RUNNING:
            self.end_episode()
        self.step_count = 0
        self.interrupted = False
        self._reward = 0.0
        self._cumulative_reward = 0.0
        self.on_episode_begin()
        self.phase = AgentPhase.RUNNING

    def increment_step(self) -> bool:
        """Advance the step counter; returns True when max_step interrupts the episode."""
        self._require_running()
        self.step_count += 1
        if self.max_step > 0 and self.step_count >= self.max_step:
            self.episode_interrupted()
            return True
        return False

    def end_episode(self) -> None:
        self._require_running()
        self.completed_episodes += 1
        logging.info(
            "Episode %d ended after %d steps, cumulative reward %.3f%s",
            self.completed_episodes,
            self.step_count,
            self._cumulative_reward,
            " (interrupted)" if self.interrupted else "",
        )
        self.phase = AgentPhase.READY

    def episode_interrupted(self) -> None:
        self.interrupted = True
        self.end_episode()

    def _require_running(self) -> None:
        if self.phase is not AgentPhase.RUNNING:
            raise RuntimeError(
                f"Agent is {self.phase.value}; call begin_episode() before stepping"
            )
