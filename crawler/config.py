"""Crawler configuration.

Configuration is loaded from a YAML file with one section per concern:

    agent:
      behavior: crawler_dynamic
      target_walking_speed: 10.0
      max_step: 5000
      decision_period: 5
    joint_drive:
      max_joint_spring: 40.0
      joint_dampen: 1.0
      max_joint_force_limit: 20.0
    target:
      spawn_radius: 10.0
      static_target_distance: 1800.0
    sim:
      model_path: assets/crawler.xml
      n_substeps: 2
    seed: 0

Usage:
    from crawler.config import load_config

    config = load_config("configs/crawler.yaml")
    settings = config.behavior_settings()
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from absl import logging
import yaml

from crawler.errors import ConfigError

MIN_WALKING_SPEED = 0.1
MAX_WALKING_SPEED = 10.0


class BehaviorVariant(enum.Enum):
    CRAWLER_DYNAMIC = "crawler_dynamic"
    CRAWLER_DYNAMIC_VARIABLE_SPEED = "crawler_dynamic_variable_speed"
    CRAWLER_STATIC = "crawler_static"
    CRAWLER_STATIC_VARIABLE_SPEED = "crawler_static_variable_speed"

    @classmethod
    def parse(cls, value: "BehaviorVariant | str") -> "BehaviorVariant":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value))
        except ValueError:
            choices = ", ".join(v.value for v in cls)
            raise ConfigError(
                f"Unknown crawler behavior '{value}'. Expected one of: {choices}"
            ) from None

    @property
    def is_static(self) -> bool:
        return self in (
            BehaviorVariant.CRAWLER_STATIC,
            BehaviorVariant.CRAWLER_STATIC_VARIABLE_SPEED,
        )

    @property
    def variable_speed(self) -> bool:
        return self in (
            BehaviorVariant.CRAWLER_DYNAMIC_VARIABLE_SPEED,
            BehaviorVariant.CRAWLER_STATIC_VARIABLE_SPEED,
        )


@dataclass(frozen=True)
class BehaviorSettings:
    """A behavior variant resolved into the values the agent acts on.

    Attributes:
        initial_target_offset: Target spawn offset in the agent's local frame
        randomize_speed: Resample the walking speed at every episode start
        respawn_target_if_touched: Move the target somewhere new when touched
    """

    initial_target_offset: Tuple[float, float, float]
    randomize_speed: bool
    respawn_target_if_touched: bool


@dataclass(frozen=True)
class AgentConfig:
    behavior: BehaviorVariant = BehaviorVariant.CRAWLER_DYNAMIC
    target_walking_speed: float = MAX_WALKING_SPEED
    randomize_walk_speed_each_episode: Optional[bool] = None
    max_step: int = 5000
    decision_period: int = 5
    max_raycast_distance: float = 10.0


@dataclass(frozen=True)
class JointDriveConfig:
    """Joint drive limits shared by every actuated body part.

    Attributes:
        max_joint_spring: Position drive stiffness
        joint_dampen: Position drive damping
        max_joint_force_limit: Force reached at joint strength +1
    """

    max_joint_spring: float = 40.0
    joint_dampen: float = 1.0
    max_joint_force_limit: float = 20.0


@dataclass(frozen=True)
class TargetConfig:
    spawn_radius: float = 10.0
    static_target_distance: float = 1800.0


@dataclass(frozen=True)
class SimConfig:
    model_path: str = "assets/crawler.xml"
    n_substeps: int = 2


@dataclass(frozen=True)
class CrawlerConfig:
    agent: AgentConfig = field(default_factory=AgentConfig)
    joint_drive: JointDriveConfig = field(default_factory=JointDriveConfig)
    target: TargetConfig = field(default_factory=TargetConfig)
    sim: SimConfig = field(default_factory=SimConfig)
    seed: int = 0

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "CrawlerConfig":
        data = dict(data or {})
        agent = dict(data.get("agent", {}) or {})
        joint_drive = dict(data.get("joint_drive", {}) or {})
        target = dict(data.get("target", {}) or {})
        sim = dict(data.get("sim", {}) or {})

        randomize = agent.get("randomize_walk_speed_each_episode")
        config = cls(
            agent=AgentConfig(
                behavior=BehaviorVariant.parse(agent.get("behavior", "crawler_dynamic")),
                target_walking_speed=float(
                    agent.get("target_walking_speed", MAX_WALKING_SPEED)
                ),
                randomize_walk_speed_each_episode=(
                    None if randomize is None else bool(randomize)
                ),
                max_step=int(agent.get("max_step", 5000)),
                decision_period=int(agent.get("decision_period", 5)),
                max_raycast_distance=float(agent.get("max_raycast_distance", 10.0)),
            ),
            joint_drive=JointDriveConfig(
                max_joint_spring=float(joint_drive.get("max_joint_spring", 40.0)),
                joint_dampen=float(joint_drive.get("joint_dampen", 1.0)),
                max_joint_force_limit=float(joint_drive.get("max_joint_force_limit", 20.0)),
            ),
            target=TargetConfig(
                spawn_radius=float(target.get("spawn_radius", 10.0)),
                static_target_distance=float(target.get("static_target_distance", 1800.0)),
            ),
            sim=SimConfig(
                model_path=str(sim.get("model_path", "assets/crawler.xml")),
                n_substeps=int(sim.get("n_substeps", 2)),
            ),
            seed=int(data.get("seed", 0)),
        )
        validate_config(config)
        return config

    @classmethod
    def from_yaml(cls, config_path: str | Path) -> "CrawlerConfig":
        with open(config_path, "r") as f:
            data = yaml.safe_load(f)
        return cls.from_dict(data)

    def behavior_settings(self) -> BehaviorSettings:
        return resolve_behavior(
            self.agent.behavior,
            static_target_distance=self.target.static_target_distance,
            requested_randomize=self.agent.randomize_walk_speed_each_episode,
        )


def resolve_behavior(
    behavior: BehaviorVariant | str,
    *,
    static_target_distance: float = 1800.0,
    requested_randomize: Optional[bool] = None,
) -> BehaviorSettings:
    """Resolve a behavior variant once, so resets never branch on it."""
    variant = BehaviorVariant.parse(behavior)

    randomize = variant.variable_speed
    if requested_randomize is not None and bool(requested_randomize) != randomize:
        logging.warning(
            "randomize_walk_speed_each_episode=%s ignored: behavior %s uses %s",
            requested_randomize,
            variant.value,
            randomize,
        )

    if variant.is_static:
        offset = (float(static_target_distance), 0.0, 0.0)
    else:
        offset = (0.0, 0.0, 0.0)

    return BehaviorSettings(
        initial_target_offset=offset,
        randomize_speed=randomize,
        respawn_target_if_touched=not variant.is_static,
    )


def validate_config(config: CrawlerConfig) -> None:
    agent = config.agent
    if not MIN_WALKING_SPEED <= agent.target_walking_speed <= MAX_WALKING_SPEED:
        raise ConfigError(
            f"agent.target_walking_speed must be in [{MIN_WALKING_SPEED}, {MAX_WALKING_SPEED}], "
            f"got {agent.target_walking_speed}"
        )
    if agent.max_step < 0:
        raise ConfigError(f"agent.max_step must be >= 0, got {agent.max_step}")
    if agent.decision_period < 1:
        raise ConfigError(f"agent.decision_period must be >= 1, got {agent.decision_period}")
    if agent.max_raycast_distance <= 0.0:
        raise ConfigError(
            f"agent.max_raycast_distance must be > 0, got {agent.max_raycast_distance}"
        )
    if config.joint_drive.max_joint_force_limit <= 0.0:
        raise ConfigError(
            "joint_drive.max_joint_force_limit must be > 0, "
            f"got {config.joint_drive.max_joint_force_limit}"
        )
    if config.target.spawn_radius < 0.0:
        raise ConfigError(f"target.spawn_radius must be >= 0, got {config.target.spawn_radius}")
    if config.sim.n_substeps < 1:
        raise ConfigError(f"sim.n_substeps must be >= 1, got {config.sim.n_substeps}")


def load_config(config_path: Optional[str | Path] = None) -> CrawlerConfig:
    """Load a crawler configuration, or the defaults when no path is given."""
    if config_path is None:
        return CrawlerConfig()
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Crawler config not found: {config_path}")
    return CrawlerConfig.from_yaml(config_path)
