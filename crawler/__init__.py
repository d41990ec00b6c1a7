"""Crawler locomotion agent: observation, action and reward protocol."""

from __future__ import annotations

from .action import ACTION_DIM, apply_joint_commands, decode_actions
from .body_parts import BodyPart, GroundContact, JointDriveController
from .config import BehaviorSettings, BehaviorVariant, CrawlerConfig, load_config, resolve_behavior
from .crawler_agent import CrawlerAgent
from .env import CrawlerEnv
from .errors import ActionLayoutError, ConfigError, RewardComputationError
from .layout import CRAWLER_OBS_LAYOUT, OBS_DIM, get_slices
from .orientation import OrientationReference
from .physics import BodyPartId, ContactReport, JointLimits, Pose

__all__ = [
    "ACTION_DIM",
    "OBS_DIM",
    "CRAWLER_OBS_LAYOUT",
    "ActionLayoutError",
    "BehaviorSettings",
    "BehaviorVariant",
    "BodyPart",
    "BodyPartId",
    "ConfigError",
    "ContactReport",
    "CrawlerAgent",
    "CrawlerConfig",
    "CrawlerEnv",
    "GroundContact",
    "JointDriveController",
    "JointLimits",
    "OrientationReference",
    "Pose",
    "RewardComputationError",
    "apply_joint_commands",
    "decode_actions",
    "get_slices",
    "load_config",
    "resolve_behavior",
]
