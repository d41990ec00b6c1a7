"""Interfaces the crawler core expects from a physics backend."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import FrozenSet, Optional, Protocol

import numpy as np


class BodyPartId(enum.Enum):
    """Crawler limb segments, in observation order."""

    BODY = "body"
    LEG0_UPPER = "leg0_upper"
    LEG0_LOWER = "leg0_lower"
    LEG1_UPPER = "leg1_upper"
    LEG1_LOWER = "leg1_lower"
    LEG2_UPPER = "leg2_upper"
    LEG2_LOWER = "leg2_lower"
    LEG3_UPPER = "leg3_upper"
    LEG3_LOWER = "leg3_lower"

    @property
    def is_root(self) -> bool:
        return self is BodyPartId.BODY


UPPER_LEGS = (
    BodyPartId.LEG0_UPPER,
    BodyPartId.LEG1_UPPER,
    BodyPartId.LEG2_UPPER,
    BodyPartId.LEG3_UPPER,
)
LOWER_LEGS = (
    BodyPartId.LEG0_LOWER,
    BodyPartId.LEG1_LOWER,
    BodyPartId.LEG2_LOWER,
    BodyPartId.LEG3_LOWER,
)


@dataclass(frozen=True)
class Pose:
    position: np.ndarray
    rotation: np.ndarray


@dataclass(frozen=True)
class JointLimits:
    """Angular joint limits in degrees."""

    low_x: float
    high_x: float
    y: float = 0.0
    z: float = 0.0


@dataclass(frozen=True)
class ContactReport:
    ground: FrozenSet[BodyPartId] = field(default_factory=frozenset)
    touched_target: bool = False


class RigidBody(Protocol):
    @property
    def position(self) -> np.ndarray:
        ...

    @property
    def rotation(self) -> np.ndarray:
        ...

    @property
    def velocity(self) -> np.ndarray:
        ...

    @property
    def angular_velocity(self) -> np.ndarray:
        ...

    def set_pose(self, pose: Pose) -> None:
        ...

    def set_velocity(self, linear: np.ndarray, angular: np.ndarray) -> None:
        ...


class JointDrive(Protocol):
    @property
    def limits(self) -> JointLimits:
        ...

    def set_target_rotation(self, degrees_xyz: np.ndarray) -> None:
        ...

    def set_drive(self, spring: float, damper: float, max_force: float) -> None:
        ...


class CrawlerPhysics(Protocol):
    fixed_dt: float

    @property
    def agent_origin(self) -> Pose:
        ...

    @property
    def target(self) -> RigidBody:
        ...

    def body(self, part_id: BodyPartId) -> RigidBody:
        ...

    def joint(self, part_id: BodyPartId) -> Optional[JointDrive]:
        ...

    def raycast(
        self, origin: np.ndarray, direction: np.ndarray, max_distance: float
    ) -> Optional[float]:
        ...

    def step(self) -> ContactReport:
        ...
