"""Body part records and the joint drive controller that owns them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

import numpy as np

from crawler.physics import BodyPartId, CrawlerPhysics, JointDrive, Pose, RigidBody


def _lerp(low: float, high: float, t: float) -> float:
    return low + (high - low) * t


def _to_unit_interval(value: float) -> float:
    """Map a policy value in [-1, 1] to [0, 1], clipping out-of-range input."""
    return (float(np.clip(value, -1.0, 1.0)) + 1.0) * 0.5


@dataclass
class GroundContact:
    touching_ground: bool = False

    def reset(self) -> None:
        self.touching_ground = False


class BodyPart:
    """One rigid limb segment plus its actuated joint.

    The root body has no joint; its joint setters raise.
    """

    def __init__(
        self,
        part_id: BodyPartId,
        body: RigidBody,
        joint: Optional[JointDrive],
        controller: "JointDriveController",
    ) -> None:
        self.part_id = part_id
        self.body = body
        self.joint = joint
        self.ground_contact = GroundContact()
        self.starting_pose = Pose(
            position=np.asarray(body.position, dtype=np.float32).copy(),
            rotation=np.asarray(body.rotation, dtype=np.float32).copy(),
        )
        self.current_strength = 0.0
        self.current_euler_rotation = np.zeros((3,), dtype=np.float32)
        self.current_normalized_rotation = np.zeros((3,), dtype=np.float32)
        self._controller = controller

    @property
    def velocity(self) -> np.ndarray:
        return np.asarray(self.body.velocity, dtype=np.float32).reshape(3)

    @property
    def touching_ground(self) -> bool:
        return self.ground_contact.touching_ground

    def reset(self) -> None:
        """Return to the starting pose at rest."""
        self.body.set_pose(self.starting_pose)
        zeros = np.zeros((3,), dtype=np.float32)
        self.body.set_velocity(zeros, zeros)
        self.ground_contact.reset()

    def set_joint_target_rotation(self, x: float, y: float, z: float) -> None:
        joint = self._require_joint()
        limits = joint.limits
        tx, ty, tz = _to_unit_interval(x), _to_unit_interval(y), _to_unit_interval(z)

        x_rot = _lerp(limits.low_x, limits.high_x, tx)
        y_rot = _lerp(-limits.y, limits.y, ty)
        z_rot = _lerp(-limits.z, limits.z, tz)

        self.current_normalized_rotation = np.array([tx, ty, tz], dtype=np.float32)
        self.current_euler_rotation = np.array([x_rot, y_rot, z_rot], dtype=np.float32)
        joint.set_target_rotation(self.current_euler_rotation.copy())

    def set_joint_strength(self, strength: float) -> None:
        joint = self._require_joint()
        raw = _to_unit_interval(strength) * self._controller.max_joint_force_limit
        joint.set_drive(
            spring=self._controller.max_joint_spring,
            damper=self._controller.joint_dampen,
            max_force=raw,
        )
        self.current_strength = raw

    def _require_joint(self) -> JointDrive:
        if self.joint is None:
            raise ValueError(f"Body part '{self.part_id.value}' has no actuated joint")
        return self.joint


class JointDriveController:
    """Registry of body parts and the shared joint drive limits."""

    def __init__(
        self,
        *,
        max_joint_spring: float,
        joint_dampen: float,
        max_joint_force_limit: float,
    ) -> None:
        if max_joint_force_limit <= 0.0:
            raise ValueError(
                f"max_joint_force_limit must be > 0, got {max_joint_force_limit}"
            )
        self.max_joint_spring = float(max_joint_spring)
        self.joint_dampen = float(joint_dampen)
        self.max_joint_force_limit = float(max_joint_force_limit)
        self.body_parts: Dict[BodyPartId, BodyPart] = {}
        self.body_parts_list: List[BodyPart] = []

    def setup_body_part(self, part_id: BodyPartId, physics: CrawlerPhysics) -> BodyPart:
        if part_id in self.body_parts:
            raise ValueError(f"Body part '{part_id.value}' is already registered")
        joint = None if part_id.is_root else physics.joint(part_id)
        if joint is None and not part_id.is_root:
            raise ValueError(f"Physics backend has no joint for '{part_id.value}'")

        part = BodyPart(part_id, physics.body(part_id), joint, self)
        if joint is not None:
            # Joints start at full strength until the policy says otherwise.
            part.set_joint_strength(1.0)
        self.body_parts[part_id] = part
        self.body_parts_list.append(part)
        return part

    def clear(self) -> None:
        self.body_parts.clear()
        self.body_parts_list.clear()

    def update_ground_contacts(self, touching: Iterable[BodyPartId]) -> None:
        touching = frozenset(touching)
        for part in self.body_parts_list:
            part.ground_contact.touching_ground = part.part_id in touching
