"""Crawler agent: a four-legged ragdoll learning to walk toward a target.

Each physics step the agent re-anchors its orientation reference and earns

    matching_velocity_reward * look_at_target_reward

Each decision it emits a 32-value observation and consumes a 20-value action.
Touching the target grants a one-off bonus of 1.0.
"""

from __future__ import annotations

import math
from typing import Optional

from absl import logging
import numpy as np

from crawler import frames
from crawler.action import apply_joint_commands, decode_actions
from crawler.agent import Agent
from crawler.body_parts import BodyPart, JointDriveController
from crawler.config import (
    MAX_WALKING_SPEED,
    MIN_WALKING_SPEED,
    BehaviorSettings,
    CrawlerConfig,
)
from crawler.obs import build_observation_from_components, ground_distance_observation
from crawler.orientation import OrientationReference
from crawler.physics import BodyPartId, ContactReport, CrawlerPhysics, Pose
from crawler.rewards import TOUCHED_TARGET_REWARD, step_reward
from crawler.target import TargetController


class CrawlerAgent(Agent):
    def __init__(
        self,
        physics: CrawlerPhysics,
        config: Optional[CrawlerConfig] = None,
        *,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        config = config if config is not None else CrawlerConfig()
        super().__init__(max_step=config.agent.max_step)
        self.physics = physics
        self.config = config
        self._rng = rng if rng is not None else np.random.default_rng(config.seed)

        self._target_walking_speed = MAX_WALKING_SPEED
        self.target_walking_speed = config.agent.target_walking_speed
        self.max_raycast_distance = config.agent.max_raycast_distance

        self.settings: Optional[BehaviorSettings] = None
        self.orientation = OrientationReference()
        self.jd_controller = JointDriveController(
            max_joint_spring=config.joint_drive.max_joint_spring,
            joint_dampen=config.joint_drive.joint_dampen,
            max_joint_force_limit=config.joint_drive.max_joint_force_limit,
        )
        self.target_controller: Optional[TargetController] = None

    @property
    def target_walking_speed(self) -> float:
        return self._target_walking_speed

    @target_walking_speed.setter
    def target_walking_speed(self, value: float) -> None:
        self._target_walking_speed = float(np.clip(value, MIN_WALKING_SPEED, MAX_WALKING_SPEED))

    @property
    def randomize_walk_speed_each_episode(self) -> bool:
        return bool(self.settings is not None and self.settings.randomize_speed)

    @property
    def body(self) -> BodyPart:
        return self.jd_controller.body_parts[BodyPartId.BODY]

    @property
    def target_position(self) -> np.ndarray:
        return frames.as_vec3(self.physics.target.position)

    def initialize(self) -> None:
        self.settings = self.config.behavior_settings()

        origin = self.physics.agent_origin
        offset = frames.rotate_vec_by_quat(
            origin.rotation, np.asarray(self.settings.initial_target_offset, dtype=np.float32)
        )
        spawn = frames.as_vec3(origin.position) + offset
        spawn[2] = frames.as_vec3(self.physics.target.position)[2]
        self.physics.target.set_pose(Pose(position=spawn, rotation=frames.IDENTITY_QUAT.copy()))

        self.target_controller = TargetController(
            self.physics.target,
            spawn_radius=self.config.target.spawn_radius,
            respawn_if_touched=self.settings.respawn_target_if_touched,
            rng=self._rng,
        )
        self.target_controller.add_touch_listener(self.touched_target)
        self.target_controller.start()

        self.jd_controller.clear()
        for part_id in BodyPartId:
            self.jd_controller.setup_body_part(part_id, self.physics)

        logging.info(
            "Crawler initialized: behavior=%s randomize_speed=%s target=%s",
            self.config.agent.behavior.value,
            self.settings.randomize_speed,
            self.target_position.tolist(),
        )

    def on_episode_begin(self) -> None:
        """Reset body parts, spin the root to a random heading, and pick a walking speed."""
        for part in self.jd_controller.body_parts_list:
            part.reset()

        yaw_deg = float(self._rng.uniform(0.0, 360.0))
        root = self.body.body
        root.set_pose(
            Pose(
                position=frames.as_vec3(root.position),
                rotation=frames.yaw_to_quat(math.radians(yaw_deg)),
            )
        )

        self.update_orientation_objects()

        if self.randomize_walk_speed_each_episode:
            # Sample from (MIN, MAX] so the reward normalization never sees the lower edge.
            self.target_walking_speed = MAX_WALKING_SPEED - float(
                self._rng.uniform(0.0, MAX_WALKING_SPEED - MIN_WALKING_SPEED)
            )

        logging.debug(
            "Episode begin: yaw=%.1f deg target_walking_speed=%.3f", yaw_deg, self.target_walking_speed
        )

    def update_orientation_objects(self) -> None:
        self.orientation.update(self.body.body.position, self.target_position)

    def get_avg_velocity(self) -> np.ndarray:
        """Mean linear velocity over all body parts.

        The root's velocity alone makes the limbs move erratically under
        training; averaging over every part smooths that out.
        """
        parts = self.jd_controller.body_parts_list
        if not parts:
            raise RuntimeError("No body parts registered; call initialize() first")
        vel_sum = np.zeros((3,), dtype=np.float32)
        for part in parts:
            vel_sum += part.velocity
        return (vel_sum / len(parts)).astype(np.float32)

    def collect_observations(self) -> np.ndarray:
        cube_forward = self.orientation.forward
        vel_goal = cube_forward * self.target_walking_speed
        avg_vel = self.get_avg_velocity()
        root = self.body.body

        hit = self.physics.raycast(
            frames.as_vec3(root.position), frames.WORLD_DOWN.copy(), self.max_raycast_distance
        )

        return build_observation_from_components(
            vel_goal_distance=float(np.linalg.norm(vel_goal - avg_vel)),
            avg_velocity_local=self.orientation.to_local_direction(avg_vel),
            goal_velocity_local=self.orientation.to_local_direction(vel_goal),
            rotation_delta=frames.from_to_rotation(frames.forward_from_quat(root.rotation), cube_forward),
            target_position_local=self.orientation.to_local(self.target_position),
            ground_distance=ground_distance_observation(hit, self.max_raycast_distance),
            body_parts=self.jd_controller.body_parts_list,
            max_joint_force_limit=self.jd_controller.max_joint_force_limit,
        )

    def on_action_received(self, actions) -> None:
        # Decoding validates the whole vector before any joint is touched.
        commands = decode_actions(actions)
        apply_joint_commands(commands, self.jd_controller.body_parts)

    def fixed_update(self) -> float:
        """Per physics step: refresh the reference frame and add this step's reward."""
        self._require_running()
        self.update_orientation_objects()

        reward = step_reward(
            reference_forward=self.orientation.forward,
            body_forward=frames.forward_from_quat(self.body.body.rotation),
            avg_velocity=self.get_avg_velocity(),
            target_walking_speed=self.target_walking_speed,
            max_walking_speed=MAX_WALKING_SPEED,
        )
        self.add_reward(reward)
        return reward

    def observe_contacts(self, report: ContactReport) -> None:
        self.jd_controller.update_ground_contacts(report.ground)
        if report.touched_target and self.target_controller is not None:
            self.target_controller.on_collision_enter()

    def touched_target(self) -> None:
        self.add_reward(TOUCHED_TARGET_REWARD)
