"""Per-step crawler reward terms.

reward = matching_velocity_reward * look_at_target_reward

Both terms lie in [0, 1], so the product does too.
"""

from __future__ import annotations

import math

import numpy as np

from crawler.errors import RewardComputationError

TOUCHED_TARGET_REWARD = 1.0


def matching_velocity_reward(
    velocity_goal: np.ndarray, actual_velocity: np.ndarray, target_walking_speed: float
) -> float:
    """Approaches 1 when the velocities match and decays to 0 at a deviation of the target speed."""
    delta = np.asarray(actual_velocity, dtype=np.float64) - np.asarray(velocity_goal, dtype=np.float64)
    vel_delta_magnitude = float(np.clip(np.linalg.norm(delta), 0.0, target_walking_speed))
    return float((1.0 - (vel_delta_magnitude / target_walking_speed) ** 2) ** 2)


def look_at_target_reward(reference_forward: np.ndarray, body_forward: np.ndarray) -> float:
    """Cosine between the two forwards, mapped from [-1, 1] to [0, 1]."""
    dot = float(
        np.dot(
            np.asarray(reference_forward, dtype=np.float64),
            np.asarray(body_forward, dtype=np.float64),
        )
    )
    return (dot + 1.0) * 0.5


def step_reward(
    *,
    reference_forward: np.ndarray,
    body_forward: np.ndarray,
    avg_velocity: np.ndarray,
    target_walking_speed: float,
    max_walking_speed: float,
) -> float:
    velocity_goal = np.asarray(reference_forward, dtype=np.float64) * target_walking_speed

    match_speed = matching_velocity_reward(velocity_goal, avg_velocity, target_walking_speed)
    if math.isnan(match_speed):
        raise RewardComputationError(
            "matching_velocity_reward",
            reference_forward=np.asarray(reference_forward).tolist(),
            avg_velocity=np.asarray(avg_velocity).tolist(),
            max_walking_speed=max_walking_speed,
        )

    look_at = look_at_target_reward(reference_forward, body_forward)
    if math.isnan(look_at):
        raise RewardComputationError(
            "look_at_target_reward",
            reference_forward=np.asarray(reference_forward).tolist(),
            body_forward=np.asarray(body_forward).tolist(),
        )

    return match_speed * look_at
