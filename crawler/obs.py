from __future__ import annotations

from typing import Iterable, Optional

import numpy as np

from crawler.body_parts import BodyPart
from crawler.layout import OBS_DIM


def ground_distance_observation(hit_distance: Optional[float], max_distance: float) -> float:
    """Normalized ray-cast distance; a miss reads as the full probe length."""
    if hit_distance is None or hit_distance > max_distance:
        return 1.0
    return float(hit_distance) / float(max_distance)


def body_part_observation(part: BodyPart, max_joint_force_limit: float) -> np.ndarray:
    values = [1.0 if part.touching_ground else 0.0]
    if not part.part_id.is_root:
        values.append(part.current_strength / max_joint_force_limit)
    return np.asarray(values, dtype=np.float32)


def build_observation_from_components(
    *,
    vel_goal_distance: float,
    avg_velocity_local: np.ndarray,
    goal_velocity_local: np.ndarray,
    rotation_delta: np.ndarray,
    target_position_local: np.ndarray,
    ground_distance: float,
    body_parts: Iterable[BodyPart],
    max_joint_force_limit: float,
) -> np.ndarray:
    obs = np.concatenate(
        [
            np.asarray(vel_goal_distance, dtype=np.float32).reshape(1),
            np.asarray(avg_velocity_local, dtype=np.float32).reshape(3),
            np.asarray(goal_velocity_local, dtype=np.float32).reshape(3),
            np.asarray(rotation_delta, dtype=np.float32).reshape(4),
            np.asarray(target_position_local, dtype=np.float32).reshape(3),
            np.asarray(ground_distance, dtype=np.float32).reshape(1),
            *[body_part_observation(part, max_joint_force_limit) for part in body_parts],
        ]
    )
    if obs.shape != (OBS_DIM,):
        raise ValueError(f"Observation has shape {obs.shape}, expected ({OBS_DIM},)")
    return obs.astype(np.float32)
