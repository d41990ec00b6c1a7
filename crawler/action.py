"""Positional mapping from the policy's action vector to joint commands.

Layout (20 values):
    [0:8]   upper leg target rotations, (x, y) per leg 0..3
    [8:12]  lower leg target rotations, x per leg 0..3
    [12:16] upper leg joint strengths
    [16:20] lower leg joint strengths
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

import numpy as np

from crawler.body_parts import BodyPart
from crawler.errors import ActionLayoutError
from crawler.physics import LOWER_LEGS, UPPER_LEGS, BodyPartId

ACTION_DIM = 2 * len(UPPER_LEGS) + len(LOWER_LEGS) + len(UPPER_LEGS) + len(LOWER_LEGS)


@dataclass(frozen=True)
class JointCommands:
    upper_rotations: np.ndarray  # (4, 2)
    lower_rotations: np.ndarray  # (4,)
    upper_strengths: np.ndarray  # (4,)
    lower_strengths: np.ndarray  # (4,)


def decode_actions(actions) -> JointCommands:
    action = np.asarray(actions, dtype=np.float32)
    if action.ndim != 1 or action.shape[0] != ACTION_DIM:
        raise ActionLayoutError(
            f"Crawler action must be a flat vector of length {ACTION_DIM}, got shape {action.shape}"
        )
    if not np.all(np.isfinite(action)):
        raise ActionLayoutError(f"Crawler action contains non-finite values: {action.tolist()}")

    n_upper = len(UPPER_LEGS)
    n_lower = len(LOWER_LEGS)
    i = 0
    upper_rotations = action[i : i + 2 * n_upper].reshape(n_upper, 2)
    i += 2 * n_upper
    lower_rotations = action[i : i + n_lower]
    i += n_lower
    upper_strengths = action[i : i + n_upper]
    i += n_upper
    lower_strengths = action[i : i + n_lower]

    return JointCommands(
        upper_rotations=upper_rotations.copy(),
        lower_rotations=lower_rotations.copy(),
        upper_strengths=upper_strengths.copy(),
        lower_strengths=lower_strengths.copy(),
    )


def apply_joint_commands(
    commands: JointCommands, body_parts: Mapping[BodyPartId, BodyPart]
) -> None:
    for part_id, (x, y) in zip(UPPER_LEGS, commands.upper_rotations):
        body_parts[part_id].set_joint_target_rotation(float(x), float(y), 0.0)
    for part_id, x in zip(LOWER_LEGS, commands.lower_rotations):
        body_parts[part_id].set_joint_target_rotation(float(x), 0.0, 0.0)

    for part_id, strength in zip(UPPER_LEGS, commands.upper_strengths):
        body_parts[part_id].set_joint_strength(float(strength))
    for part_id, strength in zip(LOWER_LEGS, commands.lower_strengths):
        body_parts[part_id].set_joint_strength(float(strength))
