"""Stabilized heading frame used as the observation reference.

Ragdolls move erratically during training, so observations are expressed in
a frame that sits at the root body but always faces the walk target with a
level heading.
"""

from __future__ import annotations

import numpy as np

from crawler import frames


class OrientationReference:
    def __init__(self) -> None:
        self._position = np.zeros((3,), dtype=np.float32)
        self._rotation = frames.IDENTITY_QUAT.copy()

    @property
    def position(self) -> np.ndarray:
        return self._position.copy()

    @property
    def rotation(self) -> np.ndarray:
        return self._rotation.copy()

    @property
    def forward(self) -> np.ndarray:
        return frames.forward_from_quat(self._rotation)

    def update(self, body_position: np.ndarray, target_position: np.ndarray) -> None:
        """Re-anchor the frame at the body, facing the target.

        The heading comes from the raw position delta every step; once the
        body passes the target the forward direction flips.
        """
        body_position = frames.as_vec3(body_position)
        direction = frames.as_vec3(target_position) - body_position
        self._rotation = frames.look_rotation(direction)
        self._position = body_position.copy()

    def to_local(self, point: np.ndarray) -> np.ndarray:
        offset = frames.as_vec3(point) - self._position
        return frames.inverse_rotate_vec_by_quat(self._rotation, offset)

    def to_local_direction(self, vector: np.ndarray) -> np.ndarray:
        return frames.inverse_rotate_vec_by_quat(self._rotation, frames.as_vec3(vector))
