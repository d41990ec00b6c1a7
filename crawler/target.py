from __future__ import annotations

from typing import Callable, List

from absl import logging
import numpy as np

from crawler import frames
from crawler.physics import Pose, RigidBody


def sample_in_unit_sphere(rng: np.random.Generator) -> np.ndarray:
    direction = rng.normal(size=3)
    norm = float(np.linalg.norm(direction))
    if norm <= 1e-12:
        return np.zeros((3,), dtype=np.float32)
    radius = float(rng.uniform(0.0, 1.0)) ** (1.0 / 3.0)
    return (direction / norm * radius).astype(np.float32)


class TargetController:
    """Moves the walk target and reports when an agent touches it."""

    def __init__(
        self,
        target: RigidBody,
        *,
        spawn_radius: float,
        respawn_if_touched: bool,
        rng: np.random.Generator,
    ) -> None:
        self.target = target
        self.spawn_radius = float(spawn_radius)
        self.respawn_if_touched = bool(respawn_if_touched)
        self._rng = rng
        self._starting_position = frames.as_vec3(target.position).copy()
        self._on_touched: List[Callable[[], None]] = []

    @property
    def starting_position(self) -> np.ndarray:
        return self._starting_position.copy()

    def add_touch_listener(self, callback: Callable[[], None]) -> None:
        self._on_touched.append(callback)

    def start(self) -> None:
        if self.respawn_if_touched:
            self.move_target_to_random_position()

    def move_target_to_random_position(self) -> np.ndarray:
        new_position = self._starting_position + sample_in_unit_sphere(self._rng) * self.spawn_radius
        new_position[2] = self._starting_position[2]
        self.target.set_pose(Pose(position=new_position, rotation=frames.IDENTITY_QUAT.copy()))
        logging.debug("Target moved to %s", new_position.tolist())
        return new_position

    def on_collision_enter(self) -> None:
        for callback in self._on_touched:
            callback()
        if self.respawn_if_touched:
            self.move_target_to_random_position()
