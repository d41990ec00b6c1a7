from __future__ import annotations

import numpy as np
import pytest

from crawler.target import TargetController, sample_in_unit_sphere
from tests.fakes import FakeBody, ScriptedRng


def test_sample_in_unit_sphere_bounds() -> None:
    rng = np.random.default_rng(0)
    samples = np.stack([sample_in_unit_sphere(rng) for _ in range(500)])
    assert samples.shape == (500, 3)
    assert np.all(np.linalg.norm(samples, axis=1) <= 1.0 + 1e-6)


def test_start_moves_target_when_respawning() -> None:
    target = FakeBody(position=(1.0, 2.0, 0.25))
    controller = TargetController(
        target, spawn_radius=10.0, respawn_if_touched=True, rng=ScriptedRng([1.0])
    )
    controller.start()
    np.testing.assert_allclose(target.position, [11.0, 2.0, 0.25])


def test_start_leaves_static_target() -> None:
    target = FakeBody(position=(1800.0, 0.0, 0.25))
    controller = TargetController(
        target, spawn_radius=10.0, respawn_if_touched=False, rng=np.random.default_rng(0)
    )
    controller.start()
    np.testing.assert_allclose(target.position, [1800.0, 0.0, 0.25])
    assert target.set_pose_calls == 0


def test_respawn_stays_within_radius_and_height() -> None:
    target = FakeBody(position=(0.0, 0.0, 0.5))
    controller = TargetController(
        target, spawn_radius=3.0, respawn_if_touched=True, rng=np.random.default_rng(1)
    )
    for _ in range(50):
        position = controller.move_target_to_random_position()
        assert position[2] == pytest.approx(0.5)
        assert np.linalg.norm(position - controller.starting_position) <= 3.0 + 1e-5


def test_collision_notifies_then_respawns() -> None:
    target = FakeBody(position=(0.0, 0.0, 0.25))
    controller = TargetController(
        target, spawn_radius=2.0, respawn_if_touched=True, rng=ScriptedRng([0.5 ** 3])
    )
    touched = []
    controller.add_touch_listener(lambda: touched.append(target.position.copy()))
    controller.on_collision_enter()
    assert len(touched) == 1
    np.testing.assert_allclose(touched[0], [0.0, 0.0, 0.25])
    np.testing.assert_allclose(target.position, [1.0, 0.0, 0.25], atol=1e-6)


def test_collision_without_respawn_keeps_target() -> None:
    target = FakeBody(position=(5.0, 0.0, 0.25))
    controller = TargetController(
        target, spawn_radius=2.0, respawn_if_touched=False, rng=np.random.default_rng(0)
    )
    calls = []
    controller.add_touch_listener(lambda: calls.append(1))
    controller.on_collision_enter()
    assert calls == [1]
    np.testing.assert_allclose(target.position, [5.0, 0.0, 0.25])
