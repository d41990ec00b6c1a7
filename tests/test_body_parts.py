from __future__ import annotations

import numpy as np
import pytest

from crawler.body_parts import JointDriveController
from crawler.physics import BodyPartId, LOWER_LEGS, UPPER_LEGS
from tests.fakes import FakePhysics


def _controller(physics: FakePhysics, max_force: float = 20.0) -> JointDriveController:
    controller = JointDriveController(
        max_joint_spring=40.0, joint_dampen=1.0, max_joint_force_limit=max_force
    )
    for part_id in BodyPartId:
        controller.setup_body_part(part_id, physics)
    return controller


def test_setup_registers_every_part_in_order(fake_physics) -> None:
    controller = _controller(fake_physics)

    assert [p.part_id for p in controller.body_parts_list] == list(BodyPartId)
    assert set(controller.body_parts) == set(BodyPartId)
    assert controller.body_parts[BodyPartId.BODY].joint is None


def test_joints_start_at_full_strength(fake_physics) -> None:
    controller = _controller(fake_physics)
    for part_id in UPPER_LEGS + LOWER_LEGS:
        assert controller.body_parts[part_id].current_strength == pytest.approx(20.0)
        assert fake_physics.joints[part_id].last_drive == (40.0, 1.0, 20.0)
    assert controller.body_parts[BodyPartId.BODY].current_strength == 0.0


def test_duplicate_setup_is_rejected(fake_physics) -> None:
    controller = _controller(fake_physics)
    with pytest.raises(ValueError, match="already registered"):
        controller.setup_body_part(BodyPartId.LEG0_UPPER, fake_physics)


def test_non_positive_force_limit_is_rejected() -> None:
    with pytest.raises(ValueError, match="max_joint_force_limit"):
        JointDriveController(max_joint_spring=1.0, joint_dampen=1.0, max_joint_force_limit=0.0)


@pytest.mark.parametrize(
    "strength,expected",
    [(-1.0, 0.0), (0.0, 10.0), (1.0, 20.0), (0.5, 15.0), (-7.0, 0.0), (3.0, 20.0)],
)
def test_joint_strength_maps_into_force_range(fake_physics, strength, expected) -> None:
    controller = _controller(fake_physics)
    part = controller.body_parts[BodyPartId.LEG2_LOWER]

    part.set_joint_strength(strength)

    assert part.current_strength == pytest.approx(expected)
    assert 0.0 <= part.current_strength <= controller.max_joint_force_limit
    assert fake_physics.joints[BodyPartId.LEG2_LOWER].last_drive == pytest.approx((40.0, 1.0, expected))


def test_last_strength_write_wins(fake_physics) -> None:
    controller = _controller(fake_physics)
    part = controller.body_parts[BodyPartId.LEG1_UPPER]
    part.set_joint_strength(1.0)
    part.set_joint_strength(-1.0)
    assert part.current_strength == 0.0


def test_target_rotation_interpolates_joint_limits(fake_physics) -> None:
    controller = _controller(fake_physics)
    upper = controller.body_parts[BodyPartId.LEG0_UPPER]
    lower = controller.body_parts[BodyPartId.LEG0_LOWER]

    upper.set_joint_target_rotation(-1.0, 1.0, 0.0)
    assert np.allclose(fake_physics.joints[BodyPartId.LEG0_UPPER].last_target, [-45.0, 40.0, 0.0])
    assert np.allclose(upper.current_normalized_rotation, [0.0, 1.0, 0.5])

    lower.set_joint_target_rotation(0.0, 0.0, 0.0)
    # Asymmetric limits: the midpoint of [-30, 60].
    assert np.allclose(fake_physics.joints[BodyPartId.LEG0_LOWER].last_target, [15.0, 0.0, 0.0])

    lower.set_joint_target_rotation(2.0, 0.0, 0.0)
    assert np.allclose(lower.current_euler_rotation, [60.0, 0.0, 0.0])


def test_root_has_no_joint_to_drive(fake_physics) -> None:
    controller = _controller(fake_physics)
    root = controller.body_parts[BodyPartId.BODY]
    with pytest.raises(ValueError, match="no actuated joint"):
        root.set_joint_strength(0.0)
    with pytest.raises(ValueError, match="no actuated joint"):
        root.set_joint_target_rotation(0.0, 0.0, 0.0)


def test_reset_restores_starting_pose_and_rest(fake_physics) -> None:
    controller = _controller(fake_physics)
    part = controller.body_parts[BodyPartId.LEG3_UPPER]
    body = fake_physics.bodies[BodyPartId.LEG3_UPPER]
    start_position = body.position.copy()

    body.position = body.position + np.array([1.0, 2.0, 3.0], dtype=np.float32)
    body.rotation = np.array([0.0, 1.0, 0.0, 0.0], dtype=np.float32)
    body.velocity = np.array([4.0, 5.0, 6.0], dtype=np.float32)
    body.angular_velocity = np.array([1.0, 1.0, 1.0], dtype=np.float32)
    part.ground_contact.touching_ground = True

    part.reset()

    assert np.allclose(body.position, start_position)
    assert np.allclose(body.rotation, [1.0, 0.0, 0.0, 0.0])
    assert np.allclose(body.velocity, 0.0)
    assert np.allclose(body.angular_velocity, 0.0)
    assert part.touching_ground is False


def test_update_ground_contacts_sets_and_clears(fake_physics) -> None:
    controller = _controller(fake_physics)
    controller.update_ground_contacts({BodyPartId.LEG0_LOWER, BodyPartId.LEG2_LOWER})
    touching = {p.part_id for p in controller.body_parts_list if p.touching_ground}
    assert touching == {BodyPartId.LEG0_LOWER, BodyPartId.LEG2_LOWER}

    controller.update_ground_contacts([])
    assert not any(p.touching_ground for p in controller.body_parts_list)


def test_clear_drops_all_records(fake_physics) -> None:
    controller = _controller(fake_physics)
    controller.clear()
    assert controller.body_parts == {}
    assert controller.body_parts_list == []
