from __future__ import annotations

import math
from pathlib import Path

import numpy as np
import pytest

from crawler.action import ACTION_DIM
from crawler.config import load_config
from crawler.env import CrawlerEnv
from crawler.layout import OBS_DIM
from crawler.physics import BodyPartId, LOWER_LEGS, UPPER_LEGS


def _load_physics(n_substeps: int = 2):
    mujoco = pytest.importorskip("mujoco")
    from sim_adapter.mujoco_crawler import MujocoCrawlerPhysics

    root = Path(__file__).resolve().parents[1]
    xml_path = root / "assets" / "crawler.xml"
    mj_model = mujoco.MjModel.from_xml_path(str(xml_path))
    return mujoco, MujocoCrawlerPhysics(mj_model, n_substeps=n_substeps)


def test_physics_exposes_every_part() -> None:
    _, physics = _load_physics()
    assert physics.fixed_dt == pytest.approx(0.02)
    assert physics.joint(BodyPartId.BODY) is None
    for part_id in BodyPartId:
        body = physics.body(part_id)
        assert body.position.shape == (3,)
        assert body.rotation.shape == (4,)
        assert body.velocity.shape == (3,)
    np.testing.assert_allclose(physics.body(BodyPartId.BODY).position, [0.0, 0.0, 0.45], atol=1e-6)
    np.testing.assert_allclose(physics.target.position, [5.0, 0.0, 0.25], atol=1e-6)


def test_agent_origin_sits_on_the_floor() -> None:
    _, physics = _load_physics()
    np.testing.assert_allclose(physics.agent_origin.position, [0.0, 0.0, 0.0], atol=1e-6)
    np.testing.assert_allclose(physics.agent_origin.rotation, [1.0, 0.0, 0.0, 0.0], atol=1e-6)


def test_joint_limits_read_from_model() -> None:
    _, physics = _load_physics()
    for part_id in UPPER_LEGS:
        limits = physics.joint(part_id).limits
        assert limits.low_x == pytest.approx(-45.0)
        assert limits.high_x == pytest.approx(45.0)
        assert limits.y == pytest.approx(40.0)
        assert limits.z == pytest.approx(0.0)
    for part_id in LOWER_LEGS:
        limits = physics.joint(part_id).limits
        assert limits.low_x == pytest.approx(-30.0)
        assert limits.high_x == pytest.approx(60.0)
        assert limits.y == pytest.approx(0.0)


def test_joint_drive_writes_actuators() -> None:
    _, physics = _load_physics()
    joint = physics.joint(BodyPartId.LEG0_UPPER)
    joint.set_target_rotation(np.array([30.0, -20.0, 0.0]))
    x_id, y_id = joint.actuator_ids
    assert physics.mj_data.ctrl[x_id] == pytest.approx(math.radians(30.0))
    assert physics.mj_data.ctrl[y_id] == pytest.approx(math.radians(-20.0))

    joint.set_drive(spring=25.0, damper=2.0, max_force=7.5)
    m = physics.mj_model
    assert m.actuator_gainprm[x_id, 0] == pytest.approx(25.0)
    assert m.actuator_biasprm[x_id, 1] == pytest.approx(-25.0)
    assert m.actuator_biasprm[x_id, 2] == pytest.approx(-2.0)
    np.testing.assert_allclose(m.actuator_forcerange[y_id], [-7.5, 7.5])


def test_raycast_hits_floor_below_root() -> None:
    _, physics = _load_physics()
    origin = physics.body(BodyPartId.BODY).position
    down = np.array([0.0, 0.0, -1.0])
    assert physics.raycast(origin, down, 10.0) == pytest.approx(0.45, abs=1e-4)
    assert physics.raycast(origin, down, 0.2) is None
    assert physics.raycast(origin, np.array([0.0, 0.0, 1.0]), 10.0) is None


def test_crawler_settles_onto_the_floor() -> None:
    _, physics = _load_physics()
    touching = set()
    for _ in range(100):
        touching |= physics.step().ground
    assert touching
    assert touching <= set(BodyPartId)


def test_missing_geom_fails_fast() -> None:
    mujoco, physics = _load_physics()
    from sim_adapter.mujoco_crawler import MujocoCrawlerPhysics

    with pytest.raises(ValueError, match="Geom 'missing_floor' not found"):
        MujocoCrawlerPhysics(physics.mj_model, floor_geom="missing_floor")


def test_from_xml_path_missing_file(tmp_path) -> None:
    pytest.importorskip("mujoco")
    from sim_adapter.mujoco_crawler import MujocoCrawlerPhysics

    with pytest.raises(FileNotFoundError):
        MujocoCrawlerPhysics.from_xml_path(tmp_path / "nope.xml")


def test_env_runs_on_mujoco(project_root) -> None:
    _, physics = _load_physics()
    config = load_config(project_root / "configs" / "crawler_static_variable_speed.yaml")
    env = CrawlerEnv(physics, config, rng=np.random.default_rng(0))
    obs = env.reset()
    assert obs.shape == (OBS_DIM,)

    rng = np.random.default_rng(1)
    for _ in range(3):
        obs, reward, done, info = env.step(rng.uniform(-1.0, 1.0, size=ACTION_DIM))
        assert obs.shape == (OBS_DIM,)
        assert np.all(np.isfinite(obs))
        assert 0.0 <= reward <= config.agent.decision_period
    np.testing.assert_allclose(env.agent.target_position[:2], [1800.0, 0.0], atol=1e-4)


def test_episode_reset_restores_root() -> None:
    _, physics = _load_physics()
    env = CrawlerEnv(physics, rng=np.random.default_rng(0))
    env.reset()
    for _ in range(5):
        env.step(np.zeros(ACTION_DIM))
    env.reset()
    root = physics.body(BodyPartId.BODY)
    np.testing.assert_allclose(root.position, [0.0, 0.0, 0.45], atol=1e-5)
    np.testing.assert_allclose(root.velocity, [0.0, 0.0, 0.0], atol=1e-5)
