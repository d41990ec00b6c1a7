"""Native MuJoCo (MjModel/MjData) backend for the crawler physics interfaces.

Model requirements (see assets/crawler.xml):
- one body per BodyPartId, named by its value; the root carries a freejoint
- hinge joints `<part>_x`, `<part>_y`, `<part>_z` (any subset) on each leg
  body, each driven by a position actuator of the same name
- a `floor` geom and a mocap body `target` with geom `target_geom`
"""

from __future__ import annotations

import math
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import mujoco
import numpy as np

from crawler import frames
from crawler.physics import BodyPartId, ContactReport, JointLimits, Pose

_AXES = ("x", "y", "z")


def _name2id(mj_model: mujoco.MjModel, obj: mujoco.mjtObj, name: str, kind: str) -> int:
    obj_id = mujoco.mj_name2id(mj_model, obj, name)
    if obj_id < 0:
        raise ValueError(f"{kind} '{name}' not found in MJCF")
    return int(obj_id)


class MujocoBody:
    """Rigid body view over one MuJoCo body.

    Bodies below the root are placed by their joints: restoring a pose on them
    restores their joint angles from qpos0, and only zero velocities are
    supported.
    """

    def __init__(self, physics: "MujocoCrawlerPhysics", name: str) -> None:
        self._physics = physics
        m = physics.mj_model
        self.name = name
        self.body_id = _name2id(m, mujoco.mjtObj.mjOBJ_BODY, name, "Body")

        jnt_start = int(m.body_jntadr[self.body_id])
        jnt_num = int(m.body_jntnum[self.body_id])
        self._joint_ids = list(range(jnt_start, jnt_start + jnt_num)) if jnt_start >= 0 else []
        self.is_free = bool(
            self._joint_ids
            and int(m.jnt_type[self._joint_ids[0]]) == int(mujoco.mjtJoint.mjJNT_FREE)
        )
        self._qpos_adr = [int(m.jnt_qposadr[j]) for j in self._joint_ids]
        self._dof_adr = [int(m.jnt_dofadr[j]) for j in self._joint_ids]
        self._velocity = np.zeros(6, dtype=np.float64)

    @property
    def position(self) -> np.ndarray:
        return np.asarray(self._physics.mj_data.xpos[self.body_id], dtype=np.float32).copy()

    @property
    def rotation(self) -> np.ndarray:
        return np.asarray(self._physics.mj_data.xquat[self.body_id], dtype=np.float32).copy()

    @property
    def velocity(self) -> np.ndarray:
        return self._object_velocity()[3:6]

    @property
    def angular_velocity(self) -> np.ndarray:
        return self._object_velocity()[0:3]

    def _object_velocity(self) -> np.ndarray:
        mujoco.mj_objectVelocity(
            self._physics.mj_model,
            self._physics.mj_data,
            mujoco.mjtObj.mjOBJ_BODY,
            self.body_id,
            self._velocity,
            0,
        )
        return self._velocity.astype(np.float32)

    def set_pose(self, pose: Pose) -> None:
        m, d = self._physics.mj_model, self._physics.mj_data
        if self.is_free:
            adr = self._qpos_adr[0]
            d.qpos[adr : adr + 3] = frames.as_vec3(pose.position)
            d.qpos[adr + 3 : adr + 7] = frames.normalize_quat(pose.rotation)
        else:
            for adr in self._qpos_adr:
                d.qpos[adr] = m.qpos0[adr]
        mujoco.mj_forward(m, d)

    def set_velocity(self, linear: np.ndarray, angular: np.ndarray) -> None:
        m, d = self._physics.mj_model, self._physics.mj_data
        linear = frames.as_vec3(linear)
        angular = frames.as_vec3(angular)
        if self.is_free:
            adr = self._dof_adr[0]
            d.qvel[adr : adr + 3] = linear
            # Freejoint angular velocity lives in the body frame.
            d.qvel[adr + 3 : adr + 6] = frames.inverse_rotate_vec_by_quat(self.rotation, angular)
        else:
            if np.any(linear) or np.any(angular):
                raise ValueError(
                    f"Body '{self.name}' is joint-driven; only zero velocity can be set"
                )
            for adr in self._dof_adr:
                d.qvel[adr] = 0.0
        mujoco.mj_forward(m, d)


class MujocoMocapBody:
    """Kinematic body moved by writing its mocap pose."""

    def __init__(self, physics: "MujocoCrawlerPhysics", name: str) -> None:
        self._physics = physics
        m = physics.mj_model
        self.name = name
        self.body_id = _name2id(m, mujoco.mjtObj.mjOBJ_BODY, name, "Body")
        self.mocap_id = int(m.body_mocapid[self.body_id])
        if self.mocap_id < 0:
            raise ValueError(f"Body '{name}' is not a mocap body")

    @property
    def position(self) -> np.ndarray:
        return np.asarray(self._physics.mj_data.mocap_pos[self.mocap_id], dtype=np.float32).copy()

    @property
    def rotation(self) -> np.ndarray:
        return np.asarray(self._physics.mj_data.mocap_quat[self.mocap_id], dtype=np.float32).copy()

    @property
    def velocity(self) -> np.ndarray:
        return np.zeros((3,), dtype=np.float32)

    @property
    def angular_velocity(self) -> np.ndarray:
        return np.zeros((3,), dtype=np.float32)

    def set_pose(self, pose: Pose) -> None:
        d = self._physics.mj_data
        d.mocap_pos[self.mocap_id] = frames.as_vec3(pose.position)
        d.mocap_quat[self.mocap_id] = frames.normalize_quat(pose.rotation)
        mujoco.mj_forward(self._physics.mj_model, d)

    def set_velocity(self, linear: np.ndarray, angular: np.ndarray) -> None:
        if np.any(frames.as_vec3(linear)) or np.any(frames.as_vec3(angular)):
            raise ValueError(f"Mocap body '{self.name}' cannot carry a velocity")


class MujocoJointDrive:
    """Position-actuated joint of one limb segment, one hinge per rotation axis."""

    def __init__(self, physics: "MujocoCrawlerPhysics", part_name: str) -> None:
        self._physics = physics
        m = physics.mj_model
        self.part_name = part_name

        self._axes: List[Tuple[int, int]] = []  # (axis index, actuator id)
        ranges_deg: Dict[str, Tuple[float, float]] = {}
        for i, axis in enumerate(_AXES):
            name = f"{part_name}_{axis}"
            joint_id = mujoco.mj_name2id(m, mujoco.mjtObj.mjOBJ_JOINT, name)
            if joint_id < 0:
                continue
            actuator_id = _name2id(m, mujoco.mjtObj.mjOBJ_ACTUATOR, name, "Actuator")
            low, high = (math.degrees(float(v)) for v in m.jnt_range[joint_id])
            ranges_deg[axis] = (low, high)
            self._axes.append((i, actuator_id))
        if "x" not in ranges_deg:
            raise ValueError(f"Joint '{part_name}_x' not found in MJCF")

        low_x, high_x = ranges_deg["x"]
        self._limits = JointLimits(
            low_x=low_x,
            high_x=high_x,
            y=max(abs(v) for v in ranges_deg.get("y", (0.0, 0.0))),
            z=max(abs(v) for v in ranges_deg.get("z", (0.0, 0.0))),
        )

    @property
    def limits(self) -> JointLimits:
        return self._limits

    @property
    def actuator_ids(self) -> List[int]:
        return [actuator_id for _, actuator_id in self._axes]

    def set_target_rotation(self, degrees_xyz: np.ndarray) -> None:
        degrees_xyz = frames.as_vec3(degrees_xyz)
        for axis_index, actuator_id in self._axes:
            self._physics.mj_data.ctrl[actuator_id] = math.radians(float(degrees_xyz[axis_index]))

    def set_drive(self, spring: float, damper: float, max_force: float) -> None:
        m = self._physics.mj_model
        for actuator_id in self.actuator_ids:
            # Position actuator: force = kp * ctrl - kp * q - kv * qdot
            m.actuator_gainprm[actuator_id, 0] = spring
            m.actuator_biasprm[actuator_id, 1] = -spring
            m.actuator_biasprm[actuator_id, 2] = -damper
            m.actuator_forcelimited[actuator_id] = 1
            m.actuator_forcerange[actuator_id] = (-max_force, max_force)


class MujocoCrawlerPhysics:
    def __init__(
        self,
        mj_model: mujoco.MjModel,
        mj_data: Optional[mujoco.MjData] = None,
        *,
        n_substeps: int = 1,
        floor_geom: str = "floor",
        target_body: str = "target",
        target_geom: str = "target_geom",
    ) -> None:
        if n_substeps < 1:
            raise ValueError(f"n_substeps must be >= 1, got {n_substeps}")
        self.mj_model = mj_model
        self.mj_data = mj_data if mj_data is not None else mujoco.MjData(mj_model)
        self.n_substeps = int(n_substeps)
        self.fixed_dt = float(mj_model.opt.timestep) * self.n_substeps

        self._bodies = {part_id: MujocoBody(self, part_id.value) for part_id in BodyPartId}
        self._joints = {
            part_id: MujocoJointDrive(self, part_id.value)
            for part_id in BodyPartId
            if not part_id.is_root
        }
        root = self._bodies[BodyPartId.BODY]
        if not root.is_free:
            raise ValueError(f"Root body '{root.name}' must have a freejoint")

        self._target = MujocoMocapBody(self, target_body)
        self._floor_geom_id = _name2id(mj_model, mujoco.mjtObj.mjOBJ_GEOM, floor_geom, "Geom")
        self._target_geom_id = _name2id(mj_model, mujoco.mjtObj.mjOBJ_GEOM, target_geom, "Geom")
        self._part_by_body_id = {body.body_id: part_id for part_id, body in self._bodies.items()}
        self._touching_target = False
        self._geom_id = np.zeros(1, dtype=np.int32)

        mujoco.mj_forward(self.mj_model, self.mj_data)
        adr = root._qpos_adr[0]
        origin_position = np.array(mj_model.qpos0[adr : adr + 3], dtype=np.float32)
        origin_position[2] = 0.0
        self._agent_origin = Pose(
            position=origin_position,
            rotation=frames.normalize_quat(mj_model.qpos0[adr + 3 : adr + 7]),
        )

    @classmethod
    def from_xml_path(cls, xml_path: str | Path, *, n_substeps: int = 1) -> "MujocoCrawlerPhysics":
        xml_path = Path(xml_path)
        if not xml_path.exists():
            raise FileNotFoundError(f"Crawler MJCF not found: {xml_path}")
        mj_model = mujoco.MjModel.from_xml_path(str(xml_path))
        return cls(mj_model, n_substeps=n_substeps)

    @property
    def agent_origin(self) -> Pose:
        return self._agent_origin

    @property
    def target(self) -> MujocoMocapBody:
        return self._target

    def body(self, part_id: BodyPartId) -> MujocoBody:
        return self._bodies[part_id]

    def joint(self, part_id: BodyPartId) -> Optional[MujocoJointDrive]:
        return self._joints.get(part_id)

    def raycast(
        self, origin: np.ndarray, direction: np.ndarray, max_distance: float
    ) -> Optional[float]:
        direction = np.asarray(direction, dtype=np.float64).reshape(3)
        direction = direction / (np.linalg.norm(direction) + 1e-12)
        distance = mujoco.mj_ray(
            self.mj_model,
            self.mj_data,
            np.asarray(origin, dtype=np.float64).reshape(3),
            direction,
            None,
            1,
            self._bodies[BodyPartId.BODY].body_id,
            self._geom_id,
        )
        if distance < 0.0 or distance > max_distance:
            return None
        return float(distance)

    def step(self) -> ContactReport:
        for _ in range(self.n_substeps):
            mujoco.mj_step(self.mj_model, self.mj_data)
        mujoco.mj_forward(self.mj_model, self.mj_data)
        return self._contact_report()

    def _contact_report(self) -> ContactReport:
        m, d = self.mj_model, self.mj_data
        ground = set()
        touching_target = False
        for i in range(int(d.ncon)):
            con = d.contact[i]
            g1, g2 = int(con.geom1), int(con.geom2)
            for own, other in ((g1, g2), (g2, g1)):
                part_id = self._part_by_body_id.get(int(m.geom_bodyid[own]))
                if part_id is None:
                    continue
                if other == self._floor_geom_id:
                    ground.add(part_id)
                elif other == self._target_geom_id:
                    touching_target = True

        # Touching the target is reported once per contact, not every step.
        entered = touching_target and not self._touching_target
        self._touching_target = touching_target
        return ContactReport(ground=frozenset(ground), touched_target=entered)
