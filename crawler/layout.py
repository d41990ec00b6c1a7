from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from crawler.physics import BodyPartId


@dataclass(frozen=True)
class ObsFieldSpec:
    name: str
    size: int
    frame: Optional[str] = None
    units: Optional[str] = None


def _body_part_fields() -> List[ObsFieldSpec]:
    out = []
    for part_id in BodyPartId:
        out.append(ObsFieldSpec(f"{part_id.value}_touching_ground", 1, units="bool_as_float"))
        if not part_id.is_root:
            out.append(ObsFieldSpec(f"{part_id.value}_strength", 1, units="normalized_0_1"))
    return out


# Order is part of the policy interface: reordering breaks trained models.
CRAWLER_OBS_LAYOUT: List[ObsFieldSpec] = [
    ObsFieldSpec("vel_goal_distance", 1, units="m_s"),
    ObsFieldSpec("avg_velocity_local", 3, frame="orientation_reference", units="m_s"),
    ObsFieldSpec("goal_velocity_local", 3, frame="orientation_reference", units="m_s"),
    ObsFieldSpec("rotation_delta", 4, units="quat_wxyz"),
    ObsFieldSpec("target_position_local", 3, frame="orientation_reference", units="m"),
    ObsFieldSpec("ground_distance", 1, units="normalized_0_1"),
    *_body_part_fields(),
]


def get_slices(layout: Sequence[ObsFieldSpec] = CRAWLER_OBS_LAYOUT) -> Dict[str, slice]:
    """Compute name->slice mapping for an observation layout."""
    idx = 0
    out: Dict[str, slice] = {}
    for field in layout:
        size = int(field.size)
        out[field.name] = slice(idx, idx + size)
        idx += size
    return out


def obs_dim(layout: Sequence[ObsFieldSpec] = CRAWLER_OBS_LAYOUT) -> int:
    return sum(int(field.size) for field in layout)


OBS_DIM = obs_dim(CRAWLER_OBS_LAYOUT)
