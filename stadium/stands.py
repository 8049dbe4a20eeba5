import logging
import math
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Sequence

import numpy as np
import trimesh

from .geometry import pose_matrix, transform_point
from .materials import solid
from .params import StadiumParams, StandSpec
from .profile import StandProfile, build_stand_profile
from .scene import StadiumScene

logger = logging.getLogger(__name__)


class CardinalSide(Enum):
    EAST = "East"
    WEST = "West"
    NORTH = "North"
    SOUTH = "South"


@dataclass(frozen=True)
class CardinalDefinition:
    """
    Where a cardinal stand sits. `along_length` stands run the length of the
    field (East/West); the others run its width.
    """
    side: CardinalSide
    along_length: bool
    yaw: float
    # Signs applied to (half length, half width [+ offset]) for the anchor
    x_sign: float
    z_sign: float

    def length(self, pitch_length: float, pitch_width: float) -> float:
        return pitch_length if self.along_length else pitch_width

    def position(self, pitch_length: float, pitch_width: float, offset: float) -> np.ndarray:
        if self.along_length:
            return np.array([self.x_sign * pitch_length / 2.0, 0.0,
                             self.z_sign * (pitch_width / 2.0 + offset)])
        return np.array([self.x_sign * (pitch_length / 2.0 + offset), 0.0,
                         self.z_sign * pitch_width / 2.0])


# Profile front (local x = 0) faces the field centre; extrusion runs along local +Z.
CARDINAL_DEFINITIONS = (
    CardinalDefinition(CardinalSide.EAST, True, -math.pi / 2, 1.0, 1.0),
    CardinalDefinition(CardinalSide.WEST, True, math.pi / 2, -1.0, -1.0),
    CardinalDefinition(CardinalSide.NORTH, False, 0.0, 1.0, -1.0),
    CardinalDefinition(CardinalSide.SOUTH, False, math.pi, -1.0, 1.0),
)


@dataclass
class StandInstance:
    """One built stand and the metrics downstream placement reads back."""
    name: str
    side: CardinalSide
    spec: StandSpec
    profile: StandProfile
    mesh: trimesh.Trimesh = field(repr=False)
    position: np.ndarray
    yaw: float
    stand_length: float
    roof: Optional[Any] = None
    node: Optional[Any] = field(default=None, repr=False)

    @property
    def total_profile_depth(self) -> float:
        return self.profile.total_profile_depth

    @property
    def total_profile_height_at_back(self) -> float:
        return self.profile.total_profile_height_at_back

    @property
    def transform(self) -> np.ndarray:
        return pose_matrix(self.position, self.yaw)

    def local_to_world(self, point: Sequence[float]) -> np.ndarray:
        return transform_point(self.transform, point)

    def world_to_local(self, point: Sequence[float]) -> np.ndarray:
        return transform_point(np.linalg.inv(self.transform), point)


def build_stand(definition: CardinalDefinition, spec: StandSpec,
                pitch_length: float, pitch_width: float) -> StandInstance:
    """
    Builds a single stand from its effective spec.

    Raises:
        ProfileError: If the spec cannot produce a valid profile.
    """
    profile = build_stand_profile(spec)
    length = definition.length(pitch_length, pitch_width)
    mesh = profile.extrude(length)
    return StandInstance(
        name=f"{definition.side.value}StandGroup",
        side=definition.side,
        spec=spec,
        profile=profile,
        mesh=mesh,
        position=definition.position(pitch_length, pitch_width, spec.offset_from_pitch),
        yaw=definition.yaw,
        stand_length=length,
    )


def generate_all_stands(params: StadiumParams) -> List[StandInstance]:
    """
    Builds the four cardinal stands from the effective specs, skipping any
    with `show` off. Nothing here touches a scene.
    """
    stands: List[StandInstance] = []
    for index, definition in enumerate(CARDINAL_DEFINITIONS):
        spec = params.effective_stand_spec(index)
        if not spec.show:
            logger.debug("%s stand hidden, skipping", definition.side.value)
            continue
        stands.append(build_stand(definition, spec, params.pitch.length, params.pitch.width))
    logger.info("Generated %d stands", len(stands))
    return stands


def _compat_key(name: str) -> str:
    return re.sub(r"[^a-z0-9]", "", name.lower())


def find_stand(stands: List[StandInstance], name: str) -> Optional[StandInstance]:
    """
    Tolerant lookup by display name: "West Stand", "west" and
    "WestStandGroup" all find the West stand.
    """
    key = _compat_key(name)
    if key:
        for stand in stands:
            if _compat_key(stand.name) == key:
                return stand
        for stand in stands:
            if key in _compat_key(stand.name):
                return stand
    logger.warning("Stand %r not found among: %s", name, ", ".join(s.name for s in stands) or "(none)")
    return None


def add_stands_to_scene(scene: StadiumScene, stands: List[StandInstance]):
    """Adds a group node per stand (placed by its transform) holding the stand body."""
    for stand in stands:
        group = scene.add_group(stand.name, stand.transform,
                                stand_length=stand.stand_length,
                                total_profile_depth=stand.total_profile_depth,
                                total_profile_height_at_back=stand.total_profile_height_at_back)
        scene.add_mesh(f"{stand.side.value}StandMesh", stand.mesh, solid(stand.spec.color), parent=group)
        stand.node = group
    scene.stands = list(stands)
