import logging
from dataclasses import dataclass, field
from typing import List

import numpy as np

from .constants import (
    FALLBACK_STAND_DEPTH,
    HOUSING_COLOR,
    HOUSING_DEPTH,
    HOUSING_HEIGHT,
    HOUSING_SINGLE_WIDTH,
    LAMP_FORWARD_GAP,
    LAMP_LENGTH,
    LAMP_RADIUS,
    LAMP_SECTIONS,
    LIGHT_PRESETS,
    LIGHT_SPACING,
    POLE_RADIUS_BOTTOM,
    POLE_RADIUS_TOP,
    POLE_SECTIONS,
    SPOTLIGHT_DECAY,
    TOWER_CLEARANCE,
    TOWER_OFFSET_FACTOR,
)
from .geometry import (
    create_box_mesh,
    create_oriented_cylinder,
    create_tapered_cylinder_mesh,
    facing_yaw,
    pose_matrix,
    transform_point,
)
from .materials import LAMP_COLOR, solid
from .params import FloodlightParams, StadiumParams
from .profile import ProfileError, build_stand_profile
from .scene import SpotEmitter, StadiumScene

logger = logging.getLogger(__name__)

FIELD_CENTER = np.zeros(3)


@dataclass
class LightElement:
    index: int
    local_offset: np.ndarray
    world_position: np.ndarray
    target: np.ndarray

    @property
    def aim(self) -> np.ndarray:
        offset = self.target - self.world_position
        return offset / np.linalg.norm(offset)


@dataclass
class FloodlightTower:
    name: str
    position: np.ndarray
    height: float
    yaw: float
    housing_center: np.ndarray
    housing_dimensions: np.ndarray
    lights: List[LightElement] = field(default_factory=list)

    @property
    def housing_transform(self) -> np.ndarray:
        return pose_matrix(self.housing_center, self.yaw)


def resolve_light_color(preset: str) -> str:
    """Hex colour for a light preset; unknown names fall back to Daylight."""
    if preset in LIGHT_PRESETS:
        return LIGHT_PRESETS[preset]
    logger.warning("Unknown spotlight preset %r, using Daylight", preset)
    return LIGHT_PRESETS["Daylight"]


def estimated_stand_depth(params: StadiumParams) -> float:
    """Depth of the effective East stand, used to keep towers behind the stands."""
    try:
        return build_stand_profile(params.effective_stand_spec(0)).total_profile_depth
    except ProfileError:
        return FALLBACK_STAND_DEPTH


def tower_positions(params: StadiumParams) -> List[np.ndarray]:
    margin = (params.stand_defaults.offset_from_pitch
              + estimated_stand_depth(params) * 0.5
              + TOWER_CLEARANCE * TOWER_OFFSET_FACTOR)
    x = params.pitch.length / 2.0 + margin
    z = params.pitch.width / 2.0 + margin
    return [
        np.array([x, 0.0, z]),
        np.array([-x, 0.0, z]),
        np.array([-x, 0.0, -z]),
        np.array([x, 0.0, -z]),
    ]


def housing_width(lights_per_tower: int) -> float:
    return lights_per_tower * LIGHT_SPACING if lights_per_tower > 1 else HOUSING_SINGLE_WIDTH


def light_local_offsets(lights_per_tower: int) -> List[np.ndarray]:
    """Lamp positions across the housing front, in the housing's frame."""
    width = housing_width(lights_per_tower)
    z = HOUSING_DEPTH / 2.0 + LAMP_FORWARD_GAP
    if lights_per_tower == 1:
        return [np.array([0.0, 0.0, z])]
    step = width / lights_per_tower
    return [np.array([-width / 2.0 + step * (i + 0.5), 0.0, z]) for i in range(lights_per_tower)]


def place_floodlights(params: StadiumParams) -> List[FloodlightTower]:
    """Four corner towers, each with a housing turned to the field and its lamps aimed at the centre."""
    lights = params.floodlights
    towers = []
    for index, base in enumerate(tower_positions(params)):
        housing_center = np.array([base[0], lights.tower_height - HOUSING_HEIGHT / 2.0, base[2]])
        tower = FloodlightTower(
            name=f"FloodlightTower_{index}",
            position=base,
            height=lights.tower_height,
            yaw=facing_yaw(base, FIELD_CENTER),
            housing_center=housing_center,
            housing_dimensions=np.array([housing_width(lights.lights_per_tower), HOUSING_HEIGHT, HOUSING_DEPTH]),
        )
        housing_transform = tower.housing_transform
        for light_index, offset in enumerate(light_local_offsets(lights.lights_per_tower)):
            tower.lights.append(LightElement(
                index=light_index,
                local_offset=offset,
                world_position=transform_point(housing_transform, offset),
                target=FIELD_CENTER.copy(),
            ))
        towers.append(tower)
    return towers


def build_floodlights(scene: StadiumScene, params: StadiumParams):
    """
    Adds tower meshes to the scene and registers one spot emitter per lamp.
    The emitter registry must already be empty (teardown runs first).
    """
    lights: FloodlightParams = params.floodlights
    color = resolve_light_color(lights.color_preset)
    group = scene.add_group("Floodlights")
    pole_look = solid(lights.tower_color, metalness=0.6, roughness=0.4)
    housing_look = solid(HOUSING_COLOR, metalness=0.7, roughness=0.3)
    lamp_look = solid(LAMP_COLOR, emissive_intensity=0.5 if lights.intensity > 0 else 0.0)

    towers = place_floodlights(params)
    for tower in towers:
        pole = create_tapered_cylinder_mesh(
            np.array([tower.position[0], tower.height / 2.0, tower.position[2]]),
            radius_top=POLE_RADIUS_TOP, radius_bottom=POLE_RADIUS_BOTTOM,
            height=tower.height, sections=POLE_SECTIONS,
        )
        scene.add_mesh(f"{tower.name}_Pole", pole, pole_look, parent=group)
        scene.add_mesh(f"{tower.name}_Housing", create_box_mesh(np.zeros(3), tower.housing_dimensions),
                       housing_look, transform=tower.housing_transform, parent=group)

        for light in tower.lights:
            lamp = create_oriented_cylinder(light.world_position, light.aim, LAMP_RADIUS, LAMP_LENGTH,
                                            sections=LAMP_SECTIONS)
            scene.add_mesh(f"{tower.name}_Lamp_{light.index}", lamp, lamp_look, parent=group)
            scene.emitters.add_spot(SpotEmitter(
                name=f"{tower.name}_Spot_{light.index}",
                position=light.world_position,
                target=light.target,
                color=color,
                intensity=lights.intensity,
                distance=lights.distance,
                angle=lights.angle,
                penumbra=lights.penumbra,
                decay=SPOTLIGHT_DECAY,
            ), with_helper=lights.show_helpers)

    logger.info("Floodlights generated with %d spotlights", len(scene.emitters))
    return towers
