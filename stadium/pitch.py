import logging
from typing import Callable, Dict

import numpy as np
from shapely.affinity import translate
from shapely.geometry import MultiPolygon, Polygon
from shapely.ops import unary_union

from .constants import (
    CENTER_CIRCLE_RADIUS,
    CIRCLE_SECTIONS,
    CRICKET_BOUNDARY_INSET,
    CRICKET_PITCH_LENGTH,
    CRICKET_PITCH_WIDTH,
    CRICKET_STUMP_HEIGHT,
    CRICKET_STUMP_RADIUS,
    CRICKET_STUMP_SPACING,
    GOAL_DEPTH,
    GOAL_HEIGHT,
    GOAL_WIDTH,
    MARKING_LIFT,
    PENALTY_AREA_LENGTH,
    PENALTY_AREA_WIDTH,
)
from .geometry import (
    create_cylinder_mesh,
    create_ground_slab,
    create_segment_cylinder,
    circle_ring_polygon,
    ellipse_polygon,
    rectangle_polygon,
    rectangle_ring_polygon,
)
from .materials import (
    CRICKET_STRIP_COLOR,
    GOAL_COLOR,
    LINE_COLOR,
    OUTFIELD_COLOR,
    PITCH_COLOR,
    STUMP_COLOR,
    solid,
)
from .params import FieldParams, StadiumType
from .scene import SceneNode, StadiumScene

logger = logging.getLogger(__name__)

GRASS_THICKNESS = 0.05
GOAL_POST_RADIUS = 0.06


def _add_flat(scene: StadiumScene, parent: SceneNode, name: str, shape, color, base_y: float, thickness: float):
    """Extrudes a polygon or multipolygon footprint into flat slabs on the ground."""
    polygons = list(shape.geoms) if isinstance(shape, MultiPolygon) else [shape]
    for index, polygon in enumerate(polygons):
        if polygon.is_empty:
            continue
        suffix = f"_{index}" if len(polygons) > 1 else ""
        scene.add_mesh(f"{name}{suffix}", create_ground_slab(polygon, thickness, base_y=base_y),
                       solid(color, roughness=0.9, metalness=0.0), parent=parent)


def football_markings(pitch: FieldParams):
    """Union of every painted line on a football pitch, as a shapely geometry."""
    length, width, line = pitch.length, pitch.width, pitch.line_width
    lines = [
        rectangle_ring_polygon(length + line, width + line, length - line, width - line),
        rectangle_polygon(line, width),
        circle_ring_polygon(CENTER_CIRCLE_RADIUS, line, CIRCLE_SECTIONS),
    ]
    # Penalty areas hang off each goal line
    box = rectangle_ring_polygon(PENALTY_AREA_LENGTH + line, PENALTY_AREA_WIDTH + line,
                                 PENALTY_AREA_LENGTH - line, PENALTY_AREA_WIDTH - line)
    for sign in (-1.0, 1.0):
        lines.append(translate(box, xoff=sign * (length / 2.0 - PENALTY_AREA_LENGTH / 2.0)))
    return unary_union([shape for shape in lines if shape is not None])


def _add_goal(scene: StadiumScene, parent: SceneNode, name: str, goal_line_x: float, direction: float):
    """Posts, crossbar and a back frame GOAL_DEPTH behind the goal line."""
    look = solid(GOAL_COLOR, metalness=0.4, roughness=0.4)
    half = GOAL_WIDTH / 2.0
    back_x = goal_line_x + direction * GOAL_DEPTH
    segments = [
        ((goal_line_x, 0.0, -half), (goal_line_x, GOAL_HEIGHT, -half)),
        ((goal_line_x, 0.0, half), (goal_line_x, GOAL_HEIGHT, half)),
        ((goal_line_x, GOAL_HEIGHT, -half), (goal_line_x, GOAL_HEIGHT, half)),
        ((goal_line_x, GOAL_HEIGHT, -half), (back_x, 0.0, -half)),
        ((goal_line_x, GOAL_HEIGHT, half), (back_x, 0.0, half)),
        ((back_x, 0.0, -half), (back_x, 0.0, half)),
    ]
    for index, (start, end) in enumerate(segments):
        mesh = create_segment_cylinder(start, end, GOAL_POST_RADIUS, sections=8)
        scene.add_mesh(f"{name}_Bar_{index}", mesh, look, parent=parent)


def build_football_pitch(scene: StadiumScene, pitch: FieldParams) -> SceneNode:
    group = scene.add_group("FootballPitch")
    _add_flat(scene, group, "PitchSurface", rectangle_polygon(pitch.length, pitch.width), PITCH_COLOR,
              base_y=-GRASS_THICKNESS, thickness=GRASS_THICKNESS)
    _add_flat(scene, group, "PitchMarkings", football_markings(pitch), LINE_COLOR,
              base_y=0.0, thickness=MARKING_LIFT)
    _add_goal(scene, group, "GoalEast", pitch.length / 2.0, 1.0)
    _add_goal(scene, group, "GoalWest", -pitch.length / 2.0, -1.0)
    return group


def cricket_boundary(pitch: FieldParams) -> Polygon:
    rope = max(pitch.line_width * 2.0, 0.1)
    outer = ellipse_polygon(pitch.length - 2 * CRICKET_BOUNDARY_INSET, pitch.width - 2 * CRICKET_BOUNDARY_INSET,
                            CIRCLE_SECTIONS)
    inner = ellipse_polygon(pitch.length - 2 * (CRICKET_BOUNDARY_INSET + rope),
                            pitch.width - 2 * (CRICKET_BOUNDARY_INSET + rope), CIRCLE_SECTIONS)
    return outer.difference(inner)


def build_cricket_pitch(scene: StadiumScene, pitch: FieldParams) -> SceneNode:
    group = scene.add_group("CricketGround")
    _add_flat(scene, group, "Outfield", ellipse_polygon(pitch.length, pitch.width, CIRCLE_SECTIONS),
              OUTFIELD_COLOR, base_y=-GRASS_THICKNESS, thickness=GRASS_THICKNESS)
    _add_flat(scene, group, "CricketStrip", rectangle_polygon(CRICKET_PITCH_LENGTH, CRICKET_PITCH_WIDTH),
              CRICKET_STRIP_COLOR, base_y=0.0, thickness=MARKING_LIFT)
    _add_flat(scene, group, "BoundaryRope", cricket_boundary(pitch), LINE_COLOR,
              base_y=0.0, thickness=MARKING_LIFT * 2)

    stump_look = solid(STUMP_COLOR, roughness=0.7, metalness=0.0)
    for end, sign in (("East", 1.0), ("West", -1.0)):
        x = sign * CRICKET_PITCH_LENGTH / 2.0
        for index, z in enumerate((-CRICKET_STUMP_SPACING, 0.0, CRICKET_STUMP_SPACING)):
            stump = create_cylinder_mesh(np.array([x, CRICKET_STUMP_HEIGHT / 2.0, z]),
                                         radius=CRICKET_STUMP_RADIUS, height=CRICKET_STUMP_HEIGHT, sections=8)
            scene.add_mesh(f"Stumps{end}_{index}", stump, stump_look, parent=group)
    return group


PITCH_BUILDERS: Dict[StadiumType, Callable[[StadiumScene, FieldParams], SceneNode]] = {
    StadiumType.FOOTBALL: build_football_pitch,
    StadiumType.CRICKET: build_cricket_pitch,
}


def build_pitch(scene: StadiumScene, pitch: FieldParams):
    if not pitch.show_pitch:
        return None
    logger.debug("Building %s pitch %.1f x %.1f", pitch.stadium_type.value, pitch.length, pitch.width)
    return PITCH_BUILDERS[pitch.stadium_type](scene, pitch)
