import logging
from dataclasses import dataclass
from typing import List, Tuple

import trimesh
from shapely.geometry import Polygon, box
from shapely.ops import unary_union

from .constants import BACK_WALL_THICKNESS, GEOMETRY_EPSILON
from .geometry import extrude_polygon_mesh
from .params import ConfigurationError, StandSpec

logger = logging.getLogger(__name__)

ProfilePoint = Tuple[float, float]


class ProfileError(ConfigurationError):
    """A StandSpec that cannot produce a closed, non-degenerate profile."""


@dataclass(frozen=True)
class StandProfile:
    """
    Closed stand cross-section in the (depth, height) plane.

    `points` runs base -> front wall top -> treads/risers -> walkway ->
    (back wall) -> ground -> origin, the final origin included explicitly.
    """
    points: Tuple[ProfilePoint, ...]
    total_profile_depth: float
    total_profile_height_at_back: float
    has_back_wall: bool

    @property
    def vertex_count(self) -> int:
        return len(self.points)

    def polygon(self) -> Polygon:
        """
        Shapely polygon of the stand body.

        The traced outline is cleaned of repeated points and collinear
        vertices first. A wall rising straight up at the back (a back wall, or
        the last riser when there is no walkway) has no width in the outline,
        so it is given a BACK_WALL_THICKNESS column that reaches the reported
        back height.
        """
        seating = _outline_polygon(self.points)
        if seating.is_empty:
            return seating
        if seating.bounds[3] >= self.total_profile_height_at_back - GEOMETRY_EPSILON:
            return seating

        thickness = min(BACK_WALL_THICKNESS, self.total_profile_depth)
        wall = box(self.total_profile_depth - thickness, 0.0,
                   self.total_profile_depth, self.total_profile_height_at_back)
        body = unary_union([seating, wall])
        if body.geom_type != "Polygon":
            raise ProfileError(f"Stand body is not a single polygon ({body.geom_type})")
        return body

    def is_simple(self) -> bool:
        polygon = self.polygon()
        return polygon.is_valid and polygon.exterior.is_simple and polygon.area > GEOMETRY_EPSILON

    def extrude(self, length: float) -> trimesh.Trimesh:
        """Solid stand body: the outline swept along +Z from 0 to `length`."""
        return extrude_polygon_mesh(self.polygon(), length)


def _same_point(a: ProfilePoint, b: ProfilePoint) -> bool:
    return abs(a[0] - b[0]) < GEOMETRY_EPSILON and abs(a[1] - b[1]) < GEOMETRY_EPSILON


def _outline_polygon(points) -> Polygon:
    """Polygon of the traced outline, or an empty one when it encloses no area."""
    ring: List[ProfilePoint] = []
    for point in points:
        if ring and _same_point(ring[-1], point):
            continue
        ring.append(point)
    if len(ring) > 1 and _same_point(ring[0], ring[-1]):
        ring.pop()

    removed = True
    while removed and len(ring) > 3:
        removed = False
        for i in range(len(ring)):
            prev, cur, nxt = ring[i - 1], ring[i], ring[(i + 1) % len(ring)]
            cross = (cur[0] - prev[0]) * (nxt[1] - cur[1]) - (cur[1] - prev[1]) * (nxt[0] - cur[0])
            if abs(cross) < GEOMETRY_EPSILON:
                del ring[i]
                removed = True
                break
    if len(ring) < 3:
        return Polygon()
    polygon = Polygon(ring)
    if polygon.area <= GEOMETRY_EPSILON:
        return Polygon()
    return polygon


def _check_spec(spec: StandSpec):
    if isinstance(spec.num_rows, bool) or not isinstance(spec.num_rows, int):
        raise ProfileError(f"num_rows must be an integer, got {spec.num_rows!r}")
    if spec.num_rows < 0:
        raise ProfileError(f"num_rows must not be negative, got {spec.num_rows}")

    for name in ("front_wall_height", "row_step_height", "row_step_depth",
                 "walkway_at_top_depth", "back_wall_height"):
        value = getattr(spec, name)
        if value < 0:
            raise ProfileError(f"{name} must not be negative, got {value}")

    if spec.num_rows > 0:
        if spec.row_step_height <= 0:
            raise ProfileError(f"row_step_height must be positive when rows exist, got {spec.row_step_height}")
        if spec.row_step_depth <= 0:
            raise ProfileError(f"row_step_depth must be positive when rows exist, got {spec.row_step_depth}")


def build_stand_profile(spec: StandSpec) -> StandProfile:
    """
    Walks a cursor from the origin to trace the stand cross-section.

    Args:
        spec: Effective stand parameters.

    Returns:
        The closed StandProfile with its recorded depth and back height.

    Raises:
        ProfileError: For negative dimensions, non-positive step sizes with
            rows present, or an outline without area.
    """
    _check_spec(spec)

    depth = 0.0
    height = 0.0
    points: List[ProfilePoint] = [(depth, height)]

    height += spec.front_wall_height
    points.append((depth, height))

    for _ in range(spec.num_rows):
        depth += spec.row_step_depth
        points.append((depth, height))
        height += spec.row_step_height
        points.append((depth, height))

    depth += spec.walkway_at_top_depth
    points.append((depth, height))
    total_profile_depth = depth

    has_back_wall = spec.back_wall_height > 0
    if has_back_wall:
        height += spec.back_wall_height
        points.append((depth, height))
    total_profile_height_at_back = height

    points.append((depth, 0.0))
    points.append((0.0, 0.0))

    if total_profile_depth <= GEOMETRY_EPSILON or total_profile_height_at_back <= GEOMETRY_EPSILON:
        raise ProfileError(
            f"Stand profile has no area (depth={total_profile_depth}, height={total_profile_height_at_back})"
        )
    # A back wall alone is a line in the outline; the seating must enclose area
    if _outline_polygon(points).is_empty:
        raise ProfileError(
            f"Stand profile encloses no seating area (front wall {spec.front_wall_height}, "
            f"{spec.num_rows} rows, walkway {spec.walkway_at_top_depth})"
        )

    profile = StandProfile(
        points=tuple(points),
        total_profile_depth=total_profile_depth,
        total_profile_height_at_back=total_profile_height_at_back,
        has_back_wall=has_back_wall,
    )
    logger.debug("Built profile with %d vertices (depth=%.2f, height=%.2f)",
                 profile.vertex_count, total_profile_depth, total_profile_height_at_back)
    return profile
