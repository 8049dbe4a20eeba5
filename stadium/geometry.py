import logging
from collections import defaultdict
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import trimesh
from shapely.geometry import Point, Polygon

from .constants import DEFAULT_CYLINDER_SECTIONS, GEOMETRY_EPSILON
from .materials import ColorTuple

logger = logging.getLogger(__name__)

Y_AXIS = np.array([0.0, 1.0, 0.0])

# Lays a shape drawn in the XY plane flat on the ground (XZ), extrusion going up +Y.
_XY_TO_GROUND = trimesh.transformations.rotation_matrix(-np.pi / 2, [1, 0, 0])


# --- Transform helpers ---

def yaw_matrix(yaw: float) -> np.ndarray:
    """4x4 rotation about the world Y axis."""
    return trimesh.transformations.rotation_matrix(float(yaw), Y_AXIS)


def pose_matrix(position: Sequence[float], yaw: float = 0.0) -> np.ndarray:
    """Translation followed by a yaw rotation (T @ R)."""
    matrix = yaw_matrix(yaw)
    matrix[:3, 3] = np.asarray(position, dtype=float)
    return matrix


def transform_point(matrix: np.ndarray, point: Sequence[float]) -> np.ndarray:
    """Applies a 4x4 homogeneous transform to a single 3D point."""
    homogeneous = np.append(np.asarray(point, dtype=float), 1.0)
    return (matrix @ homogeneous)[:3]


def transform_direction(matrix: np.ndarray, direction: Sequence[float]) -> np.ndarray:
    return matrix[:3, :3] @ np.asarray(direction, dtype=float)


def facing_yaw(origin: Sequence[float], target: Sequence[float]) -> float:
    """
    Yaw that turns an object's local +Z axis toward `target` when it sits at
    `origin`. Only the horizontal (XZ) offset is considered.
    """
    dx = float(target[0]) - float(origin[0])
    dz = float(target[2]) - float(origin[2])
    if abs(dx) < GEOMETRY_EPSILON and abs(dz) < GEOMETRY_EPSILON:
        return 0.0
    return float(np.arctan2(dx, dz))


# --- Primitive creation ---

def create_box_mesh(position: np.ndarray = np.array([0.0, 0.0, 0.0]),
                    dimensions: np.ndarray = np.array([1.0, 1.0, 1.0])) -> trimesh.Trimesh:
    """
    Creates a rectangular prism mesh centered at a specified position.

    Args:
        position: A numpy array representing the center of the prism (x, y, z).
        dimensions: A numpy array for the X, Y, Z extents.

    Returns:
        A trimesh.Trimesh object representing the prism.
    """
    dimensions = np.asarray(dimensions, dtype=float)
    primitive = trimesh.primitives.Box(extents=dimensions)
    primitive.apply_translation(np.asarray(position, dtype=float))
    mesh = trimesh.Trimesh(vertices=primitive.vertices, faces=primitive.faces)

    # Box projection UVs (0 to 1 range) so textured boxes have something sane
    span = dimensions.copy()
    span[span == 0] = 1.0
    uvs = (mesh.vertices - primitive.bounds[0]) / span
    mesh.visual = trimesh.visual.TextureVisuals(uv=uvs[:, :2])
    return mesh


def create_cylinder_mesh(position: np.ndarray = np.array([0.0, 0.0, 0.0]),
                         radius: float = 0.5, height: float = 1.0,
                         sections: int = DEFAULT_CYLINDER_SECTIONS) -> trimesh.Trimesh:
    """
    Creates a cylinder mesh with its geometric center at `position`,
    aligned along the Y-axis (height direction).
    """
    # trimesh builds Z-aligned cylinders; rotate onto Y
    cylinder = trimesh.creation.cylinder(radius=radius, height=height, sections=sections)
    cylinder.apply_transform(trimesh.transformations.rotation_matrix(np.pi / 2, [1, 0, 0]))
    cylinder.apply_translation(np.asarray(position, dtype=float))
    return cylinder


def create_tapered_cylinder_mesh(position: np.ndarray, radius_top: float, radius_bottom: float,
                                 height: float, sections: int = DEFAULT_CYLINDER_SECTIONS) -> trimesh.Trimesh:
    """
    Creates a Y-aligned truncated cone centered at `position` by revolving its
    side profile around the axis.
    """
    profile = np.array([
        [0.0, 0.0],
        [radius_bottom, 0.0],
        [radius_top, height],
        [0.0, height],
    ])
    mesh = trimesh.creation.revolve(profile, sections=sections)
    # Revolve axis is Z; stand it up on Y with the base at y=0
    mesh.apply_transform(trimesh.transformations.rotation_matrix(-np.pi / 2, [1, 0, 0]))
    mesh.apply_translation(np.asarray(position, dtype=float) - np.array([0.0, height / 2.0, 0.0]))
    return mesh


def create_segment_cylinder(start: Sequence[float], end: Sequence[float], radius: float,
                            sections: int = DEFAULT_CYLINDER_SECTIONS,
                            min_length: float = GEOMETRY_EPSILON) -> Optional[trimesh.Trimesh]:
    """
    Creates a cylinder running from `start` to `end`.

    Returns None when the segment is shorter than `min_length`; callers treat
    that as a degenerate element and skip it.
    """
    start = np.asarray(start, dtype=float)
    end = np.asarray(end, dtype=float)
    if np.linalg.norm(end - start) < max(min_length, GEOMETRY_EPSILON):
        return None
    return trimesh.creation.cylinder(radius=radius, sections=sections, segment=np.vstack([start, end]))


def create_oriented_cylinder(center: Sequence[float], direction: Sequence[float], radius: float,
                             length: float, sections: int = DEFAULT_CYLINDER_SECTIONS) -> trimesh.Trimesh:
    """Cylinder of `length` centered at `center` with its axis along `direction`."""
    direction = np.asarray(direction, dtype=float)
    direction = direction / np.linalg.norm(direction)
    center = np.asarray(center, dtype=float)
    half = direction * (length / 2.0)
    return trimesh.creation.cylinder(radius=radius, sections=sections,
                                     segment=np.vstack([center - half, center + half]))


def create_plane_mesh(width: float, height: float) -> trimesh.Trimesh:
    """
    Creates a two-triangle quad in the XY plane, centered at the origin and
    facing +Z, with 0..1 UVs.
    """
    hw, hh = width / 2.0, height / 2.0
    vertices = np.array([
        [-hw, -hh, 0.0],
        [hw, -hh, 0.0],
        [hw, hh, 0.0],
        [-hw, hh, 0.0],
    ])
    faces = np.array([[0, 1, 2], [0, 2, 3]])
    mesh = trimesh.Trimesh(vertices=vertices, faces=faces, process=False)
    uvs = np.array([[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 1.0]])
    mesh.visual = trimesh.visual.TextureVisuals(uv=uvs)
    return mesh


def extrude_polygon_mesh(polygon: Polygon, depth: float) -> trimesh.Trimesh:
    """
    Extrudes a shapely polygon (holes included) drawn in the XY plane along +Z
    from z=0 to z=depth.

    Raises:
        ValueError: If the polygon is empty/invalid or the depth is not positive.
    """
    if depth <= 0:
        raise ValueError(f"Extrusion depth must be positive, got {depth}")
    if polygon.is_empty or not polygon.is_valid or polygon.area <= GEOMETRY_EPSILON:
        raise ValueError("Cannot extrude an empty, invalid or zero-area polygon")
    return trimesh.creation.extrude_polygon(polygon, height=depth)


def create_ground_slab(polygon: Polygon, thickness: float, base_y: float = 0.0) -> trimesh.Trimesh:
    """
    Extrudes a footprint drawn in XY and lays it flat: XY -> XZ (y maps to -z),
    occupying base_y..base_y+thickness in world Y.
    """
    mesh = extrude_polygon_mesh(polygon, thickness)
    mesh.apply_transform(_XY_TO_GROUND)
    mesh.apply_translation([0.0, base_y, 0.0])
    return mesh


def rectangle_polygon(length: float, width: float) -> Polygon:
    hl, hw = length / 2.0, width / 2.0
    return Polygon([(-hl, -hw), (hl, -hw), (hl, hw), (-hl, hw)])


def rectangle_ring_polygon(outer_length: float, outer_width: float,
                           inner_length: float, inner_width: float) -> Optional[Polygon]:
    """
    Axis-aligned rectangle with a congruent rectangular hole. Returns None if
    the hole would not leave any material (degenerate ring).
    """
    if outer_length <= inner_length or outer_width <= inner_width:
        return None
    outer = rectangle_polygon(outer_length, outer_width)
    inner = rectangle_polygon(inner_length, inner_width)
    return Polygon(outer.exterior.coords, [list(inner.exterior.coords)[::-1]])


def circle_ring_polygon(radius: float, line_width: float,
                        sections: int = DEFAULT_CYLINDER_SECTIONS) -> Polygon:
    """Annulus of the given center-line radius and line width."""
    quad_segs = max(4, sections // 4)
    outer = Point(0.0, 0.0).buffer(radius + line_width / 2.0, quad_segs=quad_segs)
    inner = Point(0.0, 0.0).buffer(radius - line_width / 2.0, quad_segs=quad_segs)
    return outer.difference(inner)


def ellipse_polygon(length: float, width: float, sections: int = DEFAULT_CYLINDER_SECTIONS) -> Polygon:
    angles = np.linspace(0.0, 2.0 * np.pi, sections, endpoint=False)
    return Polygon(np.column_stack([np.cos(angles) * length / 2.0, np.sin(angles) * width / 2.0]))


# --- Colors and export helpers ---

def apply_color(mesh: trimesh.Trimesh, color: ColorTuple) -> trimesh.Trimesh:
    """Returns a copy of `mesh` with uniform face colors."""
    colored = mesh.copy()
    colored.visual = trimesh.visual.ColorVisuals(mesh=colored,
                                                 face_colors=np.tile(color, (len(colored.faces), 1)))
    return colored


def optimize_meshes(colored_meshes: List[Tuple[trimesh.Trimesh, ColorTuple]]) -> List[trimesh.Trimesh]:
    """
    Merges meshes sharing a color into one mesh per color.

    Args:
        colored_meshes: (mesh, color) pairs with meshes already in world space.

    Returns:
        A list of trimesh.Trimesh objects, one per color group, face-colored.
    """
    if not colored_meshes:
        return []

    by_color: Dict[ColorTuple, List[trimesh.Trimesh]] = defaultdict(list)
    for mesh, color in colored_meshes:
        if mesh is None or mesh.is_empty:
            continue
        by_color[tuple(color)].append(mesh)

    optimized = []
    for color, meshes in by_color.items():
        combined = meshes[0] if len(meshes) == 1 else trimesh.util.concatenate(meshes)
        optimized.append(apply_color(combined, color))
        logger.debug("Merged %d meshes for color %s", len(meshes), color)

    logger.info("Optimization finished. Reduced %d meshes to %d.", len(colored_meshes), len(optimized))
    return optimized
