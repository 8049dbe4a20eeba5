"""
Roof placement.

Two mutually exclusive roof styles: a tilted slab per stand held up by
struts (individual), or one ring-shaped roof over the whole bowl sitting on
four corner columns (overall). Placement is computed from the built
StandInstance metrics, then turned into scene nodes.
"""
import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np
import trimesh

from .constants import (
    FALLBACK_STAND_DEPTH,
    FALLBACK_STAND_HEIGHT,
    GEOMETRY_EPSILON,
    OVERALL_ROOF_COLUMN_RADIUS,
    OVERALL_ROOF_COLUMN_SECTIONS,
    ROOF_SUPPORT_INSET_RATIO,
    ROOF_SUPPORT_RADIUS,
    ROOF_SUPPORT_SECTIONS,
)
from .geometry import (
    create_box_mesh,
    create_cylinder_mesh,
    create_ground_slab,
    create_segment_cylinder,
    rectangle_ring_polygon,
    transform_point,
)
from .materials import solid
from .params import (
    ConfigurationError,
    CoverageMode,
    IndividualRoofParams,
    NoRoof,
    OverallRoofParams,
    StadiumParams,
)
from .scene import StadiumScene
from .stands import StandInstance

logger = logging.getLogger(__name__)


# --- Individual roof ---

def compute_roof_coverage(roof: IndividualRoofParams, total_profile_depth: float) -> float:
    """
    How far back from the stand's top walkway the roof reaches.

    Raises:
        ConfigurationError: A fixed coverage deeper than the stand, or an
            auto minimum that cannot fit on it.
    """
    if roof.coverage_mode is CoverageMode.AUTO:
        if roof.min_coverage > total_profile_depth:
            raise ConfigurationError(
                f"Auto roof minimum coverage {roof.min_coverage} exceeds stand depth {total_profile_depth:.2f}"
            )
        coverage = total_profile_depth * roof.coverage_factor
        coverage = max(roof.min_coverage, min(roof.max_coverage, coverage))
        return min(coverage, total_profile_depth)

    if roof.depth > total_profile_depth + GEOMETRY_EPSILON:
        raise ConfigurationError(
            f"Roof coverage {roof.depth} exceeds stand depth {total_profile_depth:.2f}"
        )
    return roof.depth


def support_positions(stand_length: float, count: int) -> List[float]:
    """Length coordinates of the support struts, inset from both stand ends."""
    if count <= 0:
        return []
    if count == 1:
        return [stand_length / 2.0]
    half = stand_length / 2.0
    inset = stand_length * ROOF_SUPPORT_INSET_RATIO
    offsets = np.linspace(-half + inset, half - inset, count)
    return [float(half + offset) for offset in offsets]


@dataclass(frozen=True)
class StrutPlacement:
    base: np.ndarray
    attach: np.ndarray

    @property
    def length(self) -> float:
        return float(np.linalg.norm(self.attach - self.base))

    @property
    def direction(self) -> np.ndarray:
        return (self.attach - self.base) / self.length


@dataclass
class IndividualRoofPlacement:
    """Roof slab and struts in the owning stand's local frame."""
    coverage: float
    thickness: float
    tilt: float
    height_offset: float
    slab_center: np.ndarray
    slab_dimensions: np.ndarray
    supports: List[StrutPlacement] = field(default_factory=list)
    skipped_supports: int = 0

    @property
    def slab_transform(self) -> np.ndarray:
        """Tilt about the stand length axis, then move to the slab centre."""
        matrix = trimesh.transformations.rotation_matrix(self.tilt, [0.0, 0.0, 1.0])
        matrix[:3, 3] = self.slab_center
        return matrix

    @property
    def top_surface_height(self) -> float:
        return float(self.slab_center[1] + (self.thickness / 2.0) * math.cos(self.tilt))


def place_individual_roof(stand: StandInstance, roof: IndividualRoofParams) -> IndividualRoofPlacement:
    depth = stand.total_profile_depth
    length = stand.stand_length
    coverage = compute_roof_coverage(roof, depth)

    center = np.array([
        depth - coverage / 2.0,
        stand.total_profile_height_at_back + roof.height_offset + roof.thickness / 2.0,
        length / 2.0,
    ])
    placement = IndividualRoofPlacement(
        coverage=coverage,
        thickness=roof.thickness,
        tilt=roof.tilt,
        height_offset=roof.height_offset,
        slab_center=center,
        slab_dimensions=np.array([coverage, roof.thickness, length]),
    )

    slab_transform = placement.slab_transform
    for z in support_positions(length, roof.support_count):
        base = np.array([depth - coverage, 0.0, z])
        attach = transform_point(slab_transform, [-coverage / 2.0, -roof.thickness / 2.0, z - length / 2.0])
        strut = StrutPlacement(base=base, attach=attach)
        if strut.length < roof.min_strut_length:
            placement.skipped_supports += 1
            logger.debug("Skipping %.3f m roof strut on %s", strut.length, stand.name)
            continue
        placement.supports.append(strut)
    return placement


def add_individual_roof(scene: StadiumScene, stand: StandInstance,
                        placement: IndividualRoofPlacement, roof: IndividualRoofParams):
    prefix = stand.name.replace("Group", "")
    assembly = scene.add_group(f"{prefix}RoofAssembly", parent=stand.node,
                               coverage=placement.coverage, tilt=placement.tilt)
    slab = create_box_mesh(np.zeros(3), placement.slab_dimensions)
    scene.add_mesh("RoofSlab", slab, solid(roof.color, metalness=0.3, roughness=0.6),
                   transform=placement.slab_transform, parent=assembly)

    support_look = solid(roof.support_color, metalness=0.5, roughness=0.5)
    for index, strut in enumerate(placement.supports):
        mesh = create_segment_cylinder(strut.base, strut.attach, ROOF_SUPPORT_RADIUS,
                                       sections=ROOF_SUPPORT_SECTIONS, min_length=roof.min_strut_length)
        scene.add_mesh(f"RoofSupport_{index}", mesh, support_look, parent=assembly)


# --- Overall roof ---

@dataclass
class OverallRoofPlacement:
    outer_length: float
    outer_width: float
    inner_length: float
    inner_width: float
    thickness: float
    base_height: float
    column_positions: List[np.ndarray] = field(default_factory=list)
    column_height: float = 0.0

    @property
    def top_surface_height(self) -> float:
        return self.base_height + self.thickness


def place_overall_roof(params: StadiumParams, stands: List[StandInstance],
                       roof: Optional[OverallRoofParams] = None) -> Optional[OverallRoofPlacement]:
    """
    Sizes the ring roof from the deepest and tallest built stands.

    Returns None (with a warning) when the ring would have no material.
    """
    roof = roof or params.overall_roof
    if stands:
        max_depth = max(stand.total_profile_depth for stand in stands)
        max_height = max(stand.total_profile_height_at_back for stand in stands)
    else:
        max_depth = FALLBACK_STAND_DEPTH
        max_height = FALLBACK_STAND_HEIGHT

    expand = params.stand_defaults.offset_from_pitch + max_depth + roof.overhang
    pitch_length = params.pitch.length
    pitch_width = params.pitch.width
    placement = OverallRoofPlacement(
        outer_length=pitch_length + 2.0 * expand,
        outer_width=pitch_width + 2.0 * expand,
        inner_length=pitch_length,
        inner_width=pitch_width,
        thickness=roof.thickness,
        base_height=max_height,
    )
    if placement.outer_length <= placement.inner_length or placement.outer_width <= placement.inner_width:
        logger.warning("Overall roof ring is degenerate (outer %.2fx%.2f, hole %.2fx%.2f); skipping roof",
                       placement.outer_length, placement.outer_width, pitch_length, pitch_width)
        return None

    if max_height > 0:
        half_x = placement.outer_length / 2.0 - roof.overhang
        half_z = placement.outer_width / 2.0 - roof.overhang
        placement.column_height = max_height
        placement.column_positions = [
            np.array([sx * half_x, max_height / 2.0, sz * half_z])
            for sx, sz in ((1, 1), (-1, 1), (-1, -1), (1, -1))
        ]
    return placement


def add_overall_roof(scene: StadiumScene, placement: OverallRoofPlacement, roof: OverallRoofParams):
    ring = rectangle_ring_polygon(placement.outer_length, placement.outer_width,
                                  placement.inner_length, placement.inner_width)
    assembly = scene.add_group("OverallRoofAssembly")
    mesh = create_ground_slab(ring, placement.thickness, base_y=placement.base_height)
    look = solid(roof.color, opacity=roof.opacity, metalness=0.3, roughness=0.6, double_sided=True)
    scene.add_mesh("OverallRoofSlab", mesh, look, parent=assembly)

    column_look = solid(roof.support_color, metalness=0.5, roughness=0.5)
    for index, position in enumerate(placement.column_positions):
        column = create_cylinder_mesh(position, radius=OVERALL_ROOF_COLUMN_RADIUS,
                                      height=placement.column_height, sections=OVERALL_ROOF_COLUMN_SECTIONS)
        scene.add_mesh(f"OverallRoofColumn_{index}", column, column_look, parent=assembly)


# --- Dispatch ---

def build_roofs(scene: StadiumScene, params: StadiumParams, stands: List[StandInstance]):
    """Builds whichever roof variant the parameters select. Called once per pass."""
    variant = params.roof_variant()
    if isinstance(variant, NoRoof):
        logger.debug("No roof requested")
        return

    if isinstance(variant, OverallRoofParams):
        placement = place_overall_roof(params, stands, variant)
        if placement is not None:
            add_overall_roof(scene, placement, variant)
            logger.info("Overall roof placed at height %.2f", placement.base_height)
        return

    for stand in stands:
        if stand.roof is None:
            stand.roof = place_individual_roof(stand, variant)
        placement = stand.roof
        if stand.node is not None:
            add_individual_roof(scene, stand, placement, variant)
        logger.info("%s roof: coverage %.2f m, %d/%d supports", stand.name, placement.coverage,
                    len(placement.supports), variant.support_count)


def plan_roofs(params: StadiumParams, stands: List[StandInstance]):
    """
    Computes individual roof placements onto the stands without touching a
    scene, so coverage errors surface before anything is torn down.
    """
    variant = params.roof_variant()
    for stand in stands:
        stand.roof = place_individual_roof(stand, variant) if isinstance(variant, IndividualRoofParams) else None
