"""
Attachment placement: the scoreboard that sits on a stand's roof, the ad
hoardings ringing the field, and ribbon displays along stand fronts.

Each attachment is placed relative to an anchor (a StandInstance or the
field itself). Missing anchors are logged and the attachment is skipped.
"""
import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from .constants import (
    AD_GROUND_CLEARANCE,
    AD_TEXTURE_ID,
    GEOMETRY_EPSILON,
    SCOREBOARD_DEPTH_FRACTION,
    SCOREBOARD_SCREEN_GAP,
    SCOREBOARD_SUPPORT_RADIUS,
    SCOREBOARD_SUPPORT_SPREAD,
)
from .geometry import (
    create_box_mesh,
    create_cylinder_mesh,
    create_plane_mesh,
    facing_yaw,
    pose_matrix,
    transform_direction,
)
from .materials import hoarding_texture_repeat, solid, with_texture_repeat
from .params import (
    AdHoardingParams,
    DisplayContent,
    FieldParams,
    OverallRoofParams,
    RibbonDisplayParams,
    ScoreboardParams,
    StadiumParams,
)
from .roofs import place_overall_roof
from .scene import StadiumScene
from .stands import StandInstance, find_stand

logger = logging.getLogger(__name__)


# --- Scoreboard ---

@dataclass
class ScoreboardPlacement:
    stand: StandInstance = field(repr=False)
    local_position: np.ndarray
    local_yaw: float
    world_position: np.ndarray
    base_height: float
    width: float
    height: float
    frame_thickness: float
    support_height: float
    support_centers: List[np.ndarray]
    content: DisplayContent
    # Only yaw is applied; the board stays upright whatever the roof tilt.
    pitch: float = 0.0
    roll: float = 0.0

    @property
    def local_transform(self) -> np.ndarray:
        return pose_matrix(self.local_position, self.local_yaw)

    @property
    def world_transform(self) -> np.ndarray:
        return self.stand.transform @ self.local_transform

    @property
    def forward(self) -> np.ndarray:
        """World direction the screen faces."""
        return transform_direction(self.world_transform, [0.0, 0.0, 1.0])


def place_scoreboard(stands: List[StandInstance], scoreboard: ScoreboardParams,
                     overall_roof_top: Optional[float] = None) -> Optional[ScoreboardPlacement]:
    """
    Places the scoreboard assembly on the named stand, resting on its roof
    and turned toward the field centre.

    The board sits on the stand's own roof slab, else on the overall roof
    (`overall_roof_top`, the slab's upper face), else on the stand top.
    """
    stand = find_stand(stands, scoreboard.stand_name)
    if stand is None:
        logger.warning("Scoreboard target stand %r not found; skipping scoreboard", scoreboard.stand_name)
        return None

    if stand.roof is not None:
        roof_top = stand.roof.top_surface_height
    elif overall_roof_top is not None:
        roof_top = overall_roof_top
    else:
        roof_top = stand.total_profile_height_at_back
    base_height = roof_top + scoreboard.offset_from_roof
    total_height = scoreboard.height + scoreboard.frame_thickness
    center_y = base_height + scoreboard.support_height + total_height / 2.0

    local_position = np.array([
        stand.total_profile_depth * SCOREBOARD_DEPTH_FRACTION + scoreboard.offset_depth,
        center_y,
        stand.stand_length / 2.0 + scoreboard.offset_length,
    ])
    world_position = stand.local_to_world(local_position)
    # Field centre at the board's own height, seen from the stand
    target_local = stand.world_to_local([0.0, world_position[1], 0.0])
    local_yaw = facing_yaw(local_position, target_local)

    support_centers = []
    if scoreboard.support_height > GEOMETRY_EPSILON:
        spread = scoreboard.width * SCOREBOARD_SUPPORT_SPREAD / 2.0
        y = -total_height / 2.0 - scoreboard.support_height / 2.0
        support_centers = [np.array([sign * spread, y, 0.0]) for sign in (-1.0, 1.0)]

    logger.debug("Scoreboard on %s at local %s, yaw %.3f", stand.name, local_position.round(3), local_yaw)
    return ScoreboardPlacement(
        stand=stand,
        local_position=local_position,
        local_yaw=local_yaw,
        world_position=world_position,
        base_height=base_height,
        width=scoreboard.width,
        height=scoreboard.height,
        frame_thickness=scoreboard.frame_thickness,
        support_height=scoreboard.support_height,
        support_centers=support_centers,
        content=scoreboard.content,
    )


def add_scoreboard(scene: StadiumScene, placement: ScoreboardPlacement, scoreboard: ScoreboardParams):
    stand = placement.stand
    content = placement.content
    assembly = scene.add_group(
        f"MainScoreboardOn{stand.name}", placement.local_transform, parent=stand.node,
        team_a=content.team_a, team_b=content.team_b,
        score_a=content.score_a, score_b=content.score_b, game_time=content.game_time,
    )

    frame = placement.frame_thickness
    frame_mesh = create_box_mesh(np.zeros(3), np.array([placement.width + frame, placement.height + frame, frame]))
    scene.add_mesh("ScoreboardFrame", frame_mesh, solid(scoreboard.frame_color, metalness=0.4, roughness=0.5),
                   parent=assembly)

    screen_look = solid(scoreboard.screen_color, emissive_intensity=scoreboard.emissive_intensity,
                        metalness=0.05, roughness=0.6, texture="scoreboard-screen")
    scene.add_mesh("ScoreboardScreen", create_plane_mesh(placement.width, placement.height), screen_look,
                   transform=pose_matrix([0.0, 0.0, frame / 2.0 + SCOREBOARD_SCREEN_GAP]), parent=assembly,
                   text=[content.score_line, content.game_time], text_color=scoreboard.text_color)

    support_look = solid(scoreboard.support_color, metalness=0.5, roughness=0.5)
    for index, center in enumerate(placement.support_centers):
        support = create_cylinder_mesh(center, radius=SCOREBOARD_SUPPORT_RADIUS,
                                       height=placement.support_height, sections=12)
        scene.add_mesh(f"ScoreboardSupport_{index}", support, support_look, parent=assembly)


# --- Ad hoardings ---

@dataclass(frozen=True)
class AdHoardingPlacement:
    name: str
    position: Tuple[float, float, float]
    yaw: float
    width: float
    height: float
    texture_repeat: Tuple[float, float]

    @property
    def transform(self) -> np.ndarray:
        return pose_matrix(self.position, self.yaw)

    @property
    def normal(self) -> np.ndarray:
        return transform_direction(self.transform, [0.0, 0.0, 1.0])


def place_ad_hoardings(pitch: FieldParams, ads: AdHoardingParams) -> List[AdHoardingPlacement]:
    """Four banner planes just outside the field lines, each facing inward."""
    half_length = pitch.length / 2.0 + ads.offset_from_pitch
    half_width = pitch.width / 2.0 + ads.offset_from_pitch
    y = ads.height / 2.0 + AD_GROUND_CLEARANCE
    layout = (
        ("EastAdHoarding", (0.0, y, half_width), math.pi, pitch.length),
        ("WestAdHoarding", (0.0, y, -half_width), 0.0, pitch.length),
        ("NorthAdHoarding", (half_length, y, 0.0), -math.pi / 2, pitch.width),
        ("SouthAdHoarding", (-half_length, y, 0.0), math.pi / 2, pitch.width),
    )
    return [
        AdHoardingPlacement(
            name=name,
            position=position,
            yaw=yaw,
            width=width,
            height=ads.height,
            texture_repeat=hoarding_texture_repeat(width, ads.height, ads.image_aspect_ratio),
        )
        for name, position, yaw, width in layout
    ]


def add_ad_hoardings(scene: StadiumScene, placements: List[AdHoardingPlacement], ads: AdHoardingParams):
    base_look = solid(ads.color, emissive_intensity=ads.emissive_intensity, metalness=0.1, roughness=0.5,
                      texture=AD_TEXTURE_ID, double_sided=True)
    group = scene.add_group("AdHoardings")
    for placement in placements:
        scene.add_mesh(placement.name, create_plane_mesh(placement.width, placement.height),
                       with_texture_repeat(base_look, placement.texture_repeat),
                       transform=placement.transform, parent=group)


# --- Ribbon displays ---

@dataclass
class RibbonDisplayPlacement:
    stand: StandInstance = field(repr=False)
    requested_name: str
    local_position: np.ndarray
    dimensions: np.ndarray
    text: str

    @property
    def local_transform(self) -> np.ndarray:
        return pose_matrix(self.local_position)

    @property
    def world_transform(self) -> np.ndarray:
        return self.stand.transform @ self.local_transform


def place_ribbon_displays(stands: List[StandInstance], ribbons: RibbonDisplayParams,
                          content: DisplayContent) -> List[RibbonDisplayPlacement]:
    placements = []
    for name in ribbons.stand_names:
        stand = find_stand(stands, name)
        if stand is None:
            logger.warning("Ribbon display target stand %r not found; skipping", name)
            continue
        local_position = np.array([
            stand.total_profile_depth * ribbons.depth_fraction,
            stand.total_profile_height_at_back + ribbons.offset_y + ribbons.height / 2.0,
            stand.stand_length / 2.0,
        ])
        placements.append(RibbonDisplayPlacement(
            stand=stand,
            requested_name=name,
            local_position=local_position,
            dimensions=np.array([ribbons.thickness, ribbons.height, stand.stand_length]),
            text=content.score_line,
        ))
    return placements


def add_ribbon_displays(scene: StadiumScene, placements: List[RibbonDisplayPlacement],
                        ribbons: RibbonDisplayParams):
    look = solid(ribbons.color, emissive_intensity=0.6, texture="ribbon-text")
    for placement in placements:
        mesh = create_box_mesh(np.zeros(3), placement.dimensions)
        scene.add_mesh(f"RibbonDisplayOn{placement.stand.name}", mesh, look,
                       transform=placement.local_transform, parent=placement.stand.node,
                       text=placement.text, text_color=ribbons.text_color)


def build_attachments(scene: StadiumScene, params: StadiumParams, stands: List[StandInstance]):
    if params.ad_hoardings.show:
        add_ad_hoardings(scene, place_ad_hoardings(params.pitch, params.ad_hoardings), params.ad_hoardings)

    if params.scoreboard.show:
        overall_roof_top = None
        variant = params.roof_variant()
        if isinstance(variant, OverallRoofParams):
            overall = place_overall_roof(params, stands, variant)
            if overall is not None:
                overall_roof_top = overall.top_surface_height
        placement = place_scoreboard(stands, params.scoreboard, overall_roof_top)
        if placement is not None and placement.stand.node is not None:
            add_scoreboard(scene, placement, params.scoreboard)

    if params.ribbon_displays.show:
        placements = place_ribbon_displays(stands, params.ribbon_displays, params.scoreboard.content)
        add_ribbon_displays(scene, [p for p in placements if p.stand.node is not None], params.ribbon_displays)
