"""
Stadium parameter model.

The outside world talks to the generator through a flat key-value parameter
set (camelCase keys, one per control). Internally the same values live in
frozen dataclasses grouped by subsystem. `StadiumParams.from_flat()` and
`StadiumParams.to_flat()` convert between the two, and `validate()` enforces
the documented ranges from `constants.PARAM_RANGES`.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from . import constants as C
from .materials import hex_to_rgba


class ConfigurationError(ValueError):
    """Raised for parameter values the generator refuses to build from."""


class StadiumType(Enum):
    FOOTBALL = "football"
    CRICKET = "cricket"


class RoofMode(Enum):
    NONE = C.ROOF_TYPE_NONE
    OVERALL = C.ROOF_TYPE_OVERALL
    INDIVIDUAL = C.ROOF_TYPE_INDIVIDUAL


class CoverageMode(Enum):
    FIXED = C.COVERAGE_MODE_FIXED
    AUTO = C.COVERAGE_MODE_AUTO


def _parse_enum(enum_cls, value, key: str):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ConfigurationError(f"{key}: unsupported value {value!r} (expected one of: {allowed})") from None


# =============================================================================
# Section dataclasses
# =============================================================================

@dataclass(frozen=True)
class FieldParams:
    length: float = C.DEFAULT_PITCH_LENGTH
    width: float = C.DEFAULT_PITCH_WIDTH
    line_width: float = C.DEFAULT_LINE_WIDTH
    show_pitch: bool = True
    stadium_type: StadiumType = StadiumType.FOOTBALL


@dataclass(frozen=True)
class StandSpec:
    """Geometry and appearance of one stand."""
    show: bool = True
    offset_from_pitch: float = C.DEFAULT_STAND_OFFSET
    front_wall_height: float = C.DEFAULT_FRONT_WALL_HEIGHT
    num_rows: int = C.DEFAULT_NUM_ROWS
    row_step_height: float = C.DEFAULT_ROW_STEP_HEIGHT
    row_step_depth: float = C.DEFAULT_ROW_STEP_DEPTH
    walkway_at_top_depth: float = C.DEFAULT_WALKWAY_DEPTH
    back_wall_height: float = C.DEFAULT_BACK_WALL_HEIGHT
    color: str = C.DEFAULT_STAND_COLOR


@dataclass(frozen=True)
class StandOverride:
    """Per-stand settings; None means 'use the global value'."""
    name: str
    show: Optional[bool] = None
    offset_from_pitch: Optional[float] = None
    front_wall_height: Optional[float] = None
    num_rows: Optional[int] = None
    row_step_height: Optional[float] = None
    row_step_depth: Optional[float] = None
    walkway_at_top_depth: Optional[float] = None
    back_wall_height: Optional[float] = None
    color: Optional[str] = None

    def apply_to(self, base: StandSpec) -> StandSpec:
        updates = {
            f.name: getattr(self, f.name)
            for f in fields(StandSpec)
            if getattr(self, f.name) is not None
        }
        return replace(base, **updates)


@dataclass(frozen=True)
class NoRoof:
    mode = RoofMode.NONE


@dataclass(frozen=True)
class OverallRoofParams:
    overhang: float = C.DEFAULT_OVERALL_ROOF_OVERHANG
    thickness: float = C.DEFAULT_OVERALL_ROOF_THICKNESS
    color: str = C.DEFAULT_OVERALL_ROOF_COLOR
    opacity: float = C.DEFAULT_OVERALL_ROOF_OPACITY
    support_color: str = "#555555"

    mode = RoofMode.OVERALL


@dataclass(frozen=True)
class IndividualRoofParams:
    height_offset: float = C.DEFAULT_ROOF_HEIGHT_OFFSET
    depth: float = C.DEFAULT_ROOF_DEPTH
    coverage_mode: CoverageMode = CoverageMode.AUTO
    coverage_factor: float = C.DEFAULT_COVERAGE_FACTOR
    min_coverage: float = C.DEFAULT_MIN_COVERAGE
    max_coverage: float = C.DEFAULT_MAX_COVERAGE
    tilt: float = C.DEFAULT_ROOF_TILT
    thickness: float = C.DEFAULT_ROOF_THICKNESS
    color: str = C.DEFAULT_ROOF_COLOR
    support_color: str = C.DEFAULT_ROOF_SUPPORT_COLOR
    support_count: int = C.DEFAULT_ROOF_SUPPORT_COUNT
    min_strut_length: float = C.MIN_STRUT_LENGTH

    mode = RoofMode.INDIVIDUAL


RoofVariant = Union[NoRoof, OverallRoofParams, IndividualRoofParams]


@dataclass(frozen=True)
class AdHoardingParams:
    show: bool = True
    height: float = C.DEFAULT_AD_HEIGHT
    offset_from_pitch: float = C.DEFAULT_AD_OFFSET
    color: str = C.DEFAULT_AD_COLOR
    emissive_intensity: float = C.DEFAULT_AD_EMISSIVE_INTENSITY
    image_aspect_ratio: float = C.DEFAULT_AD_IMAGE_ASPECT


@dataclass(frozen=True)
class DisplayContent:
    """Passive match data shown on the scoreboard and ribbon displays."""
    team_a: str = "HOME"
    team_b: str = "AWAY"
    score_a: int = 0
    score_b: int = 0
    game_time: str = "00:00"

    @classmethod
    def sanitized(cls, team_a: Any, team_b: Any, score_a: Any, score_b: Any, game_time: Any) -> "DisplayContent":
        return cls(
            team_a=_display_text(team_a, C.MAX_TEAM_NAME_LENGTH),
            team_b=_display_text(team_b, C.MAX_TEAM_NAME_LENGTH),
            score_a=_display_score(score_a),
            score_b=_display_score(score_b),
            game_time=_display_text(game_time, C.MAX_GAME_TIME_LENGTH),
        )

    @property
    def score_line(self) -> str:
        return f"{self.team_a} {self.score_a} - {self.score_b} {self.team_b}"


def _display_text(value: Any, max_length: int) -> str:
    text = "" if value is None else str(value)
    text = "".join(ch for ch in text if ch.isprintable())
    return text.strip()[:max_length]


def _display_score(value: Any) -> int:
    try:
        score = int(float(value))
    except (TypeError, ValueError):
        return 0
    return max(0, min(C.MAX_DISPLAY_SCORE, score))


@dataclass(frozen=True)
class ScoreboardParams:
    show: bool = True
    stand_name: str = C.DEFAULT_SCOREBOARD_STAND
    width: float = C.DEFAULT_SCOREBOARD_WIDTH
    height: float = C.DEFAULT_SCOREBOARD_HEIGHT
    frame_thickness: float = C.DEFAULT_SCOREBOARD_FRAME
    offset_from_roof: float = C.DEFAULT_SCOREBOARD_OFFSET_FROM_ROOF
    support_height: float = C.DEFAULT_SCOREBOARD_SUPPORT_HEIGHT
    offset_depth: float = 0.0
    offset_length: float = 0.0
    screen_color: str = "#101010"
    text_color: str = "#ffffff"
    frame_color: str = "#333333"
    support_color: str = "#555555"
    emissive_intensity: float = 0.8
    content: DisplayContent = field(default_factory=DisplayContent)


@dataclass(frozen=True)
class RibbonDisplayParams:
    show: bool = False
    stand_names: Tuple[str, ...] = C.DEFAULT_RIBBON_STANDS
    height: float = C.DEFAULT_RIBBON_HEIGHT
    thickness: float = C.DEFAULT_RIBBON_THICKNESS
    depth_fraction: float = C.DEFAULT_RIBBON_DEPTH_FRACTION
    offset_y: float = C.DEFAULT_RIBBON_OFFSET_Y
    color: str = C.DEFAULT_RIBBON_COLOR
    text_color: str = C.DEFAULT_RIBBON_TEXT_COLOR


@dataclass(frozen=True)
class FloodlightParams:
    show: bool = True
    tower_height: float = C.DEFAULT_TOWER_HEIGHT
    tower_color: str = C.DEFAULT_TOWER_COLOR
    lights_per_tower: int = C.DEFAULT_LIGHTS_PER_TOWER
    color_preset: str = C.DEFAULT_SPOTLIGHT_PRESET
    intensity: float = C.DEFAULT_SPOTLIGHT_INTENSITY
    angle: float = C.DEFAULT_SPOTLIGHT_ANGLE
    penumbra: float = C.DEFAULT_SPOTLIGHT_PENUMBRA
    distance: float = C.DEFAULT_SPOTLIGHT_DISTANCE
    show_helpers: bool = False


def _default_overrides() -> Tuple[StandOverride, ...]:
    return tuple(StandOverride(name=f"{name} Stand") for name in C.STAND_NAMES)


# =============================================================================
# Flat key table
# =============================================================================

def _to_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "on")
    return bool(value)


def _to_int(value) -> int:
    if isinstance(value, bool):
        raise ValueError("booleans are not counts")
    as_float = float(value)
    if not as_float.is_integer():
        raise ValueError(f"{value!r} is not a whole number")
    return int(as_float)


def _to_names(value) -> Tuple[str, ...]:
    if isinstance(value, str):
        return tuple(part.strip() for part in value.split(",") if part.strip())
    return tuple(str(item) for item in value)


# flat key -> (section attribute on StadiumParams, field name, caster)
# An empty section means the field lives directly on StadiumParams.
FLAT_KEYS: Dict[str, Tuple[str, str, Callable[[Any], Any]]] = {
    "pitchLength": ("pitch", "length", float),
    "pitchWidth": ("pitch", "width", float),
    "lineWidth": ("pitch", "line_width", float),
    "showPitch": ("pitch", "show_pitch", _to_bool),
    "stadiumType": ("pitch", "stadium_type", lambda v: _parse_enum(StadiumType, v, "stadiumType")),

    "showStands": ("stand_defaults", "show", _to_bool),
    "standOffsetFromPitch": ("stand_defaults", "offset_from_pitch", float),
    "standFrontWallHeight": ("stand_defaults", "front_wall_height", float),
    "standNumRows": ("stand_defaults", "num_rows", _to_int),
    "standRowStepHeight": ("stand_defaults", "row_step_height", float),
    "standRowStepDepth": ("stand_defaults", "row_step_depth", float),
    "standWalkwayAtTopDepth": ("stand_defaults", "walkway_at_top_depth", float),
    "standBackWallHeight": ("stand_defaults", "back_wall_height", float),
    "standColor": ("stand_defaults", "color", str),
    "useIndividualStandSettings": ("", "use_individual_stand_settings", _to_bool),

    "roofType": ("", "roof_type", lambda v: _parse_enum(RoofMode, v, "roofType")),
    "overallRoofOverhang": ("overall_roof", "overhang", float),
    "overallRoofThickness": ("overall_roof", "thickness", float),
    "overallRoofColor": ("overall_roof", "color", str),
    "overallRoofOpacity": ("overall_roof", "opacity", float),
    "overallRoofSupportColor": ("overall_roof", "support_color", str),
    "individualRoofEnable": ("", "individual_roof_enabled", _to_bool),
    "individualRoofHeightOffset": ("individual_roof", "height_offset", float),
    "individualRoofDepth": ("individual_roof", "depth", float),
    "individualRoofCoverageMode": ("individual_roof", "coverage_mode",
                                   lambda v: _parse_enum(CoverageMode, v, "individualRoofCoverageMode")),
    "individualRoofCoverageFactor": ("individual_roof", "coverage_factor", float),
    "individualRoofMinCoverage": ("individual_roof", "min_coverage", float),
    "individualRoofMaxCoverage": ("individual_roof", "max_coverage", float),
    "individualRoofTilt": ("individual_roof", "tilt", float),
    "individualRoofThickness": ("individual_roof", "thickness", float),
    "individualRoofColor": ("individual_roof", "color", str),
    "individualRoofSupportColor": ("individual_roof", "support_color", str),
    "individualRoofSupportCount": ("individual_roof", "support_count", _to_int),

    "showAdHoardings": ("ad_hoardings", "show", _to_bool),
    "adHoardingHeight": ("ad_hoardings", "height", float),
    "adHoardingOffsetFromPitch": ("ad_hoardings", "offset_from_pitch", float),
    "adHoardingColor": ("ad_hoardings", "color", str),
    "adHoardingEmissiveIntensity": ("ad_hoardings", "emissive_intensity", float),
    "adHoardingImageAspectRatio": ("ad_hoardings", "image_aspect_ratio", float),

    "showScoreboard": ("scoreboard", "show", _to_bool),
    "scoreboardStandName": ("scoreboard", "stand_name", str),
    "scoreboardWidth": ("scoreboard", "width", float),
    "scoreboardHeight": ("scoreboard", "height", float),
    "scoreboardFrameThickness": ("scoreboard", "frame_thickness", float),
    "scoreboardOffsetY_fromRoof": ("scoreboard", "offset_from_roof", float),
    "scoreboardSupportHeight": ("scoreboard", "support_height", float),
    "scoreboardOffsetDepth_onRoof": ("scoreboard", "offset_depth", float),
    "scoreboardOffsetZ_localToStand": ("scoreboard", "offset_length", float),
    "scoreboardScreenColor": ("scoreboard", "screen_color", str),
    "scoreboardTextColor": ("scoreboard", "text_color", str),
    "scoreboardFrameColor": ("scoreboard", "frame_color", str),
    "scoreboardSupportColor": ("scoreboard", "support_color", str),
    "scoreboardEmissiveIntensity": ("scoreboard", "emissive_intensity", float),

    "showRibbonDisplays": ("ribbon_displays", "show", _to_bool),
    "ribbonDisplayStands": ("ribbon_displays", "stand_names", _to_names),
    "ribbonDisplayHeight": ("ribbon_displays", "height", float),
    "ribbonDisplayDepthFraction": ("ribbon_displays", "depth_fraction", float),
    "ribbonDisplayOffsetY": ("ribbon_displays", "offset_y", float),
    "ribbonDisplayColor": ("ribbon_displays", "color", str),
    "ribbonDisplayTextColor": ("ribbon_displays", "text_color", str),

    "showFloodlights": ("floodlights", "show", _to_bool),
    "floodlightTowerHeight": ("floodlights", "tower_height", float),
    "floodlightTowerColor": ("floodlights", "tower_color", str),
    "numLightsPerTower": ("floodlights", "lights_per_tower", _to_int),
    "spotlightColorPreset": ("floodlights", "color_preset", str),
    "spotlightIntensity": ("floodlights", "intensity", float),
    "spotlightAngle": ("floodlights", "angle", float),
    "spotlightPenumbra": ("floodlights", "penumbra", float),
    "spotlightDistance": ("floodlights", "distance", float),
    "showSpotlightHelpers": ("floodlights", "show_helpers", _to_bool),
}

# Match data keys map onto the scoreboard's DisplayContent
DISPLAY_KEYS = {
    "scoreboardTeamA": "team_a",
    "scoreboardTeamB": "team_b",
    "scoreboardScoreA": "score_a",
    "scoreboardScoreB": "score_b",
    "scoreboardGameTime": "game_time",
}

# Per-stand override keys inside the "stands" list
STAND_KEYS: Dict[str, Tuple[str, Callable[[Any], Any]]] = {
    "show": ("show", _to_bool),
    "offsetFromPitch": ("offset_from_pitch", float),
    "frontWallHeight": ("front_wall_height", float),
    "numRows": ("num_rows", _to_int),
    "rowStepHeight": ("row_step_height", float),
    "rowStepDepth": ("row_step_depth", float),
    "walkwayAtTopDepth": ("walkway_at_top_depth", float),
    "backWallHeight": ("back_wall_height", float),
    "color": ("color", str),
}

_COLOR_KEYS = [key for key in FLAT_KEYS if key.endswith("Color")]


# =============================================================================
# Top-level parameter set
# =============================================================================

@dataclass(frozen=True)
class StadiumParams:
    pitch: FieldParams = field(default_factory=FieldParams)
    stand_defaults: StandSpec = field(default_factory=StandSpec)
    use_individual_stand_settings: bool = False
    stand_overrides: Tuple[StandOverride, ...] = field(default_factory=_default_overrides)
    roof_type: RoofMode = RoofMode.INDIVIDUAL
    individual_roof_enabled: bool = True
    overall_roof: OverallRoofParams = field(default_factory=OverallRoofParams)
    individual_roof: IndividualRoofParams = field(default_factory=IndividualRoofParams)
    ad_hoardings: AdHoardingParams = field(default_factory=AdHoardingParams)
    scoreboard: ScoreboardParams = field(default_factory=ScoreboardParams)
    ribbon_displays: RibbonDisplayParams = field(default_factory=RibbonDisplayParams)
    floodlights: FloodlightParams = field(default_factory=FloodlightParams)

    # --- Derived views ---

    def effective_stand_spec(self, index: int) -> StandSpec:
        """The StandSpec in force for the stand at `index` (East, West, North, South)."""
        if self.use_individual_stand_settings and index < len(self.stand_overrides):
            return self.stand_overrides[index].apply_to(self.stand_defaults)
        return self.stand_defaults

    def roof_variant(self) -> RoofVariant:
        """Exactly one roof variant is active per rebuild."""
        if self.roof_type is RoofMode.OVERALL:
            return self.overall_roof
        if self.roof_type is RoofMode.INDIVIDUAL and self.individual_roof_enabled:
            return self.individual_roof
        return NoRoof()

    # --- Flat conversion ---

    def to_flat(self) -> Dict[str, Any]:
        flat: Dict[str, Any] = {}
        for key, (section, attr, _caster) in FLAT_KEYS.items():
            owner = getattr(self, section) if section else self
            value = getattr(owner, attr)
            if isinstance(value, Enum):
                value = value.value
            elif isinstance(value, tuple):
                value = list(value)
            flat[key] = value
        for key, attr in DISPLAY_KEYS.items():
            flat[key] = getattr(self.scoreboard.content, attr)
        stands = []
        for override in self.stand_overrides:
            entry: Dict[str, Any] = {"name": override.name}
            for key, (attr, _caster) in STAND_KEYS.items():
                value = getattr(override, attr)
                if value is not None:
                    entry[key] = value
            stands.append(entry)
        flat["stands"] = stands
        return flat

    @classmethod
    def from_flat(cls, flat: Dict[str, Any], base: Optional["StadiumParams"] = None) -> "StadiumParams":
        """
        Builds a parameter set from flat keys. Keys not present keep the value
        from `base` (defaults when omitted).

        Raises:
            ConfigurationError: On unknown keys or values that cannot be converted.
        """
        base = base or cls()
        unknown = [key for key in flat if key not in FLAT_KEYS and key not in DISPLAY_KEYS and key != "stands"]
        if unknown:
            raise ConfigurationError(f"Unknown parameter(s): {', '.join(sorted(unknown))}")

        section_updates: Dict[str, Dict[str, Any]] = {}
        for key, raw in flat.items():
            if key not in FLAT_KEYS:
                continue
            section, attr, caster = FLAT_KEYS[key]
            try:
                value = caster(raw)
            except ConfigurationError:
                raise
            except (TypeError, ValueError) as exc:
                raise ConfigurationError(f"{key}: cannot use {raw!r} ({exc})") from None
            section_updates.setdefault(section, {})[attr] = value

        top_level = section_updates.pop("", {})
        updated = replace(base, **top_level)
        for section, values in section_updates.items():
            updated = replace(updated, **{section: replace(getattr(updated, section), **values)})

        display_values = {attr: flat[key] for key, attr in DISPLAY_KEYS.items() if key in flat}
        if display_values:
            current = updated.scoreboard.content
            merged = {attr: display_values.get(attr, getattr(current, attr)) for attr in DISPLAY_KEYS.values()}
            content = DisplayContent.sanitized(**merged)
            updated = replace(updated, scoreboard=replace(updated.scoreboard, content=content))

        if "stands" in flat:
            updated = replace(updated, stand_overrides=_parse_stand_overrides(flat["stands"], updated.stand_overrides))
        return updated

    def with_updates(self, **flat) -> "StadiumParams":
        return StadiumParams.from_flat(flat, base=self)

    # --- Validation ---

    def collect_issues(self) -> List[str]:
        """
        Validate parameters and return list of problems.

        Returns:
            List of human-readable messages (empty if all OK)
        """
        issues: List[str] = []
        flat = self.to_flat()

        for key, (low, high) in C.PARAM_RANGES.items():
            _check_range(issues, key, flat[key], low, high)

        for index, override in enumerate(self.stand_overrides):
            for key, (attr, _caster) in STAND_KEYS.items():
                range_ = C.STAND_OVERRIDE_RANGES.get(key)
                value = getattr(override, attr)
                if range_ is None or value is None:
                    continue
                _check_range(issues, f"stands[{index}].{key}", value, *range_)
            if override.color is not None:
                _check_color(issues, f"stands[{index}].color", override.color)

        for key in _COLOR_KEYS:
            _check_color(issues, key, flat[key])

        roof = self.individual_roof
        if roof.min_coverage > roof.max_coverage:
            issues.append(
                f"individualRoofMinCoverage ({roof.min_coverage}) exceeds individualRoofMaxCoverage ({roof.max_coverage})"
            )
        if len(self.stand_overrides) != len(C.STAND_NAMES):
            issues.append(f"stands: expected {len(C.STAND_NAMES)} entries, got {len(self.stand_overrides)}")
        return issues

    def validate(self) -> "StadiumParams":
        """
        Raises:
            ConfigurationError: Listing every problem found.
        """
        issues = self.collect_issues()
        if issues:
            raise ConfigurationError("Invalid stadium parameters:\n  - " + "\n  - ".join(issues))
        return self


def _check_range(issues: List[str], key: str, value, low, high):
    if isinstance(value, float) and not math.isfinite(value):
        issues.append(f"{key}: {value} is not a finite number")
    elif not low <= value <= high:
        issues.append(f"{key}: {value} outside allowed range [{low}, {high}]")


def _check_color(issues: List[str], key: str, value: str):
    try:
        hex_to_rgba(value)
    except ValueError:
        issues.append(f"{key}: {value!r} is not a hex color")


def _parse_stand_overrides(entries, current: Tuple[StandOverride, ...]) -> Tuple[StandOverride, ...]:
    if not isinstance(entries, (list, tuple)):
        raise ConfigurationError("stands: expected a list of per-stand settings")
    overrides = list(current)
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise ConfigurationError(f"stands[{index}]: expected a mapping")
        unknown = [key for key in entry if key not in STAND_KEYS and key != "name"]
        if unknown:
            raise ConfigurationError(f"stands[{index}]: unknown key(s) {', '.join(sorted(unknown))}")
        values: Dict[str, Any] = {}
        for key, raw in entry.items():
            if key == "name":
                continue
            attr, caster = STAND_KEYS[key]
            try:
                values[attr] = caster(raw)
            except (TypeError, ValueError) as exc:
                raise ConfigurationError(f"stands[{index}].{key}: cannot use {raw!r} ({exc})") from None
        if index < len(overrides):
            name = entry.get("name", overrides[index].name)
            overrides[index] = replace(overrides[index], name=str(name), **values)
        else:
            overrides.append(StandOverride(name=str(entry.get("name", f"Stand {index}")), **values))
    return tuple(overrides)
