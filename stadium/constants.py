"""
StadiumGen Constants Module

Centralized constants for the StadiumGen application.
Extracts magic numbers and repeated values from across the codebase.

Usage:
    from stadium.constants import MIN_STRUT_LENGTH, PARAM_RANGES
"""

import math

# =============================================================================
# Field Defaults
# =============================================================================

DEFAULT_PITCH_LENGTH = 100.6  # meters (110 yards)
DEFAULT_PITCH_WIDTH = 64.0    # meters (70 yards)
DEFAULT_LINE_WIDTH = 0.15

# Football markings
CENTER_CIRCLE_RADIUS = 9.15
PENALTY_AREA_LENGTH = 16.5
PENALTY_AREA_WIDTH = 40.32
GOAL_DEPTH = 2.0
GOAL_WIDTH = 7.32
GOAL_HEIGHT = 2.44

# Cricket markings
CRICKET_PITCH_LENGTH = 20.12
CRICKET_PITCH_WIDTH = 3.05
CRICKET_STUMP_HEIGHT = 0.71
CRICKET_STUMP_RADIUS = 0.02
CRICKET_STUMP_SPACING = 0.1
CRICKET_BOUNDARY_INSET = 2.0
CIRCLE_SECTIONS = 64

# Markings sit just above the grass to avoid z-fighting
MARKING_LIFT = 0.01

# =============================================================================
# Stand Defaults
# =============================================================================

DEFAULT_STAND_OFFSET = 5.0
DEFAULT_FRONT_WALL_HEIGHT = 1.0
DEFAULT_NUM_ROWS = 20
DEFAULT_ROW_STEP_HEIGHT = 0.4
DEFAULT_ROW_STEP_DEPTH = 0.8
DEFAULT_WALKWAY_DEPTH = 2.0
DEFAULT_BACK_WALL_HEIGHT = 3.0
BACK_WALL_THICKNESS = 0.3  # Solid column behind the top walkway
DEFAULT_STAND_COLOR = "#888888"

STAND_NAMES = ("East", "West", "North", "South")

# =============================================================================
# Roof Parameters
# =============================================================================

ROOF_TYPE_NONE = "none"
ROOF_TYPE_OVERALL = "overall"
ROOF_TYPE_INDIVIDUAL = "individual"

COVERAGE_MODE_FIXED = "fixed"
COVERAGE_MODE_AUTO = "auto"

DEFAULT_ROOF_HEIGHT_OFFSET = 2.0
DEFAULT_ROOF_DEPTH = 15.0
DEFAULT_ROOF_TILT = math.pi / 18
DEFAULT_ROOF_THICKNESS = 0.5
DEFAULT_ROOF_COLOR = "#999999"
DEFAULT_ROOF_SUPPORT_COLOR = "#666666"
DEFAULT_ROOF_SUPPORT_COUNT = 2
DEFAULT_COVERAGE_FACTOR = 0.75
DEFAULT_MIN_COVERAGE = 2.0  # Fits the shallowest default stand (bare walkway)
DEFAULT_MAX_COVERAGE = 40.0

ROOF_SUPPORT_RADIUS = 0.3
ROOF_SUPPORT_SECTIONS = 12
ROOF_SUPPORT_INSET_RATIO = 0.1  # Fraction of stand length kept clear at each end
MIN_STRUT_LENGTH = 0.1  # Shorter struts are considered degenerate and skipped

DEFAULT_OVERALL_ROOF_OVERHANG = 5.0
DEFAULT_OVERALL_ROOF_THICKNESS = 0.5
DEFAULT_OVERALL_ROOF_COLOR = "#777777"
DEFAULT_OVERALL_ROOF_OPACITY = 0.9
OVERALL_ROOF_COLUMN_RADIUS = 0.5
OVERALL_ROOF_COLUMN_SECTIONS = 16

# Used when no stand is shown but an overall roof is requested
FALLBACK_STAND_DEPTH = 20.0
FALLBACK_STAND_HEIGHT = 15.0

# =============================================================================
# Attachment Parameters
# =============================================================================

DEFAULT_AD_HEIGHT = 1.0
DEFAULT_AD_OFFSET = 2.0
DEFAULT_AD_COLOR = "#1a3c8c"
DEFAULT_AD_EMISSIVE_INTENSITY = 1.0
DEFAULT_AD_IMAGE_ASPECT = 4.0  # 256x64 default banner
AD_GROUND_CLEARANCE = 0.01
AD_TEXTURE_ID = "ad-banner"

DEFAULT_SCOREBOARD_STAND = "North"
DEFAULT_SCOREBOARD_WIDTH = 12.0
DEFAULT_SCOREBOARD_HEIGHT = 6.0
DEFAULT_SCOREBOARD_FRAME = 0.4
DEFAULT_SCOREBOARD_OFFSET_FROM_ROOF = 0.5
DEFAULT_SCOREBOARD_SUPPORT_HEIGHT = 2.0
SCOREBOARD_DEPTH_FRACTION = 0.7
SCOREBOARD_SUPPORT_RADIUS = 0.2
SCOREBOARD_SUPPORT_SPREAD = 0.7  # Fraction of screen width spanned by the two supports
SCOREBOARD_SCREEN_GAP = 0.01

MAX_TEAM_NAME_LENGTH = 24
MAX_GAME_TIME_LENGTH = 12
MAX_DISPLAY_SCORE = 999

DEFAULT_RIBBON_STANDS = ("East Stand", "West Stand")
DEFAULT_RIBBON_HEIGHT = 1.0
DEFAULT_RIBBON_THICKNESS = 0.15
DEFAULT_RIBBON_DEPTH_FRACTION = 0.98
DEFAULT_RIBBON_OFFSET_Y = 0.5
DEFAULT_RIBBON_COLOR = "#000000"
DEFAULT_RIBBON_TEXT_COLOR = "#ffcc00"

# =============================================================================
# Floodlight Parameters
# =============================================================================

DEFAULT_TOWER_HEIGHT = 45.0
DEFAULT_TOWER_COLOR = "#aaaaaa"
DEFAULT_LIGHTS_PER_TOWER = 4
DEFAULT_SPOTLIGHT_PRESET = "Daylight"
DEFAULT_SPOTLIGHT_INTENSITY = 2.0
DEFAULT_SPOTLIGHT_ANGLE = math.pi / 8
DEFAULT_SPOTLIGHT_PENUMBRA = 0.3
DEFAULT_SPOTLIGHT_DISTANCE = 300.0
SPOTLIGHT_DECAY = 1.0

TOWER_OFFSET_FACTOR = 1.2
TOWER_CLEARANCE = 10.0
POLE_RADIUS_TOP = 0.6
POLE_RADIUS_BOTTOM = 0.9
POLE_SECTIONS = 12

LIGHT_SPACING = 0.8
HOUSING_HEIGHT = 1.0
HOUSING_DEPTH = 0.8
HOUSING_SINGLE_WIDTH = 1.0
HOUSING_COLOR = "#bbbbbb"
LAMP_FORWARD_GAP = 0.1
LAMP_RADIUS = 0.2
LAMP_LENGTH = 0.4
LAMP_SECTIONS = 8

LIGHT_PRESETS = {
    "Daylight": "#ffffff",
    "Warm White": "#fff4e5",
    "Cool White": "#f0f8ff",
    "Sodium": "#ffb347",
}

# =============================================================================
# Geometry Parameters
# =============================================================================

DEFAULT_CYLINDER_SECTIONS = 16
GEOMETRY_EPSILON = 1e-9

# =============================================================================
# Validation Ranges
# =============================================================================

# Inclusive (min, max) per flat parameter key. These mirror the slider bounds of
# the interactive control panel and are enforced as domain constraints.
PARAM_RANGES = {
    "pitchLength": (20.0, 200.0),
    "pitchWidth": (10.0, 150.0),
    "lineWidth": (0.05, 0.5),
    "standOffsetFromPitch": (1.0, 20.0),
    "standFrontWallHeight": (0.0, 3.0),
    "standNumRows": (0, 60),
    "standRowStepHeight": (0.2, 1.0),
    "standRowStepDepth": (0.5, 1.5),
    "standWalkwayAtTopDepth": (0.0, 10.0),
    "standBackWallHeight": (0.0, 10.0),
    "overallRoofOverhang": (0.0, 20.0),
    "overallRoofThickness": (0.1, 2.0),
    "overallRoofOpacity": (0.0, 1.0),
    "individualRoofHeightOffset": (-5.0, 10.0),
    "individualRoofDepth": (1.0, 40.0),
    "individualRoofTilt": (0.0, math.pi / 4),
    "individualRoofThickness": (0.1, 2.0),
    "individualRoofCoverageFactor": (0.05, 1.0),
    "individualRoofMinCoverage": (0.5, 40.0),
    "individualRoofMaxCoverage": (1.0, 60.0),
    "individualRoofSupportCount": (1, 8),
    "adHoardingHeight": (0.5, 3.0),
    "adHoardingOffsetFromPitch": (0.5, 10.0),
    "adHoardingEmissiveIntensity": (0.0, 5.0),
    "adHoardingImageAspectRatio": (0.1, 20.0),
    "scoreboardWidth": (2.0, 40.0),
    "scoreboardHeight": (1.0, 20.0),
    "scoreboardFrameThickness": (0.05, 2.0),
    "scoreboardOffsetY_fromRoof": (-5.0, 10.0),
    "scoreboardSupportHeight": (0.0, 10.0),
    "scoreboardOffsetDepth_onRoof": (-20.0, 20.0),
    "scoreboardOffsetZ_localToStand": (-100.0, 100.0),
    "scoreboardEmissiveIntensity": (0.0, 5.0),
    "ribbonDisplayHeight": (0.2, 5.0),
    "ribbonDisplayDepthFraction": (0.0, 1.0),
    "ribbonDisplayOffsetY": (-5.0, 10.0),
    "floodlightTowerHeight": (10.0, 100.0),
    "numLightsPerTower": (1, 12),
    "spotlightIntensity": (0.0, 20.0),
    "spotlightAngle": (0.05, math.pi / 2),
    "spotlightPenumbra": (0.0, 1.0),
    "spotlightDistance": (0.0, 1000.0),
}

# Per-stand override keys share the global stand ranges
STAND_OVERRIDE_RANGES = {
    "offsetFromPitch": PARAM_RANGES["standOffsetFromPitch"],
    "frontWallHeight": PARAM_RANGES["standFrontWallHeight"],
    "numRows": PARAM_RANGES["standNumRows"],
    "rowStepHeight": PARAM_RANGES["standRowStepHeight"],
    "rowStepDepth": PARAM_RANGES["standRowStepDepth"],
    "walkwayAtTopDepth": PARAM_RANGES["standWalkwayAtTopDepth"],
    "backWallHeight": PARAM_RANGES["standBackWallHeight"],
}

# =============================================================================
# File I/O
# =============================================================================

FILE_EXT_GLB = ".glb"
FILE_EXT_JSON = ".json"

# =============================================================================
# Version Information
# =============================================================================

STADIUMGEN_VERSION = "0.3.0"
