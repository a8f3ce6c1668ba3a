"""Coverage library - coverage calls, tunables and per-role assignments.

A coverage definition says what each defender role does on the call:
- Man coverage against a receiver key ("#1_left", "slot", "rb", ...)
- Zone coverage with a zone landmark
- Blitz or spy

Depth/width tunables for each coverage live in a frozen config dataclass
that is passed into that coverage's alignment generator. Tests override
individual values with ``dataclasses.replace`` instead of patching
module state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from ..core.entities import DefenderRole, ResponsibilityType, Zone
from ..core.field import FIELD_CENTER, FIELD_WIDTH, Side
from ..core.vec2 import Vec2


# =============================================================================
# Coverage Calls
# =============================================================================

class CoverageType(str, Enum):
    """Coverage archetypes the engine can align."""
    COVER_0 = "cover-0"
    COVER_1 = "cover-1"
    COVER_2 = "cover-2"
    COVER_3 = "cover-3"
    COVER_4 = "cover-4"
    QUARTERS = "quarters"
    COVER_6 = "cover-6"
    TAMPA_2 = "tampa-2"

    @property
    def is_man(self) -> bool:
        return self in (CoverageType.COVER_0, CoverageType.COVER_1)

    @property
    def is_quarters(self) -> bool:
        return self in (CoverageType.COVER_4, CoverageType.QUARTERS)

    @property
    def label(self) -> str:
        """Display name ("Cover 3", "Tampa 2", "Quarters")."""
        return _LABELS[self]

    @classmethod
    def parse(cls, name: str) -> CoverageType:
        """Parse "cover_3", "Cover 3", "cover-3" or "COVER_3".

        Raises:
            ValueError: If the name is not a known coverage
        """
        key = name.strip().lower().replace("_", "-").replace(" ", "-")
        for coverage in cls:
            if coverage.value == key:
                return coverage
        raise ValueError(f"Unknown coverage: {name!r}")


_LABELS = {
    CoverageType.COVER_0: "Cover 0",
    CoverageType.COVER_1: "Cover 1",
    CoverageType.COVER_2: "Cover 2",
    CoverageType.COVER_3: "Cover 3",
    CoverageType.COVER_4: "Cover 4",
    CoverageType.QUARTERS: "Quarters",
    CoverageType.COVER_6: "Cover 6",
    CoverageType.TAMPA_2: "Tampa 2",
}


class CoverageRotation(str, Enum):
    """Pre-snap safety rotation for single-high coverages."""
    NONE = "none"
    SKY = "sky"      # Safety rotates down to the curl-flat
    BUZZ = "buzz"    # Safety rotates down to the hook-curl
    CLOUD = "cloud"  # Corner squats in the flat


# =============================================================================
# Per-Coverage Tunables
# =============================================================================

@dataclass(frozen=True)
class Cover0Config:
    """Cover 0 - pure man, no deep help."""
    press_depth: float = 1.0
    blitz_depth: float = 2.0
    blitz_lanes: Tuple[float, float] = (20.0, 33.0)
    lb_blitz_depth: float = 3.0
    rb_cover_depth: float = 5.0
    green_dog_depth: float = 5.0
    trips_nickel_x: Tuple[float, float] = (15.0, 38.0)
    trips_nickel_depth: float = 4.0
    bunch_box_x: Tuple[float, float] = (12.0, 41.0)
    bunch_box_spacing: float = 2.0
    bunch_box_depth: float = 3.0


@dataclass(frozen=True)
class Cover1Config:
    """Cover 1 - man under with a single-high free safety."""
    corner_depth: float = 7.0
    leverage_shade: float = 2.0
    sideline_leverage_limit: float = 6.0  # Inside leverage this close to the sideline
    fs_depth: float = 14.0
    fs_trips_shade: float = 2.0
    ss_depth: float = 9.0
    ss_slot_offset: float = 2.0
    robber_depth: float = 10.0
    robber_lanes: Tuple[float, float] = (20.0, 33.0)
    robber_spacing: float = 4.0     # Lateral gap between stacked robbers
    lb_depth: float = 5.0
    bunch_jump_offset: float = 5.0
    bunch_jump_depth: float = 15.0


@dataclass(frozen=True)
class Cover2Config:
    """Cover 2 - two deep halves, five under."""
    press_depth: float = 1.0
    bail_depth_min: float = 5.0
    bail_depth_max: float = 7.0
    corner_x: Tuple[float, float] = (8.0, 45.0)
    hard_corner_depth: float = 6.0
    safety_depth: float = 15.0
    safety_max_depth: float = 18.0
    safety_split: float = 13.0  # Lateral offset from center
    trips_shade: float = 2.0
    hook_depth: float = 6.0
    curl_flat_depth: float = 5.0
    seam_hook_x: Tuple[float, float] = (18.0, 35.0)
    seam_hook_depth: float = 4.5
    deep_half_x: Tuple[float, float] = (17.0, 36.0)


@dataclass(frozen=True)
class Cover3Config:
    """Cover 3 - three deep thirds, four under."""
    third_width: float = 17.77
    corner_x: Tuple[float, float] = (8.0, 45.0)
    corner_depth: float = 8.0
    bail_corner_x: Tuple[float, float] = (9.0, 44.0)
    bail_corner_depth: float = 6.5
    fs_depth: float = 12.0
    rotated_deep_depth: float = 13.5
    trips_fs_shade: float = 2.0
    trips_fs_depth: float = 15.0
    hook_depth_min: float = 8.0
    hook_depth_max: float = 10.0
    curl_flat_depth: float = 4.0
    sky_safety_x: Tuple[float, float] = (12.0, 41.33)
    sky_safety_depth: float = 6.0
    buzz_depth: float = 8.0
    cloud_corner_depth: float = 1.0
    trips_ss_x: Tuple[float, float] = (15.0, 38.0)
    trips_ss_depth: float = 10.0
    cone_offset: float = 2.0
    cone_depth: float = 7.0


@dataclass(frozen=True)
class Cover4Config:
    """Cover 4 / Quarters - four deep quarters with pattern-match rules."""
    quarter_width: float = 13.33
    corner_x: Tuple[float, float] = (8.0, 45.0)
    corner_depth: float = 7.0
    mod_corner_depth: float = 8.0
    safety_x: Tuple[float, float] = (18.0, 35.0)
    two_read_x: Tuple[float, float] = (20.0, 34.0)
    safety_depth: float = 12.0
    trips_shade: float = 3.0
    lb_x: Tuple[float, float, float] = (20.0, FIELD_CENTER, 33.0)
    lb_depths: Tuple[float, float, float] = (4.0, 5.0, 4.0)
    solo_corner_x: Tuple[float, float] = (9.0, 44.0)
    solo_corner_depth: float = 6.0
    box_x: Tuple[float, float] = (12.0, 41.0)
    box_spacing: float = 3.0
    box_depth: float = 6.0
    box_stagger: float = 2.0


@dataclass(frozen=True)
class Cover6Config:
    """Cover 6 - quarter-quarter-half split field."""
    field_corner_x: Tuple[float, float] = (10.0, 43.0)
    field_corner_depth: float = 7.5
    field_safety_x: Tuple[float, float] = (20.0, 34.0)
    field_safety_depth: float = 13.0
    boundary_corner_depth: float = 6.0
    boundary_safety_x: Tuple[float, float] = (17.0, 36.0)
    boundary_safety_depth: float = 13.5
    lb_x: Tuple[float, float, float] = (18.0, FIELD_CENTER, 35.0)
    lb_depths: Tuple[float, float, float] = (4.0, 4.5, 4.0)


@dataclass(frozen=True)
class Tampa2Config:
    """Tampa 2 - Cover 2 shell with the Mike carrying the deep middle."""
    corner_x: Tuple[float, float] = (8.0, 45.0)
    jam_depth: float = 4.5
    safety_x: Tuple[float, float] = (17.0, 36.0)
    safety_depth: float = 13.0
    mike_start_depth: float = 4.5
    mike_end_depth: float = 18.0
    mike_drop_time: float = 2.0  # Seconds to reach the deep hole
    wall_x: Tuple[float, float] = (18.0, 35.0)
    wall_depth: float = 3.5
    nickel_depth: float = 5.0
    trips_shade: float = 2.0


# =============================================================================
# Zones
# =============================================================================

class ZoneType(str, Enum):
    """Zone landmarks."""
    DEEP_HALF_LEFT = "deep_half_left"
    DEEP_HALF_RIGHT = "deep_half_right"
    DEEP_THIRD_LEFT = "deep_third_left"
    DEEP_THIRD_MIDDLE = "deep_third_middle"
    DEEP_THIRD_RIGHT = "deep_third_right"
    DEEP_QUARTER_1 = "deep_quarter_1"  # Far left
    DEEP_QUARTER_2 = "deep_quarter_2"
    DEEP_QUARTER_3 = "deep_quarter_3"
    DEEP_QUARTER_4 = "deep_quarter_4"  # Far right
    DEEP_MIDDLE = "deep_middle"        # Tampa 2 hole
    FLAT_LEFT = "flat_left"
    FLAT_RIGHT = "flat_right"
    CURL_FLAT_LEFT = "curl_flat_left"
    CURL_FLAT_RIGHT = "curl_flat_right"
    HOOK_LEFT = "hook_left"
    HOOK_RIGHT = "hook_right"
    HOOK_MIDDLE = "hook_middle"
    ROBBER = "robber"

    # Resolved against formation strength at install time
    CURL_FLAT_STRONG = "curl_flat_strong"
    CURL_FLAT_WEAK = "curl_flat_weak"
    HOOK_STRONG = "hook_strong"
    HOOK_WEAK = "hook_weak"

    @property
    def is_deep(self) -> bool:
        return self.value.startswith("deep")


_STRENGTH_RELATIVE = {
    ZoneType.CURL_FLAT_STRONG: (ZoneType.CURL_FLAT_LEFT, ZoneType.CURL_FLAT_RIGHT, True),
    ZoneType.CURL_FLAT_WEAK: (ZoneType.CURL_FLAT_LEFT, ZoneType.CURL_FLAT_RIGHT, False),
    ZoneType.HOOK_STRONG: (ZoneType.HOOK_LEFT, ZoneType.HOOK_RIGHT, True),
    ZoneType.HOOK_WEAK: (ZoneType.HOOK_LEFT, ZoneType.HOOK_RIGHT, False),
}


def resolve_zone_type(zone_type: ZoneType, strength: Side) -> ZoneType:
    """Resolve a strong/weak zone against formation strength.

    Balanced formations are treated as strong to the right.
    """
    if zone_type not in _STRENGTH_RELATIVE:
        return zone_type
    left, right, strong = _STRENGTH_RELATIVE[zone_type]
    strong_left = strength == Side.LEFT
    if strong:
        return left if strong_left else right
    return right if strong_left else left


@dataclass(frozen=True)
class ZoneLandmark:
    """Zone shape relative to the line of scrimmage."""
    x: float
    depth: float
    width: float
    height: float


_THIRD = FIELD_WIDTH / 3
_QUARTER = FIELD_WIDTH / 4
_HALF = FIELD_WIDTH / 2

ZONE_LANDMARKS: Dict[ZoneType, ZoneLandmark] = {
    ZoneType.DEEP_HALF_LEFT: ZoneLandmark(_HALF / 2, 15.0, _HALF, 20.0),
    ZoneType.DEEP_HALF_RIGHT: ZoneLandmark(_HALF * 1.5, 15.0, _HALF, 20.0),
    ZoneType.DEEP_THIRD_LEFT: ZoneLandmark(_THIRD / 2, 12.0, _THIRD, 20.0),
    ZoneType.DEEP_THIRD_MIDDLE: ZoneLandmark(FIELD_CENTER, 12.0, _THIRD, 20.0),
    ZoneType.DEEP_THIRD_RIGHT: ZoneLandmark(_THIRD * 2.5, 12.0, _THIRD, 20.0),
    ZoneType.DEEP_QUARTER_1: ZoneLandmark(_QUARTER * 0.5, 12.0, _QUARTER, 20.0),
    ZoneType.DEEP_QUARTER_2: ZoneLandmark(_QUARTER * 1.5, 12.0, _QUARTER, 20.0),
    ZoneType.DEEP_QUARTER_3: ZoneLandmark(_QUARTER * 2.5, 12.0, _QUARTER, 20.0),
    ZoneType.DEEP_QUARTER_4: ZoneLandmark(_QUARTER * 3.5, 12.0, _QUARTER, 20.0),
    ZoneType.DEEP_MIDDLE: ZoneLandmark(FIELD_CENTER, 18.0, 12.0, 10.0),
    ZoneType.FLAT_LEFT: ZoneLandmark(6.0, 4.0, 12.0, 8.0),
    ZoneType.FLAT_RIGHT: ZoneLandmark(FIELD_WIDTH - 6.0, 4.0, 12.0, 8.0),
    ZoneType.CURL_FLAT_LEFT: ZoneLandmark(12.0, 8.0, 12.0, 8.0),
    ZoneType.CURL_FLAT_RIGHT: ZoneLandmark(FIELD_WIDTH - 12.0, 8.0, 12.0, 8.0),
    ZoneType.HOOK_LEFT: ZoneLandmark(20.0, 9.0, 10.0, 8.0),
    ZoneType.HOOK_RIGHT: ZoneLandmark(FIELD_WIDTH - 20.0, 9.0, 10.0, 8.0),
    ZoneType.HOOK_MIDDLE: ZoneLandmark(FIELD_CENTER, 9.0, 10.0, 8.0),
    ZoneType.ROBBER: ZoneLandmark(FIELD_CENTER, 10.0, 10.0, 6.0),
}


def build_zone(zone_type: ZoneType, los: float, strength: Side = Side.RIGHT) -> Zone:
    """Build the field-coordinate zone for a landmark."""
    concrete = resolve_zone_type(zone_type, strength)
    mark = ZONE_LANDMARKS[concrete]
    return Zone(
        name=concrete.value,
        center=Vec2(mark.x, los + mark.depth),
        width=mark.width,
        height=mark.height,
        depth=mark.depth,
    )


# =============================================================================
# Coverage Definitions
# =============================================================================

@dataclass(frozen=True)
class RoleAssignment:
    """What one role does in a coverage call."""
    type: ResponsibilityType
    zone_type: Optional[ZoneType] = None
    receiver_key: Optional[str] = None  # "#1_left", "#1_right", "#2_strong", "slot", "te", "rb"
    technique: str = "off"

    @property
    def is_man(self) -> bool:
        return self.type == ResponsibilityType.MAN


def _man(key: str, technique: str = "off") -> RoleAssignment:
    return RoleAssignment(ResponsibilityType.MAN, receiver_key=key, technique=technique)


def _zone(zone_type: ZoneType, technique: str = "off") -> RoleAssignment:
    return RoleAssignment(ResponsibilityType.ZONE, zone_type=zone_type, technique=technique)


def _blitz() -> RoleAssignment:
    return RoleAssignment(ResponsibilityType.BLITZ, technique="blitz")


def _spy() -> RoleAssignment:
    return RoleAssignment(ResponsibilityType.SPY, technique="spy")


@dataclass
class CoverageDefinition:
    """A complete coverage call.

    Attributes:
        name: Display name
        coverage_type: Archetype
        description: What the coverage does
        assignments: Role -> assignment for every role the call uses
        fallback: What a man defender does when no receiver is left for him
        deep_safeties: Number of deep defenders at the snap
        strengths: What this coverage is good against
        weaknesses: What can beat this coverage
    """
    name: str
    coverage_type: CoverageType
    description: str
    assignments: Dict[DefenderRole, RoleAssignment]
    fallback: RoleAssignment = field(default_factory=lambda: _zone(ZoneType.ROBBER))
    deep_safeties: int = 2
    strengths: List[str] = field(default_factory=list)
    weaknesses: List[str] = field(default_factory=list)

    def get_assignment(self, role: DefenderRole) -> RoleAssignment:
        """Assignment for a role, or the fallback for roles the call omits."""
        return self.assignments.get(role, self.fallback)

    def describe(self) -> str:
        """Human-readable coverage description."""
        lines = [f"=== {self.name} ({self.coverage_type.value}) ===", "", "Assignments:"]
        for role, assign in self.assignments.items():
            if assign.is_man:
                lines.append(f"  {role.value}: MAN on {assign.receiver_key} ({assign.technique})")
            elif assign.zone_type is not None:
                lines.append(f"  {role.value}: ZONE - {assign.zone_type.value} ({assign.technique})")
            else:
                lines.append(f"  {role.value}: {assign.type.value.upper()}")
        lines.append("")
        lines.append(f"Strengths: {', '.join(self.strengths)}")
        lines.append(f"Weaknesses: {', '.join(self.weaknesses)}")
        lines.append("")
        lines.append(f"Description: {self.description}")
        return "\n".join(lines)


def create_cover_0() -> CoverageDefinition:
    """Cover 0 - all-out man, no deep safety."""
    return CoverageDefinition(
        name="Cover 0",
        coverage_type=CoverageType.COVER_0,
        description="Man across the board with extra rushers. No deep help; "
                    "corners press and must win alone.",
        assignments={
            DefenderRole.CB1: _man("#1_left", "press"),
            DefenderRole.CB2: _man("#1_right", "press"),
            DefenderRole.NB1: _man("#2_strong", "press"),
            DefenderRole.NB2: _man("#2_weak", "press"),
            DefenderRole.NB3: _man("#3_strong", "press"),
            DefenderRole.SS: _man("te"),
            DefenderRole.FS: _man("#3_weak"),
            DefenderRole.MIKE: _man("rb"),
            DefenderRole.SAM: _blitz(),
            DefenderRole.WILL: _blitz(),
            DefenderRole.JACK: _blitz(),
        },
        fallback=_blitz(),
        deep_safeties=0,
        strengths=["quick pressure", "short yardage"],
        weaknesses=["deep shots", "pick plays", "hot routes"],
    )


def create_cover_1() -> CoverageDefinition:
    """Cover 1 - man free."""
    return CoverageDefinition(
        name="Cover 1",
        coverage_type=CoverageType.COVER_1,
        description="Man coverage underneath with a single-high free safety "
                    "and a robber in the middle.",
        assignments={
            DefenderRole.CB1: _man("#1_left"),
            DefenderRole.CB2: _man("#1_right"),
            DefenderRole.NB1: _man("#2_strong"),
            DefenderRole.NB2: _man("#2_weak"),
            DefenderRole.NB3: _man("#3_strong"),
            DefenderRole.SS: _man("#3_weak"),
            DefenderRole.FS: _zone(ZoneType.DEEP_THIRD_MIDDLE, "center-field"),
            DefenderRole.SAM: _man("te"),
            DefenderRole.MIKE: _man("rb"),
            DefenderRole.WILL: _zone(ZoneType.ROBBER, "robber"),
            DefenderRole.JACK: _spy(),
        },
        deep_safeties=1,
        strengths=["tight coverage", "deep middle help"],
        weaknesses=["crossers", "rub routes", "outside go routes"],
    )


def create_cover_2() -> CoverageDefinition:
    """Cover 2 - two-deep zone."""
    return CoverageDefinition(
        name="Cover 2",
        coverage_type=CoverageType.COVER_2,
        description="Two safeties split the deep field in halves; corners "
                    "squat in the flats and reroute #1.",
        assignments={
            DefenderRole.CB1: _zone(ZoneType.FLAT_LEFT, "hard"),
            DefenderRole.CB2: _zone(ZoneType.FLAT_RIGHT, "hard"),
            DefenderRole.FS: _zone(ZoneType.DEEP_HALF_LEFT),
            DefenderRole.SS: _zone(ZoneType.DEEP_HALF_RIGHT),
            DefenderRole.NB1: _zone(ZoneType.CURL_FLAT_STRONG),
            DefenderRole.NB2: _zone(ZoneType.CURL_FLAT_WEAK),
            DefenderRole.NB3: _zone(ZoneType.HOOK_MIDDLE),
            DefenderRole.SAM: _zone(ZoneType.HOOK_LEFT),
            DefenderRole.MIKE: _zone(ZoneType.HOOK_MIDDLE),
            DefenderRole.WILL: _zone(ZoneType.HOOK_RIGHT),
            DefenderRole.JACK: _zone(ZoneType.CURL_FLAT_WEAK),
        },
        fallback=_zone(ZoneType.HOOK_MIDDLE),
        strengths=["short outside routes", "deep outside"],
        weaknesses=["deep middle seam", "smash", "four verticals"],
    )


def create_cover_3() -> CoverageDefinition:
    """Cover 3 - three-deep zone."""
    return CoverageDefinition(
        name="Cover 3",
        coverage_type=CoverageType.COVER_3,
        description="Corners and free safety split the deep field in thirds; "
                    "four defenders play underneath.",
        assignments={
            DefenderRole.CB1: _zone(ZoneType.DEEP_THIRD_LEFT, "bail"),
            DefenderRole.CB2: _zone(ZoneType.DEEP_THIRD_RIGHT, "bail"),
            DefenderRole.FS: _zone(ZoneType.DEEP_THIRD_MIDDLE, "center-field"),
            DefenderRole.SS: _zone(ZoneType.CURL_FLAT_STRONG),
            DefenderRole.NB1: _zone(ZoneType.CURL_FLAT_WEAK),
            DefenderRole.NB2: _zone(ZoneType.HOOK_MIDDLE),
            DefenderRole.NB3: _zone(ZoneType.HOOK_STRONG),
            DefenderRole.SAM: _zone(ZoneType.HOOK_STRONG),
            DefenderRole.MIKE: _zone(ZoneType.HOOK_MIDDLE),
            DefenderRole.WILL: _zone(ZoneType.CURL_FLAT_WEAK),
            DefenderRole.JACK: _zone(ZoneType.HOOK_WEAK),
        },
        fallback=_zone(ZoneType.HOOK_MIDDLE),
        deep_safeties=1,
        strengths=["deep passes", "run support"],
        weaknesses=["flats", "seams", "curl-flat"],
    )


def _quarters_assignments() -> Dict[DefenderRole, RoleAssignment]:
    return {
        DefenderRole.CB1: _zone(ZoneType.DEEP_QUARTER_1, "mod"),
        DefenderRole.FS: _zone(ZoneType.DEEP_QUARTER_2, "2-read"),
        DefenderRole.SS: _zone(ZoneType.DEEP_QUARTER_3, "2-read"),
        DefenderRole.CB2: _zone(ZoneType.DEEP_QUARTER_4, "mod"),
        DefenderRole.NB1: _zone(ZoneType.CURL_FLAT_STRONG),
        DefenderRole.NB2: _zone(ZoneType.CURL_FLAT_WEAK),
        DefenderRole.NB3: _zone(ZoneType.HOOK_MIDDLE),
        DefenderRole.SAM: _zone(ZoneType.CURL_FLAT_LEFT),
        DefenderRole.MIKE: _zone(ZoneType.HOOK_MIDDLE),
        DefenderRole.WILL: _zone(ZoneType.CURL_FLAT_RIGHT),
        DefenderRole.JACK: _zone(ZoneType.HOOK_WEAK),
    }


def create_cover_4() -> CoverageDefinition:
    """Cover 4 - quarters."""
    return CoverageDefinition(
        name="Cover 4",
        coverage_type=CoverageType.COVER_4,
        description="Four defenders each take a deep quarter and pattern-match "
                    "verticals; safeties read #2 for run fits.",
        assignments=_quarters_assignments(),
        fallback=_zone(ZoneType.HOOK_MIDDLE),
        strengths=["four verticals", "deep passes", "run support from safeties"],
        weaknesses=["flats", "underneath crossers", "trips"],
    )


def create_quarters() -> CoverageDefinition:
    """Quarters - Cover 4 with MOD/MEG match rules."""
    definition = create_cover_4()
    definition.name = "Quarters"
    definition.coverage_type = CoverageType.QUARTERS
    return definition


def create_cover_6() -> CoverageDefinition:
    """Cover 6 - quarter-quarter-half (field side quarters, boundary half)."""
    return CoverageDefinition(
        name="Cover 6",
        coverage_type=CoverageType.COVER_6,
        description="Split-field coverage: quarters to the passing strength, "
                    "Cover 2 to the weak side.",
        assignments={
            DefenderRole.CB1: _zone(ZoneType.DEEP_QUARTER_1),
            DefenderRole.FS: _zone(ZoneType.DEEP_QUARTER_2),
            DefenderRole.SS: _zone(ZoneType.DEEP_HALF_RIGHT),
            DefenderRole.CB2: _zone(ZoneType.FLAT_RIGHT, "hard"),
            DefenderRole.NB1: _zone(ZoneType.CURL_FLAT_STRONG),
            DefenderRole.NB2: _zone(ZoneType.CURL_FLAT_WEAK),
            DefenderRole.NB3: _zone(ZoneType.HOOK_MIDDLE),
            DefenderRole.SAM: _zone(ZoneType.HOOK_LEFT),
            DefenderRole.MIKE: _zone(ZoneType.HOOK_MIDDLE),
            DefenderRole.WILL: _zone(ZoneType.HOOK_RIGHT),
            DefenderRole.JACK: _zone(ZoneType.CURL_FLAT_WEAK),
        },
        fallback=_zone(ZoneType.HOOK_MIDDLE),
        strengths=["formation into the boundary", "trips to the field"],
        weaknesses=["flood to the half side", "motion that flips strength"],
    )


def create_tampa_2() -> CoverageDefinition:
    """Tampa 2 - Cover 2 with the Mike running the deep middle."""
    return CoverageDefinition(
        name="Tampa 2",
        coverage_type=CoverageType.TAMPA_2,
        description="Cover 2 shell; the middle linebacker opens and runs to "
                    "the deep hole between the safeties.",
        assignments={
            DefenderRole.CB1: _zone(ZoneType.FLAT_LEFT, "jam"),
            DefenderRole.CB2: _zone(ZoneType.FLAT_RIGHT, "jam"),
            DefenderRole.FS: _zone(ZoneType.DEEP_HALF_LEFT),
            DefenderRole.SS: _zone(ZoneType.DEEP_HALF_RIGHT),
            DefenderRole.MIKE: _zone(ZoneType.DEEP_MIDDLE, "tampa-drop"),
            DefenderRole.SAM: _zone(ZoneType.HOOK_LEFT, "wall"),
            DefenderRole.WILL: _zone(ZoneType.HOOK_RIGHT, "wall"),
            DefenderRole.JACK: _zone(ZoneType.HOOK_WEAK),
            DefenderRole.NB1: _zone(ZoneType.CURL_FLAT_STRONG),
            DefenderRole.NB2: _zone(ZoneType.CURL_FLAT_WEAK),
            DefenderRole.NB3: _zone(ZoneType.HOOK_STRONG),
        },
        fallback=_zone(ZoneType.HOOK_MIDDLE),
        strengths=["deep middle", "intermediate crossers"],
        weaknesses=["flat-corner combinations", "empty sets"],
    )


# =============================================================================
# Coverage Library
# =============================================================================

COVERAGE_LIBRARY: Dict[CoverageType, CoverageDefinition] = {
    CoverageType.COVER_0: create_cover_0(),
    CoverageType.COVER_1: create_cover_1(),
    CoverageType.COVER_2: create_cover_2(),
    CoverageType.COVER_3: create_cover_3(),
    CoverageType.COVER_4: create_cover_4(),
    CoverageType.QUARTERS: create_quarters(),
    CoverageType.COVER_6: create_cover_6(),
    CoverageType.TAMPA_2: create_tampa_2(),
}


def get_coverage(coverage: CoverageType | str) -> CoverageDefinition:
    """Get a coverage definition by type or name.

    Raises:
        ValueError: If the name is not a known coverage
    """
    if isinstance(coverage, str) and not isinstance(coverage, CoverageType):
        coverage = CoverageType.parse(coverage)
    return COVERAGE_LIBRARY[coverage]


def list_coverages() -> List[str]:
    """List available coverage names."""
    return [c.value for c in COVERAGE_LIBRARY]


_MIRRORED_ZONES = {
    ZoneType.DEEP_HALF_LEFT: ZoneType.DEEP_HALF_RIGHT,
    ZoneType.DEEP_THIRD_LEFT: ZoneType.DEEP_THIRD_RIGHT,
    ZoneType.DEEP_QUARTER_1: ZoneType.DEEP_QUARTER_4,
    ZoneType.DEEP_QUARTER_2: ZoneType.DEEP_QUARTER_3,
    ZoneType.FLAT_LEFT: ZoneType.FLAT_RIGHT,
    ZoneType.CURL_FLAT_LEFT: ZoneType.CURL_FLAT_RIGHT,
    ZoneType.HOOK_LEFT: ZoneType.HOOK_RIGHT,
    ZoneType.CURL_FLAT_STRONG: ZoneType.CURL_FLAT_WEAK,
    ZoneType.HOOK_STRONG: ZoneType.HOOK_WEAK,
}
_MIRRORED_ZONES.update({v: k for k, v in list(_MIRRORED_ZONES.items())})


def mirror_zone_type(zone_type: ZoneType) -> ZoneType:
    """Zone on the opposite side of the field."""
    return _MIRRORED_ZONES.get(zone_type, zone_type)
