"""Route library - per-route movement profiles and waypoint templates.

Profiles carry the numbers the receiver movement system needs (stem
depth, break timing, break angle, separation technique). Templates turn a
route type into waypoints from a starting point.

Lateral template offsets are written for a receiver on the right side of
the field and mirrored for the left side, so "out" always breaks toward
the near sideline and "in" toward the middle.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from ..core.entities import Route, RouteType
from ..core.field import FIELD_CENTER
from ..core.vec2 import Vec2


class SeparationTechnique(str, Enum):
    """How a receiver creates separation at the top of the route."""
    SPEED_CUT = "speed-cut"          # Keep speed through the cut
    PLANT_AND_CUT = "plant-and-cut"  # Hard deceleration then explode
    STACKING = "stacking"            # Get on top of the defender


# =============================================================================
# Route Profiles
# =============================================================================

DEFAULT_ROUTE_TIMING = 2.2
DEFAULT_BREAK_ANGLE = 45.0

# Timing windows for QB-WR synchronization (seconds)
RHYTHM_WINDOW = 1.8
READ_WINDOW = 2.2
EXTENDED_WINDOW = 2.6


@dataclass(frozen=True)
class RouteProfile:
    """Movement profile for a route type.

    Attributes:
        depth: Stem depth in yards
        timing: Seconds after the snap at which the break happens
        break_angle: Degrees off the stem (0 = straight, 180 = come back)
        technique: Separation technique at the break
    """
    depth: float
    timing: float
    break_angle: float
    technique: SeparationTechnique = SeparationTechnique.STACKING


_SC = SeparationTechnique.SPEED_CUT
_PC = SeparationTechnique.PLANT_AND_CUT

ROUTE_PROFILES: Dict[RouteType, RouteProfile] = {
    RouteType.SLANT: RouteProfile(3, 1.8, 45, _SC),
    RouteType.OUT: RouteProfile(12, 2.2, 90, _PC),
    RouteType.CURL: RouteProfile(11, 2.2, 45, _PC),
    RouteType.GO: RouteProfile(20, 1.8, 0),
    RouteType.COMEBACK: RouteProfile(14, 2.2, 45, _PC),
    RouteType.POST: RouteProfile(12, 2.2, 45),
    RouteType.FADE: RouteProfile(18, 2.6, 15),
    RouteType.FLAT: RouteProfile(2, 1.8, 90, _SC),
    RouteType.IN: RouteProfile(11, 2.2, 90, _PC),
    RouteType.HITCH: RouteProfile(7, 1.8, 180),
    RouteType.WHEEL: RouteProfile(16, 2.6, 90),
    RouteType.CORNER: RouteProfile(14, 2.2, 45),
    RouteType.DIG: RouteProfile(13, 2.2, 90),
    RouteType.MESH_CROSS: RouteProfile(4, 1.8, 90),
    RouteType.SPEED_OUT: RouteProfile(8, 1.8, 90),
    RouteType.SEAM: RouteProfile(18, 2.2, 0),
    RouteType.OPTION_IN_OUT: RouteProfile(10, 2.0, 90),
    RouteType.CHOICE_BREAK: RouteProfile(12, 2.2, 45),
    RouteType.DELAYED_DRAG: RouteProfile(2, 2.5, 90),
    RouteType.BOOTLEG_COMEBACK: RouteProfile(12, 2.4, 45),
    RouteType.QUICK_HITCH: RouteProfile(5, 1.6, 180),
    RouteType.DRAG: RouteProfile(3, 2.2, 90),
}


def get_route_profile(route_type: RouteType) -> Optional[RouteProfile]:
    return ROUTE_PROFILES.get(route_type)


def route_timing(route_type: RouteType) -> float:
    """Break timing for a route, 2.2s when unknown."""
    profile = ROUTE_PROFILES.get(route_type)
    return profile.timing if profile else DEFAULT_ROUTE_TIMING


def break_angle(route_type: RouteType) -> float:
    """Break angle for a route, 45 degrees when unknown."""
    profile = ROUTE_PROFILES.get(route_type)
    return profile.break_angle if profile else DEFAULT_BREAK_ANGLE


def separation_technique(route_type: RouteType) -> SeparationTechnique:
    profile = ROUTE_PROFILES.get(route_type)
    return profile.technique if profile else SeparationTechnique.STACKING


# =============================================================================
# Option Templates
# =============================================================================

# (outward_dx, dy) offsets from the decision point, in order
OPTION_TEMPLATES: Dict[RouteType, List[Tuple[float, float]]] = {
    RouteType.OUT: [(6.0, 2.0)],
    RouteType.IN: [(-6.0, 2.0)],
    RouteType.CORNER: [(3.0, 6.0), (8.0, 12.0)],
    RouteType.COMEBACK: [(0.0, -3.0)],
    RouteType.HITCH: [(0.0, -2.0)],
    RouteType.FADE: [(2.0, 10.0)],
    RouteType.CHOICE_BREAK: [(4.0, 2.0)],
    RouteType.OPTION_IN_OUT: [(5.0, 1.0)],
}

DEFAULT_OPTION_TEMPLATE: List[Tuple[float, float]] = [(0.0, 3.0)]

# Routes that get compressed timing after an option conversion
QUICK_OPTION_ROUTES = frozenset({RouteType.HITCH, RouteType.OUT, RouteType.IN, RouteType.COMEBACK})


def outward_sign(x: float) -> int:
    """+1 if outward is toward higher x, -1 otherwise."""
    return -1 if x < FIELD_CENTER else 1


def option_waypoints(route_type: RouteType, current: Vec2) -> List[Vec2]:
    """Waypoints for a converted option route starting at ``current``."""
    sign = outward_sign(current.x)
    offsets = OPTION_TEMPLATES.get(route_type, DEFAULT_OPTION_TEMPLATE)
    return [current] + [Vec2(current.x + dx * sign, current.y + dy) for dx, dy in offsets]


# =============================================================================
# Route Builder
# =============================================================================

def build_route(route_type: RouteType, start: Vec2, los: float) -> Route:
    """Build a simple stem-and-break route from a route profile.

    Three waypoints: release point, break point at the profile depth, and
    a finish point five yards along the break angle. Depth is measured
    downfield from the line of scrimmage.
    """
    profile = ROUTE_PROFILES.get(route_type, RouteProfile(10, DEFAULT_ROUTE_TIMING, DEFAULT_BREAK_ANGLE))
    sign = outward_sign(start.x)
    # Inside-breaking routes turn toward the middle of the field
    inside = route_type in (
        RouteType.SLANT, RouteType.IN, RouteType.POST, RouteType.DIG,
        RouteType.MESH_CROSS, RouteType.DRAG, RouteType.DELAYED_DRAG, RouteType.CURL,
    )
    lateral = -sign if inside else sign

    break_point = Vec2(start.x, los + profile.depth)
    angle = math.radians(profile.break_angle)
    finish = Vec2(
        break_point.x + lateral * 5.0 * math.sin(angle),
        break_point.y + 5.0 * math.cos(angle),
    )
    return Route(
        type=route_type,
        waypoints=[start, break_point, finish],
        timing=[0.0, profile.timing, profile.timing + 0.8],
        depth=profile.depth,
    )
