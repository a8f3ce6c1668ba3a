"""Option routes - receivers converting their route by reading coverage.

A decision is only made inside the coverage's window
``[trigger, trigger + 0.2]`` seconds after the snap. The read:

    Slot (< 8 yds from center)      Outside
    man, inside leverage   -> out     -> corner
    man, outside leverage  -> in      -> comeback
    zone, open (> 6 yds)   -> choice  -> option in/out
    zone, defender close   -> hitch   -> fade
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from ..core.entities import Player, Route, RouteType
from ..core.field import distance_from_center
from ..core.vec2 import Vec2
from ..plays.coverages import CoverageType
from ..plays.routes import QUICK_OPTION_ROUTES, option_waypoints


logger = logging.getLogger(__name__)


OPTION_WINDOW = 0.2
SLOT_DISTANCE = 8.0
OPEN_AREA_DISTANCE = 6.0
QUICK_TIMING_FACTOR = 0.8
SLOW_TIMING_FACTOR = 1.2
DEFAULT_OPTION_DURATION = 2.0


# Seconds after the snap at which receivers read the coverage
OPTION_TRIGGERS: Dict[CoverageType, float] = {
    CoverageType.COVER_0: 1.5,
    CoverageType.COVER_1: 2.0,
    CoverageType.COVER_2: 2.2,
    CoverageType.COVER_3: 1.8,
    CoverageType.COVER_4: 2.0,
    CoverageType.QUARTERS: 2.0,
    CoverageType.COVER_6: 2.0,
    CoverageType.TAMPA_2: 2.2,
}


@dataclass(frozen=True)
class OptionDecisions:
    """Route conversions for one receiver alignment."""
    man_inside: RouteType
    man_outside: RouteType
    zone_open: RouteType
    zone_defender: RouteType

    def all(self) -> List[RouteType]:
        return [self.man_inside, self.man_outside, self.zone_open, self.zone_defender]


SLOT_OPTIONS = OptionDecisions(RouteType.OUT, RouteType.IN, RouteType.CHOICE_BREAK, RouteType.HITCH)
OUTSIDE_OPTIONS = OptionDecisions(RouteType.CORNER, RouteType.COMEBACK, RouteType.OPTION_IN_OUT, RouteType.FADE)


def is_slot(receiver: Player) -> bool:
    return distance_from_center(receiver.pos.x) < SLOT_DISTANCE


def decisions_for(receiver: Player) -> OptionDecisions:
    return SLOT_OPTIONS if is_slot(receiver) else OUTSIDE_OPTIONS


def should_make_decision(time_elapsed: float, coverage: CoverageType) -> bool:
    """Inside the coverage's option window."""
    trigger = OPTION_TRIGGERS.get(coverage)
    if trigger is None:
        return False
    return trigger <= time_elapsed <= trigger + OPTION_WINDOW


def has_inside_leverage(receiver: Player, defender: Player) -> bool:
    """Defender is between the receiver and the middle of the field."""
    return distance_from_center(defender.pos.x) < distance_from_center(receiver.pos.x)


def evaluate_option_route(
    receiver: Player,
    nearest_defender: Player,
    coverage: CoverageType,
    time_elapsed: float,
) -> Optional[RouteType]:
    """Read the coverage and pick the converted route.

    Returns:
        The new route type, or None outside the decision window or when
        the receiver has no route
    """
    if receiver.route is None or not should_make_decision(time_elapsed, coverage):
        return None

    options = decisions_for(receiver)
    resp = nearest_defender.responsibility
    if resp is not None and resp.is_man:
        choice = options.man_inside if has_inside_leverage(receiver, nearest_defender) else options.man_outside
    else:
        open_area = receiver.pos.distance_to(nearest_defender.pos) > OPEN_AREA_DISTANCE
        choice = options.zone_open if open_area else options.zone_defender

    logger.debug("%s option read at %.2fs: %s", receiver.id, time_elapsed, choice.value)
    return choice


def update_route_for_option(receiver: Player, new_type: RouteType, current: Vec2) -> Route:
    """Replacement route running from ``current``.

    Timing restarts at 0 at the decision point; the total is the old
    route's duration scaled 0.8 for quick routes and 1.2 otherwise,
    spread evenly over the new waypoints.
    """
    waypoints = option_waypoints(new_type, current)
    base = receiver.route.duration if receiver.route is not None else DEFAULT_OPTION_DURATION
    factor = QUICK_TIMING_FACTOR if new_type in QUICK_OPTION_ROUTES else SLOW_TIMING_FACTOR
    total = base * factor

    legs = len(waypoints) - 1
    timing = [total * i / legs for i in range(len(waypoints))]
    return Route(
        type=new_type,
        waypoints=waypoints,
        timing=timing,
        depth=abs(waypoints[-1].y - waypoints[0].y),
    )


def available_options(receiver: Player) -> List[RouteType]:
    """Every route this receiver could convert to, without duplicates."""
    seen: List[RouteType] = []
    for route_type in decisions_for(receiver).all():
        if route_type not in seen:
            seen.append(route_type)
    return seen
