"""Pick plays - legal rubs from stack, bunch, mesh and smash looks.

Detection reads alignment only. Execution is time-gated: the rub happens
between contact (1.2s) and separation (1.6s); outside that window a pick
produces nothing. Success is a draw against the concept's effectiveness
using the random source the caller passes in.

The defensive counter is pure: it returns the new responsibilities and
leaves the players alone.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field, replace
from enum import Enum
from itertools import combinations
from typing import Dict, List, Optional, Tuple

from ..core.config import DEFAULT_THRESHOLDS, EngineConfig, FormationThresholds
from ..core.entities import CoverageResponsibility, Player, PlayerType, Route, RouteType
from ..core.field import CENTER_X, distance_from_center
from ..core.vec2 import Vec2
from ..plays.coverages import CoverageType


logger = logging.getLogger(__name__)


class PickType(str, Enum):
    MESH = "mesh"
    SMASH = "smash"
    STACK = "stack"
    BUNCH = "bunch"


# =============================================================================
# Concepts and Timing
# =============================================================================

@dataclass(frozen=True)
class PickTiming:
    """Pick phases in seconds after the snap."""
    setup: float = 0.0
    approach: float = 0.8
    contact: float = 1.2
    separation: float = 1.6
    throw_window: Tuple[float, float] = (1.8, 2.4)
    late_window: float = 3.0


PICK_TIMING = PickTiming()

LEGAL_PICK_DEPTH = 1.0
OPENNESS_BONUS = 15.0
FAILED_OPENNESS_BONUS = 5.0
FAILED_SEPARATION_FACTOR = 0.3
DEFENDER_RECOVERY_TIME = 0.6
ZONE_WIDEN_FACTOR = 1.2
OUTSIDE_DISTANCE = 12.0


@dataclass(frozen=True)
class ConceptRoute:
    route_type: RouteType
    depth: float
    timing: Tuple[float, ...]
    is_pick: bool


@dataclass(frozen=True)
class PickConcept:
    """A rub concept and how well it works.

    Effectiveness values are percentages.
    """
    name: str
    pick_type: PickType
    routes: Dict[str, ConceptRoute]
    separation: float
    vs_man: float
    vs_zone: float
    mesh_point: Optional[Vec2] = None


PICK_CONCEPTS: Dict[str, PickConcept] = {
    "mesh_concept": PickConcept(
        name="mesh_concept",
        pick_type=PickType.MESH,
        routes={
            "slot1": ConceptRoute(RouteType.MESH_CROSS, 4.5, (0.0, 1.2, 2.5), True),
            "slot2": ConceptRoute(RouteType.MESH_CROSS, 4.5, (0.0, 1.2, 2.5), True),
            "outside": ConceptRoute(RouteType.DIG, 12.0, (0.0, 2.8, 3.5), False),
        },
        separation=2.4,
        vs_man=85.0,
        vs_zone=65.0,
        mesh_point=Vec2(CENTER_X, 4.5),
    ),
    "smash_concept": PickConcept(
        name="smash_concept",
        pick_type=PickType.SMASH,
        routes={
            "outside": ConceptRoute(RouteType.HITCH, 6.0, (0.0, 1.4, 1.8), True),
            "slot": ConceptRoute(RouteType.CORNER, 11.0, (0.0, 2.2, 3.0), False),
        },
        separation=2.8,
        vs_man=88.0,
        vs_zone=72.0,
    ),
    "stack_vertical": PickConcept(
        name="stack_vertical",
        pick_type=PickType.STACK,
        routes={
            "front": ConceptRoute(RouteType.FADE, 20.0, (0.0, 1.0, 3.5), True),
            "back": ConceptRoute(RouteType.SLANT, 6.0, (0.0, 0.6, 1.8), False),
        },
        separation=3.2,
        vs_man=78.0,
        vs_zone=45.0,
    ),
}

# Average separation a natural bunch release creates
BUNCH_NATURAL_SEPARATION = 2.1


def get_pick_concept(name: str) -> Optional[PickConcept]:
    return PICK_CONCEPTS.get(name)


# =============================================================================
# Detection
# =============================================================================

@dataclass
class PickPotential:
    """Rub opportunities in an offensive alignment."""
    has_pick_potential: bool = False
    pick_type: Optional[PickType] = None
    pick_receivers: List[Player] = field(default_factory=list)
    legal_pick_zones: List[Vec2] = field(default_factory=list)


def _stack_pairs(receivers: List[Player], thresholds: FormationThresholds) -> List[Tuple[Player, Player]]:
    return [
        (a, b) for a, b in combinations(receivers, 2)
        if abs(a.pos.x - b.pos.x) < thresholds.stack_lateral
        and abs(a.pos.y - b.pos.y) > thresholds.stack_vertical
    ]


def _bunch_group(receivers: List[Player], thresholds: FormationThresholds) -> List[Player]:
    spacing = thresholds.pick_bunch_spacing
    for receiver in receivers:
        nearby = [
            o for o in receivers
            if o.id != receiver.id
            and abs(o.pos.x - receiver.pos.x) < spacing
            and abs(o.pos.y - receiver.pos.y) < spacing
        ]
        if len(nearby) >= 2:
            return [receiver] + nearby
    return []


def _slot_receivers(receivers: List[Player], thresholds: FormationThresholds) -> List[Player]:
    return [r for r in receivers if distance_from_center(r.pos.x) < thresholds.slot_distance]


def analyze_pick_potential(
    offense: List[Player],
    los: float = 0.0,
    thresholds: FormationThresholds = DEFAULT_THRESHOLDS,
) -> PickPotential:
    """Find the first rub look: stack, then bunch, mesh, smash.

    Legal pick zones sit one yard past the line of scrimmage.
    """
    receivers = [p for p in offense if p.is_eligible and p.player_type != PlayerType.QB]
    zone_y = los + LEGAL_PICK_DEPTH

    stacks = _stack_pairs(receivers, thresholds)
    if stacks:
        front, back = stacks[0]
        return PickPotential(True, PickType.STACK, [front, back], [Vec2(front.pos.x, zone_y)])

    bunch = _bunch_group(receivers, thresholds)
    if len(bunch) >= 3:
        return PickPotential(True, PickType.BUNCH, bunch, [Vec2(p.pos.x, zone_y) for p in bunch])

    slots = _slot_receivers(receivers, thresholds)
    if len(slots) >= 2:
        return PickPotential(True, PickType.MESH, slots[:2], [Vec2(CENTER_X, zone_y)])

    outside = next((r for r in receivers if distance_from_center(r.pos.x) > OUTSIDE_DISTANCE), None)
    if outside is not None and slots:
        return PickPotential(True, PickType.SMASH, [outside, slots[0]], [Vec2(outside.pos.x, zone_y)])

    return PickPotential()


def is_legal_pick(pos: Vec2, los: float) -> bool:
    """A rub is legal within one yard past the line of scrimmage."""
    depth = pos.y - los
    return 0.0 <= depth <= LEGAL_PICK_DEPTH


# =============================================================================
# Execution
# =============================================================================

@dataclass
class PickResult:
    separation_created: float = 0.0
    openness_bonus: float = 0.0
    pick_executed: bool = False
    throw_window: Tuple[float, float] = (0.0, 0.0)


def in_pick_window(game_time: float, timing: PickTiming = PICK_TIMING) -> bool:
    return timing.contact <= game_time <= timing.separation


def execute_pick_play(
    concept_name: str,
    receivers: List[Player],
    game_time: float,
    coverage: CoverageType,
    rng: Optional[random.Random] = None,
) -> PickResult:
    """Resolve a pick at ``game_time``.

    Args:
        concept_name: Key in PICK_CONCEPTS
        receivers: Receivers running the concept
        game_time: Seconds since the snap
        coverage: Coverage being attacked
        rng: Random source for the success draw (a fresh one from
            EngineConfig when omitted)

    Returns:
        PickResult. Unknown concepts and times outside the contact
        window produce no separation.
    """
    concept = PICK_CONCEPTS.get(concept_name)
    if concept is None:
        return PickResult()
    if not in_pick_window(game_time):
        return PickResult(throw_window=PICK_TIMING.throw_window)

    rng = rng or EngineConfig().create_rng()
    effectiveness = concept.vs_man if coverage.is_man else concept.vs_zone
    roll = rng.random() * 100
    success = roll < effectiveness
    logger.debug("%s vs %s: roll %.1f / %.0f -> %s", concept_name, coverage.value, roll, effectiveness, success)

    if success:
        return PickResult(concept.separation, OPENNESS_BONUS, True, PICK_TIMING.throw_window)
    return PickResult(
        concept.separation * FAILED_SEPARATION_FACTOR,
        FAILED_OPENNESS_BONUS,
        False,
        PICK_TIMING.throw_window,
    )


def _scaled(route: Route, factor: float) -> Route:
    return replace(route, timing=[t * factor for t in route.timing])


def update_routes_for_pick(
    receivers: List[Player],
    pick_type: PickType,
    game_time: float,
    rng: Optional[random.Random] = None,
) -> Dict[str, Route]:
    """Retimed routes so the rub lands in the contact window.

    Returns:
        Receiver id -> new route, for receivers whose timing changed
    """
    updates: Dict[str, Route] = {}
    routed = [r for r in receivers if r.route is not None]

    if pick_type == PickType.MESH and game_time > PICK_TIMING.approach:
        crossers = [r for r in routed if r.route.type == RouteType.MESH_CROSS]
        if len(crossers) >= 2:
            for r in crossers:
                updates[r.id] = _scaled(r.route, 0.95)

    elif pick_type == PickType.SMASH and game_time > PICK_TIMING.approach:
        hitch = next((r for r in routed if r.route.type == RouteType.HITCH), None)
        corner = next((r for r in routed if r.route.type == RouteType.CORNER), None)
        if hitch and corner:
            updates[hitch.id] = _scaled(hitch.route, 0.9)

    elif pick_type == PickType.STACK and game_time > PICK_TIMING.setup:
        fade = next((r for r in routed if r.route.type == RouteType.FADE), None)
        slant = next((r for r in routed if r.route.type == RouteType.SLANT), None)
        if fade and slant:
            updates[fade.id] = _scaled(fade.route, 1.05)

    elif pick_type == PickType.BUNCH and game_time > PICK_TIMING.approach:
        rng = rng or EngineConfig().create_rng()
        for r in routed:
            shift = (rng.random() - 0.5) * 0.2
            # Timing must stay non-negative
            timing = [max(0.0, t + shift) for t in r.route.timing]
            updates[r.id] = replace(r.route, timing=timing)

    return updates


# =============================================================================
# Defensive Response
# =============================================================================

def banjo(defenders: List[Player]) -> Dict[str, CoverageResponsibility]:
    """Swap the targets of the two closest man defenders.

    Returns:
        The two swapped responsibilities, or an empty map with fewer than
        two man defenders
    """
    man = [d for d in defenders if d.responsibility is not None and d.responsibility.is_man]
    if len(man) < 2:
        return {}
    a, b = min(combinations(man, 2), key=lambda pair: pair[0].pos.distance_to(pair[1].pos))
    return {a.id: b.responsibility, b.id: a.responsibility}


def widen_zones(defenders: List[Player], factor: float = ZONE_WIDEN_FACTOR) -> Dict[str, CoverageResponsibility]:
    """Zone responsibilities with widths scaled by ``factor``."""
    widened: Dict[str, CoverageResponsibility] = {}
    for d in defenders:
        resp = d.responsibility
        if resp is not None and resp.is_zone and resp.zone is not None:
            widened[d.id] = CoverageResponsibility.zone_of(resp.zone.widened(factor))
    return widened


def defensive_pick_response(
    defenders: List[Player],
    pick_type: PickType,
    coverage: CoverageType,
) -> Dict[str, CoverageResponsibility]:
    """Counter a rub: banjo against man, wider zones against zone.

    Returns:
        Defender id -> new responsibility; defenders not in the map keep
        theirs
    """
    response = banjo(defenders) if coverage.is_man else widen_zones(defenders)
    logger.debug("%s pick vs %s: %d responsibilities changed", pick_type.value, coverage.value, len(response))
    return response
