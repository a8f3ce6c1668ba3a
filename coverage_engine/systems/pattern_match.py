"""Pattern-Match Engine - zone defenders converting to man post-snap.

Each zone defender carries a small state machine:

    ZONE ──► MAN_MATCH   (deep defender, vertical receiver in his zone)
      │
      └────► COLLISION   (underneath defender, crossing receiver in his zone)

Both non-zone states are terminal for the rest of the play; only
``reset()`` returns a defender to ZONE. Illegal transitions raise
InvalidMatchTransition when validated.

Rotations (sky/buzz/cloud) are not live transitions. They are chosen
pre-snap and only change base positions before this engine runs.

Also here: 2-read (palms), quarters MOD/MEG, rip/liz apex rules, smash
detection, zone distribution and route distribution analysis.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Set

from ..core.entities import Adjustment, CoverageResponsibility, Player, PlayerType
from ..core.field import CENTER_X, FIELD_CENTER, Side, distance_from_center, side_of
from ..core.vec2 import Vec2
from ..plays.coverages import CoverageType


logger = logging.getLogger(__name__)


# =============================================================================
# State Machine
# =============================================================================

class MatchState(str, Enum):
    """Post-snap state of a zone defender."""
    ZONE = "zone"
    MAN_MATCH = "man_match"
    COLLISION = "collision"


VALID_TRANSITIONS: Dict[MatchState, Set[MatchState]] = {
    MatchState.ZONE: {MatchState.MAN_MATCH, MatchState.COLLISION},
    MatchState.MAN_MATCH: set(),
    MatchState.COLLISION: set(),
}


class InvalidMatchTransition(Exception):
    """Raised when a match transition isn't allowed."""
    pass


@dataclass
class MatchTransition:
    """Record of a match state change."""
    defender_id: str
    from_state: MatchState
    to_state: MatchState
    target_id: Optional[str]
    reason: str
    time: float


TransitionCallback = Callable[[MatchTransition], None]


class MatchStateMachine:
    """Pattern-match state for one zone defender.

    Usage:
        fsm = MatchStateMachine("FS")
        if fsm.can_transition_to(MatchState.MAN_MATCH):
            fsm.transition_to(MatchState.MAN_MATCH, target_id="WR1", reason="vertical", time=1.1)
    """

    def __init__(self, defender_id: str):
        self.defender_id = defender_id
        self._state = MatchState.ZONE
        self._target_id: Optional[str] = None
        self._history: list[MatchTransition] = []
        self._callbacks: list[TransitionCallback] = []

    @property
    def state(self) -> MatchState:
        return self._state

    @property
    def target_id(self) -> Optional[str]:
        """Receiver being matched or collided with."""
        return self._target_id

    @property
    def history(self) -> list[MatchTransition]:
        return self._history.copy()

    @property
    def is_matched(self) -> bool:
        return self._state != MatchState.ZONE

    def can_transition_to(self, target: MatchState) -> bool:
        return target in VALID_TRANSITIONS.get(self._state, set())

    def transition_to(
        self,
        target: MatchState,
        target_id: Optional[str] = None,
        reason: str = "",
        time: float = 0.0,
        validate: bool = True,
    ) -> None:
        """Move to a new match state.

        Raises:
            InvalidMatchTransition: If the transition is not valid and validate=True
        """
        if validate and not self.can_transition_to(target):
            raise InvalidMatchTransition(
                f"{self.defender_id}: cannot transition from {self._state.value} to {target.value}. "
                f"Valid targets: {[s.value for s in VALID_TRANSITIONS.get(self._state, set())]}"
            )

        transition = MatchTransition(
            defender_id=self.defender_id,
            from_state=self._state,
            to_state=target,
            target_id=target_id,
            reason=reason,
            time=time,
        )
        self._state = target
        self._target_id = target_id
        self._history.append(transition)
        logger.debug("%s: %s -> %s (%s)", self.defender_id, transition.from_state.value, target.value, reason)

        for callback in self._callbacks:
            callback(transition)

    def on_transition(self, callback: TransitionCallback) -> None:
        self._callbacks.append(callback)

    def reset(self) -> None:
        self._state = MatchState.ZONE
        self._target_id = None
        self._history.clear()


# =============================================================================
# Route Classification
# =============================================================================

class RouteClass(str, Enum):
    VERTICAL = "vertical"
    HORIZONTAL = "horizontal"
    CROSSING = "crossing"
    BREAKING = "breaking"


@dataclass(frozen=True)
class PatternMatchConfig:
    """Pattern-match thresholds (yards)."""
    vertical_depth: float = 12.0
    horizontal_depth: float = 8.0
    match_spacing: float = 2.5      # Horizontal and vertical cushion on a matched receiver
    mod_vertical_depth: float = 10.0
    red_zone_los: float = 80.0
    smash_deep_depth: float = 8.0
    smash_lateral: float = 5.0
    trips_tighten: float = 2.0
    apex_threat_depth: float = 5.0


DEFAULT_MATCH_CONFIG = PatternMatchConfig()


def classify_route(receiver: Player, los: float, config: PatternMatchConfig = DEFAULT_MATCH_CONFIG) -> RouteClass:
    """Classify a receiver's route from his current depth and velocity.

    Deep receivers are vertical; shallow ones are crossing when lateral
    speed dominates, otherwise horizontal; anything between is breaking.
    """
    depth = abs(receiver.pos.y - los)
    if depth >= config.vertical_depth:
        return RouteClass.VERTICAL
    if depth <= config.horizontal_depth:
        vel = receiver.velocity
        if abs(vel.x) > abs(vel.y) and abs(vel.x) > 0:
            return RouteClass.CROSSING
        return RouteClass.HORIZONTAL
    return RouteClass.BREAKING


def _is_vertical_stem(receiver: Player, los: float) -> bool:
    vel = receiver.velocity
    return abs(receiver.pos.y - los) > 8 and abs(vel.y) > abs(vel.x) * 1.5


def _is_out_breaking(receiver: Player) -> bool:
    vel = receiver.velocity
    if vel.length() == 0:
        return False
    moving_out = abs(vel.x) > abs(vel.y) * 0.5
    toward_sideline = (
        (receiver.pos.x < FIELD_CENTER and vel.x < 0)
        or (receiver.pos.x > FIELD_CENTER and vel.x > 0)
    )
    return moving_out and toward_sideline


# =============================================================================
# Pattern-Match Decisions
# =============================================================================

@dataclass
class MatchDecision:
    """What a pattern-match rule tells a defender to do."""
    technique: str                       # "man", "zone"
    assignment: str
    target_id: Optional[str] = None
    landmark: Optional[Vec2] = None

    @property
    def is_man(self) -> bool:
        return self.technique == "man"


def _outside_in(receivers: List[Player], left: bool) -> List[Player]:
    return sorted(receivers, key=lambda p: p.pos.x if left else -p.pos.x)


def execute_palms(
    corner: Player,
    safety: Player,
    receivers: List[Player],
    los: float,
) -> Dict[str, MatchDecision]:
    """2-read: corner reads #2, safety reads #1.

    #2 out-breaking past 5 yards: corner jumps #2, safety rotates over #1.
    #2 vertical: safety carries #2, corner stays on #1.
    Otherwise both sit in their deep quarters.
    """
    left = corner.pos.x < FIELD_CENTER
    side = [r for r in receivers if (r.pos.x < FIELD_CENTER) == left]
    numbered = _outside_in(side, left)
    r1 = numbered[0] if numbered else None
    r2 = numbered[1] if len(numbered) > 1 else None

    corner_decision = MatchDecision("zone", "deep-quarter", landmark=Vec2(corner.pos.x, los + 15))
    safety_decision = MatchDecision("zone", "deep-quarter", landmark=Vec2(safety.pos.x, los + 15))

    if r2 is not None:
        if _is_out_breaking(r2) and abs(r2.pos.y - los) > 5:
            corner_decision = MatchDecision("man", "match-#2-flat", target_id=r2.id)
            if r1 is not None:
                safety_decision = MatchDecision("man", "rotate-to-#1", target_id=r1.id)
        elif _is_vertical_stem(r2, los):
            safety_decision = MatchDecision("man", "match-#2-vertical", target_id=r2.id)
            if r1 is not None:
                corner_decision = MatchDecision("man", "match-#1", target_id=r1.id)

    return {corner.id: corner_decision, safety.id: safety_decision}


def execute_quarters_match(
    defender: Player,
    receiver: Optional[Player],
    los: float,
    config: PatternMatchConfig = DEFAULT_MATCH_CONFIG,
) -> MatchDecision:
    """Quarters rules: MOD (man only deep), MEG in the red zone."""
    if receiver is None:
        return MatchDecision("zone", "deep-quarter", landmark=Vec2(defender.pos.x, los + 15))

    depth = abs(receiver.pos.y - los)
    if depth >= config.mod_vertical_depth and _is_vertical_stem(receiver, los):
        return MatchDecision("man", "match-vertical", target_id=receiver.id)
    if los > config.red_zone_los:
        return MatchDecision("man", "meg-lock", target_id=receiver.id)
    return MatchDecision("zone", "sink-to-quarter", landmark=Vec2(defender.pos.x, los + 12))


def execute_rip_liz(
    defenders: List[Player],
    receivers: List[Player],
    los: float,
    strength: Side,
    config: PatternMatchConfig = DEFAULT_MATCH_CONFIG,
) -> Dict[str, MatchDecision]:
    """Rip/liz match: the apex defender carries a threatening #3, else walls crossers."""
    apex = next((d for d in defenders if d.player_type in (PlayerType.LB, PlayerType.NB)), None)
    if apex is None:
        return {}

    def is_inside(r: Player) -> bool:
        same_side = [o for o in receivers if side_of(o.pos.x) == side_of(r.pos.x)]
        return any(distance_from_center(o.pos.x) > distance_from_center(r.pos.x) for o in same_side)

    third = next((r for r in receivers if r.player_type == PlayerType.RB or is_inside(r)), None)
    if third is not None:
        threatening = abs(third.pos.y - los) > config.apex_threat_depth or abs(third.velocity.y) > 2
        if threatening:
            call = "rip" if strength == Side.RIGHT else "liz"
            return {apex.id: MatchDecision("man", f"{call}-carry-#3", target_id=third.id)}
    return {apex.id: MatchDecision("zone", "wall-crossers", landmark=Vec2(CENTER_X, los + 8))}


def detect_smash_concept(
    receivers: List[Player],
    los: float,
    config: PatternMatchConfig = DEFAULT_MATCH_CONFIG,
) -> bool:
    """High-low on one side: a deep receiver with a 2-6 yard receiver under him."""
    deep = next((r for r in receivers if abs(r.pos.y - los) > config.smash_deep_depth), None)
    shallow = next((r for r in receivers if 2 < abs(r.pos.y - los) < 6), None)
    return bool(deep and shallow and abs(deep.pos.x - shallow.pos.x) < config.smash_lateral)


def distribute_zones(
    defenders: List[Player],
    receivers: List[Player],
    config: PatternMatchConfig = DEFAULT_MATCH_CONFIG,
) -> Dict[str, Vec2]:
    """Zone drop spots, tightened toward a trips side."""
    left = sum(1 for r in receivers if r.pos.x < FIELD_CENTER)
    right = sum(1 for r in receivers if r.pos.x > FIELD_CENTER)
    is_trips = left >= 3 or right >= 3
    strong = Side.RIGHT if right > left else Side.LEFT

    spots: Dict[str, Vec2] = {}
    for defender in defenders:
        resp = defender.responsibility
        if resp is None or not resp.is_zone or resp.zone is None:
            continue
        center = resp.zone.center
        if is_trips:
            if strong == Side.RIGHT and center.x > FIELD_CENTER:
                center = center.shifted(-config.trips_tighten, 0)
            elif strong == Side.LEFT and center.x < FIELD_CENTER:
                center = center.shifted(config.trips_tighten, 0)
        spots[defender.id] = center
    return spots


# =============================================================================
# Route Distribution
# =============================================================================

@dataclass
class RouteDistribution:
    """Routes bucketed by depth plus an overall pattern label."""
    pattern: str  # vertical, horizontal, flood, spacing, mirrored
    deep: List[str] = field(default_factory=list)
    intermediate: List[str] = field(default_factory=list)
    shallow: List[str] = field(default_factory=list)


DEEP_ROUTE_DEPTH = 20.0
INTERMEDIATE_ROUTE_DEPTH = 12.0


def analyze_route_distribution(offense: List[Player]) -> RouteDistribution:
    """Bucket routed receivers by depth and name the pattern."""
    receivers = [p for p in offense if p.is_receiver]
    dist = RouteDistribution(pattern="mirrored")

    for receiver in receivers:
        if receiver.route is None:
            continue
        if receiver.route.depth >= DEEP_ROUTE_DEPTH:
            dist.deep.append(receiver.id)
        elif receiver.route.depth >= INTERMEDIATE_ROUTE_DEPTH:
            dist.intermediate.append(receiver.id)
        else:
            dist.shallow.append(receiver.id)

    dist.pattern = _route_pattern(receivers, dist)
    return dist


def _route_pattern(receivers: List[Player], dist: RouteDistribution) -> str:
    if len(dist.deep) >= 3:
        return "vertical"
    if len(dist.shallow) >= 3 and not dist.deep:
        return "horizontal"

    left = [r for r in receivers if r.pos.x < CENTER_X]
    right = [r for r in receivers if r.pos.x >= CENTER_X]
    if (len(left) >= 3 or len(right) >= 3) and dist.deep and dist.intermediate and dist.shallow:
        return "flood"
    if _evenly_spaced(receivers):
        return "spacing"
    return "mirrored"


def _evenly_spaced(receivers: List[Player]) -> bool:
    if len(receivers) < 3:
        return False
    xs = sorted(r.pos.x for r in receivers)
    gaps = [b - a for a, b in zip(xs, xs[1:])]
    average = sum(gaps) / len(gaps)
    return all(abs(g - average) <= 3 for g in gaps)


# =============================================================================
# Engine
# =============================================================================

# Pure man calls never pattern match
NO_MATCH_COVERAGES = frozenset({CoverageType.COVER_0, CoverageType.COVER_1})



class PatternMatchEngine:
    """Runs every zone defender's match state machine each tick.

    Returns Adjustment deltas; the caller owns the players. Call
    ``reset()`` whenever the coverage, concept or play changes.
    """

    def __init__(self, config: PatternMatchConfig = DEFAULT_MATCH_CONFIG):
        self.config = config
        self._machines: Dict[str, MatchStateMachine] = {}

    def machine_for(self, defender_id: str) -> MatchStateMachine:
        if defender_id not in self._machines:
            self._machines[defender_id] = MatchStateMachine(defender_id)
        return self._machines[defender_id]

    def state_of(self, defender_id: str) -> MatchState:
        machine = self._machines.get(defender_id)
        return machine.state if machine else MatchState.ZONE

    def reset(self) -> None:
        """Drop all in-flight match state."""
        self._machines.clear()

    def update(
        self,
        coverage: CoverageType,
        defenders: List[Player],
        offense: List[Player],
        los: float,
        time: float = 0.0,
    ) -> List[Adjustment]:
        """Advance every zone defender one tick.

        Args:
            coverage: Current coverage call
            defenders: Defender snapshot
            offense: Offensive snapshot
            los: Line of scrimmage
            time: Seconds since the snap

        Returns:
            Adjustments for defenders that are matched or colliding
        """
        if coverage in NO_MATCH_COVERAGES:
            return []

        receivers = {p.id: p for p in offense if p.is_receiver}
        adjustments: List[Adjustment] = []
        quarters = coverage in (CoverageType.COVER_4, CoverageType.QUARTERS)
        # One man-match defender per receiver
        taken: Set[str] = {
            m.target_id for m in self._machines.values()
            if m.state == MatchState.MAN_MATCH and m.target_id is not None
        }

        for defender in defenders:
            resp = defender.responsibility
            machine = self._machines.get(defender.id)
            if machine is None:
                if resp is None or not resp.is_zone or resp.zone is None:
                    continue
                machine = self.machine_for(defender.id)

            if machine.state == MatchState.ZONE:
                self._read_zone(machine, defender, list(receivers.values()), los, time, quarters, taken)

            if machine.state == MatchState.ZONE:
                continue
            target = receivers.get(machine.target_id)
            if target is None:
                continue
            adjustments.append(self._follow(machine, target))

        return adjustments

    def _read_zone(
        self,
        machine: MatchStateMachine,
        defender: Player,
        receivers: List[Player],
        los: float,
        time: float,
        quarters: bool,
        taken: Set[str],
    ) -> None:
        zone = defender.responsibility.zone
        in_zone = [r for r in receivers if r.id not in taken and zone.contains(r.pos)]
        deep = zone.name.startswith("deep")

        if deep and quarters:
            nearest = min(in_zone, key=lambda r: r.pos.distance_to(defender.pos)) if in_zone else None
            decision = execute_quarters_match(defender, nearest, los, self.config)
            if decision.is_man:
                machine.transition_to(MatchState.MAN_MATCH, decision.target_id, decision.assignment, time)
                taken.add(decision.target_id)
            return

        for receiver in in_zone:
            route_class = classify_route(receiver, los, self.config)
            if deep and route_class == RouteClass.VERTICAL:
                machine.transition_to(MatchState.MAN_MATCH, receiver.id, "vertical in zone", time)
                taken.add(receiver.id)
                return
            if not deep and route_class == RouteClass.CROSSING:
                machine.transition_to(MatchState.COLLISION, receiver.id, "crosser in zone", time)
                return

    def _follow(self, machine: MatchStateMachine, target: Player) -> Adjustment:
        if machine.state == MatchState.COLLISION:
            return Adjustment(machine.defender_id, target.pos, technique="collision")

        # Inside and over the top of the matched receiver
        spacing = self.config.match_spacing
        inside = 1.0 if target.pos.x < FIELD_CENTER else -1.0
        spot = Vec2(target.pos.x + inside * spacing, target.pos.y + spacing)
        return Adjustment(
            machine.defender_id,
            spot,
            new_responsibility=CoverageResponsibility.man(target.id),
            technique="match",
        )
