"""Coverage alignment generators - pre-snap defender spots per coverage.

One generator per coverage archetype:

    generate_<coverage>_alignment(offense, defense, los, config, rotation)
        -> Dict[defender_id, Vec2]

Each generator reads the defender's role (set by the personnel matcher)
and installed responsibility, then applies that coverage's depth/width
table. Formation awareness:
- Trips shades the deep defenders 2-4 yards toward the trips side
- Bunch puts the defenders over the bunch in a staggered "box"

Generators never raise. A receiver missing from an expected slot falls
back to a robber/center-field spot, and a defender with no role is left
out of the map (it keeps its current position).
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional

from ..core.entities import (
    CoverageResponsibility,
    DefenderRole,
    Player,
    ResponsibilityType,
    Zone,
)
from ..core.field import (
    CENTER_X,
    FIELD_CENTER,
    Side,
    clamp_x,
    side_of,
    toward_center,
    toward_sideline,
)
from ..core.vec2 import Vec2
from ..plays.coverages import (
    Cover0Config,
    Cover1Config,
    Cover2Config,
    Cover3Config,
    Cover4Config,
    Cover6Config,
    CoverageRotation,
    CoverageType,
    Tampa2Config,
)
from .coverage import install_coverage
from .formation import FormationAnalysis, analyze_formation, receivers_by_alignment


logger = logging.getLogger(__name__)

Positions = Dict[str, Vec2]

ROBBER_DEPTH = 10.0
SPY_DEPTH = 5.0


# =============================================================================
# Shared Context
# =============================================================================

class AlignmentContext:
    """Formation facts and responsibilities shared by one generator call."""

    def __init__(
        self,
        coverage: CoverageType,
        offense: List[Player],
        defense: List[Player],
        los: float,
        analysis: Optional[FormationAnalysis] = None,
    ):
        self.coverage = coverage
        self.offense = offense
        self.defense = defense
        self.los = los
        self.analysis = analysis or analyze_formation(offense)
        self.left = receivers_by_alignment(self.analysis, Side.LEFT)
        self.right = receivers_by_alignment(self.analysis, Side.RIGHT)
        self._players = {p.id: p for p in offense}
        self.responsibilities = self._resolve_responsibilities()

    def _resolve_responsibilities(self) -> Dict[str, CoverageResponsibility]:
        existing = {d.id: d.responsibility for d in self.defense if d.responsibility is not None}
        missing = [d for d in self.defense if d.responsibility is None and d.role is not None]
        if missing:
            installed = install_coverage(self.coverage, self.offense, self.defense, self.los, self.analysis)
            for d in missing:
                if d.id in installed:
                    existing[d.id] = installed[d.id]
        return existing

    # -------------------------------------------------------------------------

    @property
    def strength(self) -> Side:
        return self.analysis.strength

    @property
    def trips_sign(self) -> int:
        """-1 for trips left, +1 for trips right, 0 without trips."""
        if not self.analysis.is_trips:
            return 0
        return self.analysis.trips_side.sign

    def spot(self, x: float, depth: float) -> Vec2:
        return Vec2(clamp_x(x, 1.0), self.los + depth)

    def responsibility(self, defender: Player) -> Optional[CoverageResponsibility]:
        return self.responsibilities.get(defender.id)

    def man_target(self, defender: Player) -> Optional[Player]:
        resp = self.responsibility(defender)
        if resp is None or not resp.is_man or resp.target_id is None:
            return None
        return self._players.get(resp.target_id)

    def zone(self, defender: Player) -> Optional[Zone]:
        resp = self.responsibility(defender)
        if resp is None or not resp.is_zone:
            return None
        return resp.zone

    def is_blitz(self, defender: Player) -> bool:
        resp = self.responsibility(defender)
        return resp is not None and resp.type == ResponsibilityType.BLITZ

    def is_spy(self, defender: Player) -> bool:
        resp = self.responsibility(defender)
        return resp is not None and resp.type == ResponsibilityType.SPY

    def numbered(self, side: Side) -> List[Player]:
        return self.left if side == Side.LEFT else self.right

    def number(self, side: Side, n: int) -> Optional[Player]:
        """The #n receiver on a side, counted outside-in."""
        receivers = self.numbered(side)
        return receivers[n - 1] if len(receivers) >= n else None

    def defender_side(self, defender: Player) -> Side:
        """Side a defender plays: corners by role, zones by landmark."""
        if defender.role == DefenderRole.CB1:
            return Side.LEFT
        if defender.role == DefenderRole.CB2:
            return Side.RIGHT
        zone = self.zone(defender)
        if zone is not None and abs(zone.center.x - FIELD_CENTER) > 0.5:
            return side_of(zone.center.x)
        target = self.man_target(defender)
        if target is not None:
            return side_of(target.pos.x)
        return side_of(defender.pos.x)

    def robber_spot(self) -> Vec2:
        """Default for a defender with nobody to align on."""
        return self.spot(CENTER_X, ROBBER_DEPTH)


def _pick(pair, side: Side) -> float:
    """Left or right value of a (left, right) config pair."""
    return pair[0] if side == Side.LEFT else pair[1]


def _zone_spot(ctx: AlignmentContext, zone: Zone, depth: Optional[float] = None) -> Vec2:
    return ctx.spot(zone.center.x, zone.depth if depth is None else depth)


def _generic_spot(ctx: AlignmentContext, defender: Player) -> Vec2:
    """Spot for a role the coverage table does not call out."""
    target = ctx.man_target(defender)
    if target is not None:
        return ctx.spot(toward_center(target.pos.x, 1.0), 5.0)
    zone = ctx.zone(defender)
    if zone is not None:
        return _zone_spot(ctx, zone)
    if ctx.is_spy(defender):
        return ctx.spot(CENTER_X, SPY_DEPTH)
    if ctx.is_blitz(defender):
        return ctx.spot(toward_center(defender.pos.x, 2.0), 2.0)
    return ctx.robber_spot()


def _bunch_box(
    ctx: AlignmentContext,
    defenders: List[Player],
    base_x: float,
    spacing: float,
    base_depth: float,
    stagger: Callable[[int], float],
) -> Positions:
    """Stack defenders over a bunch, stepping toward the middle."""
    side = ctx.analysis.receiver_sets.bunch_side
    step = spacing if side == Side.LEFT else -spacing
    positions: Positions = {}
    for i, defender in enumerate(defenders):
        positions[defender.id] = ctx.spot(base_x + step * i, base_depth + stagger(i))
    return positions


def _bunch_defenders(ctx: AlignmentContext, defenders: List[Player]) -> List[Player]:
    """Defenders whose man target is in the bunch, outside-in."""
    if not ctx.analysis.is_bunch:
        return []
    bunch_ids = {p.id for p in ctx.numbered(ctx.analysis.receiver_sets.bunch_side)}
    matched = [
        d for d in defenders
        if ctx.man_target(d) is not None and ctx.man_target(d).id in bunch_ids
    ]
    sign = ctx.analysis.receiver_sets.bunch_side.sign
    return sorted(matched, key=lambda d: -sign * ctx.man_target(d).pos.x)


# =============================================================================
# Cover 0
# =============================================================================

def generate_cover0_alignment(
    offense: List[Player],
    defense: List[Player],
    los: float,
    config: Cover0Config = Cover0Config(),
    rotation: Optional[CoverageRotation] = None,
    analysis: Optional[FormationAnalysis] = None,
) -> Positions:
    """Cover 0: press every man target, send the rest.

    Man defenders press at ``press_depth`` over their receiver; against a
    bunch they box up with staggered depth. Linebacker blitzers start in
    the A gap, DB blitzers in the blitz lanes.
    """
    ctx = AlignmentContext(CoverageType.COVER_0, offense, defense, los, analysis)
    positions: Positions = {}

    box = _bunch_defenders(ctx, defense)
    if box:
        base_x = _pick(config.bunch_box_x, ctx.analysis.receiver_sets.bunch_side)
        positions.update(_bunch_box(ctx, box, base_x, config.bunch_box_spacing,
                                    config.bunch_box_depth, lambda i: float(i)))

    lane = 0
    lb_blitzers = 0
    for defender in defense:
        if defender.role is None or defender.id in positions:
            continue
        target = ctx.man_target(defender)
        if target is not None:
            positions[defender.id] = ctx.spot(target.pos.x, config.press_depth)
        elif ctx.is_blitz(defender):
            if defender.role.is_linebacker and lb_blitzers == 0:
                positions[defender.id] = ctx.spot(CENTER_X, config.lb_blitz_depth)
                lb_blitzers += 1
            else:
                positions[defender.id] = ctx.spot(config.blitz_lanes[lane % 2], config.blitz_depth)
                lane += 1
        else:
            positions[defender.id] = _generic_spot(ctx, defender)

    return positions


# =============================================================================
# Cover 1
# =============================================================================

def generate_cover1_alignment(
    offense: List[Player],
    defense: List[Player],
    los: float,
    config: Cover1Config = Cover1Config(),
    rotation: Optional[CoverageRotation] = None,
    analysis: Optional[FormationAnalysis] = None,
) -> Positions:
    """Cover 1: off-man corners with leverage, single-high free safety.

    Corners play inside leverage when their receiver is tight to the
    sideline, outside leverage otherwise. The strong safety walls #2 to
    the strength; with no #2 he drops to the robber spot.
    """
    ctx = AlignmentContext(CoverageType.COVER_1, offense, defense, los, analysis)
    positions: Positions = {}

    for defender in defense:
        role = defender.role
        if role is None:
            continue
        target = ctx.man_target(defender)

        if role.is_corner:
            side = ctx.defender_side(defender)
            if target is None:
                positions[defender.id] = ctx.spot(8.0 if side == Side.LEFT else 45.33, config.corner_depth)
                continue
            sideline_gap = min(target.pos.x, 53.33 - target.pos.x)
            if sideline_gap < config.sideline_leverage_limit:
                x = toward_center(target.pos.x, config.leverage_shade)
            else:
                x = toward_sideline(target.pos.x, config.leverage_shade)
            positions[defender.id] = ctx.spot(x, config.corner_depth)

        elif role == DefenderRole.FS and target is None:
            x = CENTER_X + ctx.trips_sign * config.fs_trips_shade
            positions[defender.id] = ctx.spot(x, config.fs_depth)

        elif role == DefenderRole.SS:
            if target is not None:
                x = toward_center(target.pos.x, config.ss_slot_offset)
                positions[defender.id] = ctx.spot(x, config.ss_depth)
            else:
                positions[defender.id] = ctx.robber_spot()

        elif role.is_nickel and target is not None:
            positions[defender.id] = ctx.spot(toward_center(target.pos.x, 1.0), config.lb_depth)

        elif role.is_linebacker:
            if target is not None:
                positions[defender.id] = ctx.spot(target.pos.x, config.lb_depth)
            elif ctx.is_spy(defender):
                positions[defender.id] = ctx.spot(CENTER_X, config.lb_depth)
            elif ctx.zone(defender) is not None:
                # Robber sits in the throwing lane to the strength
                if ctx.strength == Side.BALANCED:
                    x = CENTER_X
                else:
                    x = _pick(config.robber_lanes, ctx.strength)
                positions[defender.id] = ctx.spot(x, config.robber_depth)
            else:
                positions[defender.id] = _generic_spot(ctx, defender)

        else:
            positions[defender.id] = _generic_spot(ctx, defender)

    return positions


# =============================================================================
# Cover 2
# =============================================================================

def generate_cover2_alignment(
    offense: List[Player],
    defense: List[Player],
    los: float,
    config: Cover2Config = Cover2Config(),
    rotation: Optional[CoverageRotation] = None,
    analysis: Optional[FormationAnalysis] = None,
) -> Positions:
    """Cover 2: two deep halves at 15-18 yards, five underneath.

    Safeties split ``safety_split`` yards either side of center and shade
    toward trips. Corners press over a lone #1, bail to 5 yards vs twins
    and to 7 yards vs trips to their side.
    """
    ctx = AlignmentContext(CoverageType.COVER_2, offense, defense, los, analysis)
    positions: Positions = {}
    safety_depth = min(max(config.safety_depth, 15.0), config.safety_max_depth)

    for defender in defense:
        role = defender.role
        if role is None:
            continue

        if role.is_corner:
            side = ctx.defender_side(defender)
            count = len(ctx.numbered(side))
            if count >= 3:
                depth = config.bail_depth_max
            elif count == 2:
                depth = config.bail_depth_min
            else:
                depth = config.press_depth
            wide = ctx.number(side, 1)
            x = toward_sideline(wide.pos.x, 1.0) if wide else _pick(config.corner_x, side)
            positions[defender.id] = ctx.spot(x, depth)

        elif role.is_safety and _is_deep(ctx, defender):
            side = ctx.defender_side(defender)
            x = CENTER_X + side.sign * config.safety_split + ctx.trips_sign * config.trips_shade
            positions[defender.id] = ctx.spot(x, safety_depth)

        elif ctx.zone(defender) is not None:
            zone = ctx.zone(defender)
            depth = config.hook_depth if zone.name.startswith("hook") else config.curl_flat_depth
            positions[defender.id] = _zone_spot(ctx, zone, depth)

        else:
            positions[defender.id] = _generic_spot(ctx, defender)

    return positions


def _is_deep(ctx: AlignmentContext, defender: Player) -> bool:
    zone = ctx.zone(defender)
    return zone is not None and zone.name.startswith("deep")


# =============================================================================
# Cover 3
# =============================================================================

def generate_cover3_alignment(
    offense: List[Player],
    defense: List[Player],
    los: float,
    config: Cover3Config = Cover3Config(),
    rotation: Optional[CoverageRotation] = None,
    analysis: Optional[FormationAnalysis] = None,
) -> Positions:
    """Cover 3: corners and free safety in thirds, four underneath.

    The free safety shades ``trips_fs_shade`` yards toward trips. Rotation
    moves the strong safety (sky: curl-flat, buzz: hook, cloud: deep
    third behind a squatting corner).
    """
    ctx = AlignmentContext(CoverageType.COVER_3, offense, defense, los, analysis)
    rotation = rotation or CoverageRotation.NONE
    strong = ctx.strength if ctx.strength != Side.BALANCED else Side.RIGHT
    positions: Positions = {}

    for defender in defense:
        role = defender.role
        if role is None:
            continue

        if role.is_corner:
            side = ctx.defender_side(defender)
            if rotation == CoverageRotation.CLOUD and side == strong:
                wide = ctx.number(side, 1)
                x = toward_sideline(wide.pos.x, 1.0) if wide else _pick(config.corner_x, side)
                positions[defender.id] = ctx.spot(x, config.cloud_corner_depth)
            else:
                positions[defender.id] = ctx.spot(_pick(config.corner_x, side), config.corner_depth)

        elif role == DefenderRole.FS:
            x = CENTER_X + ctx.trips_sign * config.trips_fs_shade
            positions[defender.id] = ctx.spot(x, config.fs_depth)

        elif role == DefenderRole.SS:
            if rotation == CoverageRotation.SKY:
                positions[defender.id] = ctx.spot(_pick(config.sky_safety_x, strong), config.sky_safety_depth)
            elif rotation == CoverageRotation.BUZZ:
                hook_x = toward_center(_pick(config.sky_safety_x, strong), 8.0)
                positions[defender.id] = ctx.spot(hook_x, config.buzz_depth)
            elif rotation == CoverageRotation.CLOUD:
                third_x = CENTER_X + strong.sign * config.third_width
                positions[defender.id] = ctx.spot(third_x, config.rotated_deep_depth)
            else:
                zone = ctx.zone(defender)
                x = zone.center.x if zone else _pick(config.sky_safety_x, strong)
                positions[defender.id] = ctx.spot(x, config.curl_flat_depth)

        elif ctx.zone(defender) is not None:
            zone = ctx.zone(defender)
            if zone.name.startswith("hook"):
                depth = config.hook_depth_min if zone.name == "hook_middle" else config.hook_depth_max
            else:
                depth = config.curl_flat_depth
            positions[defender.id] = _zone_spot(ctx, zone, depth)

        else:
            positions[defender.id] = _generic_spot(ctx, defender)

    return positions


# =============================================================================
# Cover 4 / Quarters
# =============================================================================

def generate_cover4_alignment(
    offense: List[Player],
    defense: List[Player],
    los: float,
    config: Cover4Config = Cover4Config(),
    rotation: Optional[CoverageRotation] = None,
    analysis: Optional[FormationAnalysis] = None,
) -> Positions:
    """Cover 4: four deep quarters at 12 yards, three underneath.

    Safeties shade ``trips_shade`` toward trips. Against a bunch the
    underneath defenders to that side box the bunch with staggered depth.
    """
    ctx = AlignmentContext(CoverageType.COVER_4, offense, defense, los, analysis)
    positions: Positions = {}

    if ctx.analysis.is_bunch:
        bunch_side = ctx.analysis.receiver_sets.bunch_side
        under = [
            d for d in defense
            if d.role is not None and not d.role.is_corner and not d.role.is_safety
            and ctx.defender_side(d) == bunch_side
        ][:3]
        positions.update(_bunch_box(
            ctx, under, _pick(config.box_x, bunch_side), config.box_spacing,
            config.box_depth, lambda i: (i % 2) * config.box_stagger,
        ))

    lb_slots = {DefenderRole.SAM: 0, DefenderRole.MIKE: 1, DefenderRole.WILL: 2}
    for defender in defense:
        role = defender.role
        if role is None or defender.id in positions:
            continue

        if role.is_corner:
            side = ctx.defender_side(defender)
            x = _pick(config.corner_x, side)
            if side.sign == ctx.trips_sign:
                x = toward_center(x, 1.0)
            positions[defender.id] = ctx.spot(x, config.corner_depth)

        elif role.is_safety:
            side = ctx.defender_side(defender)
            x = _pick(config.safety_x, side) + ctx.trips_sign * config.trips_shade
            positions[defender.id] = ctx.spot(x, config.safety_depth)

        elif role in lb_slots:
            i = lb_slots[role]
            positions[defender.id] = ctx.spot(config.lb_x[i], config.lb_depths[i])

        else:
            positions[defender.id] = _generic_spot(ctx, defender)

    return positions


# =============================================================================
# Cover 6
# =============================================================================

def generate_cover6_alignment(
    offense: List[Player],
    defense: List[Player],
    los: float,
    config: Cover6Config = Cover6Config(),
    rotation: Optional[CoverageRotation] = None,
    analysis: Optional[FormationAnalysis] = None,
) -> Positions:
    """Cover 6: quarters to the strength, Cover 2 to the weak side.

    The free safety always plays the quarters side and the strong safety
    the half side. Balanced formations play quarters to the left.
    """
    ctx = AlignmentContext(CoverageType.COVER_6, offense, defense, los, analysis)
    quarters_side = ctx.strength if ctx.strength != Side.BALANCED else Side.LEFT
    half_side = quarters_side.opposite
    positions: Positions = {}

    lb_slots = {DefenderRole.SAM: 0, DefenderRole.MIKE: 1, DefenderRole.WILL: 2}
    for defender in defense:
        role = defender.role
        if role is None:
            continue

        if role.is_corner:
            side = ctx.defender_side(defender)
            depth = config.field_corner_depth if side == quarters_side else config.boundary_corner_depth
            positions[defender.id] = ctx.spot(_pick(config.field_corner_x, side), depth)

        elif role == DefenderRole.FS:
            positions[defender.id] = ctx.spot(
                _pick(config.field_safety_x, quarters_side), config.field_safety_depth)

        elif role == DefenderRole.SS:
            positions[defender.id] = ctx.spot(
                _pick(config.boundary_safety_x, half_side), config.boundary_safety_depth)

        elif role in lb_slots:
            i = lb_slots[role]
            positions[defender.id] = ctx.spot(config.lb_x[i], config.lb_depths[i])

        else:
            positions[defender.id] = _generic_spot(ctx, defender)

    return positions


# =============================================================================
# Tampa 2
# =============================================================================

def tampa2_mike_depth(elapsed: float, config: Tampa2Config = Tampa2Config()) -> float:
    """Mike depth off the LOS ``elapsed`` seconds after the snap.

    Linear from ``mike_start_depth`` to ``mike_end_depth`` over
    ``mike_drop_time``; holds at the end depth afterwards.
    """
    if elapsed <= 0:
        return config.mike_start_depth
    if elapsed >= config.mike_drop_time:
        return config.mike_end_depth
    progress = elapsed / config.mike_drop_time
    return config.mike_start_depth + (config.mike_end_depth - config.mike_start_depth) * progress


def generate_tampa2_alignment(
    offense: List[Player],
    defense: List[Player],
    los: float,
    config: Tampa2Config = Tampa2Config(),
    rotation: Optional[CoverageRotation] = None,
    analysis: Optional[FormationAnalysis] = None,
) -> Positions:
    """Tampa 2: jam corners, two-deep safeties, Mike aligned to run the pole.

    Whoever holds the deep-middle zone (the Mike, or the first nickel when
    there is no Mike) starts at ``mike_start_depth`` over the ball.
    """
    ctx = AlignmentContext(CoverageType.TAMPA_2, offense, defense, los, analysis)
    positions: Positions = {}

    for defender in defense:
        role = defender.role
        if role is None:
            continue
        zone = ctx.zone(defender)

        if zone is not None and zone.name == "deep_middle":
            positions[defender.id] = ctx.spot(CENTER_X, config.mike_start_depth)

        elif role.is_corner:
            side = ctx.defender_side(defender)
            wide = ctx.number(side, 1)
            x = toward_sideline(wide.pos.x, 1.0) if wide else _pick(config.corner_x, side)
            positions[defender.id] = ctx.spot(x, config.jam_depth)

        elif role.is_safety:
            side = ctx.defender_side(defender)
            x = _pick(config.safety_x, side) + ctx.trips_sign * config.trips_shade
            positions[defender.id] = ctx.spot(x, config.safety_depth)

        elif role in (DefenderRole.SAM, DefenderRole.WILL):
            side = Side.LEFT if role == DefenderRole.SAM else Side.RIGHT
            positions[defender.id] = ctx.spot(_pick(config.wall_x, side), config.wall_depth)

        elif role.is_nickel and zone is not None:
            positions[defender.id] = _zone_spot(ctx, zone, config.nickel_depth)

        else:
            positions[defender.id] = _generic_spot(ctx, defender)

    return positions


# =============================================================================
# Dispatcher
# =============================================================================

ALIGNMENT_GENERATORS: Dict[CoverageType, Callable[..., Positions]] = {
    CoverageType.COVER_0: generate_cover0_alignment,
    CoverageType.COVER_1: generate_cover1_alignment,
    CoverageType.COVER_2: generate_cover2_alignment,
    CoverageType.COVER_3: generate_cover3_alignment,
    CoverageType.COVER_4: generate_cover4_alignment,
    CoverageType.QUARTERS: generate_cover4_alignment,
    CoverageType.COVER_6: generate_cover6_alignment,
    CoverageType.TAMPA_2: generate_tampa2_alignment,
}


def generate_alignment(
    coverage: CoverageType,
    offense: List[Player],
    defense: List[Player],
    los: float,
    config=None,
    rotation: Optional[CoverageRotation] = None,
) -> Positions:
    """Run the generator for a coverage.

    Args:
        coverage: Coverage call
        offense: Offensive snapshot
        defense: Role-tagged defenders
        los: Line of scrimmage
        config: Coverage config override (the generator default if None)
        rotation: Pre-snap rotation (single-high coverages)
    """
    generator = ALIGNMENT_GENERATORS[coverage]
    kwargs = {"rotation": rotation}
    if config is not None:
        kwargs["config"] = config
    positions = generator(offense, defense, los, **kwargs)
    logger.debug("%s alignment: %d defenders placed", coverage.value, len(positions))
    return positions
