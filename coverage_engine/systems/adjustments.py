"""Coverage-specific formation adjustments.

After the base alignment, each coverage has its own checks against the
formation (trips, bunch, 2x2, heavy). These produce Adjustment deltas:

    apply_coverage_specific_adjustments(coverage, defenders, offense,
                                        formation, los) -> List[Adjustment]

Nothing here mutates a player. Later adjustments for the same defender
supersede earlier ones when the engine applies the batch.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional

from ..core.entities import (
    Adjustment,
    CoverageResponsibility,
    DefenderRole,
    Leverage,
    Player,
    PlayerType,
    ResponsibilityType,
)
from ..core.field import CENTER_X, FIELD_CENTER, Side, clamp_x, side_of, toward_center, toward_sideline
from ..core.vec2 import Vec2
from ..plays.coverages import (
    Cover0Config,
    Cover1Config,
    Cover2Config,
    Cover3Config,
    Cover4Config,
    CoverageRotation,
    CoverageType,
)
from .alignment import generate_cover6_alignment, generate_tampa2_alignment
from .formation import FormationAnalysis, FormationType, receivers_by_alignment


logger = logging.getLogger(__name__)

AdjustmentFn = Callable[[List[Player], List[Player], FormationAnalysis, float], List[Adjustment]]


# =============================================================================
# Helpers
# =============================================================================

def _spot(x: float, los: float, depth: float) -> Vec2:
    return Vec2(clamp_x(x, 1.0), los + depth)


def _with_role(defenders: List[Player], *roles: DefenderRole) -> List[Player]:
    return [d for d in defenders if d.role in roles]


def _first(defenders: List[Player], role: DefenderRole) -> Optional[Player]:
    return next((d for d in defenders if d.role == role), None)


def _corners(defenders: List[Player]) -> List[Player]:
    return [d for d in defenders if d.role is not None and d.role.is_corner]


def _safeties(defenders: List[Player]) -> List[Player]:
    return [d for d in defenders if d.role is not None and d.role.is_safety]


def _linebackers(defenders: List[Player]) -> List[Player]:
    return [d for d in defenders if d.role is not None and d.role.is_linebacker]


def _corner_on(defenders: List[Player], side: Side) -> Optional[Player]:
    role = DefenderRole.CB1 if side == Side.LEFT else DefenderRole.CB2
    return _first(defenders, role)


def _man_target(defender: Player, offense: List[Player]) -> Optional[Player]:
    resp = defender.responsibility
    if resp is None or not resp.is_man:
        return None
    return next((p for p in offense if p.id == resp.target_id), None)


def _strong(formation: FormationAnalysis) -> Side:
    return formation.strength if formation.strength != Side.BALANCED else Side.RIGHT


def _bunch_side(formation: FormationAnalysis) -> Optional[Side]:
    return formation.receiver_sets.bunch_side if formation.is_bunch else None


# =============================================================================
# Cover 0
# =============================================================================

def adjust_cover0(
    defenders: List[Player],
    offense: List[Player],
    formation: FormationAnalysis,
    los: float,
    config: Cover0Config = Cover0Config(),
) -> List[Adjustment]:
    """Press every man defender, set blitz lanes, box a bunch, green-dog the backs."""
    adjustments: List[Adjustment] = []

    lane = 0
    for defender in defenders:
        target = _man_target(defender, offense)
        if target is not None:
            adjustments.append(Adjustment(
                defender.id, _spot(target.pos.x, los, config.press_depth),
                leverage=Leverage.HEAD_UP, technique="press",
            ))
        elif defender.responsibility is not None and defender.responsibility.type == ResponsibilityType.BLITZ:
            adjustments.append(Adjustment(
                defender.id, _spot(config.blitz_lanes[lane % 2], los, config.blitz_depth),
                technique="blitz",
            ))
            lane += 1

    if formation.is_trips:
        nickel = _first(defenders, DefenderRole.NB1)
        if nickel is not None:
            x = config.trips_nickel_x[0] if formation.trips_side == Side.LEFT else config.trips_nickel_x[1]
            adjustments.append(Adjustment(
                nickel.id, _spot(x, los, config.trips_nickel_depth), technique="press",
            ))

    bunch_side = _bunch_side(formation)
    if bunch_side is not None:
        bunch_ids = {p.id for p in receivers_by_alignment(formation, bunch_side)}
        boxed = [d for d in defenders if d.responsibility is not None and d.responsibility.target_id in bunch_ids]
        base_x = config.bunch_box_x[0] if bunch_side == Side.LEFT else config.bunch_box_x[1]
        step = config.bunch_box_spacing if bunch_side == Side.LEFT else -config.bunch_box_spacing
        for i, defender in enumerate(boxed):
            adjustments.append(Adjustment(
                defender.id, _spot(base_x + step * i, los, config.bunch_box_depth + i),
                technique="box",
            ))

    # Green dog: a linebacker on a back rushes if the back stays in
    backs = [p for p in offense if p.player_type.is_back and p.is_eligible]
    covered = {
        d.responsibility.target_id for d in defenders
        if d.responsibility is not None and d.responsibility.is_man
    }
    for lb, back in zip(_linebackers(defenders), backs):
        current = lb.responsibility
        owns_back = current is not None and current.is_man and current.target_id == back.id
        if not owns_back and back.id in covered:
            continue
        adjustments.append(Adjustment(
            lb.id, _spot(back.pos.x, los, config.green_dog_depth),
            new_responsibility=CoverageResponsibility.man(back.id),
            technique="green-dog",
        ))
        covered.add(back.id)

    return adjustments


# =============================================================================
# Cover 1
# =============================================================================

def adjust_cover1(
    defenders: List[Player],
    offense: List[Player],
    formation: FormationAnalysis,
    los: float,
    config: Cover1Config = Cover1Config(),
) -> List[Adjustment]:
    """Center-field FS, robber, bunch jump and off-man corners."""
    adjustments: List[Adjustment] = []

    fs = _first(defenders, DefenderRole.FS)
    if fs is not None and (fs.responsibility is None or not fs.responsibility.is_man):
        shade = 0.0
        if formation.is_trips:
            shade = formation.trips_side.sign * config.fs_trips_shade
        adjustments.append(Adjustment(
            fs.id, _spot(CENTER_X + shade, los, config.fs_depth), technique="center-field",
        ))

    if formation.strength == Side.LEFT:
        lane = config.robber_lanes[0]
    elif formation.strength == Side.RIGHT:
        lane = config.robber_lanes[1]
    else:
        lane = CENTER_X
    robbers = [
        d for d in defenders
        if d.role is not None and d.role != DefenderRole.FS
        and d.responsibility is not None and d.responsibility.is_zone
    ]
    for i, robber in enumerate(robbers):
        # Extra robbers alternate either side of the lane
        offset = (i + 1) // 2 * config.robber_spacing
        x = lane + offset if i % 2 else lane - offset
        adjustments.append(Adjustment(
            robber.id, _spot(x, los, config.robber_depth),
            leverage=Leverage.INSIDE, technique="robber",
        ))

    bunch_side = _bunch_side(formation)
    if bunch_side is not None and fs is not None:
        corner = _corner_on(defenders, bunch_side)
        if corner is not None:
            x = toward_center(corner.pos.x, config.bunch_jump_offset)
            adjustments.append(Adjustment(fs.id, _spot(x, los, config.bunch_jump_depth), technique="deep-help"))

    for corner in _corners(defenders):
        target = _man_target(corner, offense)
        x = toward_sideline(target.pos.x, 1.0) if target else corner.pos.x
        adjustments.append(Adjustment(
            corner.id, _spot(x, los, config.corner_depth),
            leverage=Leverage.OUTSIDE, technique="off-man",
        ))

    return adjustments


# =============================================================================
# Cover 2
# =============================================================================

def adjust_cover2(
    defenders: List[Player],
    offense: List[Player],
    formation: FormationAnalysis,
    los: float,
    config: Cover2Config = Cover2Config(),
) -> List[Adjustment]:
    """Deep halves, palms vs 2x2, hard corners, hook and seam-hook droppers."""
    adjustments: List[Adjustment] = []
    strong = _strong(formation)
    weak = strong.opposite

    halves = {DefenderRole.FS: weak, DefenderRole.SS: strong}
    for safety in _safeties(defenders):
        side = halves.get(safety.role, strong)
        x = config.deep_half_x[0] if side == Side.LEFT else config.deep_half_x[1]
        adjustments.append(Adjustment(
            safety.id, _spot(x, los, config.safety_depth), technique="deep-half",
        ))

    two_by_two = len(formation.receivers_left) == 2 and len(formation.receivers_right) == 2
    for corner in _corners(defenders):
        side = Side.LEFT if corner.role == DefenderRole.CB1 else Side.RIGHT
        numbered = receivers_by_alignment(formation, side)
        x = toward_sideline(numbered[0].pos.x, 1.0) if numbered else corner.pos.x
        adjustments.append(Adjustment(
            corner.id, _spot(x, los, config.hard_corner_depth),
            leverage=Leverage.OUTSIDE,
            technique="palms-read" if two_by_two else "hard-press",
        ))

    for lb in _linebackers(defenders):
        if abs(lb.pos.x - FIELD_CENTER) < 3 or lb.role == DefenderRole.MIKE:
            adjustments.append(Adjustment(
                lb.id, _spot(CENTER_X, los, config.seam_hook_depth), technique="hook",
            ))
        else:
            side = side_of(lb.pos.x)
            x = config.seam_hook_x[0] if side == Side.LEFT else config.seam_hook_x[1]
            adjustments.append(Adjustment(
                lb.id, _spot(x, los, config.seam_hook_depth), technique="seam-hook",
            ))

    return adjustments


# =============================================================================
# Cover 3
# =============================================================================

def determine_cover3_rotation(formation: FormationAnalysis) -> CoverageRotation:
    """Sky to trips, cloud against heavy personnel, otherwise none."""
    if formation.is_trips:
        return CoverageRotation.SKY
    if formation.formation_type == FormationType.HEAVY or formation.receiver_sets.is_heavy:
        return CoverageRotation.CLOUD
    return CoverageRotation.NONE


def adjust_cover3(
    defenders: List[Player],
    offense: List[Player],
    formation: FormationAnalysis,
    los: float,
    config: Cover3Config = Cover3Config(),
) -> List[Adjustment]:
    """Bail corners, middle-third FS, rotation, and the trips cone."""
    adjustments: List[Adjustment] = []
    strong = _strong(formation)
    fs = _first(defenders, DefenderRole.FS)
    ss = _first(defenders, DefenderRole.SS)

    if fs is not None:
        adjustments.append(Adjustment(
            fs.id, _spot(CENTER_X, los, config.rotated_deep_depth), technique="deep-middle",
        ))
    for corner in _corners(defenders):
        side = Side.LEFT if corner.role == DefenderRole.CB1 else Side.RIGHT
        x = config.bail_corner_x[0] if side == Side.LEFT else config.bail_corner_x[1]
        adjustments.append(Adjustment(
            corner.id, _spot(x, los, config.bail_corner_depth),
            leverage=Leverage.OUTSIDE, technique="bail",
        ))

    rotation = determine_cover3_rotation(formation)
    if rotation == CoverageRotation.SKY and ss is not None:
        x = config.sky_safety_x[0] if strong == Side.LEFT else config.sky_safety_x[1]
        adjustments.append(Adjustment(ss.id, _spot(x, los, config.sky_safety_depth), technique="sky"))
    elif rotation == CoverageRotation.CLOUD:
        for corner in _corners(defenders):
            adjustments.append(Adjustment(
                corner.id, _spot(corner.pos.x, los, config.cloud_corner_depth),
                technique="cloud-press-bail",
            ))

    if formation.is_trips:
        trips = formation.trips_side
        if ss is not None:
            x = config.trips_ss_x[0] if trips == Side.LEFT else config.trips_ss_x[1]
            adjustments.append(Adjustment(
                ss.id, _spot(x, los, config.trips_ss_depth), technique="deep-third-trips",
            ))
        weak_corner = _corner_on(defenders, trips.opposite)
        if weak_corner is not None:
            base = config.bail_corner_x[1] if trips == Side.LEFT else config.bail_corner_x[0]
            x = toward_sideline(base, config.cone_offset)
            adjustments.append(Adjustment(
                weak_corner.id, _spot(x, los, config.cone_depth),
                leverage=Leverage.OUTSIDE, technique="cone",
            ))
        if fs is not None:
            x = CENTER_X + trips.sign * config.trips_fs_shade
            adjustments.append(Adjustment(
                fs.id, _spot(x, los, config.trips_fs_depth), technique="deep-middle-trips",
            ))

    return adjustments


# =============================================================================
# Cover 4
# =============================================================================

def adjust_cover4(
    defenders: List[Player],
    offense: List[Player],
    formation: FormationAnalysis,
    los: float,
    config: Cover4Config = Cover4Config(),
) -> List[Adjustment]:
    """2-read safeties, MOD corners, trix/solo/stubbie vs 3x1, box vs bunch."""
    adjustments: List[Adjustment] = []

    for safety in _safeties(defenders):
        side = Side.LEFT if safety.role == DefenderRole.FS else Side.RIGHT
        x = config.two_read_x[0] if side == Side.LEFT else config.two_read_x[1]
        adjustments.append(Adjustment(safety.id, _spot(x, los, config.safety_depth), technique="2-read"))

    for corner in _corners(defenders):
        adjustments.append(Adjustment(
            corner.id, _spot(corner.pos.x, los, config.mod_corner_depth),
            leverage=Leverage.OUTSIDE, technique="MOD",
        ))

    if formation.is_trips:
        trips = formation.trips_side
        backside = trips.opposite
        backside_safety = _first(defenders, DefenderRole.SS if backside == Side.RIGHT else DefenderRole.FS)
        if backside_safety is not None:
            adjustments.append(Adjustment(
                backside_safety.id, _spot(CENTER_X, los, config.safety_depth), technique="trix",
            ))
        backside_corner = _corner_on(defenders, backside)
        if backside_corner is not None:
            x = config.solo_corner_x[1] if trips == Side.LEFT else config.solo_corner_x[0]
            adjustments.append(Adjustment(
                backside_corner.id, _spot(x, los, config.solo_corner_depth),
                leverage=Leverage.OUTSIDE, technique="solo",
            ))
        trips_corner = _corner_on(defenders, trips)
        if trips_corner is not None:
            adjustments.append(Adjustment(
                trips_corner.id, _spot(trips_corner.pos.x, los, config.mod_corner_depth),
                technique="stubbie",
            ))

    bunch_side = _bunch_side(formation)
    if bunch_side is not None:
        boxed = [
            d for d in defenders
            if d.player_type in (PlayerType.CB, PlayerType.S, PlayerType.NB)
            and side_of(d.pos.x) == bunch_side
        ][:4]
        base_x = config.box_x[0] if bunch_side == Side.LEFT else config.box_x[1]
        step = config.box_spacing if bunch_side == Side.LEFT else -config.box_spacing
        for i, defender in enumerate(boxed):
            adjustments.append(Adjustment(
                defender.id,
                _spot(base_x + step * i, los, config.box_depth + (i % 2) * config.box_stagger),
                technique="box-4",
            ))

    return adjustments


# =============================================================================
# Cover 6 / Tampa 2
# =============================================================================

def adjust_cover6(
    defenders: List[Player],
    offense: List[Player],
    formation: FormationAnalysis,
    los: float,
) -> List[Adjustment]:
    """Split-field: quarters to the strength, hard corner and half to the boundary."""
    positions = generate_cover6_alignment(offense, defenders, los, analysis=formation)
    quarters_side = formation.strength if formation.strength != Side.BALANCED else Side.LEFT

    adjustments = []
    for defender in defenders:
        if defender.id not in positions:
            continue
        role = defender.role
        if role.is_corner:
            side = Side.LEFT if role == DefenderRole.CB1 else Side.RIGHT
            technique = "pattern-match-quarter" if side == quarters_side else "press-funnel"
        elif role == DefenderRole.FS:
            technique = "pattern-match-quarter"
        elif role == DefenderRole.SS:
            technique = "deep-half"
        elif role == DefenderRole.MIKE:
            technique = "middle-hook-wall"
        else:
            technique = None
        adjustments.append(Adjustment(defender.id, positions[defender.id], technique=technique))
    return adjustments


def adjust_tampa2(
    defenders: List[Player],
    offense: List[Player],
    formation: FormationAnalysis,
    los: float,
) -> List[Adjustment]:
    """Mike pole runner, deep outside halves, hard-jam corners, OLB walls."""
    positions = generate_tampa2_alignment(offense, defenders, los, analysis=formation)
    techniques: Dict[DefenderRole, str] = {
        DefenderRole.MIKE: "tampa-2-mike",
        DefenderRole.FS: "deep-outside-half",
        DefenderRole.SS: "deep-outside-half",
        DefenderRole.CB1: "hard-jam",
        DefenderRole.CB2: "hard-jam",
        DefenderRole.SAM: "wall",
        DefenderRole.WILL: "wall",
    }
    adjustments = []
    for defender in defenders:
        if defender.id not in positions:
            continue
        leverage = Leverage.OUTSIDE if defender.role.is_corner else None
        adjustments.append(Adjustment(
            defender.id, positions[defender.id],
            leverage=leverage, technique=techniques.get(defender.role),
        ))
    return adjustments


# =============================================================================
# Dispatcher
# =============================================================================

COVERAGE_ADJUSTMENTS: Dict[CoverageType, AdjustmentFn] = {
    CoverageType.COVER_0: adjust_cover0,
    CoverageType.COVER_1: adjust_cover1,
    CoverageType.COVER_2: adjust_cover2,
    CoverageType.COVER_3: adjust_cover3,
    CoverageType.COVER_4: adjust_cover4,
    CoverageType.QUARTERS: adjust_cover4,
    CoverageType.COVER_6: adjust_cover6,
    CoverageType.TAMPA_2: adjust_tampa2,
}


def apply_coverage_specific_adjustments(
    coverage: CoverageType,
    defenders: List[Player],
    offense: List[Player],
    formation: FormationAnalysis,
    los: float,
) -> List[Adjustment]:
    """Formation adjustments for a coverage call.

    Returns:
        Adjustment deltas; nothing is mutated
    """
    adjustments = COVERAGE_ADJUSTMENTS[coverage](defenders, offense, formation, los)
    logger.debug("%s: %d formation adjustments", coverage.value, len(adjustments))
    return adjustments
