"""Motion Response Coordinator - defensive reaction to pre-snap motion.

A pure lookup decides how a coverage answers a motion type; each answer
is a deterministic delta function returning Adjustments:

    lock            Man defender follows the motion man to his end x
    travel          Everyone slides 2 yards with the motion
    buzz            Strong safety drops to 8 yards
    spin            Safeties rotate 5 yards against the motion
    check           Re-read strength and re-set the split-field call
    pattern-adjust  Safeties reset their match reads
    meg-trigger     Hard man on the motion player
    bump            Linebacker zones shift with the motion
    minimal         One nearby defender shades under a yard

Unmapped (coverage, motion) pairs get ``minimal``. Also here: motion
paths, motion speeds and the at-snap speed boost.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from ..core.entities import (
    Adjustment,
    CoverageResponsibility,
    DefenderRole,
    Motion,
    MotionType,
    Player,
    PlayerType,
)
from ..core.field import FIELD_CENTER, Side, side_of
from ..core.vec2 import Vec2
from ..plays.coverages import CoverageType
from .adjustments import adjust_cover6
from .formation import analyze_formation


logger = logging.getLogger(__name__)


class MotionResponse(str, Enum):
    LOCK = "lock"
    TRAVEL = "travel"
    BUZZ = "buzz"
    SPIN = "spin"
    CHECK = "check"
    PATTERN_ADJUST = "pattern-adjust"
    MEG_TRIGGER = "meg-trigger"
    BUMP = "bump"
    MINIMAL = "minimal"


# =============================================================================
# Response Table
# =============================================================================

_L, _T, _BZ, _S = MotionResponse.LOCK, MotionResponse.TRAVEL, MotionResponse.BUZZ, MotionResponse.SPIN
_C, _PA, _MEG = MotionResponse.CHECK, MotionResponse.PATTERN_ADJUST, MotionResponse.MEG_TRIGGER
_BU, _MIN = MotionResponse.BUMP, MotionResponse.MINIMAL

_QUARTERS_RESPONSES = {
    MotionType.FLY: _PA, MotionType.ORBIT: _L, MotionType.JET: _MEG, MotionType.RETURN: _MIN,
    MotionType.SHIFT: _PA, MotionType.ACROSS: _PA, MotionType.GLIDE: _L,
}

MOTION_RESPONSES: Dict[CoverageType, Dict[MotionType, MotionResponse]] = {
    CoverageType.COVER_0: {m: _L for m in MotionType},
    CoverageType.COVER_1: {
        MotionType.FLY: _L, MotionType.ORBIT: _T, MotionType.JET: _L, MotionType.RETURN: _L,
        MotionType.SHIFT: _T, MotionType.ACROSS: _T, MotionType.GLIDE: _L,
    },
    CoverageType.COVER_2: {m: _BU for m in MotionType},
    CoverageType.COVER_3: {
        MotionType.FLY: _BZ, MotionType.ORBIT: _S, MotionType.JET: _BZ, MotionType.RETURN: _MIN,
        MotionType.SHIFT: _BZ, MotionType.ACROSS: _S, MotionType.GLIDE: _BZ,
    },
    CoverageType.COVER_4: _QUARTERS_RESPONSES,
    CoverageType.QUARTERS: _QUARTERS_RESPONSES,
    CoverageType.COVER_6: {
        MotionType.FLY: _C, MotionType.ORBIT: _MIN, MotionType.JET: _PA, MotionType.RETURN: _MIN,
        MotionType.SHIFT: _C, MotionType.ACROSS: _C, MotionType.GLIDE: _MIN,
    },
    CoverageType.TAMPA_2: {m: _MIN for m in MotionType},
}


def get_motion_response(coverage: CoverageType, motion_type: MotionType) -> MotionResponse:
    """How a coverage answers a motion type. Defaults to minimal."""
    return MOTION_RESPONSES.get(coverage, {}).get(motion_type, MotionResponse.MINIMAL)


# =============================================================================
# Response Functions
# =============================================================================

@dataclass(frozen=True)
class MotionConfig:
    """Motion response distances (yards)."""
    travel_distance: float = 2.0
    buzz_depth: float = 8.0
    spin_distance: float = 5.0
    bump_weak: float = 2.5
    bump_strong: float = 1.5
    bump_bounds: Tuple[float, float] = (5.0, 48.0)
    minimal_radius: float = 15.0
    minimal_shade: float = 0.8


DEFAULT_MOTION_CONFIG = MotionConfig()

ResponseFn = Callable[[Motion, List[Player], List[Player], float, MotionConfig], List[Adjustment]]


def _direction(motion: Motion) -> int:
    # Stationary motion counts as leftward
    return 1 if motion.end.x > motion.start.x else -1


def _motion_defender(motion: Motion, defenders: List[Player], offense: List[Player]) -> Optional[Player]:
    """Defender manned on the motion player, else the nearest CB/NB."""
    for defender in defenders:
        resp = defender.responsibility
        if resp is not None and resp.is_man and resp.target_id == motion.player_id:
            return defender

    mover = next((p for p in offense if p.id == motion.player_id), None)
    origin = mover.pos if mover is not None else motion.start
    cover_men = [d for d in defenders if d.player_type in (PlayerType.CB, PlayerType.NB)]
    if not cover_men:
        return None
    return min(cover_men, key=lambda d: d.pos.distance_to(origin))


def _lock(motion, defenders, offense, los, config):
    defender = _motion_defender(motion, defenders, offense)
    if defender is None:
        return []
    return [Adjustment(defender.id, defender.pos.with_x(motion.end.x), technique="lock-follow")]


def _travel(motion, defenders, offense, los, config):
    dx = _direction(motion) * config.travel_distance
    return [Adjustment(d.id, d.pos.shifted(dx, 0), technique="travel") for d in defenders]


def _buzz(motion, defenders, offense, los, config):
    ss = next((d for d in defenders if d.role == DefenderRole.SS), None)
    if ss is None:
        return []
    return [Adjustment(ss.id, ss.pos.with_y(los + config.buzz_depth), technique="buzz-down")]


def _spin(motion, defenders, offense, los, config):
    dx = -_direction(motion) * config.spin_distance
    return [
        Adjustment(d.id, d.pos.shifted(dx, 0), technique="spin-rotation")
        for d in defenders if d.player_type == PlayerType.S
    ]


def _check(motion, defenders, offense, los, config):
    moved = [replace(p, pos=motion.end) if p.id == motion.player_id else p for p in offense]
    formation = analyze_formation(moved)
    if formation.strength == Side.BALANCED:
        return []
    logger.debug("Check call: strength now %s", formation.strength.value)
    return adjust_cover6(defenders, moved, formation, los)


def _pattern_adjust(motion, defenders, offense, los, config):
    return [
        Adjustment(d.id, d.pos, technique="pattern-match-reset")
        for d in defenders if d.player_type == PlayerType.S
    ]


def _meg_trigger(motion, defenders, offense, los, config):
    defender = _motion_defender(motion, defenders, offense)
    if defender is None:
        return []
    return [Adjustment(
        defender.id, defender.pos,
        new_responsibility=CoverageResponsibility.man(motion.player_id),
        technique="MEG",
    )]


def _bump(motion, defenders, offense, los, config):
    going_right = _direction(motion) > 0
    low, high = config.bump_bounds
    adjustments = []
    for lb in (d for d in defenders if d.player_type == PlayerType.LB):
        # Linebackers away from the motion travel further
        away = lb.pos.x < FIELD_CENTER if going_right else lb.pos.x > FIELD_CENTER
        amount = config.bump_weak if away else config.bump_strong
        dx = amount if going_right else -amount
        x = max(low, min(high, lb.pos.x + dx))
        adjustments.append(Adjustment(lb.id, lb.pos.with_x(x), technique="zone-shift"))
    return adjustments


def _minimal(motion, defenders, offense, los, config):
    nearby = next((d for d in defenders if d.pos.distance_to(motion.start) < config.minimal_radius), None)
    if nearby is None:
        return []
    dx = config.minimal_shade if motion.end.x > motion.start.x else -config.minimal_shade
    return [Adjustment(nearby.id, nearby.pos.shifted(dx, 0), technique="zone-shade")]


RESPONSE_HANDLERS: Dict[MotionResponse, ResponseFn] = {
    MotionResponse.LOCK: _lock,
    MotionResponse.TRAVEL: _travel,
    MotionResponse.BUZZ: _buzz,
    MotionResponse.SPIN: _spin,
    MotionResponse.CHECK: _check,
    MotionResponse.PATTERN_ADJUST: _pattern_adjust,
    MotionResponse.MEG_TRIGGER: _meg_trigger,
    MotionResponse.BUMP: _bump,
    MotionResponse.MINIMAL: _minimal,
}


def handle_motion_adjustments(
    coverage: CoverageType,
    motion: Motion,
    defenders: List[Player],
    offense: List[Player],
    los: float,
    config: MotionConfig = DEFAULT_MOTION_CONFIG,
) -> List[Adjustment]:
    """Defensive adjustments for a pre-snap motion.

    Args:
        coverage: Current coverage call
        motion: The motion being run
        defenders: Defender snapshot
        offense: Offensive snapshot (motion player at his start spot)
        los: Line of scrimmage
        config: Response distances

    Returns:
        Adjustment deltas; the caller applies them together
    """
    response = get_motion_response(coverage, motion.type)
    logger.debug("%s vs %s motion: %s", coverage.value, motion.type.value, response.value)
    return RESPONSE_HANDLERS[response](motion, defenders, offense, los, config)


# =============================================================================
# Motion Paths and Speed
# =============================================================================

@dataclass(frozen=True)
class MotionTiming:
    speed: float        # Base yards/second
    variance: float
    duration: float     # Seconds


MOTION_TIMING: Dict[MotionType, MotionTiming] = {
    MotionType.JET: MotionTiming(9.2, 0.3, 1.3),
    MotionType.FLY: MotionTiming(9.0, 0.5, 1.4),
    MotionType.ORBIT: MotionTiming(8.7, 0.3, 1.7),
    MotionType.ACROSS: MotionTiming(8.5, 0.5, 2.0),
    MotionType.GLIDE: MotionTiming(8.0, 0.5, 1.2),
    MotionType.RETURN: MotionTiming(8.0, 0.5, 1.8),
    MotionType.SHIFT: MotionTiming(6.5, 1.0, 1.2),
}

MOTION_BOOST_MULTIPLIER = 1.09
MOTION_BOOST_DURATION = 0.35
MOTION_BOOST_FADE = 0.1


@dataclass
class MotionPath:
    path: List[Vec2]
    duration: float
    speed: float


def _path_points(start: Vec2, motion_type: MotionType, los: float) -> List[Vec2]:
    right = start.x > FIELD_CENTER
    toward = -1.0 if right else 1.0  # Toward the ball

    if motion_type == MotionType.JET:
        return [
            start,
            Vec2(start.x + toward * 5, los - 0.5),
            Vec2(FIELD_CENTER + toward * 2, los - 0.5),
            Vec2(8.0 if right else 45.0, los),
        ]
    if motion_type == MotionType.FLY:
        return [start, Vec2(FIELD_CENTER, start.y), Vec2(10.0 if right else 43.0, start.y)]
    if motion_type == MotionType.ORBIT:
        qb_depth = los - 5
        return [
            start,
            Vec2(start.x + toward * 3, los - 2),
            Vec2(FIELD_CENTER + toward * 1, qb_depth - 2),
            Vec2(FIELD_CENTER + toward * 8, qb_depth - 1),
            Vec2(18.0 if right else 35.0, los - 1),
        ]
    if motion_type == MotionType.ACROSS:
        return [start, Vec2(FIELD_CENTER, start.y), Vec2(5.0 if right else 48.0, start.y)]
    if motion_type == MotionType.GLIDE:
        target_x = FIELD_CENTER + toward * 3
        return [start, Vec2((start.x + target_x) / 2, los - 0.5), Vec2(target_x, los)]
    if motion_type == MotionType.RETURN:
        return [start, start.with_x(start.x + toward * 8), start.with_x(start.x + toward * 2)]
    return [start, start.with_x(start.x + toward * 5)]


def motion_speed(
    motion_type: MotionType,
    player_type: PlayerType,
    rng: Optional[random.Random] = None,
) -> float:
    """Motion speed in yards/second, clamped to [6, 10].

    Without an rng the base speed is used, so results are reproducible.
    """
    timing = MOTION_TIMING[motion_type]
    speed = timing.speed
    if rng is not None:
        speed += (rng.random() - 0.5) * timing.variance

    if player_type in (PlayerType.RB, PlayerType.WR):
        speed *= 1.02
    elif player_type in (PlayerType.TE, PlayerType.FB):
        speed *= 0.95
    return max(6.0, min(10.0, speed))


def calculate_motion_path(
    player: Player,
    motion_type: MotionType,
    los: float,
    rng: Optional[random.Random] = None,
) -> MotionPath:
    """Waypoints, duration and speed for a motion."""
    return MotionPath(
        path=_path_points(player.pos, motion_type, los),
        duration=MOTION_TIMING[motion_type].duration,
        speed=motion_speed(motion_type, player.player_type, rng),
    )


def motion_for(player: Player, motion_type: MotionType, los: float) -> Motion:
    """Motion record from a player's path endpoints."""
    path = _path_points(player.pos, motion_type, los)
    return Motion(player.id, motion_type, path[0], path[-1])


def crosses_formation(motion: Motion) -> bool:
    """Motion ends on the other side of the ball."""
    return side_of(motion.start.x) != side_of(motion.end.x)


def motion_boost(time_since_snap: float) -> float:
    """Speed multiplier for the motion man after the snap.

    Full boost at the snap, fading linearly over the last 0.1s.
    """
    remaining = MOTION_BOOST_DURATION - time_since_snap
    if time_since_snap < 0 or remaining <= 0:
        return 1.0
    if remaining <= MOTION_BOOST_FADE:
        return 1.0 + (MOTION_BOOST_MULTIPLIER - 1.0) * (remaining / MOTION_BOOST_FADE)
    return MOTION_BOOST_MULTIPLIER
