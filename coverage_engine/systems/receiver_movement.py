"""Receiver Movement - route phase progression and per-tick movement.

Route phases by time since the snap (B = the route's break timing):

    acceleration  0.0 - 0.3s     0.6 x max speed
    stem          0.3s - B-0.2   0.85
    pre-break     B-0.2 - B      0.7
    break         B - B+0.1      0.4
    post-break    B+0.1 - B+0.4  0.8
    completion    after          1.0

The target each tick is the route position at the current time,
linearly interpolated between waypoints. Early in the route a close
defender shifts the stem, and the route's separation technique scales
speed around the break.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from ..core.entities import Leverage, Player, Route
from ..core.vec2 import Vec2
from ..plays.routes import SeparationTechnique, route_timing, separation_technique
from .formation import leverage_against


logger = logging.getLogger(__name__)


class RoutePhase(str, Enum):
    ACCELERATION = "acceleration"
    STEM = "stem"
    PRE_BREAK = "pre-break"
    BREAK = "break"
    POST_BREAK = "post-break"
    COMPLETION = "completion"


@dataclass(frozen=True)
class MovementConfig:
    """Phase durations (seconds) and speed multipliers."""
    off_line_duration: float = 0.3
    stem_duration: float = 0.8
    pre_break_duration: float = 0.2
    plant_duration: float = 0.1
    post_break_duration: float = 0.3

    off_line_speed: float = 0.6
    stem_speed: float = 0.85
    pre_break_speed: float = 0.7
    plant_speed: float = 0.4
    post_break_speed: float = 0.8
    full_speed: float = 1.0

    stem_radius: float = 5.0
    stem_shift: float = 1.5
    head_up_shift: float = 0.5
    snap_distance: float = 0.1


DEFAULT_MOVEMENT_CONFIG = MovementConfig()

PHASE_SPEEDS = {
    RoutePhase.ACCELERATION: "off_line_speed",
    RoutePhase.STEM: "stem_speed",
    RoutePhase.PRE_BREAK: "pre_break_speed",
    RoutePhase.BREAK: "plant_speed",
    RoutePhase.POST_BREAK: "post_break_speed",
    RoutePhase.COMPLETION: "full_speed",
}


# =============================================================================
# Route Position
# =============================================================================

def route_position_at(route: Route, t: float) -> Vec2:
    """Where the route says the receiver should be at time ``t``.

    Clamped to the first waypoint before the snap and to the last
    waypoint at or after the final timing value.
    """
    waypoints, timing = route.waypoints, route.timing
    if t <= timing[0]:
        return waypoints[0]
    if t >= timing[-1]:
        return waypoints[-1]

    for i in range(len(timing) - 1):
        start, end = timing[i], timing[i + 1]
        if start <= t <= end:
            if end == start:
                return waypoints[i + 1]
            return waypoints[i].lerp(waypoints[i + 1], (t - start) / (end - start))
    return waypoints[-1]


def phase_at(t: float, break_time: float, config: MovementConfig = DEFAULT_MOVEMENT_CONFIG) -> RoutePhase:
    """Route phase at time ``t`` for a route breaking at ``break_time``."""
    if t <= config.off_line_duration:
        return RoutePhase.ACCELERATION
    if t >= break_time + config.plant_duration + config.post_break_duration:
        return RoutePhase.COMPLETION
    if t >= break_time + config.plant_duration:
        return RoutePhase.POST_BREAK
    if t >= break_time:
        return RoutePhase.BREAK
    if t >= break_time - config.pre_break_duration:
        return RoutePhase.PRE_BREAK
    return RoutePhase.STEM


# =============================================================================
# Receiver State
# =============================================================================

@dataclass
class ReceiverState:
    """Per-receiver movement state for the current play."""
    phase: RoutePhase = RoutePhase.ACCELERATION
    speed_multiplier: float = 0.6
    phase_time: float = 0.0
    has_broken: bool = False
    break_point: Optional[Vec2] = None
    stem_adjustment: Vec2 = field(default_factory=Vec2)
    technique: SeparationTechnique = SeparationTechnique.STACKING


class ReceiverMovement:
    """Moves receivers along their routes, one tick at a time.

    Holds per-receiver phase state; ``reset()`` drops it all when the
    play, concept or coverage changes.
    """

    def __init__(self, config: MovementConfig = DEFAULT_MOVEMENT_CONFIG):
        self.config = config
        self._states: Dict[str, ReceiverState] = {}

    def state_for(self, player: Player) -> Optional[ReceiverState]:
        return self._states.get(player.id)

    def initialize(self, player: Player) -> Optional[ReceiverState]:
        if player.route is None:
            return None
        state = ReceiverState(
            speed_multiplier=self.config.off_line_speed,
            technique=separation_technique(player.route.type),
        )
        self._states[player.id] = state
        return state

    def reset(self) -> None:
        self._states.clear()

    def update(
        self,
        player: Player,
        dt: float,
        time_elapsed: float,
        defenders: Optional[List[Player]] = None,
    ) -> Vec2:
        """Next position for a receiver.

        Args:
            player: Receiver snapshot (not mutated)
            dt: Tick length in seconds
            time_elapsed: Seconds since the snap
            defenders: Defenders used for the stem adjustment

        Returns:
            The receiver's new position
        """
        if player.route is None:
            return player.pos

        state = self._states.get(player.id) or self.initialize(player)
        self._update_phase(state, player.route, time_elapsed, dt)

        target = route_position_at(player.route, time_elapsed)
        target = self._stem_adjusted(target, state, defenders)
        return self._move(player, target, state, dt)

    def _update_phase(self, state: ReceiverState, route: Route, t: float, dt: float) -> None:
        break_time = route_timing(route.type)
        phase = phase_at(t, break_time, self.config)
        if phase != state.phase:
            logger.debug("Route phase %s -> %s at %.2fs", state.phase.value, phase.value, t)
            state.phase = phase
            state.phase_time = 0.0
        else:
            state.phase_time += dt
        if phase == RoutePhase.BREAK and not state.has_broken:
            state.has_broken = True
            state.break_point = route_position_at(route, break_time)
        state.speed_multiplier = getattr(self.config, PHASE_SPEEDS[phase])

    def _stem_adjusted(self, target: Vec2, state: ReceiverState, defenders: Optional[List[Player]]) -> Vec2:
        state.stem_adjustment = Vec2()
        if not defenders or state.phase not in (RoutePhase.ACCELERATION, RoutePhase.STEM):
            return target

        closest = min(defenders, key=lambda d: d.pos.distance_to(target))
        if closest.pos.distance_to(target) > self.config.stem_radius:
            return target

        # Offsets are in field x, not relative to the receiver's side
        leverage = leverage_against(closest.pos.x, target.x)
        if leverage == Leverage.INSIDE:
            dx = self.config.stem_shift
        elif leverage == Leverage.OUTSIDE:
            dx = -self.config.stem_shift
        else:
            dx = self.config.head_up_shift
        state.stem_adjustment = Vec2(dx, 0.0)
        return target.shifted(dx, 0.0)

    def _move(self, player: Player, target: Vec2, state: ReceiverState, dt: float) -> Vec2:
        remaining = player.pos.distance_to(target)
        if remaining < self.config.snap_distance:
            return target
        speed = self._technique_speed(player.max_speed * state.speed_multiplier, state, remaining)
        return player.pos.step_toward(target, speed * dt)

    @staticmethod
    def _technique_speed(speed: float, state: ReceiverState, remaining: float) -> float:
        if state.technique == SeparationTechnique.SPEED_CUT:
            if state.phase == RoutePhase.BREAK:
                return speed * 0.95
        elif state.technique == SeparationTechnique.PLANT_AND_CUT:
            if state.phase == RoutePhase.BREAK:
                return speed * 0.4
            if state.phase == RoutePhase.POST_BREAK:
                return speed * 1.1
        elif remaining < 2 and state.phase == RoutePhase.COMPLETION:
            return speed * 1.05
        return speed
