"""Core entities - players, routes, zones, responsibilities and motion.

Entities are pure data containers. Behavior is implemented in systems.
The consuming play engine owns ``Player`` objects; systems read them and
return position maps or ``Adjustment`` deltas rather than mutating them.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import List, Optional

from .vec2 import Vec2


# =============================================================================
# Enums
# =============================================================================

class Team(str, Enum):
    """Which team a player is on."""
    OFFENSE = "offense"
    DEFENSE = "defense"


class PlayerType(str, Enum):
    """Player types the coverage engine distinguishes."""
    # Offense
    QB = "QB"
    RB = "RB"
    FB = "FB"
    WR = "WR"
    TE = "TE"

    # Defense
    CB = "CB"
    S = "S"
    LB = "LB"
    NB = "NB"

    @property
    def is_offense(self) -> bool:
        return self in (PlayerType.QB, PlayerType.RB, PlayerType.FB,
                        PlayerType.WR, PlayerType.TE)

    @property
    def is_back(self) -> bool:
        return self in (PlayerType.RB, PlayerType.FB)


class DefenderRole(str, Enum):
    """Slot a defender occupies in the called coverage.

    Roles are handed out once by the personnel matcher and every
    alignment/adjustment rule dispatches on them.
    """
    CB1 = "CB1"      # Left corner
    CB2 = "CB2"      # Right corner
    NB1 = "NB1"      # Nickel
    NB2 = "NB2"      # Dime
    NB3 = "NB3"      # Quarter package extra DB
    FS = "FS"
    SS = "SS"
    SAM = "SAM"      # Strong-side / left linebacker (LB1)
    MIKE = "MIKE"    # Middle linebacker (LB2)
    WILL = "WILL"    # Weak-side / right linebacker (LB3)
    JACK = "JACK"    # Fourth linebacker in heavy packages (LB4)

    @property
    def player_type(self) -> PlayerType:
        return _ROLE_TYPES[self]

    @property
    def is_corner(self) -> bool:
        return self in (DefenderRole.CB1, DefenderRole.CB2)

    @property
    def is_nickel(self) -> bool:
        return self in (DefenderRole.NB1, DefenderRole.NB2, DefenderRole.NB3)

    @property
    def is_safety(self) -> bool:
        return self in (DefenderRole.FS, DefenderRole.SS)

    @property
    def is_linebacker(self) -> bool:
        return self in LINEBACKER_ROLES


_ROLE_TYPES = {
    DefenderRole.CB1: PlayerType.CB,
    DefenderRole.CB2: PlayerType.CB,
    DefenderRole.NB1: PlayerType.NB,
    DefenderRole.NB2: PlayerType.NB,
    DefenderRole.NB3: PlayerType.NB,
    DefenderRole.FS: PlayerType.S,
    DefenderRole.SS: PlayerType.S,
    DefenderRole.SAM: PlayerType.LB,
    DefenderRole.MIKE: PlayerType.LB,
    DefenderRole.WILL: PlayerType.LB,
    DefenderRole.JACK: PlayerType.LB,
}

# Linebacker fill order. A single-LB package plays MIKE only.
LINEBACKER_ROLES = (DefenderRole.MIKE, DefenderRole.SAM, DefenderRole.WILL, DefenderRole.JACK)
NICKEL_ROLES = (DefenderRole.NB1, DefenderRole.NB2, DefenderRole.NB3)


class ResponsibilityType(str, Enum):
    MAN = "man"
    ZONE = "zone"
    SPY = "spy"
    BLITZ = "blitz"


class Leverage(str, Enum):
    """Defender's lateral position relative to a receiver."""
    INSIDE = "inside"
    OUTSIDE = "outside"
    HEAD_UP = "head-up"


class RouteType(str, Enum):
    """Route names the receiver and option systems understand."""
    SLANT = "slant"
    FLAT = "flat"
    GO = "go"
    CURL = "curl"
    OUT = "out"
    IN = "in"
    POST = "post"
    COMEBACK = "comeback"
    FADE = "fade"
    HITCH = "hitch"
    WHEEL = "wheel"
    CORNER = "corner"
    DIG = "dig"
    MESH_CROSS = "mesh_cross"
    SPEED_OUT = "speed_out"
    SEAM = "seam"
    OPTION_IN_OUT = "option_in_out"
    CHOICE_BREAK = "choice_break"
    DELAYED_DRAG = "delayed_drag"
    BOOTLEG_COMEBACK = "bootleg_comeback"
    QUICK_HITCH = "quick_hitch"
    DRAG = "drag"


class MotionType(str, Enum):
    FLY = "fly"
    ORBIT = "orbit"
    JET = "jet"
    RETURN = "return"
    SHIFT = "shift"
    ACROSS = "across"
    GLIDE = "glide"


# =============================================================================
# Zones and Responsibilities
# =============================================================================

@dataclass(frozen=True)
class Zone:
    """A rectangular area a zone defender is responsible for.

    Attributes:
        name: Zone name ("deep_third_left", "hook_curl_right", ...)
        center: Center point of the zone in field coordinates
        width: Lateral extent (yards)
        height: Vertical extent (yards)
        depth: Landmark depth off the line of scrimmage (yards)
    """
    name: str
    center: Vec2
    width: float
    height: float
    depth: float

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0 or self.depth <= 0:
            raise ValueError(
                f"Zone {self.name!r} must have positive width, height and depth "
                f"(got {self.width}, {self.height}, {self.depth})"
            )

    def contains(self, pos: Vec2) -> bool:
        """Check if a position is inside the zone."""
        return (
            abs(pos.x - self.center.x) <= self.width / 2
            and abs(pos.y - self.center.y) <= self.height / 2
        )

    def widened(self, factor: float) -> Zone:
        """Return a copy with width scaled by ``factor``."""
        return replace(self, width=self.width * factor)


@dataclass(frozen=True)
class CoverageResponsibility:
    """What a defender is doing on this play.

    Exactly one per defender. Man responsibilities carry ``target_id``,
    zone responsibilities carry ``zone``.
    """
    type: ResponsibilityType
    target_id: Optional[str] = None
    zone: Optional[Zone] = None

    @classmethod
    def man(cls, target_id: str) -> CoverageResponsibility:
        return cls(ResponsibilityType.MAN, target_id=target_id)

    @classmethod
    def zone_of(cls, zone: Zone) -> CoverageResponsibility:
        return cls(ResponsibilityType.ZONE, zone=zone)

    @classmethod
    def blitz(cls) -> CoverageResponsibility:
        return cls(ResponsibilityType.BLITZ)

    @classmethod
    def spy(cls) -> CoverageResponsibility:
        return cls(ResponsibilityType.SPY)

    @property
    def is_man(self) -> bool:
        return self.type == ResponsibilityType.MAN

    @property
    def is_zone(self) -> bool:
        return self.type == ResponsibilityType.ZONE


# =============================================================================
# Routes and Motion
# =============================================================================

@dataclass
class Route:
    """A route assigned to an eligible receiver.

    ``timing[i]`` is the time (seconds after the snap) at which the
    receiver should reach ``waypoints[i]``.
    """
    type: RouteType
    waypoints: List[Vec2]
    timing: List[float]
    depth: float = 0.0

    def __post_init__(self) -> None:
        if len(self.waypoints) != len(self.timing):
            raise ValueError(
                f"Route {self.type.value} has {len(self.waypoints)} waypoints "
                f"but {len(self.timing)} timing values"
            )
        if not self.waypoints:
            raise ValueError(f"Route {self.type.value} has no waypoints")
        for earlier, later in zip(self.timing, self.timing[1:]):
            if later < earlier:
                raise ValueError(
                    f"Route {self.type.value} timing must be non-decreasing: {self.timing}"
                )

    @property
    def duration(self) -> float:
        return self.timing[-1]


@dataclass(frozen=True)
class Motion:
    """Pre-snap motion by a single offensive player."""
    player_id: str
    type: MotionType
    start: Vec2
    end: Vec2

    @property
    def direction(self) -> int:
        """+1 when moving toward higher x, -1 toward lower x, 0 if stationary."""
        dx = self.end.x - self.start.x
        if abs(dx) < 0.01:
            return 0
        return 1 if dx > 0 else -1


# =============================================================================
# Player
# =============================================================================

@dataclass
class Player:
    """A player snapshot supplied by the consuming engine.

    Attributes:
        id: Unique identifier
        team: Offense or defense
        player_type: Position group
        pos: Current position on field
        role: Coverage slot (defense only, set by the personnel matcher)
        is_eligible: Eligible receiver
        max_speed: Top speed in yards/second
        route: Assigned route (offense)
        responsibility: Coverage responsibility (defense)
        velocity: Current velocity vector
        in_motion: Currently the pre-snap motion player
        is_blocking: Kept in to block
    """
    id: str
    team: Team
    player_type: PlayerType
    pos: Vec2
    role: Optional[DefenderRole] = None
    is_eligible: bool = False
    max_speed: float = 7.0
    route: Optional[Route] = None
    responsibility: Optional[CoverageResponsibility] = None
    velocity: Vec2 = field(default_factory=Vec2)
    in_motion: bool = False
    is_blocking: bool = False

    @property
    def is_offense(self) -> bool:
        return self.team == Team.OFFENSE

    @property
    def is_receiver(self) -> bool:
        """Eligible non-QB who is not blocking."""
        return (
            self.is_offense
            and self.is_eligible
            and self.player_type != PlayerType.QB
            and not self.is_blocking
        )

    def __repr__(self) -> str:
        role = f" {self.role.value}" if self.role else ""
        return f"Player({self.id}{role} {self.player_type.value} @ {self.pos})"


# =============================================================================
# Adjustments
# =============================================================================

@dataclass(frozen=True)
class Adjustment:
    """A proposed change for one defender.

    Every adjustment producer returns a list of these; the consuming
    engine applies them together.
    """
    defender_id: str
    new_position: Vec2
    new_responsibility: Optional[CoverageResponsibility] = None
    leverage: Optional[Leverage] = None
    technique: Optional[str] = None


def apply_adjustments(defenders: List[Player], adjustments: List[Adjustment]) -> None:
    """Apply a batch of adjustments to defender snapshots in place.

    Later adjustments for the same defender win.
    """
    by_id = {d.id: d for d in defenders}
    for adj in adjustments:
        defender = by_id.get(adj.defender_id)
        if defender is None:
            continue
        defender.pos = adj.new_position
        if adj.new_responsibility is not None:
            defender.responsibility = adj.new_responsibility
