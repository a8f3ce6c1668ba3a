"""Offensive formations - named alignments used to build test and demo offenses.

Alignments are relative: x in yards from the middle of the field
(negative = left), y in yards from the line of scrimmage (negative =
backfield). ``build_offense`` turns one into field-coordinate players.

Backs count toward their side of the field in formation analysis, so a
back offset to one side can turn a 2x2 look into trips.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from ..core.entities import Player, PlayerType, RouteType, Team
from ..core.field import CENTER_X
from ..core.vec2 import Vec2
from .routes import build_route


class Formation(str, Enum):
    """Offensive formations."""
    SPREAD = "spread"                  # 2x2, four WR, no back
    SINGLEBACK = "singleback"          # 1 RB, 1 TE, 3 WR
    TRIPS_RIGHT = "trips_right"        # 3 WR to the right
    TRIPS_LEFT = "trips_left"
    BUNCH_RIGHT = "bunch_right"        # 3 WR bunched right
    BUNCH_LEFT = "bunch_left"
    EMPTY = "empty"                    # No back, five receivers
    I_FORM = "i_form"                  # FB + RB stacked
    HEAVY = "heavy"                    # 2 TE, 2 backs

    @classmethod
    def parse(cls, name: str) -> Formation:
        """Parse "trips_right", "Trips Right" or "trips-right".

        Raises:
            ValueError: If the name is not a known formation
        """
        key = name.strip().lower().replace("-", "_").replace(" ", "_")
        for formation in cls:
            if formation.value == key:
                return formation
        raise ValueError(f"Unknown formation: {name!r}")


@dataclass(frozen=True)
class ReceiverAlignment:
    """Where one player lines up pre-snap."""
    label: str
    player_type: PlayerType
    x: float  # Yards from the middle (negative = left)
    y: float = 0.0  # Yards from the LOS
    route: Optional[RouteType] = None

    @property
    def is_left_side(self) -> bool:
        return self.x < 0


def _qb(depth: float = -5.0) -> ReceiverAlignment:
    return ReceiverAlignment("QB", PlayerType.QB, 0.0, depth)


def _wr(label: str, x: float, y: float = 0.0, route: RouteType = RouteType.GO) -> ReceiverAlignment:
    return ReceiverAlignment(label, PlayerType.WR, x, y, route)


FORMATION_LIBRARY: Dict[Formation, List[ReceiverAlignment]] = {
    Formation.SPREAD: [
        _qb(),
        _wr("X", -18.0, route=RouteType.GO),
        _wr("SLOT_L", -8.0, -1.0, RouteType.SEAM),
        _wr("SLOT_R", 8.0, -1.0, RouteType.SEAM),
        _wr("Z", 18.0, route=RouteType.GO),
    ],
    Formation.SINGLEBACK: [
        _qb(),
        _wr("X", -18.0, route=RouteType.CURL),
        _wr("SLOT_L", -8.0, -1.0, RouteType.SLANT),
        _wr("Z", 18.0, -1.0, RouteType.POST),
        ReceiverAlignment("Y", PlayerType.TE, 4.0, 0.0, RouteType.SEAM),
        ReceiverAlignment("RB", PlayerType.RB, 0.5, -6.0, RouteType.FLAT),
    ],
    Formation.TRIPS_RIGHT: [
        _qb(),
        _wr("X", -18.0, route=RouteType.GO),
        _wr("SLOT_R", 6.0, -1.0, RouteType.SEAM),
        _wr("SLOT_R2", 12.0, -1.0, RouteType.OUT),
        _wr("Z", 18.0, route=RouteType.CURL),
        ReceiverAlignment("RB", PlayerType.RB, -1.0, -5.0, RouteType.FLAT),
    ],
    Formation.BUNCH_RIGHT: [
        _qb(),
        _wr("X", -18.0, route=RouteType.GO),
        _wr("Z", 12.0, 0.0, RouteType.CORNER),
        _wr("SLOT_R", 14.0, -1.0, RouteType.FLAT),
        _wr("SLOT_R2", 13.0, -2.0, RouteType.DIG),
        ReceiverAlignment("RB", PlayerType.RB, -1.0, -5.0, RouteType.FLAT),
    ],
    Formation.EMPTY: [
        _qb(-5.0),
        _wr("X", -18.0, route=RouteType.GO),
        _wr("SLOT_L", -12.0, -1.0, RouteType.OUT),
        _wr("SLOT_L2", -6.0, -1.0, RouteType.SEAM),
        _wr("SLOT_R", 8.0, -1.0, RouteType.MESH_CROSS),
        _wr("Z", 18.0, route=RouteType.HITCH),
    ],
    Formation.I_FORM: [
        _qb(-1.0),
        _wr("X", -18.0, route=RouteType.COMEBACK),
        _wr("Z", 18.0, -1.0, RouteType.POST),
        ReceiverAlignment("Y", PlayerType.TE, 4.0, 0.0, RouteType.DRAG),
        ReceiverAlignment("FB", PlayerType.FB, 0.5, -3.0, RouteType.FLAT),
        ReceiverAlignment("RB", PlayerType.RB, 0.5, -6.0, RouteType.WHEEL),
    ],
    Formation.HEAVY: [
        _qb(-1.0),
        _wr("Z", 18.0, route=RouteType.POST),
        ReceiverAlignment("Y", PlayerType.TE, 4.0, 0.0, RouteType.CORNER),
        ReceiverAlignment("Y2", PlayerType.TE, -4.0, 0.0, RouteType.FLAT),
        ReceiverAlignment("FB", PlayerType.FB, 0.5, -3.0, RouteType.FLAT),
        ReceiverAlignment("RB", PlayerType.RB, 0.5, -6.0, RouteType.WHEEL),
    ],
}

_MIRRORS = {
    Formation.TRIPS_LEFT: Formation.TRIPS_RIGHT,
    Formation.BUNCH_LEFT: Formation.BUNCH_RIGHT,
}


def _mirrored(alignment: ReceiverAlignment) -> ReceiverAlignment:
    label = alignment.label.replace("_R", "_L")
    if label == "Z":
        label = "X"
    elif label == "X":
        label = "Z"
    return ReceiverAlignment(label, alignment.player_type, -alignment.x, alignment.y, alignment.route)


def get_alignments(formation: Formation) -> List[ReceiverAlignment]:
    if formation in _MIRRORS:
        return [_mirrored(a) for a in FORMATION_LIBRARY[_MIRRORS[formation]]]
    return list(FORMATION_LIBRARY[formation])


def build_offense(formation: Formation | str, los: float, with_routes: bool = True) -> List[Player]:
    """Field-coordinate offensive players for a named formation.

    Args:
        formation: Formation or its name
        los: Line of scrimmage
        with_routes: Give each receiver its default route

    Returns:
        Players with ids taken from the alignment labels ("X", "Y", "RB")
    """
    if isinstance(formation, str):
        formation = Formation.parse(formation)

    players = []
    for alignment in get_alignments(formation):
        pos = Vec2(CENTER_X + alignment.x, los + alignment.y)
        is_qb = alignment.player_type == PlayerType.QB
        route = None
        if with_routes and alignment.route is not None:
            route = build_route(alignment.route, pos, los)
        players.append(Player(
            id=alignment.label,
            team=Team.OFFENSE,
            player_type=alignment.player_type,
            pos=pos,
            is_eligible=not is_qb,
            max_speed=8.5 if alignment.player_type == PlayerType.WR else 7.8,
            route=route,
        ))
    return players


def list_formations() -> List[str]:
    return [f.value for f in Formation]
