"""Formation analysis - classify the offensive alignment.

Reads raw offensive player positions and produces a FormationAnalysis:
strength, receivers per side, TE side, trips/bunch/stack/twins flags,
formation type and personnel counts. Everything here is a pure function
of the snapshot; call it again whenever the offense moves.

Strength priority:
    1. Side with three or more receivers (trips)
    2. Side the tight end is on
    3. Side with more receivers
    4. Balanced
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from itertools import combinations
from typing import Dict, List, Optional, Tuple

from ..core.config import DEFAULT_THRESHOLDS, FormationThresholds
from ..core.entities import Leverage, Player, PlayerType
from ..core.field import (
    FIELD_CENTER,
    LEFT_NUMBERS,
    RIGHT_NUMBERS,
    Side,
    distance_from_center,
    side_of,
)


logger = logging.getLogger(__name__)


# =============================================================================
# Types
# =============================================================================

class FormationType(str, Enum):
    BUNCH = "bunch"
    TRIPS = "trips"
    EMPTY = "empty"
    SPREAD = "spread"
    HEAVY = "heavy"
    I_FORM = "i-form"
    STRONG = "strong"
    BALANCED = "balanced"


HEAVY_GROUPINGS = frozenset({"21", "22", "12", "13"})


@dataclass(frozen=True)
class PersonnelCounts:
    """Offensive personnel on the field."""
    qb: int = 0
    rb: int = 0
    wr: int = 0
    te: int = 0
    fb: int = 0

    @classmethod
    def from_players(cls, offense: List[Player]) -> PersonnelCounts:
        counts = {t: 0 for t in (PlayerType.QB, PlayerType.RB, PlayerType.WR, PlayerType.TE, PlayerType.FB)}
        for p in offense:
            if p.player_type in counts:
                counts[p.player_type] += 1
        return cls(
            qb=counts[PlayerType.QB],
            rb=counts[PlayerType.RB],
            wr=counts[PlayerType.WR],
            te=counts[PlayerType.TE],
            fb=counts[PlayerType.FB],
        )

    @property
    def backs(self) -> int:
        return self.rb + self.fb

    @property
    def grouping(self) -> str:
        """Personnel grouping shorthand: backs then tight ends ("11", "21")."""
        return f"{self.backs}{self.te}"


@dataclass
class ReceiverSets:
    """Receiver set flags."""
    is_bunch: bool = False
    bunch_side: Optional[Side] = None
    is_stack: bool = False
    stack_side: Optional[Side] = None
    is_twins: bool = False
    twins_side: Optional[Side] = None
    is_spread: bool = False
    is_heavy: bool = False
    is_balanced: bool = False


@dataclass
class FormationAnalysis:
    """Result of analyzing an offensive formation.

    Attributes:
        strength: Strong side of the formation
        receivers_left: Eligible non-QB players left of midfield
        receivers_right: Eligible non-QB players right of midfield
        has_te: A tight end is on the field
        te_side: Side of the (first) tight end
        is_trips: Three or more receivers to one side
        trips_side: Side with trips
        receiver_sets: Bunch/stack/twins/spread/heavy flags
        formation_type: Single-label classification
        personnel: Offensive personnel counts
    """
    strength: Side
    receivers_left: List[Player] = field(default_factory=list)
    receivers_right: List[Player] = field(default_factory=list)
    has_te: bool = False
    te_side: Optional[Side] = None
    is_trips: bool = False
    trips_side: Optional[Side] = None
    receiver_sets: ReceiverSets = field(default_factory=ReceiverSets)
    formation_type: FormationType = FormationType.BALANCED
    personnel: PersonnelCounts = field(default_factory=PersonnelCounts)

    @property
    def is_balanced(self) -> bool:
        return self.strength == Side.BALANCED

    @property
    def is_bunch(self) -> bool:
        return self.receiver_sets.is_bunch

    @property
    def weak_side(self) -> Side:
        return self.strength.opposite

    def receivers_on(self, side: Side) -> List[Player]:
        if side == Side.LEFT:
            return self.receivers_left
        if side == Side.RIGHT:
            return self.receivers_right
        return self.receivers_left + self.receivers_right

    def describe(self) -> str:
        """Short human-readable summary."""
        parts = [
            f"{self.formation_type.value}",
            f"strength={self.strength.value}",
            f"{len(self.receivers_left)}x{len(self.receivers_right)}",
            f"personnel={self.personnel.grouping}",
        ]
        if self.is_trips:
            parts.append(f"trips {self.trips_side.value}")
        if self.receiver_sets.is_bunch:
            parts.append("bunch")
        if self.receiver_sets.is_stack:
            parts.append("stack")
        if self.has_te:
            parts.append(f"TE {self.te_side.value}")
        return " | ".join(parts)


# =============================================================================
# Analysis
# =============================================================================

def eligible_receivers(offense: List[Player]) -> List[Player]:
    """Eligible non-QB offensive players."""
    return [p for p in offense if p.is_eligible and p.player_type != PlayerType.QB]


def analyze_formation(
    offense: List[Player],
    thresholds: FormationThresholds = DEFAULT_THRESHOLDS,
) -> FormationAnalysis:
    """Analyze an offensive formation.

    Args:
        offense: Offensive player snapshot
        thresholds: Receiver-set spacing thresholds

    Returns:
        FormationAnalysis. Never raises; formations without a TE or
        trips degrade to width-based strength.
    """
    receivers = eligible_receivers(offense)
    left = [p for p in receivers if side_of(p.pos.x) == Side.LEFT]
    right = [p for p in receivers if side_of(p.pos.x) == Side.RIGHT]

    tight_ends = [p for p in receivers if p.player_type == PlayerType.TE]
    te_side = side_of(tight_ends[0].pos.x) if tight_ends else None

    trips_side: Optional[Side] = None
    if len(left) >= thresholds.trips_min:
        trips_side = Side.LEFT
    elif len(right) >= thresholds.trips_min:
        trips_side = Side.RIGHT

    if trips_side is not None:
        strength = trips_side
    elif te_side is not None:
        strength = te_side
    elif len(left) > len(right):
        strength = Side.LEFT
    elif len(right) > len(left):
        strength = Side.RIGHT
    else:
        strength = Side.BALANCED

    personnel = PersonnelCounts.from_players(offense)
    receiver_sets = identify_receiver_sets(left, right, personnel, thresholds)

    analysis = FormationAnalysis(
        strength=strength,
        receivers_left=left,
        receivers_right=right,
        has_te=bool(tight_ends),
        te_side=te_side,
        is_trips=trips_side is not None,
        trips_side=trips_side,
        receiver_sets=receiver_sets,
        personnel=personnel,
    )
    analysis.formation_type = classify_formation_type(offense, analysis)
    logger.debug("Formation: %s", analysis.describe())
    return analysis


def identify_receiver_sets(
    left: List[Player],
    right: List[Player],
    personnel: PersonnelCounts,
    thresholds: FormationThresholds = DEFAULT_THRESHOLDS,
) -> ReceiverSets:
    """Flag bunch, stack, twins, spread, heavy and balanced sets."""
    sets = ReceiverSets()

    for side, players in ((Side.LEFT, left), (Side.RIGHT, right)):
        # Backs in the backfield never form part of a receiver set
        group = [p for p in players if not p.player_type.is_back]
        if len(group) >= thresholds.trips_min and not sets.is_bunch:
            if all(abs(a.pos.x - b.pos.x) <= thresholds.bunch_spacing for a, b in combinations(group, 2)):
                sets.is_bunch = True
                sets.bunch_side = side
        if not sets.is_stack:
            for a, b in combinations(group, 2):
                if (abs(a.pos.x - b.pos.x) < thresholds.stack_lateral
                        and abs(a.pos.y - b.pos.y) > thresholds.stack_vertical):
                    sets.is_stack = True
                    sets.stack_side = side
                    break
        if len(group) == 2 and not sets.is_twins:
            sets.is_twins = True
            sets.twins_side = side

    sets.is_spread = personnel.wr >= 4
    sets.is_heavy = personnel.grouping in HEAVY_GROUPINGS
    sets.is_balanced = len(left) == len(right) and len(left) > 0
    return sets


def classify_formation_type(offense: List[Player], analysis: FormationAnalysis) -> FormationType:
    """Single-label formation type, first match wins."""
    if analysis.receiver_sets.is_bunch:
        return FormationType.BUNCH
    if analysis.is_trips:
        return FormationType.TRIPS
    if analysis.personnel.backs == 0:
        return FormationType.EMPTY
    if analysis.receiver_sets.is_spread:
        return FormationType.SPREAD
    if analysis.receiver_sets.is_heavy:
        return FormationType.HEAVY

    backs = [p for p in offense if p.player_type.is_back]
    if len(backs) == 2:
        a, b = backs
        if abs(a.pos.x - b.pos.x) < 2 and abs(a.pos.y - b.pos.y) > 3:
            return FormationType.I_FORM

    tes = [p for p in offense if p.player_type == PlayerType.TE]
    rbs = [p for p in offense if p.player_type == PlayerType.RB]
    if tes and rbs and side_of(tes[0].pos.x) == side_of(rbs[0].pos.x):
        return FormationType.STRONG
    return FormationType.BALANCED


# =============================================================================
# Receiver Numbering
# =============================================================================

def receivers_by_alignment(analysis: FormationAnalysis, side: Side) -> List[Player]:
    """Receivers on one side numbered outside-in (#1 first).

    Backs are not numbered.
    """
    group = [p for p in analysis.receivers_on(side) if not p.player_type.is_back]
    if side == Side.LEFT:
        return sorted(group, key=lambda p: p.pos.x)
    return sorted(group, key=lambda p: -p.pos.x)


def receiver_keys(offense: List[Player], analysis: FormationAnalysis) -> Dict[str, Player]:
    """Map man-coverage keys to receivers.

    Keys: "#1_left", "#2_left", "#3_left" (and right), "#1_strong",
    "#2_strong", "#3_strong", "#1_weak", "#2_weak", "#3_weak", "slot", "te", "rb".
    Keys with no matching receiver are absent.
    """
    keys: Dict[str, Player] = {}
    strong = analysis.strength if analysis.strength != Side.BALANCED else Side.RIGHT
    for side in (Side.LEFT, Side.RIGHT):
        numbered = receivers_by_alignment(analysis, side)
        for i, player in enumerate(numbered[:3]):
            keys[f"#{i + 1}_{side.value}"] = player
            rel = "strong" if side == strong else "weak"
            keys[f"#{i + 1}_{rel}"] = player

    slots = slot_receivers(offense)
    if slots:
        keys["slot"] = slots[0]
    tes = [p for p in eligible_receivers(offense) if p.player_type == PlayerType.TE]
    if tes:
        keys["te"] = tes[0]
    backs = [p for p in eligible_receivers(offense) if p.player_type.is_back]
    if backs:
        keys["rb"] = sorted(backs, key=lambda p: p.pos.y)[0]
    return keys


def slot_receivers(offense: List[Player]) -> List[Player]:
    """Receivers aligned inside the numbers and within 10 yards of center."""
    return [
        p for p in eligible_receivers(offense)
        if not p.player_type.is_back
        and LEFT_NUMBERS < p.pos.x < RIGHT_NUMBERS
        and distance_from_center(p.pos.x) < 10
    ]


def widest_receivers(offense: List[Player]) -> Tuple[Optional[Player], Optional[Player]]:
    """Widest receiver on each side (left, right)."""
    receivers = eligible_receivers(offense)
    left = [p for p in receivers if side_of(p.pos.x) == Side.LEFT]
    right = [p for p in receivers if side_of(p.pos.x) == Side.RIGHT]
    widest_left = min(left, key=lambda p: p.pos.x) if left else None
    widest_right = max(right, key=lambda p: p.pos.x) if right else None
    return widest_left, widest_right


def is_backfield(player: Player, los: float, thresholds: FormationThresholds = DEFAULT_THRESHOLDS) -> bool:
    """Player is aligned in the backfield."""
    return player.pos.y < los - thresholds.backfield_depth


# =============================================================================
# Gaps and Leverage
# =============================================================================

GAP_OFFSETS = {"A": 1.5, "B": 4.0, "C": 7.0, "D": 10.0}


def determine_gaps(offense: List[Player], center_x: float = FIELD_CENTER) -> Dict[str, float]:
    """Run-fit gap x positions. D gaps only exist with a tight end."""
    has_te = any(p.player_type == PlayerType.TE for p in offense)
    gaps: Dict[str, float] = {}
    for name, offset in GAP_OFFSETS.items():
        if name == "D" and not has_te:
            continue
        gaps[f"{name}_left"] = center_x - offset
        gaps[f"{name}_right"] = center_x + offset
    return gaps


def leverage_against(defender_x: float, receiver_x: float) -> Leverage:
    """Leverage a defender has on a receiver.

    Head-up within a yard; inside when the defender is between the
    receiver and the middle of the field.
    """
    if abs(defender_x - receiver_x) < 1:
        return Leverage.HEAD_UP
    if distance_from_center(defender_x) < distance_from_center(receiver_x):
        return Leverage.INSIDE
    return Leverage.OUTSIDE


def calculate_leverages(offense: List[Player], defense: List[Player]) -> Dict[str, Leverage]:
    """Leverage of each defender against the nearest eligible receiver."""
    receivers = eligible_receivers(offense)
    leverages: Dict[str, Leverage] = {}
    if not receivers:
        return leverages
    for defender in defense:
        nearest = min(receivers, key=lambda r: r.pos.distance_to(defender.pos))
        leverages[defender.id] = leverage_against(defender.pos.x, nearest.pos.x)
    return leverages
