"""Personnel matching - pick the defensive mix for an offensive grouping.

Two layers:
- ``match_personnel`` turns offensive counts into CB/S/LB/NB counts that
  always sum to seven.
- Named packages (Base, Nickel, Dime, Quarter, Goal Line) with coverage
  compatibility, situational substitution and blitz recommendations.

``assign_roles`` hands every defender its coverage slot exactly once;
everything downstream dispatches on those roles.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from ..core.entities import (
    LINEBACKER_ROLES,
    NICKEL_ROLES,
    DefenderRole,
    Player,
    PlayerType,
    Team,
)
from ..core.field import FIELD_CENTER
from ..core.vec2 import Vec2
from ..plays.coverages import CoverageType
from .formation import PersonnelCounts


logger = logging.getLogger(__name__)

DEFENDERS_ON_FIELD = 7


# =============================================================================
# Defensive Personnel
# =============================================================================

@dataclass(frozen=True)
class DefensivePersonnel:
    """Coverage-player counts. Matcher output always sums to seven."""
    cb: int
    s: int
    lb: int
    nb: int = 0

    @property
    def total(self) -> int:
        return self.cb + self.s + self.lb + self.nb

    @property
    def dbs(self) -> int:
        return self.cb + self.s + self.nb

    @classmethod
    def from_defenders(cls, defenders: List[Player]) -> DefensivePersonnel:
        """Count defenders by player type."""
        counts = {t: 0 for t in (PlayerType.CB, PlayerType.S, PlayerType.LB, PlayerType.NB)}
        for d in defenders:
            if d.player_type in counts:
                counts[d.player_type] += 1
        return cls(
            cb=counts[PlayerType.CB],
            s=counts[PlayerType.S],
            lb=counts[PlayerType.LB],
            nb=counts[PlayerType.NB],
        )

    def __str__(self) -> str:
        return f"CB {self.cb} / S {self.s} / LB {self.lb} / NB {self.nb}"


def match_personnel(offense: PersonnelCounts) -> DefensivePersonnel:
    """Match offensive personnel to a defensive mix.

    Rules:
        WR >= 4: CB 3, S 2, LB 1, NB 1 (dime shape)
        WR >= 3: CB 2, S 2, LB 2, NB 1 (nickel shape)
        else:    CB 2, S 2, LB 3       (base shape)

    Two tight ends, or a tight end with two backs, forces two safeties.
    Linebackers are always recomputed as ``7 - CB - S - NB`` with a floor
    of one, which is what keeps the total at seven.
    """
    if offense.wr >= 4:
        cb, s, nb = 3, 2, 1
    elif offense.wr >= 3:
        cb, s, nb = 2, 2, 1
    else:
        cb, s, nb = 2, 2, 0

    if offense.te >= 2 or (offense.te >= 1 and offense.backs >= 2):
        s = 2

    lb = max(1, DEFENDERS_ON_FIELD - cb - s - nb)
    personnel = DefensivePersonnel(cb=cb, s=s, lb=lb, nb=nb)
    logger.debug("Personnel %s -> %s", offense.grouping, personnel)
    return personnel


# =============================================================================
# Roles
# =============================================================================

def assign_roles(personnel: DefensivePersonnel) -> List[Tuple[PlayerType, DefenderRole]]:
    """Hand out coverage roles for a personnel mix.

    Corners fill CB1/CB2 first; extra corners and nickel backs fill the
    nickel slots; safeties take FS then SS; linebackers fill MIKE, SAM,
    WILL, JACK in that order, so a one-linebacker package plays MIKE.

    Returns:
        (player_type, role) pairs, one per defender

    Raises:
        ValueError: If the mix needs more slots of a kind than exist
    """
    roles: List[Tuple[PlayerType, DefenderRole]] = []
    nickel_slots = list(NICKEL_ROLES)

    corners = [DefenderRole.CB1, DefenderRole.CB2]
    for i in range(personnel.cb):
        if i < len(corners):
            roles.append((PlayerType.CB, corners[i]))
        elif nickel_slots:
            roles.append((PlayerType.CB, nickel_slots.pop(0)))
        else:
            raise ValueError(f"Too many defensive backs for available roles: {personnel}")

    for _ in range(personnel.nb):
        if not nickel_slots:
            raise ValueError(f"Too many nickel backs for available roles: {personnel}")
        roles.append((PlayerType.NB, nickel_slots.pop(0)))

    safeties = [DefenderRole.FS, DefenderRole.SS]
    for i in range(personnel.s):
        if i < len(safeties):
            roles.append((PlayerType.S, safeties[i]))
        elif nickel_slots:
            roles.append((PlayerType.S, nickel_slots.pop(0)))
        else:
            raise ValueError(f"Too many safeties for available roles: {personnel}")

    if personnel.lb > len(LINEBACKER_ROLES):
        raise ValueError(f"Too many linebackers for available roles: {personnel}")
    for role in LINEBACKER_ROLES[:personnel.lb]:
        roles.append((PlayerType.LB, role))

    return roles


# Default pre-snap spots (x, depth) before any coverage is aligned
_DEFAULT_SPOTS: Dict[DefenderRole, Tuple[float, float]] = {
    DefenderRole.CB1: (8.0, 7.0),
    DefenderRole.CB2: (45.33, 7.0),
    DefenderRole.NB1: (36.0, 5.0),
    DefenderRole.NB2: (17.0, 5.0),
    DefenderRole.NB3: (31.0, 8.0),
    DefenderRole.FS: (20.0, 12.0),
    DefenderRole.SS: (33.0, 12.0),
    DefenderRole.MIKE: (FIELD_CENTER, 5.0),
    DefenderRole.SAM: (20.0, 4.5),
    DefenderRole.WILL: (33.0, 4.5),
    DefenderRole.JACK: (14.0, 3.5),
}


def create_defenders(personnel: DefensivePersonnel, los: float) -> List[Player]:
    """Build a role-tagged defense at default spots.

    Defender ids are the role names ("CB1", "FS", "MIKE", ...).
    """
    defenders = []
    for player_type, role in assign_roles(personnel):
        x, depth = _DEFAULT_SPOTS[role]
        defenders.append(Player(
            id=role.value,
            team=Team.DEFENSE,
            player_type=player_type,
            pos=Vec2(x, los + depth),
            role=role,
            max_speed=_DEFENDER_SPEEDS[player_type],
        ))
    return defenders


_DEFENDER_SPEEDS = {
    PlayerType.CB: 9.1,
    PlayerType.S: 8.8,
    PlayerType.LB: 8.3,
    PlayerType.NB: 9.0,
}


# =============================================================================
# Named Packages
# =============================================================================

class DefensivePackage(str, Enum):
    BASE = "Base"
    NICKEL = "Nickel"
    DIME = "Dime"
    QUARTER = "Quarter"
    GOAL_LINE = "Goal Line"


@dataclass(frozen=True)
class PackageInfo:
    """DB/LB split for a named package."""
    package: DefensivePackage
    dbs: int
    lbs: int
    breakdown: DefensivePersonnel


PACKAGES: Dict[DefensivePackage, PackageInfo] = {
    DefensivePackage.BASE: PackageInfo(DefensivePackage.BASE, 4, 3, DefensivePersonnel(cb=2, s=2, lb=3)),
    DefensivePackage.NICKEL: PackageInfo(DefensivePackage.NICKEL, 5, 2, DefensivePersonnel(cb=2, s=2, lb=2, nb=1)),
    DefensivePackage.DIME: PackageInfo(DefensivePackage.DIME, 6, 1, DefensivePersonnel(cb=2, s=2, lb=1, nb=2)),
    DefensivePackage.QUARTER: PackageInfo(DefensivePackage.QUARTER, 7, 0, DefensivePersonnel(cb=2, s=2, lb=0, nb=3)),
    DefensivePackage.GOAL_LINE: PackageInfo(DefensivePackage.GOAL_LINE, 3, 4, DefensivePersonnel(cb=2, s=1, lb=4)),
}

GROUPING_TO_PACKAGE: Dict[str, DefensivePackage] = {
    "10": DefensivePackage.DIME,
    "11": DefensivePackage.NICKEL,
    "12": DefensivePackage.BASE,
    "21": DefensivePackage.BASE,
    "22": DefensivePackage.GOAL_LINE,
    "13": DefensivePackage.GOAL_LINE,
    "20": DefensivePackage.NICKEL,
    "00": DefensivePackage.DIME,
}


def package_for_grouping(grouping: str) -> DefensivePackage:
    """Package that answers an offensive grouping, Base when unknown."""
    return GROUPING_TO_PACKAGE.get(grouping, DefensivePackage.BASE)


def package_breakdown(package: DefensivePackage) -> DefensivePersonnel:
    return PACKAGES[package].breakdown


def package_for_personnel(personnel: DefensivePersonnel) -> Optional[DefensivePackage]:
    """Named package with the same DB/LB split, if any."""
    for info in PACKAGES.values():
        if info.dbs == personnel.dbs and info.lbs == personnel.lb:
            return info.package
    return None


# =============================================================================
# Coverage Compatibility
# =============================================================================

@dataclass(frozen=True)
class CoverageRequirement:
    """What a coverage needs from the personnel package."""
    min_lbs: int = 0
    min_dbs: int = 0
    min_safeties: int = 0
    incompatible: Tuple[DefensivePackage, ...] = ()
    warning: Optional[str] = None
    alternative: Optional[CoverageType] = None


COVERAGE_REQUIREMENTS: Dict[CoverageType, CoverageRequirement] = {
    CoverageType.TAMPA_2: CoverageRequirement(
        min_lbs=3,
        incompatible=(DefensivePackage.DIME, DefensivePackage.QUARTER),
        warning="Tampa 2 requires minimum 3 LBs for Mike to drop deep",
        alternative=CoverageType.COVER_2,
    ),
    CoverageType.COVER_0: CoverageRequirement(
        min_dbs=5,
        incompatible=(DefensivePackage.GOAL_LINE,),
        warning="Cover 0 requires sufficient DBs for man coverage",
    ),
    CoverageType.COVER_1: CoverageRequirement(min_safeties=2),
    CoverageType.COVER_2: CoverageRequirement(min_safeties=2),
    CoverageType.COVER_3: CoverageRequirement(
        min_safeties=1,
        min_lbs=2,
        incompatible=(DefensivePackage.QUARTER,),
        warning="Cover 3 works best with at least 2 LBs for underneath coverage",
    ),
    CoverageType.COVER_4: CoverageRequirement(
        min_dbs=4,
        incompatible=(DefensivePackage.GOAL_LINE,),
        warning="Cover 4 requires 4 DBs for deep quarters",
    ),
    CoverageType.COVER_6: CoverageRequirement(
        min_dbs=4,
        incompatible=(DefensivePackage.GOAL_LINE,),
        warning="Cover 6 requires sufficient DBs for split-field coverage",
    ),
}


def _failed_requirement(coverage: CoverageType, package: DefensivePackage) -> Optional[CoverageRequirement]:
    req = COVERAGE_REQUIREMENTS.get(coverage)
    if req is None:
        return None
    info = PACKAGES[package]
    if package in req.incompatible:
        return req
    if req.min_lbs and info.lbs < req.min_lbs:
        return req
    if req.min_dbs and info.dbs < req.min_dbs:
        return req
    return None


def is_coverage_compatible(coverage: CoverageType, package: DefensivePackage) -> bool:
    """Safety minimums are advisory only and handled by the validator."""
    return _failed_requirement(coverage, package) is None


def compatible_coverages(package: DefensivePackage) -> List[CoverageType]:
    return [c for c in CoverageType if is_coverage_compatible(c, package)]


def compatibility_warning(coverage: CoverageType, package: DefensivePackage) -> Optional[str]:
    req = _failed_requirement(coverage, package)
    return req.warning if req else None


def alternative_coverage(coverage: CoverageType, package: DefensivePackage) -> Optional[CoverageType]:
    """Suggested replacement for an incompatible call."""
    req = _failed_requirement(coverage, package)
    return req.alternative if req else None


# =============================================================================
# Situational Substitution
# =============================================================================

def personnel_for_situation(
    down: int,
    distance: float,
    field_position: float,
    grouping: str,
) -> DefensivePackage:
    """Substitute for down, distance and field position.

    Args:
        down: 1-4
        distance: Yards to go
        field_position: Offense's yard line, 0-100 (80+ is the red zone)
        grouping: Offensive personnel grouping ("11")
    """
    if field_position >= 80 and distance <= 3:
        return DefensivePackage.GOAL_LINE
    if distance >= 15:
        return DefensivePackage.DIME
    if down == 3:
        if distance >= 7:
            return DefensivePackage.NICKEL
        if distance <= 2:
            return DefensivePackage.BASE
    if down == 4:
        return DefensivePackage.GOAL_LINE if distance <= 1 else DefensivePackage.DIME
    return package_for_grouping(grouping)


# =============================================================================
# Blitz
# =============================================================================

MIN_COVERAGE_PLAYERS = 5


def can_blitz(package: DefensivePackage, num_blitzers: int) -> bool:
    """Blitz is allowed when five stay in coverage and the package has rushers."""
    if DEFENDERS_ON_FIELD - num_blitzers < MIN_COVERAGE_PLAYERS:
        return False
    if num_blitzers <= PACKAGES[package].lbs:
        return True
    if package in (DefensivePackage.DIME, DefensivePackage.QUARTER):
        return num_blitzers <= 2
    return False


def recommended_blitzers(package: DefensivePackage, num_blitzers: int) -> List[DefenderRole]:
    """Linebackers first, then nickels in sub packages or the SS in base."""
    lbs = PACKAGES[package].lbs
    blitzers: List[DefenderRole] = list(LINEBACKER_ROLES[:min(num_blitzers, lbs)])
    remaining = num_blitzers - len(blitzers)
    if remaining > 0:
        if package in (DefensivePackage.DIME, DefensivePackage.QUARTER):
            blitzers.extend(NICKEL_ROLES[:min(remaining, 2)])
        else:
            blitzers.append(DefenderRole.SS)
    return blitzers
