"""Coverage validator - sanity checks on an installed coverage.

Errors make a call unusable:
- DEFENDER_COUNT: anything other than seven coverage players
- DUPLICATE_ASSIGNMENT: two defenders manned up on one receiver
- UNCOVERED_RECEIVER: an eligible receiver nobody has in a man scheme
- INVALID_ZONE: a zone responsibility with no zone or off the field

Warnings flag calls that will work but are a poor fit for the personnel
or the formation (Tampa 2 with a dime package, Cover 0 against two tight
ends). Nothing here raises; problems come back as data.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from ..core.entities import CoverageResponsibility, Player, ResponsibilityType
from ..core.field import FIELD_WIDTH, Side
from ..plays.coverages import CoverageType, ZoneType, build_zone
from .formation import PersonnelCounts, analyze_formation, eligible_receivers
from .personnel import DEFENDERS_ON_FIELD, DefensivePersonnel


logger = logging.getLogger(__name__)


DEEP_ZONE_DEPTH = 12.0
SPREAD_RECEIVERS = 4
NICKEL_RECEIVERS = 3


class ValidationErrorType(str, Enum):
    DEFENDER_COUNT = "DEFENDER_COUNT"
    DUPLICATE_ASSIGNMENT = "DUPLICATE_ASSIGNMENT"
    UNCOVERED_RECEIVER = "UNCOVERED_RECEIVER"
    INVALID_ZONE = "INVALID_ZONE"


class ValidationWarningType(str, Enum):
    PERSONNEL_MISMATCH = "PERSONNEL_MISMATCH"
    SUBOPTIMAL_ASSIGNMENT = "SUBOPTIMAL_ASSIGNMENT"
    FORMATION_MISMATCH = "FORMATION_MISMATCH"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# =============================================================================
# Result Types
# =============================================================================

@dataclass
class ValidationError:
    type: ValidationErrorType
    message: str
    details: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ValidationWarning:
    type: ValidationWarningType
    severity: Severity
    message: str
    suggestion: Optional[str] = None


@dataclass
class ValidationStats:
    """Assignment counts for a defense.

    Attributes:
        total_defenders: Coverage players checked
        man_assignments: Defenders with a man target
        zone_assignments: Defenders with a zone
        blitzers: Defenders rushing
        deep_safeties: Zone defenders at 12+ yards
        uncovered_receivers: Eligible receivers with no man defender
        duplicate_assignments: Receivers with more than one man defender
    """
    total_defenders: int = 0
    man_assignments: int = 0
    zone_assignments: int = 0
    blitzers: int = 0
    deep_safeties: int = 0
    uncovered_receivers: List[str] = field(default_factory=list)
    duplicate_assignments: List[str] = field(default_factory=list)


@dataclass
class ValidationResult:
    is_valid: bool
    errors: List[ValidationError] = field(default_factory=list)
    warnings: List[ValidationWarning] = field(default_factory=list)
    stats: ValidationStats = field(default_factory=ValidationStats)

    def warnings_at(self, severity: Severity) -> List[ValidationWarning]:
        return [w for w in self.warnings if w.severity == severity]

    def summary(self) -> str:
        status = "valid" if self.is_valid else f"{len(self.errors)} error(s)"
        return f"{status}, {len(self.warnings)} warning(s)"


# =============================================================================
# Stats
# =============================================================================

def _man_map(defenders: List[Player]) -> Dict[str, List[str]]:
    """Receiver id -> ids of the defenders manned up on it."""
    assignments: Dict[str, List[str]] = {}
    for d in defenders:
        resp = d.responsibility
        if resp is not None and resp.is_man and resp.target_id:
            assignments.setdefault(resp.target_id, []).append(d.id)
    return assignments


def calculate_stats(defenders: List[Player], offense: List[Player]) -> ValidationStats:
    stats = ValidationStats(total_defenders=len(defenders))
    for d in defenders:
        resp = d.responsibility
        if resp is None:
            continue
        if resp.is_man and resp.target_id:
            stats.man_assignments += 1
        elif resp.is_zone:
            stats.zone_assignments += 1
            if resp.zone is not None and resp.zone.depth >= DEEP_ZONE_DEPTH:
                stats.deep_safeties += 1
        elif resp.type == ResponsibilityType.BLITZ:
            stats.blitzers += 1

    man_map = _man_map(defenders)
    stats.duplicate_assignments = [target for target, ids in man_map.items() if len(ids) > 1]
    stats.uncovered_receivers = [r.id for r in eligible_receivers(offense) if r.id not in man_map]
    return stats


def _invalid_zones(defenders: List[Player]) -> List[str]:
    bad = []
    for d in defenders:
        resp = d.responsibility
        if resp is None or not resp.is_zone:
            continue
        if resp.zone is None or not 0.0 <= resp.zone.center.x <= FIELD_WIDTH:
            bad.append(d.id)
    return bad


# =============================================================================
# Compatibility Checks
# =============================================================================

def check_personnel_compatibility(
    coverage: CoverageType,
    personnel: DefensivePersonnel,
) -> List[ValidationWarning]:
    """Warnings for a coverage the defensive personnel can't run well."""
    warnings: List[ValidationWarning] = []

    if coverage == CoverageType.TAMPA_2 and personnel.lb < 3:
        warnings.append(ValidationWarning(
            ValidationWarningType.PERSONNEL_MISMATCH,
            Severity.HIGH,
            "Tampa 2 requires at least 3 LBs (MLB drops to deep middle)",
            "Switch to Base (4-3) personnel or select a different coverage",
        ))

    if coverage == CoverageType.COVER_2 and personnel.s < 2:
        warnings.append(ValidationWarning(
            ValidationWarningType.PERSONNEL_MISMATCH,
            Severity.HIGH,
            "Cover 2 requires 2 safeties for deep halves",
            "Use personnel with 2 safeties",
        ))

    if coverage in (CoverageType.COVER_4, CoverageType.QUARTERS, CoverageType.COVER_6) and personnel.s < 2:
        warnings.append(ValidationWarning(
            ValidationWarningType.PERSONNEL_MISMATCH,
            Severity.MEDIUM,
            f"{coverage.label} works best with 2 safeties for quarters coverage",
            "Consider using 2-safety personnel",
        ))

    if coverage == CoverageType.COVER_0 and personnel.cb < 3:
        warnings.append(ValidationWarning(
            ValidationWarningType.SUBOPTIMAL_ASSIGNMENT,
            Severity.MEDIUM,
            "Cover 0 with < 3 CBs may struggle vs 3+ WR sets",
            "Add more CBs or switch to zone coverage",
        ))

    if personnel.lb == 1 and coverage == CoverageType.COVER_3:
        warnings.append(ValidationWarning(
            ValidationWarningType.PERSONNEL_MISMATCH,
            Severity.LOW,
            "Dime package (1 LB) may be weak in run support",
            "Consider Nickel (2 LB) for better balance",
        ))

    return warnings


def check_formation_compatibility(
    coverage: CoverageType,
    offense: List[Player],
    personnel: DefensivePersonnel,
) -> List[ValidationWarning]:
    """Warnings for a coverage that matches up poorly with the formation."""
    warnings: List[ValidationWarning] = []
    analysis = analyze_formation(offense)
    counts = analysis.personnel
    pass_catchers = counts.wr + counts.te

    if analysis.is_trips and coverage.is_quarters:
        warnings.append(ValidationWarning(
            ValidationWarningType.FORMATION_MISMATCH,
            Severity.LOW,
            "Quarters coverage can be vulnerable to trips formations",
            "Consider rotating to Cover 3 or Cover 6",
        ))

    if counts.backs == 0 and coverage == CoverageType.TAMPA_2:
        warnings.append(ValidationWarning(
            ValidationWarningType.FORMATION_MISMATCH,
            Severity.MEDIUM,
            "Tampa 2 vs empty can leave middle vulnerable",
            "Consider Cover 1 or Cover 2 Man",
        ))

    if counts.te >= 2 and coverage == CoverageType.COVER_0:
        warnings.append(ValidationWarning(
            ValidationWarningType.FORMATION_MISMATCH,
            Severity.LOW,
            "Cover 0 vs heavy formations may lack run support",
            "Consider Cover 3 or Cover 4 for better run fits",
        ))

    if pass_catchers >= SPREAD_RECEIVERS and personnel.dbs < pass_catchers:
        warnings.append(ValidationWarning(
            ValidationWarningType.PERSONNEL_MISMATCH,
            Severity.MEDIUM,
            "May need more DBs vs spread formation",
            "Use Nickel or Dime personnel",
        ))

    return warnings


# =============================================================================
# Validation
# =============================================================================

def validate_coverage_assignments(
    defenders: List[Player],
    offense: List[Player],
    coverage: CoverageType,
) -> ValidationResult:
    """Check an installed coverage.

    Args:
        defenders: Defenders with responsibilities installed
        offense: Offensive snapshot
        coverage: The coverage call

    Returns:
        ValidationResult; ``is_valid`` is False when any error was found.
        Warnings never affect validity.
    """
    stats = calculate_stats(defenders, offense)
    errors: List[ValidationError] = []

    if stats.total_defenders != DEFENDERS_ON_FIELD:
        errors.append(ValidationError(
            ValidationErrorType.DEFENDER_COUNT,
            f"Invalid defender count: {stats.total_defenders}. Must be exactly {DEFENDERS_ON_FIELD}",
            {"actual": stats.total_defenders, "required": DEFENDERS_ON_FIELD},
        ))

    if stats.duplicate_assignments:
        errors.append(ValidationError(
            ValidationErrorType.DUPLICATE_ASSIGNMENT,
            f"Duplicate assignments found: {', '.join(stats.duplicate_assignments)}",
            {"duplicates": list(stats.duplicate_assignments)},
        ))

    if coverage.is_man and stats.uncovered_receivers:
        errors.append(ValidationError(
            ValidationErrorType.UNCOVERED_RECEIVER,
            f"Uncovered receivers in man coverage: {', '.join(stats.uncovered_receivers)}",
            {"uncovered": list(stats.uncovered_receivers)},
        ))

    bad_zones = _invalid_zones(defenders)
    if bad_zones:
        errors.append(ValidationError(
            ValidationErrorType.INVALID_ZONE,
            f"Invalid zones for: {', '.join(bad_zones)}",
            {"defenders": bad_zones},
        ))

    personnel = DefensivePersonnel.from_defenders(defenders)
    warnings = check_personnel_compatibility(coverage, personnel)
    warnings.extend(check_formation_compatibility(coverage, offense, personnel))

    result = ValidationResult(is_valid=not errors, errors=errors, warnings=warnings, stats=stats)
    logger.debug("%s validation: %s", coverage.value, result.summary())
    return result


def suggested_personnel(coverage: CoverageType, offense: List[Player]) -> DefensivePersonnel:
    """Seven-man personnel that fits the coverage and formation."""
    counts = PersonnelCounts.from_players(offense)
    pass_catchers = counts.wr + counts.te

    if coverage == CoverageType.TAMPA_2:
        return DefensivePersonnel(cb=2, s=2, lb=3, nb=0)
    if coverage.is_man and pass_catchers >= SPREAD_RECEIVERS:
        return DefensivePersonnel(cb=3, s=1, lb=1, nb=2)
    if pass_catchers == NICKEL_RECEIVERS:
        return DefensivePersonnel(cb=3, s=2, lb=1, nb=1)
    if counts.te >= 2:
        return DefensivePersonnel(cb=2, s=2, lb=3, nb=0)
    return DefensivePersonnel(cb=3, s=2, lb=1, nb=1)


def auto_fix_assignments(
    defenders: List[Player],
    offense: List[Player],
    coverage: CoverageType,
    los: float = 0.0,
) -> Dict[str, CoverageResponsibility]:
    """Repair duplicate man assignments.

    The first defender on a receiver keeps it. Each later one takes the
    next uncovered receiver, or drops into the middle hook when every
    receiver is covered. A wrong defender count is logged, not fixed.

    Returns:
        Defender id -> new responsibility for the defenders that changed
    """
    stats = calculate_stats(defenders, offense)
    if stats.total_defenders != DEFENDERS_ON_FIELD:
        logger.warning("Defender count mismatch: %d, leaving as is", stats.total_defenders)

    fixes: Dict[str, CoverageResponsibility] = {}
    if not stats.duplicate_assignments:
        return fixes

    uncovered = list(stats.uncovered_receivers)
    seen = set()
    for d in defenders:
        resp = d.responsibility
        if resp is None or not resp.is_man or not resp.target_id:
            continue
        if resp.target_id in seen:
            if uncovered:
                fixes[d.id] = CoverageResponsibility.man(uncovered.pop(0))
            else:
                fixes[d.id] = CoverageResponsibility.zone_of(build_zone(ZoneType.HOOK_MIDDLE, los, Side.RIGHT))
            logger.debug("%s: duplicate on %s reassigned", d.id, resp.target_id)
        seen.add(resp.target_id)

    logger.debug("%s auto-fix: %d reassignment(s)", coverage.value, len(fixes))
    return fixes
