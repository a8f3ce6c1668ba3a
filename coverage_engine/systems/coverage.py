"""Coverage installation - turn a coverage call into responsibilities.

Resolves every role's assignment from the coverage definition against
the current formation:
- Man keys ("#1_left", "#2_strong", "te", "rb") become receiver ids
- Strong/weak zones resolve against formation strength
- Split-field calls flip so their quarters side faces the strength

Man targets are injective: a key that is missing or already taken falls
through to the first uncovered receiver, and to the call's fallback
(robber zone, blitz) when every receiver is covered.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from ..core.entities import (
    LINEBACKER_ROLES,
    CoverageResponsibility,
    DefenderRole,
    Player,
    ResponsibilityType,
)
from ..core.field import Side
from ..plays.coverages import (
    CoverageDefinition,
    CoverageType,
    RoleAssignment,
    ZoneType,
    build_zone,
    get_coverage,
    mirror_zone_type,
)
from .formation import FormationAnalysis, analyze_formation, receiver_keys


logger = logging.getLogger(__name__)


# Roles claim man targets in this order
ROLE_PRIORITY = (
    DefenderRole.CB1,
    DefenderRole.CB2,
    DefenderRole.NB1,
    DefenderRole.NB2,
    DefenderRole.NB3,
    DefenderRole.SS,
    DefenderRole.FS,
    DefenderRole.SAM,
    DefenderRole.MIKE,
    DefenderRole.WILL,
    DefenderRole.JACK,
)

# Order uncovered receivers are picked up in
_FALLBACK_KEYS = ("#1_left", "#1_right", "#2_strong", "#2_weak", "#3_strong", "#3_weak", "te", "rb")


def _role_order(defenders: List[Player]) -> List[Player]:
    ranked = [d for d in defenders if d.role is not None]
    return sorted(ranked, key=lambda d: ROLE_PRIORITY.index(d.role))


def install_coverage(
    coverage: CoverageType | CoverageDefinition,
    offense: List[Player],
    defense: List[Player],
    los: float,
    analysis: Optional[FormationAnalysis] = None,
) -> Dict[str, CoverageResponsibility]:
    """Resolve a coverage call into one responsibility per defender.

    Args:
        coverage: Coverage type or definition
        offense: Offensive player snapshot
        defense: Role-tagged defenders
        los: Line of scrimmage
        analysis: Formation analysis (computed when not given)

    Returns:
        Defender id -> responsibility. Defenders without a role are skipped.
    """
    definition = coverage if isinstance(coverage, CoverageDefinition) else get_coverage(coverage)
    analysis = analysis or analyze_formation(offense)
    strength = analysis.strength

    keys = receiver_keys(offense, analysis)
    receivers = [p for p in offense if p.is_receiver]
    fallback_order: List[Player] = []
    for key in _FALLBACK_KEYS:
        player = keys.get(key)
        if player is not None and player not in fallback_order:
            fallback_order.append(player)
    for player in receivers:
        if player not in fallback_order:
            fallback_order.append(player)

    flip = definition.coverage_type == CoverageType.COVER_6 and strength == Side.RIGHT
    taken: set = set()
    result: Dict[str, CoverageResponsibility] = {}

    ordered = _role_order(defense)
    roles_present = {d.role for d in ordered}
    degrade_tampa = (
        definition.coverage_type == CoverageType.TAMPA_2
        and DefenderRole.MIKE not in roles_present
    )
    lb_count = sum(1 for r in roles_present if r in LINEBACKER_ROLES)
    if definition.coverage_type == CoverageType.TAMPA_2 and lb_count < 3:
        logger.warning(
            "Tampa 2 called with %d linebacker(s); deep middle goes to the "
            "first available defender", lb_count,
        )

    for defender in ordered:
        assignment = definition.get_assignment(defender.role)
        if degrade_tampa and defender.role.is_nickel:
            assignment = RoleAssignment(ResponsibilityType.ZONE, zone_type=ZoneType.DEEP_MIDDLE)
            degrade_tampa = False

        if assignment.is_man:
            target = keys.get(assignment.receiver_key)
            if target is None or target.id in taken:
                target = next((p for p in fallback_order if p.id not in taken), None)
            if target is None:
                assignment = definition.fallback
            else:
                taken.add(target.id)
                result[defender.id] = CoverageResponsibility.man(target.id)
                continue

        result[defender.id] = _resolve(assignment, los, strength, flip)

    return result


def _resolve(assignment: RoleAssignment, los: float, strength: Side, flip: bool) -> CoverageResponsibility:
    if assignment.type == ResponsibilityType.ZONE and assignment.zone_type is not None:
        zone_type = mirror_zone_type(assignment.zone_type) if flip else assignment.zone_type
        return CoverageResponsibility.zone_of(build_zone(zone_type, los, strength))
    if assignment.type == ResponsibilityType.ZONE:
        return CoverageResponsibility.zone_of(build_zone(ZoneType.HOOK_MIDDLE, los, strength))
    if assignment.type == ResponsibilityType.SPY:
        return CoverageResponsibility.spy()
    return CoverageResponsibility.blitz()


def apply_responsibilities(defense: List[Player], responsibilities: Dict[str, CoverageResponsibility]) -> None:
    """Write installed responsibilities onto defender snapshots."""
    for defender in defense:
        if defender.id in responsibilities:
            defender.responsibility = responsibilities[defender.id]


def man_targets(defense: List[Player]) -> Dict[str, str]:
    """Defender id -> man target id for man-assigned defenders."""
    return {
        d.id: d.responsibility.target_id
        for d in defense
        if d.responsibility is not None and d.responsibility.is_man and d.responsibility.target_id
    }
