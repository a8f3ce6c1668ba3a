"""Defensive setup - one coverage call from personnel to final spots.

    analyze formation -> match personnel -> create role-tagged defenders
    -> install responsibilities -> generate alignment
    -> coverage-specific formation adjustments -> validate

This is the path a play engine runs once per snap; the in-play systems
(pattern matching, motion, picks) work on the defenders it returns.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..core.entities import Adjustment, Player, apply_adjustments
from ..core.vec2 import Vec2
from ..plays.coverages import CoverageRotation, CoverageType
from .adjustments import apply_coverage_specific_adjustments, determine_cover3_rotation
from .alignment import generate_alignment
from .coverage import apply_responsibilities, install_coverage
from .formation import FormationAnalysis, analyze_formation
from .personnel import DefensivePersonnel, create_defenders, match_personnel
from .validator import ValidationResult, validate_coverage_assignments


logger = logging.getLogger(__name__)


@dataclass
class DefensiveSetup:
    """A fully aligned defense for one snap."""
    coverage: CoverageType
    los: float
    analysis: FormationAnalysis
    personnel: DefensivePersonnel
    defenders: List[Player]
    rotation: CoverageRotation = CoverageRotation.NONE
    adjustments: List[Adjustment] = field(default_factory=list)
    validation: Optional[ValidationResult] = None

    def positions(self) -> Dict[str, Vec2]:
        return {d.id: d.pos for d in self.defenders}

    def defender(self, defender_id: str) -> Optional[Player]:
        return next((d for d in self.defenders if d.id == defender_id), None)


def set_defense(
    coverage: CoverageType,
    offense: List[Player],
    los: float,
    personnel: Optional[DefensivePersonnel] = None,
    rotation: Optional[CoverageRotation] = None,
) -> DefensiveSetup:
    """Build and align the defense for a coverage call.

    Args:
        coverage: Coverage call
        offense: Offensive snapshot (not mutated)
        los: Line of scrimmage
        personnel: Defensive personnel (matched to the offense when None)
        rotation: Single-high rotation (read from the formation when None)

    Returns:
        DefensiveSetup with seven positioned defenders and the validation
        report. Poor fits show up as warnings, never exceptions.
    """
    analysis = analyze_formation(offense)
    personnel = personnel or match_personnel(analysis.personnel)
    defenders = create_defenders(personnel, los)

    apply_responsibilities(defenders, install_coverage(coverage, offense, defenders, los, analysis))

    if rotation is None:
        rotation = determine_cover3_rotation(analysis) if coverage == CoverageType.COVER_3 else CoverageRotation.NONE
    positions = generate_alignment(coverage, offense, defenders, los, rotation=rotation)
    for d in defenders:
        if d.id in positions:
            d.pos = positions[d.id]

    adjustments = apply_coverage_specific_adjustments(coverage, defenders, offense, analysis, los)
    apply_adjustments(defenders, adjustments)

    validation = validate_coverage_assignments(defenders, offense, coverage)
    for warning in validation.warnings:
        logger.debug("%s: %s", coverage.value, warning.message)
    logger.info("%s vs %s: %s (%s)", coverage.label, analysis.describe(), personnel, validation.summary())

    return DefensiveSetup(
        coverage=coverage,
        los=los,
        analysis=analysis,
        personnel=personnel,
        defenders=defenders,
        rotation=rotation,
        adjustments=adjustments,
        validation=validation,
    )
