"""REST API router for defensive coverage setup."""

import logging
from typing import List

from fastapi import APIRouter, HTTPException

from coverage_engine.api.schemas import (
    AdjustmentSchema,
    AlignRequest,
    AlignResponse,
    CoverageInfoSchema,
    DefenderSchema,
    MotionRequest,
    MotionResponseSchema,
    OffenseRequest,
    PersonnelRequest,
    PersonnelResponse,
    PersonnelSchema,
    ValidationSchema,
)
from coverage_engine.core.entities import MotionType, Player
from coverage_engine.plays.coverages import CoverageType
from coverage_engine.plays.formations import build_offense
from coverage_engine.systems.defense import DefensiveSetup, set_defense
from coverage_engine.systems.formation import PersonnelCounts
from coverage_engine.systems.motion import get_motion_response, handle_motion_adjustments, motion_for
from coverage_engine.systems.personnel import match_personnel, package_for_personnel
from coverage_engine.systems.validator import suggested_personnel


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/coverage", tags=["coverage"])


def _offense(request: OffenseRequest) -> List[Player]:
    if request.offense:
        return [p.to_player() for p in request.offense]
    if request.formation:
        return build_offense(request.formation, request.los)
    raise ValueError("Either formation or offense is required")


def _setup(request: AlignRequest) -> DefensiveSetup:
    coverage = CoverageType.parse(request.coverage)
    personnel = request.personnel.to_personnel() if request.personnel else None
    return set_defense(coverage, _offense(request), request.los, personnel=personnel)


@router.get("/coverages", response_model=List[CoverageInfoSchema])
async def list_coverages() -> List[CoverageInfoSchema]:
    """List the coverage calls the engine can align."""
    return [CoverageInfoSchema(id=c.value, name=c.label, is_man=c.is_man) for c in CoverageType]


@router.post("/align", response_model=AlignResponse)
async def align_defense(request: AlignRequest) -> AlignResponse:
    """Align seven defenders for a coverage call against an offense."""
    try:
        setup = _setup(request)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return AlignResponse(
        coverage=setup.coverage.value,
        formation=setup.analysis.describe(),
        rotation=setup.rotation.value,
        personnel=PersonnelSchema.from_personnel(setup.personnel),
        defenders=[DefenderSchema.from_player(d) for d in setup.defenders],
        adjustments=[AdjustmentSchema.from_adjustment(a) for a in setup.adjustments],
        validation=ValidationSchema.from_result(setup.validation),
    )


@router.post("/validate", response_model=ValidationSchema)
async def validate_defense(request: AlignRequest) -> ValidationSchema:
    """Validate the assignments a coverage call produces."""
    try:
        setup = _setup(request)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return ValidationSchema.from_result(setup.validation)


@router.post("/motion", response_model=MotionResponseSchema)
async def motion_adjustments(request: MotionRequest) -> MotionResponseSchema:
    """Defensive adjustments for a pre-snap motion."""
    try:
        coverage = CoverageType.parse(request.coverage)
        motion_type = MotionType(request.motion_type)
        offense = _offense(request)
        mover = next((p for p in offense if p.id == request.player_id), None)
        if mover is None:
            raise ValueError(f"No offensive player {request.player_id!r}")
        setup = set_defense(coverage, offense, request.los)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    motion = motion_for(mover, motion_type, request.los)
    adjustments = handle_motion_adjustments(coverage, motion, setup.defenders, offense, request.los)
    return MotionResponseSchema(
        coverage=coverage.value,
        motion_type=motion_type.value,
        response=get_motion_response(coverage, motion_type).value,
        adjustments=[AdjustmentSchema.from_adjustment(a) for a in adjustments],
    )


@router.post("/personnel", response_model=PersonnelResponse)
async def personnel_for_offense(request: PersonnelRequest) -> PersonnelResponse:
    """Match defensive personnel to an offense."""
    try:
        offense = _offense(request)
        coverage = CoverageType.parse(request.coverage) if request.coverage else None
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    counts = PersonnelCounts.from_players(offense)
    matched = match_personnel(counts)
    package = package_for_personnel(matched)
    suggested = suggested_personnel(coverage, offense) if coverage is not None else None
    return PersonnelResponse(
        grouping=counts.grouping,
        matched=PersonnelSchema.from_personnel(matched),
        package=package.value if package else None,
        suggested=PersonnelSchema.from_personnel(suggested) if suggested else None,
    )
