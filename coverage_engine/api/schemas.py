"""Pydantic schemas for the coverage API."""

from typing import List, Optional

from pydantic import BaseModel, Field

from coverage_engine.core.entities import (
    Adjustment,
    CoverageResponsibility,
    Player,
    PlayerType,
    Team,
)
from coverage_engine.core.vec2 import Vec2
from coverage_engine.systems.personnel import DefensivePersonnel
from coverage_engine.systems.validator import ValidationResult


class Position2DSchema(BaseModel):
    """2D position on the field."""

    x: float = 0.0
    y: float = 0.0

    @classmethod
    def from_vec(cls, pos: Vec2) -> "Position2DSchema":
        return cls(x=round(pos.x, 2), y=round(pos.y, 2))


class OffensivePlayerSchema(BaseModel):
    """An offensive player in a request."""

    id: str
    player_type: PlayerType
    x: float = Field(ge=0.0, le=53.33)
    y: float
    is_eligible: bool = True
    is_blocking: bool = False

    def to_player(self) -> Player:
        return Player(
            id=self.id,
            team=Team.OFFENSE,
            player_type=self.player_type,
            pos=Vec2(self.x, self.y),
            is_eligible=self.is_eligible and self.player_type != PlayerType.QB,
            is_blocking=self.is_blocking,
        )


class PersonnelSchema(BaseModel):
    """Defensive personnel counts."""

    cb: int = Field(default=2, ge=0, le=7)
    s: int = Field(default=2, ge=0, le=7)
    lb: int = Field(default=3, ge=0, le=7)
    nb: int = Field(default=0, ge=0, le=7)

    @classmethod
    def from_personnel(cls, personnel: DefensivePersonnel) -> "PersonnelSchema":
        return cls(cb=personnel.cb, s=personnel.s, lb=personnel.lb, nb=personnel.nb)

    def to_personnel(self) -> DefensivePersonnel:
        return DefensivePersonnel(cb=self.cb, s=self.s, lb=self.lb, nb=self.nb)


class OffenseRequest(BaseModel):
    """Offense given by formation name or explicit players."""

    formation: Optional[str] = "spread"
    offense: Optional[List[OffensivePlayerSchema]] = None
    los: float = Field(default=25.0, ge=0.0, le=100.0)


class AlignRequest(OffenseRequest):
    """Request to align a defense."""

    coverage: str = "cover-3"
    personnel: Optional[PersonnelSchema] = None


class MotionRequest(OffenseRequest):
    """Request for the defensive answer to a pre-snap motion."""

    coverage: str = "cover-3"
    player_id: str
    motion_type: str = "jet"


class PersonnelRequest(OffenseRequest):
    """Request to match personnel to an offense."""

    coverage: Optional[str] = None


class ResponsibilitySchema(BaseModel):
    type: str
    target_id: Optional[str] = None
    zone: Optional[str] = None

    @classmethod
    def from_responsibility(cls, resp: Optional[CoverageResponsibility]) -> Optional["ResponsibilitySchema"]:
        if resp is None:
            return None
        return cls(
            type=resp.type.value,
            target_id=resp.target_id,
            zone=resp.zone.name if resp.zone is not None else None,
        )


class DefenderSchema(BaseModel):
    """An aligned defender."""

    id: str
    role: Optional[str] = None
    player_type: str
    position: Position2DSchema
    responsibility: Optional[ResponsibilitySchema] = None

    @classmethod
    def from_player(cls, player: Player) -> "DefenderSchema":
        return cls(
            id=player.id,
            role=player.role.value if player.role else None,
            player_type=player.player_type.value,
            position=Position2DSchema.from_vec(player.pos),
            responsibility=ResponsibilitySchema.from_responsibility(player.responsibility),
        )


class AdjustmentSchema(BaseModel):
    defender_id: str
    position: Position2DSchema
    technique: Optional[str] = None
    leverage: Optional[str] = None
    responsibility: Optional[ResponsibilitySchema] = None

    @classmethod
    def from_adjustment(cls, adj: Adjustment) -> "AdjustmentSchema":
        return cls(
            defender_id=adj.defender_id,
            position=Position2DSchema.from_vec(adj.new_position),
            technique=adj.technique,
            leverage=adj.leverage.value if adj.leverage else None,
            responsibility=ResponsibilitySchema.from_responsibility(adj.new_responsibility),
        )


class ValidationIssueSchema(BaseModel):
    type: str
    message: str
    severity: Optional[str] = None
    suggestion: Optional[str] = None


class ValidationSchema(BaseModel):
    """Validation report."""

    is_valid: bool
    errors: List[ValidationIssueSchema] = Field(default_factory=list)
    warnings: List[ValidationIssueSchema] = Field(default_factory=list)
    stats: dict = Field(default_factory=dict)

    @classmethod
    def from_result(cls, result: ValidationResult) -> "ValidationSchema":
        stats = result.stats
        return cls(
            is_valid=result.is_valid,
            errors=[ValidationIssueSchema(type=e.type.value, message=e.message) for e in result.errors],
            warnings=[
                ValidationIssueSchema(
                    type=w.type.value,
                    message=w.message,
                    severity=w.severity.value,
                    suggestion=w.suggestion,
                )
                for w in result.warnings
            ],
            stats={
                "total_defenders": stats.total_defenders,
                "man_assignments": stats.man_assignments,
                "zone_assignments": stats.zone_assignments,
                "blitzers": stats.blitzers,
                "deep_safeties": stats.deep_safeties,
                "uncovered_receivers": stats.uncovered_receivers,
                "duplicate_assignments": stats.duplicate_assignments,
            },
        )


class AlignResponse(BaseModel):
    """Aligned defense for a coverage call."""

    coverage: str
    formation: str
    rotation: str
    personnel: PersonnelSchema
    defenders: List[DefenderSchema]
    adjustments: List[AdjustmentSchema]
    validation: ValidationSchema


class MotionResponseSchema(BaseModel):
    coverage: str
    motion_type: str
    response: str
    adjustments: List[AdjustmentSchema]


class PersonnelResponse(BaseModel):
    grouping: str
    matched: PersonnelSchema
    package: Optional[str] = None
    suggested: Optional[PersonnelSchema] = None


class CoverageInfoSchema(BaseModel):
    id: str
    name: str
    is_man: bool
