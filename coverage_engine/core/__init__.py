"""Core layer - foundational types and utilities."""

from .vec2 import Vec2
from .field import (
    FIELD_WIDTH,
    FIELD_CENTER,
    CENTER_X,
    LEFT_HASH,
    RIGHT_HASH,
    LEFT_NUMBERS,
    RIGHT_NUMBERS,
    Side,
    HashPosition,
)
from .entities import (
    Team,
    PlayerType,
    DefenderRole,
    ResponsibilityType,
    Leverage,
    RouteType,
    MotionType,
    Zone,
    CoverageResponsibility,
    Route,
    Motion,
    Player,
    Adjustment,
    apply_adjustments,
)
from .config import EngineConfig, SimulationMode, FormationThresholds, DEFAULT_THRESHOLDS

__all__ = [
    "Vec2",
    "FIELD_WIDTH",
    "FIELD_CENTER",
    "CENTER_X",
    "LEFT_HASH",
    "RIGHT_HASH",
    "LEFT_NUMBERS",
    "RIGHT_NUMBERS",
    "Side",
    "HashPosition",
    "Team",
    "PlayerType",
    "DefenderRole",
    "ResponsibilityType",
    "Leverage",
    "RouteType",
    "MotionType",
    "Zone",
    "CoverageResponsibility",
    "Route",
    "Motion",
    "Player",
    "Adjustment",
    "apply_adjustments",
    "EngineConfig",
    "SimulationMode",
    "FormationThresholds",
    "DEFAULT_THRESHOLDS",
]
