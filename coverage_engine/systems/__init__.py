"""Systems - defensive and route logic that operates on players."""

from .formation import FormationAnalysis, analyze_formation
from .personnel import DefensivePersonnel, DefensivePackage, match_personnel, create_defenders
from .coverage import install_coverage
from .alignment import generate_alignment
from .adjustments import apply_coverage_specific_adjustments
from .pattern_match import PatternMatchEngine, MatchState, InvalidMatchTransition
from .motion import handle_motion_adjustments, get_motion_response, MotionResponse
from .receiver_movement import ReceiverMovement, RoutePhase
from .option_routes import evaluate_option_route, update_route_for_option
from .pick_plays import analyze_pick_potential, execute_pick_play, defensive_pick_response
from .validator import ValidationResult, validate_coverage_assignments
from .defense import DefensiveSetup, set_defense

__all__ = [
    "FormationAnalysis",
    "analyze_formation",
    "DefensivePersonnel",
    "DefensivePackage",
    "match_personnel",
    "create_defenders",
    "install_coverage",
    "generate_alignment",
    "apply_coverage_specific_adjustments",
    "PatternMatchEngine",
    "MatchState",
    "InvalidMatchTransition",
    "handle_motion_adjustments",
    "get_motion_response",
    "MotionResponse",
    "ReceiverMovement",
    "RoutePhase",
    "evaluate_option_route",
    "update_route_for_option",
    "analyze_pick_potential",
    "execute_pick_play",
    "defensive_pick_response",
    "ValidationResult",
    "validate_coverage_assignments",
    "DefensiveSetup",
    "set_defense",
]
