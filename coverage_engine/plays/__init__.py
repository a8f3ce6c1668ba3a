"""Plays layer - coverage calls and route library."""

from .coverages import (
    CoverageType,
    CoverageRotation,
    CoverageDefinition,
    RoleAssignment,
    ZoneType,
    build_zone,
    get_coverage,
    list_coverages,
    COVERAGE_LIBRARY,
)
from .routes import (
    RouteProfile,
    SeparationTechnique,
    ROUTE_PROFILES,
    build_route,
    route_timing,
    break_angle,
)
from .formations import Formation, build_offense, list_formations

__all__ = [
    "CoverageType",
    "CoverageRotation",
    "CoverageDefinition",
    "RoleAssignment",
    "ZoneType",
    "build_zone",
    "get_coverage",
    "list_coverages",
    "COVERAGE_LIBRARY",
    "RouteProfile",
    "SeparationTechnique",
    "ROUTE_PROFILES",
    "build_route",
    "route_timing",
    "break_angle",
    "Formation",
    "build_offense",
    "list_formations",
]
