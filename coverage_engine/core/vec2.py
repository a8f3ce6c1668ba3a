"""2D vector used for every field position in the engine.

Units are yards. The coordinate frame is the sideline-to-sideline field
frame rather than a ball-relative one, see ``coverage_engine.core.field``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Vec2:
    """Immutable 2D vector.

    Coordinate system:
        x = 0 at the left sideline, 53.33 at the right sideline
        y = yards downfield in the same frame as the line of scrimmage;
            offense lines up at y <= los, defense at y = los + depth
    """
    x: float = 0.0
    y: float = 0.0

    # =========================================================================
    # Arithmetic Operations
    # =========================================================================

    def __add__(self, other: Vec2) -> Vec2:
        return Vec2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Vec2) -> Vec2:
        return Vec2(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: float) -> Vec2:
        return Vec2(self.x * scalar, self.y * scalar)

    def __rmul__(self, scalar: float) -> Vec2:
        return Vec2(self.x * scalar, self.y * scalar)

    def __truediv__(self, scalar: float) -> Vec2:
        if scalar == 0:
            return Vec2(0, 0)
        return Vec2(self.x / scalar, self.y / scalar)

    # =========================================================================
    # Vector Operations
    # =========================================================================

    def dot(self, other: Vec2) -> float:
        return self.x * other.x + self.y * other.y

    def length(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y)

    def normalized(self) -> Vec2:
        """Unit vector in same direction (zero vector stays zero)."""
        length = self.length()
        if length < 0.0001:
            return Vec2(0, 0)
        return Vec2(self.x / length, self.y / length)

    def distance_to(self, other: Vec2) -> float:
        return (other - self).length()

    def lerp(self, other: Vec2, t: float) -> Vec2:
        """Linear interpolation to another vector."""
        return Vec2(
            self.x + (other.x - self.x) * t,
            self.y + (other.y - self.y) * t
        )

    def step_toward(self, target: Vec2, distance: float) -> Vec2:
        """Move up to ``distance`` yards toward ``target``.

        Snaps onto the target when it is within reach, so repeated steps
        never overshoot.
        """
        remaining = self.distance_to(target)
        if remaining <= distance or remaining < 0.1:
            return target
        return self + (target - self).normalized() * distance

    # =========================================================================
    # Utility
    # =========================================================================

    def with_x(self, x: float) -> Vec2:
        return Vec2(x, self.y)

    def with_y(self, y: float) -> Vec2:
        return Vec2(self.x, y)

    def shifted(self, dx: float = 0.0, dy: float = 0.0) -> Vec2:
        """Return a copy offset by (dx, dy)."""
        return Vec2(self.x + dx, self.y + dy)

    def rounded(self, decimals: int = 2) -> Vec2:
        return Vec2(round(self.x, decimals), round(self.y, decimals))

    def __repr__(self) -> str:
        return f"Vec2({self.x:.2f}, {self.y:.2f})"

    def __str__(self) -> str:
        return f"({self.x:.2f}, {self.y:.2f})"
