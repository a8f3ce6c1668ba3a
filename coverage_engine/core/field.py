"""Field geometry and coordinate system.

Single, unified coordinate system used by every subsystem.
All measurements in yards.

Coordinate system:
    x = 0 at the left sideline, FIELD_WIDTH at the right sideline
    y = downfield yards in the same frame as the line of scrimmage
    Defense lines up on the positive side (y = los + depth)
"""

from __future__ import annotations

from enum import Enum

from .vec2 import Vec2


# =============================================================================
# Field Dimensions (yards)
# =============================================================================

FIELD_WIDTH = 53.33
FIELD_CENTER = 26.665       # Midfield line used for side partitioning
CENTER_X = 26.67            # Rounded center used by alignment tables

LEFT_SIDELINE = 0.0
RIGHT_SIDELINE = FIELD_WIDTH

LEFT_HASH = 23.58
RIGHT_HASH = 29.75

LEFT_NUMBERS = 9.0
RIGHT_NUMBERS = 44.33


# =============================================================================
# Sides
# =============================================================================

class Side(str, Enum):
    """Field side, also used for formation strength."""
    LEFT = "left"
    RIGHT = "right"
    BALANCED = "balanced"

    @property
    def opposite(self) -> Side:
        if self == Side.LEFT:
            return Side.RIGHT
        if self == Side.RIGHT:
            return Side.LEFT
        return Side.BALANCED

    @property
    def sign(self) -> int:
        """-1 for left, +1 for right, 0 for balanced."""
        if self == Side.LEFT:
            return -1
        if self == Side.RIGHT:
            return 1
        return 0


class HashPosition(str, Enum):
    """Ball position relative to hash marks."""
    LEFT = "left"
    MIDDLE = "middle"
    RIGHT = "right"


HASH_X = {
    HashPosition.LEFT: LEFT_HASH,
    HashPosition.MIDDLE: FIELD_CENTER,
    HashPosition.RIGHT: RIGHT_HASH,
}


# =============================================================================
# Helpers
# =============================================================================

def side_of(x: float) -> Side:
    """Side of the midfield line an x coordinate falls on.

    Players exactly on the midfield line count as right side.
    """
    return Side.LEFT if x < FIELD_CENTER else Side.RIGHT


def distance_from_center(x: float) -> float:
    return abs(x - FIELD_CENTER)


def clamp_x(x: float, margin: float = 0.0) -> float:
    """Clamp an x coordinate inside the sidelines."""
    return max(LEFT_SIDELINE + margin, min(RIGHT_SIDELINE - margin, x))


def mirror_x(x: float) -> float:
    """Reflect an x coordinate across midfield."""
    return FIELD_WIDTH - x


def mirror(pos: Vec2) -> Vec2:
    return Vec2(mirror_x(pos.x), pos.y)


def toward_center(x: float, amount: float) -> float:
    """Move ``x`` toward midfield by ``amount`` yards."""
    return x + amount if x < FIELD_CENTER else x - amount


def toward_sideline(x: float, amount: float) -> float:
    """Move ``x`` away from midfield by ``amount`` yards."""
    return x - amount if x < FIELD_CENTER else x + amount
