"""Engine configuration - randomness control and shared thresholds.

Pick-play success is the only random draw in the engine. It always comes
from a ``random.Random`` built here (or supplied by the caller), so a
seeded config reproduces every outcome.

Per-coverage depth/width tables live in ``coverage_engine.plays.coverages``.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class SimulationMode(str, Enum):
    """Engine variance mode."""
    DETERMINISTIC = "deterministic"  # Fixed seed - for tests and film study
    REALISTIC = "realistic"          # Seed from OS entropy unless given


# =============================================================================
# Configuration
# =============================================================================

DEFAULT_DETERMINISTIC_SEED = 0


@dataclass(frozen=True)
class EngineConfig:
    """Top-level engine configuration."""
    mode: SimulationMode = SimulationMode.REALISTIC
    seed: Optional[int] = None  # For reproducible randomness

    def create_rng(self) -> random.Random:
        """Build the random source used for pick-play resolution."""
        if self.seed is not None:
            return random.Random(self.seed)
        if self.mode == SimulationMode.DETERMINISTIC:
            return random.Random(DEFAULT_DETERMINISTIC_SEED)
        return random.Random()


@dataclass(frozen=True)
class FormationThresholds:
    """Spacing thresholds for receiver-set classification (yards).

    Formation analysis and pick detection read the same instance so the
    two can never disagree about what a stack is. Bunch spacing is kept
    as two named values: a three-man bunch for alignment purposes is
    looser than the tight cluster needed to run a legal rub.
    """
    bunch_spacing: float = 4.0        # Max lateral spread of a 3-man bunch
    pick_bunch_spacing: float = 3.0   # Max spacing (both axes) for a rub bunch
    stack_lateral: float = 2.0        # Max lateral gap for a stack
    stack_vertical: float = 2.0       # Min vertical gap for a stack
    trips_min: int = 3                # Receivers to one side for trips
    slot_distance: float = 8.0        # Max distance from center for a slot
    backfield_depth: float = 3.0      # Min yards behind the LOS for a back


DEFAULT_THRESHOLDS = FormationThresholds()


# =============================================================================
# Utility Functions
# =============================================================================

def clamp(value: float, min_val: float, max_val: float) -> float:
    """Clamp value between min and max."""
    return max(min_val, min(max_val, value))
