"""Shared pytest fixtures for coverage engine tests."""

import random

import pytest
from fastapi.testclient import TestClient

from coverage_engine.api.main import app
from coverage_engine.core.entities import Player, PlayerType, Team
from coverage_engine.core.field import CENTER_X
from coverage_engine.core.vec2 import Vec2
from coverage_engine.plays.formations import Formation, build_offense


LOS = 25.0


def make_player(
    player_id: str,
    player_type: PlayerType,
    x: float,
    y: float = LOS,
    **kwargs,
) -> Player:
    """Build an offensive player; QBs are ineligible."""
    return Player(
        id=player_id,
        team=Team.OFFENSE,
        player_type=player_type,
        pos=Vec2(x, y),
        is_eligible=player_type != PlayerType.QB,
        **kwargs,
    )


def make_defender(player_id: str, player_type: PlayerType, x: float, y: float, **kwargs) -> Player:
    return Player(
        id=player_id,
        team=Team.DEFENSE,
        player_type=player_type,
        pos=Vec2(x, y),
        **kwargs,
    )


class StubRandom(random.Random):
    """Random source that always rolls the same value."""

    def __init__(self, value: float):
        super().__init__(0)
        self.value = value

    def random(self) -> float:
        return self.value


# =============================================================================
# Offense Fixtures
# =============================================================================


@pytest.fixture
def los() -> float:
    return LOS


@pytest.fixture
def spread_offense() -> list:
    """2x2, four wide receivers, no back."""
    return build_offense(Formation.SPREAD, LOS)


@pytest.fixture
def singleback_offense() -> list:
    """11 personnel with the tight end to the right."""
    return build_offense(Formation.SINGLEBACK, LOS)


@pytest.fixture
def trips_right_offense() -> list:
    return build_offense(Formation.TRIPS_RIGHT, LOS)


@pytest.fixture
def trips_left_offense() -> list:
    return build_offense(Formation.TRIPS_LEFT, LOS)


@pytest.fixture
def bunch_right_offense() -> list:
    return build_offense(Formation.BUNCH_RIGHT, LOS)


@pytest.fixture
def heavy_offense() -> list:
    """22 personnel: two tight ends, two backs."""
    return build_offense(Formation.HEAVY, LOS)


@pytest.fixture
def te_left_offense() -> list:
    """One receiver each side plus a tight end on the left."""
    return [
        make_player("QB", PlayerType.QB, CENTER_X, LOS - 5),
        make_player("X", PlayerType.WR, 8.0),
        make_player("Z", PlayerType.WR, 45.0),
        make_player("Y", PlayerType.TE, 10.0),
    ]


@pytest.fixture
def all_formations() -> list:
    return list(Formation)


# =============================================================================
# API Fixtures
# =============================================================================


@pytest.fixture
def client() -> TestClient:
    """Create test client."""
    return TestClient(app)
