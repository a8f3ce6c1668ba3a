"""Tests for the full defensive setup path."""

import logging

import pytest

from coverage_engine.core.entities import DefenderRole
from coverage_engine.core.field import CENTER_X, FIELD_WIDTH
from coverage_engine.plays.coverages import CoverageRotation, CoverageType
from coverage_engine.plays.formations import Formation, build_offense
from coverage_engine.systems.defense import set_defense
from coverage_engine.systems.personnel import DefensivePersonnel


class TestSetDefense:
    """Tests for set_defense."""

    @pytest.mark.parametrize("coverage", list(CoverageType))
    @pytest.mark.parametrize("formation", list(Formation))
    def test_seven_defenders_on_their_side(self, coverage, formation, los):
        offense = build_offense(formation, los)
        setup = set_defense(coverage, offense, los)

        assert len(setup.defenders) == 7
        assert len({d.id for d in setup.defenders}) == 7
        for d in setup.defenders:
            assert d.role is not None
            assert d.responsibility is not None
            assert 0.0 <= d.pos.x <= FIELD_WIDTH
            assert d.pos.y > los
        assert setup.validation.stats.duplicate_assignments == []

    def test_trips_left_cover3(self, trips_left_offense, los):
        setup = set_defense(CoverageType.COVER_3, trips_left_offense, los)

        assert setup.rotation == CoverageRotation.SKY
        fs = setup.defender("FS")
        assert fs.pos.x == pytest.approx(CENTER_X - 2.0)
        assert fs.pos.y == pytest.approx(los + 15.0)

    def test_no_rotation_outside_cover3(self, trips_left_offense, los):
        assert set_defense(CoverageType.COVER_1, trips_left_offense, los).rotation == CoverageRotation.NONE

    def test_rotation_override(self, trips_right_offense, los):
        setup = set_defense(CoverageType.COVER_3, trips_right_offense, los, rotation=CoverageRotation.CLOUD)
        assert setup.rotation == CoverageRotation.CLOUD

    def test_offense_is_not_mutated(self, bunch_right_offense, los):
        before = [(p.id, p.pos) for p in bunch_right_offense]
        set_defense(CoverageType.COVER_0, bunch_right_offense, los)
        assert [(p.id, p.pos) for p in bunch_right_offense] == before

    def test_explicit_personnel(self, spread_offense, los):
        """Base personnel against four wide still aligns, with a warning."""
        base = DefensivePersonnel(cb=2, s=2, lb=3)
        setup = set_defense(CoverageType.COVER_3, spread_offense, los, personnel=base)

        roles = {d.role for d in setup.defenders}
        assert {DefenderRole.MIKE, DefenderRole.SAM, DefenderRole.WILL} <= roles
        assert setup.personnel == base
        assert setup.validation.is_valid

    def test_man_coverage_is_valid(self, spread_offense, los):
        setup = set_defense(CoverageType.COVER_1, spread_offense, los)
        assert setup.validation.is_valid
        assert setup.validation.stats.uncovered_receivers == []

    def test_positions_map(self, spread_offense, los):
        setup = set_defense(CoverageType.COVER_2, spread_offense, los)
        positions = setup.positions()
        assert set(positions) == {d.id for d in setup.defenders}
        assert setup.defender("nobody") is None

    def test_logs_summary(self, spread_offense, los, caplog):
        with caplog.at_level(logging.INFO, logger="coverage_engine.systems.defense"):
            set_defense(CoverageType.TAMPA_2, spread_offense, los)
        assert "Tampa 2 vs" in caplog.text
