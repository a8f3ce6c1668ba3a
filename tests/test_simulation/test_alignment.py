"""Tests for the per-coverage alignment generators."""

import pytest

from conftest import make_player
from coverage_engine.core.entities import PlayerType
from coverage_engine.core.field import CENTER_X, FIELD_WIDTH
from coverage_engine.plays.coverages import Cover2Config, CoverageRotation, CoverageType
from coverage_engine.systems.alignment import (
    generate_alignment,
    generate_cover0_alignment,
    generate_cover1_alignment,
    generate_cover2_alignment,
    generate_cover3_alignment,
    tampa2_mike_depth,
)
from coverage_engine.systems.coverage import apply_responsibilities, install_coverage
from coverage_engine.systems.formation import analyze_formation
from coverage_engine.systems.personnel import (
    PACKAGES,
    create_defenders,
    match_personnel,
)


def _defense(coverage, offense, los, personnel=None):
    personnel = personnel or match_personnel(analyze_formation(offense).personnel)
    defense = create_defenders(personnel, los)
    apply_responsibilities(defense, install_coverage(coverage, offense, defense, los))
    return defense


class TestEveryCoverage:
    """Properties every generator must hold."""

    @pytest.mark.parametrize("coverage", list(CoverageType))
    @pytest.mark.parametrize("package", list(PACKAGES))
    def test_seven_spots_on_the_field(self, coverage, package, spread_offense, los):
        defense = _defense(coverage, spread_offense, los, PACKAGES[package].breakdown)
        positions = generate_alignment(coverage, spread_offense, defense, los)

        assert set(positions) == {d.id for d in defense}
        for pos in positions.values():
            assert 0.0 <= pos.x <= FIELD_WIDTH
            assert pos.y > los

    @pytest.mark.parametrize("coverage", list(CoverageType))
    def test_generators_install_missing_responsibilities(self, coverage, trips_right_offense, los):
        """Defenders with a role but no responsibility still get a spot."""
        defense = create_defenders(match_personnel(analyze_formation(trips_right_offense).personnel), los)
        positions = generate_alignment(coverage, trips_right_offense, defense, los)
        assert len(positions) == 7


class TestCover0:
    """Tests for Cover 0 press and bunch box."""

    def test_press_over_man_target(self, spread_offense, los):
        defense = _defense(CoverageType.COVER_0, spread_offense, los)
        positions = generate_cover0_alignment(spread_offense, defense, los)
        x_receiver = next(p for p in spread_offense if p.id == "X")
        assert positions["CB1"].x == pytest.approx(x_receiver.pos.x)
        assert positions["CB1"].y == pytest.approx(los + 1.0)

    def test_bunch_box_staggers_depth(self, bunch_right_offense, los):
        defense = _defense(CoverageType.COVER_0, bunch_right_offense, los)
        positions = generate_cover0_alignment(bunch_right_offense, defense, los)

        assert positions["CB2"].x == pytest.approx(41.0)
        assert positions["CB2"].y == pytest.approx(los + 3.0)
        assert positions["NB1"].x == pytest.approx(39.0)
        assert positions["NB1"].y == pytest.approx(los + 4.0)
        assert positions["NB2"].y == pytest.approx(los + 5.0)


class TestCover1:
    """Tests for Cover 1 corner leverage and the free safety."""

    def test_outside_leverage_off_the_sideline(self, spread_offense, los):
        defense = _defense(CoverageType.COVER_1, spread_offense, los)
        positions = generate_cover1_alignment(spread_offense, defense, los)
        assert positions["CB1"].x == pytest.approx(CENTER_X - 18.0 - 2.0)
        assert positions["CB1"].y == pytest.approx(los + 7.0)

    def test_inside_leverage_near_the_sideline(self, los):
        offense = [
            make_player("QB", PlayerType.QB, CENTER_X, los - 5),
            make_player("X", PlayerType.WR, 4.0, los),
            make_player("Z", PlayerType.WR, 45.0, los),
        ]
        defense = _defense(CoverageType.COVER_1, offense, los)
        positions = generate_cover1_alignment(offense, defense, los)
        assert positions["CB1"].x == pytest.approx(6.0)

    def test_free_safety_shades_to_trips(self, trips_right_offense, los):
        defense = _defense(CoverageType.COVER_1, trips_right_offense, los)
        positions = generate_cover1_alignment(trips_right_offense, defense, los)
        assert positions["FS"].x == pytest.approx(CENTER_X + 2.0)
        assert positions["FS"].y == pytest.approx(los + 14.0)


class TestCover2:
    """Tests for the Cover 2 two-deep shell."""

    def test_safeties_split_deep(self, spread_offense, los):
        defense = _defense(CoverageType.COVER_2, spread_offense, los)
        positions = generate_cover2_alignment(spread_offense, defense, los)

        assert positions["FS"].x == pytest.approx(CENTER_X - 13.0)
        assert positions["SS"].x == pytest.approx(CENTER_X + 13.0)
        for safety in ("FS", "SS"):
            assert 15.0 <= positions[safety].y - los <= 18.0

    def test_safeties_shade_to_trips(self, trips_right_offense, los):
        defense = _defense(CoverageType.COVER_2, trips_right_offense, los)
        positions = generate_cover2_alignment(trips_right_offense, defense, los)
        assert positions["FS"].x == pytest.approx(CENTER_X - 11.0)
        assert positions["SS"].x == pytest.approx(CENTER_X + 15.0)

    def test_safety_depth_is_clamped(self, spread_offense, los):
        defense = _defense(CoverageType.COVER_2, spread_offense, los)
        shallow = generate_cover2_alignment(spread_offense, defense, los, Cover2Config(safety_depth=10.0))
        deep = generate_cover2_alignment(spread_offense, defense, los, Cover2Config(safety_depth=25.0))
        assert shallow["FS"].y == pytest.approx(los + 15.0)
        assert deep["FS"].y == pytest.approx(los + 18.0)

    def test_corner_bails_against_trips(self, trips_right_offense, los):
        defense = _defense(CoverageType.COVER_2, trips_right_offense, los)
        positions = generate_cover2_alignment(trips_right_offense, defense, los)
        assert positions["CB2"].y == pytest.approx(los + 7.0)
        assert positions["CB1"].y == pytest.approx(los + 1.0)


class TestCover3:
    """Tests for the Cover 3 shell and rotations."""

    def test_free_safety_shades_to_trips_left(self, trips_left_offense, los):
        defense = _defense(CoverageType.COVER_3, trips_left_offense, los)
        positions = generate_cover3_alignment(trips_left_offense, defense, los)
        assert positions["FS"].x == pytest.approx(CENTER_X - 2.0)
        assert positions["FS"].y == pytest.approx(los + 12.0)

    def test_free_safety_centered_without_trips(self, spread_offense, los):
        defense = _defense(CoverageType.COVER_3, spread_offense, los)
        positions = generate_cover3_alignment(spread_offense, defense, los)
        assert positions["FS"].x == pytest.approx(CENTER_X)

    def test_sky_rotation(self, trips_right_offense, los):
        defense = _defense(CoverageType.COVER_3, trips_right_offense, los)
        positions = generate_cover3_alignment(
            trips_right_offense, defense, los, rotation=CoverageRotation.SKY)
        assert positions["SS"].x == pytest.approx(41.33)
        assert positions["SS"].y == pytest.approx(los + 6.0)

    def test_cloud_corner_squats(self, trips_right_offense, los):
        defense = _defense(CoverageType.COVER_3, trips_right_offense, los)
        positions = generate_cover3_alignment(
            trips_right_offense, defense, los, rotation=CoverageRotation.CLOUD)
        assert positions["CB2"].y == pytest.approx(los + 1.0)
        assert positions["SS"].y == pytest.approx(los + 13.5)


class TestQuartersAndSplitField:
    """Tests for Cover 4, Cover 6 and Tampa 2 landmarks."""

    def test_cover4_safeties(self, spread_offense, los):
        defense = _defense(CoverageType.COVER_4, spread_offense, los)
        positions = generate_alignment(CoverageType.COVER_4, spread_offense, defense, los)
        assert positions["FS"].x == pytest.approx(18.0)
        assert positions["SS"].x == pytest.approx(35.0)
        assert positions["FS"].y == pytest.approx(los + 12.0)

    def test_cover6_balanced_plays_quarters_left(self, spread_offense, los):
        defense = _defense(CoverageType.COVER_6, spread_offense, los)
        positions = generate_alignment(CoverageType.COVER_6, spread_offense, defense, los)
        assert positions["FS"].x == pytest.approx(20.0)
        assert positions["SS"].x == pytest.approx(36.0)

    def test_cover6_quarters_follow_strength(self, trips_right_offense, los):
        defense = _defense(CoverageType.COVER_6, trips_right_offense, los)
        positions = generate_alignment(CoverageType.COVER_6, trips_right_offense, defense, los)
        assert positions["FS"].x == pytest.approx(34.0)
        assert positions["SS"].x == pytest.approx(17.0)

    def test_tampa2_mike_over_the_ball(self, spread_offense, los):
        defense = _defense(CoverageType.TAMPA_2, spread_offense, los)
        positions = generate_alignment(CoverageType.TAMPA_2, spread_offense, defense, los)
        assert positions["MIKE"].x == pytest.approx(CENTER_X)
        assert positions["MIKE"].y == pytest.approx(los + 4.5)

    @pytest.mark.parametrize("elapsed,depth", [
        (-1.0, 4.5), (0.0, 4.5), (1.0, 11.25), (2.0, 18.0), (5.0, 18.0),
    ])
    def test_tampa2_mike_drop(self, elapsed, depth):
        assert tampa2_mike_depth(elapsed) == pytest.approx(depth)
