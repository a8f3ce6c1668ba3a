"""Tests for the coverage library and coverage installation."""

import logging

import pytest

from coverage_engine.core.entities import DefenderRole, ResponsibilityType, Zone
from coverage_engine.core.field import FIELD_CENTER, Side
from coverage_engine.core.vec2 import Vec2
from coverage_engine.plays.coverages import (
    COVERAGE_LIBRARY,
    CoverageType,
    ZoneType,
    build_zone,
    get_coverage,
    list_coverages,
    mirror_zone_type,
    resolve_zone_type,
)
from coverage_engine.plays.formations import Formation, build_offense
from coverage_engine.systems.coverage import apply_responsibilities, install_coverage, man_targets
from coverage_engine.systems.formation import analyze_formation
from coverage_engine.systems.personnel import (
    DefensivePackage,
    create_defenders,
    match_personnel,
    package_breakdown,
)


def _defense_for(offense, los, package=None):
    personnel = package_breakdown(package) if package else match_personnel(analyze_formation(offense).personnel)
    return create_defenders(personnel, los)


class TestCoverageType:
    """Tests for coverage call parsing and labels."""

    @pytest.mark.parametrize("name", ["cover_3", "Cover 3", "cover-3", "COVER_3"])
    def test_parse_variants(self, name):
        assert CoverageType.parse(name) == CoverageType.COVER_3

    def test_parse_tampa(self):
        assert CoverageType.parse("tampa_2") == CoverageType.TAMPA_2

    def test_parse_unknown_raises(self):
        with pytest.raises(ValueError):
            CoverageType.parse("cover_9")

    def test_labels(self):
        assert CoverageType.COVER_3.label == "Cover 3"
        assert CoverageType.QUARTERS.label == "Quarters"

    def test_man_and_quarters_flags(self):
        assert CoverageType.COVER_0.is_man
        assert CoverageType.COVER_1.is_man
        assert not CoverageType.COVER_3.is_man
        assert CoverageType.COVER_4.is_quarters
        assert CoverageType.QUARTERS.is_quarters


class TestCoverageLibrary:
    """Tests for coverage definitions."""

    def test_every_type_defined(self):
        assert set(COVERAGE_LIBRARY) == set(CoverageType)
        assert len(list_coverages()) == 8

    def test_get_by_name(self):
        assert get_coverage("cover_1").coverage_type == CoverageType.COVER_1

    def test_deep_safeties(self):
        assert get_coverage(CoverageType.COVER_0).deep_safeties == 0
        assert get_coverage(CoverageType.COVER_3).deep_safeties == 1
        assert get_coverage(CoverageType.COVER_2).deep_safeties == 2

    def test_tampa2_mike_runs_deep_middle(self):
        assignment = get_coverage(CoverageType.TAMPA_2).get_assignment(DefenderRole.MIKE)
        assert assignment.zone_type == ZoneType.DEEP_MIDDLE

    def test_fallbacks(self):
        assert get_coverage(CoverageType.COVER_0).fallback.type == ResponsibilityType.BLITZ
        assert get_coverage(CoverageType.COVER_1).fallback.zone_type == ZoneType.ROBBER

    @pytest.mark.parametrize("coverage", list(CoverageType))
    def test_man_receiver_keys_are_distinct(self, coverage):
        keys = [a.receiver_key for a in get_coverage(coverage).assignments.values() if a.is_man]
        assert len(keys) == len(set(keys))

    def test_cover0_free_safety_key(self):
        assert get_coverage(CoverageType.COVER_0).get_assignment(DefenderRole.FS).receiver_key == "#3_weak"

    def test_describe(self):
        text = get_coverage(CoverageType.COVER_3).describe()
        assert "Cover 3" in text
        assert "ZONE - deep_third_middle" in text


class TestZones:
    """Tests for zone landmarks and zone geometry."""

    def test_build_zone_depth(self):
        zone = build_zone(ZoneType.DEEP_THIRD_MIDDLE, 25.0)
        assert zone.name == "deep_third_middle"
        assert zone.center == Vec2(FIELD_CENTER, 37.0)
        assert zone.depth == 12.0

    def test_strong_zone_resolves_against_strength(self):
        assert resolve_zone_type(ZoneType.CURL_FLAT_STRONG, Side.LEFT) == ZoneType.CURL_FLAT_LEFT
        assert resolve_zone_type(ZoneType.CURL_FLAT_WEAK, Side.LEFT) == ZoneType.CURL_FLAT_RIGHT
        assert resolve_zone_type(ZoneType.HOOK_STRONG, Side.BALANCED) == ZoneType.HOOK_RIGHT

    def test_mirror(self):
        assert mirror_zone_type(ZoneType.DEEP_QUARTER_1) == ZoneType.DEEP_QUARTER_4
        assert mirror_zone_type(ZoneType.DEEP_HALF_RIGHT) == ZoneType.DEEP_HALF_LEFT
        assert mirror_zone_type(ZoneType.ROBBER) == ZoneType.ROBBER

    def test_zone_contains(self):
        zone = Zone("box", Vec2(10, 10), width=4, height=4, depth=5)
        assert zone.contains(Vec2(11.5, 8.5))
        assert not zone.contains(Vec2(13, 10))

    def test_zone_rejects_non_positive_size(self):
        with pytest.raises(ValueError):
            Zone("bad", Vec2(10, 10), width=0, height=4, depth=5)

    def test_widened(self):
        zone = Zone("box", Vec2(10, 10), width=4, height=4, depth=5)
        assert zone.widened(1.2).width == pytest.approx(4.8)
        assert zone.width == 4


class TestInstallCoverage:
    """Tests for turning a call into responsibilities."""

    @pytest.mark.parametrize("coverage", [CoverageType.COVER_0, CoverageType.COVER_1])
    @pytest.mark.parametrize("formation", list(Formation))
    def test_man_targets_are_injective(self, coverage, formation, los):
        offense = build_offense(formation, los)
        defense = _defense_for(offense, los)
        apply_responsibilities(defense, install_coverage(coverage, offense, defense, los))

        targets = list(man_targets(defense).values())
        assert len(targets) == len(set(targets))
        receiver_ids = {p.id for p in offense if p.is_receiver}
        assert set(targets) <= receiver_ids

    def test_every_defender_gets_one_responsibility(self, spread_offense, los):
        defense = _defense_for(spread_offense, los)
        result = install_coverage(CoverageType.COVER_3, spread_offense, defense, los)
        assert set(result) == {d.id for d in defense}

    def test_cover1_corners_on_outside_receivers(self, spread_offense, los):
        defense = _defense_for(spread_offense, los)
        result = install_coverage(CoverageType.COVER_1, spread_offense, defense, los)
        assert result["CB1"].target_id == "X"
        assert result["CB2"].target_id == "Z"
        assert result["FS"].zone.name == "deep_third_middle"

    def test_cover0_leftover_defender_blitzes(self, spread_offense, los):
        """With every receiver taken, a man defender falls back to the blitz."""
        defense = _defense_for(spread_offense, los)
        result = install_coverage(CoverageType.COVER_0, spread_offense, defense, los)
        assert result["MIKE"].type == ResponsibilityType.BLITZ

    def test_cover3_strong_zone_follows_trips(self, trips_left_offense, los):
        defense = _defense_for(trips_left_offense, los)
        result = install_coverage(CoverageType.COVER_3, trips_left_offense, defense, los)
        assert result["SS"].zone.name == "curl_flat_left"

    def test_tampa2_without_mike_degrades(self, spread_offense, los, caplog):
        """A package with no linebackers sends the first nickel to the deep middle."""
        defense = _defense_for(spread_offense, los, DefensivePackage.QUARTER)
        with caplog.at_level(logging.WARNING):
            result = install_coverage(CoverageType.TAMPA_2, spread_offense, defense, los)
        assert result["NB1"].zone.name == "deep_middle"
        assert "Tampa 2 called with 0 linebacker" in caplog.text
