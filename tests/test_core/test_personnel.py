"""Tests for personnel matching, roles and named packages."""

import pytest

from coverage_engine.core.entities import DefenderRole, PlayerType, Team
from coverage_engine.plays.coverages import CoverageType
from coverage_engine.systems.formation import PersonnelCounts
from coverage_engine.systems.personnel import (
    DEFENDERS_ON_FIELD,
    PACKAGES,
    DefensivePackage,
    DefensivePersonnel,
    alternative_coverage,
    assign_roles,
    can_blitz,
    compatibility_warning,
    create_defenders,
    is_coverage_compatible,
    match_personnel,
    package_breakdown,
    package_for_grouping,
    package_for_personnel,
    personnel_for_situation,
    recommended_blitzers,
)


class TestMatchPersonnel:
    """Tests for offensive-to-defensive personnel matching."""

    def test_four_receivers_gets_dime_shape(self):
        """4 WR sets play 3 CB / 2 S / 1 LB / 1 NB."""
        result = match_personnel(PersonnelCounts(qb=1, wr=4, rb=1))
        assert result == DefensivePersonnel(cb=3, s=2, lb=1, nb=1)

    def test_three_receivers_gets_nickel_shape(self):
        result = match_personnel(PersonnelCounts(qb=1, wr=3, te=1, rb=1))
        assert result == DefensivePersonnel(cb=2, s=2, lb=2, nb=1)

    def test_base_shape(self):
        result = match_personnel(PersonnelCounts(qb=1, wr=2, te=1, rb=1, fb=1))
        assert result == DefensivePersonnel(cb=2, s=2, lb=3, nb=0)

    def test_two_tight_ends_keep_two_safeties(self):
        result = match_personnel(PersonnelCounts(qb=1, wr=1, te=2, rb=1, fb=1))
        assert result.s == 2

    @pytest.mark.parametrize("wr,te,rb,fb", [
        (0, 0, 0, 0), (1, 3, 1, 0), (2, 2, 1, 0), (3, 1, 1, 0),
        (4, 0, 1, 0), (5, 0, 0, 0), (2, 1, 1, 1),
    ])
    def test_always_seven(self, wr, te, rb, fb):
        result = match_personnel(PersonnelCounts(qb=1, wr=wr, te=te, rb=rb, fb=fb))
        assert result.total == DEFENDERS_ON_FIELD
        assert result.lb >= 1

    def test_str(self):
        assert str(DefensivePersonnel(cb=3, s=2, lb=1, nb=1)) == "CB 3 / S 2 / LB 1 / NB 1"


class TestRoles:
    """Tests for role assignment and defender creation."""

    def test_base_roles(self):
        roles = [role for _, role in assign_roles(DefensivePersonnel(cb=2, s=2, lb=3))]
        assert roles == [
            DefenderRole.CB1, DefenderRole.CB2, DefenderRole.FS, DefenderRole.SS,
            DefenderRole.MIKE, DefenderRole.SAM, DefenderRole.WILL,
        ]

    def test_single_linebacker_plays_mike(self):
        roles = [role for _, role in assign_roles(DefensivePersonnel(cb=3, s=2, lb=1, nb=1))]
        assert DefenderRole.MIKE in roles
        assert DefenderRole.SAM not in roles

    def test_third_corner_takes_nickel_slot(self):
        pairs = assign_roles(DefensivePersonnel(cb=3, s=2, lb=1, nb=1))
        assert (PlayerType.CB, DefenderRole.NB1) in pairs
        assert (PlayerType.NB, DefenderRole.NB2) in pairs

    def test_roles_are_unique(self):
        for info in PACKAGES.values():
            roles = [role for _, role in assign_roles(info.breakdown)]
            assert len(roles) == len(set(roles))

    def test_too_many_linebackers_raises(self):
        with pytest.raises(ValueError):
            assign_roles(DefensivePersonnel(cb=1, s=1, lb=5))

    def test_too_many_dbs_raises(self):
        with pytest.raises(ValueError):
            assign_roles(DefensivePersonnel(cb=4, s=0, lb=0, nb=3))

    def test_create_defenders(self, los):
        defenders = create_defenders(DefensivePersonnel(cb=2, s=2, lb=2, nb=1), los)
        assert len(defenders) == 7
        assert {d.id for d in defenders} == {"CB1", "CB2", "NB1", "FS", "SS", "MIKE", "SAM"}
        for d in defenders:
            assert d.team == Team.DEFENSE
            assert d.role is not None
            assert d.role.player_type == d.player_type
            assert d.pos.y > los

    def test_from_defenders_round_trip(self, los):
        personnel = DefensivePersonnel(cb=2, s=2, lb=1, nb=2)
        assert DefensivePersonnel.from_defenders(create_defenders(personnel, los)) == personnel


class TestPackages:
    """Tests for named packages and coverage compatibility."""

    @pytest.mark.parametrize("package,expected", [
        (DefensivePackage.BASE, DefensivePersonnel(cb=2, s=2, lb=3)),
        (DefensivePackage.NICKEL, DefensivePersonnel(cb=2, s=2, lb=2, nb=1)),
        (DefensivePackage.DIME, DefensivePersonnel(cb=2, s=2, lb=1, nb=2)),
        (DefensivePackage.QUARTER, DefensivePersonnel(cb=2, s=2, lb=0, nb=3)),
        (DefensivePackage.GOAL_LINE, DefensivePersonnel(cb=2, s=1, lb=4)),
    ])
    def test_breakdowns(self, package, expected):
        breakdown = package_breakdown(package)
        assert breakdown == expected
        assert breakdown.total == DEFENDERS_ON_FIELD

    def test_package_for_grouping(self):
        assert package_for_grouping("11") == DefensivePackage.NICKEL
        assert package_for_grouping("10") == DefensivePackage.DIME
        assert package_for_grouping("99") == DefensivePackage.BASE

    def test_package_for_personnel(self):
        assert package_for_personnel(DefensivePersonnel(cb=3, s=2, lb=1, nb=1)) == DefensivePackage.DIME
        assert package_for_personnel(DefensivePersonnel(cb=2, s=2, lb=3)) == DefensivePackage.BASE

    def test_tampa2_needs_three_linebackers(self):
        assert is_coverage_compatible(CoverageType.TAMPA_2, DefensivePackage.BASE)
        assert not is_coverage_compatible(CoverageType.TAMPA_2, DefensivePackage.NICKEL)
        assert "3 LBs" in compatibility_warning(CoverageType.TAMPA_2, DefensivePackage.DIME)
        assert alternative_coverage(CoverageType.TAMPA_2, DefensivePackage.DIME) == CoverageType.COVER_2

    def test_cover0_not_in_goal_line(self):
        assert not is_coverage_compatible(CoverageType.COVER_0, DefensivePackage.GOAL_LINE)

    def test_compatible_call_has_no_warning(self):
        assert compatibility_warning(CoverageType.COVER_3, DefensivePackage.NICKEL) is None


class TestSituational:
    """Tests for down/distance substitution and blitz rules."""

    def test_goal_line_short_yardage(self):
        assert personnel_for_situation(1, 2, 95, "21") == DefensivePackage.GOAL_LINE

    def test_long_yardage_is_dime(self):
        assert personnel_for_situation(2, 18, 40, "12") == DefensivePackage.DIME

    def test_third_and_long_is_nickel(self):
        assert personnel_for_situation(3, 8, 40, "12") == DefensivePackage.NICKEL

    def test_fourth_and_inches(self):
        assert personnel_for_situation(4, 1, 50, "11") == DefensivePackage.GOAL_LINE

    def test_falls_back_to_grouping(self):
        assert personnel_for_situation(1, 10, 30, "11") == DefensivePackage.NICKEL

    def test_blitz_keeps_five_in_coverage(self):
        assert can_blitz(DefensivePackage.BASE, 2)
        assert not can_blitz(DefensivePackage.BASE, 3)

    def test_dime_can_send_two(self):
        assert can_blitz(DefensivePackage.DIME, 2)

    def test_recommended_blitzers(self):
        assert recommended_blitzers(DefensivePackage.BASE, 2) == [DefenderRole.MIKE, DefenderRole.SAM]
        assert recommended_blitzers(DefensivePackage.DIME, 2) == [DefenderRole.MIKE, DefenderRole.NB1]
