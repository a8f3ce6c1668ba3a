"""Tests for the pattern-match engine and match rules.

Covers the match state machine, route classification, engine ticks for
single-high, quarters and underneath defenders, and the 2-read, rip/liz,
smash and route distribution helpers.
"""

import pytest

from conftest import make_defender, make_player
from coverage_engine.core.entities import (
    CoverageResponsibility,
    PlayerType,
    RouteType,
)
from coverage_engine.core.field import FIELD_CENTER, Side
from coverage_engine.core.vec2 import Vec2
from coverage_engine.plays.coverages import CoverageType, ZoneType, build_zone
from coverage_engine.plays.routes import build_route
from coverage_engine.systems.pattern_match import (
    InvalidMatchTransition,
    MatchState,
    MatchStateMachine,
    PatternMatchEngine,
    RouteClass,
    analyze_route_distribution,
    classify_route,
    detect_smash_concept,
    distribute_zones,
    execute_palms,
    execute_quarters_match,
    execute_rip_liz,
)


LOS = 25.0


def zone_defender(defender_id, zone_type, x, depth, los=LOS, player_type=PlayerType.CB, role=None):
    return make_defender(
        defender_id, player_type, x, los + depth,
        role=role,
        responsibility=CoverageResponsibility.zone_of(build_zone(zone_type, los)),
    )


# =============================================================================
# State Machine
# =============================================================================


class TestMatchStateMachine:
    """Tests for legal match transitions."""

    def test_starts_in_zone(self):
        fsm = MatchStateMachine("FS")
        assert fsm.state == MatchState.ZONE
        assert not fsm.is_matched
        assert fsm.target_id is None

    def test_zone_to_man_match(self):
        fsm = MatchStateMachine("FS")
        fsm.transition_to(MatchState.MAN_MATCH, target_id="Z", reason="vertical", time=1.1)
        assert fsm.state == MatchState.MAN_MATCH
        assert fsm.target_id == "Z"
        assert len(fsm.history) == 1

    def test_matched_states_are_terminal(self):
        fsm = MatchStateMachine("MIKE")
        fsm.transition_to(MatchState.COLLISION, target_id="SLOT_L")
        with pytest.raises(InvalidMatchTransition):
            fsm.transition_to(MatchState.MAN_MATCH, target_id="Z")

    def test_zone_to_zone_is_invalid(self):
        with pytest.raises(InvalidMatchTransition):
            MatchStateMachine("FS").transition_to(MatchState.ZONE)

    def test_unvalidated_transition(self):
        fsm = MatchStateMachine("FS")
        fsm.transition_to(MatchState.MAN_MATCH, target_id="Z")
        fsm.transition_to(MatchState.COLLISION, target_id="Y", validate=False)
        assert fsm.state == MatchState.COLLISION

    def test_reset(self):
        fsm = MatchStateMachine("FS")
        fsm.transition_to(MatchState.MAN_MATCH, target_id="Z")
        fsm.reset()
        assert fsm.state == MatchState.ZONE
        assert fsm.history == []

    def test_callback(self):
        seen = []
        fsm = MatchStateMachine("FS")
        fsm.on_transition(seen.append)
        fsm.transition_to(MatchState.MAN_MATCH, target_id="Z", time=1.4)
        assert len(seen) == 1
        assert seen[0].from_state == MatchState.ZONE
        assert seen[0].time == 1.4


# =============================================================================
# Route Classification
# =============================================================================


class TestClassifyRoute:
    """Tests for depth/velocity route classes."""

    def test_vertical(self):
        receiver = make_player("Z", PlayerType.WR, 44.0, LOS + 13, velocity=Vec2(0, 8))
        assert classify_route(receiver, LOS) == RouteClass.VERTICAL

    def test_crossing(self):
        receiver = make_player("SLOT", PlayerType.WR, 30.0, LOS + 5, velocity=Vec2(6, 1))
        assert classify_route(receiver, LOS) == RouteClass.CROSSING

    def test_horizontal_when_stationary(self):
        receiver = make_player("SLOT", PlayerType.WR, 30.0, LOS + 5)
        assert classify_route(receiver, LOS) == RouteClass.HORIZONTAL

    def test_breaking(self):
        receiver = make_player("Z", PlayerType.WR, 44.0, LOS + 10, velocity=Vec2(0, 8))
        assert classify_route(receiver, LOS) == RouteClass.BREAKING


# =============================================================================
# Engine
# =============================================================================


class TestPatternMatchEngine:
    """Tests for per-tick match decisions."""

    def test_man_coverage_never_matches(self):
        engine = PatternMatchEngine()
        defender = zone_defender("FS", ZoneType.DEEP_THIRD_MIDDLE, FIELD_CENTER, 12)
        receiver = make_player("Y", PlayerType.TE, FIELD_CENTER, LOS + 14, velocity=Vec2(0, 8))
        assert engine.update(CoverageType.COVER_1, [defender], [receiver], LOS) == []
        assert engine.update(CoverageType.COVER_0, [defender], [receiver], LOS) == []

    def test_deep_defender_matches_vertical(self):
        engine = PatternMatchEngine()
        corner = zone_defender("CB1", ZoneType.DEEP_THIRD_LEFT, 8.9, 12)
        receiver = make_player("X", PlayerType.WR, 8.0, LOS + 14, velocity=Vec2(0, 8))

        adjustments = engine.update(CoverageType.COVER_3, [corner], [receiver], LOS, time=1.5)

        assert engine.state_of("CB1") == MatchState.MAN_MATCH
        assert len(adjustments) == 1
        adj = adjustments[0]
        assert adj.technique == "match"
        assert adj.new_responsibility.target_id == "X"
        assert adj.new_position == Vec2(10.5, LOS + 16.5)

    def test_underneath_defender_collides_with_crosser(self):
        engine = PatternMatchEngine()
        mike = zone_defender("MIKE", ZoneType.HOOK_MIDDLE, FIELD_CENTER, 9, player_type=PlayerType.LB)
        crosser = make_player("SLOT_L", PlayerType.WR, 25.0, LOS + 6, velocity=Vec2(6, 0.5))

        adjustments = engine.update(CoverageType.COVER_3, [mike], [crosser], LOS)

        assert engine.state_of("MIKE") == MatchState.COLLISION
        assert adjustments[0].technique == "collision"
        assert adjustments[0].new_position == crosser.pos

    def test_receiver_outside_zone_is_ignored(self):
        engine = PatternMatchEngine()
        corner = zone_defender("CB1", ZoneType.DEEP_THIRD_LEFT, 8.9, 12)
        receiver = make_player("Z", PlayerType.WR, 44.0, LOS + 14, velocity=Vec2(0, 8))
        assert engine.update(CoverageType.COVER_3, [corner], [receiver], LOS) == []
        assert engine.state_of("CB1") == MatchState.ZONE

    def test_quarters_mod_matches_vertical(self):
        engine = PatternMatchEngine()
        corner = zone_defender("CB1", ZoneType.DEEP_QUARTER_1, 6.7, 12)
        receiver = make_player("X", PlayerType.WR, 6.0, LOS + 11, velocity=Vec2(0, 8))

        engine.update(CoverageType.COVER_4, [corner], [receiver], LOS)

        assert engine.machine_for("CB1").state == MatchState.MAN_MATCH
        assert engine.machine_for("CB1").history[0].reason == "match-vertical"

    def test_quarters_meg_in_the_red_zone(self):
        los = 85.0
        engine = PatternMatchEngine()
        corner = zone_defender("CB1", ZoneType.DEEP_QUARTER_1, 6.7, 12, los=los)
        receiver = make_player("X", PlayerType.WR, 6.0, los + 4)

        engine.update(CoverageType.QUARTERS, [corner], [receiver], los)

        assert engine.machine_for("CB1").history[0].reason == "meg-lock"

    def test_match_persists_between_ticks(self):
        engine = PatternMatchEngine()
        corner = zone_defender("CB1", ZoneType.DEEP_THIRD_LEFT, 8.9, 12)
        receiver = make_player("X", PlayerType.WR, 8.0, LOS + 14, velocity=Vec2(0, 8))
        engine.update(CoverageType.COVER_3, [corner], [receiver], LOS)

        receiver.pos = Vec2(8.0, LOS + 30)
        adjustments = engine.update(CoverageType.COVER_3, [corner], [receiver], LOS)

        assert adjustments[0].new_position == Vec2(10.5, LOS + 32.5)
        assert len(engine.machine_for("CB1").history) == 1

    def test_reset_returns_to_zone(self):
        engine = PatternMatchEngine()
        corner = zone_defender("CB1", ZoneType.DEEP_THIRD_LEFT, 8.9, 12)
        receiver = make_player("X", PlayerType.WR, 8.0, LOS + 14, velocity=Vec2(0, 8))
        engine.update(CoverageType.COVER_3, [corner], [receiver], LOS)

        engine.reset()

        assert engine.state_of("CB1") == MatchState.ZONE

    def test_matched_receiver_is_not_claimed_twice(self):
        """A vertical that crosses into the next deep third stays with his first defender."""
        engine = PatternMatchEngine()
        corner = zone_defender("CB1", ZoneType.DEEP_THIRD_LEFT, 8.9, 12)
        free = zone_defender("FS", ZoneType.DEEP_THIRD_MIDDLE, FIELD_CENTER, 12, player_type=PlayerType.S)
        receiver = make_player("X", PlayerType.WR, 8.0, LOS + 14, velocity=Vec2(0, 8))
        engine.update(CoverageType.COVER_3, [corner, free], [receiver], LOS, time=1.5)

        # Post into the middle third
        receiver.pos = Vec2(22.0, LOS + 18)
        receiver.velocity = Vec2(4, 6)
        adjustments = engine.update(CoverageType.COVER_3, [corner, free], [receiver], LOS, time=1.6)

        targets = [a.new_responsibility.target_id for a in adjustments if a.new_responsibility]
        assert targets == ["X"]
        assert adjustments[0].defender_id == "CB1"
        assert engine.state_of("FS") == MatchState.ZONE

    def test_match_targets_are_unique_across_defenders(self):
        engine = PatternMatchEngine()
        defenders = [
            zone_defender("CB1", ZoneType.DEEP_THIRD_LEFT, 8.9, 12),
            zone_defender("FS", ZoneType.DEEP_THIRD_MIDDLE, FIELD_CENTER, 12, player_type=PlayerType.S),
            zone_defender("CB2", ZoneType.DEEP_THIRD_RIGHT, 44.4, 12),
        ]
        x = make_player("X", PlayerType.WR, 8.0, LOS + 14, velocity=Vec2(0, 8))
        y = make_player("Y", PlayerType.TE, 30.0, LOS + 6, velocity=Vec2(0, 8))
        offense = [x, y]

        ticks = [
            (Vec2(8.0, LOS + 14), Vec2(30.0, LOS + 6)),
            (Vec2(22.0, LOS + 18), Vec2(30.0, LOS + 16)),
            (Vec2(40.0, LOS + 20), Vec2(31.0, LOS + 20)),
        ]
        for i, (x_pos, y_pos) in enumerate(ticks):
            x.pos, y.pos = x_pos, y_pos
            adjustments = engine.update(CoverageType.COVER_3, defenders, offense, LOS, time=1.5 + 0.1 * i)
            targets = [a.new_responsibility.target_id for a in adjustments if a.new_responsibility]
            assert len(targets) == len(set(targets))

        assert engine.machine_for("CB1").target_id == "X"
        assert engine.machine_for("FS").target_id == "Y"
        assert engine.state_of("CB2") == MatchState.ZONE


# =============================================================================
# Match Rules
# =============================================================================


class TestMatchRules:
    """Tests for palms, quarters, rip/liz and smash rules."""

    def _palms_setup(self, r2_pos, r2_velocity):
        corner = make_defender("CB1", PlayerType.CB, 8.0, LOS + 7)
        safety = make_defender("FS", PlayerType.S, 20.0, LOS + 12)
        r1 = make_player("X", PlayerType.WR, 6.0)
        r2 = make_player("SLOT_L", PlayerType.WR, r2_pos.x, r2_pos.y, velocity=r2_velocity)
        return corner, safety, [r1, r2]

    def test_palms_corner_jumps_out_breaking_two(self):
        corner, safety, receivers = self._palms_setup(Vec2(16.0, LOS + 7), Vec2(-5, 0))
        decisions = execute_palms(corner, safety, receivers, LOS)
        assert decisions["CB1"].assignment == "match-#2-flat"
        assert decisions["CB1"].target_id == "SLOT_L"
        assert decisions["FS"].target_id == "X"

    def test_palms_safety_carries_vertical_two(self):
        corner, safety, receivers = self._palms_setup(Vec2(16.0, LOS + 10), Vec2(0, 8))
        decisions = execute_palms(corner, safety, receivers, LOS)
        assert decisions["FS"].assignment == "match-#2-vertical"
        assert decisions["CB1"].assignment == "match-#1"

    def test_palms_sits_otherwise(self):
        corner, safety, receivers = self._palms_setup(Vec2(16.0, LOS + 2), Vec2(0, 0))
        decisions = execute_palms(corner, safety, receivers, LOS)
        assert not decisions["CB1"].is_man
        assert not decisions["FS"].is_man

    def test_quarters_no_receiver_sits(self):
        safety = make_defender("FS", PlayerType.S, 20.0, LOS + 12)
        decision = execute_quarters_match(safety, None, LOS)
        assert decision.assignment == "deep-quarter"
        assert decision.landmark == Vec2(20.0, LOS + 15)

    def test_rip_carries_threatening_back(self):
        apex = make_defender("MIKE", PlayerType.LB, FIELD_CENTER, LOS + 5)
        back = make_player("RB", PlayerType.RB, 27.0, LOS - 5, velocity=Vec2(0, 3))
        decisions = execute_rip_liz([apex], [back], LOS, Side.RIGHT)
        assert decisions["MIKE"].assignment == "rip-carry-#3"

    def test_liz_walls_without_threat(self):
        apex = make_defender("MIKE", PlayerType.LB, FIELD_CENTER, LOS + 5)
        back = make_player("RB", PlayerType.RB, 27.0, LOS - 3)
        decisions = execute_rip_liz([apex], [back], LOS, Side.LEFT)
        assert decisions["MIKE"].assignment == "wall-crossers"

    def test_rip_liz_needs_an_apex(self):
        corner = make_defender("CB1", PlayerType.CB, 8.0, LOS + 7)
        assert execute_rip_liz([corner], [], LOS, Side.RIGHT) == {}

    def test_smash_detected(self):
        receivers = [
            make_player("Z", PlayerType.WR, 40.0, LOS + 10),
            make_player("SLOT_R", PlayerType.WR, 42.0, LOS + 4),
        ]
        assert detect_smash_concept(receivers, LOS)

    def test_smash_needs_same_side(self):
        receivers = [
            make_player("Z", PlayerType.WR, 40.0, LOS + 10),
            make_player("X", PlayerType.WR, 10.0, LOS + 4),
        ]
        assert not detect_smash_concept(receivers, LOS)

    def test_distribute_zones_tightens_to_trips(self):
        defender = zone_defender("SS", ZoneType.CURL_FLAT_RIGHT, 41.0, 8, player_type=PlayerType.S)
        receivers = [make_player(f"R{i}", PlayerType.WR, x) for i, x in enumerate((32.0, 38.0, 44.0))]
        spots = distribute_zones([defender], receivers)
        assert spots["SS"].x == pytest.approx(defender.responsibility.zone.center.x - 2.0)


class TestRouteDistribution:
    """Tests for route depth buckets and pattern labels."""

    def test_vertical_pattern(self):
        receivers = []
        for i, x in enumerate((8.0, 20.0, 44.0)):
            start = Vec2(x, LOS)
            receivers.append(make_player(f"R{i}", PlayerType.WR, x, route=build_route(RouteType.GO, start, LOS)))
        dist = analyze_route_distribution(receivers)
        assert dist.pattern == "vertical"
        assert len(dist.deep) == 3

    def test_buckets(self, spread_offense):
        dist = analyze_route_distribution(spread_offense)
        assert set(dist.deep) == {"X", "Z"}
        assert set(dist.intermediate) == {"SLOT_L", "SLOT_R"}
        assert dist.shallow == []

    def test_horizontal_pattern(self):
        receivers = []
        for i, x in enumerate((8.0, 30.0, 44.0)):
            start = Vec2(x, LOS)
            receivers.append(make_player(f"R{i}", PlayerType.WR, x, route=build_route(RouteType.FLAT, start, LOS)))
        assert analyze_route_distribution(receivers).pattern == "horizontal"
