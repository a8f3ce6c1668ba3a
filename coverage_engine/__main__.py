"""Entry point for the coverage_engine package."""

import argparse
import logging

from coverage_engine.core.entities import MotionType
from coverage_engine.plays.coverages import CoverageType
from coverage_engine.plays.formations import build_offense, list_formations
from coverage_engine.systems.defense import DefensiveSetup, set_defense
from coverage_engine.systems.motion import get_motion_response, handle_motion_adjustments, motion_for


def print_setup(setup: DefensiveSetup) -> None:
    """Print the alignment, adjustments and validation report."""
    print(f"{setup.coverage.label} vs {setup.analysis.describe()}")
    print(f"Personnel: {setup.personnel}   Rotation: {setup.rotation.value}")
    print("=" * 60)

    for d in setup.defenders:
        resp = d.responsibility
        if resp is None:
            duty = "-"
        elif resp.is_man:
            duty = f"man {resp.target_id}"
        elif resp.is_zone and resp.zone is not None:
            duty = f"zone {resp.zone.name}"
        else:
            duty = resp.type.value
        depth = d.pos.y - setup.los
        print(f"  {d.id:<5} x={d.pos.x:6.2f}  depth={depth:5.1f}  {duty}")

    if setup.adjustments:
        print()
        print("Adjustments:")
        for adj in setup.adjustments:
            print(f"  {adj.defender_id:<5} {adj.technique or '-'}")

    validation = setup.validation
    print()
    print(f"Validation: {validation.summary()}")
    for error in validation.errors:
        print(f"  ERROR {error.type.value}: {error.message}")
    for warning in validation.warnings:
        print(f"  [{warning.severity.value}] {warning.message}")
        if warning.suggestion:
            print(f"         -> {warning.suggestion}")


def main() -> None:
    """Align a defense from the command line."""
    parser = argparse.ArgumentParser(
        description="Coverage Engine - defensive alignment for a coverage call",
        prog="coverage_engine",
    )
    parser.add_argument(
        "--coverage",
        type=str,
        default="cover-3",
        help="Coverage call, e.g. cover_3, cover-1, tampa-2 (default: cover-3)",
    )
    parser.add_argument(
        "--formation",
        type=str,
        default="spread",
        help=f"Offensive formation: {', '.join(list_formations())} (default: spread)",
    )
    parser.add_argument(
        "--los",
        type=float,
        default=25.0,
        help="Line of scrimmage (default: 25)",
    )
    parser.add_argument(
        "--motion",
        type=str,
        default=None,
        choices=[m.value for m in MotionType],
        help="Motion type to answer",
    )
    parser.add_argument(
        "--mover",
        type=str,
        default="Z",
        help="Id of the motion player (default: Z)",
    )
    parser.add_argument(
        "--serve",
        action="store_true",
        help="Run the API server instead",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Debug logging",
    )

    args = parser.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.serve:
        from coverage_engine.api.main import run_api

        run_api()
        return

    try:
        coverage = CoverageType.parse(args.coverage)
        offense = build_offense(args.formation, args.los)
    except ValueError as e:
        parser.error(str(e))

    setup = set_defense(coverage, offense, args.los)
    print_setup(setup)

    if args.motion:
        mover = next((p for p in offense if p.id == args.mover), None)
        if mover is None:
            parser.error(f"No offensive player {args.mover!r} in {args.formation}")
        motion_type = MotionType(args.motion)
        motion = motion_for(mover, motion_type, args.los)
        adjustments = handle_motion_adjustments(coverage, motion, setup.defenders, offense, args.los)
        print()
        print(f"{motion_type.value} motion by {mover.id}: {get_motion_response(coverage, motion_type).value}")
        for adj in adjustments:
            print(f"  {adj.defender_id:<5} -> ({adj.new_position.x:.2f}, {adj.new_position.y:.2f}) {adj.technique or ''}")


if __name__ == "__main__":
    main()
