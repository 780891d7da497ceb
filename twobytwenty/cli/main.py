"""Terminal CLI entrypoint for browsing the 2by20 workout library."""

from __future__ import annotations

import argparse
import sys

from loguru import logger

from twobytwenty.workout.library import Diagnostic
from twobytwenty.workout.loader import load_library
from twobytwenty.workout.model import Library, WorkoutTemplate
from twobytwenty.workout.plan import build_plan


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="2by20 workout library")
    parser.add_argument(
        "--library-dir",
        default=None,
        help="Directory of .toml/.json interval and workout files (default ~/.2by20/workouts)",
    )
    parser.add_argument("--list", action="store_true", help="List intervals and workouts")
    parser.add_argument("--show", metavar="NAME", default=None, help="Show one workout")
    parser.add_argument(
        "--ftp",
        type=int,
        default=None,
        help="With --show, print the step timeline scaled to this FTP in watts",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser


def configure_logging(debug: bool) -> None:
    logger.remove()
    logger.add(
        sys.stderr,
        format="<level>{level: <8}</level> | <level>{message}</level>",
        level="DEBUG" if debug else "INFO",
    )


def print_library(library: Library) -> None:
    print(f"Intervals ({len(library.intervals)})")
    for name in sorted(library.intervals):
        interval = library.intervals[name]
        repeat = f" x{interval.repeat.count}" if interval.repeat is not None else ""
        print(
            f"  {name:<24} {str(interval.duration):>8}  "
            f"{len(interval.segments)} segment(s){repeat}"
        )
    print(f"Workouts ({len(library.workouts)})")
    for name in sorted(library.workouts):
        workout = library.workouts[name]
        print(f"  {name:<24} {str(workout.duration):>8}  {len(workout.intervals)} interval(s)")


def print_workout(workout: WorkoutTemplate, ftp_watts: int | None) -> None:
    print(f"{workout.name} ({workout.duration})")
    if workout.description:
        print(f"  {workout.description}")
    for index, interval in enumerate(workout.intervals, start=1):
        label = interval.name or "(inline)"
        repeat = f" x{interval.repeat.count}" if interval.repeat is not None else ""
        print(f"  {index}. {label} {interval.duration}{repeat}")
        for segment in interval.segments:
            power = (
                f"{segment.power_start} -> {segment.power_end}"
                if segment.is_ramp
                else str(segment.power_start)
            )
            print(f"       +{segment.start_time} {segment.duration} @ {power}")

    if ftp_watts is None:
        return
    plan = build_plan(workout, ftp_watts)
    print(plan.name)
    for step in plan.steps:
        lap = "*" if step.lap_start else " "
        target = (
            f"{step.start_watts}W"
            if step.start_watts == step.end_watts
            else f"{step.start_watts}W -> {step.end_watts}W"
        )
        print(f" {lap} {step.start_sec:>6}s {step.duration_sec:>5}s  {target}")


def print_diagnostics(diagnostics: list[Diagnostic]) -> None:
    if not diagnostics:
        return
    print(f"Skipped entries ({len(diagnostics)})")
    for diagnostic in diagnostics:
        print(f"  {diagnostic}")


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.debug)

    if not args.list and args.show is None:
        parser.print_help()
        return 1
    if args.ftp is not None and args.ftp <= 0:
        parser.error("--ftp must be > 0")

    library, diagnostics = load_library(args.library_dir)

    if args.list:
        print_library(library)
    if args.show is not None:
        workout = library.workouts.get(args.show)
        if workout is None:
            print(f"Unknown workout '{args.show}'")
            print_diagnostics(diagnostics)
            return 1
        print_workout(workout, args.ftp)

    print_diagnostics(diagnostics)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
