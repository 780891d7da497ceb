"""Expansion of workout templates into FTP-scaled step timelines."""

from __future__ import annotations

from dataclasses import dataclass

from twobytwenty.workout.model import WorkoutTemplate


@dataclass(frozen=True)
class PlanStep:
    interval_index: int
    repetition: int
    segment_index: int
    start_sec: int
    duration_sec: int
    start_watts: int
    end_watts: int
    lap_start: bool = False
    label: str | None = None


@dataclass(frozen=True)
class WorkoutPlan:
    name: str
    ftp_watts: int
    steps: tuple[PlanStep, ...]

    @property
    def total_duration_sec(self) -> int:
        return sum(step.duration_sec for step in self.steps)


def build_plan(workout: WorkoutTemplate, ftp_watts: int) -> WorkoutPlan:
    if ftp_watts <= 0:
        raise ValueError("FTP must be > 0")

    steps: list[PlanStep] = []
    offset = 0
    for interval_index, interval in enumerate(workout.intervals):
        for repetition in range(interval.repeat_count):
            for segment_index, segment in enumerate(interval.segments):
                first_of_interval = repetition == 0 and segment_index == 0
                steps.append(
                    PlanStep(
                        interval_index=interval_index,
                        repetition=repetition,
                        segment_index=segment_index,
                        start_sec=offset,
                        duration_sec=segment.duration.seconds,
                        start_watts=segment.power_start.to_watts(ftp_watts),
                        end_watts=segment.power_end.to_watts(ftp_watts),
                        lap_start=interval.lap_each_segment
                        or (workout.lap_each_interval and first_of_interval),
                        label=interval.name,
                    )
                )
                offset += segment.duration.seconds
    return WorkoutPlan(
        name=f"{workout.name} ({ftp_watts} FTP)",
        ftp_watts=ftp_watts,
        steps=tuple(steps),
    )
