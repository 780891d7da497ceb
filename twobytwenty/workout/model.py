"""Workout domain models."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType


@dataclass(frozen=True, order=True)
class Duration:
    """A non-negative number of seconds."""

    seconds: int = 0

    def __post_init__(self) -> None:
        if self.seconds < 0:
            raise ValueError("Duration must be >= 0 seconds")

    def __add__(self, other: object) -> Duration:
        if isinstance(other, Duration):
            return Duration(self.seconds + other.seconds)
        if isinstance(other, int) and not isinstance(other, bool):
            return Duration(self.seconds + other)
        return NotImplemented

    __radd__ = __add__

    def __mul__(self, other: object) -> Duration:
        if isinstance(other, Quantity):
            return Duration(self.seconds * other.count)
        if isinstance(other, int) and not isinstance(other, bool):
            return Duration(self.seconds * other)
        return NotImplemented

    __rmul__ = __mul__

    def __str__(self) -> str:
        hours, rest = divmod(self.seconds, 3600)
        minutes, seconds = divmod(rest, 60)
        out = ""
        if hours:
            out += f"{hours}h"
        if minutes:
            out += f"{minutes}m"
        if seconds or not out:
            out += f"{seconds}s"
        return out


@dataclass(frozen=True)
class Quantity:
    count: int

    def __post_init__(self) -> None:
        if self.count < 0:
            raise ValueError("Quantity must be >= 0")


@dataclass(frozen=True)
class Watts:
    value: int

    def to_watts(self, ftp_watts: int) -> int:
        return self.value

    def __str__(self) -> str:
        return f"{self.value}W"


@dataclass(frozen=True)
class Percentage:
    """Fraction of the rider's FTP (0.85 is 85%)."""

    value: float

    def to_watts(self, ftp_watts: int) -> int:
        return int(round(ftp_watts * self.value))

    def __str__(self) -> str:
        return f"{self.value * 100:g}% FTP"


PowerTarget = Watts | Percentage


@dataclass(frozen=True)
class Segment:
    duration: Duration
    power_start: PowerTarget
    power_end: PowerTarget
    start_time: Duration = Duration(0)

    @property
    def is_ramp(self) -> bool:
        return self.power_start != self.power_end


@dataclass(frozen=True)
class IntervalTemplate:
    duration: Duration
    segments: tuple[Segment, ...]
    name: str | None = None
    description: str | None = None
    lap_each_segment: bool = False
    repeat: Quantity | None = None

    @property
    def segment_duration(self) -> Duration:
        """Length of one pass through the segment list."""
        return sum((segment.duration for segment in self.segments), Duration(0))

    @property
    def repeat_count(self) -> int:
        return self.repeat.count if self.repeat is not None else 1


@dataclass(frozen=True)
class WorkoutTemplate:
    name: str
    duration: Duration
    intervals: tuple[IntervalTemplate, ...]
    description: str = ""
    lap_each_interval: bool = False


def _freeze(items: Mapping[str, object] | None) -> Mapping[str, object]:
    return MappingProxyType(dict(items or {}))


@dataclass(frozen=True)
class Library:
    intervals: Mapping[str, IntervalTemplate] = field(default_factory=dict)
    workouts: Mapping[str, WorkoutTemplate] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "intervals", _freeze(self.intervals))
        object.__setattr__(self, "workouts", _freeze(self.workouts))
