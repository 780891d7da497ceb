"""Errors raised while resolving workout definitions."""

from __future__ import annotations

from twobytwenty.workout.model import Duration


class WorkoutDefinitionError(ValueError):
    """Raised when an interval or workout definition is invalid."""


class MalformedDuration(WorkoutDefinitionError):
    def __init__(self, literal: str, fragment: str, reason: str) -> None:
        self.literal = literal
        self.fragment = fragment
        super().__init__(f"Invalid duration '{literal}': {reason}")


class MalformedPowerTarget(WorkoutDefinitionError):
    def __init__(self, value: object, reason: str) -> None:
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid power target '{value}': {reason}")


class IncompleteSegmentLiteral(WorkoutDefinitionError):
    def __init__(self, literal: str, reason: str) -> None:
        self.literal = literal
        super().__init__(f"Incomplete segment '{literal}': {reason}")


class DurationMismatch(WorkoutDefinitionError):
    scope = "definition"

    def __init__(self, declared: Duration, computed: Duration) -> None:
        self.declared = declared
        self.computed = computed
        super().__init__(
            f"{self.scope} duration {declared} ({declared.seconds}s) does not match "
            f"computed duration {computed} ({computed.seconds}s)"
        )


class IntervalDurationMismatch(DurationMismatch):
    scope = "Interval"


class WorkoutDurationMismatch(DurationMismatch):
    scope = "Workout"


class UnknownInterval(WorkoutDefinitionError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown interval '{name}'")


class SegmentIndexOutOfRange(WorkoutDefinitionError):
    def __init__(self, index: int, length: int) -> None:
        self.index = index
        self.length = length
        super().__init__(
            f"Segment override index {index} out of range for {length} segment(s)"
        )


class DuplicateName(WorkoutDefinitionError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Name '{name}' is already defined")


class MalformedRecord(WorkoutDefinitionError):
    """Raised when a record has missing fields or fields of the wrong type."""


class LibraryDocumentError(WorkoutDefinitionError):
    """Raised when a library document cannot be read."""
