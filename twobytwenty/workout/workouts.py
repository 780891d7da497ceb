"""Workout templates resolved against the interval registry."""

from __future__ import annotations

from collections.abc import Mapping

from twobytwenty.workout.errors import MalformedRecord, WorkoutDurationMismatch
from twobytwenty.workout.intervals import (
    classify_interval_reference,
    resolve_interval_reference,
)
from twobytwenty.workout.model import Duration, IntervalTemplate, WorkoutTemplate
from twobytwenty.workout.parser import (
    parse_bool_field,
    parse_duration,
    parse_optional_str_field,
    require_field,
)


def resolve_workout(
    record: object, registry: Mapping[str, IntervalTemplate]
) -> WorkoutTemplate:
    if not isinstance(record, Mapping):
        raise MalformedRecord("Workout must be a table")

    name_obj = record.get("name")
    if not isinstance(name_obj, str) or not name_obj.strip():
        raise MalformedRecord("Workout: 'name' must be a non-empty string")
    name = name_obj.strip()
    context = f"Workout '{name}'"

    declared = parse_duration(
        require_field(record=record, field_name="duration", context=context)
    )
    description = (
        parse_optional_str_field(record=record, field_name="description", context=context)
        or ""
    )
    lap_each_interval = parse_bool_field(
        record=record, field_name="lap_each_interval", context=context
    )

    references = require_field(record=record, field_name="intervals", context=context)
    if not isinstance(references, list):
        raise MalformedRecord(f"{context}: 'intervals' must be an array")

    intervals: list[IntervalTemplate] = []
    total = Duration(0)
    for raw in references:
        interval = resolve_interval_reference(classify_interval_reference(raw), registry)
        total += interval.duration
        intervals.append(interval)

    if total != declared:
        raise WorkoutDurationMismatch(declared, total)

    return WorkoutTemplate(
        name=name,
        description=description,
        duration=declared,
        lap_each_interval=lap_each_interval,
        intervals=tuple(intervals),
    )
