"""Interval templates and the interval references found in workouts.

A workout's ``intervals`` array may hold four kinds of entries:

- ``'Warmup'``: a reference by name to a template in the library;
- ``'20m@.85'``: an anonymous single-segment interval;
- ``{ duration = '5m', power_start = 0.85, power_end = 0.55, repeat = 2 }``:
  an anonymous single-segment interval, usually a ramp;
- ``{ name = '2by20', duration = '1h5m', segments = ['0:30m@'] }``: a named
  template with some of its fields replaced.

``classify_interval_reference`` decides which kind an entry is from its
shape alone; ``resolve_interval_reference`` turns it into an
``IntervalTemplate`` using the interval registry.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace

from twobytwenty.workout.errors import (
    IntervalDurationMismatch,
    MalformedRecord,
    SegmentIndexOutOfRange,
    UnknownInterval,
)
from twobytwenty.workout.model import Duration, IntervalTemplate, Quantity, Segment
from twobytwenty.workout.parser import (
    SegmentOverride,
    build_segment_override,
    parse_bool_field,
    parse_duration,
    parse_optional_str_field,
    parse_repeat,
    parse_segment,
    parse_segment_override,
    require_field,
)


@dataclass(frozen=True)
class NameReference:
    name: str


@dataclass(frozen=True)
class InlineLiteral:
    segment: Segment


@dataclass(frozen=True)
class InlineRecord:
    segment: Segment
    repeat: Quantity | None = None
    lap_each_segment: bool = False


@dataclass(frozen=True)
class NamedOverride:
    name: str
    duration: Duration | None = None
    lap_each_segment: bool | None = None
    repeat: Quantity | None = None
    segment_overrides: tuple[SegmentOverride, ...] = ()


IntervalReference = NameReference | InlineLiteral | InlineRecord | NamedOverride


def with_start_times(segments: Iterable[Segment]) -> tuple[Segment, ...]:
    out: list[Segment] = []
    offset = Duration(0)
    for segment in segments:
        out.append(replace(segment, start_time=offset))
        offset += segment.duration
    return tuple(out)


def computed_duration(template: IntervalTemplate) -> Duration:
    return template.segment_duration * template.repeat_count


def validate_interval(template: IntervalTemplate) -> None:
    computed = computed_duration(template)
    if template.duration != computed:
        raise IntervalDurationMismatch(template.duration, computed)


def parse_interval(record: object) -> IntervalTemplate:
    if not isinstance(record, Mapping):
        raise MalformedRecord("Interval must be a table")

    name_obj = parse_optional_str_field(
        record=record, field_name="name", context="Interval"
    )
    # Names are matched exactly against the trimmed references in workouts.
    name = name_obj.strip() if name_obj is not None else None
    context = f"Interval '{name}'" if name else "Interval"

    segments_obj = require_field(record=record, field_name="segments", context=context)
    if not isinstance(segments_obj, list) or not segments_obj:
        raise MalformedRecord(f"{context}: 'segments' must be a non-empty array")

    template = IntervalTemplate(
        name=name,
        description=parse_optional_str_field(
            record=record, field_name="description", context=context
        ),
        duration=parse_duration(
            require_field(record=record, field_name="duration", context=context)
        ),
        segments=with_start_times(parse_segment(raw) for raw in segments_obj),
        lap_each_segment=parse_bool_field(
            record=record, field_name="lap_each_segment", context=context
        ),
        repeat=parse_repeat(raw=record.get("repeat"), context=context),
    )
    validate_interval(template)
    return template


def classify_interval_reference(raw: object) -> IntervalReference:
    if isinstance(raw, str):
        if "@" in raw:
            return InlineLiteral(parse_segment(raw))
        name = raw.strip()
        if not name:
            raise MalformedRecord("Interval reference must not be empty")
        return NameReference(name)

    if isinstance(raw, Mapping):
        if "name" in raw:
            return _parse_named_override(raw)
        return InlineRecord(
            segment=parse_segment(raw),
            repeat=parse_repeat(raw=raw.get("repeat"), context="Inline interval"),
            lap_each_segment=parse_bool_field(
                record=raw, field_name="lap_each_segment", context="Inline interval"
            ),
        )

    raise MalformedRecord(
        "Interval reference must be a name, a '<duration>@<power>' string "
        f"or a table, got {type(raw).__name__}"
    )


def _parse_named_override(record: Mapping[str, object]) -> NamedOverride:
    name_obj = record.get("name")
    if not isinstance(name_obj, str) or not name_obj.strip():
        raise MalformedRecord("Interval override: 'name' must be a non-empty string")
    name = name_obj.strip()
    context = f"Interval override '{name}'"

    duration_obj = record.get("duration")
    lap_obj = record.get("lap_each_segment")
    return NamedOverride(
        name=name,
        duration=parse_duration(duration_obj) if duration_obj is not None else None,
        lap_each_segment=(
            parse_bool_field(record=record, field_name="lap_each_segment", context=context)
            if lap_obj is not None
            else None
        ),
        repeat=parse_repeat(raw=record.get("repeat"), context=context),
        segment_overrides=_parse_segment_overrides(record.get("segments"), context),
    )


def _parse_segment_overrides(raw: object, context: str) -> tuple[SegmentOverride, ...]:
    if raw is None:
        return ()
    if isinstance(raw, list):
        return tuple(parse_segment_override(item) for item in raw)
    # { 0 = '@1.5' } as written in older library files
    if isinstance(raw, Mapping):
        return tuple(
            build_segment_override(index_obj=index, body=body)
            for index, body in raw.items()
        )
    raise MalformedRecord(
        f"{context}: 'segments' must be an array of '<index>:<duration>@<power>' strings"
    )


def resolve_interval_reference(
    reference: IntervalReference, registry: Mapping[str, IntervalTemplate]
) -> IntervalTemplate:
    if isinstance(reference, NameReference):
        return _lookup(reference.name, registry)

    if isinstance(reference, InlineLiteral):
        segment = reference.segment
        return IntervalTemplate(duration=segment.duration, segments=with_start_times([segment]))

    if isinstance(reference, InlineRecord):
        template = IntervalTemplate(
            duration=Duration(0),
            segments=with_start_times([reference.segment]),
            lap_each_segment=reference.lap_each_segment,
            repeat=reference.repeat,
        )
        return replace(template, duration=computed_duration(template))

    if isinstance(reference, NamedOverride):
        return merge_override(_lookup(reference.name, registry), reference)

    raise TypeError(f"Unsupported interval reference: {reference!r}")


def _lookup(name: str, registry: Mapping[str, IntervalTemplate]) -> IntervalTemplate:
    template = registry.get(name)
    if template is None:
        raise UnknownInterval(name)
    return template


def merge_override(template: IntervalTemplate, override: NamedOverride) -> IntervalTemplate:
    """Return a copy of ``template`` with the override applied.

    Segment overrides address segments by position. When the override does not
    declare a duration, the duration is recomputed from the merged segments and
    repeat; when it does, the merged interval must add up to it.
    """
    segments = list(template.segments)
    for item in override.segment_overrides:
        if item.index >= len(segments):
            raise SegmentIndexOutOfRange(item.index, len(segments))
        segment = segments[item.index]
        if item.duration is not None:
            segment = replace(segment, duration=item.duration)
        if item.power is not None:
            segment = replace(segment, power_start=item.power, power_end=item.power)
        segments[item.index] = segment

    merged = replace(
        template,
        segments=with_start_times(segments),
        repeat=override.repeat if override.repeat is not None else template.repeat,
        lap_each_segment=(
            override.lap_each_segment
            if override.lap_each_segment is not None
            else template.lap_each_segment
        ),
    )
    if override.duration is None:
        return replace(merged, duration=computed_duration(merged))

    merged = replace(merged, duration=override.duration)
    validate_interval(merged)
    return merged
