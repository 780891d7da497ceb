"""Parsers for the duration, power and segment literals used in workout files."""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from dataclasses import dataclass

from twobytwenty.workout.errors import (
    IncompleteSegmentLiteral,
    MalformedDuration,
    MalformedPowerTarget,
    MalformedRecord,
)
from twobytwenty.workout.model import (
    Duration,
    Percentage,
    PowerTarget,
    Quantity,
    Segment,
    Watts,
)

_UNIT_SECONDS = {"h": 3600, "m": 60, "s": 1}
_MAX_WATTS = 65535
# Durations, repeats and indexes are unsigned 32-bit counts.
_MAX_COUNT = 2**32 - 1
_MAX_COUNT_DIGITS = len(str(_MAX_COUNT))
_WATTS_RE = re.compile(r"\+?0*([0-9]{1,5})")
_DECIMAL_RE = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_POWER_FORMS = (
    "use a positive integer for watts (i.e. 200) "
    "or a decimal number for percentage of FTP (i.e. 0.85)"
)


@dataclass(frozen=True)
class SegmentOverride:
    """Replacement duration and/or power for one segment of a named interval."""

    index: int
    duration: Duration | None = None
    power: PowerTarget | None = None


def _parse_count(digits: str) -> int | None:
    stripped = digits.lstrip("0") or "0"
    if len(stripped) > _MAX_COUNT_DIGITS:
        return None
    value = int(stripped)
    return value if value <= _MAX_COUNT else None


def _shown(raw: object) -> str:
    # str() refuses ints past the interpreter's digit limit.
    if isinstance(raw, int) and abs(raw) > _MAX_COUNT:
        return f"{raw.bit_length()}-bit integer"
    return str(raw)


def parse_duration(raw: object) -> Duration:
    if not isinstance(raw, str):
        raise MalformedDuration(
            _shown(raw), _shown(raw), "must be a string such as '1h10m30s'"
        )
    if not raw:
        raise MalformedDuration(raw, raw, "must not be empty")

    total = 0
    digits = ""
    for char in raw:
        if "0" <= char <= "9":
            digits += char
            continue
        unit = _UNIT_SECONDS.get(char)
        if unit is None:
            raise MalformedDuration(
                raw, char, f"unexpected character '{char}', use h, m or s"
            )
        if not digits:
            raise MalformedDuration(raw, char, f"missing number before '{char}'")
        count = _parse_count(digits)
        if count is None:
            raise MalformedDuration(raw, digits + char, "number is too large")
        total += count * unit
        digits = ""

    if digits:
        raise MalformedDuration(raw, digits, f"number '{digits}' has no h, m or s unit")
    if total > _MAX_COUNT:
        raise MalformedDuration(raw, raw, f"longer than {_MAX_COUNT} seconds")
    return Duration(total)


def parse_power_target(raw: object) -> PowerTarget:
    if isinstance(raw, bool):
        raise MalformedPowerTarget(raw, _POWER_FORMS)
    if isinstance(raw, int):
        if 0 <= raw <= _MAX_WATTS:
            return Watts(raw)
        try:
            return _percentage(float(raw), raw)
        except OverflowError as exc:
            raise MalformedPowerTarget(_shown(raw), "number is too large") from exc
    if isinstance(raw, float):
        return _percentage(raw, raw)
    if not isinstance(raw, str):
        raise MalformedPowerTarget(raw, _POWER_FORMS)

    # Integers bind to watts before the decimal parse gets a chance.
    match = _WATTS_RE.fullmatch(raw)
    if match and int(match.group(1)) <= _MAX_WATTS:
        return Watts(int(match.group(1)))
    if not _DECIMAL_RE.fullmatch(raw):
        raise MalformedPowerTarget(raw, _POWER_FORMS)
    return _percentage(float(raw), raw)


def _percentage(value: float, raw: object) -> Percentage:
    if not math.isfinite(value):
        raise MalformedPowerTarget(raw, _POWER_FORMS)
    if math.copysign(1.0, value) < 0:
        raise MalformedPowerTarget(raw, "power target must not be negative")
    return Percentage(value)


def parse_segment(raw: object) -> Segment:
    """Parse a '<duration>@<power>' literal or a {duration, power_start, power_end} table."""
    if isinstance(raw, str):
        duration_text, power_text = _split_segment_literal(raw)
        duration = parse_duration(duration_text)
        power = parse_power_target(power_text)
        return Segment(duration=duration, power_start=power, power_end=power)
    if isinstance(raw, Mapping):
        return Segment(
            duration=parse_duration(
                require_field(record=raw, field_name="duration", context="Segment")
            ),
            power_start=parse_power_target(
                require_field(record=raw, field_name="power_start", context="Segment")
            ),
            power_end=parse_power_target(
                require_field(record=raw, field_name="power_end", context="Segment")
            ),
        )
    raise MalformedRecord(
        f"Segment must be a string such as '5m@100' or a table, got {type(raw).__name__}"
    )


def _split_segment_literal(literal: str) -> tuple[str, str]:
    if "@" not in literal:
        raise IncompleteSegmentLiteral(literal, "missing '@<power>'")
    duration_text, power_text = (part.strip() for part in literal.split("@", 1))
    if not duration_text:
        raise IncompleteSegmentLiteral(literal, "missing duration before '@'")
    if not power_text:
        raise IncompleteSegmentLiteral(literal, "missing power after '@'")
    return duration_text, power_text


def parse_segment_override(raw: object) -> SegmentOverride:
    """Parse '<index>:<duration>@<power>' where either half may be left empty."""
    if not isinstance(raw, str):
        raise MalformedRecord(
            f"Segment override must be a string such as '0:30m@', got {type(raw).__name__}"
        )
    if ":" not in raw:
        raise IncompleteSegmentLiteral(raw, "expected '<index>:<duration>@<power>'")
    index_text, body = raw.split(":", 1)
    return build_segment_override(index_obj=index_text, body=body)


def build_segment_override(*, index_obj: object, body: object) -> SegmentOverride:
    index = _parse_index(index_obj)
    if not isinstance(body, str):
        raise MalformedRecord(f"Segment override {index}: expected a string such as '30m@'")
    if "@" not in body:
        raise IncompleteSegmentLiteral(body, "expected '<duration>@<power>'")
    duration_text, power_text = (part.strip() for part in body.split("@", 1))
    if not duration_text and not power_text:
        raise IncompleteSegmentLiteral(body, "override changes neither duration nor power")
    return SegmentOverride(
        index=index,
        duration=parse_duration(duration_text) if duration_text else None,
        power=parse_power_target(power_text) if power_text else None,
    )


def _parse_index(raw: object) -> int:
    if isinstance(raw, int) and not isinstance(raw, bool) and 0 <= raw <= _MAX_COUNT:
        return raw
    if isinstance(raw, str):
        text = raw.strip()
        if text.isascii() and text.isdigit():
            index = _parse_count(text)
            if index is not None:
                return index
    raise MalformedRecord(f"Segment override index must be an integer >= 0, got '{_shown(raw)}'")


def require_field(*, record: Mapping[str, object], field_name: str, context: str) -> object:
    value = record.get(field_name)
    if value is None:
        raise MalformedRecord(f"{context}: missing '{field_name}'")
    return value


def parse_bool_field(
    *,
    record: Mapping[str, object],
    field_name: str,
    context: str,
    default: bool = False,
) -> bool:
    value = record.get(field_name)
    if value is None:
        return default
    if not isinstance(value, bool):
        raise MalformedRecord(f"{context}: '{field_name}' must be true or false")
    return value


def parse_optional_str_field(
    *, record: Mapping[str, object], field_name: str, context: str
) -> str | None:
    value = record.get(field_name)
    if value is None:
        return None
    if not isinstance(value, str):
        raise MalformedRecord(f"{context}: '{field_name}' must be a string")
    return value


def parse_repeat(*, raw: object, context: str) -> Quantity | None:
    if raw is None:
        return None
    if isinstance(raw, int) and not isinstance(raw, bool) and 0 <= raw <= _MAX_COUNT:
        return Quantity(raw)
    if isinstance(raw, str):
        text = raw.strip()
        if text.isascii() and text.isdigit():
            count = _parse_count(text)
            if count is not None:
                return Quantity(count)
    raise MalformedRecord(f"{context}: 'repeat' must be an integer >= 0, got '{_shown(raw)}'")
