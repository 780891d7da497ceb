from __future__ import annotations

import pytest

from twobytwenty.workout.errors import (
    IncompleteSegmentLiteral,
    MalformedDuration,
    MalformedPowerTarget,
    MalformedRecord,
)
from twobytwenty.workout.model import Duration, Percentage, Quantity, Watts
from twobytwenty.workout.parser import (
    build_segment_override,
    parse_duration,
    parse_power_target,
    parse_repeat,
    parse_segment,
    parse_segment_override,
)


@pytest.mark.parametrize(
    ("literal", "seconds"),
    [
        ("30s", 30),
        ("30m", 30 * 60),
        ("1h", 3600),
        ("1m30s", 90),
        ("1h30m", 5400),
        ("2h30s", 2 * 3600 + 30),
        ("30m15s", 1815),
        ("2h46m30s", 2 * 3600 + 46 * 60 + 30),
        ("1h10m30s", 4230),
    ],
)
def test_parse_duration(literal: str, seconds: int) -> None:
    assert parse_duration(literal) == Duration(seconds)


def test_parse_duration_accepts_groups_in_any_order() -> None:
    assert parse_duration("15s30m") == parse_duration("30m15s")
    assert parse_duration("30s1h") == Duration(3630)


def test_parse_duration_invalid_unit_names_character() -> None:
    with pytest.raises(MalformedDuration) as exc_info:
        parse_duration("2h46m30d")

    assert exc_info.value.fragment == "d"
    assert "'d'" in str(exc_info.value)


@pytest.mark.parametrize("literal", ["", "30", "1h30", "h", "1hm", " 30s", "30 s"])
def test_parse_duration_rejects_malformed_literals(literal: str) -> None:
    with pytest.raises(MalformedDuration):
        parse_duration(literal)


def test_parse_duration_requires_string() -> None:
    with pytest.raises(MalformedDuration):
        parse_duration(30)


def test_duration_arithmetic() -> None:
    assert Duration(30) * Quantity(3) == Duration(90)
    assert Duration(5) + Duration(10) == Duration(15)
    assert Duration(5) * 5 == Duration(25)

    total = Duration(10)
    total += 30
    assert total == Duration(40)
    assert sum([Duration(1), Duration(2)], Duration(0)) == Duration(3)


def test_duration_str_is_reparseable() -> None:
    assert str(Duration(3900)) == "1h5m"
    assert str(Duration(0)) == "0s"
    assert parse_duration(str(Duration(3723))) == Duration(3723)


def test_parse_power_target_watts() -> None:
    assert parse_power_target("200") == Watts(200)
    assert parse_power_target(200) == Watts(200)


def test_parse_power_target_percentage() -> None:
    assert parse_power_target("0.85") == Percentage(0.85)
    assert parse_power_target(".85") == Percentage(0.85)
    assert parse_power_target("1.2") == Percentage(1.2)
    assert parse_power_target(0.55) == Percentage(0.55)


def test_parse_power_target_integer_above_u16_falls_back_to_percentage() -> None:
    assert parse_power_target("70000") == Percentage(70000.0)


def test_parse_power_target_negative() -> None:
    with pytest.raises(MalformedPowerTarget) as exc_info:
        parse_power_target("-200")
    assert "negative" in exc_info.value.reason

    with pytest.raises(MalformedPowerTarget):
        parse_power_target(-0.5)


@pytest.mark.parametrize("raw", ["abc", "", "nan", "inf", "1_000", "20%", True, None])
def test_parse_power_target_rejects_non_numeric(raw: object) -> None:
    with pytest.raises(MalformedPowerTarget):
        parse_power_target(raw)


def test_parse_segment_literals_and_tables() -> None:
    raw_segments = [
        "2m@.85",
        "3m@150",
        "2m30s @ .85",
        "3m4s @ 150",
        " 1h6m30s@ 150 ",
        {"duration": "3m50s", "power_start": 200, "power_end": 250},
        {"duration": "30s", "power_start": 0.55, "power_end": 0.85},
    ]

    segments = [parse_segment(raw) for raw in raw_segments]

    assert segments[0].duration == Duration(120)
    assert segments[0].power_start == Percentage(0.85)
    assert segments[0].power_end == Percentage(0.85)
    assert segments[2].duration == Duration(150)
    assert segments[3].power_end == Watts(150)
    assert segments[4].duration == Duration(1 * 3600 + 6 * 60 + 30)
    assert segments[5].power_start == Watts(200)
    assert segments[5].is_ramp
    assert segments[6].power_end == Percentage(0.85)
    assert all(segment.start_time == Duration(0) for segment in segments)


@pytest.mark.parametrize("literal", ["5m", "@100", "5m@", " @ "])
def test_parse_segment_incomplete_literal(literal: str) -> None:
    with pytest.raises(IncompleteSegmentLiteral):
        parse_segment(literal)


def test_parse_segment_table_requires_all_fields() -> None:
    with pytest.raises(MalformedRecord):
        parse_segment({"duration": "5m", "power_start": 100})


def test_parse_segment_override() -> None:
    duration_only = parse_segment_override("0:30m@")
    assert duration_only.index == 0
    assert duration_only.duration == Duration(1800)
    assert duration_only.power is None

    power_only = parse_segment_override("2:@1.5")
    assert power_only.index == 2
    assert power_only.duration is None
    assert power_only.power == Percentage(1.5)


@pytest.mark.parametrize("literal", ["30m@", "1:30m", "0:@"])
def test_parse_segment_override_incomplete(literal: str) -> None:
    with pytest.raises(IncompleteSegmentLiteral):
        parse_segment_override(literal)


@pytest.mark.parametrize("literal", ["x:30m@", "-1:30m@"])
def test_parse_segment_override_bad_index(literal: str) -> None:
    with pytest.raises(MalformedRecord):
        parse_segment_override(literal)


def test_parse_duration_rejects_counts_beyond_u32() -> None:
    assert parse_duration("4294967295s") == Duration(2**32 - 1)

    with pytest.raises(MalformedDuration) as exc_info:
        parse_duration("1" * 5000 + "s")
    assert "too large" in exc_info.value.reason

    with pytest.raises(MalformedDuration):
        parse_duration("4294967296s")
    with pytest.raises(MalformedDuration):
        parse_duration("1193047h")


def test_parse_power_target_rejects_negative_zero() -> None:
    with pytest.raises(MalformedPowerTarget):
        parse_power_target("-0.0")
    with pytest.raises(MalformedPowerTarget):
        parse_power_target(-0.0)


@pytest.mark.parametrize("raw", ["9" * 5000, 10**400, -(10**400)])
def test_parse_power_target_rejects_huge_numbers(raw: object) -> None:
    with pytest.raises(MalformedPowerTarget):
        parse_power_target(raw)


def test_parse_power_target_leading_zeros_stay_watts() -> None:
    assert parse_power_target("000200") == Watts(200)


def test_parse_repeat() -> None:
    assert parse_repeat(raw=None, context="Interval") is None
    assert parse_repeat(raw=30, context="Interval") == Quantity(30)
    assert parse_repeat(raw=" 30 ", context="Interval") == Quantity(30)


@pytest.mark.parametrize("raw", ["1" * 5000, 2**32, -1, True, "3x"])
def test_parse_repeat_rejects_invalid_counts(raw: object) -> None:
    with pytest.raises(MalformedRecord):
        parse_repeat(raw=raw, context="Interval")


def test_segment_override_index_is_trimmed() -> None:
    assert parse_segment_override(" 1 :30m@").index == 1
    assert build_segment_override(index_obj=" 0", body="@1.5").index == 0
    assert build_segment_override(index_obj=2, body="5m@").index == 2


@pytest.mark.parametrize("index", ["1" * 5000, 2**32, True])
def test_segment_override_index_out_of_u32(index: object) -> None:
    with pytest.raises(MalformedRecord):
        build_segment_override(index_obj=index, body="30m@")


def test_integers_past_the_str_digit_limit_are_rejected() -> None:
    huge = 10**5000

    with pytest.raises(MalformedPowerTarget):
        parse_power_target(huge)
    with pytest.raises(MalformedRecord):
        parse_repeat(raw=huge, context="Interval")
    with pytest.raises(MalformedRecord):
        build_segment_override(index_obj=huge, body="30m@")
    with pytest.raises(MalformedDuration):
        parse_duration(huge)
