from __future__ import annotations

import math
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from rewards_dashboard.reporting import (
    DateRange,
    MovementType,
    classify_movement,
    clean_prize_name,
    coerce_number,
    current_period_key,
    format_display_date,
    is_cafe_combo,
    is_period_key,
    map_entity_to_deposit,
    parse_active,
    parse_date,
    parse_number,
    parse_query_date,
    render_date,
    resolve_location,
)


def _utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("31/01/2025 23:59:00", _utc(2025, 1, 31, 23, 59, 0)),
        ("05/03/2024", _utc(2024, 3, 5)),
        ("01/02/2025", _utc(2025, 2, 1)),
        ("2025-01-31T10:00:00Z", _utc(2025, 1, 31, 10)),
        ("2025-01-31T10:00:00-03:00", _utc(2025, 1, 31, 13)),
        ("2025-01-31 23:59:00", _utc(2025, 1, 31, 23, 59)),
        (datetime(2024, 6, 1, 12, 30), _utc(2024, 6, 1, 12, 30)),
        (date(2024, 6, 1), _utc(2024, 6, 1)),
    ],
)
def test_parse_date_accepts_known_grammars(raw, expected) -> None:
    assert parse_date(raw) == expected


@pytest.mark.parametrize(
    "raw",
    [None, "", "   ", "mañana", "31/02/2025", "00/01/2025", "1/2/2025", "31/01/2025 25:00:00", True],
)
def test_parse_date_returns_none_for_unparseable_values(raw) -> None:
    assert parse_date(raw) is None


def test_parse_date_keeps_aware_datetimes_as_same_instant() -> None:
    local = datetime(2025, 1, 31, 20, 0, tzinfo=ZoneInfo("America/Argentina/Buenos_Aires"))

    parsed = parse_date(local)

    assert parsed == _utc(2025, 1, 31, 23)
    assert parsed.tzinfo == timezone.utc


def test_display_format_uses_argentina_time() -> None:
    assert format_display_date(_utc(2025, 1, 31, 15, 4, 5)) == "31/01/2025 12:04:05"
    assert format_display_date(_utc(2025, 1, 1, 1, 0, 0)) == "31/12/2024 22:00:00"


def test_day_first_dates_round_trip_through_display_format() -> None:
    raw = "09/07/2025 08:05:03"

    rendered = format_display_date(parse_date(raw), tz=ZoneInfo("UTC"))

    assert rendered == raw
    assert render_date(raw) == "09/07/2025 05:05:03"
    assert render_date("sin fecha") is None


def test_query_dates_default_to_iso_calendar_dates() -> None:
    assert parse_query_date("2025-01-31") == _utc(2025, 1, 31)
    assert parse_query_date("  ") is None
    assert parse_query_date(None) is None
    with pytest.raises(ValueError):
        parse_query_date("31/01/2025")
    with pytest.raises(ValueError):
        parse_query_date("2025-02-30")


def test_query_dates_support_day_first_grammar() -> None:
    assert parse_query_date("31/01/2025", "dmy") == _utc(2025, 1, 31)
    with pytest.raises(ValueError):
        parse_query_date("2025-01-31", "dmy")
    with pytest.raises(ValueError):
        parse_query_date("2025-01-31", "us")


def test_date_range_end_boundary_is_inclusive_for_the_whole_day() -> None:
    date_range = DateRange.from_query("2025-01-01", "2025-01-31")

    assert date_range.is_active
    assert date_range.end == _utc(2025, 1, 31, 23, 59, 59) + timedelta(microseconds=999_000)
    assert date_range.contains(parse_date("2025-01-31 23:59:00"))
    assert not date_range.contains(parse_date("2025-02-01 00:00:01"))
    assert date_range.contains(parse_date("01/01/2025"))
    assert not date_range.contains(parse_date("31/12/2024 23:59:59"))


def test_open_ended_date_ranges() -> None:
    assert not DateRange().is_active
    assert DateRange.from_query(None, "2025-01-31").contains(_utc(1999, 1, 1))
    assert DateRange.from_query("2025-01-01", None).contains(_utc(2099, 1, 1))


def test_period_keys_follow_argentina_calendar() -> None:
    assert current_period_key(_utc(2025, 3, 1, 1, 0)) == "2025-02"
    assert current_period_key(_utc(2025, 3, 1, 4, 0)) == "2025-03"
    assert is_period_key("2025-11")
    assert not is_period_key("2025-13")
    assert not is_period_key("11/2025")
    assert not is_period_key(None)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (None, 0),
        ("", 0),
        ("abc", 0),
        ("12", 12),
        (" -3 ", -3),
        ("1,500", 1500),
        ("$ 25.5", 25.5),
        (7, 7),
        (2.5, 2.5),
        (4.0, 4),
        (float("nan"), 0),
        (float("inf"), 0),
        (True, 0),
        ("1.2.3", 0),
    ],
)
def test_coerce_number_is_total_and_finite(raw, expected) -> None:
    value = coerce_number(raw)

    assert value == expected
    assert math.isfinite(value)


def test_parse_number_reports_missing_numbers() -> None:
    assert parse_number("abc") is None
    assert parse_number(None) is None
    assert parse_number("5") == 5
    assert isinstance(parse_number("5"), int)


@pytest.mark.parametrize(
    ("status", "expected"),
    [
        (None, True),
        ("", True),
        ("true active", True),
        ("Active", True),
        ("true inactive", False),
        ("INACTIVE", False),
        ("pausado", True),
    ],
)
def test_parse_active(status, expected) -> None:
    assert parse_active(status) is expected


def test_prize_name_cleanup_and_cafe_combo_detection() -> None:
    assert clean_prize_name("(1062) Café con leche") == "Café con leche"
    assert clean_prize_name("  (77)   Termo  ") == "Termo"
    assert clean_prize_name("Mate (grande)") == "Mate (grande)"
    assert clean_prize_name(None) == ""
    assert is_cafe_combo("(1062) Café con leche")
    assert is_cafe_combo("   (1064)Medialunas")
    assert not is_cafe_combo("(9999) Otra cosa")
    assert not is_cafe_combo("Café (1062)")
    assert not is_cafe_combo(None)


@pytest.mark.parametrize(
    ("entity", "expected"),
    [
        ("Monteverde Centro", "DEPOSITO MONTEVERDE"),
        ("SUC BETTICA", "DEPOSITO BETTICA"),
        ("tobago 1", "DEPOSITO TOBAGO 1"),
        ("Kiosco Norte", "Kiosco Norte"),
        ("", "—"),
        ("   ", "—"),
        (None, "—"),
    ],
)
def test_map_entity_to_deposit(entity, expected) -> None:
    assert map_entity_to_deposit(entity) == expected


@pytest.mark.parametrize(
    ("kind", "expected"),
    [
        ("Adjust", MovementType.AJUSTE),
        ("adjustment", MovementType.AJUSTE),
        ("EGRESS", MovementType.EGRESO),
        ("egress", MovementType.EGRESO),
        ("Egreso", MovementType.INGRESO),
        ("Ingress", MovementType.INGRESO),
        (None, MovementType.INGRESO),
        ("", MovementType.INGRESO),
    ],
)
def test_classify_movement(kind, expected) -> None:
    assert classify_movement(kind) is expected


def test_resolve_location_prefers_direction_specific_deposit() -> None:
    assert resolve_location(MovementType.EGRESO, "MONTEVERDE", "BETTICA") == "MONTEVERDE"
    assert resolve_location(MovementType.EGRESO, "", "BETTICA") == "BETTICA"
    assert resolve_location(MovementType.INGRESO, "MONTEVERDE", "BETTICA") == "BETTICA"
    assert resolve_location(MovementType.AJUSTE, "MONTEVERDE", None) == "MONTEVERDE"
    assert resolve_location(MovementType.INGRESO, None, None) == ""


def test_display_format_tolerates_instants_outside_the_display_zone() -> None:
    earliest = parse_date("01/01/0001")

    assert earliest == _utc(1, 1, 1)
    assert format_display_date(earliest) is None
    assert render_date("0001-01-01T00:00:00Z") is None
    assert render_date("01/01/0001 05:00:00") == "01/01/0001 02:00:00"
