import logging

import numpy as np

import yardage_engine as ye
import live_weather as lw


def _day(date="2025-06-14"):
    return ye.TournamentDay(
        date=date,
        morning=ye.ConditionSet(68, 75, 400),
        afternoon=ye.ConditionSet(82, 55, 400),
        evening=ye.ConditionSet(74, 65, 400),
    )


def test_matching_sample_replaces_temp_and_humidity_only():
    samples = {("2025-06-14", 8): {"temperature_f": 61.0, "humidity_pct": 90.0}}
    day = lw.apply_live_conditions(_day(), samples)

    assert day.morning == ye.ConditionSet(61.0, 90.0, 400)
    assert day.afternoon == _day().afternoon
    assert day.evening == _day().evening


def test_samples_for_other_dates_or_hours_are_ignored():
    samples = {
        ("2025-06-15", 8): {"temperature_f": 50, "humidity_pct": 99},
        ("2025-06-14", 9): {"temperature_f": 50, "humidity_pct": 99},
    }
    assert lw.apply_live_conditions(_day(), samples) == _day()


def test_incomplete_sample_keeps_stored_field(caplog):
    samples = {("2025-06-14", 13): {"temperature_f": 91, "humidity_pct": float("nan")}}
    with caplog.at_level(logging.WARNING, logger="live_weather"):
        day = lw.apply_live_conditions(_day(), samples)

    assert "Ignoring live sample humidity_pct=nan" in caplog.text

    assert day.afternoon.temperature_f == 91
    assert day.afternoon.humidity_pct == 55


def test_live_conditions_flow_into_adjustment():
    baseline = ye.BaselineProfile(70, 0, 50)
    stored = _day()
    live = lw.apply_live_conditions(
        stored, {("2025-06-14", 17): {"temperature_f": 95, "humidity_pct": 65}}
    )

    assert ye.adjusted_distance(150, baseline, live.evening) > ye.adjusted_distance(
        150, baseline, stored.evening
    )


def test_day_without_date_is_unchanged():
    day = _day(date=None)
    assert lw.apply_live_conditions(day, {(None, 8): {"temperature_f": 10}}) == day


def test_refresh_uses_fetched_hours():
    calls = []

    def fetch(date):
        calls.append(date)
        return {
            8: {"temperature_f": 60, "humidity_pct": 80},
            13: {"temperature_f": 85, "humidity_pct": 45},
            17: {"temperature_f": 77, "humidity_pct": 55},
        }

    days = lw.refresh_tournament_days([_day("2025-06-14"), _day("2025-06-15")], fetch)

    assert calls == ["2025-06-14", "2025-06-15"]
    assert [c.temperature_f for c in days[1].conditions()] == [60, 85, 77]
    assert [c.elevation_ft for c in days[1].conditions()] == [400, 400, 400]


def test_refresh_failure_falls_back_to_stored(caplog):
    def fetch(date):
        raise TimeoutError("weather service timed out")

    stored = (_day("2025-06-14"),)
    with caplog.at_level(logging.WARNING, logger="live_weather"):
        days = lw.refresh_tournament_days(stored, fetch)

    assert days == stored
    assert "Live weather fetch failed" in caplog.text


def test_refresh_with_partial_hours_logs_and_keeps_missing(caplog):
    def fetch(date):
        return {13: {"temperature_f": 90, "humidity_pct": 30}}

    with caplog.at_level(logging.INFO, logger="live_weather"):
        (day,) = lw.refresh_tournament_days([_day()], fetch)

    assert "morning, evening" in caplog.text
    assert day.morning == _day().morning
    assert day.afternoon == ye.ConditionSet(90, 30, 400)
    assert day.evening == _day().evening


def test_numpy_typed_sample_is_applied(caplog):
    samples = {("2025-06-14", 8): {"temperature_f": np.int64(61), "humidity_pct": np.float64(90.0)}}
    with caplog.at_level(logging.WARNING, logger="live_weather"):
        day = lw.apply_live_conditions(_day(), samples)

    assert day.morning.temperature_f == 61
    assert day.morning.humidity_pct == 90.0
    assert day.morning.elevation_ft == 400
    assert caplog.text == ""


def test_absent_sample_field_keeps_stored_value_quietly(caplog):
    samples = {("2025-06-14", 17): {"temperature_f": "hot"}}
    with caplog.at_level(logging.WARNING, logger="live_weather"):
        day = lw.apply_live_conditions(_day(), samples)

    assert day.evening == _day().evening
    assert "temperature_f='hot'" in caplog.text
    assert "humidity_pct" not in caplog.text
