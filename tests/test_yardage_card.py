import yardage_engine as ye
import registration as reg


def _registration():
    return reg.registration_from_record(
        {
            "playerName": "Sam Rivera",
            "baselineTemp": 70,
            "baselineElevation": 0,
            "baselineHumidity": 50,
            "clubs": [
                {"name": "7 Iron", "distance": 160},
                {"name": "PW", "distance": 130},
            ],
        }
    )


def _legacy_tournament():
    return {
        "name": "Summer Scramble",
        "course": "Oak Hollow",
        "date": "2025-06-14",
        "elevation": 400,
        "morningTemp": 68, "morningHumidity": 50,
        "afternoonTemp": 82, "afternoonHumidity": 50,
        "eveningTemp": 74, "eveningHumidity": 50,
    }


def test_card_rows_per_club_and_time_of_day():
    r = _registration()
    day = ye.resolve_day_conditions(_legacy_tournament(), 0)
    rows = ye.build_card_rows(r.clubs, r.baseline, day)

    assert [row["club"] for row in rows] == ["7 Iron", "PW"]

    seven = rows[0]
    assert (seven["morning"], seven["afternoon"], seven["evening"]) == (161, 165, 163)
    assert (seven["morning_delta"], seven["afternoon_delta"], seven["evening_delta"]) == (1, 5, 3)

    pw = rows[1]
    assert (pw["morning"], pw["afternoon"], pw["evening"]) == (131, 134, 132)
    assert pw["base"] == 130

    for row, club in zip(rows, r.clubs):
        for label, cond in zip(ye.TIMES_OF_DAY, day.conditions()):
            assert row[f"{label}_delta"] == ye.adjustment_delta(club.base_distance_yards, r.baseline, cond)


def test_single_day_card_header():
    card = ye.build_yardage_card(_legacy_tournament(), _registration(), 0)

    assert card["tournament"] == "Summer Scramble"
    assert card["course"] == "Oak Hollow"
    assert card["player"] == "Sam Rivera"
    assert card["date"] == "2025-06-14"
    assert card["day_number"] is None
    assert card["elevation_ft"] == 400
    assert card["header_temps"] == {"morning": 68, "afternoon": 82, "evening": 74}
    assert card["summary"]["min_temp"] == 68
    assert card["summary"]["max_temp"] == 82
    assert len(card["rows"]) == 2


def test_multi_day_card_carries_day_number():
    record = {
        "name": "Two Day Classic",
        "course": "Ridge",
        "elevation": 0,
        "days": [
            {"date": "2025-08-02", "morningTemp": 70, "afternoonTemp": 70, "eveningTemp": 70},
            {"date": "2025-08-03", "morningTemp": 60, "afternoonTemp": 80, "eveningTemp": 70},
        ],
    }

    assert ye.card_day_indices(record) == [0, 1]

    day_two = ye.build_yardage_card(record, _registration(), 1)
    assert day_two["day_number"] == 2
    assert day_two["date"] == "2025-08-03"

    # Day 1 matches the baseline exactly, so every delta is zero
    day_one = ye.build_yardage_card(record, _registration(), 0)
    for row in day_one["rows"]:
        assert row["morning"] == row["base"]
        assert ye.format_delta(row["afternoon_delta"]) == ""


def test_one_entry_day_list_is_not_labelled_multi_day():
    record = {
        "name": "Solo",
        "course": "Links",
        "elevation": 0,
        "days": [{"date": "2025-08-02", "morningTemp": 70, "afternoonTemp": 70, "eveningTemp": 70}],
    }
    assert ye.build_yardage_card(record, _registration(), 0)["day_number"] is None


def test_duplicate_clubs_each_get_a_row():
    r = reg.registration_from_record(
        {
            "playerName": "Pat",
            "baselineTemp": 70,
            "baselineElevation": 0,
            "clubs": [
                {"name": "7 Iron", "distance": 160},
                {"name": "7 Iron", "distance": 155},
            ],
        }
    )
    day = ye.resolve_day_conditions(_legacy_tournament(), 0)
    rows = ye.build_card_rows(r.clubs, r.baseline, day)
    assert [row["base"] for row in rows] == [160, 155]
