import math
import numbers
from dataclasses import dataclass
from decimal import Decimal
from typing import Mapping, Optional, Sequence, Tuple, Union

# ============================================================
# Constants & Baselines
# ============================================================

# ---- Adjustment coefficients (sequential multiplicative model) ---- #
TEMP_COEFF_PER_F = 0.002         # +0.2% distance per °F above baseline
ELEVATION_COEFF_PER_1000FT = 0.02  # +2% distance per 1000 ft above baseline
HUMIDITY_COEFF_PER_100PCT = 0.01   # +1% distance per 100 points of humidity

DEFAULT_HUMIDITY_PCT = 50.0

TIMES_OF_DAY = ("morning", "afternoon", "evening")


# ============================================================
# Errors
# ============================================================

class InvalidInput(ValueError):
    """A required numeric field is missing or non-finite."""


class DayIndexOutOfRange(InvalidInput, IndexError):
    """The tournament has no day at the requested index."""


# ============================================================
# Data model
# ============================================================

@dataclass(frozen=True)
class BaselineProfile:
    temperature_f: float
    elevation_ft: float
    humidity_pct: float = DEFAULT_HUMIDITY_PCT


@dataclass(frozen=True)
class ClubEntry:
    name: str
    base_distance_yards: int


@dataclass(frozen=True)
class ConditionSet:
    temperature_f: float
    humidity_pct: float
    elevation_ft: float


@dataclass(frozen=True)
class TournamentDay:
    date: Optional[str]
    morning: ConditionSet
    afternoon: ConditionSet
    evening: ConditionSet

    def conditions(self) -> Tuple[ConditionSet, ConditionSet, ConditionSet]:
        return (self.morning, self.afternoon, self.evening)


@dataclass(frozen=True)
class DayRecord:
    """Stored temps/humidities for one day; elevation comes from the tournament."""
    date: Optional[str]
    morning_temp: float
    afternoon_temp: float
    evening_temp: float
    morning_humidity: float = DEFAULT_HUMIDITY_PCT
    afternoon_humidity: float = DEFAULT_HUMIDITY_PCT
    evening_humidity: float = DEFAULT_HUMIDITY_PCT

    def to_day(self, elevation_ft: float) -> TournamentDay:
        return TournamentDay(
            date=self.date,
            morning=ConditionSet(self.morning_temp, self.morning_humidity, elevation_ft),
            afternoon=ConditionSet(self.afternoon_temp, self.afternoon_humidity, elevation_ft),
            evening=ConditionSet(self.evening_temp, self.evening_humidity, elevation_ft),
        )


@dataclass(frozen=True)
class LegacySingleDay(DayRecord):
    """Old tournament shape: condition fields stored at the top level."""


@dataclass(frozen=True)
class MultiDay:
    days: Tuple[DayRecord, ...]


Schedule = Union[LegacySingleDay, MultiDay]


@dataclass(frozen=True)
class Tournament:
    name: str
    course: str
    elevation_ft: float
    schedule: Schedule

    @property
    def is_multi_day(self) -> bool:
        return isinstance(self.schedule, MultiDay) and len(self.schedule.days) > 1

    def days(self) -> Tuple[TournamentDay, ...]:
        """Uniform day sequence regardless of which schema the record used."""
        if isinstance(self.schedule, MultiDay):
            return tuple(d.to_day(self.elevation_ft) for d in self.schedule.days)
        return (self.schedule.to_day(self.elevation_ft),)


# ============================================================
# Utility functions
# ============================================================

def _require_finite(value, field):
    # numpy scalars register as numbers.Real; Decimal does not
    if isinstance(value, bool) or not isinstance(value, (numbers.Real, Decimal)):
        raise InvalidInput(f"{field} must be a number, got {value!r}")
    num = float(value)
    if not math.isfinite(num):
        raise InvalidInput(f"{field} must be finite, got {value!r}")
    return num


def _number_field(record, key, field=None, default=None):
    value = record.get(key)
    if value is None:
        if default is None:
            raise InvalidInput(f"{field or key} is required")
        return default
    return _require_finite(value, field or key)


def round_half_away_from_zero(value: float) -> int:
    """Python's round() is banker's rounding; yardages round 162.5 -> 163."""
    magnitude = math.floor(abs(value) + 0.5)
    return int(magnitude) if value >= 0 else -int(magnitude)


# ============================================================
# Adjustment formula
# ============================================================

def unrounded_adjusted_distance(
    base_distance: float,
    baseline: BaselineProfile,
    condition: ConditionSet,
) -> float:
    """
    Adjust a baseline club distance to a target condition set.

    Steps (each operates on the previous step's output):
      1) Temperature: +0.2% per °F above the player's baseline.
      2) Elevation:   +2% per 1000 ft above the player's baseline.
      3) Humidity:    +1% per 100 points of humidity above baseline.

    The order is fixed. Compounding means temperature -> elevation -> humidity
    is not the same number as summing the three effects.
    """
    base = _require_finite(base_distance, "base_distance")
    base_temp = _require_finite(baseline.temperature_f, "baseline.temperature_f")
    base_elev = _require_finite(baseline.elevation_ft, "baseline.elevation_ft")
    base_hum = _require_finite(baseline.humidity_pct, "baseline.humidity_pct")
    cond_temp = _require_finite(condition.temperature_f, "condition.temperature_f")
    cond_elev = _require_finite(condition.elevation_ft, "condition.elevation_ft")
    cond_hum = _require_finite(condition.humidity_pct, "condition.humidity_pct")

    val = base * (1.0 + TEMP_COEFF_PER_F * (cond_temp - base_temp))

    elevation_factor = 1.0 + ELEVATION_COEFF_PER_1000FT * ((cond_elev - base_elev) / 1000.0)
    val = val * elevation_factor

    humidity_factor = 1.0 + HUMIDITY_COEFF_PER_100PCT * ((cond_hum - base_hum) / 100.0)
    val = val * humidity_factor

    return val


def adjusted_distance(
    base_distance: float,
    baseline: BaselineProfile,
    condition: ConditionSet,
) -> int:
    """Adjusted distance in whole yards."""
    return round_half_away_from_zero(
        unrounded_adjusted_distance(base_distance, baseline, condition)
    )


def adjustment_delta(
    base_distance: float,
    baseline: BaselineProfile,
    condition: ConditionSet,
) -> int:
    """Signed yards gained (+) or lost (-) against the baseline distance."""
    adjusted = adjusted_distance(base_distance, baseline, condition)
    return adjusted - round_half_away_from_zero(float(base_distance))


def format_delta(delta: int) -> str:
    if delta > 0:
        return f"+{delta}"
    if delta < 0:
        return str(delta)
    return ""


def delta_effect(delta: int) -> Optional[str]:
    # Renderers map these to their positive/negative colors.
    if delta > 0:
        return "positive"
    if delta < 0:
        return "negative"
    return None


# ============================================================
# Tournament records & day resolution
# ============================================================

def _day_record_from_mapping(record, cls=DayRecord, date=None):
    return cls(
        date=date if date is not None else record.get("date"),
        morning_temp=_number_field(record, "morningTemp"),
        afternoon_temp=_number_field(record, "afternoonTemp"),
        evening_temp=_number_field(record, "eveningTemp"),
        morning_humidity=_number_field(record, "morningHumidity", default=DEFAULT_HUMIDITY_PCT),
        afternoon_humidity=_number_field(record, "afternoonHumidity", default=DEFAULT_HUMIDITY_PCT),
        evening_humidity=_number_field(record, "eveningHumidity", default=DEFAULT_HUMIDITY_PCT),
    )


def tournament_from_record(record: Mapping) -> Tournament:
    """
    Parse a stored tournament document into a Tournament.

    Two shapes exist in the store:
      - multi-day: a ``days`` list of {date, morningTemp, morningHumidity, ...}
      - legacy:    no ``days`` key; the same fields sit at the top level next
                   to ``date`` (or ``startDate``).

    Either way ``elevation`` is a single tournament-level number.
    """
    elevation = _number_field(record, "elevation", field="elevation")
    days = record.get("days")

    if days is not None:
        schedule = MultiDay(days=tuple(_day_record_from_mapping(d) for d in days))
    else:
        schedule = _day_record_from_mapping(
            record,
            cls=LegacySingleDay,
            date=record.get("date") or record.get("startDate"),
        )

    return Tournament(
        name=record.get("name", ""),
        course=record.get("course", ""),
        elevation_ft=elevation,
        schedule=schedule,
    )


def _as_tournament(tournament) -> Tournament:
    if isinstance(tournament, Tournament):
        return tournament
    return tournament_from_record(tournament)


def resolve_day_conditions(tournament, day_index: int) -> TournamentDay:
    """
    Morning/afternoon/evening conditions (plus date) for one tournament day.

    ``tournament`` may be a Tournament or a raw stored record. Legacy
    single-day tournaments only have day 0.
    """
    days = _as_tournament(tournament).days()
    if isinstance(day_index, bool) or not isinstance(day_index, int):
        raise InvalidInput(f"day_index must be an integer, got {day_index!r}")
    if not 0 <= day_index < len(days):
        raise DayIndexOutOfRange(
            f"day_index {day_index} out of range for {len(days)}-day tournament"
        )
    return days[day_index]


def summarize_range(conditions: Sequence[ConditionSet]) -> dict:
    """Min/max temperature and humidity across time-of-day samples."""
    conditions = list(conditions)
    if not conditions:
        raise InvalidInput("summarize_range needs at least one condition set")

    temps = [_require_finite(c.temperature_f, "temperature_f") for c in conditions]
    hums = [_require_finite(c.humidity_pct, "humidity_pct") for c in conditions]
    return {
        "min_temp": min(temps),
        "max_temp": max(temps),
        "min_humidity": min(hums),
        "max_humidity": max(hums),
    }


# ============================================================
# Yardage card rows
# ============================================================

def build_card_rows(
    clubs: Sequence[ClubEntry],
    baseline: BaselineProfile,
    day: TournamentDay,
) -> list:
    """One row per club, in bag order, with adjusted yardage per time of day."""
    rows = []
    for club in clubs:
        row = {"club": club.name, "base": club.base_distance_yards}
        for label, condition in zip(TIMES_OF_DAY, day.conditions()):
            row[label] = adjusted_distance(club.base_distance_yards, baseline, condition)
            row[f"{label}_delta"] = adjustment_delta(club.base_distance_yards, baseline, condition)
        rows.append(row)
    return rows


def card_day_indices(tournament) -> list:
    return list(range(len(_as_tournament(tournament).days())))


def build_yardage_card(tournament, registration, day_index: int = 0) -> dict:
    """
    Everything the card renderer needs for one player on one day.

    ``registration`` is anything with ``player_name``, ``baseline`` and
    ``clubs`` attributes (see registration.Registration).
    """
    t = _as_tournament(tournament)
    day = resolve_day_conditions(t, day_index)

    return {
        "tournament": t.name,
        "course": t.course,
        "player": registration.player_name,
        "date": day.date,
        "day_number": day_index + 1 if t.is_multi_day else None,
        "elevation_ft": t.elevation_ft,
        "summary": summarize_range(day.conditions()),
        "header_temps": {
            label: c.temperature_f for label, c in zip(TIMES_OF_DAY, day.conditions())
        },
        "rows": build_card_rows(registration.clubs, registration.baseline, day),
    }
