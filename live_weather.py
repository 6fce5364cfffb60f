"""
Overlay live hourly weather onto stored tournament day conditions.

Before a bulk card export the organizer may pull fresh forecasts. Samples are
keyed by calendar date and clock hour; each time of day reads one hour.
Anything missing or failing falls back to the stored conditions.
"""

import logging
import math
import numbers
from dataclasses import replace
from decimal import Decimal
from typing import Callable, Iterable, Mapping, Tuple

from yardage_engine import ConditionSet, TournamentDay

logger = logging.getLogger(__name__)

# time of day -> clock hour (24h) of the sample that represents it
SAMPLE_HOURS = {
    "morning": 8,
    "afternoon": 13,
    "evening": 17,
}


def _sample_value(sample, key):
    value = sample.get(key)
    if value is None:
        return None
    if not isinstance(value, bool) and isinstance(value, (numbers.Real, Decimal)):
        num = float(value)
        if math.isfinite(num):
            return num
    logger.warning("Ignoring live sample %s=%r; keeping stored value", key, value)
    return None


def _overlay(condition: ConditionSet, sample) -> ConditionSet:
    if not sample:
        return condition
    temp = _sample_value(sample, "temperature_f")
    hum = _sample_value(sample, "humidity_pct")
    # Elevation is a course property, never a weather sample.
    return replace(
        condition,
        temperature_f=condition.temperature_f if temp is None else temp,
        humidity_pct=condition.humidity_pct if hum is None else hum,
    )


def apply_live_conditions(
    day: TournamentDay,
    samples: Mapping[Tuple[str, int], Mapping],
) -> TournamentDay:
    """Return ``day`` with any matching (date, hour) samples applied."""
    if day.date is None:
        return day

    updates = {}
    for label, hour in SAMPLE_HOURS.items():
        sample = samples.get((day.date, hour))
        updates[label] = _overlay(getattr(day, label), sample)

    return replace(day, **updates)


def refresh_tournament_days(
    days: Iterable[TournamentDay],
    fetch: Callable[[str], Mapping[int, Mapping]],
) -> Tuple[TournamentDay, ...]:
    """
    Refresh each day from ``fetch(date) -> {hour: {temperature_f, humidity_pct}}``.

    A fetch that raises leaves that day exactly as stored.
    """
    out = []
    for day in days:
        if day.date is None:
            out.append(day)
            continue
        try:
            hourly = fetch(day.date)
        except Exception:
            logger.warning("Live weather fetch failed for %s; using stored conditions", day.date, exc_info=True)
            out.append(day)
            continue

        samples = {(day.date, hour): sample for hour, sample in (hourly or {}).items()}
        missing = [label for label, hour in SAMPLE_HOURS.items() if (day.date, hour) not in samples]
        if missing:
            logger.info("No live sample for %s %s; keeping stored values", day.date, ", ".join(missing))
        out.append(apply_live_conditions(day, samples))

    return tuple(out)
