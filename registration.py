import math
import re
from dataclasses import dataclass
from typing import List, Mapping, Optional, Sequence, Tuple

from yardage_engine import DEFAULT_HUMIDITY_PCT, BaselineProfile, ClubEntry

# ============================================================
# Range policy
# ============================================================

MIN_BASELINE_TEMP_F = 20
MAX_BASELINE_TEMP_F = 120
MIN_BASELINE_ELEVATION_FT = 0
MAX_BASELINE_ELEVATION_FT = 12000
MIN_HUMIDITY_PCT = 0
MAX_HUMIDITY_PCT = 100
MIN_CLUB_DISTANCE = 20
MAX_CLUB_DISTANCE = 400
MIN_CLUBS = 1
MAX_CLUBS = 14

# ============================================================
# Club catalog
# ============================================================

CLUB_NAMES = (
    "Driver", "3 Wood", "5 Wood", "7 Wood", "9 Wood",
    "2 Hybrid", "3 Hybrid", "4 Hybrid", "5 Hybrid", "6 Hybrid",
    "2 Iron", "3 Iron", "4 Iron", "5 Iron", "6 Iron", "7 Iron", "8 Iron", "9 Iron",
    "PW", "GW", "AW", "SW", "LW",
)

# club, distance (yds)
DEFAULT_BAG = [
    ("Driver", 250),
    ("3 Wood", 230),
    ("5 Wood", 210),
    ("4 Iron", 190),
    ("5 Iron", 180),
    ("6 Iron", 170),
    ("7 Iron", 160),
    ("8 Iron", 150),
    ("9 Iron", 140),
    ("PW",     130),
    ("GW",     110),
    ("SW",      90),
    ("LW",      70),
]


class RegistrationError(ValueError):
    """A registration field breaks the range policy."""

    def __init__(self, field, message):
        super().__init__(message)
        self.field = field


@dataclass(frozen=True)
class Registration:
    player_name: str
    baseline: BaselineProfile
    clubs: Tuple[ClubEntry, ...]
    player_email: Optional[str] = None


def default_bag() -> List[ClubEntry]:
    return [ClubEntry(name, dist) for name, dist in DEFAULT_BAG]


def estimate_club_distance(name: str) -> int:
    """Starting yardage for a club the player just added."""
    if "Driver" in name:
        return 250
    if "Wood" in name:
        return 220
    if "Hybrid" in name:
        return 190
    if "Iron" in name:
        m = re.match(r"\s*(\d+)", name)
        num = int(m.group(1)) if m else 7
        return 200 - num * 10
    if name == "PW":
        return 130
    if name in ("GW", "AW"):
        return 110
    if name == "SW":
        return 90
    if name == "LW":
        return 70
    return 150


def next_club(bag: Sequence[ClubEntry]) -> ClubEntry:
    """
    The club offered by "add club": the first catalog club not yet in the bag.

    The catalog is larger than MAX_CLUBS, so there is always one left. Picking
    a name that is already in the bag is still allowed elsewhere.
    """
    if len(bag) >= MAX_CLUBS:
        raise RegistrationError("clubs", f"Maximum {MAX_CLUBS} clubs allowed.")

    used = {c.name for c in bag}
    name = next(n for n in CLUB_NAMES if n not in used)
    return ClubEntry(name, estimate_club_distance(name))


def remove_club(bag: Sequence[ClubEntry], index: int) -> List[ClubEntry]:
    if len(bag) <= MIN_CLUBS:
        raise RegistrationError("clubs", "You must have at least one club.")
    out = list(bag)
    del out[index]
    return out


# ============================================================
# Validation
# ============================================================

def _to_number(value):
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return None
    try:
        num = float(value)
    except (TypeError, ValueError):
        return None
    return num if math.isfinite(num) else None


def _in_range(value, lo, hi):
    return value is not None and lo <= value <= hi


def validate_baseline(record: Mapping) -> BaselineProfile:
    """
    Baseline conditions from a form/document record.

    Temperature and elevation are mandatory; humidity falls back to 50%.
    """
    temp = _to_number(record.get("baselineTemp"))
    if not _in_range(temp, MIN_BASELINE_TEMP_F, MAX_BASELINE_TEMP_F):
        raise RegistrationError(
            "baselineTemp",
            f"Please enter a valid temperature ({MIN_BASELINE_TEMP_F}-{MAX_BASELINE_TEMP_F}°F).",
        )

    elevation = _to_number(record.get("baselineElevation"))
    if not _in_range(elevation, MIN_BASELINE_ELEVATION_FT, MAX_BASELINE_ELEVATION_FT):
        raise RegistrationError(
            "baselineElevation",
            f"Please enter a valid elevation ({MIN_BASELINE_ELEVATION_FT}-{MAX_BASELINE_ELEVATION_FT:,} ft).",
        )

    humidity = _to_number(record.get("baselineHumidity"))
    if humidity is None:
        humidity = DEFAULT_HUMIDITY_PCT
    elif not _in_range(humidity, MIN_HUMIDITY_PCT, MAX_HUMIDITY_PCT):
        raise RegistrationError(
            "baselineHumidity",
            f"Please enter a valid humidity ({MIN_HUMIDITY_PCT}-{MAX_HUMIDITY_PCT}%).",
        )

    return BaselineProfile(temperature_f=temp, elevation_ft=elevation, humidity_pct=humidity)


def validate_bag(clubs: Sequence[Mapping]) -> Tuple[ClubEntry, ...]:
    if len(clubs) < MIN_CLUBS:
        raise RegistrationError("clubs", "Please add at least one club.")
    if len(clubs) > MAX_CLUBS:
        raise RegistrationError("clubs", f"Maximum {MAX_CLUBS} clubs allowed.")

    out = []
    for club in clubs:
        name = club.get("name")
        if name not in CLUB_NAMES:
            raise RegistrationError("clubs", f"Unknown club: {name!r}.")

        dist = _to_number(club.get("distance"))
        if not _in_range(dist, MIN_CLUB_DISTANCE, MAX_CLUB_DISTANCE) or dist != int(dist):
            raise RegistrationError(
                "clubs",
                f"Please enter a valid distance for {name} "
                f"({MIN_CLUB_DISTANCE}-{MAX_CLUB_DISTANCE} yards).",
            )
        out.append(ClubEntry(name, int(dist)))

    return tuple(out)


def registration_from_record(record: Mapping) -> Registration:
    player_name = (record.get("playerName") or "").strip()
    if not player_name:
        raise RegistrationError("playerName", "Please enter your name.")

    email = (record.get("playerEmail") or "").strip() or None

    return Registration(
        player_name=player_name,
        baseline=validate_baseline(record),
        clubs=validate_bag(record.get("clubs") or []),
        player_email=email,
    )
