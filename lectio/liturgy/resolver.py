"""Resolve Gregorian dates to liturgical days of the Roman calendar."""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING

from lectio.errors import UnsupportedDateError

from .models import Celebration, LiturgicalIdentifier, Rank, Season

if TYPE_CHECKING:
    from lectio.config import CalendarConfig


# The remote addresses documents with a two-digit year.
SUPPORTED_YEARS = (2000, 2099)

WEEKDAYS = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")

_ONE_DAY = timedelta(days=1)

FIXED_CELEBRATIONS: dict[tuple[int, int], tuple[str, Rank]] = {
    (1, 25): ("conversion-of-st-paul", Rank.FEAST),
    (2, 2): ("presentation-of-the-lord", Rank.FEAST_OF_THE_LORD),
    (2, 22): ("chair-of-st-peter", Rank.FEAST),
    (3, 19): ("st-joseph", Rank.SOLEMNITY),
    (3, 25): ("annunciation", Rank.SOLEMNITY),
    (4, 25): ("st-mark", Rank.FEAST),
    (5, 3): ("sts-philip-and-james", Rank.FEAST),
    (5, 14): ("st-matthias", Rank.FEAST),
    (5, 31): ("visitation", Rank.FEAST),
    (6, 24): ("nativity-of-st-john-the-baptist", Rank.SOLEMNITY),
    (6, 29): ("sts-peter-and-paul", Rank.SOLEMNITY),
    (7, 3): ("st-thomas", Rank.FEAST),
    (7, 22): ("st-mary-magdalene", Rank.FEAST),
    (7, 25): ("st-james", Rank.FEAST),
    (8, 6): ("transfiguration", Rank.FEAST_OF_THE_LORD),
    (8, 10): ("st-lawrence", Rank.FEAST),
    (8, 15): ("assumption", Rank.SOLEMNITY),
    (8, 24): ("st-bartholomew", Rank.FEAST),
    (9, 8): ("nativity-of-mary", Rank.FEAST),
    (9, 14): ("exaltation-of-the-holy-cross", Rank.FEAST_OF_THE_LORD),
    (9, 21): ("st-matthew", Rank.FEAST),
    (9, 29): ("archangels", Rank.FEAST),
    (10, 18): ("st-luke", Rank.FEAST),
    (10, 28): ("sts-simon-and-jude", Rank.FEAST),
    (11, 1): ("all-saints", Rank.SOLEMNITY),
    (11, 2): ("all-souls", Rank.SOLEMNITY),
    (11, 9): ("dedication-of-the-lateran-basilica", Rank.FEAST_OF_THE_LORD),
    (11, 30): ("st-andrew", Rank.FEAST),
    (12, 8): ("immaculate-conception", Rank.SOLEMNITY),
    (12, 12): ("our-lady-of-guadalupe", Rank.FEAST),
    (12, 26): ("st-stephen", Rank.FEAST),
    (12, 27): ("st-john-apostle", Rank.FEAST),
    (12, 28): ("holy-innocents", Rank.FEAST),
}


def easter_sunday(year: int) -> date:
    """Return Easter Sunday using the anonymous Gregorian algorithm."""

    a = year % 19
    b = year // 100
    c = year % 100
    d = b // 4
    e = b % 4
    f = (b + 8) // 25
    g = (b - f + 1) // 3
    h = (19 * a + b - d - g + 15) % 30
    i = c // 4
    k = c % 4
    l = (32 + 2 * e + 2 * i - h - k) % 7  # noqa: E741
    m = (a + 11 * h + 22 * l) // 451
    month = (h + l - 7 * m + 114) // 31
    day = ((h + l - 7 * m + 114) % 31) + 1
    return date(year, month, day)


def first_sunday_of_advent(year: int) -> date:
    """Return the fourth Sunday before Christmas of ``year``."""

    return sunday_on_or_before(date(year, 12, 24)) - timedelta(weeks=3)


def sunday_on_or_before(day: date) -> date:
    return day - timedelta(days=(day.weekday() + 1) % 7)


def sunday_on_or_after(day: date) -> date:
    return day + timedelta(days=(6 - day.weekday()) % 7)


def check_supported(day: date) -> date:
    """Reject dates outside the resolvable range."""

    low, high = SUPPORTED_YEARS
    if not low <= day.year <= high:
        raise UnsupportedDateError(f"{day.isoformat()} is outside the supported range {low}-{high}")
    return day


_MMDDYY = re.compile(r"^\d{6}$")


def parse_date(value: str) -> date:
    """Parse ``YYYY-MM-DD`` or the remote's ``MMDDYY`` form into a supported date."""

    text = value.strip()
    try:
        if _MMDDYY.match(text):
            parsed = datetime.strptime(text, "%m%d%y").date()
        else:
            parsed = date.fromisoformat(text)
    except ValueError as exc:
        raise UnsupportedDateError(f"'{value}' is not a valid date (expected YYYY-MM-DD or MMDDYY)") from exc
    return check_supported(parsed)


class CalendarResolver:
    """Pure mapping from calendar dates to :class:`LiturgicalIdentifier`.

    The ``*_on_sunday`` switches select between the transferred observances
    (as in the United States) and their traditional weekdays.
    """

    def __init__(
        self,
        *,
        epiphany_on_sunday: bool = True,
        ascension_on_sunday: bool = True,
        corpus_christi_on_sunday: bool = True,
    ) -> None:
        self.epiphany_on_sunday = epiphany_on_sunday
        self.ascension_on_sunday = ascension_on_sunday
        self.corpus_christi_on_sunday = corpus_christi_on_sunday

    @classmethod
    def from_config(cls, config: "CalendarConfig") -> "CalendarResolver":
        return cls(
            epiphany_on_sunday=config.epiphany_on_sunday,
            ascension_on_sunday=config.ascension_on_sunday,
            corpus_christi_on_sunday=config.corpus_christi_on_sunday,
        )

    # ------------------------------------------------------------------
    def resolve(self, day: date) -> LiturgicalIdentifier:
        celebration = self.celebration(day)
        liturgical_year = day.year + 1 if day >= first_sunday_of_advent(day.year) else day.year
        return LiturgicalIdentifier(
            date=day,
            code=celebration.code,
            season=celebration.season,
            rank=celebration.rank,
            sunday_cycle="ABC"[(liturgical_year - 1) % 3],
            weekday_cycle="I" if liturgical_year % 2 else "II",
            liturgical_year=liturgical_year,
        )

    def celebration(self, day: date) -> Celebration:
        """Return the winning celebration for ``day`` after precedence rules."""

        base = self._proper_of_time(day)
        fixed = self._fixed_calendar(day.year).get(day)
        if fixed is not None and fixed.rank < base.rank:
            return Celebration(fixed.code, base.season, fixed.rank)
        return base

    # ------------------------------------------------------------------
    # Movable anchors
    # ------------------------------------------------------------------
    def epiphany(self, year: int) -> date:
        if self.epiphany_on_sunday:
            return sunday_on_or_after(date(year, 1, 2))
        return date(year, 1, 6)

    def baptism_of_the_lord(self, year: int) -> date:
        epiphany = self.epiphany(year)
        if self.epiphany_on_sunday and epiphany.day >= 7:
            return epiphany + _ONE_DAY
        return sunday_on_or_after(epiphany + _ONE_DAY)

    def holy_family(self, year: int) -> date:
        sunday = sunday_on_or_after(date(year, 12, 26))
        if sunday.year == year:
            return sunday
        return date(year, 12, 30)

    def ascension(self, year: int) -> date:
        return easter_sunday(year) + timedelta(days=42 if self.ascension_on_sunday else 39)

    def corpus_christi(self, year: int) -> date:
        pentecost = easter_sunday(year) + timedelta(days=49)
        return pentecost + timedelta(days=14 if self.corpus_christi_on_sunday else 11)

    # ------------------------------------------------------------------
    # Proper of time
    # ------------------------------------------------------------------
    def _proper_of_time(self, day: date) -> Celebration:
        year = day.year
        advent = first_sunday_of_advent(year)
        if day >= date(year, 12, 25):
            return self._christmas_octave(day)
        if day >= advent:
            return self._advent(day, advent)

        baptism = self.baptism_of_the_lord(year)
        if day <= baptism:
            return self._christmas_season(day, self.epiphany(year), baptism)

        easter = easter_sunday(year)
        ash_wednesday = easter - timedelta(days=46)
        palm_sunday = easter - timedelta(weeks=1)
        pentecost = easter + timedelta(weeks=7)
        if day < ash_wednesday:
            return self._ordinary_before_lent(day, baptism)
        if day < palm_sunday:
            return self._lent(day, ash_wednesday, easter)
        if day < easter:
            return self._holy_week(day, easter)
        if day <= pentecost:
            return self._easter_season(day, easter, pentecost)
        return self._ordinary_after_pentecost(day, pentecost, advent)

    def _christmas_octave(self, day: date) -> Celebration:
        if day.day == 25:
            return Celebration("christmas", Season.CHRISTMAS, Rank.PRIVILEGED)
        if day == self.holy_family(day.year):
            return Celebration("holy-family", Season.CHRISTMAS, Rank.FEAST_OF_THE_LORD)
        return Celebration(f"christmas-octave-{day.day - 24}", Season.CHRISTMAS, Rank.PRIVILEGED_WEEKDAY)

    def _advent(self, day: date, advent: date) -> Celebration:
        week = (day - advent).days // 7 + 1
        if day.weekday() == 6:
            return Celebration(f"advent-{week}-sun", Season.ADVENT, Rank.PRIVILEGED)
        if day.day >= 17:
            return Celebration(f"advent-dec{day.day}", Season.ADVENT, Rank.PRIVILEGED_WEEKDAY)
        return Celebration(f"advent-{week}-{WEEKDAYS[day.weekday()]}", Season.ADVENT, Rank.WEEKDAY)

    def _christmas_season(self, day: date, epiphany: date, baptism: date) -> Celebration:
        if day.month == 1 and day.day == 1:
            return Celebration("mary-mother-of-god", Season.CHRISTMAS, Rank.SOLEMNITY)
        if day == epiphany:
            return Celebration("epiphany", Season.CHRISTMAS, Rank.PRIVILEGED)
        if day == baptism:
            return Celebration("baptism-of-the-lord", Season.CHRISTMAS, Rank.FEAST_OF_THE_LORD)
        if day < epiphany:
            if day.weekday() == 6:
                return Celebration("christmas-2-sun", Season.CHRISTMAS, Rank.SUNDAY)
            return Celebration(f"christmas-jan{day.day}", Season.CHRISTMAS, Rank.WEEKDAY)
        return Celebration(f"after-epiphany-{WEEKDAYS[day.weekday()]}", Season.CHRISTMAS, Rank.WEEKDAY)

    def _ordinary_before_lent(self, day: date, baptism: date) -> Celebration:
        # Week 1 begins the day after the Baptism; when the Baptism is moved
        # to Monday the week is counted from the preceding Sunday.
        start = baptism if baptism.weekday() == 6 else baptism - _ONE_DAY
        week = (day - start).days // 7 + 1
        return self._ordinary(day, week)

    def _ordinary_after_pentecost(self, day: date, pentecost: date, advent: date) -> Celebration:
        christ_the_king = advent - timedelta(weeks=1)
        solemnities = {
            pentecost + timedelta(weeks=1): "most-holy-trinity",
            self.corpus_christi(day.year): "body-and-blood-of-christ",
            pentecost + timedelta(days=19): "sacred-heart",
            christ_the_king: "christ-the-king",
        }
        if day in solemnities:
            return Celebration(solemnities[day], Season.ORDINARY_TIME, Rank.SOLEMNITY)
        week = 34 - (christ_the_king - sunday_on_or_before(day)).days // 7
        return self._ordinary(day, week)

    def _ordinary(self, day: date, week: int) -> Celebration:
        if day.weekday() == 6:
            return Celebration(f"ordinary-{week}-sun", Season.ORDINARY_TIME, Rank.SUNDAY)
        return Celebration(f"ordinary-{week}-{WEEKDAYS[day.weekday()]}", Season.ORDINARY_TIME, Rank.WEEKDAY)

    def _lent(self, day: date, ash_wednesday: date, easter: date) -> Celebration:
        if day == ash_wednesday:
            return Celebration("ash-wednesday", Season.LENT, Rank.PRIVILEGED)
        first_sunday = easter - timedelta(weeks=6)
        weekday = WEEKDAYS[day.weekday()]
        if day < first_sunday:
            return Celebration(f"after-ash-wednesday-{weekday}", Season.LENT, Rank.PRIVILEGED_WEEKDAY)
        week = (day - first_sunday).days // 7 + 1
        if day.weekday() == 6:
            return Celebration(f"lent-{week}-sun", Season.LENT, Rank.PRIVILEGED)
        return Celebration(f"lent-{week}-{weekday}", Season.LENT, Rank.PRIVILEGED_WEEKDAY)

    def _holy_week(self, day: date, easter: date) -> Celebration:
        days_before = (easter - day).days
        if days_before == 7:
            return Celebration("palm-sunday", Season.LENT, Rank.PRIVILEGED)
        triduum = {3: "holy-thursday", 2: "good-friday", 1: "holy-saturday"}
        if days_before in triduum:
            return Celebration(triduum[days_before], Season.TRIDUUM, Rank.TRIDUUM)
        return Celebration(f"holy-week-{WEEKDAYS[day.weekday()]}", Season.LENT, Rank.PRIVILEGED)

    def _easter_season(self, day: date, easter: date, pentecost: date) -> Celebration:
        if day == easter:
            return Celebration("easter-sunday", Season.EASTER, Rank.TRIDUUM)
        if day == pentecost:
            return Celebration("pentecost", Season.EASTER, Rank.PRIVILEGED)
        if day == self.ascension(day.year):
            return Celebration("ascension", Season.EASTER, Rank.PRIVILEGED)
        days_after = (day - easter).days
        weekday = WEEKDAYS[day.weekday()]
        if days_after < 7:
            return Celebration(f"easter-octave-{weekday}", Season.EASTER, Rank.PRIVILEGED)
        week = days_after // 7 + 1
        if day.weekday() == 6:
            return Celebration(f"easter-{week}-sun", Season.EASTER, Rank.PRIVILEGED)
        return Celebration(f"easter-{week}-{weekday}", Season.EASTER, Rank.WEEKDAY)

    # ------------------------------------------------------------------
    # Proper of saints
    # ------------------------------------------------------------------
    def _fixed_calendar(self, year: int) -> dict[date, Celebration]:
        """Fixed-date celebrations of ``year`` placed on their observed dates."""

        observed: dict[date, Celebration] = {}
        for (month, day_of_month), (code, rank) in FIXED_CELEBRATIONS.items():
            nominal = date(year, month, day_of_month)
            target = self._transfer(code, nominal) if rank == Rank.SOLEMNITY else nominal
            current = observed.get(target)
            if current is None or rank < current.rank:
                observed[target] = Celebration(code, Season.ORDINARY_TIME, rank)
        return observed

    def _transfer(self, code: str, nominal: date) -> date:
        """Move a solemnity off a day that outranks it."""

        base = self._proper_of_time(nominal)
        if base.rank > Rank.SOLEMNITY:
            return nominal
        if base.rank == Rank.SOLEMNITY:
            # Two solemnities collide: the fixed one is anticipated.
            return nominal - _ONE_DAY

        easter = easter_sunday(nominal.year)
        palm_sunday = easter - timedelta(weeks=1)
        if palm_sunday <= nominal <= easter + timedelta(weeks=1):
            if code == "st-joseph":
                return palm_sunday - _ONE_DAY
            return easter + timedelta(days=8)
        return nominal + _ONE_DAY


__all__ = [
    "CalendarResolver",
    "FIXED_CELEBRATIONS",
    "SUPPORTED_YEARS",
    "check_supported",
    "easter_sunday",
    "first_sunday_of_advent",
    "parse_date",
    "sunday_on_or_after",
    "sunday_on_or_before",
]
