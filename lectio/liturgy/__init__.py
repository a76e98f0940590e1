"""Liturgical calendar resolution."""

from .models import Celebration, LiturgicalIdentifier, Rank, Season
from .resolver import CalendarResolver, check_supported, easter_sunday, first_sunday_of_advent, parse_date

__all__ = [
    "CalendarResolver",
    "Celebration",
    "LiturgicalIdentifier",
    "Rank",
    "Season",
    "check_supported",
    "easter_sunday",
    "first_sunday_of_advent",
    "parse_date",
]
