"""
Weekday and ordinal lookups shared by the RRULE translator and the
human-readable formatters.

Weekday codes are 1=Sunday ... 7=Saturday. Lookups never raise: an unknown
code maps to an empty string so callers can simply omit it.
"""

_WEEKDAY_CODES = ("SU", "MO", "TU", "WE", "TH", "FR", "SA")
_WEEKDAY_NAMES = (
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
)
_ORDINAL_WORDS = ("first", "second", "third", "fourth", "fifth")


def weekday_code(day: int) -> str:
    """Two-letter RFC5545 code for a weekday code, "" when out of range."""
    if 1 <= day <= 7:
        return _WEEKDAY_CODES[day - 1]
    return ""


def weekday_full_name(day: int) -> str:
    if 1 <= day <= 7:
        return _WEEKDAY_NAMES[day - 1]
    return ""


def ordinal_word(week: int) -> str:
    """"first" ... "fifth" for 1-5, "{n}th" for anything else."""
    if 1 <= week <= 5:
        return _ORDINAL_WORDS[week - 1]
    return f"{week}th"

