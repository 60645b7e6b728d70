"""Normalizes recognizer output and free text into reservation field values.

Two entities matter to the reservation flow:

* ``AmountPeople`` - the party size, a list of raw values from the classifier.
* ``datetime`` - date/time expressions, either LUIS-style objects carrying a
  ``timex`` list (``{"type": "time", "timex": ["T19"]}``) or plain strings.

Times are rendered as ``"October 19 at 07:00 PM"``.
"""
from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, List, Optional

from .errors import MalformedTimeExpression

PARTY_SIZE_ENTITY = "AmountPeople"
TIME_ENTITY = "datetime"
DISPLAY_FORMAT = "%B %d at %I:%M %p"

MONTHS = {
    "january": 1, "february": 2, "march": 3, "april": 4,
    "may": 5, "june": 6, "july": 7, "august": 8,
    "september": 9, "october": 10, "november": 11, "december": 12,
}
WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]

# 2026-10-19T19:30, XXXX-10-19, T19, T19:30
TIMEX_RE = re.compile(
    r"^(?:(?P<year>\d{4}|X{4})-(?P<month>\d{2})-(?P<day>\d{2}))?"
    r"(?:T(?P<hour>\d{1,2})(?::(?P<minute>\d{2}))?)?$",
    re.IGNORECASE,
)

# A number followed by a clock separator or meridiem is a time, not a head count
_NOT_A_TIME = r"(?![:.]\d|\s*(?:am|pm)\b|\s*o'?clock\b)\b"

PARTY_SIZE_PATTERNS = [
    r"\b(\d+)\s*(?:people|persons?|guests?|seats?|pax|of us)\b",
    r"\b(?:table|reservation|party|booking)\s*(?:for|of)\s*(\d+)" + _NOT_A_TIME,
    r"\bfor\s*(\d+)" + _NOT_A_TIME,
    r"^(\d+)$",
]

TIME_PATTERNS = [
    r"\b(\d{1,2}):(\d{2})\s*(am|pm)?\b",   # 7:30, 7:30pm, 19:30
    r"\b(\d{1,2})\.(\d{2})\s*(am|pm)\b",   # 8.30pm
    r"\b(\d{1,2})\s*(am|pm)\b",            # 7pm, 7 am
    r"\b(\d{1,2})\s*o'?clock\b",           # 7 o'clock
]


def _as_positive_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, float):
        return int(value) if value.is_integer() and value > 0 else None
    if isinstance(value, str) and value.strip().isdigit():
        number = int(value.strip())
        return number if number > 0 else None
    return None


def extract_party_size(entities: Dict[str, List[Any]]) -> Optional[int]:
    """First numeric party size value, or None."""
    for value in entities.get(PARTY_SIZE_ENTITY) or []:
        size = _as_positive_int(value)
        if size is not None:
            return size
    return None


def extract_time(entities: Dict[str, List[Any]], today: date) -> Optional[str]:
    """Render the first date/time entity, or None when there is none.

    Raises MalformedTimeExpression when the entity is present but unusable.
    """
    values = entities.get(TIME_ENTITY) or []
    if not values:
        return None
    first = values[0]
    expression: Any = first
    if isinstance(first, dict):
        expression = first.get("timex")
        if isinstance(expression, list):
            expression = expression[0] if expression else None
    if not isinstance(expression, str) or not expression.strip():
        raise MalformedTimeExpression(str(first))
    return format_time(parse_time_expression(expression, today))


def format_time(moment: datetime) -> str:
    return moment.strftime(DISPLAY_FORMAT)


def parse_party_size(text: str) -> Optional[int]:
    lowered = (text or "").strip().lower()
    for pattern in PARTY_SIZE_PATTERNS:
        match = re.search(pattern, lowered)
        if match:
            size = _as_positive_int(match.group(1))
            if size is not None:
                return size
    return None


def parse_time_expression(expression: str, today: date) -> datetime:
    """Turn a timex or free-text time into a datetime.

    A missing minute component becomes ``:00`` and a date without any time
    becomes midnight of that date.
    """
    text = (expression or "").strip()
    if not text:
        raise MalformedTimeExpression(expression)

    match = TIMEX_RE.match(text)
    if match and (match.group("day") or match.group("hour")):
        return _from_timex(match, today, expression)

    lowered = text.lower()
    day = find_date(lowered, today)
    clock = find_clock(lowered)
    if clock is None:
        if day is None:
            raise MalformedTimeExpression(expression)
        clock = time(0, 0)
    return datetime.combine(day or today, clock)


def _from_timex(match: re.Match, today: date, expression: str) -> datetime:
    day = today
    if match.group("day"):
        year = match.group("year")
        try:
            day = date(
                today.year if year.upper() == "XXXX" else int(year),
                int(match.group("month")),
                int(match.group("day")),
            )
        except ValueError as e:
            raise MalformedTimeExpression(expression) from e
    hour = int(match.group("hour") or 0)
    minute = int(match.group("minute") or 0)
    if hour > 23 or minute > 59:
        raise MalformedTimeExpression(expression)
    return datetime.combine(day, time(hour, minute))


def find_clock(text: str) -> Optional[time]:
    if re.search(r"\bnoon\b", text):
        return time(12, 0)
    if re.search(r"\bmidnight\b", text):
        return time(0, 0)
    for pattern in TIME_PATTERNS:
        match = re.search(pattern, text)
        if not match:
            continue
        groups = match.groups()
        hour = int(groups[0])
        minute = int(groups[1]) if len(groups) > 1 and groups[1] and groups[1].isdigit() else 0
        ampm = groups[-1] if groups[-1] in ("am", "pm") else None
        if ampm:
            if not 1 <= hour <= 12:
                continue
            if ampm == "pm" and hour != 12:
                hour += 12
            elif ampm == "am" and hour == 12:
                hour = 0
        if 0 <= hour <= 23 and 0 <= minute <= 59:
            return time(hour, minute)
    return None


def find_date(text: str, today: date) -> Optional[date]:
    if re.search(r"\b(today|tonight)\b", text):
        return today
    if re.search(r"\b(tomorrow|tmr|tmrw)\b", text):
        return today + timedelta(days=1)
    match = re.search(r"\bnext\s+(" + "|".join(WEEKDAYS) + r")\b", text)
    if match:
        days_ahead = WEEKDAYS.index(match.group(1)) - today.weekday()
        if days_ahead <= 0:
            days_ahead += 7
        return today + timedelta(days=days_ahead)
    match = re.search(r"\b(\d{4})-(\d{2})-(\d{2})\b", text)
    if match:
        return _safe_date(int(match.group(1)), int(match.group(2)), int(match.group(3)))
    month_names = "|".join(MONTHS)
    match = re.search(rf"\b({month_names})\s+(\d{{1,2}})\b", text) or re.search(
        rf"\b(\d{{1,2}})\s+({month_names})\b", text
    )
    if match:
        first, second = match.groups()
        month_name, day = (second, first) if first.isdigit() else (first, second)
        return _safe_date(today.year, MONTHS[month_name], int(day))
    return None


def _safe_date(year: int, month: int, day: int) -> Optional[date]:
    try:
        return date(year, month, day)
    except ValueError:
        return None
