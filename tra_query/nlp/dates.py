"""Calendar and clock helpers used by the date and time rules.

All functions take the reference "now" explicitly so that extraction
stays deterministic: the caller decides which instant "today" refers
to (the local day in the home timezone in production, a fixed value in
tests).
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Optional

import dateparser

# Monday is 0, as in ``date.weekday()``.
CJK_WEEKDAYS = {
    "一": 0,
    "二": 1,
    "三": 2,
    "四": 3,
    "五": 4,
    "六": 5,
    "日": 6,
    "天": 6,
}

ENGLISH_WEEKDAYS = {
    "mon": 0,
    "tue": 1,
    "wed": 2,
    "thu": 3,
    "fri": 4,
    "sat": 5,
    "sun": 6,
}

RELATIVE_DAYS = {
    "今天": 0,
    "今日": 0,
    "今晚": 0,
    "明天": 1,
    "明日": 1,
    "明晚": 1,
    "後天": 2,
    "后天": 2,
    "大後天": 3,
    "大后天": 3,
    "昨天": -1,
    "today": 0,
    "tonight": 0,
    "tomorrow": 1,
    "day after tomorrow": 2,
    "yesterday": -1,
}

# Week shift applied to a weekday reference, in weeks.
WEEK_PREFIXES = {
    "這個": 0,
    "这个": 0,
    "這": 0,
    "这": 0,
    "本": 0,
    "this": 0,
    "下": 1,
    "下個": 1,
    "下个": 1,
    "next": 1,
    "下下": 2,
    "下下個": 2,
    "下下个": 2,
}

# Period-of-day keywords: how a 12-hour clock value is read, and the
# time used when the period appears without a clock value.
PERIODS = {
    "凌晨": ("dawn", "04:00"),
    "清晨": ("am", "06:00"),
    "早上": ("am", "08:00"),
    "上午": ("am", "10:00"),
    "中午": ("noon", "12:00"),
    "下午": ("pm", "14:00"),
    "傍晚": ("pm", "17:00"),
    "晚上": ("evening", "18:00"),
    "今晚": ("evening", "20:00"),
    "明晚": ("evening", "20:00"),
    "夜晚": ("evening", "20:00"),
    "深夜": ("late", "22:00"),
    "半夜": ("late", "23:00"),
    "am": ("am_en", None),
    "a.m.": ("am_en", None),
    "pm": ("pm", None),
    "p.m.": ("pm", None),
}


def local_today(now: datetime) -> date:
    """Return the calendar day of ``now`` in its own timezone."""
    return now.date()


def shift_days(now: datetime, offset: int) -> date:
    """Return the day ``offset`` days away from today."""
    return local_today(now) + timedelta(days=offset)


def upcoming_weekday(now: datetime, weekday: int, week_shift: Optional[int] = None) -> date:
    """Resolve a weekday reference to a calendar day.

    Parameters
    ----------
    now : datetime
        Reference instant.
    weekday : int
        Target weekday, Monday is 0.
    week_shift : int, optional
        ``None`` for a bare weekday (nearest future occurrence, never
        today), ``0`` for "this week", ``1`` for "next week", ``2`` for
        the week after.

    Returns
    -------
    date
        The resolved day.
    """
    today = local_today(now)
    delta = weekday - today.weekday()

    if week_shift is None:
        if delta <= 0:
            delta += 7
    elif week_shift == 0:
        if delta < 0:
            delta += 7
    else:
        delta += 7 * week_shift

    return today + timedelta(days=delta)


def calendar_date(year: int, month: int, day: int) -> Optional[date]:
    """Return the date, or None if it does not exist."""
    try:
        return date(year, month, day)
    except ValueError:
        return None


def upcoming_month_day(now: datetime, month: int, day: int) -> Optional[date]:
    """Resolve a month/day pair without a year.

    Dates already past in the current year roll over to next year.
    """
    today = local_today(now)
    target = calendar_date(today.year, month, day)
    if target is None:
        # 2/29 outside a leap year is looked up in the next year as well
        return calendar_date(today.year + 1, month, day)
    if target < today:
        return calendar_date(today.year + 1, month, day)
    return target


def parse_english_date(text: str, now: datetime) -> Optional[date]:
    """Parse an English month-name date such as 'Oct 3' or '3 October 2026'.

    Dates without a year resolve to the next occurrence relative to
    ``now``.
    """
    try:
        parsed = dateparser.parse(
            text,
            languages=["en"],
            settings={
                "PREFER_DATES_FROM": "future",
                "DATE_ORDER": "MDY",
                "RELATIVE_BASE": now.replace(tzinfo=None),
                "RETURN_AS_TIMEZONE_AWARE": False,
            },
        )
    except (ValueError, OverflowError):
        return None
    if parsed is None:
        return None
    return parsed.date()


def to_24_hour(hour: int, minute: int, period: Optional[str] = None) -> Optional[str]:
    """Convert a clock value to ``HH:MM``.

    Parameters
    ----------
    hour : int
        Hour as written.
    minute : int
        Minute as written.
    period : str, optional
        Period-of-day keyword (a key of ``PERIODS``). Without one the
        hour is taken literally.

    Returns
    -------
    str or None
        The 24-hour time, or None when the values do not form a valid
        time.
    """
    if not 0 <= minute <= 59:
        return None

    style = PERIODS[period][0] if period in PERIODS else None

    if style is None or style == "am":
        # 上午12點 is read literally, as noon
        if not 0 <= hour <= 23:
            return None
    elif style == "am_en":
        if not 1 <= hour <= 12:
            return None
        hour = 0 if hour == 12 else hour
    elif style == "pm":
        if not 0 <= hour <= 23:
            return None
        if 1 <= hour <= 11:
            hour += 12
    elif style == "noon":
        if not 0 <= hour <= 23:
            return None
        if 1 <= hour <= 5:
            hour += 12
    elif style == "evening":
        if not 0 <= hour <= 23:
            return None
        if hour == 12:
            hour = 0
        elif 1 <= hour <= 11:
            hour += 12
    elif style == "late":
        if not 0 <= hour <= 23:
            return None
        if hour == 12:
            hour = 0
        elif 6 <= hour <= 11:
            hour += 12
    elif style == "dawn":
        if not 0 <= hour <= 12:
            return None
        if hour == 12:
            hour = 0

    return f"{hour:02d}:{minute:02d}"


def period_default_time(period: str) -> Optional[str]:
    """Return the time a bare period keyword stands for."""
    entry = PERIODS.get(period)
    return entry[1] if entry else None


def is_next_day_midnight(hour: int, period: Optional[str]) -> bool:
    """Check if a clock value means the midnight that ends the day.

    "晚上12點" and "深夜12點" read as 00:00 of the following day.
    """
    style = PERIODS[period][0] if period in PERIODS else None
    return hour == 12 and style in ("evening", "late")
