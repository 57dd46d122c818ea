"""Pattern library: the ordered table of extraction rules.

Each rule declares the slot it fills, a compiled pattern, an extractor
turning a match into a slot value, and the confidence weight it brings
when it fires. Rules are data: the extractor in ``extract.py`` walks
the table in order, and within one slot the first rule that yields a
value wins.

Rule order
----------
1. Train numbers (a pure number ends extraction)
2. Route separators
3. Times
4. Dates
5. Preferences (each preference is its own slot)

Numbers are matched with ``\\d`` only. Chinese numerals such as "六"
are deliberately not read as numbers.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Callable, NamedTuple, Optional, Tuple

from .dates import (
    CJK_WEEKDAYS,
    ENGLISH_WEEKDAYS,
    PERIODS,
    RELATIVE_DAYS,
    WEEK_PREFIXES,
    calendar_date,
    is_next_day_midnight,
    parse_english_date,
    period_default_time,
    shift_days,
    to_24_hour,
    upcoming_month_day,
    upcoming_weekday,
)
from .locations import SEPARATOR_WORDS, clean_destination, clean_origin

# Confidence contributed by each category when one of its rules fires.
ROUTE_WEIGHT = 0.4
TIME_WEIGHT = 0.2
DATE_WEIGHT = 0.2
PREFERENCE_WEIGHT = 0.1
COMPLETE_QUERY_WEIGHT = 0.1

TIME_WINDOW_MIN_HOURS = 1
TIME_WINDOW_MAX_HOURS = 24


class RuleCategory(Enum):
    """Kind of entity a rule extracts."""

    TRAIN_NUMBER = "train_number"
    ROUTE = "route"
    TIME = "time"
    DATE = "date"
    PREFERENCE = "preference"


class Route(NamedTuple):
    origin: str
    destination: str


class TrainNumber(NamedTuple):
    number: str
    partial: bool


class ClockTime(NamedTuple):
    time: str
    next_day: bool = False


Extractor = Callable[[re.Match[str], datetime], Optional[Any]]


@dataclass(frozen=True)
class PatternRule:
    """One extraction rule.

    Attributes:
        id: Identifier reported in ``matched_patterns``
        category: Entity category, used by the confidence scorer
        slot: Name of the field the rule fills
        pattern: Compiled pattern; every match is tried left to right
        extract: Turns a match into a slot value, or None to reject it
        weight: Confidence contribution of the category when this rule wins
        stops_extraction: If True, no further rule runs once this one fires
    """

    id: str
    category: RuleCategory
    slot: str
    pattern: re.Pattern[str]
    extract: Extractor
    weight: float
    stops_extraction: bool = False


def _alternation(words) -> str:
    return "|".join(re.escape(word) for word in sorted(words, key=len, reverse=True))


_CJK_PERIODS = [word for word in PERIODS if not word.isascii()]
_CJK_RELATIVE = [word for word in RELATIVE_DAYS if not word.isascii()]
_EN_RELATIVE = [word for word in RELATIVE_DAYS if word.isascii()]
_EN_RELATIVE_PATTERN = "|".join(
    word.replace(" ", r"\s+") for word in sorted(_EN_RELATIVE, key=len, reverse=True)
)
_TRAIN_CLASSES = ("太魯閣", "普悠瑪", "自強", "莒光", "復興", "區間快", "區間")

_SEPARATOR_RUN = re.compile(
    rf"(?:\s*(?:{_alternation(SEPARATOR_WORDS)}|→|->|=>|⇒|➔|➜|\bto\b))+\s*",
    re.IGNORECASE,
)


# --- Train numbers -------------------------------------------------------


def _pure_train_number(match: re.Match[str], now: datetime) -> TrainNumber:
    number = match.group(1)
    return TrainNumber(number, partial=len(number) <= 2)


def _train_number(match: re.Match[str], now: datetime) -> TrainNumber:
    return TrainNumber(match.group("number"), partial=False)


# --- Routes --------------------------------------------------------------


def _route(match: re.Match[str], now: datetime) -> Optional[Route]:
    text = match.string
    # Consecutive separators ("到到", "到 →") fold into one boundary
    run = _SEPARATOR_RUN.match(text, match.start())
    end = run.end() if run else match.end()

    origin = clean_origin(text[: match.start()])
    destination = clean_destination(text[end:])
    if origin is None or destination is None:
        return None
    return Route(origin, destination)


# --- Times ---------------------------------------------------------------


def _minutes(minute: Optional[str], half: Optional[str]) -> int:
    if half:
        return 30
    return int(minute) if minute else 0


def _clock(time: Optional[str], next_day: bool = False) -> Optional[ClockTime]:
    return ClockTime(time, next_day) if time is not None else None


def _period_clock(match: re.Match[str], now: datetime) -> Optional[ClockTime]:
    hour = int(match.group("hour"))
    period = match.group("period")
    return _clock(
        to_24_hour(
            hour,
            _minutes(match.group("minute") or match.group("colon_minute"), match.group("half")),
            period,
        ),
        is_next_day_midnight(hour, period),
    )


def _colon_clock(match: re.Match[str], now: datetime) -> Optional[ClockTime]:
    return _clock(to_24_hour(int(match.group("hour")), int(match.group("minute"))))


def _dot_clock(match: re.Match[str], now: datetime) -> Optional[ClockTime]:
    return _clock(
        to_24_hour(
            int(match.group("hour")),
            _minutes(match.group("minute"), match.group("half")),
        )
    )


def _english_clock(match: re.Match[str], now: datetime) -> Optional[ClockTime]:
    minute = match.group("minute")
    return _clock(
        to_24_hour(
            int(match.group("hour")),
            int(minute) if minute else 0,
            match.group("period").lower().replace(" ", ""),
        )
    )


def _period_only(match: re.Match[str], now: datetime) -> Optional[ClockTime]:
    return _clock(period_default_time(match.group(0)))


# --- Dates ---------------------------------------------------------------


def _full_date(match: re.Match[str], now: datetime) -> Optional[str]:
    day = calendar_date(
        int(match.group("year")), int(match.group("month")), int(match.group("day"))
    )
    return day.isoformat() if day else None


def _month_day(match: re.Match[str], now: datetime) -> Optional[str]:
    day = upcoming_month_day(now, int(match.group("month")), int(match.group("day")))
    return day.isoformat() if day else None


def _english_date(match: re.Match[str], now: datetime) -> Optional[str]:
    day = parse_english_date(match.group(0), now)
    return day.isoformat() if day else None


def _relative_day(match: re.Match[str], now: datetime) -> Optional[str]:
    offset = RELATIVE_DAYS.get(re.sub(r"\s+", " ", match.group(0).lower()))
    if offset is None:
        return None
    return shift_days(now, offset).isoformat()


def _cjk_weekday(match: re.Match[str], now: datetime) -> Optional[str]:
    prefix = match.group("prefix")
    shift = WEEK_PREFIXES.get(prefix) if prefix else None
    return upcoming_weekday(now, CJK_WEEKDAYS[match.group("day")], shift).isoformat()


def _english_weekday(match: re.Match[str], now: datetime) -> Optional[str]:
    prefix = match.group("prefix")
    shift = WEEK_PREFIXES.get(prefix.lower()) if prefix else None
    weekday = ENGLISH_WEEKDAYS[match.group("day")[:3].lower()]
    return upcoming_weekday(now, weekday, shift).isoformat()


# --- Preferences ---------------------------------------------------------


def _flag(match: re.Match[str], now: datetime) -> bool:
    return True


def _train_class(match: re.Match[str], now: datetime) -> str:
    return match.group("train_class")


def _time_window(match: re.Match[str], now: datetime) -> Optional[int]:
    hours = int(match.group("hours"))
    if not TIME_WINDOW_MIN_HOURS <= hours <= TIME_WINDOW_MAX_HOURS:
        return None
    return hours


# --- Rule table ----------------------------------------------------------

_HOUR_UNITS = r"(?:個|个)?\s*(?:小時|小时|鐘頭|钟头)"
_NOT_A_QUANTITY = r"(?!\d)(?!\s*(?:個|个|小時|小时|鐘頭|钟头|點|点|時|时|分|月|[:：]))"
_STATUS_WORDS = r"(?:準點|准点|誤點|误点|延誤|延误|位置|狀況|状况|時刻表|时刻表|停靠站)"


def _rule(
    id: str,
    category: RuleCategory,
    slot: str,
    pattern: str,
    extract: Extractor,
    weight: float,
    flags: int = 0,
    stops_extraction: bool = False,
) -> PatternRule:
    return PatternRule(
        id=id,
        category=category,
        slot=slot,
        pattern=re.compile(pattern, flags),
        extract=extract,
        weight=weight,
        stops_extraction=stops_extraction,
    )


TRAIN_NUMBER_RULES: Tuple[PatternRule, ...] = (
    _rule(
        "train_number_pure",
        RuleCategory.TRAIN_NUMBER,
        "train_number",
        r"^(\d{3,4})$",
        _pure_train_number,
        0.9,
        stops_extraction=True,
    ),
    _rule(
        "train_number_pure_short",
        RuleCategory.TRAIN_NUMBER,
        "train_number",
        r"^(\d{1,2})$",
        _pure_train_number,
        0.7,
        stops_extraction=True,
    ),
    _rule(
        "train_number_with_type",
        RuleCategory.TRAIN_NUMBER,
        "train_number",
        rf"(?:{_alternation(_TRAIN_CLASSES)})(?:號|号)?\s*(?P<number>\d{{1,4}}){_NOT_A_QUANTITY}",
        _train_number,
        0.8,
    ),
    _rule(
        "train_number_with_suffix",
        RuleCategory.TRAIN_NUMBER,
        "train_number",
        r"(?<!\d)(?P<number>\d{1,4})\s*(?:號|号|次)?\s*(?:列車|列车)",
        _train_number,
        0.8,
    ),
    _rule(
        "train_number_status",
        RuleCategory.TRAIN_NUMBER,
        "train_number",
        rf"(?<!\d)(?P<number>\d{{1,4}})\s*(?:號|号|次)?\s*(?:列車|列车)?\s*{_STATUS_WORDS}",
        _train_number,
        0.7,
    ),
)

ROUTE_RULES: Tuple[PatternRule, ...] = (
    _rule(
        "route_arrow",
        RuleCategory.ROUTE,
        "route",
        r"\s*(?:→|->|=>|⇒|➔|➜)\s*",
        _route,
        ROUTE_WEIGHT,
    ),
    _rule(
        "route_separator_zh",
        RuleCategory.ROUTE,
        "route",
        _alternation(SEPARATOR_WORDS),
        _route,
        ROUTE_WEIGHT,
    ),
    _rule(
        "route_separator_en",
        RuleCategory.ROUTE,
        "route",
        r"\s+to\s+",
        _route,
        ROUTE_WEIGHT,
        flags=re.IGNORECASE,
    ),
)

TIME_RULES: Tuple[PatternRule, ...] = (
    _rule(
        "time_period_clock",
        RuleCategory.TIME,
        "time",
        rf"(?P<period>{_alternation(_CJK_PERIODS)})\s*(?P<hour>\d{{1,2}})(?!\d)"
        r"\s*(?:[:：]\s*(?P<colon_minute>\d{2})"
        r"|[點点時时]\s*(?:(?P<half>半)|(?P<minute>\d{1,2})\s*分?)?)?",
        _period_clock,
        TIME_WEIGHT,
    ),
    _rule(
        "time_english_clock",
        RuleCategory.TIME,
        "time",
        r"(?<![\d:])(?P<hour>\d{1,2})(?::(?P<minute>\d{2}))?\s*(?P<period>a\.m\.|p\.m\.|am|pm)(?![a-z])",
        _english_clock,
        TIME_WEIGHT,
        flags=re.IGNORECASE,
    ),
    _rule(
        "time_colon_clock",
        RuleCategory.TIME,
        "time",
        r"(?<![\d:])(?P<hour>\d{1,2})\s*[:：]\s*(?P<minute>\d{2})(?!\d)",
        _colon_clock,
        TIME_WEIGHT,
    ),
    _rule(
        "time_dot_clock",
        RuleCategory.TIME,
        "time",
        r"(?<!\d)(?P<hour>\d{1,2})\s*[點点]\s*(?:(?P<half>半)|(?P<minute>\d{1,2})\s*分?)?",
        _dot_clock,
        TIME_WEIGHT,
    ),
    _rule(
        "time_period",
        RuleCategory.TIME,
        "time",
        _alternation(_CJK_PERIODS),
        _period_only,
        TIME_WEIGHT,
    ),
)

DATE_RULES: Tuple[PatternRule, ...] = (
    _rule(
        "date_full",
        RuleCategory.DATE,
        "date",
        r"(?<!\d)(?P<year>\d{4})\s*[-年/.]\s*(?P<month>\d{1,2})\s*[-月/.]\s*(?P<day>\d{1,2})(?!\d)\s*[日號号]?",
        _full_date,
        DATE_WEIGHT,
    ),
    _rule(
        "date_month_day",
        RuleCategory.DATE,
        "date",
        r"(?<!\d)(?P<month>\d{1,2})\s*月\s*(?P<day>\d{1,2})\s*[日號号]",
        _month_day,
        DATE_WEIGHT,
    ),
    _rule(
        "date_month_day_slash",
        RuleCategory.DATE,
        "date",
        r"(?<![\d/])(?P<month>\d{1,2})/(?P<day>\d{1,2})(?![\d/])",
        _month_day,
        DATE_WEIGHT,
    ),
    _rule(
        "date_english",
        RuleCategory.DATE,
        "date",
        r"\b(?:(?:jan|feb|mar|apr|may|jun|jul|aug|sep|sept|oct|nov|dec)[a-z]*\.?\s+\d{1,2}(?:st|nd|rd|th)?(?:,?\s+\d{4})?"
        r"|\d{1,2}(?:st|nd|rd|th)?\s+(?:jan|feb|mar|apr|may|jun|jul|aug|sep|sept|oct|nov|dec)[a-z]*\.?(?:,?\s+\d{4})?)\b",
        _english_date,
        DATE_WEIGHT,
        flags=re.IGNORECASE,
    ),
    _rule(
        "date_relative",
        RuleCategory.DATE,
        "date",
        rf"(?:{_alternation(_CJK_RELATIVE)})|\b(?:{_EN_RELATIVE_PATTERN})\b",
        _relative_day,
        DATE_WEIGHT,
        flags=re.IGNORECASE,
    ),
    _rule(
        "date_weekday",
        RuleCategory.DATE,
        "date",
        r"(?P<prefix>下下個|下下个|下下|下個|下个|這個|这个|下|這|这|本)?\s*(?:週|周|星期|禮拜|礼拜)\s*(?P<day>[一二三四五六日天])",
        _cjk_weekday,
        DATE_WEIGHT,
    ),
    _rule(
        "date_weekday_en",
        RuleCategory.DATE,
        "date",
        r"\b(?:(?P<prefix>this|next)\s+)?(?P<day>mon(?:day)?|tue(?:s|sday)?|wed(?:nesday)?|thu(?:rs|rsday)?|fri(?:day)?|sat(?:urday)?|sun(?:day)?)\b",
        _english_weekday,
        DATE_WEIGHT,
        flags=re.IGNORECASE,
    ),
)

PREFERENCE_RULES: Tuple[PatternRule, ...] = (
    _rule(
        "pref_train_type",
        RuleCategory.PREFERENCE,
        "train_type",
        rf"(?P<train_class>{_alternation(_TRAIN_CLASSES)})",
        _train_class,
        PREFERENCE_WEIGHT,
    ),
    _rule(
        "pref_fastest",
        RuleCategory.PREFERENCE,
        "fastest",
        r"最快|最早到|快速|急行|特急|\b(?:fastest|quickest)\b",
        _flag,
        PREFERENCE_WEIGHT,
        flags=re.IGNORECASE,
    ),
    _rule(
        "pref_cheapest",
        RuleCategory.PREFERENCE,
        "cheapest",
        r"最便宜|便宜|省錢|省钱|最省|\b(?:cheapest|cheap)\b",
        _flag,
        PREFERENCE_WEIGHT,
        flags=re.IGNORECASE,
    ),
    _rule(
        "pref_direct",
        RuleCategory.PREFERENCE,
        "direct_only",
        r"直達|直达|不換車|不换车|不轉車|不转车|不用換車|不用转车|不用轉車|\b(?:direct|non-?stop)\b",
        _flag,
        PREFERENCE_WEIGHT,
        flags=re.IGNORECASE,
    ),
    _rule(
        "pref_time_window",
        RuleCategory.PREFERENCE,
        "time_window_hours",
        r"(?:接下來|接下来|未來|未来|之後|之后|往後|往后|以後|以后|最近)\s*(?P<hours>\d+)\s*" + _HOUR_UNITS,
        _time_window,
        PREFERENCE_WEIGHT,
    ),
    _rule(
        "pref_time_window_within",
        RuleCategory.PREFERENCE,
        "time_window_hours",
        r"(?<!\d)(?P<hours>\d+)\s*" + _HOUR_UNITS + r"\s*(?:以內|以内|之內|之内|內|内)",
        _time_window,
        PREFERENCE_WEIGHT,
    ),
    _rule(
        "pref_time_window_en",
        RuleCategory.PREFERENCE,
        "time_window_hours",
        r"\b(?:in\s+the\s+next|within(?:\s+the\s+next)?|next|after)\s+(?P<hours>\d+)\s*(?:hours?|hrs?|h)\b",
        _time_window,
        PREFERENCE_WEIGHT,
        flags=re.IGNORECASE,
    ),
)

DEFAULT_RULES: Tuple[PatternRule, ...] = (
    *TRAIN_NUMBER_RULES,
    *ROUTE_RULES,
    *TIME_RULES,
    *DATE_RULES,
    *PREFERENCE_RULES,
)
