"""Cleanup of the text around a route separator.

A route rule splits the query on a separator ("到", "to", "→", ...).
The text on either side usually carries more than the place name:
framing words ("從", "from"), dates, times, preferences, fillers. This
module trims a side down to the place name as written by the user.

The origin side keeps what follows the *last* boundary word, the
destination side keeps what precedes the *first* one. When what is left
contains a known station name, that name is the result (the rightmost
one for the origin, the leftmost one for the destination). Otherwise a
CJK name must be 2 to 4 characters long.
"""

from __future__ import annotations

import re
from typing import Iterable, Optional

from .dates import PERIODS, RELATIVE_DAYS

SEPARATOR_WORDS = ("前往", "到", "去", "往", "至")

TIME_WINDOW_WORDS = (
    "接下來",
    "接下来",
    "未來",
    "未来",
    "之後",
    "之后",
    "往後",
    "往后",
    "以後",
    "以后",
)

PREFERENCE_WORDS = (
    "最快",
    "最便宜",
    "便宜",
    "省錢",
    "直達",
    "不換車",
    "不轉車",
    "不用換車",
    "不用轉車",
    "快速",
    "自強",
    "莒光",
    "復興",
    "區間快",
    "區間",
    "普悠瑪",
    "太魯閣",
)

FILLER_WORDS = (
    "請問",
    "請幫我查",
    "幫我查",
    "幫我找",
    "我想要",
    "我們",
    "我们",
    "我想",
    "我要",
    "想要",
    "查詢",
    "查一下",
    "搜尋",
    "搭乘",
    "出發",
    "回到",
    "回",
    "從",
    "由",
    "自",
    "搭",
    "坐",
    "要",
    "的",
    "火車(?!站)",
    "列車",
    "班次",
    "車次",
    "時刻表",
    "有哪些",
    "有什麼",
    "嗎",
    "呢",
    "我",
)

ENGLISH_STOP_WORDS = (
    "i",
    "we",
    "want",
    "wanna",
    "need",
    "would",
    "like",
    "go",
    "going",
    "get",
    "travel",
    "take",
    "please",
    "find",
    "show",
    "me",
    "a",
    "the",
    "train",
    "trains",
    "from",
    "to",
    "on",
    "at",
    "in",
    "within",
    "after",
    "around",
    "before",
    "by",
    "for",
    "leaving",
    "departing",
    "today",
    "tonight",
    "tomorrow",
    "yesterday",
    "day",
    "hours?",
    "hrs?",
    "next",
    "this",
    "fastest",
    "cheapest",
    "direct",
    "nonstop",
    "non-stop",
    "mon(?:day)?",
    "tue(?:s|sday)?",
    "wed(?:nesday)?",
    "thu(?:rs|rsday)?",
    "fri(?:day)?",
    "sat(?:urday)?",
    "sun(?:day)?",
)

MIN_CJK_NAME_LENGTH = 2
MAX_CJK_NAME_LENGTH = 4
MAX_LATIN_NAME_LENGTH = 40

# Only the end of the text before a separator can hold the origin name.
ORIGIN_WINDOW = 64

# Station names recognized inside a longer segment ("查台北", "台中還有車").
# Longer names come first in the pattern, so "北新竹" is never read as "新竹".
KNOWN_STATIONS = (
    "基隆",
    "瑞芳",
    "南港",
    "松山",
    "臺北",
    "萬華",
    "板橋",
    "樹林",
    "桃園",
    "中壢",
    "北新竹",
    "新竹",
    "竹南",
    "苗栗",
    "豐原",
    "臺中",
    "新烏日",
    "彰化",
    "員林",
    "斗六",
    "虎尾",
    "嘉義",
    "新營",
    "永康",
    "臺南",
    "岡山",
    "新左營",
    "左營",
    "高雄",
    "鳳山",
    "屏東",
    "臺東",
    "花蓮",
    "宜蘭",
    "羅東",
)

_CJK = re.compile(r"[㐀-鿿豈-﫿]")
_PUNCTUATION = r"[,，。．.!！?？、;；:：()（）「」『』\[\]<>《》~～\"'“”‘’]"


def _alternation(words: Iterable[str]) -> str:
    # Longest first so that "最便宜" wins over "便宜"
    return "|".join(sorted(words, key=len, reverse=True))


_CJK_WORDS = [
    *SEPARATOR_WORDS,
    *TIME_WINDOW_WORDS,
    *PREFERENCE_WORDS,
    *FILLER_WORDS,
    *(word for word in RELATIVE_DAYS if _CJK.search(word)),
    *(word for word in PERIODS if _CJK.search(word)),
    r"(?:下下|下|這|这|本)?(?:個|个)?(?:週|周|星期|禮拜|礼拜)[一二三四五六日天]",
]

# Numbers with their unit: "8點", "8:30", "6小時", "10月3日", "2026-10-03".
_CJK_NUMBER = (
    r"\d+(?:\s*(?:個小時|个小时|小時|小时|鐘頭|钟头|點半|点半|點|点|時|时|分|月|日|號|号|年|[:：/\-.])\s*\d*)*"
)
_LATIN_NUMBER = r"\d+(?:[:.]\d+)?(?:st|nd|rd|th|am|pm|a\.m\.|p\.m\.)?"

# Boundaries inside CJK text: keywords, numbers, punctuation, whitespace.
_CJK_BOUNDARY = re.compile(
    rf"(?:{_alternation(_CJK_WORDS)}|{_CJK_NUMBER}|{_PUNCTUATION}|\s+)",
    re.IGNORECASE,
)

# Boundaries inside Latin text: whole stop words, numbers, punctuation.
_LATIN_BOUNDARY = re.compile(
    rf"(?:\b(?:{_alternation(ENGLISH_STOP_WORDS)})\b|{_LATIN_NUMBER}|{_PUNCTUATION})",
    re.IGNORECASE,
)

_CJK_SUFFIXES = ("火車站", "台鐵站", "臺鐵站", "車站", "站")
_LATIN_SUFFIX = re.compile(r"\s*\b(?:main\s+)?(?:railway\s+|train\s+)?station$", re.IGNORECASE)

_KNOWN_STATION = re.compile(
    "|".join(
        name.replace("臺", "[台臺]")
        for name in sorted(KNOWN_STATIONS, key=len, reverse=True)
    )
)


def _boundary_for(text: str) -> re.Pattern[str]:
    return _CJK_BOUNDARY if _CJK.search(text) else _LATIN_BOUNDARY


def _strip_suffix(name: str) -> str:
    if _CJK.search(name):
        for suffix in _CJK_SUFFIXES:
            if name.endswith(suffix) and len(name) - len(suffix) >= 2:
                return name[: -len(suffix)]
        return name
    return _LATIN_SUFFIX.sub("", name)


def _known_station(name: str, last: bool) -> Optional[str]:
    matches = [match.group() for match in _KNOWN_STATION.finditer(name)]
    if not matches:
        return None
    return matches[-1] if last else matches[0]


def _finish(name: str, last: bool) -> Optional[str]:
    name = name.strip()
    if not name:
        return None

    if _CJK.search(name):
        name = re.sub(r"\s+", "", name)
        name = _strip_suffix(name)
        known = _known_station(name, last)
        if known is not None:
            return known
        low, high = MIN_CJK_NAME_LENGTH, MAX_CJK_NAME_LENGTH
    else:
        name = re.sub(r"\s+", " ", _strip_suffix(name)).strip(" -")
        low, high = 1, MAX_LATIN_NAME_LENGTH

    if not low <= len(name) <= high:
        return None
    return name


def clean_origin(segment: str) -> Optional[str]:
    """Return the place name at the end of the text before a separator."""
    text = _strip_suffix(segment.strip()[-ORIGIN_WINDOW:])
    boundary = _boundary_for(text)

    matches = list(boundary.finditer(text))

    # Walk back over boundary words that sit right before the separator
    end = len(text)
    while matches and matches[-1].end() == end:
        end = matches.pop().start()

    if matches:
        return _finish(text[matches[-1].end() : end], last=True)
    return _finish(text[:end], last=True)


def clean_destination(segment: str) -> Optional[str]:
    """Return the place name at the start of the text after a separator."""
    text = segment.strip()
    boundary = _boundary_for(text)

    # Skip boundary words right after the separator
    start = 0
    while start < len(text):
        match = boundary.match(text, start)
        if match is None or match.end() == start:
            break
        start = match.end()

    text = text[start:]
    first = boundary.search(text)
    if first is not None:
        text = text[: first.start()]
    return _finish(text, last=False)
