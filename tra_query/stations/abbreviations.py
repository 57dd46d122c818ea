"""Default abbreviation and character-variant tables.

Both tables are configuration data. ``StationConfig`` starts from
these defaults and lets deployments replace them through the
environment, without touching the resolver.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

# Well-known short forms and colloquial names, mapped to the primary
# name of the station they stand for.
DEFAULT_ABBREVIATIONS: Mapping[str, str] = MappingProxyType(
    {
        "北車": "臺北",
        "北火": "臺北",
        "台北車站": "臺北",
        "台北火車站": "臺北",
        "台北站": "臺北",
        "中火": "臺中",
        "台中車站": "臺中",
        "南火": "臺南",
        "台南車站": "臺南",
        "高火": "高雄",
        "高雄車站": "高雄",
        "竹火": "新竹",
        "桃火": "桃園",
        "tpe": "臺北",
        "taipei main station": "臺北",
    }
)

# Characters folded together when building index keys, so that
# "台北" and "臺北" share a key.
DEFAULT_VARIANTS: Mapping[str, str] = MappingProxyType({"臺": "台"})
