"""Query assembler: normalize, extract, score.

``QueryParser.parse`` is the single entry point turning free text into a
``ParsedQuery``. It is a total function: any input, including non-string
values, empty strings and oversized text, yields a result, at worst an
empty one with zero confidence.

The reference time used for relative dates comes from an injectable
clock so that parsing the same text twice gives identical results.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Callable, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..config import ParserConfig, get_config
from ..domain.errors import ConfigurationError
from ..domain.models import ParsedQuery, Preferences
from .dates import local_today
from .extract import EntityExtractor, ExtractedEntities
from .normalize import normalize
from .scoring import score

EMPTY_SUMMARY = "無法解析查詢內容"


@dataclass
class QueryParser:
    """Rule-based natural-language query parser.

    Attributes:
        config: Parser configuration (input bounds, home timezone)
        extractor: Entity extractor running the pattern library
        clock: Returns the current instant; defaults to the wall clock
            in the home timezone
    """

    config: ParserConfig = field(default_factory=lambda: get_config().parser)
    extractor: EntityExtractor = field(default_factory=EntityExtractor)
    clock: Optional[Callable[[], datetime]] = None

    _timezone: ZoneInfo = field(init=False, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)
        try:
            self._timezone = ZoneInfo(self.config.home_timezone)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ConfigurationError(
                f"Unknown timezone: {self.config.home_timezone}",
                setting_name="home_timezone",
                expected_type="IANA timezone name",
                cause=e,
            )

    def now(self) -> datetime:
        """Return the current instant in the home timezone."""
        if self.clock is None:
            return datetime.now(self._timezone)
        return self._localize(self.clock())

    def parse(
        self,
        query: Any,
        context: Any = None,
        now: Optional[datetime] = None,
    ) -> ParsedQuery:
        """Parse a natural-language query.

        Args:
            query: The user query. Non-string values count as empty.
            context: Optional supplementary text. Fields the query leaves
                empty are filled from it.
            now: Reference instant for relative dates. Naive values are
                taken as home-timezone time. Defaults to ``self.now()``.

        Returns:
            The parsed query. Never raises for any input.
        """
        text = normalize(query, self.config.max_query_length)
        reference = self._localize(now) if now is not None else self.now()

        entities = self.extractor.extract(text, reference)
        if context is not None:
            context_text = normalize(context, self.config.max_context_length)
            if context_text:
                entities = entities.merged_with(
                    self.extractor.extract(context_text, reference)
                )

        confidence, patterns = score(entities)
        parsed = self._assemble(text, entities, confidence, patterns, reference)

        self._logger.debug(
            "Query parsed",
            extra={
                "query_length": len(text),
                "confidence": confidence,
                "patterns": list(patterns),
            },
        )
        return parsed

    @staticmethod
    def summarize(parsed: ParsedQuery) -> str:
        """Describe a parsed query in one line of Chinese text.

        Args:
            parsed: Output of ``parse``.

        Returns:
            Sections joined by ``" | "``, or a fallback message when
            nothing was extracted.
        """
        parts = []
        if parsed.has_route:
            parts.append(f"從 {parsed.origin_raw} 到 {parsed.destination_raw}")
        if parsed.train_number is not None:
            parts.append(f"車次: {parsed.train_number}")
        if parsed.date:
            parts.append(f"日期: {parsed.date}")
        if parsed.time:
            parts.append(f"時間: {parsed.time}")

        prefs = parsed.preferences
        if prefs.train_type:
            parts.append(f"車種: {prefs.train_type}")

        needs = []
        if prefs.fastest:
            needs.append("最快路線")
        if prefs.cheapest:
            needs.append("最便宜路線")
        if needs:
            parts.append(f"需求: {' / '.join(needs)}")

        if prefs.direct_only:
            parts.append("條件: 直達車")
        if prefs.time_window_hours is not None:
            parts.append(f"時段: 接下來 {prefs.time_window_hours} 小時")

        return " | ".join(parts) if parts else EMPTY_SUMMARY

    def _localize(self, moment: datetime) -> datetime:
        if moment.tzinfo is None:
            return moment.replace(tzinfo=self._timezone)
        return moment.astimezone(self._timezone)

    @staticmethod
    def _assemble(
        text: str,
        entities: ExtractedEntities,
        confidence: float,
        patterns: tuple[str, ...],
        reference: datetime,
    ) -> ParsedQuery:
        route = entities.route
        train = entities.train_number
        clock = entities.clock

        day = entities.get("date")
        if clock is not None and clock.next_day:
            # Midnight ending the day named by the query, today by default
            base = date.fromisoformat(day) if day else local_today(reference)
            day = (base + timedelta(days=1)).isoformat()

        preferences = Preferences(
            train_type=entities.get("train_type"),
            fastest=bool(entities.get("fastest", False)),
            cheapest=bool(entities.get("cheapest", False)),
            direct_only=bool(entities.get("direct_only", False)),
            time_window_hours=entities.get("time_window_hours"),
        )

        return ParsedQuery(
            raw_query=text,
            origin_raw=route.origin if route else None,
            destination_raw=route.destination if route else None,
            date=day,
            time=clock.time if clock else None,
            preferences=preferences,
            train_number=train.number if train else None,
            is_partial_train_number=train.partial if train else False,
            train_number_query=train is not None,
            confidence=confidence,
            matched_patterns=patterns,
        )
