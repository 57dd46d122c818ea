"""Entity extraction over the pattern library.

The extractor is a small interpreter loop over ``PatternRule`` records:
rules run in declared order, a rule whose slot is already filled is
skipped, and the first match that its extractor accepts fills the slot.

Example
-------
    >>> from datetime import datetime
    >>> entities = EntityExtractor().extract("台北到台中", datetime(2026, 10, 19))
    >>> entities.route
    Route(origin='台北', destination='台中')
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Sequence

from .patterns import (
    DEFAULT_RULES,
    ClockTime,
    PatternRule,
    Route,
    RuleCategory,
    TrainNumber,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FiredRule:
    """A rule that filled its slot during extraction."""

    rule_id: str
    category: RuleCategory
    slot: str
    weight: float


@dataclass(frozen=True)
class ExtractedEntities:
    """Raw entities found in one text.

    Attributes:
        values: Slot name to extracted value
        fired: Rules that filled a slot, in evaluation order
    """

    values: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    fired: tuple[FiredRule, ...] = ()

    def get(self, slot: str, default: Any = None) -> Any:
        return self.values.get(slot, default)

    @property
    def route(self) -> Optional[Route]:
        return self.values.get("route")

    @property
    def train_number(self) -> Optional[TrainNumber]:
        return self.values.get("train_number")

    @property
    def clock(self) -> Optional[ClockTime]:
        return self.values.get("time")

    @property
    def categories(self) -> frozenset[RuleCategory]:
        return frozenset(rule.category for rule in self.fired)

    def merged_with(
        self, other: ExtractedEntities, prefix: str = "context:"
    ) -> ExtractedEntities:
        """Fill the slots missing here with the values found in ``other``.

        Slots already present are never overwritten. Rules taken from
        ``other`` are recorded after ours with ``prefix`` prepended to
        their identifier.
        """
        values: Dict[str, Any] = dict(self.values)
        fired = list(self.fired)
        for rule in other.fired:
            if rule.slot in values:
                continue
            values[rule.slot] = other.values[rule.slot]
            fired.append(
                FiredRule(
                    rule_id=f"{prefix}{rule.rule_id}",
                    category=rule.category,
                    slot=rule.slot,
                    weight=rule.weight,
                )
            )
        return ExtractedEntities(MappingProxyType(values), tuple(fired))


@dataclass(frozen=True)
class EntityExtractor:
    """Run an ordered rule table against a text.

    Attributes:
        rules: Rules in evaluation order
    """

    rules: Sequence[PatternRule] = DEFAULT_RULES

    def extract(self, text: str, now: datetime) -> ExtractedEntities:
        """Extract entities from already normalized text.

        Parameters
        ----------
        text : str
            Normalized query text.
        now : datetime
            Reference instant for relative dates, in the home timezone.

        Returns
        -------
        ExtractedEntities
            Filled slots and the rules that filled them. Empty when
            ``text`` is empty or nothing matched.
        """
        values: Dict[str, Any] = {}
        fired: list[FiredRule] = []
        if not text:
            return ExtractedEntities()

        for rule in self.rules:
            if rule.slot in values:
                continue

            value = None
            for match in rule.pattern.finditer(text):
                value = rule.extract(match, now)
                if value is not None:
                    break
            if value is None:
                continue

            values[rule.slot] = value
            fired.append(FiredRule(rule.id, rule.category, rule.slot, rule.weight))
            if rule.stops_extraction:
                break

        logger.debug(
            "Entities extracted",
            extra={"slots": sorted(values), "rules": [rule.rule_id for rule in fired]},
        )
        return ExtractedEntities(MappingProxyType(values), tuple(fired))
