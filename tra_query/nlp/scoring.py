"""Confidence scoring of extracted entities.

The score only depends on which rules fired, never on the text itself:
each category that fired contributes the weight of its strongest rule,
and a query carrying both a route and a date or time earns a bonus.
"""

from __future__ import annotations

from typing import Dict

from .extract import ExtractedEntities
from .patterns import COMPLETE_QUERY_WEIGHT, RuleCategory

COMPLETE_QUERY_PATTERN = "complete_query"


def score(entities: ExtractedEntities) -> tuple[float, tuple[str, ...]]:
    """Compute the confidence of an extraction.

    Parameters
    ----------
    entities : ExtractedEntities
        Output of the extractor, possibly merged with context entities.

    Returns
    -------
    tuple[float, tuple[str, ...]]
        Confidence clamped to [0, 1], and the identifiers of the rules
        that fired in evaluation order.
    """
    best: Dict[RuleCategory, float] = {}
    for rule in entities.fired:
        best[rule.category] = max(best.get(rule.category, 0.0), rule.weight)

    confidence = sum(best.values(), 0.0)
    patterns = [rule.rule_id for rule in entities.fired]

    if RuleCategory.ROUTE in best and (
        RuleCategory.TIME in best or RuleCategory.DATE in best
    ):
        confidence += COMPLETE_QUERY_WEIGHT
        patterns.append(COMPLETE_QUERY_PATTERN)

    confidence = round(min(max(confidence, 0.0), 1.0), 6)
    return confidence, tuple(patterns)
