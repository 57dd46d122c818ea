"""Natural language processing components for the query engine.

This subpackage groups the rule-based pieces that turn a query into
structured intent: normalization, the pattern library, entity
extraction, confidence scoring and the query parser itself.
"""
