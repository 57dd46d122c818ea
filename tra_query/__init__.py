"""Top-level package for the Taiwan Railway query understanding engine.

The engine turns a free-text railway query ("台北到台中明天早上8點自強號")
into structured intent, and resolves the place names it contains to
canonical station records with a confidence score.

Subpackages:
- nlp: normalization, pattern library, extraction, scoring, parsing
- stations: station index, abbreviation table, resolver
- services: orchestration used by the CLI and other callers
"""

__version__ = "0.1.0"
