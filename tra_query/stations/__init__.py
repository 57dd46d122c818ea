"""Station index and resolution.

Available components:
- StationIndex: Immutable lookup tables over one dataset snapshot
- StationIndexHolder: Build-then-swap publication of the current index
- StationResolver: Multi-tier name resolution with confidence scores
"""

from .index import StationIndex, StationIndexHolder
from .resolver import StationResolver

__all__ = ["StationIndex", "StationIndexHolder", "StationResolver"]
