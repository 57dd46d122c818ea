"""Services layer - Application orchestration.

Available services:
- QueryUnderstandingService: Query parsing and station resolution
"""

from .query_service import QueryUnderstandingService

__all__ = ["QueryUnderstandingService"]
