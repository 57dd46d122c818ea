"""NLP ports - Abstractions for query parsing.

The protocol lets callers depend on "something that parses queries"
rather than on the rule-based parser, so a test double or another
strategy can be injected through the container.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, Optional, Protocol

if TYPE_CHECKING:
    from ..domain.models import ParsedQuery


class QueryParserPort(Protocol):
    """Port for natural-language query parsing.

    Implementation: nlp/query_parser.py (QueryParser)
    """

    def parse(
        self,
        query: Any,
        context: Any = None,
        now: Optional[datetime] = None,
    ) -> ParsedQuery:
        """Parse a query into structured intent.

        Args:
            query: The user query.
            context: Optional supplementary text.
            now: Optional reference instant for relative dates.

        Returns:
            ParsedQuery. Must not raise for any input.
        """
        ...

    def summarize(self, parsed: ParsedQuery) -> str:
        """Describe a parsed query in one line of text.

        Args:
            parsed: A result of ``parse``.

        Returns:
            Human-readable summary.
        """
        ...
