"""Resource reference resolution.

The resolver asks a query checker to parse a query against an allow-list and
turns the checker's signals into an explicit three-way outcome. Unresolved
references and syntax errors are kept apart: the first is a policy violation,
the second is the query author's problem and is reported later by the
execution stage.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol

import structlog

from tablegate.core.allowlist import AllowList
from tablegate.core.errors import QuerySyntaxError, UnresolvedReferenceError
from tablegate.core.sql import SqlglotQueryChecker

logger = structlog.get_logger(__name__)


class QueryChecker(Protocol):
    """Interface of the external query parser/checker."""

    def parse_and_check(self, query_text: str, known: AllowList) -> str | None:
        """
        Parse the query with ``known`` as the universe of resolvable resources.

        Returns the text to execute (bare names qualified), or None when the
        checker does not rewrite queries.

        Raises:
            UnresolvedReferenceError: for references outside ``known``.
            QuerySyntaxError: when the query does not parse.
        """
        ...


class OutcomeKind(str, Enum):
    """Possible results of resolving a query's references."""

    ALL_REFERENCES_ALLOWED = "ALL_REFERENCES_ALLOWED"
    DISALLOWED_REFERENCE_FOUND = "DISALLOWED_REFERENCE_FOUND"
    MALFORMED_QUERY = "MALFORMED_QUERY"


@dataclass(frozen=True)
class ReferenceOutcome:
    """
    Result of :meth:`ReferenceResolver.resolve_references`.

    Attributes:
        kind: Which of the three outcomes occurred.
        disallowed: Offending references (only for DISALLOWED_REFERENCE_FOUND).
        detail: Parser diagnostic (only for MALFORMED_QUERY).
        query: Text the execution stage must run (only for
            ALL_REFERENCES_ALLOWED, when the checker supplies it).
    """

    kind: OutcomeKind
    disallowed: tuple[str, ...] = ()
    detail: str | None = None
    query: str | None = None

    @classmethod
    def allowed(cls, query: str | None = None) -> ReferenceOutcome:
        return cls(OutcomeKind.ALL_REFERENCES_ALLOWED, query=query)

    @classmethod
    def disallowed_found(cls, references: tuple[str, ...]) -> ReferenceOutcome:
        return cls(OutcomeKind.DISALLOWED_REFERENCE_FOUND, disallowed=references)

    @classmethod
    def malformed(cls, detail: str) -> ReferenceOutcome:
        return cls(OutcomeKind.MALFORMED_QUERY, detail=detail)

    @property
    def is_allowed(self) -> bool:
        return self.kind == OutcomeKind.ALL_REFERENCES_ALLOWED

    @property
    def is_disallowed(self) -> bool:
        return self.kind == OutcomeKind.DISALLOWED_REFERENCE_FOUND

    @property
    def is_malformed(self) -> bool:
        return self.kind == OutcomeKind.MALFORMED_QUERY


class ReferenceResolver:
    """Adapter turning a :class:`QueryChecker` into a reference oracle."""

    def __init__(self, checker: QueryChecker | None = None):
        self.checker = checker or SqlglotQueryChecker()

    def resolve_references(self, query_text: str, allow_list: AllowList) -> ReferenceOutcome:
        """
        Statically check ``query_text`` against ``allow_list``.

        Only the checker's two documented signals are translated; anything
        else it raises propagates.
        """
        try:
            checked = self.checker.parse_and_check(query_text, allow_list)
        except UnresolvedReferenceError as exc:
            logger.debug("references.disallowed", count=len(exc.references))
            return ReferenceOutcome.disallowed_found(exc.references)
        except QuerySyntaxError as exc:
            logger.debug("references.malformed", detail=exc.detail)
            return ReferenceOutcome.malformed(exc.detail)
        return ReferenceOutcome.allowed(checked)
