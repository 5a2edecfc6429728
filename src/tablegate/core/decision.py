"""Authorization decision for job execution.

The decision combines two checks:

1. ownership: the job's recorded owner must be the principal (a job with no
   recorded owner is treated as indeterminate and passes this check), and
2. resource references: for query jobs, every resource the query touches must
   be in the principal's allow-list.

A disallowed reference denies execution even for the owner. A malformed
query does *not* deny execution here: the decision falls back to ownership
and the execution stage later reports the syntax error to the user.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable

import structlog

from tablegate.core.jobs import Job
from tablegate.core.principal import Principal
from tablegate.core.references import ReferenceOutcome, ReferenceResolver

logger = structlog.get_logger(__name__)


class DecisionReason(str, Enum):
    """
    Why a decision came out the way it did.

    Values:
        OWNER: The principal owns the job and nothing else objected.
        OWNERSHIP_UNKNOWN: No job or no recorded owner; nothing else objected.
        NOT_OWNER: The job belongs to someone else.
        DISALLOWED_REFERENCE: The query references resources outside the allow-list.
        MALFORMED_QUERY: The query did not parse; left to the execution stage.
    """

    OWNER = "OWNER"
    OWNERSHIP_UNKNOWN = "OWNERSHIP_UNKNOWN"
    NOT_OWNER = "NOT_OWNER"
    DISALLOWED_REFERENCE = "DISALLOWED_REFERENCE"
    MALFORMED_QUERY = "MALFORMED_QUERY"


@dataclass(frozen=True)
class Decision:
    """Outcome of evaluating one job for one principal."""

    allowed: bool
    reason: DecisionReason
    principal_id: str
    outcome: ReferenceOutcome | None = None

    def __bool__(self) -> bool:
        return self.allowed

    @property
    def query(self) -> str | None:
        """Query text to execute, with bare table names qualified when rewritten."""
        return self.outcome.query if self.outcome else None

    def explain(self, viewer: Principal | None = None) -> str:
        """
        Return a user-facing message for this decision.

        Offending resource names are only included when ``viewer`` is the
        principal whose allow-list was evaluated.
        """
        if self.reason == DecisionReason.MALFORMED_QUERY:
            return f"Execution permitted; the query is malformed: {self.outcome.detail}"
        if self.allowed:
            return "Execution permitted."
        if self.reason == DecisionReason.NOT_OWNER:
            return "Permission denied: the job belongs to another user."
        if viewer is not None and viewer.id == self.principal_id and self.outcome:
            names = ", ".join(self.outcome.disallowed)
            return f"Permission denied: the query references resources you may not access: {names}"
        return "Permission denied."


class AuthorizationPolicy:
    """Decides whether a principal may execute a job."""

    def __init__(self, resolver: ReferenceResolver | None = None):
        self.resolver = resolver or ReferenceResolver()

    def decide(self, principal: Principal, job: Job | None) -> Decision:
        """
        Evaluate ``job`` for ``principal``.

        Args:
            principal: The resolved principal of the current request.
            job: The job about to run; None when the host has none to offer.

        Returns:
            A Decision; use ``decision.allowed`` or ``bool(decision)``.
        """
        indeterminate = job is None or job.owner_id is None
        is_owner = indeterminate or principal.owns_job(job)
        if indeterminate:
            reason = DecisionReason.OWNERSHIP_UNKNOWN
        elif is_owner:
            reason = DecisionReason.OWNER
        else:
            reason = DecisionReason.NOT_OWNER

        if job is None or not job.is_query:
            return self._finish(Decision(is_owner, reason, principal.id), job)

        outcome = self.resolver.resolve_references(job.query or "", principal.allow_list)
        if outcome.is_disallowed:
            decision = Decision(False, DecisionReason.DISALLOWED_REFERENCE, principal.id, outcome)
        elif outcome.is_malformed and is_owner:
            decision = Decision(True, DecisionReason.MALFORMED_QUERY, principal.id, outcome)
        else:
            decision = Decision(is_owner, reason, principal.id, outcome)
        return self._finish(decision, job)

    def can_execute(self, principal: Principal, job: Job | None) -> bool:
        return self.decide(principal, job).allowed

    def _finish(self, decision: Decision, job: Job | None) -> Decision:
        job_id = job.id if job is not None else None
        if decision.allowed:
            logger.debug(
                "decision.allowed",
                principal=decision.principal_id,
                job=job_id,
                reason=decision.reason.value,
            )
        else:
            logger.info(
                "decision.denied",
                principal=decision.principal_id,
                job=job_id,
                reason=decision.reason.value,
            )
        return decision


def is_owner_of(principal: Principal, jobs: Iterable[Job]) -> bool:
    """List-level gate: permitted iff the principal owns at least one job."""
    return principal.owns_any(jobs)
