"""Adapter exposing principals to a job-execution host.

Hosts typically ask their "job owner" object three questions: may it read a
job list, may it write to a job list, may it execute a job. This module
answers them from a :class:`Principal` and an :class:`AuthorizationPolicy`
instead of having the principal inherit from host classes.
"""

from __future__ import annotations

from typing import Iterable, Protocol

from tablegate.core.decision import AuthorizationPolicy, is_owner_of
from tablegate.core.jobs import Job
from tablegate.core.principal import Principal


class JobOwnership(Protocol):
    """Ownership capability required from a principal."""

    def owns_job(self, job: Job | None) -> bool:
        ...

    def owns_any(self, jobs: Iterable[Job]) -> bool:
        ...


class PrincipalJobOwner:
    """Host-facing job owner backed by a principal."""

    def __init__(self, principal: Principal, policy: AuthorizationPolicy | None = None):
        self.principal = principal
        self.policy = policy or AuthorizationPolicy()

    @property
    def id(self) -> str:
        return self.principal.id

    @property
    def display_name(self) -> str:
        return self.principal.display_name

    def has_read_permission(self, jobs: Iterable[Job]) -> bool:
        return is_owner_of(self.principal, jobs)

    def has_write_permission(self, jobs: Iterable[Job]) -> bool:
        return is_owner_of(self.principal, jobs)

    def has_execute_permission(self, job: Job | None) -> bool:
        return self.policy.can_execute(self.principal, job)
