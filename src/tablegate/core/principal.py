"""Authenticated principal carrying a resource allow-list."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from tablegate.core.allowlist import AllowList, ResourceName
from tablegate.core.jobs import Job


@dataclass(frozen=True, eq=False)
class Principal:
    """
    An authenticated identity and the resources it may reference.

    Two principals are equal when their ids are equal; ownership checks
    compare ids, never object identity.

    Attributes:
        id: Stable identifier issued by the identity authority.
        display_name: Human-readable name.
        allow_list: Schemas/tables this principal may query.
    """

    id: str
    display_name: str
    allow_list: AllowList = field(default_factory=AllowList)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Principal):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def owns_job(self, job: Job | None) -> bool:
        """True iff the job's recorded owner has this principal's id."""
        return job is not None and job.owner_id == self.id

    def owns_any(self, jobs: Iterable[Job]) -> bool:
        """True iff this principal owns at least one of ``jobs``."""
        return any(self.owns_job(job) for job in jobs)

    def can_access_schema(self, schema: str) -> bool:
        return self.allow_list.contains_schema(schema)

    def can_access_table(self, schema: str | ResourceName, table: str | None = None) -> bool:
        """
        Check table access by qualified name.

        Accepts either a :class:`ResourceName` or separate schema and table
        names.
        """
        if isinstance(schema, ResourceName):
            return self.allow_list.contains(schema)
        if table is None:
            raise TypeError("table is required when schema is given as a string")
        return self.allow_list.contains_table(schema, table)
