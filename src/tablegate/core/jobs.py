"""Job domain model as seen by the authorization layer.

Jobs are created and stored by the job-execution subsystem. This module only
describes the read-only view the authorization engine needs: who owns the
job, what kind of request it is, and, for query jobs, the raw query text.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class RequestKind(str, Enum):
    """
    Kind of request a job carries.

    Values:
        DO_QUERY: Execute a query; subject to resource-reference checks.
        GET_CAPABILITIES: Describe the service.
        ABORT: Stop a running job.
        DESTROY: Delete a job and its results.
    """

    DO_QUERY = "doQuery"
    GET_CAPABILITIES = "getCapabilities"
    ABORT = "abort"
    DESTROY = "destroy"


@dataclass(frozen=True)
class Job:
    """
    A submitted job.

    Attributes:
        id: Identifier assigned by the job-execution subsystem.
        owner: The owning principal, anything exposing an ``id`` attribute,
               a plain principal id, or None when ownership was not recorded.
        request: Kind of request the job carries.
        query: Raw query text for ``DO_QUERY`` jobs.
    """

    id: str
    owner: Any = None
    request: RequestKind = RequestKind.DO_QUERY
    query: str | None = None

    @property
    def is_query(self) -> bool:
        return self.request == RequestKind.DO_QUERY

    @property
    def owner_id(self) -> str | None:
        """Return the owner's id whatever form the owner was recorded in."""
        if self.owner is None:
            return None
        if isinstance(self.owner, str):
            return self.owner
        return getattr(self.owner, "id", None)
