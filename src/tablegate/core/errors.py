"""Error taxonomy for tablegate.

Transport and identity-resolution failures are raised as exceptions and are
never recoverable locally. Resource-policy outcomes are *not* modelled here:
they are folded into a :class:`tablegate.core.decision.Decision`.
"""

from __future__ import annotations

from typing import Iterable


class TableGateError(Exception):
    """Base class for every error raised by tablegate."""


class ConfigError(TableGateError, ValueError):
    """Raised when the authorization configuration is incomplete or invalid."""


class UnsupportedMethod(TableGateError, ValueError):
    """Raised when a remote call client is built with a method other than GET/POST."""

    def __init__(self, method: str):
        super().__init__(f'Request method must be either "GET" or "POST", got {method!r}.')
        self.method = method


class InvalidAddress(TableGateError, ValueError):
    """Raised when a remote call target is not an absolute http(s) URL."""


class InvalidResourceName(TableGateError, ValueError):
    """Raised when a flat resource name has no schema part."""


class InvalidAllowListPayload(TableGateError, ValueError):
    """Raised when an allow-list payload has neither the nested nor the flat shape."""


class WorkspaceAuthError(TableGateError, RuntimeError):
    """Raised when a Databricks workspace client cannot be configured."""


# Transport


class RemoteCallError(TableGateError, RuntimeError):
    """Base class for failures of a single remote call."""


class RemoteCallFailed(RemoteCallError):
    """The remote end answered with a non-2xx status."""

    def __init__(self, url: str, status_code: int, body: str):
        super().__init__(
            f"Remote call to {url} failed: response code {status_code}: {body.strip()}"
        )
        self.url = url
        self.status_code = status_code
        self.body = body


class RemoteCallUnreachable(RemoteCallError):
    """The call could not complete (connection refused, DNS, timeout...)."""


class ResponseDecodeError(RemoteCallError):
    """A 2xx response body could not be decoded by the configured codec."""

    def __init__(self, message: str, body: str):
        super().__init__(message)
        self.body = body


# Identity resolution


class IdentityResolutionError(TableGateError, RuntimeError):
    """Base class for failures while resolving a request to a principal."""


class CredentialMissing(IdentityResolutionError):
    """The configured credential header is absent from the inbound request."""

    def __init__(self, header: str):
        super().__init__(f"Credential header {header!r} not present in request.")
        self.header = header


class AuthorityUnreachable(IdentityResolutionError):
    """The identity authority could not be reached."""


class MalformedAuthorityResponse(IdentityResolutionError):
    """The identity authority answered, but not with the expected fields/shapes."""


# Query checker signals, consumed by the reference resolver


class UnresolvedReferenceError(TableGateError):
    """A query references resources outside the checker's known universe."""

    def __init__(self, references: Iterable[str]):
        self.references = tuple(references)
        super().__init__(f"Unresolved references: {', '.join(self.references)}")


class QuerySyntaxError(TableGateError):
    """A query could not be parsed."""

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail
