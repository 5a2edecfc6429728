"""Identity resolution against a remote identity authority.

The resolver extracts the bearer credential from an inbound request, forwards
it verbatim to the identity authority, and builds a :class:`Principal` from
the structured response. Every call builds a fresh principal and allow-list;
nothing is cached or shared between requests.
"""

from __future__ import annotations

from typing import Any, Mapping

import structlog

from tablegate.core.allowlist import allow_list_from_payload
from tablegate.core.config import AuthConfig
from tablegate.core.errors import (
    AuthorityUnreachable,
    CredentialMissing,
    InvalidAllowListPayload,
    MalformedAuthorityResponse,
    RemoteCallUnreachable,
    ResponseDecodeError,
)
from tablegate.core.principal import Principal
from tablegate.core.transport import JSON_CODEC, RemoteCallClient

logger = structlog.get_logger(__name__)


def _lookup_header(headers: Mapping[str, str], name: str) -> str | None:
    """Header lookup: exact match first, then case-insensitive."""
    value = headers.get(name)
    if value is not None:
        return value
    wanted = name.lower()
    for key, candidate in headers.items():
        if isinstance(key, str) and key.lower() == wanted:
            return candidate
    return None


def _string_field(response: Mapping[str, Any], field: str) -> str:
    value = response.get(field)
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        raise MalformedAuthorityResponse(
            f"Authority response field {field!r} is missing or not a string."
        )
    value = str(value)
    if not value:
        raise MalformedAuthorityResponse(f"Authority response field {field!r} is empty.")
    return value


class IdentityResolver:
    """
    Resolve inbound requests to principals.

    Args:
        config: Validated authorization configuration.
        client: Optional pre-built remote call client (JSON codec expected).
    """

    def __init__(self, config: AuthConfig, client: RemoteCallClient[Any] | None = None):
        self.config = config
        self.client = client or RemoteCallClient(
            config.authority_url,
            config.authority_method,
            codec=JSON_CODEC,
            encoding=config.encoding,
            connect_timeout=config.connect_timeout,
        )

    def extract_credential(self, request: Any) -> str:
        """
        Return the credential carried by ``request``.

        ``request`` may be any object with a ``headers`` mapping, or a header
        mapping itself.

        Raises:
            CredentialMissing: if the header is absent or empty.
        """
        headers = getattr(request, "headers", request)
        credential = _lookup_header(headers or {}, self.config.credential_header)
        if not credential:
            raise CredentialMissing(self.config.credential_header)
        return credential

    def resolve(self, request: Any) -> Principal:
        """
        Resolve ``request`` to a principal.

        Raises:
            CredentialMissing: no credential in the request; no call is made.
            AuthorityUnreachable: the authority could not be reached.
            RemoteCallFailed: the authority answered with a non-2xx status.
            MalformedAuthorityResponse: the answer lacks required fields.
        """
        credential = self.extract_credential(request)

        try:
            response = self.client.call({self.config.credential_header: credential})
        except RemoteCallUnreachable as exc:
            raise AuthorityUnreachable(str(exc)) from exc
        except ResponseDecodeError as exc:
            raise MalformedAuthorityResponse(str(exc)) from exc

        if not isinstance(response, Mapping):
            raise MalformedAuthorityResponse("Authority response is not an object.")
        if self.config.allow_list_field not in response:
            raise MalformedAuthorityResponse(
                f"Authority response field {self.config.allow_list_field!r} is missing."
            )

        principal = self.restore_principal(
            _string_field(response, self.config.id_field),
            _string_field(response, self.config.display_name_field),
            response[self.config.allow_list_field],
        )
        logger.info(
            "identity.resolved",
            principal=principal.id,
            schemas=len(principal.allow_list),
        )
        return principal

    def restore_principal(self, principal_id: str, display_name: str, allow_list: Any) -> Principal:
        """
        Build a principal from already-decoded identity data.

        Raises:
            MalformedAuthorityResponse: if ``allow_list`` has an invalid shape.
        """
        try:
            allowed = allow_list_from_payload(allow_list)
        except InvalidAllowListPayload as exc:
            raise MalformedAuthorityResponse(str(exc)) from exc
        return Principal(id=principal_id, display_name=display_name, allow_list=allowed)
