"""Application context management for the CLI."""

from dataclasses import dataclass

from databricks.sdk import WorkspaceClient

from tablegate.cli.common.exits import die, exit_from_exc
from tablegate.core.adapters.unitycatalog import UnityCatalogAdapter
from tablegate.core.auth import get_workspace_client
from tablegate.core.config import AuthConfig
from tablegate.core.decision import AuthorizationPolicy
from tablegate.core.errors import (
    ConfigError,
    IdentityResolutionError,
    RemoteCallError,
    WorkspaceAuthError,
)
from tablegate.core.identity import IdentityResolver
from tablegate.core.principal import Principal
from tablegate.core.references import ReferenceResolver
from tablegate.core.sql import SqlglotQueryChecker


@dataclass
class IdentityAppContext:
    """Application context holding identity resolution and decision policy."""

    config: AuthConfig
    resolver: IdentityResolver
    policy: AuthorizationPolicy


@dataclass
class CatalogAppContext:
    """Application context holding Databricks client and Unity Catalog adapter."""

    profile: str | None
    client: WorkspaceClient
    adapter: UnityCatalogAdapter


def build_identity_context() -> IdentityAppContext:
    """Build the identity context from TABLEGATE_* environment variables."""
    try:
        config = AuthConfig.from_env()
        resolver = IdentityResolver(config)
    except ConfigError as exc:
        die(str(exc), code=2)
    policy = AuthorizationPolicy(ReferenceResolver(SqlglotQueryChecker(config.query_dialect)))
    return IdentityAppContext(config=config, resolver=resolver, policy=policy)


def build_catalog_context(profile: str | None) -> CatalogAppContext:
    """Build and return the application context for catalog commands."""
    try:
        client = get_workspace_client(profile)
    except WorkspaceAuthError as exc:
        die(str(exc), code=1)
    adapter = UnityCatalogAdapter(client)
    return CatalogAppContext(profile=profile, client=client, adapter=adapter)


def resolve_principal_or_exit(appctx: IdentityAppContext, token: str | None) -> Principal:
    """Resolve the principal for ``token`` or exit with a readable error."""
    headers = {appctx.config.credential_header: token} if token else {}
    try:
        return appctx.resolver.resolve(headers)
    except (IdentityResolutionError, RemoteCallError) as exc:
        exit_from_exc(exc, message=f"Could not resolve identity: {exc}", code=1)
