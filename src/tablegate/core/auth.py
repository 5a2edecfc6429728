"""Databricks workspace client construction for the catalog view.

Only the principal-filtered catalog listing talks to Databricks; identity
resolution never does. Host URLs are sanitized before the SDK sees them.
"""

import re

from databricks.sdk import WorkspaceClient
from databricks.sdk.core import Config

from tablegate.core.errors import WorkspaceAuthError


def _format_auth_error(message: str, profile: str | None) -> str:
    """Return a user-friendly workspace auth error message."""
    if re.search(r"databricks auth login", message):
        cmd = "databricks auth login"
        if profile:
            cmd = f"{cmd} --profile {profile}"
        return (
            "Databricks authentication failed; the catalog cannot be listed.\n"
            f"Re-authenticate with:\n  $ {cmd}"
        )
    return f"Databricks authentication failed: {message}"


def _sanitize_host(host: str | None) -> str | None:
    """
    Normalize a Databricks host URL.

    - Removes query strings (e.g. '?o=123456789')
    - Removes trailing slashes
    """
    if not host:
        return host
    host = host.split("?", 1)[0]
    return host.rstrip("/")


def get_workspace_client(profile: str | None = None) -> WorkspaceClient:
    """
    Create a WorkspaceClient from Databricks unified auth configuration.

    Raises:
        WorkspaceAuthError: if the profile or environment cannot be resolved.
    """
    try:
        cfg = Config(profile=profile) if profile else Config()
    except ValueError as exc:
        raise WorkspaceAuthError(_format_auth_error(str(exc), profile)) from exc
    cfg.host = _sanitize_host(cfg.host)
    return WorkspaceClient(config=cfg)
