"""Commands for browsing the catalog as a principal sees it."""

from __future__ import annotations

import typer
from databricks.sdk.errors import NotFound, PermissionDenied

from tablegate.cli.common.context import (
    build_catalog_context,
    build_identity_context,
    resolve_principal_or_exit,
)
from tablegate.cli.common.exits import die, exit_from_exc
from tablegate.cli.common.options import NameOpt, ProfileOpt, TokenOpt
from tablegate.cli.common.output import out
from tablegate.core.catalog import visible_schemas

catalog_app = typer.Typer(
    help="Unity Catalog listings filtered by a principal's allow-list.",
    no_args_is_help=True,
)


@catalog_app.command("tables")
def tables(
    catalog: str = typer.Option(..., "--catalog", help="Catalog name"),
    token: str | None = TokenOpt,
    profile: str | None = ProfileOpt,
    name: str | None = NameOpt,
):
    """List the schemas and tables of a catalog visible to a principal."""
    identity = build_identity_context()
    principal = resolve_principal_or_exit(identity, token)
    catalog_ctx = build_catalog_context(profile)

    try:
        with out.status("Loading schemas..."):
            schemas = visible_schemas(
                catalog_ctx.adapter, catalog, principal, name_regex=name
            )
    except ValueError as exc:
        die(str(exc), code=2)
    except NotFound as exc:
        exit_from_exc(exc, message=f"Catalog '{catalog}' does not exist.", code=1)
    except PermissionDenied as exc:
        exit_from_exc(exc, message=f"No permission to access catalog '{catalog}'.", code=1)

    if not schemas:
        out.warn(f"No schemas in '{catalog}' visible to {principal.display_name}.")
        raise typer.Exit(0)

    out.header(f"{catalog} as seen by {principal.display_name}")
    out.visible_schemas_table(schemas)
