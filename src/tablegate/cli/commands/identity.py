"""Commands for resolving identities and checking queries."""

from pathlib import Path

import typer

from tablegate.cli.common.context import (
    IdentityAppContext,
    build_identity_context,
    resolve_principal_or_exit,
)
from tablegate.cli.common.exits import die
from tablegate.cli.common.options import QueryFileOpt, QueryOpt, TokenOpt
from tablegate.cli.common.output import out
from tablegate.core.jobs import Job, RequestKind

app = typer.Typer(
    help="Resolve identities and check queries against their allow-lists.",
    no_args_is_help=True,
)


@app.callback()
def _init(ctx: typer.Context):
    """Initialize identity context."""
    ctx.obj = build_identity_context()


@app.command()
def whoami(ctx: typer.Context, token: str | None = TokenOpt):
    """
    Show the principal and allow-list behind a credential.
    """
    appctx: IdentityAppContext = ctx.obj

    with out.status("Resolving identity..."):
        principal = resolve_principal_or_exit(appctx, token)

    out.principal(principal)
    if not len(principal.allow_list):
        out.warn("No resources allowed")
        return
    out.allow_list_table(principal.allow_list)


@app.command()
def check(
    ctx: typer.Context,
    token: str | None = TokenOpt,
    query: str | None = QueryOpt,
    file: Path | None = QueryFileOpt,
):
    """
    Decide whether a query job owned by the credential's principal may run.
    """
    appctx: IdentityAppContext = ctx.obj

    if (query is None) == (file is None):
        die("Provide exactly one of --query or --file.", code=2)
    query_text = query if query is not None else file.read_text()

    with out.status("Resolving identity..."):
        principal = resolve_principal_or_exit(appctx, token)

    job = Job(id="cli", owner=principal, request=RequestKind.DO_QUERY, query=query_text)
    decision = appctx.policy.decide(principal, job)

    out.decision(decision, viewer=principal)
    if decision.allowed and decision.query and decision.query != query_text:
        out.kv({"Run as": decision.query})
    if not decision.allowed:
        raise typer.Exit(1)
