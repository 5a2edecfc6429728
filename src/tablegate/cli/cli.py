"""CLI application for query-scoped authorization."""

import typer

from tablegate.cli.commands.catalog import catalog_app
from tablegate.cli.commands.identity import app as identity_app
from tablegate.cli.common.logs import configure_logging
from tablegate.cli.common.options import VerboseOpt

app = typer.Typer(
    help="tablegate - query-scoped authorization",
    no_args_is_help=True,
)

app.add_typer(identity_app, name="identity", help="Resolve identities / check queries.")
app.add_typer(catalog_app, name="catalog")


@app.callback()
def _main(verbose: bool = VerboseOpt):
    """Configure logging before any command runs."""
    configure_logging(verbose)


if __name__ == "__main__":
    app()
