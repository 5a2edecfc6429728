"""Common CLI options for the CLI."""

import typer

TokenOpt = typer.Option(
    None,
    "--token",
    "-t",
    envvar="TABLEGATE_TOKEN",
    help="Bearer credential sent to the identity authority.",
)

ProfileOpt = typer.Option(
    None,
    "--profile",
    "-p",
    help="Databricks CLI profile (from ~/.databrickscfg)",
)

QueryOpt = typer.Option(
    None,
    "--query",
    "-q",
    help="Query text to check.",
)

QueryFileOpt = typer.Option(
    None,
    "--file",
    "-f",
    exists=True,
    dir_okay=False,
    readable=True,
    help="Read the query text from a file.",
)

NameOpt = typer.Option(
    None,
    "--name",
    help="Regex filter for schema full names",
)

VerboseOpt = typer.Option(
    False,
    "--verbose",
    "-v",
    help="Log debug output to stderr.",
)
