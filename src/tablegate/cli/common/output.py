"""Output formatting utilities for the CLI."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from rich.console import Console
from rich.table import Table
from rich.theme import Theme

from tablegate.core.allowlist import AllowList
from tablegate.core.decision import Decision
from tablegate.core.principal import Principal
from tablegate.core.uc import VisibleSchema

_THEME = Theme(
    {
        "ok": "bold green",
        "warn": "yellow",
        "err": "bold red",
        "title": "bold cyan",
        "meta": "dim",
    }
)

console = Console(theme=_THEME)


@dataclass(frozen=True)
class Out:
    """Output formatter for CLI messages and tables."""

    def info(self, msg: str) -> None:
        """Print an info message."""
        console.print(f"[title]›[/] {msg}")

    @contextmanager
    def status(self, msg: str):
        """Show a transient status spinner while work is in progress."""
        with console.status(msg, spinner="dots"):
            yield

    def success(self, msg: str) -> None:
        """Print a success message."""
        console.print(f"[ok]✓[/] {msg}")

    def warn(self, msg: str) -> None:
        """Print a warning message."""
        console.print(f"[warn]⚠[/] {msg}")

    def error(self, msg: str) -> None:
        """Print an error message."""
        console.print(f"[err]✗[/] {msg}")

    def header(self, title: str) -> None:
        """Print a header message."""
        console.print(f"[title]{title}[/]")

    def kv(self, items: Mapping[str, Any]) -> None:
        """Print key-value pairs."""
        for k, v in items.items():
            console.print(f"[meta]{k}[/]: {v}")

    def principal(self, principal: Principal) -> None:
        """Print who a principal is."""
        self.kv({"ID": principal.id, "Name": principal.display_name})

    def allow_list_table(self, allow_list: AllowList, title: str = "Allowed resources") -> None:
        """Render one row per schema with its allowed tables."""
        t = Table(title=title, show_lines=False)
        t.add_column("Schema", style="ok", no_wrap=True)
        t.add_column("Tables")

        for schema, tables in allow_list.as_dict().items():
            t.add_row(schema, ", ".join(tables) if tables else "[meta](none)[/]")

        console.print(t)

    def decision(self, decision: Decision, viewer: Principal | None = None) -> None:
        """Print a decision with a redacted explanation."""
        message = decision.explain(viewer)
        if decision.allowed:
            self.success(message)
        else:
            self.error(message)
        console.print(f"[meta]reason[/]: {decision.reason.value}")

    def visible_schemas_table(
        self, schemas: Iterable[VisibleSchema], title: str = "Visible tables"
    ) -> None:
        """
        Render the principal-filtered catalog view.

        Expects VisibleSchema objects; schemas without visible tables get a
        single placeholder row.
        """
        t = Table(title=title, show_lines=False)
        t.add_column("Schema", style="ok")
        t.add_column("Table")
        t.add_column("Type", style="meta")
        t.add_column("Owner", style="meta")

        for vs in schemas:
            if not vs.tables:
                t.add_row(vs.schema.full_name, "[meta](no visible tables)[/]", "", "")
                continue
            for table in vs.tables:
                t.add_row(
                    vs.schema.full_name,
                    table.name,
                    str(table.table_type or ""),
                    str(table.owner or ""),
                )

        console.print(t)


out = Out()
