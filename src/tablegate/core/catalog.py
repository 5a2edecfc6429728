"""Principal-filtered catalog listing.

Lists the schemas and tables of a Unity Catalog catalog, keeping only what a
principal's allow-list grants. Schemas are matched by their short name and
tables by ``schema.table``, the same qualified names queries use.
"""

from __future__ import annotations

import re
from typing import Protocol

from tablegate.core.principal import Principal
from tablegate.core.uc import UCSchema, UCTable, VisibleSchema


class CatalogAdapter(Protocol):
    """Interface for catalog listing used by the filtered view."""

    def list_schemas(self, catalog: str) -> list[UCSchema]:
        ...

    def list_tables(self, catalog: str, schema: str) -> list[UCTable]:
        ...


def visible_tables(principal: Principal, schema: str, tables: list[UCTable]) -> list[UCTable]:
    """Keep the tables of ``schema`` the principal may query."""
    return [t for t in tables if principal.can_access_table(schema, t.name)]


def visible_schemas(
    adapter: CatalogAdapter,
    catalog: str,
    principal: Principal,
    *,
    name_regex: str | None = None,
) -> list[VisibleSchema]:
    """
    List the part of ``catalog`` visible to ``principal``.

    Schemas the principal has no entry for are skipped without listing their
    tables. A schema present in the allow-list is returned even when none of
    its tables are visible.

    Args:
        adapter: Catalog adapter used to list schemas and tables.
        catalog: Catalog name.
        principal: Principal whose allow-list filters the listing.
        name_regex: Optional regex applied to schema full names.
    """
    try:
        rx = re.compile(name_regex) if name_regex else None
    except re.error as exc:
        raise ValueError(f"Invalid regex expression: {exc}") from exc

    out: list[VisibleSchema] = []
    for schema in adapter.list_schemas(catalog=catalog):
        if rx and not rx.search(schema.full_name):
            continue
        if not principal.can_access_schema(schema.name):
            continue
        tables = adapter.list_tables(catalog=catalog, schema=schema.name)
        out.append(
            VisibleSchema(
                schema=schema,
                tables=tuple(visible_tables(principal, schema.name, tables)),
            )
        )
    return out
