from __future__ import annotations

from databricks.sdk import WorkspaceClient

from tablegate.core.uc import UCSchema, UCTable


class UnityCatalogAdapter:
    """Read-only adapter around Databricks SDK Unity Catalog listing APIs."""

    def __init__(self, client: WorkspaceClient) -> None:
        self.client = client

    def list_schemas(self, catalog: str) -> list[UCSchema]:
        """List schemas in a given catalog."""
        out: list[UCSchema] = []
        for s in self.client.schemas.list(catalog_name=catalog):
            name = getattr(s, "name", None)
            full_name = getattr(s, "full_name", None)
            catalog_name = getattr(s, "catalog_name", None) or catalog

            if not name and full_name:
                name = full_name.split(".")[-1]
            if not full_name and name:
                full_name = f"{catalog_name}.{name}"
            if not name or not full_name:
                continue

            out.append(
                UCSchema(
                    full_name=full_name,
                    name=name,
                    catalog_name=catalog_name,
                    owner=getattr(s, "owner", None),
                )
            )
        return out

    def list_tables(self, catalog: str, schema: str) -> list[UCTable]:
        """List tables in a given catalog.schema."""
        out: list[UCTable] = []
        for t in self.client.tables.list(catalog_name=catalog, schema_name=schema):
            full_name = getattr(t, "full_name", None)
            if not full_name:
                continue
            table_type = getattr(t, "table_type", None)
            out.append(
                UCTable(
                    full_name=full_name,
                    owner=getattr(t, "owner", None),
                    table_type=str(table_type) if table_type else None,
                )
            )
        return out
