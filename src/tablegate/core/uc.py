"""Unity Catalog entities used by the principal-filtered catalog view.

Free of Databricks SDK types so the filtering logic can be tested with
plain stubs.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class UCTable:
    """A Unity Catalog table, addressed as ``catalog.schema.table``."""

    full_name: str
    owner: str | None = None
    table_type: str | None = None

    @property
    def name(self) -> str:
        return self.full_name.rsplit(".", 1)[-1]


@dataclass(frozen=True)
class UCSchema:
    """A Unity Catalog schema, addressed as ``catalog.schema``."""

    full_name: str
    name: str
    catalog_name: str
    owner: str | None = None


@dataclass(frozen=True)
class VisibleSchema:
    """A schema together with the subset of its tables a principal may see."""

    schema: UCSchema
    tables: tuple[UCTable, ...]
