"""Allow-list data model.

An :class:`AllowList` maps schema names to the set of tables a principal may
reference within them. It is built once per identity resolution and never
mutated afterwards.

Two payload shapes exist in the wild:

- nested: ``{"SCHEMA1": ["t1", "t2"], "SCHEMA2": ["table1"]}``
- flat:   ``["SCHEMA1.t1", "SCHEMA1.t2", "SCHEMA2.table1"]``

The nested shape is canonical; :meth:`AllowList.from_flat` converts the flat one.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Iterable, Iterator, Mapping

from tablegate.core.errors import InvalidAllowListPayload, InvalidResourceName


@dataclass(frozen=True)
class ResourceName:
    """
    A qualified ``(schema, table)`` pair.

    Equality is defined on the fully-qualified name, so two instances built
    from the same names compare equal regardless of where they came from.
    """

    schema: str
    table: str

    @property
    def full_name(self) -> str:
        return f"{self.schema}.{self.table}"

    @classmethod
    def parse(cls, full_name: str) -> ResourceName:
        """
        Split ``schema.table`` on the last dot.

        Raises:
            InvalidResourceName: if there is no schema or no table part.
        """
        schema, sep, table = full_name.strip().rpartition(".")
        if not sep or not schema or not table:
            raise InvalidResourceName(
                f"Resource name must be in the form `schema.table`, got {full_name!r}."
            )
        return cls(schema=schema, table=table)

    def __str__(self) -> str:
        return self.full_name


class AllowList:
    """
    Immutable mapping of schema name -> allowed table names.

    Construction takes ``(schema, tables)`` pairs. A schema appearing more than
    once is *replaced* by its last occurrence (last-write-wins); tables from
    earlier occurrences are not merged in.
    """

    __slots__ = ("_schemas",)

    def __init__(self, entries: Iterable[tuple[str, Iterable[str]]] = ()):
        schemas: dict[str, frozenset[str]] = {}
        for schema, tables in entries:
            schemas[schema] = frozenset(tables)
        self._schemas: Mapping[str, frozenset[str]] = MappingProxyType(schemas)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Iterable[str]]) -> AllowList:
        """Build from the nested ``{schema: [tables...]}`` shape."""
        return cls(mapping.items())

    @classmethod
    def from_flat(cls, full_names: Iterable[str]) -> AllowList:
        """
        Build from a flat list of ``schema.table`` names.

        Entries sharing a schema accumulate into that schema's table set and
        exact duplicates collapse. An entry without a schema part raises
        :class:`InvalidResourceName`.
        """
        grouped: dict[str, set[str]] = {}
        for full_name in full_names:
            name = ResourceName.parse(full_name)
            grouped.setdefault(name.schema, set()).add(name.table)
        return cls(grouped.items())

    def contains_schema(self, schema: str) -> bool:
        """True iff ``schema`` was included at construction, even with no tables."""
        return schema in self._schemas

    def contains_table(self, schema: str, table: str) -> bool:
        """True iff ``table`` is allowed within ``schema`` (exact, case-sensitive)."""
        tables = self._schemas.get(schema)
        return tables is not None and table in tables

    def contains(self, name: ResourceName) -> bool:
        return self.contains_table(name.schema, name.table)

    def schemas(self) -> list[str]:
        return list(self._schemas)

    def tables(self, schema: str) -> frozenset[str]:
        return self._schemas.get(schema, frozenset())

    def schemas_with_table(self, table: str) -> list[str]:
        """Schemas whose table set contains ``table``."""
        return [s for s, tables in self._schemas.items() if table in tables]

    def resources(self) -> frozenset[ResourceName]:
        return frozenset(
            ResourceName(schema, table)
            for schema, tables in self._schemas.items()
            for table in tables
        )

    def as_dict(self) -> dict[str, list[str]]:
        return {schema: sorted(tables) for schema, tables in self._schemas.items()}

    def __contains__(self, schema: object) -> bool:
        return schema in self._schemas

    def __iter__(self) -> Iterator[str]:
        return iter(self._schemas)

    def __len__(self) -> int:
        return len(self._schemas)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AllowList):
            return NotImplemented
        return dict(self._schemas) == dict(other._schemas)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"AllowList({self.as_dict()!r})"


def allow_list_from_payload(payload: Any) -> AllowList:
    """
    Build an AllowList from a decoded authority payload.

    Accepts the nested mapping shape or the flat list shape.

    Raises:
        InvalidAllowListPayload: for any other shape, non-string names, or
            flat entries without a schema.
    """
    if isinstance(payload, Mapping):
        entries: list[tuple[str, list[str]]] = []
        for schema, tables in payload.items():
            if not isinstance(schema, str):
                raise InvalidAllowListPayload(f"Schema name must be a string, got {schema!r}.")
            if not isinstance(tables, (list, tuple)):
                raise InvalidAllowListPayload(
                    f"Tables of schema {schema!r} must be a list, got {type(tables).__name__}."
                )
            if not all(isinstance(t, str) for t in tables):
                raise InvalidAllowListPayload(f"Table names of schema {schema!r} must be strings.")
            entries.append((schema, list(tables)))
        return AllowList(entries)

    if isinstance(payload, (list, tuple)):
        if not all(isinstance(name, str) for name in payload):
            raise InvalidAllowListPayload("Flat allow-list entries must be strings.")
        try:
            return AllowList.from_flat(payload)
        except InvalidResourceName as exc:
            raise InvalidAllowListPayload(str(exc)) from exc

    raise InvalidAllowListPayload(
        f"Allow-list must be an object or an array, got {type(payload).__name__}."
    )
