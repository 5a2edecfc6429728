"""sqlglot-backed query checker.

The checker parses query text and verifies that every table reference
resolves inside a known universe of resources (an :class:`AllowList`).
It never executes anything.
"""

from __future__ import annotations

import sqlglot
from sqlglot import exp
from sqlglot.errors import SqlglotError

from tablegate.core.allowlist import AllowList
from tablegate.core.errors import QuerySyntaxError, UnresolvedReferenceError


class SqlglotQueryChecker:
    """
    Parse SQL with sqlglot and check its table references.

    Resolution rules:
      - ``schema.table`` resolves iff the allow-list contains it.
      - ``table`` resolves iff exactly one allowed schema contains it. The
        engine would otherwise look the bare name up in its own default
        schema, so :meth:`parse_and_check` returns the query rewritten with
        the schema it resolved to; callers must run that text.
      - ``catalog.schema.table`` never resolves.
      - A bare name bound by a CTE visible at that point of the statement is
        not a resource. CTEs of sibling or nested queries do not count.
    """

    def __init__(self, dialect: str | None = None):
        self.dialect = dialect

    def parse(self, query_text: str) -> list[exp.Expression]:
        """
        Parse ``query_text`` into statements.

        Raises:
            QuerySyntaxError: if the text is empty, does not parse, or only
                parses as an opaque command.
        """
        if not query_text or not query_text.strip():
            raise QuerySyntaxError("Query is empty.")
        try:
            statements = sqlglot.parse(query_text, read=self.dialect)
        except SqlglotError as exc:
            raise QuerySyntaxError(str(exc)) from exc

        parsed = [s for s in statements if s is not None]
        if not parsed:
            raise QuerySyntaxError("Query is empty.")
        for statement in parsed:
            if isinstance(statement, exp.Command):
                raise QuerySyntaxError(f"Unsupported statement: {statement.sql()[:80]}")
        return parsed

    def table_references(self, statement: exp.Expression) -> list[exp.Table]:
        """Return table nodes of ``statement`` that are not CTE names in scope."""
        refs: list[exp.Table] = []
        for table in statement.find_all(exp.Table):
            if not table.name:
                continue
            if not table.db and not table.catalog and _bound_by_cte(table):
                continue
            refs.append(table)
        return refs

    def _resolve(self, table: exp.Table, known: AllowList) -> str | None:
        """Return the allowed schema ``table`` resolves to, or None."""
        if table.catalog:
            return None
        if table.db:
            return table.db if known.contains_table(table.db, table.name) else None
        schemas = known.schemas_with_table(table.name)
        return schemas[0] if len(schemas) == 1 else None

    def parse_and_check(self, query_text: str, known: AllowList) -> str:
        """
        Parse ``query_text`` and resolve its references against ``known``.

        Returns:
            The query to execute. Unchanged when every reference was already
            schema-qualified, otherwise regenerated with bare table names
            qualified by the schema they resolved to.

        Raises:
            QuerySyntaxError: if the query cannot be parsed.
            UnresolvedReferenceError: listing every reference outside ``known``.
        """
        statements = self.parse(query_text)
        unresolved: list[str] = []
        bare: list[tuple[exp.Table, str]] = []
        for statement in statements:
            for table in self.table_references(statement):
                schema = self._resolve(table, known)
                if schema is None:
                    name = ".".join(p for p in (table.catalog, table.db, table.name) if p)
                    if name not in unresolved:
                        unresolved.append(name)
                elif not table.db:
                    bare.append((table, schema))
        if unresolved:
            raise UnresolvedReferenceError(unresolved)
        if not bare:
            return query_text

        for table, schema in bare:
            table.set("db", exp.to_identifier(schema))
        return ";\n".join(s.sql(dialect=self.dialect) for s in statements)


def _cte_names(with_: exp.With, upto: int | None = None) -> set[str]:
    return {cte.alias_or_name for cte in with_.expressions[:upto]}


def _bound_by_cte(table: exp.Table) -> bool:
    """
    True iff a CTE visible from ``table`` binds its bare name.

    Walks up from the table. A WITH clause on an enclosing query binds all of
    its CTEs; from inside a CTE body only the earlier CTEs of the same clause
    are visible, plus the CTE itself when the clause is RECURSIVE.
    """
    name = table.name
    child: exp.Expression = table
    node = table.parent
    while node is not None:
        if isinstance(node, exp.With):
            position = next(
                (i for i, cte in enumerate(node.expressions) if cte is child),
                len(node.expressions),
            )
            if node.args.get("recursive"):
                position += 1
            if name in _cte_names(node, position):
                return True
            # the owning query's CTE list has been checked; continue above it
            child = node.parent
            node = child.parent if child is not None else None
            continue
        for sub in node.iter_expressions():
            if sub is not child and isinstance(sub, exp.With) and name in _cte_names(sub):
                return True
        child, node = node, node.parent
    return False
