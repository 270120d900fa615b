"""Schema reading for Microsoft SQL Server over a DB-API connection."""

from __future__ import annotations

from typing import Any, Sequence

from boilmodels import mssql_catalog, mssql_types
from boilmodels.importers import ImportCollection
from boilmodels.schema import Column, ForeignKey, PrimaryKey, ViewCapabilities

_COLUMNS_QUERY = """
	SELECT column_name,
       CASE
         WHEN character_maximum_length IS NULL THEN data_type
         ELSE data_type + '(' + CAST(character_maximum_length AS VARCHAR) + ')'
       END AS full_type,
       data_type,
	   column_default,
       CASE
         WHEN is_nullable = 'YES' THEN 1
         ELSE 0
       END AS is_nullable,
       CASE
         WHEN EXISTS (SELECT c.column_name
                      FROM information_schema.table_constraints tc
                        INNER JOIN information_schema.key_column_usage kcu
                                ON tc.constraint_name = kcu.constraint_name
                               AND tc.table_name = kcu.table_name
                               AND tc.table_schema = kcu.table_schema
                      WHERE c.column_name = kcu.column_name
                      AND   tc.table_name = c.table_name
                      AND   (tc.constraint_type = 'PRIMARY KEY' OR tc.constraint_type = 'UNIQUE')
                      AND   (SELECT COUNT(*)
                             FROM information_schema.key_column_usage
                             WHERE table_schema = kcu.table_schema
                             AND   table_name = tc.table_name
                             AND   constraint_name = tc.constraint_name) = 1) THEN 1
         ELSE 0
       END AS is_unique,
	   COLUMNPROPERTY(object_id($1 + '.' + $2), c.column_name, 'IsIdentity') as is_identity,
	   COLUMNPROPERTY(object_id($1 + '.' + $2), c.column_name, 'IsComputed') as is_computed
	FROM information_schema.columns c
	WHERE table_schema = $1 AND table_name = $2"""

_PRIMARY_KEY_QUERY = """
	SELECT constraint_name
	FROM   information_schema.table_constraints
	WHERE  table_name = ? AND constraint_type = 'PRIMARY KEY' AND table_schema = ?;"""

_PRIMARY_KEY_COLUMNS_QUERY = """
	SELECT column_name
	FROM   information_schema.key_column_usage
	WHERE  table_name = ? AND constraint_name = ? AND table_schema = ?
	ORDER BY ordinal_position;"""

_FOREIGN_KEY_QUERY = """
	SELECT ccu.constraint_name ,
		ccu.table_name AS local_table ,
		ccu.column_name AS local_column ,
		kcu.table_name AS foreign_table ,
		kcu.column_name AS foreign_column
	FROM information_schema.constraint_column_usage ccu
	INNER JOIN information_schema.referential_constraints rc ON ccu.constraint_name = rc.constraint_name
	INNER JOIN information_schema.key_column_usage kcu ON kcu.constraint_name = rc.unique_constraint_name
	WHERE ccu.table_schema = ?
	  AND ccu.constraint_schema = ?
	  AND ccu.table_name = ?
	ORDER BY ccu.constraint_name, local_table, local_column, foreign_table, foreign_column
	"""


def _columns_from_list(entries: Sequence[str], table_name: str) -> list[str]:
    """Pick the column names of ``table.column`` entries that belong to ``table_name``."""
    columns = []
    for entry in entries:
        parts = entry.split(".")
        if len(parts) == 2 and parts[0] == table_name:
            columns.append(parts[1])
    return columns


def _index_placeholders(count: int, start: int) -> str:
    return ",".join(f"${index}" for index in range(start, start + count))


class MSSQLDriver:
    """Reads tables, columns and keys from a SQL Server database.

    ``conn`` is an open DB-API connection; the driver never opens or closes it.
    """

    def __init__(self, conn: Any) -> None:
        self.conn = conn

    def _fetch_all(self, query: str, args: Sequence[Any]) -> list[Sequence[Any]]:
        cursor = self.conn.cursor()
        try:
            cursor.execute(query, list(args))
            return list(cursor.fetchall())
        finally:
            cursor.close()

    def _fetch_one(self, query: str, args: Sequence[Any]) -> Sequence[Any] | None:
        cursor = self.conn.cursor()
        try:
            cursor.execute(query, list(args))
            return cursor.fetchone()
        finally:
            cursor.close()

    def table_names(
        self,
        schema: str,
        whitelist: Sequence[str] | None = None,
        blacklist: Sequence[str] | None = None,
    ) -> list[str]:
        """List the base tables of ``schema``."""
        return mssql_catalog.table_names(self.conn, schema, whitelist, blacklist)

    def view_names(
        self,
        schema: str,
        whitelist: Sequence[str] | None = None,
        blacklist: Sequence[str] | None = None,
    ) -> list[str]:
        """List the views of ``schema``."""
        return mssql_catalog.view_names(self.conn, schema, whitelist, blacklist)

    def view_capabilities(self, schema: str, name: str) -> ViewCapabilities:
        """Views are never treated as insertable: that depends on the view's query."""
        return ViewCapabilities(can_insert=False, can_upsert=False)

    def columns(
        self,
        schema: str,
        table_name: str,
        whitelist: Sequence[str] | None = None,
        blacklist: Sequence[str] | None = None,
    ) -> list[Column]:
        """Read the columns of a table in ordinal order, filtered by ``table.column`` lists."""
        query = _COLUMNS_QUERY
        args: list[Any] = [schema, table_name]
        if whitelist:
            cols = _columns_from_list(whitelist, table_name)
            if cols:
                query += f" and c.column_name in ({_index_placeholders(len(cols), 3)})"
                args.extend(cols)
        elif blacklist:
            cols = _columns_from_list(blacklist, table_name)
            if cols:
                query += f" and c.column_name not in ({_index_placeholders(len(cols), 3)})"
                args.extend(cols)
        query += " ORDER BY ordinal_position;"

        result = []
        for row in self._fetch_all(query, args):
            try:
                name, full_type, db_type, default, nullable, unique, identity, computed = row
            except ValueError as exc:
                raise ValueError(f"unable to scan for table {table_name}") from exc
            computed = bool(computed) or db_type.lower() in ("timestamp", "rowversion")
            column = Column(
                name=name,
                full_db_type=full_type,
                db_type=db_type,
                nullable=bool(nullable),
                unique=bool(unique),
                auto_generated=computed or bool(identity),
                default=default if default is not None else "",
            )
            if not column.default and column.auto_generated:
                column.default = "AUTO_GENERATED"
            result.append(column)
        return result

    def view_columns(
        self,
        schema: str,
        table_name: str,
        whitelist: Sequence[str] | None = None,
        blacklist: Sequence[str] | None = None,
    ) -> list[Column]:
        """Read the columns of a view; the same as for a table."""
        return self.columns(schema, table_name, whitelist, blacklist)

    def primary_key_info(self, schema: str, table_name: str) -> PrimaryKey | None:
        """Return the primary key of a table, or None when it has none."""
        row = self._fetch_one(_PRIMARY_KEY_QUERY, [table_name, schema])
        if row is None:
            return None
        name = row[0]
        rows = self._fetch_all(_PRIMARY_KEY_COLUMNS_QUERY, [table_name, name, schema])
        return PrimaryKey(name=name, columns=[r[0] for r in rows])

    def foreign_key_info(self, schema: str, table_name: str) -> list[ForeignKey]:
        """Return the foreign keys declared on a table."""
        rows = self._fetch_all(_FOREIGN_KEY_QUERY, [schema, schema, table_name])
        return [
            ForeignKey(
                name=name,
                table=table_name,
                column=column,
                foreign_table=foreign_table,
                foreign_column=foreign_column,
            )
            for name, _source_table, column, foreign_table, foreign_column in rows
        ]

    def translate_column_type(self, column: Column) -> Column:
        """Return a copy of ``column`` with its generated-code type filled in."""
        return mssql_types.translate_column_type(column)

    def imports(self) -> ImportCollection:
        """The imports generated code needs when built for this database."""
        return mssql_types.imports()