"""Schema reading for SQLite database files."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass, field
from typing import Any, Sequence

from boilmodels import sqlite_types
from boilmodels.importers import ImportCollection
from boilmodels.schema import Column, ForeignKey, PrimaryKey, ViewCapabilities

_AUTOINCREMENT_QUERY = (
    "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = ? "
    "AND sql LIKE '%AUTOINCREMENT%'"
)

# Values of table_xinfo's "hidden" field for generated columns.
_GENERATED_HIDDEN = (2, 3)


@dataclass
class _Index:
    name: str
    unique: bool
    partial: bool
    columns: list[str] = field(default_factory=list)


@dataclass
class _ColumnInfo:
    name: str
    type: str
    not_null: bool
    default: str | None
    pk: int
    hidden: int


def _tables_from_list(entries: Sequence[str]) -> list[str]:
    """Keep the entries that name whole tables, not ``table.column``."""
    return [entry for entry in entries if "." not in entry]


def _columns_from_list(entries: Sequence[str], table_name: str) -> list[str]:
    """Pick the column names of ``table.column`` entries that belong to ``table_name``."""
    columns = []
    for entry in entries:
        parts = entry.split(".")
        if len(parts) == 2 and parts[0] == table_name:
            columns.append(parts[1])
    return columns


def _quote_literal(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


def _placeholders(count: int) -> str:
    return ",".join("?" * count)


class SQLiteDriver:
    """Reads tables, columns and keys from an SQLite database file, read-only.

    Usable as a context manager; the connection is closed on exit.
    """

    def __init__(self, dbname: str) -> None:
        self.conn_str = sqlite_types.build_query_string(dbname)
        self.conn = sqlite3.connect(self.conn_str, uri=True)

    def __enter__(self) -> SQLiteDriver:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the database connection."""
        self.conn.close()

    def _rows(self, query: str, args: Sequence[Any] = ()) -> list[tuple[Any, ...]]:
        cursor = self.conn.cursor()
        try:
            cursor.execute(query, list(args))
            return cursor.fetchall()
        finally:
            cursor.close()

    def _names(
        self,
        kind: str,
        whitelist: Sequence[str] | None,
        blacklist: Sequence[str] | None,
    ) -> list[str]:
        query = f"SELECT name FROM sqlite_master WHERE type='{kind}'"
        args: list[str] = []
        if whitelist:
            tables = _tables_from_list(whitelist)
            if tables:
                query += f" and tbl_name in ({_placeholders(len(tables))})"
                args.extend(tables)
        if blacklist:
            tables = _tables_from_list(blacklist)
            if tables:
                query += f" and tbl_name not in ({_placeholders(len(tables))})"
                args.extend(tables)
        return [
            name for (name,) in self._rows(query, args) if name != "sqlite_sequence"
        ]

    def table_names(
        self,
        schema: str = "",
        whitelist: Sequence[str] | None = None,
        blacklist: Sequence[str] | None = None,
    ) -> list[str]:
        """List the tables; a whitelist and a blacklist are both applied when given."""
        return self._names("table", whitelist, blacklist)

    def view_names(
        self,
        schema: str = "",
        whitelist: Sequence[str] | None = None,
        blacklist: Sequence[str] | None = None,
    ) -> list[str]:
        """List the views; a whitelist and a blacklist are both applied when given."""
        return self._names("view", whitelist, blacklist)

    def view_capabilities(self, schema: str, name: str) -> ViewCapabilities:
        """Views are never treated as insertable or upsertable."""
        return ViewCapabilities(can_insert=False, can_upsert=False)

    def _table_info(self, table_name: str) -> list[_ColumnInfo]:
        rows = self._rows(f"PRAGMA table_xinfo({_quote_literal(table_name)})")
        info = []
        for row in rows:
            try:
                _cid, name, col_type, not_null, default, pk, hidden = row
            except ValueError as exc:
                raise ValueError(f"unable to scan for table {table_name}") from exc
            info.append(
                _ColumnInfo(
                    name=name,
                    type=col_type,
                    not_null=bool(not_null),
                    default=None if default is None else str(default),
                    pk=int(pk),
                    hidden=int(hidden),
                )
            )
        return info

    def _indexes(self, table_name: str) -> list[_Index]:
        indexes = []
        for _seq, name, unique, _origin, partial in self._rows(
            f"PRAGMA index_list({_quote_literal(table_name)})"
        ):
            columns = [
                col_name
                for _rank_index, _rank_table, col_name in self._rows(
                    f"PRAGMA index_info({_quote_literal(name)})"
                )
            ]
            indexes.append(
                _Index(
                    name=name,
                    unique=int(unique) > 0,
                    partial=int(partial) != 0,
                    columns=columns,
                )
            )
        return indexes

    def columns(
        self,
        schema: str,
        table_name: str,
        whitelist: Sequence[str] | None = None,
        blacklist: Sequence[str] | None = None,
    ) -> list[Column]:
        """Read the columns of a table, filtered by ``table.column`` lists.

        With a whitelist, only the columns it names for this table are kept;
        otherwise the columns a blacklist names are left out.
        """
        indexes = self._indexes(table_name)
        info = self._table_info(table_name)
        has_autoincrement = bool(self._rows(_AUTOINCREMENT_QUERY, [table_name]))

        white_columns = _columns_from_list(whitelist, table_name) if whitelist else []
        black_columns = _columns_from_list(blacklist, table_name) if blacklist else []

        pkey_count = sum(1 for col in info if col.pk == 1)

        result = []
        for col in info:
            if whitelist:
                if col.name not in white_columns:
                    continue
            elif blacklist and col.name in black_columns:
                continue

            db_type = col.type.upper()
            column = Column(
                name=col.name,
                full_db_type=db_type,
                db_type=db_type,
                nullable=not col.not_null,
            )

            # A unique index over several columns does not make one column unique.
            for index in indexes:
                if len(index.columns) == 1 and index.columns[0] == col.name:
                    column.unique = index.unique and not index.partial

            # An INTEGER primary key aliases the rowid and increments by itself.
            integer_pk = col.pk == 1 and column.full_db_type == "INTEGER"
            auto_increment = integer_pk and (has_autoincrement or pkey_count == 1)
            column.auto_generated = auto_increment or col.hidden in _GENERATED_HIDDEN

            if col.default is not None:
                column.default = col.default
            elif auto_increment:
                column.default = "auto_increment"
            elif column.auto_generated:
                column.default = "auto_generated"

            if column.nullable and not column.default:
                column.default = "NULL"

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
        columns = [col.name for col in self._table_info(table_name) if col.pk > 0]
        if not columns:
            return None
        return PrimaryKey(columns=columns)

    def foreign_key_info(self, schema: str, table_name: str) -> list[ForeignKey]:
        """Return the foreign keys declared on a table, named ``FK_<id>``."""
        fkeys = []
        for row in self._rows(f"PRAGMA foreign_key_list({_quote_literal(table_name)})"):
            key_id, _seq, foreign_table, column, foreign_column = row[:5]
            if None in (foreign_table, column, foreign_column):
                raise ValueError(
                    f"foreign key {key_id} of table {table_name} has an unnamed column"
                )
            fkeys.append(
                ForeignKey(
                    name=f"FK_{key_id}",
                    table=table_name,
                    column=column,
                    foreign_table=foreign_table,
                    foreign_column=foreign_column,
                )
            )
        return fkeys

    def translate_column_type(self, column: Column) -> Column:
        """Return a copy of ``column`` with its generated-code type filled in."""
        return sqlite_types.translate_column_type(column)

    def imports(self) -> ImportCollection:
        """The imports generated code needs when built for this database."""
        return sqlite_types.imports()