"""Connection strings and table/view listing for Microsoft SQL Server."""

from __future__ import annotations

from typing import Any, Iterable, Sequence
from urllib.parse import quote, urlencode

_USERINFO_SAFE = "$&+,;="
_HOST_SAFE = "!$&'()*+,;=:[]<>\""
_PATH_SAFE = "$&+,/:;=@"


def build_query_string(
    user: str, password: str, dbname: str, host: str, port: int, sslmode: str
) -> str:
    """Build a ``sqlserver://`` connection URL.

    A host containing ``/`` names a server instance; it becomes the path and
    the port is left out.
    """
    userinfo = f"{quote(user, safe=_USERINFO_SAFE)}:{quote(password, safe=_USERINFO_SAFE)}"
    query = urlencode([("database", dbname), ("encrypt", sslmode)])
    if "/" in host:
        location = quote(host, safe=_PATH_SAFE)
    else:
        location = quote(f"{host}:{port}", safe=_HOST_SAFE)
    return f"sqlserver://{userinfo}@{location}?{query}"


def _tables_from_list(entries: Iterable[str]) -> list[str]:
    """Keep the entries that name whole tables, not ``table.column``."""
    return [entry for entry in entries if "." not in entry]


def _filtered_names_query(
    base: str,
    order: str,
    schema: str,
    whitelist: Sequence[str] | None,
    blacklist: Sequence[str] | None,
    in_keyword: str,
    not_in_keyword: str,
) -> tuple[str, list[str]]:
    query = base
    args = [schema]
    if whitelist:
        tables = _tables_from_list(whitelist)
        if tables:
            query += f" {in_keyword} ({','.join('?' * len(tables))})"
            args.extend(tables)
    elif blacklist:
        tables = _tables_from_list(blacklist)
        if tables:
            query += f" {not_in_keyword} ({','.join('?' * len(tables))})"
            args.extend(tables)
    return query + order, args


def _fetch_names(conn: Any, query: str, args: list[str]) -> list[str]:
    cursor = conn.cursor()
    try:
        cursor.execute(query, args)
        return [row[0] for row in cursor.fetchall()]
    finally:
        cursor.close()


def table_names(
    conn: Any,
    schema: str,
    whitelist: Sequence[str] | None = None,
    blacklist: Sequence[str] | None = None,
) -> list[str]:
    """List the base tables of ``schema``, honouring a whitelist or else a blacklist."""
    query, args = _filtered_names_query(
        "\n\t\tSELECT table_name\n"
        "\t\tFROM   information_schema.tables\n"
        "\t\tWHERE  table_schema = ? AND table_type = 'BASE TABLE'",
        " ORDER BY table_name;",
        schema,
        whitelist,
        blacklist,
        "AND table_name IN",
        "AND table_name not IN",
    )
    return _fetch_names(conn, query, args)


def view_names(
    conn: Any,
    schema: str,
    whitelist: Sequence[str] | None = None,
    blacklist: Sequence[str] | None = None,
) -> list[str]:
    """List the views of ``schema``, honouring a whitelist or else a blacklist."""
    query, args = _filtered_names_query(
        "select table_name from information_schema.views where table_schema = ?",
        " order by table_name;",
        schema,
        whitelist,
        blacklist,
        "and table_name in",
        "and table_name not in",
    )
    return _fetch_names(conn, query, args)