"""Schema introspection, type mapping and import handling for ORM model generation (SQLite and SQL Server)."""

__version__ = "0.1.0"

__all__ = [
    "schema",
    "importers",
    "mssql_catalog",
    "mssql_types",
    "mssql",
    "sqlite_types",
    "sqlite",
]