"""Connection strings, column type translation and generated-code imports for SQLite."""

from __future__ import annotations

from dataclasses import replace

from boilmodels.importers import ImportCollection, ImportSet
from boilmodels.schema import Column

_NULL_PKG = '"github.com/volatiletech/null/v8"'
_TYPES_PKG = '"github.com/volatiletech/sqlboiler/v4/types"'

_TEXT_TYPES = (
    "CHARACTER",
    "VARCHAR",
    "VARYING CHARACTER",
    "NCHAR",
    "NATIVE CHARACTER",
    "NVARCHAR",
    "TEXT",
    "CLOB",
)


def _expand(pairs: list[tuple[tuple[str, ...], str]]) -> dict[str, str]:
    return {db_type: go_type for db_types, go_type in pairs for db_type in db_types}


_NULLABLE_TYPES = _expand(
    [
        (("INT", "INTEGER", "BIGINT"), "null.Int64"),
        (("TINYINT", "INT8"), "null.Int8"),
        (("SMALLINT", "INT2"), "null.Int16"),
        (("MEDIUMINT",), "null.Int32"),
        (("UNSIGNED BIG INT",), "null.Uint64"),
        (_TEXT_TYPES, "null.String"),
        (("BLOB",), "null.Bytes"),
        (("FLOAT",), "null.Float32"),
        (("REAL", "DOUBLE", "DOUBLE PRECISION"), "null.Float64"),
        (("NUMERIC", "DECIMAL"), "types.NullDecimal"),
        (("BOOLEAN",), "null.Bool"),
        (("DATE", "DATETIME"), "null.Time"),
        (("JSON",), "null.JSON"),
    ]
)

_NOT_NULL_TYPES = _expand(
    [
        (("INT", "INTEGER", "BIGINT"), "int64"),
        (("TINYINT", "INT8"), "int8"),
        (("SMALLINT", "INT2"), "int16"),
        (("MEDIUMINT",), "int32"),
        (("UNSIGNED BIG INT",), "uint64"),
        (_TEXT_TYPES, "string"),
        (("BLOB",), "[]byte"),
        (("FLOAT",), "float32"),
        (("REAL", "DOUBLE", "DOUBLE PRECISION"), "float64"),
        (("NUMERIC", "DECIMAL"), "types.Decimal"),
        (("BOOLEAN",), "bool"),
        (("DATE", "DATETIME"), "time.Time"),
        (("JSON",), "types.JSON"),
    ]
)


def build_query_string(file: str) -> str:
    """Build a read-only SQLite connection string for the database ``file``."""
    return "file:" + file + "?_loc=UTC&mode=ro"


def translate_column_type(column: Column) -> Column:
    """Return a copy of ``column`` with its generated-code type filled in.

    For nullable columns any ``(size)`` suffix of the type is ignored; for
    non-nullable columns the type must match exactly.
    """
    if column.nullable:
        base = column.db_type.split("(")[0]
        return replace(column, type=_NULLABLE_TYPES.get(base, "null.String"))
    return replace(column, type=_NOT_NULL_TYPES.get(column.db_type, "string"))


_NULL_TYPE_NAMES = (
    "null.Float32",
    "null.Float64",
    "null.Int",
    "null.Int8",
    "null.Int16",
    "null.Int32",
    "null.Int64",
    "null.Uint",
    "null.Uint8",
    "null.Uint16",
    "null.Uint32",
    "null.Uint64",
    "null.String",
    "null.Bool",
    "null.Time",
    "null.Bytes",
    "null.JSON",
)


def imports() -> ImportCollection:
    """The imports generated code needs when built for this database."""
    based_on_type = {name: ImportSet(third_party=[_NULL_PKG]) for name in _NULL_TYPE_NAMES}
    based_on_type.update(
        {
            "time.Time": ImportSet(standard=['"time"']),
            "types.Decimal": ImportSet(third_party=[_TYPES_PKG]),
            "types.NullDecimal": ImportSet(third_party=[_TYPES_PKG]),
            "types.JSON": ImportSet(third_party=[_TYPES_PKG]),
        }
    )
    return ImportCollection(
        all=ImportSet(standard=['"strconv"']),
        singleton={
            "sqlite_upsert": ImportSet(
                standard=['"fmt"', '"strings"'],
                third_party=[
                    '"github.com/volatiletech/strmangle"',
                    '"github.com/volatiletech/sqlboiler/v4/drivers"',
                ],
            )
        },
        test_singleton={
            "sqlite3_suites_test": ImportSet(standard=['"testing"']),
            "sqlite3_main_test": ImportSet(
                standard=[
                    '"database/sql"',
                    '"fmt"',
                    '"io"',
                    '"math/rand"',
                    '"os"',
                    '"os/exec"',
                    '"path/filepath"',
                    '"regexp"',
                ],
                third_party=[
                    '"github.com/pkg/errors"',
                    '"github.com/spf13/viper"',
                    '_ "modernc.org/sqlite"',
                ],
            ),
        },
        based_on_type=based_on_type,
    )