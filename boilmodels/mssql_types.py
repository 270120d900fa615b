"""Column type translation and generated-code imports for Microsoft SQL Server."""

from __future__ import annotations

from dataclasses import replace

from boilmodels.importers import ImportCollection, ImportSet
from boilmodels.schema import Column

_NULL_PKG = '"github.com/volatiletech/null/v8"'
_TYPES_PKG = '"github.com/volatiletech/sqlboiler/v4/types"'

_DATE_TYPES = ("date", "datetime", "datetime2", "datetimeoffset", "smalldatetime", "time")


def _expand(pairs: list[tuple[tuple[str, ...], str]]) -> dict[str, str]:
    return {db_type: go_type for db_types, go_type in pairs for db_type in db_types}


_NULLABLE_TYPES = _expand(
    [
        (("tinyint",), "null.Int8"),
        (("smallint",), "null.Int16"),
        (("mediumint",), "null.Int32"),
        (("int",), "null.Int"),
        (("bigint",), "null.Int64"),
        (("real",), "null.Float32"),
        (("float",), "null.Float64"),
        (("boolean", "bool", "bit"), "null.Bool"),
        (_DATE_TYPES, "null.Time"),
        (("binary", "varbinary"), "null.Bytes"),
        (("timestamp", "rowversion"), "null.Bytes"),
        (("xml",), "null.String"),
        (("numeric", "decimal", "dec"), "types.NullDecimal"),
    ]
)

_NOT_NULL_TYPES = _expand(
    [
        (("tinyint",), "int8"),
        (("smallint",), "int16"),
        (("mediumint",), "int32"),
        (("int",), "int"),
        (("bigint",), "int64"),
        (("real",), "float32"),
        (("float",), "float64"),
        (("boolean", "bool", "bit"), "bool"),
        (_DATE_TYPES, "time.Time"),
        (("binary", "varbinary"), "[]byte"),
        (("timestamp", "rowversion"), "[]byte"),
        (("xml",), "string"),
        (("numeric", "decimal", "dec"), "types.Decimal"),
    ]
)


def translate_column_type(column: Column) -> Column:
    """Return a copy of ``column`` with its generated-code type filled in."""
    if column.db_type == "uniqueidentifier":
        return replace(column, type="mssql.UniqueIdentifier", db_type="uuid")
    if column.nullable:
        return replace(column, type=_NULLABLE_TYPES.get(column.db_type, "null.String"))
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
)


def imports() -> ImportCollection:
    """The imports generated code needs when built for this database."""
    based_on_type = {name: ImportSet(third_party=[_NULL_PKG]) for name in _NULL_TYPE_NAMES}
    based_on_type.update(
        {
            "time.Time": ImportSet(standard=['"time"']),
            "types.Decimal": ImportSet(standard=[_TYPES_PKG]),
            "types.NullDecimal": ImportSet(standard=[_TYPES_PKG]),
            "mssql.UniqueIdentifier": ImportSet(
                standard=['"github.com/microsoft/go-mssqldb"']
            ),
        }
    )
    return ImportCollection(
        all=ImportSet(standard=['"strconv"']),
        singleton={
            "mssql_upsert": ImportSet(
                standard=['"fmt"', '"strings"'],
                third_party=[
                    '"github.com/volatiletech/strmangle"',
                    '"github.com/volatiletech/sqlboiler/v4/drivers"',
                ],
            )
        },
        test_singleton={
            "mssql_suites_test": ImportSet(standard=['"testing"']),
            "mssql_main_test": ImportSet(
                standard=[
                    '"bytes"',
                    '"database/sql"',
                    '"fmt"',
                    '"os"',
                    '"os/exec"',
                    '"regexp"',
                    '"strings"',
                ],
                third_party=[
                    '"github.com/kat-co/vala"',
                    '"github.com/friendsofgo/errors"',
                    '"github.com/spf13/viper"',
                    '"github.com/volatiletech/sqlboiler/v4/drivers/sqlboiler-mssql/driver"',
                    '"github.com/volatiletech/randomize"',
                    '_ "github.com/microsoft/go-mssqldb"',
                ],
            ),
        },
        based_on_type=based_on_type,
    )