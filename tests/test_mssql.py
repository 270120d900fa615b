import pytest

from boilmodels import mssql_types
from boilmodels.mssql import MSSQLDriver
from boilmodels.schema import Column, ForeignKey, PrimaryKey, ViewCapabilities


class FakeCursor:
    def __init__(self, conn):
        self.conn = conn
        self.rows = []
        self.closed = False

    def execute(self, query, args=()):
        self.conn.executed.append((query, list(args)))
        self.rows = list(self.conn.results.pop(0))

    def fetchall(self):
        return self.rows

    def fetchone(self):
        return self.rows[0] if self.rows else None

    def close(self):
        self.closed = True


class FakeConnection:
    def __init__(self, *results):
        self.results = list(results)
        self.executed = []

    def cursor(self):
        return FakeCursor(self)


def test_table_names_reads_rows():
    conn = FakeConnection([("a",), ("b",)])
    names = MSSQLDriver(conn).table_names("dbo", None, None)
    assert names == ["a", "b"]
    query, args = conn.executed[0]
    assert args == ["dbo"]
    assert "BASE TABLE" in query


def test_view_names_with_blacklist():
    conn = FakeConnection([("v1",)])
    names = MSSQLDriver(conn).view_names("dbo", [], ["v2", "v2.col"])
    assert names == ["v1"]
    query, args = conn.executed[0]
    assert args == ["dbo", "v2"]
    assert "not in" in query


def test_view_capabilities_are_false():
    driver = MSSQLDriver(FakeConnection())
    assert driver.view_capabilities("dbo", "v") == ViewCapabilities(False, False)


def test_columns_builds_columns():
    conn = FakeConnection(
        [
            ("id", "int", "int", None, 0, 1, 1, 0),
            ("ts", "timestamp", "timestamp", None, 0, 0, 0, 0),
            ("name", "varchar(50)", "varchar", "('x')", 1, 0, 0, 0),
        ]
    )
    cols = MSSQLDriver(conn).columns("dbo", "users", None, None)
    assert cols[0] == Column(
        name="id",
        full_db_type="int",
        db_type="int",
        nullable=False,
        unique=True,
        auto_generated=True,
        default="AUTO_GENERATED",
    )
    assert cols[1].auto_generated is True
    assert cols[1].default == "AUTO_GENERATED"
    assert cols[2].default == "('x')"
    assert cols[2].nullable is True
    assert cols[2].auto_generated is False
    _, args = conn.executed[0]
    assert args == ["dbo", "users"]


def test_columns_whitelist_adds_matching_columns_only():
    conn = FakeConnection([])
    MSSQLDriver(conn).columns("dbo", "users", ["users.id", "other.id", "users"], None)
    query, args = conn.executed[0]
    assert args == ["dbo", "users", "id"]
    assert "c.column_name in (" in query
    assert query.endswith("ORDER BY ordinal_position;")


def test_columns_blacklist_when_no_whitelist():
    conn = FakeConnection([])
    MSSQLDriver(conn).columns("dbo", "users", None, ["users.secret_col", "users.x"])
    query, args = conn.executed[0]
    assert args == ["dbo", "users", "secret_col", "x"]
    assert "c.column_name not in (" in query


def test_view_columns_same_as_columns():
    row = ("id", "int", "int", "1", 0, 0, 0, 0)
    a = MSSQLDriver(FakeConnection([row])).columns("dbo", "v", None, None)
    b = MSSQLDriver(FakeConnection([row])).view_columns("dbo", "v", None, None)
    assert a == b


def test_primary_key_missing_returns_none():
    conn = FakeConnection([])
    assert MSSQLDriver(conn).primary_key_info("dbo", "users") is None
    assert len(conn.executed) == 1


def test_primary_key_info():
    conn = FakeConnection([("PK_users",)], [("id",), ("tenant",)])
    pkey = MSSQLDriver(conn).primary_key_info("dbo", "users")
    assert pkey == PrimaryKey(name="PK_users", columns=["id", "tenant"])
    assert conn.executed[0][1] == ["users", "dbo"]
    assert conn.executed[1][1] == ["users", "PK_users", "dbo"]


def test_foreign_key_info():
    conn = FakeConnection([("FK_jets_pilot", "jets", "pilot_id", "pilots", "id")])
    fkeys = MSSQLDriver(conn).foreign_key_info("dbo", "jets")
    assert fkeys == [
        ForeignKey(
            name="FK_jets_pilot",
            table="jets",
            column="pilot_id",
            foreign_table="pilots",
            foreign_column="id",
        )
    ]
    assert conn.executed[0][1] == ["dbo", "dbo", "jets"]


@pytest.mark.parametrize("nullable", [True, False])
def test_translate_uniqueidentifier(nullable):
    driver = MSSQLDriver(FakeConnection())
    col = driver.translate_column_type(
        Column(name="id", db_type="uniqueidentifier", nullable=nullable)
    )
    assert col.type == "mssql.UniqueIdentifier"
    assert col.db_type == "uuid"


def test_translate_nullable_and_not_null():
    driver = MSSQLDriver(FakeConnection())
    assert driver.translate_column_type(Column(name="n", db_type="bigint", nullable=True)).type == "null.Int64"
    assert driver.translate_column_type(Column(name="n", db_type="bigint")).type == "int64"
    assert driver.translate_column_type(Column(name="n", db_type="nvarchar")).type == "string"


def test_imports_match_type_module():
    driver = MSSQLDriver(FakeConnection())
    assert driver.imports() == mssql_types.imports()
    assert "mssql_upsert" in driver.imports().singleton