"""
Unit Tests for Schema Readers
"""
import sqlite3
from unittest.mock import MagicMock, patch

import pytest

from relgen.adapters import (
    BaseSchemaReader,
    SchemaReaderRegistry,
    create_reader,
    get_supported_databases,
    register_reader,
)
from relgen.adapters.mysql_adapter import MySQLSchemaReader, normalize_column_type
from relgen.adapters.postgresql_adapter import PostgreSQLSchemaReader, build_query_string
from relgen.adapters.sqlite_adapter import SQLiteSchemaReader
from relgen.config import DatabaseConfig, DatabaseType
from relgen.schema.models import Column
from relgen.utils.errors import (
    ConfigurationError,
    DatabaseConnectionError,
    IntrospectionError,
)

SQLITE_SCHEMA = """
create table customers (
    id integer primary key,
    name text not null,
    email varchar(100) unique
);
create table invoices (
    id integer primary key,
    customer_id integer not null references customers(id),
    billing_customer_id integer references customers,
    total numeric
);
create table employees (
    id integer primary key,
    manager_id integer references employees(id)
);
create table videos (id integer primary key);
create table tags (id integer primary key);
create table video_tags (
    video_id integer not null references videos(id),
    tag_id integer not null references tags(id),
    primary key (video_id, tag_id)
);
create table schema_migrations (version text);
"""


@pytest.fixture
def sqlite_conn():
    conn = sqlite3.connect(":memory:", check_same_thread=False)
    conn.executescript(SQLITE_SCHEMA)
    yield conn
    conn.close()


@pytest.fixture
def sqlite_reader(sqlite_conn):
    config = DatabaseConfig(db_type=DatabaseType.SQLITE)
    return create_reader(config, connection=sqlite_conn)


class TestRegistry:
    """Tests for SchemaReaderRegistry"""

    def test_supported_databases(self):
        supported = get_supported_databases()
        assert DatabaseType.POSTGRESQL in supported
        assert DatabaseType.MYSQL in supported
        assert DatabaseType.SQLITE in supported

    def test_create_reader(self):
        config = DatabaseConfig(db_type=DatabaseType.SQLITE, sqlite_path=":memory:")
        reader = create_reader(config)
        assert isinstance(reader, SQLiteSchemaReader)
        assert not reader.is_connected()

    def test_unknown_type(self):
        with pytest.raises(ConfigurationError):
            SchemaReaderRegistry.get_reader_class("oracle")

    def test_register_reader(self):
        with patch.dict(SchemaReaderRegistry._readers, clear=False):
            @register_reader(DatabaseType.SQLITE)
            class CustomReader(SQLiteSchemaReader):
                pass

            assert SchemaReaderRegistry.get_reader_class(DatabaseType.SQLITE) is CustomReader
        assert SchemaReaderRegistry.get_reader_class(DatabaseType.SQLITE) is SQLiteSchemaReader

    def test_base_is_abstract(self):
        with pytest.raises(TypeError):
            BaseSchemaReader(DatabaseConfig(db_type=DatabaseType.SQLITE))


class TestSQLiteReader:
    """Tests for the SQLite reader against an in-memory database"""

    def test_table_names(self, sqlite_reader):
        assert sqlite_reader.list_table_names() == [
            "customers", "employees", "invoices", "schema_migrations",
            "tags", "video_tags", "videos",
        ]

    def test_table_names_exclude(self, sqlite_reader):
        names = sqlite_reader.list_table_names(["schema_migrations", "videos"])
        assert "schema_migrations" not in names
        assert "videos" not in names
        assert "tags" in names

    def test_columns(self, sqlite_reader):
        columns = {c.name: c for c in sqlite_reader.list_columns("customers")}
        assert not columns["id"].nullable
        assert columns["id"].unique
        assert not columns["name"].nullable
        assert not columns["name"].unique
        assert columns["email"].nullable
        assert columns["email"].unique
        assert columns["email"].native_type == "varchar(100)"
        assert columns["name"].default == ""

    def test_composite_primary_key(self, sqlite_reader):
        pkey = sqlite_reader.list_primary_key("video_tags")
        assert pkey.name == "video_tags_pkey"
        assert pkey.columns == ("video_id", "tag_id")
        columns = sqlite_reader.list_columns("video_tags")
        assert not any(c.unique for c in columns)
        assert not any(c.nullable for c in columns)

    def test_no_primary_key(self, sqlite_reader):
        assert sqlite_reader.list_primary_key("schema_migrations") is None

    def test_composite_unique_marks_no_column(self, sqlite_conn, sqlite_reader):
        sqlite_conn.execute(
            "create table seats (id integer primary key, owner_id integer not null, "
            "slot integer not null, badge text unique, unique (owner_id, slot))"
        )
        columns = {c.name: c for c in sqlite_reader.list_columns("seats")}
        assert not columns["owner_id"].unique
        assert not columns["slot"].unique
        assert columns["badge"].unique

    def test_foreign_keys(self, sqlite_reader):
        fkeys = sqlite_reader.list_foreign_keys("invoices")
        assert {(fk.column, fk.foreign_table, fk.foreign_column) for fk in fkeys} == {
            ("customer_id", "customers", "id"),
            ("billing_customer_id", "customers", "id"),
        }
        assert all(fk.name.startswith("fk_invoices_") for fk in fkeys)
        assert all(fk.table == "invoices" for fk in fkeys)
        assert len({fk.name for fk in fkeys}) == 2

    def test_translate_column_type(self, sqlite_reader):
        column = sqlite_reader.translate_column_type(
            Column(name="email", native_type="VARCHAR(100)", nullable=True)
        )
        assert column.semantic_type.full_name == "null.String"

    def test_uses_returning(self, sqlite_reader):
        assert sqlite_reader.uses_returning() is False

    def test_borrowed_connection_left_open(self, sqlite_conn, sqlite_reader):
        with sqlite_reader:
            sqlite_reader.list_table_names()
        sqlite_conn.execute("select 1")

    def test_query_failure_names_table(self, sqlite_reader):
        with pytest.raises(IntrospectionError) as exc_info:
            sqlite_reader._query("select * from missing_table", table_name="missing_table")
        assert exc_info.value.table_name == "missing_table"

    def test_owned_connection(self, tmp_path):
        path = tmp_path / "shop.db"
        conn = sqlite3.connect(str(path))
        conn.executescript(SQLITE_SCHEMA)
        conn.close()

        reader = create_reader(DatabaseConfig(db_type=DatabaseType.SQLITE, sqlite_path=str(path)))
        with reader:
            assert reader.is_connected()
            assert "customers" in reader.list_table_names()
        assert not reader.is_connected()

    def test_connect_failure(self, tmp_path):
        path = tmp_path / "missing" / "dir" / "shop.db"
        reader = create_reader(DatabaseConfig(db_type=DatabaseType.SQLITE, sqlite_path=str(path)))
        with pytest.raises(DatabaseConnectionError):
            reader.connect()

    def test_not_connected(self):
        reader = create_reader(DatabaseConfig(db_type=DatabaseType.SQLITE))
        with pytest.raises(DatabaseConnectionError):
            reader.list_table_names()


def _mock_connection(rows=None):
    conn = MagicMock()
    conn.closed = 0
    cursor = conn.cursor.return_value
    cursor.fetchall.return_value = rows or []
    return conn, cursor


class TestPostgreSQLReader:
    """Tests for the PostgreSQL reader with a mocked connection"""

    def _reader(self, conn):
        config = DatabaseConfig(db_type=DatabaseType.POSTGRESQL, database="shop")
        return PostgreSQLSchemaReader(config, connection=conn)

    def test_build_query_string(self):
        assert build_query_string("bob", "secret", "shop", "localhost", 5432, "disable") == (
            "user=bob password=secret dbname=shop host=localhost port=5432 sslmode=disable"
        )

    def test_build_query_string_omits_empty_parts(self):
        assert build_query_string("", "", "shop", "", 0, "") == "dbname=shop"

    def test_table_names_exclude(self):
        conn, cursor = _mock_connection([("customers",), ("invoices",)])
        names = self._reader(conn).list_table_names(["schema_migrations"])
        assert names == ["customers", "invoices"]
        sql, params = cursor.execute.call_args[0]
        assert "any(%s)" in sql
        assert params == (["schema_migrations"],)
        cursor.close.assert_called_once()

    def test_columns(self):
        conn, _ = _mock_connection([
            ("id", "bigint", "nextval('employees_id_seq'::regclass)", "NO", True),
            ("manager_id", "bigint", None, "YES", False),
        ])
        id_col, manager = self._reader(conn).list_columns("employees")
        assert id_col.unique and not id_col.nullable
        assert id_col.default.startswith("nextval")
        assert manager.nullable and manager.default == ""

    def test_primary_key(self):
        conn, _ = _mock_connection([("video_tags_pkey", "video_id"), ("video_tags_pkey", "tag_id")])
        pkey = self._reader(conn).list_primary_key("video_tags")
        assert pkey.name == "video_tags_pkey"
        assert pkey.columns == ("video_id", "tag_id")

    def test_missing_primary_key(self):
        conn, _ = _mock_connection([])
        assert self._reader(conn).list_primary_key("audit_log") is None

    def test_foreign_keys(self):
        conn, _ = _mock_connection([("employees_manager_id_fkey", "manager_id", "employees", "id")])
        (fkey,) = self._reader(conn).list_foreign_keys("employees")
        assert fkey.table == "employees"
        assert fkey.is_self_referencing

    def test_unique_means_single_column_index(self):
        conn, cursor = _mock_connection([("owner_id", "integer", None, "NO", False)])
        (owner,) = self._reader(conn).list_columns("seats")
        assert not owner.unique
        sql = cursor.execute.call_args[0][0]
        assert "indnatts = 1" in sql
        assert "constraint_column_usage" not in sql

    def test_foreign_keys_keyed_by_owning_table(self):
        conn, cursor = _mock_connection([
            ("fk_customer", "customer_id", "customers", "id"),
        ])
        (fkey,) = self._reader(conn).list_foreign_keys("invoices")
        assert fkey.name == "fk_customer"
        assert fkey.table == "invoices"
        sql, params = cursor.execute.call_args[0]
        assert "con.conrelid" in sql
        assert "cl.relname = %s" in sql
        assert "unnest(con.conkey, con.confkey)" in sql
        assert params == ("invoices",)

    def test_uuid_must_be_non_zero(self):
        reader = self._reader(_mock_connection()[0])
        column = reader.translate_column_type(Column(name="id", native_type="uuid"))
        assert column.must_be_non_zero
        assert column.semantic_type.full_name == "string"

    def test_uses_returning(self):
        assert self._reader(_mock_connection()[0]).uses_returning() is True

    def test_query_error_rolls_back(self):
        conn, cursor = _mock_connection()
        cursor.execute.side_effect = Exception('relation "ghost" does not exist')
        with pytest.raises(IntrospectionError) as exc_info:
            self._reader(conn).list_columns("ghost")
        assert exc_info.value.table_name == "ghost"
        conn.rollback.assert_called_once()

    def test_lost_connection(self):
        conn, cursor = _mock_connection()
        cursor.execute.side_effect = Exception("server closed the connection unexpectedly")
        with pytest.raises(DatabaseConnectionError):
            self._reader(conn).list_columns("customers")

    def test_borrowed_connection_not_closed(self):
        conn, _ = _mock_connection()
        reader = self._reader(conn)
        reader.disconnect()
        conn.close.assert_not_called()


class TestMySQLReader:
    """Tests for the MySQL reader with a mocked connection"""

    def _reader(self, conn):
        config = DatabaseConfig(db_type=DatabaseType.MYSQL, database="shop")
        return MySQLSchemaReader(config, connection=conn)

    def test_unique_means_single_column_index(self):
        conn, cursor = _mock_connection([("owner_id", "int", None, "NO", 0)])
        (owner,) = self._reader(conn).list_columns("seats")
        assert not owner.unique
        sql = cursor.execute.call_args[0][0]
        assert "s.non_unique = 0" in sql
        assert ") = 1" in sql

    def test_normalize_column_type(self):
        assert normalize_column_type("INT(10) UNSIGNED ZEROFILL") == "int(10) unsigned"
        assert normalize_column_type("tinyint(1)") == "tinyint(1)"

    def test_table_names_exclude(self):
        conn, cursor = _mock_connection([(b"customers",)])
        names = self._reader(conn).list_table_names(["a", "b"])
        assert names == ["customers"]
        sql, params = cursor.execute.call_args[0]
        assert "not in (%s, %s)" in sql
        assert params == ("shop", "a", "b")

    def test_columns(self):
        conn, _ = _mock_connection([
            ("active", "tinyint(1)", "1", "NO", 0),
            ("id", "int(10) unsigned", None, "NO", 1),
        ])
        reader = self._reader(conn)
        active, id_col = [reader.translate_column_type(c) for c in reader.list_columns("users")]
        assert active.semantic_type.full_name == "bool"
        assert active.default == "1"
        assert id_col.semantic_type.full_name == "uint"
        assert id_col.unique

    def test_uses_returning(self):
        assert self._reader(_mock_connection()[0]).uses_returning() is False
