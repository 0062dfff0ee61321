"""
Integration Tests for the Generation Pipeline
Runs the full introspection-to-descriptors pass against real SQLite databases
"""
import sqlite3

import pytest
import yaml

from relgen import (
    DatabaseConfig,
    DatabaseType,
    GenerationPipeline,
    GeneratorConfig,
    SystemConfig,
    create_reader,
    generate,
)
from relgen.utils.errors import SchemaError

SHOP_SCHEMA = """
CREATE TABLE customers (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    email TEXT UNIQUE,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);
CREATE TABLE invoices (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    customer_id INTEGER NOT NULL REFERENCES customers(id),
    billing_customer_id INTEGER REFERENCES customers(id),
    total DECIMAL(10,2),
    status TEXT DEFAULT 'pending'
);
CREATE TABLE employees (
    id INTEGER PRIMARY KEY,
    name TEXT NOT NULL,
    manager_id INTEGER REFERENCES employees(id)
);
CREATE TABLE users (
    id INTEGER PRIMARY KEY,
    email VARCHAR(255) NOT NULL UNIQUE
);
CREATE TABLE profiles (
    id INTEGER PRIMARY KEY,
    user_id INTEGER NOT NULL UNIQUE REFERENCES users(id),
    bio TEXT
);
CREATE TABLE videos (
    id INTEGER PRIMARY KEY,
    title TEXT NOT NULL
);
CREATE TABLE tags (
    id INTEGER PRIMARY KEY,
    label TEXT NOT NULL
);
CREATE TABLE video_tags (
    video_id INTEGER NOT NULL REFERENCES videos(id),
    tag_id INTEGER NOT NULL REFERENCES tags,
    PRIMARY KEY (video_id, tag_id)
);
CREATE TABLE audit_log (
    message TEXT,
    payload BLOB,
    created_at TIMESTAMP NOT NULL
);
CREATE TABLE schema_migrations (
    version TEXT PRIMARY KEY
);
"""


def _config(sqlite_path=None, **generator):
    generator.setdefault("exclude_tables", ["schema_migrations"])
    return SystemConfig(
        database=DatabaseConfig(db_type=DatabaseType.SQLITE, sqlite_path=sqlite_path),
        generator=GeneratorConfig(**generator),
    )


def _names(table_descriptors, kind):
    return {d.function.name for d in getattr(table_descriptors, kind)}


@pytest.fixture
def shop_conn():
    conn = sqlite3.connect(":memory:", check_same_thread=False)
    conn.executescript(SHOP_SCHEMA)
    yield conn
    conn.close()


@pytest.fixture
def shop_db(tmp_path):
    path = tmp_path / "shop.db"
    conn = sqlite3.connect(str(path))
    conn.executescript(SHOP_SCHEMA)
    conn.close()
    return str(path)


@pytest.fixture
def result(shop_conn):
    return generate(_config(), connection=shop_conn)


class TestSchemaGraph:
    """Tests for the graph produced from the live catalog"""

    def test_tables(self, result):
        assert result.graph.table_names == (
            "audit_log", "customers", "employees", "invoices", "profiles",
            "tags", "users", "video_tags", "videos",
        )

    def test_table_without_keys_is_typed(self, result):
        audit = result.graph.get_table("audit_log")
        assert audit.primary_key is None
        types = {c.name: c.semantic_type.full_name for c in audit.columns}
        assert types == {"message": "null.String", "payload": "[]byte", "created_at": "time.Time"}

    def test_join_table(self, result):
        assert result.graph.get_table("video_tags").is_join_table
        assert not result.graph.get_table("profiles").is_join_table

    def test_uses_returning(self, result):
        assert result.uses_returning is False
        assert result.run_id
        assert result.duration_ms >= 0


class TestRelationships:
    """Tests for the descriptors produced for each relationship kind"""

    def test_plain_and_disambiguated(self, result):
        d = result.descriptors
        assert _names(d.get("invoices"), "to_one") == {"Customer", "BillingCustomer"}
        assert _names(d.get("customers"), "to_many") == {"Invoices", "BillingCustomerInvoices"}

    def test_self_reference(self, result):
        employees = result.descriptors.get("employees")
        assert _names(employees, "to_one") == {"Manager"}
        assert _names(employees, "to_many") == {"ManagerEmployees"}

    def test_one_to_one(self, result):
        d = result.descriptors
        (profile,) = d.get("users").to_one
        assert profile.function.one_to_one
        assert profile.function.name == "Profile"
        assert _names(d.get("profiles"), "to_one") == {"User"}
        assert d.get("users").to_many == ()

    def test_many_to_many(self, result):
        d = result.descriptors
        (tags,) = d.get("videos").to_many
        (videos,) = d.get("tags").to_many
        assert tags.function.name == "Tags"
        assert tags.relationship.join_table == "video_tags"
        assert tags.relationship.join_local_column == "video_id"
        assert videos.function.name == "Videos"
        assert videos.relationship.join_local_column == "tag_id"

    def test_no_relationships_for_plain_table(self, result):
        audit = result.descriptors.get("audit_log")
        assert audit.to_one == () and audit.to_many == ()

    def test_every_foreign_key_has_both_directions(self, result):
        d = result.descriptors
        for table in result.graph:
            for fkey in table.foreign_keys:
                owner = [x for x in d.get(table.name).to_one if x.foreign_key.name == fkey.name]
                referenced = d.get(fkey.foreign_table)
                reverse = [
                    x for x in referenced.to_one
                    if x.function.one_to_one and x.foreign_key.name == fkey.name
                ] + [x for x in referenced.to_many if x.relationship.name == fkey.name]
                assert len(owner) == 1, fkey.name
                assert len(reverse) == 1, fkey.name

    def test_package_name(self, shop_conn):
        result = generate(_config(package_name="store"), connection=shop_conn)
        (customer, *_) = result.descriptors.get("invoices").to_one
        assert customer.function.package_name == "store"
        assert result.descriptors.package_name == "store"


class TestRuns:
    """Tests for run-level behaviour"""

    def test_idempotent(self, shop_conn):
        first = generate(_config(), connection=shop_conn)
        second = generate(_config(), connection=shop_conn)
        assert first.descriptors.to_json() == second.descriptors.to_json()
        assert first.descriptors.to_yaml() == second.descriptors.to_yaml()
        assert first.run_id != second.run_id

    def test_workers_give_identical_output(self, shop_db):
        sequential = GenerationPipeline(_config(shop_db)).run()
        concurrent = GenerationPipeline(_config(shop_db, max_workers=4)).run()
        assert concurrent.graph == sequential.graph
        assert concurrent.descriptors.to_json() == sequential.descriptors.to_json()

    def test_pipeline_closes_its_own_reader(self, shop_db):
        reader = create_reader(_config(shop_db).database)
        GenerationPipeline(_config(shop_db), reader=reader).run()
        assert not reader.is_connected()

    def test_borrowed_connection_stays_open(self, shop_conn, result):
        shop_conn.execute("SELECT 1 FROM customers")

    def test_excluding_referenced_table_fails(self, shop_conn):
        with pytest.raises(SchemaError):
            generate(_config(exclude_tables=["schema_migrations", "customers"]), connection=shop_conn)

    def test_yaml_export(self, result):
        data = yaml.safe_load(yaml.safe_dump(result.to_dict(), sort_keys=False))
        assert data["uses_returning"] is False
        assert [t["name"] for t in data["schema"]["tables"]][0] == "audit_log"
        assert data["descriptors"]["package_name"] == "models"
