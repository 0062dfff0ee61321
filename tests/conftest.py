"""
Shared fixtures: an in-memory schema reader and a small shop schema
"""
import os
import sys

import pytest

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from relgen.adapters.base import BaseSchemaReader
from relgen.config import DatabaseConfig, DatabaseType, GeneratorConfig
from relgen.schema.builder import SchemaModelBuilder
from relgen.schema.models import Column, ForeignKey, PrimaryKey
from relgen.schema.types import SQLITE_TYPES


class FakeSchemaReader(BaseSchemaReader):
    """
    Schema reader serving a table dictionary instead of a catalog

    ``tables`` maps a table name to a dict with ``columns`` as
    ``(name, native_type, nullable, unique)`` tuples, an optional ``pk``
    column list and ``fkeys`` as ``(name, column, foreign_table,
    foreign_column)`` tuples.
    """

    type_map = SQLITE_TYPES

    def __init__(self, tables, fail_on=()):
        super().__init__(DatabaseConfig(db_type=DatabaseType.SQLITE), connection=object())
        self.tables = tables
        self.fail_on = set(fail_on)
        self.loaded = []

    @property
    def database_type(self):
        return DatabaseType.SQLITE

    @property
    def dialect_name(self):
        return "Fake"

    def _open_connection(self):
        return object()

    def list_table_names(self, exclude=()):
        return [name for name in self.tables if name not in set(exclude)]

    def list_columns(self, table_name):
        if table_name in self.fail_on:
            raise RuntimeError(f"relation \"{table_name}\" is broken")
        self.loaded.append(table_name)
        return [
            Column(name=name, native_type=native_type, nullable=nullable, unique=unique)
            for name, native_type, nullable, unique in self.tables[table_name]["columns"]
        ]

    def list_primary_key(self, table_name):
        pk = self.tables[table_name].get("pk")
        if not pk:
            return None
        return PrimaryKey(name=f"{table_name}_pkey", columns=tuple(pk))

    def list_foreign_keys(self, table_name):
        return [
            ForeignKey(
                name=name,
                table=table_name,
                column=column,
                foreign_table=foreign_table,
                foreign_column=foreign_column,
            )
            for name, column, foreign_table, foreign_column in self.tables[table_name].get("fkeys", ())
        ]

    def uses_returning(self):
        return False


SHOP_TABLES = {
    "customers": {
        "columns": [("id", "integer", False, True), ("name", "text", False, False)],
        "pk": ["id"],
    },
    "invoices": {
        "columns": [
            ("id", "integer", False, True),
            ("customer_id", "integer", False, False),
            ("billing_customer_id", "integer", True, False),
            ("total", "numeric", True, False),
        ],
        "pk": ["id"],
        "fkeys": [
            ("invoices_customer_id_fkey", "customer_id", "customers", "id"),
            ("invoices_billing_customer_id_fkey", "billing_customer_id", "customers", "id"),
        ],
    },
    "employees": {
        "columns": [("id", "integer", False, True), ("manager_id", "integer", True, False)],
        "pk": ["id"],
        "fkeys": [("employees_manager_id_fkey", "manager_id", "employees", "id")],
    },
    "users": {
        "columns": [("id", "integer", False, True), ("email", "varchar(255)", False, True)],
        "pk": ["id"],
    },
    "profiles": {
        "columns": [("id", "integer", False, True), ("user_id", "integer", False, True)],
        "pk": ["id"],
        "fkeys": [("profiles_user_id_fkey", "user_id", "users", "id")],
    },
    "videos": {
        "columns": [("id", "integer", False, True), ("title", "text", False, False)],
        "pk": ["id"],
    },
    "tags": {
        "columns": [("id", "integer", False, True), ("label", "text", False, False)],
        "pk": ["id"],
    },
    "video_tags": {
        "columns": [("video_id", "integer", False, False), ("tag_id", "integer", False, False)],
        "pk": ["video_id", "tag_id"],
        "fkeys": [
            ("video_tags_video_id_fkey", "video_id", "videos", "id"),
            ("video_tags_tag_id_fkey", "tag_id", "tags", "id"),
        ],
    },
    "audit_log": {
        "columns": [("message", "text", True, False), ("created_at", "timestamp", False, False)],
    },
}


@pytest.fixture
def shop_tables():
    return SHOP_TABLES


@pytest.fixture
def fake_reader():
    """Factory for FakeSchemaReader instances"""
    return FakeSchemaReader


@pytest.fixture
def build_graph():
    """Build a SchemaGraph from a table dictionary"""
    def _build(tables, max_workers=1):
        reader = FakeSchemaReader(tables)
        return SchemaModelBuilder(reader, GeneratorConfig(max_workers=max_workers)).build()
    return _build


@pytest.fixture
def shop_graph(build_graph):
    return build_graph(SHOP_TABLES)
