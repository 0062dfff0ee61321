"""
PostgreSQL Schema Reader
Reads tables, columns and keys of the public schema through information_schema
"""
from __future__ import annotations

from typing import Any, List, Optional, Sequence

from ..config import DatabaseType
from ..schema.models import Column, ForeignKey, PrimaryKey
from ..schema.types import POSTGRESQL_TYPES
from .base import BaseSchemaReader, register_reader


def build_query_string(
    user: str,
    password: str,
    dbname: str,
    host: str,
    port: int,
    sslmode: str,
) -> str:
    """
    libpq keyword/value connection string; empty parts are left out

        build_query_string("bob", "", "shop", "localhost", 5432, "disable")
        -> "user=bob dbname=shop host=localhost port=5432 sslmode=disable"
    """
    parts = []
    if user:
        parts.append(f"user={user}")
    if password:
        parts.append(f"password={password}")
    if dbname:
        parts.append(f"dbname={dbname}")
    if host:
        parts.append(f"host={host}")
    if port:
        parts.append(f"port={port}")
    if sslmode:
        parts.append(f"sslmode={sslmode}")
    return " ".join(parts)


_TABLES_SQL = """
    select table_name
    from information_schema.tables
    where table_schema = 'public' and table_type = 'BASE TABLE'
"""

# A column is unique when it is the sole column of a unique index. UNIQUE
# and PRIMARY KEY constraints are backed by such indexes, so a composite
# UNIQUE (a, b) marks neither column.
_COLUMNS_SQL = """
    select c.column_name, c.data_type, c.column_default, c.is_nullable,
        (select exists(
            select 1
            from pg_indexes as pgix
            inner join pg_class as pgc on pgix.indexname = pgc.relname and pgc.relkind = 'i'
            inner join pg_index as pgi on pgi.indexrelid = pgc.oid
            inner join pg_attribute as pga
                on pga.attrelid = pgi.indrelid and pga.attnum = any(pgi.indkey)
            where pgix.schemaname = 'public' and pgix.tablename = c.table_name
                and pga.attname = c.column_name and pgi.indisunique = true
                and pgi.indnatts = 1
        )) as is_unique
    from information_schema.columns as c
    where c.table_name = %s and c.table_schema = 'public'
    order by c.ordinal_position
"""

_PRIMARY_KEY_SQL = """
    select tc.constraint_name, kcu.column_name
    from information_schema.table_constraints as tc
    inner join information_schema.key_column_usage as kcu
        on kcu.constraint_name = tc.constraint_name
        and kcu.constraint_schema = tc.constraint_schema
        and kcu.table_name = tc.table_name
    where tc.table_name = %s and tc.constraint_type = 'PRIMARY KEY'
        and tc.table_schema = 'public'
    order by kcu.ordinal_position
"""

# Read from pg_constraint keyed by the owning relation: constraint names are
# only unique per table. conkey/confkey are unnested together so composite
# keys pair their columns by position instead of cross-multiplying.
_FOREIGN_KEYS_SQL = """
    select con.conname, att.attname, fcl.relname, fatt.attname
    from pg_constraint as con
    inner join pg_class as cl on cl.oid = con.conrelid
    inner join pg_namespace as ns on ns.oid = cl.relnamespace
    inner join pg_class as fcl on fcl.oid = con.confrelid
    cross join lateral unnest(con.conkey, con.confkey)
        with ordinality as k(attnum, fattnum, position)
    inner join pg_attribute as att
        on att.attrelid = con.conrelid and att.attnum = k.attnum
    inner join pg_attribute as fatt
        on fatt.attrelid = con.confrelid and fatt.attnum = k.fattnum
    where con.contype = 'f' and ns.nspname = 'public' and cl.relname = %s
    order by con.conname, k.position
"""


@register_reader(DatabaseType.POSTGRESQL)
class PostgreSQLSchemaReader(BaseSchemaReader):
    """PostgreSQL schema reader"""

    type_map = POSTGRESQL_TYPES

    @property
    def database_type(self) -> DatabaseType:
        return DatabaseType.POSTGRESQL

    @property
    def dialect_name(self) -> str:
        return "PostgreSQL"

    def _open_connection(self) -> Any:
        """Establish PostgreSQL connection"""
        try:
            import psycopg2
        except ImportError:
            raise ImportError(
                "psycopg2 is required for PostgreSQL support. "
                "Install it with: pip install sql-relgen[postgresql]"
            )

        dsn = build_query_string(
            self.config.username or "",
            self.config.password_value(),
            self.config.database,
            self.config.host,
            self.config.effective_port(),
            self.config.ssl_mode,
        )
        connection = psycopg2.connect(dsn, connect_timeout=self.config.connection_timeout)
        connection.autocommit = True
        return connection

    def is_connected(self) -> bool:
        """Check if connection is active"""
        if self._connection is None:
            return False
        return getattr(self._connection, "closed", 1) == 0

    def list_table_names(self, exclude: Sequence[str] = ()) -> List[str]:
        sql = _TABLES_SQL
        params: List[Any] = []
        if exclude:
            sql += " and not (table_name = any(%s))"
            params.append(list(exclude))
        sql += " order by table_name"
        return [row[0] for row in self._query(sql, params)]

    def list_columns(self, table_name: str) -> List[Column]:
        rows = self._query(_COLUMNS_SQL, (table_name,), table_name=table_name)
        return [
            Column(
                name=name,
                native_type=data_type,
                default=default if default is not None else "",
                nullable=is_nullable == "YES",
                unique=bool(is_unique),
            )
            for name, data_type, default, is_nullable, is_unique in rows
        ]

    def list_primary_key(self, table_name: str) -> Optional[PrimaryKey]:
        rows = self._query(_PRIMARY_KEY_SQL, (table_name,), table_name=table_name)
        if not rows:
            return None
        return PrimaryKey(name=rows[0][0], columns=tuple(row[1] for row in rows))

    def list_foreign_keys(self, table_name: str) -> List[ForeignKey]:
        rows = self._query(_FOREIGN_KEYS_SQL, (table_name,), table_name=table_name)
        return [
            ForeignKey(
                name=name,
                table=table_name,
                column=column,
                foreign_table=foreign_table,
                foreign_column=foreign_column,
            )
            for name, column, foreign_table, foreign_column in rows
        ]

    def uses_returning(self) -> bool:
        return True
