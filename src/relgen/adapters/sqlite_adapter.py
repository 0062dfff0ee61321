"""
SQLite Schema Reader
Reads tables, columns and keys through sqlite_master and the table-valued PRAGMA functions
"""
from __future__ import annotations

import sqlite3
from typing import Any, Dict, List, Optional, Sequence, Set

from ..config import DatabaseType
from ..schema.models import Column, ForeignKey, PrimaryKey
from ..schema.types import SQLITE_TYPES
from ..utils.errors import IntrospectionError
from .base import BaseSchemaReader, filter_excluded, register_reader

_TABLES_SQL = """
    select name from sqlite_master
    where type = 'table' and name not like 'sqlite_%'
    order by name
"""

_TABLE_INFO_SQL = "select cid, name, type, \"notnull\", dflt_value, pk from pragma_table_info(?) order by cid"
_INDEX_LIST_SQL = "select name, \"unique\" from pragma_index_list(?)"
_INDEX_INFO_SQL = "select name from pragma_index_info(?)"
_FOREIGN_KEYS_SQL = (
    "select id, seq, \"table\", \"from\", \"to\" from pragma_foreign_key_list(?) order by id, seq"
)


@register_reader(DatabaseType.SQLITE)
class SQLiteSchemaReader(BaseSchemaReader):
    """
    SQLite schema reader

    SQLite has no named primary keys and often no named foreign keys, so
    constraint names are synthesized as ``<table>_pkey`` and
    ``fk_<table>_<id>``.
    """

    type_map = SQLITE_TYPES

    @property
    def database_type(self) -> DatabaseType:
        return DatabaseType.SQLITE

    @property
    def dialect_name(self) -> str:
        return "SQLite"

    def _open_connection(self) -> Any:
        """Establish SQLite connection"""
        db_path = self.config.sqlite_path or self.config.database or ":memory:"
        return sqlite3.connect(
            db_path,
            timeout=self.config.connection_timeout,
            check_same_thread=False,  # Allow multi-threaded access
        )

    def list_table_names(self, exclude: Sequence[str] = ()) -> List[str]:
        return filter_excluded((row[0] for row in self._query(_TABLES_SQL)), exclude)

    def _table_info(self, table_name: str):
        return self._query(_TABLE_INFO_SQL, (table_name,), table_name=table_name)

    def _unique_columns(self, table_name: str) -> Set[str]:
        """Columns that are the sole column of a unique index"""
        unique: Set[str] = set()
        for index_name, is_unique in self._query(_INDEX_LIST_SQL, (table_name,), table_name=table_name):
            if not is_unique:
                continue
            columns = self._query(_INDEX_INFO_SQL, (index_name,), table_name=table_name)
            if len(columns) == 1 and columns[0][0] is not None:
                unique.add(columns[0][0])
        return unique

    def list_columns(self, table_name: str) -> List[Column]:
        info = self._table_info(table_name)
        unique = self._unique_columns(table_name)

        pk_columns = [row[1] for row in info if row[5]]
        if len(pk_columns) == 1:
            unique.add(pk_columns[0])

        return [
            Column(
                name=name,
                native_type=native_type or "",
                default=str(default) if default is not None else "",
                nullable=not notnull and not pk,
                unique=name in unique,
            )
            for _cid, name, native_type, notnull, default, pk in info
        ]

    def list_primary_key(self, table_name: str) -> Optional[PrimaryKey]:
        pk_rows = sorted((row[5], row[1]) for row in self._table_info(table_name) if row[5])
        if not pk_rows:
            return None
        return PrimaryKey(name=f"{table_name}_pkey", columns=tuple(name for _, name in pk_rows))

    def list_foreign_keys(self, table_name: str) -> List[ForeignKey]:
        rows = self._query(_FOREIGN_KEYS_SQL, (table_name,), table_name=table_name)
        implicit_targets: Dict[str, Optional[PrimaryKey]] = {}
        fkeys: List[ForeignKey] = []

        for fk_id, seq, foreign_table, column, foreign_column in rows:
            if foreign_column is None:
                # REFERENCES without a column list targets the primary key
                if foreign_table not in implicit_targets:
                    implicit_targets[foreign_table] = self.list_primary_key(foreign_table)
                pkey = implicit_targets[foreign_table]
                if pkey is None or seq >= len(pkey.columns):
                    raise IntrospectionError(
                        f"Foreign key {fk_id} references table '{foreign_table}' "
                        f"without naming a column and that table has no matching primary key",
                        table_name=table_name,
                    )
                foreign_column = pkey.columns[seq]

            fkeys.append(ForeignKey(
                name=f"fk_{table_name}_{fk_id}",
                table=table_name,
                column=column,
                foreign_table=foreign_table,
                foreign_column=foreign_column,
            ))

        return fkeys

    def uses_returning(self) -> bool:
        return False
