"""
MySQL Schema Reader
Reads tables, columns and keys of the configured database through information_schema
"""
from __future__ import annotations

from typing import Any, List, Optional, Sequence

from ..config import DatabaseType
from ..schema.models import Column, ForeignKey, PrimaryKey
from ..schema.types import MYSQL_TYPES
from .base import BaseSchemaReader, register_reader

_COLUMNS_SQL = """
    select c.column_name, c.column_type, c.column_default, c.is_nullable,
        exists(
            select 1
            from information_schema.statistics as s
            where s.table_schema = c.table_schema and s.table_name = c.table_name
                and s.column_name = c.column_name and s.non_unique = 0
                and (
                    select count(*)
                    from information_schema.statistics as s2
                    where s2.table_schema = s.table_schema and s2.table_name = s.table_name
                        and s2.index_name = s.index_name
                ) = 1
        ) as is_unique
    from information_schema.columns as c
    where c.table_schema = %s and c.table_name = %s
    order by c.ordinal_position
"""

_PRIMARY_KEY_SQL = """
    select tc.constraint_name, kcu.column_name
    from information_schema.table_constraints as tc
    inner join information_schema.key_column_usage as kcu
        on kcu.constraint_schema = tc.constraint_schema
        and kcu.table_name = tc.table_name
        and kcu.constraint_name = tc.constraint_name
    where tc.table_schema = %s and tc.table_name = %s
        and tc.constraint_type = 'PRIMARY KEY'
    order by kcu.ordinal_position
"""

_FOREIGN_KEYS_SQL = """
    select constraint_name, column_name, referenced_table_name, referenced_column_name
    from information_schema.key_column_usage
    where table_schema = %s and table_name = %s and referenced_table_name is not null
    order by constraint_name, ordinal_position
"""


def _text(value: Any) -> Any:
    # Older connector releases hand back catalog strings as bytes
    if isinstance(value, (bytes, bytearray)):
        return value.decode("utf-8")
    return value


def normalize_column_type(column_type: str) -> str:
    """``'INT(10) UNSIGNED ZEROFILL'`` -> ``'int(10) unsigned'``"""
    return " ".join(part for part in column_type.lower().split() if part != "zerofill")


@register_reader(DatabaseType.MYSQL)
class MySQLSchemaReader(BaseSchemaReader):
    """MySQL schema reader"""

    type_map = MYSQL_TYPES

    @property
    def database_type(self) -> DatabaseType:
        return DatabaseType.MYSQL

    @property
    def dialect_name(self) -> str:
        return "MySQL"

    def _open_connection(self) -> Any:
        """Establish MySQL connection"""
        try:
            import mysql.connector
        except ImportError:
            raise ImportError(
                "mysql-connector-python is required for MySQL support. "
                "Install it with: pip install sql-relgen[mysql]"
            )

        return mysql.connector.connect(
            host=self.config.host,
            port=self.config.effective_port(),
            database=self.config.database,
            user=self.config.username,
            password=self.config.password_value(),
            connection_timeout=self.config.connection_timeout,
        )

    def is_connected(self) -> bool:
        """Check if connection is active"""
        if self._connection is None:
            return False
        return bool(self._connection.is_connected())

    def list_table_names(self, exclude: Sequence[str] = ()) -> List[str]:
        sql = """
            select table_name
            from information_schema.tables
            where table_schema = %s and table_type = 'BASE TABLE'
        """
        params: List[Any] = [self.config.database]
        if exclude:
            sql += f" and table_name not in ({', '.join(['%s'] * len(exclude))})"
            params.extend(exclude)
        sql += " order by table_name"
        return [_text(row[0]) for row in self._query(sql, params)]

    def list_columns(self, table_name: str) -> List[Column]:
        rows = self._query(_COLUMNS_SQL, (self.config.database, table_name), table_name=table_name)
        columns = []
        for name, column_type, default, is_nullable, is_unique in rows:
            default = _text(default)
            columns.append(Column(
                name=_text(name),
                native_type=normalize_column_type(_text(column_type)),
                default=str(default) if default is not None else "",
                nullable=_text(is_nullable) == "YES",
                unique=bool(is_unique),
            ))
        return columns

    def list_primary_key(self, table_name: str) -> Optional[PrimaryKey]:
        rows = self._query(_PRIMARY_KEY_SQL, (self.config.database, table_name), table_name=table_name)
        if not rows:
            return None
        return PrimaryKey(name=_text(rows[0][0]), columns=tuple(_text(row[1]) for row in rows))

    def list_foreign_keys(self, table_name: str) -> List[ForeignKey]:
        rows = self._query(_FOREIGN_KEYS_SQL, (self.config.database, table_name), table_name=table_name)
        return [
            ForeignKey(
                name=_text(name),
                table=table_name,
                column=_text(column),
                foreign_table=_text(foreign_table),
                foreign_column=_text(foreign_column),
            )
            for name, column, foreign_table, foreign_column in rows
        ]

    def uses_returning(self) -> bool:
        return False
