"""
Schema Graph Model

Immutable representation of one introspection run: tables, their columns,
primary keys and foreign keys. Built once by the schema model builder and
only read afterwards.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Optional, Tuple

from ..utils.errors import SchemaError

NULL_WRAPPER = "null"


@dataclass(frozen=True)
class SemanticType:
    """
    Target-language type of a column

    A bare type (``int64``) has no wrapper. A nullable-wrapped type
    (``null.Int64``) keeps the wrapper package separate from the value
    field name, so the underlying value can be reached without string
    surgery.
    """
    name: str
    wrapper: Optional[str] = None

    @property
    def is_wrapped(self) -> bool:
        return self.wrapper is not None

    @property
    def full_name(self) -> str:
        if self.wrapper:
            return f"{self.wrapper}.{self.name}"
        return self.name

    def value_expression(self, field_name: str) -> str:
        """Expression reaching the underlying value of ``field_name``"""
        if self.wrapper:
            return f"{field_name}.{self.name}"
        return field_name

    def __str__(self) -> str:
        return self.full_name

    @classmethod
    def bare(cls, name: str) -> "SemanticType":
        return cls(name=name)

    @classmethod
    def nullable(cls, name: str) -> "SemanticType":
        return cls(name=name, wrapper=NULL_WRAPPER)


@dataclass(frozen=True)
class Column:
    """A table column as reported by the catalog"""
    name: str
    native_type: str
    default: str = ""
    nullable: bool = False
    unique: bool = False
    must_be_non_zero: bool = False
    semantic_type: Optional[SemanticType] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "native_type": self.native_type,
            "default": self.default,
            "nullable": self.nullable,
            "unique": self.unique,
            "must_be_non_zero": self.must_be_non_zero,
            "semantic_type": self.semantic_type.full_name if self.semantic_type else None,
        }


@dataclass(frozen=True)
class PrimaryKey:
    """Primary key constraint"""
    name: str
    columns: Tuple[str, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "columns": list(self.columns)}


@dataclass(frozen=True)
class ForeignKey:
    """
    One (constraint, column) pair of a foreign key

    Composite foreign keys surface as several entries sharing ``name``.
    The nullable/unique flags of both ends are filled in by the schema
    model builder once every table has been read.
    """
    name: str
    table: str
    column: str
    foreign_table: str
    foreign_column: str
    nullable: bool = False
    unique: bool = False
    foreign_column_nullable: bool = False
    foreign_column_unique: bool = False

    @property
    def is_self_referencing(self) -> bool:
        return self.table == self.foreign_table

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "table": self.table,
            "column": self.column,
            "foreign_table": self.foreign_table,
            "foreign_column": self.foreign_column,
            "nullable": self.nullable,
            "unique": self.unique,
            "foreign_column_nullable": self.foreign_column_nullable,
            "foreign_column_unique": self.foreign_column_unique,
        }


@dataclass(frozen=True)
class Table:
    """A table with its ordered columns and keys"""
    name: str
    columns: Tuple[Column, ...] = ()
    primary_key: Optional[PrimaryKey] = None
    foreign_keys: Tuple[ForeignKey, ...] = ()
    is_join_table: bool = False

    def find_column(self, name: str) -> Optional[Column]:
        for column in self.columns:
            if column.name == name:
                return column
        return None

    def get_column(self, name: str) -> Column:
        column = self.find_column(name)
        if column is None:
            raise SchemaError(
                f"Column '{name}' does not exist in table '{self.name}'",
                table_name=self.name,
                column_name=name,
            )
        return column

    def has_column(self, name: str) -> bool:
        return self.find_column(name) is not None

    @property
    def column_names(self) -> Tuple[str, ...]:
        return tuple(column.name for column in self.columns)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "columns": [c.to_dict() for c in self.columns],
            "primary_key": self.primary_key.to_dict() if self.primary_key else None,
            "foreign_keys": [fk.to_dict() for fk in self.foreign_keys],
            "is_join_table": self.is_join_table,
        }


@dataclass(frozen=True)
class SchemaGraph:
    """All introspected tables of one generation run, in catalog order"""
    tables: Tuple[Table, ...] = ()
    _index: Dict[str, Table] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        index: Dict[str, Table] = {}
        for table in self.tables:
            if table.name in index:
                raise SchemaError(f"Duplicate table '{table.name}' in schema graph", table_name=table.name)
            index[table.name] = table
        object.__setattr__(self, "_index", index)

    def __iter__(self) -> Iterator[Table]:
        return iter(self.tables)

    def __len__(self) -> int:
        return len(self.tables)

    def __contains__(self, name: object) -> bool:
        return name in self._index

    def find_table(self, name: str) -> Optional[Table]:
        return self._index.get(name)

    def get_table(self, name: str) -> Table:
        table = self._index.get(name)
        if table is None:
            raise SchemaError(f"Table '{name}' does not exist in the schema graph", table_name=name)
        return table

    def get_column(self, table_name: str, column_name: str) -> Column:
        return self.get_table(table_name).get_column(column_name)

    @property
    def table_names(self) -> Tuple[str, ...]:
        return tuple(table.name for table in self.tables)

    def to_dict(self) -> Dict[str, Any]:
        return {"tables": [t.to_dict() for t in self.tables]}
