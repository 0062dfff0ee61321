"""
Relationship Inference Engine

Derives directional relationships from the foreign keys of a schema graph.
Every foreign key yields exactly two directions:

1. a to-one side on the table that owns the key, and
2. on the referenced table, either a one-to-one side (unique key column)
   or a to-many side. Keys held by a join table always produce the
   synthesized many-to-many relationship that routes through it.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from ..schema.models import ForeignKey, SchemaGraph, Table
from ..utils.errors import SchemaError
from ..utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ToManyRelationship:
    """
    A relationship seen from the referenced table

    ``table``/``column`` are the local (referenced) side, ``foreign_*`` the
    rows that come back. For join relationships the foreign side is the far
    table, and ``join_table``/``join_local_column``/``join_foreign_column``
    describe the route through the join table.
    """
    name: str
    table: str
    column: str
    nullable: bool
    unique: bool

    foreign_table: str
    foreign_column: str
    foreign_column_nullable: bool
    foreign_column_unique: bool

    to_join_table: bool = False
    join_table: str = ""
    join_local_column: str = ""
    join_foreign_column: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "table": self.table,
            "column": self.column,
            "nullable": self.nullable,
            "unique": self.unique,
            "foreign_table": self.foreign_table,
            "foreign_column": self.foreign_column,
            "foreign_column_nullable": self.foreign_column_nullable,
            "foreign_column_unique": self.foreign_column_unique,
            "to_join_table": self.to_join_table,
            "join_table": self.join_table,
            "join_local_column": self.join_local_column,
            "join_foreign_column": self.join_foreign_column,
        }


@dataclass(frozen=True)
class TableRelationships:
    """All relationship inputs whose accessors live on one table"""
    table: str
    to_one: Tuple[ForeignKey, ...] = ()
    one_to_one: Tuple[ToManyRelationship, ...] = ()
    to_many: Tuple[ToManyRelationship, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not (self.to_one or self.one_to_one or self.to_many)


class RelationshipInferenceEngine:
    """
    Turns the foreign keys of an immutable schema graph into relationship inputs

    Usage:
        engine = RelationshipInferenceEngine(graph)
        for rels in engine.infer():
            print(rels.table, len(rels.to_many))
    """

    def __init__(self, graph: SchemaGraph):
        self.graph = graph

    def infer(self) -> Tuple[TableRelationships, ...]:
        """Relationships for every table, in graph order"""
        results = tuple(self.relationships_for(table.name) for table in self.graph)
        logger.debug(
            f"Inferred relationships for {len(results)} tables: "
            f"{sum(len(r.to_one) for r in results)} to-one, "
            f"{sum(len(r.one_to_one) for r in results)} one-to-one, "
            f"{sum(len(r.to_many) for r in results)} to-many"
        )
        return results

    def relationships_for(self, table_name: str) -> TableRelationships:
        return TableRelationships(
            table=table_name,
            to_one=self.to_one_foreign_keys(table_name),
            one_to_one=self.one_to_one_relationships(table_name),
            to_many=self.to_many_relationships(table_name),
        )

    def to_one_foreign_keys(self, table_name: str) -> Tuple[ForeignKey, ...]:
        """Foreign keys owned by the table: each is a to-one accessor on it"""
        return self.graph.get_table(table_name).foreign_keys

    def one_to_one_relationships(self, table_name: str) -> Tuple[ToManyRelationship, ...]:
        """Unique foreign keys in other tables (or this one) pointing at this table"""
        local = self.graph.get_table(table_name)
        relationships: List[ToManyRelationship] = []

        for table in self.graph:
            if table.is_join_table:
                continue
            for fkey in table.foreign_keys:
                if fkey.foreign_table == local.name and fkey.unique:
                    relationships.append(self._build_relationship(local, fkey, table))

        return tuple(relationships)

    def to_many_relationships(self, table_name: str) -> Tuple[ToManyRelationship, ...]:
        """Non-unique foreign keys pointing at this table, plus many-to-many through join tables"""
        local = self.graph.get_table(table_name)
        relationships: List[ToManyRelationship] = []

        for table in self.graph:
            for fkey in table.foreign_keys:
                if fkey.foreign_table != local.name:
                    continue
                if table.is_join_table or not fkey.unique:
                    relationships.append(self._build_relationship(local, fkey, table))

        return tuple(relationships)

    def _build_relationship(
        self,
        local: Table,
        fkey: ForeignKey,
        owner: Table,
    ) -> ToManyRelationship:
        if not owner.is_join_table:
            return ToManyRelationship(
                name=fkey.name,
                table=local.name,
                column=fkey.foreign_column,
                nullable=fkey.foreign_column_nullable,
                unique=fkey.foreign_column_unique,
                foreign_table=owner.name,
                foreign_column=fkey.column,
                foreign_column_nullable=fkey.nullable,
                foreign_column_unique=fkey.unique,
            )

        other = self._other_join_key(owner, fkey)
        return ToManyRelationship(
            name=fkey.name,
            table=local.name,
            column=fkey.foreign_column,
            nullable=fkey.foreign_column_nullable,
            unique=fkey.foreign_column_unique,
            foreign_table=other.foreign_table,
            foreign_column=other.foreign_column,
            foreign_column_nullable=other.foreign_column_nullable,
            foreign_column_unique=other.foreign_column_unique,
            to_join_table=True,
            join_table=owner.name,
            join_local_column=fkey.column,
            join_foreign_column=other.column,
        )

    @staticmethod
    def _other_join_key(join_table: Table, fkey: ForeignKey) -> ForeignKey:
        other: Optional[ForeignKey] = None
        for candidate in join_table.foreign_keys:
            if candidate.column != fkey.column:
                other = candidate
        if other is None:
            raise SchemaError(
                f"Join table '{join_table.name}' has no second foreign key besides {fkey.name}",
                table_name=join_table.name,
            )
        return other
