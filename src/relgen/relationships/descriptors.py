"""
Descriptor Assembler

Packages inferred relationships into flat, text-only descriptors that the
template layer substitutes verbatim. Descriptors are value snapshots: they
hold the originating ForeignKey / ToManyRelationship by value plus every
pre-resolved name the templates need.
"""
from __future__ import annotations

import json
from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, List, Optional, Tuple

import yaml

from .inference import RelationshipInferenceEngine, TableRelationships, ToManyRelationship
from .inflection import camel_case, plural, singular, title_case, trim_suffix
from .naming import ID_SUFFIX, assignment_expression, make_unique, mk_function_name, receiver_name
from ..schema.models import ForeignKey, SchemaGraph, Table
from ..utils.logging import get_logger

logger = get_logger(__name__)

TO_ONE = "to_one"
REVERSE = "reverse"
REVERSE_JOIN = "reverse_join"


@dataclass(frozen=True)
class ToOneLocalTable:
    name_title: str
    column_name_title: str


@dataclass(frozen=True)
class ToOneForeignTable:
    name: str
    name_title: str
    name_plural_title: str
    column_name: str
    column_name_title: str


@dataclass(frozen=True)
class ToOneFunction:
    package_name: str
    name: str
    foreign_name: str
    varname: str
    receiver: str
    one_to_one: bool
    local_assignment: str
    foreign_assignment: str


@dataclass(frozen=True)
class RelationshipToOneTexts:
    """Texts for an accessor yielding at most one related row"""
    foreign_key: ForeignKey
    local_table: ToOneLocalTable
    foreign_table: ToOneForeignTable
    function: ToOneFunction

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ToManyLocalTable:
    name_title: str
    name_singular: str
    column_name_title: str


@dataclass(frozen=True)
class ToManyForeignTable:
    name_title: str
    name_singular: str
    name_plural_title: str
    name_human_readable: str
    column_name_title: str
    slice: str


@dataclass(frozen=True)
class ToManyFunction:
    name: str
    foreign_name: str
    receiver: str
    local_assignment: str
    foreign_assignment: str


@dataclass(frozen=True)
class RelationshipToManyTexts:
    """Texts for an accessor yielding a sequence of related rows"""
    relationship: ToManyRelationship
    local_table: ToManyLocalTable
    foreign_table: ToManyForeignTable
    function: ToManyFunction

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class TableDescriptors:
    """Flat descriptor sequences for the accessors of one table"""
    table_name: str
    to_one: Tuple[RelationshipToOneTexts, ...] = ()
    to_many: Tuple[RelationshipToManyTexts, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "table": self.table_name,
            "to_one": [d.to_dict() for d in self.to_one],
            "to_many": [d.to_dict() for d in self.to_many],
        }


@dataclass(frozen=True)
class SchemaDescriptors:
    """Descriptors for every table of a schema graph, in graph order"""
    package_name: str
    tables: Tuple[TableDescriptors, ...] = ()

    def get(self, table_name: str) -> Optional[TableDescriptors]:
        for table in self.tables:
            if table.table_name == table_name:
                return table
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "package_name": self.package_name,
            "tables": [t.to_dict() for t in self.tables],
        }

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    def to_yaml(self) -> str:
        return yaml.safe_dump(self.to_dict(), sort_keys=False, default_flow_style=False)


def texts_from_foreign_key(
    package_name: str,
    graph: SchemaGraph,
    table: Table,
    fkey: ForeignKey,
) -> RelationshipToOneTexts:
    """To-one texts for a foreign key owned by ``table``"""
    foreign_singular = singular(fkey.foreign_table)
    plurality = singular if fkey.unique else plural
    varname = camel_case(foreign_singular)

    local_column = table.get_column(fkey.column)
    foreign_column = graph.get_column(fkey.foreign_table, fkey.foreign_column)

    return RelationshipToOneTexts(
        foreign_key=fkey,
        local_table=ToOneLocalTable(
            name_title=title_case(singular(table.name)),
            column_name_title=title_case(singular(fkey.column)),
        ),
        foreign_table=ToOneForeignTable(
            name=fkey.foreign_table,
            name_title=title_case(foreign_singular),
            name_plural_title=title_case(plural(fkey.foreign_table)),
            column_name=fkey.foreign_column,
            column_name_title=title_case(singular(fkey.foreign_column)),
        ),
        function=ToOneFunction(
            package_name=package_name,
            name=title_case(singular(trim_suffix(fkey.column, ID_SUFFIX))),
            foreign_name=mk_function_name(
                foreign_singular, title_case(plurality(fkey.table)), fkey.column, False
            ),
            varname=varname,
            receiver=receiver_name(table.name, taken={varname}),
            one_to_one=False,
            local_assignment=assignment_expression(
                fkey.column, fkey.nullable, local_column.semantic_type
            ),
            foreign_assignment=assignment_expression(
                fkey.foreign_column, fkey.foreign_column_nullable, foreign_column.semantic_type
            ),
        ),
    )


def texts_from_one_to_one_relationship(
    package_name: str,
    graph: SchemaGraph,
    table: Table,
    rel: ToManyRelationship,
) -> RelationshipToOneTexts:
    """To-one texts for the referenced side of a unique foreign key"""
    fkey = ForeignKey(
        name=rel.name,
        table=rel.table,
        column=rel.column,
        nullable=rel.nullable,
        unique=rel.unique,
        foreign_table=rel.foreign_table,
        foreign_column=rel.foreign_column,
        foreign_column_nullable=rel.foreign_column_nullable,
        foreign_column_unique=rel.foreign_column_unique,
    )

    texts = texts_from_foreign_key(package_name, graph, table, fkey)
    local_singular = singular(rel.table)
    function = replace(
        texts.function,
        name=title_case(singular(rel.foreign_table)),
        foreign_name=mk_function_name(
            local_singular, title_case(local_singular), rel.foreign_column, False
        ),
        one_to_one=True,
    )
    return replace(texts, function=function)


def texts_from_relationship(
    graph: SchemaGraph,
    table: Table,
    rel: ToManyRelationship,
) -> RelationshipToManyTexts:
    """To-many texts for a relationship seen from ``table``"""
    local_singular = singular(table.name)
    foreign_singular = singular(rel.foreign_table)
    foreign_plural_title = title_case(plural(rel.foreign_table))

    if rel.to_join_table:
        foreign_name = title_case(plural(trim_suffix(rel.join_local_column, ID_SUFFIX)))
    else:
        foreign_name = title_case(singular(trim_suffix(rel.foreign_column, ID_SUFFIX)))

    local_column = table.get_column(rel.column)
    foreign_column = graph.get_column(rel.foreign_table, rel.foreign_column)

    return RelationshipToManyTexts(
        relationship=rel,
        local_table=ToManyLocalTable(
            name_title=title_case(local_singular),
            name_singular=local_singular,
            column_name_title=title_case(rel.column),
        ),
        foreign_table=ToManyForeignTable(
            name_title=title_case(foreign_singular),
            name_singular=foreign_singular,
            name_plural_title=foreign_plural_title,
            name_human_readable=rel.foreign_table.replace("_", " "),
            column_name_title=title_case(rel.foreign_column),
            slice=f"{title_case(foreign_singular)}Slice",
        ),
        function=ToManyFunction(
            name=mk_function_name(
                local_singular, foreign_plural_title, rel.foreign_column, rel.to_join_table
            ),
            foreign_name=foreign_name,
            receiver=receiver_name(table.name, taken={camel_case(foreign_singular)}),
            local_assignment=assignment_expression(
                rel.column, rel.nullable, local_column.semantic_type
            ),
            foreign_assignment=assignment_expression(
                rel.foreign_column, rel.foreign_column_nullable, foreign_column.semantic_type
            ),
        ),
    )


def _to_one_fallback(texts: RelationshipToOneTexts) -> str:
    if texts.function.one_to_one:
        column = trim_suffix(texts.foreign_key.foreign_column, ID_SUFFIX)
    else:
        column = trim_suffix(texts.foreign_key.column, ID_SUFFIX)
    return title_case(column) + texts.foreign_table.name_title


def _to_many_fallback(texts: RelationshipToManyTexts) -> str:
    rel = texts.relationship
    if rel.to_join_table:
        qualifier = title_case(singular(rel.join_table))
    else:
        qualifier = title_case(trim_suffix(rel.foreign_column, ID_SUFFIX))
    return qualifier + texts.foreign_table.name_plural_title


class DescriptorAssembler:
    """
    Builds the text descriptors for every table of a schema graph

    Accessor names generated on one table share a namespace; clashes are
    resolved deterministically and the reverse ``foreign_name`` of each
    counterpart descriptor follows the final name.

    Usage:
        descriptors = DescriptorAssembler(graph, package_name="models").assemble()
        print(descriptors.to_yaml())
    """

    def __init__(self, graph: SchemaGraph, package_name: str = "models"):
        self.graph = graph
        self.package_name = package_name

    def assemble(
        self,
        relationships: Optional[Tuple[TableRelationships, ...]] = None,
    ) -> SchemaDescriptors:
        if relationships is None:
            relationships = RelationshipInferenceEngine(self.graph).infer()

        tables = [self._assemble_table(rels) for rels in relationships]
        tables = self._link_counterparts(tables)

        logger.debug(
            f"Assembled descriptors for {len(tables)} tables: "
            f"{sum(len(t.to_one) for t in tables)} to-one, "
            f"{sum(len(t.to_many) for t in tables)} to-many"
        )
        return SchemaDescriptors(package_name=self.package_name, tables=tuple(tables))

    def _assemble_table(self, rels: TableRelationships) -> TableDescriptors:
        table = self.graph.get_table(rels.table)

        to_one: List[RelationshipToOneTexts] = [
            texts_from_foreign_key(self.package_name, self.graph, table, fkey)
            for fkey in rels.to_one
        ]
        to_one.extend(
            texts_from_one_to_one_relationship(self.package_name, self.graph, table, rel)
            for rel in rels.one_to_one
        )
        to_many = [texts_from_relationship(self.graph, table, rel) for rel in rels.to_many]

        names = make_unique(
            [(d.function.name, _to_one_fallback(d)) for d in to_one]
            + [(d.function.name, _to_many_fallback(d)) for d in to_many]
        )
        to_one = [
            replace(d, function=replace(d.function, name=name))
            for d, name in zip(to_one, names[: len(to_one)])
        ]
        to_many = [
            replace(d, function=replace(d.function, name=name))
            for d, name in zip(to_many, names[len(to_one):])
        ]

        return TableDescriptors(table_name=table.name, to_one=tuple(to_one), to_many=tuple(to_many))

    @staticmethod
    def _link_counterparts(tables: List[TableDescriptors]) -> List[TableDescriptors]:
        """
        Point each descriptor's foreign_name at the final name of the opposite direction

        Keys carry both the accessor's table and the table owning the
        foreign key, since constraint names are only unique per table.
        """
        final: Dict[Tuple[str, ...], str] = {}
        for t in tables:
            for d in t.to_one:
                fkey = d.foreign_key
                if d.function.one_to_one:
                    key = (REVERSE, t.table_name, fkey.foreign_table, fkey.name, fkey.foreign_column)
                else:
                    key = (TO_ONE, t.table_name, fkey.name, fkey.column)
                final[key] = d.function.name
            for m in t.to_many:
                rel = m.relationship
                if rel.to_join_table:
                    key = (REVERSE_JOIN, t.table_name, rel.join_table, rel.join_local_column)
                else:
                    key = (REVERSE, t.table_name, rel.foreign_table, rel.name, rel.foreign_column)
                final[key] = m.function.name

        linked: List[TableDescriptors] = []
        for t in tables:
            to_one = []
            for d in t.to_one:
                fkey = d.foreign_key
                if d.function.one_to_one:
                    key = (TO_ONE, fkey.foreign_table, fkey.name, fkey.foreign_column)
                else:
                    key = (REVERSE, fkey.foreign_table, t.table_name, fkey.name, fkey.column)
                foreign_name = final.get(key, d.function.foreign_name)
                to_one.append(replace(d, function=replace(d.function, foreign_name=foreign_name)))

            to_many = []
            for m in t.to_many:
                rel = m.relationship
                if rel.to_join_table:
                    key = (REVERSE_JOIN, rel.foreign_table, rel.join_table, rel.join_foreign_column)
                else:
                    key = (TO_ONE, rel.foreign_table, rel.name, rel.foreign_column)
                foreign_name = final.get(key, m.function.foreign_name)
                to_many.append(replace(m, function=replace(m.function, foreign_name=foreign_name)))

            linked.append(replace(t, to_one=tuple(to_one), to_many=tuple(to_many)))

        return linked
