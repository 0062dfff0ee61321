"""
Schema Model Builder

Runs a schema reader over every table and assembles the immutable schema
graph: columns are translated, foreign-key flags are filled in from the
column facts of both ends and join tables are classified.
"""
from __future__ import annotations

from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from dataclasses import replace
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence

from .models import ForeignKey, SchemaGraph, Table
from ..config import GeneratorConfig
from ..utils.errors import IntrospectionError, RelgenError, SchemaError
from ..utils.logging import get_logger, get_run_id, log_context, log_operation

if TYPE_CHECKING:
    from ..adapters.base import BaseSchemaReader

logger = get_logger(__name__)


def is_join_table(table: Table) -> bool:
    """
    A pure join table: exactly two foreign keys on two different non-nullable
    columns, pointing at two different other tables, and no other columns.
    A primary key is not required.
    """
    fkeys = table.foreign_keys
    if len(fkeys) != 2:
        return False

    first, second = fkeys
    if first.name == second.name or first.column == second.column:
        return False
    if first.foreign_table == second.foreign_table:
        return False
    if table.name in (first.foreign_table, second.foreign_table):
        return False

    fkey_columns = {first.column, second.column}
    if set(table.column_names) != fkey_columns:
        return False

    return all(not table.get_column(name).nullable for name in fkey_columns)


class SchemaModelBuilder:
    """
    Builds a SchemaGraph from a live schema reader

    Per-table introspection may run on a bounded thread pool
    (``GeneratorConfig.max_workers``). Results are written into a slot per
    catalog position, so table order never depends on completion order.

    Usage:
        with create_reader(db_config) as reader:
            graph = SchemaModelBuilder(reader, GeneratorConfig()).build()
    """

    def __init__(self, reader: "BaseSchemaReader", config: Optional[GeneratorConfig] = None):
        self.reader = reader
        self.config = config or GeneratorConfig()

    def build(self) -> SchemaGraph:
        with log_operation(
            logger,
            "schema_build",
            database_type=self.reader.database_type.value,
            max_workers=self.config.max_workers,
        ) as ctx:
            names = self.reader.list_table_names(self.config.exclude_tables)
            ctx['table_count'] = len(names)

            if self.config.max_workers > 1 and len(names) > 1:
                tables = self._load_concurrently(names)
            else:
                tables = [self.load_table(name) for name in names]

            tables = self._link_foreign_keys(tables)
            tables = [replace(t, is_join_table=is_join_table(t)) for t in tables]
            ctx['join_tables'] = sum(1 for t in tables if t.is_join_table)

            return SchemaGraph(tables=tuple(tables))

    def load_table(self, name: str) -> Table:
        """Introspect one table: columns (translated), primary key and foreign keys"""
        with log_context(table=name):
            try:
                columns = tuple(
                    self.reader.translate_column_type(column)
                    for column in self.reader.list_columns(name)
                )
                primary_key = self.reader.list_primary_key(name)
                foreign_keys = tuple(self.reader.list_foreign_keys(name))
            except RelgenError:
                raise
            except Exception as e:
                raise IntrospectionError(
                    f"Unable to introspect table: {e}",
                    table_name=name,
                    original_error=e,
                ) from e

            table = Table(
                name=name,
                columns=columns,
                primary_key=primary_key,
                foreign_keys=foreign_keys,
            )
            self._check_primary_key(table)
            logger.debug(
                f"Loaded {len(columns)} columns, {len(foreign_keys)} foreign keys"
                f"{'' if primary_key else ', no primary key'}"
            )
            return table

    def _load_concurrently(self, names: Sequence[str]) -> List[Table]:
        slots: List[Optional[Table]] = [None] * len(names)
        run_id = get_run_id()

        def load(index: int, name: str) -> None:
            with log_context(run_id=run_id):
                slots[index] = self.load_table(name)

        with ThreadPoolExecutor(
            max_workers=self.config.max_workers,
            thread_name_prefix="relgen-introspect",
        ) as executor:
            futures = [executor.submit(load, i, name) for i, name in enumerate(names)]
            done, pending = wait(futures, return_when=FIRST_EXCEPTION)
            for future in pending:
                future.cancel()
            # Surface the failure of the earliest table, not whichever finished first
            for future in futures:
                if future in done and future.exception() is not None:
                    raise future.exception()

        return [table for table in slots if table is not None]

    @staticmethod
    def _check_primary_key(table: Table) -> None:
        if table.primary_key is None:
            return
        for column in table.primary_key.columns:
            if not table.has_column(column):
                raise SchemaError(
                    f"Primary key {table.primary_key.name} of table '{table.name}' "
                    f"references unknown column '{column}'",
                    table_name=table.name,
                    column_name=column,
                )

    @staticmethod
    def _link_foreign_keys(tables: List[Table]) -> List[Table]:
        """Copy nullability/uniqueness of both key ends from the column facts"""
        by_name: Dict[str, Table] = {t.name: t for t in tables}
        linked: List[Table] = []

        for table in tables:
            fkeys: List[ForeignKey] = []
            for fkey in table.foreign_keys:
                foreign = by_name.get(fkey.foreign_table)
                if foreign is None:
                    raise SchemaError(
                        f"Foreign key {fkey.name} on '{table.name}.{fkey.column}' references "
                        f"table '{fkey.foreign_table}' which is not part of the schema graph",
                        table_name=fkey.foreign_table,
                    )
                local_column = table.get_column(fkey.column)
                foreign_column = foreign.get_column(fkey.foreign_column)
                fkeys.append(replace(
                    fkey,
                    nullable=local_column.nullable,
                    unique=local_column.unique,
                    foreign_column_nullable=foreign_column.nullable,
                    foreign_column_unique=foreign_column.unique,
                ))
            linked.append(replace(table, foreign_keys=tuple(fkeys)))

        return linked
