"""
Generation Pipeline
Runs one introspection-to-descriptors pass:

    connection -> schema reader -> schema graph -> relationships -> descriptors

Every run recomputes the whole model from the live database; nothing is
cached between runs.
"""
from __future__ import annotations

import time
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .adapters import BaseSchemaReader, create_reader
from .config import SystemConfig
from .relationships import DescriptorAssembler, RelationshipInferenceEngine, SchemaDescriptors
from .schema import SchemaGraph, SchemaModelBuilder
from .utils import get_logger, log_context, log_operation

logger = get_logger(__name__)


@dataclass(frozen=True)
class GenerationResult:
    """Outcome of one generation run"""
    graph: SchemaGraph
    descriptors: SchemaDescriptors
    uses_returning: bool
    duration_ms: float
    run_id: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "run_id": self.run_id,
            "uses_returning": self.uses_returning,
            "duration_ms": self.duration_ms,
            "schema": self.graph.to_dict(),
            "descriptors": self.descriptors.to_dict(),
        }


class GenerationPipeline:
    """
    One-shot pipeline from a database schema to relationship descriptors

    The pipeline opens its own reader from ``config.database`` unless a
    reader is supplied, and only closes what it opened.

    Usage:
        config = SystemConfig.from_env()
        result = GenerationPipeline(config).run()
        print(result.descriptors.to_yaml())
    """

    def __init__(self, config: SystemConfig, reader: Optional[BaseSchemaReader] = None):
        self.config = config
        self.reader = reader

    def run(self) -> GenerationResult:
        run_id = str(uuid.uuid4())
        reader = self.reader or create_reader(self.config.database)

        with log_context(run_id=run_id):
            with log_operation(
                logger,
                "generation_run",
                database_type=reader.database_type.value,
                package_name=self.config.generator.package_name,
            ) as ctx:
                start_time = time.time()
                opened = not reader.is_connected()
                if opened:
                    reader.connect()

                try:
                    graph = SchemaModelBuilder(reader, self.config.generator).build()
                    relationships = RelationshipInferenceEngine(graph).infer()
                    descriptors = DescriptorAssembler(
                        graph, package_name=self.config.generator.package_name
                    ).assemble(relationships)
                    uses_returning = reader.uses_returning()
                finally:
                    if opened:
                        reader.disconnect()

                duration_ms = round((time.time() - start_time) * 1000, 2)
                ctx['tables'] = len(graph)
                ctx['to_one'] = sum(len(t.to_one) for t in descriptors.tables)
                ctx['to_many'] = sum(len(t.to_many) for t in descriptors.tables)

        return GenerationResult(
            graph=graph,
            descriptors=descriptors,
            uses_returning=uses_returning,
            duration_ms=duration_ms,
            run_id=run_id,
        )


def generate(config: SystemConfig, connection: Any = None) -> GenerationResult:
    """
    Convenience function for a single generation run

    Args:
        config: System configuration
        connection: Optional live DB-API connection; it is left open

    Returns:
        GenerationResult with the schema graph and its descriptors
    """
    reader = create_reader(config.database, connection=connection)
    return GenerationPipeline(config, reader=reader).run()
