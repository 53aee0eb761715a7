"""Test data generation, schema diagrams and the catalog lookups around them."""

import logging
from typing import Any, Dict, List, Optional

from .assembler import RowAssembler
from .database import DatabaseConnection
from .dependency_resolver import DependencyResolver
from .exceptions import InvalidArgumentError
from .graph import GraphBuilder
from .inserter import DataInserter
from .metadata import MetadataProvider
from .models import (
    ColumnDescriptor, GenerationConfig, GenerationResult, IndexDescriptor, SchemaGraph,
    TableRelations, TableSummary
)
from .synthesizer import ValueSynthesizer


logger = logging.getLogger(__name__)


class SchemaSeedService:
    """Wires the generation pipeline to one database connection."""

    def __init__(self, db_connection: DatabaseConnection, config: Optional[GenerationConfig] = None):
        self.db_connection = db_connection
        self.config = config or GenerationConfig()

        self.metadata = MetadataProvider(db_connection)
        self.synthesizer = ValueSynthesizer(self.config)
        self.assembler = RowAssembler(db_connection, self.synthesizer, self.config)
        self.inserter = DataInserter(db_connection, self.config)
        self.resolver = DependencyResolver(self.metadata, self.assembler, self.inserter, self.config)
        self.graph_builder = GraphBuilder(self.metadata)

    def generate_test_data(self, table: str, count: Any) -> GenerationResult:
        """Populate ancestors as needed, then insert ``count`` rows into ``table``."""
        self._validate_row_request(table, count)

        # Fails with NotFoundError before anything is written
        self.metadata.describe_table(table)

        state = self.resolver.ensure_populated(table)

        table_metadata = self.metadata.get_table_metadata(table)
        rows = self.assembler.generate_rows(table_metadata, count)
        result = self.inserter.insert_rows(table, rows)

        logger.info(f"Generated {result.affected_rows} rows for {table}")
        return GenerationResult(
            table=table,
            inserted=result.affected_rows,
            rows=rows,
            seeded=dict(state.seeded),
        )

    def generate_schema_diagram(self) -> SchemaGraph:
        """Build the node/edge graph of all catalog tables."""
        return self.graph_builder.build_schema_graph()

    def list_tables(self) -> List[str]:
        return self.metadata.list_tables()

    def describe_table(self, table: str) -> List[ColumnDescriptor]:
        return self.metadata.describe_table(table)

    def table_relations(self, table: str) -> TableRelations:
        return self.metadata.get_relations(table)

    def sample_rows(self, table: str, count: Any) -> List[Dict[str, Any]]:
        """Read up to ``count`` existing rows of ``table``."""
        self._validate_row_request(table, count)
        return self.metadata.sample_rows(table, count)

    def summarize_table(self, table: str) -> TableSummary:
        return self.metadata.summarize_table(table)

    def list_indexes(self, table: str) -> List[IndexDescriptor]:
        return self.metadata.list_indexes(table)

    def _validate_row_request(self, table: Any, count: Any) -> None:
        if not isinstance(table, str) or not table.strip():
            raise InvalidArgumentError("A table name is required")

        if isinstance(count, bool) or not isinstance(count, int):
            raise InvalidArgumentError(f"Row count must be an integer, got {count!r}", table=table)

        if not 1 <= count <= self.config.max_rows:
            raise InvalidArgumentError(
                f"Row count must be between 1 and {self.config.max_rows}, got {count}",
                table=table,
            )
