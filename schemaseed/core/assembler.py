"""Row assembly: sampled foreign keys plus synthesized scalar values."""

import logging
import random
from typing import Any, Dict, List, Optional, Tuple

from .database import DatabaseConnection
from .exceptions import UnsatisfiableDependencyError
from .models import ForeignKeyEdge, GenerationConfig, TableMetadata
from .synthesizer import NO_VALUE, ValueSynthesizer


logger = logging.getLogger(__name__)


class RowAssembler:
    """Builds a batch of rows for one table.

    Foreign-key columns are filled from values already committed in the
    referenced table; every other column comes from the ValueSynthesizer.
    Columns belonging to one multi-column constraint are taken from the
    same referenced row.
    """

    def __init__(self, db_connection: DatabaseConnection, synthesizer: ValueSynthesizer,
                 config: Optional[GenerationConfig] = None):
        self.db_connection = db_connection
        self.synthesizer = synthesizer
        self.config = config or synthesizer.config

    def generate_rows(self, table: TableMetadata, count: int) -> List[Dict[str, Any]]:
        """Generate ``count`` rows for a table without persisting them."""
        logger.info(f"Generating {count} rows for table: {table.name}")

        fk_groups = table.get_foreign_key_groups()
        pools = {
            constraint: self._fetch_reference_pool(edges)
            for constraint, edges in fk_groups.items()
        }

        rows = []
        for _ in range(count):
            fk_values: Dict[str, Any] = {}
            for constraint, edges in fk_groups.items():
                fk_values.update(self._pick_reference(table, edges, pools[constraint]))

            row = {}
            for column in table.columns:
                if column.is_auto_generated:
                    continue
                if column.name in fk_values:
                    row[column.name] = fk_values[column.name]
                    continue

                value = self.synthesizer.synthesize(column)
                if value is not NO_VALUE:
                    row[column.name] = value
            rows.append(row)

        logger.debug(f"Assembled {len(rows)} rows for {table.name}")
        return rows

    def _fetch_reference_pool(self, edges: List[ForeignKeyEdge]) -> List[Tuple[Any, ...]]:
        """Fetch a random sample of committed referenced values."""
        target_table = edges[0].target_table
        quoted_table = self.db_connection.quote_identifier(target_table)
        quoted_columns = [self.db_connection.quote_identifier(edge.target_column) for edge in edges]
        not_null = " AND ".join(f"{column} IS NOT NULL" for column in quoted_columns)

        query = (
            f"SELECT {', '.join(quoted_columns)} FROM {quoted_table} WHERE {not_null} "
            f"ORDER BY {self.db_connection.random_function()} "
            f"LIMIT {int(self.config.fk_sample_pool_size)}"
        )
        result = self.db_connection.execute_query(query)
        pool = [tuple(row) for row in result] if result else []
        logger.debug(f"Sampled {len(pool)} reference values from {target_table}")
        return pool

    def _pick_reference(self, table: TableMetadata, edges: List[ForeignKeyEdge],
                        pool: List[Tuple[Any, ...]]) -> Dict[str, Any]:
        """Choose one referenced row and map it onto the source columns."""
        if pool:
            chosen = random.choice(pool)
            return {edge.source_column: chosen[index] for index, edge in enumerate(edges)}

        for edge in edges:
            column = table.get_column(edge.source_column)
            if column is not None and not column.is_nullable:
                raise UnsatisfiableDependencyError(
                    f"Cannot populate {table.name}.{edge.source_column}: "
                    f"referenced table '{edge.target_table}' has no rows",
                    table=table.name,
                )
        return {edge.source_column: None for edge in edges}
