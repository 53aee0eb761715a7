"""Schema graph extraction for diagramming."""

import logging

from .metadata import MetadataProvider
from .models import SchemaGraph, SchemaGraphColumn, SchemaGraphEdge, SchemaGraphNode

logger = logging.getLogger(__name__)


class GraphBuilder:
    """Turns catalog metadata into nodes (tables) and edges (foreign keys)."""

    def __init__(self, metadata: MetadataProvider):
        self.metadata = metadata

    def build_schema_graph(self) -> SchemaGraph:
        """Build the graph in catalog listing order."""
        graph = SchemaGraph()

        for table_name in self.metadata.list_tables():
            table = self.metadata.get_table_metadata(table_name)
            fk_columns = set(table.get_foreign_key_columns())

            graph.nodes.append(SchemaGraphNode(
                id=table_name,
                name=table_name,
                columns=[
                    SchemaGraphColumn(
                        name=column.name,
                        type=column.data_type,
                        is_primary_key=column.is_primary_key,
                        is_foreign_key=column.name in fk_columns,
                    )
                    for column in table.columns
                ],
            ))

            for edge in table.outgoing:
                graph.edges.append(SchemaGraphEdge(
                    from_table=table_name,
                    to_table=edge.target_table,
                    from_column=edge.source_column,
                    to_column=edge.target_column,
                    label=edge.constraint_name,
                ))

        logger.info(f"Schema graph built: {len(graph.nodes)} nodes, {len(graph.edges)} edges")
        return graph
