"""Ancestor population ahead of generating rows for a dependent table."""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from .assembler import RowAssembler
from .exceptions import SchemaNotFoundError, UnsatisfiableDependencyError
from .inserter import DataInserter
from .metadata import MetadataProvider
from .models import ForeignKeyEdge, GenerationConfig

logger = logging.getLogger(__name__)


@dataclass
class ResolutionState:
    """Book-keeping for one top-level ensure_populated call."""
    root: str
    visited: Set[str] = field(default_factory=set)
    seeded: Dict[str, int] = field(default_factory=dict)
    seed_order: List[str] = field(default_factory=list)


class DependencyResolver:
    """Makes sure every table reachable through outgoing foreign keys has rows.

    Ancestors are processed depth-first: an underpopulated parent first gets
    its own ancestors resolved, then receives a seed batch, so that every
    row written can reference committed parent rows. The visited set of a
    ResolutionState stops diamond and cyclic graphs from being walked twice.
    """

    def __init__(self, metadata: MetadataProvider, assembler: RowAssembler,
                 inserter: DataInserter, config: Optional[GenerationConfig] = None):
        self.metadata = metadata
        self.assembler = assembler
        self.inserter = inserter
        self.config = config or GenerationConfig()

    def ensure_populated(self, table_name: str, min_rows: Optional[int] = None) -> ResolutionState:
        """Seed every underpopulated ancestor of ``table_name``."""
        min_rows = min_rows or self.config.min_parent_rows
        state = ResolutionState(root=table_name)
        known_tables = set(self.metadata.list_tables())

        logger.info(f"Resolving dependencies of {table_name} (min rows per parent: {min_rows})")
        self._resolve_ancestors(table_name, state, known_tables, min_rows)

        if state.seeded:
            logger.info(f"Seeded ancestors of {table_name}: {state.seeded}")
        return state

    def _resolve_ancestors(self, table_name: str, state: ResolutionState,
                           known_tables: Set[str], min_rows: int) -> None:
        state.visited.add(table_name)
        relations = self.metadata.get_relations(table_name)

        for edge in relations.outgoing:
            parent = edge.target_table
            if parent not in known_tables:
                raise SchemaNotFoundError(
                    f"Foreign key {edge.constraint_name} on {table_name}.{edge.source_column} "
                    f"references missing table '{parent}'",
                    table=table_name,
                )

            if edge.is_self_reference:
                self._check_self_reference(edge)
                continue

            if parent in state.visited:
                logger.debug(f"Skipping {parent}: already handled in this call")
                continue

            current = self.metadata.count_rows(parent)
            if current >= min_rows:
                state.visited.add(parent)
                continue

            logger.info(f"Parent table {parent} has {current} rows, needs {min_rows}")
            self._resolve_ancestors(parent, state, known_tables, min_rows)
            self._seed(parent, max(self.config.seed_rows, min_rows - current), state)

    def _check_self_reference(self, edge: ForeignKeyEdge) -> None:
        """A self-reference needs an existing row unless the column accepts NULL."""
        table_name = edge.source_table
        column = next(
            (c for c in self.metadata.describe_table(table_name) if c.name == edge.source_column),
            None,
        )
        if column is None or column.is_nullable:
            return

        if self.metadata.count_rows(table_name) == 0:
            raise UnsatisfiableDependencyError(
                f"Cannot seed {table_name}: non-nullable self-reference "
                f"{edge.source_column} -> {edge.target_column} on an empty table",
                table=table_name,
            )

    def _seed(self, table_name: str, count: int, state: ResolutionState) -> None:
        logger.info(f"Seeding {count} rows into ancestor table {table_name}")
        table = self.metadata.get_table_metadata(table_name)
        rows = self.assembler.generate_rows(table, count)
        result = self.inserter.insert_rows(table_name, rows)

        state.seeded[table_name] = state.seeded.get(table_name, 0) + result.affected_rows
        state.seed_order.append(table_name)
