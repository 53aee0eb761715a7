"""Catalog introspection: columns, foreign keys and row counts."""

import logging
from typing import Any, Dict, List, Optional, Set
from sqlalchemy import inspect
from sqlalchemy.engine import Inspector
from sqlalchemy.exc import SQLAlchemyError

from .database import DatabaseConnection
from .exceptions import NotFoundError
from .models import (
    ColumnCategory, ColumnDescriptor, ColumnSummary, ForeignKeyEdge, IndexDescriptor, KeyRole,
    TableMetadata, TableRelations, TableSummary
)


logger = logging.getLogger(__name__)


class MetadataProvider:
    """Reads table definitions from the live catalog.

    Nothing is cached between calls: each public method builds a new
    inspector, so schema changes made between two calls are always seen.
    """

    def __init__(self, db_connection: DatabaseConnection):
        """Initialize with database connection."""
        self.db_connection = db_connection

    def _inspector(self) -> Inspector:
        return inspect(self.db_connection.engine)

    def list_tables(self) -> List[str]:
        """List table names in catalog order."""
        table_names = self._inspector().get_table_names()
        logger.debug(f"Catalog lists {len(table_names)} tables: {table_names}")
        return list(table_names)

    def describe_table(self, table_name: str) -> List[ColumnDescriptor]:
        """Get ordered column descriptors for a table."""
        inspector = self._inspector()
        self._require_table(inspector, table_name)
        return self._read_columns(inspector, table_name)

    def get_relations(self, table_name: str) -> TableRelations:
        """Get outgoing and incoming foreign keys for a table."""
        inspector = self._inspector()
        self._require_table(inspector, table_name)
        return self._read_relations(inspector, table_name)

    def get_table_metadata(self, table_name: str) -> TableMetadata:
        """Get columns and relations of a table from one catalog read."""
        inspector = self._inspector()
        self._require_table(inspector, table_name)
        relations = self._read_relations(inspector, table_name)
        return TableMetadata(
            name=table_name,
            columns=self._read_columns(inspector, table_name),
            outgoing=relations.outgoing,
            incoming=relations.incoming,
        )

    def count_rows(self, table_name: str) -> int:
        """Get the current row count of a table."""
        quoted_table = self.db_connection.quote_identifier(table_name)
        result = self.db_connection.execute_query(f"SELECT COUNT(*) FROM {quoted_table}")
        return int(result[0][0]) if result else 0

    def sample_rows(self, table_name: str, count: int) -> List[Dict[str, Any]]:
        """Read up to ``count`` existing rows of a table."""
        self._require_table(self._inspector(), table_name)
        quoted_table = self.db_connection.quote_identifier(table_name)
        result = self.db_connection.execute_query(
            f"SELECT * FROM {quoted_table} LIMIT :limit", {"limit": count}
        )
        return [dict(row._mapping) for row in result]

    def summarize_table(self, table_name: str, top_values: int = 5) -> TableSummary:
        """Row count plus most frequent values, NULL and distinct counts per column."""
        columns = self.describe_table(table_name)
        quoted_table = self.db_connection.quote_identifier(table_name)
        summary = TableSummary(table=table_name, row_count=self.count_rows(table_name))

        for column in columns:
            quoted_column = self.db_connection.quote_identifier(column.name)
            frequent = self.db_connection.execute_query(
                f"SELECT {quoted_column}, COUNT(*) AS freq FROM {quoted_table} "
                f"WHERE {quoted_column} IS NOT NULL GROUP BY {quoted_column} "
                f"ORDER BY freq DESC, {quoted_column} LIMIT :limit",
                {"limit": top_values},
            )
            counts = self.db_connection.execute_query(
                f"SELECT COUNT(*) - COUNT({quoted_column}), COUNT(DISTINCT {quoted_column}) "
                f"FROM {quoted_table}"
            )
            summary.columns.append(ColumnSummary(
                name=column.name,
                data_type=column.data_type,
                sample_values=[row[0] for row in frequent],
                null_count=int(counts[0][0] or 0),
                distinct_count=int(counts[0][1] or 0),
            ))

        logger.debug(f"Summarized {table_name}: {summary.row_count} rows, {len(columns)} columns")
        return summary

    def list_indexes(self, table_name: str) -> List[IndexDescriptor]:
        """List the primary key and secondary indexes of a table."""
        inspector = self._inspector()
        self._require_table(inspector, table_name)

        indexes = []
        pk = inspector.get_pk_constraint(table_name) or {}
        if pk.get("constrained_columns"):
            indexes.append(IndexDescriptor(
                name=pk.get("name") or "PRIMARY",
                columns=list(pk["constrained_columns"]),
                is_unique=True,
                is_primary=True,
            ))

        for index in inspector.get_indexes(table_name):
            indexes.append(IndexDescriptor(
                name=index.get("name") or "",
                # Expression indexes report None for their computed parts
                columns=[name for name in index.get("column_names") or [] if name],
                is_unique=bool(index.get("unique")),
            ))
        return indexes

    def _require_table(self, inspector: Inspector, table_name: str) -> None:
        if not table_name or not inspector.has_table(table_name):
            raise NotFoundError(f"Table '{table_name}' does not exist", table=table_name)

    def _read_columns(self, inspector: Inspector, table_name: str) -> List[ColumnDescriptor]:
        pk = inspector.get_pk_constraint(table_name) or {}
        pk_columns = list(pk.get("constrained_columns") or [])
        fk_columns: Set[str] = {
            column
            for fk in inspector.get_foreign_keys(table_name)
            for column in fk.get("constrained_columns") or []
        }

        columns = []
        for column in inspector.get_columns(table_name):
            sa_type = column["type"]
            data_type = self._type_name(sa_type)
            enum_values = tuple(getattr(sa_type, "enums", None) or ())
            # MySQL SET columns accept any single member
            if data_type == "set":
                enum_values = tuple(getattr(sa_type, "values", None) or ())

            if column["name"] in pk_columns:
                key_role = KeyRole.PRIMARY
            elif column["name"] in fk_columns:
                key_role = KeyRole.FOREIGN
            else:
                key_role = KeyRole.NONE

            columns.append(ColumnDescriptor(
                name=column["name"],
                data_type=data_type,
                category=ColumnCategory.ENUM if enum_values else None,
                is_nullable=bool(column.get("nullable", True)),
                key_role=key_role,
                default=column.get("default"),
                max_length=self._int_attribute(sa_type, "length"),
                precision=self._int_attribute(sa_type, "precision"),
                scale=self._int_attribute(sa_type, "scale"),
                is_auto_generated=self._is_auto_generated(inspector, column, pk_columns, data_type),
                display_width=self._int_attribute(sa_type, "display_width"),
                enum_values=enum_values,
            ))

        return columns

    def _read_relations(self, inspector: Inspector, table_name: str) -> TableRelations:
        outgoing = self._read_outgoing_edges(inspector, table_name)

        # The catalog only reports foreign keys per owning table
        incoming = []
        for other_table in inspector.get_table_names():
            for edge in self._read_outgoing_edges(inspector, other_table):
                if edge.target_table == table_name:
                    incoming.append(edge)

        return TableRelations(outgoing=outgoing, incoming=incoming)

    def _read_outgoing_edges(self, inspector: Inspector, table_name: str) -> List[ForeignKeyEdge]:
        edges = []
        for fk in inspector.get_foreign_keys(table_name):
            target_table = fk.get("referred_table")
            if not target_table:
                continue

            constrained_columns = fk.get("constrained_columns") or []
            referred_columns = fk.get("referred_columns") or []
            # SQLite reports unnamed constraints
            constraint_name = fk.get("name") or f"{table_name}_{'_'.join(constrained_columns)}_fkey"

            for index, source_column in enumerate(constrained_columns):
                target_column = referred_columns[index] if index < len(referred_columns) else "id"
                edges.append(ForeignKeyEdge(
                    source_table=table_name,
                    source_column=source_column,
                    target_table=target_table,
                    target_column=target_column,
                    constraint_name=constraint_name,
                ))
        return edges

    def _type_name(self, sa_type) -> str:
        """Base name of a reflected type, e.g. ``varchar`` for ``VARCHAR(50)``."""
        try:
            type_name = str(sa_type)
        except SQLAlchemyError:
            type_name = type(sa_type).__name__
        return type_name.split("(")[0].strip().lower()

    def _int_attribute(self, sa_type, name: str) -> Optional[int]:
        value = getattr(sa_type, name, None)
        return value if isinstance(value, int) and not isinstance(value, bool) else None

    def _is_auto_generated(self, inspector: Inspector, column, pk_columns: List[str],
                           data_type: str) -> bool:
        if column.get("autoincrement") is True:
            return True
        if column.get("computed") or column.get("identity"):
            return True
        if "nextval(" in str(column.get("default") or "").lower():
            return True
        # INTEGER PRIMARY KEY is an alias for the SQLite rowid
        if inspector.dialect.name == "sqlite":
            return pk_columns == [column["name"]] and data_type == "integer"
        return False
