"""Data models for catalog metadata, generation requests and schema graphs."""

from typing import List, Dict, Any, Optional, Tuple
from enum import Enum
from dataclasses import dataclass, field
from pydantic import BaseModel, Field


class ColumnCategory(Enum):
    """Type categories that drive value synthesis."""
    TEXT = "text"
    INTEGER = "integer"
    NARROW_INTEGER = "narrow_integer"
    DECIMAL = "decimal"
    DATE = "date"
    DATETIME = "datetime"
    TIME = "time"
    BOOLEAN = "boolean"
    JSON = "json"
    ENUM = "enum"
    UUID = "uuid"
    YEAR = "year"
    BIT = "bit"
    OTHER = "other"


class KeyRole(Enum):
    """Key role of a column as reported by the catalog."""
    NONE = "none"
    PRIMARY = "primary"
    FOREIGN = "foreign"


def categorize_data_type(data_type: str) -> ColumnCategory:
    """Map a catalog data type name to a ColumnCategory."""
    type_name = (data_type or "").lower()

    # Exact names first; they would otherwise fall through to OTHER
    if type_name == "uuid":
        return ColumnCategory.UUID
    elif type_name == "year":
        return ColumnCategory.YEAR
    elif type_name in ("bit", "varbit"):
        return ColumnCategory.BIT

    # Order matters: tinyint before int, datetime/timestamp before date and time
    if "tinyint" in type_name:
        return ColumnCategory.NARROW_INTEGER
    elif "bool" in type_name:
        return ColumnCategory.BOOLEAN
    elif any(t in type_name for t in ["interval", "point"]):
        return ColumnCategory.OTHER
    elif any(t in type_name for t in ["int", "serial"]):
        return ColumnCategory.INTEGER
    elif any(t in type_name for t in ["decimal", "numeric", "float", "double", "real", "money"]):
        return ColumnCategory.DECIMAL
    elif any(t in type_name for t in ["timestamp", "datetime"]):
        return ColumnCategory.DATETIME
    elif "date" in type_name:
        return ColumnCategory.DATE
    elif "time" in type_name:
        return ColumnCategory.TIME
    elif "json" in type_name:
        return ColumnCategory.JSON
    elif "enum" in type_name:
        return ColumnCategory.ENUM
    elif any(t in type_name for t in ["char", "text", "clob", "string"]):
        return ColumnCategory.TEXT
    return ColumnCategory.OTHER


@dataclass(frozen=True)
class ColumnDescriptor:
    """Immutable snapshot of one column's catalog definition."""
    name: str
    data_type: str
    category: Optional[ColumnCategory] = None
    is_nullable: bool = True
    key_role: KeyRole = KeyRole.NONE
    default: Optional[Any] = None
    max_length: Optional[int] = None
    precision: Optional[int] = None
    scale: Optional[int] = None
    is_auto_generated: bool = False
    display_width: Optional[int] = None
    enum_values: Tuple[str, ...] = ()

    def __post_init__(self):
        if self.category is None:
            object.__setattr__(self, "category", categorize_data_type(self.data_type))

    @property
    def extra(self) -> str:
        """Catalog ``EXTRA`` field."""
        return "auto_increment" if self.is_auto_generated else ""

    @property
    def is_primary_key(self) -> bool:
        return self.key_role == KeyRole.PRIMARY

    def to_dict(self) -> Dict[str, Any]:
        """Render using catalog field naming."""
        column_key = {KeyRole.PRIMARY: "PRI", KeyRole.FOREIGN: "MUL"}.get(self.key_role, "")
        return {
            "column_name": self.name,
            "data_type": self.data_type,
            "is_nullable": "YES" if self.is_nullable else "NO",
            "column_key": column_key,
            "column_default": self.default,
            "extra": self.extra,
            "character_maximum_length": self.max_length,
            "numeric_precision": self.precision,
            "numeric_scale": self.scale,
        }


@dataclass(frozen=True)
class ForeignKeyEdge:
    """One column pair of a foreign-key constraint."""
    source_table: str
    source_column: str
    target_table: str
    target_column: str
    constraint_name: str

    @property
    def is_self_reference(self) -> bool:
        return self.source_table == self.target_table

    def to_dict(self) -> Dict[str, Any]:
        return {
            "table_name": self.source_table,
            "column_name": self.source_column,
            "referenced_table_name": self.target_table,
            "referenced_column_name": self.target_column,
            "constraint_name": self.constraint_name,
        }


@dataclass
class TableRelations:
    """Outgoing and incoming foreign keys of a table."""
    outgoing: List[ForeignKeyEdge] = field(default_factory=list)
    incoming: List[ForeignKeyEdge] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "outgoing": [edge.to_dict() for edge in self.outgoing],
            "incoming": [edge.to_dict() for edge in self.incoming],
        }


@dataclass
class TableMetadata:
    """Columns and relationships of one table."""
    name: str
    columns: List[ColumnDescriptor] = field(default_factory=list)
    outgoing: List[ForeignKeyEdge] = field(default_factory=list)
    incoming: List[ForeignKeyEdge] = field(default_factory=list)

    def get_column(self, name: str) -> Optional[ColumnDescriptor]:
        """Get column by name."""
        for column in self.columns:
            if column.name == name:
                return column
        return None

    def get_foreign_key_columns(self) -> List[str]:
        """Source columns of all outgoing edges, in edge order."""
        fk_columns = []
        for edge in self.outgoing:
            if edge.source_column not in fk_columns:
                fk_columns.append(edge.source_column)
        return fk_columns

    def get_foreign_key_groups(self) -> Dict[str, List[ForeignKeyEdge]]:
        """Outgoing edges grouped by constraint, preserving order."""
        groups: Dict[str, List[ForeignKeyEdge]] = {}
        for edge in self.outgoing:
            groups.setdefault(edge.constraint_name, []).append(edge)
        return groups


class GenerationRequest(BaseModel):
    """Arguments of a test data generation call."""

    table: str = Field(..., min_length=1, description="Table to populate")
    count: int = Field(..., strict=True, description="Number of rows to generate")


class TableRequest(BaseModel):
    """Arguments of a single-table catalog lookup."""

    table: str = Field(..., min_length=1, description="Table to inspect")


class SampleRequest(BaseModel):
    """Arguments of a row sampling call."""

    table: str = Field(..., min_length=1, description="Table to read from")
    count: int = Field(..., strict=True, description="Number of rows to return")


@dataclass
class IndexDescriptor:
    """One index of a table, the primary key included."""
    name: str
    columns: List[str] = field(default_factory=list)
    is_unique: bool = False
    is_primary: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "columns": self.columns,
            "unique": self.is_unique,
            "primary": self.is_primary,
        }


@dataclass
class ColumnSummary:
    """Value statistics of one column."""
    name: str
    data_type: str
    sample_values: List[Any] = field(default_factory=list)
    null_count: int = 0
    distinct_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.data_type,
            "sampleValues": self.sample_values,
            "nullCount": self.null_count,
            "uniqueCount": self.distinct_count,
        }


@dataclass
class TableSummary:
    """Row count plus per-column statistics of a table."""
    table: str
    row_count: int
    columns: List[ColumnSummary] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "table": self.table,
            "rowCount": self.row_count,
            "columns": [column.to_dict() for column in self.columns],
        }


@dataclass
class GenerationResult:
    """Outcome of a test data generation call."""
    table: str
    inserted: int
    rows: List[Dict[str, Any]] = field(default_factory=list)
    seeded: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"inserted": self.inserted, "rows": self.rows}


@dataclass
class InsertResult:
    """Outcome of a bulk insert."""
    affected_rows: int = 0
    insert_id: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {"affectedRows": self.affected_rows, "insertId": self.insert_id}


@dataclass
class SchemaGraphColumn:
    name: str
    type: str
    is_primary_key: bool = False
    is_foreign_key: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type,
            "isPrimaryKey": self.is_primary_key,
            "isForeignKey": self.is_foreign_key,
        }


@dataclass
class SchemaGraphNode:
    id: str
    name: str
    columns: List[SchemaGraphColumn] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "columns": [column.to_dict() for column in self.columns],
        }


@dataclass
class SchemaGraphEdge:
    from_table: str
    to_table: str
    from_column: str
    to_column: str
    label: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "from": self.from_table,
            "to": self.to_table,
            "fromColumn": self.from_column,
            "toColumn": self.to_column,
            "label": self.label,
        }


@dataclass
class SchemaGraph:
    """Visualization-ready node/edge view of the schema."""
    nodes: List[SchemaGraphNode] = field(default_factory=list)
    edges: List[SchemaGraphEdge] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "edges": [edge.to_dict() for edge in self.edges],
        }


class GenerationConfig(BaseModel):
    """Configuration for test data generation."""

    seed_rows: int = Field(
        default=10, ge=1, description="Rows written into an underpopulated ancestor table"
    )
    min_parent_rows: int = Field(
        default=1, ge=1, description="Row count below which an ancestor table is seeded"
    )
    max_rows: int = Field(
        default=1000, ge=1, description="Upper bound for rows requested in one call"
    )
    null_probability: float = Field(
        default=0.1, ge=0.0, le=1.0, description="Probability of NULL for nullable columns"
    )
    fk_sample_pool_size: int = Field(
        default=1000, ge=1, description="Referenced values fetched per foreign key and batch"
    )
    batch_size: int = Field(default=500, ge=1, description="Rows per INSERT statement")
    default_text_length: int = Field(
        default=255, ge=1, description="Length bound for text columns without a declared maximum"
    )
    seed: Optional[int] = Field(default=None, description="Random seed for reproducible data")
    show_progress: bool = Field(default=False, description="Show a progress bar while inserting")
