"""Named tool entry points over SchemaSeedService.

Each tool takes a JSON-like argument mapping and returns a JSON-ready
result, so the registry can sit behind any request/response gateway.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Type

from pydantic import BaseModel, ValidationError

from schemaseed.core.exceptions import InvalidArgumentError, UnknownToolError
from schemaseed.core.models import GenerationRequest, SampleRequest, TableRequest
from schemaseed.core.service import SchemaSeedService


logger = logging.getLogger(__name__)

TABLE_SCHEMA = {
    "type": "object",
    "properties": {
        "table": {"type": "string", "description": "Table name"},
    },
    "required": ["table"],
}


@dataclass
class ToolDefinition:
    """A callable tool with its advertised input schema."""
    name: str
    description: str
    input_schema: Dict[str, Any]
    handler: Callable[[Optional[BaseModel]], Any]
    request_model: Optional[Type[BaseModel]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


class ToolRegistry:
    """Dispatches tool calls by name to the service."""

    def __init__(self, service: SchemaSeedService):
        self.service = service
        max_rows = service.config.max_rows

        definitions = [
            ToolDefinition(
                name="mysql_generateTestData",
                description="Generate test data for a table, populating referenced tables first",
                input_schema={
                    "type": "object",
                    "properties": {
                        "table": {"type": "string", "description": "Table name"},
                        "count": {
                            "type": "integer",
                            "description": "Number of rows to generate",
                            "minimum": 1,
                            "maximum": max_rows,
                        },
                    },
                    "required": ["table", "count"],
                },
                handler=self._generate_test_data,
                request_model=GenerationRequest,
            ),
            ToolDefinition(
                name="mysql_generateSchemaDiagram",
                description="Generate a node/edge graph of all tables and foreign keys",
                input_schema={"type": "object", "properties": {}},
                handler=self._generate_schema_diagram,
            ),
            ToolDefinition(
                name="mysql_listTables",
                description="List all tables in the database",
                input_schema={"type": "object", "properties": {}},
                handler=self._list_tables,
            ),
            ToolDefinition(
                name="mysql_describeTable",
                description="Describe the columns of a table",
                input_schema=TABLE_SCHEMA,
                handler=self._describe_table,
                request_model=TableRequest,
            ),
            ToolDefinition(
                name="mysql_tableRelations",
                description="Show outgoing and incoming foreign keys of a table",
                input_schema=TABLE_SCHEMA,
                handler=self._table_relations,
                request_model=TableRequest,
            ),
            ToolDefinition(
                name="mysql_sampleData",
                description="Return a sample of existing rows from a table",
                input_schema={
                    "type": "object",
                    "properties": {
                        "table": {"type": "string", "description": "Table name"},
                        "count": {
                            "type": "integer",
                            "description": "Number of rows to return",
                            "minimum": 1,
                            "maximum": max_rows,
                        },
                    },
                    "required": ["table", "count"],
                },
                handler=self._sample_data,
                request_model=SampleRequest,
            ),
            ToolDefinition(
                name="mysql_summarizeTable",
                description="Summarize a table: row count and per-column value statistics",
                input_schema=TABLE_SCHEMA,
                handler=self._summarize_table,
                request_model=TableRequest,
            ),
            ToolDefinition(
                name="mysql_listIndexes",
                description="List the indexes of a table",
                input_schema=TABLE_SCHEMA,
                handler=self._list_indexes,
                request_model=TableRequest,
            ),
        ]
        self._tools: Dict[str, ToolDefinition] = {tool.name: tool for tool in definitions}

    def list_tools(self) -> List[Dict[str, Any]]:
        """Describe every registered tool."""
        return [tool.to_dict() for tool in self._tools.values()]

    def call(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> Any:
        """Validate arguments and run a tool, returning a JSON-ready result."""
        tool = self._tools.get(name)
        if tool is None:
            raise UnknownToolError(f"Unknown tool: {name}")

        if arguments is None:
            arguments = {}
        if not isinstance(arguments, dict):
            raise InvalidArgumentError(
                f"Arguments for {name} must be an object, got {type(arguments).__name__}"
            )

        request = None
        if tool.request_model is not None:
            try:
                request = tool.request_model(**arguments)
            except ValidationError as e:
                details = "; ".join(
                    f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
                    for error in e.errors()
                )
                raise InvalidArgumentError(f"Invalid arguments for {name}: {details}") from e

        logger.debug(f"Calling tool {name} with {arguments}")
        return tool.handler(request)

    def _generate_test_data(self, request: GenerationRequest) -> Dict[str, Any]:
        return self.service.generate_test_data(request.table, request.count).to_dict()

    def _generate_schema_diagram(self, request: None) -> Dict[str, Any]:
        return self.service.generate_schema_diagram().to_dict()

    def _list_tables(self, request: None) -> List[str]:
        return self.service.list_tables()

    def _describe_table(self, request: TableRequest) -> List[Dict[str, Any]]:
        return [column.to_dict() for column in self.service.describe_table(request.table)]

    def _table_relations(self, request: TableRequest) -> Dict[str, Any]:
        return self.service.table_relations(request.table).to_dict()

    def _sample_data(self, request: SampleRequest) -> List[Dict[str, Any]]:
        return self.service.sample_rows(request.table, request.count)

    def _summarize_table(self, request: TableRequest) -> Dict[str, Any]:
        return self.service.summarize_table(request.table).to_dict()

    def _list_indexes(self, request: TableRequest) -> List[Dict[str, Any]]:
        return [index.to_dict() for index in self.service.list_indexes(request.table)]
