"""Error taxonomy for schema introspection and test data generation."""

from typing import Any, Dict, Optional


class SchemaSeedError(Exception):
    """Base exception for all SchemaSeed errors."""

    code = "SCHEMASEED_ERROR"

    def __init__(self, message: str, table: Optional[str] = None):
        self.message = message
        self.table = table
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the ``{code, message}`` shape used by tool responses."""
        return {"code": self.code, "message": self.message}


class NotFoundError(SchemaSeedError):
    """A table or column is absent from the catalog."""

    code = "NOT_FOUND"


class SchemaNotFoundError(NotFoundError):
    """A foreign key points at a table the catalog does not contain."""


class UnsatisfiableDependencyError(SchemaSeedError):
    """A required ancestor cannot be seeded."""

    code = "UNSATISFIABLE_DEPENDENCY"


class ConstraintViolationError(SchemaSeedError):
    """The database rejected a batch (unique, not-null or foreign key)."""

    code = "CONSTRAINT_VIOLATION"


class InvalidArgumentError(SchemaSeedError):
    """An operation was called with an out-of-range or missing argument."""

    code = "INVALID_ARGUMENT"


class UnknownToolError(SchemaSeedError):
    """A tool name that the registry does not know."""

    code = "METHOD_NOT_FOUND"
