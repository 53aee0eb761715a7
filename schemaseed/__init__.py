"""
JaySoft-SchemaSeed - Foreign-key aware synthetic test data for SQL databases.

This package provides tools to:
- Inspect tables, columns and foreign-key relationships from the live catalog
- Generate realistic rows whose foreign keys point at committed parent rows
- Populate empty ancestor tables automatically before a dependent table
- Export a node/edge schema graph for visualization
"""

__version__ = "1.0.0"
__author__ = "JaySoft Development"
__email__ = "info@jaysoft.dev"

from schemaseed.core.database import DatabaseConnection, DatabaseConfig
from schemaseed.core.models import GenerationConfig
from schemaseed.core.service import SchemaSeedService
from schemaseed.tools import ToolRegistry

__all__ = [
    "DatabaseConnection",
    "DatabaseConfig",
    "GenerationConfig",
    "SchemaSeedService",
    "ToolRegistry",
]
