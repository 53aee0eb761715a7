"""Database connection and management utilities."""

import logging
from typing import Dict, Any, Optional
from sqlalchemy import create_engine, event, Engine, text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError
from pydantic import BaseModel, Field, ValidationInfo, field_validator


logger = logging.getLogger(__name__)


class DatabaseConfig(BaseModel):
    """Configuration model for database connections."""

    driver: str = Field(default="mysql", description="Database driver")
    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=3306, description="Database port")
    database: str = Field(default="", description="Database name (file path for SQLite)")
    username: str = Field(default="", description="Database username")
    password: str = Field(default="", description="Database password")
    ssl_mode: Optional[str] = Field(default=None, description="SSL mode")
    charset: str = Field(default="utf8mb4", description="Character set")

    @field_validator("driver")
    @classmethod
    def validate_driver(cls, v):
        supported_drivers = ["mysql", "postgresql", "sqlite"]
        if v not in supported_drivers:
            raise ValueError(f"Unsupported driver: {v}. Supported: {supported_drivers}")
        return v

    @field_validator("port")
    @classmethod
    def validate_port(cls, v, info: ValidationInfo):
        # SQLite doesn't use ports
        if info.data.get("driver") == "sqlite":
            return v
        if not 1 <= v <= 65535:
            raise ValueError("Port must be between 1 and 65535")
        return v


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    """SQLite only enforces foreign keys when asked to, per connection."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys = ON")
    cursor.close()


class DatabaseConnection:
    """Manages database connections and provides utilities for database operations."""

    def __init__(self, config: DatabaseConfig):
        """Initialize database connection with configuration."""
        self.config = config
        self._engine: Optional[Engine] = None

    def connect(self) -> None:
        """Establish connection to the database."""
        try:
            connection_url = self._build_connection_url()
            logger.info(f"Connecting to {self.config.driver} database {self.config.database!r}")

            engine_kwargs = {
                "echo": False,
                "pool_pre_ping": True,
                "connect_args": self._get_connect_args()
            }
            if self.config.driver != "sqlite":
                engine_kwargs["pool_recycle"] = 3600

            self._engine = create_engine(connection_url, **engine_kwargs)

            if self.config.driver == "sqlite":
                event.listen(self._engine, "connect", _enable_sqlite_foreign_keys)

            # Test connection
            with self._engine.connect() as conn:
                conn.execute(text("SELECT 1"))
                logger.info("Database connection established successfully")

        except SQLAlchemyError as e:
            logger.error(f"Failed to connect to database: {e}")
            raise ConnectionError(f"Database connection failed: {e}")

    def _build_connection_url(self) -> str:
        """Build SQLAlchemy connection URL from config."""
        if self.config.driver == "mysql":
            driver_name = "mysql+pymysql"
        elif self.config.driver == "postgresql":
            driver_name = "postgresql+psycopg2"
        elif self.config.driver == "sqlite":
            return f"sqlite:///{self.config.database}"
        else:
            raise ValueError(f"Unsupported driver: {self.config.driver}")

        base_url = f"{driver_name}://{self.config.username}:{self.config.password}@{self.config.host}:{self.config.port}"

        if self.config.database:
            return f"{base_url}/{self.config.database}"
        else:
            # Server-level connection
            return base_url

    def _get_connect_args(self) -> Dict[str, Any]:
        """Get driver-specific connection arguments."""
        args = {}

        if self.config.driver == "mysql":
            args["charset"] = self.config.charset
            if self.config.ssl_mode:
                args["ssl_mode"] = self.config.ssl_mode
        elif self.config.driver == "postgresql":
            if self.config.ssl_mode:
                args["sslmode"] = self.config.ssl_mode

        return args

    @property
    def engine(self) -> Engine:
        """Get the SQLAlchemy engine."""
        if self._engine is None:
            raise RuntimeError("Database not connected. Call connect() first.")
        return self._engine

    def begin(self) -> Connection:
        """Open a connection with a transaction that commits on exit."""
        return self.engine.begin()

    def execute_query(self, query: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Execute a raw SQL query and return results."""
        try:
            with self.engine.connect() as conn:
                result = conn.execute(text(query), params or {})
                return result.fetchall()
        except SQLAlchemyError as e:
            logger.error(f"Query execution failed: {e}")
            raise

    def close(self) -> None:
        """Close database connection and cleanup resources."""
        if self._engine:
            self._engine.dispose()
            self._engine = None
            logger.info("Database connection closed")

    def quote_identifier(self, identifier: str) -> str:
        """Quote table or column name properly based on database type."""
        if self.config.driver == "mysql":
            return "`" + identifier.replace("`", "``") + "`"
        return '"' + identifier.replace('"', '""') + '"'

    def random_function(self) -> str:
        """SQL function returning a random number, for ORDER BY sampling."""
        if self.config.driver == "mysql":
            return "RAND()"
        return "RANDOM()"

    def __enter__(self):
        """Context manager entry."""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()


def create_database_connection(
    database: str,
    driver: str = "mysql",
    host: str = "localhost",
    port: Optional[int] = None,
    username: str = "",
    password: str = "",
    **kwargs
) -> DatabaseConnection:
    """Factory function to create a database connection."""
    config = DatabaseConfig(
        host=host,
        port=port if port is not None else get_default_port(driver),
        database=database,
        username=username,
        password=password,
        driver=driver,
        **kwargs
    )
    return DatabaseConnection(config)


def get_default_port(driver: str) -> int:
    """Get default port for database driver."""
    defaults = {
        'mysql': 3306,
        'postgresql': 5432,
        'sqlite': 0
    }
    return defaults.get(driver, 0)
