"""Test configuration and fixtures for SchemaSeed tests."""

import pytest
import tempfile
import os
from unittest.mock import Mock
from sqlalchemy import text

from schemaseed.core.database import DatabaseConnection, DatabaseConfig, create_database_connection
from schemaseed.core.models import GenerationConfig


BLOG_SCHEMA = [
    """CREATE TABLE users (
        id INTEGER PRIMARY KEY,
        username VARCHAR(50) NOT NULL,
        email VARCHAR(100) NOT NULL,
        is_active BOOLEAN NOT NULL,
        created_at DATETIME
    )""",
    """CREATE TABLE posts (
        id INTEGER PRIMARY KEY,
        user_id INTEGER NOT NULL REFERENCES users(id),
        title VARCHAR(200) NOT NULL,
        body TEXT,
        published_at DATETIME
    )""",
    """CREATE TABLE comments (
        id INTEGER PRIMARY KEY,
        post_id INTEGER NOT NULL REFERENCES posts(id),
        author_id INTEGER REFERENCES users(id),
        content TEXT NOT NULL
    )""",
]

DIAMOND_SCHEMA = [
    "CREATE TABLE regions (id INTEGER PRIMARY KEY, name VARCHAR(40) NOT NULL)",
    """CREATE TABLE customers (
        id INTEGER PRIMARY KEY,
        region_id INTEGER NOT NULL REFERENCES regions(id),
        company VARCHAR(80)
    )""",
    """CREATE TABLE suppliers (
        id INTEGER PRIMARY KEY,
        region_id INTEGER NOT NULL REFERENCES regions(id),
        company VARCHAR(80)
    )""",
    """CREATE TABLE orders (
        id INTEGER PRIMARY KEY,
        customer_id INTEGER NOT NULL REFERENCES customers(id),
        supplier_id INTEGER NOT NULL REFERENCES suppliers(id),
        total DECIMAL(10, 2) NOT NULL
    )""",
]

# alpha.beta_id is nullable, beta.alpha_id is not
CYCLE_SCHEMA = [
    """CREATE TABLE alpha (
        id INTEGER PRIMARY KEY,
        beta_id INTEGER REFERENCES beta(id),
        label VARCHAR(20)
    )""",
    """CREATE TABLE beta (
        id INTEGER PRIMARY KEY,
        alpha_id INTEGER NOT NULL REFERENCES alpha(id),
        label VARCHAR(20)
    )""",
]

SELF_REFERENCE_SCHEMA = [
    """CREATE TABLE employees (
        id INTEGER PRIMARY KEY,
        manager_id INTEGER NOT NULL REFERENCES employees(id),
        name VARCHAR(60) NOT NULL
    )""",
    """CREATE TABLE categories (
        id INTEGER PRIMARY KEY,
        parent_id INTEGER REFERENCES categories(id),
        name VARCHAR(60) NOT NULL
    )""",
]

DANGLING_SCHEMA = [
    """CREATE TABLE orphans (
        id INTEGER PRIMARY KEY,
        ghost_id INTEGER NOT NULL REFERENCES ghosts(id)
    )""",
]

COMPOSITE_SCHEMA = [
    """CREATE TABLE stock (
        sku VARCHAR(10) NOT NULL,
        warehouse VARCHAR(10) NOT NULL,
        qty INTEGER,
        PRIMARY KEY (sku, warehouse)
    )""",
    """CREATE TABLE picks (
        id INTEGER PRIMARY KEY,
        sku VARCHAR(10) NOT NULL,
        warehouse VARCHAR(10) NOT NULL,
        FOREIGN KEY (sku, warehouse) REFERENCES stock(sku, warehouse)
    )""",
]

# Only two distinct values fit a BOOLEAN column
UNIQUE_SCHEMA = [
    "CREATE TABLE flags (id INTEGER PRIMARY KEY, flag BOOLEAN NOT NULL UNIQUE)",
    "CREATE TABLE counters (id INTEGER PRIMARY KEY)",
]


def count_rows(db_conn: DatabaseConnection, table: str) -> int:
    return db_conn.execute_query(f'SELECT COUNT(*) FROM "{table}"')[0][0]


def column_values(db_conn: DatabaseConnection, table: str, column: str) -> list:
    return [row[0] for row in db_conn.execute_query(f'SELECT "{column}" FROM "{table}"')]


@pytest.fixture
def temp_db_file():
    """Create a temporary database file for SQLite testing."""
    fd, path = tempfile.mkstemp(suffix='.db')
    os.close(fd)
    yield path
    if os.path.exists(path):
        os.unlink(path)


@pytest.fixture
def sqlite_db_factory(temp_db_file):
    """Create the given tables in a fresh SQLite file and return a connection to it."""
    connections = []

    def factory(statements):
        db_conn = create_database_connection(temp_db_file, driver="sqlite")
        db_conn.connect()
        with db_conn.begin() as conn:
            for statement in statements:
                conn.execute(text(statement))
        connections.append(db_conn)
        return db_conn

    yield factory

    for db_conn in connections:
        db_conn.close()


@pytest.fixture
def blog_db(sqlite_db_factory):
    return sqlite_db_factory(BLOG_SCHEMA)


@pytest.fixture
def diamond_db(sqlite_db_factory):
    return sqlite_db_factory(DIAMOND_SCHEMA)


@pytest.fixture
def cycle_db(sqlite_db_factory):
    return sqlite_db_factory(CYCLE_SCHEMA)


@pytest.fixture
def self_reference_db(sqlite_db_factory):
    return sqlite_db_factory(SELF_REFERENCE_SCHEMA)


@pytest.fixture
def dangling_db(sqlite_db_factory):
    return sqlite_db_factory(DANGLING_SCHEMA)


@pytest.fixture
def unique_db(sqlite_db_factory):
    return sqlite_db_factory(UNIQUE_SCHEMA)


@pytest.fixture
def generation_config():
    """Deterministic config without random NULLs."""
    return GenerationConfig(seed=1234, null_probability=0.0)


@pytest.fixture
def mock_db_config():
    """Create a mock database configuration for testing."""
    return DatabaseConfig(
        host="localhost",
        port=3306,
        database="test_db",
        username="test_user",
        password="test_pass",
        driver="mysql"
    )


@pytest.fixture
def mock_db_connection(mock_db_config):
    """Create a mock database connection for testing."""
    connection = Mock(spec=DatabaseConnection)
    connection.config = mock_db_config
    connection.quote_identifier.side_effect = lambda name: f"`{name}`"
    connection.random_function.return_value = "RAND()"
    return connection
