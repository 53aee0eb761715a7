"""Command-line interface for SchemaSeed."""

import click
import logging
import sys
import json
import yaml
from functools import wraps
from pathlib import Path
from typing import Dict, Any, Optional

from schemaseed.core.database import DatabaseConnection, DatabaseConfig, get_default_port
from schemaseed.core.exceptions import InvalidArgumentError, SchemaSeedError
from schemaseed.core.models import GenerationConfig
from schemaseed.core.service import SchemaSeedService
from schemaseed.tools import ToolRegistry


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def connection_options(func):
    """Database connection options shared by every command."""
    options = [
        click.option('--driver', envvar='DB_DRIVER', default='mysql', show_default=True,
                     type=click.Choice(['mysql', 'postgresql', 'sqlite']), help='Database driver'),
        click.option('--host', '-h', envvar='DB_HOST', default='localhost', help='Database host'),
        click.option('--port', '-p', envvar='DB_PORT', type=int, help='Database port'),
        click.option('--database', '-d', envvar='DB_NAME', default='',
                     help='Database name (file path for SQLite)'),
        click.option('--username', '-u', envvar='DB_USER', default='', help='Database username'),
        click.option('--password', envvar='DB_PASSWORD', default='', help='Database password'),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def handle_errors(func):
    """Report failures as ``code: message`` on stderr and exit with status 1."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except SchemaSeedError as e:
            click.echo(f"❌ Error: {e.code}: {e.message}", err=True)
            sys.exit(1)
        except ConnectionError as e:
            click.echo(f"❌ Error: CONNECTION_FAILED: {e}", err=True)
            sys.exit(1)
        except Exception as e:
            logger.debug("Unhandled error", exc_info=True)
            click.echo(f"❌ Error: INTERNAL_ERROR: {e}", err=True)
            sys.exit(1)
    return wrapper


def build_database_config(driver: str, host: str, port: Optional[int], database: str,
                          username: str, password: str) -> DatabaseConfig:
    return DatabaseConfig(
        driver=driver,
        host=host,
        port=port if port is not None else get_default_port(driver),
        database=database,
        username=username,
        password=password,
    )


def load_config_file(config_path: str) -> Dict[str, Any]:
    """Load configuration from JSON or YAML file."""
    config_file = Path(config_path)

    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_file, 'r') as f:
        if config_file.suffix.lower() == '.json':
            return json.load(f) or {}
        else:
            return yaml.safe_load(f) or {}


def build_generation_config(config_path: Optional[str] = None, **overrides) -> GenerationConfig:
    """Merge a config file's ``generation`` section with command-line overrides."""
    settings: Dict[str, Any] = {}
    if config_path:
        data = load_config_file(config_path)
        settings.update(data.get('generation', data))

    settings.update({key: value for key, value in overrides.items() if value is not None})
    return GenerationConfig(**settings)


def echo_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2, default=str))


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--quiet', '-q', is_flag=True, help='Suppress non-error output')
def cli(verbose: bool, quiet: bool):
    """JaySoft-SchemaSeed - Foreign-key aware test data for SQL databases."""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    elif quiet:
        logging.getLogger().setLevel(logging.ERROR)


@cli.command()
@connection_options
@handle_errors
def tables(driver, host, port, database, username, password):
    """List all tables in the database."""
    config = build_database_config(driver, host, port, database, username, password)
    with DatabaseConnection(config) as db_conn:
        echo_json(SchemaSeedService(db_conn).list_tables())


@cli.command()
@click.argument('table')
@connection_options
@handle_errors
def describe(table, driver, host, port, database, username, password):
    """Describe the columns of TABLE."""
    config = build_database_config(driver, host, port, database, username, password)
    with DatabaseConnection(config) as db_conn:
        columns = SchemaSeedService(db_conn).describe_table(table)
        echo_json([column.to_dict() for column in columns])


@cli.command()
@click.argument('table')
@connection_options
@handle_errors
def relations(table, driver, host, port, database, username, password):
    """Show outgoing and incoming foreign keys of TABLE."""
    config = build_database_config(driver, host, port, database, username, password)
    with DatabaseConnection(config) as db_conn:
        echo_json(SchemaSeedService(db_conn).table_relations(table).to_dict())


@cli.command()
@click.argument('table')
@connection_options
@click.option('--rows', '-r', type=int, default=10, show_default=True,
              help='Number of rows to return')
@handle_errors
def sample(table, driver, host, port, database, username, password, rows):
    """Print up to ROWS existing rows of TABLE."""
    config = build_database_config(driver, host, port, database, username, password)
    with DatabaseConnection(config) as db_conn:
        echo_json(SchemaSeedService(db_conn).sample_rows(table, rows))


@cli.command()
@click.argument('table')
@connection_options
@handle_errors
def summarize(table, driver, host, port, database, username, password):
    """Print the row count and per-column statistics of TABLE."""
    config = build_database_config(driver, host, port, database, username, password)
    with DatabaseConnection(config) as db_conn:
        echo_json(SchemaSeedService(db_conn).summarize_table(table).to_dict())


@cli.command()
@click.argument('table')
@connection_options
@handle_errors
def indexes(table, driver, host, port, database, username, password):
    """List the indexes of TABLE."""
    config = build_database_config(driver, host, port, database, username, password)
    with DatabaseConnection(config) as db_conn:
        echo_json([index.to_dict() for index in SchemaSeedService(db_conn).list_indexes(table)])


@cli.command()
@click.argument('table')
@connection_options
@click.option('--rows', '-r', type=int, default=10, show_default=True,
              help='Number of rows to generate')
@click.option('--config', '-c', 'config_path', type=click.Path(exists=True),
              help='Configuration file (JSON/YAML)')
@click.option('--seed', type=int, help='Random seed for reproducible data')
@click.option('--seed-rows', type=int, help='Rows written into each underpopulated parent table')
@click.option('--progress/--no-progress', default=None, help='Show a progress bar while inserting')
@handle_errors
def generate(table, driver, host, port, database, username, password, rows,
             config_path, seed, seed_rows, progress):
    """Generate ROWS rows for TABLE, populating referenced tables first."""
    generation_config = build_generation_config(
        config_path, seed=seed, seed_rows=seed_rows, show_progress=progress
    )
    config = build_database_config(driver, host, port, database, username, password)

    with DatabaseConnection(config) as db_conn:
        service = SchemaSeedService(db_conn, generation_config)
        result = service.generate_test_data(table, rows)

        for parent, count in result.seeded.items():
            logger.info(f"🌱 Seeded {count} rows into {parent}")
        echo_json(result.to_dict())


@cli.command()
@connection_options
@click.option('--output', '-o', type=click.Path(), help='Write the diagram JSON to this file')
@handle_errors
def diagram(driver, host, port, database, username, password, output):
    """Print the schema graph (tables as nodes, foreign keys as edges)."""
    config = build_database_config(driver, host, port, database, username, password)
    with DatabaseConnection(config) as db_conn:
        graph = SchemaSeedService(db_conn).generate_schema_diagram().to_dict()

    if output:
        output_path = Path(output)
        with open(output_path, 'w') as f:
            json.dump(graph, f, indent=2, default=str)
        click.echo(f"💾 Schema diagram saved to: {output_path}")
    else:
        echo_json(graph)


@cli.command()
@click.option('--max-rows', type=int, default=GenerationConfig().max_rows, show_default=True,
              help='Upper bound advertised for generateTestData')
def tools(max_rows):
    """List the available tools and their input schemas."""
    # Listing never touches the database, so the connection is left unopened
    service = SchemaSeedService(
        DatabaseConnection(DatabaseConfig(driver='sqlite')),
        GenerationConfig(max_rows=max_rows),
    )
    echo_json(ToolRegistry(service).list_tools())


@cli.command()
@click.argument('name')
@click.option('--arguments', '-a', default='{}', help='Tool arguments as a JSON object')
@connection_options
@click.option('--config', '-c', 'config_path', type=click.Path(exists=True),
              help='Configuration file (JSON/YAML)')
@handle_errors
def call(name, arguments, driver, host, port, database, username, password, config_path):
    """Invoke the tool NAME with JSON arguments."""
    try:
        parsed = json.loads(arguments)
    except json.JSONDecodeError as e:
        raise InvalidArgumentError(f"Tool arguments are not valid JSON: {e}") from e

    config = build_database_config(driver, host, port, database, username, password)
    with DatabaseConnection(config) as db_conn:
        registry = ToolRegistry(SchemaSeedService(db_conn, build_generation_config(config_path)))
        echo_json(registry.call(name, parsed))


@cli.command()
@click.option('--output', '-o', type=click.Path(), default='schemaseed_config.yaml',
              help='Output configuration file path')
def init_config(output: str):
    """Create a sample configuration file."""
    config_template = {
        'generation': GenerationConfig(seed=42).model_dump(),
    }

    output_path = Path(output)
    with open(output_path, 'w') as f:
        yaml.dump(config_template, f, default_flow_style=False, indent=2)

    click.echo(f"✅ Configuration template created: {output_path}")
    click.echo("Edit this file to customize your data generation settings.")


def main():
    """Main entry point for the CLI."""
    cli()


if __name__ == '__main__':
    main()
