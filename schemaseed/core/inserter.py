"""Bulk insertion of generated rows with transaction management."""

import logging
import time
from typing import List, Dict, Any, Optional, Tuple
from sqlalchemy import text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import DataError, IntegrityError
from tqdm import tqdm

from .database import DatabaseConnection
from .exceptions import ConstraintViolationError
from .models import GenerationConfig, InsertResult


logger = logging.getLogger(__name__)

# Stays below SQLite's default host parameter limit
MAX_BIND_PARAMETERS = 30000


class DataInserter:
    """Writes a batch of rows into one table inside a single transaction."""

    def __init__(self, db_connection: DatabaseConnection, config: Optional[GenerationConfig] = None):
        """Initialize data inserter."""
        self.db_connection = db_connection
        self.config = config or GenerationConfig()

    def insert_rows(self, table_name: str, rows: List[Dict[str, Any]]) -> InsertResult:
        """Insert all rows or none of them.

        Every row is written with the columns of the first row. Rejections
        by the database surface as ConstraintViolationError naming the table.
        """
        if not rows:
            logger.warning(f"No data to insert for table: {table_name}")
            return InsertResult()

        logger.info(f"Inserting {len(rows)} rows into table: {table_name}")
        start_time = time.time()

        columns = list(rows[0].keys())
        rows_per_statement = max(1, min(self.config.batch_size,
                                        MAX_BIND_PARAMETERS // max(len(columns), 1)))
        batches = [rows[i:i + rows_per_statement] for i in range(0, len(rows), rows_per_statement)]

        affected_rows = 0
        insert_id = 0
        try:
            with self.db_connection.begin() as conn:
                with tqdm(total=len(rows), desc=f"Inserting {table_name}",
                          disable=not self.config.show_progress) as pbar:
                    for i, batch in enumerate(batches):
                        batch_affected, batch_insert_id = self._insert_batch(conn, table_name, columns, batch)
                        affected_rows += batch_affected
                        if not insert_id:
                            insert_id = batch_insert_id
                        pbar.update(len(batch))
                        logger.debug(f"Batch {i + 1}/{len(batches)} completed: {batch_affected} rows")

        except (IntegrityError, DataError) as e:
            logger.error(f"Database rejected batch for {table_name}: {e.orig}")
            raise ConstraintViolationError(
                f"Failed to insert {len(rows)} rows into '{table_name}': {e.orig}",
                table=table_name,
            ) from e

        logger.info(f"Successfully inserted {affected_rows} rows into {table_name} "
                    f"in {time.time() - start_time:.2f} seconds")
        return InsertResult(affected_rows=affected_rows, insert_id=insert_id)

    def _insert_batch(self, conn: Connection, table_name: str, columns: List[str],
                      batch: List[Dict[str, Any]]) -> Tuple[int, int]:
        """Insert one multi-row statement and return (affected rows, insert id)."""
        quoted_table = self.db_connection.quote_identifier(table_name)

        if not columns:
            return self._insert_defaults(conn, quoted_table, len(batch))

        columns_str = ', '.join(self.db_connection.quote_identifier(col) for col in columns)
        params = {}
        values = []
        for row_index, row in enumerate(batch):
            placeholders = []
            for column_index, column in enumerate(columns):
                key = f"p{row_index}_{column_index}"
                params[key] = row.get(column)
                placeholders.append(f":{key}")
            values.append(f"({', '.join(placeholders)})")

        query = f"INSERT INTO {quoted_table} ({columns_str}) VALUES {', '.join(values)}"
        result = conn.execute(text(query), params)

        affected = result.rowcount if result.rowcount is not None and result.rowcount >= 0 else len(batch)
        return affected, result.lastrowid or 0

    def _insert_defaults(self, conn: Connection, quoted_table: str, count: int) -> Tuple[int, int]:
        """Insert rows whose every column is generated by the database."""
        if self.db_connection.config.driver == "mysql":
            query = f"INSERT INTO {quoted_table} () VALUES ()"
        else:
            query = f"INSERT INTO {quoted_table} DEFAULT VALUES"

        insert_id = 0
        for _ in range(count):
            result = conn.execute(text(query))
            if not insert_id:
                insert_id = result.lastrowid or 0
        return count, insert_id
