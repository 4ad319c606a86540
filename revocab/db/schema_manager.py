import duckdb
import logging
from .connection import ConnectionHandler
from . import schema
from ..exceptions import DatabaseConnectionError, SchemaInitializationError
from .. import config as revocab_config

logger = logging.getLogger(__name__)


class SchemaManager:
    """Manages the database schema initialization and maintenance."""

    def __init__(self, handler: ConnectionHandler):
        self._handler = handler

    def initialize_schema(self, force_recreate_tables: bool = False) -> None:
        """
        Initializes the database schema using a transaction. Skips if in read-only mode
        unless it's an in-memory DB. Can force recreation of tables, which will
        delete all existing data.
        """
        if self._handle_read_only_initialization(force_recreate_tables):
            return

        conn = self._handler.get_connection()
        try:
            with conn.cursor() as cursor:
                cursor.begin()
                if force_recreate_tables:
                    self._recreate_tables(cursor)
                self._create_schema_from_sql(cursor)
                cursor.commit()
            logger.info(f"Database schema at {self._handler.db_path_resolved} initialized successfully (or already exists).")
        except duckdb.Error as e:
            logger.error(f"Error initializing database schema at {self._handler.db_path_resolved}: {e}")
            if conn and not getattr(conn, 'closed', True):
                try:
                    conn.rollback()
                    logger.info("Transaction rolled back due to schema initialization error.")
                except duckdb.Error as rb_err:
                    logger.error(f"Failed to rollback transaction: {rb_err}")
            raise SchemaInitializationError(f"Failed to initialize schema: {e}", original_exception=e) from e

    def _handle_read_only_initialization(self, force_recreate_tables: bool) -> bool:
        """Handles the logic for schema initialization in read-only mode. Returns True if initialization should be skipped."""
        if self._handler.read_only:
            if force_recreate_tables:
                raise DatabaseConnectionError("Cannot force_recreate_tables in read-only mode.")
            if not self._handler.is_memory:
                logger.warning("Attempting to initialize schema in read-only mode. Skipping.")
                return True
        return False

    def _perform_safety_check(self, cursor: duckdb.DuckDBPyConnection) -> None:
        """Refuses to drop tables that still hold vocabulary or streak data."""
        if self._handler.is_memory or revocab_config.settings.testing_mode:
            return

        try:
            set_result = cursor.execute("SELECT COUNT(*) FROM vocab_sets").fetchone()
            item_result = cursor.execute("SELECT COUNT(*) FROM vocab_items").fetchone()
        except duckdb.CatalogException:
            # Tables do not exist yet; nothing to lose.
            return
        except duckdb.Error as e:
            error_msg = f"CRITICAL: Cannot verify if tables contain data before dropping. Refusing to proceed to prevent data loss. Error: {e}"
            logger.error(error_msg)
            raise ValueError(error_msg) from e

        set_count = set_result[0] if set_result else 0
        item_count = item_result[0] if item_result else 0
        if set_count > 0 or item_count > 0:
            error_msg = f"CRITICAL: Attempted to drop tables with existing data! Sets: {set_count}, Items: {item_count}. This would cause permanent data loss. Use backup/restore instead."
            logger.error(error_msg)
            raise ValueError(error_msg)

    def _recreate_tables(self, cursor: duckdb.DuckDBPyConnection) -> None:
        """Drops all tables to force recreation."""
        self._perform_safety_check(cursor)

        logger.warning(f"Forcing table recreation for {self._handler.db_path_resolved}. ALL EXISTING DATA WILL BE LOST.")

        cursor.execute("DROP TABLE IF EXISTS vocab_items;")
        cursor.execute("DROP TABLE IF EXISTS vocab_sets;")
        cursor.execute("DROP TABLE IF EXISTS streaks;")

    def _create_schema_from_sql(self, cursor: duckdb.DuckDBPyConnection) -> None:
        """Executes the SQL statements to create the database schema."""
        cursor.execute(schema.DB_SCHEMA_SQL)
