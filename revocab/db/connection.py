"""
Opening and closing the DuckDB connection behind a VocabDatabase.

A library lives either in a file (by default the path from the
REVOCAB_DB_PATH setting) or in memory when the path is ":memory:".
The handler opens the connection lazily and remembers whether the file
was created by that open, so the facade knows when to create the schema.
"""

import duckdb
import logging
from pathlib import Path
from typing import Optional, Union

from .. import config as revocab_config
from ..exceptions import DatabaseConnectionError

logger = logging.getLogger(__name__)

MEMORY_PATH = ":memory:"


def resolve_db_path(db_path: Optional[Union[str, Path]]) -> Path:
    """Absolute location of the library file, or Path(":memory:")."""
    if db_path is None:
        db_path = revocab_config.settings.db_path
    if str(db_path).lower() == MEMORY_PATH:
        return Path(MEMORY_PATH)
    return Path(db_path).expanduser().resolve()


class ConnectionHandler:
    """
    Owns the single DuckDB connection of one library.

    `is_new_db` is only meaningful after the first `get_connection()`:
    True for memory databases and for files that did not exist yet.
    """

    def __init__(
        self, db_path: Optional[Union[str, Path]] = None, read_only: bool = False
    ):
        self.db_path_resolved = resolve_db_path(db_path)
        self.read_only = read_only
        self.is_new_db = False
        self._connection: Optional[duckdb.DuckDBPyConnection] = None
        logger.debug(
            f"Library location: {self.db_path_resolved} "
            f"({'read-only' if read_only else 'writable'})."
        )

    @property
    def is_memory(self) -> bool:
        return str(self.db_path_resolved) == MEMORY_PATH

    @property
    def is_open(self) -> bool:
        return self._connection is not None

    def _prepare_file(self) -> None:
        if self.db_path_resolved.exists():
            self.is_new_db = False
            return
        if self.read_only:
            raise DatabaseConnectionError(
                f"Cannot open missing library {self.db_path_resolved} read-only."
            )
        self.is_new_db = True
        self.db_path_resolved.parent.mkdir(parents=True, exist_ok=True)

    def get_connection(self) -> duckdb.DuckDBPyConnection:
        """
        Return the open connection, opening it on first use.

        A missing library file is created, together with its directory,
        unless the handler is read-only.

        Raises:
            DatabaseConnectionError: If the file is missing in read-only mode
                or DuckDB refuses the connection.
        """
        if self._connection is not None:
            return self._connection

        if self.is_memory:
            self.is_new_db = True
        else:
            self._prepare_file()

        try:
            self._connection = duckdb.connect(
                database=str(self.db_path_resolved), read_only=self.read_only
            )
        except duckdb.Error as e:
            raise DatabaseConnectionError(
                f"Could not open library at {self.db_path_resolved}: {e}",
                original_exception=e,
            ) from e
        logger.info(
            f"Opened library at {self.db_path_resolved}"
            f"{' (new)' if self.is_new_db else ''}."
        )
        return self._connection

    def close_connection(self) -> None:
        """Close the connection; the next `get_connection()` reopens it."""
        connection, self._connection = self._connection, None
        if connection is None:
            return
        try:
            connection.close()
        except duckdb.Error as e:
            logger.error(f"Error closing library at {self.db_path_resolved}: {e}")
        else:
            logger.info(f"Closed library at {self.db_path_resolved}.")
