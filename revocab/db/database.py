"""
DuckDB database interactions for revocab.
Implements the VocabDatabase facade used by the study manager and the CLI.
"""

import duckdb
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union, cast

from ..exceptions import (
    MarshallingError,
    SetOperationError,
    StreakOperationError,
)
from ..models import StreakRecord, VocabItem, VocabSet
from . import db_utils
from .connection import ConnectionHandler
from .schema_manager import SchemaManager

logger = logging.getLogger(__name__)


def _rows_to_dicts(cursor: duckdb.DuckDBPyConnection) -> List[Dict[str, Any]]:
    """Convert cursor results to list of dictionaries using column names."""
    rows = cursor.fetchall()
    if not rows:
        return []
    description = cursor.description
    if description is None:
        return []
    columns = [desc[0] for desc in description]
    return [dict(zip(columns, row, strict=True)) for row in rows]


def _rollback(conn: duckdb.DuckDBPyConnection, operation: str) -> None:
    if conn and not getattr(conn, "closed", True):
        try:
            conn.rollback()
            logger.info(f"Transaction rolled back due to error in {operation}.")
        except duckdb.Error as rb_err:
            logger.error(f"Failed to rollback transaction during {operation}: {rb_err}")


class VocabDatabase:
    """
    Facade over the database subsystem: coordinates the ConnectionHandler,
    the SchemaManager and the marshalling helpers in db_utils.

    Every set belongs to exactly one owner, and a library is always read
    and written as a whole per owner. Without `db_path` the library at
    `settings.db_path` is used. Intended for use as a context manager.
    """

    def __init__(
        self, db_path: Optional[Union[str, Path]] = None, read_only: bool = False
    ):
        self._handler = ConnectionHandler(db_path=db_path, read_only=read_only)
        self._schema_manager = SchemaManager(self._handler)
        logger.info(
            f"VocabDatabase initialized for DB at: {self._handler.db_path_resolved}"
        )

    @property
    def db_path_resolved(self) -> Path:
        return self._handler.db_path_resolved

    @property
    def read_only(self) -> bool:
        return self._handler.read_only

    def get_connection(self) -> duckdb.DuckDBPyConnection:
        return self._handler.get_connection()

    def close_connection(self) -> None:
        self._handler.close_connection()

    def __enter__(self) -> "VocabDatabase":
        """
        Open the connection, creating the schema when a new writable
        database was just created.
        """
        self.get_connection()
        if self._handler.is_new_db and not self._handler.read_only:
            self.initialize_schema()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close_connection()

    def initialize_schema(self, force_recreate_tables: bool = False) -> None:
        self._schema_manager.initialize_schema(
            force_recreate_tables=force_recreate_tables
        )

    # --- Set Operations ---
    _INSERT_SET_SQL = """
        INSERT INTO vocab_sets (owner_id, id, sort_order, title,
                                metadata_language, metadata_grade,
                                metadata_chapter, metadata_page,
                                created_at, last_score)
        VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10);
        """

    _INSERT_ITEM_SQL = """
        INSERT INTO vocab_items (owner_id, set_id, id, sort_order, original,
                                 translation, correct_count, wrong_count)
        VALUES ($1, $2, $3, $4, $5, $6, $7, $8);
        """

    def load_sets(self, owner_id: str) -> List[VocabSet]:
        """
        Load the complete library of an owner, in stored order.

        Returns:
            List[VocabSet]: The owner's sets, each with its ordered items.
                Empty if the owner has no sets.

        Raises:
            SetOperationError: If the query fails or a row cannot be parsed.
        """
        conn = self.get_connection()
        try:
            set_rows = _rows_to_dicts(
                conn.execute(
                    "SELECT * FROM vocab_sets WHERE owner_id = $1 ORDER BY sort_order;",
                    (owner_id,),
                )
            )
            item_rows = _rows_to_dicts(
                conn.execute(
                    "SELECT * FROM vocab_items WHERE owner_id = $1 ORDER BY set_id, sort_order;",
                    (owner_id,),
                )
            )
        except duckdb.Error as e:
            logger.error(f"Error loading sets for owner '{owner_id}': {e}")
            raise SetOperationError(
                f"Failed to load sets: {e}", original_exception=e
            ) from e

        try:
            items_by_set: Dict[str, List[VocabItem]] = {}
            for row in item_rows:
                items_by_set.setdefault(row["set_id"], []).append(
                    db_utils.db_row_to_item(cast(Dict[str, Any], row))
                )
            sets = [
                db_utils.db_row_to_set(row, items_by_set.get(row["id"], []))
                for row in set_rows
            ]
        except MarshallingError as e:
            raise SetOperationError(
                f"Failed to parse sets of owner '{owner_id}' from database.",
                original_exception=e,
            ) from e

        logger.debug(f"Loaded {len(sets)} sets for owner '{owner_id}'.")
        return sets

    def save_sets(self, owner_id: str, sets: Sequence[VocabSet]) -> int:
        """
        Replace the stored library of `owner_id` with `sets` in one transaction.

        An empty sequence is persisted too, leaving the owner with no sets.

        Returns:
            int: Number of sets written.

        Raises:
            SetOperationError: If a set belongs to another owner, set ids
                or item ids repeat, or the transaction fails. On failure the
                stored library is unchanged.
        """
        foreign = [s.id for s in sets if s.owner_id != owner_id]
        if foreign:
            raise SetOperationError(
                f"Sets {foreign} do not belong to owner '{owner_id}'."
            )
        set_ids = [s.id for s in sets]
        if len(set_ids) != len(set(set_ids)):
            raise SetOperationError(
                f"Duplicate set ids in library of owner '{owner_id}'."
            )
        # Tough Mode and matching pages key items by id alone.
        item_ids = [item.id for s in sets for item in s.items]
        if len(item_ids) != len(set(item_ids)):
            raise SetOperationError(
                f"Duplicate item ids across sets of owner '{owner_id}'."
            )

        set_params = [
            db_utils.set_to_db_params_tuple(vocab_set, position)
            for position, vocab_set in enumerate(sets)
        ]
        item_params = [
            params
            for vocab_set in sets
            for params in db_utils.items_to_db_params_list(vocab_set)
        ]

        conn = self.get_connection()
        try:
            with conn.cursor() as cursor:
                cursor.begin()
                cursor.execute(
                    "DELETE FROM vocab_items WHERE owner_id = $1;", (owner_id,)
                )
                cursor.execute(
                    "DELETE FROM vocab_sets WHERE owner_id = $1;", (owner_id,)
                )
                if set_params:
                    cursor.executemany(self._INSERT_SET_SQL, set_params)
                if item_params:
                    cursor.executemany(self._INSERT_ITEM_SQL, item_params)
                cursor.commit()
        except duckdb.Error as e:
            logger.error(f"Error saving sets for owner '{owner_id}': {e}")
            _rollback(conn, "save_sets")
            raise SetOperationError(
                f"Failed to save sets: {e}", original_exception=e
            ) from e

        logger.info(
            f"Saved {len(set_params)} sets with {len(item_params)} items for owner '{owner_id}'."
        )
        return len(set_params)

    def delete_set(self, owner_id: str, set_id: str) -> bool:
        """
        Delete one set and its items.

        Returns:
            bool: True if a set was deleted, False if it did not exist.

        Raises:
            SetOperationError: If the transaction fails.
        """
        conn = self.get_connection()
        try:
            with conn.cursor() as cursor:
                cursor.begin()
                result = cursor.execute(
                    "SELECT COUNT(*) FROM vocab_sets WHERE owner_id = $1 AND id = $2;",
                    (owner_id, set_id),
                ).fetchone()
                exists = bool(result and result[0])
                cursor.execute(
                    "DELETE FROM vocab_items WHERE owner_id = $1 AND set_id = $2;",
                    (owner_id, set_id),
                )
                cursor.execute(
                    "DELETE FROM vocab_sets WHERE owner_id = $1 AND id = $2;",
                    (owner_id, set_id),
                )
                cursor.commit()
        except duckdb.Error as e:
            logger.error(f"Error deleting set '{set_id}': {e}")
            _rollback(conn, "delete_set")
            raise SetOperationError(
                f"Failed to delete set: {e}", original_exception=e
            ) from e

        if exists:
            logger.info(f"Deleted set '{set_id}' of owner '{owner_id}'.")
        else:
            logger.warning(f"Set '{set_id}' of owner '{owner_id}' not found for deletion.")
        return exists

    def get_owner_ids(self) -> List[str]:
        conn = self.get_connection()
        try:
            rows = conn.execute(
                "SELECT DISTINCT owner_id FROM vocab_sets ORDER BY owner_id;"
            ).fetchall()
        except duckdb.Error as e:
            logger.error(f"Could not fetch owner ids due to a database error: {e}")
            raise SetOperationError(
                "Could not fetch owner ids.", original_exception=e
            ) from e
        return [row[0] for row in rows]

    # --- Streak Operations ---
    _UPSERT_STREAK_SQL = """
        INSERT INTO streaks (owner_id, current_streak, best_streak, last_activity_date)
        VALUES ($1, $2, $3, $4)
        ON CONFLICT (owner_id) DO UPDATE SET
            current_streak = EXCLUDED.current_streak,
            best_streak = EXCLUDED.best_streak,
            last_activity_date = EXCLUDED.last_activity_date;
        """

    def load_streak(self, owner_id: str) -> StreakRecord:
        """
        Return the stored streak of an owner, or an empty record if none
        has been saved yet.

        Raises:
            StreakOperationError: If the query fails or the row is invalid.
        """
        conn = self.get_connection()
        try:
            rows = _rows_to_dicts(
                conn.execute(
                    "SELECT * FROM streaks WHERE owner_id = $1;", (owner_id,)
                )
            )
        except duckdb.Error as e:
            logger.error(f"Error fetching streak for owner '{owner_id}': {e}")
            raise StreakOperationError(
                f"Failed to load streak: {e}", original_exception=e
            ) from e

        if not rows:
            return StreakRecord()
        try:
            return db_utils.db_row_to_streak(rows[0])
        except MarshallingError as e:
            raise StreakOperationError(
                f"Failed to parse streak of owner '{owner_id}' from database.",
                original_exception=e,
            ) from e

    def save_streak(self, owner_id: str, record: StreakRecord) -> None:
        """
        Insert or update the streak of an owner.

        Raises:
            StreakOperationError: If the transaction fails.
        """
        params = db_utils.streak_to_db_params_tuple(owner_id, record)
        conn = self.get_connection()
        try:
            with conn.cursor() as cursor:
                cursor.begin()
                cursor.execute(self._UPSERT_STREAK_SQL, params)
                cursor.commit()
        except duckdb.Error as e:
            logger.error(f"Error saving streak for owner '{owner_id}': {e}")
            _rollback(conn, "save_streak")
            raise StreakOperationError(
                f"Failed to save streak: {e}", original_exception=e
            ) from e
        logger.debug(f"Saved streak {record.current}/{record.best} for owner '{owner_id}'.")
