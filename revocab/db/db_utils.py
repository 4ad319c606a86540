"""
Helpers for converting vocabulary models to and from DuckDB rows, plus
file-level backup utilities.
"""

import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from pydantic import ValidationError

from ..exceptions import MarshallingError
from ..models import SetMetadata, StreakRecord, VocabItem, VocabSet


def _to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def set_to_db_params_tuple(vocab_set: VocabSet, sort_order: int) -> Tuple:
    """
    Serialize a set (without its items) for insertion into `vocab_sets`.

    Returns:
        tuple: (owner_id, id, sort_order, title, metadata_language,
                metadata_grade, metadata_chapter, metadata_page,
                created_at, last_score)
    """
    return (
        vocab_set.owner_id,
        vocab_set.id,
        sort_order,
        vocab_set.title,
        vocab_set.metadata.language,
        vocab_set.metadata.grade,
        vocab_set.metadata.chapter,
        vocab_set.metadata.page,
        _to_naive_utc(vocab_set.created_at),
        vocab_set.last_score,
    )


def items_to_db_params_list(vocab_set: VocabSet) -> List[Tuple]:
    """
    Serialize the items of a set for insertion into `vocab_items`,
    preserving their order through `sort_order`.
    """
    return [
        (
            vocab_set.owner_id,
            vocab_set.id,
            item.id,
            position,
            item.original,
            item.translation,
            item.correct_count,
            item.wrong_count,
        )
        for position, item in enumerate(vocab_set.items)
    ]


def db_row_to_item(row_dict: Dict[str, Any]) -> VocabItem:
    """
    Create a VocabItem from a `vocab_items` row.

    Raises:
        MarshallingError: If the row does not validate.
    """
    try:
        return VocabItem(
            id=row_dict["id"],
            original=row_dict["original"],
            translation=row_dict["translation"],
            correct_count=row_dict["correct_count"],
            wrong_count=row_dict["wrong_count"],
        )
    except (KeyError, ValidationError) as e:
        raise MarshallingError(
            f"Failed to parse vocabulary item from DB row: {row_dict}. Error: {e}",
            original_exception=e,
        ) from e


def db_row_to_set(
    row_dict: Dict[str, Any], items: Sequence[VocabItem]
) -> VocabSet:
    """
    Create a VocabSet from a `vocab_sets` row and its already parsed items.

    `created_at` is read back as naive UTC and made timezone-aware again.

    Raises:
        MarshallingError: If the row does not validate.
    """
    try:
        created_at = row_dict["created_at"]
        if isinstance(created_at, datetime) and created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return VocabSet(
            id=row_dict["id"],
            owner_id=row_dict["owner_id"],
            title=row_dict["title"],
            metadata=SetMetadata(
                language=row_dict["metadata_language"],
                grade=row_dict["metadata_grade"],
                chapter=row_dict["metadata_chapter"],
                page=row_dict["metadata_page"],
            ),
            items=list(items),
            created_at=created_at,
            last_score=row_dict["last_score"],
        )
    except (KeyError, ValidationError) as e:
        raise MarshallingError(
            f"Failed to parse vocabulary set from DB row: {row_dict}. Error: {e}",
            original_exception=e,
        ) from e


def streak_to_db_params_tuple(owner_id: str, record: StreakRecord) -> Tuple:
    return (owner_id, record.current, record.best, record.last_activity_date)


def db_row_to_streak(row_dict: Dict[str, Any]) -> StreakRecord:
    """Converts a `streaks` row to a StreakRecord."""
    try:
        return StreakRecord(
            current=row_dict["current_streak"],
            best=row_dict["best_streak"],
            last_activity_date=row_dict["last_activity_date"],
        )
    except (KeyError, ValidationError) as e:
        raise MarshallingError(
            f"Data validation failed for streak: {e}", original_exception=e
        ) from e


def find_latest_backup(db_path: Path) -> Optional[Path]:
    """
    Locate the most recent backup file for the given database path.

    Backups live in a "backups" directory next to the database file.

    Returns:
        Path or None: The latest backup, or `None` if there is none.
    """
    backup_dir = db_path.parent / "backups"
    if not backup_dir.exists():
        return None

    backup_files = list(backup_dir.glob(f"{db_path.stem}-backup-*{db_path.suffix}"))
    if not backup_files:
        return None

    # Names embed a sortable timestamp.
    return max(backup_files, key=lambda p: p.name)


def backup_database(db_path: Path) -> Path:
    """
    Creates a timestamped copy of the database file.

    Returns:
        The path to the created backup, or `db_path` itself when there is
        no database file to copy yet.
    """
    if not db_path.exists():
        return db_path

    backup_dir = db_path.parent / "backups"
    backup_dir.mkdir(exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S-%f")
    backup_path = backup_dir / f"{db_path.stem}-backup-{timestamp}{db_path.suffix}"

    shutil.copy2(db_path, backup_path)
    return backup_path


def restore_database(backup_path: Path, db_path: Path) -> None:
    """Overwrites the database file with the given backup."""
    db_path.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(backup_path, db_path)
