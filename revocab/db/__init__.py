from .database import VocabDatabase
from .db_utils import backup_database, find_latest_backup, restore_database

__all__ = [
    "VocabDatabase",
    "backup_database",
    "find_latest_backup",
    "restore_database",
]
