from pathlib import Path
from typing import Optional


class DatabaseError(Exception):
    """Base exception for database-related errors."""

    def __init__(
        self, message: str, original_exception: Optional[Exception] = None
    ):
        super().__init__(message)
        self.original_exception = original_exception


class DatabaseConnectionError(DatabaseError):
    """Raised for errors connecting to the database."""

    pass


class SchemaInitializationError(DatabaseError):
    """Raised for errors during schema setup."""

    pass


class SetOperationError(DatabaseError):
    """Raised for errors while loading, saving or deleting vocabulary sets."""

    pass


class StreakOperationError(DatabaseError):
    """Indicates an error during a streak-related database operation."""

    pass


class MarshallingError(DatabaseError):
    """Indicates an error during data conversion between application models
    and DB format."""

    pass


class GameEngineError(Exception):
    """Base exception for quiz engine errors."""

    pass


class InvalidEntryStateError(GameEngineError):
    """Raised when a session is started from a state that cannot be played,
    e.g. with an empty item list or an unknown set."""

    pass


class ExtractionFileError(Exception):
    """Raised when a stored extraction result cannot be read or validated."""

    def __init__(self, file_path: Path, message: str):
        super().__init__(f"{file_path}: {message}")
        self.file_path = file_path
        self.message = message
