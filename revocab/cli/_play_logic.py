from pathlib import Path
from typing import Optional

from revocab.cli.play_ui import start_play_flow
from revocab.db.database import VocabDatabase
from revocab.models import GameMode, QuizDirection, SessionOutcome
from revocab.study_manager import StudySessionManager


def play_logic(
    db_path: Path,
    owner_id: str,
    mode: GameMode,
    direction: QuizDirection,
    set_id: Optional[str] = None,
) -> Optional[SessionOutcome]:
    """
    Open the database, start a session and run the interactive flow.

    Parameters:
        db_path (Path): Path to the revocab database file.
        owner_id (str): Owner whose library is played.
        mode (GameMode): Game type to play.
        direction (QuizDirection): Which side of each pair is the prompt.
        set_id (Optional[str]): Set to play; plays Tough Mode when None.

    Raises:
        InvalidEntryStateError: If the set is unknown or empty, or Tough
            Mode has no items.
    """
    with VocabDatabase(db_path=db_path) as db_manager:
        db_manager.initialize_schema()
        manager = StudySessionManager(db_manager=db_manager, owner_id=owner_id)
        manager.load()
        if set_id is None:
            manager.start_tough_session(mode, direction)
        else:
            manager.start_set_session(set_id, mode, direction)
        return start_play_flow(manager)
