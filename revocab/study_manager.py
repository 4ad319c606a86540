"""
This module defines the StudySessionManager class, which ties the owner's
library, the game engines and the reconciler together. It keeps a working
copy of the owner's sets, runs one quiz session at a time and commits the
deltas of every completed round back to the database exactly once.
"""

import logging
import random
from datetime import date
from typing import Dict, List, Optional, Union

from .classifier import tough_items, tough_source
from .db.database import VocabDatabase
from .engines import FlashcardEngine, GameEngine, create_engine
from .exceptions import GameEngineError, InvalidEntryStateError
from .models import (
    GameMode,
    ItemDelta,
    QuizDirection,
    RealSetSource,
    SessionOutcome,
    StreakRecord,
    ToughAggregateSource,
    VocabSet,
)
from .reconciler import SessionReconciler
from .scoring import subtract_patch
from .streak import StreakInfo, evaluate_streak, register_activity

logger = logging.getLogger(__name__)


class StudySessionManager:
    """
    Manages study sessions for one owner.

    This class is responsible for:
    - Loading the owner's sets and keeping them current after each commit.
    - Starting sessions on a real set or on the Tough Mode aggregate.
    - Committing completed sessions (sets first, then the streak).
    - Discarding abandoned sessions without writing anything.
    """

    def __init__(
        self,
        db_manager: VocabDatabase,
        owner_id: str,
        rng: Optional[random.Random] = None,
    ):
        self.db = db_manager
        self.owner_id = owner_id
        self.rng = rng or random.Random()
        self.reconciler = SessionReconciler()
        self.sets: List[VocabSet] = []
        self.engine: Optional[GameEngine] = None
        self.source: Optional[Union[RealSetSource, ToughAggregateSource]] = None
        self._committed_deltas: Dict[str, ItemDelta] = {}

    def load(self) -> List[VocabSet]:
        """Reload the owner's sets from the database."""
        self.sets = self.db.load_sets(self.owner_id)
        logger.info(
            f"Loaded {len(self.sets)} sets for owner '{self.owner_id}'."
        )
        return self.sets

    def get_set(self, set_id: str) -> Optional[VocabSet]:
        for vocab_set in self.sets:
            if vocab_set.id == set_id:
                return vocab_set
        return None

    def tough_item_count(self) -> int:
        return len(tough_items(self.sets))

    @property
    def has_active_session(self) -> bool:
        return self.engine is not None

    def start_set_session(
        self,
        set_id: str,
        mode: GameMode,
        direction: QuizDirection = QuizDirection.ORIGINAL_TO_TRANSLATION,
        auto_advance: bool = True,
    ) -> GameEngine:
        """
        Start a session on one of the owner's sets.

        Raises:
            InvalidEntryStateError: If the set does not exist or is empty.
        """
        vocab_set = self.get_set(set_id)
        if vocab_set is None:
            raise InvalidEntryStateError(f"Unknown set id '{set_id}'.")
        return self._start(
            RealSetSource(set_id=set_id),
            vocab_set.items,
            mode,
            direction,
            auto_advance,
        )

    def start_tough_session(
        self,
        mode: GameMode,
        direction: QuizDirection = QuizDirection.ORIGINAL_TO_TRANSLATION,
        auto_advance: bool = True,
    ) -> GameEngine:
        """
        Start a session on every tough item across the owner's sets.

        Raises:
            InvalidEntryStateError: If there are no tough items.
        """
        items = tough_items(self.sets)
        if not items:
            raise InvalidEntryStateError("There are no tough items to practise.")
        return self._start(
            tough_source(self.sets), items, mode, direction, auto_advance
        )

    def _start(
        self,
        source: Union[RealSetSource, ToughAggregateSource],
        items,
        mode: GameMode,
        direction: QuizDirection,
        auto_advance: bool,
    ) -> GameEngine:
        if self.engine is not None:
            logger.warning("Starting a new session discards the current one.")
        engine = create_engine(
            mode, items, direction=direction, rng=self.rng, auto_advance=auto_advance
        )
        self.engine = engine
        self.source = source
        self._committed_deltas = {}
        logger.info(
            f"Started {GameMode(mode).value} session on {source.kind} "
            f"with {len(items)} items."
        )
        return engine

    def _require_engine(self) -> GameEngine:
        if self.engine is None:
            raise GameEngineError("No active session.")
        return self.engine

    def finish_session(self, today: Optional[date] = None) -> Optional[SessionOutcome]:
        """
        Commit the completed session and end it.

        The outcome is merged into the sets by the reconciler, the new
        collection is saved and the streak advanced. Rounds that were
        already committed (before a mistake replay) are not applied
        again. The session ends with the commit, so a second call
        commits nothing.

        Returns:
            The committed outcome, or None if there is no active session.

        Raises:
            GameEngineError: If the session is not complete.
        """
        engine = self.engine
        if engine is None:
            logger.debug("finish_session called without an active session.")
            return None
        if not engine.is_complete or engine.outcome is None:
            raise GameEngineError("Cannot finish a session that is not complete.")
        outcome = self._commit(engine.outcome, today)
        self._end()
        return outcome

    def _commit(self, outcome: SessionOutcome, today: Optional[date]) -> SessionOutcome:
        pending = subtract_patch(outcome.deltas, self._committed_deltas)
        new_sets = self.reconciler.commit(
            self.sets,
            self.source,
            outcome.model_copy(
                update={
                    "deltas": pending,
                    "updated_items": [
                        item for item in outcome.updated_items if item.id in pending
                    ],
                }
            ),
        )
        self.db.save_sets(self.owner_id, new_sets)
        self.sets = new_sets
        self._committed_deltas = dict(outcome.deltas)

        streak = register_activity(self.db.load_streak(self.owner_id), today)
        self.db.save_streak(self.owner_id, streak)
        logger.info(
            f"Session committed with score {outcome.score_percentage}% "
            f"({len(pending)} items updated); "
            f"streak is {streak.current} (best {streak.best})."
        )
        return outcome

    def restart_full_set(self, today: Optional[date] = None) -> Optional[SessionOutcome]:
        """
        Play the same items again from the start.

        A completed run that was not committed yet is committed first.

        Returns:
            The outcome committed before restarting, if any.
        """
        engine = self._require_engine()
        committed = None
        if engine.is_complete and engine.outcome is not None:
            committed = self._commit(engine.outcome, today)
        engine.start()
        self._committed_deltas = {}
        logger.info("Session restarted with the full item list.")
        return committed

    def repeat_mistakes(self, today: Optional[date] = None) -> bool:
        """
        Replay the missed flashcards.

        A completed round is committed before the replay starts, so
        quitting the replay keeps it. The engine keeps its delta map
        across rounds; later commits only add what was graded since.

        Returns:
            False if there were no mistakes to repeat.

        Raises:
            GameEngineError: If the current session is not a flashcard session.
        """
        engine = self._require_engine()
        if not isinstance(engine, FlashcardEngine):
            raise GameEngineError("Only flashcard sessions can repeat mistakes.")
        if not engine.mistakes:
            return False
        if engine.is_complete and engine.outcome is not None:
            self._commit(engine.outcome, today)
        return engine.repeat_mistakes()

    def abandon_session(self) -> None:
        """Drop the uncommitted part of the current session."""
        if self.engine is None:
            return
        logger.info(
            f"Abandoned session with {len(self.engine.tally)} graded events."
        )
        self._end()

    def _end(self) -> None:
        self.engine = None
        self.source = None
        self._committed_deltas = {}

    def add_set(self, vocab_set: VocabSet) -> VocabSet:
        """Prepend a new set to the library and save it."""
        if vocab_set.owner_id != self.owner_id:
            raise ValueError(
                f"Set belongs to '{vocab_set.owner_id}', not '{self.owner_id}'."
            )
        new_sets = [vocab_set] + [s for s in self.sets if s.id != vocab_set.id]
        self.db.save_sets(self.owner_id, new_sets)
        self.sets = new_sets
        logger.info(f"Added set '{vocab_set.title}' ({len(vocab_set.items)} items).")
        return vocab_set

    def delete_set(self, set_id: str) -> bool:
        deleted = self.db.delete_set(self.owner_id, set_id)
        self.sets = [s for s in self.sets if s.id != set_id]
        return deleted

    def streak_info(self, today: Optional[date] = None) -> StreakInfo:
        record: StreakRecord = self.db.load_streak(self.owner_id)
        return evaluate_streak(record, today)
