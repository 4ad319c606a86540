"""
Defines the GameEngine abstract base class shared by all quiz modes.
"""

import logging
import random
from abc import ABC, abstractmethod
from enum import Enum
from typing import List, Optional, Sequence, TypeVar

from ..exceptions import InvalidEntryStateError
from ..models import GameMode, QuizDirection, SessionOutcome, VocabItem
from ..scoring import SessionTally, build_outcome

logger = logging.getLogger(__name__)

T = TypeVar("T")


class EnginePhase(str, Enum):
    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"


def shuffled(items: Sequence[T], rng: random.Random) -> List[T]:
    """Return a uniform random permutation of `items` (Fisher-Yates)."""
    result = list(items)
    rng.shuffle(result)
    return result


class GameEngine(ABC):
    """
    Abstract base class for the quiz game engines.

    An engine is a synchronous state machine over a snapshot of vocabulary
    items. It records graded events into a SessionTally and, once it
    reaches COMPLETE, exposes a SessionOutcome in `outcome`. Engines never
    touch persisted data; committing the outcome is the caller's job.

    With `auto_advance=True` every transition (next card, next question,
    next page, clearing a wrong pair) happens as part of the user action.
    With `auto_advance=False` the engine stops in a pending state so the
    UI can show feedback, and the caller resolves it with `advance()`.
    Interactions that arrive while complete or pending are ignored.
    """

    mode: GameMode

    def __init__(
        self,
        items: Sequence[VocabItem],
        direction: QuizDirection = QuizDirection.ORIGINAL_TO_TRANSLATION,
        rng: Optional[random.Random] = None,
        auto_advance: bool = True,
    ):
        if not items:
            raise InvalidEntryStateError(
                "Cannot start a quiz session without vocabulary items."
            )
        self.items: List[VocabItem] = list(items)
        self.direction = direction
        self.rng = rng or random.Random()
        self.auto_advance = auto_advance
        self.tally = SessionTally()
        self.session_correct = 0
        self.phase = EnginePhase.IN_PROGRESS
        self.outcome: Optional[SessionOutcome] = None

    @property
    def is_complete(self) -> bool:
        return self.phase == EnginePhase.COMPLETE

    @abstractmethod
    def start(self) -> None:
        """Reset all session-local state and begin a fresh run."""
        pass

    @abstractmethod
    def advance(self) -> None:
        """Resolve a pending transition. No-op when nothing is pending."""
        pass

    def _record(self, item: VocabItem, correct: bool) -> None:
        self.tally.record(item.id, correct)
        if correct:
            self.session_correct += 1

    def _reset_session(self) -> None:
        self.tally.reset()
        self.session_correct = 0
        self.phase = EnginePhase.IN_PROGRESS
        self.outcome = None

    def _complete(self, total_graded_events: int) -> None:
        self.phase = EnginePhase.COMPLETE
        self.outcome = build_outcome(
            self.items,
            self.tally,
            self.session_correct,
            total_graded_events,
        )
        logger.info(
            f"{self.mode.value} session complete: "
            f"{self.session_correct}/{total_graded_events} correct "
            f"({self.outcome.score_percentage}%)."
        )
