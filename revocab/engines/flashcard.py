"""
Flashcard flip mode: show a card, reveal it, and self-assess.
"""

import logging
import random
from typing import List, Optional, Sequence

from ..models import GameMode, QuizDirection, VocabItem
from .base import EnginePhase, GameEngine, shuffled

logger = logging.getLogger(__name__)


class FlashcardEngine(GameEngine):
    """
    Sequential reveal/self-assessment over a shuffled deck.

    Cards the user did not know are collected in `mistakes`. After
    completion, `repeat_mistakes()` replays only those cards while keeping
    the delta map, so the outcome of the final round covers every round of
    the session. `restart_full_set()` starts a brand-new session.
    """

    mode = GameMode.FLASHCARD

    def __init__(
        self,
        items: Sequence[VocabItem],
        direction: QuizDirection = QuizDirection.ORIGINAL_TO_TRANSLATION,
        rng: Optional[random.Random] = None,
        auto_advance: bool = True,
    ):
        super().__init__(items, direction, rng, auto_advance)
        self.deck: List[VocabItem] = []
        self.cursor = 0
        self.is_flipped = False
        self.mistakes: List[VocabItem] = []
        self._transition_pending = False
        self.start()

    def start(self) -> None:
        self._reset_session()
        self.mistakes = []
        self._deal(self.items)

    def _deal(self, cards: Sequence[VocabItem]) -> None:
        self.deck = shuffled(cards, self.rng)
        self.cursor = 0
        self.is_flipped = False
        self._transition_pending = False

    @property
    def current_item(self) -> Optional[VocabItem]:
        if self.is_complete or self.cursor >= len(self.deck):
            return None
        return self.deck[self.cursor]

    @property
    def transition_pending(self) -> bool:
        return self._transition_pending

    def question_text(self) -> str:
        item = self.current_item
        return item.prompt_text(self.direction) if item else ""

    def answer_text(self) -> str:
        item = self.current_item
        return item.answer_text(self.direction) if item else ""

    def reveal(self) -> None:
        """Flip the current card. Display state only."""
        if self.is_complete or self._transition_pending:
            return
        self.is_flipped = not self.is_flipped

    def grade(self, known: bool) -> bool:
        """
        Record the user's self-assessment for the current card.

        Returns:
            bool: True if the grade was recorded, False if it was rejected
            because the session is complete or a transition is pending.
        """
        if self.is_complete or self._transition_pending:
            logger.debug("Ignoring grade: no card is awaiting assessment.")
            return False

        card = self.deck[self.cursor]
        self._record(card, known)
        if not known:
            self.mistakes.append(card)
        self.is_flipped = False

        if self.auto_advance:
            self._next_card()
        else:
            self._transition_pending = True
        return True

    def advance(self) -> None:
        if not self._transition_pending:
            return
        self._transition_pending = False
        self._next_card()

    def _next_card(self) -> None:
        self.cursor += 1
        if self.cursor >= len(self.deck):
            self._complete(total_graded_events=len(self.deck))

    def restart_full_set(self) -> None:
        """Reshuffle every item and start over with empty session state."""
        logger.info("Restarting flashcard session with the full set.")
        self.start()

    def repeat_mistakes(self) -> bool:
        """
        Replay only the cards answered "unknown".

        The delta map is kept so that the eventual outcome includes the
        results of every round. Returns False (no-op) if there are no
        mistakes to repeat.
        """
        if not self.mistakes:
            return False
        replay = list(self.mistakes)
        logger.info(f"Repeating {len(replay)} missed cards.")
        self.mistakes = []
        self.session_correct = 0
        self.phase = EnginePhase.IN_PROGRESS
        self.outcome = None
        self._deal(replay)
        return True
