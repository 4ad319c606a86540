"""
Multiple-choice mode: one prompt, the correct answer and up to three
distractors taken from the rest of the set.
"""

import logging
import random
from dataclasses import dataclass
from typing import List, Optional, Sequence

from ..constants import MULTIPLE_CHOICE_OPTION_COUNT
from ..models import GameMode, QuizDirection, VocabItem
from .base import GameEngine, shuffled

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnswerFeedback:
    choice: str
    correct_answer: str
    is_correct: bool


class MultipleChoiceEngine(GameEngine):
    """
    Single question with distractors, advancing after each answer.

    Distractors are sampled without replacement from the distinct answer
    texts of the other items in the set that differ from the correct
    answer. A question therefore shows min(4, distinct answer texts)
    options; a set with a single distinct answer shows just that option.
    """

    mode = GameMode.MULTIPLE_CHOICE

    def __init__(
        self,
        items: Sequence[VocabItem],
        direction: QuizDirection = QuizDirection.ORIGINAL_TO_TRANSLATION,
        rng: Optional[random.Random] = None,
        auto_advance: bool = True,
        option_count: int = MULTIPLE_CHOICE_OPTION_COUNT,
    ):
        super().__init__(items, direction, rng, auto_advance)
        self.option_count = option_count
        self.deck: List[VocabItem] = []
        self.cursor = 0
        self.current_options: List[str] = []
        self.is_answered = False
        self.last_feedback: Optional[AnswerFeedback] = None
        self.start()

    def start(self) -> None:
        self._reset_session()
        self.deck = shuffled(self.items, self.rng)
        self.cursor = 0
        self._enter_question()

    @property
    def current_item(self) -> Optional[VocabItem]:
        if self.is_complete:
            return None
        return self.deck[self.cursor]

    def question_text(self) -> str:
        item = self.current_item
        return item.prompt_text(self.direction) if item else ""

    def correct_answer(self) -> str:
        item = self.current_item
        return item.answer_text(self.direction) if item else ""

    def build_options(self, item: VocabItem) -> List[str]:
        """Correct answer plus distractors, in random order."""
        correct = item.answer_text(self.direction)
        candidates: List[str] = []
        for other in self.items:
            if other.id == item.id:
                continue
            text = other.answer_text(self.direction)
            if text != correct and text not in candidates:
                candidates.append(text)

        wanted = max(0, self.option_count - 1)
        distractors = self.rng.sample(candidates, min(wanted, len(candidates)))
        if len(distractors) < wanted:
            logger.debug(
                f"Only {len(distractors)} distractors available for "
                f"'{item.prompt_text(self.direction)}'."
            )
        return shuffled(distractors + [correct], self.rng)

    def _enter_question(self) -> None:
        self.is_answered = False
        self.last_feedback = None
        self.current_options = self.build_options(self.deck[self.cursor])

    def answer(self, choice: str) -> Optional[AnswerFeedback]:
        """
        Answer the current question with one of the option texts.

        Returns:
            AnswerFeedback for the recorded answer, or None if the answer
            was ignored (session complete or question already answered).
        """
        if self.is_complete or self.is_answered:
            logger.debug("Ignoring answer: question already answered.")
            return None

        item = self.deck[self.cursor]
        correct_answer = item.answer_text(self.direction)
        is_correct = choice == correct_answer
        self._record(item, is_correct)
        self.is_answered = True
        feedback = AnswerFeedback(
            choice=choice,
            correct_answer=correct_answer,
            is_correct=is_correct,
        )
        self.last_feedback = feedback

        if self.auto_advance:
            self.advance()
        return feedback

    def advance(self) -> None:
        if not self.is_answered or self.is_complete:
            return
        self.cursor += 1
        if self.cursor >= len(self.deck):
            self._complete(total_graded_events=len(self.deck))
        else:
            self._enter_question()
