"""Quiz game engines for revocab.

All engines share the GameEngine contract; create_engine() picks the
implementation for a GameMode.
"""

import random
from typing import Dict, Optional, Sequence, Type

from ..models import GameMode, QuizDirection, VocabItem
from .base import EnginePhase, GameEngine, shuffled
from .flashcard import FlashcardEngine
from .matching import MatchingEngine, MatchResult, paginate
from .multiple_choice import AnswerFeedback, MultipleChoiceEngine

ENGINE_CLASSES: Dict[GameMode, Type[GameEngine]] = {
    GameMode.FLASHCARD: FlashcardEngine,
    GameMode.MATCHING: MatchingEngine,
    GameMode.MULTIPLE_CHOICE: MultipleChoiceEngine,
}


def create_engine(
    mode: GameMode,
    items: Sequence[VocabItem],
    direction: QuizDirection = QuizDirection.ORIGINAL_TO_TRANSLATION,
    rng: Optional[random.Random] = None,
    auto_advance: bool = True,
) -> GameEngine:
    """Instantiate the engine for `mode` over a snapshot of `items`."""
    engine_cls = ENGINE_CLASSES[GameMode(mode)]
    return engine_cls(
        items, direction=direction, rng=rng, auto_advance=auto_advance
    )


__all__ = [
    "AnswerFeedback",
    "ENGINE_CLASSES",
    "EnginePhase",
    "FlashcardEngine",
    "GameEngine",
    "MatchResult",
    "MatchingEngine",
    "MultipleChoiceEngine",
    "create_engine",
    "paginate",
    "shuffled",
]
