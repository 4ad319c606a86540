"""revocab - A vocabulary flashcard trainer with progress tracking."""

from .classifier import is_tough, success_rate, tough_items, tough_source
from .constants import TOUGH_SUCCESS_RATE_THRESHOLD
from .db import VocabDatabase
from .engines import (
    FlashcardEngine,
    MatchingEngine,
    MultipleChoiceEngine,
    create_engine,
)
from .models import (
    GameMode,
    ItemDelta,
    ItemRef,
    QuizDirection,
    RealSetSource,
    SessionOutcome,
    SetMetadata,
    StreakRecord,
    ToughAggregateSource,
    VocabItem,
    VocabSet,
)
from .reconciler import SessionReconciler
from .scoring import apply_patch, score_percentage
from .study_manager import StudySessionManager

__all__ = [
    "FlashcardEngine",
    "GameMode",
    "ItemDelta",
    "ItemRef",
    "MatchingEngine",
    "MultipleChoiceEngine",
    "QuizDirection",
    "RealSetSource",
    "SessionOutcome",
    "SessionReconciler",
    "SetMetadata",
    "StreakRecord",
    "StudySessionManager",
    "TOUGH_SUCCESS_RATE_THRESHOLD",
    "ToughAggregateSource",
    "VocabDatabase",
    "VocabItem",
    "VocabSet",
    "apply_patch",
    "create_engine",
    "is_tough",
    "score_percentage",
    "success_rate",
    "tough_items",
    "tough_source",
]
