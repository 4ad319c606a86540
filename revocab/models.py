"""
Pydantic domain models for revocab: vocabulary items and sets, play sources,
session outcomes and streak records.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from enum import Enum
from typing import Annotated, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _new_id() -> str:
    return uuid.uuid4().hex


class QuizDirection(str, Enum):
    """
    Which side of a vocabulary pair is shown as the prompt.
    """

    ORIGINAL_TO_TRANSLATION = "original_to_translation"
    TRANSLATION_TO_ORIGINAL = "translation_to_original"


class GameMode(str, Enum):
    """
    The quiz game types a set can be played with.
    """

    FLASHCARD = "flashcard"
    MATCHING = "matching"
    MULTIPLE_CHOICE = "multiple_choice"


class VocabItem(BaseModel):
    """
    A word pair plus its lifetime correct/wrong counters.

    Items are immutable snapshots. Counter changes always produce a new
    instance (see revocab.scoring.apply_patch); the `id` is the join key
    between session results and persisted items and never changes.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(
        default_factory=_new_id,
        min_length=1,
        description="Opaque identifier, stable across merges.",
    )
    original: str = Field(
        ..., description="Word or phrase in the foreign language."
    )
    translation: str = Field(..., description="Translation of `original`.")
    correct_count: int = Field(
        default=0, ge=0, description="Lifetime number of correct answers."
    )
    wrong_count: int = Field(
        default=0, ge=0, description="Lifetime number of wrong answers."
    )

    @property
    def total_attempts(self) -> int:
        return self.correct_count + self.wrong_count

    def prompt_text(self, direction: QuizDirection) -> str:
        """Text shown as the question for the given direction."""
        if direction == QuizDirection.ORIGINAL_TO_TRANSLATION:
            return self.original
        return self.translation

    def answer_text(self, direction: QuizDirection) -> str:
        """Text expected as the answer for the given direction."""
        if direction == QuizDirection.ORIGINAL_TO_TRANSLATION:
            return self.translation
        return self.original


class SetMetadata(BaseModel):
    """Free-text context found on the photographed page."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    language: str = ""
    grade: str = ""
    chapter: str = ""
    page: str = ""


class VocabSet(BaseModel):
    """
    A titled, ordered list of vocabulary items owned by one user.
    """

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    id: str = Field(
        default_factory=_new_id,
        min_length=1,
        description="Unique identifier of the set.",
    )
    owner_id: str = Field(
        ..., min_length=1, description="Identifier of the owning user."
    )
    title: str = Field(..., description="Display title of the set.")
    metadata: SetMetadata = Field(default_factory=SetMetadata)
    items: List[VocabItem] = Field(
        default_factory=list,
        description="Authoritative, ordered vocabulary of the set.",
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="UTC timestamp when the set was created.",
    )
    last_score: Optional[int] = Field(
        default=None,
        ge=0,
        le=100,
        description="Score of the most recent direct play of this set.",
    )

    @field_validator("items")
    @classmethod
    def validate_unique_item_ids(cls, items: List[VocabItem]) -> List[VocabItem]:
        """Item ids must be unique within a set."""
        seen = set()
        for item in items:
            if item.id in seen:
                raise ValueError(f"Duplicate item id '{item.id}' in set.")
            seen.add(item.id)
        return items

    def get_item(self, item_id: str) -> Optional[VocabItem]:
        for item in self.items:
            if item.id == item_id:
                return item
        return None


class ItemRef(BaseModel):
    """Points at one item inside the set that owns it."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    owner_set_id: str
    item_id: str


class RealSetSource(BaseModel):
    """A session played directly on one persisted set."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["real_set"] = "real_set"
    set_id: str


class ToughAggregateSource(BaseModel):
    """
    The synthetic Tough Mode set. It is never persisted and has no set id;
    its items are referenced inside the sets that own them.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["tough_aggregate"] = "tough_aggregate"
    item_refs: Tuple[ItemRef, ...] = ()


PlaySource = Annotated[
    Union[RealSetSource, ToughAggregateSource], Field(discriminator="kind")
]


class ItemDelta(BaseModel):
    """Counter increments collected for one item during one session."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    correct_delta: int = Field(default=0, ge=0)
    wrong_delta: int = Field(default=0, ge=0)

    def __add__(self, other: "ItemDelta") -> "ItemDelta":
        return ItemDelta(
            correct_delta=self.correct_delta + other.correct_delta,
            wrong_delta=self.wrong_delta + other.wrong_delta,
        )


class SessionOutcome(BaseModel):
    """
    Result of one completed engine run. Consumed once by the reconciler.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    score_percentage: int = Field(..., ge=0, le=100)
    deltas: Dict[str, ItemDelta] = Field(
        default_factory=dict,
        description="Per-item counter increments, keyed by item id.",
    )
    updated_items: List[VocabItem] = Field(
        default_factory=list,
        description="Snapshots with incremented counters (touched items only).",
    )


class StreakRecord(BaseModel):
    """Persisted daily-activity streak of one owner."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    current: int = Field(default=0, ge=0)
    best: int = Field(default=0, ge=0)
    last_activity_date: Optional[date] = None
