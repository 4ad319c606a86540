"""
Library-wide progress statistics computed from the owner's sets.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .constants import PROBLEM_WORD_LIMIT
from .models import VocabItem, VocabSet
from .scoring import score_percentage


@dataclass
class ProblemWord:
    item: VocabItem
    set_title: str


@dataclass
class SetScore:
    set_id: str
    title: str
    item_count: int
    last_score: Optional[int]


@dataclass
class LibraryStatistics:
    total_items: int
    total_correct: int
    total_wrong: int
    success_rate_percentage: int
    problem_words: List[ProblemWord] = field(default_factory=list)
    set_scores: List[SetScore] = field(default_factory=list)

    @property
    def total_attempts(self) -> int:
        return self.total_correct + self.total_wrong


def compute_statistics(
    sets: Sequence[VocabSet], problem_word_limit: int = PROBLEM_WORD_LIMIT
) -> LibraryStatistics:
    """
    Aggregate counters over all sets.

    Problem words are items with at least one wrong answer, most wrong
    answers first (ties keep library order).
    """
    total_items = 0
    total_correct = 0
    total_wrong = 0
    candidates: List[ProblemWord] = []
    set_scores: List[SetScore] = []

    for vocab_set in sets:
        total_items += len(vocab_set.items)
        set_scores.append(
            SetScore(
                set_id=vocab_set.id,
                title=vocab_set.title,
                item_count=len(vocab_set.items),
                last_score=vocab_set.last_score,
            )
        )
        for item in vocab_set.items:
            total_correct += item.correct_count
            total_wrong += item.wrong_count
            if item.wrong_count > 0:
                candidates.append(
                    ProblemWord(item=item, set_title=vocab_set.title)
                )

    problem_words = sorted(
        candidates, key=lambda p: p.item.wrong_count, reverse=True
    )[:problem_word_limit]

    return LibraryStatistics(
        total_items=total_items,
        total_correct=total_correct,
        total_wrong=total_wrong,
        success_rate_percentage=score_percentage(
            total_correct, total_correct + total_wrong
        ),
        problem_words=problem_words,
        set_scores=set_scores,
    )
