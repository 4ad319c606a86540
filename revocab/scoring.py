"""
Score aggregation for quiz sessions.

Engines record one graded event per answer into a SessionTally. When the
session completes, the tally is turned into a SessionOutcome: a score
percentage plus a merge patch of per-item counter deltas. The patch is
applied to persisted items exactly once, by the reconciler, through
apply_patch().
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Sequence

from .constants import LOW_SCORE_THRESHOLD, PERFECT_SCORE
from .models import ItemDelta, SessionOutcome, VocabItem

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GradedEvent:
    item_id: str
    correct: bool


def score_percentage(correct: int, total: int) -> int:
    """
    Percentage of correct events, rounded half up and clamped to [0, 100].

    Returns 0 when there were no graded events.
    """
    if total <= 0:
        return 0
    # Integer form of floor(100 * correct / total + 0.5)
    percentage = (200 * correct + total) // (2 * total)
    return max(0, min(100, percentage))


def result_message(score: int) -> str:
    """Short verdict shown after a session."""
    if score >= PERFECT_SCORE:
        return "Perfect!"
    if score < LOW_SCORE_THRESHOLD:
        return "Keep practising!"
    return "Well done!"


def summarize_events(events: Iterable[GradedEvent]) -> Dict[str, ItemDelta]:
    """Sum graded events into one ItemDelta per item id."""
    patch: Dict[str, ItemDelta] = {}
    for event in events:
        step = (
            ItemDelta(correct_delta=1)
            if event.correct
            else ItemDelta(wrong_delta=1)
        )
        patch[event.item_id] = patch.get(event.item_id, ItemDelta()) + step
    return patch


def subtract_patch(
    patch: Mapping[str, ItemDelta], committed: Mapping[str, ItemDelta]
) -> Dict[str, ItemDelta]:
    """
    Return the part of `patch` that is not yet covered by `committed`.

    Both maps come from the same growing tally, so every difference is
    non-negative. Items with nothing left are dropped.
    """
    remaining: Dict[str, ItemDelta] = {}
    for item_id, delta in patch.items():
        done = committed.get(item_id, ItemDelta())
        rest = ItemDelta(
            correct_delta=delta.correct_delta - done.correct_delta,
            wrong_delta=delta.wrong_delta - done.wrong_delta,
        )
        if rest.correct_delta or rest.wrong_delta:
            remaining[item_id] = rest
    return remaining


def apply_delta(item: VocabItem, delta: ItemDelta) -> VocabItem:
    """Return a copy of `item` with `delta` added to its counters."""
    return item.model_copy(
        update={
            "correct_count": item.correct_count + delta.correct_delta,
            "wrong_count": item.wrong_count + delta.wrong_delta,
        }
    )


def apply_patch(
    items: Sequence[VocabItem], patch: Mapping[str, ItemDelta]
) -> List[VocabItem]:
    """
    Apply a merge patch to a list of items.

    Items whose id is not in the patch are returned unchanged (same
    instance). Text fields are never modified.
    """
    return [
        apply_delta(item, patch[item.id]) if item.id in patch else item
        for item in items
    ]


class SessionTally:
    """
    Accumulates graded events and the per-item delta map of a session.
    """

    def __init__(self) -> None:
        self.events: List[GradedEvent] = []
        self._deltas: Dict[str, ItemDelta] = {}

    def record(self, item_id: str, correct: bool) -> None:
        self.events.append(GradedEvent(item_id=item_id, correct=correct))
        step = ItemDelta(correct_delta=1) if correct else ItemDelta(wrong_delta=1)
        self._deltas[item_id] = self._deltas.get(item_id, ItemDelta()) + step

    def reset(self) -> None:
        self.events = []
        self._deltas = {}

    @property
    def correct_events(self) -> int:
        return sum(1 for event in self.events if event.correct)

    def merge_patch(self) -> Dict[str, ItemDelta]:
        """Copy of the accumulated delta map."""
        return dict(self._deltas)

    def __len__(self) -> int:
        return len(self.events)


def build_outcome(
    items: Sequence[VocabItem],
    tally: SessionTally,
    session_correct: int,
    total_graded_events: int,
) -> SessionOutcome:
    """
    Turn a finished session into a SessionOutcome.

    Parameters:
        items: The item snapshot the engine was started with. Only items
            touched during the session appear in `updated_items`; repeats
            (e.g. matching-page padding) appear once.
        tally: The session's accumulated events.
        session_correct: Correct events counted for the score.
        total_graded_events: Denominator of the score, defined per mode.
    """
    patch = tally.merge_patch()
    seen = set()
    updated: List[VocabItem] = []
    for item in items:
        if item.id in patch and item.id not in seen:
            updated.append(apply_delta(item, patch[item.id]))
            seen.add(item.id)

    outcome = SessionOutcome(
        score_percentage=score_percentage(session_correct, total_graded_events),
        deltas=patch,
        updated_items=updated,
    )
    logger.debug(
        f"Built session outcome: {outcome.score_percentage}% over "
        f"{total_graded_events} graded events, {len(patch)} items touched."
    )
    return outcome
