"""
Difficulty classification of vocabulary items.

An item is "tough" when its lifetime success rate is strictly below
TOUGH_SUCCESS_RATE_THRESHOLD. The classification is stateless and is
recomputed from the current sets on every call.
"""

from typing import Iterable, List

from .constants import TOUGH_SUCCESS_RATE_THRESHOLD
from .models import ItemRef, ToughAggregateSource, VocabItem, VocabSet


def success_rate(item: VocabItem) -> float:
    """
    Return the share of correct answers for an item.

    Items without any attempt have a rate of 0.0.
    """
    total = item.total_attempts
    if total == 0:
        return 0.0
    return item.correct_count / total


def is_tough(
    item: VocabItem, threshold: float = TOUGH_SUCCESS_RATE_THRESHOLD
) -> bool:
    return success_rate(item) < threshold


def tough_items(
    sets: Iterable[VocabSet], threshold: float = TOUGH_SUCCESS_RATE_THRESHOLD
) -> List[VocabItem]:
    """
    Collect every tough item across all sets.

    Sets are visited in the given order and items in stored order. The
    returned items are the same instances held by the sets, not copies.
    """
    return [
        item
        for vocab_set in sets
        for item in vocab_set.items
        if is_tough(item, threshold)
    ]


def tough_source(
    sets: Iterable[VocabSet], threshold: float = TOUGH_SUCCESS_RATE_THRESHOLD
) -> ToughAggregateSource:
    """
    Build the Tough Mode play source: a reference to each tough item inside
    the set that owns it, in the same order as tough_items().
    """
    refs = tuple(
        ItemRef(owner_set_id=vocab_set.id, item_id=item.id)
        for vocab_set in sets
        for item in vocab_set.items
        if is_tough(item, threshold)
    )
    return ToughAggregateSource(item_refs=refs)
