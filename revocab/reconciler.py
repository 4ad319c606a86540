"""
Merges a completed session outcome back into the owner's sets.

The reconciler is pure: it takes the current collection of sets, the play
source and the outcome, and returns a full replacement collection for the
persistence layer to store. It is the only place where lifetime counters
change.
"""

import logging
from collections import defaultdict
from typing import Dict, List, Sequence

from .models import (
    ItemDelta,
    RealSetSource,
    SessionOutcome,
    ToughAggregateSource,
    VocabSet,
)
from .scoring import apply_patch

logger = logging.getLogger(__name__)


class SessionReconciler:
    """
    Applies session outcomes to the sets that own the played items.

    - A directly played set gets its items patched and its `last_score`
      set to the session score.
    - A Tough Mode session patches each referenced item inside its owning
      set and leaves every `last_score` untouched. References to sets or
      items that no longer exist are skipped.
    """

    def commit(
        self,
        sets: Sequence[VocabSet],
        source: "RealSetSource | ToughAggregateSource",
        outcome: SessionOutcome,
    ) -> List[VocabSet]:
        """
        Return the new collection of sets with `outcome` applied.

        Parameters:
            sets: The owner's current sets.
            source: What was played: a real set or the Tough aggregate.
            outcome: The completed session's outcome.

        Returns:
            List[VocabSet]: One entry per input set, in the same order.
            Untouched sets are returned as-is.
        """
        if isinstance(source, RealSetSource):
            return self._commit_real_set(sets, source, outcome)
        if isinstance(source, ToughAggregateSource):
            return self._commit_tough_aggregate(sets, source, outcome)
        raise TypeError(f"Unsupported play source: {source!r}")

    def _commit_real_set(
        self,
        sets: Sequence[VocabSet],
        source: RealSetSource,
        outcome: SessionOutcome,
    ) -> List[VocabSet]:
        result: List[VocabSet] = []
        found = False
        for vocab_set in sets:
            if vocab_set.id != source.set_id:
                result.append(vocab_set)
                continue
            found = True
            result.append(
                vocab_set.model_copy(
                    update={
                        "items": apply_patch(vocab_set.items, outcome.deltas),
                        "last_score": outcome.score_percentage,
                    }
                )
            )
        if found:
            logger.info(
                f"Committed session for set {source.set_id}: "
                f"{outcome.score_percentage}%, "
                f"{len(outcome.deltas)} items updated."
            )
        else:
            logger.debug(
                f"Set {source.set_id} no longer exists; session outcome dropped."
            )
        return result

    def _commit_tough_aggregate(
        self,
        sets: Sequence[VocabSet],
        source: ToughAggregateSource,
        outcome: SessionOutcome,
    ) -> List[VocabSet]:
        patches: Dict[str, Dict[str, ItemDelta]] = defaultdict(dict)
        for ref in source.item_refs:
            delta = outcome.deltas.get(ref.item_id)
            if delta is not None:
                patches[ref.owner_set_id][ref.item_id] = delta

        result: List[VocabSet] = []
        touched_sets = 0
        for vocab_set in sets:
            patch = patches.pop(vocab_set.id, None)
            if not patch:
                result.append(vocab_set)
                continue
            touched_sets += 1
            missing = set(patch) - {item.id for item in vocab_set.items}
            if missing:
                logger.debug(
                    f"Skipping {len(missing)} items no longer in set "
                    f"{vocab_set.id}."
                )
            result.append(
                vocab_set.model_copy(
                    update={"items": apply_patch(vocab_set.items, patch)}
                )
            )

        for orphan_set_id in patches:
            logger.debug(
                f"Skipping Tough Mode updates for deleted set {orphan_set_id}."
            )
        logger.info(
            f"Committed Tough Mode session across {touched_sets} sets: "
            f"{len(outcome.deltas)} items updated."
        )
        return result
