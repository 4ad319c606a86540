"""
Pair-matching mode: a paginated two-column grid where each prompt on the
left has to be paired with its answer on the right.
"""

import logging
import random
from enum import Enum
from typing import Dict, List, Optional, Sequence, Set, Tuple

from ..constants import MATCHING_PAGE_SIZE
from ..models import GameMode, QuizDirection, VocabItem
from .base import GameEngine, shuffled

logger = logging.getLogger(__name__)


class MatchResult(str, Enum):
    IGNORED = "ignored"
    MATCHED = "matched"
    PAGE_COMPLETE = "page_complete"
    MISMATCH = "mismatch"


def paginate(
    items: Sequence[VocabItem],
    rng: random.Random,
    page_size: int = MATCHING_PAGE_SIZE,
) -> List[List[VocabItem]]:
    """
    Shuffle the items once and split them into pages of `page_size`.

    If the last page is short and the set holds at least `page_size` items,
    it is padded with random items from the rest of the set so every page
    has the same size. Padding never repeats an item within a page, but
    the same item may appear on two pages. Sets smaller than `page_size`
    produce a single short page.
    """
    order = shuffled(items, rng)
    if not order:
        return []

    pages = [
        order[start:start + page_size]
        for start in range(0, len(order), page_size)
    ]
    last_page = pages[-1]
    if len(last_page) < page_size and len(order) >= page_size:
        on_page = {item.id for item in last_page}
        pool = [item for item in order if item.id not in on_page]
        needed = page_size - len(last_page)
        last_page.extend(shuffled(pool, rng)[:needed])
    return pages


class MatchingEngine(GameEngine):
    """
    State machine for the matching grid.

    Left and right columns show the same items of the current page, each
    in its own random order; left shows the prompt side and right the
    answer side. A pair is correct when both selections refer to the same
    item. Correct matches add a correct delta to the item; a mismatch adds
    a wrong delta to the item selected on the left.

    The score denominator is the total number of match slots across all
    pages, so padding repeats count as extra slots. A set with fewer than
    six items is one short page, and its denominator is the item count
    rather than a full page of six.
    """

    mode = GameMode.MATCHING

    def __init__(
        self,
        items: Sequence[VocabItem],
        direction: QuizDirection = QuizDirection.ORIGINAL_TO_TRANSLATION,
        rng: Optional[random.Random] = None,
        auto_advance: bool = True,
        page_size: int = MATCHING_PAGE_SIZE,
    ):
        super().__init__(items, direction, rng, auto_advance)
        self.page_size = page_size
        self.pages: List[List[VocabItem]] = []
        self.page_index = 0
        self.left_column: List[VocabItem] = []
        self.right_column: List[VocabItem] = []
        self.matched_ids: Set[str] = set()
        self.selected_left_id: Optional[str] = None
        self.pending_wrong_pair: Optional[Tuple[str, str]] = None
        self._page_pending = False
        self.start()

    def start(self) -> None:
        self._reset_session()
        self.pages = paginate(self.items, self.rng, self.page_size)
        self.page_index = 0
        self._setup_page()

    @property
    def total_slots(self) -> int:
        return sum(len(page) for page in self.pages)

    @property
    def current_page(self) -> List[VocabItem]:
        if self.is_complete:
            return []
        return self.pages[self.page_index]

    @property
    def page_pending(self) -> bool:
        return self._page_pending

    def _page_items(self) -> Dict[str, VocabItem]:
        return {item.id: item for item in self.current_page}

    def _setup_page(self) -> None:
        page = self.pages[self.page_index]
        self.left_column = shuffled(page, self.rng)
        self.right_column = shuffled(page, self.rng)
        self.matched_ids = set()
        self.selected_left_id = None
        self.pending_wrong_pair = None
        self._page_pending = False
        logger.debug(
            f"Matching page {self.page_index + 1}/{len(self.pages)} "
            f"with {len(page)} pairs."
        )

    def select_left(self, item_id: str) -> bool:
        """
        Select a prompt in the left column.

        Ignored for matched items, items not on the current page, or while
        the page is complete. Clears a wrong pair that is still shown.
        """
        if self.is_complete or self._page_pending:
            return False
        if item_id in self.matched_ids or item_id not in self._page_items():
            return False
        self.pending_wrong_pair = None
        self.selected_left_id = item_id
        return True

    def select_right(self, item_id: str) -> MatchResult:
        """
        Pick an answer in the right column for the current left selection.
        """
        if self.is_complete or self._page_pending:
            return MatchResult.IGNORED
        if self.selected_left_id is None or self.pending_wrong_pair:
            return MatchResult.IGNORED
        page_items = self._page_items()
        if item_id in self.matched_ids or item_id not in page_items:
            return MatchResult.IGNORED

        left_id = self.selected_left_id
        if left_id == item_id:
            self.matched_ids.add(item_id)
            self._record(page_items[item_id], True)
            self.selected_left_id = None
            if len(self.matched_ids) == len(page_items):
                if self.auto_advance:
                    self._next_page()
                else:
                    self._page_pending = True
                return MatchResult.PAGE_COMPLETE
            return MatchResult.MATCHED

        self._record(page_items[left_id], False)
        self.pending_wrong_pair = (left_id, item_id)
        if self.auto_advance:
            self.clear_wrong()
        return MatchResult.MISMATCH

    def clear_wrong(self) -> None:
        """End the wrong-pair feedback and drop the left selection."""
        if self.pending_wrong_pair is None:
            return
        self.pending_wrong_pair = None
        self.selected_left_id = None

    def advance(self) -> None:
        if self.pending_wrong_pair is not None:
            self.clear_wrong()
        elif self._page_pending:
            self._page_pending = False
            self._next_page()

    def _next_page(self) -> None:
        self.page_index += 1
        if self.page_index >= len(self.pages):
            self._complete(total_graded_events=self.total_slots)
        else:
            self._setup_page()
