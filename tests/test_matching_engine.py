import pytest

from revocab.engines import MatchingEngine, MatchResult, paginate
from revocab.models import ItemDelta, QuizDirection


def _solve_page(engine: MatchingEngine) -> None:
    for item in list(engine.left_column):
        engine.select_left(item.id)
        engine.select_right(item.id)


def _solve_all(engine: MatchingEngine) -> None:
    while not engine.is_complete:
        _solve_page(engine)


class TestPaginate:
    def test_thirteen_items_make_three_full_pages(self, make_items, rng):
        items = make_items(13)
        pages = paginate(items, rng)

        assert [len(page) for page in pages] == [6, 6, 6]
        for page in pages:
            assert len({item.id for item in page}) == 6

        first_pass = [item.id for page in pages for item in page][:13]
        assert sorted(first_pass) == sorted(item.id for item in items)

    def test_exact_multiple_needs_no_padding(self, make_items, rng):
        pages = paginate(make_items(12), rng)
        ids = [item.id for page in pages for item in page]
        assert [len(page) for page in pages] == [6, 6]
        assert len(set(ids)) == 12

    def test_small_set_is_one_short_page(self, make_items, rng):
        pages = paginate(make_items(4), rng)
        assert [len(page) for page in pages] == [4]

    def test_empty(self, rng):
        assert paginate([], rng) == []


def test_full_solve_scores_hundred(make_items, rng):
    engine = MatchingEngine(make_items(13), rng=rng)
    assert engine.total_slots == 18

    _solve_all(engine)

    assert engine.is_complete
    assert engine.outcome.score_percentage == 100
    assert engine.session_correct == 18
    assert set(engine.outcome.deltas) == {f"w{i}" for i in range(13)}
    padded_corrects = sum(d.correct_delta for d in engine.outcome.deltas.values())
    assert padded_corrects == 18


def test_small_set_uses_item_count_as_denominator(make_items, rng):
    engine = MatchingEngine(make_items(3), rng=rng)
    assert engine.total_slots == 3
    _solve_all(engine)
    assert engine.outcome.score_percentage == 100


def test_columns_show_the_same_page(make_items, rng):
    engine = MatchingEngine(make_items(8), rng=rng)
    page_ids = {item.id for item in engine.current_page}
    assert {item.id for item in engine.left_column} == page_ids
    assert {item.id for item in engine.right_column} == page_ids


def test_mismatch_counts_wrong_for_left_item(make_items, rng):
    engine = MatchingEngine(make_items(6), rng=rng)
    left, right = engine.left_column[0], engine.left_column[1]

    assert engine.select_left(left.id)
    assert engine.select_right(right.id) == MatchResult.MISMATCH

    assert engine.tally.merge_patch() == {left.id: ItemDelta(wrong_delta=1)}
    assert engine.selected_left_id is None
    assert engine.pending_wrong_pair is None

    _solve_all(engine)
    # 6 of 6 slots matched, one extra wrong event does not lower the score.
    assert engine.outcome.score_percentage == 100
    assert engine.outcome.deltas[left.id] == ItemDelta(correct_delta=1, wrong_delta=1)


def test_wrong_pair_blocks_input_until_cleared(make_items, rng):
    engine = MatchingEngine(make_items(6), rng=rng, auto_advance=False)
    left, right = engine.left_column[0], engine.left_column[1]
    engine.select_left(left.id)

    assert engine.select_right(right.id) == MatchResult.MISMATCH
    assert engine.pending_wrong_pair == (left.id, right.id)
    assert engine.select_right(left.id) == MatchResult.IGNORED
    assert len(engine.tally) == 1

    engine.advance()
    assert engine.pending_wrong_pair is None
    assert engine.selected_left_id is None


def test_selecting_left_clears_shown_wrong_pair(make_items, rng):
    engine = MatchingEngine(make_items(6), rng=rng, auto_advance=False)
    first, second = engine.left_column[0], engine.left_column[1]
    engine.select_left(first.id)
    engine.select_right(second.id)

    assert engine.select_left(second.id)
    assert engine.pending_wrong_pair is None
    assert engine.select_right(second.id) == MatchResult.MATCHED


def test_matched_items_cannot_be_selected_again(make_items, rng):
    engine = MatchingEngine(make_items(6), rng=rng)
    item = engine.left_column[0]
    engine.select_left(item.id)
    assert engine.select_right(item.id) == MatchResult.MATCHED

    assert engine.select_left(item.id) is False
    other = engine.left_column[1]
    engine.select_left(other.id)
    assert engine.select_right(item.id) == MatchResult.IGNORED
    assert len(engine.tally) == 1


def test_right_without_left_selection_is_ignored(make_items, rng):
    engine = MatchingEngine(make_items(6), rng=rng)
    assert engine.select_right(engine.right_column[0].id) == MatchResult.IGNORED
    assert len(engine.tally) == 0


def test_item_not_on_page_is_ignored(make_items, rng):
    engine = MatchingEngine(make_items(12), rng=rng)
    off_page = engine.pages[1][0]
    assert engine.select_left(off_page.id) is False


def test_page_pending_waits_for_advance(make_items, rng):
    engine = MatchingEngine(make_items(12), rng=rng, auto_advance=False)
    results = []
    for item in list(engine.left_column):
        engine.select_left(item.id)
        results.append(engine.select_right(item.id))

    assert results[-1] == MatchResult.PAGE_COMPLETE
    assert engine.page_pending
    assert engine.page_index == 0
    assert engine.select_left(engine.left_column[0].id) is False

    engine.advance()
    assert engine.page_index == 1
    assert not engine.page_pending


def test_reverse_direction_is_stored(make_items, rng):
    engine = MatchingEngine(
        make_items(6), direction=QuizDirection.TRANSLATION_TO_ORIGINAL, rng=rng
    )
    assert engine.direction == QuizDirection.TRANSLATION_TO_ORIGINAL


def test_restart_reshuffles_and_clears(make_items, rng):
    engine = MatchingEngine(make_items(7), rng=rng)
    _solve_all(engine)
    engine.start()

    assert not engine.is_complete
    assert engine.page_index == 0
    assert len(engine.tally) == 0
    assert engine.outcome is None


def test_interactions_after_completion_are_ignored(make_items, rng):
    engine = MatchingEngine(make_items(6), rng=rng)
    _solve_all(engine)
    assert engine.current_page == []
    assert engine.select_left("w0") is False
    assert engine.select_right("w0") == MatchResult.IGNORED


@pytest.mark.parametrize("count", [1, 6, 7])
def test_any_size_completes(make_items, rng, count):
    engine = MatchingEngine(make_items(count), rng=rng)
    _solve_all(engine)
    assert engine.is_complete
