"""Unit tests for the BPE training loop."""

import logging

import pytest

from treebpe import Leaf, Merge, MergeRule, train_bpe
from treebpe.errors import TrainingError


LOREM = (
    "lorem ipsum dolor sit amet, consectetur adipiscing elit, sed do eiusmod "
    "tempor incididunt ut labore et dolore magna aliqua. ipsum dolor sit amet "
    "consectetur adipiscing. neque sodales ut etiam sit amet nisl purus in."
)


# Merge selection
# ---------------------------------------------------------------------------


def test_single_merge_scenario():
    """[a, b, a, b, c] learns (a, b) and rewrites to [ab, ab, c]."""
    result = train_bpe(list("ababc"), 1)

    a, b, c = (result.alphabet.lookup(el) for el in "abc")
    assert result.merges == [MergeRule(0, a, b, 3)]
    assert result.sequence == [3, 3, c]
    assert result.tree[3] == Merge(3, a, b)


def test_no_repeated_pair_stops_immediately():
    """[x, y, z, y] has no pair seen twice, so nothing is merged."""
    result = train_bpe(list("xyzy"), 1)
    assert result.merges == []
    assert result.n_merges_completed == 0
    assert result.sequence == [0, 1, 2, 1]
    assert len(result.tree) == 3


def test_tie_goes_to_earliest_pair():
    # (a, b) and (c, d) both occur twice; (a, b) shows up first
    result = train_bpe(list("abcdcdab"), 1)
    a, b = result.alphabet.lookup("a"), result.alphabet.lookup("b")
    assert result.merges[0][1:3] == (a, b)


def test_merges_build_on_each_other():
    result = train_bpe(list("abcabcabc"), 2)
    a, b, c = (result.alphabet.lookup(el) for el in "abc")
    assert result.merges == [MergeRule(0, a, b, 3), MergeRule(1, 3, c, 4)]
    assert result.sequence == [4, 4, 4]


def test_non_overlapping_runs():
    result = train_bpe(list("aaaaa"), 5)
    # (a, a) occurs 4 times; afterwards every pair is unique
    assert result.merges == [MergeRule(0, 0, 0, 1)]
    assert result.sequence == [1, 1, 0]


def test_min_frequency_one_merges_until_one_token():
    result = train_bpe(list("aaaaa"), 10, min_frequency=1)
    assert [(m.left, m.right) for m in result.merges] == [(0, 0), (1, 1), (2, 0)]
    assert result.sequence == [3]


# Degenerate inputs
# ---------------------------------------------------------------------------


def test_empty_input_is_valid():
    result = train_bpe([], 10)
    assert result.merges == []
    assert len(result.alphabet) == 0
    assert len(result.tree) == 0
    assert result.sequence == []


def test_single_element_input():
    result = train_bpe(["only"], 10)
    assert result.merges == []
    assert list(result.tree) == [Leaf(0, "only")]


def test_zero_merges_requested():
    result = train_bpe(list("ababab"), 0)
    assert result.merges == []
    assert len(result.alphabet) == 2


def test_invalid_arguments():
    with pytest.raises(TrainingError):
        train_bpe(list("abab"), -1)
    with pytest.raises(TrainingError):
        train_bpe(list("abab"), 1, min_frequency=0)


# Invariants
# ---------------------------------------------------------------------------


def test_vocabulary_bound():
    n_merges = 40
    result = train_bpe(LOREM, n_merges)
    assert len(result.merges) <= n_merges
    assert len(result.tree) == len(result.alphabet) + len(result.merges)


def test_merge_children_precede_merge():
    result = train_bpe(LOREM, 60)
    for rule in result.merges:
        assert rule.left < rule.new
        assert rule.right < rule.new
    assert [rule.rank for rule in result.merges] == list(range(len(result.merges)))


def test_working_sequence_shrinks_every_merge():
    result = train_bpe(LOREM, 60)
    lengths = [len(LOREM), *result.lengths]
    assert all(after < before for before, after in zip(lengths, lengths[1:]))
    assert lengths[-1] == len(result.sequence)


def test_training_is_deterministic():
    first = train_bpe(LOREM, 50)
    second = train_bpe(LOREM, 50)
    assert first.merges == second.merges
    assert list(first.tree) == list(second.tree)
    assert first.sequence == second.sequence


def test_generic_elements():
    """Any hashable value works as an alphabet element."""
    events = [("C4", 0.5), ("E4", 0.5), ("G4", 1.0)] * 3
    result = train_bpe(events, 5)
    assert len(result.alphabet) == 3
    spans = result.tree.spans()
    assert sum((spans[tok] for tok in result.sequence), ()) == tuple(events)


# Logging
# ---------------------------------------------------------------------------


def test_early_stop_logs_warning(caplog):
    with caplog.at_level(logging.WARNING, logger="treebpe.trainer"):
        train_bpe(list("xyzy"), 3)
    assert "stopping early" in caplog.text


def test_verbose_logs_each_merge(caplog):
    with caplog.at_level(logging.INFO, logger="treebpe.trainer"):
        train_bpe(list("abcabcabc"), 2, verbose=True)
    assert "merge 1/2" in caplog.text
    assert "merge 2/2" in caplog.text
