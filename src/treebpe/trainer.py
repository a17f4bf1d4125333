"""Standalone BPE training module."""

from collections.abc import Hashable, Iterable
from dataclasses import dataclass, field
from typing import NamedTuple
import logging

from ._alphabet import AlphabetRegistry
from ._bpe import merge_in_place, pair_freqs, select_pair
from ._progress import progress_bar
from ._tree import TokenTree
from .errors import TrainingError
from .types import Token

log = logging.getLogger(__name__)


class MergeRule(NamedTuple):
    """One learned merge; ``rank`` is its position in learning order."""

    rank: int
    left: Token
    right: Token
    new: Token


@dataclass
class BPETrainingResult[T: Hashable]:
    """Results from one BPE training run."""

    tree: TokenTree[T]
    alphabet: AlphabetRegistry[T]
    merges: list[MergeRule]
    # working sequence after the last merge
    sequence: list[Token]
    # working sequence length after each merge
    lengths: list[int] = field(default_factory=list)

    @property
    def n_merges_completed(self) -> int:
        return len(self.merges)


def train_bpe[T: Hashable](
    sequence: Iterable[T],
    n_merges: int,
    *,
    min_frequency: int = 2,
    verbose: bool = False,
    show_progress: bool = True,
) -> BPETrainingResult[T]:
    """
    Learn up to ``n_merges`` merge rules from a raw element sequence.

    Every distinct element gets a leaf id in first-sight order. Each iteration
    then merges the most frequent adjacent pair (earliest pair wins ties) and
    rewrites the working sequence in place. Training stops early once fewer
    than two tokens remain or no pair occurs at least ``min_frequency`` times.

    :param sequence: Raw training elements. Any hashable values.
    :param n_merges: Maximum number of merge operations to perform.
    :param min_frequency: Smallest pair count that is still merged.
    :param verbose: Log each learned merge when ``True``.
    :param show_progress: Display a progress bar during training when ``True``.
    :returns: Training output with the token tree, alphabet and merge rules.
    :raises TrainingError: If ``n_merges`` is negative or ``min_frequency`` < 1.
    """
    if n_merges < 0:
        raise TrainingError("number of merges must be non-negative", n_merges=n_merges)
    if min_frequency < 1:
        raise TrainingError(f"min_frequency must be at least 1, got {min_frequency}")

    tree: TokenTree[T] = TokenTree()
    alphabet = AlphabetRegistry(tree)
    tokens = [alphabet.intern(element) for element in sequence]

    log.debug(
        f"training on {len(tokens)} elements with an alphabet of {len(alphabet)}"
    )

    merges: list[MergeRule] = []
    lengths: list[int] = []

    with progress_bar(
        requested=show_progress, total=n_merges, desc="training", unit="merge"
    ) as pbar:
        for rank in range(n_merges):
            if len(tokens) < 2:
                break
            best = select_pair(pair_freqs(tokens), min_frequency)
            if best is None:
                break

            (left, right), count = best
            new_tok = tree.add_merge(left, right)
            merge_in_place(tokens, (left, right), new_tok)

            merges.append(MergeRule(rank, left, right, new_tok))
            lengths.append(len(tokens))
            pbar.update(1)

            if verbose:
                log.info(
                    "merge %d/%d: %s -> %d (%d occurrences)",
                    rank + 1,
                    n_merges,
                    (left, right),
                    new_tok,
                    count,
                )

    if len(merges) < n_merges:
        log.warning(
            f"no more pairs to merge after {len(merges)} merges "
            f"(requested {n_merges}) stopping early"
        )

    return BPETrainingResult(
        tree=tree,
        alphabet=alphabet,
        merges=merges,
        sequence=tokens,
        lengths=lengths,
    )


__all__ = ["MergeRule", "BPETrainingResult", "train_bpe"]
