"""Factory functions for creating tokenizers."""

from collections.abc import Hashable, Iterable
from typing import Any

from ._decorators import measure_time
from .tokenizer import Tokenizer
from .trainer import train_bpe


@measure_time
def generate[T: Hashable](
    sequence: Iterable[T],
    n_merges: int,
    *,
    min_frequency: int = 2,
    verbose: bool = False,
    show_progress: bool = True,
) -> Tokenizer[T]:
    """
    Train a tokenizer on a sequence of raw elements.

    :param sequence: Training elements; any hashable values.
    :param n_merges: Maximum number of merges to learn on top of the alphabet.
    :param min_frequency: Smallest pair count that is still merged.
    :param verbose: Log each learned merge when ``True``.
    :param show_progress: Display a progress bar during training when ``True``.
    :return: Trained tokenizer. It holds fewer than ``n_merges`` merges when
             the sequence runs out of repeated pairs first.
    :raises TrainingError: If ``n_merges`` or ``min_frequency`` is invalid.

    .. code-block:: python

        tokenizer = generate("abracadabra", n_merges=4)
        tokens = tokenizer.encode("abracadabra")
    """
    result = train_bpe(
        sequence,
        n_merges,
        min_frequency=min_frequency,
        verbose=verbose,
        show_progress=show_progress,
    )
    return Tokenizer.from_result(result)


def from_pretrained(model_path: str) -> Tokenizer[Any]:
    """
    Load a pre-trained tokenizer from disk.

    :param model_path: Path to the .model file.
    :return: Loaded tokenizer instance with alphabet, token tree and merges.
    :raises ModelLoadError: If the file is missing, has the wrong extension or
                            holds an inconsistent token tree.

    .. code-block:: python

        tokenizer = from_pretrained("path/to/model.model")
        tokens = tokenizer.encode(["C4", "E4", "G4"])
    """
    return Tokenizer.load(model_path)
