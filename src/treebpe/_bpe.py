"""
Core Byte Pair Encoding (BPE) operations.
"""

from .types import Token, TokenPair


def pair_freqs(tokens: list[Token]) -> dict[TokenPair, int]:
    """
    Compute the frequency of all consecutive token pairs in the token list.

    The returned dict keeps pairs in order of their first occurrence, which is
    what ``select_pair`` relies on to break ties.

    Args:
        tokens (list[Token]): List of tokens to analyze.

    Returns:
        dict[TokenPair, int]: Mapping of token pairs to their occurrence counts.
    """
    pairs: dict[TokenPair, int] = {}

    for i in range(len(tokens) - 1):
        pair = (tokens[i], tokens[i + 1])
        pairs[pair] = pairs.get(pair, 0) + 1

    return pairs


def select_pair(
    freqs: dict[TokenPair, int], min_frequency: int = 2
) -> tuple[TokenPair, int] | None:
    """
    Pick the most frequent pair, preferring the one that occurs first.

    Args:
        freqs (dict[TokenPair, int]): Pair counts in first-occurrence order.
        min_frequency (int): Smallest count worth merging.

    Returns:
        tuple[TokenPair, int] | None: The winning pair and its count, or
        ``None`` if no pair reaches ``min_frequency``.
    """
    best: TokenPair | None = None
    best_count = 0
    for pair, count in freqs.items():
        # strict comparison keeps the earliest pair on ties
        if count > best_count:
            best, best_count = pair, count

    if best is None or best_count < min_frequency:
        return None
    return best, best_count


def merge_in_place(tokens: list[Token], target: TokenPair, new_tok: Token) -> int:
    """
    Replace every occurrence of ``target`` in ``tokens`` with ``new_tok``.

    Scans left to right and skips past each replacement, so occurrences never
    overlap: ``[a, a, a]`` merged on ``(a, a)`` becomes ``[aa, a]``.

    Args:
        tokens (list[Token]): Sequence rewritten in place.
        target (TokenPair): The consecutive pair of tokens to merge.
        new_tok (Token): The new token that replaces the target pair.

    Returns:
        int: Number of replacements made.
    """
    left, right = target
    n = len(tokens)
    read = write = 0
    replaced = 0

    while read < n:
        if read < n - 1 and tokens[read] == left and tokens[read + 1] == right:
            tokens[write] = new_tok
            read += 2
            replaced += 1
        else:
            tokens[write] = tokens[read]
            read += 1
        write += 1

    del tokens[write:]
    return replaced
