"""
Trained BPE tokenizer over a generic element alphabet.
"""

from collections.abc import Hashable, Iterable, Sequence
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Any, Final
import json
import logging

from ._alphabet import AlphabetRegistry, AlphabetView
from ._bpe import merge_in_place, pair_freqs
from ._sanitise import render_span
from ._tree import Leaf, Merge, TokenTree, TokenTreeView
from .errors import InvalidTokenError, ModelLoadError, ModelSaveError
from .parallel import ParallelMode, map_ordered
from .trainer import BPETrainingResult, MergeRule
from .types import Token, TokenPair


PREFIX: Final[str] = "TreeBPE"
try:
    _version = version("treebpe")
except PackageNotFoundError:
    _version = "dev"


VERSION: Final[str] = _version
MODEL_SUFFIX: Final[str] = ".model"
VOCAB_SUFFIX: Final[str] = ".vocab"
SECTION_MARKER: Final[str] = "---"

log = logging.getLogger(__name__)


class Tokenizer[T: Hashable]:
    """
    Immutable BPE tokenizer: alphabet, token tree and ordered merge rules.

    Instances are built by ``treebpe.generate`` or ``Tokenizer.load`` and are
    never modified afterwards, so encode and decode can be called from
    several threads at once.
    """

    def __init__(
        self,
        tree: TokenTree[T],
        alphabet: AlphabetRegistry[T],
        merges: Sequence[MergeRule],
    ) -> None:
        # private copies so later changes to the inputs cannot reach this tokenizer
        self._tree = tree.copy()
        self._alphabet = alphabet.copy(self._tree)
        self._merges: tuple[MergeRule, ...] = tuple(merges)
        # token pair -> rule, used to find the lowest ranked pair when encoding
        self._ranks: dict[TokenPair, MergeRule] = {
            (rule.left, rule.right): rule for rule in self._merges
        }
        # token -> raw elements, used for decoding
        self._spans: dict[Token, tuple[T, ...]] = self._tree.spans()

    @classmethod
    def from_result(cls, result: BPETrainingResult[T]) -> "Tokenizer[T]":
        """Wrap the output of ``train_bpe``."""
        return cls(result.tree, result.alphabet, result.merges)

    @property
    def tree(self) -> TokenTreeView[T]:
        return TokenTreeView(self._tree)

    @property
    def alphabet(self) -> AlphabetView[T]:
        return AlphabetView(self._alphabet)

    @property
    def merges(self) -> tuple[MergeRule, ...]:
        return self._merges

    def vocab_size(self) -> int:
        """Return the number of tokens: alphabet size plus merges."""
        return len(self._tree)

    def encode(self, sequence: Iterable[T]) -> list[Token]:
        """
        Encode raw elements into token ids.

        Elements are mapped to their leaf ids, then merge rules are applied in
        the order they were learned.

        :raises UnknownElementError: If an element was not seen during training.
        """
        tokens = [
            self._alphabet.lookup(element, position)
            for position, element in enumerate(sequence)
        ]
        return self._apply_merges(tokens)

    def decode(self, tokens: Iterable[Token]) -> list[T]:
        """
        Decode token ids back into raw elements.

        :raises InvalidTokenError: If any id is not in the token tree.
        """
        elements: list[T] = []
        for tok in tokens:
            if tok not in self._tree:
                raise InvalidTokenError("failed to decode", token=tok)
            elements.extend(self._spans[tok])
        return elements

    def encode_batch(
        self,
        sequences: Sequence[Iterable[T]],
        num_workers: int | None = None,
        parallel_mode: ParallelMode | str = ParallelMode.AUTO,
        show_progress: bool = True,
    ) -> list[list[Token]]:
        """Encode multiple sequences, optionally across a thread pool."""
        return map_ordered(
            self.encode,
            sequences,
            num_workers=num_workers,
            parallel_mode=parallel_mode,
            show_progress=show_progress,
            desc="encoding",
        )

    def decode_batch(
        self,
        token_batch: Sequence[Iterable[Token]],
        num_workers: int | None = None,
        parallel_mode: ParallelMode | str = ParallelMode.AUTO,
        show_progress: bool = True,
    ) -> list[list[T]]:
        """Decode multiple token sequences, optionally across a thread pool."""
        return map_ordered(
            self.decode,
            token_batch,
            num_workers=num_workers,
            parallel_mode=parallel_mode,
            show_progress=show_progress,
            desc="decoding",
        )

    def save(self, file_prefix: str) -> None:
        """
        Save tokenizer state to disk.

        Creates two files: a .model file with the alphabet and merge rules and
        a .vocab file with human-readable token representations.

        Elements are stored as JSON, so only plain str, int, float, bool, None
        and tuples of these are accepted. Subclasses such as NamedTuple or
        IntEnum would load back as their base type and are rejected.

        :param file_prefix: Path prefix for output files.

        :raises ModelSaveError: If an alphabet element cannot be stored as JSON.
        """
        log.info(f"saving tokenizer to {file_prefix}")
        self._save_model(file_prefix)
        self._save_vocab(file_prefix)
        log.info("tokenizer saved successfully")

    @classmethod
    def load(cls, model_filename: str) -> "Tokenizer[Any]":
        """
        Load tokenizer state from a .model file.

        Rebuilds the token tree leaf by leaf and merge by merge, checking that
        every id is allocated in order and every merge child already exists.

        :param model_filename: Path to the .model file.
        :raises ModelLoadError: If the file is missing, has the wrong extension,
            was written by another version or is structurally invalid.
        """
        path = Path(model_filename)

        if not path.is_file():
            raise ModelLoadError("model file not found", model_path=str(path))

        if not path.suffix == MODEL_SUFFIX:
            raise ModelLoadError("expected .model file", model_path=str(path))

        log.info(f"loading model from {path}")

        tree: TokenTree[Any] = TokenTree()
        alphabet = AlphabetRegistry(tree)
        merges: list[MergeRule] = []
        seen_pairs: set[TokenPair] = set()

        try:
            text = path.read_text(encoding="utf-8")
        except (UnicodeDecodeError, OSError) as e:
            raise ModelLoadError("unreadable model file", model_path=str(path)) from e

        # split on newlines only, JSON elements may hold other line separators
        lines = iter(text.split("\n"))

        # verify version match
        header = next(lines, "").split(" ")
        if len(header) != 2 or header[0] != PREFIX:
            raise ModelLoadError(
                f"missing {PREFIX} header", model_path=str(path)
            )
        if header[1] != VERSION:
            raise ModelLoadError(
                "model version mismatch",
                version_mismatch=(header[1], VERSION),
            )

        # read and load alphabet
        _expect_marker(next(lines, None))
        n_leaves = _read_count(next(lines, None), "leaf")
        log.debug(f"loading {n_leaves} alphabet elements")

        for expected in range(n_leaves):
            parts = _require(next(lines, None), "leaf").split(" ", 1)
            if len(parts) != 2:
                raise ModelLoadError(f"invalid leaf format: {parts}")
            tok = _parse_int(parts[0])
            if tok != expected:
                raise ModelLoadError(
                    f"leaf ids must be sequential: (expected {expected}) (got {tok})"
                )
            try:
                element = _freeze(json.loads(parts[1]))
            except json.JSONDecodeError as e:
                raise ModelLoadError(f"invalid leaf element: {parts[1]}") from e
            if element in alphabet:
                raise ModelLoadError(f"duplicate leaf element: {parts[1]}")
            alphabet.intern(element)

        # read and load merges
        _expect_marker(next(lines, None))
        n_merges = _read_count(next(lines, None), "merge")
        log.debug(f"loading {n_merges} merge rules")

        for rank in range(n_merges):
            line = _require(next(lines, None), "merge")
            try:
                left, right, new = map(int, line.split())
            except ValueError:
                raise ModelLoadError(f"invalid merge format at line: {line}")
            if (left, right) in seen_pairs:
                raise ModelLoadError(f"duplicate merge pair: {(left, right)}")
            try:
                tok = tree.add_merge(left, right)
            except InvalidTokenError as e:
                raise ModelLoadError(f"merge refers to unknown token: {line}") from e
            if tok != new:
                raise ModelLoadError(
                    f"merge ids must be sequential: (expected {tok}) (got {new})"
                )
            seen_pairs.add((left, right))
            merges.append(MergeRule(rank, left, right, new))

        trailing = [line for line in lines if line.strip()]
        if trailing:
            raise ModelLoadError(
                f"unexpected data after merge rules: {trailing[0]}"
            )

        tokenizer = cls(tree, alphabet, merges)
        log.info(
            f"model loaded successfully: {len(alphabet)} elements, "
            f"{len(merges)} merge rules, {tokenizer.vocab_size()} total tokens"
        )
        return tokenizer

    def _apply_merges(self, tokens: list[Token]) -> list[Token]:
        """Merge ``tokens`` in place, lowest ranked pair first, until nothing applies."""
        while len(tokens) >= 2:
            freqs = pair_freqs(tokens)
            # merging a pair only creates pairs with a higher rank, so taking
            # the lowest ranked present pair visits rules in learning order
            pair = min(
                freqs,
                key=lambda p: self._ranks[p].rank if p in self._ranks else float("inf"),
            )
            rule = self._ranks.get(pair)
            if rule is None:
                break
            merge_in_place(tokens, pair, rule.new)

        return tokens

    def _save_model(self, file_prefix: str) -> None:
        """Persist alphabet and merge rules to a .model file."""
        model_path = Path(file_prefix).with_suffix(MODEL_SUFFIX)
        # create directory if does not exist
        model_path.parent.mkdir(parents=True, exist_ok=True)

        # serialise before opening so a bad element leaves no partial file
        leaf_lines = [
            f"{leaf.id} {_dump_element(leaf.value)}\n" for leaf in self._tree.leaves()
        ]

        log.debug(f"saving model to {model_path}")
        log.debug(
            f"saving {len(leaf_lines)} alphabet elements and {len(self._merges)} merge rules"
        )

        with model_path.open("w", encoding="utf-8", newline="\n") as f:
            # header: format prefix and version
            f.write(f"{PREFIX} {VERSION}\n")
            # body 1: alphabet, one leaf per line
            f.write(f"{SECTION_MARKER}\n")
            f.write(f"{len(leaf_lines)}\n")
            f.writelines(leaf_lines)
            # body 2: merge rules in rank order
            f.write(f"{SECTION_MARKER}\n")
            f.write(f"{len(self._merges)}\n")
            for rule in self._merges:
                f.write(f"{rule.left} {rule.right} {rule.new}\n")

    def _save_vocab(self, file_prefix: str) -> None:
        """Persist human-readable token representations to a .vocab file."""
        vocab_path = Path(file_prefix).with_suffix(VOCAB_SUFFIX)
        vocab_path.parent.mkdir(parents=True, exist_ok=True)

        log.debug(f"saving vocab to {vocab_path}")

        with vocab_path.open("w", encoding="utf-8", newline="\n") as f:
            for node in self._tree:
                span = render_span(self._spans[node.id])
                match node:
                    # token arises from merging: show derivation from child tokens
                    case Merge(left=left, right=right):
                        left_span = render_span(self._spans[left])
                        right_span = render_span(self._spans[right])
                        f.write(f"[{node.id}] [{left_span}][{right_span}] -> {span}\n")
                    case Leaf():
                        f.write(f"[{node.id}] {span}\n")

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(alphabet={len(self._alphabet)}, "
            f"merges={len(self._merges)})"
        )


def _dump_element(element: Any) -> str:
    """Encode one alphabet element as single-line JSON."""
    try:
        encoded = json.dumps(element, ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise ModelSaveError("element is not JSON serialisable", element=element) from e
    # reject values that would come back as something else, e.g. NaN or a NamedTuple
    if not _same_value(_freeze(json.loads(encoded)), element):
        raise ModelSaveError("element does not survive a JSON round trip", element=element)
    return encoded


def _same_value(restored: Any, original: Any) -> bool:
    """Compare by exact type as well as value, element by element for tuples."""
    if type(restored) is not type(original):
        return False
    if isinstance(original, tuple):
        return len(restored) == len(original) and all(
            _same_value(r, o) for r, o in zip(restored, original)
        )
    return restored == original


def _freeze(value: Any) -> Any:
    """Turn JSON arrays back into (hashable) tuples."""
    if isinstance(value, list):
        return tuple(_freeze(item) for item in value)
    if isinstance(value, dict):
        raise ModelLoadError(f"unsupported leaf element: {value}")
    return value


def _require(line: str | None, what: str) -> str:
    if line is None:
        raise ModelLoadError(f"unexpected end of file while reading {what}")
    return line


def _expect_marker(line: str | None) -> None:
    if line is None or line.strip() != SECTION_MARKER:
        raise ModelLoadError(
            f"section marker missing: (expected {SECTION_MARKER}) (got {line})"
        )


def _parse_int(raw: str) -> int:
    try:
        return int(raw)
    except ValueError:
        raise ModelLoadError(f"token is not a number: {raw}")


def _read_count(line: str | None, what: str) -> int:
    raw = _require(line, f"{what} count").strip()
    try:
        count = int(raw)
        if count < 0:
            raise ValueError()
    except ValueError:
        raise ModelLoadError(f"invalid {what} count: {raw}")
    return count
