"""
Token tree stored as a flat arena indexed by token id.

Leaves wrap a raw alphabet element, merges reference their two children by id.
Ids come from a single counter so a merge's children always have smaller ids
than the merge itself.
"""

from collections.abc import Hashable, Iterator
from dataclasses import dataclass
import logging

from .errors import InvalidTokenError
from .types import Token

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Leaf[T: Hashable]:
    """Token for a single raw element."""

    id: Token
    value: T


@dataclass(frozen=True, slots=True)
class Merge:
    """Token for the concatenation of ``left`` then ``right``."""

    id: Token
    left: Token
    right: Token


type Node[T: Hashable] = Leaf[T] | Merge


class TokenTree[T: Hashable]:
    """Append-only forest of leaf and merge tokens."""

    def __init__(self) -> None:
        # token id -> node, position in list is the id
        self._nodes: list[Node[T]] = []

    def add_leaf(self, value: T) -> Token:
        """Allocate the next id for a leaf wrapping ``value``."""
        tok = len(self._nodes)
        self._nodes.append(Leaf(tok, value))
        return tok

    def add_merge(self, left: Token, right: Token) -> Token:
        """
        Allocate the next id for a merge of two existing tokens.

        :raises InvalidTokenError: If either child is not already in the tree.
        """
        for child in (left, right):
            if child not in self:
                raise InvalidTokenError("merge child not in tree", token=child)
        tok = len(self._nodes)
        self._nodes.append(Merge(tok, left, right))
        return tok

    def __getitem__(self, tok: Token) -> Node[T]:
        if tok not in self:
            raise InvalidTokenError("token not in tree", token=tok)
        return self._nodes[tok]

    def __contains__(self, tok: object) -> bool:
        # bool is an int subclass but never a valid id
        return (
            isinstance(tok, int)
            and not isinstance(tok, bool)
            and 0 <= tok < len(self._nodes)
        )

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[Node[T]]:
        return iter(self._nodes)

    def leaves(self) -> Iterator[Leaf[T]]:
        """Yield leaf nodes in id order."""
        return (node for node in self._nodes if isinstance(node, Leaf))

    def merges(self) -> Iterator[Merge]:
        """Yield merge nodes in id order."""
        return (node for node in self._nodes if isinstance(node, Merge))

    def spans(self) -> dict[Token, tuple[T, ...]]:
        """
        Expand every token into the raw elements it stands for.

        Built in id order, so both children of a merge are already expanded
        when the merge is reached.
        """
        spans: dict[Token, tuple[T, ...]] = {}
        for node in self._nodes:
            match node:
                case Leaf(id=tok, value=value):
                    spans[tok] = (value,)
                case Merge(id=tok, left=left, right=right):
                    spans[tok] = spans[left] + spans[right]

        log.debug(f"expanded {len(spans)} tokens")
        return spans

    def copy(self) -> "TokenTree[T]":
        """Return an independent tree holding the same nodes."""
        tree: TokenTree[T] = TokenTree()
        # nodes are frozen, sharing them is safe
        tree._nodes = list(self._nodes)
        return tree


class TokenTreeView[T: Hashable]:
    """Read-only access to a ``TokenTree``."""

    __slots__ = ("_tree",)

    def __init__(self, tree: TokenTree[T]) -> None:
        self._tree = tree

    def __getitem__(self, tok: Token) -> Node[T]:
        return self._tree[tok]

    def __contains__(self, tok: object) -> bool:
        return tok in self._tree

    def __len__(self) -> int:
        return len(self._tree)

    def __iter__(self) -> Iterator[Node[T]]:
        return iter(self._tree)

    def leaves(self) -> Iterator[Leaf[T]]:
        return self._tree.leaves()

    def merges(self) -> Iterator[Merge]:
        return self._tree.merges()
