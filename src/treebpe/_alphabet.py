"""Alphabet registry mapping raw elements to leaf token ids."""

from collections.abc import Hashable, Iterator

from ._tree import TokenTree
from .errors import UnknownElementError
from .types import Token


class AlphabetRegistry[T: Hashable]:
    """
    Bijection between distinct raw elements and their leaf ids.

    Leaf ids are allocated by the owning ``TokenTree`` so they share the
    counter used for merge tokens.
    """

    def __init__(self, tree: TokenTree[T]) -> None:
        self._tree = tree
        # raw element -> leaf id, insertion order is first-sight order
        self._ids: dict[T, Token] = {}

    def intern(self, element: T) -> Token:
        """Return the leaf id for ``element``, creating the leaf on first sight."""
        tok = self._ids.get(element)
        if tok is None:
            tok = self._tree.add_leaf(element)
            self._ids[element] = tok
        return tok

    def lookup(self, element: T, position: int | None = None) -> Token:
        """
        Return the leaf id for a known element.

        :raises UnknownElementError: If ``element`` was never interned.
        """
        try:
            return self._ids[element]
        except KeyError:
            raise UnknownElementError(
                "element not in alphabet", element=element, position=position
            ) from None
        except TypeError as e:
            # unhashable input can never have been interned
            raise UnknownElementError(
                "element not in alphabet", element=element, position=position
            ) from e

    def __contains__(self, element: object) -> bool:
        try:
            return element in self._ids
        except TypeError:
            return False

    def __len__(self) -> int:
        return len(self._ids)

    def __iter__(self) -> Iterator[T]:
        return iter(self._ids)

    def items(self) -> Iterator[tuple[T, Token]]:
        """Yield ``(element, leaf id)`` pairs in id order."""
        return iter(self._ids.items())

    def copy(self, tree: TokenTree[T]) -> "AlphabetRegistry[T]":
        """
        Return a registry with the same mapping that allocates from ``tree``.

        ``tree`` must already hold the leaves this registry points at.
        """
        registry = AlphabetRegistry(tree)
        registry._ids = dict(self._ids)
        return registry


class AlphabetView[T: Hashable]:
    """Read-only access to an ``AlphabetRegistry``."""

    __slots__ = ("_registry",)

    def __init__(self, registry: AlphabetRegistry[T]) -> None:
        self._registry = registry

    def lookup(self, element: T, position: int | None = None) -> Token:
        """
        Return the leaf id for a known element.

        :raises UnknownElementError: If ``element`` is not in the alphabet.
        """
        return self._registry.lookup(element, position)

    def __contains__(self, element: object) -> bool:
        return element in self._registry

    def __len__(self) -> int:
        return len(self._registry)

    def __iter__(self) -> Iterator[T]:
        return iter(self._registry)

    def items(self) -> Iterator[tuple[T, Token]]:
        """Yield ``(element, leaf id)`` pairs in id order."""
        return self._registry.items()
