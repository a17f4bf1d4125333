"""Custom exception hierarchy for treebpe tokenization errors."""

from typing import Any

from .types import Token


class TreeBPEError(Exception):
    """Base exception for all treebpe errors."""


class UnknownElementError(TreeBPEError):
    """Raised when encoding meets an element that was never seen in training."""

    def __init__(
        self,
        message: str,
        *,
        element: Any = None,
        position: int | None = None,
    ) -> None:
        """Initialize with the offending element and its position in the input."""
        extra = f" (element: {element!r})"
        if position is not None:
            extra += f" (position: {position})"
        super().__init__(message + extra)
        self.element = element
        self.position = position


class InvalidTokenError(TreeBPEError):
    """Raised when a token id is not part of the token tree."""

    def __init__(self, message: str, *, token: Token | None = None) -> None:
        extra = ""
        if token is not None:
            extra += f" (invalid token: {token})"
        super().__init__(message + extra)
        self.token = token


class TrainingError(TreeBPEError):
    """Raised when tokenizer training fails."""

    def __init__(self, message: str, *, n_merges: int | None = None) -> None:
        if n_merges is not None:
            message = f"{message} (n_merges: {n_merges})"
        super().__init__(message)
        self.n_merges = n_merges


class ModelLoadError(TreeBPEError):
    """Raised when loading a tokenizer model fails."""

    def __init__(
        self,
        message: str,
        *,
        model_path: str | None = None,
        version_mismatch: tuple[str, str] | None = None,
    ) -> None:
        extra = " "
        if model_path:
            extra += f"(path: {model_path}) "
        if version_mismatch is not None:
            extra += f"(expected: {version_mismatch[1]}) (got {version_mismatch[0]}) "
        super().__init__(message + extra)
        self.model_path = model_path
        self.version_mismatch = version_mismatch


class ModelSaveError(TreeBPEError):
    """Raised when a tokenizer cannot be written to disk."""

    def __init__(self, message: str, *, element: Any = None) -> None:
        if element is not None:
            message = f"{message} (element: {element!r})"
        super().__init__(message)
        self.element = element


class ParallelModeError(TreeBPEError):
    """Raised when an unknown parallel mode is requested."""

    def __init__(
        self,
        message: str,
        *,
        invalid_name: str | None = None,
        available: list[str] | None = None,
    ) -> None:
        extra = " "
        if invalid_name:
            extra += f"(available: {available}) (got {invalid_name}) "
        super().__init__(message + extra)
        self.invalid_name = invalid_name
        self.available = available
