"""TreeBPE: byte-pair encoding over arbitrary hashable alphabets."""

from ._alphabet import AlphabetRegistry
from ._progress import disable_progress, enable_progress
from ._tree import Leaf, Merge, TokenTree
from .factory import from_pretrained, generate
from .parallel import ParallelMode, list_parallel_modes
from .tokenizer import Tokenizer
from .trainer import BPETrainingResult, MergeRule, train_bpe

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("treebpe")
except PackageNotFoundError:
    __version__ = "dev"

__all__ = [
    "Tokenizer",
    "TokenTree",
    "Leaf",
    "Merge",
    "AlphabetRegistry",
    "MergeRule",
    "BPETrainingResult",
    "ParallelMode",
    "generate",
    "train_bpe",
    "from_pretrained",
    "list_parallel_modes",
    "enable_progress",
    "disable_progress",
]
