"""Progress bars for training and batch work, behind one global switch."""

from collections.abc import Iterable
import os

from tqdm import tqdm

DISABLE_ENV: str = "TREEBPE_DISABLE_PROGRESS"

_enabled: bool = True


def enable_progress() -> None:
    """Turn progress bars back on after ``disable_progress``."""
    global _enabled
    _enabled = True


def disable_progress() -> None:
    """Silence progress bars for training and batch encode/decode."""
    global _enabled
    _enabled = False


def progress_active(requested: bool) -> bool:
    """A bar shows only if the caller asked, the switch is on and the env allows it."""
    if os.environ.get(DISABLE_ENV, "").strip() == "1":
        return False
    return requested and _enabled


def progress_bar(
    iterable: Iterable | None = None,
    *,
    requested: bool,
    total: int | None = None,
    desc: str,
    unit: str,
) -> tqdm:
    """Build a tqdm bar that is disabled unless ``progress_active`` allows it."""
    return tqdm(
        iterable,
        total=total,
        desc=desc,
        unit=unit,
        disable=not progress_active(requested),
    )
