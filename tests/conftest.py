import pytest


@pytest.fixture(autouse=True)
def no_progress_bars(monkeypatch):
    """Keep tqdm output out of test logs."""
    monkeypatch.setenv("TREEBPE_DISABLE_PROGRESS", "1")
