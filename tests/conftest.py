import pytest


@pytest.fixture
def sleeps():
    """Recorded sleep durations; pass sleeps.append as the executor's sleep."""
    return []


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("INFLATION_CACHE_FILE", "INFLATION_DAY_ZERO", "INFLATION_REQUEST_LIMIT", "BLS_API_KEY"):
        monkeypatch.delenv(name, raising=False)
