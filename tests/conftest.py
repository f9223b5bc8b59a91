import pytest


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("SPLIT_API_KEY", raising=False)
    monkeypatch.delenv("SPLIT_API_BASE", raising=False)
