"""Shared fixtures for recordkit tests."""

import pytest

from recordkit.config import reset_settings
from recordkit.messages import reset_lang


@pytest.fixture(autouse=True)
def english_messages(monkeypatch):
    """Every test starts with default settings and English messages."""
    monkeypatch.delenv("RECORDKIT_LANG", raising=False)
    monkeypatch.delenv("RECORDKIT_MAX_VALUE_LENGTH", raising=False)
    reset_settings()
    reset_lang()
    yield
    reset_settings()
    reset_lang()
