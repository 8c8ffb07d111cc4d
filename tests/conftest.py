"""Shared fixtures."""

from __future__ import annotations

import pytest

from hookseal.core.config import clear_settings


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch):
    """Drop cached settings and any WEBHOOK_* variables between tests."""
    for name in ("WEBHOOK_SECRET", "WEBHOOK_SIGNATURE_HEADER", "WEBHOOK_TOLERANCE"):
        monkeypatch.delenv(name, raising=False)
    clear_settings()
    yield
    clear_settings()
