"""Shared CLI test fixtures."""

from __future__ import annotations

import os
from pathlib import Path

import pytest


@pytest.fixture
def in_container(db_dir: Path, copy_dir: Path, monkeypatch: pytest.MonkeyPatch) -> int:
    """Serve the fixture databases as if from the runtime container; returns its PID."""
    monkeypatch.setattr("ieddata.ops.DB_BASE_DIR", str(db_dir))
    monkeypatch.setenv("IEDDATA__DATABASE__TEMP_DIR", str(copy_dir))
    return os.getpid()
