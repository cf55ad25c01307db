"""Fixtures shared by unit and integration tests."""

# Copyright (C) 2010-2026 Evolveum and contributors
#
# Licensed under the EUPL-1.2 or later.

import pytest
from fastapi.testclient import TestClient

from src.app import api
from src.config import config


@pytest.fixture(autouse=True)
def isolated_storage(tmp_path, monkeypatch):
    """Keep session and job records of every test in its own temporary directory."""
    monkeypatch.setattr(config.storage, "sessions_dir", tmp_path / "sessions")
    monkeypatch.setattr(config.storage, "jobs_dir", tmp_path / "jobs")
    return tmp_path


@pytest.fixture
def test_client():
    """Return a test client for the FastAPI app."""
    return TestClient(api)
