# tests/conftest.py
"""
Global test bootstrap
- Sets env BEFORE importing the package so `settings` picks it up
- Memory repositories by default; SQL tests build their own SQLite engine
- Clears the process-wide output cache between tests
"""

from __future__ import annotations

import os

# ──────────────────────────────────────────────────────────────────────────────
# 🌱 Test env (set before any `movies_api` import)
# ──────────────────────────────────────────────────────────────────────────────
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-movies-api")
os.environ.setdefault("API_KEY", "test-api-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./.pytest-movies.db")
os.environ.setdefault("MOVIES_REPOSITORY_BACKEND", "memory")
os.environ.setdefault("LOG_TO_FILE", "0")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest  # noqa: E402

from movies_api.core.cache import movies_cache  # noqa: E402

# ──────────────────────────────────────────────────────────────────────────────
# 📦 Pull in the rest of the fixtures (db, app, tokens)
# ──────────────────────────────────────────────────────────────────────────────
from tests.fixtures.db import *  # noqa: F401,F403,E402
from tests.fixtures.app import *  # noqa: F401,F403,E402
from tests.fixtures.tokens import *  # noqa: F401,F403,E402


@pytest.fixture(autouse=True)
def _clear_movies_cache():
    movies_cache.clear()
    yield
    movies_cache.clear()
