# backend/tests/conftest.py
"""
Pytest configuration and fixtures.

This module provides shared fixtures for all tests:
- Test environment variables (set before any app module is imported)
- Account fixtures for the analytics engine
- A FastAPI TestClient
"""

import os

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("APP_NAME", "Test App")

import pytest

from app.services.analytics.types import AccountSeries
from tests.factories import make_series


# =============================================================================
# SERIES FIXTURES
# =============================================================================

@pytest.fixture
def parent_with_child() -> AccountSeries:
    """
    Parent account worth 300 holding a sub-account worth 200.

    Parent: 250 → 300, child: 180 → 200 (both COP, no flows).
    """
    child = AccountSeries(
        account_id=2,
        name="Emergency fund",
        currency="COP",
        points=make_series([180.0, 200.0]),
    )
    return AccountSeries(
        account_id=1,
        name="Savings",
        currency="COP",
        points=make_series([250.0, 300.0]),
        children=[child],
    )


# =============================================================================
# API FIXTURES
# =============================================================================

@pytest.fixture
def client():
    """TestClient for the FastAPI app (rate limiting disabled)."""
    from fastapi.testclient import TestClient

    from app.main import app

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()
