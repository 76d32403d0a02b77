"""Pytest configuration and shared fixtures."""

import pytest

from src.core import db_client


@pytest.fixture(autouse=True)
def reset_pocketbase_client():
    """Drop any cached PocketBase client so tests never share an authenticated session."""
    db_client.reset_client()
    yield
    db_client.reset_client()
