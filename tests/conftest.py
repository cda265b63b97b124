"""
Pytest configuration and shared fixtures for the mortgage calculator tests.
"""

import os

import pytest

# The app factory needs a secret key; tests that check its validation patch
# the environment themselves.
os.environ.setdefault("SECRET_KEY", "test-secret-key")

from mortgage_calculators import create_app  # noqa: E402
from mortgage_calculators.config import reset_global_settings  # noqa: E402
from mortgage_calculators.models import LoanInputs  # noqa: E402


@pytest.fixture
def app():
    """Create a Flask application configured for testing."""
    reset_global_settings()
    application = create_app("testing")
    yield application
    reset_global_settings()


@pytest.fixture
def client(app):
    """Create a test client for the application."""
    return app.test_client()


@pytest.fixture
def sample_loan():
    """A $300,000 30-year loan at 7%."""
    return LoanInputs(principal=300000, annual_interest_rate=7.0, term_months=360)
