# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - Shared fixtures over the fakes in tests/fakes.py
# =============================================================================

import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("OPENAI_API_KEY", "test-openai-key")
os.environ.setdefault("PAYSTACK_SECRET_KEY", "sk_test_key")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

import pytest

from core.models.chat import StudentContext
from core.models.profile import Profile, UserRole
from lib.supabase_client import SupabaseClient
from tests.fakes import ADMIN_ID, DONOR_ID, STUDENT_ID, FakeDatabase, FakePaymentGateway


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def fake_db():
    """Empty in-memory database."""
    return FakeDatabase()


@pytest.fixture
def db(fake_db):
    """SupabaseClient wrapper over the in-memory database."""
    return SupabaseClient(fake_db)


@pytest.fixture
def payments():
    return FakePaymentGateway()


@pytest.fixture
def student_profile(fake_db):
    row = fake_db.seed("profiles", {
        "id": STUDENT_ID,
        "email": "ada@example.com",
        "full_name": "Ada Obi",
        "role": "student",
        "school": "Lagos High",
        "grade": "10",
        "balance": 0,
    })[0]
    return Profile.model_validate(row)


@pytest.fixture
def donor_profile(fake_db):
    row = fake_db.seed("profiles", {
        "id": DONOR_ID,
        "email": "donor@example.com",
        "full_name": "Dee Donor",
        "role": "donor",
        "balance": 20,
    })[0]
    return Profile.model_validate(row)


@pytest.fixture
def admin_profile(fake_db):
    row = fake_db.seed("profiles", {
        "id": ADMIN_ID,
        "email": "admin@example.com",
        "full_name": "Ann Admin",
        "role": UserRole.ADMIN.value,
        "balance": 0,
    })[0]
    return Profile.model_validate(row)


@pytest.fixture
def student_context():
    return StudentContext(
        student_id=STUDENT_ID,
        full_name="Ada Obi",
        grade="10",
        school="Lagos High",
    )
