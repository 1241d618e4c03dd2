# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the SmartHub API:
# - fakes.py: In-memory Supabase, mocked OpenAI client, fake payment gateway
# - test_models.py: Unit tests for Pydantic model validation
# - test_*_service.py: Service tests against the in-memory database
# - test_api.py / test_websocket.py: Endpoint tests through TestClient
#
# Run tests with: pytest
# =============================================================================
