# =============================================================================
# tests/test_guardrails.py - Output Filter and Fallback Tests
# =============================================================================

import pytest

from agents.guardrails import (
    ALL_FALLBACKS,
    GENERAL_FALLBACK,
    HEALTH_FALLBACK,
    MEAL_FALLBACK,
    STUDY_FALLBACK,
    UnsafeResponseError,
    classify_fallback_bucket,
    contains_blocked_content,
    get_fallback_response,
    is_fallback_response,
    validate_response,
)


class TestValidateResponse:
    """Tests for the output filter."""

    def test_returns_safe_text_unchanged(self):
        assert validate_response("Fractions are parts of a whole.") == "Fractions are parts of a whole."

    @pytest.mark.parametrize("text", ["", "   ", "\n\t", None])
    def test_rejects_empty_text(self, text):
        with pytest.raises(UnsafeResponseError) as exc_info:
            validate_response(text)
        assert exc_info.value.reason == "Empty response from AI service"

    def test_rejects_blocked_terms_case_insensitively(self):
        with pytest.raises(UnsafeResponseError) as exc_info:
            validate_response("That would be HARMFUL to try.")
        assert exc_info.value.reason == "Response contains inappropriate content"

    def test_blocked_terms_match_substrings(self):
        assert contains_blocked_content("offensively long")
        assert not contains_blocked_content("a kind reply")


class TestFallbackBuckets:
    """Tests for keyword bucketing of fallback replies."""

    @pytest.mark.parametrize("message,bucket", [
        ("I have a headache", "health"),
        ("I feel sick", "health"),
        ("Help me study for my exam", "study"),
        ("What should I eat for lunch?", "meal"),
        ("Tell me a joke", "general"),
        ("", "general"),
        (None, "general"),
    ])
    def test_classification(self, message, bucket):
        assert classify_fallback_bucket(message) == bucket

    def test_health_wins_over_other_buckets(self):
        """Buckets are checked in order, so health beats study and meal."""
        assert classify_fallback_bucket("my exam stress gives me a headache after every meal") == "health"

    def test_study_wins_over_meal(self):
        assert classify_fallback_bucket("quiz me on food chains") == "study"

    def test_fallback_texts_match_buckets(self):
        assert get_fallback_response("fever since monday") == HEALTH_FALLBACK
        assert get_fallback_response("math homework") == STUDY_FALLBACK
        assert get_fallback_response("cheap food ideas") == MEAL_FALLBACK
        assert get_fallback_response("hello") == GENERAL_FALLBACK

    def test_health_fallback_points_to_emergency_services(self):
        assert "emergency services" in get_fallback_response("I am in pain")

    def test_each_fallback_carries_its_directive(self):
        assert "teacher" in STUDY_FALLBACK
        assert "food bank" in MEAL_FALLBACK
        assert "medical professional" in GENERAL_FALLBACK

    def test_is_fallback_response(self):
        for text in ALL_FALLBACKS:
            assert is_fallback_response(text)
        assert not is_fallback_response("A real answer")
        assert not is_fallback_response(None)
