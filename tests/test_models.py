# =============================================================================
# tests/test_models.py - Pydantic Model Tests
# =============================================================================
# Unit tests for the Pydantic models to ensure:
# - Valid data is accepted and parsed correctly
# - Invalid data raises ValidationError
# - camelCase assistant output maps onto snake_case fields
# - Default values work as expected
#
# Run with: pytest tests/test_models.py -v
# =============================================================================

import pytest
from pydantic import ValidationError

from core.models import (
    ChatMessage,
    ChatRequest,
    Donation,
    DonationStatus,
    HealthRecord,
    Meal,
    MealPlanRequest,
    MealRequest,
    MealRequestStatus,
    MealType,
    MessageRole,
    NutritionalSummary,
    Profile,
    QuizQuestion,
    QuizResult,
    Severity,
    SymptomReport,
    TopUpCreate,
    UserRole,
)


# =============================================================================
# Chat Model Tests
# =============================================================================

class TestChatModels:
    """Tests for assistant chat models."""

    def test_message_gets_timestamp(self):
        message = ChatMessage(role=MessageRole.USER, content="hi")
        assert message.timestamp.tzinfo is not None

    def test_invalid_role(self):
        with pytest.raises(ValidationError):
            ChatMessage(role="system", content="hi")

    def test_chat_request_persists_by_default(self):
        assert ChatRequest(message="hello").persist is True


# =============================================================================
# Profile Model Tests
# =============================================================================

class TestProfile:
    """Tests for the Profile model."""

    def test_defaults(self):
        profile = Profile(id="u1")
        assert profile.role == UserRole.STUDENT
        assert profile.balance == 0

    def test_negative_balance_rejected(self):
        with pytest.raises(ValidationError):
            Profile(id="u1", balance=-1)

    def test_unknown_role_rejected(self):
        with pytest.raises(ValidationError):
            Profile(id="u1", role="superuser")


# =============================================================================
# Meal Model Tests
# =============================================================================

class TestMealModels:
    """Tests for meal plans and requests."""

    def test_meal_type_lowercased(self):
        meal = Meal(id="meal_0", type="Dinner", name="Stew")
        assert meal.type == "dinner"

    def test_summary_accepts_camel_case(self):
        summary = NutritionalSummary.model_validate({"averageCostPerDay": 12, "totalCalories": 2000})
        assert summary.average_cost_per_day == 12
        assert summary.total_calories == 2000

    def test_summary_accepts_field_names(self):
        assert NutritionalSummary(average_cost_per_day=9).average_cost_per_day == 9

    def test_summary_requires_average_cost(self):
        with pytest.raises(ValidationError):
            NutritionalSummary.model_validate({"totalCalories": 2000})

    @pytest.mark.parametrize("data", [
        {"budget": 0},
        {"budget": 50, "duration": 0},
        {"budget": 50, "duration": 60},
    ])
    def test_plan_request_bounds(self, data):
        with pytest.raises(ValidationError):
            MealPlanRequest(**data)

    def test_meal_type_values_match_database(self):
        assert MealType.allowed_values() == ["Breakfast", "Lunch", "Dinner", "Snack"]

    def test_meal_request_row(self):
        request = MealRequest.model_validate({
            "id": "r1",
            "student_id": "s1",
            "title": "Lunch Request",
            "amount": 12.5,
            "meal_type": "Lunch",
            "status": "approved",
            "created_at": "2025-01-01T10:00:00Z",
        })
        assert request.status == MealRequestStatus.APPROVED
        assert request.created_at.year == 2025
        assert request.student is None

    def test_meal_request_amount_must_be_positive(self):
        with pytest.raises(ValidationError):
            MealRequest(id="r1", student_id="s1", title="t", amount=0, meal_type=MealType.LUNCH)


# =============================================================================
# Funding Model Tests
# =============================================================================

class TestFundingModels:
    """Tests for donations and top-ups."""

    def test_donation_defaults_to_pending(self):
        donation = Donation(id="d1", donor_id="u1", amount=10, payment_reference="PAY_1")
        assert donation.status == DonationStatus.PENDING
        assert donation.meal_request_id is None

    def test_top_up_must_be_positive(self):
        with pytest.raises(ValidationError):
            TopUpCreate(amount=0)


# =============================================================================
# Learning and Health Model Tests
# =============================================================================

class TestLearningModels:
    """Tests for quizzes."""

    def test_question_accepts_camel_case_answer(self):
        question = QuizQuestion.model_validate(
            {"id": "q_0", "question": "?", "options": ["a", "b"], "correctAnswer": 1}
        )
        assert question.correct_answer == 1

    def test_result_score(self):
        result = QuizResult(quiz_id="q", subject="s", topic="t", total_questions=4, correct_answers=3)
        assert result.score == 75

    def test_result_needs_questions(self):
        with pytest.raises(ValidationError):
            QuizResult(quiz_id="q", subject="s", topic="t", total_questions=0, correct_answers=0)


class TestHealthModels:
    """Tests for health records."""

    def test_report_saves_by_default(self):
        assert SymptomReport(symptoms="cough").save is True

    def test_empty_symptoms_rejected(self):
        with pytest.raises(ValidationError):
            SymptomReport(symptoms="")

    def test_record_severity(self):
        record = HealthRecord(symptoms="cough", severity="severe")
        assert record.severity == Severity.SEVERE
