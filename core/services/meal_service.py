# =============================================================================
# core/services/meal_service.py - Meal Planning and Meal Requests
# =============================================================================
# Handles:
# - AI-generated meal plans (structured JSON replies, stored in meal_plans)
# - Quick suggestions, nutrition tips and grocery lists (free-text replies)
# - Meal request creation: the only way a request enters the funding
#   lifecycle, always as 'pending'
# =============================================================================

import logging
import re
from datetime import timedelta
from uuid import UUID

from agents.assistant import AssistantClient
from agents.guardrails import is_fallback_response
from agents.prompts.service_prompts import (
    NUTRITION_TIPS_PROMPT,
    build_grocery_list_prompt,
    build_meal_plan_json_prompt,
    build_quick_meals_prompt,
)
from agents.structured_output import (
    extract_list_items,
    invalid_format,
    parse_json_reply,
    validate_items,
    validate_model,
)
from app.config import settings
from app.exceptions import InvalidAmountError, InvalidMealTypeError, NotAuthenticatedError
from core.models.meal import (
    Meal,
    MealPlan,
    MealRequest,
    MealRequestStatus,
    MealType,
    NutritionalSummary,
)
from core.services.student_scope import StudentScopedService
from lib.supabase_client import SupabaseClient
from lib.utils import generate_local_id, parse_timestamp, utc_now

logger = logging.getLogger(__name__)

DEFAULT_NUTRITION_TIPS = [
    "Include a variety of colorful vegetables in your meals",
    "Choose whole grains over refined grains when possible",
    "Include protein in every meal to stay full longer",
    "Stay hydrated with water instead of sugary drinks",
    "Plan meals ahead to make healthier choices",
]

DEFAULT_GROCERY_LIST = {
    "Produce": ["Fruits and vegetables"],
    "Proteins": ["Meat, fish, eggs, beans"],
    "Dairy": ["Milk, cheese, yogurt"],
    "Grains": ["Bread, rice, pasta"],
    "Pantry": ["Oil, spices, canned goods"],
}

_BULLET = re.compile(r"^(\d+\.|[-•*])\s*")


def normalize_meal_type(meal_type: str) -> MealType:
    """
    Capitalise a meal type ("lunch", "LUNCH" -> MealType.LUNCH).

    Raises:
        InvalidMealTypeError: If it isn't one of the four allowed values
    """
    allowed = MealType.allowed_values()
    raw = meal_type or ""
    capitalized = raw[:1].upper() + raw[1:].lower()

    if capitalized not in allowed:
        raise InvalidMealTypeError(raw, allowed)

    return MealType(capitalized)


class MealService(StudentScopedService):
    """
    Meal planning and meal requests for one student.

    Example:
        service = MealService(db, assistant, current_user_id=user.id)
        service.set_student_id(user.id)
        plan = service.generate_meal_plan(budget=50, duration=7)
        request = service.create_meal_request(12.5, "lunch", "Lunch for Monday")
    """

    def __init__(
        self,
        db: SupabaseClient,
        assistant: AssistantClient,
        student_id: str | UUID | None = None,
        current_user_id: str | UUID | None = None,
    ):
        super().__init__(db, assistant, student_id=student_id)
        self.current_user_id = str(current_user_id) if current_user_id else None

    # -------------------------------------------------------------------------
    # Meal Plans
    # -------------------------------------------------------------------------

    def generate_meal_plan(
        self,
        budget: float,
        duration: int = 7,
        preferences: str = "",
    ) -> MealPlan:
        """
        Ask the assistant for a plan, parse it, and store it.

        total_cost is average_cost_per_day * duration; the plan expires
        `duration` days after creation.

        Raises:
            StudentIdNotSetError: If no student is bound
            InvalidFormatError: If the reply has no usable JSON plan
        """
        student_id = self.student_id
        if budget <= 0:
            raise InvalidAmountError(budget, field="budget")

        reply = self.assistant.send_message(
            build_meal_plan_json_prompt(budget, duration, preferences)
        )

        data = parse_json_reply(reply, "meal plan")
        meals = validate_items(data.get("meals"), Meal, "meal plan", lambda i: f"meal_{i}")
        if "nutritionalSummary" not in data:
            raise invalid_format("meal plan")
        summary = validate_model(data["nutritionalSummary"], NutritionalSummary, "meal plan")

        created_at = utc_now()
        plan = MealPlan(
            id=generate_local_id("mealplan"),
            student_id=student_id,
            budget=budget,
            duration=duration,
            total_cost=summary.average_cost_per_day * duration,
            meals=meals,
            nutritional_summary=summary,
            created_at=created_at,
            expires_at=created_at + timedelta(days=duration),
        )

        self.save_meal_plan(plan)
        logger.info(f"Generated meal plan {plan.id} for student {student_id}: {len(meals)} meals")
        return plan

    def save_meal_plan(self, plan: MealPlan) -> dict:
        """Insert a plan into meal_plans. Database errors propagate."""
        student_id = self.student_id
        summary = plan.nutritional_summary.model_dump(by_alias=True)

        return self.db.insert("meal_plans", {
            "student_id": student_id,
            "budget_amount": plan.budget,
            "duration_days": plan.duration,
            "total_estimated_cost": plan.total_cost,
            "meal_plan_data": {
                "id": plan.id,
                "meals": [meal.model_dump(mode="json") for meal in plan.meals],
                "nutritionalSummary": summary,
            },
            "nutritional_summary": summary,
            "created_at": plan.created_at.isoformat(),
            "expires_at": plan.expires_at.isoformat(),
        })

    def get_current_meal_plan(self) -> MealPlan | None:
        """Latest unexpired plan for the student, or None."""
        student_id = self.student_id

        response = (
            self.db.table("meal_plans")
            .select("*")
            .eq("student_id", student_id)
            .gt("expires_at", utc_now().isoformat())
            .order("created_at", desc=True)
            .limit(1)
            .execute()
        )

        rows = response.data or []
        if not rows:
            return None

        row = rows[0]
        plan_data = row.get("meal_plan_data") or {}
        return MealPlan(
            id=plan_data.get("id") or str(row["id"]),
            student_id=row["student_id"],
            budget=row["budget_amount"],
            duration=row["duration_days"],
            total_cost=row["total_estimated_cost"],
            meals=[Meal.model_validate(meal) for meal in plan_data.get("meals", [])],
            nutritional_summary=NutritionalSummary.model_validate(
                row.get("nutritional_summary") or plan_data.get("nutritionalSummary")
            ),
            created_at=parse_timestamp(row["created_at"]),
            expires_at=parse_timestamp(row["expires_at"]),
        )

    # -------------------------------------------------------------------------
    # Free-Text Helpers
    # -------------------------------------------------------------------------

    def get_quick_meal_suggestions(self, budget: float, meal_type: str) -> list[Meal]:
        """
        Up to three quick ideas for one meal.

        Only the meal names come from the assistant; the other fields are
        placeholders. Returns [] when the assistant is unavailable.
        """
        reply = self.assistant.send_message(build_quick_meals_prompt(budget, meal_type))
        if is_fallback_response(reply):
            logger.warning("Assistant unavailable for meal suggestions")
            return []

        lines = [line.strip() for line in reply.splitlines() if line.strip()]
        suggestions = []
        for index, line in enumerate(lines[:3]):
            if len(line) <= 10:
                continue
            name = _BULLET.sub("", line.split(":")[0]).strip("*# ").strip()
            suggestions.append(Meal(
                id=f"quick_{index}",
                type=meal_type,
                name=name or f"Meal Option {index + 1}",
                ingredients=["Basic ingredients"],
                cost=5.00,
                calories=400,
                protein=15,
                carbs=50,
                fat=10,
                instructions="Simple preparation instructions",
                day=1,
            ))

        return suggestions

    def get_nutritional_tips(self) -> list[str]:
        """Five budget nutrition tips; fixed tips when the assistant can't help."""
        reply = self.assistant.send_message(NUTRITION_TIPS_PROMPT)
        tips = [] if is_fallback_response(reply) else extract_list_items(reply, limit=5)
        return tips or list(DEFAULT_NUTRITION_TIPS)

    def generate_grocery_list(self, plan: MealPlan) -> dict[str, list[str]]:
        """
        Group a plan's ingredients into shopping categories.

        A line with a colon and no comma starts a category; other non-empty
        lines are items in the current category.
        """
        ingredients = [item for meal in plan.meals for item in meal.ingredients]
        reply = self.assistant.send_message(build_grocery_list_prompt(ingredients))

        categories: dict[str, list[str]] = {}
        if not is_fallback_response(reply):
            current = ""
            for line in reply.splitlines():
                if ":" in line and "," not in line:
                    current = _BULLET.sub("", line.split(":")[0].strip()).strip("*# ")
                    categories[current] = []
                elif current and line.strip():
                    categories[current].append(_BULLET.sub("", line.strip()))

        if not categories:
            logger.warning("Could not build grocery list from assistant reply; using defaults")
            return {name: list(items) for name, items in DEFAULT_GROCERY_LIST.items()}

        return categories

    # -------------------------------------------------------------------------
    # Meal Requests
    # -------------------------------------------------------------------------

    def create_meal_request(
        self,
        amount: float,
        meal_type: str,
        description: str,
    ) -> MealRequest:
        """
        Create a pending meal request owned by the authenticated user.

        Raises:
            NotAuthenticatedError: No authenticated user
            InvalidMealTypeError: meal_type isn't breakfast/lunch/dinner/snack
            InvalidAmountError: amount <= 0
        """
        if not self.current_user_id:
            raise NotAuthenticatedError("User must be authenticated to create meal requests")

        canonical_type = normalize_meal_type(meal_type)
        if amount is None or amount <= 0:
            raise InvalidAmountError(amount)

        requested_for = utc_now() + timedelta(hours=settings.MEAL_REQUEST_LEAD_HOURS)

        try:
            row = self.db.insert("meal_requests", {
                "student_id": self.current_user_id,
                "title": f"{canonical_type.value} Request",
                "description": description,
                "amount": amount,
                "meal_type": canonical_type.value,
                "requested_for": requested_for.isoformat(),
                "status": MealRequestStatus.PENDING.value,
            })
        except Exception as e:
            logger.error(f"Failed to create meal request for {self.current_user_id}: {e}")
            raise

        logger.info(f"Created meal request {row.get('id')} ({canonical_type.value}, {amount})")
        return MealRequest.model_validate(row)

    def list_meal_requests(self) -> list[MealRequest]:
        """The bound student's requests, newest first."""
        response = (
            self.db.table("meal_requests")
            .select("*")
            .eq("student_id", self.student_id)
            .order("created_at", desc=True)
            .execute()
        )
        return [MealRequest.model_validate(row) for row in response.data or []]
