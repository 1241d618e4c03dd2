# =============================================================================
# core/models/meal.py - Meal Plan and Meal Request Schemas
# =============================================================================
# Two families live here:
#
# 1. Meal plans, built from the assistant's JSON output. The assistant speaks
#    camelCase (totalCalories, averageCostPerDay), so those models accept
#    both the alias and the field name.
# 2. Meal requests, the rows the funding state machine moves through
#    pending -> approved -> funded -> completed (or pending -> rejected).
# =============================================================================

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


# =============================================================================
# Enums
# =============================================================================

class MealType(str, Enum):
    """
    Canonical meal types for meal requests.

    Values match the database enum exactly (capitalised).
    """
    BREAKFAST = "Breakfast"
    LUNCH = "Lunch"
    DINNER = "Dinner"
    SNACK = "Snack"

    @classmethod
    def allowed_values(cls) -> list[str]:
        return [member.value for member in cls]


class MealRequestStatus(str, Enum):
    """
    Meal request lifecycle.

    - pending: Created by a student, waiting for an admin
    - approved: Admin approved, open for donors
    - funded: A donor's payment was confirmed
    - completed: Meal delivered (set outside this service)
    - rejected: Admin rejected (terminal)
    """
    PENDING = "pending"
    APPROVED = "approved"
    FUNDED = "funded"
    COMPLETED = "completed"
    REJECTED = "rejected"


# =============================================================================
# Meal Plan Models
# =============================================================================

class Meal(BaseModel):
    """One meal inside a generated plan."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    type: str = Field(..., description="breakfast, lunch, dinner or snack")
    name: str
    ingredients: list[str] = Field(default_factory=list)
    cost: float = 0
    calories: float = 0
    protein: float = 0
    carbs: float = 0
    fat: float = 0
    instructions: str = ""
    day: int = 1

    @field_validator("type", mode="before")
    @classmethod
    def lowercase_type(cls, v: Any) -> Any:
        return v.lower() if isinstance(v, str) else v


class NutritionalSummary(BaseModel):
    """Plan-wide nutrition and cost totals, as reported by the assistant."""

    model_config = ConfigDict(populate_by_name=True)

    total_calories: float = Field(default=0, alias="totalCalories")
    total_protein: float = Field(default=0, alias="totalProtein")
    total_carbs: float = Field(default=0, alias="totalCarbs")
    total_fat: float = Field(default=0, alias="totalFat")
    average_cost_per_day: float = Field(..., alias="averageCostPerDay")
    budget_utilization: float = Field(default=0, alias="budgetUtilization")


class MealPlan(BaseModel):
    """
    A budget-bounded multi-day plan.

    total_cost is derived (average_cost_per_day * duration) and is not
    checked against the budget.
    """

    id: str
    student_id: str
    budget: float
    duration: int = Field(..., gt=0, description="Plan length in days")
    total_cost: float
    meals: list[Meal] = Field(default_factory=list)
    nutritional_summary: NutritionalSummary
    created_at: datetime
    expires_at: datetime


class MealPlanRequest(BaseModel):
    """Request body for generating a meal plan."""

    budget: float = Field(..., gt=0)
    duration: int = Field(default=7, gt=0, le=31)
    preferences: str = ""


# =============================================================================
# Meal Request Models
# =============================================================================

class MealRequest(BaseModel):
    """A row from the meal_requests table, optionally joined with its student."""

    id: str
    student_id: str
    title: str
    description: str | None = None
    amount: float = Field(..., gt=0)
    meal_type: MealType
    requested_for: datetime | None = None
    status: MealRequestStatus = MealRequestStatus.PENDING
    approved_by: str | None = None
    approved_at: datetime | None = None
    funded_by: str | None = None
    funded_at: datetime | None = None
    created_at: datetime | None = None
    student: dict[str, Any] | None = None


class MealRequestCreate(BaseModel):
    """Request body for creating a meal request."""

    amount: float
    meal_type: str = Field(..., description="Case-insensitive; normalised to e.g. 'Lunch'")
    description: str = ""
