# =============================================================================
# app/routers/meals.py - Meal Planning and Meal Request Endpoints
# =============================================================================
# Meal plans and the free-text meal helpers are for the calling student.
# Meal requests created here start out pending; approval and funding live
# in app/routers/funding.py.
# =============================================================================

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.auth.dependencies import require_role
from app.dependencies import MealServiceDep
from app.websocket.broadcast import publish_change
from core.models.meal import Meal, MealPlan, MealPlanRequest, MealRequest, MealRequestCreate
from core.models.profile import UserRole

logger = logging.getLogger(__name__)

router = APIRouter()

student_only = require_role(UserRole.STUDENT)


# =============================================================================
# Meal Plans
# =============================================================================

@router.post("/plans", response_model=MealPlan, status_code=status.HTTP_201_CREATED)
async def create_meal_plan(request: MealPlanRequest, meals: MealServiceDep):
    """
    Generate and store a structured meal plan.

    Raises:
        400: If the budget isn't positive
        502: If the assistant's plan can't be parsed
    """
    return meals.generate_meal_plan(request.budget, request.duration, request.preferences)


@router.get("/plans/current", response_model=MealPlan)
async def get_current_meal_plan(meals: MealServiceDep):
    """
    The most recent plan that hasn't expired.

    Raises:
        404: If there is no active plan
    """
    plan = meals.get_current_meal_plan()
    if plan is None:
        raise HTTPException(status_code=404, detail="No active meal plan")
    return plan


@router.get("/plans/current/grocery-list", response_model=dict[str, list[str]])
async def get_grocery_list(meals: MealServiceDep):
    """Ingredients of the active plan, grouped by shopping category."""
    plan = meals.get_current_meal_plan()
    if plan is None:
        raise HTTPException(status_code=404, detail="No active meal plan")
    return meals.generate_grocery_list(plan)


# =============================================================================
# Suggestions
# =============================================================================

@router.get("/suggestions", response_model=list[Meal])
async def get_meal_suggestions(
    meals: MealServiceDep,
    budget: float = Query(..., gt=0),
    meal_type: str = Query(..., description="breakfast, lunch, dinner or snack"),
):
    """Up to three quick meal ideas. Empty when the assistant is unavailable."""
    return meals.get_quick_meal_suggestions(budget, meal_type)


@router.get("/tips", response_model=list[str])
async def get_nutrition_tips(meals: MealServiceDep):
    return meals.get_nutritional_tips()


# =============================================================================
# Meal Requests
# =============================================================================

@router.post(
    "/requests",
    response_model=MealRequest,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(student_only)],
)
async def create_meal_request(request: MealRequestCreate, meals: MealServiceDep):
    """
    Ask donors to fund a meal.

    Raises:
        400: Unknown meal type or non-positive amount
    """
    created = meals.create_meal_request(request.amount, request.meal_type, request.description)
    await publish_change("meal_requests", "insert", created.id)
    return created


@router.get("/requests", response_model=list[MealRequest])
async def list_my_meal_requests(meals: MealServiceDep):
    """The caller's meal requests, newest first."""
    return meals.list_meal_requests()
