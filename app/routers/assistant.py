# =============================================================================
# app/routers/assistant.py - Student Assistant Endpoints
# =============================================================================
# Free-form chat with the assistant plus the three canned prompts (quiz,
# meal plan, health advice). Replies are plain text; when the AI backend is
# down the reply is a canned fallback, never an error.
#
# Each exchange is stored in ai_chat_history unless the caller opts out.
# Admins can review recent exchanges across all students.
# =============================================================================

from fastapi import APIRouter, Depends, Query

from agents.assistant import AssistantClient
from app.auth.dependencies import require_role
from app.auth.models import CurrentUser
from app.dependencies import AssistantDep, ChatHistoryServiceDep, CurrentUserDep
from core.models.chat import (
    AssistantHealthRequest,
    AssistantMealPlanRequest,
    AssistantQuizRequest,
    ChatRequest,
    ChatResponse,
    ChatTurn,
    InteractionType,
)
from core.models.profile import UserRole
from core.services.chat_history_service import REVIEW_LIMIT, REVIEW_WINDOW_DAYS, ChatHistoryService

router = APIRouter()


def _reply(
    assistant: AssistantClient,
    history: ChatHistoryService,
    current: CurrentUser,
    message: str,
    response: str,
    interaction_type: InteractionType,
    persist: bool = True,
) -> ChatResponse:
    if persist:
        history.record_turn(current.id, message, response, interaction_type)
    return ChatResponse(response=response, history=assistant.get_chat_history())


@router.post("/chat", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    current: CurrentUserDep,
    assistant: AssistantDep,
    history: ChatHistoryServiceDep,
):
    """
    Send a message to the assistant.

    The assistant knows the student's name, grade and school from their
    profile.
    """
    response = assistant.send_message(request.message)
    return _reply(
        assistant, history, current,
        request.message, response, InteractionType.GENERAL, persist=request.persist,
    )


@router.post("/quiz", response_model=ChatResponse)
async def quiz(
    request: AssistantQuizRequest,
    current: CurrentUserDep,
    assistant: AssistantDep,
    history: ChatHistoryServiceDep,
):
    """Five multiple-choice questions as text, pitched at the student's grade."""
    response = assistant.generate_quiz(request.subject, request.difficulty)
    message = f"Quiz: {request.subject} ({request.difficulty})"
    return _reply(assistant, history, current, message, response, InteractionType.QUIZ)


@router.post("/meal-plan", response_model=ChatResponse)
async def meal_plan(
    request: AssistantMealPlanRequest,
    current: CurrentUserDep,
    assistant: AssistantDep,
    history: ChatHistoryServiceDep,
):
    """A readable meal plan. Use /meals/plans for a structured, stored plan."""
    response = assistant.create_meal_plan(request.budget, request.duration)
    message = f"Meal plan: budget {request.budget:g} for {request.duration} days"
    return _reply(assistant, history, current, message, response, InteractionType.MEAL_PLAN)


@router.post("/health-advice", response_model=ChatResponse)
async def health_advice(
    request: AssistantHealthRequest,
    current: CurrentUserDep,
    assistant: AssistantDep,
    history: ChatHistoryServiceDep,
):
    """General health guidance. Always recommends professional care for concerns."""
    response = assistant.provide_health_advice(request.symptoms)
    message = f"Health advice: {request.symptoms}"
    return _reply(assistant, history, current, message, response, InteractionType.HEALTH)


@router.get("/history", response_model=list[ChatTurn])
async def chat_history(
    current: CurrentUserDep,
    history: ChatHistoryServiceDep,
    limit: int = Query(default=20, ge=1, le=100),
):
    """The caller's stored exchanges, most recent first."""
    return history.list_recent(current.id, limit=limit)


@router.get("/review", response_model=list[ChatTurn])
async def review_interactions(
    history: ChatHistoryServiceDep,
    current: CurrentUser = Depends(require_role(UserRole.ADMIN)),
    days: int = Query(default=REVIEW_WINDOW_DAYS, ge=1, le=90),
    limit: int = Query(default=REVIEW_LIMIT, ge=1, le=200),
):
    """
    Recent assistant exchanges across all students, with each student's
    profile attached. Admins only.

    Raises:
        403: If the caller is not an admin
    """
    return history.list_for_review(days=days, limit=limit)
