# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# These are injected into route handlers using Depends().
#
# Services are built per request and bound to the caller: student-scoped
# services get the caller's ID, and the assistant gets a StudentContext
# built from the caller's profile.
# =============================================================================

from typing import Annotated

from fastapi import Depends

from agents.assistant import AssistantClient
from app.auth.dependencies import get_current_profile, get_profile_service
from app.auth.models import CurrentUser
from core.models.chat import StudentContext
from core.services.chat_history_service import ChatHistoryService
from core.services.funding_service import FundingService
from core.services.health_service import HealthService
from core.services.learning_service import LearningService
from core.services.meal_service import MealService
from core.services.notification_service import NotificationService
from core.services.profile_service import ProfileService
from lib.payments import PaymentGateway
from lib.supabase_client import SupabaseClient


def get_supabase_client() -> SupabaseClient:
    """
    Get Supabase client instance.

    Wraps the shared service-role client.
    """
    return SupabaseClient.default()


# Type alias for dependency injection
SupabaseDep = Annotated[SupabaseClient, Depends(get_supabase_client)]
CurrentUserDep = Annotated[CurrentUser, Depends(get_current_profile)]


def build_student_context(current: CurrentUser) -> StudentContext:
    """Prompt context for the caller, taken from their profile."""
    profile = current.profile
    return StudentContext(
        student_id=current.id,
        full_name=profile.full_name or profile.email or "Student",
        grade=profile.grade,
        school=profile.school,
    )


def get_assistant(current: CurrentUserDep) -> AssistantClient:
    assistant = AssistantClient()
    assistant.set_student_context(build_student_context(current))
    return assistant


AssistantDep = Annotated[AssistantClient, Depends(get_assistant)]


def get_meal_service(db: SupabaseDep, assistant: AssistantDep, current: CurrentUserDep) -> MealService:
    return MealService(db, assistant, student_id=current.id, current_user_id=current.id)


def get_learning_service(db: SupabaseDep, assistant: AssistantDep, current: CurrentUserDep) -> LearningService:
    return LearningService(db, assistant, student_id=current.id)


def get_health_service(db: SupabaseDep, assistant: AssistantDep, current: CurrentUserDep) -> HealthService:
    return HealthService(db, assistant, student_id=current.id)


def get_notification_service(db: SupabaseDep) -> NotificationService:
    return NotificationService(db)


def get_payment_gateway() -> PaymentGateway:
    return PaymentGateway()


def get_funding_service(
    db: SupabaseDep,
    payments: Annotated[PaymentGateway, Depends(get_payment_gateway)],
    notifications: Annotated[NotificationService, Depends(get_notification_service)],
) -> FundingService:
    return FundingService(db, payments=payments, notifications=notifications)


def get_chat_history_service(db: SupabaseDep) -> ChatHistoryService:
    return ChatHistoryService(db)


MealServiceDep = Annotated[MealService, Depends(get_meal_service)]
LearningServiceDep = Annotated[LearningService, Depends(get_learning_service)]
HealthServiceDep = Annotated[HealthService, Depends(get_health_service)]
FundingServiceDep = Annotated[FundingService, Depends(get_funding_service)]
NotificationServiceDep = Annotated[NotificationService, Depends(get_notification_service)]
ChatHistoryServiceDep = Annotated[ChatHistoryService, Depends(get_chat_history_service)]
ProfileServiceDep = Annotated[ProfileService, Depends(get_profile_service)]
