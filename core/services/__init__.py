# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .auth_service import AuthService
from .chat_history_service import ChatHistoryService
from .funding_service import FundingService, MEAL_REQUEST_TRANSITIONS, can_transition
from .health_service import HealthService
from .learning_service import LearningService
from .meal_service import MealService
from .notification_service import NotificationService
from .profile_service import ProfileService

__all__ = [
    "AuthService",
    "ChatHistoryService",
    "FundingService",
    "HealthService",
    "LearningService",
    "MEAL_REQUEST_TRANSITIONS",
    "MealService",
    "NotificationService",
    "ProfileService",
    "can_transition",
]
