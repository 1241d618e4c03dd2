# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - chat.py: Assistant chat messages, student context, chat turns
# - profile.py: User profiles and roles
# - meal.py: Meal plans (AI generated) and meal requests (funding lifecycle)
# - funding.py: Donations, checkouts, balances, admin stats
# - learning.py: Quizzes, quiz results, learning progress
# - health.py: Health records and assessments
# - notification.py: Inbox notifications
#
# These models define the "contract" between API and clients.
# =============================================================================

# -----------------------------------------------------------------------------
# Chat Models - Assistant conversation
# -----------------------------------------------------------------------------
from .chat import (
    AssistantHealthRequest,
    AssistantMealPlanRequest,
    AssistantQuizRequest,
    ChatMessage,
    ChatRequest,
    ChatResponse,
    ChatTurn,
    InteractionType,
    MessageRole,
    StudentContext,
)

# -----------------------------------------------------------------------------
# Profile Models - Users and roles
# -----------------------------------------------------------------------------
from .profile import (
    Profile,
    ProfileUpdate,
    UserRole,
)

# -----------------------------------------------------------------------------
# Meal Models - Plans and requests
# -----------------------------------------------------------------------------
from .meal import (
    Meal,
    MealPlan,
    MealPlanRequest,
    MealRequest,
    MealRequestCreate,
    MealRequestStatus,
    MealType,
    NutritionalSummary,
)

# -----------------------------------------------------------------------------
# Funding Models - Donations and balances
# -----------------------------------------------------------------------------
from .funding import (
    AdminStats,
    BalanceResponse,
    Donation,
    DonationCheckout,
    DonationCreate,
    DonationStatus,
    TopUpCreate,
)

# -----------------------------------------------------------------------------
# Learning Models - Quizzes and progress
# -----------------------------------------------------------------------------
from .learning import (
    PASSING_SCORE,
    Difficulty,
    LearningProgress,
    LessonRequest,
    QuestionRequest,
    Quiz,
    QuizHistoryEntry,
    QuizQuestion,
    QuizRequest,
    QuizResult,
    Subject,
)

# -----------------------------------------------------------------------------
# Health Models - Symptom tracking
# -----------------------------------------------------------------------------
from .health import (
    EmergencyAssessment,
    EmergencyCheck,
    HealthRecord,
    Severity,
    SymptomAssessment,
    SymptomReport,
    Urgency,
    WellnessCheckIn,
)

# -----------------------------------------------------------------------------
# Notification Models
# -----------------------------------------------------------------------------
from .notification import Notification

# -----------------------------------------------------------------------------
# __all__ - Explicit public API
# -----------------------------------------------------------------------------
__all__ = [
    # Chat
    "AssistantHealthRequest",
    "AssistantMealPlanRequest",
    "AssistantQuizRequest",
    "ChatMessage",
    "ChatRequest",
    "ChatResponse",
    "ChatTurn",
    "InteractionType",
    "MessageRole",
    "StudentContext",
    # Profile
    "Profile",
    "ProfileUpdate",
    "UserRole",
    # Meal
    "Meal",
    "MealPlan",
    "MealPlanRequest",
    "MealRequest",
    "MealRequestCreate",
    "MealRequestStatus",
    "MealType",
    "NutritionalSummary",
    # Funding
    "AdminStats",
    "BalanceResponse",
    "Donation",
    "DonationCheckout",
    "DonationCreate",
    "DonationStatus",
    "TopUpCreate",
    # Learning
    "PASSING_SCORE",
    "Difficulty",
    "LearningProgress",
    "LessonRequest",
    "QuestionRequest",
    "Quiz",
    "QuizHistoryEntry",
    "QuizQuestion",
    "QuizRequest",
    "QuizResult",
    "Subject",
    # Health
    "EmergencyAssessment",
    "EmergencyCheck",
    "HealthRecord",
    "Severity",
    "SymptomAssessment",
    "SymptomReport",
    "Urgency",
    "WellnessCheckIn",
    # Notification
    "Notification",
]
