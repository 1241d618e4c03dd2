# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - status.py: Liveness and readiness checks for the API itself
# - assistant.py: Chat with the student assistant, admin review
# - meals.py: Meal plans, meal ideas and meal requests
# - learning.py: Quizzes, lessons and learning progress
# - wellbeing.py: Symptom assessment, emergency triage, wellness
# - funding.py: Approvals, donations, donor balance, admin stats
# - notifications.py: User inbox
# - hooks.py: Database webhooks (create-profile)
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import status
from . import assistant
from . import meals
from . import learning
from . import wellbeing
from . import funding
from . import notifications
from . import hooks

__all__ = [
    "status",
    "assistant",
    "meals",
    "learning",
    "wellbeing",
    "funding",
    "notifications",
    "hooks",
]
