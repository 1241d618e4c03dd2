# =============================================================================
# agents/prompts/ - Prompt Templates
# =============================================================================
# This package contains the prompts sent to the model:
# - assistant_system.py: Context prompt wrapped around every message, plus
#   the assistant's quiz / meal plan / health advice templates
# - service_prompts.py: Templates used by the meal, learning and health
#   services (JSON-shaped and free-text)
# =============================================================================

from agents.prompts.assistant_system import (
    build_context_prompt,
    build_health_advice_prompt,
    build_meal_plan_prompt,
    build_quiz_prompt,
)

__all__ = [
    "build_context_prompt",
    "build_health_advice_prompt",
    "build_meal_plan_prompt",
    "build_quiz_prompt",
]
