# =============================================================================
# agents/ - Student Assistant
# =============================================================================
# This package contains everything that talks to the generative-text model:
# - assistant.py: AssistantClient (context prompt, timeout, fallback policy,
#   chat history)
# - guardrails.py: Output blocklist and keyword-picked fallback replies
# - structured_output.py: JSON extraction/validation for structured replies
#
# Prompts:
# - prompts/assistant_system.py: Context prompt and assistant templates
# - prompts/service_prompts.py: Meal, learning and health templates
# =============================================================================

from agents.assistant import AssistantClient
from agents.guardrails import (
    UnsafeResponseError,
    contains_blocked_content,
    get_fallback_response,
    is_fallback_response,
)
from agents.structured_output import (
    extract_json_object,
    parse_json_reply,
)

__all__ = [
    # Assistant
    "AssistantClient",
    # Guardrails
    "UnsafeResponseError",
    "contains_blocked_content",
    "get_fallback_response",
    "is_fallback_response",
    # Structured output
    "extract_json_object",
    "parse_json_reply",
]
