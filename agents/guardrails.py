# =============================================================================
# agents/guardrails.py - Response Guardrails and Fallbacks
# =============================================================================
# Two safety nets around the assistant:
#
# 1. Output filtering: a reply that is empty or contains a blocklisted term
#    is rejected before it reaches the student.
# 2. Fallback replies: when the assistant can't answer (timeout, API error,
#    rejected output), the student gets a fixed, safety-oriented message
#    picked by keyword-matching their ORIGINAL message.
#
# Buckets are checked in order: health -> study -> meal -> general.
# Every fallback carries a directive appropriate to its bucket (health
# replies always point at emergency services).
# =============================================================================

import logging

logger = logging.getLogger(__name__)


# =============================================================================
# Output Filtering
# =============================================================================

BLOCKED_TERMS = ["inappropriate", "offensive", "harmful"]


class UnsafeResponseError(Exception):
    """Raised when an assistant reply fails the output filter."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


def contains_blocked_content(text: str) -> bool:
    """Case-insensitive substring check against BLOCKED_TERMS."""
    lower_text = text.lower()
    return any(term in lower_text for term in BLOCKED_TERMS)


def validate_response(text: str | None) -> str:
    """
    Return the reply unchanged if it is safe to show.

    Raises:
        UnsafeResponseError: If the reply is empty/whitespace or flagged
    """
    if not text or not text.strip():
        raise UnsafeResponseError("Empty response from AI service")

    if contains_blocked_content(text):
        raise UnsafeResponseError("Response contains inappropriate content")

    return text


# =============================================================================
# Fallback Replies
# =============================================================================

HEALTH_KEYWORDS = ["health", "sick", "pain", "headache", "fever"]
STUDY_KEYWORDS = ["study", "learn", "quiz", "math", "science", "homework", "exam", "test"]
MEAL_KEYWORDS = ["meal", "food", "eat", "budget", "hungry", "nutrition"]

HEALTH_FALLBACK = (
    "I'm experiencing technical difficulties right now. For health concerns, "
    "please consult a healthcare professional or contact your school's health "
    "services immediately. If this is an emergency, call emergency services "
    "(911 or local emergency number) right away."
)

STUDY_FALLBACK = (
    "I'm having trouble connecting right now. Please try again in a moment, "
    "or you can ask your teacher for help with your studies. You can also use "
    "online learning resources or study groups for additional support."
)

MEAL_FALLBACK = (
    "I'm temporarily unavailable for meal planning. For immediate needs, "
    "consider balanced meals with proteins, vegetables, and whole grains. "
    "Check with your school's cafeteria or local food bank for current "
    "offerings and support."
)

GENERAL_FALLBACK = (
    "I'm experiencing some technical difficulties and can't respond right now. "
    "Please try again in a few moments. If you need immediate help with health "
    "concerns, contact a medical professional. For academic help, reach out to "
    "your teacher or school administration."
)

# Order matters: the first bucket with a matching keyword wins
FALLBACK_BUCKETS: list[tuple[str, list[str], str]] = [
    ("health", HEALTH_KEYWORDS, HEALTH_FALLBACK),
    ("study", STUDY_KEYWORDS, STUDY_FALLBACK),
    ("meal", MEAL_KEYWORDS, MEAL_FALLBACK),
]

ALL_FALLBACKS = [HEALTH_FALLBACK, STUDY_FALLBACK, MEAL_FALLBACK, GENERAL_FALLBACK]


def classify_fallback_bucket(message: str | None) -> str:
    """
    Pick the fallback bucket for a user message.

    Returns:
        "health", "study", "meal" or "general"
    """
    lower_message = (message or "").lower()

    for bucket, keywords, _ in FALLBACK_BUCKETS:
        if any(keyword in lower_message for keyword in keywords):
            return bucket

    return "general"


def get_fallback_response(message: str | None) -> str:
    """
    Canned reply for when the assistant can't answer.

    Never raises; any input (including None) maps to one of four strings.

    Usage:
        try:
            reply = call_model(prompt)
        except Exception:
            reply = get_fallback_response(user_message)
    """
    bucket = classify_fallback_bucket(message)
    logger.info(f"Using {bucket} fallback response")

    for name, _, text in FALLBACK_BUCKETS:
        if name == bucket:
            return text

    return GENERAL_FALLBACK


def is_fallback_response(text: str | None) -> bool:
    """True if `text` is one of the canned fallback replies."""
    return text in ALL_FALLBACKS
